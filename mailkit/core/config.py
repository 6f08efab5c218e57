"""
Конфигурация отправки писем из переменных окружения (.env).
"""
import os
from pathlib import Path

from dotenv import load_dotenv
from pydantic import SecretStr


def _str(key: str, default: str | None = None) -> str:
    value = os.getenv(key)
    if value is not None:
        return value.strip()
    if default is not None:
        return default
    return ""


def _int(key: str, default: int) -> int:
    raw = os.getenv(key)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw.strip())
    except ValueError:
        return default


def _bool(key: str, default: bool | None) -> bool | None:
    raw = os.getenv(key, "").strip().lower()
    if raw in ("1", "true", "yes", "on"):
        return True
    if raw in ("0", "false", "no", "off"):
        return False
    return default


def _float(key: str, default: float) -> float:
    raw = os.getenv(key)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw.strip())
    except ValueError:
        return default


class Settings:
    """Настройки отправки писем. Значения читаются из окружения при создании экземпляра."""

    def __init__(self) -> None:
        # Канал доставки: "console" | "filesystem" | "smtp"
        self.EMAIL_PROVIDER: str = _str("EMAIL_PROVIDER", "console")

        # Отправитель писем
        self.EMAIL_FROM: str = _str("EMAIL_FROM", "no-reply@localhost")
        self.EMAIL_FROM_NAME: str = _str("EMAIL_FROM_NAME", "")

        # Каталог для канала filesystem
        self.EMAIL_OUTPUT_DIR: str = _str("EMAIL_OUTPUT_DIR", "mail-out")

        # SMTP
        self.SMTP_HOST: str = _str("SMTP_HOST", "localhost")
        self.SMTP_PORT: int = _int("SMTP_PORT", 25)
        self.SMTP_USERNAME: str = _str("SMTP_USERNAME", "")
        self.SMTP_PASSWORD: SecretStr = SecretStr(_str("SMTP_PASSWORD", ""))
        self.SMTP_USE_TLS: bool = bool(_bool("SMTP_USE_TLS", False))
        # None: STARTTLS, если сервер его объявляет
        self.SMTP_STARTTLS: bool | None = _bool("SMTP_STARTTLS", None)
        self.SMTP_CLIENT_CERT: str = _str("SMTP_CLIENT_CERT", "")
        self.SMTP_CLIENT_KEY: str = _str("SMTP_CLIENT_KEY", "")
        self.SMTP_TIMEOUT_S: float = _float("SMTP_TIMEOUT_S", 60.0)

        # Логирование
        self.LOG_LEVEL: str = _str("LOG_LEVEL", "INFO")
        self.LOG_FILE: str = _str("LOG_FILE", "")


_settings: Settings | None = None


def get_settings() -> Settings:
    """Возвращает экземпляр настроек (singleton). При первом вызове подгружает .env из cwd."""
    global _settings
    if _settings is None:
        load_dotenv(Path.cwd() / ".env")
        _settings = Settings()
    return _settings


def reset_settings() -> None:
    """Сбросить singleton (после изменения окружения, в тестах)."""
    global _settings
    _settings = None
