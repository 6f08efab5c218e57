import logging
import os
import sys
from pathlib import Path


def _get_log_level(level: str | None = None) -> int:
    """Получить уровень логирования из аргумента или переменной окружения LOG_LEVEL."""
    log_level_str = (level or os.getenv("LOG_LEVEL", "INFO")).upper()

    level_mapping = {
        "DEBUG": logging.DEBUG,
        "INFO": logging.INFO,
        "WARNING": logging.WARNING,
        "ERROR": logging.ERROR,
        "CRITICAL": logging.CRITICAL,
    }

    return level_mapping.get(log_level_str, logging.INFO)


def setup_logging(level: str | None = None, log_file: str | Path | None = None) -> None:
    """
    Настройка логирования для точек входа (библиотечный код её не вызывает).

    Консоль всегда, файл: если передан log_file или задан LOG_FILE.
    """
    log_format = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    date_format = "%Y-%m-%d %H:%M:%S"

    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stdout)]

    file_path = log_file or os.getenv("LOG_FILE", "").strip()
    if file_path:
        path = Path(file_path)
        path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(path, encoding="utf-8"))

    logging.basicConfig(
        level=_get_log_level(level),
        format=log_format,
        datefmt=date_format,
        handlers=handlers,
        force=True,
    )

    # aiosmtplib пишет протокольный диалог на DEBUG
    logging.getLogger("aiosmtplib").setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    """Получить logger с указанным именем."""
    return logging.getLogger(name)
