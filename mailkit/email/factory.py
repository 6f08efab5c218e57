"""
Фабрики: выбор канала доставки (console / filesystem / smtp) и создание EmailBuilder.
"""
import logging
from pathlib import Path

from pydantic import SecretStr

from mailkit.core.config import Settings, get_settings
from mailkit.email.builder import EmailBuilder
from mailkit.email.ports import EmailSender
from mailkit.email.senders.console_sender import ConsoleEmailSender
from mailkit.email.senders.file_sender import FileSystemEmailSender
from mailkit.email.senders.smtp_sender import SMTPEmailSender
from mailkit.email.smtp_client import SMTP_TIMEOUT
from mailkit.email.types import Address

logger = logging.getLogger(__name__)


class EmailFactory:
    """Создаёт письма с фиксированным отправителем, привязанные к одному каналу доставки."""

    def __init__(self, sender: EmailSender, from_address: Address) -> None:
        self._sender = sender
        self._from = from_address

    @property
    def sender(self) -> EmailSender:
        return self._sender

    def create(self) -> EmailBuilder:
        return EmailBuilder(self._sender, self._from)


class EmailFactoryBuilder:
    """
    Программная конфигурация канала доставки.

        factory = EmailFactoryBuilder("noreply@example.com", "Example").use_smtp("smtp.example.com", 587)
        factory.create().to("ada@example.com").subject("Hi").plain_body("...").send()
    """

    def __init__(self, from_email: str, from_name: str | None = None) -> None:
        self._from = Address.of(from_email, from_name)

    def use_console(self) -> EmailFactory:
        return EmailFactory(ConsoleEmailSender(), self._from)

    def use_filesystem(self, out_dir: str | Path) -> EmailFactory:
        return EmailFactory(FileSystemEmailSender(out_dir), self._from)

    def use_smtp(
        self,
        host: str,
        port: int,
        username: str | None = None,
        password: str | SecretStr | None = None,
        certificate: str | None = None,
        key: str | None = None,
        *,
        use_tls: bool = False,
        start_tls: bool | None = None,
        timeout: float = SMTP_TIMEOUT,
    ) -> EmailFactory:
        """
        SMTP-канал.

        username/password задаются только вместе (иначе ValueError);
        certificate/key: клиентский сертификат (PEM) для TLS.
        """
        sender = SMTPEmailSender(
            host,
            port,
            username,
            password,
            certificate,
            key,
            use_tls=use_tls,
            start_tls=start_tls,
            timeout=timeout,
        )
        return EmailFactory(sender, self._from)


def get_email_sender(settings: Settings | None = None) -> EmailSender:
    """
    Возвращает EmailSender в зависимости от EMAIL_PROVIDER.

    - "console" (по умолчанию): вывод в stdout
    - "filesystem": файлы в EMAIL_OUTPUT_DIR
    - "smtp": SMTP_HOST/SMTP_PORT, при наличии логин и клиентский сертификат

    Неизвестный провайдер: fallback на console.
    """
    if settings is None:
        settings = get_settings()
    provider = (settings.EMAIL_PROVIDER or "console").strip().lower()
    if provider == "filesystem":
        logger.info("Email provider: filesystem (%s)", settings.EMAIL_OUTPUT_DIR)
        return FileSystemEmailSender(settings.EMAIL_OUTPUT_DIR)
    if provider == "smtp":
        logger.info("Email provider: smtp (%s:%s)", settings.SMTP_HOST, settings.SMTP_PORT)
        return SMTPEmailSender(
            settings.SMTP_HOST,
            settings.SMTP_PORT,
            settings.SMTP_USERNAME or None,
            settings.SMTP_PASSWORD if settings.SMTP_USERNAME else None,
            settings.SMTP_CLIENT_CERT or None,
            settings.SMTP_CLIENT_KEY or None,
            use_tls=settings.SMTP_USE_TLS,
            start_tls=settings.SMTP_STARTTLS,
            timeout=settings.SMTP_TIMEOUT_S,
        )
    if provider != "console":
        logger.warning("Unknown EMAIL_PROVIDER %r, falling back to console", settings.EMAIL_PROVIDER)
    return ConsoleEmailSender()


def get_email_factory(settings: Settings | None = None) -> EmailFactory:
    """EmailFactory с отправителем EMAIL_FROM / EMAIL_FROM_NAME и каналом по EMAIL_PROVIDER."""
    if settings is None:
        settings = get_settings()
    from_address = Address.of(settings.EMAIL_FROM, settings.EMAIL_FROM_NAME or None)
    return EmailFactory(get_email_sender(settings), from_address)
