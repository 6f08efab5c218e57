"""
Отправка email через SMTP: aiosmtplib за событийным клиентом и CompletionAdapter.
"""
import asyncio
import logging
from collections.abc import Callable

from pydantic import SecretStr

from mailkit.core.cancellation import CancellationToken
from mailkit.email.completion import CompletionAdapter, delivery_error
from mailkit.email.mime_message import to_email_message
from mailkit.email.ports import EmailSender, SmtpNetworkClient
from mailkit.email.smtp_client import SMTP_TIMEOUT, AiosmtplibClient
from mailkit.email.types import MessageModel, SendResult

logger = logging.getLogger(__name__)


class SMTPEmailSender(EmailSender):
    """
    Отправка писем через SMTP-сервер.

    На каждую отправку открывается своя сессия (клиент) и закрывается после неё
    при любом исходе. Ошибки доставки возвращаются в SendResult.errors.
    """

    def __init__(
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
        client_factory: Callable[[], SmtpNetworkClient] | None = None,
    ) -> None:
        secret = password.get_secret_value() if isinstance(password, SecretStr) else (password or "")
        if bool(username) != bool(secret):
            raise ValueError("SMTP username and password must be given together")
        self._host = host
        self._port = port
        self._username = username or None
        self._password = SecretStr(secret)
        self._certificate = certificate or None
        self._key = key or None
        self._use_tls = use_tls
        self._start_tls = start_tls
        self._timeout = timeout
        self._client_factory = client_factory or self._create_client

    def _create_client(self) -> SmtpNetworkClient:
        return AiosmtplibClient(
            self._host,
            self._port,
            username=self._username,
            password=self._password.get_secret_value() or None,
            use_tls=self._use_tls,
            start_tls=self._start_tls,
            client_cert=self._certificate,
            client_key=self._key,
            timeout=self._timeout,
        )

    async def send_async(
        self,
        message: MessageModel,
        cancellation: CancellationToken | None = None,
    ) -> SendResult:
        recipients = message.recipients()
        try:
            mime = to_email_message(message)
            client = self._client_factory()
            try:
                result = await CompletionAdapter(client).run(
                    mime,
                    sender=message.from_.email,
                    recipients=recipients,
                    cancellation=cancellation,
                )
            finally:
                # close() ждёт поток сессии: не блокируем им event loop
                await asyncio.to_thread(client.close)
        except Exception as e:
            logger.exception(
                "SMTP send failed host=%s to=%s subject=%s",
                self._host,
                recipients,
                message.subject,
            )
            return SendResult(errors=[delivery_error(e)])

        if result.succeeded:
            logger.info("Email sent via SMTP host=%s to=%s subject=%s", self._host, recipients, message.subject)
        else:
            logger.warning(
                "SMTP send finished with errors host=%s to=%s subject=%s: %s",
                self._host,
                recipients,
                message.subject,
                result.errors,
            )
        return result
