"""
Вывод письма в stdout (без реальной отправки).
"""
import logging
import sys
from typing import TextIO

from mailkit.core.cancellation import CancellationToken
from mailkit.email.ports import EmailSender
from mailkit.email.render.text_layout import format_message
from mailkit.email.types import MessageModel, SendResult

logger = logging.getLogger(__name__)


class ConsoleEmailSender(EmailSender):
    """Отправка «в консоль»: текстовое представление письма в stdout."""

    def __init__(self, stream: TextIO | None = None) -> None:
        self._stream = stream

    async def send_async(
        self,
        message: MessageModel,
        cancellation: CancellationToken | None = None,
    ) -> SendResult:
        # sys.stdout берём в момент вызова: его могут подменить после создания sender'а
        stream = self._stream or sys.stdout
        stream.write(format_message(message))
        stream.flush()
        logger.info(
            "[ConsoleEmail] to=%s subject=%s",
            ";".join(a.email for a in message.to),
            message.subject,
        )
        return SendResult()
