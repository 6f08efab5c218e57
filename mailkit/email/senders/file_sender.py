"""
Сохранение писем в файлы каталога (по файлу на отправку).
"""
import logging
import secrets
from datetime import datetime
from pathlib import Path

from mailkit.core.cancellation import CancellationToken
from mailkit.email.ports import EmailSender
from mailkit.email.render.text_layout import format_message
from mailkit.email.types import MessageModel, SendResult

logger = logging.getLogger(__name__)


def _new_file_name() -> str:
    return f"{datetime.now():%Y-%m-%d_%H-%M-%S}_{secrets.token_hex(4)}.txt"


class FileSystemEmailSender(EmailSender):
    """
    Пишет текстовое представление письма в новый файл каталога out_dir.

    Имя файла: yyyy-MM-dd_HH-mm-ss_<случайный токен>.txt; существующие файлы не перезаписываются.
    Каталог создаётся в конструкторе.
    """

    def __init__(self, out_dir: str | Path) -> None:
        self._out_dir = Path(out_dir)
        self._out_dir.mkdir(parents=True, exist_ok=True)

    @property
    def out_dir(self) -> Path:
        return self._out_dir

    async def send_async(
        self,
        message: MessageModel,
        cancellation: CancellationToken | None = None,
    ) -> SendResult:
        text = format_message(message)
        while True:
            path = self._out_dir / _new_file_name()
            try:
                with path.open("x", encoding="utf-8") as f:
                    f.write(text)
                break
            except FileExistsError:
                continue
        logger.info(
            "Email captured to %s (to=%s subject=%s)",
            path,
            ";".join(a.email for a in message.to),
            message.subject,
        )
        return SendResult()
