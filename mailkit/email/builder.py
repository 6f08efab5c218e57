"""
Fluent-сборка письма и отправка через привязанный канал доставки.
"""
import os
from collections.abc import Iterable
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, BinaryIO

from mailkit.core.cancellation import CancellationToken
from mailkit.email.errors import AttachmentReadError, BuildError, TemplateReadError
from mailkit.email.mime_types import get_mime_type, guess_mime_type
from mailkit.email.ports import EmailSender
from mailkit.email.render.simple_template import render
from mailkit.email.types import (
    Address,
    Attachment,
    AttachmentDisposition,
    MessageModel,
    SendResult,
)

AddressLike = str | Address | Iterable[Address]


def _utc(ts: float) -> datetime:
    return datetime.fromtimestamp(ts, tz=timezone.utc)


def _read_template(path: str | os.PathLike[str]) -> str:
    try:
        return Path(path).read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise TemplateReadError(f"Cannot read template {str(path)!r}: {e}") from e


def _render_template(path: str | os.PathLike[str], model: Any) -> str:
    template = _read_template(path)
    try:
        return render(template, model)
    except TypeError as e:
        raise BuildError(f"Cannot render template {str(path)!r}: {e}") from e


class EmailBuilder:
    """
    Сборка одного письма.

    Каждый метод изменяет письмо на месте и возвращает тот же builder.
    From и Subject при повторном вызове перезаписываются, To/Cc/Bcc/ReplyTo
    только дополняются (порядок сохраняется, дубликаты не убираются).
    После send()/send_async() письмо отдано каналу и больше не меняется.

    Пример:

        result = (
            EmailBuilder.create("noreply@example.com", ConsoleEmailSender())
            .to("ada@example.com", "Ada")
            .subject("Hello")
            .plain_body("Hi!")
            .send()
        )
    """

    def __init__(self, sender: EmailSender, from_address: Address) -> None:
        self._sender = sender
        self._message = MessageModel(from_=from_address)
        self._sent = False

    @classmethod
    def create(
        cls,
        from_email: str | Address,
        sender: EmailSender,
        display_name: str | None = None,
    ) -> "EmailBuilder":
        if isinstance(from_email, Address):
            return cls(sender, from_email)
        return cls(sender, Address.of(from_email, display_name))

    @property
    def message(self) -> MessageModel:
        return self._message

    def _check_open(self) -> None:
        if self._sent:
            raise BuildError("Message has already been sent")

    def _append(self, target: list[Address], address: AddressLike, display_name: str | None) -> "EmailBuilder":
        self._check_open()
        if isinstance(address, str):
            target.append(Address.of(address, display_name))
        elif isinstance(address, Address):
            target.append(address)
        else:
            items = list(address)
            for item in items:
                if not isinstance(item, Address):
                    raise BuildError(f"Expected Address, got {type(item).__name__}")
            target.extend(items)
        return self

    # Адреса

    def from_(self, address: str | Address, display_name: str | None = None) -> "EmailBuilder":
        self._check_open()
        self._message.from_ = address if isinstance(address, Address) else Address.of(address, display_name)
        return self

    def to(self, address: AddressLike, display_name: str | None = None) -> "EmailBuilder":
        return self._append(self._message.to, address, display_name)

    def cc(self, address: AddressLike, display_name: str | None = None) -> "EmailBuilder":
        return self._append(self._message.cc, address, display_name)

    def bcc(self, address: AddressLike, display_name: str | None = None) -> "EmailBuilder":
        return self._append(self._message.bcc, address, display_name)

    def reply_to(self, address: AddressLike, display_name: str | None = None) -> "EmailBuilder":
        return self._append(self._message.reply_to, address, display_name)

    # Тема и тела

    def subject(self, subject: str) -> "EmailBuilder":
        self._check_open()
        self._message.subject = subject
        return self

    def html_body(self, body: str) -> "EmailBuilder":
        """Задать HTML-тело; предыдущее HTML-тело отбрасывается."""
        self._check_open()
        self._message.html_body = body
        return self

    def html_body_template(self, path: str | os.PathLike[str], model: Any = None) -> "EmailBuilder":
        """HTML-тело из файла шаблона с подстановкой полей model ({{field}})."""
        self._check_open()
        return self.html_body(_render_template(path, model))

    def plain_body(self, body: str) -> "EmailBuilder":
        self._check_open()
        self._message.plain_body = body
        return self

    def plain_body_template(self, path: str | os.PathLike[str], model: Any = None) -> "EmailBuilder":
        """Текстовое тело из файла шаблона с подстановкой полей model ({{field}})."""
        self._check_open()
        return self.plain_body(_render_template(path, model))

    # Вложения

    def attach(
        self,
        source: str | os.PathLike[str] | BinaryIO | Attachment,
        name: str | None = None,
        media_type: str | None = None,
    ) -> "EmailBuilder":
        """
        Добавить вложение.

        - путь: файл должен существовать и читаться (иначе AttachmentReadError),
          MIME-тип без media_type определяется по расширению, даты берутся из stat();
        - открытый бинарный поток: name обязателен, поток переходит во владение письма,
          все даты равны текущему времени;
        - готовый Attachment добавляется как есть.
        """
        self._check_open()
        if isinstance(source, Attachment):
            attachment = source
        elif isinstance(source, (str, os.PathLike)):
            attachment = self._file_attachment(Path(source), name, media_type)
        else:
            if not name:
                raise BuildError("Attachment name is required for stream attachments")
            now = datetime.now(timezone.utc)
            attachment = Attachment(
                source=source,
                name=name,
                media_type=media_type or guess_mime_type(name),
                disposition=AttachmentDisposition(
                    creation_date=now,
                    modification_date=now,
                    read_date=now,
                ),
            )
        self._message.attachments.append(attachment)
        return self

    @staticmethod
    def _file_attachment(path: Path, name: str | None, media_type: str | None) -> Attachment:
        try:
            if not path.is_file():
                raise FileNotFoundError(f"No such file: {str(path)!r}")
            with path.open("rb"):
                pass
            stat = path.stat()
        except OSError as e:
            raise AttachmentReadError(f"Cannot read attachment {str(path)!r}: {e}") from e
        created = getattr(stat, "st_birthtime", stat.st_ctime)
        return Attachment(
            source=path,
            name=name or path.name,
            media_type=media_type or get_mime_type(path.suffix),
            disposition=AttachmentDisposition(
                creation_date=_utc(created),
                modification_date=_utc(stat.st_mtime),
                read_date=_utc(stat.st_atime),
            ),
        )

    # Отправка

    def send(self, cancellation: CancellationToken | None = None) -> SendResult:
        """Блокирующая отправка через канал доставки."""
        self._check_open()
        self._sent = True
        try:
            return self._sender.send(self._message, cancellation)
        finally:
            self._message.close()

    async def send_async(self, cancellation: CancellationToken | None = None) -> SendResult:
        self._check_open()
        self._sent = True
        try:
            return await self._sender.send_async(self._message, cancellation)
        finally:
            self._message.close()

    def __str__(self) -> str:
        m = self._message
        return "\n".join(
            [
                f"FROM: {m.from_}",
                f"TO: {';'.join(str(a) for a in m.to)}",
                f"CC: {';'.join(str(a) for a in m.cc)}",
                f"BCC: {';'.join(str(a) for a in m.bcc)}",
                f"REPLY_TO: {';'.join(str(a) for a in m.reply_to)}",
                f"SUBJECT: {m.subject}",
                m.plain_body or "",
                m.html_body or "",
            ]
        )
