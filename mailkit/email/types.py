"""
Типы письма: адрес, вложение, модель сообщения, результат отправки.
"""
from dataclasses import dataclass, field
from datetime import datetime
from email.utils import formataddr
from pathlib import Path
from typing import Any, BinaryIO

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

from mailkit.email.errors import InvalidAddressError

_FORBIDDEN_ADDRESS_CHARS = set(" \t\r\n<>")


class Address(BaseModel):
    """Адрес email с отображаемым именем. Без имени в качестве имени используется сам адрес."""

    model_config = ConfigDict(frozen=True)

    email: str
    display_name: str = ""

    @model_validator(mode="before")
    @classmethod
    def _default_display_name(cls, data: Any) -> Any:
        if isinstance(data, dict) and not data.get("display_name"):
            data = {**data, "display_name": data.get("email", "")}
        return data

    @field_validator("email")
    @classmethod
    def _check_email(cls, value: str) -> str:
        local, sep, domain = value.rpartition("@")
        if not sep or not local or not domain or _FORBIDDEN_ADDRESS_CHARS & set(value):
            raise ValueError(f"Malformed email address: {value!r}")
        return value

    @classmethod
    def of(cls, email: str, display_name: str | None = None) -> "Address":
        """Создать адрес; при ошибке проверки бросает InvalidAddressError."""
        try:
            return cls(email=(email or "").strip(), display_name=display_name or "")
        except ValidationError as e:
            raise InvalidAddressError(f"Malformed email address: {email!r}") from e

    def __str__(self) -> str:
        if self.display_name == self.email:
            return self.email
        return formataddr((self.display_name, self.email))


@dataclass
class AttachmentDisposition:
    """Метаданные Content-Disposition вложения (даты в UTC)."""

    creation_date: datetime
    modification_date: datetime
    read_date: datetime
    inline: bool = False


@dataclass
class Attachment:
    """
    Вложение: путь к файлу или уже открытый бинарный поток.

    Поток принадлежит вложению: read_bytes() вычитывает его и закрывает.
    """

    source: Path | BinaryIO
    name: str
    media_type: str
    disposition: AttachmentDisposition

    def read_bytes(self) -> bytes:
        if isinstance(self.source, Path):
            return self.source.read_bytes()
        try:
            return self.source.read()
        finally:
            self.source.close()

    def close(self) -> None:
        if not isinstance(self.source, Path):
            self.source.close()


@dataclass
class MessageModel:
    """Письмо в процессе сборки. После передачи в канал доставки не изменяется."""

    from_: Address
    to: list[Address] = field(default_factory=list)
    cc: list[Address] = field(default_factory=list)
    bcc: list[Address] = field(default_factory=list)
    reply_to: list[Address] = field(default_factory=list)
    subject: str = ""
    plain_body: str | None = None
    html_body: str | None = None
    attachments: list[Attachment] = field(default_factory=list)

    def recipients(self) -> list[str]:
        """Получатели конверта SMTP: to + cc + bcc в порядке добавления."""
        return [a.email for a in (*self.to, *self.cc, *self.bcc)]

    def close(self) -> None:
        """Закрыть потоки вложений, которыми владеет письмо."""
        for attachment in self.attachments:
            attachment.close()


class SendResult(BaseModel):
    """Результат отправки. Пустой errors означает успех."""

    errors: list[str] = Field(default_factory=list)

    @property
    def succeeded(self) -> bool:
        return not self.errors
