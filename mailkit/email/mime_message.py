"""
Преобразование MessageModel в email.message.EmailMessage для SMTP.
"""
from email.message import EmailMessage
from email.utils import format_datetime

from mailkit.email.types import Address, MessageModel


def _header(addresses: list[Address]) -> str:
    return ", ".join(str(a) for a in addresses)


def to_email_message(model: MessageModel) -> EmailMessage:
    """
    Собрать MIME-сообщение.

    Bcc в заголовки не попадает: эти адреса есть только в конверте (model.recipients()).
    Потоковые вложения вычитываются и закрываются здесь.
    """
    msg = EmailMessage()
    msg["From"] = str(model.from_)
    if model.to:
        msg["To"] = _header(model.to)
    if model.cc:
        msg["Cc"] = _header(model.cc)
    if model.reply_to:
        msg["Reply-To"] = _header(model.reply_to)
    msg["Subject"] = model.subject

    msg.set_content(model.plain_body or "", subtype="plain", charset="utf-8")
    if model.html_body is not None:
        msg.add_alternative(model.html_body, subtype="html", charset="utf-8")

    for attachment in model.attachments:
        maintype, _, subtype = attachment.media_type.partition("/")
        msg.add_attachment(
            attachment.read_bytes(),
            maintype=maintype,
            subtype=subtype or "octet-stream",
            filename=attachment.name,
            disposition="inline" if attachment.disposition.inline else "attachment",
        )
        part = msg.get_payload()[-1]
        disposition = attachment.disposition
        for param, value in (
            ("creation-date", disposition.creation_date),
            ("modification-date", disposition.modification_date),
            ("read-date", disposition.read_date),
        ):
            part.set_param(param, format_datetime(value), header="Content-Disposition")
    return msg
