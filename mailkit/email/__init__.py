"""
Сборка и отправка email: EmailBuilder, каналы доставки (console / filesystem / smtp), фабрики.
"""
from mailkit.email.builder import EmailBuilder
from mailkit.email.completion import CompletionAdapter, CompletionState
from mailkit.email.errors import (
    AttachmentReadError,
    BuildError,
    CompletionError,
    InvalidAddressError,
    TemplateReadError,
)
from mailkit.email.factory import EmailFactory, EmailFactoryBuilder, get_email_factory, get_email_sender
from mailkit.email.mime_types import get_mime_type
from mailkit.email.ports import EmailSender, SendCompletedEvent, SmtpNetworkClient
from mailkit.email.render import render
from mailkit.email.types import Address, Attachment, AttachmentDisposition, MessageModel, SendResult

__all__ = [
    "EmailBuilder",
    "EmailFactory",
    "EmailFactoryBuilder",
    "get_email_factory",
    "get_email_sender",
    "EmailSender",
    "SmtpNetworkClient",
    "SendCompletedEvent",
    "CompletionAdapter",
    "CompletionState",
    "Address",
    "Attachment",
    "AttachmentDisposition",
    "MessageModel",
    "SendResult",
    "BuildError",
    "InvalidAddressError",
    "TemplateReadError",
    "AttachmentReadError",
    "CompletionError",
    "get_mime_type",
    "render",
]
