"""
mailkit: fluent-сборка писем и доставка через console, файлы или SMTP.
"""
from mailkit.core.cancellation import CancellationToken
from mailkit.email import (
    Address,
    EmailBuilder,
    EmailFactory,
    EmailFactoryBuilder,
    SendResult,
    get_email_factory,
)

__all__ = [
    "Address",
    "CancellationToken",
    "EmailBuilder",
    "EmailFactory",
    "EmailFactoryBuilder",
    "SendResult",
    "get_email_factory",
]
