from mailkit.email.senders.console_sender import ConsoleEmailSender
from mailkit.email.senders.file_sender import FileSystemEmailSender
from mailkit.email.senders.smtp_sender import SMTPEmailSender

__all__ = ["ConsoleEmailSender", "FileSystemEmailSender", "SMTPEmailSender"]
