"""
Текстовое представление письма для каналов console и filesystem.
"""
from mailkit.email.types import Address, MessageModel


def _format_address(address: Address) -> str:
    # Обычный UTF-8 текст, без RFC 2047 кодирования имени
    if address.display_name == address.email:
        return address.email
    return f"{address.display_name} <{address.email}>"


def _join(addresses: list[Address]) -> str:
    return ";".join(_format_address(a) for a in addresses)


def format_message(message: MessageModel) -> str:
    """
    Сериализовать письмо в построчный текст:
    заголовки, пустая строка, блок plain-текста и (если есть HTML) блок альтернативного тела.
    """
    lines = [
        f"From: {_format_address(message.from_)}",
        f"To: {_join(message.to)}",
        f"CC: {_join(message.cc)}",
        f"BCC: {_join(message.bcc)}",
        f"Subject: {message.subject}",
        "",
        "----- Plain Text Body Begin -----",
        message.plain_body or "",
        "----- Plain Text Body End -----",
    ]
    if message.html_body is not None:
        lines += [
            "",
            "----- Alternate Body Begin -----",
            message.html_body,
            "----- Alternate Body End -----",
        ]
    return "\n".join(lines) + "\n"
