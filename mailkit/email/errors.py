"""
Ошибки сборки письма. Ошибки доставки сюда не входят: они возвращаются в SendResult.errors.
"""


class BuildError(ValueError):
    """Некорректные данные при сборке письма; бросается сразу в месте вызова builder'а."""


class InvalidAddressError(BuildError):
    """Адрес email не прошёл проверку."""


class TemplateReadError(BuildError):
    """Файл шаблона не найден или не читается."""


class AttachmentReadError(BuildError):
    """Файл вложения не найден или не читается."""


class CompletionError(RuntimeError):
    """Неверное использование сетевого клиента (например, вторая отправка, пока идёт первая)."""
