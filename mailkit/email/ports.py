"""
Интерфейсы (ports): канал доставки письма и событийный сетевой SMTP-клиент.
"""
from abc import ABC, abstractmethod
from collections.abc import Callable
from dataclasses import dataclass
from email.message import EmailMessage
from typing import Any, Protocol

from mailkit.core.cancellation import CancellationToken
from mailkit.core.sync import run_sync
from mailkit.email.types import MessageModel, SendResult


class EmailSender(ABC):
    """Канал доставки готового письма (console, filesystem, smtp)."""

    @abstractmethod
    async def send_async(
        self,
        message: MessageModel,
        cancellation: CancellationToken | None = None,
    ) -> SendResult:
        """
        Отправить письмо.

        Args:
            message: Собранное письмо; канал его не изменяет.
            cancellation: Токен кооперативной отмены.

        Returns:
            SendResult; ошибки доставки возвращаются в errors, а не исключением.
        """
        ...

    def send(
        self,
        message: MessageModel,
        cancellation: CancellationToken | None = None,
    ) -> SendResult:
        """Блокирующая отправка: send_async, выполненный до завершения."""
        return run_sync(lambda: self.send_async(message, cancellation))


@dataclass(frozen=True)
class SendCompletedEvent:
    """Событие завершения отправки от сетевого клиента."""

    user_state: Any
    cancelled: bool = False
    error: BaseException | None = None


SendCompletedHandler = Callable[[SendCompletedEvent], None]


class SmtpNetworkClient(Protocol):
    """
    Сетевой клиент, сообщающий о завершении событием, а не возвратом из send().

    Обработчики могут вызываться из любого потока, в том числе прямо внутри send().
    """

    def add_send_completed(self, handler: SendCompletedHandler) -> None:
        ...

    def remove_send_completed(self, handler: SendCompletedHandler) -> None:
        """Снять обработчик; снятие отсутствующего обработчика не ошибка."""
        ...

    def send(
        self,
        message: EmailMessage,
        sender: str,
        recipients: list[str],
        user_state: Any,
    ) -> None:
        """Начать отправку; user_state вернётся в SendCompletedEvent."""
        ...

    def send_cancel(self) -> None:
        """Запросить отмену текущей отправки; подтверждение придёт событием cancelled."""
        ...

    def close(self) -> None:
        ...
