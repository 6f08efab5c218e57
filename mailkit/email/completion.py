"""
Адаптер событийного SMTP-клиента к одной отменяемой awaitable-операции.

Завершение приходит колбэком (возможно из чужого потока или прямо внутри send()).
Результат записывается в слот по принципу "первый записавший побеждает",
запись всегда доставляется в loop ожидающего через call_soon_threadsafe,
поэтому колбэк не выполняет код ожидающей стороны и не блокируется на её loop.
"""
import asyncio
import enum
import logging
from email.message import EmailMessage

from mailkit.core.cancellation import CancellationToken
from mailkit.email.errors import CompletionError
from mailkit.email.ports import SendCompletedEvent, SmtpNetworkClient
from mailkit.email.types import SendResult

logger = logging.getLogger(__name__)

CANCELLED_BEFORE_SEND = "Message was cancelled by token before sending"
CANCELLED_BY_TRANSPORT = "Message delivery was cancelled"


def delivery_error(error: BaseException) -> str:
    return f"Message delivery failed: {type(error).__name__}: {error}"


class CompletionState(str, enum.Enum):
    PENDING = "pending"
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    CANCELLED = "cancelled"


class CompletionSlot:
    """Однократно разрешаемый слот результата, привязанный к event loop ожидающего."""

    def __init__(self, loop: asyncio.AbstractEventLoop) -> None:
        self._loop = loop
        self._future: asyncio.Future[CompletionState] = loop.create_future()
        self.state = CompletionState.PENDING
        self.error: BaseException | None = None

    def try_resolve(self, state: CompletionState, error: BaseException | None = None) -> None:
        """Потокобезопасно: переход применяется в loop; повторные переходы игнорируются."""
        try:
            self._loop.call_soon_threadsafe(self._apply, state, error)
        except RuntimeError:
            # loop ожидающего уже закрыт: операцию бросили, результат никому не нужен
            logger.debug("Completion %s arrived after the waiter's loop closed", state.value)

    def _apply(self, state: CompletionState, error: BaseException | None) -> None:
        if self._future.done():
            logger.debug("Duplicate completion %s ignored (already %s)", state.value, self.state.value)
            return
        self.state = state
        self.error = error
        self._future.set_result(state)

    async def wait(self) -> CompletionState:
        return await asyncio.shield(self._future)


class CompletionAdapter:
    """
    Одна отправка через SmtpNetworkClient как отменяемая корутина.

    Экземпляр рассчитан на один вызов run().
    """

    def __init__(self, client: SmtpNetworkClient) -> None:
        self._client = client
        self._slot: CompletionSlot | None = None

    @property
    def state(self) -> CompletionState:
        return self._slot.state if self._slot is not None else CompletionState.PENDING

    async def run(
        self,
        message: EmailMessage,
        sender: str,
        recipients: list[str],
        cancellation: CancellationToken | None = None,
    ) -> SendResult:
        """
        Отправить message и дождаться события завершения.

        Отмена, запрошенная до старта, не прерывает отправку: она попадает
        в SendResult.errors как некритичная ошибка. Отмена после старта
        пересылается в client.send_cancel(), результат ждём от клиента.
        """
        if self._slot is not None:
            raise CompletionError("CompletionAdapter.run() may be called only once")
        slot = CompletionSlot(asyncio.get_running_loop())
        self._slot = slot
        correlation = object()
        result = SendResult()

        def on_completed(event: SendCompletedEvent) -> None:
            self._client.remove_send_completed(on_completed)
            if event.user_state is not correlation:
                logger.warning("Send completion with unexpected user state %r", event.user_state)
                slot.try_resolve(
                    CompletionState.FAILED,
                    CompletionError(f"Unexpected user state {event.user_state!r}"),
                )
            elif event.cancelled:
                slot.try_resolve(CompletionState.CANCELLED)
            elif event.error is not None:
                slot.try_resolve(CompletionState.FAILED, event.error)
            else:
                slot.try_resolve(CompletionState.SUCCEEDED)

        cancelled_before_start = cancellation is not None and cancellation.is_cancelled
        if cancelled_before_start:
            result.errors.append(CANCELLED_BEFORE_SEND)

        unregister_cancel = None
        self._client.add_send_completed(on_completed)
        try:
            # Старт в рабочем потоке: синхронное исключение из send() не выполняется в нашем loop
            await asyncio.to_thread(self._client.send, message, sender, recipients, correlation)
            if cancellation is not None and not cancelled_before_start:
                unregister_cancel = cancellation.register(self._forward_cancel)
            state = await slot.wait()
        except asyncio.CancelledError:
            self._forward_cancel()
            raise
        finally:
            if unregister_cancel is not None:
                unregister_cancel()
            self._client.remove_send_completed(on_completed)

        if state is CompletionState.CANCELLED:
            result.errors.append(CANCELLED_BY_TRANSPORT)
        elif state is CompletionState.FAILED and slot.error is not None:
            result.errors.append(delivery_error(slot.error))
        return result

    def _forward_cancel(self) -> None:
        logger.info("Cancellation requested, forwarding to SMTP client")
        self._client.send_cancel()
