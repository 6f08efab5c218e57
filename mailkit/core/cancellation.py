"""
Кооперативная отмена: токен, который можно передать в send/send_async.
"""
import threading
from collections.abc import Callable


class CancellationToken:
    """
    Потокобезопасный флаг отмены с подпиской на событие.

    Отмена однократна: повторный cancel() ничего не делает.
    Колбэки вызываются вне блокировки, в потоке, вызвавшем cancel().
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._cancelled = False
        self._callbacks: list[Callable[[], None]] = []

    @property
    def is_cancelled(self) -> bool:
        return self._cancelled

    def cancel(self) -> None:
        with self._lock:
            if self._cancelled:
                return
            self._cancelled = True
            callbacks, self._callbacks = self._callbacks, []
        for callback in callbacks:
            callback()

    def register(self, callback: Callable[[], None]) -> Callable[[], None]:
        """
        Подписаться на отмену. Возвращает функцию отписки.

        Если токен уже отменён, callback вызывается сразу.
        """
        with self._lock:
            if not self._cancelled:
                self._callbacks.append(callback)
                return lambda: self._unregister(callback)
        callback()
        return lambda: None

    def _unregister(self, callback: Callable[[], None]) -> None:
        with self._lock:
            try:
                self._callbacks.remove(callback)
            except ValueError:
                pass
