"""
Синхронный запуск корутин из блокирующего кода.
"""
import asyncio
import threading
from collections.abc import Callable, Coroutine
from typing import Any, TypeVar

T = TypeVar("T")


def run_sync(coro_factory: Callable[[], Coroutine[Any, Any, T]]) -> T:
    """
    Выполнить корутину до завершения и вернуть результат.

    Если в текущем потоке нет работающего event loop, то asyncio.run здесь же.
    Если loop уже крутится (sync-вызов из async-кода), корутина выполняется
    на отдельном loop в рабочем потоке: ждать собственный loop изнутри него нельзя.
    """
    try:
        asyncio.get_running_loop()
    except RuntimeError:
        return asyncio.run(coro_factory())

    result: list[T] = []
    error: list[BaseException] = []

    def _worker() -> None:
        try:
            result.append(asyncio.run(coro_factory()))
        except BaseException as e:  # noqa: BLE001
            error.append(e)

    thread = threading.Thread(target=_worker, name="mailkit-run-sync", daemon=True)
    thread.start()
    thread.join()
    if error:
        raise error[0]
    return result[0]
