"""
Событийный SMTP-клиент поверх aiosmtplib.

send() только запускает сессию в собственном потоке с отдельным event loop
и сразу возвращается; итог приходит обработчикам SendCompletedEvent.
"""
import asyncio
import logging
import threading
from email.message import EmailMessage
from typing import Any

import aiosmtplib

from mailkit.email.errors import CompletionError
from mailkit.email.ports import SendCompletedEvent, SendCompletedHandler

logger = logging.getLogger(__name__)

SMTP_TIMEOUT = 60.0


class AiosmtplibClient:
    """Одна SMTP-сессия на отправку; одновременно выполняется не больше одной отправки."""

    def __init__(
        self,
        hostname: str,
        port: int,
        *,
        username: str | None = None,
        password: str | None = None,
        use_tls: bool = False,
        start_tls: bool | None = None,
        client_cert: str | None = None,
        client_key: str | None = None,
        timeout: float = SMTP_TIMEOUT,
    ) -> None:
        self._hostname = hostname
        self._port = port
        self._username = username
        self._password = password
        self._use_tls = use_tls
        self._start_tls = start_tls
        self._client_cert = client_cert
        self._client_key = client_key
        self._timeout = timeout

        self._handlers: list[SendCompletedHandler] = []
        self._lock = threading.Lock()
        self._busy = False
        self._cancel_requested = False
        self._loop: asyncio.AbstractEventLoop | None = None
        self._task: asyncio.Task[None] | None = None
        self._thread: threading.Thread | None = None

    def add_send_completed(self, handler: SendCompletedHandler) -> None:
        with self._lock:
            self._handlers.append(handler)

    def remove_send_completed(self, handler: SendCompletedHandler) -> None:
        with self._lock:
            if handler in self._handlers:
                self._handlers.remove(handler)

    def send(
        self,
        message: EmailMessage,
        sender: str,
        recipients: list[str],
        user_state: Any,
    ) -> None:
        with self._lock:
            if self._busy:
                raise CompletionError("An SMTP send is already in progress on this client")
            self._busy = True
            self._cancel_requested = False

        started = threading.Event()
        self._thread = threading.Thread(
            target=asyncio.run,
            args=(self._run(message, sender, recipients, user_state, started),),
            name=f"mailkit-smtp-{self._hostname}",
            daemon=True,
        )
        self._thread.start()
        started.wait()

    def send_cancel(self) -> None:
        with self._lock:
            if not self._busy:
                return
            self._cancel_requested = True
            loop, task = self._loop, self._task
        if loop is None or task is None:
            # задача ещё не создана: _run проверит _cancel_requested
            return
        try:
            loop.call_soon_threadsafe(task.cancel)
        except RuntimeError:
            logger.debug("SMTP loop already closed, cancel request dropped")

    def close(self) -> None:
        self.send_cancel()
        thread = self._thread
        if thread is not None and thread is not threading.current_thread():
            thread.join()
        self._thread = None

    def __enter__(self) -> "AiosmtplibClient":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    async def _run(
        self,
        message: EmailMessage,
        sender: str,
        recipients: list[str],
        user_state: Any,
        started: threading.Event,
    ) -> None:
        task = asyncio.create_task(self._deliver(message, sender, recipients))
        with self._lock:
            self._loop = asyncio.get_running_loop()
            self._task = task
            if self._cancel_requested:
                task.cancel()
        started.set()

        cancelled = False
        error: BaseException | None = None
        try:
            await task
        except asyncio.CancelledError:
            cancelled = True
        except Exception as e:
            error = e
        finally:
            with self._lock:
                self._busy = False
                self._loop = None
                self._task = None

        self._raise_completed(SendCompletedEvent(user_state=user_state, cancelled=cancelled, error=error))

    async def _deliver(self, message: EmailMessage, sender: str, recipients: list[str]) -> None:
        async with aiosmtplib.SMTP(
            hostname=self._hostname,
            port=self._port,
            use_tls=self._use_tls,
            start_tls=self._start_tls,
            client_cert=self._client_cert,
            client_key=self._client_key,
            timeout=self._timeout,
        ) as smtp:
            if self._username and self._password:
                await smtp.login(self._username, self._password)
            await smtp.send_message(message, sender=sender, recipients=recipients)

    def _raise_completed(self, event: SendCompletedEvent) -> None:
        with self._lock:
            handlers = list(self._handlers)
        for handler in handlers:
            try:
                handler(event)
            except Exception:
                logger.exception("SendCompleted handler failed")
