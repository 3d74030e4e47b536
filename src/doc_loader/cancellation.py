"""Cancellation tokens for navigations.

A token is created by the caller and threaded through every suspension point
of a navigation. Callbacks registered on a token run exactly once: when the
token is cancelled, or immediately when registered on a token that has
already been cancelled.
"""

import asyncio
import logging
import threading
from collections.abc import Awaitable, Callable
from typing import TypeVar

from doc_loader.errors import OperationCancelledError

logger = logging.getLogger(__name__)

T = TypeVar("T")


class CancellationRegistration:
    """Handle returned by :meth:`CancellationToken.register`."""

    def __init__(self, token: "CancellationToken | None", key: int | None):
        self._token = token
        self._key = key

    def dispose(self) -> None:
        """Unsubscribe the callback. Safe to call more than once."""
        if self._token is not None and self._key is not None:
            self._token._unregister(self._key)
        self._token = None

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.dispose()


class CancellationToken:
    """Thread-safe, one-shot cancellation signal."""

    def __init__(self):
        self._lock = threading.Lock()
        self._cancelled = False
        self._callbacks: dict[int, Callable[[], None]] = {}
        self._next_key = 0

    @property
    def is_cancelled(self) -> bool:
        return self._cancelled

    def cancel(self) -> None:
        """Signal cancellation and run every registered callback once."""
        with self._lock:
            if self._cancelled:
                return
            self._cancelled = True
            callbacks = list(self._callbacks.values())
            self._callbacks.clear()

        for callback in callbacks:
            try:
                callback()
            except Exception:
                logger.exception("Cancellation callback failed")

    def register(self, callback: Callable[[], None]) -> CancellationRegistration:
        """Subscribe ``callback`` to cancellation.

        If the token is already cancelled the callback runs synchronously
        before this method returns.
        """
        with self._lock:
            if not self._cancelled:
                key = self._next_key
                self._next_key += 1
                self._callbacks[key] = callback
                return CancellationRegistration(self, key)

        callback()
        return CancellationRegistration(None, None)

    def _unregister(self, key: int) -> None:
        with self._lock:
            self._callbacks.pop(key, None)

    def raise_if_cancelled(self) -> None:
        if self._cancelled:
            raise OperationCancelledError()

    async def wait_for(self, awaitable: Awaitable[T]) -> T:
        """Await ``awaitable``, aborting it if the token is cancelled.

        Raises :class:`OperationCancelledError` when the token fires first,
        including when it had fired before the call.
        Cancellation of the calling task itself still propagates as
        :class:`asyncio.CancelledError`.
        """
        task = asyncio.ensure_future(awaitable)
        registration = self.register(cancel_soon(task))
        try:
            return await task
        except asyncio.CancelledError:
            if self._cancelled and task.cancelled():
                raise OperationCancelledError() from None
            raise
        finally:
            registration.dispose()


def cancel_soon(future: asyncio.Future) -> Callable[[], None]:
    """Build a callback that cancels ``future`` from any thread.

    On the future's own loop the cancellation is immediate; elsewhere it is
    scheduled on that loop.
    """
    loop = future.get_loop()

    def callback() -> None:
        try:
            running = asyncio.get_running_loop()
        except RuntimeError:
            running = None
        if running is loop:
            future.cancel()
        elif not loop.is_closed():
            loop.call_soon_threadsafe(future.cancel)

    return callback


async def sleep(delay: float, cancel: CancellationToken | None = None) -> None:
    """Sleep for ``delay`` seconds, honouring ``cancel``."""
    if cancel is None:
        await asyncio.sleep(delay)
        return
    await cancel.wait_for(asyncio.sleep(delay))


async def run_cancellable(
    awaitable: Awaitable[T], cancel: CancellationToken | None = None
) -> T:
    """Await ``awaitable`` under ``cancel`` when one is given."""
    if cancel is None:
        return await awaitable
    return await cancel.wait_for(awaitable)
