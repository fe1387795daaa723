"""Cooperative cancellation for dispatch calls.

A :class:`CancellationToken` may be cancelled from any thread. Coroutines
sleeping on it through :meth:`CancellationToken.sleep` wake up immediately
instead of finishing their delay.
"""

from __future__ import annotations

import asyncio
import threading


def _wake(waiter: asyncio.Future[None]) -> None:
    if not waiter.done():
        waiter.set_result(None)


class CancellationToken:
    """Signal that a dispatch call should stop at its next checkpoint."""

    def __init__(self) -> None:
        self._event = threading.Event()
        self._lock = threading.Lock()
        self._waiters: list[tuple[asyncio.AbstractEventLoop, asyncio.Future[None]]] = []

    @property
    def is_cancelled(self) -> bool:
        return self._event.is_set()

    def cancel(self) -> None:
        """Request cancellation. Idempotent; safe to call from any thread."""
        with self._lock:
            if self._event.is_set():
                return
            self._event.set()
            waiters, self._waiters = self._waiters, []
        for loop, waiter in waiters:
            if loop.is_closed():
                continue
            loop.call_soon_threadsafe(_wake, waiter)

    async def sleep(self, seconds: float) -> bool:
        """Wait up to *seconds*. Returns True if cancellation cut the wait short.

        A zero wait still yields to the event loop once.
        """
        if self._event.is_set():
            return True
        if seconds <= 0:
            await asyncio.sleep(0)
            return self._event.is_set()
        loop = asyncio.get_running_loop()
        waiter: asyncio.Future[None] = loop.create_future()
        entry = (loop, waiter)
        with self._lock:
            if self._event.is_set():
                return True
            self._waiters.append(entry)
        try:
            done, _ = await asyncio.wait({waiter}, timeout=seconds)
        finally:
            with self._lock:
                if entry in self._waiters:
                    self._waiters.remove(entry)
            if not waiter.done():
                waiter.cancel()
        return bool(done) or self._event.is_set()
