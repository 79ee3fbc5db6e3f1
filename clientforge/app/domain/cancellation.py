"""Cancellation token shared by a client handle and all of its clones.

States: live -> cancelled. The transition happens once and never reverses.
Observers can poll is_cancelled, block a thread on wait(), await
wait_cancelled() from any event loop, or register a callback with on_cancel().
"""
from __future__ import annotations

import asyncio
import threading
from typing import Callable

from loguru import logger

from clientforge.app.core import SERVICE_NAME


def _log(event: str, **kwargs: object) -> None:
    logger.bind(service_name=SERVICE_NAME, event=event, **kwargs).info("")


def _resolve_future(future: asyncio.Future[None]) -> None:
    if not future.done():
        future.set_result(None)


class CancellationToken:
    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._event = threading.Event()
        self._callbacks: list[Callable[[], None]] = []

    @property
    def is_cancelled(self) -> bool:
        return self._event.is_set()

    def cancel(self) -> None:
        """Request cancellation. Cancelling an already cancelled token does nothing."""
        with self._lock:
            if self._event.is_set():
                return
            self._event.set()
            callbacks, self._callbacks = self._callbacks, []

        _log("cancel_token_cancelled", callbacks=len(callbacks))
        for callback in callbacks:
            try:
                callback()
            except Exception:
                logger.exception("cancellation callback failed")

    def on_cancel(self, callback: Callable[[], None]) -> None:
        """Run callback once on cancellation; immediately if already cancelled."""
        with self._lock:
            if not self._event.is_set():
                self._callbacks.append(callback)
                return
        callback()

    def _discard(self, callback: Callable[[], None]) -> None:
        with self._lock:
            if callback in self._callbacks:
                self._callbacks.remove(callback)

    def wait(self, timeout: float | None = None) -> bool:
        """Block until cancelled or timeout elapses. Returns is_cancelled."""
        return self._event.wait(timeout)

    async def wait_cancelled(self) -> None:
        """Suspend the current task until the token is cancelled."""
        if self._event.is_set():
            return

        loop = asyncio.get_running_loop()
        future: asyncio.Future[None] = loop.create_future()

        def _wake() -> None:
            if not loop.is_closed():
                loop.call_soon_threadsafe(_resolve_future, future)

        self.on_cancel(_wake)
        try:
            await future
        finally:
            self._discard(_wake)

    def __repr__(self) -> str:
        state = "cancelled" if self.is_cancelled else "live"
        return f"<CancellationToken {state}>"
