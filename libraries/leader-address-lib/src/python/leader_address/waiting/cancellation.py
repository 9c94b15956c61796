"""Cancellation token for blocking waits.

Python threads cannot be interrupted from outside, so a blocked
:meth:`WatchedValue.await_value` is cancelled cooperatively: the waiter
registers a callback that wakes its condition variable, and whoever
wants to interrupt it calls :meth:`CancellationToken.cancel`.
"""

from __future__ import annotations

import logging
import threading
from typing import Callable

logger = logging.getLogger(__name__)


class CancellationToken:
    """One-shot, thread-safe cancellation flag with wake-up callbacks."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._cancelled = False
        self._callbacks: list[Callable[[], None]] = []

    @property
    def is_cancelled(self) -> bool:
        with self._lock:
            return self._cancelled

    def cancel(self) -> None:
        """Cancel the token and run every registered callback once."""
        with self._lock:
            if self._cancelled:
                return
            self._cancelled = True
            callbacks = list(self._callbacks)
            self._callbacks.clear()
        for callback in callbacks:
            self._run(callback)

    def add_callback(self, callback: Callable[[], None]) -> None:
        """Register ``callback``; it runs immediately if already cancelled."""
        with self._lock:
            if not self._cancelled:
                self._callbacks.append(callback)
                return
        self._run(callback)

    def remove_callback(self, callback: Callable[[], None]) -> None:
        with self._lock:
            try:
                self._callbacks.remove(callback)
            except ValueError:
                pass

    @staticmethod
    def _run(callback: Callable[[], None]) -> None:
        try:
            callback()
        except Exception:
            logger.exception("Cancellation callback %r failed", callback)

    def __repr__(self) -> str:
        state = "cancelled" if self.is_cancelled else "active"
        return f"CancellationToken({state})"
