"""Abort handler for unrecoverable coordination-service failures.

Components that depend on a coordination session (such as
:class:`WatchedValue`) never attempt recovery themselves. When the
session is lost beyond repair they report it to the :class:`Abortable`
supplied by their owner, which decides what the process does next.
"""

from __future__ import annotations

import abc
import logging
import threading

logger = logging.getLogger(__name__)


class Abortable(abc.ABC):
    """Interface for the owner of a coordination-dependent component."""

    @abc.abstractmethod
    def abort(self, why: str, error: BaseException | None = None) -> None:
        """Report an unrecoverable failure.

        This may be called from the coordination client's dispatcher
        thread. It **must** return promptly and must not block on
        the component that reported the failure.

        Args:
            why: Human-readable reason.
            error: The exception that caused the failure, if any.
        """
        ...

    @abc.abstractmethod
    def is_aborted(self) -> bool:
        """Return True once :meth:`abort` has been called."""
        ...


class RecordingAbortable(Abortable):
    """Abortable that logs and remembers the first failure.

    Useful for processes that poll for failure instead of reacting to
    it, and in tests.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._aborted = threading.Event()
        self._why: str | None = None
        self._error: BaseException | None = None

    @property
    def why(self) -> str | None:
        with self._lock:
            return self._why

    @property
    def error(self) -> BaseException | None:
        with self._lock:
            return self._error

    def abort(self, why: str, error: BaseException | None = None) -> None:
        with self._lock:
            if self._why is None:
                self._why = why
                self._error = error
        logger.error("Aborting: %s", why, exc_info=error)
        self._aborted.set()

    def is_aborted(self) -> bool:
        return self._aborted.is_set()

    def wait_aborted(self, timeout: float | None = None) -> bool:
        """Block until aborted or ``timeout`` seconds pass."""
        return self._aborted.wait(timeout)
