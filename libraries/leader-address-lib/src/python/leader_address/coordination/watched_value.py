"""Watched value — last known payload of one coordination-service node.

:class:`WatchedValue` keeps a live watch on a single path and mirrors
the node's payload into a slot guarded by a condition variable. Watch
callbacks arrive on the coordination client's dispatcher thread; reads
come from arbitrary caller threads.

Every read of the node goes through the client while the condition
lock is held, and every read re-arms the watch. Because a watch fires
on the first change after it was armed, the last payload written to
the slot is never older than the last event delivered, so no update
is lost.

Callers that need the value decoded (for example as a server address)
wrap a :class:`WatchedValue` rather than subclass it.
"""

from __future__ import annotations

import logging
import threading
import time

from ..exceptions import CoordinationError, WaitCancelledError
from ..metrics import ABORTS, VALUE_CHANGES, VALUE_PRESENT
from ..waiting.cancellation import CancellationToken
from .abortable import Abortable
from .coordination_client import CoordinationClient, CoordinationListener

logger = logging.getLogger(__name__)


class WatchedValue(CoordinationListener):
    """Thread-safe, watch-driven slot for one node's payload.

    Parameters:
        client: Coordination session used to read and watch the node.
        path: Node path to track. Fixed for the lifetime of the tracker.
        abortable: Receives unrecoverable coordination failures.
        log_name: Logger name to attribute log lines to. Owners pass
            their own name so tracker logs identify their purpose.
    """

    def __init__(
        self,
        client: CoordinationClient,
        path: str,
        abortable: Abortable,
        log_name: str | None = None,
    ) -> None:
        self._client = client
        self._path = path
        self._abortable = abortable
        self._log = logging.getLogger(log_name) if log_name else logger

        self._cond = threading.Condition()
        self._data: bytes | None = None
        self._started = False
        self._stopped = False

    # ── Properties ────────────────────────────────────────────────

    @property
    def path(self) -> str:
        return self._path

    @property
    def log_name(self) -> str:
        return self._log.name

    @property
    def is_stopped(self) -> bool:
        with self._cond:
            return self._stopped

    # ── Lifecycle ─────────────────────────────────────────────────

    def start(self) -> None:
        """Register for events and load the node's current payload."""
        with self._cond:
            if self._started and not self._stopped:
                return
            self._started = True
            self._stopped = False
        self._client.register_listener(self)
        with self._cond:
            try:
                if self._client.watch_and_check_exists(self._path):
                    self._set_data(self._client.get_data_and_watch(self._path))
                else:
                    self._set_data(None)
            except CoordinationError as e:
                self._abort(f"Failed to start watching {self._path}", e)
                return
        self._log.info("Started tracking %s", self._path)

    def stop(self) -> None:
        """Stop tracking and release every blocked waiter."""
        with self._cond:
            if self._stopped:
                return
            self._stopped = True
            self._cond.notify_all()
        self._client.unregister_listener(self)
        self._log.info("Stopped tracking %s", self._path)

    # ── Reads ─────────────────────────────────────────────────────

    def current_value(self) -> bytes | None:
        """Return the last observed payload, or None if the node is absent."""
        with self._cond:
            return self._data

    def await_value(
        self,
        timeout: float | None = None,
        cancellation: CancellationToken | None = None,
    ) -> bytes | None:
        """Block until the node has a payload.

        Args:
            timeout: Maximum seconds to wait. ``None`` or ``0`` waits
                until a value appears or the tracker is stopped.
            cancellation: Token that interrupts the wait when cancelled.

        Returns:
            The payload, or None if the timeout elapsed or the tracker
            was stopped first.

        Raises:
            WaitCancelledError: If ``cancellation`` was cancelled while
                no value was available.
        """
        if timeout is not None and timeout < 0:
            raise ValueError(f"timeout must be >= 0, got {timeout}")
        deadline = time.monotonic() + timeout if timeout else None

        wake = self._wake_waiters
        if cancellation is not None:
            cancellation.add_callback(wake)
        try:
            with self._cond:
                while self._data is None and not self._stopped:
                    if cancellation is not None and cancellation.is_cancelled:
                        raise WaitCancelledError(self._path)
                    if deadline is None:
                        self._cond.wait()
                        continue
                    remaining = deadline - time.monotonic()
                    if remaining <= 0:
                        break
                    # Condition.wait rejects timeouts above TIMEOUT_MAX
                    self._cond.wait(min(remaining, threading.TIMEOUT_MAX))
                return self._data
        finally:
            if cancellation is not None:
                cancellation.remove_callback(wake)

    # ── Coordination events (dispatcher thread) ───────────────────

    def node_created(self, path: str) -> None:
        if path != self._path:
            return
        self._log.debug("Node %s created", path)
        self._refresh()

    def node_data_changed(self, path: str) -> None:
        if path != self._path:
            return
        self._log.debug("Node %s changed", path)
        self._refresh()

    def node_deleted(self, path: str) -> None:
        if path != self._path:
            return
        # The node may already be back; _refresh re-reads and re-arms either way
        self._log.debug("Node %s deleted", path)
        self._refresh()

    def connected(self) -> None:
        self._log.info("Session re-established, re-arming watch on %s", self._path)
        self._refresh()

    def session_expired(self) -> None:
        self._abort(f"Coordination session expired while tracking {self._path}", None)

    # ── Private ───────────────────────────────────────────────────

    def _refresh(self) -> None:
        with self._cond:
            if self._stopped:
                return
            try:
                self._set_data(self._client.get_data_and_watch(self._path))
            except CoordinationError as e:
                self._abort(f"Unexpected error reading {self._path}", e)

    def _set_data(self, data: bytes | None) -> None:
        """Replace the slot and wake waiters. Caller holds the condition."""
        if data != self._data:
            if data is None:
                self._log.info("Value at %s removed", self._path)
            elif self._data is None:
                self._log.info("Value at %s set", self._path)
            else:
                self._log.info("Value at %s updated", self._path)
            VALUE_CHANGES.labels(path=self._path).inc()
        self._data = data
        VALUE_PRESENT.labels(path=self._path).set(0 if data is None else 1)
        self._cond.notify_all()

    def _wake_waiters(self) -> None:
        with self._cond:
            self._cond.notify_all()

    def _abort(self, why: str, error: BaseException | None) -> None:
        ABORTS.labels(path=self._path).inc()
        self._abortable.abort(why, error)

    def __repr__(self) -> str:
        return f"WatchedValue(path={self._path!r}, log={self._log.name!r})"
