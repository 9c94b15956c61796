"""In-process coordination service.

Holds a flat map of node paths to payloads and behaves like a single
client session against a watchable store:

* Watches are one-shot and per path. Reading through
  :meth:`watch_and_check_exists` or :meth:`get_data_and_watch` arms
  one; the next create/update/delete of that path fires it.
* Events are delivered to listeners on one dispatcher thread, in the
  order the mutations happened.
* Mutations (:meth:`create`, :meth:`set_data`, :meth:`delete`) model
  writes by *other* cluster members and keep working while this
  session is expired. Session reads raise :class:`SessionExpiredError`
  until :meth:`reconnect` opens a new session, which drops all armed
  watches.

Intended for local single-process clusters and tests.
"""

from __future__ import annotations

import logging
import queue
import threading

from ..exceptions import (
    CoordinationClosedError,
    NodeExistsError,
    NoNodeError,
    SessionExpiredError,
)
from ..models import WatchEvent, WatchEventType
from .coordination_client import CoordinationClient, CoordinationListener

logger = logging.getLogger(__name__)

# Sentinel that stops the dispatcher thread
_STOP = object()


class InMemoryCoordinationService(CoordinationClient):
    """Thread-safe in-memory :class:`CoordinationClient`.

    Parameters:
        name: Used to name the dispatcher thread.
    """

    def __init__(self, name: str = "coordination") -> None:
        self._name = name
        self._lock = threading.Lock()
        self._nodes: dict[str, bytes] = {}
        self._watches: set[str] = set()
        self._listeners: list[CoordinationListener] = []
        self._expired = False
        self._closed = False

        self._events: queue.Queue = queue.Queue()
        self._dispatcher = threading.Thread(
            target=self._dispatch_loop, name=f"{name}-event", daemon=True
        )
        self._dispatcher.start()

    # ── Listener registration ─────────────────────────────────────

    def register_listener(self, listener: CoordinationListener) -> None:
        with self._lock:
            if listener not in self._listeners:
                self._listeners.append(listener)

    def unregister_listener(self, listener: CoordinationListener) -> None:
        with self._lock:
            if listener in self._listeners:
                self._listeners.remove(listener)

    # ── Session reads ─────────────────────────────────────────────

    def watch_and_check_exists(self, path: str) -> bool:
        with self._lock:
            self._check_session(path)
            self._watches.add(path)
            return path in self._nodes

    def get_data_and_watch(self, path: str) -> bytes | None:
        with self._lock:
            self._check_session(path)
            self._watches.add(path)
            return self._nodes.get(path)

    # ── Unwatched reads ───────────────────────────────────────────

    def exists(self, path: str) -> bool:
        with self._lock:
            return path in self._nodes

    def get_data(self, path: str) -> bytes | None:
        with self._lock:
            return self._nodes.get(path)

    def has_watch(self, path: str) -> bool:
        """True if a watch is currently armed on ``path``."""
        with self._lock:
            return path in self._watches

    # ── Mutations ─────────────────────────────────────────────────

    def create(self, path: str, data: bytes = b"") -> None:
        """Create a node.

        Raises:
            NodeExistsError: If the node already exists.
        """
        with self._lock:
            self._check_open(path)
            if path in self._nodes:
                raise NodeExistsError(path)
            self._nodes[path] = bytes(data)
            self._fire_watch(path, WatchEventType.NODE_CREATED)
        logger.debug("Created %s", path)

    def set_data(self, path: str, data: bytes) -> None:
        """Replace the payload of an existing node.

        Raises:
            NoNodeError: If the node does not exist.
        """
        with self._lock:
            self._check_open(path)
            if path not in self._nodes:
                raise NoNodeError(path)
            self._nodes[path] = bytes(data)
            self._fire_watch(path, WatchEventType.NODE_DATA_CHANGED)
        logger.debug("Updated %s", path)

    def put(self, path: str, data: bytes) -> None:
        """Create the node, or update it if it already exists."""
        with self._lock:
            self._check_open(path)
            event = (
                WatchEventType.NODE_DATA_CHANGED
                if path in self._nodes
                else WatchEventType.NODE_CREATED
            )
            self._nodes[path] = bytes(data)
            self._fire_watch(path, event)

    def delete(self, path: str) -> None:
        """Delete a node.

        Raises:
            NoNodeError: If the node does not exist.
        """
        with self._lock:
            self._check_open(path)
            if path not in self._nodes:
                raise NoNodeError(path)
            del self._nodes[path]
            self._fire_watch(path, WatchEventType.NODE_DELETED)
        logger.debug("Deleted %s", path)

    # ── Session control ───────────────────────────────────────────

    def expire_session(self) -> None:
        """Expire the current session; armed watches are lost."""
        with self._lock:
            if self._expired or self._closed:
                return
            self._expired = True
            self._watches.clear()
            self._events.put(WatchEvent(type=WatchEventType.SESSION_EXPIRED))
        logger.warning("Session of %s expired", self._name)

    def reconnect(self) -> None:
        """Open a fresh session and notify listeners so they re-arm watches."""
        with self._lock:
            if self._closed:
                raise CoordinationClosedError()
            self._expired = False
            self._watches.clear()
            self._events.put(WatchEvent(type=WatchEventType.CONNECTED))
        logger.info("Session of %s re-established", self._name)

    def flush(self, timeout: float | None = 5.0) -> bool:
        """Block until every event queued so far has been delivered.

        Returns:
            False if ``timeout`` elapsed first.
        """
        if threading.current_thread() is self._dispatcher:
            return True
        barrier = threading.Event()
        self._events.put(barrier)
        return barrier.wait(timeout)

    def close(self) -> None:
        """Stop the dispatcher thread. Pending events are still delivered."""
        with self._lock:
            if self._closed:
                return
            self._closed = True
        self._events.put(_STOP)
        if threading.current_thread() is not self._dispatcher:
            self._dispatcher.join(timeout=5.0)

    def __enter__(self) -> InMemoryCoordinationService:
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:  # noqa: ANN001
        self.close()

    # ── Private ───────────────────────────────────────────────────

    def _check_open(self, path: str | None) -> None:
        if self._closed:
            raise CoordinationClosedError(path)

    def _check_session(self, path: str | None) -> None:
        self._check_open(path)
        if self._expired:
            raise SessionExpiredError(path)

    def _fire_watch(self, path: str, event_type: WatchEventType) -> None:
        """Queue an event if a watch is armed on ``path``. Caller holds the lock."""
        if path not in self._watches:
            return
        self._watches.discard(path)
        self._events.put(WatchEvent(type=event_type, path=path))

    def _dispatch_loop(self) -> None:
        while True:
            item = self._events.get()
            if item is _STOP:
                break
            if isinstance(item, threading.Event):
                item.set()
                continue
            with self._lock:
                listeners = list(self._listeners)
            for listener in listeners:
                try:
                    self._deliver(listener, item)
                except Exception:
                    logger.exception(
                        "Listener %r failed handling %s", listener, item.type.value
                    )

    @staticmethod
    def _deliver(listener: CoordinationListener, event: WatchEvent) -> None:
        if event.type == WatchEventType.NODE_CREATED:
            listener.node_created(event.path)
        elif event.type == WatchEventType.NODE_DELETED:
            listener.node_deleted(event.path)
        elif event.type == WatchEventType.NODE_DATA_CHANGED:
            listener.node_data_changed(event.path)
        elif event.type == WatchEventType.CONNECTED:
            listener.connected()
        elif event.type == WatchEventType.SESSION_EXPIRED:
            listener.session_expired()
