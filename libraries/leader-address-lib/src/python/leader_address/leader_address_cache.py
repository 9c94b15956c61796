"""Leader address cache — where is the current cluster leader?

The leader publishes its ``host:port`` at a well-known node of the
coordination service (``/hbase/master`` by default). This cache wraps
a :class:`WatchedValue` tracking that node and decodes its payload on
every read; it stores nothing itself.

Three read modes are offered:

* :meth:`LeaderAddressCache.get_address` — snapshot, never blocks.
* :meth:`LeaderAddressCache.has_leader` — snapshot without decoding.
* :meth:`LeaderAddressCache.wait_for_address` — blocks until an address
  is published, the timeout elapses, or the wait is cancelled.

Blocking waits on one cache are serialized: a second waiter queues on
the cache's wait lock while the first is parked, and is released as
soon as the first returns. A ``None`` from the blocking call means "no
leader observed before the deadline"; use
:meth:`LeaderAddressCache.wait_for_address_async` to tell a timeout
from a stopped tracker.
"""

from __future__ import annotations

import logging
import threading
import time

from .config import LeaderAddressConfig
from .coordination.abortable import Abortable
from .coordination.coordination_client import CoordinationClient
from .coordination.watched_value import WatchedValue
from .exceptions import MalformedAddressError, WaitCancelledError
from .metrics import DECODE_ERRORS, WAIT_DURATION
from .models import ServerAddress, WaitStatus
from .waiting.address_wait import AddressWait
from .waiting.cancellation import CancellationToken

logger = logging.getLogger(__name__)


class LeaderAddressCache:
    """Decoded, thread-safe view of the leader address node.

    Parameters:
        tracker: Already-constructed tracker for the leader address
            node. Its lifecycle belongs to whoever built it;
            :meth:`start` and :meth:`stop` simply delegate.
        default_timeout_ms: Timeout used when callers pass none
            (0 waits forever).
        lock_poll_interval: Seconds between cancellation and deadline
            checks while queued behind another waiter.
    """

    def __init__(
        self,
        tracker: WatchedValue,
        default_timeout_ms: int = 0,
        lock_poll_interval: float = 0.05,
    ) -> None:
        if default_timeout_ms < 0:
            raise ValueError(f"default_timeout_ms must be >= 0, got {default_timeout_ms}")
        self._tracker = tracker
        self._default_timeout_ms = default_timeout_ms
        self._lock_poll_interval = lock_poll_interval
        self._wait_lock = threading.Lock()

    @classmethod
    def create(
        cls,
        client: CoordinationClient,
        abortable: Abortable,
        config: LeaderAddressConfig | None = None,
    ) -> LeaderAddressCache:
        """Build a cache together with its tracker.

        The tracker logs under this module's logger so its lines are
        attributed to leader address tracking.
        """
        config = config or LeaderAddressConfig()
        tracker = WatchedValue(
            client=client,
            path=config.leader_path,
            abortable=abortable,
            log_name=__name__,
        )
        return cls(
            tracker,
            default_timeout_ms=config.default_wait_timeout_ms,
            lock_poll_interval=config.lock_poll_interval,
        )

    # ── Properties ────────────────────────────────────────────────

    @property
    def path(self) -> str:
        return self._tracker.path

    @property
    def tracker(self) -> WatchedValue:
        return self._tracker

    # ── Lifecycle ─────────────────────────────────────────────────

    def start(self) -> None:
        self._tracker.start()

    def stop(self) -> None:
        self._tracker.stop()

    # ── Reads ─────────────────────────────────────────────────────

    def get_address(self) -> ServerAddress | None:
        """Return the current leader address, or None if there is no leader.

        Raises:
            MalformedAddressError: If the published payload is not
                ``host:port`` text.
        """
        data = self._tracker.current_value()
        return None if data is None else self._decode(data)

    def has_leader(self) -> bool:
        """True if a leader address is currently published."""
        return self._tracker.current_value() is not None

    def wait_for_address(
        self,
        timeout_ms: int | None = None,
        cancellation: CancellationToken | None = None,
    ) -> ServerAddress | None:
        """Block until a leader address is published.

        Args:
            timeout_ms: Maximum milliseconds to wait, 0 for forever.
                ``None`` uses the configured default.
            cancellation: Token that interrupts the wait.

        Returns:
            The leader address, or None if none was observed before the
            deadline (or the tracker was stopped).

        Raises:
            WaitCancelledError: If ``cancellation`` was cancelled while
                waiting.
            MalformedAddressError: If the published payload is malformed.
        """
        if timeout_ms is None:
            timeout_ms = self._default_timeout_ms
        if timeout_ms < 0:
            raise ValueError(f"timeout_ms must be >= 0, got {timeout_ms}")

        started = time.monotonic()
        deadline = started + timeout_ms / 1000.0 if timeout_ms else None
        outcome = WaitStatus.TIMED_OUT
        try:
            data = self._wait_serialized(deadline, cancellation)
            if data is None:
                if self._tracker.is_stopped:
                    outcome = WaitStatus.STOPPED
                logger.debug("No leader at %s after %dms", self.path, timeout_ms)
                return None
            outcome = WaitStatus.FAILED
            address = self._decode(data)
            outcome = WaitStatus.FOUND
            return address
        except WaitCancelledError:
            outcome = WaitStatus.CANCELLED
            logger.debug("Wait for leader at %s cancelled", self.path)
            raise
        finally:
            WAIT_DURATION.labels(path=self.path, outcome=outcome.value).observe(
                time.monotonic() - started
            )

    def wait_for_address_async(self, timeout_ms: int | None = None) -> AddressWait:
        """Run :meth:`wait_for_address` on a background thread.

        Returns:
            A started :class:`AddressWait` handle.
        """
        if timeout_ms is None:
            timeout_ms = self._default_timeout_ms
        if timeout_ms < 0:
            raise ValueError(f"timeout_ms must be >= 0, got {timeout_ms}")
        handle = AddressWait(
            wait=lambda token: self.wait_for_address(timeout_ms, token),
            is_stopped=lambda: self._tracker.is_stopped,
            name=f"leader-wait:{self.path}",
        )
        return handle.start()

    # ── Private ───────────────────────────────────────────────────

    def _wait_serialized(
        self,
        deadline: float | None,
        cancellation: CancellationToken | None,
    ) -> bytes | None:
        if not self._acquire_wait_lock(deadline, cancellation):
            # Deadline passed while queued; report whatever is there now
            return self._tracker.current_value()
        try:
            if deadline is None:
                return self._tracker.await_value(None, cancellation)
            remaining = deadline - time.monotonic()
            if remaining <= 0:
                return self._tracker.current_value()
            return self._tracker.await_value(remaining, cancellation)
        finally:
            self._wait_lock.release()

    def _acquire_wait_lock(
        self,
        deadline: float | None,
        cancellation: CancellationToken | None,
    ) -> bool:
        """Take the wait lock, giving up at ``deadline``.

        Raises:
            WaitCancelledError: If cancelled while queued.
        """
        while True:
            if cancellation is not None and cancellation.is_cancelled:
                raise WaitCancelledError(self.path)
            interval = self._lock_poll_interval
            if deadline is not None:
                remaining = deadline - time.monotonic()
                if remaining <= 0:
                    return False
                interval = min(interval, remaining)
            if self._wait_lock.acquire(timeout=interval):
                return True

    def _decode(self, data: bytes) -> ServerAddress:
        try:
            return ServerAddress.from_bytes(data)
        except MalformedAddressError:
            DECODE_ERRORS.labels(path=self.path).inc()
            logger.warning("Malformed leader address at %s: %r", self.path, data)
            raise

    def __repr__(self) -> str:
        return f"LeaderAddressCache(path={self.path!r})"
