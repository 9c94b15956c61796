"""Address wait — a cancellable handle for a background leader wait.

The blocking :meth:`LeaderAddressCache.wait_for_address` returns
``None`` both when the deadline passes and when the tracker is
stopped. :class:`AddressWait` runs the same wait on its own thread and
resolves to a :class:`WaitResult` that keeps those outcomes apart::

    wait = cache.wait_for_address_async(timeout_ms=5000)
    ...
    wait.cancel()                 # from any thread
    result = wait.result()
    if result.status == WaitStatus.FOUND:
        connect(result.address)
"""

from __future__ import annotations

import logging
import threading
from typing import Callable

from ..exceptions import LeaderAddressError, WaitCancelledError
from ..models import ServerAddress, WaitResult, WaitStatus
from .cancellation import CancellationToken

logger = logging.getLogger(__name__)


class AddressWait:
    """Handle to a leader-address wait running on a daemon thread.

    Parameters:
        wait: Blocking function performing the wait; receives the
            handle's cancellation token.
        is_stopped: Reports whether the underlying tracker was stopped,
            used to tell a stopped tracker from a timeout.
        name: Worker thread name.
    """

    def __init__(
        self,
        wait: Callable[[CancellationToken], ServerAddress | None],
        is_stopped: Callable[[], bool],
        name: str = "address-wait",
    ) -> None:
        self._wait = wait
        self._is_stopped = is_stopped
        self._token = CancellationToken()
        self._done = threading.Event()
        self._lock = threading.Lock()
        self._result: WaitResult | None = None
        self._error: BaseException | None = None
        self._callbacks: list[Callable[[AddressWait], None]] = []
        self._thread = threading.Thread(target=self._run, name=name, daemon=True)

    # ── Lifecycle ─────────────────────────────────────────────────

    def start(self) -> AddressWait:
        self._thread.start()
        return self

    def cancel(self) -> bool:
        """Request cancellation.

        Returns:
            False if the wait had already finished.
        """
        if self._done.is_set():
            return False
        self._token.cancel()
        return True

    def done(self) -> bool:
        return self._done.is_set()

    def cancelled(self) -> bool:
        """True if the wait finished because it was cancelled."""
        with self._lock:
            return self._result is not None and self._result.status == WaitStatus.CANCELLED

    # ── Results ───────────────────────────────────────────────────

    def result(self, timeout: float | None = None) -> WaitResult:
        """Block until the wait finishes and return its outcome.

        Raises:
            TimeoutError: If ``timeout`` seconds pass first.
        """
        if not self._done.wait(timeout):
            raise TimeoutError(f"Address wait still pending after {timeout}s")
        with self._lock:
            result = self._result
        if result is None:
            raise RuntimeError("Address wait finished without a result")
        return result

    def address(self, timeout: float | None = None) -> ServerAddress | None:
        """Outcome in the blocking call's form.

        Returns the address, or None on timeout or stop.

        Raises:
            WaitCancelledError: If the wait was cancelled.
            MalformedAddressError: If the published payload was malformed.
        """
        result = self.result(timeout)
        if result.status == WaitStatus.CANCELLED:
            raise self._error if self._error is not None else WaitCancelledError()
        if result.status == WaitStatus.FAILED and self._error is not None:
            raise self._error
        return result.address

    def add_done_callback(self, callback: Callable[[AddressWait], None]) -> None:
        """Run ``callback(self)`` when the wait finishes (immediately if it has)."""
        with self._lock:
            if not self._done.is_set():
                self._callbacks.append(callback)
                return
        self._invoke(callback)

    # ── Worker ────────────────────────────────────────────────────

    def _run(self) -> None:
        try:
            address = self._wait(self._token)
        except WaitCancelledError as e:
            self._error = e
            result = WaitResult(status=WaitStatus.CANCELLED)
        except LeaderAddressError as e:
            self._error = e
            result = WaitResult.failure(str(e))
        except Exception as e:
            logger.exception("Address wait failed")
            self._error = e
            result = WaitResult.failure(str(e))
        else:
            if address is not None:
                result = WaitResult.found(address)
            elif self._is_stopped():
                result = WaitResult(status=WaitStatus.STOPPED)
            else:
                result = WaitResult(status=WaitStatus.TIMED_OUT)

        with self._lock:
            self._result = result
            self._done.set()
            callbacks = list(self._callbacks)
            self._callbacks.clear()
        for callback in callbacks:
            self._invoke(callback)

    def _invoke(self, callback: Callable[[AddressWait], None]) -> None:
        try:
            callback(self)
        except Exception:
            logger.exception("Address wait callback %r failed", callback)

    def __repr__(self) -> str:
        state = self._result.status.value if self._result is not None else "pending"
        return f"AddressWait({state})"
