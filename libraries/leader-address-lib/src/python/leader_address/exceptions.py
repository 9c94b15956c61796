"""Exception hierarchy for the leader address cache."""

from __future__ import annotations


class LeaderAddressError(Exception):
    """Base exception for all leader address errors."""

    def __init__(self, message: str = "") -> None:
        self.message = message
        super().__init__(message)


# ── Decoding Errors ───────────────────────────────────────────────

class MalformedAddressError(LeaderAddressError):
    """Raised when a published payload is not valid ``host:port`` text."""

    def __init__(self, payload: bytes | str, reason: str = "") -> None:
        self.payload = payload
        self.reason = reason
        msg = f"Malformed leader address {payload!r}."
        if reason:
            msg += f" Reason: {reason}"
        super().__init__(msg)


# ── Waiting Errors ────────────────────────────────────────────────

class WaitCancelledError(LeaderAddressError):
    """Raised when a blocked wait for the leader address is cancelled."""

    def __init__(self, path: str = "") -> None:
        self.path = path
        msg = "Wait for leader address was cancelled."
        if path:
            msg = f"Wait for leader address at '{path}' was cancelled."
        super().__init__(msg)


# ── Coordination Service Errors ───────────────────────────────────

class CoordinationError(LeaderAddressError):
    """Raised when the coordination service cannot serve a request."""

    def __init__(self, path: str | None = None, reason: str = "") -> None:
        self.path = path
        msg = "Coordination service error"
        if path:
            msg += f" at '{path}'"
        msg += "."
        if reason:
            msg += f" Reason: {reason}"
        super().__init__(msg)


class SessionExpiredError(CoordinationError):
    """Raised when the coordination session has expired."""

    def __init__(self, path: str | None = None) -> None:
        super().__init__(path, reason="Session expired")


class CoordinationClosedError(CoordinationError):
    """Raised when the coordination client has been closed."""

    def __init__(self, path: str | None = None) -> None:
        super().__init__(path, reason="Client is closed")


class NodeExistsError(CoordinationError):
    """Raised when creating a node that already exists."""

    def __init__(self, path: str) -> None:
        super().__init__(path, reason="Node already exists")


class NoNodeError(CoordinationError):
    """Raised when updating or deleting a node that does not exist."""

    def __init__(self, path: str) -> None:
        super().__init__(path, reason="Node does not exist")
