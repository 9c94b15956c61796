"""Data models for the leader address cache.

All models use Pydantic for validation and serialization.
"""

from __future__ import annotations

import enum
import time

from pydantic import BaseModel, ConfigDict, Field

from .exceptions import MalformedAddressError


# ── Enums ─────────────────────────────────────────────────────────


class WatchEventType(str, enum.Enum):
    """Kinds of notifications delivered by a coordination client."""

    NODE_CREATED = "node_created"
    NODE_DELETED = "node_deleted"
    NODE_DATA_CHANGED = "node_data_changed"
    CONNECTED = "connected"
    SESSION_EXPIRED = "session_expired"


class WaitStatus(str, enum.Enum):
    """How an asynchronous wait for the leader address ended."""

    FOUND = "found"
    TIMED_OUT = "timed_out"
    STOPPED = "stopped"
    CANCELLED = "cancelled"
    FAILED = "failed"


# ── Address ───────────────────────────────────────────────────────


class ServerAddress(BaseModel):
    """Network address of a cluster server, published as ``host:port``."""

    model_config = ConfigDict(frozen=True)

    host: str = Field(min_length=1)
    """Hostname or IP literal."""

    port: int = Field(ge=0, le=65535)
    """TCP port."""

    @classmethod
    def parse(cls, text: str) -> ServerAddress:
        """Parse ``host:port`` text.

        The port is taken after the *last* colon so bracketed IPv6
        literals such as ``[::1]:9100`` keep their host part intact.

        Raises:
            MalformedAddressError: If the text is not ``host:port``.
        """
        host, sep, port_text = text.rpartition(":")
        if not sep:
            raise MalformedAddressError(text, "missing ':' separator")
        if not host:
            raise MalformedAddressError(text, "empty host")
        if any(ch.isspace() for ch in host):
            raise MalformedAddressError(text, "host contains whitespace")
        if not (port_text.isascii() and port_text.isdigit()):
            raise MalformedAddressError(text, f"port {port_text!r} is not a number")
        port = int(port_text)
        if port > 65535:
            raise MalformedAddressError(text, f"port {port} out of range")
        return cls(host=host, port=port)

    @classmethod
    def from_bytes(cls, data: bytes) -> ServerAddress:
        """Decode a raw coordination-service payload."""
        try:
            text = data.decode("utf-8")
        except UnicodeDecodeError as e:
            raise MalformedAddressError(data, f"not UTF-8: {e}") from e
        try:
            return cls.parse(text)
        except MalformedAddressError as e:
            raise MalformedAddressError(data, e.reason) from e

    def to_bytes(self) -> bytes:
        """Encode as the ``host:port`` wire payload."""
        return str(self).encode("utf-8")

    def as_tuple(self) -> tuple[str, int]:
        """Return ``(host, port)`` suitable for :mod:`socket` calls."""
        return self.host, self.port

    def __str__(self) -> str:
        return f"{self.host}:{self.port}"


# ── Coordination Events ───────────────────────────────────────────


class WatchEvent(BaseModel):
    """A single notification from the coordination service."""

    type: WatchEventType
    """What happened."""

    path: str | None = None
    """Affected node path; ``None`` for session-level events."""

    timestamp: float = Field(default_factory=time.time)
    """Epoch timestamp when the event was generated."""


# ── Wait Results ──────────────────────────────────────────────────


class WaitResult(BaseModel):
    """Outcome of an asynchronous wait for the leader address.

    Attributes:
        status: How the wait ended.
        address: The leader address when ``status`` is FOUND.
        error: Error message when ``status`` is FAILED.
    """

    status: WaitStatus
    """How the wait ended."""

    address: ServerAddress | None = None
    """Leader address, set only when found."""

    error: str | None = None
    """Error message if the wait failed."""

    @property
    def is_found(self) -> bool:
        """Check if a leader address was observed."""
        return self.status == WaitStatus.FOUND

    @staticmethod
    def found(address: ServerAddress) -> WaitResult:
        """Create a result carrying a leader address."""
        return WaitResult(status=WaitStatus.FOUND, address=address)

    @staticmethod
    def failure(error: str) -> WaitResult:
        """Create a failed result."""
        return WaitResult(status=WaitStatus.FAILED, error=error)
