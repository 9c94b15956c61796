"""Abstract coordination-service client and its listener protocol.

Consumers plug a concrete coordination service (ZooKeeper, etcd, or
the bundled :class:`InMemoryCoordinationService`) in by implementing
:class:`CoordinationClient`. Watches are one-shot: after a watch fires,
the listener re-arms it by reading the node again through one of the
``*_watch`` methods.
"""

from __future__ import annotations

import abc


class CoordinationListener:
    """Receives notifications from a :class:`CoordinationClient`.

    All callbacks are invoked on the client's dispatcher thread, one at
    a time and in the order the events happened. Every listener gets
    every event; listeners filter on ``path`` themselves. The default
    implementations do nothing.
    """

    def node_created(self, path: str) -> None:
        pass

    def node_deleted(self, path: str) -> None:
        pass

    def node_data_changed(self, path: str) -> None:
        pass

    def connected(self) -> None:
        """The session (re)connected; previously armed watches are gone."""
        pass

    def session_expired(self) -> None:
        """The session expired and cannot be recovered."""
        pass


class CoordinationClient(abc.ABC):
    """Interface to a session with a watchable hierarchical store."""

    @abc.abstractmethod
    def register_listener(self, listener: CoordinationListener) -> None:
        """Start delivering events to ``listener``."""
        ...

    @abc.abstractmethod
    def unregister_listener(self, listener: CoordinationListener) -> None:
        """Stop delivering events to ``listener``. Unknown listeners are ignored."""
        ...

    @abc.abstractmethod
    def watch_and_check_exists(self, path: str) -> bool:
        """Arm a watch on ``path`` and report whether it exists.

        The watch fires on creation if the node is absent, or on
        update/deletion if it is present.

        Raises:
            CoordinationError: If the session cannot serve the request.
        """
        ...

    @abc.abstractmethod
    def get_data_and_watch(self, path: str) -> bytes | None:
        """Read the node's payload and arm a watch on it.

        Returns ``None`` if the node does not exist, in which case an
        existence watch is armed instead so its creation is reported.

        Raises:
            CoordinationError: If the session cannot serve the request.
        """
        ...
