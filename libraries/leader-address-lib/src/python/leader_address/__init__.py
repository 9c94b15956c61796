"""Leader Address Library — track the cluster leader's published address.

The elected leader writes its ``host:port`` to a well-known node of a
coordination service. Every other member keeps a
:class:`LeaderAddressCache` over that node: a watch-driven, thread-safe
view that answers "who is the leader right now?" without blocking, and
"wait until there is one" with a timeout and cooperative cancellation.

Quick Start::

    from leader_address import (
        CancellationToken,
        InMemoryCoordinationService,
        LeaderAddressCache,
        RecordingAbortable,
    )

    service = InMemoryCoordinationService()
    cache = LeaderAddressCache.create(service, RecordingAbortable())
    cache.start()

    service.create("/hbase/master", b"10.0.0.5:60000")
    leader = cache.wait_for_address(timeout_ms=5000)
    print(leader.host, leader.port)

    # Interrupt a blocked wait from another thread
    token = CancellationToken()
    ...
    token.cancel()

    cache.stop()
    service.close()
"""

from .config import LeaderAddressConfig, dump_config, load_config
from .coordination.abortable import Abortable, RecordingAbortable
from .coordination.coordination_client import CoordinationClient, CoordinationListener
from .coordination.in_memory_service import InMemoryCoordinationService
from .coordination.watched_value import WatchedValue
from .exceptions import (
    CoordinationClosedError,
    CoordinationError,
    LeaderAddressError,
    MalformedAddressError,
    NodeExistsError,
    NoNodeError,
    SessionExpiredError,
    WaitCancelledError,
)
from .leader_address_cache import LeaderAddressCache
from .models import (
    ServerAddress,
    WaitResult,
    WaitStatus,
    WatchEvent,
    WatchEventType,
)
from .waiting.address_wait import AddressWait
from .waiting.cancellation import CancellationToken

__all__ = [
    # Main entry point
    "LeaderAddressCache",
    # Configuration
    "LeaderAddressConfig",
    "load_config",
    "dump_config",
    # Coordination
    "Abortable",
    "CoordinationClient",
    "CoordinationListener",
    "InMemoryCoordinationService",
    "RecordingAbortable",
    "WatchedValue",
    # Waiting
    "AddressWait",
    "CancellationToken",
    # Models
    "ServerAddress",
    "WaitResult",
    "WaitStatus",
    "WatchEvent",
    "WatchEventType",
    # Exceptions
    "CoordinationClosedError",
    "CoordinationError",
    "LeaderAddressError",
    "MalformedAddressError",
    "NodeExistsError",
    "NoNodeError",
    "SessionExpiredError",
    "WaitCancelledError",
]
