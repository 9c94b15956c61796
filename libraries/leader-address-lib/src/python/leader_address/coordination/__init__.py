"""Coordination-service integration — client interface, trackers, abort handling."""

from .abortable import Abortable, RecordingAbortable
from .coordination_client import CoordinationClient, CoordinationListener
from .in_memory_service import InMemoryCoordinationService
from .watched_value import WatchedValue

__all__ = [
    "Abortable",
    "CoordinationClient",
    "CoordinationListener",
    "InMemoryCoordinationService",
    "RecordingAbortable",
    "WatchedValue",
]
