"""Tests for the in-process coordination service."""

import threading

import pytest

from leader_address.coordination import CoordinationListener, InMemoryCoordinationService
from leader_address.exceptions import (
    CoordinationClosedError,
    NodeExistsError,
    NoNodeError,
    SessionExpiredError,
)


class RecordingListener(CoordinationListener):
    def __init__(self):
        self.events = []
        self.threads = set()

    def _record(self, kind, path=None):
        self.events.append((kind, path))
        self.threads.add(threading.current_thread().name)

    def node_created(self, path):
        self._record("created", path)

    def node_deleted(self, path):
        self._record("deleted", path)

    def node_data_changed(self, path):
        self._record("changed", path)

    def connected(self):
        self._record("connected")

    def session_expired(self):
        self._record("expired")


@pytest.fixture
def service():
    svc = InMemoryCoordinationService(name="test")
    yield svc
    svc.close()


def test_create_read_update_delete(service):
    service.create("/a", b"1")
    assert service.exists("/a")
    assert service.get_data("/a") == b"1"
    service.set_data("/a", b"2")
    assert service.get_data("/a") == b"2"
    service.delete("/a")
    assert not service.exists("/a")
    assert service.get_data("/a") is None


def test_mutation_errors(service):
    service.create("/a")
    with pytest.raises(NodeExistsError):
        service.create("/a")
    with pytest.raises(NoNodeError):
        service.set_data("/missing", b"x")
    with pytest.raises(NoNodeError):
        service.delete("/missing")


def test_unwatched_changes_deliver_nothing(service):
    listener = RecordingListener()
    service.register_listener(listener)
    service.create("/a", b"1")
    service.set_data("/a", b"2")
    assert service.flush()
    assert listener.events == []


def test_watches_are_one_shot(service):
    listener = RecordingListener()
    service.register_listener(listener)

    assert service.watch_and_check_exists("/a") is False
    assert service.has_watch("/a")
    service.create("/a", b"1")
    service.set_data("/a", b"2")
    assert service.flush()
    assert listener.events == [("created", "/a")]
    assert not service.has_watch("/a")

    assert service.get_data_and_watch("/a") == b"2"
    service.set_data("/a", b"3")
    service.flush()
    assert service.get_data_and_watch("/a") == b"3"
    service.delete("/a")
    service.flush()
    assert listener.events == [("created", "/a"), ("changed", "/a"), ("deleted", "/a")]


def test_events_arrive_on_dispatcher_thread(service):
    listener = RecordingListener()
    service.register_listener(listener)
    service.watch_and_check_exists("/a")
    service.put("/a", b"1")
    service.get_data_and_watch("/a")
    service.put("/a", b"2")
    service.flush()
    assert listener.events == [("created", "/a"), ("changed", "/a")]
    assert listener.threads == {"test-event"}


def test_unregistered_listener_receives_nothing(service):
    listener = RecordingListener()
    service.register_listener(listener)
    service.unregister_listener(listener)
    service.unregister_listener(listener)
    service.watch_and_check_exists("/a")
    service.create("/a")
    service.flush()
    assert listener.events == []


def test_failing_listener_does_not_stop_delivery(service):
    class Broken(CoordinationListener):
        def node_created(self, path):
            raise RuntimeError("boom")

    listener = RecordingListener()
    service.register_listener(Broken())
    service.register_listener(listener)
    service.watch_and_check_exists("/a")
    service.create("/a")
    service.flush()
    assert listener.events == [("created", "/a")]


def test_session_expiry_and_reconnect(service):
    listener = RecordingListener()
    service.register_listener(listener)
    service.watch_and_check_exists("/a")

    service.expire_session()
    service.flush()
    assert listener.events == [("expired", None)]
    assert not service.has_watch("/a")
    with pytest.raises(SessionExpiredError):
        service.get_data_and_watch("/a")

    # Writes by other members still land
    service.create("/a", b"1")
    service.reconnect()
    service.flush()
    assert listener.events == [("expired", None), ("connected", None)]
    assert service.get_data_and_watch("/a") == b"1"


def test_closed_service_rejects_requests():
    svc = InMemoryCoordinationService()
    svc.close()
    svc.close()
    with pytest.raises(CoordinationClosedError):
        svc.watch_and_check_exists("/a")
    with pytest.raises(CoordinationClosedError):
        svc.create("/a")
    with pytest.raises(CoordinationClosedError):
        svc.reconnect()
