"""Tests for address parsing and result models."""

import pytest
from pydantic import ValidationError

from leader_address.exceptions import MalformedAddressError
from leader_address.models import (
    ServerAddress,
    WaitResult,
    WaitStatus,
    WatchEvent,
    WatchEventType,
)


def test_parse_host_and_port():
    address = ServerAddress.parse("10.0.0.5:60000")
    assert address.host == "10.0.0.5"
    assert address.port == 60000
    assert str(address) == "10.0.0.5:60000"
    assert address.as_tuple() == ("10.0.0.5", 60000)


def test_parse_hostname_and_ipv6_literal():
    assert ServerAddress.parse("master-0.cluster.local:16000").host == "master-0.cluster.local"
    ipv6 = ServerAddress.parse("[::1]:9100")
    assert ipv6.host == "[::1]"
    assert ipv6.port == 9100


def test_wire_payload_is_preserved():
    payload = b"10.0.0.5:60000"
    assert ServerAddress.from_bytes(payload).to_bytes() == payload


@pytest.mark.parametrize(
    "text",
    ["not-an-address", ":60000", "host:", "host:http", "host:-1", "host:70000", "my host:1", "host:６０"],
)
def test_parse_rejects_malformed_text(text):
    with pytest.raises(MalformedAddressError) as info:
        ServerAddress.parse(text)
    assert info.value.payload == text
    assert info.value.reason


def test_from_bytes_rejects_invalid_utf8():
    with pytest.raises(MalformedAddressError) as info:
        ServerAddress.from_bytes(b"\xff\xfe:1")
    assert info.value.payload == b"\xff\xfe:1"
    assert "UTF-8" in info.value.reason


def test_from_bytes_keeps_raw_payload_on_error():
    with pytest.raises(MalformedAddressError) as info:
        ServerAddress.from_bytes(b"garbage")
    assert info.value.payload == b"garbage"


def test_address_is_frozen_and_validated():
    address = ServerAddress(host="a", port=1)
    with pytest.raises(ValidationError):
        address.port = 2
    with pytest.raises(ValidationError):
        ServerAddress(host="", port=1)
    with pytest.raises(ValidationError):
        ServerAddress(host="a", port=65536)
    assert ServerAddress(host="a", port=1) == ServerAddress.parse("a:1")


def test_wait_result_helpers():
    address = ServerAddress.parse("b:2")
    found = WaitResult.found(address)
    assert found.is_found
    assert found.address == address

    failed = WaitResult.failure("boom")
    assert failed.status == WaitStatus.FAILED
    assert failed.error == "boom"
    assert not failed.is_found


def test_watch_event_defaults():
    event = WatchEvent(type=WatchEventType.SESSION_EXPIRED)
    assert event.path is None
    assert event.timestamp > 0
