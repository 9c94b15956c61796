"""Tests for cancellation tokens and the recording abort handler."""

import threading

from leader_address.coordination import RecordingAbortable
from leader_address.exceptions import SessionExpiredError
from leader_address.waiting import CancellationToken


def test_cancel_runs_callbacks_once():
    token = CancellationToken()
    calls = []
    token.add_callback(lambda: calls.append("a"))
    token.add_callback(lambda: calls.append("b"))
    assert not token.is_cancelled
    token.cancel()
    token.cancel()
    assert token.is_cancelled
    assert calls == ["a", "b"]
    assert "cancelled" in repr(token)


def test_callback_added_after_cancel_runs_immediately():
    token = CancellationToken()
    token.cancel()
    calls = []
    token.add_callback(lambda: calls.append(1))
    assert calls == [1]


def test_removed_callback_is_not_run():
    token = CancellationToken()
    calls = []

    def callback():
        calls.append(1)

    token.add_callback(callback)
    token.remove_callback(callback)
    token.remove_callback(callback)
    token.cancel()
    assert calls == []


def test_failing_callback_does_not_block_others():
    token = CancellationToken()
    calls = []

    def broken():
        raise RuntimeError("boom")

    token.add_callback(broken)
    token.add_callback(lambda: calls.append(1))
    token.cancel()
    assert calls == [1]


def test_recording_abortable_keeps_first_failure():
    abortable = RecordingAbortable()
    assert not abortable.is_aborted()
    assert abortable.wait_aborted(timeout=0.01) is False

    first = SessionExpiredError("/a")
    abortable.abort("first", first)
    abortable.abort("second", None)
    assert abortable.is_aborted()
    assert abortable.why == "first"
    assert abortable.error is first


def test_recording_abortable_wakes_waiters():
    abortable = RecordingAbortable()
    results = []
    waiter = threading.Thread(target=lambda: results.append(abortable.wait_aborted(5.0)))
    waiter.start()
    abortable.abort("gone")
    waiter.join(timeout=5.0)
    assert results == [True]
