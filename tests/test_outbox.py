"""
Tests for the outbox and the retry helper behind it.
"""

import pytest

from mona.errors import StoreError
from mona.outbox import SHARED_TARGET, Outbox, user_target
from mona.resilience import RetryConfig, retry_with_backoff


class TestRetryWithBackoff:
    def test_returns_first_success(self):
        calls = []

        def flaky():
            calls.append(1)
            if len(calls) < 3:
                raise StoreError()
            return "ok"

        sleeps = []
        result = retry_with_backoff(flaky, RetryConfig(max_retries=3, base_delay=1), sleep=sleeps.append)
        assert result == "ok"
        assert len(sleeps) == 2
        assert 1.0 <= sleeps[0] <= 1.1
        assert 2.0 <= sleeps[1] <= 2.2

    def test_gives_up(self):
        def always():
            raise StoreError("down")

        with pytest.raises(StoreError):
            retry_with_backoff(always, RetryConfig(max_retries=2), sleep=lambda _s: None)

    def test_other_errors_not_retried(self):
        calls = []

        def broken():
            calls.append(1)
            raise KeyError("x")

        with pytest.raises(KeyError):
            retry_with_backoff(broken, RetryConfig(), sleep=lambda _s: None)
        assert len(calls) == 1

    def test_delay_capped(self):
        sleeps = []

        def always():
            raise StoreError()

        config = RetryConfig(max_retries=4, base_delay=5, max_delay=6)
        with pytest.raises(StoreError):
            retry_with_backoff(always, config, sleep=sleeps.append)
        assert max(sleeps) <= 6.6


class TestOutbox:
    def test_park_coalesces_per_target(self, file_store):
        outbox = Outbox(file_store)
        outbox.park(user_target("alice"), {"a": {}}, StoreError())
        outbox.park(user_target("alice"), {"b": {}}, StoreError())
        outbox.park(SHARED_TARGET, {}, StoreError())
        assert len(outbox) == 2
        pending = {w.target: w for w in outbox.pending()}
        assert pending["user:alice"].payload == {"b": {}}
        assert pending["user:alice"].attempts == 2
        assert pending["user:alice"].to_dict()["error"] == "Server error"

    def test_flush_delivers(self, file_store):
        file_store.create_user("alice")
        outbox = Outbox(file_store, sleep=lambda _s: None)
        outbox.park(user_target("alice"), {"acme": {"name": "Acme"}}, StoreError())
        outbox.park(SHARED_TARGET, {"s": {"name": "S"}}, StoreError())
        assert outbox.flush() == 2
        assert len(outbox) == 0
        assert file_store.get_user_state("alice") == {"clients": {"acme": {"name": "Acme"}}}
        assert file_store.get_shared_state() == {"s": {"name": "S"}}

    def test_non_store_errors_propagate(self, file_store):
        outbox = Outbox(file_store, RetryConfig(max_retries=0), sleep=lambda _s: None)
        # alice does not exist: UserNotFound is not a StoreError, so it propagates
        outbox.park(user_target("alice"), {}, StoreError())
        with pytest.raises(Exception, match="User not found"):
            outbox.flush()
