"""
Test the Redis-backed registration lock.
"""
import pytest
import redis

from event_registration.core.errors import ConflictError, ErrorCode, InternalError
from event_registration.services import registrations
from event_registration.services.registrations import event_lock


class TestEventLock:
    """Test event_lock against an in-process Redis."""

    def test_lock_held_inside_block(self, redis_client):
        with event_lock(7):
            other = redis_client.lock("event_lock:7", timeout=10)
            assert other.acquire(blocking=False) is False

        # Released on exit
        assert redis_client.get("event_lock:7") is None

    def test_lock_released_on_error(self, redis_client):
        with pytest.raises(RuntimeError):
            with event_lock(8):
                raise RuntimeError("boom")

        assert redis_client.get("event_lock:8") is None

    def test_locks_are_per_event(self, redis_client):
        with event_lock(1):
            with event_lock(2):
                assert redis_client.get("event_lock:1") is not None
                assert redis_client.get("event_lock:2") is not None

    def test_busy_lock_raises_conflict(self, redis_client, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.setattr(registrations, "REGISTRATION_LOCK_WAIT", 0.1)
        holder = redis_client.lock("event_lock:9", timeout=10)
        assert holder.acquire(blocking=False) is True

        with pytest.raises(ConflictError) as exc_info:
            with event_lock(9):
                pass
        assert exc_info.value.code is ErrorCode.REGISTRATION_BUSY

        holder.release()

    def test_redis_failure_is_internal_error(self, monkeypatch: pytest.MonkeyPatch):
        class BrokenLock:
            def acquire(self, blocking=True):
                raise redis.exceptions.ConnectionError("Connection refused")

        class BrokenRedis:
            def lock(self, name, timeout=None, blocking_timeout=None):
                return BrokenLock()

        monkeypatch.setattr(registrations, "get_redis_client", lambda: BrokenRedis())

        with pytest.raises(InternalError, match="Connection refused"):
            with event_lock(10):
                pass

    def test_no_redis_url_runs_unlocked(self, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.setattr(registrations, "get_redis_url", lambda: "")

        assert registrations.get_redis_client() is None
        with event_lock(11):
            pass


class TestRedisClient:
    def test_client_reused_per_url(self, monkeypatch: pytest.MonkeyPatch):
        """Test that registrations share one client instead of one per call."""
        registrations._client_for.cache_clear()
        monkeypatch.setattr(registrations, "get_redis_url", lambda: "redis://localhost:6379/15")

        try:
            first = registrations.get_redis_client()
            assert first is not None
            assert registrations.get_redis_client() is first
        finally:
            registrations._client_for.cache_clear()
