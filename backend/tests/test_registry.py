"""Tests for the In-Flight Registry."""

from __future__ import annotations

import threading
from concurrent.futures import ThreadPoolExecutor

from cognition.engine.registry import InFlightRegistry


class TestRegistry:
    def test_acquire_once(self, registry):
        assert registry.try_acquire("u1") is True
        assert registry.try_acquire("u1") is False
        assert "u1" in registry
        assert len(registry) == 1

    def test_release_allows_reacquire(self, registry):
        registry.try_acquire("u1")
        registry.release("u1")
        assert "u1" not in registry
        assert registry.try_acquire("u1") is True

    def test_release_unknown_is_noop(self, registry):
        registry.release("ghost")
        assert len(registry) == 0

    def test_users_are_independent(self, registry):
        assert registry.try_acquire("u1")
        assert registry.try_acquire("u2")
        assert len(registry) == 2

    def test_records_start_time(self, registry, clock):
        registry.try_acquire("u1")
        assert registry.started_at("u1") == clock()
        assert registry.snapshot() == {"u1": clock()}

    def test_concurrent_acquire_from_threads(self):
        registry = InFlightRegistry()
        barrier = threading.Barrier(50)

        def attempt(_):
            barrier.wait()
            return registry.try_acquire("u1")

        with ThreadPoolExecutor(max_workers=50) as pool:
            results = list(pool.map(attempt, range(50)))

        assert results.count(True) == 1
