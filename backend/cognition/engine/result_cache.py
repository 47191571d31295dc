"""Redis-backed Result Cache for analysis bundles.

One JSON entry per user at ``cognitive:profile:{user_id}``.  Freshness is
decided from the entry's own ``computed_at`` against the logical TTL; Redis
keeps the key for ``ttl * retention_factor`` so stale entries stay readable
while a refresh is running.

Writes are ordered by ``computed_at`` using WATCH/MULTI: an analysis that
started earlier can never overwrite one that started later.
"""

from __future__ import annotations

import dataclasses
import json
import logging
import time
from typing import Callable

import redis

from cognition.config.settings import (
    COGNITIVE_CACHE_PREFIX,
    COGNITIVE_CACHE_RETENTION_FACTOR,
    COGNITIVE_CACHE_TTL,
    REDIS_URL,
)
from cognition.engine.errors import CacheUnavailable
from cognition.models.profile import CacheEntry

logger = logging.getLogger(__name__)


def _get_redis() -> redis.Redis:
    return redis.Redis.from_url(REDIS_URL, decode_responses=True)


def _stored_computed_at(raw: str | bytes | None) -> float | None:
    if raw is None:
        return None
    try:
        return float(json.loads(raw)["computed_at"])
    except (ValueError, KeyError, TypeError):
        return None


class ResultCache:
    def __init__(
        self,
        r: redis.Redis | None = None,
        ttl_seconds: int = COGNITIVE_CACHE_TTL,
        prefix: str = COGNITIVE_CACHE_PREFIX,
        retention_factor: int = COGNITIVE_CACHE_RETENTION_FACTOR,
        clock: Callable[[], float] = time.time,
    ):
        self.r = r or _get_redis()
        self.ttl = ttl_seconds
        self.prefix = prefix
        self.retention_factor = max(1, retention_factor)
        self.clock = clock

    def key(self, user_id: str) -> str:
        return f"{self.prefix}{user_id}"

    def now(self) -> float:
        return self.clock()

    def is_fresh(self, entry: CacheEntry) -> bool:
        return entry.is_fresh(self.now())

    # ── Reads ────────────────────────────────────────────────────────────

    def get(self, user_id: str) -> CacheEntry | None:
        """Return the stored entry, fresh or stale; None on a miss."""
        try:
            raw = self.r.get(self.key(user_id))
        except redis.RedisError as exc:
            raise CacheUnavailable(f"cache read failed for {user_id}: {exc}") from exc

        if raw is None:
            return None
        try:
            return CacheEntry.from_json(raw)
        except (ValueError, KeyError, TypeError, AttributeError) as exc:
            logger.warning("Discarding undecodable cache entry for %s: %s", user_id, exc)
            return None

    # ── Writes ───────────────────────────────────────────────────────────

    def put(self, user_id: str, entry: CacheEntry, ttl_seconds: int | None = None) -> bool:
        """Store ``entry`` unless a newer one is already there.

        Returns True when written, False when rejected as out of order.
        """
        if ttl_seconds is not None and ttl_seconds != entry.ttl_seconds:
            entry = dataclasses.replace(entry, ttl_seconds=ttl_seconds)
        key = self.key(user_id)
        payload = entry.to_json()
        retention = max(1, int(entry.ttl_seconds * self.retention_factor))

        try:
            with self.r.pipeline() as pipe:
                while True:
                    try:
                        pipe.watch(key)
                        stored_at = _stored_computed_at(pipe.get(key))
                        if stored_at is not None and stored_at > entry.computed_at:
                            pipe.unwatch()
                            logger.debug(
                                "Rejected out-of-order write for %s (%.3f < %.3f)",
                                user_id, entry.computed_at, stored_at,
                            )
                            return False
                        pipe.multi()
                        pipe.set(key, payload, ex=retention)
                        pipe.execute()
                        return True
                    except redis.WatchError:
                        # Another writer touched the key; re-read and compare again
                        continue
        except redis.RedisError as exc:
            raise CacheUnavailable(f"cache write failed for {user_id}: {exc}") from exc

    def invalidate(self, user_id: str) -> None:
        try:
            self.r.delete(self.key(user_id))
        except redis.RedisError as exc:
            raise CacheUnavailable(f"cache delete failed for {user_id}: {exc}") from exc
