"""Redis-backed persistence boundary for interaction history.

Layout:
  interactions:{user_id}   LIST of Interaction JSON, oldest first, capped
  emotions:{user_id}       LIST of {"emotion", "intensity"} JSON, capped
  interactions:active      ZSET user_id -> last interaction epoch seconds
"""

from __future__ import annotations

import json
import logging
import time
from typing import Callable

import redis

from cognition.config.settings import (
    ACTIVE_USERS_KEY,
    EMOTION_PREFIX,
    INTERACTION_HISTORY_LIMIT,
    INTERACTION_PREFIX,
    REDIS_URL,
)
from cognition.models.interaction import DEFAULT_INTENSITY, EmotionalSummary, Interaction

logger = logging.getLogger(__name__)


def _get_redis() -> redis.Redis:
    return redis.Redis.from_url(REDIS_URL, decode_responses=True)


class RedisInteractionStore:
    def __init__(
        self,
        r: redis.Redis | None = None,
        history_limit: int = INTERACTION_HISTORY_LIMIT,
        clock: Callable[[], float] = time.time,
    ):
        self.r = r or _get_redis()
        self.history_limit = history_limit
        self.clock = clock

    # ── Writes ───────────────────────────────────────────────────────────

    def record_interaction(self, user_id: str, interaction: Interaction) -> None:
        """Append an interaction and mark the user active."""
        moment = interaction.moment
        ts = moment.timestamp() if moment else self.clock()
        key = f"{INTERACTION_PREFIX}{user_id}"

        pipe = self.r.pipeline()
        pipe.rpush(key, interaction.to_json())
        pipe.ltrim(key, -self.history_limit, -1)
        pipe.zadd(ACTIVE_USERS_KEY, {user_id: ts})
        pipe.execute()

    def record_emotion(self, user_id: str, emotion: str, intensity: int = DEFAULT_INTENSITY) -> None:
        key = f"{EMOTION_PREFIX}{user_id}"
        pipe = self.r.pipeline()
        pipe.rpush(key, json.dumps({"emotion": emotion, "intensity": intensity}))
        pipe.ltrim(key, -self.history_limit, -1)
        pipe.execute()

    # ── Reads ────────────────────────────────────────────────────────────

    def fetch_recent_interactions(self, user_id: str, limit: int) -> list[Interaction]:
        """Most recent ``limit`` interactions, oldest first."""
        if limit <= 0:
            return []
        raw = self.r.lrange(f"{INTERACTION_PREFIX}{user_id}", -limit, -1)
        interactions = []
        for item in raw:
            try:
                interactions.append(Interaction.from_json(item))
            except (ValueError, TypeError, AttributeError) as exc:
                logger.warning("Skipping malformed interaction for %s: %s", user_id, exc)
        return interactions

    def fetch_emotional_summary(self, user_id: str) -> EmotionalSummary:
        raw = self.r.lrange(f"{EMOTION_PREFIX}{user_id}", -self.history_limit, -1)
        entries = []
        for item in raw:
            try:
                entry = json.loads(item)
            except ValueError:
                logger.warning("Skipping malformed emotion entry for %s", user_id)
                continue
            if isinstance(entry, dict):
                entries.append(entry)
        return EmotionalSummary.from_log(entries)

    def list_active_user_ids(self, since_minutes: int) -> list[str]:
        """Users with an interaction in the trailing window, most recent first."""
        cutoff = self.clock() - since_minutes * 60
        return list(self.r.zrevrangebyscore(ACTIVE_USERS_KEY, "+inf", cutoff))
