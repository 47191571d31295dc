"""Data Access Facade: the only way the engine reads user data.

Gathers the interaction window, the emotional summary and the previous
profile for one user.  Every blocking Redis call, the prior-profile cache
read included, runs in a worker thread so the per-analysis timeout can
abandon it and the event loop keeps serving other users.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Protocol

import redis

from cognition.config.settings import COGNITIVE_WINDOW_SIZE
from cognition.engine.errors import CacheUnavailable, DataUnavailable
from cognition.engine.result_cache import ResultCache
from cognition.models.interaction import EmotionalSummary, Interaction, InteractionWindow
from cognition.models.profile import CognitiveProfile

logger = logging.getLogger(__name__)


class InteractionStore(Protocol):
    def fetch_recent_interactions(self, user_id: str, limit: int) -> list[Interaction]: ...

    def fetch_emotional_summary(self, user_id: str) -> EmotionalSummary | None: ...

    def list_active_user_ids(self, since_minutes: int) -> list[str]: ...


@dataclass(frozen=True)
class LoadedInputs:
    window: InteractionWindow
    emotional_summary: EmotionalSummary
    prior_profile: CognitiveProfile | None = None


class DataAccessFacade:
    def __init__(
        self,
        store: InteractionStore,
        cache: ResultCache | None = None,
        window_size: int = COGNITIVE_WINDOW_SIZE,
    ):
        self.store = store
        self.cache = cache
        self.window_size = window_size

    async def load_inputs(self, user_id: str) -> LoadedInputs:
        """Load everything one analysis needs.

        Raises DataUnavailable when the store cannot be reached.  A user with
        no history gets an empty window and a neutral summary.
        """
        try:
            interactions = await asyncio.to_thread(
                self.store.fetch_recent_interactions, user_id, self.window_size
            )
            summary = await asyncio.to_thread(self.store.fetch_emotional_summary, user_id)
        except (redis.RedisError, OSError) as exc:
            raise DataUnavailable(f"interaction store unavailable for {user_id}: {exc}") from exc

        prior = await asyncio.to_thread(self._prior_profile, user_id)
        return LoadedInputs(
            window=InteractionWindow.of(interactions or [], self.window_size),
            emotional_summary=summary or EmotionalSummary.neutral(),
            prior_profile=prior,
        )

    def _prior_profile(self, user_id: str) -> CognitiveProfile | None:
        if self.cache is None:
            return None
        try:
            entry = self.cache.get(user_id)
        except CacheUnavailable as exc:
            logger.warning("Prior profile unavailable for %s: %s", user_id, exc)
            return None
        return entry.profile if entry else None

    async def list_active_user_ids(self, since_minutes: int) -> list[str]:
        try:
            return list(await asyncio.to_thread(self.store.list_active_user_ids, since_minutes))
        except (redis.RedisError, OSError) as exc:
            raise DataUnavailable(f"cannot list active users: {exc}") from exc
