"""Cognitive Service: the read side used by the chat response generator.

Reads never block on analysis and never raise.  A miss serves the default
profile, a stale entry is served as-is, and both ask the scheduler for an
out-of-band refresh.
"""

from __future__ import annotations

import logging
from typing import NamedTuple

from cognition.engine.aggregator import default_profile
from cognition.engine.errors import CacheUnavailable
from cognition.engine.guidance import build_guidance
from cognition.engine.predictive import tool_usage_signal
from cognition.engine.result_cache import ResultCache
from cognition.engine.scheduler import AnalysisScheduler
from cognition.models.profile import (
    CognitiveProfile,
    PredictiveBundle,
    ResponseStrategy,
    ToolUsageSignal,
)

logger = logging.getLogger(__name__)


class ProfileResult(NamedTuple):
    profile: CognitiveProfile
    bundle: PredictiveBundle
    from_cache: bool


class CognitiveService:
    def __init__(self, cache: ResultCache, scheduler: AnalysisScheduler):
        self.cache = cache
        self.scheduler = scheduler
        self.stats = {
            "cache_hits": 0,
            "cache_misses": 0,
            "stale_reads": 0,
            "cache_errors": 0,
            "refresh_requests": 0,
            "tool_signals": 0,
            "tool_signals_positive": 0,
        }

    def get_profile(self, user_id: str) -> ProfileResult:
        try:
            entry = self.cache.get(user_id)
        except CacheUnavailable as exc:
            self.stats["cache_errors"] += 1
            logger.warning("Serving default profile for %s: %s", user_id, exc)
            return ProfileResult(default_profile(), PredictiveBundle.default(), False)

        if entry is None:
            self.stats["cache_misses"] += 1
            self.request_refresh(user_id)
            return ProfileResult(default_profile(), PredictiveBundle.default(), False)

        if self.cache.is_fresh(entry):
            self.stats["cache_hits"] += 1
        else:
            self.stats["stale_reads"] += 1
            self.request_refresh(user_id)
        return ProfileResult(entry.profile, entry.bundle, True)

    def request_refresh(self, user_id: str) -> bool:
        """Ask for a recompute; False when one is already running or cannot start."""
        try:
            launched = self.scheduler.launch(user_id)
        except RuntimeError as exc:
            logger.warning("Cannot schedule refresh for %s: %s", user_id, exc)
            return False
        if launched:
            self.stats["refresh_requests"] += 1
        return launched

    def get_response_hints(self, user_id: str) -> ResponseStrategy:
        return self.get_profile(user_id).bundle.response_strategy

    def record_tool_usage_signal(self, user_id: str, message: str) -> ToolUsageSignal:
        """Decide whether the next response should use external tools."""
        result = self.get_profile(user_id)
        signal = tool_usage_signal(message, result.bundle.tool_use_probability)
        self.stats["tool_signals"] += 1
        if signal.should_use_tools:
            self.stats["tool_signals_positive"] += 1
        logger.debug(
            "Tool signal for %s: %s (p=%.2f, matched=%s)",
            user_id, signal.should_use_tools, signal.probability, signal.matched,
        )
        return signal

    def get_prompt_guidance(self, user_id: str) -> str:
        result = self.get_profile(user_id)
        return build_guidance(result.profile, result.bundle)

    def metrics(self) -> dict:
        reads = self.stats["cache_hits"] + self.stats["stale_reads"] + self.stats["cache_misses"]
        served = self.stats["cache_hits"] + self.stats["stale_reads"]
        return {
            **self.stats,
            "cache_hit_rate": round(served / reads, 4) if reads else 0.0,
            "scheduler": self.scheduler.metrics(),
        }


# ── Singleton ────────────────────────────────────────────────────────────

_instance: CognitiveService | None = None


def build_cognitive_service(r=None) -> CognitiveService:
    """Wire store, cache, facade and scheduler around one Redis client."""
    from cognition.data_pipeline.facade import DataAccessFacade
    from cognition.data_pipeline.interaction_store import RedisInteractionStore

    cache = ResultCache(r)
    store = RedisInteractionStore(cache.r)
    facade = DataAccessFacade(store, cache)
    return CognitiveService(cache, AnalysisScheduler(facade, cache))


def get_cognitive_service() -> CognitiveService:
    global _instance
    if _instance is None:
        _instance = build_cognitive_service()
    return _instance
