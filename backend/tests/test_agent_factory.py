"""Tests for the Cognitive Analyst agent and its message models."""

from __future__ import annotations

import pytest

pytest.importorskip("uagents")

from cognition.agents.factory import build_snapshot, create_cognitive_analyst, summarize  # noqa: E402
from cognition.engine.aggregator import aggregate  # noqa: E402
from cognition.models.messages import ProfileQuery, ProfileSnapshot, RefreshRequest  # noqa: E402
from cognition.models.profile import (  # noqa: E402
    COMMUNICATION,
    AnalyzerOutput,
    CacheEntry,
    CommunicationStyle,
    PredictiveBundle,
)


def _store_profile(cache, clock):
    profile = aggregate(
        {COMMUNICATION: AnalyzerOutput(COMMUNICATION, CommunicationStyle.CASUAL, 0.9)},
        data_points=5,
    )
    bundle = PredictiveBundle(next_likely_topics=["planning"])
    cache.put("u1", CacheEntry("u1", profile, bundle, clock(), 300))


class TestMessages:
    def test_profile_query_defaults(self):
        q = ProfileQuery(user_id="u1")
        assert q.query_type == "full_profile"

    def test_refresh_request(self):
        assert RefreshRequest(user_id="u1").user_id == "u1"


class TestSnapshot:
    def test_miss(self, service):
        snap = build_snapshot(service, "nobody")
        assert isinstance(snap, ProfileSnapshot)
        assert snap.from_cache is False
        assert snap.guidance == ""

    def test_full_profile(self, service, cache, clock):
        _store_profile(cache, clock)
        snap = build_snapshot(service, "u1")
        assert snap.from_cache is True
        assert snap.profile["communication"]["primary"] == "casual"
        assert snap.predictive["next_likely_topics"] == ["planning"]

    def test_response_hints_only(self, service, cache, clock):
        _store_profile(cache, clock)
        snap = build_snapshot(service, "u1", "response_hints")
        assert snap.profile == {}
        assert set(snap.predictive) == {"response_strategy"}


class TestChatSummary:
    def test_unknown_user(self, service):
        assert "No analysis" in summarize(service, "nobody")

    def test_known_user(self, service, cache, clock):
        _store_profile(cache, clock)
        text = summarize(service, "u1")
        assert "casual style" in text
        assert "planning" in text


class TestFactory:
    def test_creates_agent(self, service):
        agent = create_cognitive_analyst(service, port=8123)
        assert agent.name == "cognitive_analyst"
        assert agent.address.startswith("agent")
