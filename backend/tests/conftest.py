"""Shared test fixtures for the cognitive engine test suite."""

from __future__ import annotations

import asyncio

import fakeredis
import pytest

from cognition.data_pipeline.facade import LoadedInputs
from cognition.data_pipeline.interaction_store import RedisInteractionStore
from cognition.engine.registry import InFlightRegistry
from cognition.engine.result_cache import ResultCache
from cognition.engine.scheduler import AnalysisScheduler
from cognition.models.interaction import Actor, EmotionalSummary, Interaction, InteractionWindow
from cognition.services.cognitive_service import CognitiveService

T0 = 1_760_000_000.0


# ── Redis ────────────────────────────────────────────────────────────────

@pytest.fixture
def r():
    """Fresh fakeredis instance per test (decode_responses=True like production)."""
    return fakeredis.FakeRedis(decode_responses=True)


# ── Time ─────────────────────────────────────────────────────────────────

class FakeClock:
    """Callable clock that only moves when told to."""

    def __init__(self, now: float = T0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock():
    return FakeClock()


# ── Windows ──────────────────────────────────────────────────────────────

@pytest.fixture
def make_window():
    """Build an InteractionWindow from user texts, optionally interleaved
    with an assistant reply after each one.

    Usage:
        window = make_window("first message", "second message")
    """

    def _factory(*texts: str, assistant_reply: str | None = None) -> InteractionWindow:
        items = []
        for text in texts:
            items.append(Interaction(Actor.USER, text))
            if assistant_reply is not None:
                items.append(Interaction(Actor.ASSISTANT, assistant_reply))
        return InteractionWindow.of(items)

    return _factory


# ── Stub facade ──────────────────────────────────────────────────────────

class StubFacade:
    """In-memory stand-in for DataAccessFacade with controllable latency.

    ``gate`` (an asyncio.Event) holds every load until set; ``delay`` sleeps;
    ``error`` is raised from both methods.
    """

    def __init__(self):
        self.windows: dict[str, InteractionWindow] = {}
        self.active: list[str] = []
        self.calls: list[str] = []
        self.gate: asyncio.Event | None = None
        self.delay = 0.0
        self.error: Exception | None = None

    async def load_inputs(self, user_id: str) -> LoadedInputs:
        self.calls.append(user_id)
        if self.gate is not None:
            await self.gate.wait()
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return LoadedInputs(
            window=self.windows.get(user_id, InteractionWindow()),
            emotional_summary=EmotionalSummary.neutral(),
        )

    async def list_active_user_ids(self, since_minutes: int) -> list[str]:
        if self.error is not None:
            raise self.error
        return list(self.active)


@pytest.fixture
def stub_facade():
    return StubFacade()


# ── Engine components ────────────────────────────────────────────────────

@pytest.fixture
def cache(r, clock):
    return ResultCache(r, ttl_seconds=300, clock=clock)


@pytest.fixture
def store(r, clock):
    return RedisInteractionStore(r, history_limit=100, clock=clock)


@pytest.fixture
def registry(clock):
    return InFlightRegistry(clock=clock)


@pytest.fixture
def scheduler(stub_facade, cache, registry, clock):
    return AnalysisScheduler(
        stub_facade,
        cache,
        registry,
        batch_size=10,
        analysis_timeout=2.0,
        clock=clock,
    )


@pytest.fixture
def service(cache, scheduler):
    return CognitiveService(cache, scheduler)
