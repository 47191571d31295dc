"""Agent Factory for the Cognitive Analyst.

The analyst hosts the background scheduler: its interval handler drives
``AnalysisScheduler.tick`` on the agent's own event loop, and it answers
profile queries straight from the Result Cache.

Usage:
    from cognition.agents.factory import create_cognitive_analyst
    agent = create_cognitive_analyst(port=8010)
    agent.run()
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from uagents import Agent, Context

from cognition.agents.protocols import create_chat_protocol
from cognition.config.settings import (
    AGENT_DEPLOY_MODE,
    AGENT_ENDPOINT_BASE,
    COGNITIVE_ANALYST_PORT,
    COGNITIVE_ANALYST_SEED,
    COGNITIVE_TICK_INTERVAL,
)
from cognition.engine.guidance import build_guidance
from cognition.models.messages import ProfileQuery, ProfileSnapshot, RefreshRequest
from cognition.services.cognitive_service import CognitiveService, get_cognitive_service

logger = logging.getLogger(__name__)

CHAT_DESCRIPTION = (
    "I build behavioral profiles from conversation history and suggest how "
    "responses should be shaped. Send 'profile <user_id>' for a summary."
)


def build_snapshot(service: CognitiveService, user_id: str, query_type: str = "full_profile") -> ProfileSnapshot:
    result = service.get_profile(user_id)
    profile = {name: out.to_dict() for name, out in result.profile.outputs.items()}
    predictive = result.bundle.to_dict()
    if query_type == "response_hints":
        profile = {}
        predictive = {"response_strategy": predictive["response_strategy"]}
    guidance = ""
    if query_type in ("full_profile", "guidance"):
        guidance = build_guidance(result.profile, result.bundle)
    return ProfileSnapshot(
        user_id=user_id,
        from_cache=result.from_cache,
        overall_confidence=result.profile.overall_confidence,
        profile=profile,
        predictive=predictive,
        guidance=guidance,
    )


def summarize(service: CognitiveService, user_id: str) -> str:
    """One-paragraph chat summary of a user's profile."""
    result = service.get_profile(user_id)
    if not result.from_cache:
        return (
            f"No analysis for {user_id} yet. I've queued one; "
            "ask again in a moment."
        )
    p = result.profile
    s = result.bundle.response_strategy
    topics = ", ".join(result.bundle.next_likely_topics) or "none detected"
    return (
        f"{user_id} communicates in a {p.communication.label} style, leans "
        f"{p.decision_making.label} when deciding and processes information as {p.information_processing.label.replace('_', ' ')} "
        f"(confidence {p.overall_confidence:.2f}). Engagement is {result.bundle.engagement_level.value}; "
        f"likely topics: {topics}. Suggested replies: {s.length.value}, {s.structure.value.replace('_', ' ')}, "
        f"{s.technical_level.value} technical level."
    )


def create_cognitive_analyst(
    service: CognitiveService | None = None,
    port: int = COGNITIVE_ANALYST_PORT,
) -> Agent:
    """Create and configure the Cognitive Analyst agent."""
    service = service or get_cognitive_service()
    scheduler = service.scheduler

    agent = Agent(
        name="cognitive_analyst",
        seed=COGNITIVE_ANALYST_SEED,
        port=port,
        endpoint=[f"{AGENT_ENDPOINT_BASE}:{port}/submit"] if AGENT_DEPLOY_MODE == "local" else [],
        mailbox=AGENT_DEPLOY_MODE == "agentverse",
    )

    # ── Startup / shutdown ───────────────────────────────────────────────

    @agent.on_event("startup")
    async def on_startup(ctx: Context):
        logger.info("Cognitive Analyst starting, address: %s", agent.address)
        ctx.storage.set("startup_time", datetime.now(timezone.utc).isoformat())
        logger.info("Scheduler ticking every %.0fs", COGNITIVE_TICK_INTERVAL)

    @agent.on_event("shutdown")
    async def on_shutdown(ctx: Context):
        pending = await scheduler.drain(timeout=scheduler.analysis_timeout)
        scheduler.close()
        logger.info("Cognitive Analyst stopped (%d analyses abandoned)", pending)

    # ── Periodic analysis ────────────────────────────────────────────────

    @agent.on_interval(period=COGNITIVE_TICK_INTERVAL)
    async def run_tick(ctx: Context):
        launched = await scheduler.tick()
        ctx.storage.set("last_tick", datetime.now(timezone.utc).isoformat())
        ctx.storage.set("last_tick_launched", str(len(launched)))

    # ── Queries ──────────────────────────────────────────────────────────

    @agent.on_message(ProfileQuery)
    async def handle_profile_query(ctx: Context, sender: str, msg: ProfileQuery):
        await ctx.send(sender, build_snapshot(service, msg.user_id, msg.query_type))

    @agent.on_message(RefreshRequest)
    async def handle_refresh(ctx: Context, sender: str, msg: RefreshRequest):
        if service.request_refresh(msg.user_id):
            logger.info("Refresh queued for %s by %s", msg.user_id, sender)

    # ── Chat Protocol ────────────────────────────────────────────────────

    async def _chat_handler(ctx: Context, sender: str, text: str) -> str:
        words = text.strip().split()
        if len(words) >= 2 and words[0].lower() == "profile":
            return summarize(service, words[1])
        return CHAT_DESCRIPTION

    agent.include(
        create_chat_protocol("Cognitive Analyst", CHAT_DESCRIPTION, _chat_handler),
        publish_manifest=True,
    )

    return agent
