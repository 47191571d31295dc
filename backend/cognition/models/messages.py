"""Typed message models for the cognitive analyst agent.

All messages are uAgents Model subclasses providing schema validation
and serialization across the Fetch.ai ecosystem.
"""

from uagents import Model


class ProfileQuery(Model):
    """Request to the Cognitive Analyst for a user's derived profile."""
    user_id: str
    query_type: str = "full_profile"  # full_profile | response_hints | guidance


class ProfileSnapshot(Model):
    """Returned by the Cognitive Analyst; never blocks on a recompute."""
    user_id: str
    from_cache: bool
    overall_confidence: float  # 0.0-1.0
    profile: dict              # analyzer name -> {primary, confidence, sub_scores, score}
    predictive: dict           # next_likely_topics, tool_use_probability, engagement_level, ...
    guidance: str = ""


class RefreshRequest(Model):
    """Ask the analyst to schedule an out-of-band recompute for a user."""
    user_id: str
