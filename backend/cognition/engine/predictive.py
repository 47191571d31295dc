"""Predictive Module: forward-looking hints derived from a fresh profile.

Produces the PredictiveBundle the response generator reads: likely next
topics, how often the user asks for live information, an engagement level,
a response strategy, how much depth to give and what motivational tone to
take.  Also reports which profile dimensions changed since the previous
analysis.
"""

from __future__ import annotations

import logging

from cognition.engine import patterns
from cognition.models.interaction import InteractionWindow
from cognition.models.profile import (
    ANALYZER_NAMES,
    COMMUNICATION,
    DECISION_MAKING,
    EMOTIONAL_INTELLIGENCE,
    INFORMATION_PROCESSING,
    LEARNING_VELOCITY,
    CognitiveProfile,
    CommunicationStyle,
    DecisionStyle,
    EmotionalStrength,
    InformationDepth,
    InteractionStyle,
    Level,
    MotivationalApproach,
    PredictiveBundle,
    ProcessingStyle,
    ResponseLength,
    ResponseStrategy,
    ResponseStructure,
    TechnicalLevel,
    ToolUsageSignal,
)

logger = logging.getLogger(__name__)

MAX_TOPICS = 3
MAX_TOOL_PROBABILITY = 0.9
TOOL_SIGNAL_WEIGHT = 0.3  # per matched marker in a single message
TOOL_USE_THRESHOLD = 0.5
HABITUAL_TOOL_THRESHOLD = 0.6

ENGAGEMENT_HIGH = 0.6
ENGAGEMENT_MEDIUM = 0.35

# Depth-marker hits across the user's messages; strictly above each bound
DEPTH_COMPREHENSIVE = 3
DEPTH_DETAILED = 1

MOTIVATION_BY_STRENGTH = {
    EmotionalStrength.EMPATHETIC: MotivationalApproach.EMPATHETIC,
    EmotionalStrength.RESILIENT: MotivationalApproach.ENCOURAGING,
}

# (analyzer, primary) -> strategy fields it sets.  Rows apply in order, so a
# later dimension overrides an earlier one on the same field.
STRATEGY_RULES: list[tuple[str, object, dict]] = [
    (COMMUNICATION, CommunicationStyle.DIRECT,
     {"length": ResponseLength.SHORT, "structure": ResponseStructure.STRUCTURED}),
    (COMMUNICATION, CommunicationStyle.CASUAL,
     {"interaction_style": InteractionStyle.CONVERSATIONAL}),
    (COMMUNICATION, CommunicationStyle.TECHNICAL,
     {"technical_level": TechnicalLevel.ADVANCED}),
    (COMMUNICATION, CommunicationStyle.DETAILED,
     {"length": ResponseLength.LONG}),
    (COMMUNICATION, CommunicationStyle.EMOTIONAL,
     {"interaction_style": InteractionStyle.EMPATHETIC}),
    (DECISION_MAKING, DecisionStyle.SYSTEMATIC,
     {"structure": ResponseStructure.STRUCTURED, "interaction_style": InteractionStyle.FOLLOW_UP}),
    (DECISION_MAKING, DecisionStyle.ANALYTICAL,
     {"length": ResponseLength.LONG, "technical_level": TechnicalLevel.ADVANCED}),
    (DECISION_MAKING, DecisionStyle.COLLABORATIVE,
     {"interaction_style": InteractionStyle.COLLABORATIVE}),
    (INFORMATION_PROCESSING, ProcessingStyle.SEQUENTIAL,
     {"structure": ResponseStructure.STRUCTURED}),
    (INFORMATION_PROCESSING, ProcessingStyle.VISUAL,
     {"structure": ResponseStructure.EXAMPLE_DRIVEN}),
]


# ── Topics ───────────────────────────────────────────────────────────────

def predict_topics(window: InteractionWindow, limit: int = MAX_TOPICS) -> list[str]:
    """Topics scanned from the most recent user message backwards."""
    rules = patterns.section("topics")
    topics: list[str] = []
    for message in reversed(window.user_messages):
        text = message.text.lower()
        for topic, markers in rules.items():
            if topic in topics:
                continue
            if patterns.count_patterns(text, markers or []):
                topics.append(topic)
                if len(topics) >= limit:
                    return topics
    return topics


# ── Tool use ─────────────────────────────────────────────────────────────

def _tool_markers() -> list[str]:
    return list(patterns.load_lexicon().get("tool_signals") or [])


def tool_use_probability(window: InteractionWindow) -> float:
    """Current-information marker hits per user message, capped at 0.9."""
    user_messages = window.user_messages
    if not user_messages:
        return 0.0
    markers = _tool_markers()
    hits = sum(patterns.count_patterns(m.text.lower(), markers) for m in user_messages)
    return round(min(MAX_TOOL_PROBABILITY, hits / len(user_messages)), 4)


def tool_usage_signal(message: str, cached_probability: float = 0.0) -> ToolUsageSignal:
    """Single-message decision, nudged by the user's habitual probability."""
    matched = patterns.matched_patterns(message.lower(), _tool_markers())
    probability = min(MAX_TOOL_PROBABILITY, TOOL_SIGNAL_WEIGHT * len(matched))
    should_use = probability >= TOOL_USE_THRESHOLD or (
        cached_probability >= HABITUAL_TOOL_THRESHOLD and probability > 0
    )
    return ToolUsageSignal(
        should_use_tools=should_use,
        probability=round(probability, 4),
        matched=matched,
    )


# ── Engagement ───────────────────────────────────────────────────────────

def engagement_score(profile: CognitiveProfile, window: InteractionWindow) -> float:
    volume = min(1.0, len(window.user_messages) / 20)
    learning = profile[LEARNING_VELOCITY].score
    emotional = profile[EMOTIONAL_INTELLIGENCE].score
    return (
        0.3 * profile[COMMUNICATION].confidence
        + 0.3 * (learning if learning is not None else 0.5)
        + 0.2 * volume
        + 0.2 * (emotional if emotional is not None else 0.3)
    )


def engagement_level(profile: CognitiveProfile, window: InteractionWindow) -> Level:
    score = engagement_score(profile, window)
    if score >= ENGAGEMENT_HIGH:
        return Level.HIGH
    if score >= ENGAGEMENT_MEDIUM:
        return Level.MEDIUM
    return Level.LOW


# ── Depth and tone ───────────────────────────────────────────────────────

def information_depth(window: InteractionWindow) -> InformationDepth:
    """How much detail the user keeps asking for."""
    markers = patterns.load_lexicon().get("information_depth") or []
    hits = patterns.count_patterns(window.user_text(), markers)
    if hits > DEPTH_COMPREHENSIVE:
        return InformationDepth.COMPREHENSIVE
    if hits > DEPTH_DETAILED:
        return InformationDepth.DETAILED
    return InformationDepth.CONCISE


def motivational_approach(profile: CognitiveProfile) -> MotivationalApproach:
    strength = profile.primary(EMOTIONAL_INTELLIGENCE)
    return MOTIVATION_BY_STRENGTH.get(strength, MotivationalApproach.SUPPORTIVE)


# ── Response strategy ────────────────────────────────────────────────────

def response_strategy(profile: CognitiveProfile) -> ResponseStrategy:
    fields: dict = {}
    for analyzer, primary, updates in STRATEGY_RULES:
        if profile.primary(analyzer) == primary:
            fields.update(updates)
    return ResponseStrategy(**fields)


# ── Profile shift ────────────────────────────────────────────────────────

def profile_shift(profile: CognitiveProfile, prior: CognitiveProfile | None) -> list[str]:
    """Analyzer names whose primary category changed since the prior profile."""
    if prior is None:
        return []
    return [
        name for name in ANALYZER_NAMES
        if name in prior.outputs and prior.primary(name) != profile.primary(name)
    ]


def predict(
    profile: CognitiveProfile,
    window: InteractionWindow,
    prior_profile: CognitiveProfile | None = None,
) -> PredictiveBundle:
    bundle = PredictiveBundle(
        next_likely_topics=predict_topics(window),
        tool_use_probability=tool_use_probability(window),
        engagement_level=engagement_level(profile, window),
        response_strategy=response_strategy(profile),
        profile_shift=profile_shift(profile, prior_profile),
        information_depth=information_depth(window),
        motivational_approach=motivational_approach(profile),
    )
    if bundle.profile_shift:
        logger.info("Profile shift detected: %s", ", ".join(bundle.profile_shift))
    return bundle
