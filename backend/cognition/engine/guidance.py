"""Compact, human-readable response guidance for a language-model prompt."""

from __future__ import annotations

from cognition.models.profile import (
    COGNITIVE_LOAD,
    COMMUNICATION,
    DECISION_MAKING,
    EMOTIONAL_INTELLIGENCE,
    INFORMATION_PROCESSING,
    CognitiveProfile,
    Level,
    PredictiveBundle,
)

# Below this overall confidence the profile is too thin to steer responses
MIN_GUIDANCE_CONFIDENCE = 0.3

_LOAD_HINTS = {
    Level.HIGH: "user seems overloaded: keep it simple and break ideas into small steps",
    Level.LOW: "user has headroom for depth and nuance",
}


def build_guidance(profile: CognitiveProfile, bundle: PredictiveBundle) -> str:
    """Render profile + bundle as a few labelled lines.

    Returns an empty string when the profile is not confident enough to be
    worth including.
    """
    if profile.overall_confidence < MIN_GUIDANCE_CONFIDENCE:
        return ""

    strategy = bundle.response_strategy
    lines = [
        "**USER PROFILE:** {} communication, {} decisions, {} processing.".format(
            profile.primary(COMMUNICATION).value,
            profile.primary(DECISION_MAKING).value,
            profile.primary(INFORMATION_PROCESSING).value.replace("_", " "),
        ),
        "**RESPONSE GUIDANCE:** length: {}, structure: {}, technical level: {}, style: {}.".format(
            strategy.length.value,
            strategy.structure.value.replace("_", " "),
            strategy.technical_level.value,
            strategy.interaction_style.value.replace("_", " "),
        ),
        "**DEPTH AND TONE:** {} answers, {} tone.".format(
            bundle.information_depth.value,
            bundle.motivational_approach.value,
        ),
    ]

    state = [f"{bundle.engagement_level.value} engagement"]
    load_hint = _LOAD_HINTS.get(profile.primary(COGNITIVE_LOAD))
    if load_hint:
        state.append(load_hint)
    strength = profile.primary(EMOTIONAL_INTELLIGENCE).value.replace("_", " ")
    if strength != "developing":
        state.append(f"emotionally {strength}")
    lines.append("**CURRENT STATE:** " + "; ".join(state) + ".")

    if bundle.next_likely_topics:
        topics = ", ".join(t.replace("_", " ") for t in bundle.next_likely_topics)
        lines.append(f"**LIKELY TOPICS:** {topics}.")

    return "\n".join(lines)
