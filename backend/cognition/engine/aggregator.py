"""Profile Aggregator: merge analyzer outputs into one CognitiveProfile."""

from __future__ import annotations

import statistics

from cognition.models.profile import (
    ANALYZER_NAMES,
    REQUIRED_DIMENSIONS,
    AnalyzerOutput,
    CognitiveProfile,
    default_output,
)

# Interactions needed before data volume alone makes a profile fully reliable
RELIABILITY_SATURATION = 20


def aggregate(outputs: dict[str, AnalyzerOutput], data_points: int = 0) -> CognitiveProfile:
    """Fill missing analyzers with defaults and compute the summary scores.

    overall_confidence is the mean over the four core dimensions.
    reliability = min(1, data_points / 20 + consistency * 0.2), where
    consistency falls as analyzer confidences disagree.
    """
    merged = {name: outputs.get(name) or default_output(name) for name in ANALYZER_NAMES}

    overall = statistics.fmean(merged[name].confidence for name in REQUIRED_DIMENSIONS)

    confidences = [out.confidence for out in merged.values()]
    consistency = max(0.0, 1.0 - statistics.pvariance(confidences))
    reliability = min(1.0, data_points / RELIABILITY_SATURATION + consistency * 0.2)

    return CognitiveProfile(
        outputs=merged,
        overall_confidence=round(overall, 4),
        reliability=round(reliability, 4),
        data_points=data_points,
    )


def default_profile() -> CognitiveProfile:
    """The minimal profile served before any analysis exists."""
    return aggregate({}, data_points=0)
