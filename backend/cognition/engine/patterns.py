"""Keyword lexicon loading and the shared scoring helpers for analyzers."""

from __future__ import annotations

import re
import statistics
from functools import lru_cache
from pathlib import Path
from typing import Any, Sequence

import yaml

from cognition.config.settings import MARKERS_FILE
from cognition.models.profile import DIMENSIONS, AnalyzerOutput

MIN_SIGNAL = 2.0
FLOOR_CONFIDENCE = 0.25
CEILING_CONFIDENCE = 0.95

_SUFFIXES = r"(?:s|es|d|ed|ing)?"


# ---------------------------------------------------------------------------
# Lexicon
# ---------------------------------------------------------------------------

@lru_cache(maxsize=4)
def load_lexicon(path: Path = MARKERS_FILE) -> dict[str, Any]:
    with open(path) as f:
        return yaml.safe_load(f)


def section(name: str) -> dict[str, Any]:
    return load_lexicon().get(name) or {}


@lru_cache(maxsize=None)
def compile_pattern(phrase: str) -> re.Pattern:
    """Whole-word match, tolerating plural and verb suffixes."""
    return re.compile(rf"\b{re.escape(phrase.lower())}{_SUFFIXES}\b")


def count_patterns(text: str, patterns: Sequence[str]) -> int:
    """Occurrences of every pattern in ``text`` (expected lower-cased)."""
    if not text:
        return 0
    return sum(len(compile_pattern(p).findall(text)) for p in patterns)


def matched_patterns(text: str, patterns: Sequence[str]) -> list[str]:
    return [p for p in patterns if text and compile_pattern(p).search(text)]


def score_categories(text: str, section_name: str) -> dict[str, float]:
    """Weighted hit count per category of a lexicon section."""
    categories = section(section_name).get("categories") or {}
    scores: dict[str, float] = {}
    for category, spec in categories.items():
        hits = count_patterns(text, spec.get("patterns") or [])
        if hits:
            scores[category] = hits * float(spec.get("weight", 1.0))
    return scores


def normalization(section_name: str, default: float = 8.0) -> float:
    return float(section(section_name).get("normalization", default))


# ---------------------------------------------------------------------------
# Classification
# ---------------------------------------------------------------------------

def pick_primary(analyzer: str, scores: dict[str, float]):
    """Highest-scoring category; ties go to the one declared first."""
    dim = DIMENSIONS[analyzer]
    best, best_score = dim.default, 0.0
    for member in dim.category_type:
        if member is dim.default:
            continue
        value = scores.get(member.value, 0.0)
        if value > best_score:
            best, best_score = member, value
    return best


def keyword_confidence(total: float, norm: float) -> float:
    if total < MIN_SIGNAL:
        return FLOOR_CONFIDENCE
    return min(CEILING_CONFIDENCE, max(FLOOR_CONFIDENCE, total / norm))


def classify(analyzer: str, scores: dict[str, float], norm: float) -> AnalyzerOutput:
    """Turn raw category scores into an AnalyzerOutput."""
    total = sum(scores.values())
    if total <= 0:
        return AnalyzerOutput(
            analyzer=analyzer,
            primary=DIMENSIONS[analyzer].default,
            confidence=FLOOR_CONFIDENCE,
        )
    return AnalyzerOutput(
        analyzer=analyzer,
        primary=pick_primary(analyzer, scores),
        confidence=round(keyword_confidence(total, norm), 4),
        sub_scores={k: round(v / total, 4) for k, v in scores.items() if v > 0},
    )


# ---------------------------------------------------------------------------
# Numeric helpers
# ---------------------------------------------------------------------------

_LONG_WORD = re.compile(r"\w{7,}")
_WORD = re.compile(r"\w+")


def message_complexity(text: str) -> float:
    """Length plus a bonus for long words."""
    return float(len(text) + 2 * len(_LONG_WORD.findall(text)))


def content_words(text: str, min_length: int = 5) -> set[str]:
    return {w for w in _WORD.findall(text.lower()) if len(w) >= min_length}


def relative_slope(values: Sequence[float]) -> float:
    """Least-squares slope over index, divided by the mean."""
    if len(values) < 2:
        return 0.0
    mean = statistics.fmean(values)
    if mean == 0:
        return 0.0
    slope = statistics.linear_regression(range(len(values)), values).slope
    return slope / mean


def jaccard(a: set[str], b: set[str]) -> float:
    union = a | b
    if not union:
        return 0.0
    return len(a & b) / len(union)


def clamp(value: float, low: float = 0.0, high: float = 1.0) -> float:
    return max(low, min(high, value))
