"""Analyzer Set: eleven independent behavioral classifiers.

Every analyzer is a pure function ``(window, summary) -> AnalyzerOutput``.
They share no state, so a failure in one never affects the others; see
``run_analyzers``.

Keyword analyzers score user text against ``markers.yaml``.  Numeric
analyzers (learning velocity, cognitive load, attention span, topic
consistency) derive a scalar from message shape and bucket it into a label.
"""

from __future__ import annotations

import logging
import statistics
from typing import Callable

from cognition.engine import patterns
from cognition.engine.errors import AnalyzerFault
from cognition.models.interaction import EmotionalSummary, InteractionWindow
from cognition.models.profile import (
    ATTENTION_SPAN,
    COGNITIVE_LOAD,
    COMMUNICATION,
    CONVERSATION_DYNAMICS,
    DECISION_MAKING,
    EMOTIONAL_INTELLIGENCE,
    INFORMATION_PROCESSING,
    LEARNING_VELOCITY,
    PROBLEM_SOLVING,
    QUESTIONING,
    TOPIC_CONSISTENCY,
    AnalyzerOutput,
    CommunicationStyle,
    ConversationPattern,
    LearningTrend,
    Level,
    TopicConsistency,
)

logger = logging.getLogger(__name__)

Analyzer = Callable[[InteractionWindow, EmotionalSummary], AnalyzerOutput]

# Minimum user messages before a numeric analyzer leaves its middle label
MIN_LEARNING_MESSAGES = 5
MIN_ATTENTION_MESSAGES = 3
MIN_TOPIC_MESSAGES = 2

SHORT_MESSAGE_CHARS = 60
LONG_MESSAGE_CHARS = 200
TRANSACTIONAL_CHARS = 40

DIRECTIVE_VERBS = frozenset({"give", "show", "tell", "make", "write", "fix", "list", "explain"})


def _insufficient(analyzer: str, primary, has_data: bool, score: float | None = None) -> AnalyzerOutput:
    return AnalyzerOutput(
        analyzer=analyzer,
        primary=primary,
        confidence=0.3 if has_data else 0.2,
        score=score,
    )


# ═══════════════════════════════════════════════════════════════════════════
# Keyword analyzers
# ═══════════════════════════════════════════════════════════════════════════

def analyze_decision_making(window: InteractionWindow, summary: EmotionalSummary) -> AnalyzerOutput:
    scores = patterns.score_categories(window.user_text(), DECISION_MAKING)
    return patterns.classify(DECISION_MAKING, scores, patterns.normalization(DECISION_MAKING, 10.0))


def analyze_communication(window: InteractionWindow, summary: EmotionalSummary) -> AnalyzerOutput:
    """Keyword markers plus a message-length bonus for direct or detailed writers."""
    scores = patterns.score_categories(window.user_text(), COMMUNICATION)

    user_messages = window.user_messages
    if user_messages:
        avg_length = statistics.fmean(len(m.text) for m in user_messages)
        if avg_length < SHORT_MESSAGE_CHARS:
            key = CommunicationStyle.DIRECT.value
            scores[key] = scores.get(key, 0.0) + 1.5
        elif avg_length > LONG_MESSAGE_CHARS:
            key = CommunicationStyle.DETAILED.value
            scores[key] = scores.get(key, 0.0) + 3.0

    return patterns.classify(COMMUNICATION, scores, patterns.normalization(COMMUNICATION))


def analyze_information_processing(window: InteractionWindow, summary: EmotionalSummary) -> AnalyzerOutput:
    scores = patterns.score_categories(window.user_text(), INFORMATION_PROCESSING)
    return patterns.classify(
        INFORMATION_PROCESSING, scores, patterns.normalization(INFORMATION_PROCESSING)
    )


def analyze_problem_solving(window: InteractionWindow, summary: EmotionalSummary) -> AnalyzerOutput:
    scores = patterns.score_categories(window.user_text(), PROBLEM_SOLVING)
    return patterns.classify(PROBLEM_SOLVING, scores, patterns.normalization(PROBLEM_SOLVING, 6.0))


def analyze_questioning(window: InteractionWindow, summary: EmotionalSummary) -> AnalyzerOutput:
    """Only turns that actually ask something are scored."""
    questions = " ".join(m.text for m in window.user_messages if "?" in m.text).lower()
    scores = patterns.score_categories(questions, QUESTIONING)
    return patterns.classify(QUESTIONING, scores, patterns.normalization(QUESTIONING, 6.0))


def analyze_emotional_intelligence(window: InteractionWindow, summary: EmotionalSummary) -> AnalyzerOutput:
    """Indicator counts blended with the emotional log's stability.

    score = 0.7 * eq + 0.3 * stability, where eq grows with the number of
    empathy, self-awareness, social and resilience markers.
    """
    scores = patterns.score_categories(window.user_text(), EMOTIONAL_INTELLIGENCE)
    total = sum(scores.values())

    eq = min(0.9, total / 15.0) if total > 3 else 0.3
    score = 0.7 * eq + 0.3 * summary.stability_score
    confidence = min(0.85, 0.4 + 0.1 * total) if total > 0 else 0.2

    return AnalyzerOutput(
        analyzer=EMOTIONAL_INTELLIGENCE,
        primary=patterns.pick_primary(EMOTIONAL_INTELLIGENCE, scores),
        confidence=round(confidence, 4),
        sub_scores={k: round(v / total, 4) for k, v in scores.items()} if total else {},
        score=round(patterns.clamp(score), 4),
    )


# ═══════════════════════════════════════════════════════════════════════════
# Numeric analyzers
# ═══════════════════════════════════════════════════════════════════════════

def analyze_learning_velocity(window: InteractionWindow, summary: EmotionalSummary) -> AnalyzerOutput:
    """Trend of message complexity over the window."""
    user_messages = window.user_messages
    n = len(user_messages)
    if n < MIN_LEARNING_MESSAGES:
        return _insufficient(LEARNING_VELOCITY, LearningTrend.STABLE, n > 0, score=0.5)

    complexities = [patterns.message_complexity(m.text) for m in user_messages]
    rel_slope = patterns.relative_slope(complexities)

    if rel_slope > 0.05:
        trend = LearningTrend.ACCELERATING
    elif rel_slope < -0.05:
        trend = LearningTrend.DECELERATING
    else:
        trend = LearningTrend.STABLE

    return AnalyzerOutput(
        analyzer=LEARNING_VELOCITY,
        primary=trend,
        confidence=0.8 if n > 10 else 0.5,
        sub_scores={"relative_slope": round(rel_slope, 4)},
        score=round(patterns.clamp((rel_slope * 5 + 1) / 2, 0.1, 0.95), 4),
    )


def analyze_cognitive_load(window: InteractionWindow, summary: EmotionalSummary) -> AnalyzerOutput:
    user_messages = window.user_messages
    n = len(user_messages)
    if n == 0:
        return _insufficient(COGNITIVE_LOAD, Level.MEDIUM, False)

    lexicon = patterns.section(COGNITIVE_LOAD)
    text = window.user_text()
    question_density = min(1.0, sum(m.text.count("?") for m in user_messages) / n)
    complexity = patterns.count_patterns(text, lexicon.get("complexity") or [])
    hesitation = patterns.count_patterns(text, lexicon.get("hesitation") or [])

    load = min(1.0, question_density * 0.3 + complexity / n * 0.4 + hesitation / n * 0.3)
    if load > 0.7:
        level = Level.HIGH
    elif load > 0.4:
        level = Level.MEDIUM
    else:
        level = Level.LOW

    return AnalyzerOutput(
        analyzer=COGNITIVE_LOAD,
        primary=level,
        confidence=0.8 if n > 2 else 0.4,
        sub_scores={
            "question_density": round(question_density, 4),
            "complexity": float(complexity),
            "hesitation": float(hesitation),
        },
        score=round(load, 4),
    )


def analyze_attention_span(window: InteractionWindow, summary: EmotionalSummary) -> AnalyzerOutput:
    """Consistency and depth of message length."""
    user_messages = window.user_messages
    n = len(user_messages)
    if n < MIN_ATTENTION_MESSAGES:
        return _insufficient(ATTENTION_SPAN, Level.MEDIUM, n > 0, score=0.5)

    lengths = [len(m.text) for m in user_messages]
    mean = statistics.fmean(lengths)
    if mean > 0:
        consistency = max(0.1, 1.0 - statistics.pvariance(lengths) / mean ** 2)
    else:
        consistency = 0.1
    depth = min(1.0, mean / LONG_MESSAGE_CHARS)
    score = 0.5 * consistency + 0.5 * depth

    if score > 0.66:
        level = Level.HIGH
    elif score > 0.33:
        level = Level.MEDIUM
    else:
        level = Level.LOW

    return AnalyzerOutput(
        analyzer=ATTENTION_SPAN,
        primary=level,
        confidence=round(min(0.9, 0.4 + 0.05 * n), 4),
        sub_scores={"consistency": round(consistency, 4), "depth": round(depth, 4)},
        score=round(score, 4),
    )


def analyze_conversation_dynamics(window: InteractionWindow, summary: EmotionalSummary) -> AnalyzerOutput:
    """Shape of the exchange; the one analyzer that reads assistant turns.

    A long user reply to an assistant question counts as reflective.
    """
    scores: dict[str, float] = {}

    def bump(pattern: ConversationPattern, amount: float = 1.0) -> None:
        scores[pattern.value] = scores.get(pattern.value, 0.0) + amount

    previous = None
    for turn in window:
        if not turn.is_user:
            previous = turn
            continue
        text = turn.text.strip()
        words = text.lower().split()
        if "?" in text:
            bump(ConversationPattern.EXPLORATORY)
        if words and words[0].strip(",.!:") in DIRECTIVE_VERBS:
            bump(ConversationPattern.DIRECTIVE)
        if len(text) > LONG_MESSAGE_CHARS:
            bump(ConversationPattern.REFLECTIVE)
        elif len(text) < TRANSACTIONAL_CHARS:
            bump(ConversationPattern.TRANSACTIONAL)
        if previous is not None and previous.text.rstrip().endswith("?") and len(text) > 100:
            bump(ConversationPattern.REFLECTIVE)
        previous = turn

    return patterns.classify(CONVERSATION_DYNAMICS, scores, 6.0)


def analyze_topic_consistency(window: InteractionWindow, summary: EmotionalSummary) -> AnalyzerOutput:
    """Mean vocabulary overlap between consecutive user messages."""
    user_messages = window.user_messages
    n = len(user_messages)
    if n < MIN_TOPIC_MESSAGES:
        return _insufficient(TOPIC_CONSISTENCY, TopicConsistency.SHIFTING, n > 0)

    vocab = [patterns.content_words(m.text) for m in user_messages]
    overlaps = [patterns.jaccard(a, b) for a, b in zip(vocab, vocab[1:])]
    overlap = statistics.fmean(overlaps)

    if overlap > 0.25:
        consistency = TopicConsistency.FOCUSED
    elif overlap > 0.1:
        consistency = TopicConsistency.SHIFTING
    else:
        consistency = TopicConsistency.SCATTERED

    return AnalyzerOutput(
        analyzer=TOPIC_CONSISTENCY,
        primary=consistency,
        confidence=round(min(0.85, 0.3 + 0.1 * (n - 1)), 4),
        sub_scores={"mean_overlap": round(overlap, 4)},
        score=round(overlap, 4),
    )


# ═══════════════════════════════════════════════════════════════════════════
# Runner
# ═══════════════════════════════════════════════════════════════════════════

ANALYZERS: dict[str, Analyzer] = {
    DECISION_MAKING: analyze_decision_making,
    COMMUNICATION: analyze_communication,
    INFORMATION_PROCESSING: analyze_information_processing,
    EMOTIONAL_INTELLIGENCE: analyze_emotional_intelligence,
    LEARNING_VELOCITY: analyze_learning_velocity,
    COGNITIVE_LOAD: analyze_cognitive_load,
    ATTENTION_SPAN: analyze_attention_span,
    PROBLEM_SOLVING: analyze_problem_solving,
    CONVERSATION_DYNAMICS: analyze_conversation_dynamics,
    TOPIC_CONSISTENCY: analyze_topic_consistency,
    QUESTIONING: analyze_questioning,
}


def run_analyzers(
    window: InteractionWindow,
    summary: EmotionalSummary,
    analyzers: dict[str, Analyzer] | None = None,
) -> dict[str, AnalyzerOutput]:
    """Run every analyzer over the same inputs.

    A failing analyzer is logged as an AnalyzerFault and left out of the
    result; the aggregator fills the gap with that analyzer's default.
    """
    outputs: dict[str, AnalyzerOutput] = {}
    for name, fn in (analyzers or ANALYZERS).items():
        try:
            outputs[name] = fn(window, summary)
        except Exception as exc:
            fault = AnalyzerFault(name, exc)
            logger.warning("Analyzer fault: %s", fault)
    return outputs
