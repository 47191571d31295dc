"""Tests for the Predictive Module and prompt guidance."""

from __future__ import annotations

import pytest

from cognition.engine.aggregator import aggregate, default_profile
from cognition.engine.guidance import build_guidance
from cognition.engine.predictive import (
    engagement_level,
    information_depth,
    motivational_approach,
    predict,
    predict_topics,
    profile_shift,
    response_strategy,
    tool_usage_signal,
    tool_use_probability,
)
from cognition.models.interaction import InteractionWindow
from cognition.models.profile import (
    COGNITIVE_LOAD,
    COMMUNICATION,
    DECISION_MAKING,
    EMOTIONAL_INTELLIGENCE,
    INFORMATION_PROCESSING,
    AnalyzerOutput,
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
)


def _profile(communication=None, decision=None, processing=None, confidence=0.7, **extra):
    outputs = {}
    if communication is not None:
        outputs[COMMUNICATION] = AnalyzerOutput(COMMUNICATION, communication, confidence)
    if decision is not None:
        outputs[DECISION_MAKING] = AnalyzerOutput(DECISION_MAKING, decision, confidence)
    if processing is not None:
        outputs[INFORMATION_PROCESSING] = AnalyzerOutput(INFORMATION_PROCESSING, processing, confidence)
    outputs.update(extra)
    return aggregate(outputs, data_points=10)


# ═══════════════════════════════════════════════════════════════════════════
# Topics + tool use
# ═══════════════════════════════════════════════════════════════════════════

class TestTopics:
    def test_most_recent_message_first(self, make_window):
        window = make_window("I have a bug in my code", "let's plan the roadmap")
        assert predict_topics(window) == ["planning", "technical_implementation", "problem_solving"]

    def test_capped_at_three(self, make_window):
        window = make_window(
            "I want to learn more",
            "I have a bug in my code",
            "let's plan the roadmap",
        )
        assert len(predict_topics(window)) == 3
        assert "learning" not in predict_topics(window)

    def test_no_duplicates(self, make_window):
        window = make_window("fix the bug", "another error", "still broken")
        assert predict_topics(window) == ["problem_solving"]

    def test_empty_window(self):
        assert predict_topics(InteractionWindow()) == []


class TestToolUseProbability:
    def test_counts_marker_hits_per_message(self, make_window):
        window = make_window("what's the latest news?", "thanks", "ok", "search for flights")
        assert tool_use_probability(window) == pytest.approx(0.75)

    def test_several_markers_in_one_message(self, make_window):
        window = make_window("what is the latest news", "ok", "fine", "thanks")
        assert tool_use_probability(window) == pytest.approx(0.75)

    def test_repeated_marker_counts_each_time(self, make_window):
        window = make_window("search, search again", "ok", "fine", "thanks", "cool")
        assert tool_use_probability(window) == pytest.approx(0.4)

    def test_capped(self, make_window):
        window = make_window("latest news", "weather right now")
        assert tool_use_probability(window) == 0.9

    def test_empty_window(self):
        assert tool_use_probability(InteractionWindow()) == 0.0


class TestToolUsageSignal:
    def test_strong_message_triggers_tools(self):
        signal = tool_usage_signal("what's the latest news today?")
        assert signal.should_use_tools
        assert signal.matched == ["latest", "today", "news"]
        assert signal.probability == pytest.approx(0.9)

    def test_weak_message_needs_habit(self):
        assert not tool_usage_signal("search this", 0.0).should_use_tools
        assert tool_usage_signal("search this", 0.7).should_use_tools

    def test_habit_alone_is_not_enough(self):
        signal = tool_usage_signal("hello there", 0.9)
        assert not signal.should_use_tools
        assert signal.probability == 0.0


# ═══════════════════════════════════════════════════════════════════════════
# Engagement + strategy
# ═══════════════════════════════════════════════════════════════════════════

class TestEngagement:
    def test_default_profile_is_low(self):
        assert engagement_level(default_profile(), InteractionWindow()) == Level.LOW

    def test_confident_talkative_user_is_high(self, make_window):
        from cognition.models.profile import LEARNING_VELOCITY, LearningTrend

        profile = _profile(
            communication=CommunicationStyle.CASUAL,
            confidence=0.9,
            **{
                LEARNING_VELOCITY: AnalyzerOutput(
                    LEARNING_VELOCITY, LearningTrend.ACCELERATING, 0.8, score=0.9
                ),
                EMOTIONAL_INTELLIGENCE: AnalyzerOutput(
                    EMOTIONAL_INTELLIGENCE, EmotionalStrength.SOCIAL, 0.8, score=0.7
                ),
            },
        )
        window = make_window(*["hello"] * 20)
        assert engagement_level(profile, window) == Level.HIGH


class TestDepthAndTone:
    def test_concise_without_depth_markers(self, make_window):
        assert information_depth(make_window("hi", "ok thanks")) == InformationDepth.CONCISE

    def test_detailed(self, make_window):
        window = make_window("can you explain that in detail?")
        assert information_depth(window) == InformationDepth.DETAILED

    def test_comprehensive(self, make_window):
        window = make_window("explain it in detail", "I want a thorough, deep answer")
        assert information_depth(window) == InformationDepth.COMPREHENSIVE

    def test_empathetic_strength(self):
        profile = _profile(**{
            EMOTIONAL_INTELLIGENCE: AnalyzerOutput(
                EMOTIONAL_INTELLIGENCE, EmotionalStrength.EMPATHETIC, 0.7
            ),
        })
        assert motivational_approach(profile) == MotivationalApproach.EMPATHETIC

    def test_resilient_strength_is_encouraging(self):
        profile = _profile(**{
            EMOTIONAL_INTELLIGENCE: AnalyzerOutput(
                EMOTIONAL_INTELLIGENCE, EmotionalStrength.RESILIENT, 0.7
            ),
        })
        assert motivational_approach(profile) == MotivationalApproach.ENCOURAGING

    def test_supportive_by_default(self):
        assert motivational_approach(default_profile()) == MotivationalApproach.SUPPORTIVE

    def test_predict_carries_depth_and_tone(self, make_window):
        bundle = predict(default_profile(), make_window("please explain the details"))
        assert bundle.information_depth == InformationDepth.DETAILED
        assert bundle.motivational_approach == MotivationalApproach.SUPPORTIVE

    def test_bundle_without_depth_fields_loads_defaults(self):
        data = PredictiveBundle().to_dict()
        del data["information_depth"], data["motivational_approach"]
        bundle = PredictiveBundle.from_dict(data)
        assert bundle.information_depth == InformationDepth.CONCISE
        assert bundle.motivational_approach == MotivationalApproach.SUPPORTIVE


class TestResponseStrategy:
    def test_defaults(self):
        assert response_strategy(default_profile()) == ResponseStrategy()

    def test_direct_systematic(self):
        strategy = response_strategy(
            _profile(communication=CommunicationStyle.DIRECT, decision=DecisionStyle.SYSTEMATIC)
        )
        assert strategy.length == ResponseLength.SHORT
        assert strategy.structure == ResponseStructure.STRUCTURED
        assert strategy.interaction_style == InteractionStyle.FOLLOW_UP
        assert strategy.technical_level == TechnicalLevel.ADAPTIVE

    def test_later_dimension_overrides(self):
        strategy = response_strategy(
            _profile(communication=CommunicationStyle.DIRECT, decision=DecisionStyle.ANALYTICAL)
        )
        assert strategy.length == ResponseLength.LONG
        assert strategy.technical_level == TechnicalLevel.ADVANCED

    def test_visual_processing_prefers_examples(self):
        strategy = response_strategy(_profile(processing=ProcessingStyle.VISUAL))
        assert strategy.structure == ResponseStructure.EXAMPLE_DRIVEN


class TestProfileShift:
    def test_no_prior(self):
        assert profile_shift(default_profile(), None) == []

    def test_changed_dimensions(self):
        prior = _profile(decision=DecisionStyle.SYSTEMATIC)
        current = _profile(decision=DecisionStyle.ANALYTICAL)
        assert profile_shift(current, prior) == [DECISION_MAKING]

    def test_predict_carries_shift(self, make_window):
        prior = _profile(decision=DecisionStyle.SYSTEMATIC)
        current = _profile(decision=DecisionStyle.ANALYTICAL)
        bundle = predict(current, make_window("hi"), prior)
        assert bundle.profile_shift == [DECISION_MAKING]


# ═══════════════════════════════════════════════════════════════════════════
# Guidance
# ═══════════════════════════════════════════════════════════════════════════

class TestGuidance:
    def test_thin_profile_gives_no_guidance(self):
        assert build_guidance(default_profile(), PredictiveBundle.default()) == ""

    def test_confident_profile(self):
        profile = _profile(
            communication=CommunicationStyle.TECHNICAL,
            decision=DecisionStyle.ANALYTICAL,
            processing=ProcessingStyle.DETAIL_ORIENTED,
            **{COGNITIVE_LOAD: AnalyzerOutput(COGNITIVE_LOAD, Level.HIGH, 0.8, score=0.9)},
        )
        bundle = PredictiveBundle(next_likely_topics=["technical_implementation"])
        text = build_guidance(profile, bundle)
        assert "**USER PROFILE:** technical communication" in text
        assert "detail oriented processing" in text
        assert "overloaded" in text
        assert "**LIKELY TOPICS:** technical implementation." in text

    def test_depth_and_tone_line(self):
        profile = _profile(communication=CommunicationStyle.DIRECT, decision=DecisionStyle.SYSTEMATIC)
        bundle = PredictiveBundle(
            information_depth=InformationDepth.DETAILED,
            motivational_approach=MotivationalApproach.EMPATHETIC,
        )
        text = build_guidance(profile, bundle)
        assert "**DEPTH AND TONE:** detailed answers, empathetic tone." in text
