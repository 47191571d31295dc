"""Derived profile models: category enums, analyzer outputs, composite
profile, predictive bundle and the cache entry that carries them.

Every category set is a closed ``str`` enum.  Declaration order doubles as the
tie-break priority when two categories score the same, so the default member
is always declared last.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from enum import Enum
from typing import NamedTuple


# ═══════════════════════════════════════════════════════════════════════════
# Category enums
# ═══════════════════════════════════════════════════════════════════════════

class DecisionStyle(str, Enum):
    SYSTEMATIC = "systematic"
    ANALYTICAL = "analytical"
    INTUITIVE = "intuitive"
    COLLABORATIVE = "collaborative"
    CREATIVE = "creative"
    DEVELOPING = "developing"


class CommunicationStyle(str, Enum):
    DIRECT = "direct"
    CASUAL = "casual"
    TECHNICAL = "technical"
    EMOTIONAL = "emotional"
    DETAILED = "detailed"
    DEVELOPING = "developing"


class ProcessingStyle(str, Enum):
    SEQUENTIAL = "sequential"
    HOLISTIC = "holistic"
    VISUAL = "visual"
    DETAIL_ORIENTED = "detail_oriented"
    BIG_PICTURE = "big_picture"
    DEVELOPING = "developing"


class EmotionalStrength(str, Enum):
    EMPATHETIC = "empathetic"
    SELF_AWARE = "self_aware"
    SOCIAL = "social"
    RESILIENT = "resilient"
    DEVELOPING = "developing"


class ProblemSolvingApproach(str, Enum):
    SYSTEMATIC = "systematic"
    CREATIVE = "creative"
    ANALYTICAL = "analytical"
    COLLABORATIVE = "collaborative"
    DEVELOPING = "developing"


class ConversationPattern(str, Enum):
    EXPLORATORY = "exploratory"
    DIRECTIVE = "directive"
    REFLECTIVE = "reflective"
    TRANSACTIONAL = "transactional"
    DEVELOPING = "developing"


class QuestioningStyle(str, Enum):
    PRACTICAL = "practical"
    EXPLORATORY = "exploratory"
    CLARIFYING = "clarifying"
    FACTUAL = "factual"
    DEVELOPING = "developing"


class LearningTrend(str, Enum):
    ACCELERATING = "accelerating"
    STABLE = "stable"
    DECELERATING = "decelerating"


class TopicConsistency(str, Enum):
    FOCUSED = "focused"
    SHIFTING = "shifting"
    SCATTERED = "scattered"


class Level(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


# ═══════════════════════════════════════════════════════════════════════════
# Analyzer dimensions
# ═══════════════════════════════════════════════════════════════════════════

DECISION_MAKING = "decision_making"
COMMUNICATION = "communication"
INFORMATION_PROCESSING = "information_processing"
EMOTIONAL_INTELLIGENCE = "emotional_intelligence"
LEARNING_VELOCITY = "learning_velocity"
COGNITIVE_LOAD = "cognitive_load"
ATTENTION_SPAN = "attention_span"
PROBLEM_SOLVING = "problem_solving"
CONVERSATION_DYNAMICS = "conversation_dynamics"
TOPIC_CONSISTENCY = "topic_consistency"
QUESTIONING = "questioning"


class Dimension(NamedTuple):
    category_type: type[Enum]
    default: Enum


DIMENSIONS: dict[str, Dimension] = {
    DECISION_MAKING: Dimension(DecisionStyle, DecisionStyle.DEVELOPING),
    COMMUNICATION: Dimension(CommunicationStyle, CommunicationStyle.DEVELOPING),
    INFORMATION_PROCESSING: Dimension(ProcessingStyle, ProcessingStyle.DEVELOPING),
    EMOTIONAL_INTELLIGENCE: Dimension(EmotionalStrength, EmotionalStrength.DEVELOPING),
    LEARNING_VELOCITY: Dimension(LearningTrend, LearningTrend.STABLE),
    COGNITIVE_LOAD: Dimension(Level, Level.MEDIUM),
    ATTENTION_SPAN: Dimension(Level, Level.MEDIUM),
    PROBLEM_SOLVING: Dimension(ProblemSolvingApproach, ProblemSolvingApproach.DEVELOPING),
    CONVERSATION_DYNAMICS: Dimension(ConversationPattern, ConversationPattern.DEVELOPING),
    TOPIC_CONSISTENCY: Dimension(TopicConsistency, TopicConsistency.SHIFTING),
    QUESTIONING: Dimension(QuestioningStyle, QuestioningStyle.DEVELOPING),
}

ANALYZER_NAMES: tuple[str, ...] = tuple(DIMENSIONS)

# Dimensions averaged into overall_confidence
REQUIRED_DIMENSIONS: tuple[str, ...] = (
    DECISION_MAKING,
    COMMUNICATION,
    INFORMATION_PROCESSING,
    EMOTIONAL_INTELLIGENCE,
)

DEFAULT_OUTPUT_CONFIDENCE = 0.2


# ═══════════════════════════════════════════════════════════════════════════
# Analyzer output + composite profile
# ═══════════════════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class AnalyzerOutput:
    analyzer: str
    primary: Enum
    confidence: float
    sub_scores: dict[str, float] = field(default_factory=dict)
    score: float | None = None  # scalar for numeric analyzers

    def __post_init__(self):
        if not 0.0 <= self.confidence <= 1.0:
            raise ValueError(f"confidence out of range for {self.analyzer}: {self.confidence}")

    @property
    def label(self) -> str:
        return self.primary.value

    def to_dict(self) -> dict:
        return {
            "primary": self.primary.value,
            "confidence": self.confidence,
            "sub_scores": dict(self.sub_scores),
            "score": self.score,
        }

    @classmethod
    def from_dict(cls, analyzer: str, data: dict) -> AnalyzerOutput:
        dim = DIMENSIONS[analyzer]
        score = data.get("score")
        return cls(
            analyzer=analyzer,
            primary=dim.category_type(data["primary"]),
            confidence=float(data.get("confidence", 0.0)),
            sub_scores={k: float(v) for k, v in (data.get("sub_scores") or {}).items()},
            score=float(score) if score is not None else None,
        )


def default_output(analyzer: str, confidence: float = DEFAULT_OUTPUT_CONFIDENCE) -> AnalyzerOutput:
    """Low-confidence placeholder used for empty input or a failed analyzer."""
    return AnalyzerOutput(
        analyzer=analyzer,
        primary=DIMENSIONS[analyzer].default,
        confidence=confidence,
    )


@dataclass(frozen=True)
class CognitiveProfile:
    outputs: dict[str, AnalyzerOutput]
    overall_confidence: float
    reliability: float = 0.0
    data_points: int = 0

    def __getitem__(self, analyzer: str) -> AnalyzerOutput:
        return self.outputs.get(analyzer) or default_output(analyzer)

    def primary(self, analyzer: str) -> Enum:
        return self[analyzer].primary

    @property
    def decision_making(self) -> AnalyzerOutput:
        return self[DECISION_MAKING]

    @property
    def communication(self) -> AnalyzerOutput:
        return self[COMMUNICATION]

    @property
    def information_processing(self) -> AnalyzerOutput:
        return self[INFORMATION_PROCESSING]

    @property
    def emotional_intelligence(self) -> AnalyzerOutput:
        return self[EMOTIONAL_INTELLIGENCE]

    def to_dict(self) -> dict:
        return {
            "outputs": {name: out.to_dict() for name, out in self.outputs.items()},
            "overall_confidence": self.overall_confidence,
            "reliability": self.reliability,
            "data_points": self.data_points,
        }

    @classmethod
    def from_dict(cls, data: dict) -> CognitiveProfile:
        outputs = {
            name: AnalyzerOutput.from_dict(name, out)
            for name, out in (data.get("outputs") or {}).items()
            if name in DIMENSIONS
        }
        return cls(
            outputs=outputs,
            overall_confidence=float(data.get("overall_confidence", 0.0)),
            reliability=float(data.get("reliability", 0.0)),
            data_points=int(data.get("data_points", 0)),
        )


# ═══════════════════════════════════════════════════════════════════════════
# Predictive bundle
# ═══════════════════════════════════════════════════════════════════════════

class ResponseLength(str, Enum):
    SHORT = "short"
    MEDIUM = "medium"
    LONG = "long"


class ResponseStructure(str, Enum):
    STRUCTURED = "structured"
    MIXED = "mixed"
    EXAMPLE_DRIVEN = "example_driven"
    NARRATIVE = "narrative"


class TechnicalLevel(str, Enum):
    BASIC = "basic"
    ADAPTIVE = "adaptive"
    ADVANCED = "advanced"


class InteractionStyle(str, Enum):
    SUPPORTIVE = "supportive"
    FOLLOW_UP = "follow_up"
    CONVERSATIONAL = "conversational"
    COLLABORATIVE = "collaborative"
    EMPATHETIC = "empathetic"
    DIRECT = "direct"


class InformationDepth(str, Enum):
    CONCISE = "concise"
    DETAILED = "detailed"
    COMPREHENSIVE = "comprehensive"


class MotivationalApproach(str, Enum):
    EMPATHETIC = "empathetic"
    ENCOURAGING = "encouraging"
    SUPPORTIVE = "supportive"


@dataclass(frozen=True)
class ResponseStrategy:
    length: ResponseLength = ResponseLength.MEDIUM
    structure: ResponseStructure = ResponseStructure.MIXED
    technical_level: TechnicalLevel = TechnicalLevel.ADAPTIVE
    interaction_style: InteractionStyle = InteractionStyle.SUPPORTIVE

    def to_dict(self) -> dict:
        return {
            "length": self.length.value,
            "structure": self.structure.value,
            "technical_level": self.technical_level.value,
            "interaction_style": self.interaction_style.value,
        }

    @classmethod
    def from_dict(cls, data: dict) -> ResponseStrategy:
        return cls(
            length=ResponseLength(data.get("length", ResponseLength.MEDIUM.value)),
            structure=ResponseStructure(data.get("structure", ResponseStructure.MIXED.value)),
            technical_level=TechnicalLevel(data.get("technical_level", TechnicalLevel.ADAPTIVE.value)),
            interaction_style=InteractionStyle(
                data.get("interaction_style", InteractionStyle.SUPPORTIVE.value)
            ),
        )


@dataclass(frozen=True)
class PredictiveBundle:
    next_likely_topics: list[str] = field(default_factory=list)
    tool_use_probability: float = 0.0
    engagement_level: Level = Level.MEDIUM
    response_strategy: ResponseStrategy = field(default_factory=ResponseStrategy)
    profile_shift: list[str] = field(default_factory=list)
    information_depth: InformationDepth = InformationDepth.CONCISE
    motivational_approach: MotivationalApproach = MotivationalApproach.SUPPORTIVE

    @classmethod
    def default(cls) -> PredictiveBundle:
        """Conservative bundle served before any analysis has completed."""
        return cls()

    def to_dict(self) -> dict:
        return {
            "next_likely_topics": list(self.next_likely_topics),
            "tool_use_probability": self.tool_use_probability,
            "engagement_level": self.engagement_level.value,
            "response_strategy": self.response_strategy.to_dict(),
            "profile_shift": list(self.profile_shift),
            "information_depth": self.information_depth.value,
            "motivational_approach": self.motivational_approach.value,
        }

    @classmethod
    def from_dict(cls, data: dict) -> PredictiveBundle:
        return cls(
            next_likely_topics=list(data.get("next_likely_topics") or []),
            tool_use_probability=float(data.get("tool_use_probability", 0.0)),
            engagement_level=Level(data.get("engagement_level", Level.MEDIUM.value)),
            response_strategy=ResponseStrategy.from_dict(data.get("response_strategy") or {}),
            profile_shift=list(data.get("profile_shift") or []),
            information_depth=InformationDepth(
                data.get("information_depth", InformationDepth.CONCISE.value)
            ),
            motivational_approach=MotivationalApproach(
                data.get("motivational_approach", MotivationalApproach.SUPPORTIVE.value)
            ),
        )


@dataclass(frozen=True)
class ToolUsageSignal:
    """Whether the response generator should reach for external tools."""
    should_use_tools: bool
    probability: float
    matched: list[str] = field(default_factory=list)


# ═══════════════════════════════════════════════════════════════════════════
# Cache entry
# ═══════════════════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class CacheEntry:
    user_id: str
    profile: CognitiveProfile
    bundle: PredictiveBundle
    computed_at: float  # epoch seconds, stamped when the analysis started
    ttl_seconds: int

    def age(self, now: float) -> float:
        return now - self.computed_at

    def is_fresh(self, now: float) -> bool:
        return self.age(now) <= self.ttl_seconds

    def to_dict(self) -> dict:
        return {
            "user_id": self.user_id,
            "profile": self.profile.to_dict(),
            "bundle": self.bundle.to_dict(),
            "computed_at": self.computed_at,
            "ttl_seconds": self.ttl_seconds,
        }

    @classmethod
    def from_dict(cls, data: dict) -> CacheEntry:
        return cls(
            user_id=str(data["user_id"]),
            profile=CognitiveProfile.from_dict(data["profile"]),
            bundle=PredictiveBundle.from_dict(data["bundle"]),
            computed_at=float(data["computed_at"]),
            ttl_seconds=int(data["ttl_seconds"]),
        )

    def to_json(self) -> str:
        return json.dumps(self.to_dict())

    @classmethod
    def from_json(cls, payload: str | bytes) -> CacheEntry:
        return cls.from_dict(json.loads(payload))
