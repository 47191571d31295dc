"""Input models for the analysis pipeline.

Interactions and emotional summaries are read fresh on every run; nothing
here is mutated by the engine.
"""

from __future__ import annotations

import json
import statistics
from collections import Counter
from dataclasses import dataclass, asdict
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Sequence

NEUTRAL_EMOTION = "neutral"
DEFAULT_INTENSITY = 5


class Actor(str, Enum):
    USER = "user"
    ASSISTANT = "assistant"


@dataclass(frozen=True)
class Interaction:
    actor: Actor
    text: str
    timestamp: str = ""  # ISO 8601

    @property
    def is_user(self) -> bool:
        return self.actor == Actor.USER

    @property
    def moment(self) -> datetime | None:
        """Parsed timestamp, or None when missing/unparseable."""
        if not self.timestamp:
            return None
        try:
            dt = datetime.fromisoformat(self.timestamp.replace("Z", "+00:00"))
        except (ValueError, TypeError):
            return None
        if dt.tzinfo is None:
            dt = dt.replace(tzinfo=timezone.utc)
        return dt

    def to_dict(self) -> dict:
        d = asdict(self)
        d["actor"] = self.actor.value
        return d

    @classmethod
    def from_dict(cls, data: dict) -> Interaction:
        return cls(
            actor=Actor(data.get("actor", Actor.USER.value)),
            text=str(data.get("text", "")),
            timestamp=str(data.get("timestamp", "")),
        )

    def to_json(self) -> str:
        return json.dumps(self.to_dict())

    @classmethod
    def from_json(cls, payload: str) -> Interaction:
        return cls.from_dict(json.loads(payload))


@dataclass(frozen=True)
class InteractionWindow:
    """Most-recent-N interactions, ordered oldest first."""

    interactions: tuple[Interaction, ...] = ()

    @classmethod
    def of(cls, interactions: Sequence[Interaction], limit: int | None = None) -> InteractionWindow:
        items = tuple(interactions)
        if limit is not None and len(items) > limit:
            items = items[-limit:]
        return cls(interactions=items)

    @classmethod
    def from_texts(cls, texts: Sequence[str], actor: Actor = Actor.USER) -> InteractionWindow:
        return cls.of([Interaction(actor=actor, text=t) for t in texts])

    def __len__(self) -> int:
        return len(self.interactions)

    def __iter__(self):
        return iter(self.interactions)

    @property
    def is_empty(self) -> bool:
        return not self.interactions

    @property
    def user_messages(self) -> list[Interaction]:
        return [i for i in self.interactions if i.is_user]

    @property
    def assistant_messages(self) -> list[Interaction]:
        return [i for i in self.interactions if not i.is_user]

    def user_text(self) -> str:
        """All user-authored text, lower-cased and space-joined."""
        return " ".join(m.text for m in self.user_messages).lower()


@dataclass(frozen=True)
class EmotionalSummary:
    dominant_label: str = NEUTRAL_EMOTION
    intensity_variance: float = 0.0
    stability_score: float = 0.5

    @classmethod
    def neutral(cls) -> EmotionalSummary:
        return cls()

    @classmethod
    def from_log(cls, entries: Sequence[dict[str, Any]]) -> EmotionalSummary:
        """Summarize an emotional log of ``{"emotion": str, "intensity": int}`` entries."""
        if not entries:
            return cls.neutral()

        intensities = [float(e.get("intensity") or DEFAULT_INTENSITY) for e in entries]
        variance = statistics.pvariance(intensities)

        # Counter preserves first-seen order, so ties go to the earliest emotion
        counts = Counter(e.get("emotion") or NEUTRAL_EMOTION for e in entries)
        dominant = max(counts, key=lambda k: counts[k])

        return cls(
            dominant_label=dominant,
            intensity_variance=round(variance, 4),
            stability_score=round(max(0.1, 1.0 - variance / 10.0), 4),
        )

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> EmotionalSummary:
        return cls(
            dominant_label=str(data.get("dominant_label", NEUTRAL_EMOTION)),
            intensity_variance=float(data.get("intensity_variance", 0.0)),
            stability_score=float(data.get("stability_score", 0.5)),
        )
