"""Voice input data models.

Defines the parse result and the intermediate match types for the
voice capture pipeline:
    TranscriptionResult -> (resolver matches) -> ParsedVoiceInput -> Task
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass, field
from datetime import date, time
from enum import Enum
from typing import Any

from tasktracker.voice.config import ConfidenceWeights
from tasktracker.voice.confidence import blend_confidence

UNTITLED_TASK = "Untitled task"


class Priority(str, Enum):
    """Task priority levels a caller can persist.

    The parser only ever asserts URGENT, HIGH or LOW. MEDIUM is the
    caller's default when no priority signal was spoken.
    """

    URGENT = "urgent"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


@dataclass(frozen=True)
class TextSpan:
    """A matched phrase and its position in the cleaned utterance."""

    start: int
    end: int
    text: str

    def overlaps(self, other: TextSpan) -> bool:
        return self.start < other.end and other.start < self.end

    def __len__(self) -> int:
        return self.end - self.start


@dataclass(frozen=True)
class DateMatch:
    """A resolved date expression."""

    value: date
    confidence: float
    span: TextSpan
    rank: int  # precedence category, lower wins


@dataclass(frozen=True)
class TimeMatch:
    """A resolved clock time expression."""

    value: time
    confidence: float
    span: TextSpan
    rank: int
    is_period: bool = False  # "morning", "evening", ...


@dataclass(frozen=True)
class CategoryMatch:
    category: str
    confidence: float
    triggers: tuple[str, ...] = ()


@dataclass(frozen=True)
class PriorityMatch:
    priority: Priority
    confidence: float
    spans: tuple[TextSpan, ...] = ()


@dataclass
class TranscriptionResult:
    """Final or interim transcript from the speech capture service."""

    transcript: str
    confidence: float = 0.0
    language: str = "en-US"
    is_final: bool = True
    alternatives: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "transcript": self.transcript,
            "confidence": self.confidence,
            "language": self.language,
            "is_final": self.is_final,
            "alternatives": self.alternatives,
        }


# Structured field -> its paired confidence field
_PAIRED_FIELDS = {
    "parsed_date": "date_confidence",
    "parsed_time": "time_confidence",
    "suggested_category": "category_confidence",
    "suggested_priority": "priority_confidence",
}


@dataclass(frozen=True)
class ParsedVoiceInput:
    """Structured reading of one transcript.

    Created once per parse call and never mutated. User edits on the
    confirmation screen go through copy_with(), which returns a new
    instance with the overall confidence re-derived.
    """

    original_text: str
    task_title: str
    confidence: float
    description: str | None = None
    parsed_date: date | None = None
    parsed_time: time | None = None
    suggested_category: str | None = None
    suggested_priority: Priority | None = None
    date_confidence: float | None = None
    time_confidence: float | None = None
    category_confidence: float | None = None
    priority_confidence: float | None = None
    alternatives: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        if not self.task_title or not self.task_title.strip():
            raise ValueError("task_title must not be empty")
        if not 0.0 <= self.confidence <= 1.0:
            raise ValueError(f"confidence out of range: {self.confidence}")
        for value_name, conf_name in _PAIRED_FIELDS.items():
            value = getattr(self, value_name)
            conf = getattr(self, conf_name)
            if (value is None) != (conf is None):
                raise ValueError(f"{value_name} and {conf_name} must both be set or both be None")
            if conf is not None and not 0.0 <= conf <= 1.0:
                raise ValueError(f"{conf_name} out of range: {conf}")

    @property
    def has_schedule(self) -> bool:
        return self.parsed_date is not None or self.parsed_time is not None

    def copy_with(
        self,
        weights: ConfidenceWeights | None = None,
        **changes: Any,
    ) -> ParsedVoiceInput:
        """Return a new instance with user overrides applied.

        A structured field set without its confidence is treated as
        user-confirmed (1.0); a cleared field clears its confidence.
        """
        if "confidence" in changes:
            raise TypeError("confidence is derived and cannot be overridden")

        for value_name, conf_name in _PAIRED_FIELDS.items():
            if value_name not in changes:
                continue
            if changes[value_name] is None:
                changes[conf_name] = None
            elif conf_name not in changes:
                changes[conf_name] = 1.0

        if changes.get("suggested_priority") is not None:
            changes["suggested_priority"] = Priority(changes["suggested_priority"])
        if "alternatives" in changes:
            changes["alternatives"] = tuple(changes["alternatives"])

        merged = {f.name: getattr(self, f.name) for f in dataclasses.fields(self)}
        merged.update(changes)
        merged["confidence"] = blend_confidence(
            title_resolved=merged["task_title"] != UNTITLED_TASK,
            date_confidence=merged["date_confidence"],
            time_confidence=merged["time_confidence"],
            category_confidence=merged["category_confidence"],
            priority_confidence=merged["priority_confidence"],
            weights=weights,
        )
        return ParsedVoiceInput(**merged)

    def to_dict(self) -> dict[str, Any]:
        return {
            "original_text": self.original_text,
            "task_title": self.task_title,
            "description": self.description,
            "parsed_date": self.parsed_date.isoformat() if self.parsed_date else None,
            "parsed_time": self.parsed_time.strftime("%H:%M") if self.parsed_time else None,
            "suggested_category": self.suggested_category,
            "suggested_priority": self.suggested_priority.value if self.suggested_priority else None,
            "confidence": self.confidence,
            "date_confidence": self.date_confidence,
            "time_confidence": self.time_confidence,
            "category_confidence": self.category_confidence,
            "priority_confidence": self.priority_confidence,
            "alternatives": list(self.alternatives),
        }


@dataclass(frozen=True)
class ParsingStats:
    """Diagnostic summary of an utterance, used for tuning keyword tables."""

    original_length: int
    word_count: int
    has_date_keywords: bool
    has_time_keywords: bool
    has_priority_keywords: bool
    complexity_score: float

    def to_dict(self) -> dict[str, Any]:
        return {
            "original_length": self.original_length,
            "word_count": self.word_count,
            "has_date_keywords": self.has_date_keywords,
            "has_time_keywords": self.has_time_keywords,
            "has_priority_keywords": self.has_priority_keywords,
            "complexity_score": self.complexity_score,
        }
