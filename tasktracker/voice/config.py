"""Parser configuration: keyword tables and tuning knobs (args/voice.yaml).

The tables are data, not code, so they can be extended or localized
without touching resolver logic. Every field has a built-in default
mirroring the shipped YAML, so a missing file still yields a working
parser.
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Literal, Optional

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

from tasktracker.logging_config import get_logger
from tasktracker.voice import CONFIG_PATH

logger = get_logger(__name__)

WEEKDAYS = ("monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday")

WeekdayName = Literal["monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday"]


class VoiceConfigError(ValueError):
    """Raised when an explicitly requested voice config cannot be used."""


# =============================================================================
# Default keyword tables
# =============================================================================

DEFAULT_FILLER_WORDS = ["um", "umm", "uh", "uhh", "uhm", "er", "erm", "hmm", "mm"]

# Only stripped when set off by commas or leading the utterance
DEFAULT_HEDGE_WORDS = ["like", "you know", "i mean", "sort of", "kind of", "basically", "okay so", "so"]

# Longest first; matched at the start of the utterance only
DEFAULT_COMMAND_PREFIXES = [
    "set a reminder for me to", "set a reminder to", "set a reminder for",
    "set reminder to", "set reminder for",
    "can you remind me to", "please remind me to", "remind me to", "remind me that", "remind me",
    "don't forget to", "do not forget to", "dont forget to",
    "don't let me forget to",
    "remember to", "make sure to", "make sure i",
    "i need to", "i have to", "i should", "i must", "i've got to", "i gotta",
    "add a task to", "add task to", "create a task to", "create task to",
    "add a task", "add task", "create a task", "create task", "new task",
    "note to self", "schedule",
]

DEFAULT_CLAUSE_BOUNDARIES = ["to", "for", "about", "including"]

DEFAULT_STOPWORDS = [
    "a", "an", "the", "to", "for", "of", "on", "in", "at", "by", "with", "and", "or",
    "about", "including", "me", "my", "it", "this", "that", "them", "him", "her",
    "us", "please", "some", "so", "then", "just", "also", "too", "up", "is", "be",
]

DEFAULT_CATEGORIES: dict[str, list[str]] = {
    "household": [
        "buy", "groceries", "grocery", "clean", "laundry", "dishes", "vacuum",
        "trash", "garbage", "recycling", "tidy", "cook", "kitchen", "shopping",
        "house", "home", "garden", "yard", "lawn", "repair", "declutter",
    ],
    "work": [
        "meeting", "report", "presentation", "client", "boss", "project",
        "deadline", "office", "colleague", "coworker", "conference", "proposal",
        "interview", "standup", "team",
    ],
    "health": [
        "doctor", "dentist", "medicine", "medication", "appointment", "gym",
        "pharmacy", "prescription", "pill", "vitamins", "checkup", "workout",
        "exercise", "hospital", "therapy", "therapist",
    ],
    "finance": [
        "pay", "bill", "mortgage", "rent", "bank", "invoice", "payment",
        "budget", "tax", "taxes", "insurance", "loan", "credit card",
        "subscription", "utilities",
    ],
    "family": [
        "mom", "dad", "mum", "mother", "father", "kids", "children", "school",
        "wife", "husband", "brother", "sister", "grandma", "grandpa",
        "birthday", "anniversary", "family",
    ],
    "personal": [
        "personal", "myself", "hobby", "read", "learn", "study", "relax",
        "meditate", "journal", "haircut",
    ],
}

DEFAULT_PRIORITIES: dict[str, list[str]] = {
    "urgent": ["urgent", "urgently", "asap", "a.s.a.p", "critical", "emergency", "immediately", "right away"],
    "high": ["important", "high priority", "top priority", "critical", "crucial", "high importance"],
    "low": [
        "low priority", "whenever", "no rush", "not urgent", "someday",
        "eventually", "when possible", "when i get a chance", "if i have time",
    ],
}

DEFAULT_HOLIDAYS: dict[str, dict] = {
    "christmas": {"month": 12, "day": 25, "aliases": ["christmas day", "xmas"]},
    "christmas eve": {"month": 12, "day": 24},
    "new year's day": {"month": 1, "day": 1, "aliases": ["new year", "new years", "new year's", "new years day"]},
    "new year's eve": {"month": 12, "day": 31, "aliases": ["new years eve"]},
    "valentine's day": {"month": 2, "day": 14, "aliases": ["valentines day", "valentines", "valentine's"]},
    "halloween": {"month": 10, "day": 31},
    "independence day": {"month": 7, "day": 4, "aliases": ["fourth of july", "4th of july"]},
    "thanksgiving": {"month": 11, "weekday": "thursday", "occurrence": 4},
}


# =============================================================================
# Models
# =============================================================================


class HolidayRule(BaseModel):
    model_config = ConfigDict(extra="allow")
    month: int = Field(ge=1, le=12)
    day: Optional[int] = Field(default=None, ge=1, le=31)
    weekday: Optional[WeekdayName] = None
    occurrence: Optional[int] = Field(default=None, ge=1, le=5)
    aliases: list[str] = Field(default_factory=list)

    @model_validator(mode="after")
    def _fixed_or_floating(self) -> HolidayRule:
        fixed = self.day is not None
        floating = self.weekday is not None and self.occurrence is not None
        if fixed == floating:
            raise ValueError("holiday needs either 'day' or both 'weekday' and 'occurrence'")
        return self


class ParserSettings(BaseModel):
    model_config = ConfigDict(extra="allow")
    fallback_title_words: int = Field(default=6, ge=5, le=8)
    week_end_day: WeekdayName = Field(default="sunday")
    competing_match_cap: float = Field(default=0.7, ge=0.0, le=1.0)
    # Caller policy; the parser itself never rejects anything
    low_confidence_threshold: float = Field(default=0.3, ge=0.0, le=1.0)


class ConfidenceWeights(BaseModel):
    model_config = ConfigDict(extra="allow")
    base: float = Field(default=0.5, ge=0.0, le=1.0)
    date: float = Field(default=0.2, ge=0.0, le=1.0)
    time: float = Field(default=0.15, ge=0.0, le=1.0)
    category: float = Field(default=0.1, ge=0.0, le=1.0)
    priority: float = Field(default=0.05, ge=0.0, le=1.0)


class VocabularyConfig(BaseModel):
    model_config = ConfigDict(extra="allow")
    filler_words: list[str] = Field(default_factory=lambda: list(DEFAULT_FILLER_WORDS))
    hedge_words: list[str] = Field(default_factory=lambda: list(DEFAULT_HEDGE_WORDS))
    command_prefixes: list[str] = Field(default_factory=lambda: list(DEFAULT_COMMAND_PREFIXES))
    clause_boundaries: list[str] = Field(default_factory=lambda: list(DEFAULT_CLAUSE_BOUNDARIES))
    stopwords: list[str] = Field(default_factory=lambda: list(DEFAULT_STOPWORDS))
    categories: dict[str, list[str]] = Field(
        default_factory=lambda: {k: list(v) for k, v in DEFAULT_CATEGORIES.items()}
    )
    priorities: dict[str, list[str]] = Field(
        default_factory=lambda: {k: list(v) for k, v in DEFAULT_PRIORITIES.items()}
    )
    holidays: dict[str, HolidayRule] = Field(
        default_factory=lambda: {k: HolidayRule(**v) for k, v in DEFAULT_HOLIDAYS.items()}
    )

    @field_validator("filler_words", "hedge_words", "command_prefixes", "clause_boundaries", "stopwords")
    @classmethod
    def _lowercase_words(cls, value: list[str]) -> list[str]:
        return [w.strip().lower() for w in value if w and w.strip()]

    @field_validator("categories", "priorities")
    @classmethod
    def _lowercase_triggers(cls, value: dict[str, list[str]]) -> dict[str, list[str]]:
        return {
            name.strip().lower(): [t.strip().lower() for t in triggers if t and t.strip()]
            for name, triggers in value.items()
        }

    @field_validator("priorities")
    @classmethod
    def _known_priority_levels(cls, value: dict[str, list[str]]) -> dict[str, list[str]]:
        unknown = set(value) - {"urgent", "high", "low"}
        if unknown:
            # medium is a caller default and is never asserted by the parser
            raise ValueError(f"Unsupported priority levels: {sorted(unknown)}")
        return value


class VoiceConfig(BaseModel):
    model_config = ConfigDict(extra="allow")
    parser: ParserSettings = Field(default_factory=ParserSettings)
    confidence_weights: ConfidenceWeights = Field(default_factory=ConfidenceWeights)
    vocabulary: VocabularyConfig = Field(default_factory=VocabularyConfig)


# =============================================================================
# Loading
# =============================================================================


def load_voice_config(path: Path | str | None = None) -> VoiceConfig:
    """Load and validate the voice config.

    An explicit path must exist and validate, otherwise VoiceConfigError.
    The default path is optional: missing or invalid falls back to the
    built-in defaults with a warning.
    """
    explicit = path is not None
    yaml_path = Path(path) if explicit else CONFIG_PATH

    if not yaml_path.exists():
        if explicit:
            raise VoiceConfigError(f"Voice config not found: {yaml_path}")
        logger.info("voice_config_missing", path=str(yaml_path))
        return VoiceConfig()

    try:
        with open(yaml_path) as f:
            raw = yaml.safe_load(f) or {}
        config = VoiceConfig.model_validate(raw)
    except (yaml.YAMLError, ValidationError) as e:
        if explicit:
            raise VoiceConfigError(f"Invalid voice config {yaml_path}: {e}") from e
        logger.warning("voice_config_invalid", path=str(yaml_path), error=str(e))
        return VoiceConfig()

    logger.debug(
        "voice_config_loaded",
        path=str(yaml_path),
        categories=list(config.vocabulary.categories),
        holidays=len(config.vocabulary.holidays),
    )
    return config


@lru_cache(maxsize=1)
def get_default_config() -> VoiceConfig:
    """Process-wide default config, loaded once."""
    return load_voice_config()


__all__ = [
    "WEEKDAYS",
    "ConfidenceWeights",
    "HolidayRule",
    "ParserSettings",
    "VocabularyConfig",
    "VoiceConfig",
    "VoiceConfigError",
    "get_default_config",
    "load_voice_config",
]
