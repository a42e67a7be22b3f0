"""Voice input parser: transcript -> ParsedVoiceInput.

Composes the segmenter, the date and time resolvers and the category
and priority classifiers into a single pure call. The reference instant
is always passed in; nothing here reads the clock.

Usage:
    python -m tasktracker.voice.parser.voice_parser "Call mom tomorrow at 5pm"
    python -m tasktracker.voice.parser.voice_parser "Pay rent" --reference 2024-03-15T10:00
    python -m tasktracker.voice.parser.voice_parser "..." --config args/voice.yaml
"""

from __future__ import annotations

import argparse
import json
import re
import sys
from datetime import date, datetime
from functools import lru_cache
from typing import Mapping, Sequence

from tasktracker.logging_config import get_logger, setup_logging
from tasktracker.voice.config import VoiceConfig, get_default_config, load_voice_config
from tasktracker.voice.confidence import blend_confidence
from tasktracker.voice.models import UNTITLED_TASK, ParsedVoiceInput, ParsingStats
from tasktracker.voice.parser.classifiers import CategoryClassifier, PriorityClassifier
from tasktracker.voice.parser.date_resolver import DateResolver
from tasktracker.voice.parser.segmenter import Segmenter
from tasktracker.voice.parser.time_resolver import TimeResolver

logger = get_logger(__name__)

# Diagnostic keyword lists for get_parsing_stats()
DATE_KEYWORDS = [
    "tomorrow", "today", "yesterday", "next", "this", "last", "week", "month",
    "year", "weekend", "morning", "afternoon", "evening", "night", "monday",
    "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday",
]
TIME_KEYWORDS = [
    "am", "pm", "oclock", "o'clock", "noon", "midnight", "morning", "afternoon",
    "evening", "night", "early", "late",
]
PRIORITY_KEYWORDS = [
    "urgent", "important", "asap", "critical", "priority", "must",
    "essential", "vital", "crucial", "immediately",
]


def _keyword_regex(keywords: list[str]) -> re.Pattern:
    return re.compile(
        r"(?<![\w'])(?:" + "|".join(re.escape(k) for k in keywords) + r")(?![\w'])",
        re.IGNORECASE,
    )


_DATE_KEYWORDS_RE = _keyword_regex(DATE_KEYWORDS)
_TIME_KEYWORDS_RE = _keyword_regex(TIME_KEYWORDS)
_PRIORITY_KEYWORDS_RE = _keyword_regex(PRIORITY_KEYWORDS)


def as_reference_date(reference: datetime | date) -> date:
    """Calendar date of the reference instant, in its own local time."""
    if isinstance(reference, datetime):
        return reference.date()
    return reference


def placeholder(text: str) -> ParsedVoiceInput:
    """Result for an utterance with no usable words."""
    return ParsedVoiceInput(original_text=text, task_title=UNTITLED_TASK, confidence=0.0)


class VoiceParser:
    """Stateless parser bound to one configuration.

    Compiles its keyword tables once; parse() holds no state between
    calls, so one instance can be shared freely across threads.
    """

    def __init__(
        self,
        config: VoiceConfig | None = None,
        categories: Mapping[str, Sequence[str]] | None = None,
    ):
        self.config = config or get_default_config()
        vocabulary = self.config.vocabulary

        self.segmenter = Segmenter(vocabulary, self.config.parser.fallback_title_words)
        self.dates = DateResolver(self.config)
        self.times = TimeResolver(self.config)
        self.categories = CategoryClassifier(categories if categories is not None else vocabulary.categories)
        self.priorities = PriorityClassifier(vocabulary.priorities)

    def parse(self, text: str, reference: datetime | date) -> ParsedVoiceInput:
        """Parse one transcript relative to the reference instant.

        Never raises: anything unexpected degrades to the placeholder
        result with zero confidence.
        """
        text = text if isinstance(text, str) else ""
        try:
            return self._parse(text, as_reference_date(reference))
        except Exception:
            logger.exception("voice_parse_failed", text=text)
            return placeholder(text)

    def _parse(self, text: str, today: date) -> ParsedVoiceInput:
        cleaned = self.segmenter.clean(text)
        if not re.search(r"\w", cleaned):
            return placeholder(text)

        date_res = self.dates.resolve(cleaned, today)
        time_res = self.times.resolve(cleaned)
        priority = self.priorities.classify(cleaned)
        category = self.categories.classify(cleaned)

        spans = []
        for res in (date_res, time_res):
            if res is not None:
                spans.extend(res.spans)
        if priority is not None:
            spans.extend(priority.spans)

        segments = self.segmenter.segment(cleaned, spans)
        if segments is None:
            return placeholder(text)

        alternatives: list[str] = []
        for res in (date_res, time_res):
            if res is not None:
                alternatives.extend(res.alternatives)

        date_conf = date_res.confidence if date_res else None
        time_conf = time_res.confidence if time_res else None
        category_conf = category.confidence if category else None
        priority_conf = priority.confidence if priority else None

        return ParsedVoiceInput(
            original_text=text,
            task_title=segments.title,
            description=segments.description,
            parsed_date=date_res.value if date_res else None,
            parsed_time=time_res.value if time_res else None,
            suggested_category=category.category if category else None,
            suggested_priority=priority.priority if priority else None,
            date_confidence=date_conf,
            time_confidence=time_conf,
            category_confidence=category_conf,
            priority_confidence=priority_conf,
            alternatives=tuple(alternatives),
            confidence=blend_confidence(
                title_resolved=True,
                date_confidence=date_conf,
                time_confidence=time_conf,
                category_confidence=category_conf,
                priority_confidence=priority_conf,
                weights=self.config.confidence_weights,
            ),
        )

    def get_parsing_stats(self, text: str) -> ParsingStats:
        return get_parsing_stats(text)


def get_parsing_stats(text: str) -> ParsingStats:
    """Keyword presence and a rough complexity score for an utterance.

    complexity = 0.3 * length/100 + 0.3 * words/20 (each capped at 1)
                 + 0.2 date + 0.1 time + 0.1 priority keywords
    """
    text = text if isinstance(text, str) else ""
    word_count = len(text.split())
    has_date = bool(_DATE_KEYWORDS_RE.search(text))
    has_time = bool(_TIME_KEYWORDS_RE.search(text))
    has_priority = bool(_PRIORITY_KEYWORDS_RE.search(text))

    score = min(len(text) / 100, 1.0) * 0.3
    score += min(word_count / 20, 1.0) * 0.3
    score += (0.2 if has_date else 0.0) + (0.1 if has_time else 0.0) + (0.1 if has_priority else 0.0)

    return ParsingStats(
        original_length=len(text),
        word_count=word_count,
        has_date_keywords=has_date,
        has_time_keywords=has_time,
        has_priority_keywords=has_priority,
        complexity_score=round(min(score, 1.0), 4),
    )


@lru_cache(maxsize=1)
def get_default_parser() -> VoiceParser:
    return VoiceParser()


def parse(text: str, reference_instant: datetime | date) -> ParsedVoiceInput:
    """Parse a transcript with the default configuration."""
    return get_default_parser().parse(text, reference_instant)


def main():
    setup_logging()
    parser = argparse.ArgumentParser(description="Parse a voice transcript into a task")
    parser.add_argument("text", help="Transcribed utterance")
    parser.add_argument(
        "--reference",
        help="Reference instant (ISO 8601, default: now)",
    )
    parser.add_argument("--config", help="Path to a voice config YAML")
    args = parser.parse_args()

    try:
        reference = datetime.fromisoformat(args.reference) if args.reference else datetime.now()
    except ValueError:
        print(json.dumps({"success": False, "error": f"Invalid reference instant: {args.reference}"}))
        sys.exit(1)

    try:
        voice_parser = VoiceParser(load_voice_config(args.config)) if args.config else get_default_parser()
    except ValueError as e:
        print(json.dumps({"success": False, "error": str(e)}))
        sys.exit(1)

    result = {
        "success": True,
        "data": {
            "reference": reference.isoformat(),
            "parsed": voice_parser.parse(args.text, reference).to_dict(),
            "stats": get_parsing_stats(args.text).to_dict(),
        },
    }
    print(json.dumps(result, indent=2))


if __name__ == "__main__":
    main()
