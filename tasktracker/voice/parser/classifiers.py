"""Keyword classifiers for category and priority.

Both work off ordered trigger tables (see args/voice.yaml). Table order
is the tie-break order, so the tables are plain dicts and never sorted.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Mapping, Sequence

from tasktracker.voice.models import CategoryMatch, Priority, PriorityMatch, TextSpan
from tasktracker.voice.parser.matching import drop_overlaps, span_of


def trigger_pattern(trigger: str, plurals: bool = False) -> re.Pattern:
    """Whole-phrase pattern for a trigger.

    Lookarounds instead of \\b so triggers with punctuation ("a.s.a.p")
    still match as whole words.
    """
    body = r"\s+".join(re.escape(part) for part in trigger.split())
    suffix = r"(?:e?s)?" if plurals else ""
    return re.compile(rf"(?<![\w']){body}{suffix}(?![\w'])", re.IGNORECASE)


class CategoryClassifier:
    """Scores categories by how many distinct triggers they hit.

    Confidence reflects the margin over the runner-up: a clear single
    category is near certain, a tie is a coin flip between neighbours.
    """

    def __init__(self, table: Mapping[str, Sequence[str]]):
        self._table: list[tuple[str, list[tuple[str, re.Pattern]]]] = [
            (name, [(t, trigger_pattern(t, plurals=True)) for t in triggers])
            for name, triggers in table.items()
        ]

    @property
    def categories(self) -> list[str]:
        return [name for name, _ in self._table]

    @staticmethod
    def _hits(text: str, patterns: list[tuple[str, re.Pattern]]) -> tuple[str, ...]:
        # "taxes" matches both "tax" (plural) and "taxes"; a span counts once
        claimed: list[TextSpan] = []
        hits = []
        for trigger, pattern in patterns:
            spans = [span_of(m) for m in pattern.finditer(text)]
            fresh = [s for s in spans if not any(s.overlaps(c) for c in claimed)]
            if fresh:
                hits.append(trigger)
                claimed.extend(fresh)
        return tuple(hits)

    def classify(self, text: str) -> CategoryMatch | None:
        scores = [(name, self._hits(text, patterns)) for name, patterns in self._table]

        best_name, best_hits = None, ()
        for name, hits in scores:
            if len(hits) > len(best_hits):
                best_name, best_hits = name, hits

        if best_name is None:
            return None

        best = len(best_hits)
        runner_up = max(
            (len(hits) for name, hits in scores if name != best_name),
            default=0,
        )

        if runner_up == 0:
            confidence = min(0.95, 0.8 + 0.05 * best)
        elif runner_up == best:
            confidence = 0.6
        else:
            confidence = min(0.85, 0.6 + 0.1 * (best - runner_up))

        return CategoryMatch(best_name, round(confidence, 4), best_hits)


@dataclass(frozen=True)
class _PriorityHit:
    level: Priority
    span: TextSpan


class PriorityClassifier:
    """Detects urgent/high/low priority phrases.

    Longer phrases shadow the words inside them, so "not urgent" is low
    and never urgent. When different levels are spoken the earliest in
    table order wins, at reduced confidence.
    """

    SINGLE_LEVEL_CONFIDENCE = 0.9
    MIXED_LEVEL_CONFIDENCE = 0.8

    def __init__(self, table: Mapping[str, Sequence[str]]):
        self._order = [Priority(level) for level in table]
        self._patterns = [
            (Priority(level), trigger_pattern(trigger))
            for level, triggers in table.items()
            for trigger in triggers
        ]

    def find(self, text: str) -> list[_PriorityHit]:
        hits = [
            _PriorityHit(level, span_of(m))
            for level, pattern in self._patterns
            for m in pattern.finditer(text)
        ]
        return drop_overlaps(hits)

    def classify(self, text: str) -> PriorityMatch | None:
        hits = self.find(text)
        if not hits:
            return None

        levels = {h.level for h in hits}
        winner = next(level for level in self._order if level in levels)
        confidence = (
            self.SINGLE_LEVEL_CONFIDENCE if len(levels) == 1 else self.MIXED_LEVEL_CONFIDENCE
        )
        return PriorityMatch(winner, confidence, tuple(h.span for h in hits))
