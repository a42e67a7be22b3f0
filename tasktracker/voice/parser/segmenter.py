"""Title and description segmentation.

Turns a cleaned utterance, minus everything the resolvers consumed,
into an actionable title and an optional trailing description:

    "Remind me to email the report to Sam tomorrow at 3pm"
      -> excise "tomorrow", "at 3pm"
      -> strip "remind me to"
      -> split at "to": title "Email the report", description "Sam"
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Iterable

from tasktracker.voice.config import VocabularyConfig
from tasktracker.voice.models import TextSpan

# Words that only glue an excised phrase to the sentence ("due by friday")
CONNECTORS = (
    "at", "on", "by", "in", "for", "before", "around", "about",
    "until", "till", "due", "from", "the", "of",
)

# Left hanging at the end of a title once its object was excised
DANGLING_TAILS = (
    "it's", "it is", "at", "to", "and", "by", "for", "the", "of",
    "due", "from", "before", "until", "till", "or", "with",
)

MAX_PREFIX_PASSES = 3
TRIM_CHARS = " \t,.;:!?-"


def _alternation(words: Iterable[str]) -> str:
    ordered = sorted(set(words), key=len, reverse=True)
    return "|".join(r"\s+".join(re.escape(p) for p in w.split()) for w in ordered)


def _phrase(words: Iterable[str]) -> str:
    return rf"(?<![\w'])(?:{_alternation(words)})(?![\w'])"


def collapse(text: str) -> str:
    """Normalize whitespace and stray punctuation."""
    text = re.sub(r"\s+", " ", text)
    text = re.sub(r"\s+([,.;:!?])", r"\1", text)
    text = re.sub(r"([,;:])(?:\s*[,;:])+", r"\1", text)
    return text.strip(" ,;")


def merge_spans(spans: Iterable[TextSpan]) -> list[tuple[int, int]]:
    merged: list[list[int]] = []
    for span in sorted(spans, key=lambda s: s.start):
        if merged and span.start <= merged[-1][1]:
            merged[-1][1] = max(merged[-1][1], span.end)
        else:
            merged.append([span.start, span.end])
    return [(start, end) for start, end in merged]


@dataclass(frozen=True)
class Segments:
    title: str
    description: str | None = None
    fallback: bool = False


class Segmenter:
    """Cleans utterances and splits them into title and description."""

    def __init__(self, vocabulary: VocabularyConfig, fallback_title_words: int = 6):
        self.fallback_title_words = fallback_title_words
        self.stopwords = set(vocabulary.stopwords)
        self.boundaries = set(vocabulary.clause_boundaries)

        self._filler = (
            re.compile(_phrase(vocabulary.filler_words) + r"[,.]?", re.IGNORECASE)
            if vocabulary.filler_words
            else None
        )
        if vocabulary.hedge_words:
            hedge = _alternation(vocabulary.hedge_words)
            self._leading_hedge = re.compile(rf"^\s*(?:{hedge})(?:\s*,|\s+)", re.IGNORECASE)
            self._comma_hedge = re.compile(rf",\s*(?:{hedge})\s*,", re.IGNORECASE)
        else:
            self._leading_hedge = self._comma_hedge = None

        self._prefix = (
            re.compile(rf"^\s*{_phrase(vocabulary.command_prefixes)}\s*[,:]?\s*", re.IGNORECASE)
            if vocabulary.command_prefixes
            else None
        )
        self._connectors = re.compile(rf"(?:{_phrase(CONNECTORS)}\s+){{1,2}}$", re.IGNORECASE)
        self._tail = re.compile(rf"\s*{_phrase(DANGLING_TAILS)}\s*$", re.IGNORECASE)

    # -------------------------------------------------------------------------
    # Cleaning
    # -------------------------------------------------------------------------

    def clean(self, text: str) -> str:
        """Drop disfluencies and normalize whitespace.

        Fillers ("um", "uh") always go. Hedges ("like", "you know") only
        go when set off by commas or leading the utterance, so "buy a
        book I like" keeps its last word.
        """
        if self._filler is not None:
            text = self._filler.sub(" ", text)
        text = collapse(text)

        if self._comma_hedge is not None:
            previous = None
            while previous != text:
                previous = text
                text = self._comma_hedge.sub(",", text)
                text = self._leading_hedge.sub("", text)

        return collapse(text)

    # -------------------------------------------------------------------------
    # Segmentation
    # -------------------------------------------------------------------------

    def excise(self, text: str, spans: Iterable[TextSpan]) -> str:
        """Remove consumed spans and the connectors leading into them."""
        for start, end in reversed(merge_spans(spans)):
            connector = self._connectors.search(text[:start])
            if connector:
                start = connector.start()
            text = text[:start] + " " + text[end:]
        return collapse(text)

    def strip_prefixes(self, text: str) -> str:
        if self._prefix is None:
            return text
        for _ in range(MAX_PREFIX_PASSES):
            stripped = self._prefix.sub("", text, count=1)
            if stripped == text:
                break
            text = stripped
        return text

    def strip_tails(self, text: str) -> str:
        text = text.strip(TRIM_CHARS)
        previous = None
        while previous != text:
            previous = text
            text = self._tail.sub("", text).strip(TRIM_CHARS)
        return text

    def is_trivial(self, text: str) -> bool:
        words = re.findall(r"[\w']+", text.lower())
        return all(w in self.stopwords for w in words)

    def split_clause(self, text: str) -> tuple[str, str | None]:
        """Split at the first boundary word after the opening verb phrase."""
        words = text.split(" ")
        for i, word in enumerate(words):
            if i >= 2 and word.lower().strip(TRIM_CHARS) in self.boundaries:
                title = " ".join(words[:i])
                description = " ".join(words[i + 1:]).strip(TRIM_CHARS)
                return title, description or None
        return text, None

    def fallback_title(self, cleaned: str) -> str | None:
        words = [w for w in cleaned.split() if re.search(r"\w", w)]
        if not words:
            return None
        return capitalize(" ".join(words[: self.fallback_title_words]).strip(TRIM_CHARS))

    def segment(self, cleaned: str, spans: Iterable[TextSpan]) -> Segments | None:
        """Title and description for a cleaned utterance.

        Returns None when the utterance holds no words at all.
        """
        remaining = self.excise(cleaned, spans).strip(TRIM_CHARS)
        remaining = self.strip_tails(self.strip_prefixes(remaining))
        title, description = self.split_clause(remaining)
        title = self.strip_tails(title)

        if description is not None:
            description = self.strip_tails(description)
            if not description or self.is_trivial(description):
                description = None

        if not title or self.is_trivial(title):
            fallback = self.fallback_title(cleaned)
            if fallback is None:
                return None
            return Segments(fallback, None, fallback=True)

        return Segments(capitalize(title), description)


def capitalize(text: str) -> str:
    """Upper-case the first character only; the rest keeps its case."""
    return text[:1].upper() + text[1:]
