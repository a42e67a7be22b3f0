"""Clock time resolution.

Independent of the date resolver: "tonight" is both a date (today) and
a time (20:00), and each resolver reports it separately.

A spoken clock time is one of
    explicit     "3pm", "3:30 p.m.", "5 o'clock pm"
    named        "noon", "midday", "midnight"
    relative     "half past 3", "quarter to five"
    24-hour      "15:30", "at 17"
    bare hour    "at 3", "around 8"   (AM/PM guessed)
    period       "morning", "late afternoon", "tonight"

Bare hours borrow AM/PM from a period word elsewhere in the utterance
("at 8 tomorrow morning"); without one they fall back to business hours.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import time

from tasktracker.voice.config import VoiceConfig
from tasktracker.voice.models import TextSpan, TimeMatch
from tasktracker.voice.parser.matching import Resolution, drop_overlaps, resolve, span_of

# Precedence ranks
EXPLICIT = 1
BARE = 2
PERIOD = 3

HOUR_WORDS = {
    "one": 1, "two": 2, "three": 3, "four": 4, "five": 5, "six": 6,
    "seven": 7, "eight": 8, "nine": 9, "ten": 10, "eleven": 11, "twelve": 12,
}
HOUR_RE = r"(?P<hour>\d{1,2}|" + "|".join(HOUR_WORDS) + ")"
# "half past 3pm" has no word boundary between the hour and the suffix
HOUR_END = r"(?:\b|(?=[ap]\.?\s?m\.?(?![a-z])))"

SPOKEN_MINUTES = {"fifteen": 15, "thirty": 30, "forty five": 45, "forty-five": 45, "fortyfive": 45}

AMPM_RE = r"\s*(?P<ampm>[ap])\.?\s?m\.?(?![a-z])"
QUALIFIER_RE = (
    r"\s+(?:in\s+the\s+|this\s+|at\s+)?"
    r"(?P<qual>morning|afternoon|evening|night|tonight)\b"
)
MERIDIEM_RE = rf"(?:{AMPM_RE}|{QUALIFIER_RE})?"
# "about 5 things" and "by 10 percent" are quantities, not hours
AT_HOUR_END = (
    r"(?=\s*(?:$|[,.;:!?]|(?:and|or|on|this|next|today|tomorrow|tonight"
    r"|morning|afternoon|evening|night|(?:mon|tues|wednes|thurs|fri|satur|sun)day)\b))"
)

# Period-of-day buckets: (representative time, confidence)
PERIODS: dict[str, tuple[time, float]] = {
    "early morning": (time(7, 0), 0.8),
    "late morning": (time(11, 0), 0.8),
    "early afternoon": (time(13, 0), 0.8),
    "late afternoon": (time(16, 0), 0.8),
    "early evening": (time(17, 0), 0.8),
    "late evening": (time(20, 0), 0.8),
    "morning": (time(9, 0), 0.75),
    "afternoon": (time(14, 0), 0.75),
    "evening": (time(18, 0), 0.75),
    "tonight": (time(20, 0), 0.8),
    "night": (time(21, 0), 0.7),
}
PERIOD_RE = re.compile(
    r"\b(?:(?:this|in\s+the|at|during\s+the)\s+)?(?P<period>"
    + "|".join(p.replace(" ", r"\s+") for p in PERIODS)
    + r")\b",
    re.IGNORECASE,
)

QUALIFIED_CONFIDENCE = 0.85
BARE_CONFIDENCE = 0.65
NAMED_CONFIDENCE = 0.95


@dataclass(frozen=True)
class ClockPattern:
    regex: re.Pattern
    confidence: float  # when AM/PM or 24-hour makes it unambiguous
    minute: int | None = None  # fixed minute ("half past")
    minus_minutes: int = 0  # "quarter to"


def _compile(pattern: str) -> re.Pattern:
    return re.compile(pattern, re.IGNORECASE)


CLOCK_PATTERNS = [
    ClockPattern(_compile(rf"\b(?P<hour>\d{{1,2}})(?::(?P<minute>[0-5]\d))?{AMPM_RE}"), 0.9),
    ClockPattern(_compile(rf"\b{HOUR_RE}\s*o'?\s?clock\b{MERIDIEM_RE}"), 0.9),
    ClockPattern(_compile(rf"\bhalf\s+past\s+{HOUR_RE}{HOUR_END}{MERIDIEM_RE}"), 0.85, minute=30),
    ClockPattern(_compile(rf"\b(?:a\s+)?quarter\s+past\s+{HOUR_RE}{HOUR_END}{MERIDIEM_RE}"), 0.85, minute=15),
    ClockPattern(
        _compile(rf"\b(?:a\s+)?quarter\s+(?:to|till|til|of)\s+{HOUR_RE}{HOUR_END}{MERIDIEM_RE}"),
        0.85,
        minute=0,
        minus_minutes=15,
    ),
    ClockPattern(
        _compile(rf"\b(?P<hour>\d{{1,2}})\s+(?P<spoken>fifteen|thirty|forty[\s-]?five)\b{MERIDIEM_RE}"),
        0.85,
    ),
    ClockPattern(_compile(rf"\b(?P<hour>[01]?\d|2[0-3]):(?P<minute>[0-5]\d)\b(?:{QUALIFIER_RE})?"), 0.85),
    ClockPattern(
        _compile(
            r"\b(?:at|around|about|by)\s+(?P<hour>\d{1,2})"
            r"(?![:/\d])(?!\s*[ap]\.?\s?m\.?(?![a-z]))(?!\s*o'?\s?clock)"
            r"(?!\s*(?:days?|weeks?|months?|years?|hours?|minutes?|mins?|%))"
            rf"\b(?:{QUALIFIER_RE}|{AT_HOUR_END})"
        ),
        0.8,
    ),
    ClockPattern(_compile(rf"\b(?P<hour>\d{{1,2}})(?::(?P<minute>[0-5]\d))?{QUALIFIER_RE}"), 0.85),
]

NAMED_TIMES = [
    (_compile(r"\b(?:12\s+)?(?:noon|midday)\b"), time(12, 0)),
    (_compile(r"\b(?:12\s+)?midnight\b"), time(0, 0)),
]


@dataclass(frozen=True)
class _BareHour:
    """A 1-12 hour with no AM/PM yet."""

    hour: int
    minute: int
    minus_minutes: int
    span: TextSpan


def parse_hour(token: str) -> int:
    token = token.lower()
    return int(token) if token.isdigit() else HOUR_WORDS[token]


def meridiem_of(word: str, hour: int) -> str:
    """AM/PM implied by a period word. Twelve at night is midnight."""
    word = word.lower()
    if word == "morning" or word.endswith(" morning"):
        return "a"
    if hour == 12 and word.endswith("night"):
        return "a"
    return "p"


def guess_meridiem(hour: int) -> str:
    """Business hours: 1-7 and 12 are afternoon, 8-11 morning."""
    return "p" if hour == 12 or 1 <= hour <= 7 else "a"


def to_time(hour: int, minute: int, meridiem: str | None = None, minus_minutes: int = 0) -> time:
    if meridiem is not None:
        if not 1 <= hour <= 12:
            raise ValueError(f"{hour} is not a 12-hour clock hour")
        hour = hour % 12 + (12 if meridiem == "p" else 0)
    elif hour > 23:
        raise ValueError(f"{hour} is not a clock hour")
    total = (hour * 60 + minute - minus_minutes) % (24 * 60)
    return time(total // 60, total % 60)


def describe(match: TimeMatch) -> str:
    return f"{match.span.text} ({match.value.strftime('%H:%M')})"


def is_morning(value: time) -> bool:
    return value.hour < 12


class TimeResolver:
    """Resolves clock time phrases in a cleaned utterance."""

    def __init__(self, config: VoiceConfig):
        self.competing_cap = config.parser.competing_match_cap

    def _clock_candidates(self, text: str) -> tuple[list[TimeMatch], list[_BareHour]]:
        clocks: list[TimeMatch] = []
        bare: list[_BareHour] = []

        for pattern in CLOCK_PATTERNS:
            for m in pattern.regex.finditer(text):
                groups = m.groupdict()
                try:
                    hour = parse_hour(groups["hour"])
                except (KeyError, ValueError):
                    continue

                if pattern.minute is not None:
                    minute = pattern.minute
                elif groups.get("spoken"):
                    minute = SPOKEN_MINUTES[re.sub(r"\s+", " ", groups["spoken"].lower())]
                else:
                    minute = int(groups.get("minute") or 0)

                ampm = groups.get("ampm")
                qualifier = groups.get("qual")
                span = span_of(m)

                try:
                    if ampm:
                        value = to_time(hour, minute, ampm.lower(), pattern.minus_minutes)
                        confidence = NAMED_CONFIDENCE if groups.get("minute") else pattern.confidence
                    elif qualifier and 1 <= hour <= 12:
                        value = to_time(hour, minute, meridiem_of(qualifier, hour), pattern.minus_minutes)
                        confidence = QUALIFIED_CONFIDENCE
                    elif hour == 0 or 13 <= hour:
                        value = to_time(hour, minute, None, pattern.minus_minutes)
                        confidence = pattern.confidence
                    elif 1 <= hour <= 12:
                        bare.append(_BareHour(hour, minute, pattern.minus_minutes, span))
                        continue
                    else:
                        continue
                except ValueError:
                    continue

                clocks.append(TimeMatch(value, confidence, span, EXPLICIT))

        for regex, value in NAMED_TIMES:
            for m in regex.finditer(text):
                clocks.append(TimeMatch(value, NAMED_CONFIDENCE, span_of(m), EXPLICIT))

        return clocks, bare

    def _period_candidates(self, text: str) -> list[TimeMatch]:
        periods = []
        for m in PERIOD_RE.finditer(text):
            key = re.sub(r"\s+", " ", m.group("period").lower())
            value, confidence = PERIODS[key]
            periods.append(TimeMatch(value, confidence, span_of(m), PERIOD, is_period=True))
        return periods

    def find(self, text: str) -> tuple[list[TimeMatch], list[TextSpan]]:
        """Candidate times plus spans that only corroborate them.

        Returns (matches, absorbed_spans). Absorbed spans belong to period
        words that fixed a bare hour's AM/PM or agree with a clock time;
        they are consumed from the title but never compete.
        """
        clocks, bare = self._clock_candidates(text)
        # Bare hours are re-checked against the survivors below
        bare_matches = [TimeMatch(time(0, 0), 0.0, b.span, BARE) for b in bare]
        survivors = drop_overlaps([*clocks, *bare_matches, *self._period_candidates(text)])

        bare_by_span = {b.span: b for b in bare}
        periods = [s for s in survivors if s.is_period]
        matches = [s for s in survivors if not s.is_period and s.rank != BARE]
        absorbed: list[TextSpan] = []

        hint = periods[0] if periods else None
        hinted = False

        for s in survivors:
            if s.rank != BARE:
                continue
            b = bare_by_span[s.span]
            if hint is not None:
                hinted = True
                value = to_time(b.hour, b.minute, meridiem_of(hint.span.text, b.hour), b.minus_minutes)
                matches.append(TimeMatch(value, QUALIFIED_CONFIDENCE, b.span, EXPLICIT))
            else:
                value = to_time(b.hour, b.minute, guess_meridiem(b.hour), b.minus_minutes)
                matches.append(TimeMatch(value, BARE_CONFIDENCE, b.span, BARE))

        if matches:
            anchor = min(matches, key=lambda m: (m.rank, m.span.start))
            for p in periods:
                if (hinted and p is hint) or is_morning(p.value) == is_morning(anchor.value):
                    absorbed.append(p.span)
                else:
                    matches.append(p)
        else:
            matches = periods

        return sorted(matches, key=lambda m: m.span.start), absorbed

    def resolve(self, text: str) -> Resolution | None:
        matches, absorbed = self.find(text)
        return resolve(matches, self.competing_cap, describe, extra_spans=absorbed)
