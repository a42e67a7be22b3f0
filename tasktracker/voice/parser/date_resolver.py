"""Date expression resolution.

Finds date phrases in a cleaned utterance and turns them into absolute
calendar dates relative to a reference date the caller supplies. The
resolver never looks at the system clock.

Precedence (first category wins the primary reading, the rest become
alternatives):

    1  weekday with this/next       "next friday", "monday this week"
    2  relative days                "today", "tomorrow", "day after tomorrow"
    3  numeric offsets              "in 3 days", "two weeks from now"
    4  period ends                  "end of the month", "beginning of next week"
    5  named periods                "next week", "next month"
    6  weekends                     "this weekend", "next weekend"
    7  holidays                     "christmas", "before thanksgiving"
    8  explicit calendar dates      "march 15th", "15th of march", "3/15"
    9  bare weekday                 "friday", "on friday"
    10 seasons                      "next summer"
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Callable

from dateutil.relativedelta import relativedelta

from tasktracker.voice.config import WEEKDAYS, HolidayRule, VoiceConfig
from tasktracker.voice.models import DateMatch
from tasktracker.voice.parser.matching import Resolution, drop_overlaps, resolve, span_of

WEEKDAY_RE = r"(monday|tuesday|wednesday|thursday|friday|saturday|sunday)"

MONTHS = {
    "january": 1, "jan": 1, "february": 2, "feb": 2, "march": 3, "mar": 3,
    "april": 4, "apr": 4, "may": 5, "june": 6, "jun": 6, "july": 7, "jul": 7,
    "august": 8, "aug": 8, "september": 9, "sept": 9, "sep": 9,
    "october": 10, "oct": 10, "november": 11, "nov": 11, "december": 12, "dec": 12,
}
MONTH_RE = "(" + "|".join(sorted(MONTHS, key=len, reverse=True)) + r")\.?"

NUMBER_WORDS = {
    "a": 1, "an": 1, "one": 1, "two": 2, "three": 3, "four": 4, "five": 5,
    "six": 6, "seven": 7, "eight": 8, "nine": 9, "ten": 10, "eleven": 11,
    "twelve": 12, "a couple of": 2, "couple of": 2, "a couple": 2,
}
AMOUNT_RE = r"(\d{1,3}|" + "|".join(sorted(NUMBER_WORDS, key=len, reverse=True)) + ")"

ORDINAL_RE = r"(\d{1,2})(?:st|nd|rd|th)?"

# Approximate northern-hemisphere season starts
SEASON_STARTS = {
    "spring": (3, 20),
    "summer": (6, 21),
    "fall": (9, 22),
    "autumn": (9, 22),
    "winter": (12, 21),
}

Handler = Callable[["DateResolver", re.Match, date], date]


@dataclass(frozen=True)
class DatePattern:
    rank: int
    regex: re.Pattern
    handler: Handler
    confidence: float


def parse_amount(token: str) -> int:
    token = token.lower().strip()
    if token.isdigit():
        return int(token)
    return NUMBER_WORDS[token]


def weekday_index(name: str) -> int:
    return WEEKDAYS.index(name.lower())


def this_weekday(today: date, target: int) -> date:
    """Nearest occurrence of target, today included."""
    return today + timedelta(days=(target - today.weekday()) % 7)


def next_weekday(today: date, target: int) -> date:
    """Target weekday in the following Monday-based week."""
    return today + timedelta(days=target - today.weekday() + 7)


def shift(today: date, amount: int, unit: str) -> date:
    unit = unit.lower().rstrip("s")
    if unit == "day":
        return today + timedelta(days=amount)
    if unit == "week":
        return today + timedelta(weeks=amount)
    if unit == "month":
        return today + relativedelta(months=amount)
    if unit == "year":
        return today + relativedelta(years=amount)
    raise ValueError(f"Unknown unit: {unit}")


def roll_forward(today: date, month: int, day: int, year: int | None = None) -> date:
    """Explicit year wins; otherwise this year's date, or next year's if passed."""
    if year is not None:
        return date(year, month, day)
    candidate = date(today.year, month, day)
    if candidate < today:
        candidate = date(today.year + 1, month, day)
    return candidate


def holiday_in_year(rule: HolidayRule, year: int) -> date:
    if rule.day is not None:
        return date(year, rule.month, rule.day)
    first = date(year, rule.month, 1)
    offset = (weekday_index(rule.weekday) - first.weekday()) % 7
    result = first + timedelta(days=offset + 7 * (rule.occurrence - 1))
    if result.month != rule.month:
        raise ValueError(f"No occurrence {rule.occurrence} of {rule.weekday} in month {rule.month}")
    return result


# =============================================================================
# Handlers
# =============================================================================


def _next_weekday(resolver: DateResolver, m: re.Match, today: date) -> date:
    return next_weekday(today, weekday_index(m.group(1)))


def _this_weekday(resolver: DateResolver, m: re.Match, today: date) -> date:
    return this_weekday(today, weekday_index(m.group(1)))


def _bare_weekday(resolver: DateResolver, m: re.Match, today: date) -> date:
    result = this_weekday(today, weekday_index(m.group(1)))
    # "Friday" said on a Friday most likely means next week's
    return result if result != today else today + timedelta(days=7)


def _offset(days: int) -> Handler:
    def handler(resolver: DateResolver, m: re.Match, today: date) -> date:
        return today + timedelta(days=days)

    return handler


def _in_period(resolver: DateResolver, m: re.Match, today: date) -> date:
    return shift(today, parse_amount(m.group(1)), m.group(2))


def period_end(resolver: DateResolver, today: date, period: str, ahead: int) -> date:
    if period == "week":
        end_day = weekday_index(resolver.week_end_day)
        return this_weekday(today, end_day) + timedelta(weeks=ahead)
    if period == "month":
        return today + relativedelta(months=ahead, day=31)
    return date(today.year + ahead, 12, 31)


def _end_of(resolver: DateResolver, m: re.Match, today: date) -> date:
    which = (m.group(1) or "this").lower()
    ahead = 1 if which == "next" else 0
    return period_end(resolver, today, m.group(2).lower(), ahead)


def _this_period(resolver: DateResolver, m: re.Match, today: date) -> date:
    # "this week" is due by the end of it
    return period_end(resolver, today, m.group(1).lower(), 0)


def _beginning_of_next(resolver: DateResolver, m: re.Match, today: date) -> date:
    period = m.group(1).lower()
    if period == "week":
        return next_weekday(today, 0)
    if period == "month":
        return today + relativedelta(months=1, day=1)
    return date(today.year + 1, 1, 1)


def _next_period(resolver: DateResolver, m: re.Match, today: date) -> date:
    return shift(today, 1, m.group(1))


def _this_weekend(resolver: DateResolver, m: re.Match, today: date) -> date:
    if today.weekday() >= 5:
        return today
    return today + timedelta(days=5 - today.weekday())


def _next_weekend(resolver: DateResolver, m: re.Match, today: date) -> date:
    return next_weekday(today, 5)


def _holiday(resolver: DateResolver, m: re.Match, today: date) -> date:
    before = m.group(1) is not None
    rule = resolver.holiday_for(m.group(2))
    result = holiday_in_year(rule, today.year)
    if result < today:
        result = holiday_in_year(rule, today.year + 1)
    if before:
        return max(today, result - timedelta(days=7))
    return result


def _month_day(resolver: DateResolver, m: re.Match, today: date) -> date:
    year = int(m.group(3)) if m.group(3) else None
    return roll_forward(today, MONTHS[m.group(1).lower()], int(m.group(2)), year)


def _day_of_month(resolver: DateResolver, m: re.Match, today: date) -> date:
    year = int(m.group(3)) if m.group(3) else None
    return roll_forward(today, MONTHS[m.group(2).lower()], int(m.group(1)), year)


def _numeric_date(resolver: DateResolver, m: re.Match, today: date) -> date:
    # US order: month/day[/year]
    year = None
    if m.group(3):
        year = int(m.group(3))
        if year < 100:
            year += 2000
    return roll_forward(today, int(m.group(1)), int(m.group(2)), year)


def _ordinal_day(resolver: DateResolver, m: re.Match, today: date) -> date:
    day = int(m.group(1))
    candidate = today.replace(day=day)
    if candidate < today:
        candidate = (today + relativedelta(months=1)).replace(day=day)
    return candidate


def _season(resolver: DateResolver, m: re.Match, today: date) -> date:
    month, day = SEASON_STARTS[m.group(2).lower()]
    if m.group(1).lower() == "next":
        return date(today.year + 1, month, day)
    return max(today, date(today.year, month, day))


def _compile(pattern: str) -> re.Pattern:
    return re.compile(pattern, re.IGNORECASE)


BASE_PATTERNS: list[DatePattern] = [
    # 1. weekday with this/next
    DatePattern(1, _compile(rf"\bnext\s+{WEEKDAY_RE}\b"), _next_weekday, 0.9),
    DatePattern(1, _compile(rf"\bthis\s+(?:coming\s+)?{WEEKDAY_RE}\b"), _this_weekday, 0.9),
    DatePattern(1, _compile(rf"\b{WEEKDAY_RE}\s+(?:of\s+)?next\s+week\b"), _next_weekday, 0.9),
    DatePattern(1, _compile(rf"\b{WEEKDAY_RE}\s+(?:of\s+)?this\s+week\b"), _this_weekday, 0.9),
    # 2. relative days
    DatePattern(2, _compile(r"\b(?:the\s+)?day\s+after\s+tomorrow\b"), _offset(2), 0.9),
    DatePattern(2, _compile(r"\bafter\s+tomorrow\b"), _offset(2), 0.8),
    DatePattern(2, _compile(r"\btoday\b"), _offset(0), 0.95),
    DatePattern(2, _compile(r"\bton(?:ight|ite)\b"), _offset(0), 0.9),
    DatePattern(2, _compile(r"\btomorrow\b"), _offset(1), 0.9),
    DatePattern(2, _compile(r"\byesterday\b"), _offset(-1), 0.9),
    # 3. numeric offsets
    DatePattern(3, _compile(rf"\bin\s+{AMOUNT_RE}\s+(days?|weeks?|months?|years?)\b"), _in_period, 0.9),
    DatePattern(
        3,
        _compile(rf"\b{AMOUNT_RE}\s+(days?|weeks?|months?|years?)\s+from\s+(?:now|today)\b"),
        _in_period,
        0.9,
    ),
    # 4. period ends
    DatePattern(
        4,
        _compile(r"\b(?:the\s+)?end\s+of\s+(?:the\s+)?(?:(this|next)\s+)?(week|month|year)\b"),
        _end_of,
        0.85,
    ),
    DatePattern(
        4,
        _compile(r"\b(?:the\s+)?(?:beginning|start)\s+of\s+(?:the\s+)?next\s+(week|month|year)\b"),
        _beginning_of_next,
        0.85,
    ),
    # 5. named periods
    DatePattern(5, _compile(r"\bnext\s+(week|month|year)\b"), _next_period, 0.85),
    DatePattern(5, _compile(r"\bthis\s+(week|month|year)\b"), _this_period, 0.8),
    # 6. weekends
    DatePattern(6, _compile(r"\bthis\s+(?:coming\s+)?weekend\b"), _this_weekend, 0.85),
    DatePattern(6, _compile(r"\bnext\s+weekend\b"), _next_weekend, 0.85),
    DatePattern(6, _compile(r"\b(?:the\s+)?weekend\b"), _this_weekend, 0.7),
    # 7. holidays are compiled per vocabulary, see DateResolver
    # 8. explicit calendar dates
    DatePattern(8, _compile(rf"\b{MONTH_RE}\s+{ORDINAL_RE}(?:,?\s+(\d{{4}}))?\b"), _month_day, 0.9),
    DatePattern(
        8,
        _compile(rf"\b(?:the\s+)?{ORDINAL_RE}\s+of\s+{MONTH_RE}(?:,?\s+(\d{{4}}))?\b"),
        _day_of_month,
        0.9,
    ),
    DatePattern(8, _compile(r"\b(\d{1,2})/(\d{1,2})(?:/(\d{4}|\d{2}))?\b"), _numeric_date, 0.85),
    DatePattern(8, _compile(r"\b(\d{1,2})-(\d{1,2})-(\d{4}|\d{2})\b"), _numeric_date, 0.85),
    DatePattern(8, _compile(r"\bthe\s+(\d{1,2})(?:st|nd|rd|th)\b"), _ordinal_day, 0.7),
    # 9. bare weekday
    DatePattern(9, _compile(rf"\b{WEEKDAY_RE}\b"), _bare_weekday, 0.7),
    # 10. seasons
    DatePattern(10, _compile(r"\b(this|next)\s+(spring|summer|fall|autumn|winter)\b"), _season, 0.5),
]

HOLIDAY_RANK = 7
HOLIDAY_CONFIDENCE = 0.85
BEFORE_HOLIDAY_CONFIDENCE = 0.5


def describe(match: DateMatch) -> str:
    return f"{match.span.text} ({match.value.isoformat()})"


class DateResolver:
    """Resolves date phrases against a configurable vocabulary."""

    def __init__(self, config: VoiceConfig):
        self.week_end_day = config.parser.week_end_day
        self.competing_cap = config.parser.competing_match_cap

        self._holidays: dict[str, HolidayRule] = {}
        for name, rule in config.vocabulary.holidays.items():
            for phrase in (name, *rule.aliases):
                self._holidays[phrase.lower()] = rule

        self._patterns = list(BASE_PATTERNS)
        if self._holidays:
            names = "|".join(re.escape(n) for n in sorted(self._holidays, key=len, reverse=True))
            self._holiday_regex = _compile(rf"\b(before\s+)?({names})(?!\w)")
        else:
            self._holiday_regex = None

    def holiday_for(self, phrase: str) -> HolidayRule:
        return self._holidays[phrase.lower()]

    def find(self, text: str, today: date) -> list[DateMatch]:
        """All non-overlapping date matches, in text order."""
        candidates: list[DateMatch] = []

        for pattern in self._patterns:
            for m in pattern.regex.finditer(text):
                try:
                    value = pattern.handler(self, m, today)
                except (ValueError, KeyError, OverflowError):
                    # "february 30", "13/45" and friends are not dates
                    continue
                candidates.append(DateMatch(value, pattern.confidence, span_of(m), pattern.rank))

        if self._holiday_regex is not None:
            for m in self._holiday_regex.finditer(text):
                try:
                    value = _holiday(self, m, today)
                except ValueError:
                    continue
                confidence = BEFORE_HOLIDAY_CONFIDENCE if m.group(1) else HOLIDAY_CONFIDENCE
                candidates.append(DateMatch(value, confidence, span_of(m), HOLIDAY_RANK))

        return drop_overlaps(candidates)

    def resolve(self, text: str, today: date) -> Resolution | None:
        return resolve(self.find(text, today), self.competing_cap, describe)
