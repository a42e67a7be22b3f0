"""Span bookkeeping shared by the resolvers.

Every resolver scans the whole cleaned utterance independently and
reports all candidate matches. Overlapping candidates are settled here
(the longer, more specific phrase wins: "next friday" beats "friday",
"day after tomorrow" beats "tomorrow"), then the survivors are ranked
into one primary reading plus alternatives.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Callable, Iterable, Protocol, Sequence, TypeVar

from tasktracker.voice.models import TextSpan


class _Spanned(Protocol):
    span: TextSpan


class _Ranked(Protocol):
    span: TextSpan
    value: Any
    confidence: float
    rank: int


S = TypeVar("S", bound=_Spanned)
R = TypeVar("R", bound=_Ranked)


def span_of(match: re.Match, group: int = 0) -> TextSpan:
    start, end = match.span(group)
    return TextSpan(start=start, end=end, text=match.group(group))


def drop_overlaps(items: Iterable[S]) -> list[S]:
    """Keep the longest of any overlapping candidates; earliest wins ties.

    Returned in text order.
    """
    kept: list[S] = []
    for item in sorted(items, key=lambda i: (-len(i.span), i.span.start)):
        if not any(item.span.overlaps(k.span) for k in kept):
            kept.append(item)
    return sorted(kept, key=lambda i: i.span.start)


@dataclass(frozen=True)
class Resolution:
    """Primary reading of one field plus the competing ones."""

    value: Any
    confidence: float
    spans: tuple[TextSpan, ...]
    alternatives: tuple[str, ...] = ()


def resolve(
    matches: Sequence[R],
    competing_cap: float,
    describe: Callable[[R], str],
    extra_spans: Sequence[TextSpan] = (),
) -> Resolution | None:
    """Pick the primary match by precedence rank, then text position.

    Matches that agree with the primary corroborate it. Matches that
    disagree become alternatives (most confident first) and cap the
    primary's confidence.
    """
    if not matches:
        return None

    ordered = sorted(matches, key=lambda m: (m.rank, m.span.start))
    primary = ordered[0]

    competing: list[R] = []
    seen = {primary.value}
    for m in sorted(ordered[1:], key=lambda m: (-m.confidence, m.rank, m.span.start)):
        if m.value not in seen:
            seen.add(m.value)
            competing.append(m)

    confidence = primary.confidence
    if competing:
        confidence = min(confidence, competing_cap)

    spans = tuple(m.span for m in matches) + tuple(extra_spans)
    return Resolution(
        value=primary.value,
        confidence=round(confidence, 4),
        spans=spans,
        alternatives=tuple(describe(m) for m in competing),
    )
