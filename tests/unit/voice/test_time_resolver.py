"""Tests for tasktracker/voice/parser/time_resolver.py"""

from datetime import time

import pytest

from tasktracker.voice.parser.time_resolver import TimeResolver, guess_meridiem, to_time


@pytest.fixture
def resolver(default_config) -> TimeResolver:
    return TimeResolver(default_config)


class TestClockHelpers:
    @pytest.mark.parametrize("hour,expected", [
        (1, "p"), (5, "p"), (7, "p"), (12, "p"),
        (8, "a"), (9, "a"), (11, "a"),
    ])
    def test_guess_meridiem(self, hour, expected):
        assert guess_meridiem(hour) == expected

    def test_to_time_twelve_hour(self):
        assert to_time(12, 0, "a") == time(0, 0)
        assert to_time(12, 0, "p") == time(12, 0)
        assert to_time(3, 30, "p") == time(15, 30)

    def test_to_time_minus_minutes_wraps(self):
        assert to_time(5, 0, "p", minus_minutes=15) == time(16, 45)
        assert to_time(12, 0, "a", minus_minutes=15) == time(23, 45)

    def test_to_time_rejects_bad_hours(self):
        with pytest.raises(ValueError):
            to_time(13, 0, "p")
        with pytest.raises(ValueError):
            to_time(25, 0)


class TestExplicitTimes:
    @pytest.mark.parametrize("text,expected,confidence", [
        ("call mom at 3pm", time(15, 0), 0.9),
        ("at 3 PM", time(15, 0), 0.9),
        ("3:30 pm", time(15, 30), 0.95),
        ("at 10 a.m.", time(10, 0), 0.9),
        ("12am", time(0, 0), 0.9),
        ("12pm", time(12, 0), 0.9),
        ("noon", time(12, 0), 0.95),
        ("midnight", time(0, 0), 0.95),
        ("at 17:30", time(17, 30), 0.85),
        ("quarter to 5 pm", time(16, 45), 0.85),
        ("quarter past seven in the evening", time(19, 15), 0.85),
        ("7 in the evening", time(19, 0), 0.85),
        ("half past 3pm", time(15, 30), 0.85),
        ("take medicine at 12 at night", time(0, 0), 0.85),
        ("quarter to 12 tonight", time(23, 45), 0.85),
        ("12:30 at night", time(0, 30), 0.85),
    ])
    def test_explicit(self, resolver, text, expected, confidence):
        result = resolver.resolve(text)
        assert result.value == expected
        assert result.confidence == confidence
        assert result.alternatives == ()

    def test_invalid_hour_is_ignored(self, resolver):
        assert resolver.resolve("13pm") is None


class TestBareHours:
    @pytest.mark.parametrize("text,expected", [
        ("at 9", time(9, 0)),
        ("at 3", time(15, 0)),
        ("around 8", time(8, 0)),
        ("half past 3", time(15, 30)),
        ("5 o'clock", time(17, 0)),
        ("8 thirty", time(8, 30)),
    ])
    def test_business_hours_guess(self, resolver, text, expected):
        result = resolver.resolve(text)
        assert result.value == expected
        assert result.confidence == 0.65

    def test_period_word_fixes_meridiem(self, resolver):
        result = resolver.resolve("at 8 tomorrow morning")
        assert result.value == time(8, 0)
        assert result.confidence == 0.85
        # "morning" agrees, so it is consumed without competing
        assert result.alternatives == ()
        assert {s.text for s in result.spans} == {"at 8", "morning"}

    def test_evening_pushes_bare_hour_to_pm(self, resolver):
        assert resolver.resolve("at 8 this evening").value == time(20, 0)

    def test_twelve_tomorrow_night_is_midnight(self, resolver):
        result = resolver.resolve("at 12 tomorrow night")
        assert result.value == time(0, 0)
        assert result.confidence == 0.85
        assert result.alternatives == ()
        assert {s.text for s in result.spans} == {"at 12", "night"}

    def test_durations_are_not_times(self, resolver):
        assert resolver.resolve("in 3 days") is None
        assert resolver.resolve("at 5 minutes") is None

    @pytest.mark.parametrize("text", [
        "write about 5 things i learned",
        "cut the budget by 10 percent",
        "around 3 people are coming",
    ])
    def test_quantities_are_not_times(self, resolver, text):
        assert resolver.resolve(text) is None

    @pytest.mark.parametrize("text,expected", [
        ("call mom at 5, then dinner", time(17, 0)),
        ("at 7 on friday", time(19, 0)),
        ("by 9 tomorrow", time(9, 0)),
        ("at 4 and bring snacks", time(16, 0)),
    ])
    def test_hour_followed_by_clause_break(self, resolver, text, expected):
        assert resolver.resolve(text).value == expected


class TestPeriods:
    @pytest.mark.parametrize("text,expected,confidence", [
        ("morning", time(9, 0), 0.75),
        ("early morning", time(7, 0), 0.8),
        ("late afternoon", time(16, 0), 0.8),
        ("this evening", time(18, 0), 0.75),
        ("tonight", time(20, 0), 0.8),
        ("at night", time(21, 0), 0.7),
    ])
    def test_period_buckets(self, resolver, text, expected, confidence):
        result = resolver.resolve(text)
        assert result.value == expected
        assert result.confidence == confidence


class TestCompetingTimes:
    def test_two_clock_times(self, resolver):
        result = resolver.resolve("at 3pm or 5pm")
        assert result.value == time(15, 0)
        assert result.confidence == 0.7
        assert result.alternatives == ("5pm (17:00)",)

    def test_contradicting_period(self, resolver):
        result = resolver.resolve("3pm this morning")
        assert result.value == time(15, 0)
        assert result.confidence == 0.7
        assert result.alternatives == ("this morning (09:00)",)

    def test_agreeing_period_is_absorbed(self, resolver):
        result = resolver.resolve("3pm this afternoon")
        assert result.value == time(15, 0)
        assert result.confidence == 0.9
        assert result.alternatives == ()
        assert len(result.spans) == 2


class TestNoTime:
    @pytest.mark.parametrize("text", ["buy milk", "", "call 911", "room 12"])
    def test_returns_none(self, resolver, text):
        assert resolver.resolve(text) is None
