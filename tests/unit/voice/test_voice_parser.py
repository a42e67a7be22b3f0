"""Tests for tasktracker/voice/parser/voice_parser.py

The parser is pure: every test passes a fixed reference instant and
checks exact dates, so results never depend on the wall clock.
"""

from datetime import date, datetime, time

import pytest

from tasktracker.voice.config import ParserSettings, VoiceConfig
from tasktracker.voice.models import UNTITLED_TASK, Priority
from tasktracker.voice.parser import VoiceParser, get_parsing_stats, parse


# =============================================================================
# Worked examples
# =============================================================================


class TestWorkedExamples:
    def test_groceries_tomorrow(self, parser, friday):
        result = parser.parse("Remind me to buy groceries tomorrow", friday)

        assert result.task_title == "Buy groceries"
        assert result.description is None
        assert result.parsed_date == date(2024, 3, 16)
        assert result.parsed_time is None
        assert result.suggested_category == "household"
        assert result.category_confidence == 0.9
        assert result.suggested_priority is None
        assert result.confidence == 0.77
        assert result.confidence >= 0.7

    def test_doctor_next_friday_morning(self, parser, wednesday):
        result = parser.parse("Call doctor next Friday morning", wednesday)

        assert result.task_title == "Call doctor"
        assert result.parsed_date == date(2024, 3, 22)
        assert result.parsed_time == time(9, 0)
        assert result.time_confidence == 0.75
        assert result.suggested_category == "health"

    def test_urgent_client_call(self, parser, friday):
        result = parser.parse("Urgent: call client", friday)

        assert result.task_title == "Call client"
        assert result.suggested_priority == Priority.URGENT
        assert result.priority_confidence >= 0.8
        assert result.suggested_category == "work"

    def test_meeting_with_description(self, parser, friday):
        result = parser.parse("Schedule meeting with boss at 3pm for project review", friday)

        assert result.task_title == "Meeting with boss"
        assert result.description == "project review"
        assert result.parsed_time == time(15, 0)
        assert result.parsed_date is None
        assert result.suggested_category == "work"

    def test_description_after_priority_and_date(self, parser, wednesday):
        result = parser.parse("Important: email the report to Sam by Friday", wednesday)

        assert result.task_title == "Email the report"
        assert result.description == "Sam"
        assert result.suggested_priority == Priority.HIGH
        assert result.parsed_date == date(2024, 3, 15)

    def test_exact_time_with_date(self, parser, wednesday):
        result = parser.parse("Call doctor next Friday at 9:30am", wednesday)

        assert result.task_title == "Call doctor"
        assert result.parsed_date == date(2024, 3, 22)
        assert result.parsed_time == time(9, 30)
        assert result.time_confidence == 0.95

    def test_disfluent_speech(self, parser, friday):
        result = parser.parse("Um, so, remind me to uh pay the rent tomorrow", friday)

        assert result.task_title == "Pay the rent"
        assert result.parsed_date == date(2024, 3, 16)
        assert result.suggested_category == "finance"
        assert result.original_text == "Um, so, remind me to uh pay the rent tomorrow"


class TestThisVersusNext:
    def test_this_friday(self, parser, wednesday):
        assert parser.parse("Pay rent this Friday", wednesday).parsed_date == date(2024, 3, 15)

    def test_next_friday(self, parser, wednesday):
        assert parser.parse("Pay rent next Friday", wednesday).parsed_date == date(2024, 3, 22)

    def test_reference_date_accepted(self, parser):
        result = parser.parse("Pay rent tomorrow", date(2024, 3, 15))
        assert result.parsed_date == date(2024, 3, 16)

    def test_this_week(self, parser, wednesday):
        result = parser.parse("Finish the report this week", wednesday)

        assert result.task_title == "Finish the report"
        assert result.parsed_date == date(2024, 3, 17)
        assert result.date_confidence == 0.8

    def test_dashed_date(self, parser, wednesday):
        result = parser.parse("Pay rent 4-1-2024", wednesday)

        assert result.task_title == "Pay rent"
        assert result.parsed_date == date(2024, 4, 1)


class TestNumbersInTitles:
    @pytest.mark.parametrize("text", [
        "Write about 5 things I learned",
        "Cut the budget by 10 percent",
    ])
    def test_quantity_stays_in_title(self, parser, friday, text):
        result = parser.parse(text, friday)

        assert result.task_title == text
        assert result.parsed_time is None
        assert result.time_confidence is None

    def test_twelve_at_night_is_midnight(self, parser, friday):
        result = parser.parse("Take medicine at 12 at night", friday)

        assert result.task_title == "Take medicine"
        assert result.parsed_time == time(0, 0)
        assert result.time_confidence == 0.85


# =============================================================================
# Empty and degenerate input
# =============================================================================


class TestPlaceholder:
    @pytest.mark.parametrize("text", ["", "   ", "\n\t", "um uh", "!!!", "?"])
    def test_no_words(self, parser, friday, text):
        result = parser.parse(text, friday)

        assert result.task_title == UNTITLED_TASK
        assert result.confidence == 0.0
        assert result.parsed_date is None
        assert result.parsed_time is None
        assert result.suggested_category is None
        assert result.suggested_priority is None
        assert result.original_text == text

    def test_non_string_input(self, parser, friday):
        result = parser.parse(None, friday)
        assert result.task_title == UNTITLED_TASK
        assert result.confidence == 0.0

    def test_prefix_only_falls_back(self, parser, friday):
        result = parser.parse("Remind me", friday)
        assert result.task_title == "Remind me"
        assert result.confidence == 0.5

    def test_only_a_date_falls_back(self, parser, friday):
        result = parser.parse("tomorrow", friday)
        assert result.task_title == "Tomorrow"
        assert result.parsed_date == date(2024, 3, 16)


class TestInvariants:
    UTTERANCES = [
        "",
        "Buy milk",
        "Remind me to buy groceries tomorrow",
        "Call mom yesterday tomorrow next week",
        "at 3pm or 5pm call the bank",
        "not urgent but important: file taxes before christmas",
        "12345",
        "こんにちは",
        "a" * 1000,
        "the the the",
        "Set a reminder for me to set a reminder",
    ]

    @pytest.mark.parametrize("text", UTTERANCES)
    def test_result_is_well_formed(self, parser, friday, text):
        result = parser.parse(text, friday)

        assert result.task_title
        assert 0.0 <= result.confidence <= 1.0
        assert (result.parsed_date is None) == (result.date_confidence is None)
        assert (result.parsed_time is None) == (result.time_confidence is None)
        assert (result.suggested_category is None) == (result.category_confidence is None)
        assert (result.suggested_priority is None) == (result.priority_confidence is None)
        assert result.suggested_priority != Priority.MEDIUM

    @pytest.mark.parametrize("text", UTTERANCES)
    def test_deterministic(self, parser, friday, text):
        assert parser.parse(text, friday) == parser.parse(text, friday)

    def test_title_only_scores_base(self, parser, friday):
        result = parser.parse("Water the plants", friday)

        assert result.task_title == "Water the plants"
        assert result.confidence == 0.5
        assert not result.has_schedule


class TestCompetingPhrases:
    def test_contradictory_dates(self, parser, wednesday):
        result = parser.parse("Call mom yesterday tomorrow next week", wednesday)

        assert result.task_title == "Call mom"
        assert result.parsed_date == date(2024, 3, 12)
        assert result.date_confidence == 0.7
        assert "tomorrow (2024-03-14)" in result.alternatives
        assert "next week (2024-03-20)" in result.alternatives

    def test_contradictory_times(self, parser, friday):
        result = parser.parse("Call the bank at 3pm or 5pm", friday)

        assert result.parsed_time == time(15, 0)
        assert result.time_confidence == 0.7
        assert result.alternatives == ("5pm (17:00)",)


class TestConfiguration:
    def test_custom_categories(self, default_config, friday):
        parser = VoiceParser(default_config, categories={"pets": ["vet", "pets"]})
        result = parser.parse("Take the dog to the vet", friday)
        assert result.suggested_category == "pets"

    def test_fallback_word_count(self, friday):
        config = VoiceConfig(parser=ParserSettings(fallback_title_words=5))
        parser = VoiceParser(config)
        result = parser.parse("to the for it on a the and of in", friday)
        assert result.task_title == "To the for it on"

    def test_module_level_parse(self, friday):
        result = parse("Remind me to buy groceries tomorrow", friday)
        assert result.task_title == "Buy groceries"
        assert result.parsed_date == date(2024, 3, 16)


# =============================================================================
# Parsing stats
# =============================================================================


class TestParsingStats:
    def test_simple_utterance(self):
        stats = get_parsing_stats("Buy milk")

        assert stats.original_length == 8
        assert stats.word_count == 2
        assert not stats.has_date_keywords
        assert not stats.has_time_keywords
        assert not stats.has_priority_keywords
        assert stats.complexity_score == pytest.approx(0.054)

    def test_complex_utterance(self):
        text = "Schedule urgent important meeting with client tomorrow at 3 PM"
        stats = get_parsing_stats(text)

        assert stats.word_count == 10
        assert stats.has_date_keywords
        assert stats.has_time_keywords
        assert stats.has_priority_keywords
        assert stats.complexity_score > 0.5
        assert stats.complexity_score == pytest.approx(0.3 * len(text) / 100 + 0.15 + 0.4)

    def test_keywords_are_whole_words(self):
        stats = get_parsing_stats("Clam chowder")
        assert not stats.has_time_keywords

    def test_topic_words_are_not_time_keywords(self):
        assert not get_parsing_stats("Call mom about the party").has_time_keywords
        assert not get_parsing_stats("Walk around the block").has_time_keywords

    def test_empty(self):
        stats = get_parsing_stats("")
        assert stats.word_count == 0
        assert stats.complexity_score == 0.0

    def test_parser_method_matches_module_function(self, parser):
        text = "Tomorrow meeting at noon"
        assert parser.get_parsing_stats(text) == get_parsing_stats(text)
        assert get_parsing_stats(text).has_time_keywords
