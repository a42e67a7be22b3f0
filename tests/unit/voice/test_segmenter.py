"""Tests for title/description segmentation."""

import pytest

from tasktracker.voice.config import VocabularyConfig
from tasktracker.voice.models import TextSpan
from tasktracker.voice.parser.segmenter import Segmenter, capitalize, collapse, merge_spans


def span(text: str, phrase: str) -> TextSpan:
    start = text.index(phrase)
    return TextSpan(start, start + len(phrase), phrase)


@pytest.fixture
def segmenter() -> Segmenter:
    return Segmenter(VocabularyConfig())


class TestHelpers:
    def test_collapse(self):
        assert collapse("  buy   milk ,  now  ") == "buy milk, now"
        assert collapse("call mom , , tomorrow") == "call mom, tomorrow"

    def test_merge_spans(self):
        spans = [TextSpan(10, 15, "x"), TextSpan(0, 4, "y"), TextSpan(3, 6, "z")]
        assert merge_spans(spans) == [(0, 6), (10, 15)]

    def test_capitalize_keeps_rest(self):
        assert capitalize("email the CEO") == "Email the CEO"
        assert capitalize("") == ""


class TestClean:
    @pytest.mark.parametrize("text,expected", [
        ("Um, buy milk uh tomorrow", "buy milk tomorrow"),
        ("so, call mom", "call mom"),
        ("basically call mom", "call mom"),
        ("call mom, you know, tomorrow", "call mom, tomorrow"),
        ("buy a book I like", "buy a book I like"),
        ("  pay   rent  ", "pay rent"),
    ])
    def test_clean(self, segmenter, text, expected):
        assert segmenter.clean(text) == expected

    def test_fillers_are_whole_words(self, segmenter):
        assert segmenter.clean("order a drum kit") == "order a drum kit"


class TestSegment:
    def test_strips_command_prefix_and_date(self, segmenter):
        text = "Remind me to buy groceries tomorrow"
        result = segmenter.segment(text, [span(text, "tomorrow")])
        assert result.title == "Buy groceries"
        assert result.description is None
        assert result.fallback is False

    def test_connectors_go_with_excised_phrase(self, segmenter):
        text = "Pay rent due by friday"
        assert segmenter.segment(text, [span(text, "friday")]).title == "Pay rent"

    def test_splits_description_at_boundary(self, segmenter):
        result = segmenter.segment("Email the report to Sam", [])
        assert result.title == "Email the report"
        assert result.description == "Sam"

    def test_boundary_inside_verb_phrase_is_kept(self, segmenter):
        result = segmenter.segment("Go to the gym", [])
        assert result.title == "Go to the gym"
        assert result.description is None

    def test_trivial_description_dropped(self, segmenter):
        result = segmenter.segment("Call mom about it", [])
        assert result.title == "Call mom"
        assert result.description is None

    def test_leading_priority_before_prefix(self, segmenter):
        text = "Urgent: remind me to call the client"
        result = segmenter.segment(text, [span(text, "Urgent")])
        assert result.title == "Call the client"

    def test_falls_back_to_leading_words(self, segmenter):
        result = segmenter.segment("Remind me", [])
        assert result.title == "Remind me"
        assert result.fallback is True

    def test_fallback_word_limit(self):
        segmenter = Segmenter(VocabularyConfig(), fallback_title_words=5)
        assert segmenter.fallback_title("one two three four five six seven") == "One two three four five"

    def test_no_words(self, segmenter):
        assert segmenter.segment("?!", []) is None
