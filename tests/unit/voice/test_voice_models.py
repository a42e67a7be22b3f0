"""Tests for voice data models."""

from datetime import date, time

import pytest

from tasktracker.voice.config import ConfidenceWeights
from tasktracker.voice.models import (
    UNTITLED_TASK,
    ParsedVoiceInput,
    Priority,
    TextSpan,
    TranscriptionResult,
)


@pytest.fixture
def title_only() -> ParsedVoiceInput:
    return ParsedVoiceInput(original_text="water the plants", task_title="Water the plants", confidence=0.5)


class TestTextSpan:
    def test_overlaps(self):
        a = TextSpan(0, 5, "hello")
        assert a.overlaps(TextSpan(4, 8, "o wo"))
        assert not a.overlaps(TextSpan(5, 8, "wor"))
        assert len(a) == 5


class TestParsedVoiceInputValidation:
    def test_empty_title_rejected(self):
        with pytest.raises(ValueError):
            ParsedVoiceInput(original_text="", task_title="", confidence=0.0)

    @pytest.mark.parametrize("confidence", [-0.1, 1.5])
    def test_confidence_range(self, confidence):
        with pytest.raises(ValueError):
            ParsedVoiceInput(original_text="x", task_title="X", confidence=confidence)

    def test_value_requires_confidence(self):
        with pytest.raises(ValueError):
            ParsedVoiceInput(
                original_text="x", task_title="X", confidence=0.5, parsed_date=date(2024, 3, 15),
            )

    def test_confidence_requires_value(self):
        with pytest.raises(ValueError):
            ParsedVoiceInput(original_text="x", task_title="X", confidence=0.5, time_confidence=0.9)

    def test_frozen(self, title_only):
        with pytest.raises(AttributeError):
            title_only.task_title = "Other"


class TestCopyWith:
    def test_user_set_field_is_confirmed(self, title_only):
        edited = title_only.copy_with(parsed_date=date(2024, 3, 20))
        assert edited.parsed_date == date(2024, 3, 20)
        assert edited.date_confidence == 1.0
        assert edited.confidence == 0.7
        # original untouched
        assert title_only.parsed_date is None

    def test_clearing_a_field_clears_confidence(self, title_only):
        scheduled = title_only.copy_with(parsed_time=time(9, 0))
        cleared = scheduled.copy_with(parsed_time=None)
        assert cleared.time_confidence is None
        assert cleared.confidence == 0.5

    def test_priority_coerced(self, title_only):
        edited = title_only.copy_with(suggested_priority="urgent")
        assert edited.suggested_priority is Priority.URGENT
        assert edited.confidence == 0.55

    def test_confidence_cannot_be_overridden(self, title_only):
        with pytest.raises(TypeError):
            title_only.copy_with(confidence=1.0)

    def test_custom_weights(self, title_only):
        weights = ConfidenceWeights(base=0.4, date=0.4)
        edited = title_only.copy_with(weights=weights, parsed_date=date(2024, 3, 20))
        assert edited.confidence == 0.8

    def test_placeholder_title_scores_zero(self, title_only):
        assert title_only.copy_with(task_title=UNTITLED_TASK).confidence == 0.0

    def test_has_schedule(self, title_only):
        assert not title_only.has_schedule
        assert title_only.copy_with(parsed_time=time(9, 0)).has_schedule


class TestSerialization:
    def test_to_dict(self, title_only):
        parsed = title_only.copy_with(
            parsed_date=date(2024, 3, 20),
            parsed_time=time(15, 30),
            suggested_priority=Priority.HIGH,
            alternatives=["friday (2024-03-22)"],
        )
        data = parsed.to_dict()
        assert data["parsed_date"] == "2024-03-20"
        assert data["parsed_time"] == "15:30"
        assert data["suggested_priority"] == "high"
        assert data["alternatives"] == ["friday (2024-03-22)"]
        assert data["description"] is None

    def test_transcription_result(self):
        result = TranscriptionResult(transcript="buy milk", confidence=0.92)
        assert result.to_dict()["is_final"] is True
