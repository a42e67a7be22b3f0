"""Tests for voice config loading and validation."""

from pathlib import Path
from unittest.mock import patch

import pytest
from pydantic import ValidationError

from tasktracker.voice.config import (
    HolidayRule,
    VocabularyConfig,
    VoiceConfig,
    VoiceConfigError,
    load_voice_config,
)

ARGS_DIR = Path(__file__).resolve().parents[3] / "args"


class TestLoadVoiceConfig:
    def test_shipped_config_mirrors_defaults(self):
        config = load_voice_config(ARGS_DIR / "voice.yaml")
        defaults = VoiceConfig()

        assert config.parser == defaults.parser
        assert config.confidence_weights == defaults.confidence_weights
        assert config.vocabulary.categories == defaults.vocabulary.categories
        assert list(config.vocabulary.categories) == list(defaults.vocabulary.categories)
        assert config.vocabulary.priorities == defaults.vocabulary.priorities
        assert config.vocabulary.stopwords == defaults.vocabulary.stopwords
        assert config.vocabulary.command_prefixes == defaults.vocabulary.command_prefixes
        assert set(config.vocabulary.holidays) == set(defaults.vocabulary.holidays)

    def test_partial_file_keeps_defaults(self, tmp_path):
        path = tmp_path / "voice.yaml"
        path.write_text("parser:\n  week_end_day: friday\n")

        config = load_voice_config(path)

        assert config.parser.week_end_day == "friday"
        assert config.parser.competing_match_cap == 0.7
        assert "household" in config.vocabulary.categories

    def test_empty_file_is_defaults(self, tmp_path):
        path = tmp_path / "voice.yaml"
        path.write_text("")
        assert load_voice_config(path) == VoiceConfig()

    def test_explicit_missing_path_raises(self, tmp_path):
        with pytest.raises(VoiceConfigError):
            load_voice_config(tmp_path / "missing.yaml")

    def test_explicit_invalid_yaml_raises(self, tmp_path):
        path = tmp_path / "voice.yaml"
        path.write_text("parser: [unclosed\n")
        with pytest.raises(VoiceConfigError):
            load_voice_config(path)

    def test_explicit_schema_violation_raises(self, tmp_path):
        path = tmp_path / "voice.yaml"
        path.write_text("parser:\n  fallback_title_words: 12\n")
        with pytest.raises(VoiceConfigError):
            load_voice_config(path)

    def test_default_path_missing_falls_back(self, tmp_path):
        with patch("tasktracker.voice.config.CONFIG_PATH", tmp_path / "nope.yaml"):
            assert load_voice_config() == VoiceConfig()

    def test_default_path_invalid_falls_back(self, tmp_path):
        path = tmp_path / "voice.yaml"
        path.write_text("confidence_weights:\n  base: 3\n")
        with patch("tasktracker.voice.config.CONFIG_PATH", path):
            assert load_voice_config() == VoiceConfig()


class TestModels:
    def test_vocabulary_lowercased(self):
        vocabulary = VocabularyConfig(
            stopwords=["The", " A "],
            categories={"Pets": ["Vet", "  "]},
        )
        assert vocabulary.stopwords == ["the", "a"]
        assert vocabulary.categories == {"pets": ["vet"]}

    def test_medium_priority_rejected(self):
        with pytest.raises(ValidationError):
            VocabularyConfig(priorities={"medium": ["normal"]})

    def test_holiday_needs_one_rule(self):
        with pytest.raises(ValidationError):
            HolidayRule(month=5, day=1, weekday="monday", occurrence=1)
        with pytest.raises(ValidationError):
            HolidayRule(month=5, weekday="monday")

    def test_floating_holiday(self):
        rule = HolidayRule(month=5, weekday="monday", occurrence=5)
        assert rule.day is None

    def test_unknown_week_end_day_rejected(self):
        with pytest.raises(ValidationError):
            VoiceConfig.model_validate({"parser": {"week_end_day": "someday"}})
