"""Unit tests for environment-driven settings."""

import orjson
from pydantic import ValidationError
import pytest

from text_index.config import Settings
from text_index.vocabulary_config import LogProfileConfig


pytestmark = pytest.mark.unit


class TestSettings:
    """Settings load from TEXT_INDEX_* variables."""

    def test_values_from_test_environment(self):
        settings = Settings()

        assert settings.log_level == "warning"
        assert settings.log_json is False
        assert settings.punctuation == "keep"
        assert settings.vocabulary_path is None
        assert settings.phrase_case_sensitive is True

    def test_environment_overrides(self, monkeypatch):
        monkeypatch.setenv("TEXT_INDEX_PUNCTUATION", "strip")
        monkeypatch.setenv("TEXT_INDEX_LOG_LEVEL", "DEBUG")

        settings = Settings()

        assert settings.punctuation == "strip"
        assert settings.log_level == "debug"

    def test_invalid_punctuation_rejected(self, monkeypatch):
        monkeypatch.setenv("TEXT_INDEX_PUNCTUATION", "remove")

        with pytest.raises(ValidationError):
            Settings()

    def test_load_vocabulary_defaults(self, monkeypatch):
        monkeypatch.setenv("TEXT_INDEX_PUNCTUATION", "strip")

        vocabulary = Settings().load_vocabulary()

        assert vocabulary.stopwords == ["and", "is", "this"]
        assert vocabulary.stems == {}
        assert vocabulary.punctuation == "strip"

    def test_load_vocabulary_from_path(self, monkeypatch, tmp_path):
        path = tmp_path / "vocabulary.json"
        path.write_bytes(orjson.dumps({"stopwords": ["the"], "stems": {"ran": "run"}}))
        monkeypatch.setenv("TEXT_INDEX_VOCABULARY_PATH", str(path))

        vocabulary = Settings().load_vocabulary()

        assert vocabulary.stopwords == ["the"]
        assert vocabulary.stems == {"ran": "run"}

    def test_log_profile_merges_vocabulary_overrides(self):
        settings = Settings()
        vocabulary = settings.load_vocabulary().model_copy(
            update={"logging": LogProfileConfig(logger_levels={"text_index.search": "debug"})}
        )
        profile = settings.log_profile(vocabulary)

        assert profile.level == "warning"
        assert profile.json_output is False
        assert profile.logger_levels == {"text_index.search": "debug"}
