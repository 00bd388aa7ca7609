"""Unit tests for vocabulary configuration files."""

import orjson
from pydantic import ValidationError
import pytest

from text_index.vocabulary_config import LogProfileConfig, VocabularyConfig


@pytest.mark.unit
class TestVocabularyConfig:
    """Validation and normalization of vocabulary files."""

    def test_defaults(self):
        config = VocabularyConfig()

        assert config.name == "default"
        assert config.stopwords == ["and", "is", "this"]
        assert config.stems == {}
        assert config.punctuation == "keep"
        assert config.logging == LogProfileConfig()

    def test_default_stopwords_match_an_explicit_file_entry(self):
        explicit = VocabularyConfig.model_validate({"stopwords": ["this", "is", "and"]})

        assert VocabularyConfig().stopwords == explicit.stopwords
        assert VocabularyConfig() == explicit

    def test_stopwords_are_folded_and_deduplicated(self):
        config = VocabularyConfig(stopwords=["AND", "and", " This "])

        assert config.stopwords == ["and", "this"]
        assert "AND" in config.stop_word_set()

    def test_stems_are_folded(self):
        config = VocabularyConfig(stems={"Teaching": "TEACH", "teaches": "teach"})

        assert config.stems == {"teaching": "teach", "teaches": "teach"}
        assert config.stem_table().conflate("teaching") == "teach"

    @pytest.mark.parametrize("stopword", ["", "   ", "two words"])
    def test_invalid_stopwords_rejected(self, stopword):
        with pytest.raises(ValidationError, match="single non-blank tokens"):
            VocabularyConfig(stopwords=[stopword])

    def test_multi_token_stem_rejected(self):
        with pytest.raises(ValidationError, match="single token"):
            VocabularyConfig(stems={"teaching": "to teach"})

    def test_conflicting_stems_after_folding_rejected(self):
        with pytest.raises(ValidationError, match="Conflicting stems"):
            VocabularyConfig(stems={"Teaching": "teach", "teaching": "tea"})

    def test_unknown_keys_rejected(self):
        with pytest.raises(ValidationError):
            VocabularyConfig(stop_words=["and"])  # type: ignore[call-arg]

    def test_invalid_name_rejected(self):
        with pytest.raises(ValidationError):
            VocabularyConfig(name="has space")


@pytest.mark.unit
class TestVocabularyConfigFile:
    """Loading from JSON files."""

    def test_from_json_file(self, tmp_path):
        path = tmp_path / "vocabulary.json"
        path.write_bytes(
            orjson.dumps(
                {
                    "name": "notebook",
                    "stopwords": ["is", "this", "and"],
                    "stems": {"teaching": "teach", "teaches": "teach"},
                    "punctuation": "strip",
                    "logging": {"level": "debug", "json_output": False},
                }
            )
        )

        config = VocabularyConfig.from_json_file(path)

        assert config.name == "notebook"
        assert config.punctuation == "strip"
        assert config.logging.level == "debug"
        assert config.logging.json_output is False

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError, match="Vocabulary config not found"):
            VocabularyConfig.from_json_file(tmp_path / "missing.json")

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "broken.json"
        path.write_text("{not json", encoding="utf-8")

        with pytest.raises(ValueError, match="not valid JSON"):
            VocabularyConfig.from_json_file(path)


@pytest.mark.unit
class TestLogProfileConfig:
    """Log profile validation."""

    def test_invalid_level_rejected(self):
        with pytest.raises(ValidationError):
            LogProfileConfig(level="verbose")

    def test_invalid_logger_level_rejected(self):
        with pytest.raises(ValidationError, match="Invalid log level"):
            LogProfileConfig(logger_levels={"text_index": "loud"})
