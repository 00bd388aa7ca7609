"""Centralized configuration for text-index using Pydantic Settings."""

from pathlib import Path
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from text_index.vocabulary_config import LogProfileConfig, VocabularyConfig


class Settings(BaseSettings):
    """Strictly typed configuration loaded from ``TEXT_INDEX_*`` environment variables.

    Values that also appear in a vocabulary file (punctuation policy) act as
    defaults; the vocabulary file wins when one is supplied.
    """

    model_config = SettingsConfigDict(
        env_prefix="TEXT_INDEX_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        validate_default=True,
        extra="ignore",
    )

    # Logging
    log_level: Literal["debug", "info", "warning", "error", "critical"] = Field(
        default="info", description="Root log level"
    )
    log_json: bool = Field(default=True, description="Emit structured JSON logs")

    # Analysis
    punctuation: Literal["keep", "strip"] = Field(
        default="keep", description="Edge punctuation policy used when no vocabulary file is given"
    )
    vocabulary_path: Path | None = Field(
        default=None, description="JSON file with stop words and stem table (see VocabularyConfig)"
    )

    # Queries
    phrase_case_sensitive: bool = Field(
        default=True, description="Phrase queries match raw text exactly; false ignores case"
    )

    @field_validator("log_level", "punctuation", mode="before")
    @classmethod
    def normalize_case(cls, value: object) -> object:
        return value.strip().lower() if isinstance(value, str) else value

    def load_vocabulary(self) -> VocabularyConfig:
        """Return the configured vocabulary, or the built-in defaults."""
        if self.vocabulary_path is not None:
            return VocabularyConfig.from_json_file(self.vocabulary_path)
        return VocabularyConfig(
            punctuation=self.punctuation,
            logging=LogProfileConfig(level=self.log_level, json_output=self.log_json),
        )

    def log_profile(self, vocabulary: VocabularyConfig | None = None) -> LogProfileConfig:
        """Logging profile: environment level/format plus per-logger overrides from the vocabulary."""
        overrides = vocabulary.logging.logger_levels if vocabulary is not None else {}
        return LogProfileConfig(level=self.log_level, json_output=self.log_json, logger_levels=overrides)
