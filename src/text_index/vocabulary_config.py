"""Vocabulary configuration using Pydantic.

A vocabulary file describes how one index normalizes text: which words are
stop words, which surface forms conflate to which stem, and how edge
punctuation is treated. It is authored externally (typically a JSON file
next to the document dump) and validated at load time so a bad entry fails
fast instead of silently producing a skewed index.

Example ``vocabulary.json``::

    {
        "name": "notebook",
        "stopwords": ["is", "this", "and"],
        "stems": {"teaching": "teach", "teaches": "teach"},
        "punctuation": "keep"
    }
"""

from pathlib import Path
from typing import Annotated, Literal

import orjson
from pydantic import BaseModel, Field, field_validator

from text_index.search.vocabulary import DEFAULT_STOPWORDS, StemTable, StopWordSet, fold


_ALLOWED_LEVELS = {"debug", "info", "warning", "error", "critical"}


class LogProfileConfig(BaseModel):
    """Logging preferences applied by the CLI."""

    model_config = {"extra": "forbid"}

    level: Annotated[
        str,
        Field(
            pattern=r"^(debug|info|warning|error|critical)$",
            description="Root log level",
        ),
    ] = "info"

    json_output: Annotated[
        bool,
        Field(description="Emit structured JSON logs"),
    ] = True

    logger_levels: Annotated[
        dict[str, str],
        Field(
            description="Per-logger level overrides (logger name -> level)",
            examples=[{"text_index.search.query": "debug"}],
        ),
    ] = Field(default_factory=dict)

    @field_validator("logger_levels")
    @classmethod
    def validate_logger_levels(cls, value: dict[str, str]) -> dict[str, str]:
        """Validate that all logger_levels values use supported log levels."""
        invalid = {name: level for name, level in value.items() if level not in _ALLOWED_LEVELS}
        if invalid:
            details = ", ".join(f"{name}={level}" for name, level in invalid.items())
            raise ValueError(
                f"Invalid log level(s) in logger_levels; allowed levels are {sorted(_ALLOWED_LEVELS)}; got: {details}"
            )
        return value


class VocabularyConfig(BaseModel):
    """Stop words, stem table and tokenizer policy for one index."""

    model_config = {"extra": "forbid", "validate_default": True}

    name: Annotated[
        str,
        Field(
            min_length=1,
            pattern=r"^[A-Za-z0-9_.-]+$",
            description="Index name used in logs and metrics",
        ),
    ] = "default"

    stopwords: Annotated[
        list[str],
        Field(description="Words excluded from indexing and querying (case-insensitive)"),
    ] = Field(default_factory=lambda: list(DEFAULT_STOPWORDS))

    stems: Annotated[
        dict[str, str],
        Field(
            description="Surface form -> stem lookup; unmapped words are their own stem",
            examples=[{"teaching": "teach", "teaches": "teach"}],
        ),
    ] = Field(default_factory=dict)

    punctuation: Annotated[
        Literal["keep", "strip"],
        Field(description="'keep' indexes exact whitespace-delimited tokens; 'strip' trims edge punctuation"),
    ] = "keep"

    logging: LogProfileConfig = Field(default_factory=LogProfileConfig)

    @field_validator("stopwords")
    @classmethod
    def normalize_stopwords(cls, value: list[str]) -> list[str]:
        normalized: list[str] = []
        for word in value:
            stripped = word.strip()
            if not stripped or len(stripped.split()) > 1:
                raise ValueError(f"Stop words must be single non-blank tokens; got {word!r}")
            normalized.append(fold(stripped))
        return sorted(set(normalized))

    @field_validator("stems")
    @classmethod
    def normalize_stems(cls, value: dict[str, str]) -> dict[str, str]:
        normalized: dict[str, str] = {}
        for surface, stem in value.items():
            surface_key = fold(surface.strip())
            stem_value = fold(stem.strip())
            if not surface_key or not stem_value or len(surface_key.split()) > 1 or len(stem_value.split()) > 1:
                raise ValueError(f"Stem entries must map a single token to a single token; got {surface!r}: {stem!r}")
            if surface_key in normalized and normalized[surface_key] != stem_value:
                raise ValueError(
                    f"Conflicting stems for {surface_key!r}: {normalized[surface_key]!r} and {stem_value!r}"
                )
            normalized[surface_key] = stem_value
        return normalized

    def stop_word_set(self) -> StopWordSet:
        return StopWordSet(self.stopwords)

    def stem_table(self) -> StemTable:
        return StemTable(self.stems)

    @classmethod
    def from_json_file(cls, path: Path) -> "VocabularyConfig":
        """Load configuration from a JSON file.

        Raises:
            FileNotFoundError: If the file doesn't exist
            ValueError: If the file is not valid JSON or fails validation
        """
        if not path.exists():
            raise FileNotFoundError(f"Vocabulary config not found: {path}")

        try:
            data = orjson.loads(path.read_bytes())
        except orjson.JSONDecodeError as exc:
            raise ValueError(f"Vocabulary config is not valid JSON: {path}: {exc}") from exc

        return cls.model_validate(data)
