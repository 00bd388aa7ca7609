"""Analyzer utilities for the inverted index.

This module mirrors Whoosh's composable tokenizer/filter design: a tokenizer
emits a lazy stream of tokens and each filter wraps the stream of the one
before it. The same analyzer instance normalizes document text at build time
and query terms at lookup time, so both sides always agree on what a token is.

Pipeline order is fixed: whitespace split -> (optional punctuation strip) ->
case-fold -> stop-word removal -> conflation. Stop words are removed before
conflation, so a stop word is never stemmed or indexed.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Iterator, Mapping, Sequence
from dataclasses import dataclass
import re
from typing import Literal, Protocol

from text_index.search.vocabulary import StemTable, StopWordSet, fold


PunctuationPolicy = Literal["keep", "strip"]

_WHITESPACE_PATTERN = re.compile(r"\S+")
_EDGE_PUNCTUATION = re.compile(r"^[^\w]+|[^\w]+$", re.UNICODE)


@dataclass(frozen=True)
class Token:
    """Represents a token emitted by analyzers."""

    text: str
    position: int
    start_char: int
    end_char: int

    def copy_with(self, text: str) -> Token:
        return Token(text=text, position=self.position, start_char=self.start_char, end_char=self.end_char)


class Tokenizer(Protocol):
    """Protocol implemented by tokenizers."""

    def __call__(self, text: str) -> Iterator[Token]:  # pragma: no cover - interface definition
        ...


class TokenFilter(Protocol):
    """Protocol implemented by token filters."""

    def __call__(self, tokens: Iterable[Token]) -> Iterator[Token]:  # pragma: no cover - interface definition
        ...


class WhitespaceTokenizer:
    """Splits text into exact whitespace-delimited substrings.

    Each call returns a fresh generator, so a document can be retokenized on
    demand.
    """

    def __call__(self, text: str) -> Iterator[Token]:
        for position, match in enumerate(_WHITESPACE_PATTERN.finditer(text)):
            yield Token(
                text=match.group(0),
                position=position,
                start_char=match.start(),
                end_char=match.end(),
            )


def tokenize(text: str) -> Iterator[str]:
    """Yield the raw whitespace-delimited tokens of ``text``."""
    for token in WhitespaceTokenizer()(text):
        yield token.text


class PunctuationStripFilter:
    """Trims leading and trailing non-word characters.

    ``"#SQL"`` becomes ``"SQL"`` and ``"fun!"`` becomes ``"fun"``; interior
    punctuation such as ``"Prof_Chuck"`` or ``"don't"`` is kept. Tokens made
    only of punctuation are dropped.
    """

    def __call__(self, tokens: Iterable[Token]) -> Iterator[Token]:
        for token in tokens:
            stripped = _EDGE_PUNCTUATION.sub("", token.text)
            if not stripped:
                continue
            if stripped == token.text:
                yield token
            else:
                yield token.copy_with(stripped)


class CaseFoldFilter:
    """Filter that case-folds token text."""

    def __call__(self, tokens: Iterable[Token]) -> Iterator[Token]:
        for token in tokens:
            folded = fold(token.text)
            if folded == token.text:
                yield token
            else:
                yield token.copy_with(folded)


class StopFilter:
    """Removes stopwords from the stream."""

    def __init__(self, stopwords: StopWordSet | Iterable[str] | None = None) -> None:
        self.stopwords = stopwords if isinstance(stopwords, StopWordSet) else StopWordSet(stopwords)

    def __call__(self, tokens: Iterable[Token]) -> Iterator[Token]:
        for token in tokens:
            if token.text not in self.stopwords:
                yield token


class ConflationFilter:
    """Replaces each token with its stem from a lookup table."""

    def __init__(self, stems: StemTable | Mapping[str, str] | None = None) -> None:
        self.stems = stems if isinstance(stems, StemTable) else StemTable(stems)

    def __call__(self, tokens: Iterable[Token]) -> Iterator[Token]:
        for token in tokens:
            stem = self.stems.conflate(token.text)
            yield token if stem == token.text else token.copy_with(stem)


class AnalyzerPipeline:
    """Composable analyzer pipeline (tokenizer + filters)."""

    def __init__(self, tokenizer: Tokenizer, filters: Sequence[TokenFilter] | None = None) -> None:
        self.tokenizer = tokenizer
        self.filters = list(filters or [])

    def stream(self, text: str) -> Iterator[Token]:
        stream: Iterable[Token] = self.tokenizer(text)
        for token_filter in self.filters:
            stream = token_filter(stream)
        yield from stream

    def __call__(self, text: str) -> list[Token]:
        return list(self.stream(text))


_TOKEN_PREFILTERS: dict[str, Callable[[], list[TokenFilter]]] = {
    "keep": lambda: [],
    "strip": lambda: [PunctuationStripFilter()],
}


class IndexAnalyzer:
    """Normalizes document text and query terms identically.

    Args:
        stopwords: Words removed after case-folding. Defaults to the built-in set.
        stems: Surface form -> stem lookup applied after stop-word removal.
        punctuation: ``"keep"`` indexes exact whitespace-delimited substrings;
            ``"strip"`` trims edge punctuation first.
    """

    def __init__(
        self,
        *,
        stopwords: StopWordSet | Iterable[str] | None = None,
        stems: StemTable | Mapping[str, str] | None = None,
        punctuation: PunctuationPolicy = "keep",
    ) -> None:
        if punctuation not in _TOKEN_PREFILTERS:
            msg = f"Unknown punctuation policy '{punctuation}'. Available: {sorted(_TOKEN_PREFILTERS)}"
            raise ValueError(msg)
        self.punctuation = punctuation
        self.stop_filter = StopFilter(stopwords)
        self.conflation_filter = ConflationFilter(stems)
        filters: list[TokenFilter] = [
            *_TOKEN_PREFILTERS[punctuation](),
            CaseFoldFilter(),
            self.stop_filter,
            self.conflation_filter,
        ]
        self.pipeline = AnalyzerPipeline(WhitespaceTokenizer(), filters)

    @property
    def stopwords(self) -> StopWordSet:
        return self.stop_filter.stopwords

    @property
    def stems(self) -> StemTable:
        return self.conflation_filter.stems

    def __call__(self, text: str) -> list[Token]:
        return self.pipeline(text)

    def terms(self, text: str) -> list[str]:
        """Return normalized terms in document order, duplicates included."""
        return [token.text for token in self.pipeline.stream(text)]

    def unique_terms(self, text: str) -> list[str]:
        """Return normalized terms with duplicates collapsed, first occurrence wins."""
        return list(dict.fromkeys(self.terms(text)))
