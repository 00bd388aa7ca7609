"""Static vocabularies consulted by the analyzer: stop words and stem tables.

Both are immutable after construction. Changing either one means building a
new index, so there is deliberately no mutation API here.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping


DEFAULT_STOPWORDS: tuple[str, ...] = ("is", "this", "and")


def fold(word: str) -> str:
    """Case-fold a word the same way for documents, vocabularies and queries."""
    return word.casefold()


class StopWordSet:
    """Case-folded set of words excluded from indexing and querying."""

    __slots__ = ("_words",)

    def __init__(self, words: Iterable[str] | None = None) -> None:
        vocab = DEFAULT_STOPWORDS if words is None else words
        self._words = frozenset(fold(word) for word in vocab)

    @classmethod
    def empty(cls) -> StopWordSet:
        return cls(())

    def __contains__(self, token: object) -> bool:
        return isinstance(token, str) and fold(token) in self._words

    def __iter__(self) -> Iterator[str]:
        return iter(sorted(self._words))

    def __len__(self) -> int:
        return len(self._words)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, StopWordSet):
            return NotImplemented
        return self._words == other._words

    def __hash__(self) -> int:
        return hash(self._words)

    def __repr__(self) -> str:
        return f"StopWordSet({sorted(self._words)!r})"


class StemTable(Mapping[str, str]):
    """Many-to-one mapping from surface forms to stems.

    Keys are case-folded on construction. Words absent from the table are
    their own stem.
    """

    __slots__ = ("_stems",)

    def __init__(self, stems: Mapping[str, str] | Iterable[tuple[str, str]] | None = None) -> None:
        pairs = stems.items() if isinstance(stems, Mapping) else (stems or ())
        self._stems: dict[str, str] = {fold(surface): fold(stem) for surface, stem in pairs}

    def conflate(self, token: str) -> str:
        """Return the stem for ``token``, or ``token`` itself when unmapped."""
        return self._stems.get(token, token)

    def __getitem__(self, key: str) -> str:
        return self._stems[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._stems)

    def __len__(self) -> int:
        return len(self._stems)

    def __hash__(self) -> int:
        return hash(frozenset(self._stems.items()))

    def __repr__(self) -> str:
        return f"StemTable({self._stems!r})"

    def surface_forms(self, stem: str) -> list[str]:
        """List the surface words that conflate to ``stem``."""
        target = fold(stem)
        return sorted(surface for surface, mapped in self._stems.items() if mapped == target)
