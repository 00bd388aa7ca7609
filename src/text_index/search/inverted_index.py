"""Immutable token -> posting set mapping.

An ``InvertedIndex`` records presence only: each posting set holds the ids of
documents containing the token at least once, with no frequency or position
data. Instances are produced by ``IndexBuilder`` and never mutated afterwards,
so they can be shared by any number of readers.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
import hashlib
from typing import Any

import orjson


_FORMAT_VERSION = "v1-presence-postings"
_EMPTY: frozenset[int] = frozenset()


class InvertedIndex(Mapping[str, frozenset[int]]):
    """Read-only inverted index."""

    __slots__ = ("_doc_ids", "_postings")

    def __init__(
        self,
        postings: Mapping[str, frozenset[int] | set[int]] | None = None,
        doc_ids: frozenset[int] | set[int] | None = None,
    ) -> None:
        self._postings: dict[str, frozenset[int]] = {
            token: frozenset(ids) for token, ids in (postings or {}).items() if ids
        }
        indexed = frozenset(doc_ids) if doc_ids is not None else frozenset()
        self._doc_ids = indexed.union(*self._postings.values()) if self._postings else indexed

    def __getitem__(self, token: str) -> frozenset[int]:
        return self._postings[token]

    def __iter__(self) -> Iterator[str]:
        return iter(self._postings)

    def __len__(self) -> int:
        return len(self._postings)

    def __hash__(self) -> int:
        return hash(frozenset(self._postings.items()))

    def __repr__(self) -> str:
        return f"InvertedIndex(tokens={len(self._postings)}, documents={len(self._doc_ids)})"

    def postings(self, token: str) -> frozenset[int]:
        """Posting set for ``token``; empty when the token is not indexed."""
        return self._postings.get(token, _EMPTY)

    @property
    def doc_ids(self) -> frozenset[int]:
        """Ids of every document that went through the build, including empty ones."""
        return self._doc_ids

    @property
    def token_count(self) -> int:
        return len(self._postings)

    def tokens_for(self, doc_id: int) -> list[str]:
        """Tokens whose posting set contains ``doc_id`` (linear scan; diagnostics only)."""
        return sorted(token for token, ids in self._postings.items() if doc_id in ids)

    def to_dict(self) -> dict[str, list[int]]:
        """Plain, deterministically ordered representation for serialization."""
        return {token: sorted(self._postings[token]) for token in sorted(self._postings)}

    def to_json(self) -> bytes:
        return orjson.dumps(self.to_dict(), option=orjson.OPT_INDENT_2)

    def fingerprint(self) -> str:
        """Content hash that is identical for equal indexes, whatever the build order."""
        root = hashlib.sha256()
        root.update(_FORMAT_VERSION.encode("ascii"))
        for token, ids in self.to_dict().items():
            root.update(orjson.dumps([token, ids]))
        root.update(orjson.dumps(sorted(self._doc_ids)))
        return root.hexdigest()

    def stats(self) -> dict[str, Any]:
        sizes = [len(ids) for ids in self._postings.values()]
        return {
            "documents": len(self._doc_ids),
            "tokens": len(self._postings),
            "postings": sum(sizes),
            "max_posting_size": max(sizes, default=0),
        }
