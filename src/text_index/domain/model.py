"""Domain model - documents and query modes.

The domain layer has no dependencies on the search package. Documents are
immutable value objects validated by Pydantic at construction time.
"""

from enum import Enum
from typing import Self

from pydantic.dataclasses import dataclass


class QueryMode(str, Enum):
    """Query forms supported by the query engine."""

    SINGLE = "single"
    OR = "or"
    PHRASE = "phrase"


@dataclass(frozen=True)
class Document:
    """A document identified by an integer id.

    Immutable once inserted. The inverted index only ever references the id;
    the text lives in the document store.
    """

    id: int
    text: str

    @classmethod
    def from_pair(cls, pair: tuple[int, str]) -> Self:
        """Build a document from an ``(id, text)`` pair."""
        doc_id, text = pair
        return cls(id=doc_id, text=text)
