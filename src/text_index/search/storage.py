"""In-memory document store.

The store owns document text. The inverted index only keeps ids, so phrase
queries and text retrieval always come back here.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator
import logging

from text_index.domain.errors import InvalidInputError, NotFoundError
from text_index.domain.model import Document


logger = logging.getLogger(__name__)


class DocumentStore:
    """Id-addressed collection of immutable documents."""

    def __init__(self, documents: Iterable[Document | tuple[int, str]] | None = None) -> None:
        self._documents: dict[int, Document] = {}
        if documents is not None:
            self.add_many(documents)

    def add(self, document: Document | tuple[int, str]) -> Document:
        """Insert a document; ids must be unique."""
        doc = coerce_document(document)
        if doc.id in self._documents:
            raise InvalidInputError(f"Duplicate document id: {doc.id}")
        self._documents[doc.id] = doc
        return doc

    def add_many(self, documents: Iterable[Document | tuple[int, str]]) -> int:
        """Insert a batch of documents, all or nothing.

        Raises:
            InvalidInputError: if a document is malformed or its id is already
                stored or repeated within the batch. The store is unchanged.
        """
        batch: dict[int, Document] = {}
        for document in documents:
            doc = coerce_document(document)
            if doc.id in self._documents or doc.id in batch:
                raise InvalidInputError(f"Duplicate document id: {doc.id}")
            batch[doc.id] = doc

        self._documents.update(batch)
        logger.debug("Loaded %d documents (store size %d)", len(batch), len(self._documents))
        return len(batch)

    def get(self, doc_id: int) -> Document:
        try:
            return self._documents[doc_id]
        except KeyError:
            raise NotFoundError(doc_id) from None

    def get_text(self, doc_id: int) -> str:
        """Return the raw text of a document."""
        return self.get(doc_id).text

    def ids(self) -> list[int]:
        return sorted(self._documents)

    def __contains__(self, doc_id: object) -> bool:
        return doc_id in self._documents

    def __iter__(self) -> Iterator[Document]:
        for doc_id in sorted(self._documents):
            yield self._documents[doc_id]

    def __len__(self) -> int:
        return len(self._documents)


def coerce_document(document: Document | tuple[int, str]) -> Document:
    if isinstance(document, Document):
        return document
    try:
        return Document.from_pair(document)
    except (TypeError, ValueError) as exc:
        raise InvalidInputError(f"Malformed document {document!r}: {exc}") from exc
