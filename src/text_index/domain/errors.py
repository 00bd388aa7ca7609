"""Error taxonomy for index builds and queries."""


class TextIndexError(Exception):
    """Base class for all text index failures."""


class InvalidInputError(TextIndexError, ValueError):
    """Raised when the caller violates an input contract.

    Covers duplicate document ids at build time, unknown query modes, and
    malformed queries or document source rows.
    """


class NotFoundError(TextIndexError, LookupError):
    """Raised when a document id is not present in the document store."""

    def __init__(self, doc_id: int) -> None:
        super().__init__(f"Document {doc_id} not found")
        self.doc_id = doc_id
