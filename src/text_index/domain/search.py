"""Domain models for query results.

Value objects are immutable (frozen=True) so a result handed to a caller
cannot drift from the snapshot that produced it.
"""

from pydantic import BaseModel, ConfigDict, Field

from text_index.domain.model import QueryMode


class DocumentView(BaseModel):
    """Serializable view of a matched document."""

    model_config = ConfigDict(frozen=True)

    id: int
    text: str


class QueryResult(BaseModel):
    """Outcome of a single query against a published index."""

    model_config = ConfigDict(frozen=True)

    mode: QueryMode
    query: str | list[str]
    normalized_terms: list[str] = Field(default_factory=list)
    doc_ids: list[int] = Field(default_factory=list)
    documents: list[DocumentView] | None = None

    @property
    def hit_count(self) -> int:
        return len(self.doc_ids)
