"""Query evaluation over a built inverted index.

Keyword queries (``single`` and ``or``) normalize their terms with the same
analyzer that built the index and resolve each term with a single dictionary
lookup. A term that normalizes to nothing, such as a stop word, contributes no
postings: a stop-word-only query matches no documents rather than all of them.

Phrase queries ignore the index entirely and scan the raw document text. The
index keeps neither positions nor order, so ordered phrase matching is only
possible against the original text; this is a linear scan by construction.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
import logging
import re

from text_index.domain.errors import InvalidInputError
from text_index.domain.model import Document, QueryMode
from text_index.domain.search import DocumentView, QueryResult
from text_index.observability.metrics import QUERY_COUNT, QUERY_LATENCY, track_latency
from text_index.observability.tracing import create_span
from text_index.search.analyzers import IndexAnalyzer
from text_index.search.inverted_index import InvertedIndex
from text_index.search.storage import DocumentStore


logger = logging.getLogger(__name__)

_EMPTY: frozenset[int] = frozenset()


class QueryEngine:
    """Evaluates single-keyword, OR and phrase queries."""

    def __init__(self, index: InvertedIndex, store: DocumentStore, analyzer: IndexAnalyzer) -> None:
        self.index = index
        self.store = store
        self.analyzer = analyzer

    # --- keyword queries ----------------------------------------------------

    def normalize(self, term: str) -> list[str]:
        """Run a query term through the indexing pipeline."""
        return self.analyzer.unique_terms(term)

    def single(self, term: str) -> frozenset[int]:
        """Documents containing ``term`` after normalization.

        Raises:
            InvalidInputError: if ``term`` holds more than one token.
        """
        if len(term.split()) > 1:
            raise InvalidInputError(f"Single-keyword query expects one term, got {term!r}; use mode 'or'")
        normalized = self.normalize(term)
        if not normalized:
            return _EMPTY
        return self.index.postings(normalized[0])

    def any_of(self, terms: Iterable[str]) -> frozenset[int]:
        """Union of the postings of every normalized term."""
        matched: set[int] = set()
        for term in self._normalize_all(terms):
            matched.update(self.index.postings(term))
        return frozenset(matched)

    # --- phrase queries -----------------------------------------------------

    def phrase(self, pattern: str, *, case_sensitive: bool = True, regex: bool = False) -> frozenset[int]:
        """Documents whose raw text contains ``pattern``.

        Exact, case-sensitive substring containment by default.
        ``case_sensitive=False`` ignores case and ``regex=True`` treats the
        pattern as a regular expression searched anywhere in the text.
        """
        if not pattern:
            raise InvalidInputError("Phrase query requires a non-empty pattern")

        flags = 0 if case_sensitive else re.IGNORECASE
        source = pattern if regex else re.escape(pattern)
        try:
            compiled = re.compile(source, flags)
        except re.error as exc:
            raise InvalidInputError(f"Invalid phrase pattern {pattern!r}: {exc}") from exc

        return frozenset(document.id for document in self.store if compiled.search(document.text))

    # --- dispatch -----------------------------------------------------------

    def query(
        self,
        mode: QueryMode | str,
        query: str | Sequence[str],
        *,
        case_sensitive: bool = True,
        regex: bool = False,
    ) -> frozenset[int]:
        """Evaluate ``query`` in the given mode.

        Raises:
            InvalidInputError: for an unknown mode or a malformed query.
        """
        resolved = resolve_mode(mode)
        with (
            create_span("index.query", attributes={"query.mode": resolved.value}),
            track_latency(QUERY_LATENCY, mode=resolved.value),
        ):
            try:
                if resolved is QueryMode.SINGLE:
                    result = self.single(_as_text(query))
                elif resolved is QueryMode.OR:
                    result = self.any_of([query] if isinstance(query, str) else query)
                else:
                    result = self.phrase(_as_text(query), case_sensitive=case_sensitive, regex=regex)
            except InvalidInputError:
                QUERY_COUNT.labels(mode=resolved.value, status="invalid_input").inc()
                raise

        QUERY_COUNT.labels(mode=resolved.value, status="success").inc()
        logger.debug("Query mode=%s query=%r matched %d documents", resolved.value, query, len(result))
        return result

    def fetch_documents(self, doc_ids: Iterable[int]) -> list[Document]:
        """Return documents for ``doc_ids`` ordered by id.

        Raises:
            NotFoundError: if any id is unknown to the store.
        """
        return [self.store.get(doc_id) for doc_id in sorted(doc_ids)]

    def search(
        self,
        mode: QueryMode | str,
        query: str | Sequence[str],
        *,
        include_text: bool = False,
        case_sensitive: bool = True,
        regex: bool = False,
    ) -> QueryResult:
        """Evaluate a query and package the outcome as a ``QueryResult``."""
        resolved = resolve_mode(mode)
        doc_ids = self.query(resolved, query, case_sensitive=case_sensitive, regex=regex)

        if resolved is QueryMode.PHRASE:
            normalized: list[str] = []
        else:
            raw_terms = [query] if isinstance(query, str) else list(query)
            normalized = self._normalize_all(raw_terms)

        documents = None
        if include_text:
            documents = [DocumentView(id=doc.id, text=doc.text) for doc in self.fetch_documents(doc_ids)]

        return QueryResult(
            mode=resolved,
            query=query if isinstance(query, str) else list(query),
            normalized_terms=normalized,
            doc_ids=sorted(doc_ids),
            documents=documents,
        )

    def _normalize_all(self, terms: Iterable[str]) -> list[str]:
        normalized: dict[str, None] = {}
        for term in terms:
            for token in self.normalize(term):
                normalized.setdefault(token)
        return list(normalized)


def resolve_mode(mode: QueryMode | str) -> QueryMode:
    """Coerce a mode name into ``QueryMode``."""
    if isinstance(mode, QueryMode):
        return mode
    try:
        return QueryMode(str(mode).strip().lower())
    except ValueError:
        available = ", ".join(m.value for m in QueryMode)
        raise InvalidInputError(f"Unknown query mode '{mode}'. Available: {available}") from None


def _as_text(query: str | Sequence[str]) -> str:
    if isinstance(query, str):
        return query
    return " ".join(query)
