"""Inverted index construction.

``IndexBuilder`` turns a bulk collection of documents into an immutable
``InvertedIndex``. Every build starts from empty postings and publishes a new
object, so repeated builds over the same inputs are deterministic and callers
never see a partially populated index.

Per document the pipeline is: tokenize -> case-fold -> drop stop words ->
conflate -> deduplicate -> add the document id to each surviving token's
posting set.
"""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
import logging
import time

from text_index.domain.errors import InvalidInputError
from text_index.domain.model import Document
from text_index.observability.metrics import INDEX_BUILDS, INDEX_TOKENS
from text_index.observability.tracing import create_span
from text_index.search.analyzers import IndexAnalyzer, PunctuationPolicy
from text_index.search.inverted_index import InvertedIndex
from text_index.search.storage import coerce_document
from text_index.search.vocabulary import StemTable, StopWordSet


logger = logging.getLogger(__name__)

DocumentInput = Document | tuple[int, str]


@dataclass(frozen=True)
class IndexBuildResult:
    """Outcome of an index build."""

    index: InvertedIndex
    documents_indexed: int
    documents_without_postings: tuple[int, ...]
    elapsed_seconds: float

    @property
    def token_count(self) -> int:
        return self.index.token_count

    @property
    def fingerprint(self) -> str:
        return self.index.fingerprint()


class IndexBuilder:
    """Single-writer builder for inverted indexes."""

    def __init__(self, *, punctuation: PunctuationPolicy = "keep", name: str = "default") -> None:
        self.punctuation = punctuation
        self.name = name

    def analyzer_for(
        self,
        stopwords: StopWordSet | Iterable[str] | None,
        stems: StemTable | Mapping[str, str] | None,
    ) -> IndexAnalyzer:
        return IndexAnalyzer(stopwords=stopwords, stems=stems, punctuation=self.punctuation)

    def build(
        self,
        documents: Iterable[DocumentInput],
        stopwords: StopWordSet | Iterable[str] | None = None,
        stems: StemTable | Mapping[str, str] | None = None,
    ) -> InvertedIndex:
        """Build an inverted index from scratch.

        Raises:
            InvalidInputError: if two documents share an id.
        """
        return self.build_with_report(documents, stopwords, stems).index

    def build_with_report(
        self,
        documents: Iterable[DocumentInput],
        stopwords: StopWordSet | Iterable[str] | None = None,
        stems: StemTable | Mapping[str, str] | None = None,
    ) -> IndexBuildResult:
        """Build an index and report what went into it."""
        analyzer = self.analyzer_for(stopwords, stems)
        started = time.perf_counter()

        with create_span("index.build", attributes={"index.name": self.name}) as span:
            try:
                postings, seen_ids, empty_ids = self._collect_postings(documents, analyzer)
            except InvalidInputError:
                INDEX_BUILDS.labels(status="invalid_input").inc()
                raise

            index = InvertedIndex(postings, doc_ids=frozenset(seen_ids))
            span.set_attribute("index.documents", len(seen_ids))
            span.set_attribute("index.tokens", index.token_count)

        elapsed = time.perf_counter() - started
        INDEX_BUILDS.labels(status="success").inc()
        INDEX_TOKENS.labels(index=self.name).set(index.token_count)
        logger.info(
            "Built index '%s': %d documents, %d tokens in %.4fs",
            self.name,
            len(seen_ids),
            index.token_count,
            elapsed,
        )
        if empty_ids:
            logger.debug("Documents with no indexable tokens: %s", sorted(empty_ids))

        return IndexBuildResult(
            index=index,
            documents_indexed=len(seen_ids),
            documents_without_postings=tuple(sorted(empty_ids)),
            elapsed_seconds=elapsed,
        )

    def _collect_postings(
        self,
        documents: Iterable[DocumentInput],
        analyzer: IndexAnalyzer,
    ) -> tuple[dict[str, set[int]], set[int], list[int]]:
        postings: dict[str, set[int]] = defaultdict(set)
        seen_ids: set[int] = set()
        empty_ids: list[int] = []

        for raw in documents:
            document = coerce_document(raw)
            if document.id in seen_ids:
                raise InvalidInputError(f"Duplicate document id: {document.id}")
            seen_ids.add(document.id)

            terms = analyzer.unique_terms(document.text)
            if not terms:
                empty_ids.append(document.id)
                continue
            for term in terms:
                postings[term].add(document.id)

        return postings, seen_ids, empty_ids


def build_index(
    documents: Iterable[DocumentInput],
    stopwords: StopWordSet | Iterable[str] | None = None,
    stems: StemTable | Mapping[str, str] | None = None,
    *,
    punctuation: PunctuationPolicy = "keep",
) -> InvertedIndex:
    """Convenience wrapper around ``IndexBuilder.build``."""
    return IndexBuilder(punctuation=punctuation).build(documents, stopwords, stems)
