"""Index service orchestration layer.

Owns the document store and the currently published index snapshot, and
provides the high-level build/query API used by the CLI.

Rebuilds run against a fresh structure and are published with a single
reference swap under ``_publish_lock``; readers grab the current snapshot
once and query it without further coordination. Concurrent rebuilds are
serialized by ``_build_lock``.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass
import logging
import threading

from text_index.domain.model import Document, QueryMode
from text_index.domain.search import QueryResult
from text_index.search.analyzers import PunctuationPolicy
from text_index.search.indexer import IndexBuilder, IndexBuildResult
from text_index.search.inverted_index import InvertedIndex
from text_index.search.query import QueryEngine
from text_index.search.storage import DocumentStore
from text_index.search.vocabulary import StemTable, StopWordSet
from text_index.vocabulary_config import VocabularyConfig


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class IndexSnapshot:
    """A published index together with the vocabulary that built it."""

    generation: int
    index: InvertedIndex
    engine: QueryEngine
    stopwords: StopWordSet
    stems: StemTable
    build: IndexBuildResult


class IndexService:
    """High-level index lifecycle and query orchestration."""

    def __init__(
        self,
        store: DocumentStore | None = None,
        *,
        stopwords: StopWordSet | Iterable[str] | None = None,
        stems: StemTable | Mapping[str, str] | None = None,
        punctuation: PunctuationPolicy = "keep",
        name: str = "default",
    ) -> None:
        self.store = store if store is not None else DocumentStore()
        self._stopwords = stopwords if isinstance(stopwords, StopWordSet) else StopWordSet(stopwords)
        self._stems = stems if isinstance(stems, StemTable) else StemTable(stems)
        self._builder = IndexBuilder(punctuation=punctuation, name=name)
        self._snapshot: IndexSnapshot | None = None
        self._generation = 0
        self._build_lock = threading.Lock()
        self._publish_lock = threading.Lock()

    @classmethod
    def from_config(cls, config: VocabularyConfig, store: DocumentStore | None = None) -> IndexService:
        return cls(
            store,
            stopwords=config.stop_word_set(),
            stems=config.stem_table(),
            punctuation=config.punctuation,
            name=config.name,
        )

    # --- lifecycle ----------------------------------------------------------

    def add_documents(self, documents: Iterable[Document | tuple[int, str]]) -> int:
        """Add documents to the store; takes effect on the next rebuild."""
        with self._build_lock:
            return self.store.add_many(documents)

    def rebuild(
        self,
        *,
        stopwords: StopWordSet | Iterable[str] | None = None,
        stems: StemTable | Mapping[str, str] | None = None,
    ) -> IndexSnapshot:
        """Build a fresh index from the store and publish it.

        Passing ``stopwords`` or ``stems`` replaces the corresponding
        vocabulary for this and later builds.
        """
        with self._build_lock:
            return self._rebuild_locked(stopwords, stems)

    @property
    def snapshot(self) -> IndexSnapshot:
        """The currently published snapshot, building one on first use."""
        current = self._published()
        if current is not None:
            return current
        with self._build_lock:
            # a concurrent caller may have published while we waited
            current = self._published()
            if current is not None:
                return current
            return self._rebuild_locked(None, None)

    @property
    def is_built(self) -> bool:
        return self._published() is not None

    def _published(self) -> IndexSnapshot | None:
        with self._publish_lock:
            return self._snapshot

    def _rebuild_locked(
        self,
        stopwords: StopWordSet | Iterable[str] | None,
        stems: StemTable | Mapping[str, str] | None,
    ) -> IndexSnapshot:
        next_stopwords = self._stopwords if stopwords is None else _as_stopwords(stopwords)
        next_stems = self._stems if stems is None else _as_stems(stems)

        documents = DocumentStore(self.store)
        result = self._builder.build_with_report(documents, next_stopwords, next_stems)
        analyzer = self._builder.analyzer_for(next_stopwords, next_stems)
        engine = QueryEngine(result.index, documents, analyzer)

        self._generation += 1
        snapshot = IndexSnapshot(
            generation=self._generation,
            index=result.index,
            engine=engine,
            stopwords=next_stopwords,
            stems=next_stems,
            build=result,
        )
        with self._publish_lock:
            self._stopwords = next_stopwords
            self._stems = next_stems
            self._snapshot = snapshot

        logger.info("Published index generation %d (%d tokens)", snapshot.generation, snapshot.index.token_count)
        return snapshot

    # --- queries ------------------------------------------------------------

    def query(
        self,
        mode: QueryMode | str,
        query: str | Sequence[str],
        *,
        case_sensitive: bool = True,
        regex: bool = False,
    ) -> frozenset[int]:
        return self.snapshot.engine.query(mode, query, case_sensitive=case_sensitive, regex=regex)

    def search(
        self,
        mode: QueryMode | str,
        query: str | Sequence[str],
        *,
        include_text: bool = False,
        case_sensitive: bool = True,
        regex: bool = False,
    ) -> QueryResult:
        return self.snapshot.engine.search(
            mode,
            query,
            include_text=include_text,
            case_sensitive=case_sensitive,
            regex=regex,
        )

    def get_text(self, doc_id: int) -> str:
        """Raw text of a stored document.

        Raises:
            NotFoundError: if ``doc_id`` is unknown.
        """
        return self.store.get_text(doc_id)


def _as_stopwords(value: StopWordSet | Iterable[str]) -> StopWordSet:
    return value if isinstance(value, StopWordSet) else StopWordSet(value)


def _as_stems(value: StemTable | Mapping[str, str]) -> StemTable:
    return value if isinstance(value, StemTable) else StemTable(value)
