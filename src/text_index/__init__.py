"""In-memory inverted text index with stop-word filtering and stem-table conflation."""

from text_index.domain.errors import InvalidInputError, NotFoundError, TextIndexError
from text_index.domain.model import Document, QueryMode
from text_index.search.analyzers import IndexAnalyzer, tokenize
from text_index.search.indexer import IndexBuilder, build_index
from text_index.search.inverted_index import InvertedIndex
from text_index.search.query import QueryEngine
from text_index.search.storage import DocumentStore
from text_index.search.vocabulary import StemTable, StopWordSet
from text_index.service_layer.index_service import IndexService


__all__ = [
    "Document",
    "DocumentStore",
    "IndexAnalyzer",
    "IndexBuilder",
    "IndexService",
    "InvalidInputError",
    "InvertedIndex",
    "NotFoundError",
    "QueryEngine",
    "QueryMode",
    "StemTable",
    "StopWordSet",
    "TextIndexError",
    "build_index",
    "tokenize",
]
