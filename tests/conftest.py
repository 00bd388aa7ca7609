"""Shared test fixtures and configuration."""

import os
from pathlib import Path
import sys

import pytest


REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))


# Complete test environment that overrides every config value
TEST_ENV = {
    "TEXT_INDEX_LOG_LEVEL": "warning",
    "TEXT_INDEX_LOG_JSON": "false",
    "TEXT_INDEX_PUNCTUATION": "keep",
    "TEXT_INDEX_PHRASE_CASE_SENSITIVE": "true",
}

for key, value in TEST_ENV.items():
    os.environ[key] = value
os.environ.pop("TEXT_INDEX_VOCABULARY_PATH", None)

from tests.fixtures.notebook_corpus import NOTEBOOK_STEMS, NOTEBOOK_STOPWORDS, notebook_pairs
from text_index.search.indexer import IndexBuilder
from text_index.search.query import QueryEngine
from text_index.search.storage import DocumentStore


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch):
    """Pin environment variables for each test."""
    for key, value in TEST_ENV.items():
        monkeypatch.setenv(key, value)
    monkeypatch.delenv("TEXT_INDEX_VOCABULARY_PATH", raising=False)


@pytest.fixture
def notebook_store() -> DocumentStore:
    return DocumentStore(notebook_pairs())


@pytest.fixture
def notebook_builder() -> IndexBuilder:
    return IndexBuilder(name="notebook")


@pytest.fixture
def notebook_engine(notebook_store: DocumentStore, notebook_builder: IndexBuilder) -> QueryEngine:
    index = notebook_builder.build(notebook_store, NOTEBOOK_STOPWORDS, NOTEBOOK_STEMS)
    analyzer = notebook_builder.analyzer_for(NOTEBOOK_STOPWORDS, NOTEBOOK_STEMS)
    return QueryEngine(index, notebook_store, analyzer)
