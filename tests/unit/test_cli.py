"""Unit tests for the text-index command line."""

import logging

import orjson
import pytest

from tests.fixtures.notebook_corpus import NOTEBOOK_DOCUMENTS, NOTEBOOK_STEMS
from text_index.cli import EXIT_FAILURE, EXIT_INVALID_INPUT, EXIT_OK, main


@pytest.fixture(autouse=True)
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


@pytest.fixture
def documents_path(tmp_path):
    path = tmp_path / "notebook.json"
    path.write_bytes(orjson.dumps([{"id": doc_id, "text": text} for doc_id, text in NOTEBOOK_DOCUMENTS.items()]))
    return path


@pytest.fixture
def vocabulary_path(tmp_path):
    path = tmp_path / "vocabulary.json"
    path.write_bytes(orjson.dumps({"name": "notebook", "stopwords": ["is", "this", "and"], "stems": NOTEBOOK_STEMS}))
    return path


def _run(capsys, *argv: str) -> tuple[int, str, str]:
    code = main(list(argv))
    captured = capsys.readouterr()
    return code, captured.out, captured.err


@pytest.mark.unit
class TestBuildCommand:
    """``text-index build``."""

    def test_reports_statistics(self, capsys, documents_path, vocabulary_path):
        code, out, _ = _run(capsys, "build", "--documents", str(documents_path), "--vocabulary", str(vocabulary_path))

        report = orjson.loads(out)
        assert code == EXIT_OK
        assert report["documents"] == 3
        assert report["documents_without_postings"] == []
        assert len(report["fingerprint"]) == 64

    def test_dump_writes_index_json(self, capsys, tmp_path, documents_path, vocabulary_path):
        dump = tmp_path / "index.json"

        code, _, _ = _run(
            capsys,
            "build",
            "--documents",
            str(documents_path),
            "--vocabulary",
            str(vocabulary_path),
            "--dump",
            str(dump),
        )

        postings = orjson.loads(dump.read_bytes())
        assert code == EXIT_OK
        assert postings["sql"] == [1, 2, 3]
        assert postings["teach"] == [1, 3]
        assert "and" not in postings

    def test_missing_documents_file(self, capsys, tmp_path):
        code, _, err = _run(capsys, "build", "--documents", str(tmp_path / "absent.json"))

        assert code == EXIT_FAILURE
        assert "not found" in err

    def test_missing_vocabulary_file(self, capsys, tmp_path, documents_path):
        code, _, err = _run(
            capsys, "build", "--documents", str(documents_path), "--vocabulary", str(tmp_path / "absent.json")
        )

        assert code == EXIT_FAILURE
        assert "Vocabulary not found" in err

    def test_undecodable_documents_are_invalid_input(self, capsys, tmp_path):
        source = tmp_path / "latin1.csv"
        source.write_bytes(b"id,text\n1,caf\xe9 sql\n")

        code, _, err = _run(capsys, "build", "--documents", str(source))

        assert code == EXIT_INVALID_INPUT
        assert "not valid UTF-8" in err

    def test_metrics_written_for_run(self, capsys, tmp_path, documents_path):
        metrics = tmp_path / "build.prom"

        code, _, _ = _run(capsys, "build", "--documents", str(documents_path), "--metrics", str(metrics))

        assert code == EXIT_OK
        assert 'text_index_builds_total{status="success"}' in metrics.read_text(encoding="utf-8")

    def test_metrics_written_on_failure(self, capsys, tmp_path, documents_path):
        metrics = tmp_path / "query.prom"

        code, _, _ = _run(
            capsys, "query", "--documents", str(documents_path), "--metrics", str(metrics), "--mode", "phrase", ""
        )

        assert code == EXIT_INVALID_INPUT
        assert 'text_index_queries_total{mode="phrase",status="invalid_input"}' in metrics.read_text(encoding="utf-8")

    def test_invalid_vocabulary(self, capsys, tmp_path, documents_path):
        bad = tmp_path / "bad.json"
        bad.write_bytes(orjson.dumps({"stopwords": ["two words"]}))

        code, _, err = _run(capsys, "build", "--documents", str(documents_path), "--vocabulary", str(bad))

        assert code == EXIT_INVALID_INPUT
        assert "Invalid vocabulary" in err


@pytest.mark.unit
class TestQueryCommand:
    """``text-index query``."""

    def test_single_keyword(self, capsys, documents_path, vocabulary_path):
        code, out, _ = _run(
            capsys, "query", "--documents", str(documents_path), "--vocabulary", str(vocabulary_path), "Teaching"
        )

        result = orjson.loads(out)
        assert code == EXIT_OK
        assert result["mode"] == "single"
        assert result["normalized_terms"] == ["teach"]
        assert result["doc_ids"] == [1, 3]
        assert "documents" not in result

    def test_or_query_takes_several_terms(self, capsys, documents_path, vocabulary_path):
        code, out, _ = _run(
            capsys,
            "query",
            "--documents",
            str(documents_path),
            "--vocabulary",
            str(vocabulary_path),
            "--mode",
            "or",
            "people",
            "teaches",
        )

        assert code == EXIT_OK
        assert orjson.loads(out)["doc_ids"] == [1, 2, 3]

    def test_phrase_query_with_text(self, capsys, documents_path):
        code, out, _ = _run(
            capsys, "query", "--documents", str(documents_path), "--mode", "phrase", "--show-text", "SQL", "from"
        )

        result = orjson.loads(out)
        assert code == EXIT_OK
        assert result["doc_ids"] == [2]
        assert result["documents"] == [{"id": 2, "text": NOTEBOOK_DOCUMENTS[2]}]

    def test_phrase_query_is_case_sensitive_by_default(self, capsys, documents_path):
        code, out, _ = _run(capsys, "query", "--documents", str(documents_path), "--mode", "phrase", "sql")

        assert code == EXIT_OK
        assert orjson.loads(out)["doc_ids"] == []

    def test_phrase_query_ignore_case(self, capsys, documents_path):
        code, out, _ = _run(
            capsys, "query", "--documents", str(documents_path), "--mode", "phrase", "--ignore-case", "sql"
        )

        assert code == EXIT_OK
        assert orjson.loads(out)["doc_ids"] == [1, 2, 3]

    def test_ignore_case_from_environment(self, capsys, monkeypatch, documents_path):
        monkeypatch.setenv("TEXT_INDEX_PHRASE_CASE_SENSITIVE", "false")

        code, out, _ = _run(capsys, "query", "--documents", str(documents_path), "--mode", "phrase", "sql", "from")

        assert code == EXIT_OK
        assert orjson.loads(out)["doc_ids"] == [2]

    def test_unknown_mode(self, capsys, documents_path):
        code, _, err = _run(capsys, "query", "--documents", str(documents_path), "--mode", "fuzzy", "sql")

        assert code == EXIT_INVALID_INPUT
        assert "Unknown query mode" in err

    def test_single_mode_rejects_several_terms(self, capsys, documents_path):
        code, _, err = _run(capsys, "query", "--documents", str(documents_path), "sql", "python")

        assert code == EXIT_INVALID_INPUT
        assert "expects one term" in err


@pytest.mark.unit
class TestTextCommand:
    """``text-index text``."""

    def test_prints_document_text(self, capsys, documents_path):
        code, out, _ = _run(capsys, "text", "--documents", str(documents_path), "3")

        assert code == EXIT_OK
        assert out.strip() == NOTEBOOK_DOCUMENTS[3]

    def test_unknown_document(self, capsys, documents_path):
        code, _, err = _run(capsys, "text", "--documents", str(documents_path), "99")

        assert code == EXIT_FAILURE
        assert "Document 99 not found" in err
