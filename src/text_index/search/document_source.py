"""Bulk document loaders.

Thin adapters from files on disk to ``Document`` values. Three layouts are
understood, picked by file suffix:

* ``.json``  - an array of ``{"id": ..., "text": ...}`` objects, or an object
  mapping ids to text (``{"1": "..."}``)
* ``.jsonl`` - one ``{"id": ..., "text": ...}`` object per line
* ``.csv``   - a header row with ``id`` and ``text`` columns
"""

from __future__ import annotations

from collections.abc import Iterator
import csv
import io
import logging
from pathlib import Path
from typing import Any

import orjson

from text_index.domain.errors import InvalidInputError
from text_index.domain.model import Document


logger = logging.getLogger(__name__)


def load_documents(path: Path) -> list[Document]:
    """Load every document from ``path``.

    Raises:
        FileNotFoundError: if ``path`` does not exist.
        InvalidInputError: for unsupported formats or malformed rows.
    """
    if not path.exists():
        raise FileNotFoundError(f"Document source not found: {path}")

    suffix = path.suffix.lower()
    if suffix == ".json":
        documents = list(_iter_json(path))
    elif suffix in {".jsonl", ".ndjson"}:
        documents = list(_iter_jsonl(path))
    elif suffix == ".csv":
        documents = list(_iter_csv(path))
    else:
        raise InvalidInputError(f"Unsupported document source format '{suffix}' for {path}")

    logger.info("Loaded %d documents from %s", len(documents), path)
    return documents


def _iter_json(path: Path) -> Iterator[Document]:
    payload = _loads(_read_text(path), path)
    if isinstance(payload, dict):
        for key, text in payload.items():
            yield _build_document({"id": key, "text": text}, f"{path} key {key!r}")
        return
    if not isinstance(payload, list):
        raise InvalidInputError(f"Expected a JSON array or object in {path}")
    for position, row in enumerate(payload):
        yield _build_document(row, f"{path}[{position}]")


def _iter_jsonl(path: Path) -> Iterator[Document]:
    for line_no, line in enumerate(_read_text(path).splitlines(), start=1):
        if not line.strip():
            continue
        yield _build_document(_loads(line, path), f"{path}:{line_no}")


def _iter_csv(path: Path) -> Iterator[Document]:
    reader = csv.DictReader(io.StringIO(_read_text(path), newline=""))
    missing = {"id", "text"} - set(reader.fieldnames or ())
    if missing:
        raise InvalidInputError(f"CSV source {path} is missing column(s): {sorted(missing)}")
    for row in reader:
        yield _build_document(row, f"{path}:{reader.line_num}")


def _read_text(path: Path) -> str:
    try:
        return path.read_bytes().decode("utf-8-sig")
    except UnicodeDecodeError as exc:
        raise InvalidInputError(f"{path}: not valid UTF-8 (byte offset {exc.start})") from exc


def _loads(data: str, path: Path) -> Any:
    try:
        return orjson.loads(data)
    except orjson.JSONDecodeError as exc:
        raise InvalidInputError(f"Invalid JSON in {path}: {exc}") from exc


def _build_document(row: Any, location: str) -> Document:
    if not isinstance(row, dict) or "id" not in row or "text" not in row:
        raise InvalidInputError(f"{location}: expected an object with 'id' and 'text'")
    raw_id = row["id"]
    if isinstance(raw_id, bool) or not isinstance(raw_id, (int, str)):
        raise InvalidInputError(f"{location}: document id must be an integer, got {raw_id!r}")
    try:
        doc_id = int(raw_id)
    except ValueError:
        raise InvalidInputError(f"{location}: document id must be an integer, got {raw_id!r}") from None
    text = row["text"]
    if text is None:
        text = ""
    if not isinstance(text, str):
        raise InvalidInputError(f"{location}: document text must be a string")
    return Document(id=doc_id, text=text)
