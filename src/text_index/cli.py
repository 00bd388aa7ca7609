"""Command-line wrapper for building and querying an inverted index.

Every invocation loads the document source, builds the index in memory and
then either reports on it (``build``), answers a query (``query``) or prints a
stored document (``text``). Nothing is persisted between runs.
"""

# ruff: noqa: T201  # CLI prints results

from __future__ import annotations

import argparse
from collections.abc import Sequence
import logging
from pathlib import Path
import sys
import textwrap

import orjson

from text_index.config import Settings
from text_index.domain.errors import InvalidInputError, NotFoundError
from text_index.domain.model import QueryMode
from text_index.observability.logging import configure_logging
from text_index.observability.metrics import get_metrics
from text_index.observability.tracing import init_tracing
from text_index.search.document_source import load_documents
from text_index.search.storage import DocumentStore
from text_index.service_layer.index_service import IndexService
from text_index.vocabulary_config import VocabularyConfig


logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_INVALID_INPUT = 2


def build_argument_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="text-index",
        description="Build and query an in-memory inverted text index",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=textwrap.dedent(
            """
            Examples:
              text-index build --documents docs.csv --vocabulary vocabulary.json
              text-index query --documents docs.csv --mode or python sql
              text-index query --documents docs.csv --mode phrase --ignore-case "sql from"
              text-index build --documents docs.csv --metrics build.prom
              text-index text --documents docs.csv 3
            """
        ).strip(),
    )
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument(
        "--documents",
        type=Path,
        required=True,
        help="Document source (.json, .jsonl or .csv with id/text columns)",
    )
    common.add_argument(
        "--vocabulary",
        type=Path,
        default=None,
        help="Vocabulary JSON with stopwords/stems (default: TEXT_INDEX_VOCABULARY_PATH or built-in defaults)",
    )
    common.add_argument(
        "--metrics",
        type=Path,
        default=None,
        help="Write Prometheus metrics for this run to this path (also on failure)",
    )

    subcommands = parser.add_subparsers(dest="command", required=True)

    build = subcommands.add_parser("build", parents=[common], help="Build the index and print statistics")
    build.add_argument("--dump", type=Path, default=None, help="Write the inverted index as JSON to this path")

    query = subcommands.add_parser("query", parents=[common], help="Evaluate a query")
    query.add_argument(
        "--mode",
        default=QueryMode.SINGLE.value,
        help="Query mode: single, or, phrase (default: single)",
    )
    query.add_argument("--show-text", action="store_true", help="Include matched document text in the output")
    query.add_argument("--regex", action="store_true", help="Treat a phrase query as a regular expression")
    query.add_argument(
        "--ignore-case",
        action="store_true",
        default=None,
        help="Case-insensitive phrase matching (default: TEXT_INDEX_PHRASE_CASE_SENSITIVE)",
    )
    query.add_argument("terms", nargs="+", metavar="TERM", help="Query term(s) or phrase")

    text = subcommands.add_parser("text", parents=[common], help="Print the raw text of a document")
    text.add_argument("doc_id", type=int, help="Document id")

    return parser


def main(argv: Sequence[str] | None = None) -> int:
    parser = build_argument_parser()
    args = parser.parse_args(argv)
    settings = Settings()

    try:
        vocabulary = _load_vocabulary(settings, args.vocabulary)
    except FileNotFoundError as exc:
        print(f"Vocabulary not found: {exc}", file=sys.stderr)
        return EXIT_FAILURE
    except ValueError as exc:
        print(f"Invalid vocabulary: {exc}", file=sys.stderr)
        return EXIT_INVALID_INPUT

    profile = settings.log_profile(vocabulary)
    configure_logging(profile.level, profile.json_output, logger_levels=profile.logger_levels)
    init_tracing()

    try:
        service = IndexService.from_config(vocabulary, DocumentStore(load_documents(args.documents)))
        if args.command == "build":
            return _run_build(service, args.dump)
        if args.command == "query":
            case_sensitive = settings.phrase_case_sensitive if args.ignore_case is None else not args.ignore_case
            return _run_query(service, args, case_sensitive)
        return _run_text(service, args.doc_id)
    except FileNotFoundError as exc:
        logger.error("Document source missing: %s", exc)
        print(str(exc), file=sys.stderr)
        return EXIT_FAILURE
    except NotFoundError as exc:
        print(str(exc), file=sys.stderr)
        return EXIT_FAILURE
    except InvalidInputError as exc:
        logger.warning("Rejected input: %s", exc)
        print(str(exc), file=sys.stderr)
        return EXIT_INVALID_INPUT
    finally:
        if args.metrics is not None:
            args.metrics.write_bytes(get_metrics())


def _load_vocabulary(settings: Settings, override: Path | None) -> VocabularyConfig:
    if override is not None:
        return VocabularyConfig.from_json_file(override)
    return settings.load_vocabulary()


def _run_build(service: IndexService, dump_path: Path | None) -> int:
    snapshot = service.rebuild()
    report = {
        **snapshot.index.stats(),
        "fingerprint": snapshot.build.fingerprint,
        "documents_without_postings": list(snapshot.build.documents_without_postings),
        "elapsed_seconds": round(snapshot.build.elapsed_seconds, 6),
    }
    if dump_path is not None:
        dump_path.write_bytes(snapshot.index.to_json())
        report["dump"] = str(dump_path)
    print(orjson.dumps(report, option=orjson.OPT_INDENT_2).decode("utf-8"))
    return EXIT_OK


def _run_query(service: IndexService, args: argparse.Namespace, case_sensitive: bool) -> int:
    terms: list[str] = args.terms
    query: str | list[str] = terms if args.mode.strip().lower() == QueryMode.OR.value else " ".join(terms)
    result = service.search(
        args.mode,
        query,
        include_text=args.show_text,
        case_sensitive=case_sensitive,
        regex=args.regex,
    )
    print(orjson.dumps(result.model_dump(mode="json", exclude_none=True), option=orjson.OPT_INDENT_2).decode("utf-8"))
    return EXIT_OK


def _run_text(service: IndexService, doc_id: int) -> int:
    print(service.get_text(doc_id))
    return EXIT_OK


if __name__ == "__main__":
    raise SystemExit(main())
