"""Log output for the text-index CLI.

Records go to stderr; stdout is reserved for command results. In JSON mode
each record is one orjson-encoded object with the ids of the enclosing span
(when tracing is active) and any ``extra=`` fields the call site attached.
"""

from __future__ import annotations

from datetime import datetime, timezone
import logging
from pathlib import Path
import sys
from typing import Any

import orjson

from text_index.observability.context import current_trace_ids


_STANDARD_ATTRS = frozenset(vars(logging.makeLogRecord({}))) | {"message", "asctime"}
_PLAIN_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


class JsonFormatter(logging.Formatter):
    """One JSON object per record.

    Long messages and long string extras (document text, phrase patterns) are
    clipped so a single record stays readable.
    """

    MAX_MESSAGE_LEN = 2000
    MAX_FIELD_LEN = 500

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": _clip(record.getMessage(), self.MAX_MESSAGE_LEN),
        }

        ids = current_trace_ids()
        if ids.trace_id:
            entry["trace_id"] = ids.trace_id
            entry["span_id"] = ids.span_id

        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)

        for key, value in vars(record).items():
            if key in _STANDARD_ATTRS or key.startswith("_"):
                continue
            entry[key] = _clip(value, self.MAX_FIELD_LEN) if isinstance(value, str) else value

        return orjson.dumps(entry, default=_encode_extra, option=orjson.OPT_NON_STR_KEYS).decode("utf-8")


def _clip(text: str, limit: int) -> str:
    return text if len(text) <= limit else text[:limit] + "..."


def _encode_extra(value: Any) -> Any:
    if isinstance(value, (set, frozenset)):
        try:
            return sorted(value)
        except TypeError:
            return list(value)
    if isinstance(value, Path):
        return str(value)
    return repr(value)


def configure_logging(
    level: str = "info",
    json_output: bool = True,
    *,
    logger_levels: dict[str, str] | None = None,
) -> None:
    """Route all logging to a single stderr handler.

    Args:
        level: Root level name (case-insensitive).
        json_output: ``JsonFormatter`` when true, a plain one-line format otherwise.
        logger_levels: Per-logger level overrides, e.g. ``{"text_index.search.query": "debug"}``.
    """
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(JsonFormatter() if json_output else logging.Formatter(_PLAIN_FORMAT))

    root = logging.getLogger()
    root.handlers[:] = [handler]
    root.setLevel(_level(level))

    for name, override in (logger_levels or {}).items():
        logging.getLogger(name).setLevel(_level(override))


def _level(name: str) -> int:
    return logging.getLevelNamesMapping().get(name.upper(), logging.INFO)
