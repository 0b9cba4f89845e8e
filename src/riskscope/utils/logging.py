"""Logging setup for riskscope runs.

All records go through the "riskscope" logger hierarchy to stderr, keeping stdout
free for insight output. Output modes:
- human: [LEVEL] message
- verbose: [LEVEL][HH:MM:SS] message (batch=2/3 reason=timeout)
- json: one object per line, batch fields as top-level keys

Engine records attach per-batch context with ``extra=run_fields(...)``; the
fields are rendered by the verbose and JSON formatters and ignored in human mode.
"""

import json
import logging
import sys
from datetime import UTC, datetime
from enum import Enum
from typing import Any, TextIO

ROOT_LOGGER = "riskscope"

# Record attribute holding structured run context
FIELDS_ATTR = "run_fields"


class LogMode(Enum):
    """Logging output mode."""

    HUMAN = "human"
    VERBOSE = "verbose"
    JSON = "json"


def run_fields(**fields: Any) -> dict[str, Any]:
    """Build an ``extra`` mapping carrying run context, dropping unset values.

    Example:
        logger.warning("Batch failed", extra=run_fields(batch=2, batches=3, reason="timeout"))
    """
    return {FIELDS_ATTR: {key: value for key, value in fields.items() if value is not None}}


def record_fields(record: logging.LogRecord) -> dict[str, Any]:
    """Return the run context attached to a record (empty if none)."""
    fields = getattr(record, FIELDS_ATTR, None)
    return fields if isinstance(fields, dict) else {}


def _describe_fields(fields: dict[str, Any]) -> str:
    parts = []
    if "batch" in fields and "batches" in fields:
        parts.append(f"batch={fields['batch']}/{fields['batches']}")
    parts.extend(
        f"{key}={value}" for key, value in fields.items() if key not in ("batch", "batches")
    )
    return " ".join(parts)


class TextFormatter(logging.Formatter):
    """Plain-text formatter for terminals.

    Args:
        timestamps: Prefix a wall-clock time and append run context
    """

    def __init__(self, timestamps: bool = False) -> None:
        super().__init__()
        self.timestamps = timestamps

    def format(self, record: logging.LogRecord) -> str:
        line = f"[{record.levelname}]"
        if not self.timestamps:
            return f"{line} {record.getMessage()}"

        clock = datetime.fromtimestamp(record.created).strftime("%H:%M:%S")
        line = f"{line}[{clock}] {record.getMessage()}"
        context = _describe_fields(record_fields(record))
        return f"{line} ({context})" if context else line


class JSONFormatter(logging.Formatter):
    """JSON lines formatter for CI logs."""

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "level": record.levelname,
            "ts": datetime.fromtimestamp(record.created, UTC).isoformat(),
            "logger": record.name,
            "msg": record.getMessage(),
        }
        entry.update(record_fields(record))
        return json.dumps(entry)


def setup_logging(
    mode: LogMode = LogMode.HUMAN,
    level: int = logging.INFO,
    stream: TextIO | None = None,
) -> None:
    """Attach a single handler to the riskscope logger.

    Calling again replaces the previous handler.

    Args:
        mode: Output mode
        level: Minimum log level
        stream: Output stream (default: stderr)
    """
    logger = logging.getLogger(ROOT_LOGGER)
    logger.setLevel(level)
    logger.handlers.clear()

    handler = logging.StreamHandler(stream or sys.stderr)
    if mode is LogMode.JSON:
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(TextFormatter(timestamps=mode is LogMode.VERBOSE))
    logger.addHandler(handler)


def configure_from_cli(verbose: bool = False, quiet: bool = False, ci: bool = False) -> None:
    """Map the global CLI flags onto setup_logging.

    --ci selects JSON lines, --verbose adds timestamps, batch context and DEBUG
    records, --quiet keeps warnings and errors only (and wins over --verbose).
    """
    mode = LogMode.JSON if ci else LogMode.VERBOSE if verbose else LogMode.HUMAN
    level = logging.WARNING if quiet else logging.DEBUG if verbose else logging.INFO
    setup_logging(mode=mode, level=level)
