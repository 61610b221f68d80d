"""
Logging for roofscan.

Library modules only call ``logging.getLogger(__name__)``; nothing here runs
on import. Entry points (the CLI) call ``setup_logging`` once to attach a
console handler and, optionally, a JSON-lines file handler to the root logger.

Scan and segment identifiers travel as ``extra`` fields and are rendered by
both formatters:

    logger.error("Segment missing boundingBox", extra={"segment_id": "seg-2"})
    # 2024-05-01 12:00:00 | ERROR    | roofscan.geo.projector | Segment ... [segment_id=seg-2]

Environment:
    ROOFSCAN_LOG_LEVEL  default level when none is passed (INFO)
    ROOFSCAN_LOG_DIR    directory for the dated default log file (logs)
"""

import json
import logging
import os
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import IO, Any, Dict, Optional


DEFAULT_LOG_LEVEL = os.environ.get("ROOFSCAN_LOG_LEVEL", "INFO").upper()

LOG_DIR = Path(os.environ.get("ROOFSCAN_LOG_DIR", "logs"))

# Record attributes copied from ``extra`` into the output
CONTEXT_KEYS = ("job_id", "segment_id")

NOISY_LOGGERS = ("urllib3", "requests", "PIL")


def record_context(record: logging.LogRecord) -> Dict[str, Any]:
    """Context fields present on a record, in CONTEXT_KEYS order."""
    return {key: getattr(record, key) for key in CONTEXT_KEYS if hasattr(record, key)}


class RoofScanFormatter(logging.Formatter):
    """One line per record, context appended in brackets, ANSI color on a TTY."""

    LEVEL_COLORS = {
        logging.DEBUG: "36",
        logging.INFO: "32",
        logging.WARNING: "33",
        logging.ERROR: "31",
        logging.CRITICAL: "35",
    }

    def __init__(self, use_colors: bool = True, stream: Optional[IO[str]] = None):
        super().__init__(
            fmt="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
        stream = stream if stream is not None else sys.stdout
        self.use_colors = use_colors and hasattr(stream, "isatty") and stream.isatty()

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        context = record_context(record)
        if context:
            pairs = ", ".join(f"{key}={value}" for key, value in context.items())
            line = f"{line} [{pairs}]"
        code = self.LEVEL_COLORS.get(record.levelno)
        if self.use_colors and code:
            line = f"\033[{code}m{line}\033[0m"
        return line


class FileFormatter(logging.Formatter):
    """Serializes each record as one JSON object per line."""

    def format(self, record: logging.LogRecord) -> str:
        entry: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        entry.update(record_context(record))
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, default=str)


def _default_log_path() -> Path:
    LOG_DIR.mkdir(parents=True, exist_ok=True)
    return LOG_DIR / f"roofscan_{datetime.now():%Y%m%d}.log"


def setup_logging(
    level: str = DEFAULT_LOG_LEVEL,
    log_to_file: bool = False,
    log_file: Optional[str] = None,
) -> logging.Logger:
    """
    Replace the root logger's handlers with roofscan's.

    Args:
        level: Console level name; unknown names fall back to INFO
        log_to_file: Also write JSON lines at DEBUG level
        log_file: File for those lines (default: $ROOFSCAN_LOG_DIR/roofscan_YYYYMMDD.log)

    Returns:
        The configured root logger
    """
    numeric_level = logging.getLevelName(level.upper())
    if not isinstance(numeric_level, int):
        numeric_level = logging.INFO

    root = logging.getLogger()
    for handler in list(root.handlers):
        root.removeHandler(handler)
        handler.close()

    console = logging.StreamHandler(sys.stdout)
    console.setFormatter(RoofScanFormatter(stream=sys.stdout))
    console.setLevel(numeric_level)
    root.addHandler(console)
    root.setLevel(numeric_level)

    if log_to_file:
        path = Path(log_file) if log_file is not None else _default_log_path()
        file_handler = logging.FileHandler(path, encoding="utf-8")
        file_handler.setFormatter(FileFormatter())
        file_handler.setLevel(logging.DEBUG)
        root.addHandler(file_handler)
        root.setLevel(logging.DEBUG)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    return root


def get_logger(name: str) -> logging.Logger:
    """Module logger; pass ``__name__``."""
    return logging.getLogger(name)
