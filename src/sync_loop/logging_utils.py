"""Logging utilities for sync-loop runtime."""

from __future__ import annotations

from datetime import datetime, timezone
import json
import logging
import os
from pathlib import Path
import sys
from typing import Any

TRACE_LEVEL_NUM = 5
logging.addLevelName(TRACE_LEVEL_NUM, "TRACE")

# LogRecord attributes that are not user-supplied ``extra`` fields.
_RECORD_ATTRS = frozenset(
    logging.LogRecord("", 0, "", 0, "", (), None).__dict__.keys()
) | {"message", "asctime"}


class JsonLineFormatter(logging.Formatter):
    """Format log records as JSON Lines with ``extra`` fields inlined."""

    def format(self, record: logging.LogRecord) -> str:
        created = datetime.fromtimestamp(record.created, tz=timezone.utc)
        payload: dict[str, Any] = {
            "timestamp": created.strftime("%Y-%m-%dT%H:%M:%SZ"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        payload.update(
            (key, value)
            for key, value in record.__dict__.items()
            if key not in _RECORD_ATTRS and not key.startswith("_")
        )
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False, default=str)


def _parse_log_level(value: str | None) -> int:
    if not value:
        return logging.INFO

    normalized = value.strip().upper()
    if normalized == "TRACE":
        return TRACE_LEVEL_NUM

    level = logging.getLevelName(normalized)
    if isinstance(level, int):
        return level
    return logging.INFO


def get_log_path() -> Path:
    log_dir = Path(os.getenv("SYNC_LOOP_LOG_DIR", "/tmp")).expanduser()
    return log_dir / f"sync-loop-{datetime.now():%Y-%m-%d}.log"


def configure_logging(*, echo_stderr: bool = False) -> Path:
    """Send JSONL logs to a dated file, optionally echoing to stderr.

    Stdout is never used: it carries the stdio protocol when serving.
    """
    log_level = _parse_log_level(os.getenv("LOG_LEVEL"))
    log_path = get_log_path()
    log_path.parent.mkdir(parents=True, exist_ok=True)

    root = logging.getLogger()
    root.setLevel(log_level)
    for handler in list(root.handlers):
        root.removeHandler(handler)

    file_handler = logging.FileHandler(log_path, encoding="utf-8")
    file_handler.setFormatter(JsonLineFormatter())
    root.addHandler(file_handler)

    if echo_stderr:
        stderr_handler = logging.StreamHandler(sys.stderr)
        stderr_handler.setFormatter(logging.Formatter("%(levelname)s %(name)s: %(message)s"))
        root.addHandler(stderr_handler)

    logging.captureWarnings(True)
    return log_path


def install_global_exception_hooks() -> None:
    """Capture uncaught exceptions into logs before the default hook runs."""

    def _hook(exc_type: type[BaseException], exc: BaseException, tb: Any) -> None:
        logging.getLogger("sync_loop.unhandled").error(
            "Unhandled exception",
            exc_info=(exc_type, exc, tb),
        )
        sys.__excepthook__(exc_type, exc, tb)

    sys.excepthook = _hook
