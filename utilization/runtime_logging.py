"""Structured runtime event log for the utilization data service."""

from __future__ import annotations

import json
import os
import traceback
from datetime import datetime, timezone
from pathlib import Path
from typing import Any


LOG_FILE_NAME = "runtime_events.jsonl"
_DEFAULT_LOG_DIR = Path(".local_store")
_STORAGE_ENV_VAR = "UTILIZATION_STORAGE_ROOT"

LOG_DIR = _DEFAULT_LOG_DIR
RUNTIME_EVENTS_LOG_FILE = LOG_DIR / LOG_FILE_NAME


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def _safe_json_default(value: Any):
    # Sets of dates or ids come out sorted so log lines are stable.
    if isinstance(value, (set, frozenset)):
        return sorted(value, key=str)
    if isinstance(value, tuple):
        return list(value)
    if hasattr(value, "isoformat"):
        return value.isoformat()
    return str(value)


def _expand_log_root(path_value: str | Path | None) -> Path:
    text = "" if path_value is None else str(path_value).strip()
    if not text:
        return _DEFAULT_LOG_DIR
    return Path(os.path.expandvars(os.path.expanduser(text)))


def configure_log_root(path_value: str | Path | None) -> Path:
    """Point the runtime log at ``path_value`` (``~`` and ``$VARS`` expanded)."""
    global LOG_DIR, RUNTIME_EVENTS_LOG_FILE
    LOG_DIR = _expand_log_root(path_value)
    RUNTIME_EVENTS_LOG_FILE = LOG_DIR / LOG_FILE_NAME
    return LOG_DIR


def runtime_log_path() -> str:
    return str(RUNTIME_EVENTS_LOG_FILE.resolve())


def _exception_fields(exc: BaseException) -> dict[str, str]:
    tb = exc.__traceback__
    if tb is not None:
        text = "".join(traceback.format_exception(type(exc), exc, tb))
    else:
        text = traceback.format_exc()
    return {
        "exception_type": type(exc).__name__,
        "exception_message": str(exc),
        "traceback": text,
    }


def build_runtime_record(
    level: str,
    event: str,
    message: str,
    context: dict[str, Any] | None = None,
    exc: BaseException | None = None,
) -> dict[str, Any]:
    record: dict[str, Any] = {
        "timestamp_utc": _now_iso(),
        "level": str(level).upper(),
        "event": str(event),
        "message": str(message),
        "context": dict(context or {}),
    }
    if exc is not None:
        record.update(_exception_fields(exc))
    return record


def append_runtime_event(
    level: str,
    event: str,
    message: str,
    context: dict[str, Any] | None = None,
    exc: BaseException | None = None,
) -> None:
    """Append one JSON line to the runtime log; write failures are ignored."""
    try:
        line = json.dumps(build_runtime_record(level, event, message, context, exc), default=_safe_json_default, ensure_ascii=False)
        LOG_DIR.mkdir(parents=True, exist_ok=True)
        with RUNTIME_EVENTS_LOG_FILE.open("a", encoding="utf-8") as f:
            f.write(line + "\n")
    except Exception:
        # Diagnostics must not break a utilization request.
        pass


def _parse_line(line: str, line_no: int) -> dict[str, Any]:
    try:
        return json.loads(line)
    except json.JSONDecodeError:
        return {
            "timestamp_utc": _now_iso(),
            "level": "ERROR",
            "event": "log_parse_error",
            "message": "Malformed log line encountered.",
            "context": {"line": line, "line_no": line_no},
        }


def read_runtime_events(
    limit: int = 200,
    event: str | None = None,
    level: str | None = None,
) -> list[dict[str, Any]]:
    """Return up to ``limit`` most recent records, optionally filtered.

    Malformed lines are surfaced as ``log_parse_error`` records instead of
    being dropped.
    """
    if limit <= 0 or not RUNTIME_EVENTS_LOG_FILE.exists():
        return []
    try:
        lines = RUNTIME_EVENTS_LOG_FILE.read_text(encoding="utf-8").splitlines()
    except OSError:
        return []

    records = [_parse_line(line, i + 1) for i, line in enumerate(lines) if line.strip()]
    if event is not None:
        records = [r for r in records if r.get("event") == event]
    if level is not None:
        records = [r for r in records if str(r.get("level", "")).upper() == level.upper()]
    return records[-int(limit) :]


configure_log_root(os.getenv(_STORAGE_ENV_VAR, ""))
