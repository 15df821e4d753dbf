"""loguru setup with a per-run trace id attached to every record."""

from __future__ import annotations

import json
import sys
from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import dataclass, field
from pathlib import Path
from typing import IO, Any
from uuid import uuid4

from loguru import logger

from niftyscan.core.logging.config import LogConfig

_CONSOLE_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | "
    "<cyan>{extra[trace_id]:.8}</cyan> | {message}"
)

# Keys promoted to top-level JSON fields; everything else bound on a record
# lands under "context".
_TOP_LEVEL_KEYS = frozenset({"trace_id", "error_code"})


@dataclass(frozen=True)
class _RunScope:
    trace_id: str
    fields: dict[str, Any] = field(default_factory=dict)


_SCOPE: ContextVar[_RunScope | None] = ContextVar("niftyscan_run_scope", default=None)
_FALLBACK_TRACE: ContextVar[str | None] = ContextVar("niftyscan_fallback_trace", default=None)


def current_trace_id() -> str:
    """Trace id of the active run, or a stable id for code logging outside any run."""
    scope = _SCOPE.get()
    if scope is not None:
        return scope.trace_id
    trace_id = _FALLBACK_TRACE.get()
    if trace_id is None:
        trace_id = uuid4().hex
        _FALLBACK_TRACE.set(trace_id)
    return trace_id


def _attach_scope(record: dict[str, Any]) -> None:
    extra = record["extra"]
    extra.setdefault("trace_id", current_trace_id())
    scope = _SCOPE.get()
    if scope is not None:
        for key, value in scope.fields.items():
            extra.setdefault(key, value)


def _to_json_line(record: dict[str, Any]) -> str:
    extra = record["extra"]
    payload: dict[str, Any] = {
        "timestamp": record["time"].isoformat(),
        "level": record["level"].name,
        "message": record["message"],
        "trace_id": extra.get("trace_id"),
        "error_code": extra.get("error_code"),
    }
    context = {key: value for key, value in extra.items() if key not in _TOP_LEVEL_KEYS}
    if context:
        payload["context"] = context
    if record["exception"] is not None:
        payload["exception"] = repr(record["exception"].value)
    return json.dumps(payload, default=str, ensure_ascii=False)


class _JsonLinesSink:
    """Writes each record as one JSON line to a stream or appends it to a file."""

    def __init__(self, target: IO[str] | str) -> None:
        self._stream: IO[str] | None = None
        self._path: Path | None = None
        if isinstance(target, str):
            self._path = Path(target)
            self._path.parent.mkdir(parents=True, exist_ok=True)
        else:
            self._stream = target

    def __call__(self, message: Any) -> None:
        line = _to_json_line(message.record) + "\n"
        if self._path is not None:
            with self._path.open("a", encoding="utf-8") as handle:
                handle.write(line)
            return
        self._stream.write(line)
        self._stream.flush()


def configure_logging(level: str = "INFO", **options: Any) -> None:
    """Replace all loguru handlers according to ``LogConfig(level=level, **options)``."""
    config = LogConfig(level=level.upper(), **options)
    stream = config.stream or sys.stdout

    handlers: list[dict[str, Any]] = []
    if not config.quiet:
        if config.format == "console":
            handlers.append({"sink": stream, "level": config.level, "format": _CONSOLE_FORMAT})
        else:
            handlers.append({"sink": _JsonLinesSink(stream), "level": config.level})
    if config.file:
        handlers.append({"sink": _JsonLinesSink(config.file), "level": config.level})

    logger.configure(handlers=handlers, patcher=_attach_scope)


@contextmanager
def log_context(*, trace_id: str | None = None, **fields: Any) -> Iterator[str]:
    """Tag every record logged inside the block with one trace id and ``fields``.

    Nested scopes inherit the outer fields. Yields the trace id in effect.
    """
    outer = _SCOPE.get()
    inherited = dict(outer.fields) if outer is not None else {}
    scope = _RunScope(trace_id=trace_id or uuid4().hex, fields={**inherited, **fields})
    token = _SCOPE.set(scope)
    try:
        yield scope.trace_id
    finally:
        _SCOPE.reset(token)


configure_logging()
