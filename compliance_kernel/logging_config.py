"""
Structured JSON logging for the compliance gate.

Every record under the ``compliance_kernel`` namespace renders as one JSON
object per line.  Request-scoped fields (correlation id, acting principal,
rule id, approval key) are layered on with ``LogContext.bind`` and merged
into each record; ``extra`` fields follow, then exception details.

Kernel exceptions contribute their ``code`` and public attributes as
``exc_*`` keys, so a rolled-back transaction logs e.g.
``exc_code=APPROVAL_EXPIRED`` alongside ``exc_expires_at``.
"""

import json
import logging
import sys
from collections.abc import Iterator, Mapping
from contextlib import contextmanager
from contextvars import ContextVar
from datetime import UTC, datetime
from enum import Enum
from types import MappingProxyType
from typing import IO, Any
from uuid import UUID

__all__ = [
    "LogContext",
    "StructuredFormatter",
    "configure_logging",
    "get_logger",
]

NAMESPACE = "compliance_kernel"
CONTEXT_FIELDS = frozenset({"correlation_id", "actor", "rule_id", "approval_key"})

_HANDLER_NAME = "compliance_kernel.json"
_EMPTY: Mapping[str, str] = MappingProxyType({})
_context: ContextVar[Mapping[str, str]] = ContextVar("compliance_log_context", default=_EMPTY)


class LogContext:
    """Request-scoped fields attached to every record logged inside a bind."""

    @staticmethod
    def current() -> dict[str, str]:
        return dict(_context.get())

    @staticmethod
    @contextmanager
    def bind(**fields: str | None) -> Iterator[None]:
        """Layer ``fields`` over the enclosing context until the block exits.

        None values leave the enclosing value in place.
        """
        unknown = fields.keys() - CONTEXT_FIELDS
        if unknown:
            raise TypeError(f"Unknown log context field(s): {sorted(unknown)}")
        merged = {**_context.get(), **{k: v for k, v in fields.items() if v is not None}}
        token = _context.set(MappingProxyType(merged))
        try:
            yield
        finally:
            _context.reset(token)

    @staticmethod
    def clear() -> None:
        _context.set(_EMPTY)


_RECORD_ATTRS = frozenset(vars(logging.makeLogRecord({}))) | {"message", "asctime", "taskName"}


def _to_json(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, (bytes, bytearray)):
        return value.hex()
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, UUID):
        return str(value)
    return repr(value)


def _exception_fields(exc: BaseException) -> dict[str, Any]:
    fields: dict[str, Any] = {"exc_type": type(exc).__name__, "exc_message": str(exc)}
    code = getattr(exc, "code", None)
    if code is not None:
        fields["exc_code"] = code
    for name, value in vars(exc).items():
        if not name.startswith("_"):
            fields[f"exc_{name}"] = value
    return fields


class StructuredFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "ts": datetime.fromtimestamp(record.created, tz=UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            **_context.get(),
        }
        for key, value in vars(record).items():
            if key not in _RECORD_ATTRS:
                payload.setdefault(key, value)

        if record.exc_info and record.exc_info[1] is not None:
            payload.update(_exception_fields(record.exc_info[1]))
            payload["traceback"] = self.formatException(record.exc_info)

        return json.dumps(payload, default=_to_json)


def get_logger(name: str) -> logging.Logger:
    """Logger ``compliance_kernel.<name>``."""
    return logging.getLogger(f"{NAMESPACE}.{name}")


def configure_logging(
    level: int = logging.INFO,
    stream: IO[str] | None = None,
    *,
    force: bool = False,
) -> logging.Logger:
    """Attach the JSON handler to the namespace logger.

    Calling again is a no-op while the handler is attached; ``force``
    replaces it (new stream, new level).
    """
    root = logging.getLogger(NAMESPACE)
    attached = [h for h in root.handlers if h.get_name() == _HANDLER_NAME]
    if attached and not force:
        return root
    for handler in attached:
        root.removeHandler(handler)

    handler = logging.StreamHandler(stream if stream is not None else sys.stderr)
    handler.set_name(_HANDLER_NAME)
    handler.setFormatter(StructuredFormatter())
    root.addHandler(handler)
    root.setLevel(level)
    root.propagate = False
    return root
