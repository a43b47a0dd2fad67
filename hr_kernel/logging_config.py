"""
Structured JSON logging for the HR kernel.

Every record under the ``hr_kernel`` namespace is written as one JSON line.
Payroll scope (run, month, employee, actor) travels in context variables so
that a single ``LogContext.bind`` at the top of a payroll run tags every
engine trace emitted beneath it.

Money and identifiers are serialized as strings so that amounts such as
``Decimal("12345.83")`` survive the log pipeline without float drift.
"""

__all__ = [
    "StructuredFormatter",
    "LogContext",
    "get_logger",
    "configure_logging",
    "reset_logging",
]

import json
import logging
import sys
import threading
from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from datetime import UTC, date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any, TextIO
from uuid import UUID

_LOGGER_PREFIX = "hr_kernel"


# ---------------------------------------------------------------------------
# Payroll scope
# ---------------------------------------------------------------------------


class LogContext:
    """Payroll-scoped log fields, safe across threads and asyncio tasks."""

    _vars: dict[str, ContextVar[str | None]] = {
        field: ContextVar(f"hr_log_{field}", default=None)
        for field in (
            "correlation_id",
            "actor_id",
            "run_id",
            "payroll_month",
            "accrual_period",
            "employee_id",
        )
    }

    @classmethod
    def _var(cls, field: str) -> ContextVar[str | None]:
        try:
            return cls._vars[field]
        except KeyError:
            raise ValueError(f"Unknown log context field: {field}") from None

    @classmethod
    def set(cls, **fields: Any) -> None:
        """Set context fields; None leaves the current value in place."""
        for field, value in fields.items():
            if value is not None:
                cls._var(field).set(str(value))

    @classmethod
    def get_all(cls) -> dict[str, str]:
        return {
            field: value
            for field, var in cls._vars.items()
            if (value := var.get()) is not None
        }

    @classmethod
    def clear(cls) -> None:
        for var in cls._vars.values():
            var.set(None)

    @classmethod
    @contextmanager
    def bind(cls, **fields: Any) -> Iterator[type["LogContext"]]:
        """Set fields for the duration of a ``with`` block, then restore them."""
        tokens = [
            (cls._var(field), cls._var(field).set(str(value)))
            for field, value in fields.items()
            if value is not None
        ]
        try:
            yield cls
        finally:
            for var, token in reversed(tokens):
                var.reset(token)


# ---------------------------------------------------------------------------
# JSON formatter
# ---------------------------------------------------------------------------

_RESERVED_KEYS: frozenset[str] = frozenset(
    vars(logging.LogRecord("", 0, "", 0, "", (), None))
) | {"message", "taskName"}


def _to_json(value: Any) -> Any:
    if isinstance(value, (Decimal, UUID)):
        return str(value)
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, (set, frozenset, tuple)):
        return list(value)
    return str(value)


class StructuredFormatter(logging.Formatter):
    """One JSON object per record: header, payroll scope, extras, exception."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "ts": datetime.fromtimestamp(record.created, tz=UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            **LogContext.get_all(),
        }

        for key, value in vars(record).items():
            if key not in _RESERVED_KEYS:
                payload.setdefault(key, value)

        if record.exc_info and record.exc_info[1] is not None:
            payload.update(self._exception_fields(record))

        return json.dumps(payload, default=_to_json)

    def _exception_fields(self, record: logging.LogRecord) -> dict[str, Any]:
        exc = record.exc_info[1]
        fields: dict[str, Any] = {
            "exc_type": type(exc).__name__,
            "exc_message": str(exc),
        }
        code = getattr(exc, "code", None)
        if code is not None:
            fields["exc_code"] = code
        # HRKernelError subclasses carry their context as public attributes
        fields.update(
            (f"exc_{name}", value)
            for name, value in vars(exc).items()
            if not name.startswith("_") and name not in ("args", "code")
        )
        fields["traceback"] = self.formatException(record.exc_info)
        return fields


# ---------------------------------------------------------------------------
# Setup
# ---------------------------------------------------------------------------


def get_logger(name: str) -> logging.Logger:
    """Return ``hr_kernel.<name>``."""
    return logging.getLogger(f"{_LOGGER_PREFIX}.{name}")


_setup_lock = threading.Lock()
_configured = False


def configure_logging(
    *,
    level: int = logging.INFO,
    stream: TextIO | None = None,
    handler: logging.Handler | None = None,
) -> None:
    """Attach one JSON handler to the ``hr_kernel`` logger. Safe to call twice."""
    global _configured
    with _setup_lock:
        if _configured:
            return
        _configured = True

    target = handler or logging.StreamHandler(stream or sys.stderr)
    target.setFormatter(StructuredFormatter())

    logger = logging.getLogger(_LOGGER_PREFIX)
    logger.setLevel(level)
    logger.propagate = False
    logger.addHandler(target)


def reset_logging() -> None:
    """Undo configure_logging (test support)."""
    global _configured
    with _setup_lock:
        _configured = False
    logger = logging.getLogger(_LOGGER_PREFIX)
    logger.handlers.clear()
    logger.setLevel(logging.WARNING)
    logger.propagate = True
