"""
hr_engines.tracer -- HR_ENGINE_TRACE records for engine calls.

``@traced_engine`` logs one record per successful engine call carrying the
engine name and version, a fingerprint of the chosen inputs and the call
duration.  Two payroll calculations for the same employee, month and
inputs share a fingerprint, which makes reruns easy to spot in the logs.

The decorator only reads arguments.  An engine that raises propagates its
exception unchanged and leaves no trace record.

Usage:
    @traced_engine("gosi", "1.0", fingerprint_fields=("employee", "basic_salary"))
    def calculate_gosi(employee, basic_salary, housing_allowance): ...
"""

from __future__ import annotations

import dataclasses
import functools
import hashlib
import inspect
import time
from collections.abc import Callable, Mapping
from decimal import Decimal
from enum import Enum
from typing import Any

from hr_kernel.logging_config import get_logger

_logger = get_logger("engines.tracer")

FINGERPRINT_LENGTH = 16


def _canonicalize(value: Any) -> str:
    """Stable text form: dataclasses by field, mappings by sorted key."""
    if value is None:
        return "null"
    if isinstance(value, str):
        return value
    if isinstance(value, Enum):
        return _canonicalize(value.value)
    if isinstance(value, Decimal):
        # 10000 and 10000.00 are the same salary
        return str(value.normalize()) if value.is_finite() else str(value)
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return _canonicalize(dataclasses.asdict(value))
    if isinstance(value, Mapping):
        pairs = sorted((str(k), _canonicalize(v)) for k, v in value.items())
        return "{" + ",".join(f"{k}:{v}" for k, v in pairs) + "}"
    if isinstance(value, (list, tuple)):
        return "[" + ",".join(map(_canonicalize, value)) + "]"
    return str(value)


def compute_input_fingerprint(
    fingerprint_fields: tuple[str, ...],
    arguments: Mapping[str, Any],
) -> str:
    """SHA-256 over ``name=value`` pairs, truncated to 16 hex characters.

    Fields absent from ``arguments`` hash as ``null``.
    """
    canonical = "|".join(
        f"{name}={_canonicalize(arguments.get(name))}" for name in fingerprint_fields
    )
    return hashlib.sha256(canonical.encode("utf-8")).hexdigest()[:FINGERPRINT_LENGTH]


def traced_engine(
    engine_name: str,
    engine_version: str,
    fingerprint_fields: tuple[str, ...] = (),
) -> Callable:
    def decorator(func: Callable) -> Callable:
        signature = inspect.signature(func)

        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            fingerprint = ""
            if fingerprint_fields:
                bound = signature.bind_partial(*args, **kwargs)
                fingerprint = compute_input_fingerprint(fingerprint_fields, bound.arguments)

            started = time.perf_counter()
            result = func(*args, **kwargs)
            elapsed_ms = (time.perf_counter() - started) * 1000

            _logger.info(
                "HR_ENGINE_TRACE",
                extra={
                    "trace_type": "HR_ENGINE_TRACE",
                    "engine_name": engine_name,
                    "engine_version": engine_version,
                    "input_fingerprint": fingerprint,
                    "duration_ms": round(elapsed_ms, 2),
                    "function": func.__qualname__,
                },
            )
            return result

        return wrapper

    return decorator
