"""
ledger_engines.tracer -- LEDGER_ENGINE_TRACE records for pure engines.

Responsibility:
    ``@traced_engine`` wraps an engine call and logs which engine ran, its
    version, how long it took and a fingerprint of the inputs that matter.
    Two calls with equal fingerprints received equal inputs, so a
    statement can be traced back to the exact ledger state it came from.

Architecture position:
    Engines -- infrastructure support for the pure calculation layer.
    Emits one log record per call and nothing else.

Invariants enforced:
    - The fingerprint is a pure function of the selected arguments:
      mapping keys are sorted, dataclasses are expanded field by field,
      and the SHA-256 digest is truncated to 16 hex characters.
    - Arguments are only read, never mutated.

Failure modes:
    - Fingerprint fields not bound in the call are recorded as "null".

Usage:
    from ledger_engines.tracer import traced_engine

    @traced_engine("pagination", "1.0", fingerprint_fields=("capacity", "rows"))
    def paginate(rows, capacity, totals): ...
"""

from __future__ import annotations

import dataclasses
import functools
import hashlib
import inspect
import time
from collections.abc import Callable, Mapping
from datetime import date
from enum import Enum
from typing import Any

from ledger_kernel.logging_config import get_logger

logger = get_logger("engines.tracer")

TRACE_TYPE = "LEDGER_ENGINE_TRACE"


@functools.singledispatch
def _canonicalize(value: Any) -> str:
    """Stable text form of a value for fingerprinting."""
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        fields = {f.name: getattr(value, f.name) for f in dataclasses.fields(value)}
        return type(value).__name__ + _canonicalize(fields)
    return str(value)


@_canonicalize.register(type(None))
def _(value) -> str:
    return "null"


@_canonicalize.register(Enum)
def _(value) -> str:
    return str(value.value)


@_canonicalize.register(date)
def _(value) -> str:
    return value.isoformat()


@_canonicalize.register(Mapping)
def _(value) -> str:
    items = sorted(value.items(), key=lambda kv: str(kv[0]))
    return "{" + ",".join(f"{k}:{_canonicalize(v)}" for k, v in items) + "}"


@_canonicalize.register(list)
@_canonicalize.register(tuple)
def _(value) -> str:
    return "[" + ",".join(_canonicalize(v) for v in value) + "]"


def compute_input_fingerprint(
    fingerprint_fields: tuple[str, ...],
    arguments: Mapping[str, Any],
) -> str:
    """16-hex-character SHA-256 fingerprint of the named arguments."""
    canonical = "|".join(
        f"{name}={_canonicalize(arguments.get(name))}" for name in fingerprint_fields
    )
    return hashlib.sha256(canonical.encode("utf-8")).hexdigest()[:16]


def traced_engine(
    engine_name: str,
    engine_version: str,
    fingerprint_fields: tuple[str, ...] = (),
) -> Callable:
    """
    Decorator emitting LEDGER_ENGINE_TRACE after each successful call.

    Args:
        engine_name: Engine identifier (e.g. "balance").
        engine_version: Bumped whenever the engine's output can change for
            the same inputs.
        fingerprint_fields: Parameter names hashed into
            ``input_fingerprint``; positional and keyword calls hash alike.
    """

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
            logger.info(
                TRACE_TYPE,
                extra={
                    "trace_type": TRACE_TYPE,
                    "engine_name": engine_name,
                    "engine_version": engine_version,
                    "input_fingerprint": fingerprint,
                    "duration_ms": round((time.perf_counter() - started) * 1000, 2),
                    "function": func.__qualname__,
                },
            )
            return result

        return wrapper

    return decorator
