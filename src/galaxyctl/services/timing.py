"""Per-operation timing for ``--verbose`` output.

A service method decorated with :func:`timed` records its wall time plus
the time spent in each named :func:`phase` (``persist`` and ``event`` for
layer creation). The figures are attached to the returned result as
``ServiceResult.meta["timing"]``.

Nothing is measured until :func:`enable_timing` is called.
"""

from __future__ import annotations

import functools
import time
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import dataclass, field
from typing import Any, ParamSpec, TypeVar

import structlog

from galaxyctl.services.result import ServiceResult

log = structlog.get_logger("galaxyctl.timing")

_enabled: ContextVar[bool] = ContextVar("galaxyctl_timing_enabled", default=False)
_running: ContextVar[OpTiming | None] = ContextVar("galaxyctl_running_op", default=None)


def _ms_since(start: float) -> float:
    return round((time.perf_counter() - start) * 1000, 2)


@dataclass
class OpTiming:
    """Wall time of one service call, broken down by phase."""

    op: str
    started: float = field(default_factory=time.perf_counter)
    total_ms: float = 0.0
    phases: dict[str, float] = field(default_factory=dict)

    def charge(self, name: str, ms: float) -> None:
        self.phases[name] = round(self.phases.get(name, 0.0) + ms, 2)

    def as_meta(self) -> dict[str, Any]:
        return {"op": self.op, "total_ms": self.total_ms, "phases": dict(self.phases)}


@contextmanager
def phase(name: str) -> Iterator[None]:
    """Charge the time spent inside the block to *name*.

    A no-op outside a :func:`timed` call.
    """
    running = _running.get()
    if running is None:
        yield
        return

    start = time.perf_counter()
    try:
        yield
    finally:
        running.charge(name, _ms_since(start))


_P = ParamSpec("_P")
_R = TypeVar("_R")


def timed(func: Callable[_P, _R]) -> Callable[_P, _R]:  # noqa: UP047
    """Record the decorated call's timing on its ServiceResult."""

    @functools.wraps(func)
    def wrapper(*args: _P.args, **kwargs: _P.kwargs) -> _R:
        if not _enabled.get():
            return func(*args, **kwargs)

        timing = OpTiming(op=func.__name__)
        token = _running.set(timing)
        try:
            result = func(*args, **kwargs)
        finally:
            _running.reset(token)
            timing.total_ms = _ms_since(timing.started)
            log.debug("op.timed", **timing.as_meta())

        if isinstance(result, ServiceResult):
            meta = {**(result.meta or {}), "timing": timing.as_meta()}
            return result.model_copy(update={"meta": meta})  # type: ignore[return-value]
        return result

    return wrapper


def enable_timing() -> None:
    _enabled.set(True)


def disable_timing() -> None:
    _enabled.set(False)


def running_timing() -> OpTiming | None:
    """The timing record of the service call in progress, if any."""
    return _running.get()
