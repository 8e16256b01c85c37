"""Timing helpers that report durations to the metrics client."""

from __future__ import annotations

import time
from contextlib import contextmanager
from typing import Any, Generator

from .metrics import get_metrics_client


class TimingContext:
    """Measure a block and report it as a ``timing`` metric on exit."""

    def __init__(self, name: str, tags: dict[str, str] | None = None, emit_metric: bool = True):
        self.name = name
        self.tags = tags or {}
        self.emit_metric = emit_metric
        self.start_time: float = 0
        self.elapsed_ms: float = 0

    def __enter__(self) -> "TimingContext":
        self.start_time = time.perf_counter()
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.elapsed_ms = (time.perf_counter() - self.start_time) * 1000
        if self.emit_metric:
            tags = dict(self.tags)
            if exc_type is not None:
                tags["error"] = exc_type.__name__
            get_metrics_client().timing(self.name, self.elapsed_ms, tags)


@contextmanager
def timed(
    name: str, tags: dict[str, str] | None = None, emit_metric: bool = True
) -> Generator[TimingContext, None, None]:
    """Time a block of code.

    Usage:
        with timed("review_gate.validate_relation") as t:
            outcome = gate(candidate)
        logger.debug("validated in %.2fms", t.elapsed_ms)
    """
    with TimingContext(name, tags, emit_metric) as ctx:
        yield ctx
