"""Metrics client abstraction and implementations.

Clients:
- NullMetricsClient: no-op (default)
- StdoutMetricsClient: one JSON line per metric on stderr
- RegistryMetricsClient: in-process registry with Prometheus text export

The conflict engine reports:
- ``conflicts.detected`` counter, tagged by ``type`` and ``severity``
- ``review_gate.decision`` counter, tagged by ``decision``
- ``review_gate.validate_relation`` timing histogram

Select a backend with ``METRICS_BACKEND`` or install one explicitly::

    from observability.metrics import RegistryMetricsClient, set_metrics_client
    set_metrics_client(RegistryMetricsClient())
"""

from __future__ import annotations

import json
import os
import sys
import threading
from abc import ABC, abstractmethod
from collections import defaultdict
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

METRIC_PREFIX = "fact_engine"

# Histogram buckets in milliseconds; validation is an in-memory operation.
DEFAULT_TIMING_BUCKETS = (0.5, 1, 2.5, 5, 10, 25, 50, 100, 250)


class MetricsClient(ABC):
    """Abstract base class for metrics emission."""

    @abstractmethod
    def incr(self, name: str, tags: dict[str, str] | None = None, value: int = 1) -> None:
        """Increment a counter metric."""
        ...

    @abstractmethod
    def observe(self, name: str, value: float, tags: dict[str, str] | None = None) -> None:
        """Record a gauge value."""
        ...

    @abstractmethod
    def timing(self, name: str, value_ms: float, tags: dict[str, str] | None = None) -> None:
        """Record a duration in milliseconds."""
        ...


class NullMetricsClient(MetricsClient):
    """Drops every metric."""

    def incr(self, name: str, tags: dict[str, str] | None = None, value: int = 1) -> None:
        pass

    def observe(self, name: str, value: float, tags: dict[str, str] | None = None) -> None:
        pass

    def timing(self, name: str, value_ms: float, tags: dict[str, str] | None = None) -> None:
        pass


class StdoutMetricsClient(MetricsClient):
    """Write metrics as JSON lines to stderr for local debugging."""

    def __init__(self, prefix: str = METRIC_PREFIX, stream: Any = None):
        self.prefix = prefix
        self.stream = stream

    def _emit(self, kind: str, name: str, value: float, tags: dict[str, str] | None) -> None:
        record = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "type": kind,
            "metric": f"{self.prefix}.{name}",
            "value": value,
            "tags": tags or {},
        }
        print(json.dumps(record), file=self.stream or sys.stderr)

    def incr(self, name: str, tags: dict[str, str] | None = None, value: int = 1) -> None:
        self._emit("counter", name, value, tags)

    def observe(self, name: str, value: float, tags: dict[str, str] | None = None) -> None:
        self._emit("gauge", name, value, tags)

    def timing(self, name: str, value_ms: float, tags: dict[str, str] | None = None) -> None:
        self._emit("timing", name, value_ms, tags)


def _labels(tags: dict[str, str] | None) -> str:
    if not tags:
        return ""
    return "{" + ",".join(f'{key}="{value}"' for key, value in sorted(tags.items())) + "}"


def _with_label(labels: str, extra: str) -> str:
    if not labels:
        return "{" + extra + "}"
    return labels[:-1] + "," + extra + "}"


def _prom_name(prefix: str, name: str) -> str:
    return f"{prefix}_" + name.replace(".", "_").replace("-", "_")


@dataclass
class _Histogram:
    buckets: tuple[float, ...] = DEFAULT_TIMING_BUCKETS
    counts: dict[float, int] = field(default_factory=lambda: defaultdict(int))
    total: float = 0.0
    count: int = 0

    def observe(self, value: float) -> None:
        self.total += value
        self.count += 1
        for bucket in self.buckets:
            if value <= bucket:
                self.counts[bucket] += 1


class RegistryMetricsClient(MetricsClient):
    """Accumulate metrics in memory and export them in Prometheus text format.

    Usage:
        client = RegistryMetricsClient()
        client.incr("conflicts.detected", {"type": "ingredient_conflict"})
        client.counter_value("conflicts.detected", {"type": "ingredient_conflict"})
        text = client.export_prometheus()
    """

    def __init__(self, prefix: str = METRIC_PREFIX):
        self.prefix = prefix
        self._lock = threading.Lock()
        self._counters: dict[str, dict[str, float]] = defaultdict(lambda: defaultdict(float))
        self._gauges: dict[str, dict[str, float]] = defaultdict(dict)
        self._histograms: dict[str, dict[str, _Histogram]] = defaultdict(dict)

    def incr(self, name: str, tags: dict[str, str] | None = None, value: int = 1) -> None:
        with self._lock:
            self._counters[name][_labels(tags)] += value

    def observe(self, name: str, value: float, tags: dict[str, str] | None = None) -> None:
        with self._lock:
            self._gauges[name][_labels(tags)] = value

    def timing(self, name: str, value_ms: float, tags: dict[str, str] | None = None) -> None:
        labels = _labels(tags)
        with self._lock:
            series = self._histograms[name]
            if labels not in series:
                series[labels] = _Histogram()
            series[labels].observe(value_ms)

    def counter_value(self, name: str, tags: dict[str, str] | None = None) -> float:
        """Current value of one counter series (0 when never incremented)."""
        with self._lock:
            return self._counters.get(name, {}).get(_labels(tags), 0.0)

    def counter_total(self, name: str) -> float:
        """Sum of a counter across all tag combinations."""
        with self._lock:
            return sum(self._counters.get(name, {}).values())

    def timing_count(self, name: str) -> int:
        with self._lock:
            return sum(hist.count for hist in self._histograms.get(name, {}).values())

    def export_prometheus(self) -> str:
        lines: list[str] = []
        with self._lock:
            for name, series in sorted(self._counters.items()):
                metric = _prom_name(self.prefix, name) + "_total"
                lines.append(f"# TYPE {metric} counter")
                lines.extend(f"{metric}{labels} {value}" for labels, value in sorted(series.items()))
            for name, series in sorted(self._gauges.items()):
                metric = _prom_name(self.prefix, name)
                lines.append(f"# TYPE {metric} gauge")
                lines.extend(f"{metric}{labels} {value}" for labels, value in sorted(series.items()))
            for name, series in sorted(self._histograms.items()):
                metric = _prom_name(self.prefix, name)
                lines.append(f"# TYPE {metric} histogram")
                for labels, hist in sorted(series.items()):
                    for bucket in hist.buckets:
                        bucket_labels = _with_label(labels, f'le="{bucket}"')
                        lines.append(f"{metric}_bucket{bucket_labels} {hist.counts.get(bucket, 0)}")
                    inf_labels = _with_label(labels, 'le="+Inf"')
                    lines.append(f"{metric}_bucket{inf_labels} {hist.count}")
                    lines.append(f"{metric}_sum{labels} {hist.total}")
                    lines.append(f"{metric}_count{labels} {hist.count}")
        return "\n".join(lines) + "\n"

    def reset(self) -> None:
        with self._lock:
            self._counters.clear()
            self._gauges.clear()
            self._histograms.clear()


_metrics_client: MetricsClient | None = None
_client_lock = threading.Lock()


def get_metrics_client() -> MetricsClient:
    """Return the process-wide metrics client.

    ``METRICS_BACKEND`` selects the implementation on first use:
    ``registry``/``prometheus``, ``stdout``, or ``null`` (default).
    """
    global _metrics_client
    with _client_lock:
        if _metrics_client is None:
            backend = os.getenv("METRICS_BACKEND", "null").strip().lower()
            if backend in ("registry", "prometheus"):
                _metrics_client = RegistryMetricsClient()
            elif backend == "stdout":
                _metrics_client = StdoutMetricsClient()
            else:
                _metrics_client = NullMetricsClient()
        return _metrics_client


def set_metrics_client(client: MetricsClient) -> None:
    global _metrics_client
    with _client_lock:
        _metrics_client = client


def reset_metrics_client() -> None:
    """Forget the current client; the next lookup re-reads ``METRICS_BACKEND``."""
    global _metrics_client
    with _client_lock:
        _metrics_client = None
