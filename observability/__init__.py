# Observability module
from .metrics import (
    MetricsClient,
    NullMetricsClient,
    RegistryMetricsClient,
    StdoutMetricsClient,
    get_metrics_client,
    reset_metrics_client,
    set_metrics_client,
)
from .logging_config import configure_logging, get_logger
from .timing import timed, TimingContext

__all__ = [
    "MetricsClient",
    "NullMetricsClient",
    "RegistryMetricsClient",
    "StdoutMetricsClient",
    "get_metrics_client",
    "reset_metrics_client",
    "set_metrics_client",
    "configure_logging",
    "get_logger",
    "timed",
    "TimingContext",
]
