"""
clustermon: realtime cluster metrics streaming and aggregation.

This package consumes the realtime metrics stream of a storage cluster,
merges per-node snapshots into a cluster-wide view and summarizes latency
samples.

The package is organized into specialized modules:
- models: Wire types, per-category accumulators and the metrics envelope
- stats: Latency percentile summaries
- streaming: Stream decoding and the HTTP client
- aggregation: Concurrent multi-source aggregation
- collectors: Local node metrics via psutil
- reporting: Operator tables built with polars
- config: Configuration management and validation
- validation: Input validation and error handling
- cli: Command-line interface

Usage:
    From command line:
        clustermon watch --endpoint localhost:9000 --types cpu,mem -n 3

    Programmatically:
        from clustermon import MetricsClient, MetricsOptions, MetricType
        async with MetricsClient("localhost:9000") as client:
            await client.metrics(MetricsOptions(types=MetricType.CPU, n=1), print)
"""

__version__ = "0.1.0"

# Main interfaces
from .aggregation import ClusterMetricsAggregator
from .config import clear_config_cache, get_config, set_config_path
from .models import Metrics, MetricsOptions, MetricType, RealtimeMetrics
from .stats import TimeDurations, Timings
from .streaming import MetricsClient, MetricsStreamDecoder

__all__ = [
    "__version__",
    "ClusterMetricsAggregator",
    "clear_config_cache",
    "get_config",
    "set_config_path",
    "Metrics",
    "MetricsOptions",
    "MetricType",
    "RealtimeMetrics",
    "TimeDurations",
    "Timings",
    "MetricsClient",
    "MetricsStreamDecoder",
]
