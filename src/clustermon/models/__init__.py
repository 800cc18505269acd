"""
Data models for clustermon.

Wire models mirror the JSON objects of the realtime metrics stream. Each
per-category accumulator owns a ``merge`` that reduces another node's
snapshot into it:

Selection:
- MetricType, MetricsOptions

Accumulators:
- ScannerMetrics, DiskMetric, OSMetrics, BatchJobMetrics, SiteResyncMetrics,
  NetMetrics, MemMetrics, CPUMetrics, RPCMetrics, RuntimeMetrics

Envelope:
- Metrics, RealtimeMetrics

Configuration models live in ``clustermon.models.config``.
"""

from .batch_jobs import (
    BatchJobMetrics,
    CatalogInfo,
    ExpirationInfo,
    JobMetric,
    KeyRotationInfo,
    ReplicateInfo,
)
from .base import OMIT_EMPTY, ZERO_TIME, Timestamp, WireModel, as_utc, format_time
from .common import NodeInfo, TimedAction, node_errors
from .cpu import CPUMetrics, CPUTimesStat, LoadAvgStat
from .disk import DiskIOStats, DiskMetric
from .mem import MemInfo, MemMetrics
from .metric_type import MetricType
from .net import NetDevLine, NetMetrics
from .options import MetricsOptions, format_duration
from .os_ops import OSMetrics
from .realtime import Metrics, RealtimeMetrics
from .rpc import RPCMetrics
from .runtime import Float64Histogram, RuntimeMetrics
from .scanner import BucketScanInfo, ScannerMetrics
from .site_resync import SiteResyncMetrics

__all__ = [
    # Selection
    "MetricType",
    "MetricsOptions",
    "format_duration",
    # Wire base
    "WireModel",
    "OMIT_EMPTY",
    "Timestamp",
    "ZERO_TIME",
    "as_utc",
    "format_time",
    # Shared values
    "TimedAction",
    "NodeInfo",
    "node_errors",
    # Accumulators
    "ScannerMetrics",
    "BucketScanInfo",
    "DiskMetric",
    "DiskIOStats",
    "OSMetrics",
    "BatchJobMetrics",
    "JobMetric",
    "ReplicateInfo",
    "KeyRotationInfo",
    "ExpirationInfo",
    "CatalogInfo",
    "SiteResyncMetrics",
    "NetMetrics",
    "NetDevLine",
    "MemMetrics",
    "MemInfo",
    "CPUMetrics",
    "CPUTimesStat",
    "LoadAvgStat",
    "RPCMetrics",
    "RuntimeMetrics",
    "Float64Histogram",
    # Envelope
    "Metrics",
    "RealtimeMetrics",
]
