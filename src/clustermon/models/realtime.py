"""
Aggregation envelope for realtime metrics.

Metrics bundles one optional accumulator per category. The same type is used
for a single node's snapshot and for a running cluster aggregate: merge
semantics do not distinguish the two. RealtimeMetrics is the envelope sent
on the wire, adding hosts, errors, per-peer breakdowns and the final marker.

Neither merge is safe for concurrent use on the same receiver; callers
feeding several streams into one envelope must serialize merges.
"""

from typing import Dict, List, Optional

from pydantic import Field, StrictBool, StrictStr

from .base import OMIT_EMPTY, WireModel
from .batch_jobs import BatchJobMetrics
from .cpu import CPUMetrics
from .disk import DiskMetric
from .mem import MemMetrics
from .metric_type import MetricType
from .net import NetMetrics
from .os_ops import OSMetrics
from .rpc import RPCMetrics
from .runtime import RuntimeMetrics
from .scanner import ScannerMetrics
from .site_resync import SiteResyncMetrics

# Slot name and category bit, in wire order.
_SLOTS = (
    ("scanner", MetricType.SCANNER),
    ("disk", MetricType.DISK),
    ("os", MetricType.OS),
    ("batch_jobs", MetricType.BATCH_JOBS),
    ("site_resync", MetricType.SITE_RESYNC),
    ("net", MetricType.NET),
    ("mem", MetricType.MEM),
    ("cpu", MetricType.CPU),
    ("rpc", MetricType.RPC),
    ("runtime", MetricType.RUNTIME),
)


class Metrics(WireModel):
    """One optional accumulator per category; None means not collected."""

    scanner: Optional[ScannerMetrics] = Field(None, json_schema_extra=OMIT_EMPTY)
    disk: Optional[DiskMetric] = Field(None, json_schema_extra=OMIT_EMPTY)
    os: Optional[OSMetrics] = Field(None, json_schema_extra=OMIT_EMPTY)
    batch_jobs: Optional[BatchJobMetrics] = Field(None, alias="batchJobs", json_schema_extra=OMIT_EMPTY)
    site_resync: Optional[SiteResyncMetrics] = Field(None, alias="siteResync", json_schema_extra=OMIT_EMPTY)
    net: Optional[NetMetrics] = Field(None, json_schema_extra=OMIT_EMPTY)
    mem: Optional[MemMetrics] = Field(None, json_schema_extra=OMIT_EMPTY)
    cpu: Optional[CPUMetrics] = Field(None, json_schema_extra=OMIT_EMPTY)
    rpc: Optional[RPCMetrics] = Field(None, json_schema_extra=OMIT_EMPTY)
    runtime: Optional[RuntimeMetrics] = Field(None, alias="go", json_schema_extra=OMIT_EMPTY)

    def merge(self, other: Optional["Metrics"]) -> None:
        """
        Merge every category of other into this one.

        A category missing here but present in other starts as a copy of
        other's, so merging into an empty Metrics reproduces other.
        """
        if other is None:
            return
        for name, _ in _SLOTS:
            incoming = getattr(other, name)
            if incoming is None:
                continue
            current = getattr(self, name)
            if current is None:
                setattr(self, name, incoming.model_copy(deep=True))
            else:
                current.merge(incoming)

    def categories(self) -> MetricType:
        """Mask of the categories present in this snapshot."""
        mask = MetricType.NONE
        for name, bit in _SLOTS:
            if getattr(self, name) is not None:
                mask |= bit
        return mask


class RealtimeMetrics(WireModel):
    """
    One frame of the realtime metrics stream.

    Attributes:
        errors: Partial failures reported by producers, never deduplicated
        hosts: Sorted names of the nodes that contributed to this envelope
        aggregated: Merged view over all contributing nodes
        by_host: Per-node metrics, only when requested
        by_disk: Per-disk metrics, only when requested
        final: Set on the last frame of a stream
    """

    errors: List[StrictStr] = Field(default_factory=list, json_schema_extra=OMIT_EMPTY)
    hosts: List[StrictStr] = Field(default_factory=list)
    aggregated: Metrics = Field(default_factory=Metrics)
    by_host: Dict[str, Metrics] = Field(default_factory=dict, json_schema_extra=OMIT_EMPTY)
    by_disk: Dict[str, DiskMetric] = Field(default_factory=dict, json_schema_extra=OMIT_EMPTY)
    final: StrictBool = False

    def merge(self, other: Optional["RealtimeMetrics"]) -> None:
        """Merge other into this envelope."""
        if other is None:
            return
        self.errors.extend(other.errors)
        # Hosts are disjoint across merged envelopes; the last writer wins.
        self.by_host.update(other.by_host)
        self.by_disk.update(other.by_disk)
        self.hosts.extend(other.hosts)
        self.hosts.sort()
        self.aggregated.merge(other.aggregated)
