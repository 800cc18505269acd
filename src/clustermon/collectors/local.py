"""
Local node metrics via psutil.

LocalMetricsCollector produces the same RealtimeMetrics envelope a server
would send for a single node, covering the categories that can be read from
the operating system: CPU, MEM, NET and DISK. Other categories are cluster
internals and are never produced locally.
"""

import copy
import logging
import socket
from datetime import datetime, timezone
from typing import Callable, Dict, List, Optional

import psutil

from ..models.cpu import CPUMetrics, CPUTimesStat, LoadAvgStat
from ..models.disk import DiskIOStats, DiskMetric
from ..models.mem import MemInfo, MemMetrics
from ..models.metric_type import MetricType
from ..models.net import NetDevLine, NetMetrics
from ..models.options import MetricsOptions
from ..models.realtime import Metrics, RealtimeMetrics

logger = logging.getLogger(__name__)

LOCAL_TYPES = MetricType.CPU | MetricType.MEM | MetricType.NET | MetricType.DISK

_SECTOR_SIZE = 512

_CPU_TIME_FIELDS = (
    "user", "system", "idle", "nice", "iowait",
    "irq", "softirq", "steal", "guest", "guest_nice",
)


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _io_stats(counters) -> DiskIOStats:
    """Map a psutil sdiskio tuple onto DiskIOStats; missing fields stay 0."""
    return DiskIOStats(
        read_ios=counters.read_count,
        read_merges=getattr(counters, "read_merged_count", 0),
        read_sectors=counters.read_bytes // _SECTOR_SIZE,
        read_ticks=counters.read_time,
        write_ios=counters.write_count,
        write_merges=getattr(counters, "write_merged_count", 0),
        write_sectors=counters.write_bytes // _SECTOR_SIZE,
        write_ticks=counters.write_time,
        total_ticks=getattr(counters, "busy_time", 0),
    )


def _net_line(name: str, counters) -> NetDevLine:
    return NetDevLine(
        name=name,
        rx_bytes=counters.bytes_recv,
        rx_packets=counters.packets_recv,
        rx_errors=counters.errin,
        rx_dropped=counters.dropin,
        tx_bytes=counters.bytes_sent,
        tx_packets=counters.packets_sent,
        tx_errors=counters.errout,
        tx_dropped=counters.dropout,
    )


class LocalMetricsCollector:
    """
    Collects a one-shot RealtimeMetrics snapshot of the current node.

    A category that fails to collect is reported in the envelope's errors
    and does not prevent the other categories from being collected.
    """

    def __init__(self, host: Optional[str] = None, interface: Optional[str] = None):
        """
        Args:
            host: Name reported for this node, defaults to the hostname
            interface: Network interface to report, defaults to all summed
        """
        self.host = host or socket.gethostname()
        self.interface = interface

    def collect_cpu(self) -> CPUMetrics:
        times = psutil.cpu_times()
        times_stat = CPUTimesStat(
            cpu="cpu-total",
            **{name: float(getattr(times, name, 0.0)) for name in _CPU_TIME_FIELDS},
        )
        load1, load5, load15 = psutil.getloadavg()
        return CPUMetrics(
            collected_at=_now(),
            times_stat=times_stat,
            load_stat=LoadAvgStat(load1=load1, load5=load5, load15=load15),
            cpu_count=psutil.cpu_count() or 0,
        )

    def collect_mem(self) -> MemMetrics:
        vm = psutil.virtual_memory()
        swap = psutil.swap_memory()
        info = MemInfo(
            addr=self.host,
            total=vm.total,
            used=vm.used,
            free=vm.free,
            available=vm.available,
            shared=getattr(vm, "shared", 0),
            cache=getattr(vm, "cached", 0),
            buffers=getattr(vm, "buffers", 0),
            swap_space_total=swap.total,
            swap_space_free=swap.free,
            limit=vm.total,
        )
        return MemMetrics(collected_at=_now(), info=info)

    def collect_net(self) -> NetMetrics:
        per_nic = psutil.net_io_counters(pernic=True)
        if self.interface:
            if self.interface not in per_nic:
                raise ValueError(f"network interface '{self.interface}' not found")
            line = _net_line(self.interface, per_nic[self.interface])
            return NetMetrics(collected_at=_now(), interface_name=self.interface, net_stats=line)

        total = NetDevLine()
        for name, counters in sorted(per_nic.items()):
            total.add(_net_line(name, counters))
        return NetMetrics(collected_at=_now(), net_stats=total)

    def collect_disk(self) -> DiskMetric:
        partitions = psutil.disk_partitions(all=False)
        counters = psutil.disk_io_counters(perdisk=False)
        metric = DiskMetric(collected_at=_now(), n_disks=len(partitions))
        if counters is not None:
            metric.io_stats = _io_stats(counters)
        return metric

    def collect_disks_by_name(self, names: List[str]) -> Dict[str, DiskMetric]:
        per_disk = psutil.disk_io_counters(perdisk=True) or {}
        wanted = set(names)
        return {
            name: DiskMetric(collected_at=_now(), n_disks=1, io_stats=_io_stats(counters))
            for name, counters in sorted(per_disk.items())
            if not wanted or name in wanted
        }

    def collect(self, options: Optional[MetricsOptions] = None) -> RealtimeMetrics:
        """
        Collect one snapshot for the categories selected by ``options``.

        Args:
            options: Categories and breakdowns to produce; NONE types selects
                     every locally available category

        Returns:
            Envelope with ``final`` set, aggregated over this node only
        """
        options = options or MetricsOptions()
        wanted = options.types if options.types != MetricType.NONE else LOCAL_TYPES
        result = RealtimeMetrics(hosts=[self.host], final=True)
        metrics = Metrics()

        collectors = (
            (MetricType.CPU, "cpu", self.collect_cpu),
            (MetricType.MEM, "mem", self.collect_mem),
            (MetricType.NET, "net", self.collect_net),
            (MetricType.DISK, "disk", self.collect_disk),
        )
        for category, slot, collect in collectors:
            if not wanted.contains(category):
                continue
            value = self._safe(slot, collect, result.errors)
            if value is not None:
                setattr(metrics, slot, value)

        result.aggregated = metrics
        if options.by_host:
            result.by_host = {self.host: copy.deepcopy(metrics)}
        if options.by_disk and wanted.contains(MetricType.DISK):
            by_disk = self._safe("disk", lambda: self.collect_disks_by_name(options.disks), result.errors)
            if by_disk:
                result.by_disk = by_disk

        logger.debug(f"Collected local metrics for {self.host}: {result.aggregated.categories()!r}")
        return result

    def _safe(self, slot: str, collect: Callable, errors: List[str]):
        try:
            return collect()
        except (psutil.Error, OSError, ValueError, AttributeError, NotImplementedError) as e:
            logger.warning(f"Failed to collect local {slot} metrics: {type(e).__name__}: {e}")
            errors.append(f"{self.host}: {slot}: {e}")
            return None
