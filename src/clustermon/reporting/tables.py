"""
Tabular views of realtime metrics built with polars.

These frames are for operators: headline columns only, one row per host,
disk, operation or timing series. Every builder returns a frame with a fixed
schema, so an empty input still yields the expected columns.
"""

import logging
from typing import Dict, Mapping, Optional

import polars as pl

from ..models.common import TimedAction
from ..models.disk import DiskMetric
from ..models.realtime import Metrics, RealtimeMetrics
from ..stats.timings import Timings

logger = logging.getLogger(__name__)

AGGREGATE_ROW = "(cluster)"

HOSTS_SCHEMA = {
    "host": pl.Utf8,
    "cpu_count": pl.Int64,
    "cpu_user": pl.Float64,
    "cpu_system": pl.Float64,
    "cpu_idle": pl.Float64,
    "load1": pl.Float64,
    "mem_total": pl.Int64,
    "mem_available": pl.Int64,
    "net_rx_bytes": pl.Int64,
    "net_tx_bytes": pl.Int64,
    "n_disks": pl.Int64,
    "disks_offline": pl.Int64,
    "rpc_connected": pl.Int64,
    "rpc_disconnected": pl.Int64,
}

DISKS_SCHEMA = {
    "disk": pl.Utf8,
    "n_disks": pl.Int64,
    "offline": pl.Int64,
    "healing": pl.Int64,
    "read_ios": pl.Int64,
    "write_ios": pl.Int64,
    "read_sectors": pl.Int64,
    "write_sectors": pl.Int64,
    "ops_last_minute": pl.Int64,
}

ACTIONS_SCHEMA = {
    "operation": pl.Utf8,
    "count": pl.Int64,
    "avg_ns": pl.Int64,
    "avg_bytes": pl.Int64,
    "max_ns": pl.Int64,
}

TIMINGS_SCHEMA = {
    "name": pl.Utf8,
    "avg": pl.Int64,
    "p50": pl.Int64,
    "p75": pl.Int64,
    "p95": pl.Int64,
    "p99": pl.Int64,
    "p999": pl.Int64,
    "long5p": pl.Int64,
    "short5p": pl.Int64,
    "min": pl.Int64,
    "max": pl.Int64,
    "std_dev": pl.Int64,
    "range": pl.Int64,
}


def _host_row(host: str, m: Metrics) -> Dict[str, Optional[object]]:
    row: Dict[str, Optional[object]] = {name: None for name in HOSTS_SCHEMA}
    row["host"] = host
    if m.cpu is not None:
        row["cpu_count"] = m.cpu.cpu_count
        if m.cpu.times_stat is not None:
            row["cpu_user"] = m.cpu.times_stat.user
            row["cpu_system"] = m.cpu.times_stat.system
            row["cpu_idle"] = m.cpu.times_stat.idle
        if m.cpu.load_stat is not None:
            row["load1"] = m.cpu.load_stat.load1
    if m.mem is not None:
        row["mem_total"] = m.mem.info.total
        row["mem_available"] = m.mem.info.available
    if m.net is not None:
        row["net_rx_bytes"] = m.net.net_stats.rx_bytes
        row["net_tx_bytes"] = m.net.net_stats.tx_bytes
    if m.disk is not None:
        row["n_disks"] = m.disk.n_disks
        row["disks_offline"] = m.disk.offline
    if m.rpc is not None:
        row["rpc_connected"] = m.rpc.connected
        row["rpc_disconnected"] = m.rpc.disconnected
    return row


def hosts_frame(rt: RealtimeMetrics) -> pl.DataFrame:
    """
    One row per host with CPU, memory, network, disk and RPC headlines.

    When the envelope carries no per-host breakdown, a single row labelled
    AGGREGATE_ROW is built from the aggregated view instead.
    """
    if rt.by_host:
        rows = [_host_row(host, m) for host, m in sorted(rt.by_host.items())]
    else:
        rows = [_host_row(AGGREGATE_ROW, rt.aggregated)]
    return pl.DataFrame(rows, schema=HOSTS_SCHEMA)


def disks_frame(rt: RealtimeMetrics) -> pl.DataFrame:
    """One row per disk from the per-disk breakdown."""
    rows = []
    for name, d in sorted(rt.by_disk.items()):
        rows.append({
            "disk": name,
            "n_disks": d.n_disks,
            "offline": d.offline,
            "healing": d.healing,
            "read_ios": d.io_stats.read_ios,
            "write_ios": d.io_stats.write_ios,
            "read_sectors": d.io_stats.read_sectors,
            "write_sectors": d.io_stats.write_sectors,
            "ops_last_minute": _ops_count(d),
        })
    return pl.DataFrame(rows, schema=DISKS_SCHEMA)


def _ops_count(d: DiskMetric) -> int:
    return sum(a.count for a in d.last_minute.operations.values())


def timed_actions_frame(actions: Mapping[str, TimedAction]) -> pl.DataFrame:
    """Operation name, count and averages, busiest operation first."""
    rows = [
        {
            "operation": name,
            "count": a.count,
            "avg_ns": a.avg(),
            "avg_bytes": a.avg_bytes(),
            "max_ns": a.max_time,
        }
        for name, a in actions.items()
    ]
    return pl.DataFrame(rows, schema=ACTIONS_SCHEMA).sort(
        ["count", "operation"], descending=[True, False]
    )


def timings_frame(named_timings: Mapping[str, Timings]) -> pl.DataFrame:
    """One row per named Timings summary, in nanoseconds."""
    rows = []
    for name, t in named_timings.items():
        row = {"name": name}
        row.update({col: getattr(t, col) for col in TIMINGS_SCHEMA if col != "name"})
        rows.append(row)
    return pl.DataFrame(rows, schema=TIMINGS_SCHEMA)
