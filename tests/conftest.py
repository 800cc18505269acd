"""
Pytest configuration and shared fixtures for the clustermon test suite.

This module provides common fixtures, stream builders and configuration
for all test modules in the clustermon project.
"""

import json
import shutil
import sys
import tempfile
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any, AsyncIterator, Dict, Iterable, List

import pytest

# Add src to Python path for testing
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from clustermon.config import clear_config_cache  # noqa: E402
from clustermon.models import (  # noqa: E402
    BatchJobMetrics,
    BucketScanInfo,
    CPUMetrics,
    CPUTimesStat,
    DiskIOStats,
    DiskMetric,
    Float64Histogram,
    JobMetric,
    LoadAvgStat,
    MemInfo,
    MemMetrics,
    Metrics,
    NetDevLine,
    NetMetrics,
    OSMetrics,
    ReplicateInfo,
    RPCMetrics,
    RuntimeMetrics,
    ScannerMetrics,
    SiteResyncMetrics,
    TimedAction,
)


# ============================================================================
# Test Configuration
# ============================================================================


def pytest_configure(config):
    """Configure pytest with custom markers and settings."""
    config.addinivalue_line("markers", "unit: mark test as a unit test")
    config.addinivalue_line("markers", "integration: mark test as an integration test")
    config.addinivalue_line("markers", "slow: mark test as slow running")


# ============================================================================
# Core Fixtures
# ============================================================================


@pytest.fixture
def temp_dir():
    """Create a temporary directory for test files."""
    temp_path = tempfile.mkdtemp()
    yield Path(temp_path)
    shutil.rmtree(temp_path, ignore_errors=True)


@pytest.fixture(autouse=True)
def reset_config_cache():
    """Make sure no test sees configuration cached by another."""
    clear_config_cache()
    yield
    clear_config_cache()


@pytest.fixture
def sample_config_data() -> Dict[str, Any]:
    """Sample configuration data for testing."""
    return {
        "client": {
            "endpoint": "node1:9000",
            "secure": True,
            "bearer_token": "secret",
            "request_timeout": 5.0,
        },
        "stream": {
            "types": ["cpu", "mem"],
            "n": 3,
            "interval_seconds": 2.0,
            "hosts": ["node1:9000", "node2:9000"],
            "by_host": True,
        },
        "logging": {
            "level": "debug",
        },
    }


# ============================================================================
# Stream Helpers
# ============================================================================


def ts(seconds: int) -> datetime:
    """A UTC timestamp ``seconds`` after a fixed epoch."""
    return datetime(2024, 1, 1, tzinfo=timezone.utc) + timedelta(seconds=seconds)


def cpu_frame(host: str, user: float, final: bool = False) -> Dict[str, Any]:
    """A wire envelope carrying one host's CPU snapshot."""
    return {
        "hosts": [host],
        "aggregated": {
            "cpu": {
                "collected": "2024-01-01T00:00:00Z",
                "timesStat": {"cpu": "cpu-total", "user": user, "system": user / 2},
                "loadStat": {"load1": 1.0, "load5": 0.5, "load15": 0.25},
                "cpuCount": 4,
            }
        },
        "final": final,
    }


def encode_stream(frames: Iterable[Dict[str, Any]], sep: str = "\n") -> bytes:
    """Join frames the way the server writes them."""
    return sep.join(json.dumps(f) for f in frames).encode("utf-8")


def chunked(data: bytes, size: int) -> List[bytes]:
    """Split ``data`` into chunks of at most ``size`` bytes."""
    return [data[i:i + size] for i in range(0, len(data), size)]


async def async_chunks(chunks: Iterable[bytes]) -> AsyncIterator[bytes]:
    """Async byte source over in-memory chunks."""
    for chunk in chunks:
        yield chunk


def full_metrics() -> Metrics:
    """A single node's Metrics with every category populated."""
    scanner = ScannerMetrics(
        collected_at=ts(5), current_cycle=3, current_started=ts(1), cycles_completed_at=[ts(0)],
        ongoing_buckets=2, per_bucket_stats={"photos": [BucketScanInfo(pool=1, set=2, cycle=3)]},
        life_time_ops={"ObjectScanned": 7}, life_time_ilm={"Delete": 1},
        active_paths=["a/1", "b/2"], excessive_prefixes=["x/"],
    )
    scanner.last_minute.actions["ScanObject"] = TimedAction(count=2, acc_time=30, min_time=10, max_time=20)
    disk = DiskMetric(collected_at=ts(5), n_disks=4, offline=1, life_time_ops={"read": 3},
                      io_stats=DiskIOStats(read_ios=9, write_sectors=8))
    disk.last_minute.operations["read"] = TimedAction(count=1, acc_time=7, bytes=64)
    os_metrics = OSMetrics(collected_at=ts(5), life_time_ops={"fsync": 2})
    return Metrics(
        scanner=scanner,
        disk=disk,
        os=os_metrics,
        batch_jobs=BatchJobMetrics(collected_at=ts(5), jobs={
            "j1": JobMetric(job_id="j1", job_type="replicate", start_time=ts(1),
                            replicate=ReplicateInfo(bucket="b", objects=3)),
        }),
        site_resync=SiteResyncMetrics(collected_at=ts(5), resync_status="Ongoing", resync_id="r1",
                                      replicated_count=4, failed_buckets=["b2"]),
        net=NetMetrics(collected_at=ts(5), interface_name="eth0",
                       net_stats=NetDevLine(name="eth0", rx_bytes=100, tx_bytes=50)),
        mem=MemMetrics(collected_at=ts(5), info=MemInfo(
            addr="n1", total=10, used=4, free=6, available=5, shared=1, cache=2, buffers=1,
            swap_space_total=8, swap_space_free=3, limit=10,
        )),
        cpu=CPUMetrics(collected_at=ts(5), times_stat=CPUTimesStat(cpu="cpu-total", user=1.5, idle=8.0),
                       load_stat=LoadAvgStat(load1=0.5, load5=0.25), cpu_count=4),
        rpc=RPCMetrics(collected_at=ts(5), connected=2, outgoing_bytes=10, last_pong_time=ts(4),
                       last_ping_ms=1.5, max_ping_dur_ms=3.0, last_connect_time=ts(2),
                       by_destination={"n2": RPCMetrics(connected=1)}),
        runtime=RuntimeMetrics(uint_metrics={"/gc/cycles": 3}, float_metrics={"/cpu": 0.5},
                               hist_metrics={"lat": Float64Histogram(counts=[1, 2], buckets=[0.0, 1.0, 2.0])},
                               n=1),
    )
