"""
Tests for the per-category merge rules.

Each accumulator reduces another node's snapshot into itself. These tests
pin down which fields are summed, which take the maximum, which keep the
newest value and which keep the first value seen.
"""

import copy

import pytest

from clustermon.models import (
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
    NetDevLine,
    NetMetrics,
    OSMetrics,
    RPCMetrics,
    RuntimeMetrics,
    ScannerMetrics,
    SiteResyncMetrics,
    TimedAction,
)
from clustermon.models.common import NodeInfo, node_errors
from conftest import full_metrics, ts

ALL_ACCUMULATORS = [
    ScannerMetrics, DiskMetric, OSMetrics, BatchJobMetrics, SiteResyncMetrics,
    NetMetrics, MemMetrics, CPUMetrics, RPCMetrics, RuntimeMetrics,
]


@pytest.mark.unit
class TestTimedAction:
    """Test cases for TimedAction accumulation."""

    def test_zero_is_identity(self):
        action = TimedAction(count=3, acc_time=300, min_time=50, max_time=150, bytes=30)
        before = copy.deepcopy(action)
        action.merge(TimedAction())
        assert action == before

        zero = TimedAction()
        zero.merge(before)
        assert zero == before

    def test_merge_sums_and_tracks_extremes(self):
        a = TimedAction(count=2, acc_time=200, min_time=80, max_time=120, bytes=10)
        b = TimedAction(count=1, acc_time=50, min_time=50, max_time=50, bytes=5)
        a.merge(b)
        assert a == TimedAction(count=3, acc_time=250, min_time=50, max_time=120, bytes=15)

    def test_merge_order_does_not_matter(self):
        actions = [
            TimedAction(count=1, acc_time=10, min_time=10, max_time=10),
            TimedAction(count=2, acc_time=50, min_time=20, max_time=30),
            TimedAction(count=4, acc_time=40, min_time=5, max_time=15, bytes=8),
        ]
        forward = TimedAction()
        for a in actions:
            forward.merge(a)
        backward = TimedAction()
        for a in reversed(actions):
            backward.merge(a)
        assert forward == backward

    def test_averages(self):
        action = TimedAction(count=4, acc_time=1000, bytes=400)
        assert action.avg() == 250
        assert action.avg_bytes() == 100
        assert TimedAction().avg() == 0
        assert TimedAction().avg_bytes() == 0


@pytest.mark.unit
class TestNoneMerge:
    """Merging None is a no-op for every category."""

    @pytest.mark.parametrize("factory", ALL_ACCUMULATORS)
    def test_merge_none(self, factory):
        value = factory()
        before = copy.deepcopy(value)
        value.merge(None)
        assert value == before


@pytest.mark.unit
class TestZeroReceiver:
    """Merging into a zero value reproduces the merged snapshot."""

    @pytest.mark.parametrize("slot", [
        "scanner", "disk", "os", "batch_jobs", "site_resync",
        "net", "mem", "cpu", "rpc", "runtime",
    ])
    def test_zero_merge_reproduces_other(self, slot):
        snapshot = getattr(full_metrics(), slot)
        zero = type(snapshot)()
        zero.merge(snapshot)
        assert zero.to_dict() == snapshot.to_dict()


@pytest.mark.unit
class TestScannerMerge:
    """Test cases for ScannerMetrics.merge."""

    def test_counters_and_newest_time(self):
        a = ScannerMetrics(collected_at=ts(10), ongoing_buckets=2, life_time_ops={"ObjectScanned": 5})
        b = ScannerMetrics(collected_at=ts(20), ongoing_buckets=1,
                           life_time_ops={"ObjectScanned": 7, "DirScanned": 1},
                           life_time_ilm={"Delete": 2})
        a.merge(b)
        assert a.collected_at == ts(20)
        assert a.ongoing_buckets == 2
        assert a.life_time_ops == {"ObjectScanned": 12, "DirScanned": 1}
        assert a.life_time_ilm == {"Delete": 2}

    def test_per_bucket_first_seen_wins(self):
        first = [BucketScanInfo(pool=0, set=1, cycle=3)]
        second = [BucketScanInfo(pool=0, set=1, cycle=9)]
        a = ScannerMetrics(per_bucket_stats={"photos": first})
        a.merge(ScannerMetrics(per_bucket_stats={"photos": second, "logs": second, "empty": []}))
        assert a.per_bucket_stats["photos"][0].cycle == 3
        assert a.per_bucket_stats["logs"][0].cycle == 9
        assert "empty" not in a.per_bucket_stats
        # Copied, not shared.
        second[0].cycle = 100
        assert a.per_bucket_stats["logs"][0].cycle == 9

    def test_cycle_follows_highest(self):
        a = ScannerMetrics(current_cycle=2, current_started=ts(1), cycles_completed_at=[ts(0)])
        a.merge(ScannerMetrics(current_cycle=5, current_started=ts(5), cycles_completed_at=[ts(2), ts(3)]))
        assert a.current_cycle == 5
        assert a.current_started == ts(5)
        assert a.cycles_completed_at == [ts(2), ts(3)]

    def test_last_minute_actions(self):
        a = ScannerMetrics()
        a.last_minute.actions["ScanObject"] = TimedAction(count=1, acc_time=10)
        b = ScannerMetrics()
        b.last_minute.actions["ScanObject"] = TimedAction(count=2, acc_time=30)
        b.last_minute.ilm["Expire"] = TimedAction(count=1, acc_time=5)
        a.merge(b)
        assert a.last_minute.actions["ScanObject"].count == 3
        assert a.last_minute.actions["ScanObject"].acc_time == 40
        assert a.last_minute.ilm["Expire"].count == 1

    def test_paths_and_prefixes(self):
        a = ScannerMetrics(active_paths=["b/2"], excessive_prefixes=["x/"])
        a.merge(ScannerMetrics(active_paths=["a/1"], excessive_prefixes=["x/", "y/"]))
        assert a.active_paths == ["a/1", "b/2"]
        assert a.excessive_prefixes == ["x/", "y/"]


@pytest.mark.unit
class TestDiskAndOSMerge:
    """Test cases for DiskMetric, DiskIOStats and OSMetrics."""

    def test_disk_counts_are_summed(self):
        a = DiskMetric(collected_at=ts(5), n_disks=4, offline=1, life_time_ops={"read": 10})
        a.io_stats = DiskIOStats(read_ios=10, write_sectors=4)
        b = DiskMetric(collected_at=ts(1), n_disks=2, healing=1, life_time_ops={"read": 5})
        b.io_stats = DiskIOStats(read_ios=1, write_sectors=6, flush_ios=2)
        b.last_minute.operations["read"] = TimedAction(count=3, acc_time=9)
        a.merge(b)
        assert a.collected_at == ts(5)
        assert (a.n_disks, a.offline, a.healing) == (6, 1, 1)
        assert a.life_time_ops == {"read": 15}
        assert a.io_stats == DiskIOStats(read_ios=11, write_sectors=10, flush_ios=2)
        assert a.last_minute.operations["read"].count == 3

    def test_os_metrics(self):
        a = OSMetrics(life_time_ops={"fsync": 1})
        b = OSMetrics(collected_at=ts(3), life_time_ops={"fsync": 2, "open": 1})
        b.last_minute.operations["open"] = TimedAction(count=1, acc_time=100)
        a.merge(b)
        assert a.collected_at == ts(3)
        assert a.life_time_ops == {"fsync": 3, "open": 1}
        assert a.last_minute.operations["open"].acc_time == 100


@pytest.mark.unit
class TestBatchAndResyncMerge:
    """Test cases for BatchJobMetrics and SiteResyncMetrics."""

    def test_batch_jobs_union(self):
        a = BatchJobMetrics(collected_at=ts(1), jobs={"j1": JobMetric(job_id="j1")})
        a.merge(BatchJobMetrics(collected_at=ts(2), jobs={"j2": JobMetric(job_id="j2", complete=True)}))
        assert set(a.jobs) == {"j1", "j2"}
        assert a.jobs["j2"].complete
        assert a.collected_at == ts(2)

    def test_batch_jobs_empty_other_is_ignored(self):
        a = BatchJobMetrics(collected_at=ts(1))
        a.merge(BatchJobMetrics(collected_at=ts(9)))
        assert a.collected_at == ts(1)

    def test_site_resync_newest_replaces(self):
        a = SiteResyncMetrics(collected_at=ts(1), resync_status="Ongoing", replicated_count=5)
        newer = SiteResyncMetrics(collected_at=ts(2), resync_status="Completed",
                                  replicated_count=9, failed_buckets=["b1"])
        a.merge(newer)
        assert a.replicated_count == 9
        assert a.complete()
        assert a.failed_buckets == ["b1"]
        newer.failed_buckets.append("b2")
        assert a.failed_buckets == ["b1"]

    def test_site_resync_older_is_ignored(self):
        a = SiteResyncMetrics(collected_at=ts(5), replicated_count=5)
        a.merge(SiteResyncMetrics(collected_at=ts(2), replicated_count=1))
        assert a.replicated_count == 5
        assert not a.complete()


@pytest.mark.unit
class TestNetMemCPUMerge:
    """Test cases for NetMetrics, MemMetrics and CPUMetrics."""

    def test_net_sums(self):
        a = NetMetrics(net_stats=NetDevLine(name="eth0", rx_bytes=100, tx_bytes=10))
        a.merge(NetMetrics(collected_at=ts(1), net_stats=NetDevLine(name="eth1", rx_bytes=5, tx_errors=1)))
        assert a.net_stats.rx_bytes == 105
        assert a.net_stats.tx_bytes == 10
        assert a.net_stats.tx_errors == 1
        assert a.collected_at == ts(1)

    def test_net_keeps_interface_identity(self):
        a = NetMetrics()
        a.merge(NetMetrics(interface_name="eth0", net_stats=NetDevLine(name="eth0", rx_bytes=1)))
        a.merge(NetMetrics(interface_name="eth1", net_stats=NetDevLine(name="eth1", rx_bytes=2)))
        assert a.interface_name == "eth0"
        assert a.net_stats.name == "eth0"
        assert a.net_stats.rx_bytes == 3

    def test_mem_sums_capacities(self):
        a = MemMetrics(info=MemInfo(addr="a", total=100, available=40, swap_space_total=10,
                                    swap_space_free=5, limit=100))
        a.merge(MemMetrics(info=MemInfo(addr="b", total=50, available=10, swap_space_total=2,
                                        swap_space_free=1, limit=50)))
        assert (a.info.total, a.info.available) == (150, 50)
        assert (a.info.swap_space_total, a.info.swap_space_free) == (12, 6)
        assert a.info.limit == 150
        assert a.info.addr == "a"

    def test_mem_first_record_sets_identity(self):
        a = MemMetrics()
        a.merge(MemMetrics(info=MemInfo(addr="n1", error="slow", used=4, free=6, cache=2)))
        a.merge(MemMetrics(info=MemInfo(addr="n2", used=1, free=1)))
        assert (a.info.addr, a.info.error) == ("n1", "slow")
        assert (a.info.used, a.info.free, a.info.cache) == (5, 7, 2)

    def test_cpu_times_and_load_are_summed(self):
        a = CPUMetrics(times_stat=CPUTimesStat(user=100, system=50),
                       load_stat=LoadAvgStat(load1=1.0), cpu_count=4)
        a.merge(CPUMetrics(times_stat=CPUTimesStat(user=150, system=75),
                           load_stat=LoadAvgStat(load1=2.0), cpu_count=8))
        assert a.times_stat.user == 250
        assert a.times_stat.system == 125
        assert a.load_stat.load1 == 3.0
        assert a.cpu_count == 12

    def test_cpu_allocates_missing_sections(self):
        a = CPUMetrics()
        a.merge(CPUMetrics(times_stat=CPUTimesStat(cpu="cpu-total", idle=7)))
        assert a.times_stat.idle == 7
        assert a.times_stat.cpu == "cpu-total"
        assert a.load_stat is None

    def test_mem_info_is_node_info(self):
        infos = [MemInfo(addr="a"), MemInfo(addr="b", error="disk full")]
        assert all(isinstance(i, NodeInfo) for i in infos)
        assert node_errors(infos) == ["b: disk full"]


@pytest.mark.unit
class TestRPCMerge:
    """Test cases for RPCMetrics.merge."""

    def test_counters_and_ping(self):
        a = RPCMetrics(connected=2, outgoing_bytes=100, last_pong_time=ts(5), last_ping_ms=1.0,
                       max_ping_dur_ms=3.0, last_connect_time=ts(1))
        b = RPCMetrics(connected=1, disconnected=1, outgoing_bytes=50, last_pong_time=ts(9),
                       last_ping_ms=2.5, max_ping_dur_ms=2.0, last_connect_time=ts(2))
        a.merge(b)
        assert (a.connected, a.disconnected, a.outgoing_bytes) == (3, 1, 150)
        assert a.last_pong_time == ts(9)
        assert a.last_ping_ms == 2.5
        assert a.max_ping_dur_ms == 3.0
        assert a.last_connect_time == ts(2)

    def test_older_pong_keeps_ping(self):
        a = RPCMetrics(last_pong_time=ts(9), last_ping_ms=1.0)
        a.merge(RPCMetrics(last_pong_time=ts(1), last_ping_ms=9.0))
        assert a.last_ping_ms == 1.0

    def test_peers_merge_recursively(self):
        a = RPCMetrics(by_destination={"n2": RPCMetrics(connected=1)})
        a.merge(RPCMetrics(by_destination={"n2": RPCMetrics(connected=1), "n3": RPCMetrics(connected=1)},
                           by_caller={"n1": RPCMetrics(incoming_messages=4)}))
        assert a.by_destination["n2"].connected == 2
        assert a.by_destination["n3"].connected == 1
        assert a.by_caller["n1"].incoming_messages == 4


@pytest.mark.unit
class TestRuntimeMerge:
    """Test cases for RuntimeMetrics.merge."""

    def test_scalars_are_summed(self):
        a = RuntimeMetrics(uint_metrics={"/gc/cycles": 1}, float_metrics={"/cpu": 0.5}, n=1)
        a.merge(RuntimeMetrics(uint_metrics={"/gc/cycles": 2, "/heap": 4}, float_metrics={"/cpu": 0.25}, n=1))
        assert a.uint_metrics == {"/gc/cycles": 3, "/heap": 4}
        assert a.float_metrics == {"/cpu": 0.75}
        assert a.n == 2

    def test_histograms(self):
        a = RuntimeMetrics()
        hist = Float64Histogram(counts=[1, 2], buckets=[0.0, 1.0, 2.0])
        a.merge(RuntimeMetrics(hist_metrics={"lat": hist}))
        hist.counts[0] = 99
        assert a.hist_metrics["lat"].counts == [1, 2]

        a.merge(RuntimeMetrics(hist_metrics={"lat": Float64Histogram(counts=[3, 4], buckets=[0.0, 1.0, 2.0])}))
        assert a.hist_metrics["lat"].counts == [4, 6]

        # A different bucket layout cannot be added.
        a.merge(RuntimeMetrics(hist_metrics={"lat": Float64Histogram(counts=[1], buckets=[0.0, 5.0])}))
        assert a.hist_metrics["lat"].counts == [4, 6]
