"""
Tests for the MetricType bitmask and MetricsOptions query rendering.
"""

import pytest

from clustermon.models import MetricsOptions, MetricType, format_duration
from clustermon.validation import ValidationError

CATEGORIES = [
    MetricType.SCANNER, MetricType.DISK, MetricType.OS, MetricType.BATCH_JOBS,
    MetricType.SITE_RESYNC, MetricType.NET, MetricType.MEM, MetricType.CPU,
    MetricType.RPC, MetricType.RUNTIME,
]


@pytest.mark.unit
class TestMetricType:
    """Test cases for MetricType."""

    def test_bit_values(self):
        """Each category occupies its own bit in wire order."""
        assert [int(c) for c in CATEGORIES] == [1 << i for i in range(10)]
        assert int(MetricType.ALL) == 1023
        assert int(MetricType.NONE) == 0

    def test_all_is_union_of_categories(self):
        union = MetricType.NONE
        for c in CATEGORIES:
            union |= c
        assert union == MetricType.ALL

    @pytest.mark.parametrize("category", CATEGORIES)
    def test_contains_properties(self, category):
        assert category.contains(category)
        assert MetricType.ALL.contains(category)
        assert category.contains(MetricType.NONE)
        assert not MetricType.NONE.contains(category)

    def test_contains_requires_every_bit(self):
        mask = MetricType.CPU | MetricType.MEM
        assert mask.contains(MetricType.CPU)
        assert mask.contains(MetricType.CPU | MetricType.MEM)
        assert not mask.contains(MetricType.CPU | MetricType.NET)
        assert not MetricType.CPU.contains(mask)

    def test_names(self):
        assert (MetricType.CPU | MetricType.MEM).names() == ["mem", "cpu"]
        assert MetricType.NONE.names() == []
        assert len(MetricType.ALL.names()) == 10

    def test_parse(self):
        assert MetricType.parse("cpu, MEM") == MetricType.CPU | MetricType.MEM
        assert MetricType.parse("") == MetricType.NONE
        assert MetricType.parse("all") == MetricType.ALL
        assert MetricType.parse("go,batchjobs,siteresync") == (
            MetricType.RUNTIME | MetricType.BATCH_JOBS | MetricType.SITE_RESYNC
        )

    def test_parse_unknown_name(self):
        with pytest.raises(ValidationError) as exc_info:
            MetricType.parse("cpu,gpu")
        assert "gpu" in str(exc_info.value)
        assert exc_info.value.field_name == "types"


@pytest.mark.unit
class TestFormatDuration:
    """Durations render the way the server parses them."""

    @pytest.mark.parametrize("ns,expected", [
        (0, "0s"),
        (500, "500ns"),
        (1_500, "1.5µs"),
        (2_000_000, "2ms"),
        (1_000_000_000, "1s"),
        (1_500_000_000, "1.5s"),
        (90 * 1_000_000_000, "1m30s"),
        (3600 * 1_000_000_000, "1h0m0s"),
    ])
    def test_format(self, ns, expected):
        assert format_duration(ns) == expected


@pytest.mark.unit
class TestMetricsOptions:
    """Test cases for MetricsOptions.to_query_params."""

    def test_defaults(self):
        params = MetricsOptions().to_query_params()
        assert params == {"types": "0", "n": "0", "interval": "0s", "hosts": "", "disks": ""}

    def test_full_options(self):
        options = MetricsOptions(
            types=MetricType.CPU | MetricType.MEM,
            n=5,
            interval=2.0,
            hosts=["a:9000", "b:9000"],
            by_host=True,
            disks=["/d1"],
            by_disk=True,
            by_job_id="job-1",
            by_dep_id="dep-1",
        )
        params = options.to_query_params()
        assert params["types"] == str(int(MetricType.CPU | MetricType.MEM))
        assert params["n"] == "5"
        assert params["interval"] == "2s"
        assert params["hosts"] == "a:9000,b:9000"
        assert params["by-host"] == "true"
        assert params["disks"] == "/d1"
        assert params["by-disk"] == "true"
        assert params["by-jobID"] == "job-1"
        assert params["by-depID"] == "dep-1"
