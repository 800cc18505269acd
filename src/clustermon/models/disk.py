"""Disk metrics: drive counts, operation counters and block I/O statistics."""

from typing import Dict, Optional

from pydantic import Field, StrictInt

from .base import OMIT_EMPTY, ZERO_TIME, Timestamp, WireModel
from .common import TimedAction, is_after
from .scanner import merge_counters, merge_timed_actions


class DiskIOStats(WireModel):
    """Block device I/O counters of a single drive."""

    read_ios: StrictInt = 0
    read_merges: StrictInt = 0
    read_sectors: StrictInt = 0
    read_ticks: StrictInt = 0
    write_ios: StrictInt = 0
    write_merges: StrictInt = 0
    # The misspelt keys are what servers emit.
    write_sectors: StrictInt = Field(0, alias="wrte_sectors")
    write_ticks: StrictInt = 0
    current_ios: StrictInt = 0
    total_ticks: StrictInt = 0
    req_ticks: StrictInt = 0
    discard_ios: StrictInt = 0
    discard_merges: StrictInt = 0
    discard_sectors: StrictInt = Field(0, alias="discard_secotrs")
    discard_ticks: StrictInt = 0
    flush_ios: StrictInt = 0
    flush_ticks: StrictInt = 0

    def merge(self, other: Optional["DiskIOStats"]) -> None:
        """Sum every counter of other into this one."""
        if other is None:
            return
        for name in type(self).model_fields:
            setattr(self, name, getattr(self, name) + getattr(other, name))


class OperationsLastMinute(WireModel):
    operations: Dict[str, TimedAction] = Field(default_factory=dict, json_schema_extra=OMIT_EMPTY)


class DiskMetric(WireModel):
    """Metrics for one or more disks."""

    collected_at: Timestamp = Field(ZERO_TIME, alias="collected")
    n_disks: StrictInt = 0
    offline: StrictInt = Field(0, json_schema_extra=OMIT_EMPTY)
    healing: StrictInt = Field(0, json_schema_extra=OMIT_EMPTY)
    life_time_ops: Dict[str, StrictInt] = Field(default_factory=dict, json_schema_extra=OMIT_EMPTY)
    last_minute: OperationsLastMinute = Field(default_factory=OperationsLastMinute)
    io_stats: DiskIOStats = Field(default_factory=DiskIOStats, alias="iostats")

    def merge(self, other: Optional["DiskMetric"]) -> None:
        """Merge other into this disk view."""
        if other is None:
            return
        if is_after(other.collected_at, self.collected_at):
            self.collected_at = other.collected_at
        self.n_disks += other.n_disks
        self.offline += other.offline
        self.healing += other.healing
        merge_counters(self.life_time_ops, other.life_time_ops)
        merge_timed_actions(self.last_minute.operations, other.last_minute.operations)
        self.io_stats.merge(other.io_stats)
