"""
Scanner activity metrics.

Scanner counters are cumulative per node and summed across nodes, while the
per-bucket scan state is a point-in-time view kept from the first node that
reported the bucket.
"""

import copy
from typing import Dict, List, Optional

from pydantic import Field, StrictBool, StrictInt, StrictStr

from .base import OMIT_EMPTY, ZERO_TIME, Timestamp, WireModel
from .common import TimedAction, is_after


class BucketScanInfo(WireModel):
    """Scan state of one bucket in one erasure set."""

    pool: StrictInt = Field(0, alias="Pool")
    set: StrictInt = Field(0, alias="Set")
    cycle: StrictInt = Field(0, alias="Cycle")
    ongoing: StrictBool = Field(False, alias="Ongoing")
    last_update: Timestamp = Field(ZERO_TIME, alias="LastUpdate")
    last_started: Timestamp = Field(ZERO_TIME, alias="LastStarted")
    completed: List[Timestamp] = Field(default_factory=list, alias="Completed", json_schema_extra=OMIT_EMPTY)


class ScannerLastMinute(WireModel):
    actions: Dict[str, TimedAction] = Field(default_factory=dict, json_schema_extra=OMIT_EMPTY)
    ilm: Dict[str, TimedAction] = Field(default_factory=dict, json_schema_extra=OMIT_EMPTY)


def merge_counters(into: Dict[str, int], other: Dict[str, int]) -> None:
    """Add every counter of ``other`` into ``into`` by key."""
    for key, value in other.items():
        into[key] = into.get(key, 0) + value


def merge_timed_actions(into: Dict[str, TimedAction], other: Dict[str, TimedAction]) -> None:
    """Merge every TimedAction of ``other`` into ``into`` by key."""
    for key, action in other.items():
        total = into.get(key)
        if total is None:
            total = into[key] = TimedAction()
        total.merge(action)


class ScannerMetrics(WireModel):
    """Scanner information reported by one or more nodes."""

    collected_at: Timestamp = Field(ZERO_TIME, alias="collected")

    # Superseded by per_bucket_stats but still sent by older servers.
    current_cycle: StrictInt = 0
    current_started: Timestamp = ZERO_TIME
    cycles_completed_at: List[Timestamp] = Field(default_factory=list, alias="cycle_complete_times")

    ongoing_buckets: StrictInt = 0
    per_bucket_stats: Dict[str, List[BucketScanInfo]] = Field(default_factory=dict, json_schema_extra=OMIT_EMPTY)
    life_time_ops: Dict[str, StrictInt] = Field(default_factory=dict, json_schema_extra=OMIT_EMPTY)
    life_time_ilm: Dict[str, StrictInt] = Field(default_factory=dict, alias="ilm_ops", json_schema_extra=OMIT_EMPTY)
    last_minute: ScannerLastMinute = Field(default_factory=ScannerLastMinute)
    active_paths: List[StrictStr] = Field(default_factory=list, alias="active", json_schema_extra=OMIT_EMPTY)
    excessive_prefixes: List[StrictStr] = Field(default_factory=list, json_schema_extra=OMIT_EMPTY)

    def merge(self, other: Optional["ScannerMetrics"]) -> None:
        """Merge other into this scanner view."""
        if other is None:
            return
        if is_after(other.collected_at, self.collected_at):
            self.collected_at = other.collected_at

        if self.ongoing_buckets < other.ongoing_buckets:
            self.ongoing_buckets = other.ongoing_buckets

        for bucket, stats in other.per_bucket_stats.items():
            if not stats:
                continue
            if bucket not in self.per_bucket_stats:
                self.per_bucket_stats[bucket] = copy.deepcopy(stats)

        if self.current_cycle < other.current_cycle:
            self.current_cycle = other.current_cycle
            self.cycles_completed_at = list(other.cycles_completed_at)
            self.current_started = other.current_started
        if len(other.cycles_completed_at) > len(self.cycles_completed_at):
            self.cycles_completed_at = list(other.cycles_completed_at)

        merge_counters(self.life_time_ops, other.life_time_ops)
        merge_timed_actions(self.last_minute.actions, other.last_minute.actions)
        merge_counters(self.life_time_ilm, other.life_time_ilm)
        merge_timed_actions(self.last_minute.ilm, other.last_minute.ilm)

        self.active_paths = sorted(self.active_paths + other.active_paths)
        if other.excessive_prefixes:
            self.excessive_prefixes = sorted(set(self.excessive_prefixes) | set(other.excessive_prefixes))
