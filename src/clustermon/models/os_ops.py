"""OS-level operation counters."""

from typing import Dict, Optional

from pydantic import Field, StrictInt

from .base import OMIT_EMPTY, ZERO_TIME, Timestamp, WireModel
from .common import is_after
from .disk import OperationsLastMinute
from .scanner import merge_counters, merge_timed_actions


class OSMetrics(WireModel):
    """Metrics for OS operations."""

    collected_at: Timestamp = Field(ZERO_TIME, alias="collected")
    life_time_ops: Dict[str, StrictInt] = Field(default_factory=dict, json_schema_extra=OMIT_EMPTY)
    last_minute: OperationsLastMinute = Field(default_factory=OperationsLastMinute)

    def merge(self, other: Optional["OSMetrics"]) -> None:
        if other is None:
            return
        if is_after(other.collected_at, self.collected_at):
            self.collected_at = other.collected_at
        merge_counters(self.life_time_ops, other.life_time_ops)
        merge_timed_actions(self.last_minute.operations, other.last_minute.operations)
