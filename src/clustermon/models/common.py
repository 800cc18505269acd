"""
Value types shared by several metric categories.

TimedAction is the running accumulator used for "last minute" operation
statistics. The NodeInfo protocol describes the address/error
pair carried by per-node records.
"""

from datetime import datetime
from typing import Iterable, List, Protocol, runtime_checkable

from pydantic import Field, StrictInt

from .base import OMIT_EMPTY, ZERO_TIME, WireModel, as_utc, format_time

__all__ = [
    "ZERO_TIME",
    "format_time",
    "is_after",
    "TimedAction",
    "NodeInfo",
    "node_errors",
]


def is_after(candidate: datetime, current: datetime) -> bool:
    """Return True if ``candidate`` is strictly later than ``current``."""
    return as_utc(candidate) > as_utc(current)


class TimedAction(WireModel):
    """
    Number of actions and their accumulated duration in nanoseconds.

    Merging is field-wise addition of count, time and bytes, so the zero
    action is the identity and merge order does not matter.
    """

    count: StrictInt = 0
    acc_time: StrictInt = Field(0, alias="acc_time_ns")
    min_time: StrictInt = Field(0, alias="min_ns", json_schema_extra=OMIT_EMPTY)
    max_time: StrictInt = Field(0, alias="max_ns", json_schema_extra=OMIT_EMPTY)
    bytes: StrictInt = Field(0, json_schema_extra=OMIT_EMPTY)

    def avg(self) -> int:
        """Average time per action in nanoseconds, 0 when empty."""
        if self.count == 0:
            return 0
        return self.acc_time // self.count

    def avg_bytes(self) -> int:
        """Average bytes per action, 0 when empty."""
        if self.count == 0:
            return 0
        return self.bytes // self.count

    def merge(self, other: "TimedAction") -> None:
        """Merge other into this action."""
        if other is None:
            return
        if self.count == 0:
            self.min_time = other.min_time
        elif other.count > 0:
            self.min_time = min(self.min_time, other.min_time)
        self.count += other.count
        self.acc_time += other.acc_time
        self.bytes += other.bytes
        self.max_time = max(self.max_time, other.max_time)


@runtime_checkable
class NodeInfo(Protocol):
    """Anything that reports which node it came from and its last error."""

    addr: str
    error: str


def node_errors(items: Iterable[NodeInfo]) -> List[str]:
    """Collect ``"addr: error"`` strings from records that carry an error."""
    return [f"{item.addr}: {item.error}" for item in items if item.error]
