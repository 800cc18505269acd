"""Memory capacity metrics."""

from typing import Optional

from pydantic import Field, StrictInt, StrictStr

from .base import OMIT_EMPTY, ZERO_TIME, Timestamp, WireModel
from .common import is_after

_CAPACITY_FIELDS = (
    "total", "used", "free", "available", "shared", "cache", "buffers",
    "swap_space_total", "swap_space_free", "limit",
)


class MemInfo(WireModel):
    """RAM and swap information of a node; satisfies NodeInfo."""

    addr: StrictStr = ""
    error: StrictStr = Field("", json_schema_extra=OMIT_EMPTY)

    total: StrictInt = Field(0, json_schema_extra=OMIT_EMPTY)
    used: StrictInt = Field(0, json_schema_extra=OMIT_EMPTY)
    free: StrictInt = Field(0, json_schema_extra=OMIT_EMPTY)
    available: StrictInt = Field(0, json_schema_extra=OMIT_EMPTY)
    shared: StrictInt = Field(0, json_schema_extra=OMIT_EMPTY)
    cache: StrictInt = Field(0, json_schema_extra=OMIT_EMPTY)
    buffers: StrictInt = Field(0, alias="buffer", json_schema_extra=OMIT_EMPTY)
    swap_space_total: StrictInt = Field(0, json_schema_extra=OMIT_EMPTY)
    swap_space_free: StrictInt = Field(0, json_schema_extra=OMIT_EMPTY)
    # cgroup limit when configured and below total, otherwise total.
    limit: StrictInt = Field(0, json_schema_extra=OMIT_EMPTY)


class MemMetrics(WireModel):
    collected_at: Timestamp = Field(ZERO_TIME, alias="collected")
    info: MemInfo = Field(default_factory=MemInfo, alias="memInfo")

    def merge(self, other: Optional["MemMetrics"]) -> None:
        """
        Sum capacities into a cluster-wide view.

        A receiver without an address takes the address and error of the
        first record merged into it.
        """
        if other is None:
            return
        if is_after(other.collected_at, self.collected_at):
            self.collected_at = other.collected_at
        if not self.info.addr:
            self.info.addr = other.info.addr
            self.info.error = other.info.error
        for name in _CAPACITY_FIELDS:
            setattr(self.info, name, getattr(self.info, name) + getattr(other.info, name))
