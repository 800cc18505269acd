"""Network interface counters."""

from typing import Optional

from pydantic import Field, StrictInt, StrictStr

from .base import ZERO_TIME, Timestamp, WireModel
from .common import is_after


class NetDevLine(WireModel):
    """Counters of one network device, as found in /proc/net/dev."""

    name: StrictStr = ""
    rx_bytes: StrictInt = 0
    rx_packets: StrictInt = 0
    rx_errors: StrictInt = 0
    rx_dropped: StrictInt = 0
    rx_fifo: StrictInt = 0
    rx_frame: StrictInt = 0
    rx_compressed: StrictInt = 0
    rx_multicast: StrictInt = 0
    tx_bytes: StrictInt = 0
    tx_packets: StrictInt = 0
    tx_errors: StrictInt = 0
    tx_dropped: StrictInt = 0
    tx_fifo: StrictInt = 0
    tx_collisions: StrictInt = 0
    tx_carrier: StrictInt = 0
    tx_compressed: StrictInt = 0

    def add(self, other: "NetDevLine") -> None:
        """Sum every counter of other into this line; a set name is kept."""
        if not self.name:
            self.name = other.name
        for name in type(self).model_fields:
            if name != "name":
                setattr(self, name, getattr(self, name) + getattr(other, name))


class NetMetrics(WireModel):
    collected_at: Timestamp = Field(ZERO_TIME, alias="collected")
    interface_name: StrictStr = Field("", alias="interfaceName")
    net_stats: NetDevLine = Field(default_factory=NetDevLine, alias="netstats")

    def merge(self, other: Optional["NetMetrics"]) -> None:
        if other is None:
            return
        if is_after(other.collected_at, self.collected_at):
            self.collected_at = other.collected_at
        if not self.interface_name:
            self.interface_name = other.interface_name
        self.net_stats.add(other.net_stats)
