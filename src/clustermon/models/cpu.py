"""CPU time and load metrics."""

from typing import Optional

from pydantic import Field, StrictInt, StrictStr

from .base import ZERO_TIME, Timestamp, WireModel
from .common import is_after


class CPUTimesStat(WireModel):
    """Seconds spent by the CPUs in each mode."""

    cpu: StrictStr = ""
    user: float = 0.0
    system: float = 0.0
    idle: float = 0.0
    nice: float = 0.0
    iowait: float = 0.0
    irq: float = 0.0
    softirq: float = 0.0
    steal: float = 0.0
    guest: float = 0.0
    guest_nice: float = Field(0.0, alias="guestNice")


class LoadAvgStat(WireModel):
    load1: float = 0.0
    load5: float = 0.0
    load15: float = 0.0


_TIME_FIELDS = (
    "user", "system", "idle", "nice", "iowait",
    "irq", "softirq", "steal", "guest", "guest_nice",
)


class CPUMetrics(WireModel):
    collected_at: Timestamp = Field(ZERO_TIME, alias="collected")
    times_stat: Optional[CPUTimesStat] = Field(None, alias="timesStat")
    load_stat: Optional[LoadAvgStat] = Field(None, alias="loadStat")
    cpu_count: StrictInt = Field(0, alias="cpuCount")

    def merge(self, other: Optional["CPUMetrics"]) -> None:
        """
        Merge other into this CPU view.

        Time buckets, load averages and CPU counts are summed. Load is summed
        rather than averaged so the result reads as total cluster load.
        """
        if other is None:
            return
        if is_after(other.collected_at, self.collected_at):
            self.collected_at = other.collected_at

        if other.times_stat is not None:
            if self.times_stat is None:
                self.times_stat = CPUTimesStat(cpu=other.times_stat.cpu)
            for name in _TIME_FIELDS:
                setattr(self.times_stat, name,
                        getattr(self.times_stat, name) + getattr(other.times_stat, name))

        if other.load_stat is not None:
            if self.load_stat is None:
                self.load_stat = LoadAvgStat()
            self.load_stat.load1 += other.load_stat.load1
            self.load_stat.load5 += other.load_stat.load5
            self.load_stat.load15 += other.load_stat.load15

        self.cpu_count += other.cpu_count
