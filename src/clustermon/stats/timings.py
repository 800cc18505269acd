"""
Latency statistics over a batch of duration samples.

TimeDurations.measure() produces a fixed Timings summary. Values must match
summaries computed by the server, so the arithmetic is exact:

- avg is the integer mean
- p50 is the element at index n // 2 (no interpolation for even n)
- other percentiles use round-half-up indexing: ts[int(n * q + 0.5) - 1]
- long5p / short5p are integer means of the top / bottom 5% slices, falling
  back to max / min when the slice has at most one element
- std_dev is the population standard deviation (divide by n)

All values are integer nanoseconds.
"""

import math
from datetime import timedelta
from typing import Iterable

from pydantic import ConfigDict, Field, StrictInt

from ..models.base import WireModel


class Timings(WireModel):
    """Computed latency summary; every value is in nanoseconds."""

    model_config = ConfigDict(frozen=True)

    avg: StrictInt = 0                          # Average duration per sample
    p50: StrictInt = 0                          # 50th percentile
    p75: StrictInt = 0                          # 75th percentile
    p95: StrictInt = 0                          # 95th percentile
    p99: StrictInt = 0                          # 99th percentile
    p999: StrictInt = 0                         # 99.9th percentile
    long5p: StrictInt = Field(0, alias="l5p")   # Average of the longest 5%
    short5p: StrictInt = Field(0, alias="s5p")  # Average of the shortest 5%
    max: StrictInt = 0
    min: StrictInt = 0
    std_dev: StrictInt = Field(0, alias="sdev")  # Population standard deviation
    range: StrictInt = 0                        # max - min


class TimeDurations(list):
    """A list of nanosecond durations that can be summarized with measure()."""

    @classmethod
    def from_timedeltas(cls, values: Iterable[timedelta]) -> "TimeDurations":
        return cls((v.days * 86_400 + v.seconds) * 1_000_000_000 + v.microseconds * 1_000
                   for v in values)

    @classmethod
    def from_seconds(cls, values: Iterable[float]) -> "TimeDurations":
        return cls(int(v * 1_000_000_000) for v in values)

    def measure(self) -> Timings:
        """
        Calculate all latency measurements.

        Sorts the samples in place first. An empty sequence yields a Timings
        with every field zero.
        """
        if not self:
            return Timings()
        self.sort()
        return Timings(
            avg=self._avg(),
            p50=self[len(self) // 2],
            p75=self._percentile(0.75),
            p95=self._percentile(0.95),
            p99=self._percentile(0.99),
            p999=self._percentile(0.999),
            long5p=self._long5p(),
            short5p=self._short5p(),
            max=self[-1],
            min=self[0],
            std_dev=self._std_dev(),
            range=self[-1] - self[0],
        )

    def _avg(self) -> int:
        return _truncating_div(sum(self), len(self))

    def _percentile(self, q: float) -> int:
        return self[int(len(self) * q + 0.5) - 1]

    def _std_dev(self) -> int:
        mean = self._avg()
        squares = 0.0
        for t in self:
            squares += math.pow(float(mean - t), 2)
        return int(math.sqrt(squares / len(self)))

    def _long5p(self) -> int:
        tail = self[int(len(self) * 0.95 + 0.5):]
        if len(tail) <= 1:
            return self[-1]
        return _truncating_div(sum(tail), len(tail))

    def _short5p(self) -> int:
        head = self[:int(len(self) * 0.05 + 0.5)]
        if len(head) <= 1:
            return self[0]
        return _truncating_div(sum(head), len(head))


def _truncating_div(total: int, count: int) -> int:
    """Integer division rounding toward zero, as for negative durations."""
    q = abs(total) // count
    return q if total >= 0 else -q
