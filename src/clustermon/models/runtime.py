"""Language runtime counters reported by each server process."""

from typing import Dict, List, Optional

from pydantic import Field, StrictInt

from .base import OMIT_EMPTY, WireModel


class Float64Histogram(WireModel):
    """
    Bucketed distribution; ``buckets`` holds len(counts)+1 boundaries.

    Older servers send the lower-case keys, which match the field names.
    """

    counts: List[StrictInt] = Field(default_factory=list, alias="Counts", json_schema_extra=OMIT_EMPTY)
    buckets: List[float] = Field(default_factory=list, alias="Buckets", json_schema_extra=OMIT_EMPTY)


class RuntimeMetrics(WireModel):
    """Runtime metrics keyed by metric name, summed across processes."""

    uint_metrics: Dict[str, StrictInt] = Field(default_factory=dict, alias="uintMetrics",
                                               json_schema_extra=OMIT_EMPTY)
    float_metrics: Dict[str, float] = Field(default_factory=dict, alias="floatMetrics",
                                            json_schema_extra=OMIT_EMPTY)
    hist_metrics: Dict[str, Float64Histogram] = Field(default_factory=dict, alias="histMetrics",
                                                      json_schema_extra=OMIT_EMPTY)
    # Number of merged entries.
    n: StrictInt = 0

    def merge(self, other: Optional["RuntimeMetrics"]) -> None:
        if other is None:
            return
        for key, value in other.uint_metrics.items():
            self.uint_metrics[key] = self.uint_metrics.get(key, 0) + value
        for key, value in other.float_metrics.items():
            self.float_metrics[key] = self.float_metrics.get(key, 0.0) + value
        for key, hist in other.hist_metrics.items():
            existing = self.hist_metrics.get(key)
            if existing is None or not existing.buckets:
                self.hist_metrics[key] = hist.model_copy(deep=True)
                continue
            # Runtime histograms share one bucket layout; others are skipped.
            if len(existing.buckets) == len(hist.buckets):
                for i, count in enumerate(hist.counts[:len(existing.counts)]):
                    existing.counts[i] += count
        self.n += other.n
