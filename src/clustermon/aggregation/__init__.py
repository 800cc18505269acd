"""
Aggregation of metrics streams from multiple producers.
"""

from .coordinator import ClusterMetricsAggregator

__all__ = ["ClusterMetricsAggregator"]
