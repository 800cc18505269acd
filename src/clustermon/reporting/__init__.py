"""
Operator-facing tables for realtime metrics.
"""

from .tables import (
    AGGREGATE_ROW,
    disks_frame,
    hosts_frame,
    timed_actions_frame,
    timings_frame,
)

__all__ = [
    "AGGREGATE_ROW",
    "disks_frame",
    "hosts_frame",
    "timed_actions_frame",
    "timings_frame",
]
