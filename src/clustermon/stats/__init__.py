"""Latency statistics."""

from .timings import TimeDurations, Timings

__all__ = ["TimeDurations", "Timings"]
