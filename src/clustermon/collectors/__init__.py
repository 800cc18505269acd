"""
Metrics collectors that produce envelopes without a server.
"""

from .local import LOCAL_TYPES, LocalMetricsCollector

__all__ = ["LOCAL_TYPES", "LocalMetricsCollector"]
