"""
Realtime metrics streaming: frame decoding and the HTTP client.
"""

from .client import METRICS_PATH, MetricsClient, parse_error_body
from .decoder import DecoderState, FrameScanner, MetricsSink, MetricsStreamDecoder

__all__ = [
    "METRICS_PATH",
    "MetricsClient",
    "parse_error_body",
    "DecoderState",
    "FrameScanner",
    "MetricsSink",
    "MetricsStreamDecoder",
]
