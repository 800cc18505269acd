"""
Configuration data models.

This module contains the configuration structures loaded from `config.toml`:
how to reach the metrics endpoint, what to stream, and how to log.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional

from .metric_type import MetricType
from .options import MetricsOptions


@dataclass
class ClientConfig:
    """
    Connection settings for the metrics endpoint, from `[client]`.
    """

    # host[:port] of the server, without scheme.
    endpoint: str = "localhost:9000"
    secure: bool = False
    # Sent as "Authorization: Bearer <token>" when set.
    bearer_token: str = ""
    # Connect timeout in seconds, None to wait indefinitely.
    request_timeout: Optional[float] = None

    def headers(self) -> Dict[str, str]:
        if self.bearer_token:
            return {"Authorization": f"Bearer {self.bearer_token}"}
        return {}


@dataclass
class StreamConfig:
    """
    Stream selection and sampling, from `[stream]`.
    """

    types: MetricType = MetricType.NONE
    n: int = 0
    interval_seconds: float = 0.0
    hosts: List[str] = field(default_factory=list)
    disks: List[str] = field(default_factory=list)
    by_host: bool = False
    by_disk: bool = False
    by_job_id: str = ""
    by_dep_id: str = ""

    def to_options(self) -> MetricsOptions:
        """Build the MetricsOptions sent with each request."""
        return MetricsOptions(
            types=self.types,
            n=self.n,
            interval=self.interval_seconds,
            hosts=list(self.hosts),
            by_host=self.by_host,
            disks=list(self.disks),
            by_disk=self.by_disk,
            by_job_id=self.by_job_id,
            by_dep_id=self.by_dep_id,
        )


@dataclass
class LoggingConfig:
    """Logging settings, from `[logging]`."""

    level: str = "INFO"


@dataclass
class AppConfig:
    """
    The root configuration object for the entire application.
    """

    client: ClientConfig = field(default_factory=ClientConfig)
    stream: StreamConfig = field(default_factory=StreamConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
