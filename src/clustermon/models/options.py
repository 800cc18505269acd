"""
Options for a metrics streaming request.

MetricsOptions is a plain input record built once per call. It knows how to
render itself into the query string understood by the metrics endpoint.
"""

from dataclasses import dataclass, field
from typing import Dict, List

from .metric_type import MetricType

_NS_PER_US = 1_000
_NS_PER_MS = 1_000_000
_NS_PER_S = 1_000_000_000


def _format_fraction(value: int, unit: int) -> str:
    """Render value/unit with trailing zeros of the fraction removed."""
    whole, rest = divmod(value, unit)
    if rest == 0:
        return str(whole)
    width = len(str(unit)) - 1
    return f"{whole}.{str(rest).rjust(width, '0').rstrip('0')}"


def format_duration(ns: int) -> str:
    """
    Format a nanosecond duration the way the server parses durations.

    Examples:
        >>> format_duration(0)
        '0s'
        >>> format_duration(1_500_000_000)
        '1.5s'
        >>> format_duration(90 * 1_000_000_000)
        '1m30s'
        >>> format_duration(250_000_000)
        '250ms'
    """
    if ns == 0:
        return "0s"
    sign = "-" if ns < 0 else ""
    ns = abs(ns)
    if ns < _NS_PER_US:
        return f"{sign}{ns}ns"
    if ns < _NS_PER_MS:
        return f"{sign}{_format_fraction(ns, _NS_PER_US)}µs"
    if ns < _NS_PER_S:
        return f"{sign}{_format_fraction(ns, _NS_PER_MS)}ms"

    hours, rest = divmod(ns, 3600 * _NS_PER_S)
    minutes, rest = divmod(rest, 60 * _NS_PER_S)
    seconds = _format_fraction(rest, _NS_PER_S)
    if hours:
        return f"{sign}{hours}h{minutes}m{seconds}s"
    if minutes:
        return f"{sign}{minutes}m{seconds}s"
    return f"{sign}{seconds}s"


@dataclass
class MetricsOptions:
    """
    Parameters of one metrics request.

    Attributes:
        types: Categories to return; NONE lets the server return all of them
        n: Maximum number of samples, 0 for an endless stream
        interval: Seconds between samples, rounded up to 1s by the server
        hosts: Restrict to these hosts, empty for all
        by_host: Also return a per-host breakdown
        disks: Restrict to these disks, empty for all
        by_disk: Also return a per-disk breakdown
        by_job_id: Restrict batch job metrics to one job
        by_dep_id: Restrict site resync metrics to one deployment
    """

    types: MetricType = MetricType.NONE
    n: int = 0
    interval: float = 0.0
    hosts: List[str] = field(default_factory=list)
    by_host: bool = False
    disks: List[str] = field(default_factory=list)
    by_disk: bool = False
    by_job_id: str = ""
    by_dep_id: str = ""

    def to_query_params(self) -> Dict[str, str]:
        """Render the options as query values for the metrics endpoint."""
        params = {
            "types": str(int(self.types)),
            "n": str(self.n),
            "interval": format_duration(round(self.interval * _NS_PER_S)),
            "hosts": ",".join(self.hosts),
        }
        if self.by_host:
            params["by-host"] = "true"
        params["disks"] = ",".join(self.disks)
        if self.by_disk:
            params["by-disk"] = "true"
        if self.by_job_id:
            params["by-jobID"] = self.by_job_id
        if self.by_dep_id:
            params["by-depID"] = self.by_dep_id
        return params
