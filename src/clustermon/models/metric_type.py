"""
Metric category bitmask.

Each metric category occupies one bit of MetricType. A mask is used as a
selection filter when requesting metrics and is never mutated once built.
"""

from enum import IntFlag
from typing import List

from ..validation import ValidationError


class MetricType(IntFlag):
    """Bitfield of metric categories; combine with ``|``."""

    NONE = 0
    SCANNER = 1 << 0
    DISK = 1 << 1
    OS = 1 << 2
    BATCH_JOBS = 1 << 3
    SITE_RESYNC = 1 << 4
    NET = 1 << 5
    MEM = 1 << 6
    CPU = 1 << 7
    RPC = 1 << 8
    RUNTIME = 1 << 9

    # Must stay the union of every category above.
    ALL = (1 << 10) - 1

    def contains(self, other: "MetricType") -> bool:
        """Return whether every bit of ``other`` is set in this mask."""
        return self & other == other

    def names(self) -> List[str]:
        """Lower-case names of the single categories set in this mask."""
        return [
            member.name.lower()
            for member in _CATEGORIES
            if self.contains(member)
        ]

    @classmethod
    def parse(cls, text: str) -> "MetricType":
        """
        Parse a comma-separated list of category names.

        Names are case-insensitive, "all" selects every category and an
        empty string yields NONE. Aliases "batchjobs", "siteresync" and "go"
        are accepted.

        Raises:
            ValidationError: If a name is not a known category
        """
        mask = cls.NONE
        for raw in text.split(","):
            name = raw.strip().lower()
            if not name:
                continue
            member = _ALIASES.get(name)
            if member is None:
                raise ValidationError(
                    f"Unknown metric type '{raw.strip()}'",
                    field_name="types",
                    value=text,
                )
            mask |= member
        return mask


_CATEGORIES = [
    MetricType.SCANNER,
    MetricType.DISK,
    MetricType.OS,
    MetricType.BATCH_JOBS,
    MetricType.SITE_RESYNC,
    MetricType.NET,
    MetricType.MEM,
    MetricType.CPU,
    MetricType.RPC,
    MetricType.RUNTIME,
]

_ALIASES = {member.name.lower(): member for member in _CATEGORIES}
_ALIASES.update({
    "all": MetricType.ALL,
    "batchjobs": MetricType.BATCH_JOBS,
    "siteresync": MetricType.SITE_RESYNC,
    "go": MetricType.RUNTIME,
})
