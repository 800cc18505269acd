"""Cross-site resync progress."""

import copy
from typing import List, Optional

from pydantic import Field, StrictInt, StrictStr

from .base import OMIT_EMPTY, ZERO_TIME, Timestamp, WireModel
from .common import is_after


class SiteResyncMetrics(WireModel):
    """
    Latest status of a site resync operation.

    The record describes one logical operation, so merging keeps the most
    recently collected record whole instead of adding counters.
    """

    collected_at: Timestamp = Field(ZERO_TIME, alias="collected")
    resync_status: StrictStr = Field("", alias="resyncStatus", json_schema_extra=OMIT_EMPTY)
    start_time: Timestamp = Field(ZERO_TIME, alias="startTime")
    last_update: Timestamp = Field(ZERO_TIME, alias="lastUpdate")
    num_buckets: StrictInt = Field(0, alias="numBuckets")
    resync_id: StrictStr = Field("", alias="resyncID")
    depl_id: StrictStr = Field("", alias="deplID")

    replicated_size: StrictInt = Field(0, alias="completedReplicationSize")
    replicated_count: StrictInt = Field(0, alias="replicationCount")
    failed_size: StrictInt = Field(0, alias="failedReplicationSize")
    failed_count: StrictInt = Field(0, alias="failedReplicationCount")
    failed_buckets: List[StrictStr] = Field(default_factory=list, alias="failedBuckets")
    # Last bucket/object replicated.
    bucket: StrictStr = Field("", json_schema_extra=OMIT_EMPTY)
    object: StrictStr = Field("", json_schema_extra=OMIT_EMPTY)

    def complete(self) -> bool:
        """Whether the resync reported completion."""
        return self.resync_status.lower() == "completed"

    def merge(self, other: Optional["SiteResyncMetrics"]) -> None:
        if other is None:
            return
        if is_after(other.collected_at, self.collected_at):
            for name in type(self).model_fields:
                setattr(self, name, copy.deepcopy(getattr(other, name)))
