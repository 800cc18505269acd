"""
Batch job progress metrics.

A job is owned by exactly one collecting node at a time, so jobs are merged
by replacing the entry for a job id rather than by summing.
"""

from typing import Dict, Optional

from pydantic import Field, StrictBool, StrictInt, StrictStr

from .base import OMIT_EMPTY, ZERO_TIME, Timestamp, WireModel
from .common import is_after


class ReplicateInfo(WireModel):
    bucket: StrictStr = Field("", alias="lastBucket")
    object: StrictStr = Field("", alias="lastObject")
    objects: StrictInt = 0
    objects_failed: StrictInt = Field(0, alias="objectsFailed")
    bytes_transferred: StrictInt = Field(0, alias="bytesTransferred")
    bytes_failed: StrictInt = Field(0, alias="bytesFailed")


class KeyRotationInfo(WireModel):
    bucket: StrictStr = Field("", alias="lastBucket")
    object: StrictStr = Field("", alias="lastObject")
    objects: StrictInt = 0
    objects_failed: StrictInt = Field(0, alias="objectsFailed")


class ExpirationInfo(WireModel):
    bucket: StrictStr = Field("", alias="lastBucket")
    object: StrictStr = Field("", alias="lastObject")
    objects: StrictInt = 0
    objects_failed: StrictInt = Field(0, alias="objectsFailed")


class CatalogInfo(WireModel):
    last_bucket_scanned: StrictStr = Field("", alias="lastBucketScanned")
    last_object_scanned: StrictStr = Field("", alias="lastObjectScanned")
    last_bucket_matched: StrictStr = Field("", alias="lastBucketMatched")
    last_object_matched: StrictStr = Field("", alias="lastObjectMatched")
    objects_scanned_count: StrictInt = Field(0, alias="objectsScannedCount")
    objects_matched_count: StrictInt = Field(0, alias="objectsMatchedCount")
    # Object metadata records written to the output objects.
    records_written_count: StrictInt = Field(0, alias="recordsWrittenCount")
    output_objects_count: StrictInt = Field(0, alias="outputObjectsCount")
    manifest_path_bucket: StrictStr = Field("", alias="manifestPathBucket")
    manifest_path_object: StrictStr = Field("", alias="manifestPathObject")
    error_msg: StrictStr = Field("", alias="errorMsg")


class JobMetric(WireModel):
    """Progress of one batch job; at most one of the typed sections is set."""

    job_id: StrictStr = Field("", alias="jobID")
    job_type: StrictStr = Field("", alias="jobType")
    start_time: Timestamp = Field(ZERO_TIME, alias="startTime")
    last_update: Timestamp = Field(ZERO_TIME, alias="lastUpdate")
    retry_attempts: StrictInt = Field(0, alias="retryAttempts")
    complete: StrictBool = False
    failed: StrictBool = False

    replicate: Optional[ReplicateInfo] = Field(None, json_schema_extra=OMIT_EMPTY)
    key_rotate: Optional[KeyRotationInfo] = Field(None, alias="rotation", json_schema_extra=OMIT_EMPTY)
    expired: Optional[ExpirationInfo] = Field(None, json_schema_extra=OMIT_EMPTY)
    catalog: Optional[CatalogInfo] = Field(None, json_schema_extra=OMIT_EMPTY)


class BatchJobMetrics(WireModel):
    """Metrics for batch operations, keyed by job id."""

    collected_at: Timestamp = Field(ZERO_TIME, alias="collected")
    jobs: Dict[str, JobMetric] = Field(default_factory=dict, alias="Jobs")

    def merge(self, other: Optional["BatchJobMetrics"]) -> None:
        if other is None or not other.jobs:
            return
        if is_after(other.collected_at, self.collected_at):
            self.collected_at = other.collected_at
        self.jobs.update(other.jobs)
