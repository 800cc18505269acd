"""
Configuration validation utilities.

This module turns the raw `[client]`, `[stream]` and `[logging]` tables
into validated configuration objects.
"""

import logging
from typing import Any, Dict

from ..models.config import ClientConfig, LoggingConfig, StreamConfig
from ..models.metric_type import MetricType
from ..validation import (
    ValidationError,
    validate_bool,
    validate_endpoint,
    validate_enum_choice,
    validate_positive_float,
    validate_positive_integer,
    validate_string_list,
)

logger = logging.getLogger(__name__)

LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


def _require_table(data: Any, section: str) -> Dict[str, Any]:
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValidationError(f"[{section}] must be a table", field_name=section, value=data)
    return data


def validate_metric_types(value: Any, field_name: str = "stream.types") -> MetricType:
    """
    Validate a metric type selection.

    Accepts a list of category names, a comma-separated string, or an
    integer bitmask.

    Raises:
        ValidationError: If a name is unknown or the mask has stray bits
    """
    if value is None:
        return MetricType.NONE
    if isinstance(value, bool):
        raise ValidationError(f"{field_name} must be a list of names, got {value!r}",
                              field_name=field_name, value=value)
    if isinstance(value, int):
        if value < 0 or value & ~int(MetricType.ALL):
            raise ValidationError(f"{field_name} has unknown category bits: {value}",
                                  field_name=field_name, value=value)
        return MetricType(value)
    names = validate_string_list(value, field_name=field_name)
    try:
        return MetricType.parse(",".join(names))
    except ValidationError as e:
        raise ValidationError(f"{field_name}: {e}", field_name=field_name, value=value) from e


def validate_client_config(client_data: Dict[str, Any]) -> ClientConfig:
    """
    Validate and create a ClientConfig from raw configuration data.

    Args:
        client_data: Raw `[client]` table

    Returns:
        Validated ClientConfig instance

    Raises:
        ValidationError: If validation fails
    """
    client_data = _require_table(client_data, "client")

    endpoint = validate_endpoint(
        client_data.get("endpoint", "localhost:9000"),
        field_name="client.endpoint",
    )
    secure = validate_bool(client_data.get("secure", False), field_name="client.secure")

    bearer_token = client_data.get("bearer_token", "")
    if not isinstance(bearer_token, str):
        raise ValidationError("client.bearer_token must be a string",
                              field_name="client.bearer_token")

    request_timeout = client_data.get("request_timeout")
    if request_timeout is not None:
        request_timeout = validate_positive_float(
            request_timeout,
            min_value=0.1,
            max_value=3600.0,
            field_name="client.request_timeout",
        )

    return ClientConfig(
        endpoint=endpoint,
        secure=secure,
        bearer_token=bearer_token,
        request_timeout=request_timeout,
    )


def validate_stream_config(stream_data: Dict[str, Any]) -> StreamConfig:
    """
    Validate and create a StreamConfig from raw configuration data.

    Args:
        stream_data: Raw `[stream]` table

    Returns:
        Validated StreamConfig instance

    Raises:
        ValidationError: If validation fails
    """
    stream_data = _require_table(stream_data, "stream")

    types = validate_metric_types(stream_data.get("types"), field_name="stream.types")

    n = validate_positive_integer(
        stream_data.get("n", 0),
        min_value=0,
        field_name="stream.n",
    )

    interval_seconds = validate_positive_float(
        stream_data.get("interval_seconds", 0.0),
        min_value=0.0,
        max_value=86400.0,  # 1 day
        field_name="stream.interval_seconds",
    )

    by_job_id = stream_data.get("by_job_id", "")
    by_dep_id = stream_data.get("by_dep_id", "")
    for name, value in (("stream.by_job_id", by_job_id), ("stream.by_dep_id", by_dep_id)):
        if not isinstance(value, str):
            raise ValidationError(f"{name} must be a string", field_name=name, value=value)

    return StreamConfig(
        types=types,
        n=n,
        interval_seconds=interval_seconds,
        hosts=validate_string_list(stream_data.get("hosts"), field_name="stream.hosts"),
        disks=validate_string_list(stream_data.get("disks"), field_name="stream.disks"),
        by_host=validate_bool(stream_data.get("by_host", False), field_name="stream.by_host"),
        by_disk=validate_bool(stream_data.get("by_disk", False), field_name="stream.by_disk"),
        by_job_id=by_job_id,
        by_dep_id=by_dep_id,
    )


def validate_logging_config(logging_data: Dict[str, Any]) -> LoggingConfig:
    """Validate the `[logging]` table."""
    logging_data = _require_table(logging_data, "logging")
    level = validate_enum_choice(
        logging_data.get("level", "INFO"),
        valid_choices=LOG_LEVELS,
        field_name="logging.level",
    )
    return LoggingConfig(level=level)
