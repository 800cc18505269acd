"""
Pydantic base for every type carried on the metrics stream.

Fields declare their JSON key with ``Field(alias=...)`` and are populated
by either the alias or the Python name. Decoding ignores unknown keys and
treats null like a missing key, so older and newer servers interoperate.
Fields marked with OMIT_EMPTY are left out of the wire form when they hold
their zero value.
"""

import re
from datetime import datetime, timezone
from typing import Annotated, Any, Dict, Optional

from pydantic import (
    AfterValidator,
    BaseModel,
    BeforeValidator,
    ConfigDict,
    PlainSerializer,
    SerializationInfo,
    SerializerFunctionWrapHandler,
    model_serializer,
    model_validator,
)

# Zero value of a timestamp on the wire ("0001-01-01T00:00:00Z").
ZERO_TIME = datetime(1, 1, 1, tzinfo=timezone.utc)

OMIT_EMPTY = {"omitempty": True}

_EXTRA_FRACTION_RE = re.compile(r"(\.\d{6})\d+")


def as_utc(value: datetime) -> datetime:
    """Return ``value`` as an aware UTC datetime; naive values are taken as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def format_time(value: datetime) -> str:
    """Format a datetime as RFC 3339 with a trailing Z."""
    text = as_utc(value).replace(tzinfo=None).isoformat()
    if "." in text:
        text = text.rstrip("0")
    return text + "Z"


def _zero_or_trimmed(value: Any) -> Any:
    if value is None or value == "":
        return ZERO_TIME
    if isinstance(value, str):
        # Servers send nanoseconds; datetime holds microseconds.
        return _EXTRA_FRACTION_RE.sub(r"\1", value, count=1)
    return value


Timestamp = Annotated[
    datetime,
    BeforeValidator(_zero_or_trimmed),
    AfterValidator(as_utc),
    PlainSerializer(format_time, when_used="json"),
]


def _is_empty(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, (str, list, dict, tuple)):
        return len(value) == 0
    if isinstance(value, bool):
        return not value
    if isinstance(value, (int, float)):
        return value == 0
    if isinstance(value, datetime):
        return as_utc(value) == ZERO_TIME
    return False


class WireModel(BaseModel):
    """Base model for stream types; ``to_dict``/``to_json`` render wire keys."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    @model_validator(mode="before")
    @classmethod
    def _drop_nulls(cls, data: Any) -> Any:
        if isinstance(data, dict):
            return {key: value for key, value in data.items() if value is not None}
        return data

    @model_serializer(mode="wrap")
    def _omit_empty(self, handler: SerializerFunctionWrapHandler,
                    info: SerializationInfo) -> Dict[str, Any]:
        data = handler(self)
        for name, field in type(self).model_fields.items():
            extra = field.json_schema_extra
            if not (isinstance(extra, dict) and extra.get("omitempty")):
                continue
            if _is_empty(getattr(self, name)):
                key = field.alias if info.by_alias and field.alias else name
                data.pop(key, None)
        return data

    def to_dict(self) -> Dict[str, Any]:
        """JSON-ready dict using wire keys."""
        return self.model_dump(mode="json", by_alias=True)

    def to_json(self, indent: Optional[int] = None) -> str:
        return self.model_dump_json(by_alias=True, indent=indent)
