"""Record capabilities: lifecycle timestamps and JSON serialization."""

from sqlmodel_helpers.schemas.serialization import from_json, to_json
from sqlmodel_helpers.schemas.timestamped import (
    TimestampedModel,
    TimestampMixin,
    TimestampState,
    timestamp_state,
    update_timestamps,
)

__all__ = [
    "TimestampedModel",
    "TimestampMixin",
    "TimestampState",
    "from_json",
    "timestamp_state",
    "to_json",
    "update_timestamps",
]
