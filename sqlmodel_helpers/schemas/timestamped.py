"""Lifecycle timestamps for persisted records.

Any record exposing mutable ``created_at`` / ``updated_at`` attributes
satisfies TimestampedModel. update_timestamps() drives a two-state
lifecycle:

    UNINITIALIZED --update--> INITIALIZED --update--> INITIALIZED

The first update stamps both fields with the same instant; every later
update only moves ``updated_at``. ``created_at`` is write-once.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Optional, Protocol, runtime_checkable

from sqlmodel import Field, SQLModel


@runtime_checkable
class TimestampedModel(Protocol):
    """Structural type for records carrying lifecycle timestamps."""

    created_at: Optional[datetime]
    updated_at: Optional[datetime]


class TimestampMixin(SQLModel):
    """Adds nullable created/updated timestamp columns (app-managed).

    Combine with ``table=True`` on concrete models::

        class Note(TimestampMixin, table=True):
            id: int | None = Field(default=None, primary_key=True)
            body: str
    """

    created_at: Optional[datetime] = Field(default=None)
    updated_at: Optional[datetime] = Field(default=None)


class TimestampState(str, Enum):
    """Lifecycle state of a record's timestamps."""
    UNINITIALIZED = "UNINITIALIZED"
    INITIALIZED = "INITIALIZED"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def timestamp_state(record: TimestampedModel) -> TimestampState:
    """Return the lifecycle state; only ``created_at`` emptiness matters."""
    if record.created_at is None:
        return TimestampState.UNINITIALIZED
    return TimestampState.INITIALIZED


def update_timestamps(record: TimestampedModel, now: datetime | None = None) -> None:
    """Stamp the record's lifecycle timestamps in place.

    - If ``created_at`` is empty, it is set to the current time.
    - ``updated_at`` is always set to the current time.

    Chronology is not validated: a ``created_at`` already in the future
    is left untouched.

    Args:
        record: Any object satisfying TimestampedModel.
        now: Instant to stamp with. Defaults to the UTC wall clock.
    """
    now = now or _utcnow()
    if timestamp_state(record) is TimestampState.UNINITIALIZED:
        record.created_at = now
    record.updated_at = now
