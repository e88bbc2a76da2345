"""Tests for lifecycle timestamps: write-once created_at, always-updated updated_at."""

import time
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

from sqlmodel_helpers.schemas.timestamped import (
    TimestampedModel,
    TimestampState,
    timestamp_state,
    update_timestamps,
)
from tests.fixtures.sample_models import SampleModel, TimestampedNote


NOW = datetime(2026, 2, 20, 12, 0, 0, tzinfo=timezone.utc)


@dataclass
class PlainRecord:
    """Satisfies TimestampedModel without any ORM involvement."""

    name: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


# ===========================================================================
# State machine
# ===========================================================================


class TestTimestampState:
    def test_new_record_is_uninitialized(self):
        assert timestamp_state(PlainRecord(name="a")) is TimestampState.UNINITIALIZED

    def test_record_with_created_at_is_initialized(self):
        record = PlainRecord(name="a", created_at=NOW)
        assert timestamp_state(record) is TimestampState.INITIALIZED

    def test_updated_at_alone_does_not_initialize(self):
        record = PlainRecord(name="a", updated_at=NOW)
        assert timestamp_state(record) is TimestampState.UNINITIALIZED

    def test_first_update_transitions_to_initialized(self):
        record = PlainRecord(name="a")
        update_timestamps(record)
        assert timestamp_state(record) is TimestampState.INITIALIZED


# ===========================================================================
# update_timestamps
# ===========================================================================


class TestUpdateTimestamps:
    def test_sets_both_when_created_at_is_none(self):
        record = TimestampedNote(body="Test Model")
        update_timestamps(record)
        assert record.created_at is not None
        assert record.updated_at is not None
        assert record.created_at == record.updated_at

    def test_only_updated_at_changes_when_created_at_is_set(self):
        initial = datetime.now(timezone.utc) - timedelta(hours=1)
        record = TimestampedNote(body="Test Model", created_at=initial, updated_at=initial)

        update_timestamps(record)

        assert record.created_at == initial
        assert record.updated_at != initial
        assert record.updated_at > initial

    def test_multiple_updates_keep_created_at_constant(self):
        record = TimestampedNote(body="Test Model")

        update_timestamps(record)
        first_update = record.updated_at
        time.sleep(0.01)
        update_timestamps(record)
        second_update = record.updated_at

        assert record.created_at is not None
        assert record.created_at == first_update
        assert second_update > first_update

    def test_updated_at_is_non_decreasing(self):
        record = PlainRecord(name="a")
        stamps = []
        for _ in range(5):
            update_timestamps(record)
            stamps.append(record.updated_at)
        assert stamps == sorted(stamps)
        assert all(record.created_at <= s for s in stamps)

    def test_explicit_now(self):
        record = PlainRecord(name="a")
        update_timestamps(record, now=NOW)
        assert record.created_at == NOW
        assert record.updated_at == NOW

        later = NOW + timedelta(minutes=5)
        update_timestamps(record, now=later)
        assert record.created_at == NOW
        assert record.updated_at == later

    def test_future_created_at_is_left_alone(self):
        future = datetime.now(timezone.utc) + timedelta(days=1)
        record = PlainRecord(name="a", created_at=future)
        update_timestamps(record)
        assert record.created_at == future
        assert record.updated_at < future

    def test_uses_utc_wall_clock(self):
        record = PlainRecord(name="a")
        update_timestamps(record)
        assert record.created_at.tzinfo == timezone.utc


# ===========================================================================
# Protocol conformance
# ===========================================================================


class TestTimestampedModelProtocol:
    def test_mixin_model_conforms(self):
        assert isinstance(TimestampedNote(body="x"), TimestampedModel)

    def test_plain_object_conforms(self):
        assert isinstance(PlainRecord(name="x"), TimestampedModel)

    def test_model_without_timestamps_does_not_conform(self):
        assert not isinstance(SampleModel(name="x"), TimestampedModel)

    def test_mixin_declares_columns(self):
        columns = TimestampedNote.__table__.columns
        assert "created_at" in columns
        assert "updated_at" in columns
        assert columns["created_at"].nullable
