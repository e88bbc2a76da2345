"""Shared test fixtures for sqlmodel-helpers tests.

Provides isolated settings rooted in a temporary directory and
ready-made containers that are closed after each test.
"""

from collections.abc import Iterator
from pathlib import Path

import pytest

from sqlmodel_helpers.config.settings import HelperSettings
from sqlmodel_helpers.storage.container import ModelContainer, default_container
from tests.fixtures.sample_models import SampleModel, TimestampedNote, UniqueItem


SAMPLE_SCHEMA = [SampleModel, UniqueItem, TimestampedNote]


@pytest.fixture
def settings(tmp_path: Path) -> HelperSettings:
    """Settings whose durable store lives under a temporary directory."""
    return HelperSettings(data_dir=tmp_path / "data")


@pytest.fixture
def memory_container(settings: HelperSettings) -> Iterator[ModelContainer]:
    """An in-memory container for the sample schema."""
    container = default_container(SAMPLE_SCHEMA, in_memory=True, settings=settings)
    yield container
    container.close()


@pytest.fixture
def disk_container(settings: HelperSettings) -> Iterator[ModelContainer]:
    """A durable container at the settings' default store path."""
    container = default_container(SAMPLE_SCHEMA, in_memory=False, settings=settings)
    yield container
    container.close()
