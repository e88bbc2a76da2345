"""Storage layer: containers, contexts, and safe saves.

A ModelContainer owns the engine and schema; a ModelContext is the
unit of work whose commit failures can be logged instead of raised.
"""

from sqlmodel_helpers.storage.container import (
    ModelConfiguration,
    ModelContainer,
    default_container,
    preloaded_container,
)
from sqlmodel_helpers.storage.context import NO_SQLITE_DATABASE, ModelContext, sqlite_command

__all__ = [
    "ModelConfiguration",
    "ModelContainer",
    "ModelContext",
    "NO_SQLITE_DATABASE",
    "default_container",
    "preloaded_container",
    "sqlite_command",
]
