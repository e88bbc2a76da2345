"""ModelContainer: engine, schema and storage mode for a set of records.

A container owns one SQLAlchemy engine configured either as an
ephemeral in-memory SQLite database or as a durable SQLite file, and
creates the tables of its schema on construction.

The main context is the single-writer context: it is confined to the
thread that built the container. Background work uses new_context().
"""

from __future__ import annotations

import os
import threading
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any

import structlog
from sqlalchemy import inspect
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel, create_engine

from sqlmodel_helpers.config.settings import HelperSettings, get_settings
from sqlmodel_helpers.exceptions import (
    ContainerClosedError,
    ContainerInitError,
    ContextOwnershipError,
)
from sqlmodel_helpers.storage.context import ModelContext

logger = structlog.get_logger()


@dataclass(frozen=True)
class ModelConfiguration:
    """Storage mode for a container.

    ``url`` is the on-disk file of a durable store. It is ignored when
    ``is_stored_in_memory_only`` is set, and defaults to the settings'
    store path otherwise.
    """

    is_stored_in_memory_only: bool = False
    url: Path | None = None

    def resolve(self, settings: HelperSettings) -> ModelConfiguration:
        """Return a copy with ``url`` made absolute (or cleared for memory)."""
        if self.is_stored_in_memory_only:
            return replace(self, url=None)
        path = Path(self.url) if self.url is not None else settings.default_store_path
        return replace(self, url=Path(os.path.abspath(path)))

    @property
    def database_url(self) -> str:
        if self.is_stored_in_memory_only or self.url is None:
            return "sqlite://"
        return f"sqlite:///{self.url}"


def _check_schema(schema: Sequence[Any]) -> None:
    """Every schema entry must be an SQLModel table class."""
    for model in schema:
        if not (
            isinstance(model, type)
            and issubclass(model, SQLModel)
            and hasattr(model, "__table__")
        ):
            raise ContainerInitError(
                f"Schema entry {model!r} is not an SQLModel table class"
            )


def _missing_columns(engine: Engine, schema: Sequence[type[SQLModel]]) -> list[str]:
    """Model columns absent from tables that already existed on disk.

    create_all() skips existing tables, so a store written by an older
    schema keeps its old columns.
    """
    inspector = inspect(engine)
    missing = []
    for model in schema:
        table = model.__table__
        stored = {column["name"] for column in inspector.get_columns(table.name)}
        missing.extend(
            f"{table.name}.{column.name}"
            for column in table.columns
            if column.name not in stored
        )
    return missing


def _build_engine(configuration: ModelConfiguration, echo: bool) -> Engine:
    if configuration.is_stored_in_memory_only:
        # One shared connection so every context sees the same database
        return create_engine(
            configuration.database_url,
            echo=echo,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
    return create_engine(configuration.database_url, echo=echo)


class ModelContainer:
    """Top-level handle to a configured SQLite store and its schema.

    Raises ContainerInitError if the store cannot be opened or the
    schema tables cannot be created.
    """

    def __init__(
        self,
        schema: Sequence[type[SQLModel]],
        configuration: ModelConfiguration | None = None,
        *,
        settings: HelperSettings | None = None,
    ) -> None:
        settings = settings or get_settings()
        self._schema = tuple(schema)
        self._configuration = (configuration or ModelConfiguration()).resolve(settings)
        self._lock = threading.RLock()
        self._owner_thread = threading.get_ident()
        self._main_context: ModelContext | None = None
        self._contexts: list[ModelContext] = []
        self._closed = False

        _check_schema(self._schema)

        url = self._configuration.database_url
        if self._configuration.url is not None:
            try:
                self._configuration.url.parent.mkdir(parents=True, exist_ok=True)
            except OSError as exc:
                raise ContainerInitError(
                    f"Cannot create store directory: {exc}", url=url
                ) from exc

        try:
            self._engine = _build_engine(self._configuration, echo=settings.echo_sql)
            SQLModel.metadata.create_all(
                self._engine,
                tables=[model.__table__ for model in self._schema],
            )
            missing = _missing_columns(self._engine, self._schema)
        except SQLAlchemyError as exc:
            if hasattr(self, "_engine"):
                self._engine.dispose()
            raise ContainerInitError(str(exc), url=url) from exc

        if missing:
            self._engine.dispose()
            raise ContainerInitError(
                f"Incompatible on-disk schema, missing columns: {', '.join(missing)}",
                url=url,
            )

        logger.debug(
            "Model container created",
            url=url,
            in_memory=self._configuration.is_stored_in_memory_only,
            models=[model.__name__ for model in self._schema],
        )

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------

    @property
    def schema(self) -> tuple[type[SQLModel], ...]:
        return self._schema

    @property
    def configuration(self) -> ModelConfiguration:
        return self._configuration

    @property
    def engine(self) -> Engine:
        return self._engine

    @property
    def store_path(self) -> Path | None:
        """Absolute path of the durable SQLite file, None if in memory."""
        return self._configuration.url

    # ------------------------------------------------------------------
    # Contexts
    # ------------------------------------------------------------------

    @property
    def main_context(self) -> ModelContext:
        """The container's default context, owned by the creating thread."""
        caller = threading.get_ident()
        if caller != self._owner_thread:
            raise ContextOwnershipError(
                "main_context may only be used from the thread that created the container",
                owner_thread=self._owner_thread,
                caller_thread=caller,
            )
        with self._lock:
            self._ensure_open()
            if self._main_context is None:
                self._main_context = ModelContext(self)
                self._contexts.append(self._main_context)
            return self._main_context

    def new_context(self, correlation_id: str | None = None) -> ModelContext:
        """Create an independent context, e.g. for a background thread."""
        with self._lock:
            self._ensure_open()
            context = ModelContext(self, correlation_id=correlation_id)
            self._contexts.append(context)
        return context

    def _ensure_open(self) -> None:
        if self._closed:
            raise ContainerClosedError("Container is closed")

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def close(self) -> None:
        """Close every context and dispose the engine. Idempotent."""
        with self._lock:
            if self._closed:
                return
            for context in self._contexts:
                context.close()
            self._contexts.clear()
            self._main_context = None
            self._engine.dispose()
            self._closed = True

    def __enter__(self) -> ModelContainer:
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()


def default_container(
    schema: Sequence[type[SQLModel]],
    in_memory: bool = False,
    *,
    url: Path | None = None,
    settings: HelperSettings | None = None,
    fatal: bool | None = None,
) -> ModelContainer:
    """Create a container for schema with optional in-memory storage.

    Args:
        schema: SQLModel table classes to register.
        in_memory: Use an ephemeral database instead of a file.
        url: Durable store file; defaults to ``settings.default_store_path``.
        settings: Overrides environment settings.
        fatal: Exit the process on failure instead of raising.
               None defers to ``settings.fatal_on_init_error``.

    Raises:
        ContainerInitError: if the store cannot be initialized.
        SystemExit: instead of ContainerInitError under the fatal policy.
    """
    settings = settings or get_settings()
    configuration = ModelConfiguration(is_stored_in_memory_only=in_memory, url=url)
    try:
        return ModelContainer(schema, configuration, settings=settings)
    except ContainerInitError as exc:
        if fatal if fatal is not None else settings.fatal_on_init_error:
            logger.critical(
                "Failed to initialize model container",
                url=exc.url,
                error=str(exc),
            )
            raise SystemExit(f"Failed to initialize model container: {exc}.") from exc
        raise


def preloaded_container(
    schema: Sequence[type[SQLModel]],
    data: Iterable[SQLModel],
    in_memory: bool = True,
    **kwargs: Any,
) -> ModelContainer:
    """Create a container and seed it with data, e.g. for tests or previews.

    Records are inserted into the main context in the given order and
    saved safely. The container is returned even if the save failed;
    the failure has already been logged.
    """
    container = default_container(schema, in_memory=in_memory, **kwargs)
    context = container.main_context

    records = list(data)
    for record in records:
        context.insert(record)
    error = context.save_safely()

    logger.debug(
        "Model container preloaded",
        count=len(records),
        saved=error is None,
    )
    return container
