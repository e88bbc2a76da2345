"""ModelContext: a transactional working set bound to one ModelContainer.

Wraps a SQLModel Session. Inserts, mutations and deletes accumulate
until commit(). save_safely() is the non-raising variant used by the
batch helpers: failures are logged and handed back, never raised.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import TYPE_CHECKING, Any, TypeVar

from sqlalchemy import event, func
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, SQLModel, select

from sqlmodel_helpers.exceptions import CommitError
from sqlmodel_helpers.utils.logging import get_logger

if TYPE_CHECKING:
    from sqlmodel_helpers.storage.container import ModelContainer

ModelT = TypeVar("ModelT", bound=SQLModel)

NO_SQLITE_DATABASE = "No SQLite database found."


class ModelContext:
    """Unit-of-work over a container's engine.

    Not thread-safe: a context belongs to the thread that uses it.
    Objects stay readable after commit (``expire_on_commit=False``).
    """

    def __init__(self, container: ModelContainer, correlation_id: str | None = None) -> None:
        self._container = container
        self._correlation_id = correlation_id
        self._session = Session(container.engine, expire_on_commit=False)

        # Autoflush moves pending objects out of session.new before commit
        self._flushed = False
        event.listen(self._session, "after_flush", self._on_flush)
        event.listen(self._session, "after_commit", self._on_transaction_end)
        event.listen(self._session, "after_rollback", self._on_transaction_end)

    @property
    def container(self) -> ModelContainer:
        return self._container

    @property
    def session(self) -> Session:
        return self._session

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def pending_count(self) -> int:
        """Number of unflushed inserts, updates and deletes."""
        s = self._session
        return len(s.new) + len(s.dirty) + len(s.deleted)

    @property
    def has_changes(self) -> bool:
        """True if a commit would write anything."""
        return self._flushed or self.pending_count > 0

    @property
    def sqlite_command(self) -> str:
        """Shell command opening this context's SQLite store.

        Returns ``sqlite3 "<path>"`` for a durable store, otherwise
        ``"No SQLite database found."``.
        """
        path = self._container.store_path
        if path is None:
            return NO_SQLITE_DATABASE
        return f'sqlite3 "{path}"'

    # ------------------------------------------------------------------
    # Write
    # ------------------------------------------------------------------

    def insert(self, record: SQLModel) -> None:
        """Track a record for insertion on the next commit."""
        self._session.add(record)

    def insert_all(self, records: Iterable[SQLModel]) -> None:
        """Insert records in order, then save safely.

        Commit failures are logged by save_safely() and not raised.
        """
        for record in records:
            self.insert(record)
        self.save_safely()

    def delete(self, record: SQLModel) -> None:
        """Mark a persisted record for deletion on the next commit."""
        self._session.delete(record)

    def delete_all(self, model_type: type[SQLModel]) -> int:
        """Mark every stored row of model_type for deletion.

        Returns the number of records marked.
        """
        records = self.fetch(model_type)
        for record in records:
            self._session.delete(record)
        return len(records)

    def commit(self) -> None:
        """Commit pending changes.

        No-op when there is nothing to write. Backend failures raise
        CommitError chained to the SQLAlchemy exception.
        """
        if not self.has_changes:
            return

        pending = self.pending_count
        try:
            self._session.commit()
        except SQLAlchemyError as exc:
            raise CommitError(str(exc), pending_count=pending) from exc

    def save_safely(self) -> CommitError | None:
        """Commit, logging and returning the failure instead of raising.

        No rollback is attempted; the session is left as the backend
        leaves it. Callers that need confirmation inspect the return
        value or re-fetch.
        """
        try:
            self.commit()
        except CommitError as exc:
            logger = get_logger("storage.context", self._correlation_id)
            logger.error(
                "Failed to save changes",
                error=str(exc.__cause__ or exc),
                pending_count=exc.pending_count,
            )
            return exc
        return None

    def rollback(self) -> None:
        """Discard pending changes and reset a failed transaction."""
        self._session.rollback()

    # ------------------------------------------------------------------
    # Read
    # ------------------------------------------------------------------

    def fetch(
        self,
        model_type: type[ModelT],
        *,
        order_by: Any = None,
        limit: int | None = None,
    ) -> list[ModelT]:
        """Fetch records of model_type, including pending inserts.

        Order is unspecified unless ``order_by`` is given.
        """
        statement = select(model_type)
        if order_by is not None:
            statement = statement.order_by(order_by)
        if limit is not None:
            statement = statement.limit(limit)
        return list(self._session.exec(statement).all())

    def fetch_count(self, model_type: type[SQLModel]) -> int:
        """Count stored records of model_type."""
        statement = select(func.count()).select_from(model_type)
        return int(self._session.exec(statement).one())

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def close(self) -> None:
        """Release the session; uncommitted changes are discarded."""
        self._session.close()

    def _on_flush(self, session: Session, flush_context: Any) -> None:
        self._flushed = True

    def _on_transaction_end(self, session: Session) -> None:
        self._flushed = False


def sqlite_command(context: ModelContext) -> str:
    """Return the SQLite shell command for a context's store."""
    return context.sqlite_command
