"""sqlmodel-helpers exception hierarchy.

All custom exceptions inherit from HelpersError, allowing callers
to catch broad or specific error categories as needed.
"""


class HelpersError(Exception):
    """Base exception for all sqlmodel-helpers errors."""


class ContainerInitError(HelpersError):
    """Raised when a ModelContainer cannot be constructed.

    Examples: schema entry that is not an SQLModel table, unwritable
    data directory, corrupt or incompatible on-disk store.
    """

    def __init__(self, message: str = "", url: str | None = None) -> None:
        self.url = url
        super().__init__(message)


class CommitError(HelpersError):
    """Raised when a ModelContext fails to commit its pending changes.

    Validation, constraint and I/O failures are all reported as this
    one kind; the backend exception is chained as ``__cause__``.
    """

    def __init__(self, message: str = "", pending_count: int = 0) -> None:
        self.pending_count = pending_count
        super().__init__(message)


class ContextOwnershipError(HelpersError):
    """Raised when a container's main context is used off its owning thread."""

    def __init__(
        self,
        message: str = "",
        owner_thread: int | None = None,
        caller_thread: int | None = None,
    ) -> None:
        self.owner_thread = owner_thread
        self.caller_thread = caller_thread
        super().__init__(message)


class ContainerClosedError(HelpersError):
    """Raised when a context is requested from a closed ModelContainer."""
