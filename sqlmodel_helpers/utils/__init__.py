"""sqlmodel-helpers utilities: component-scoped logging."""

from sqlmodel_helpers.utils.logging import get_logger

__all__ = [
    "get_logger",
]
