"""JSON (de)serialization for persisted records.

Both directions return None on failure instead of raising; callers
treat None as the only error signal.
"""

from __future__ import annotations

from typing import TypeVar

import pydantic_core
import structlog
from pydantic import BaseModel, ValidationError

logger = structlog.get_logger()

ModelT = TypeVar("ModelT", bound=BaseModel)


def to_json(record: BaseModel) -> bytes | None:
    """Encode a record as UTF-8 JSON bytes, or None if encoding fails."""
    try:
        return record.model_dump_json().encode("utf-8")
    except (ValueError, TypeError) as exc:
        # PydanticSerializationError is a ValueError
        logger.debug(
            "Record serialization failed",
            model=type(record).__name__,
            error=str(exc),
        )
        return None


def from_json(model_type: type[ModelT], data: bytes | str) -> ModelT | None:
    """Decode JSON into an instance of model_type, or None on failure.

    Malformed JSON, input nested past the parser depth limit,
    non-object payloads and validation failures all yield None.
    """
    try:
        # model_validate rather than model_validate_json: table models
        # only validate through SQLModel's model_validate
        payload = pydantic_core.from_json(data)
        return model_type.model_validate(payload)
    except (ValueError, TypeError, RecursionError, ValidationError) as exc:
        logger.debug(
            "Record deserialization failed",
            model=model_type.__name__,
            error=str(exc),
        )
        return None
