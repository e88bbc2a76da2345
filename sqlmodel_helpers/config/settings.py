"""Centralized environment-based settings for sqlmodel-helpers.

Reads configuration from environment variables with sensible defaults.
Containers fall back to these settings when no explicit store location
or init-error policy is given.

Usage:
    from sqlmodel_helpers.config.settings import get_settings
    settings = get_settings()
"""

import os
from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class HelperSettings:
    """Immutable settings loaded from environment."""

    # Storage
    data_dir: Path = Path("data")
    database_name: str = "default.sqlite"
    echo_sql: bool = False

    # Container construction
    fatal_on_init_error: bool = False

    @property
    def default_store_path(self) -> Path:
        """Location of the durable store when no explicit URL is given."""
        return self.data_dir / self.database_name


def get_settings() -> HelperSettings:
    """Load settings from environment variables.

    Environment variables (all optional):
        SQLMODEL_HELPERS_DATA_DIR: Durable store directory (default: data)
        SQLMODEL_HELPERS_DATABASE_NAME: Durable store file (default: default.sqlite)
        SQLMODEL_HELPERS_ECHO_SQL: Echo SQL statements (default: false)
        SQLMODEL_HELPERS_FATAL_ON_INIT_ERROR: Exit on container init failure (default: false)
    """
    def _bool(key: str, default: bool = False) -> bool:
        val = os.environ.get(key, "").lower()
        if val in ("1", "true", "yes"):
            return True
        if val in ("0", "false", "no"):
            return False
        return default

    return HelperSettings(
        data_dir=Path(os.environ.get("SQLMODEL_HELPERS_DATA_DIR", "data")),
        database_name=os.environ.get("SQLMODEL_HELPERS_DATABASE_NAME", "default.sqlite"),
        echo_sql=_bool("SQLMODEL_HELPERS_ECHO_SQL", False),
        fatal_on_init_error=_bool("SQLMODEL_HELPERS_FATAL_ON_INIT_ERROR", False),
    )
