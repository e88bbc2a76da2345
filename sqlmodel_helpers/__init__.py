"""sqlmodel-helpers: convenience layer over SQLModel persistence.

Containers, contexts with safe saves, JSON (de)serialization of
records, and lifecycle timestamps.
"""

__version__ = "0.1.0"
