"""Adapters - I/O implementations of ports."""

from .sqlite_store import SqliteIntervalStore

__all__ = [
    "SqliteIntervalStore",
]
