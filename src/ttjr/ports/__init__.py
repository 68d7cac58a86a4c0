"""Ports - interfaces/protocols for external dependencies."""

from .interval_store import IntervalStore

__all__ = [
    "IntervalStore",
]
