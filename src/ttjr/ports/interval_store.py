"""Interval storage interface."""

from contextlib import AbstractContextManager
from typing import Iterator, Protocol

from ttjr.core.intervals import Interval


class IntervalStore(Protocol):
    """Interface for persisting intervals, categories and options.

    Every call is atomic on its own. ``transaction()`` groups several calls
    into one unit that either fully applies or not at all.
    """

    def transaction(self) -> AbstractContextManager[None]:
        """Group the enclosed calls into a single transaction."""
        ...

    def insert_interval(self, category: str, start_time: int, end_time: int | None = None) -> Interval:
        """Persist a new interval and return it with its assigned id."""
        ...

    def update_interval(self, interval: Interval) -> None:
        """Overwrite all fields of an existing interval."""
        ...

    def delete_interval(self, interval_id: int) -> bool:
        """Delete an interval. Returns False if it did not exist."""
        ...

    def get_interval(self, interval_id: int) -> Interval | None:
        """Fetch an interval by id."""
        ...

    def open_intervals(self) -> list[Interval]:
        """All intervals without an end time, latest start first."""
        ...

    def query_intervals(self, start: int | None = None, end: int | None = None) -> Iterator[Interval]:
        """Intervals with ``start <= start_time < end``, ascending by id."""
        ...

    def delete_intervals_between(self, start: int, end: int, inclusive: bool = True) -> int:
        """Delete intervals touching (or, non-inclusive, contained in) ``[start, end]``."""
        ...

    def list_categories(self) -> list[str]:
        """Category names in insertion order."""
        ...

    def add_category(self, name: str) -> None:
        ...

    def delete_category(self, name: str, delete_logged_times: bool = False) -> bool:
        ...

    def rename_category(self, old: str, new: str) -> None:
        ...

    def get_options(self) -> dict[str, str]:
        ...

    def set_option(self, name: str, value: str) -> None:
        ...

    def unset_option(self, name: str) -> bool:
        ...

    def close(self) -> None:
        ...
