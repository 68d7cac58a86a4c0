"""Interval ledger - owns interval lifecycle and the single-open-interval rule."""

import logging
from dataclasses import dataclass, field
from typing import Iterator

from .config_store import ConfigStore
from .core.errors import InvalidOptionError, InvalidRangeError, NotFoundError, UnknownCategoryError
from .core.intervals import HourMinute, Interval, clamp_end
from .ports.interval_store import IntervalStore

logger = logging.getLogger(__name__)


@dataclass
class StopResult:
    """Intervals closed by a stop. Empty means there was nothing to stop."""

    closed: list[Interval] = field(default_factory=list)

    @property
    def stopped(self) -> bool:
        return bool(self.closed)


class IntervalQuery:
    """Restartable view of intervals whose start falls within ``[start, end)``.

    Each iteration queries the store again, ordered by ascending id.
    """

    def __init__(self, store: IntervalStore, start: int | None = None, end: int | None = None):
        self.store = store
        self.start = start
        self.end = end

    def __iter__(self) -> Iterator[Interval]:
        return iter(self.store.query_intervals(self.start, self.end))


class Ledger:
    """
    Start, stop, amend and delete logged intervals.

    The open interval is always looked up in the store rather than cached,
    so the ledger stays correct across process restarts.
    """

    def __init__(self, store: IntervalStore, config: ConfigStore | None = None):
        self.store = store
        self.config = config or ConfigStore(store)

    def _end_of_day(self) -> HourMinute | None:
        try:
            return self.config.end_of_day()
        except InvalidOptionError as e:
            logger.warning(f"Ignoring invalid end-of-day option: {e}")
            return None

    def _close_open(self, now: int) -> list[Interval]:
        end_of_day = self._end_of_day()
        closed = []
        for interval in self.store.open_intervals():
            interval.end_time = clamp_end(interval.start_time, now, end_of_day)
            if interval.end_time != now:
                logger.info(
                    f"Clamped '{interval.category}' (id {interval.id}) to end of day {end_of_day}"
                )
            self.store.update_interval(interval)
            logger.debug(f"Closed interval {interval.id} at {interval.end_time}")
            closed.append(interval)
        return closed

    def start_timing(self, category: str, now: int) -> Interval:
        """Open a new interval for ``category``, closing any open one first."""
        with self.store.transaction():
            if not self.config.has_category(category):
                raise UnknownCategoryError(category)
            self._close_open(now)
            interval = self.store.insert_interval(category, now)
        logger.info(f"Started timing '{category}' (id {interval.id})")
        return interval

    def stop_timing(self, now: int) -> StopResult:
        """Close the open interval, if there is one."""
        with self.store.transaction():
            closed = self._close_open(now)
        if not closed:
            logger.debug("Nothing to stop")
        return StopResult(closed)

    def currently_timing(self) -> Interval | None:
        """The open interval, or None when nothing is being timed."""
        open_intervals = self.store.open_intervals()
        return open_intervals[0] if open_intervals else None

    def amend_time(
        self,
        interval_id: int,
        new_start: int | None = None,
        new_end: int | None = None,
        new_category: str | None = None,
    ) -> Interval:
        """
        Overwrite the given fields of an interval.

        Unchecked: the result may leave zero or several open intervals, or an
        end before the start. Intended for manual correction only.
        """
        with self.store.transaction():
            interval = self.store.get_interval(interval_id)
            if interval is None:
                raise NotFoundError(f"Invalid time ID {interval_id}")
            if new_start is not None:
                interval.start_time = new_start
            if new_end is not None:
                interval.end_time = new_end
            if new_category is not None:
                interval.category = new_category
            self.store.update_interval(interval)

        if not interval.is_open and interval.end_time < interval.start_time:
            logger.warning(f"Interval {interval_id} now ends before it starts")
        return interval

    def delete_time(self, interval_id: int) -> None:
        if not self.store.delete_interval(interval_id):
            raise NotFoundError(f"Invalid time ID {interval_id}")
        logger.info(f"Deleted interval {interval_id}")

    def bulk_delete_times(self, start: int, end: int, inclusive: bool = True) -> int:
        """
        Delete intervals within ``[start, end]``.

        By default any interval whose start or end lies in the window is
        deleted; with ``inclusive=False`` only intervals entirely inside it.
        """
        if not end > start:
            raise InvalidRangeError(f"end time ({end}) must be greater than start time ({start})")
        deleted = self.store.delete_intervals_between(start, end, inclusive=inclusive)
        logger.info(f"Deleted {deleted} time records")
        return deleted

    def filter_by_time(self, start: int | None = None, end: int | None = None) -> IntervalQuery:
        return IntervalQuery(self.store, start, end)
