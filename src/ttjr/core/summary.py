"""Per-category aggregation of logged intervals."""

from dataclasses import dataclass, field
from typing import Iterable

from .intervals import Interval


@dataclass
class CategorySummary:
    """Totals for a single category."""

    category: str
    count: int = 0
    duration: int = 0
    percentage: float = 0.0


@dataclass
class Summary:
    """Totals across all categories, with a per-category breakdown."""

    total_count: int = 0
    total_duration: int = 0
    categories: list[CategorySummary] = field(default_factory=list)

    def get(self, category: str) -> CategorySummary | None:
        for item in self.categories:
            if item.category == category:
                return item
        return None


def summarize(intervals: Iterable[Interval]) -> Summary:
    """
    Aggregate intervals by category.

    Pure function - no I/O.

    Open intervals count toward the number of logged activities but add no
    duration. Categories are reported in the order they were first seen.
    """
    by_category: dict[str, CategorySummary] = {}
    for interval in intervals:
        item = by_category.get(interval.category)
        if item is None:
            item = by_category[interval.category] = CategorySummary(interval.category)
        item.count += 1
        item.duration += interval.duration()

    total_duration = sum(item.duration for item in by_category.values())
    for item in by_category.values():
        if total_duration:
            item.percentage = item.duration / total_duration * 100

    return Summary(
        total_count=sum(item.count for item in by_category.values()),
        total_duration=total_duration,
        categories=list(by_category.values()),
    )
