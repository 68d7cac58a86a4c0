"""Options and categories kept alongside the logged times."""

import logging

from .core.errors import DuplicateError, NotFoundError
from .core.intervals import END_OF_DAY, HourMinute
from .ports.interval_store import IntervalStore

logger = logging.getLogger(__name__)


class ConfigStore:
    """Key-value options and the set of registered categories."""

    def __init__(self, store: IntervalStore):
        self.store = store

    # ============== Categories ==============

    def categories(self) -> list[str]:
        """Registered category names, in the order they were added."""
        return self.store.list_categories()

    def has_category(self, name: str) -> bool:
        return name in self.store.list_categories()

    def add_category(self, name: str) -> None:
        with self.store.transaction():
            if self.has_category(name):
                raise DuplicateError(f"Category '{name}' already exists")
            self.store.add_category(name)
        logger.info(f"Added category '{name}'")

    def delete_category(self, name: str, delete_logged_times: bool = False) -> None:
        """
        Remove a category.

        Times already logged against it keep the stale name unless
        ``delete_logged_times`` is set.
        """
        if not self.store.delete_category(name, delete_logged_times=delete_logged_times):
            raise NotFoundError(f"Category '{name}' does not exist")
        logger.info(f"Deleted category '{name}'")

    def rename_category(self, old: str, new: str) -> None:
        """Rename a category and every time logged against it."""
        with self.store.transaction():
            categories = self.store.list_categories()
            if old not in categories:
                raise NotFoundError(
                    f'Category "{old}" cannot be renamed to "{new}" because "{old}" does not exist'
                )
            if new in categories:
                raise DuplicateError(f"Category '{new}' already exists")
            self.store.rename_category(old, new)
        logger.info(f"Renamed category '{old}' to '{new}'")

    # ============== Options ==============

    def options(self) -> dict[str, str]:
        """All options, sorted by name."""
        return dict(sorted(self.store.get_options().items()))

    def get_option(self, key: str) -> str | None:
        return self.store.get_options().get(key)

    def set_option(self, key: str, value: str) -> None:
        if key == END_OF_DAY:
            value = str(HourMinute.parse(value))
        self.store.set_option(key, value)
        logger.info(f"Set option {key}={value}")

    def unset_option(self, key: str) -> None:
        if not self.store.unset_option(key):
            logger.debug(f"Option {key} was not set")

    def end_of_day(self) -> HourMinute | None:
        """The configured end of day, or None if unset."""
        value = self.get_option(END_OF_DAY)
        if value is None:
            return None
        return HourMinute.parse(value)

    def show_config(self) -> dict:
        """Snapshot of all options and categories."""
        return {
            "options": self.options(),
            "categories": self.categories(),
        }
