"""Exceptions raised by the time-tracking core."""


class TimetrackError(Exception):
    """Base class for every error the CLI reports to the user."""


class UnknownCategoryError(TimetrackError):
    """Timing was requested for a category that is not registered."""

    def __init__(self, category: str):
        super().__init__(
            f"Category '{category}' does not exist, use `ttjr add-category` to add it"
        )
        self.category = category


class DuplicateError(TimetrackError):
    """A category with the same name already exists."""


class NotFoundError(TimetrackError):
    """The referenced interval or category does not exist."""


class DateParseError(TimetrackError):
    """A human-readable date string could not be parsed."""


class StorageError(TimetrackError):
    """The storage backend failed."""


class ExportIOError(TimetrackError):
    """The export destination could not be written."""


class InvalidOptionError(TimetrackError):
    """An option value failed validation."""


class InvalidRangeError(TimetrackError):
    """A time range was empty or inverted."""
