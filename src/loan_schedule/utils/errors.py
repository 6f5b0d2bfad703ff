"""
Exceptions raised by the schedule engine.

Row-level problems never raise; only bad input and a file whose structure
cannot be worked out at all reach the caller.
"""
from typing import Optional


class ScheduleError(Exception):
    """Base exception for the loan schedule engine."""


class InvalidArgument(ScheduleError, ValueError):
    """Raised when a caller passes an empty or otherwise unusable argument."""


class MissingRequiredColumns(ScheduleError):
    """Raised when no plausible date and total column pair can be found."""

    def __init__(self, delimiter: str, date_column: int, total_column: int, message: Optional[str] = None):
        self.delimiter = delimiter
        self.date_column = date_column
        self.total_column = total_column
        if message is None:
            message = (
                "Could not detect the date and amount columns "
                f"(delimiter={delimiter!r}, date_column={date_column}, total_column={total_column}). "
                "Check that the file has a column with dates (e.g. 15.12.2025) and a column with installment amounts."
            )
        super().__init__(message)
