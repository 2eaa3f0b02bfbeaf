"""Parse errors and field validation for todo.txt lines.

Every failure raised by the parser and the task collection is defined here so
callers have a single module to import from. None of these errors is fatal:
the caller decides whether to abort or to skip the offending lines.
"""

from datetime import date
from typing import Any, List, Optional, Tuple

from .datetime import parse_date


class ParseError(Exception):
    """Base class for todo.txt parse failures."""


class MalformedError(ParseError):
    """A line, or a field token present in a line, does not match its grammar."""

    def __init__(self, message: str, field_name: str = "line", value: Any = None,
                 suggestions: List[str] = None):
        self.field_name = field_name
        self.value = value
        self.suggestions = suggestions or []
        super().__init__(message)


class MultipleParseError(ParseError):
    """Several malformed lines found during a batch operation.

    ``errors`` holds ``(line_number, MalformedError)`` pairs. Line numbers are
    1-based and count blank lines, so they match what an editor shows.
    """

    def __init__(self, errors: List[Tuple[int, MalformedError]]):
        self.errors = list(errors)
        details = "; ".join(f"line {number}: {error}" for number, error in self.errors)
        super().__init__(f"{len(self.errors)} malformed line(s): {details}")

    def __iter__(self):
        return iter(self.errors)

    def __len__(self):
        return len(self.errors)


class TaskIndexError(IndexError):
    """Index outside ``0 <= index < length`` of a task collection."""

    def __init__(self, index: int, length: int):
        self.index = index
        self.length = length
        super().__init__(f"task index {index} out of range for collection of {length}")


def validate_date_field(field_name: str, value: str) -> date:
    """Parse the value of a date field, raising MalformedError on bad input.

    Args:
        field_name: Name of the field being validated (used in the error)
        value: The raw ``YYYY-MM-DD`` text

    Returns:
        The parsed date

    Raises:
        MalformedError: If the value is not a valid date
    """
    try:
        return parse_date(value)
    except ValueError as e:
        raise MalformedError(
            f"Field '{field_name}' has invalid date '{value}': {e}",
            field_name=field_name,
            value=value,
            suggestions=["Use the YYYY-MM-DD form, e.g. 2024-08-15"],
        ) from e


def validate_priority(value: Optional[str]) -> Optional[str]:
    """Check that a priority is a single upper-case letter or None."""
    if value is None:
        return None
    if not isinstance(value, str) or len(value) != 1 or not ("A" <= value <= "Z"):
        raise MalformedError(
            f"Priority must be a single letter A-Z, got {value!r}",
            field_name="priority",
            value=value,
            suggestions=["Use (A) for the highest priority and (Z) for the lowest"],
        )
    return value


def validate_description(value: str) -> str:
    """Check that a description is non-empty single-line text."""
    if not isinstance(value, str) or not value.strip():
        raise MalformedError(
            "Task has no description",
            field_name="description",
            value=value,
            suggestions=["Add some text after the priority and dates"],
        )
    if "\n" in value or "\r" in value:
        raise MalformedError(
            "Task description must fit on a single line",
            field_name="description",
            value=value,
        )
    return value.strip()


def validate_task_dates(done: bool, completion_date: Optional[date],
                        creation_date: Optional[date]) -> None:
    """Check that the dates of a task can be written out and read back unchanged.

    Raises:
        MalformedError: If an open task carries a completion date, or a done
            task carries a creation date without a completion date
    """
    if not done and completion_date is not None:
        raise MalformedError(
            "Open task cannot have a completion date",
            field_name="completion_date",
            value=completion_date,
            suggestions=["Mark the task done or drop the completion date"],
        )
    if done and completion_date is None and creation_date is not None:
        raise MalformedError(
            "Done task with a creation date needs a completion date",
            field_name="completion_date",
            value=None,
        )
