"""Task model for a single todo.txt line."""

from dataclasses import dataclass
from datetime import date
from typing import List, Optional, Dict, Any

from .utils.datetime import today, format_date, parse_date
from .utils.validation import (
    MalformedError,
    validate_description,
    validate_priority,
    validate_task_dates,
)


@dataclass
class Task:
    """One todo.txt line.

    Only the prefix fields are stored. Projects, contexts and the due date stay
    embedded in ``description`` and are extracted on access, so editing the
    description can never leave them stale.
    """

    description: str
    done: bool = False
    priority: Optional[str] = None  # "A".."Z"
    completion_date: Optional[date] = None
    creation_date: Optional[date] = None

    def __post_init__(self):
        """Reject field combinations that cannot be written as a todo.txt line."""
        from .parser import check_leading_text

        self.priority = validate_priority(self.priority)
        self.description = validate_description(self.description)
        validate_task_dates(self.done, self.completion_date, self.creation_date)
        check_leading_text(self.description, self.priority, self.creation_date)

    @classmethod
    def parse(cls, line: str) -> "Task":
        """Parse a todo.txt line. See :func:`donow.parser.parse_line`."""
        from .parser import parse_line
        return parse_line(line)

    @classmethod
    def create(cls, text: str, creation_date: Optional[date] = None,
               priority: Optional[str] = None) -> "Task":
        """Build a new open task from free text.

        ``priority`` is only applied when ``text`` does not already start with
        one, and ``creation_date`` only when it does not already carry a date.
        The assembled line goes through the regular parser.
        """
        from .parser import parse_line

        task = parse_line(" ".join(text.split()))
        if task.done:
            raise MalformedError("New tasks cannot start out done", value=text,
                                 suggestions=["Add the task first, then mark it done"])
        if task.priority is None and priority is not None:
            task.priority = validate_priority(priority)
        if task.creation_date is None and creation_date is not None:
            task.creation_date = creation_date
        return task

    @property
    def projects(self) -> List[str]:
        """``+project`` names in the description, in order."""
        from .parser import find_projects
        return find_projects(self.description)

    @property
    def contexts(self) -> List[str]:
        """``@context`` names in the description, in order."""
        from .parser import find_contexts
        return find_contexts(self.description)

    @property
    def due(self) -> Optional[date]:
        """Date of the ``due:`` tag.

        Raises:
            MalformedError: If the tag is present but its date is invalid
        """
        from .parser import find_due
        return find_due(self.description)

    @property
    def title(self) -> str:
        """Description without project, context and due tokens."""
        from .parser import strip_tags
        return strip_tags(self.description)

    def toggle_status(self):
        """Flip between done and open."""
        if self.done:
            self.reopen()
        else:
            self.complete()

    def complete(self, on: Optional[date] = None):
        """Mark the task as done, stamping the completion date if unset."""
        self.done = True
        if self.completion_date is None:
            self.completion_date = on or today()

    def reopen(self):
        """Mark the task as open again. The creation date is kept."""
        self.done = False
        self.completion_date = None

    def is_overdue(self, on: Optional[date] = None) -> bool:
        """Check if an open task is past its due date."""
        due = self.due
        if due is None or self.done:
            return False
        return due < (on or today())

    def to_string(self) -> str:
        """Serialize to the canonical todo.txt line."""
        parts = []
        if self.done:
            parts.append("x")
        if self.priority:
            parts.append(f"({self.priority})")
        if self.completion_date:
            parts.append(format_date(self.completion_date))
        if self.creation_date:
            parts.append(format_date(self.creation_date))
        parts.append(self.description)
        return " ".join(parts)

    def __str__(self) -> str:
        return self.to_string()

    def to_dict(self) -> Dict[str, Any]:
        """Convert the Task to a dictionary with ISO date strings."""
        return {
            "description": self.description,
            "done": self.done,
            "priority": self.priority,
            "completion_date": format_date(self.completion_date),
            "creation_date": format_date(self.creation_date),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Task":
        """Create a Task from a dictionary produced by :meth:`to_dict`."""
        def load_date(field_name: str) -> Optional[date]:
            value = data.get(field_name)
            if not value:
                return None
            try:
                return parse_date(value)
            except ValueError as e:
                raise MalformedError(
                    f"Field '{field_name}' has invalid date '{value}'",
                    field_name=field_name,
                    value=value,
                ) from e

        return cls(
            description=data.get("description", ""),
            done=data.get("done", False),
            priority=data.get("priority"),
            completion_date=load_date("completion_date"),
            creation_date=load_date("creation_date"),
        )
