"""Ordered collection of todo.txt tasks backed by a text body.

The collection never touches the filesystem. It is built from the text of a
todo.txt file and turns back into text on request; reading and writing the
file is up to the caller (see :mod:`donow.storage`).
"""

import logging
import re
from datetime import date
from typing import Dict, Iterator, List, Optional, Tuple, Any

from .parser import parse_line
from .todo import Task
from .utils.datetime import today
from .utils.validation import MalformedError, MultipleParseError, TaskIndexError

logger = logging.getLogger(__name__)


class TaskCollection:
    """Tasks of one todo.txt file, in file order until rearranged.

    Indexing follows list semantics except that negative indices are rejected:
    an index is valid only when ``0 <= index < len(collection)``.
    """

    def __init__(self, tasks: Optional[List[Task]] = None, content: str = ""):
        self.tasks: List[Task] = list(tasks or [])
        self.content = content

    @classmethod
    def load(cls, text: str) -> "TaskCollection":
        """Parse every non-blank line of ``text``.

        Raises:
            MultipleParseError: Listing every malformed line, not just the first
        """
        collection = cls(content=text)
        collection.reload()
        return collection

    def reload(self):
        """Re-parse ``content``, replacing the current tasks.

        On failure the current tasks are left as they were.
        """
        tasks = []
        errors: List[Tuple[int, MalformedError]] = []

        for number, line in enumerate(self.content.splitlines(), start=1):
            if not line.strip():
                continue
            try:
                tasks.append(parse_line(line))
            except MalformedError as e:
                errors.append((number, e))

        if errors:
            logger.debug("Rejected %d malformed line(s) while loading", len(errors))
            raise MultipleParseError(errors)

        self.tasks = tasks
        logger.debug("Loaded %d task(s)", len(tasks))

    def _check_index(self, index: int):
        if not 0 <= index < len(self.tasks):
            raise TaskIndexError(index, len(self.tasks))

    def get(self, index: int) -> Task:
        """Return the task at ``index``. The task is live; edits stick."""
        self._check_index(index)
        return self.tasks[index]

    def __getitem__(self, index: int) -> Task:
        return self.get(index)

    def __setitem__(self, index: int, task: Task):
        self.update(index, task)

    def __len__(self) -> int:
        return len(self.tasks)

    def __iter__(self) -> Iterator[Task]:
        return iter(self.tasks)

    def is_empty(self) -> bool:
        return not self.tasks

    def add(self, task: Task):
        """Append a task."""
        self.tasks.append(task)

    def remove(self, index: int) -> Task:
        """Remove and return the task at ``index``."""
        self._check_index(index)
        return self.tasks.pop(index)

    def update(self, index: int, task: Task):
        """Replace the task at ``index``."""
        self._check_index(index)
        self.tasks[index] = task

    def toggle_status(self, index: int) -> Task:
        """Toggle the task at ``index`` between done and open."""
        task = self.get(index)
        task.toggle_status()
        return task

    def get_projects(self) -> List[str]:
        """All project names, deduplicated, in order of first appearance."""
        return _unique(name for task in self.tasks for name in task.projects)

    def get_contexts(self) -> List[str]:
        """All context names, deduplicated, in order of first appearance."""
        return _unique(name for task in self.tasks for name in task.contexts)

    def _due_dates(self) -> List[Tuple[int, date]]:
        """(index, due date) for every task with a due tag.

        Raises:
            MultipleParseError: If any due tag is malformed. Positions in the
                error are 1-based collection positions.
        """
        dues = []
        errors = []
        for index, task in enumerate(self.tasks):
            try:
                due = task.due
            except MalformedError as e:
                errors.append((index + 1, e))
                continue
            if due is not None:
                dues.append((index, due))

        if errors:
            raise MultipleParseError(errors)
        return dues

    def get_due(self, on_or_before: date) -> List[int]:
        """Indices of tasks due on or before the given date, in collection order."""
        return [index for index, due in self._due_dates() if due <= on_or_before]

    def due_on(self, on: date) -> List[Task]:
        """Tasks due exactly on the given date."""
        return [self.tasks[index] for index, due in self._due_dates() if due == on]

    def due_today(self) -> List[Task]:
        return self.due_on(today())

    def get_priority(self, priority: str) -> List[int]:
        """Indices of tasks with the given priority letter."""
        return [index for index, task in enumerate(self.tasks) if task.priority == priority]

    def with_project(self, project: str) -> List[Task]:
        return [task for task in self.tasks if project in task.projects]

    def with_context(self, context: str) -> List[Task]:
        return [task for task in self.tasks if context in task.contexts]

    def completed(self) -> List[Task]:
        return [task for task in self.tasks if task.done]

    def not_completed(self) -> List[Task]:
        return [task for task in self.tasks if not task.done]

    def search(self, query: str) -> List[Task]:
        """Case-sensitive substring search over descriptions."""
        return [task for task in self.tasks if query in task.description]

    def regex(self, pattern: str) -> List[Task]:
        """Tasks whose description matches ``pattern`` anywhere.

        Raises:
            re.error: If the pattern does not compile
        """
        compiled = re.compile(pattern)
        return [task for task in self.tasks if compiled.search(task.description)]

    def rearrange(self):
        """Sort in place: open before done, then priority A..Z with unset last.

        The sort is stable, so tasks that compare equal keep their relative
        order and calling this twice changes nothing.
        """
        self.tasks.sort(key=lambda t: (t.done, t.priority is None, t.priority or ""))
        logger.debug("Rearranged %d task(s)", len(self.tasks))

    def to_string(self) -> str:
        """Serialize all tasks, one line each, in current order."""
        if not self.tasks:
            return ""
        return "\n".join(task.to_string() for task in self.tasks) + "\n"

    def __str__(self) -> str:
        return self.to_string()

    def format_numbered(self) -> str:
        """Numbered listing, ``1. <line>`` per task."""
        return "".join(f"{number}. {task}\n" for number, task in enumerate(self.tasks, start=1))

    def to_dicts(self) -> List[Dict[str, Any]]:
        return [task.to_dict() for task in self.tasks]

    @classmethod
    def from_dicts(cls, items: List[Dict[str, Any]]) -> "TaskCollection":
        """Build a collection from :meth:`to_dicts` output."""
        collection = cls([Task.from_dict(item) for item in items])
        collection.content = collection.to_string()
        return collection


def _unique(names) -> List[str]:
    seen = set()
    result = []
    for name in names:
        if name not in seen:
            seen.add(name)
            result.append(name)
    return result
