"""donow - a todo.txt parser and task collection."""

__version__ = "0.1.0"
__author__ = "donow Team"

from .todo import Task
from .collection import TaskCollection
from .parser import parse_line
from .utils.validation import (
    ParseError,
    MalformedError,
    MultipleParseError,
    TaskIndexError,
)

__all__ = [
    "Task",
    "TaskCollection",
    "parse_line",
    "ParseError",
    "MalformedError",
    "MultipleParseError",
    "TaskIndexError",
    "__version__",
]
