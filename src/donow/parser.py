"""todo.txt line parser.

A line is read left to right::

    [x ] [(A) ] [date [date ]] description

The prefix fields are consumed one at a time with anchored regular
expressions. Everything that is left is the description, which keeps its
``+project``, ``@context`` and ``due:`` tokens. Those tokens are not stored
separately; the ``find_*`` functions re-scan the description on demand so
the task never holds two copies of the same data.
"""

import logging
import re
from datetime import date, datetime, timedelta
from typing import List, Optional

import parsedatetime
from fuzzywuzzy import fuzz, process

from .todo import Task
from .utils.datetime import today, looks_like_date
from .utils.validation import MalformedError, validate_date_field

logger = logging.getLogger(__name__)


# Prefix patterns, each anchored at the start of what is left of the line.
# A prefix field is always followed by a space, so a bare "x" or "(A)" is text.
DONE_RE = re.compile(r"^x(?=\s)")
PRIORITY_RE = re.compile(r"^\(([A-Z])\)(?=\s)")
DATE_RE = re.compile(r"^(\d{4}-\d{2}-\d{2})(?=\s)")

# Description tokens, only recognised at the start of a whitespace-separated word
PROJECT_RE = re.compile(r"(?<!\S)\+(\S+)")
CONTEXT_RE = re.compile(r"(?<!\S)@(\S+)")
DUE_RE = re.compile(r"(?<!\S)due:(\S*)")
TAG_TOKEN_RE = re.compile(r"(?<!\S)(?:[+@]\S+|due:\S*)")


def _consume(pattern: re.Pattern, text: str):
    """Match an anchored prefix; return (match, rest-of-text)."""
    match = pattern.match(text)
    if not match:
        return None, text
    return match, text[match.end():].lstrip()


def parse_line(line: str) -> Task:
    """Parse one todo.txt line into a Task.

    Args:
        line: A single non-blank line. A trailing line terminator is ignored.

    Returns:
        The parsed Task

    Raises:
        MalformedError: If a date-shaped prefix token is not a real date, the
            description would be misread as prefix fields once the task is
            toggled, or the text spans several lines
    """
    text = line.rstrip("\r\n")
    if "\n" in text or "\r" in text:
        raise MalformedError("Line contains a line break", value=line)

    remaining = text.strip()
    if not remaining:
        raise MalformedError("Blank line", value=line,
                             suggestions=["Skip blank lines before parsing"])

    match, remaining = _consume(DONE_RE, remaining)
    done = match is not None

    priority = None
    match, remaining = _consume(PRIORITY_RE, remaining)
    if match:
        priority = match.group(1)

    # A done task lists its completion date first; an open task can only
    # carry a creation date.
    completion_date = creation_date = None
    match, remaining = _consume(DATE_RE, remaining)
    if match:
        if done:
            completion_date = validate_date_field("completion_date", match.group(1))
            match, remaining = _consume(DATE_RE, remaining)
            if match:
                creation_date = validate_date_field("creation_date", match.group(1))
        else:
            creation_date = validate_date_field("creation_date", match.group(1))

    return Task(
        description=remaining,
        done=done,
        priority=priority,
        completion_date=completion_date,
        creation_date=creation_date,
    )


def check_leading_text(description: str, priority: Optional[str],
                       creation_date: Optional[date]) -> None:
    """Reject a description that would come back as prefix fields.

    Toggling only adds or removes the done marker and the completion date, so
    the priority and the creation date are what keep the start of the
    description out of a prefix position in every state.

    Raises:
        MalformedError: If the description starts with ``x `` or ``(A) ``
            while the task has neither a priority nor a creation date, or
            starts with a date while the task has no creation date
    """
    if creation_date is not None:
        return

    if DATE_RE.match(description):
        reads_as = "a creation date"
    elif priority is None and DONE_RE.match(description):
        reads_as = "the done marker"
    elif priority is None and PRIORITY_RE.match(description):
        reads_as = "a priority"
    else:
        return

    raise MalformedError(
        f"Description {description.split()[0]!r} would be read back as {reads_as}",
        field_name="description",
        value=description,
        suggestions=["Reword the start of the description or give the task a creation date"],
    )


def find_projects(description: str) -> List[str]:
    """Return ``+project`` names in order of appearance, duplicates kept."""
    return PROJECT_RE.findall(description)


def find_contexts(description: str) -> List[str]:
    """Return ``@context`` names in order of appearance, duplicates kept."""
    return CONTEXT_RE.findall(description)


def find_due(description: str) -> Optional[date]:
    """Return the date of the first ``due:`` token.

    Returns None when there is no ``due:`` token. A token whose value is not a
    valid ``YYYY-MM-DD`` date raises MalformedError.
    """
    match = DUE_RE.search(description)
    if not match:
        return None
    return validate_date_field("due", match.group(1))


def strip_tags(description: str) -> str:
    """Remove project, context and due tokens and collapse whitespace."""
    return " ".join(TAG_TOKEN_RE.sub("", description).split())


class SmartDateParser:
    """Date parser for user input, accepting natural language.

    Stored dates are always ``YYYY-MM-DD``; this is only used to turn what a
    user types (``tomorrow``, ``next friday``) into a date.
    """

    def __init__(self):
        self.cal = parsedatetime.Calendar()
        self.patterns = {
            'today': lambda: today(),
            'tomorrow': lambda: today() + timedelta(days=1),
            'yesterday': lambda: today() - timedelta(days=1),
            'next week': lambda: today() + timedelta(weeks=1),
            'end of week': self._end_of_week,
        }

    def _end_of_week(self) -> date:
        """Get end of current week (Sunday)."""
        now = today()
        return now + timedelta(days=6 - now.weekday())

    def parse(self, date_str: str) -> Optional[date]:
        """Parse a date string, returning None when nothing sensible is found."""
        if not date_str:
            return None

        date_str = date_str.lower().strip()

        if date_str in self.patterns:
            return self.patterns[date_str]()

        if looks_like_date(date_str):
            try:
                return validate_date_field("due", date_str)
            except MalformedError:
                return None

        time_struct, parse_status = self.cal.parse(date_str)
        if parse_status > 0:
            return datetime(*time_struct[:6]).date()

        logger.debug("Could not parse date input %r", date_str)
        return None


def suggest_names(name: str, available: List[str], limit: int = 3) -> List[str]:
    """Suggest close matches for a mistyped project or context name."""
    if not available or name in available:
        return []
    close_matches = process.extractBests(name, available, scorer=fuzz.ratio,
                                         score_cutoff=70, limit=limit)
    return [match[0] for match in close_matches]
