"""Tests for the todo.txt line parser."""

import pytest
from datetime import date, timedelta

from donow.parser import (
    parse_line, find_projects, find_contexts, find_due, strip_tags,
    SmartDateParser, suggest_names,
)
from donow.todo import Task
from donow.utils.datetime import today
from donow.utils.validation import MalformedError


class TestParseLine:
    """Test parsing of the prefix fields."""

    def test_full_open_line(self):
        """Priority, creation date and all tag kinds on one line."""
        task = parse_line("(A) 2023-01-01 Write +libdonow report @work due:2023-02-01")

        assert task.done is False
        assert task.priority == "A"
        assert task.creation_date == date(2023, 1, 1)
        assert task.completion_date is None
        assert task.description == "Write +libdonow report @work due:2023-02-01"
        assert task.projects == ["libdonow"]
        assert task.contexts == ["work"]
        assert task.due == date(2023, 2, 1)

    def test_done_with_two_dates(self):
        """First date of a done line is the completion date."""
        task = parse_line("x 2023-01-02 2023-01-01 Task A")

        assert task.done is True
        assert task.completion_date == date(2023, 1, 2)
        assert task.creation_date == date(2023, 1, 1)
        assert task.description == "Task A"

    def test_done_with_priority(self):
        task = parse_line("x (A) 2024-08-15 2024-09-20 Hello World +hello @wow")

        assert task.done is True
        assert task.priority == "A"
        assert task.completion_date == date(2024, 8, 15)
        assert task.creation_date == date(2024, 9, 20)
        assert task.description == "Hello World +hello @wow"

    def test_done_with_one_date(self):
        """A lone date on a done line is the completion date."""
        task = parse_line("x 2023-01-02 Task")

        assert task.completion_date == date(2023, 1, 2)
        assert task.creation_date is None

    def test_open_line_takes_only_one_date(self):
        task = parse_line("2023-01-01 2023-01-02 Meeting")

        assert task.creation_date == date(2023, 1, 1)
        assert task.description == "2023-01-02 Meeting"

    def test_plain_text(self):
        task = parse_line("Buy groceries")

        assert task == Task(description="Buy groceries")

    def test_leading_whitespace_and_terminator(self):
        task = parse_line(" (B) 2024-08-02 Nice\n")

        assert task.priority == "B"
        assert task.creation_date == date(2024, 8, 2)
        assert task.description == "Nice"

    @pytest.mark.parametrize("line", [
        "(a) lower case priority",
        "(A)no space after priority",
        "Call (A) Bob",
        "(AB) two letters",
    ])
    def test_loose_priority_is_text(self, line):
        """Anything but an exact (A) prefix is description text."""
        task = parse_line(line)

        assert task.priority is None
        assert task.description == line

    @pytest.mark.parametrize("line", ["xylophone practice", "X marks the spot"])
    def test_done_marker_needs_lowercase_x_and_space(self, line):
        task = parse_line(line)

        assert task.done is False
        assert task.description == line

    def test_invalid_creation_date(self):
        with pytest.raises(MalformedError) as excinfo:
            parse_line("2023-13-45 Task")

        assert excinfo.value.field_name == "creation_date"
        assert excinfo.value.value == "2023-13-45"

    def test_invalid_completion_date(self):
        with pytest.raises(MalformedError) as excinfo:
            parse_line("x 2023-02-30 Task")

        assert excinfo.value.field_name == "completion_date"

    @pytest.mark.parametrize("line, description", [
        ("x", "x"),
        ("(A)", "(A)"),
        ("2023-01-01", "2023-01-01"),
        ("x 2023-01-02", "2023-01-02"),
        ("(A) 2023-01-01", "2023-01-01"),
    ])
    def test_marker_without_trailing_space_is_text(self, line, description):
        """A prefix field needs a space after it; a final bare marker is the description."""
        task = parse_line(line)

        assert task.description == description
        assert parse_line(task.to_string()) == task

    @pytest.mark.parametrize("line", [
        "x x marks the spot",
        "x 2023-01-02 x marks the spot",
        "x 2023-01-02 (A) call bob",
        "x 2023-01-02 (B) 2023-01-01 call bob",
    ])
    def test_description_that_reads_back_as_prefix(self, line):
        """Reopening these would turn the start of the description into prefix fields."""
        with pytest.raises(MalformedError) as excinfo:
            parse_line(line)

        assert excinfo.value.field_name == "description"

    def test_blank_line(self):
        with pytest.raises(MalformedError):
            parse_line("   ")

    def test_embedded_line_break(self):
        with pytest.raises(MalformedError):
            parse_line("first\nsecond")

    def test_task_parse_delegates(self):
        assert Task.parse("(C) Call Bob") == parse_line("(C) Call Bob")


class TestRoundTrip:
    """Serializing and re-parsing gives back the same task."""

    @pytest.mark.parametrize("line", [
        "(A) 2023-01-01 Write +libdonow report @work due:2023-02-01",
        "x 2023-01-02 2023-01-01 Task A",
        "x (C) 2023-01-05 Pay rent @home",
        "x Done without dates",
        "2023-01-01 2023-01-02 Meeting",
        "(Z) Low priority +p1 +p2 @c1",
        "Plain task",
    ])
    def test_canonical_lines(self, line):
        task = parse_line(line)

        assert task.to_string() == line
        assert parse_line(task.to_string()) == task

    def test_extra_spacing_is_normalized(self):
        task = parse_line("(A)   2023-01-01   Write  report")

        assert task.to_string() == "(A) 2023-01-01 Write  report"
        assert parse_line(task.to_string()) == task

    def test_after_toggle(self):
        task = parse_line("(B) 2023-03-01 Review +docs")
        task.toggle_status()

        assert parse_line(str(task)) == task
        task.toggle_status()
        assert parse_line(str(task)) == task

    @pytest.mark.parametrize("line", [
        "(A) x marks the spot",
        "2023-01-01 x marks the spot",
        "x (B) 2023-01-02 (A) call bob",
        "x 2023-01-02 2023-01-01 2023-01-05 meeting",
        "2023-01-01 2023-02-30 not a real date",
        "x x",
        "x (A)",
        "x 2023-01-02 2023-01-01",
    ])
    def test_leading_markers_survive_toggling(self, line):
        """Marker-like text at the start of a description stays text in both states."""
        task = parse_line(line)
        description = task.description

        for _ in range(2):
            task.toggle_status()
            assert parse_line(str(task)) == task
            assert task.description == description

    @pytest.mark.parametrize("fields", [
        {"description": "x marks the spot"},
        {"description": "(A) call bob"},
        {"description": "2023-01-05 meeting"},
        {"description": "2023-01-05 meeting", "priority": "A"},
        {"description": "x marks the spot", "done": True, "completion_date": date(2023, 1, 2)},
    ])
    def test_task_rejects_description_read_as_prefix(self, fields):
        with pytest.raises(MalformedError) as excinfo:
            Task(**fields)

        assert excinfo.value.field_name == "description"

    @pytest.mark.parametrize("fields", [
        {"description": "x marks the spot", "priority": "A"},
        {"description": "(A) call bob", "creation_date": date(2023, 1, 1)},
        {"description": "x"},
        {"description": "(A)"},
        {"description": "2023-01-01"},
    ])
    def test_task_accepts_unambiguous_description(self, fields):
        task = Task(**fields)

        assert parse_line(str(task)) == task


class TestTagAccessors:
    """Test on-demand extraction from the description."""

    def test_projects_keep_order_and_duplicates(self):
        assert find_projects("a +x +y b +x") == ["x", "y", "x"]

    def test_contexts_keep_order_and_duplicates(self):
        assert find_contexts("@home call @phone @home") == ["home", "phone", "home"]

    def test_tags_must_start_a_word(self):
        assert find_contexts("mail bob@example.com") == []
        assert find_projects("2+2 is four") == []

    def test_absent_fields(self):
        assert find_projects("nothing here") == []
        assert find_contexts("nothing here") == []
        assert find_due("nothing here") is None

    def test_due(self):
        assert find_due("Pay due:2023-04-30 now") == date(2023, 4, 30)

    @pytest.mark.parametrize("description", ["Pay due:tomorrow", "Pay due:2023-02-30", "Pay due:"])
    def test_malformed_due(self, description):
        with pytest.raises(MalformedError) as excinfo:
            find_due(description)

        assert excinfo.value.field_name == "due"

    def test_malformed_due_does_not_break_the_task(self):
        """Only the due accessor fails; the rest of the task is usable."""
        task = parse_line("(A) Renew passport +travel due:soon")

        assert task.priority == "A"
        assert task.projects == ["travel"]
        with pytest.raises(MalformedError):
            task.due

    def test_strip_tags(self):
        assert strip_tags("Write +libdonow report @work due:2023-02-01") == "Write report"


class TestSmartDateParser:
    """Test the user-input date parser."""

    def setup_method(self):
        self.parser = SmartDateParser()

    def test_parse_iso_date(self):
        assert self.parser.parse("2024-12-25") == date(2024, 12, 25)

    def test_parse_today(self):
        assert self.parser.parse("today") == today()

    def test_parse_tomorrow(self):
        assert self.parser.parse("Tomorrow") == today() + timedelta(days=1)

    def test_parse_end_of_week(self):
        result = self.parser.parse("end of week")
        assert result.weekday() == 6
        assert 0 <= (result - today()).days <= 6

    def test_parse_impossible_iso_date(self):
        assert self.parser.parse("2024-02-30") is None

    def test_parse_invalid_date(self):
        assert self.parser.parse("invalid-date") is None

    def test_parse_empty_string(self):
        assert self.parser.parse("") is None


class TestSuggestNames:
    """Test 'did you mean' suggestions."""

    def test_close_match(self):
        assert suggest_names("libdonw", ["libdonow", "work"]) == ["libdonow"]

    def test_exact_name_needs_no_suggestion(self):
        assert suggest_names("work", ["libdonow", "work"]) == []

    def test_nothing_available(self):
        assert suggest_names("work", []) == []
