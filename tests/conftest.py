"""Pytest configuration and shared fixtures."""

import sys
from pathlib import Path

import pytest

# Ensure src directory is in Python path for all tests
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from donow.collection import TaskCollection  # noqa: E402
from donow.config import Config  # noqa: E402


SAMPLE_TODO = """\
(A) 2023-01-01 Write +libdonow report @work due:2023-02-01
x 2023-01-02 2023-01-01 Task A
(B) Task B
Call mom @phone +family due:2023-01-15

(A) Fix bike +family @garage
x (C) 2023-01-05 Pay rent @home
"""


@pytest.fixture
def sample_text():
    return SAMPLE_TODO


@pytest.fixture
def collection():
    return TaskCollection.load(SAMPLE_TODO)


@pytest.fixture(autouse=True)
def reset_config():
    """Drop the cached configuration between tests."""
    Config._instance = None
    yield
    Config._instance = None
