"""
Pytest configuration and shared fixtures for timers tests.
"""

import shutil
import tempfile
from datetime import datetime, timezone
from pathlib import Path

import pytest

UTC = timezone.utc


def at(hour, minute=0, second=0, day=15):
    """Fixed UTC timestamp on January ``day``, 2024 (the 15th is a Monday)."""
    return datetime(2024, 1, day, hour, minute, second, tzinfo=UTC)


@pytest.fixture
def temp_dir():
    """Create a temporary task directory for testing."""
    temp_root = tempfile.mkdtemp()
    task_dir = Path(temp_root) / '.timers'
    task_dir.mkdir(parents=True)

    yield task_dir

    shutil.rmtree(temp_root)


@pytest.fixture
def repo(temp_dir):
    """Create a Repo on the temporary directory."""
    from timers.repo import Repo
    return Repo(temp_dir)


@pytest.fixture
def sample_files(temp_dir):
    """Write task files directly, the way the repository lays them out."""
    files = {
        '1': (
            "1\n"
            "Write report\n"
            "2024-01-15T08:00:00+00:00 2024-01-15T09:00:00+00:00\n"
            "2024-01-15T13:00:00+00:00 2024-01-15T14:00:00+00:00\n"
        ),
        '2': (
            "2\n"
            "Code review\n"
            "2024-01-15T10:00:00+00:00 2024-01-15T11:00:00+00:00\n"
        ),
        '3': (
            "3\n"
            "Support\n"
            "2024-01-15T15:00:00+00:00 \n"
        ),
        '4': (
            "4\n"
            "Never started\n"
        ),
    }
    for name, content in files.items():
        (temp_dir / name).write_text(content)
    return files


@pytest.fixture
def repo_with_tasks(repo, sample_files):
    """Repo holding the sample tasks; task 3 is logging since 15:00."""
    return repo
