"""Shared test fixtures for gl-members tests."""

import sys
from pathlib import Path
from typing import Any

import pytest

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from gl_members.client import GitLabClient
from gl_members.store import Database, RosterStore

# Constants for use in tests - pytest makes conftest.py fixtures available,
# but these constants need to be imported directly from tests
MOCK_GITLAB_URL = "https://gitlab.example.com"
MOCK_API_URL = f"{MOCK_GITLAB_URL}/api/v4"


@pytest.fixture
def mock_client():
    """GitLabClient pointing at mock server, without retries."""
    return GitLabClient(MOCK_GITLAB_URL, "test-token", max_retries=0)


class FakeClock:
    """Deterministic, strictly increasing timestamps."""

    def __init__(self):
        self.tick = 0

    def __call__(self) -> str:
        self.tick += 1
        return f"2024-01-01T00:00:{self.tick:02d}.000000+00:00"


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def store(tmp_path, clock):
    """RosterStore backed by a fresh SQLite file."""
    db = Database(tmp_path / "roster.sqlite3")
    db.init()
    roster = RosterStore(db, clock=clock)
    yield roster
    roster.close()


@pytest.fixture
def sample_project() -> dict[str, Any]:
    """Sample project API response."""
    return {
        "id": 123,
        "name": "backend",
        "path_with_namespace": "myorg/backend",
        "description": "Backend services",
        "last_activity_at": "2024-05-01T10:00:00.000Z",
        "namespace": {"id": 7, "name": "myorg", "full_path": "myorg"},
    }
