"""Pytest configuration and shared fixtures."""

import tempfile
from collections.abc import Iterator
from pathlib import Path

import pytest  # type: ignore[import-not-found]

from daybook.core.auth import Session, SessionManager
from daybook.core.storage import CSVBackend
from daybook.core.tracker import EntryTracker

TEST_SECRET = "test-secret-key"
TEST_EMAIL = "ada@example.com"
TEST_PASSWORD = "hunter22"


def pytest_configure(config: pytest.Config) -> None:
    """Configure pytest."""
    config.addinivalue_line("markers", "integration: Integration tests")


@pytest.fixture
def temp_dir() -> Iterator[Path]:
    """Create temporary directory for tests."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def backend(temp_dir: Path) -> CSVBackend:
    """CSV backend rooted in a temporary directory."""
    return CSVBackend(temp_dir / "data")


@pytest.fixture
def session_manager(backend: CSVBackend) -> SessionManager:
    return SessionManager(backend.state_dir, secret_key=TEST_SECRET)


@pytest.fixture
def session(backend: CSVBackend, session_manager: SessionManager) -> Session:
    """A signed-up, signed-in session."""
    return session_manager.sign_up(backend, TEST_EMAIL, TEST_PASSWORD)


@pytest.fixture
def tracker(backend: CSVBackend, session: Session) -> EntryTracker:
    """Loaded tracker for the signed-in user."""
    tracker = EntryTracker(backend, session)
    tracker.refresh()
    return tracker
