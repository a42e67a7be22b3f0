"""Shared test fixtures for TaskTracker tests.

This module provides common fixtures used across all test modules:
- Database isolation with temporary files
- Fixed reference instants (the parser never reads the clock)
- A parser bound to the built-in defaults

Usage:
    def test_something(temp_db, wednesday):
        # temp_db is automatically cleaned up after the test
        ...
"""

import os
import tempfile
from collections.abc import Generator
from datetime import datetime
from pathlib import Path
from unittest.mock import patch

import pytest

from tasktracker.voice.config import VoiceConfig
from tasktracker.voice.parser import VoiceParser


# ─────────────────────────────────────────────────────────────────────────────
# Path Constants
# ─────────────────────────────────────────────────────────────────────────────

PROJECT_ROOT = Path(__file__).parent.parent
ARGS_DIR = PROJECT_ROOT / "args"


# ─────────────────────────────────────────────────────────────────────────────
# Database Fixtures
# ─────────────────────────────────────────────────────────────────────────────


@pytest.fixture
def temp_db() -> Generator[Path, None, None]:
    """Create a temporary database file for testing.

    The database file is automatically deleted after the test completes.

    Yields:
        Path to the temporary database file
    """
    with tempfile.NamedTemporaryFile(suffix=".db", delete=False) as f:
        db_path = Path(f.name)

    yield db_path

    # Cleanup
    if db_path.exists():
        os.unlink(db_path)


@pytest.fixture
def task_store(temp_db):
    """Task manager module patched to use the temporary database."""
    with (
        patch("tasktracker.tasks.manager.DB_PATH", temp_db),
        patch("tasktracker.tasks.DB_PATH", temp_db),
    ):
        from tasktracker.tasks import manager

        # Force table creation
        conn = manager.get_connection()
        conn.close()

        yield manager


# ─────────────────────────────────────────────────────────────────────────────
# User Fixtures
# ─────────────────────────────────────────────────────────────────────────────


@pytest.fixture
def mock_user_id() -> str:
    """Standard test user ID."""
    return "test_user_123"


# ─────────────────────────────────────────────────────────────────────────────
# Reference Instants
# ─────────────────────────────────────────────────────────────────────────────


@pytest.fixture
def friday() -> datetime:
    """Friday 2024-03-15, 10:00."""
    return datetime(2024, 3, 15, 10, 0)


@pytest.fixture
def wednesday() -> datetime:
    """Wednesday 2024-03-13, 09:00."""
    return datetime(2024, 3, 13, 9, 0)


@pytest.fixture
def saturday() -> datetime:
    """Saturday 2024-03-16, 11:00."""
    return datetime(2024, 3, 16, 11, 0)


# ─────────────────────────────────────────────────────────────────────────────
# Parser Fixtures
# ─────────────────────────────────────────────────────────────────────────────


@pytest.fixture
def default_config() -> VoiceConfig:
    """Built-in defaults, independent of args/voice.yaml."""
    return VoiceConfig()


@pytest.fixture
def parser(default_config) -> VoiceParser:
    return VoiceParser(default_config)
