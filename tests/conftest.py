from datetime import datetime, timezone
from pathlib import Path

import pytest


FIXTURES_DIR = Path(__file__).parent / "fixtures" / "emails"


@pytest.fixture
def fixture_path():
    """Resolve a fixture email file name to its path."""
    return lambda name: FIXTURES_DIR / name


@pytest.fixture
def fixture_email(fixture_path):
    """Read a fixture email as text."""
    return lambda name: fixture_path(name).read_text(encoding="utf-8")


@pytest.fixture
def fixed_now():
    """A fixed 'current time' for fallback timestamps."""
    return datetime(2024, 6, 1, 12, 0, 0, tzinfo=timezone.utc)
