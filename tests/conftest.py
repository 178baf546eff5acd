"""
Pytest Configuration and Fixtures.

This file configures pytest and provides shared fixtures for all tests.
"""
import pytest
import sys
from datetime import UTC, datetime
from pathlib import Path

# Add project root to path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from menu_trainer.config import DEFAULT_MENU_DATA, get_settings  # noqa: E402
from menu_trainer.delivery.menu_deck import Blank, Question  # noqa: E402
from menu_trainer.delivery.state_store import StateStore  # noqa: E402

NOW = datetime(2024, 6, 15, 12, 0, tzinfo=UTC)


def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line("markers", "unit: Unit tests")
    config.addinivalue_line("markers", "integration: Integration tests (temporary SQLite store)")
    config.addinivalue_line("markers", "smoke: Smoke tests for CLI commands")
    config.addinivalue_line("markers", "slow: Slow tests")


def pytest_collection_modifyitems(config, items):
    """Automatically mark tests based on their location."""
    for item in items:
        # Mark based on test file location
        if "unit" in str(item.fspath):
            item.add_marker(pytest.mark.unit)
        elif "integration" in str(item.fspath):
            item.add_marker(pytest.mark.integration)
        elif "smoke" in str(item.fspath):
            item.add_marker(pytest.mark.smoke)


def make_question(
    item_id: str = "spicy_tuna_roll",
    index: int = 0,
    answers: tuple[str, ...] = ("spicy mayo",),
    category: str = "Sushi Rolls",
    item_name: str | None = None,
    alternatives: dict[int, tuple[str, ...]] | None = None,
    status: str = "active",
    full_text: str = "",
) -> Question:
    """Build a Question without going through the JSON loader."""
    alternatives = alternatives or {}
    return Question(
        id=f"{item_id}_{index}",
        item_id=item_id,
        item_name=item_name or item_id.replace("_", " ").title(),
        category=category,
        context="What goes inside?",
        full_text=full_text or ", ".join(answers),
        blanks=tuple(Blank(a, alternatives.get(i, ())) for i, a in enumerate(answers)),
        status=status,
    )


@pytest.fixture(scope="session")
def project_root():
    """Return the project root directory."""
    return PROJECT_ROOT


@pytest.fixture
def now():
    """Fixed wall-clock time for attempt timestamps."""
    return NOW


@pytest.fixture
def sample_data_path():
    """Bundled sample menu dataset."""
    return DEFAULT_MENU_DATA


@pytest.fixture
def sample_questions():
    """A small deck across three categories."""
    return [
        make_question("spicy_tuna_roll", 0, ("chopped tuna", "spicy mayo", "cucumber")),
        make_question("dragon_roll", 0, ("shrimp tempura", "avocado", "eel sauce")),
        make_question("miso_soup", 0, ("white miso",), category="Soups & Salads"),
        make_question("ponzu", 0, ("yuzu",), category="Sauces & Dressings"),
    ]


@pytest.fixture
def store(tmp_path):
    """State store backed by a temporary SQLite file."""
    state_store = StateStore(db_path=tmp_path / "state.db")
    yield state_store
    state_store.close()


@pytest.fixture
def isolated_settings(tmp_path, monkeypatch):
    """Point the settings at a temporary data directory."""
    monkeypatch.setenv("MENU_TRAINER_DATA_DIR", str(tmp_path / "data"))
    monkeypatch.setenv("MENU_TRAINER_AUTO_ADVANCE_DELAY_SECONDS", "0")
    get_settings.cache_clear()
    yield get_settings()
    get_settings.cache_clear()
