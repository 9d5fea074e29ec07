"""Shared test fixtures for Korastor tests."""

from __future__ import annotations

import asyncio
import sys
from pathlib import Path

import pytest

# ---------------------------------------------------------------------------
# Test hermeticity
# ---------------------------------------------------------------------------

@pytest.fixture(autouse=True)
def _force_hermetic_test_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("DB_PATH", ":memory:")
    monkeypatch.setenv("ENCRYPTION_KEY", "")
    monkeypatch.setenv("CURRENCY_LOCALE", "en-US")
    monkeypatch.setenv("POINTS_PER_CRAVING", "1")

# Allow running tests without `pip install -e .` by making `src/` importable.
_PROJECT_ROOT = Path(__file__).resolve().parent.parent
_SRC_DIR = _PROJECT_ROOT / "src"
if str(_SRC_DIR) not in sys.path:
    sys.path.insert(0, str(_SRC_DIR))

from korastor.core.clock import FixedClock  # noqa: E402
from korastor.core.storage.kv_store import InMemoryKeyValueStore  # noqa: E402
from korastor.domains.cessation.domain_logic.models import (  # noqa: E402
    MS_PER_DAY,
    HabitProfile,
    RewardVault,
    UserProfile,
)
from korastor.domains.cessation.state.store import AppStateStore  # noqa: E402

# 2026-01-01T00:00:00Z
START_MS = 1_767_225_600_000


def _run(coro):
    """Run an async coroutine synchronously (no pytest-asyncio required)."""
    loop = asyncio.new_event_loop()
    try:
        return loop.run_until_complete(coro)
    finally:
        loop.close()


def _make_profile(
    types: tuple[str, ...] = ("smoke",),
    units_per_day: float = 20,
    cost_per_unit: float = 0.5,
    start_date: int = START_MS,
    target_price: float = 200.0,
) -> UserProfile:
    """Create a user profile with sensible defaults."""
    return UserProfile(
        habit_profile=HabitProfile(types, units_per_day, cost_per_unit, "high"),
        north_star="wealth",
        reward_vault=RewardVault("Headphones", target_price),
        start_date=start_date,
    )


@pytest.fixture
def clock() -> FixedClock:
    """A clock parked ten days after the default journey start."""
    return FixedClock(START_MS + 10 * MS_PER_DAY)


@pytest.fixture
def kv_store() -> InMemoryKeyValueStore:
    return InMemoryKeyValueStore()


@pytest.fixture
def store(kv_store: InMemoryKeyValueStore) -> AppStateStore:
    """A store whose initial (empty) load has already completed."""
    app_store = AppStateStore(kv_store)
    _run(app_store.load())
    return app_store


@pytest.fixture
def start_ms() -> int:
    return START_MS


@pytest.fixture
def make_profile():
    """Factory for user profiles; keyword arguments override the defaults."""
    return _make_profile
