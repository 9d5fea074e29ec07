"""Tests for the state reducer."""

from __future__ import annotations

import pytest

from korastor.domains.cessation.domain_logic.models import (
    AppState,
    KoraPoints,
    StreakData,
    default_app_state,
)
from korastor.domains.cessation.domain_logic.metrics import refresh_health_systems
from korastor.domains.cessation.state.actions import (
    LoadState,
    ResetJourney,
    SetStreakData,
    SetUserProfile,
    UpdateHealthSystems,
    UpdateKoraPoints,
    UpdateLifeRegained,
    UpdateMoneySaved,
    reduce,
)


class TestReduce:
    def test_set_user_profile(self, make_profile):
        profile = make_profile()
        state = reduce(default_app_state(), SetUserProfile(profile))
        assert state.user_profile == profile

    def test_clear_user_profile(self, make_profile):
        state = AppState(user_profile=make_profile())
        assert reduce(state, SetUserProfile(None)).user_profile is None

    def test_set_streak_data_replaces_wholesale(self, start_ms):
        streak = StreakData(last_consumption_date=start_ms, total_days_abstinent=9)
        state = reduce(default_app_state(), SetStreakData(streak))
        assert state.streak_data is streak

    def test_cached_scalars(self):
        state = reduce(default_app_state(), UpdateMoneySaved(42.5))
        state = reduce(state, UpdateLifeRegained(1_000.0))
        assert state.money_saved == 42.5
        assert state.life_regained_ms == 1_000.0

    def test_points(self):
        points = KoraPoints(total=3, earned_today=3)
        assert reduce(default_app_state(), UpdateKoraPoints(points)).kora_points == points

    def test_health_systems(self):
        state = default_app_state()
        systems = refresh_health_systems(state.health_systems, 3)
        assert reduce(state, UpdateHealthSystems(list(systems))).health_systems == systems

    def test_load_state_replaces_everything(self, make_profile):
        loaded = AppState(user_profile=make_profile(), money_saved=9.0)
        assert reduce(default_app_state(), LoadState(loaded)) is loaded

    def test_reset_journey(self, make_profile, start_ms):
        state = AppState(
            user_profile=make_profile(),
            streak_data=StreakData(last_consumption_date=start_ms),
            kora_points=KoraPoints(total=12),
            money_saved=50.0,
        )
        assert reduce(state, ResetJourney()) == default_app_state()

    def test_original_state_untouched(self, make_profile):
        state = default_app_state()
        reduce(state, SetUserProfile(make_profile()))
        assert state.user_profile is None

    def test_unknown_action_raises(self):
        with pytest.raises(TypeError, match="Unknown action"):
            reduce(default_app_state(), object())
