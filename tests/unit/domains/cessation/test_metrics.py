"""Tests for the derived-metrics engine."""

from __future__ import annotations

import pytest

from korastor.domains.cessation.domain_logic.metrics import (
    compute_metrics,
    days_abstinent,
    health_progress,
    health_status,
    life_regained,
    money_saved,
    refresh_health_systems,
    reward_progress,
    streak_ms,
)
from korastor.domains.cessation.domain_logic.models import (
    DEFAULT_HEALTH_SYSTEMS,
    MS_PER_DAY,
    MS_PER_HOUR,
    AppState,
    HabitProfile,
    HealthSystem,
    RewardVault,
    SlipUp,
    StreakData,
)

SMOKER = HabitProfile(("smoke",), 20, 0.5, "high")
VAPER = HabitProfile(("vape",), 5, 2, "medium")


def _blood_oxygen() -> HealthSystem:
    return HealthSystem("Blood Oxygen", "8 Hours", 8 * MS_PER_HOUR, 0.0, "Improving")


class TestDaysAbstinent:
    def test_counts_days_from_start_without_relapse(self, start_ms):
        assert days_abstinent(start_ms, None, start_ms + 5 * MS_PER_DAY) == 5

    def test_relapse_now_resets_to_zero(self, start_ms):
        now = start_ms + 5 * MS_PER_DAY
        assert days_abstinent(start_ms, now, now) == 0

    def test_counts_from_last_relapse(self, start_ms):
        now = start_ms + 10 * MS_PER_DAY
        assert days_abstinent(start_ms, now - 3 * MS_PER_DAY, now) == 3

    def test_partial_day_is_floored(self, start_ms):
        assert days_abstinent(start_ms, None, start_ms + MS_PER_DAY - 1) == 0
        assert days_abstinent(start_ms, None, start_ms + 2 * MS_PER_DAY + 5 * MS_PER_HOUR) == 2

    def test_future_reference_point_is_negative(self, start_ms):
        assert days_abstinent(start_ms, None, start_ms - MS_PER_DAY) == -1

    def test_streak_ms_is_raw_and_floored_at_zero(self, start_ms):
        assert streak_ms(start_ms, None, start_ms + 90 * 60 * 1000) == 90 * 60 * 1000
        assert streak_ms(start_ms, None, start_ms - 1000) == 0


class TestMoneySaved:
    def test_no_slip_ups(self):
        assert money_saved(SMOKER, 10, 0) == 100.0

    def test_each_slip_up_costs_one_unit(self):
        assert money_saved(VAPER, 10, 2) == 96.0

    def test_never_negative(self):
        assert money_saved(VAPER, 0, 50) == 0
        assert money_saved(VAPER, 1, 10_000) == 0

    @pytest.mark.parametrize("days", [0, 1, 7, 365])
    def test_without_slip_ups_is_daily_cost_times_days(self, days):
        assert money_saved(SMOKER, days, 0) == 20 * 0.5 * days

    def test_monotonic_in_days(self):
        values = [money_saved(VAPER, d, 3) for d in range(30)]
        assert values == sorted(values)


class TestLifeRegained:
    def test_single_smoke_day(self):
        assert life_regained(SMOKER, 1) == 13_200_000

    def test_multiple_types_are_averaged(self):
        profile = HabitProfile(("smoke", "vape"), 10, 1)
        # (11 + 5) / 2 = 8 minutes per unit
        assert life_regained(profile, 1) == 8 * 10 * 60_000

    def test_all_three_types(self):
        profile = HabitProfile(("smoke", "vape", "snus"), 3, 1)
        # (11 + 5 + 3) / 3 minutes per unit
        assert life_regained(profile, 2) == pytest.approx(19 / 3 * 3 * 2 * 60_000)

    def test_empty_types_is_zero(self):
        assert life_regained(HabitProfile((), 20, 0.5), 30) == 0

    def test_zero_days_is_zero(self):
        assert life_regained(SMOKER, 0) == 0


class TestHealthProgress:
    def test_half_way(self):
        assert health_progress(_blood_oxygen(), 4 * MS_PER_HOUR) == 50

    def test_capped_at_100(self):
        assert health_progress(_blood_oxygen(), 24 * MS_PER_HOUR) == 100

    def test_zero_elapsed(self):
        assert health_progress(_blood_oxygen(), 0) == 0

    def test_monotonic_and_bounded(self):
        system = _blood_oxygen()
        values = [health_progress(system, h * MS_PER_HOUR) for h in range(0, 48)]
        assert values == sorted(values)
        assert all(0 <= v <= 100 for v in values)


class TestHealthStatus:
    @pytest.mark.parametrize(
        "name", ["Blood Oxygen", "Taste/Smell", "Lungs", "Heart Risk", "Liver"]
    )
    def test_restored_at_100(self, name):
        assert health_status(name, 100) == "RESTORED"

    def test_blood_oxygen_tiers(self):
        assert health_status("Blood Oxygen", 49.9) == "Improving"
        assert health_status("Blood Oxygen", 50) == "Oxygen Levels Rising"

    def test_other_system_tiers(self):
        assert health_status("Taste/Smell", 10) == "Nerves Reconnecting"
        assert health_status("Taste/Smell", 75) == "Taste Returning"
        assert health_status("Lungs", 0) == "Cilia Regeneration"
        assert health_status("Lungs", 60) == "Lung Function Improving"
        assert health_status("Heart Risk", 1) == "Decreasing Load"
        assert health_status("Heart Risk", 99) == "Heart Health Improving"

    def test_unknown_system_falls_back(self):
        assert health_status("Liver", 30) == "Healing"
        assert health_status("Liver", 80) == "Healing"


class TestRefreshHealthSystems:
    def test_day_zero_shows_no_progress(self):
        systems = refresh_health_systems(DEFAULT_HEALTH_SYSTEMS, 0)
        assert [s.progress_percent for s in systems] == [0, 0, 0, 0]

    def test_one_day(self):
        systems = {s.name: s for s in refresh_health_systems(DEFAULT_HEALTH_SYSTEMS, 1)}
        assert systems["Blood Oxygen"].progress_percent == 100
        assert systems["Blood Oxygen"].current_status == "RESTORED"
        assert systems["Taste/Smell"].progress_percent == 50
        assert systems["Taste/Smell"].current_status == "Taste Returning"
        assert systems["Lungs"].current_status == "Cilia Regeneration"

    def test_names_and_restoration_untouched(self):
        refreshed = refresh_health_systems(DEFAULT_HEALTH_SYSTEMS, 400)
        for before, after in zip(DEFAULT_HEALTH_SYSTEMS, refreshed):
            assert after.name == before.name
            assert after.restoration_ms == before.restoration_ms
            assert after.progress_percent == 100


class TestRewardProgress:
    def test_partial(self):
        progress = reward_progress(50, RewardVault("Bike", 200))
        assert progress.percent == 25
        assert progress.amount_remaining == 150
        assert progress.unlocked is False

    def test_capped_and_unlocked(self):
        progress = reward_progress(500, RewardVault("Bike", 200))
        assert progress.percent == 100
        assert progress.amount_remaining == 0
        assert progress.unlocked is True


class TestComputeMetrics:
    def test_none_without_profile(self, clock):
        assert compute_metrics(AppState(), clock.now_ms()) is None

    def test_full_read(self, make_profile, start_ms):
        state = AppState(user_profile=make_profile())
        metrics = compute_metrics(state, start_ms + 10 * MS_PER_DAY + 3 * MS_PER_HOUR)
        assert metrics.days_abstinent == 10
        assert metrics.money_saved == 100.0
        assert metrics.life_regained_ms == 10 * 13_200_000
        assert metrics.streak_ms == 10 * MS_PER_DAY + 3 * MS_PER_HOUR
        assert metrics.reward.percent == 50
        assert all(s.progress_percent > 0 for s in metrics.health_systems)

    def test_slip_ups_deducted_and_reference_moved(self, make_profile, start_ms):
        relapse = start_ms + 8 * MS_PER_DAY
        streak = StreakData(
            last_consumption_date=relapse,
            slip_ups=(SlipUp(relapse, "stress", "guilty"),),
        )
        state = AppState(user_profile=make_profile(), streak_data=streak)
        metrics = compute_metrics(state, start_ms + 10 * MS_PER_DAY)
        assert metrics.days_abstinent == 2
        assert metrics.slip_up_count == 1
        assert metrics.money_saved == 20 * 0.5 * 2 - 0.5

    def test_future_relapse_clamped_to_zero_days(self, make_profile, start_ms):
        streak = StreakData(last_consumption_date=start_ms + 5 * MS_PER_DAY)
        state = AppState(user_profile=make_profile(), streak_data=streak)
        metrics = compute_metrics(state, start_ms + 2 * MS_PER_DAY)
        assert metrics.days_abstinent == 0
        assert metrics.money_saved == 0
        assert metrics.streak_ms == 0

    def test_idempotent(self, make_profile, start_ms):
        state = AppState(user_profile=make_profile())
        now = start_ms + 33 * MS_PER_DAY + 17
        assert compute_metrics(state, now) == compute_metrics(state, now)
