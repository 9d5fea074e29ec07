"""Derived-metrics engine.

Pure functions that turn the persisted journey facts (quit start, last
relapse, habit cost profile, slip-up history) into the time-varying numbers
shown to the user. Nothing here reads a clock or touches storage: the
current time is always passed in as ``now_ms``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import Iterable

from korastor.domains.cessation.domain_logic.models import (
    MS_PER_DAY,
    MS_PER_MINUTE,
    AppState,
    HabitProfile,
    HealthSystem,
    RewardVault,
)

logger = logging.getLogger(__name__)

# Clinical estimates of life minutes lost per unit consumed.
MINUTES_PER_UNIT: dict[str, float] = {
    "smoke": 11,  # per cigarette
    "vape": 5,  # per pod
    "snus": 3,  # per tin
}

RESTORED_STATUS = "RESTORED"
DEFAULT_STATUS = "Healing"
STATUS_SPLIT_PERCENT = 50

# (below 50%, at/above 50%) per system
HEALTH_STATUS_LABELS: dict[str, tuple[str, str]] = {
    "Blood Oxygen": ("Improving", "Oxygen Levels Rising"),
    "Taste/Smell": ("Nerves Reconnecting", "Taste Returning"),
    "Lungs": ("Cilia Regeneration", "Lung Function Improving"),
    "Heart Risk": ("Decreasing Load", "Heart Health Improving"),
}


# ---------------------------------------------------------------------------
# Elapsed time
# ---------------------------------------------------------------------------

def reference_point(start_date: int, last_consumption_date: int | None) -> int:
    """The abstinence anchor: last relapse if one is recorded, else quit start."""
    return last_consumption_date if last_consumption_date is not None else start_date


def days_abstinent(start_date: int, last_consumption_date: int | None, now_ms: int) -> int:
    """Whole days since the abstinence reference point.

    Not clamped: a reference point in the future yields a negative count.
    """
    return (now_ms - reference_point(start_date, last_consumption_date)) // MS_PER_DAY


def streak_ms(start_date: int, last_consumption_date: int | None, now_ms: int) -> int:
    """Raw milliseconds since the abstinence reference point, floored at 0."""
    return max(0, now_ms - reference_point(start_date, last_consumption_date))


# ---------------------------------------------------------------------------
# Money and life
# ---------------------------------------------------------------------------

def money_saved(habit_profile: HabitProfile, days: int, slip_up_count: int = 0) -> float:
    """Money not spent since the reference point, less one unit per slip-up.

    Each slip-up deducts a single unit's cost regardless of how many units
    the record says were consumed. Never negative.
    """
    raw = habit_profile.daily_cost * days - slip_up_count * habit_profile.cost_per_unit
    return max(0, raw)


def life_regained(habit_profile: HabitProfile, days: int) -> float:
    """Estimated life regained in milliseconds.

    With several habit types the per-unit minutes are averaged, not summed.
    """
    types = habit_profile.types
    if not types:
        return 0
    minutes_per_unit = sum(MINUTES_PER_UNIT.get(t, 0) for t in types)
    if len(types) > 1:
        minutes_per_unit = minutes_per_unit / len(types)
    return minutes_per_unit * habit_profile.units_per_day * days * MS_PER_MINUTE


# ---------------------------------------------------------------------------
# Health systems
# ---------------------------------------------------------------------------

def health_progress(system: HealthSystem, time_since_quit_ms: float) -> float:
    """Percent of ``system`` restored, capped at 100."""
    progress = (time_since_quit_ms / system.restoration_ms) * 100
    return min(100, progress)


def health_status(system_name: str, progress_percent: float) -> str:
    """Display label for a system at a given progress."""
    if progress_percent >= 100:
        return RESTORED_STATUS
    labels = HEALTH_STATUS_LABELS.get(system_name)
    if labels is None:
        return DEFAULT_STATUS
    low, high = labels
    return high if progress_percent >= STATUS_SPLIT_PERCENT else low


def refresh_health_systems(
    systems: Iterable[HealthSystem], days: int
) -> tuple[HealthSystem, ...]:
    """Recompute progress and status for every system.

    Elapsed time is taken at day granularity, so nothing progresses
    until the first full day has passed.
    """
    time_since_quit_ms = days * MS_PER_DAY
    refreshed = []
    for system in systems:
        progress = health_progress(system, time_since_quit_ms)
        refreshed.append(
            replace(
                system,
                progress_percent=progress,
                current_status=health_status(system.name, progress),
            )
        )
    return tuple(refreshed)


# ---------------------------------------------------------------------------
# Reward vault
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class RewardProgress:
    percent: float
    amount_remaining: float
    unlocked: bool


def reward_progress(saved: float, vault: RewardVault) -> RewardProgress:
    """How far ``saved`` goes toward the vault's target price."""
    if vault.target_price <= 0:
        percent = 100.0
    else:
        percent = min(saved / vault.target_price * 100, 100)
    remaining = max(0, vault.target_price - saved)
    return RewardProgress(percent=percent, amount_remaining=remaining, unlocked=remaining == 0)


# ---------------------------------------------------------------------------
# Aggregate read
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class JourneyMetrics:
    """Everything derived from an ``AppState`` at one instant."""

    days_abstinent: int
    money_saved: float
    life_regained_ms: float
    streak_ms: int
    slip_up_count: int
    health_systems: tuple[HealthSystem, ...]
    reward: RewardProgress


def compute_metrics(state: AppState, now_ms: int) -> JourneyMetrics | None:
    """Derive all journey metrics, or None when onboarding is not complete.

    The day count is clamped to zero here so a relapse timestamp ahead of
    ``now_ms`` (clock skew) never shows negative progress.
    """
    profile = state.user_profile
    if profile is None:
        return None

    streak = state.streak_data
    raw_days = days_abstinent(profile.start_date, streak.last_consumption_date, now_ms)
    if raw_days < 0:
        logger.warning(
            "Abstinence reference point is %d ms in the future; clamping days to 0",
            reference_point(profile.start_date, streak.last_consumption_date) - now_ms,
        )
    days = max(0, raw_days)

    slip_up_count = len(streak.slip_ups)
    saved = money_saved(profile.habit_profile, days, slip_up_count)
    return JourneyMetrics(
        days_abstinent=days,
        money_saved=saved,
        life_regained_ms=life_regained(profile.habit_profile, days),
        streak_ms=streak_ms(profile.start_date, streak.last_consumption_date, now_ms),
        slip_up_count=slip_up_count,
        health_systems=refresh_health_systems(state.health_systems, days),
        reward=reward_progress(saved, profile.reward_vault),
    )
