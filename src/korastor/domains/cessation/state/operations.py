"""Journey operations: the named mutations callers use.

Each operation reads the wall clock once through the injected ``Clock``
and dispatches actions on the store; none of them touch storage directly.
"""

from __future__ import annotations

import logging

from korastor.core.clock import Clock
from korastor.domains.cessation.domain_logic.metrics import (
    JourneyMetrics,
    compute_metrics,
    days_abstinent,
)
from korastor.domains.cessation.domain_logic.models import (
    MS_PER_DAY,
    KoraPoints,
    SlipUp,
    StreakData,
    UserProfile,
)
from korastor.domains.cessation.onboarding.draft import JourneyAlreadyActiveError, OnboardingDraft
from korastor.domains.cessation.state.actions import (
    ResetJourney,
    SetStreakData,
    SetUserProfile,
    UpdateHealthSystems,
    UpdateKoraPoints,
    UpdateLifeRegained,
    UpdateMoneySaved,
)
from korastor.domains.cessation.state.store import AppStateStore

logger = logging.getLogger(__name__)


class NoActiveJourneyError(Exception):
    """Raised when an operation needs a user profile and there is none."""


def _require_profile(store: AppStateStore) -> UserProfile:
    profile = store.state.user_profile
    if profile is None:
        raise NoActiveJourneyError("No active journey; complete onboarding first")
    return profile


async def complete_onboarding(
    draft: OnboardingDraft, store: AppStateStore, clock: Clock
) -> UserProfile:
    """Start a journey from a complete draft, then clear the draft.

    Refused while a journey is active; the profile and slip-up history are
    only discarded through ``reset_journey``.
    """
    if store.state.user_profile is not None:
        raise JourneyAlreadyActiveError(
            "A journey is already active. Call reset_journey first to start over."
        )
    profile = draft.build_profile(clock.now_ms())
    await store.dispatch(SetUserProfile(profile))
    await store.dispatch(SetStreakData(StreakData()))
    draft.reset()
    logger.info("Journey started (north star: %s)", profile.north_star)
    return profile


async def log_slip_up(
    store: AppStateStore, trigger: str, emotion: str, clock: Clock
) -> SlipUp:
    """Record a relapse and restart the abstinence clock from now."""
    profile = _require_profile(store)
    now = clock.now_ms()
    streak = store.state.streak_data
    slip_up = SlipUp(timestamp=now, trigger=trigger, emotion=emotion, units_consumed=1)
    completed = days_abstinent(profile.start_date, streak.last_consumption_date, now)
    await store.dispatch(SetStreakData(streak.with_slip_up(slip_up, completed_days=completed)))
    logger.info(
        "Slip-up logged (trigger=%s, emotion=%s); %d total",
        trigger,
        emotion,
        len(store.state.streak_data.slip_ups),
    )
    return slip_up


def roll_over_points(points: KoraPoints, now_ms: int) -> KoraPoints:
    """Zero ``earned_today`` when the last award was on an earlier UTC day."""
    if points.last_earned_at is None:
        return points
    if points.last_earned_at // MS_PER_DAY < now_ms // MS_PER_DAY:
        return KoraPoints(
            total=points.total,
            earned_today=0,
            freeze_streak_used=points.freeze_streak_used,
            last_earned_at=points.last_earned_at,
        )
    return points


async def resist_craving(store: AppStateStore, clock: Clock, points: int = 1) -> KoraPoints:
    """Award points for getting through a craving."""
    if points < 0:
        raise ValueError("points must not be negative")
    now = clock.now_ms()
    current = roll_over_points(store.state.kora_points, now)
    awarded = KoraPoints(
        total=current.total + points,
        earned_today=current.earned_today + points,
        freeze_streak_used=current.freeze_streak_used,
        last_earned_at=now,
    )
    await store.dispatch(UpdateKoraPoints(awarded))
    logger.info("Awarded %d point(s); total now %d", points, awarded.total)
    return awarded


async def reset_journey(store: AppStateStore) -> None:
    """Forget the journey entirely; the user goes back to onboarding."""
    await store.dispatch(ResetJourney())
    logger.warning("Journey reset to defaults")


async def refresh_metrics(store: AppStateStore, clock: Clock) -> JourneyMetrics | None:
    """Recompute metrics and overwrite the cached values in the aggregate."""
    now = clock.now_ms()
    metrics = compute_metrics(store.state, now)
    if metrics is None:
        return None

    state = store.state
    if state.money_saved != metrics.money_saved:
        await store.dispatch(UpdateMoneySaved(metrics.money_saved))
    if state.life_regained_ms != metrics.life_regained_ms:
        await store.dispatch(UpdateLifeRegained(metrics.life_regained_ms))
    if state.health_systems != metrics.health_systems:
        await store.dispatch(UpdateHealthSystems(metrics.health_systems))

    points = roll_over_points(store.state.kora_points, now)
    if points != store.state.kora_points:
        await store.dispatch(UpdateKoraPoints(points))
    return metrics
