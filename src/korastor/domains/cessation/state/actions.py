"""The closed set of state mutations and the reducer that applies them.

Every change to ``AppState`` goes through :func:`reduce`. Each action
replaces one sub-aggregate wholesale; there are no partial field patches.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Union

from korastor.domains.cessation.domain_logic.models import (
    AppState,
    HealthSystem,
    KoraPoints,
    StreakData,
    UserProfile,
    default_app_state,
)


@dataclass(frozen=True)
class SetUserProfile:
    profile: UserProfile | None


@dataclass(frozen=True)
class SetStreakData:
    streak_data: StreakData


@dataclass(frozen=True)
class UpdateMoneySaved:
    amount: float


@dataclass(frozen=True)
class UpdateLifeRegained:
    ms: float


@dataclass(frozen=True)
class UpdateKoraPoints:
    points: KoraPoints


@dataclass(frozen=True)
class UpdateHealthSystems:
    systems: tuple[HealthSystem, ...]

    def __post_init__(self) -> None:
        object.__setattr__(self, "systems", tuple(self.systems))


@dataclass(frozen=True)
class LoadState:
    """Replace the whole aggregate, e.g. after reading it from storage."""

    state: AppState


@dataclass(frozen=True)
class ResetJourney:
    """Drop the active journey and return to a fresh-install state."""


Action = Union[
    SetUserProfile,
    SetStreakData,
    UpdateMoneySaved,
    UpdateLifeRegained,
    UpdateKoraPoints,
    UpdateHealthSystems,
    LoadState,
    ResetJourney,
]


def reduce(state: AppState, action: Action) -> AppState:
    """Return the state that results from applying ``action`` to ``state``."""
    if isinstance(action, SetUserProfile):
        return replace(state, user_profile=action.profile)
    if isinstance(action, SetStreakData):
        return replace(state, streak_data=action.streak_data)
    if isinstance(action, UpdateMoneySaved):
        return replace(state, money_saved=action.amount)
    if isinstance(action, UpdateLifeRegained):
        return replace(state, life_regained_ms=action.ms)
    if isinstance(action, UpdateKoraPoints):
        return replace(state, kora_points=action.points)
    if isinstance(action, UpdateHealthSystems):
        return replace(state, health_systems=action.systems)
    if isinstance(action, LoadState):
        return action.state
    if isinstance(action, ResetJourney):
        return default_app_state()
    raise TypeError(f"Unknown action: {type(action).__name__}")
