"""Onboarding draft. Stages the user's answers before a journey begins.

The draft lives only in memory. Once every answer is present it is turned
into a ``UserProfile`` and reset.
"""

from __future__ import annotations

import logging
import math
from typing import Iterable

from korastor.domains.cessation.domain_logic.models import (
    HABIT_TYPES,
    NORTH_STARS,
    HabitProfile,
    RewardVault,
    UserProfile,
)

logger = logging.getLogger(__name__)

# 0 = welcome, 1 = habit, 2 = motivation, 3 = reward, 4 = confirm
FIRST_STEP = 0
LAST_STEP = 4


class OnboardingError(Exception):
    """Raised for an invalid onboarding answer or an incomplete draft."""


class JourneyAlreadyActiveError(OnboardingError):
    """Raised when onboarding is completed while a journey is running."""


class OnboardingDraft:
    """Collects habit profile, north star and reward vault answers."""

    def __init__(self) -> None:
        self.habit_profile: HabitProfile | None = None
        self.north_star: str | None = None
        self.reward_vault: RewardVault | None = None
        self.current_step = FIRST_STEP

    def set_habit_profile(
        self,
        types: Iterable[str],
        units_per_day: float,
        cost_per_unit: float,
        nicotine_strength: str = "medium",
    ) -> HabitProfile:
        types = tuple(dict.fromkeys(types))  # de-duplicate, keep selection order
        if not types:
            raise OnboardingError("Select at least one habit type")
        unknown = [t for t in types if t not in HABIT_TYPES]
        if unknown:
            raise OnboardingError(f"Unknown habit types: {unknown}. Valid: {HABIT_TYPES}")
        if not math.isfinite(units_per_day) or not math.isfinite(cost_per_unit):
            raise OnboardingError("Units per day and cost per unit must be finite numbers")
        if units_per_day <= 0:
            raise OnboardingError("Units per day must be greater than zero")
        if cost_per_unit < 0:
            raise OnboardingError("Cost per unit cannot be negative")
        try:
            profile = HabitProfile(types, units_per_day, cost_per_unit, nicotine_strength)
        except ValueError as exc:
            raise OnboardingError(str(exc)) from exc
        self.habit_profile = profile
        return profile

    def set_north_star(self, north_star: str) -> None:
        if north_star not in NORTH_STARS:
            raise OnboardingError(f"Unknown north star {north_star!r}. Valid: {NORTH_STARS}")
        self.north_star = north_star

    def set_reward_vault(
        self, item_name: str, target_price: float, image_url: str | None = None
    ) -> RewardVault:
        item_name = item_name.strip()
        if not item_name:
            raise OnboardingError("Reward item name must not be empty")
        if not math.isfinite(target_price):
            raise OnboardingError("Target price must be a finite number")
        if target_price <= 0:
            raise OnboardingError("Target price must be greater than zero")
        vault = RewardVault(item_name, target_price, image_url)
        self.reward_vault = vault
        return vault

    def move(self, direction: str) -> int:
        """Step forward ('next') or back ('back') through the screens."""
        if direction == "next":
            return self.next_step()
        if direction == "back":
            return self.previous_step()
        raise OnboardingError(f"Unknown direction {direction!r}. Valid: ['next', 'back']")

    def next_step(self) -> int:
        self.current_step = min(self.current_step + 1, LAST_STEP)
        return self.current_step

    def previous_step(self) -> int:
        self.current_step = max(self.current_step - 1, FIRST_STEP)
        return self.current_step

    def advance_to(self, step: int) -> int:
        """Move forward to ``step``; never moves backward."""
        self.current_step = max(self.current_step, min(step, LAST_STEP))
        return self.current_step

    def reset(self) -> None:
        self.habit_profile = None
        self.north_star = None
        self.reward_vault = None
        self.current_step = FIRST_STEP

    def is_complete(self) -> bool:
        return (
            self.habit_profile is not None
            and self.north_star is not None
            and self.reward_vault is not None
        )

    def missing(self) -> list[str]:
        """Names of the answers still outstanding."""
        fields = {
            "habit_profile": self.habit_profile,
            "north_star": self.north_star,
            "reward_vault": self.reward_vault,
        }
        return [name for name, value in fields.items() if value is None]

    def build_profile(self, now_ms: int) -> UserProfile:
        """The profile a journey started at ``now_ms`` would use."""
        if not self.is_complete():
            raise OnboardingError(f"Onboarding incomplete; missing {self.missing()}")
        return UserProfile(
            habit_profile=self.habit_profile,
            north_star=self.north_star,
            reward_vault=self.reward_vault,
            start_date=now_ms,
        )

    def status(self) -> dict:
        return {
            "current_step": self.current_step,
            "complete": self.is_complete(),
            "missing": self.missing(),
            "habit_profile": self.habit_profile.to_dict() if self.habit_profile else None,
            "north_star": self.north_star,
            "reward_vault": self.reward_vault.to_dict() if self.reward_vault else None,
        }
