"""Cessation journey domain model and serialization helpers.

All entities are plain dataclasses. ``to_dict`` emits the camelCase field
names used by the persisted blob; ``from_dict`` is strict and raises
``KeyError``/``TypeError``/``ValueError`` on structurally incompatible data.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any, Literal

HabitType = Literal["smoke", "vape", "snus"]
NicotineStrength = Literal["high", "medium", "low"]
NorthStar = Literal["wealth", "vitality", "legacy"]
TriggerType = Literal["stress", "social", "alcohol", "boredom"]
EmotionType = Literal["anxious", "guilty", "fine"]

HABIT_TYPES: tuple[str, ...] = ("smoke", "vape", "snus")
NICOTINE_STRENGTHS: tuple[str, ...] = ("high", "medium", "low")
NORTH_STARS: tuple[str, ...] = ("wealth", "vitality", "legacy")
TRIGGER_TYPES: tuple[str, ...] = ("stress", "social", "alcohol", "boredom")
EMOTION_TYPES: tuple[str, ...] = ("anxious", "guilty", "fine")

MS_PER_MINUTE = 60 * 1000
MS_PER_HOUR = 60 * MS_PER_MINUTE
MS_PER_DAY = 24 * MS_PER_HOUR


def _check_choice(value: Any, choices: tuple[str, ...], label: str) -> str:
    if value not in choices:
        raise ValueError(f"Invalid {label}: {value!r}. Valid: {choices}")
    return value


def _number(value: Any, label: str) -> float:
    # bool is an int subclass; a stored true/false is never a valid amount
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise TypeError(f"{label} must be a number, got {type(value).__name__}")
    if not math.isfinite(value):
        raise ValueError(f"{label} must be finite, got {value!r}")
    return value


def _optional_number(value: Any, label: str) -> float | None:
    return None if value is None else _number(value, label)


# ---------------------------------------------------------------------------
# Profile
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class HabitProfile:
    """What the user consumed and what it cost them."""

    types: tuple[str, ...]
    units_per_day: float
    cost_per_unit: float
    nicotine_strength: str = "medium"

    def __post_init__(self) -> None:
        object.__setattr__(self, "types", tuple(self.types))
        for habit in self.types:
            _check_choice(habit, HABIT_TYPES, "habit type")
        _check_choice(self.nicotine_strength, NICOTINE_STRENGTHS, "nicotine strength")

    @property
    def daily_cost(self) -> float:
        return self.units_per_day * self.cost_per_unit

    def to_dict(self) -> dict[str, Any]:
        return {
            "types": list(self.types),
            "unitsPerDay": self.units_per_day,
            "costPerUnit": self.cost_per_unit,
            "nicotineStrength": self.nicotine_strength,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> HabitProfile:
        types = data["types"]
        if not isinstance(types, list):
            raise TypeError("types must be a list")
        return cls(
            types=tuple(types),
            units_per_day=_number(data["unitsPerDay"], "unitsPerDay"),
            cost_per_unit=_number(data["costPerUnit"], "costPerUnit"),
            nicotine_strength=data["nicotineStrength"],
        )


@dataclass(frozen=True)
class RewardVault:
    """The savings goal money saved is measured against."""

    item_name: str
    target_price: float
    image_url: str | None = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "itemName": self.item_name,
            "targetPrice": self.target_price,
        }
        if self.image_url is not None:
            data["imageUrl"] = self.image_url
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> RewardVault:
        item_name = data["itemName"]
        if not isinstance(item_name, str):
            raise TypeError("itemName must be a string")
        return cls(
            item_name=item_name,
            target_price=_number(data["targetPrice"], "targetPrice"),
            image_url=data.get("imageUrl"),
        )


@dataclass(frozen=True)
class UserProfile:
    """The active journey: habit, motivation, goal and quit start time."""

    habit_profile: HabitProfile
    north_star: str
    reward_vault: RewardVault
    start_date: int  # epoch ms

    def __post_init__(self) -> None:
        _check_choice(self.north_star, NORTH_STARS, "north star")

    def to_dict(self) -> dict[str, Any]:
        return {
            "habitProfile": self.habit_profile.to_dict(),
            "northStar": self.north_star,
            "rewardVault": self.reward_vault.to_dict(),
            "startDate": self.start_date,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> UserProfile:
        return cls(
            habit_profile=HabitProfile.from_dict(data["habitProfile"]),
            north_star=data["northStar"],
            reward_vault=RewardVault.from_dict(data["rewardVault"]),
            start_date=int(_number(data["startDate"], "startDate")),
        )


# ---------------------------------------------------------------------------
# Streak ledger
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class SlipUp:
    """A logged relapse. Never mutated once recorded."""

    timestamp: int  # epoch ms
    trigger: str
    emotion: str
    units_consumed: int = 1

    def __post_init__(self) -> None:
        _check_choice(self.trigger, TRIGGER_TYPES, "trigger")
        _check_choice(self.emotion, EMOTION_TYPES, "emotion")

    def to_dict(self) -> dict[str, Any]:
        return {
            "timestamp": self.timestamp,
            "trigger": self.trigger,
            "emotion": self.emotion,
            "unitsConsumed": self.units_consumed,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> SlipUp:
        return cls(
            timestamp=int(_number(data["timestamp"], "timestamp")),
            trigger=data["trigger"],
            emotion=data["emotion"],
            units_consumed=int(_number(data["unitsConsumed"], "unitsConsumed")),
        )


@dataclass(frozen=True)
class StreakData:
    """Abstinence ledger.

    ``current_streak`` is kept for blob compatibility only; the live streak
    is derived from timestamps by the metrics engine.
    """

    last_consumption_date: int | None = None  # epoch ms; None = use start date
    current_streak: int = 0
    total_days_abstinent: int = 0
    slip_ups: tuple[SlipUp, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "slip_ups", tuple(self.slip_ups))

    def with_slip_up(self, slip_up: SlipUp, completed_days: int = 0) -> StreakData:
        """Append a slip-up and move the abstinence reference point to it.

        ``completed_days`` (whole days of the streak that just ended) is
        banked into ``total_days_abstinent``.
        """
        return StreakData(
            last_consumption_date=slip_up.timestamp,
            current_streak=0,
            total_days_abstinent=self.total_days_abstinent + max(0, completed_days),
            slip_ups=self.slip_ups + (slip_up,),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "lastConsumptionDate": self.last_consumption_date,
            "currentStreak": self.current_streak,
            "totalDaysAbstinent": self.total_days_abstinent,
            "slipUps": [s.to_dict() for s in self.slip_ups],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> StreakData:
        last = _optional_number(data["lastConsumptionDate"], "lastConsumptionDate")
        slip_ups = data["slipUps"]
        if not isinstance(slip_ups, list):
            raise TypeError("slipUps must be a list")
        return cls(
            last_consumption_date=None if last is None else int(last),
            current_streak=int(_number(data["currentStreak"], "currentStreak")),
            total_days_abstinent=int(_number(data["totalDaysAbstinent"], "totalDaysAbstinent")),
            slip_ups=tuple(SlipUp.from_dict(s) for s in slip_ups),
        )


# ---------------------------------------------------------------------------
# Health systems
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class HealthSystem:
    """One simulated physiological recovery track."""

    name: str
    time_to_restoration: str
    restoration_ms: int
    progress_percent: float = 0.0
    current_status: str = ""

    def __post_init__(self) -> None:
        if self.restoration_ms <= 0:
            raise ValueError(
                f"restoration_ms must be positive for {self.name!r}, got {self.restoration_ms}"
            )

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "timeToRestoration": self.time_to_restoration,
            "restorationMs": self.restoration_ms,
            "progressPercent": self.progress_percent,
            "currentStatus": self.current_status,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> HealthSystem:
        return cls(
            name=data["name"],
            time_to_restoration=data["timeToRestoration"],
            restoration_ms=int(_number(data["restorationMs"], "restorationMs")),
            progress_percent=_number(data["progressPercent"], "progressPercent"),
            current_status=data["currentStatus"],
        )


# Seeded at first run. Statuses match health_status(name, 0).
DEFAULT_HEALTH_SYSTEMS: tuple[HealthSystem, ...] = (
    HealthSystem("Blood Oxygen", "8 Hours", 8 * MS_PER_HOUR, 0.0, "Improving"),
    HealthSystem("Taste/Smell", "48 Hours", 48 * MS_PER_HOUR, 0.0, "Nerves Reconnecting"),
    HealthSystem("Lungs", "1 - 9 Months", 9 * 30 * MS_PER_DAY, 0.0, "Cilia Regeneration"),
    HealthSystem("Heart Risk", "1 Year", 365 * MS_PER_DAY, 0.0, "Decreasing Load"),
)


# ---------------------------------------------------------------------------
# Points and root aggregate
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class KoraPoints:
    """Gamification counter awarded for resisting cravings."""

    total: int = 0
    earned_today: int = 0
    freeze_streak_used: bool = False
    last_earned_at: int | None = None  # epoch ms of the last award

    def to_dict(self) -> dict[str, Any]:
        return {
            "total": self.total,
            "earnedToday": self.earned_today,
            "freezeStreakUsed": self.freeze_streak_used,
            "lastEarnedAt": self.last_earned_at,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> KoraPoints:
        freeze = data["freezeStreakUsed"]
        if not isinstance(freeze, bool):
            raise TypeError("freezeStreakUsed must be a boolean")
        # Blobs written before the rollover field existed lack lastEarnedAt
        last = _optional_number(data.get("lastEarnedAt"), "lastEarnedAt")
        return cls(
            total=int(_number(data["total"], "total")),
            earned_today=int(_number(data["earnedToday"], "earnedToday")),
            freeze_streak_used=freeze,
            last_earned_at=None if last is None else int(last),
        )


@dataclass(frozen=True)
class AppState:
    """Root aggregate owned by the application state store.

    ``money_saved`` and ``life_regained_ms`` are display caches of metrics
    engine output, overwritten on every refresh.
    """

    user_profile: UserProfile | None = None
    streak_data: StreakData = field(default_factory=StreakData)
    health_systems: tuple[HealthSystem, ...] = DEFAULT_HEALTH_SYSTEMS
    kora_points: KoraPoints = field(default_factory=KoraPoints)
    money_saved: float = 0.0
    life_regained_ms: float = 0.0

    def __post_init__(self) -> None:
        object.__setattr__(self, "health_systems", tuple(self.health_systems))

    def to_dict(self) -> dict[str, Any]:
        return {
            "userProfile": self.user_profile.to_dict() if self.user_profile else None,
            "streakData": self.streak_data.to_dict(),
            "healthSystems": [s.to_dict() for s in self.health_systems],
            "koraPoints": self.kora_points.to_dict(),
            "moneySaved": self.money_saved,
            "lifeRegainedMs": self.life_regained_ms,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> AppState:
        if not isinstance(data, dict):
            raise TypeError(f"AppState blob must be an object, got {type(data).__name__}")
        profile = data["userProfile"]
        systems = data["healthSystems"]
        if not isinstance(systems, list):
            raise TypeError("healthSystems must be a list")
        return cls(
            user_profile=UserProfile.from_dict(profile) if profile is not None else None,
            streak_data=StreakData.from_dict(data["streakData"]),
            health_systems=tuple(HealthSystem.from_dict(s) for s in systems),
            kora_points=KoraPoints.from_dict(data["koraPoints"]),
            money_saved=_number(data["moneySaved"], "moneySaved"),
            life_regained_ms=_number(data["lifeRegainedMs"], "lifeRegainedMs"),
        )


def default_app_state() -> AppState:
    """Return the state a fresh install starts from."""
    return AppState()
