"""MCP tools for the active journey: dashboard, health, rewards, slip-ups, reset."""

from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING, Any

from fastmcp import Context, FastMCP

from korastor.domains.cessation.domain_logic.formatting import (
    format_currency,
    format_percent,
    format_streak,
    format_time_regained,
)
from korastor.domains.cessation.domain_logic.models import EMOTION_TYPES, TRIGGER_TYPES
from korastor.domains.cessation.state import operations

if TYPE_CHECKING:
    from korastor.core.clock import Clock
    from korastor.domains.cessation.state.store import AppStateStore

logger = logging.getLogger(__name__)


def _payload(data: dict[str, Any]) -> str:
    # Strict JSON: NaN or Infinity in a metric raises instead of leaking out
    return json.dumps(data, allow_nan=False)


_NO_JOURNEY = json.dumps({
    "status": "no_journey",
    "message": "No active journey. Complete onboarding to start tracking.",
})


def register_journey_tools(
    mcp: FastMCP,
    store: AppStateStore,
    clock: Clock,
    *,
    trigger_advice: dict[str, str],
    currency_locale: str = "en-US",
) -> None:
    """Register journey tools on the MCP server."""

    def money(amount: float) -> str:
        return format_currency(amount, currency_locale)

    @mcp.tool
    async def get_dashboard(ctx: Context) -> str:
        """Show time clean, money saved, life regained and points."""
        await store.ensure_loaded()
        metrics = await operations.refresh_metrics(store, clock)
        if metrics is None:
            return _NO_JOURNEY

        state = store.state
        return _payload({
            "status": "ok",
            "north_star": state.user_profile.north_star,
            "on_first_streak": state.streak_data.last_consumption_date is None,
            "days_abstinent": metrics.days_abstinent,
            "streak": format_streak(metrics.streak_ms),
            "streak_ms": metrics.streak_ms,
            "money_saved": round(metrics.money_saved, 2),
            "money_saved_display": money(metrics.money_saved),
            "life_regained_ms": metrics.life_regained_ms,
            "life_regained_display": format_time_regained(metrics.life_regained_ms),
            "slip_ups": metrics.slip_up_count,
            "total_days_abstinent": state.streak_data.total_days_abstinent,
            "kora_points": state.kora_points.to_dict(),
            "reward_progress": format_percent(metrics.reward.percent),
        })

    @mcp.tool
    async def get_health_systems(ctx: Context) -> str:
        """Show recovery progress for blood oxygen, taste/smell, lungs and heart."""
        await store.ensure_loaded()
        metrics = await operations.refresh_metrics(store, clock)
        if metrics is None:
            return _NO_JOURNEY

        systems: list[dict[str, Any]] = []
        for system in metrics.health_systems:
            entry = system.to_dict()
            entry["progressDisplay"] = format_percent(system.progress_percent)
            systems.append(entry)
        return _payload({
            "status": "ok",
            "days_abstinent": metrics.days_abstinent,
            "health_systems": systems,
        })

    @mcp.tool
    async def get_reward_vault(ctx: Context) -> str:
        """Show how close your savings are to your reward."""
        await store.ensure_loaded()
        metrics = await operations.refresh_metrics(store, clock)
        if metrics is None:
            return _NO_JOURNEY

        vault = store.state.user_profile.reward_vault
        return _payload({
            "status": "ok",
            "item_name": vault.item_name,
            "target_price": money(vault.target_price),
            "money_saved": money(metrics.money_saved),
            "amount_remaining": money(metrics.reward.amount_remaining),
            "progress": format_percent(metrics.reward.percent),
            "unlocked": metrics.reward.unlocked,
        })

    @mcp.tool
    async def log_slip_up(ctx: Context, trigger: str, emotion: str) -> str:
        """Log a slip-up. Your history is kept; the streak restarts from now.

        Args:
            trigger: What set it off: 'stress', 'social', 'alcohol' or 'boredom'.
            emotion: How you feel about it: 'anxious', 'guilty' or 'fine'.
        """
        if trigger not in TRIGGER_TYPES:
            return json.dumps({
                "status": "error",
                "message": f"Unknown trigger {trigger!r}. Valid: {list(TRIGGER_TYPES)}",
            })
        if emotion not in EMOTION_TYPES:
            return json.dumps({
                "status": "error",
                "message": f"Unknown emotion {emotion!r}. Valid: {list(EMOTION_TYPES)}",
            })

        await store.ensure_loaded()
        try:
            slip_up = await operations.log_slip_up(store, trigger, emotion, clock)
        except operations.NoActiveJourneyError:
            return _NO_JOURNEY
        return json.dumps({
            "status": "logged",
            "slip_up": slip_up.to_dict(),
            "total_slip_ups": len(store.state.streak_data.slip_ups),
            "advice": trigger_advice.get(trigger, ""),
        })

    @mcp.tool
    async def reset_journey(ctx: Context, confirm: str = "") -> str:
        """Erase the current journey and start over from onboarding.

        Args:
            confirm: Must be exactly 'RESET' to proceed. Safety gate.
        """
        if confirm != "RESET":
            return json.dumps({
                "status": "cancelled",
                "message": (
                    "To reset your journey, call this tool with confirm='RESET'. "
                    "Progress, slip-up history and points will be erased."
                ),
            })
        await store.ensure_loaded()
        await operations.reset_journey(store)
        return json.dumps({"status": "reset", "message": "Journey reset. Start onboarding again."})
