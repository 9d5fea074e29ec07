"""MCP tools for onboarding: habit profile, north star, reward vault.

Answers are staged in an in-memory draft; ``complete_onboarding`` turns
the draft into the active journey.
"""

from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING

from fastmcp import Context, FastMCP

from korastor.domains.cessation.onboarding.draft import OnboardingError
from korastor.domains.cessation.state import operations

if TYPE_CHECKING:
    from korastor.core.clock import Clock
    from korastor.domains.cessation.onboarding.draft import OnboardingDraft
    from korastor.domains.cessation.state.store import AppStateStore

logger = logging.getLogger(__name__)


def _error(message: str) -> str:
    return json.dumps({"status": "error", "message": message})


def register_onboarding_tools(
    mcp: FastMCP,
    store: AppStateStore,
    draft: OnboardingDraft,
    clock: Clock,
) -> None:
    """Register onboarding tools on the MCP server."""

    @mcp.tool
    async def set_habit_profile(
        ctx: Context,
        types: list[str],
        units_per_day: float,
        cost_per_unit: float,
        nicotine_strength: str = "medium",
    ) -> str:
        """Record what you use and what it costs.

        Args:
            types: One or more of 'smoke', 'vape', 'snus'.
            units_per_day: Cigarettes, pods or tins per day.
            cost_per_unit: Price of one unit in dollars.
            nicotine_strength: 'high', 'medium' or 'low'.
        """
        try:
            profile = draft.set_habit_profile(types, units_per_day, cost_per_unit, nicotine_strength)
        except OnboardingError as exc:
            return _error(str(exc))
        draft.advance_to(2)
        return json.dumps({"status": "saved", "habit_profile": profile.to_dict()})

    @mcp.tool
    async def set_north_star(ctx: Context, north_star: str) -> str:
        """Choose what keeps you going: 'wealth', 'vitality' or 'legacy'.

        Args:
            north_star: The motivation to display alongside your progress.
        """
        try:
            draft.set_north_star(north_star)
        except OnboardingError as exc:
            return _error(str(exc))
        draft.advance_to(3)
        return json.dumps({"status": "saved", "north_star": north_star})

    @mcp.tool
    async def set_reward_vault(
        ctx: Context,
        item_name: str,
        target_price: float,
        image_url: str = "",
    ) -> str:
        """Set the reward your savings are going toward.

        Args:
            item_name: What you are saving for.
            target_price: Its price in dollars.
            image_url: Optional picture of the reward.
        """
        try:
            vault = draft.set_reward_vault(item_name, target_price, image_url or None)
        except OnboardingError as exc:
            return _error(str(exc))
        draft.advance_to(4)
        return json.dumps({"status": "saved", "reward_vault": vault.to_dict()})

    @mcp.tool
    async def move_onboarding_step(ctx: Context, direction: str) -> str:
        """Go to the next or previous onboarding screen.

        Args:
            direction: 'next' or 'back'. Answers already given are kept.
        """
        try:
            step = draft.move(direction)
        except OnboardingError as exc:
            return _error(str(exc))
        return json.dumps({"status": "ok", "current_step": step})

    @mcp.tool
    async def get_onboarding_status(ctx: Context) -> str:
        """Show which onboarding answers are still missing."""
        return json.dumps({"status": "ok", **draft.status()})

    @mcp.tool
    async def complete_onboarding(ctx: Context) -> str:
        """Begin the journey with the answers given so far. The quit clock starts now."""
        await store.ensure_loaded()
        try:
            profile = await operations.complete_onboarding(draft, store, clock)
        except OnboardingError as exc:
            return _error(str(exc))
        return json.dumps({"status": "started", "user_profile": profile.to_dict()})
