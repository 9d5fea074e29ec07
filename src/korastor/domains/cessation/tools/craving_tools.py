"""MCP tools for the craving dampener."""

from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING

from fastmcp import Context, FastMCP

from korastor.domains.cessation.domain_logic.formatting import format_countdown
from korastor.domains.cessation.state import operations

if TYPE_CHECKING:
    from korastor.core.clock import Clock
    from korastor.domains.cessation.cravings.dampener import CravingDampener
    from korastor.domains.cessation.state.store import AppStateStore

logger = logging.getLogger(__name__)


def register_craving_tools(
    mcp: FastMCP,
    store: AppStateStore,
    dampener: CravingDampener,
    clock: Clock,
    *,
    points_per_craving: int = 1,
) -> None:
    """Register craving dampener tools on the MCP server."""

    @mcp.tool
    async def start_craving_dampener(ctx: Context) -> str:
        """Get a short distraction task to ride out a craving."""
        now = clock.now_ms()
        task = dampener.start(now)
        return json.dumps({
            "status": "active",
            "task": task.to_dict(),
            "time_left": format_countdown(dampener.seconds_left(now)),
        })

    @mcp.tool
    async def complete_craving_dampener(ctx: Context) -> str:
        """Finish the craving session and collect your points once the timer runs out."""
        if not dampener.is_active:
            return json.dumps({
                "status": "inactive",
                "message": "No craving session is running. Start one first.",
            })
        await store.ensure_loaded()
        if store.state.user_profile is None:
            return json.dumps({
                "status": "no_journey",
                "message": "No active journey. Complete onboarding to earn Kora points.",
            })

        left = dampener.seconds_left(clock.now_ms())
        if left > 0:
            return json.dumps({
                "status": "in_progress",
                "task": dampener.current_task.to_dict(),
                "time_left": format_countdown(left),
                "message": "Stay with the task until the timer runs out.",
            })

        points = await operations.resist_craving(store, clock, points_per_craving)
        dampener.end()
        return json.dumps({
            "status": "completed",
            "points_awarded": points_per_craving,
            "kora_points": points.to_dict(),
        })

    @mcp.tool
    async def cancel_craving_dampener(ctx: Context) -> str:
        """Leave the craving session without collecting points."""
        was_active = dampener.is_active
        dampener.end()
        return json.dumps({"status": "cancelled" if was_active else "inactive"})
