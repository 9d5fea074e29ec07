"""Craving dampener session: a short guided distraction."""

from __future__ import annotations

import logging
import random

from korastor.domains.cessation.domain_logic.catalog import CravingTask

logger = logging.getLogger(__name__)

SESSION_SECONDS = 90


class CravingDampener:
    """Tracks the active distraction task, if any.

    Tasks are drawn uniformly from the catalog; pass a seeded
    ``random.Random`` for reproducible picks.
    """

    def __init__(self, tasks: list[CravingTask], rng: random.Random | None = None) -> None:
        if not tasks:
            raise ValueError("At least one craving task is required")
        self._tasks = list(tasks)
        self._rng = rng or random.Random()
        self.current_task: CravingTask | None = None
        self.started_at: int | None = None

    @property
    def is_active(self) -> bool:
        return self.current_task is not None

    @property
    def tasks(self) -> list[CravingTask]:
        return list(self._tasks)

    def random_task(self) -> CravingTask:
        return self._rng.choice(self._tasks)

    def start(self, now_ms: int) -> CravingTask:
        """Begin a session with a freshly drawn task (restarts an active one)."""
        self.current_task = self.random_task()
        self.started_at = now_ms
        logger.info("Craving dampener started with task %s", self.current_task.id)
        return self.current_task

    def seconds_left(self, now_ms: int) -> int:
        if self.started_at is None:
            return 0
        elapsed = (now_ms - self.started_at) // 1000
        return max(0, SESSION_SECONDS - elapsed)

    def end(self) -> None:
        self.current_task = None
        self.started_at = None
