"""Static content catalog. Reads craving tasks and slip-up advice from YAML."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

from korastor.domains.cessation.domain_logic.models import TRIGGER_TYPES

logger = logging.getLogger(__name__)

CATALOG_DIR = Path(__file__).resolve().parent.parent / "catalog"

TASK_TYPES = ("find", "match", "breathe")


class CatalogError(Exception):
    """Raised when a catalog file is missing or malformed."""


@dataclass(frozen=True)
class CravingTask:
    """A short distraction used to ride out a craving."""

    id: str
    type: str
    instruction: str
    duration: int  # seconds

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "type": self.type,
            "instruction": self.instruction,
            "duration": self.duration,
        }


def _read_yaml(path: Path) -> dict[str, Any]:
    try:
        with open(path) as f:
            data = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as exc:
        raise CatalogError(f"Failed to read catalog file {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise CatalogError(f"Catalog file {path} must contain a mapping")
    return data


def load_craving_tasks(path: str | Path | None = None) -> list[CravingTask]:
    """Parse the craving task list. Raises CatalogError if it is empty or invalid."""
    path = Path(path) if path is not None else CATALOG_DIR / "craving_tasks.yaml"
    data = _read_yaml(path)

    tasks = []
    for entry in data.get("tasks") or []:
        try:
            task = CravingTask(
                id=str(entry["id"]),
                type=entry["type"],
                instruction=str(entry["instruction"]),
                duration=int(entry["duration"]),
            )
        except (KeyError, TypeError, ValueError) as exc:
            raise CatalogError(f"Invalid craving task in {path}: {entry!r}") from exc
        if task.type not in TASK_TYPES:
            raise CatalogError(f"Unknown craving task type {task.type!r} in {path}")
        tasks.append(task)

    if not tasks:
        raise CatalogError(f"No craving tasks defined in {path}")
    logger.debug("Loaded %d craving tasks from %s", len(tasks), path)
    return tasks


def load_trigger_advice(path: str | Path | None = None) -> dict[str, str]:
    """Parse per-trigger advice. Every known trigger must have an entry."""
    path = Path(path) if path is not None else CATALOG_DIR / "trigger_advice.yaml"
    advice = _read_yaml(path).get("advice") or {}

    missing = [t for t in TRIGGER_TYPES if t not in advice]
    if missing:
        raise CatalogError(f"Missing advice for triggers {missing} in {path}")
    return {trigger: str(advice[trigger]) for trigger in TRIGGER_TYPES}
