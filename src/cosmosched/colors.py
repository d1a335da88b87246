"""Participant color assignment for schedule bars.

Each participant (usually a factory) keeps one palette color across runs.
The service is an explicit object with injected storage; there is no module
level instance.
"""

from __future__ import annotations

import random
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Protocol

import yaml

from .logger import get_logger
from .models import Priority

logger = get_logger()

STORAGE_VERSION = "1.0.0"

SCHEDULE_COLORS: dict[str, str] = {
    "BLUE": "#3b82f6",
    "RED": "#ef4444",
    "GREEN": "#22c55e",
    "YELLOW": "#eab308",
    "PURPLE": "#a855f7",
    "PINK": "#ec4899",
    "INDIGO": "#6366f1",
    "ORANGE": "#f97316",
    "TEAL": "#14b8a6",
    "CYAN": "#06b6d4",
}

PRIORITY_COLORS: dict[Priority, str] = {
    Priority.HIGH: "#ef4444",
    Priority.MEDIUM: "#f59e0b",
    Priority.LOW: "#10b981",
}
DEFAULT_PRIORITY_COLOR = "#6b7280"

_PALETTE = tuple(SCHEDULE_COLORS.values())


def is_valid_color(color: object) -> bool:
    """Check whether a value is one of the palette colors."""
    return isinstance(color, str) and color in _PALETTE


def priority_color(priority: Priority | None) -> str:
    """Bar color for a task priority."""
    if priority is None:
        return DEFAULT_PRIORITY_COLOR
    return PRIORITY_COLORS.get(priority, DEFAULT_PRIORITY_COLOR)


class ColorStorage(Protocol):
    """Where color assignments are kept between runs."""

    def get(self) -> dict[str, str]:
        """Load stored assignments (empty if nothing usable is stored)."""
        ...

    def set(self, assignments: dict[str, str]) -> None:
        """Replace the stored assignments."""
        ...

    def clear(self) -> None:
        """Remove all stored assignments."""
        ...


class MemoryColorStorage:
    """Process-local storage, used in tests and for one-off renders."""

    def __init__(self, assignments: dict[str, str] | None = None) -> None:
        self._assignments = dict(assignments or {})

    def get(self) -> dict[str, str]:
        return dict(self._assignments)

    def set(self, assignments: dict[str, str]) -> None:
        self._assignments = dict(assignments)

    def clear(self) -> None:
        self._assignments = {}


class YamlColorStorage:
    """Versioned YAML document on disk.

    Document shape::

        version: 1.0.0
        assignments: {participant_id: "#3b82f6"}
        last_updated: 2025-07-05T10:00:00+00:00

    Unreadable files, other versions and invalid colors load as nothing.
    Colors are cosmetic, so storage failures are logged and never raised.
    """

    def __init__(self, path: Path | str) -> None:
        self.path = Path(path)

    def get(self) -> dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            with self.path.open(encoding="utf-8") as f:
                data: Any = yaml.safe_load(f)
        except (OSError, yaml.YAMLError) as e:
            logger.warning("Failed to load color assignments from %s: %s", self.path, e)
            return {}

        if not isinstance(data, dict) or data.get("version") != STORAGE_VERSION:  # type: ignore[union-attr]
            logger.debug("Ignoring color storage %s with unknown layout", self.path)
            return {}

        assignments: Any = data.get("assignments") or {}  # type: ignore[union-attr]
        if not isinstance(assignments, dict):
            return {}
        return {
            str(participant): color
            for participant, color in assignments.items()  # type: ignore[union-attr]
            if is_valid_color(color)
        }

    def set(self, assignments: dict[str, str]) -> None:
        document = {
            "version": STORAGE_VERSION,
            "assignments": dict(assignments),
            "last_updated": datetime.now(timezone.utc).isoformat(),
        }
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with self.path.open("w", encoding="utf-8") as f:
                yaml.safe_dump(document, f, sort_keys=False)
        except OSError as e:
            logger.warning("Failed to save color assignments to %s: %s", self.path, e)

    def clear(self) -> None:
        try:
            self.path.unlink(missing_ok=True)
        except OSError as e:
            logger.warning("Failed to clear color assignments at %s: %s", self.path, e)


class ColorAssignmentService:
    """Stable palette colors per participant."""

    def __init__(self, storage: ColorStorage | None = None, rng: random.Random | None = None):
        self.storage: ColorStorage = storage or MemoryColorStorage()
        self.rng = rng or random.Random()
        self._assignments: dict[str, str] | None = None

    def _loaded(self) -> dict[str, str]:
        if self._assignments is None:
            self._assignments = self.storage.get()
        return self._assignments

    def color_for(self, participant_id: str) -> str:
        """Get a participant's color, picking and storing one on first use."""
        assignments = self._loaded()
        existing = assignments.get(participant_id)
        if existing is not None:
            return existing

        color = self.rng.choice(_PALETTE)
        assignments[participant_id] = color
        self.storage.set(assignments)
        logger.debug("Assigned color %s to %s", color, participant_id)
        return color

    def set_color(self, participant_id: str, color: str) -> None:
        """Pin a participant to a palette color.

        Raises:
            ValueError: If the color is not in the palette
        """
        if not is_valid_color(color):
            raise ValueError(f"Invalid color: {color}")
        assignments = self._loaded()
        assignments[participant_id] = color
        self.storage.set(assignments)

    def assignments(self) -> dict[str, str]:
        """Copy of all current assignments."""
        return dict(self._loaded())

    def has_color(self, participant_id: str) -> bool:
        return participant_id in self._loaded()

    def clear(self) -> None:
        """Forget every assignment, including stored ones."""
        self._assignments = {}
        self.storage.clear()
