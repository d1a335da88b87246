"""Day-grid geometry for the timeline view.

The visible window is a contiguous list of calendar days, each ``cell_width``
pixels wide. Bars are placed at ``day index * cell_width`` and are at least
one cell wide. Pixel positions map back to the day under them, clamped to the
window.
"""

from __future__ import annotations

import bisect
import math
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from datetime import date
from enum import Enum

from .dates import day_window
from .logger import get_logger
from .models import ScheduledTask

logger = get_logger()

DEFAULT_CELL_WIDTH = 50


class SnapMode(str, Enum):
    """Where within a cell a snapped coordinate lands."""

    START = "start"
    CENTER = "center"
    END = "end"


@dataclass(frozen=True)
class GridPosition:
    """Pixel placement of a bar within the visible window."""

    x: float
    width: float
    start_index: int
    duration: int

    @property
    def is_visible(self) -> bool:
        """Whether the bar lands inside the window."""
        return self.width > 0


def _check_cell_width(cell_width: float) -> None:
    if cell_width <= 0:
        raise ValueError(f"cell_width must be positive, got {cell_width}")


def _off_screen(cell_width: float) -> GridPosition:
    return GridPosition(x=-cell_width, width=0, start_index=-1, duration=0)


def to_pixels(
    start: date,
    end: date,
    visible_days: Sequence[date],
    cell_width: float = DEFAULT_CELL_WIDTH,
) -> GridPosition:
    """Place a date range on the visible day grid.

    A range that starts before the window is clipped to the first visible day.
    A range that starts after the window, ends before it, or meets an empty
    window is off-screen (``x=-cell_width, width=0``). An inverted range is
    drawn as a single day.

    Raises:
        ValueError: If cell_width is not positive
    """
    _check_cell_width(cell_width)
    if not visible_days:
        return _off_screen(cell_width)

    if end < start:
        logger.warning("Inverted range %s -> %s drawn as a single day", start, end)
        end = start

    first, last = visible_days[0], visible_days[-1]
    if start > last or end < first:
        return _off_screen(cell_width)

    if start < first:
        index = 0
        duration = (end - first).days + 1
    else:
        index = bisect.bisect_left(visible_days, start)
        duration = (end - start).days + 1

    return GridPosition(
        x=index * cell_width,
        width=max(cell_width, duration * cell_width),
        start_index=index,
        duration=duration,
    )


def to_date(
    x: float,
    visible_days: Sequence[date],
    cell_width: float = DEFAULT_CELL_WIDTH,
) -> date:
    """Get the day under a pixel coordinate, clamped to the window.

    Raises:
        ValueError: If the window is empty or cell_width is not positive
    """
    _check_cell_width(cell_width)
    if not visible_days:
        raise ValueError("Cannot map a pixel to a date in an empty window")
    index = math.floor(x / cell_width)
    return visible_days[max(0, min(index, len(visible_days) - 1))]


class GanttPositionMapper:
    """Converts between calendar days and pixels for one visible window."""

    def __init__(self, visible_days: Sequence[date], cell_width: float = DEFAULT_CELL_WIDTH):
        _check_cell_width(cell_width)
        self.visible_days = list(visible_days)
        self.cell_width = cell_width
        self._index = {day: i for i, day in enumerate(self.visible_days)}

    @classmethod
    def window(
        cls, start: date, days: int, cell_width: float = DEFAULT_CELL_WIDTH
    ) -> GanttPositionMapper:
        """Mapper for ``days`` contiguous days from ``start``."""
        return cls(day_window(start, days), cell_width)

    @property
    def total_width(self) -> float:
        """Pixel width of the whole window."""
        return len(self.visible_days) * self.cell_width

    def day_index(self, day: date) -> int | None:
        """Index of a day within the window (None if not visible)."""
        return self._index.get(day)

    def date_to_pixel(self, day: date) -> float:
        """Left edge of a day relative to the window start (may be negative)."""
        if not self.visible_days:
            return 0
        return (day - self.visible_days[0]).days * self.cell_width

    def to_pixels(self, start: date, end: date) -> GridPosition:
        """Place a date range on this window."""
        return to_pixels(start, end, self.visible_days, self.cell_width)

    def to_date(self, x: float) -> date:
        """Get the day under a pixel coordinate."""
        return to_date(x, self.visible_days, self.cell_width)

    def snap_to_grid(self, x: float, mode: SnapMode = SnapMode.START) -> float:
        """Snap a pixel coordinate to the cell it falls in."""
        cell = math.floor(x / self.cell_width)
        if mode == SnapMode.CENTER:
            return cell * self.cell_width + self.cell_width / 2
        if mode == SnapMode.END:
            return (cell + 1) * self.cell_width
        return cell * self.cell_width

    def positions(self, tasks: Iterable[ScheduledTask]) -> dict[str, GridPosition]:
        """Place every task, keyed by task id."""
        result = {task.id: self.to_pixels(task.start_date, task.end_date) for task in tasks}
        logger.debug(
            "Placed %d tasks (%d visible) on a %d-day window",
            len(result),
            sum(1 for p in result.values() if p.is_visible),
            len(self.visible_days),
        )
        return result
