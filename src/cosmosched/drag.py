"""Drag-to-reschedule state machine.

Pointer events arrive as plain pixel coordinates, so mouse, touch and
keyboard-driven input all feed the same controller. A gesture moves through
IDLE -> DRAGGING -> PREVIEWING and back to IDLE on release or cancel. Only a
release commits, and only when the candidate dates differ from the task's.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import date, timedelta
from enum import Enum
from typing import TYPE_CHECKING

from .exceptions import CommitRejectedError, UnknownTaskError
from .gantt import GanttPositionMapper, GridPosition
from .logger import get_logger
from .models import TaskUpdate

if TYPE_CHECKING:
    from .scheduler.service import ProjectScheduleService

logger = get_logger()


class DragPhase(str, Enum):
    """Phase of a drag gesture."""

    IDLE = "idle"
    DRAGGING = "dragging"
    PREVIEWING = "previewing"


class DragMode(str, Enum):
    """Which part of the bar is being dragged."""

    MOVE = "move"
    RESIZE_START = "resize_start"
    RESIZE_END = "resize_end"


@dataclass
class DragState:
    """Transient state of the current gesture."""

    phase: DragPhase = DragPhase.IDLE
    task_id: str | None = None
    mode: DragMode | None = None
    origin_x: float | None = None
    original_start_date: date | None = None
    original_end_date: date | None = None
    candidate_start_date: date | None = None
    candidate_end_date: date | None = None

    @property
    def is_dragging(self) -> bool:
        """Whether a gesture is in progress."""
        return self.phase != DragPhase.IDLE


@dataclass(frozen=True)
class DragPreview:
    """Candidate range shown while dragging."""

    task_id: str
    start_date: date
    end_date: date
    position: GridPosition = field(compare=False)


class DragRescheduleController:
    """Turns pointer events over the timeline into task commits."""

    def __init__(
        self,
        service: ProjectScheduleService,
        mapper: GanttPositionMapper,
        on_commit: Callable[[TaskUpdate], None] | None = None,
    ):
        """Initialize the controller.

        Args:
            service: Service that owns the tasks and applies commits
            mapper: Geometry of the visible window
            on_commit: Optional callback receiving every committed update
        """
        self.service = service
        self.mapper = mapper
        self.on_commit = on_commit
        self.state = DragState()

    @property
    def phase(self) -> DragPhase:
        """Phase of the current gesture (IDLE between gestures)."""
        return self.state.phase

    @property
    def preview(self) -> DragPreview | None:
        """Current candidate range, if the pointer has moved."""
        state = self.state
        if (
            state.phase != DragPhase.PREVIEWING
            or state.task_id is None
            or state.candidate_start_date is None
            or state.candidate_end_date is None
        ):
            return None
        return DragPreview(
            task_id=state.task_id,
            start_date=state.candidate_start_date,
            end_date=state.candidate_end_date,
            position=self.mapper.to_pixels(state.candidate_start_date, state.candidate_end_date),
        )

    def pointer_down(self, task_id: str, x: float, mode: DragMode = DragMode.MOVE) -> bool:
        """Start a gesture on a task bar.

        Returns:
            True if a gesture started; False if one is already running or the
            task is unknown
        """
        if self.state.is_dragging:
            logger.debug("Ignoring pointer down on %s during an active drag", task_id)
            return False
        try:
            task = self.service.store.get(task_id)
        except UnknownTaskError:
            logger.debug("Ignoring pointer down on unknown task %s", task_id)
            return False

        self.state = DragState(
            phase=DragPhase.DRAGGING,
            task_id=task_id,
            mode=mode,
            origin_x=x,
            original_start_date=task.start_date,
            original_end_date=task.end_date,
        )
        logger.debug("Drag %s started on %s at x=%s", mode.value, task_id, x)
        return True

    def pointer_move(self, x: float) -> DragPreview | None:
        """Update the candidate range for the pointer position."""
        state = self.state
        if (
            not state.is_dragging
            or state.origin_x is None
            or state.original_start_date is None
            or state.original_end_date is None
        ):
            return None

        start, end = state.original_start_date, state.original_end_date
        pointer_day = self.mapper.to_date(x)

        if state.mode == DragMode.RESIZE_START:
            start = min(pointer_day, end)
        elif state.mode == DragMode.RESIZE_END:
            end = max(pointer_day, start)
        else:
            delta = timedelta(days=(pointer_day - self.mapper.to_date(state.origin_x)).days)
            start, end = start + delta, end + delta

        state.candidate_start_date = start
        state.candidate_end_date = end
        state.phase = DragPhase.PREVIEWING
        return self.preview

    def pointer_up(self) -> TaskUpdate | None:
        """Finish the gesture and commit a changed range.

        Returns:
            The committed update, or None if nothing changed or the commit
            was rejected
        """
        state = self.state
        self.state = DragState()

        if (
            state.phase != DragPhase.PREVIEWING
            or state.task_id is None
            or state.candidate_start_date is None
            or state.candidate_end_date is None
        ):
            return None
        if (
            state.candidate_start_date == state.original_start_date
            and state.candidate_end_date == state.original_end_date
        ):
            logger.debug("Drag on %s ended without a change", state.task_id)
            return None

        update = TaskUpdate(
            task_id=state.task_id,
            start_date=state.candidate_start_date,
            end_date=state.candidate_end_date,
        )
        try:
            self.service.commit_update(update)
        except (CommitRejectedError, UnknownTaskError) as e:
            logger.warning("Drag commit rejected: %s", e)
            return None

        if self.on_commit is not None:
            self.on_commit(update)
        return update

    def pointer_cancel(self) -> None:
        """Abandon the gesture without side effects."""
        if self.state.is_dragging:
            logger.debug("Drag on %s cancelled", self.state.task_id)
        self.state = DragState()
