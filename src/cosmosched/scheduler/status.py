"""Task status and progress derivation."""

import math
from datetime import date

from cosmosched.models import ProjectStatus, TaskStatus

from .config import StatusConfig

# Project states where progress marks a cutoff task as blocked
_HALTED_PROJECT_STATES = {ProjectStatus.CANCELLED, ProjectStatus.ON_HOLD}


def resolve_status(  # noqa: PLR0911, PLR0913 - status rules are a flat priority list
    start_date: date,
    end_date: date,
    project_status: ProjectStatus,
    now: date,
    *,
    task_index: int | None = None,
    task_count: int | None = None,
    project_progress: int = 0,
    distinguish_overdue: bool = False,
) -> TaskStatus:
    """Derive a task's lifecycle state.

    Rules, in priority order:
    1. Halted project (cancelled or on hold): tasks before the progress cutoff
       are completed, the task at the cutoff is blocked, later tasks pending.
       Needs task_index and task_count; otherwise the date rules apply.
    2. Completed project: completed.
    3. Planning project: pending.
    4. Active project: pending before the start, in progress until the last
       day, completed from the last day on (overdue after it if requested).
    """
    if project_status in _HALTED_PROJECT_STATES and task_index is not None and task_count:
        cutoff = math.floor(project_progress / 100 * task_count)
        if task_index < cutoff:
            return TaskStatus.COMPLETED
        if task_index == cutoff:
            return TaskStatus.BLOCKED
        return TaskStatus.PENDING

    if project_status == ProjectStatus.COMPLETED:
        return TaskStatus.COMPLETED

    if project_status == ProjectStatus.PLANNING:
        return TaskStatus.PENDING

    if now < start_date:
        return TaskStatus.PENDING
    if now < end_date:
        return TaskStatus.IN_PROGRESS
    if now > end_date and distinguish_overdue:
        return TaskStatus.OVERDUE
    return TaskStatus.COMPLETED


def resolve_progress(
    status: TaskStatus,
    start_date: date,
    end_date: date,
    now: date,
    *,
    floor: int = 1,
    ceiling: int = 99,
) -> int:
    """Derive a completion percentage from a status and the elapsed time."""
    if status in (TaskStatus.COMPLETED, TaskStatus.OVERDUE):
        return 100
    if status != TaskStatus.IN_PROGRESS:
        return 0

    total = (end_date - start_date).days
    if total <= 0:
        return ceiling
    elapsed = (now - start_date).days
    progress = math.floor(100 * elapsed / total + 0.5)
    return max(floor, min(ceiling, progress))


class TaskStatusResolver:
    """Status and progress derivation bound to a StatusConfig."""

    def __init__(self, config: StatusConfig | None = None):
        self.config = config or StatusConfig()

    def resolve_status(  # noqa: PLR0913 - mirrors resolve_status
        self,
        start_date: date,
        end_date: date,
        project_status: ProjectStatus,
        now: date,
        *,
        task_index: int | None = None,
        task_count: int | None = None,
        project_progress: int = 0,
    ) -> TaskStatus:
        """Derive a status using the configured overdue behavior."""
        return resolve_status(
            start_date,
            end_date,
            project_status,
            now,
            task_index=task_index,
            task_count=task_count,
            project_progress=project_progress,
            distinguish_overdue=self.config.distinguish_overdue,
        )

    def resolve_progress(
        self, status: TaskStatus, start_date: date, end_date: date, now: date
    ) -> int:
        """Derive progress using the configured in-progress band."""
        return resolve_progress(
            status,
            start_date,
            end_date,
            now,
            floor=self.config.progress_floor,
            ceiling=self.config.progress_ceiling,
        )
