"""Task collection and the persistence collaborator it reports to."""

from __future__ import annotations

import threading
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Protocol

from .exceptions import CommitRejectedError, UnknownTaskError
from .logger import get_logger
from .models import ScheduledTask, TaskUpdate

logger = get_logger()


@dataclass
class Result:
    """Outcome of a repository call."""

    success: bool
    data: Any = None
    error: str | None = None


class Repository(Protocol):
    """Persistence collaborator for generated tasks."""

    def get(self, entity_type: str, entity_id: str) -> Result:
        """Fetch one entity."""
        ...

    def create(self, entity_type: str, entity_id: str, data: dict[str, Any]) -> Result:
        """Store a new entity."""
        ...

    def update(self, entity_type: str, entity_id: str, patch: dict[str, Any]) -> Result:
        """Apply a partial update to an entity."""
        ...

    def delete(self, entity_type: str, entity_id: str) -> Result:
        """Remove an entity."""
        ...


def _default_records() -> dict[tuple[str, str], dict[str, Any]]:
    return {}


@dataclass
class InMemoryRepository:
    """Dictionary-backed repository, used by the CLI and in tests."""

    records: dict[tuple[str, str], dict[str, Any]] = field(default_factory=_default_records)

    def get(self, entity_type: str, entity_id: str) -> Result:
        record = self.records.get((entity_type, entity_id))
        if record is None:
            return Result(success=False, error=f"{entity_type} '{entity_id}' not found")
        return Result(success=True, data=dict(record))

    def create(self, entity_type: str, entity_id: str, data: dict[str, Any]) -> Result:
        self.records[(entity_type, entity_id)] = dict(data)
        return Result(success=True, data=dict(data))

    def update(self, entity_type: str, entity_id: str, patch: dict[str, Any]) -> Result:
        record = self.records.get((entity_type, entity_id))
        if record is None:
            return Result(success=False, error=f"{entity_type} '{entity_id}' not found")
        record.update(patch)
        return Result(success=True, data=dict(record))

    def delete(self, entity_type: str, entity_id: str) -> Result:
        if self.records.pop((entity_type, entity_id), None) is None:
            return Result(success=False, error=f"{entity_type} '{entity_id}' not found")
        return Result(success=True)


def task_record(task: ScheduledTask) -> dict[str, Any]:
    """Flatten a task into the record shape sent to the repository."""
    return {
        "project_id": task.project_id,
        "title": task.title,
        "type": task.type.value,
        "status": task.status.value,
        "start_date": task.start_date.isoformat(),
        "end_date": task.end_date.isoformat(),
        "progress": task.progress,
        "priority": task.priority.value,
        "participants": [p.user_id for p in task.participants],
        "factory_assignments": [a.factory_id for a in task.factory_assignments],
        "depends_on": list(task.depends_on),
    }


class TaskStore:
    """Ordered per-project task lists with atomic updates.

    Every mutation runs inside one re-entrant lock, so readers never see a
    task whose dates changed but whose status has not been recomputed yet.
    """

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._projects: dict[str, list[ScheduledTask]] = {}
        self._index: dict[str, str] = {}  # task id -> project id

    def get(self, task_id: str) -> ScheduledTask:
        """Get a stored task.

        Raises:
            UnknownTaskError: If the task is not stored
        """
        with self._lock:
            project_id = self._index.get(task_id)
            if project_id is None:
                raise UnknownTaskError(f"Unknown task: {task_id}")
            return next(t for t in self._projects[project_id] if t.id == task_id)

    def __contains__(self, task_id: object) -> bool:
        with self._lock:
            return task_id in self._index

    def tasks_for_project(self, project_id: str) -> list[ScheduledTask]:
        """Get a project's tasks in template order (empty if unknown)."""
        with self._lock:
            return list(self._projects.get(project_id, []))

    def all_tasks(self) -> list[ScheduledTask]:
        """Get every stored task, grouped by project in insertion order."""
        with self._lock:
            return [t for tasks in self._projects.values() for t in tasks]

    def index_of(self, task_id: str) -> int:
        """Position of a task within its project's list."""
        with self._lock:
            task = self.get(task_id)
            return self._projects[task.project_id].index(task)

    def replace_project(self, project_id: str, tasks: list[ScheduledTask]) -> None:
        """Replace all tasks of a project."""
        with self._lock:
            self.remove_project(project_id)
            self._projects[project_id] = list(tasks)
            for task in tasks:
                self._index[task.id] = project_id

    def remove_project(self, project_id: str) -> list[ScheduledTask]:
        """Drop a project's tasks and return them."""
        with self._lock:
            removed = self._projects.pop(project_id, [])
            for task in removed:
                self._index.pop(task.id, None)
            return removed

    def apply(
        self,
        update: TaskUpdate,
        recompute: Callable[[ScheduledTask], None] | None = None,
    ) -> ScheduledTask:
        """Apply an update atomically.

        The stored task is copied, the update and ``recompute`` run on the
        copy, and only a valid result replaces the stored task.

        Raises:
            UnknownTaskError: If the task is not stored
            CommitRejectedError: If the updated range ends before it starts
        """
        with self._lock:
            current = self.get(update.task_id)
            candidate = current.copy()

            if update.start_date is not None:
                candidate.start_date = update.start_date
            if update.end_date is not None:
                candidate.end_date = update.end_date
            if update.factory_assignments is not None:
                candidate.factory_assignments = list(update.factory_assignments)

            if candidate.start_date > candidate.end_date:
                raise CommitRejectedError(
                    f"Task '{update.task_id}' would end ({candidate.end_date}) "
                    f"before it starts ({candidate.start_date})"
                )

            if recompute is not None:
                recompute(candidate)
            candidate.updated_at = datetime.now()  # noqa: DTZ005

            tasks = self._projects[current.project_id]
            tasks[tasks.index(current)] = candidate
            logger.debug("Stored update for %s", update.task_id)
            return candidate
