"""High-level project expansion and commit service."""

from __future__ import annotations

from datetime import date, datetime
from typing import TYPE_CHECKING

from cosmosched.dates import today
from cosmosched.exceptions import CommitRejectedError
from cosmosched.logger import changes_enabled, get_logger
from cosmosched.models import (
    PARTICIPANT_ROLE_FOR_TAG,
    Factory,
    FactoryType,
    Participant,
    Project,
    ScheduledTask,
    TaskUpdate,
)
from cosmosched.store import InMemoryRepository, TaskStore, task_record
from cosmosched.templates import TaskTemplateCatalog

from .assignment import (
    FactoryAssignmentResolver,
    assignment_mismatch,
    can_transfer,
    follow_reschedule,
    sync_assignments,
)
from .config import SchedulingConfig
from .dates import TaskDateScheduler
from .status import TaskStatusResolver

if TYPE_CHECKING:
    from cosmosched.store import Repository

TASK_ENTITY = "task"


def task_id_for(project_id: str, number: int) -> str:
    """Build the id of the n-th (1-based) task of a project."""
    return f"task-{project_id}-{number}"


class ProjectScheduleService:
    """Expands projects into dated, assigned tasks and applies task commits.

    This service coordinates:
    - TaskDateScheduler (template dates from the project start)
    - TaskStatusResolver (status and progress as of the current date)
    - FactoryAssignmentResolver (factory routing)
    - TaskStore and the repository (storage of the results)
    """

    def __init__(  # noqa: PLR0913 - needs multiple optional collaborators
        self,
        factories: list[Factory],
        *,
        catalog: TaskTemplateCatalog | None = None,
        config: SchedulingConfig | None = None,
        current_date: date | None = None,
        store: TaskStore | None = None,
        repository: Repository | None = None,
    ):
        """Initialize the service.

        Args:
            factories: All known factories
            catalog: Template catalog (defaults to the built-in one)
            config: Scheduling configuration
            current_date: Date used for status derivation (defaults to today)
            store: Task store (a fresh one by default)
            repository: Persistence collaborator (in-memory by default)
        """
        self.config = config or SchedulingConfig()
        self.factories = {f.id: f for f in factories}
        self.catalog = catalog or TaskTemplateCatalog.default()
        self.current_date = current_date or today(self.config.dates.frame)
        self.store = store or TaskStore()
        self.repository: Repository = repository or InMemoryRepository()
        self.scheduler = TaskDateScheduler()
        self.status_resolver = TaskStatusResolver(self.config.status)
        self.assignment_resolver = FactoryAssignmentResolver(
            self.config.assignment.max_sample_factories
        )
        self.invalid_dates: set[str] = set()
        self._projects: dict[str, Project] = {}

    def candidate_factories(self, project: Project) -> list[Factory]:
        """Resolve a project's selected factory ids, skipping unknown ones."""
        candidates: list[Factory] = []
        for factory_id in project.all_factory_ids():
            factory = self.factories.get(factory_id)
            if factory is None:
                get_logger().warning(
                    "Project '%s' references unknown factory '%s', skipping it",
                    project.id,
                    factory_id,
                )
                continue
            candidates.append(factory)
        return candidates

    def expand_project(self, project: Project) -> list[ScheduledTask]:
        """Generate the full task list for a project and store it.

        Earlier tasks of the same project are replaced.
        """
        logger = get_logger()
        templates = self.catalog.all_templates()
        ranges = self.scheduler.schedule(templates, project.start_date)
        candidates = self.candidate_factories(project)
        created_at = datetime.now()  # noqa: DTZ005

        tasks: list[ScheduledTask] = []
        for index, (template, date_range) in enumerate(zip(templates, ranges, strict=True)):
            task_id = task_id_for(project.id, index + 1)
            status = self.status_resolver.resolve_status(
                date_range.start_date,
                date_range.end_date,
                project.status,
                self.current_date,
                task_index=index,
                task_count=len(templates),
                project_progress=project.progress,
            )
            task = ScheduledTask(
                id=task_id,
                project_id=project.id,
                title=template.title,
                type=template.type,
                status=status,
                start_date=date_range.start_date,
                end_date=date_range.end_date,
                progress=self.status_resolver.resolve_progress(
                    status, date_range.start_date, date_range.end_date, self.current_date
                ),
                priority=template.priority,
                participants=[
                    Participant(user_id=tag.value, role=PARTICIPANT_ROLE_FOR_TAG[tag])
                    for tag in sorted(template.participant_roles, key=lambda t: t.value)
                ],
                depends_on=(
                    [task_id_for(project.id, index)]
                    if template.depends_on_previous and index > 0
                    else []
                ),
                created_at=created_at,
                updated_at=created_at,
            )
            task.factory_assignments = self.assignment_resolver.assign(task, candidates)
            tasks.append(task)

        self._projects[project.id] = project
        self._forget_invalid(project.id)
        if project.has_invalid_dates:
            self.invalid_dates.update(t.id for t in tasks)

        for old in self.store.remove_project(project.id):
            self.repository.delete(TASK_ENTITY, old.id)
        self.store.replace_project(project.id, tasks)
        for task in tasks:
            self.repository.create(TASK_ENTITY, task.id, task_record(task))

        if changes_enabled():
            assigned = sum(1 for t in tasks if t.factory_assignments)
            logger.changes(
                "Expanded project '%s' into %d tasks (%d with factories)",
                project.id,
                len(tasks),
                assigned,
            )
        return tasks

    def refresh_statuses(self, project: Project) -> list[ScheduledTask]:
        """Recompute status and progress of a project's stored tasks."""
        self._projects[project.id] = project
        refreshed: list[ScheduledTask] = []
        for task in self.store.tasks_for_project(project.id):
            update = TaskUpdate(task_id=task.id)
            refreshed.append(self.store.apply(update, self._recompute))
        return refreshed

    def change_factories(self, project: Project, factory_type: FactoryType) -> list[ScheduledTask]:
        """Reassign one factory type after a project's selection changed."""
        self._projects[project.id] = project
        candidates = [
            self.factories[fid]
            for fid in project.factory_ids(factory_type)
            if fid in self.factories
        ]
        tasks = self.store.tasks_for_project(project.id)
        updated = self.assignment_resolver.reassign(tasks, candidates, factory_type)

        for task in updated:
            self.store.apply(
                TaskUpdate(task_id=task.id, factory_assignments=task.factory_assignments)
            )
            self.repository.update(
                TASK_ENTITY,
                task.id,
                {"factory_assignments": [a.factory_id for a in task.factory_assignments]},
            )
        return self.store.tasks_for_project(project.id)

    def commit_update(self, update: TaskUpdate) -> ScheduledTask:
        """Apply a task update and recompute derived fields before returning.

        Raises:
            UnknownTaskError: If the task is not stored
            CommitRejectedError: If the new range is inverted or an assignment does not
                fit the task; the stored task is unchanged
        """
        current = self.store.get(update.task_id)

        def recompute(candidate: ScheduledTask) -> None:
            if update.factory_assignments is None:
                follow_reschedule(candidate, current.start_date, current.end_date)
            else:
                self._check_assignments(candidate)
            self._recompute(candidate)

        task = self.store.apply(update, recompute)
        self.invalid_dates.discard(task.id)

        result = self.repository.update(TASK_ENTITY, task.id, update.to_patch())
        if not result.success:
            get_logger().warning("Repository update for '%s' failed: %s", task.id, result.error)

        get_logger().changes(
            "Committed %s: %s -> %s (%s, %d%%)",
            task.id,
            task.start_date,
            task.end_date,
            task.status.value,
            task.progress,
        )
        return task

    def delete_project(self, project_id: str) -> None:
        """Drop a project's tasks from the store and the repository."""
        for task in self.store.remove_project(project_id):
            self.repository.delete(TASK_ENTITY, task.id)
        self._projects.pop(project_id, None)
        self._forget_invalid(project_id)
        get_logger().changes("Deleted tasks of project '%s'", project_id)

    def _forget_invalid(self, project_id: str) -> None:
        prefix = f"task-{project_id}-"
        self.invalid_dates = {t for t in self.invalid_dates if not t.startswith(prefix)}

    def _check_assignments(self, task: ScheduledTask) -> None:
        """Reject assignments naming unknown factories or not fitting the task."""
        for assignment in task.factory_assignments:
            factory = self.factories.get(assignment.factory_id)
            if factory is None:
                raise CommitRejectedError(
                    f"Task '{task.id}' assigns unknown factory '{assignment.factory_id}'"
                )
            if not can_transfer(assignment, factory):
                raise CommitRejectedError(
                    f"Task '{task.id}' lists '{factory.id}' as a "
                    f"{assignment.factory_type.value} factory, but it is a "
                    f"{factory.type.value} factory"
                )
            problem = assignment_mismatch(task, assignment)
            if problem is not None:
                raise CommitRejectedError(f"Task '{task.id}': {problem}")

    def _recompute(self, task: ScheduledTask) -> None:
        """Refresh status, progress and assignments of a task copy in place."""
        project = self._projects.get(task.project_id)
        if project is not None:
            siblings = self.store.tasks_for_project(task.project_id)
            index = next((i for i, t in enumerate(siblings) if t.id == task.id), None)
            task.status = self.status_resolver.resolve_status(
                task.start_date,
                task.end_date,
                project.status,
                self.current_date,
                task_index=index,
                task_count=len(siblings),
                project_progress=project.progress,
            )
            task.progress = self.status_resolver.resolve_progress(
                task.status, task.start_date, task.end_date, self.current_date
            )
        sync_assignments(task)
