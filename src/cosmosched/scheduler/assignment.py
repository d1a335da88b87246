"""Factory-to-task routing.

Prototyping tasks fan out to several manufacturing factories for parallel
sampling. Every other task is classified by title keywords into a factory
type and gets at most one primary assignment. A task with no matching
category or no candidate factory of that type stays unassigned.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import replace
from datetime import date

from cosmosched.logger import get_logger
from cosmosched.models import (
    AssignmentRole,
    Factory,
    FactoryAssignment,
    FactoryType,
    ScheduledTask,
    TaskStatus,
    TaskType,
)

logger = get_logger()

# Checked in this order; the first category with a matching keyword wins
CATEGORY_KEYWORDS: tuple[tuple[FactoryType, tuple[str, ...]], ...] = (
    (FactoryType.PACKAGING, ("packaging", "packing", "print", "color", "post-processing")),
    (FactoryType.CONTAINER, ("container", "mold", "injection")),
    (
        FactoryType.MANUFACTURING,
        ("product", "quality", "sourcing", "material", "line", "prototype"),
    ),
)

SAMPLE_LEAD_PROGRESS = 50  # Progress shown on the first sample while the others wait


def classify_task(title: str) -> FactoryType | None:
    """Infer the factory category of a task from its title."""
    lowered = title.lower()
    for factory_type, keywords in CATEGORY_KEYWORDS:
        if any(keyword in lowered for keyword in keywords):
            return factory_type
    return None


def sample_label(index: int) -> str:
    """Human-readable label for the n-th sample (0 -> "Sample A")."""
    return f"Sample {chr(ord('A') + index)}"


def can_transfer(assignment: FactoryAssignment, factory: Factory) -> bool:
    """Check whether an assignment may move to another factory."""
    return assignment.factory_type == factory.type


def assignment_mismatch(task: ScheduledTask, assignment: FactoryAssignment) -> str | None:
    """Describe why an assignment does not fit its task, or None if it does.

    Prototyping tasks only take manufacturing samples. Every other task only
    takes a primary factory of the category its title classifies into.
    """
    if task.type == TaskType.PROTOTYPING:
        if assignment.role == AssignmentRole.SAMPLE and (
            assignment.factory_type == FactoryType.MANUFACTURING
        ):
            return None
        return (
            f"'{task.title}' only takes manufacturing samples, "
            f"not a {assignment.factory_type.value} {assignment.role.value} assignment"
        )

    category = classify_task(task.title)
    if assignment.role == AssignmentRole.PRIMARY and assignment.factory_type == category:
        return None
    expected = f"a {category.value}" if category is not None else "no"
    return (
        f"'{task.title}' takes {expected} primary factory, "
        f"not a {assignment.factory_type.value} {assignment.role.value} assignment"
    )


def follow_reschedule(task: ScheduledTask, old_start: date, old_end: date) -> None:
    """Carry assignment dates along when a task's range changes.

    Assignments that covered the whole old range cover the whole new one.
    On a move (same duration) the others shift by the same number of days.
    """
    moved = (task.end_date - task.start_date) == (old_end - old_start)
    shift = task.start_date - old_start
    for assignment in task.factory_assignments:
        if assignment.start_date == old_start and assignment.end_date == old_end:
            assignment.start_date = task.start_date
            assignment.end_date = task.end_date
        elif moved:
            assignment.start_date += shift
            assignment.end_date += shift


def sync_assignments(task: ScheduledTask) -> None:
    """Keep assignments consistent with their task after a date or status change.

    Assignment dates are clamped into the task range. Primary assignments
    mirror the task's status and progress.
    """
    for assignment in task.factory_assignments:
        start = min(max(assignment.start_date, task.start_date), task.end_date)
        end = min(max(assignment.end_date, start), task.end_date)
        assignment.start_date = start
        assignment.end_date = end
        if assignment.role == AssignmentRole.PRIMARY:
            assignment.status = task.status
            assignment.progress = task.progress


class FactoryAssignmentResolver:
    """Matches tasks to candidate factories."""

    def __init__(self, max_sample_factories: int = 3):
        self.max_sample_factories = max_sample_factories

    def assign(
        self, task: ScheduledTask, candidates: Sequence[Factory]
    ) -> list[FactoryAssignment]:
        """Create assignments for a task from the candidate factories."""
        if task.type == TaskType.PROTOTYPING:
            return self._assign_samples(task, candidates)
        return self._assign_primary(task, candidates)

    def _assign_samples(
        self, task: ScheduledTask, candidates: Sequence[Factory]
    ) -> list[FactoryAssignment]:
        manufacturers = [f for f in candidates if f.type == FactoryType.MANUFACTURING]
        chosen = manufacturers[: self.max_sample_factories]

        assignments: list[FactoryAssignment] = []
        for index, factory in enumerate(chosen):
            lead = index == 0
            assignments.append(
                FactoryAssignment(
                    factory_id=factory.id,
                    factory_name=factory.name,
                    factory_type=factory.type,
                    role=AssignmentRole.SAMPLE,
                    status=TaskStatus.IN_PROGRESS if lead else TaskStatus.PENDING,
                    progress=SAMPLE_LEAD_PROGRESS if lead else 0,
                    start_date=task.start_date,
                    end_date=task.end_date,
                    notes=sample_label(index),
                )
            )

        logger.checks(
            "  %s: sampling at %s",
            task.title,
            ", ".join(f.name for f in chosen) if chosen else "no manufacturing factory",
        )
        return assignments

    def _assign_primary(
        self, task: ScheduledTask, candidates: Sequence[Factory]
    ) -> list[FactoryAssignment]:
        category = classify_task(task.title)
        if category is None:
            logger.checks("  %s: no factory category, left unassigned", task.title)
            return []

        factory = next((f for f in candidates if f.type == category), None)
        if factory is None:
            logger.checks(
                "  %s: no %s factory selected, left unassigned", task.title, category.value
            )
            return []

        logger.checks("  %s: assigned to %s", task.title, factory.name)
        return [
            FactoryAssignment(
                factory_id=factory.id,
                factory_name=factory.name,
                factory_type=factory.type,
                role=AssignmentRole.PRIMARY,
                status=task.status,
                progress=task.progress,
                start_date=task.start_date,
                end_date=task.end_date,
            )
        ]

    def reassign(
        self,
        tasks: Sequence[ScheduledTask],
        candidates: Sequence[Factory],
        factory_type: FactoryType,
    ) -> list[ScheduledTask]:
        """Replace assignments of one factory type across tasks.

        Prior assignments of that type are removed from every task before new
        ones are added, so a changed selection never leaves stale duplicates.
        Returns updated copies; the input tasks are not modified.
        """
        typed_candidates = [f for f in candidates if f.type == factory_type]
        updated: list[ScheduledTask] = []

        for task in tasks:
            copy = task.copy()
            copy.factory_assignments = [
                a for a in copy.factory_assignments if a.factory_type != factory_type
            ]
            fresh = [a for a in self.assign(copy, typed_candidates) if a.factory_type == factory_type]
            copy.factory_assignments.extend(replace(a) for a in fresh)
            updated.append(copy)

        logger.changes(
            "Reassigned %s factories on %d tasks: %s",
            factory_type.value,
            len(updated),
            ", ".join(f.name for f in typed_candidates) or "none",
        )
        return updated
