"""Data models for cosmosched."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import date, datetime
from enum import Enum

from .exceptions import CatalogError


class FactoryType(str, Enum):
    """Kinds of production facility a task can be routed to."""

    MANUFACTURING = "manufacturing"
    CONTAINER = "container"
    PACKAGING = "packaging"


class TaskType(str, Enum):
    """Production step kinds used by task templates."""

    DESIGN = "design"
    SOURCING = "sourcing"
    PREPARATION = "preparation"
    PROTOTYPING = "prototyping"
    QUALITY_CHECK = "quality_check"
    PRODUCTION = "production"
    MOLD_MAKING = "mold_making"
    INSPECTION = "inspection"
    PRINTING_PLATE = "printing_plate"
    COLOR_CORRECTION = "color_correction"
    PRINTING = "printing"
    POST_PROCESSING = "post_processing"
    PACKING = "packing"
    OTHER = "other"


class Priority(str, Enum):
    """Task priority."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class RoleTag(str, Enum):
    """Roles a template asks to participate in a task."""

    PM = "PM"
    FACTORY_MANAGER = "FACTORY_MANAGER"
    QA = "QA"


class ParticipantRole(str, Enum):
    """Role of a participant on a concrete task."""

    MANAGER = "manager"
    MEMBER = "member"
    REVIEWER = "reviewer"
    OBSERVER = "observer"


# Template role -> task participant role
PARTICIPANT_ROLE_FOR_TAG: dict[RoleTag, ParticipantRole] = {
    RoleTag.PM: ParticipantRole.MANAGER,
    RoleTag.FACTORY_MANAGER: ParticipantRole.MEMBER,
    RoleTag.QA: ParticipantRole.REVIEWER,
}


class TaskStatus(str, Enum):
    """Derived lifecycle state of a task."""

    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    OVERDUE = "overdue"
    BLOCKED = "blocked"
    CANCELLED = "cancelled"


class ProjectStatus(str, Enum):
    """Status of the owning project."""

    PLANNING = "planning"
    IN_PROGRESS = "in_progress"
    ON_HOLD = "on_hold"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class AssignmentRole(str, Enum):
    """Role of a factory on a task."""

    PRIMARY = "primary"
    SAMPLE = "sample"


def _default_str_list() -> list[str]:
    return []


@dataclass(frozen=True)
class TaskTemplate:
    """Immutable blueprint from which concrete tasks are generated."""

    title: str
    type: TaskType
    duration_days: int
    priority: Priority
    participant_roles: frozenset[RoleTag] = frozenset()
    depends_on_previous: bool = False

    def __post_init__(self) -> None:
        if not self.title.strip():
            raise CatalogError("Task template title must not be empty")
        if isinstance(self.duration_days, bool) or not isinstance(self.duration_days, int):
            raise CatalogError(
                f"Template '{self.title}' duration must be an integer, got {self.duration_days!r}"
            )
        if self.duration_days < 1:
            raise CatalogError(
                f"Template '{self.title}' duration must be at least 1 day, got {self.duration_days}"
            )


@dataclass(frozen=True)
class Factory:
    """A production facility."""

    id: str
    name: str
    type: FactoryType


@dataclass
class Project:
    """A production order as loaded from the plan (read-only to the engine)."""

    id: str
    name: str
    start_date: date
    end_date: date
    status: ProjectStatus = ProjectStatus.PLANNING
    progress: int = 0
    manufacturer_ids: list[str] = field(default_factory=_default_str_list)
    container_ids: list[str] = field(default_factory=_default_str_list)
    packaging_ids: list[str] = field(default_factory=_default_str_list)
    created_at: datetime | None = None
    has_invalid_dates: bool = False  # Start or end came from the today-fallback

    def factory_ids(self, factory_type: FactoryType) -> list[str]:
        """Get the selected factory IDs for one factory type."""
        if factory_type == FactoryType.MANUFACTURING:
            return list(self.manufacturer_ids)
        if factory_type == FactoryType.CONTAINER:
            return list(self.container_ids)
        return list(self.packaging_ids)

    def all_factory_ids(self) -> list[str]:
        """Get all selected factory IDs, manufacturing first."""
        return [*self.manufacturer_ids, *self.container_ids, *self.packaging_ids]


@dataclass(frozen=True)
class Participant:
    """A user taking part in a task."""

    user_id: str
    role: ParticipantRole


@dataclass
class FactoryAssignment:
    """Links a task to a factory with its own status and date window."""

    factory_id: str
    factory_name: str
    factory_type: FactoryType
    role: AssignmentRole
    status: TaskStatus
    progress: int
    start_date: date
    end_date: date
    notes: str | None = None


def _default_participants() -> list[Participant]:
    return []


def _default_assignments() -> list[FactoryAssignment]:
    return []


@dataclass
class ScheduledTask:
    """A concrete task generated for a project."""

    id: str
    project_id: str
    title: str
    type: TaskType
    status: TaskStatus
    start_date: date
    end_date: date
    progress: int
    priority: Priority
    participants: list[Participant] = field(default_factory=_default_participants)
    factory_assignments: list[FactoryAssignment] = field(default_factory=_default_assignments)
    depends_on: list[str] = field(default_factory=_default_str_list)
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def duration_days(self) -> int:
        """Inclusive day count between start and end."""
        return (self.end_date - self.start_date).days + 1

    def copy(self) -> ScheduledTask:
        """Copy with independent assignment and participant lists."""
        return replace(
            self,
            participants=list(self.participants),
            factory_assignments=[replace(a) for a in self.factory_assignments],
            depends_on=list(self.depends_on),
        )


@dataclass(frozen=True)
class DateRange:
    """An inclusive calendar-day range."""

    start_date: date
    end_date: date

    @property
    def duration_days(self) -> int:
        """Inclusive day count."""
        return (self.end_date - self.start_date).days + 1


@dataclass(frozen=True)
class TaskUpdate:
    """Task mutation emitted on drag commit and consumed by persistence."""

    task_id: str
    start_date: date | None = None
    end_date: date | None = None
    factory_assignments: list[FactoryAssignment] | None = None

    def to_patch(self) -> dict[str, object]:
        """Convert to a persistence patch containing only the set fields."""
        patch: dict[str, object] = {}
        if self.start_date is not None:
            patch["start_date"] = self.start_date.isoformat()
        if self.end_date is not None:
            patch["end_date"] = self.end_date.isoformat()
        if self.factory_assignments is not None:
            patch["factory_assignments"] = [a.factory_id for a in self.factory_assignments]
        return patch
