"""Tests for data models."""

from datetime import date

import pytest

from cosmosched.exceptions import CatalogError
from cosmosched.models import (
    AssignmentRole,
    DateRange,
    FactoryAssignment,
    FactoryType,
    Priority,
    Project,
    ScheduledTask,
    TaskStatus,
    TaskTemplate,
    TaskType,
    TaskUpdate,
)


class TestTaskTemplate:
    """Test template validation."""

    def test_valid(self) -> None:
        template = TaskTemplate("Mix", TaskType.PRODUCTION, 2, Priority.LOW)
        assert template.duration_days == 2
        assert not template.depends_on_previous

    @pytest.mark.parametrize("duration", [0, -1, 1.5, True])
    def test_bad_duration(self, duration: object) -> None:
        with pytest.raises(CatalogError):
            TaskTemplate("Mix", TaskType.PRODUCTION, duration, Priority.LOW)  # type: ignore[arg-type]

    def test_blank_title(self) -> None:
        with pytest.raises(CatalogError, match="title"):
            TaskTemplate("  ", TaskType.PRODUCTION, 1, Priority.LOW)


class TestProject:
    """Test factory selection helpers."""

    def test_factory_ids(self) -> None:
        project = Project(
            id="P1",
            name="Serum",
            start_date=date(2025, 7, 1),
            end_date=date(2025, 7, 31),
            manufacturer_ids=["M1"],
            container_ids=["C1"],
            packaging_ids=["K1"],
        )
        assert project.factory_ids(FactoryType.CONTAINER) == ["C1"]
        assert project.all_factory_ids() == ["M1", "C1", "K1"]


class TestScheduledTask:
    """Test task helpers."""

    def test_duration_is_inclusive(self) -> None:
        assert DateRange(date(2025, 7, 1), date(2025, 7, 1)).duration_days == 1
        assert DateRange(date(2025, 7, 1), date(2025, 7, 3)).duration_days == 3

    def test_copy_is_independent(self) -> None:
        task = ScheduledTask(
            id="t1",
            project_id="P1",
            title="Mass production",
            type=TaskType.PRODUCTION,
            status=TaskStatus.PENDING,
            start_date=date(2025, 7, 14),
            end_date=date(2025, 7, 23),
            progress=0,
            priority=Priority.MEDIUM,
            factory_assignments=[
                FactoryAssignment(
                    factory_id="M1",
                    factory_name="Seoul Lab",
                    factory_type=FactoryType.MANUFACTURING,
                    role=AssignmentRole.PRIMARY,
                    status=TaskStatus.PENDING,
                    progress=0,
                    start_date=date(2025, 7, 14),
                    end_date=date(2025, 7, 23),
                )
            ],
        )
        copy = task.copy()
        copy.factory_assignments[0].progress = 50
        copy.depends_on.append("t0")

        assert task.factory_assignments[0].progress == 0
        assert task.depends_on == []
        assert task.duration_days == 10


class TestTaskUpdate:
    """Test the persistence patch of an update."""

    def test_patch_only_has_set_fields(self) -> None:
        update = TaskUpdate(task_id="t1", end_date=date(2025, 7, 30))
        assert update.to_patch() == {"end_date": "2025-07-30"}
