"""Tests for status and progress derivation."""

from datetime import date

import pytest
from pydantic import ValidationError as PydanticValidationError

from cosmosched.models import ProjectStatus, TaskStatus
from cosmosched.scheduler import StatusConfig, TaskStatusResolver, resolve_progress, resolve_status

START = date(2025, 7, 1)
END = date(2025, 7, 11)
ACTIVE = ProjectStatus.IN_PROGRESS


class TestResolveStatus:
    """Test date-driven status for active projects."""

    def test_before_start_is_pending(self) -> None:
        assert resolve_status(START, END, ACTIVE, date(2025, 6, 30)) == TaskStatus.PENDING

    def test_start_day_is_in_progress(self) -> None:
        assert resolve_status(START, END, ACTIVE, START) == TaskStatus.IN_PROGRESS

    def test_midway_is_in_progress(self) -> None:
        assert resolve_status(START, END, ACTIVE, date(2025, 7, 6)) == TaskStatus.IN_PROGRESS

    def test_last_day_is_completed(self) -> None:
        """A task counts as done once its last day is reached."""
        assert resolve_status(START, END, ACTIVE, END) == TaskStatus.COMPLETED

    def test_single_day_task_on_its_day(self) -> None:
        assert resolve_status(START, START, ACTIVE, START) == TaskStatus.COMPLETED

    def test_past_end_is_completed_by_default(self) -> None:
        assert resolve_status(START, END, ACTIVE, date(2025, 8, 1)) == TaskStatus.COMPLETED

    def test_past_end_is_overdue_when_requested(self) -> None:
        status = resolve_status(START, END, ACTIVE, date(2025, 8, 1), distinguish_overdue=True)
        assert status == TaskStatus.OVERDUE

    def test_last_day_is_not_overdue(self) -> None:
        assert resolve_status(START, END, ACTIVE, END, distinguish_overdue=True) == (
            TaskStatus.COMPLETED
        )


class TestProjectStatusOverrides:
    """Project state takes precedence over dates."""

    def test_completed_project(self) -> None:
        status = resolve_status(START, END, ProjectStatus.COMPLETED, date(2025, 1, 1))
        assert status == TaskStatus.COMPLETED

    def test_planning_project(self) -> None:
        status = resolve_status(START, END, ProjectStatus.PLANNING, date(2026, 1, 1))
        assert status == TaskStatus.PENDING

    @pytest.mark.parametrize("project_status", [ProjectStatus.ON_HOLD, ProjectStatus.CANCELLED])
    def test_halted_project_cutoff(self, project_status: ProjectStatus) -> None:
        """50% of 4 tasks: two done, the third blocked, the last pending."""
        statuses = [
            resolve_status(
                START,
                END,
                project_status,
                START,
                task_index=i,
                task_count=4,
                project_progress=50,
            )
            for i in range(4)
        ]
        assert statuses == [
            TaskStatus.COMPLETED,
            TaskStatus.COMPLETED,
            TaskStatus.BLOCKED,
            TaskStatus.PENDING,
        ]

    def test_halted_project_without_progress_blocks_first_task(self) -> None:
        status = resolve_status(
            START, END, ProjectStatus.ON_HOLD, START, task_index=0, task_count=3
        )
        assert status == TaskStatus.BLOCKED

    def test_halted_project_without_index_uses_dates(self) -> None:
        assert resolve_status(START, END, ProjectStatus.CANCELLED, START) == (
            TaskStatus.IN_PROGRESS
        )


class TestResolveProgress:
    """Test progress percentages."""

    def test_completed_is_full(self) -> None:
        assert resolve_progress(TaskStatus.COMPLETED, START, END, END) == 100

    def test_overdue_is_full(self) -> None:
        assert resolve_progress(TaskStatus.OVERDUE, START, END, date(2025, 8, 1)) == 100

    @pytest.mark.parametrize(
        "status", [TaskStatus.PENDING, TaskStatus.BLOCKED, TaskStatus.CANCELLED]
    )
    def test_not_running_is_zero(self, status: TaskStatus) -> None:
        assert resolve_progress(status, START, END, date(2025, 7, 6)) == 0

    def test_midway(self) -> None:
        assert resolve_progress(TaskStatus.IN_PROGRESS, START, END, date(2025, 7, 6)) == 50

    def test_rounds_half_up(self) -> None:
        """2 of 3 days elapsed is 66.7%."""
        end = date(2025, 7, 4)
        assert resolve_progress(TaskStatus.IN_PROGRESS, START, end, date(2025, 7, 3)) == 67

    def test_start_day_stays_above_zero(self) -> None:
        assert resolve_progress(TaskStatus.IN_PROGRESS, START, END, START) == 1

    def test_custom_band(self) -> None:
        end = date(2025, 7, 21)
        assert resolve_progress(TaskStatus.IN_PROGRESS, START, end, START, floor=10, ceiling=90) == 10
        late = date(2025, 7, 20)
        assert resolve_progress(TaskStatus.IN_PROGRESS, START, end, late, floor=10, ceiling=90) == 90

    def test_zero_length_range(self) -> None:
        assert resolve_progress(TaskStatus.IN_PROGRESS, START, START, START) == 99

    def test_in_progress_strictly_inside_bounds(self) -> None:
        for offset in range(10):
            now = date(2025, 7, 1 + offset)
            assert 0 < resolve_progress(TaskStatus.IN_PROGRESS, START, END, now) < 100


class TestTaskStatusResolver:
    """Test the configured resolver."""

    def test_uses_config(self) -> None:
        resolver = TaskStatusResolver(
            StatusConfig(distinguish_overdue=True, progress_floor=10, progress_ceiling=90)
        )
        late = date(2025, 8, 1)
        assert resolver.resolve_status(START, END, ACTIVE, late) == TaskStatus.OVERDUE
        assert resolver.resolve_progress(TaskStatus.IN_PROGRESS, START, END, START) == 10

    def test_defaults(self) -> None:
        resolver = TaskStatusResolver()
        assert resolver.resolve_status(START, END, ACTIVE, date(2025, 8, 1)) == (
            TaskStatus.COMPLETED
        )

    def test_band_validation(self) -> None:
        with pytest.raises(PydanticValidationError):
            StatusConfig(progress_floor=80, progress_ceiling=20)

    @pytest.mark.parametrize(
        ("floor", "ceiling"),
        [(0, 99), (1, 100), (0, 100)],
    )
    def test_band_excludes_zero_and_hundred(self, floor: int, ceiling: int) -> None:
        with pytest.raises(PydanticValidationError):
            StatusConfig(progress_floor=floor, progress_ceiling=ceiling)

    def test_widest_band_stays_inside_bounds(self) -> None:
        resolver = TaskStatusResolver(StatusConfig(progress_floor=1, progress_ceiling=99))

        assert resolver.resolve_status(START, END, ACTIVE, START) == TaskStatus.IN_PROGRESS
        assert resolver.resolve_progress(TaskStatus.IN_PROGRESS, START, END, START) == 1
        last = date(2025, 7, 10)
        assert resolver.resolve_progress(TaskStatus.IN_PROGRESS, START, END, last) <= 99
