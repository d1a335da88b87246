"""Tests for day-grid geometry."""

from datetime import date, timedelta

import pytest

from cosmosched.dates import day_window
from cosmosched.gantt import GanttPositionMapper, GridPosition, SnapMode, to_date, to_pixels
from cosmosched.models import Priority, ScheduledTask, TaskStatus, TaskType

DAY0 = date(2025, 7, 1)
CW = 50


def day(offset: int) -> date:
    return DAY0 + timedelta(days=offset)


@pytest.fixture
def window() -> list[date]:
    """Twenty visible days starting at day 10."""
    return day_window(day(10), 20)


class TestToPixels:
    """Test date range to bar placement."""

    def test_bar_at_window_start(self, window: list[date]) -> None:
        """Days 10-13 in a window starting at day 10."""
        position = to_pixels(day(10), day(13), window, CW)
        assert position == GridPosition(x=0, width=200, start_index=0, duration=4)

    def test_x_is_index_times_cell_width(self, window: list[date]) -> None:
        position = to_pixels(day(15), day(16), window, CW)
        assert position.x == 5 * CW
        assert position.width == 2 * CW

    def test_single_day_is_one_cell(self, window: list[date]) -> None:
        position = to_pixels(day(12), day(12), window, CW)
        assert position.width == CW
        assert position.duration == 1

    def test_starts_before_window(self, window: list[date]) -> None:
        """Clipped at the left edge and measured from the first visible day."""
        position = to_pixels(day(5), day(12), window, CW)
        assert position.x == 0
        assert position.start_index == 0
        assert position.duration == 3
        assert position.width == 150

    def test_starts_after_window(self, window: list[date]) -> None:
        position = to_pixels(day(40), day(42), window, CW)
        assert position == GridPosition(x=-CW, width=0, start_index=-1, duration=0)
        assert not position.is_visible

    def test_ends_before_window(self, window: list[date]) -> None:
        assert not to_pixels(day(1), day(5), window, CW).is_visible

    def test_empty_window(self) -> None:
        position = to_pixels(day(1), day(5), [], CW)
        assert position.x == -CW
        assert position.width == 0

    def test_inverted_range_drawn_as_single_day(self, window: list[date]) -> None:
        position = to_pixels(day(14), day(11), window, CW)
        assert position.start_index == 4
        assert position.width == CW

    def test_width_never_below_cell(self, window: list[date]) -> None:
        for offset in range(10, 30):
            position = to_pixels(day(offset), day(offset + 2), window, CW)
            assert position.width >= CW

    def test_invalid_cell_width(self, window: list[date]) -> None:
        with pytest.raises(ValueError, match="cell_width"):
            to_pixels(day(10), day(11), window, 0)


class TestToDate:
    """Test pixel to day mapping."""

    def test_floor_division(self, window: list[date]) -> None:
        assert to_date(0, window, CW) == day(10)
        assert to_date(49.9, window, CW) == day(10)
        assert to_date(50, window, CW) == day(11)

    def test_clamped_to_window(self, window: list[date]) -> None:
        assert to_date(-500, window, CW) == day(10)
        assert to_date(10_000, window, CW) == day(29)

    def test_round_trip(self, window: list[date]) -> None:
        for visible in window:
            assert to_date(to_pixels(visible, visible, window, CW).x, window, CW) == visible

    def test_empty_window_raises(self) -> None:
        with pytest.raises(ValueError, match="empty window"):
            to_date(0, [], CW)


class TestGanttPositionMapper:
    """Test the window-bound mapper."""

    def test_window_constructor(self) -> None:
        mapper = GanttPositionMapper.window(day(10), 20, CW)
        assert mapper.visible_days[0] == day(10)
        assert mapper.total_width == 1000
        assert mapper.day_index(day(12)) == 2
        assert mapper.day_index(day(40)) is None

    def test_date_to_pixel(self) -> None:
        mapper = GanttPositionMapper.window(day(10), 20, CW)
        assert mapper.date_to_pixel(day(13)) == 150
        assert mapper.date_to_pixel(day(8)) == -100

    @pytest.mark.parametrize(
        ("mode", "expected"),
        [(SnapMode.START, 100), (SnapMode.CENTER, 125), (SnapMode.END, 150)],
    )
    def test_snap_to_grid(self, mode: SnapMode, expected: float) -> None:
        mapper = GanttPositionMapper.window(day(10), 20, CW)
        assert mapper.snap_to_grid(120, mode) == expected

    def test_positions(self) -> None:
        mapper = GanttPositionMapper.window(day(10), 20, CW)
        tasks = [
            ScheduledTask(
                id=f"t{i}",
                project_id="P1",
                title="Step",
                type=TaskType.OTHER,
                status=TaskStatus.PENDING,
                start_date=day(start),
                end_date=day(start + 1),
                progress=0,
                priority=Priority.LOW,
            )
            for i, start in enumerate([10, 20, 50])
        ]

        positions = mapper.positions(tasks)

        assert positions["t0"].x == 0
        assert positions["t1"].x == 500
        assert not positions["t2"].is_visible

    def test_rejects_bad_cell_width(self) -> None:
        with pytest.raises(ValueError):
            GanttPositionMapper(day_window(day(0), 3), cell_width=-1)
