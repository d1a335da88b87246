"""Timeline rendering: text grid and Mermaid gantt output."""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from datetime import date
from enum import Enum

from .colors import ColorAssignmentService, priority_color
from .gantt import GanttPositionMapper
from .models import ScheduledTask, TaskStatus
from .scheduler.assignment import classify_task
from .templates import priority_label


class ColumnId(str, Enum):
    """Columns the text timeline can show left of the bars."""

    ID = "id"
    TITLE = "title"
    STATUS = "status"
    PROGRESS = "progress"
    PRIORITY = "priority"
    DATES = "dates"
    FACTORIES = "factories"
    PARTICIPANTS = "participants"


DEFAULT_COLUMNS = (ColumnId.TITLE, ColumnId.STATUS, ColumnId.PROGRESS, ColumnId.FACTORIES)

# Bar cell per task status
STATUS_CELLS: dict[TaskStatus, str] = {
    TaskStatus.PENDING: "-",
    TaskStatus.IN_PROGRESS: "#",
    TaskStatus.COMPLETED: "=",
    TaskStatus.OVERDUE: "!",
    TaskStatus.BLOCKED: "x",
    TaskStatus.CANCELLED: "~",
}
EMPTY_CELL = "."
INVALID_DATE_MARKER = "?"


@dataclass
class RenderContext:
    """Shared inputs for column renderers."""

    invalid_dates: set[str] = field(default_factory=set[str])
    colors: ColorAssignmentService | None = None


RenderFn = Callable[[ScheduledTask, RenderContext], str]


def _render_dates(task: ScheduledTask, context: RenderContext) -> str:
    text = f"{task.start_date:%Y-%m-%d}..{task.end_date:%Y-%m-%d}"
    if task.id in context.invalid_dates:
        text += f" {INVALID_DATE_MARKER}"
    return text


def _render_factories(task: ScheduledTask, context: RenderContext) -> str:
    names: list[str] = []
    for assignment in task.factory_assignments:
        name = assignment.factory_name
        if assignment.notes:
            name = f"{name} ({assignment.notes})"
        if context.colors is not None:
            name = f"{name} {context.colors.color_for(assignment.factory_id)}"
        names.append(name)
    return ", ".join(names) or "-"


COLUMN_RENDERERS: dict[ColumnId, RenderFn] = {
    ColumnId.ID: lambda task, _: task.id,
    ColumnId.TITLE: lambda task, _: task.title,
    ColumnId.STATUS: lambda task, _: task.status.value,
    ColumnId.PROGRESS: lambda task, _: f"{task.progress}%",
    ColumnId.PRIORITY: lambda task, _: (
        f"{priority_label(task.priority)} {priority_color(task.priority)}"
    ),
    ColumnId.DATES: _render_dates,
    ColumnId.FACTORIES: _render_factories,
    ColumnId.PARTICIPANTS: lambda task, _: ", ".join(
        f"{p.user_id}:{p.role.value}" for p in task.participants
    ),
}


class TextTimelineRenderer:
    """Draws tasks as rows of columns followed by a one-character-per-day bar."""

    def __init__(
        self,
        mapper: GanttPositionMapper,
        columns: Sequence[ColumnId] = DEFAULT_COLUMNS,
        context: RenderContext | None = None,
    ):
        self.mapper = mapper
        self.columns = list(columns)
        self.context = context or RenderContext()

    def bar(self, task: ScheduledTask) -> str:
        """Bar cells for one task across the visible window."""
        days = len(self.mapper.visible_days)
        position = self.mapper.to_pixels(task.start_date, task.end_date)
        if not position.is_visible:
            return EMPTY_CELL * days

        cell = STATUS_CELLS.get(task.status, "#")
        first = position.start_index
        last = min(first + position.duration, days)
        return EMPTY_CELL * first + cell * (last - first) + EMPTY_CELL * (days - last)

    def render(self, tasks: Sequence[ScheduledTask]) -> str:
        """Render the whole timeline as text."""
        rows = [[COLUMN_RENDERERS[c](task, self.context) for c in self.columns] for task in tasks]
        headers = [c.value for c in self.columns]
        widths = [
            max([len(headers[i])] + [len(row[i]) for row in rows]) for i in range(len(headers))
        ]

        def fmt(cells: Sequence[str]) -> str:
            return " | ".join(cell.ljust(width) for cell, width in zip(cells, widths, strict=True))

        lines = [f"{fmt(headers)} | {self._day_ruler()}"]
        for task, row in zip(tasks, rows, strict=True):
            lines.append(f"{fmt(row)} | {self.bar(task)}")
        return "\n".join(lines)

    def _day_ruler(self) -> str:
        # Last digit of the day of month, one character per cell
        return "".join(str(day.day % 10) for day in self.mapper.visible_days)


def _mermaid_label(title: str) -> str:
    # Colons and hashes end a Mermaid task label
    return title.replace(":", " ").replace("#", " ").strip()


def _mermaid_tags(task: ScheduledTask) -> list[str]:
    if task.status == TaskStatus.COMPLETED:
        return ["done"]
    if task.status == TaskStatus.IN_PROGRESS:
        return ["active"]
    if task.status in (TaskStatus.OVERDUE, TaskStatus.BLOCKED):
        return ["crit"]
    return []


def generate_mermaid(
    tasks: Sequence[ScheduledTask],
    *,
    title: str = "Production Schedule",
    today: date | None = None,
) -> str:
    """Generate a Mermaid gantt chart with one section per factory category."""
    lines = [
        "gantt",
        f"    title {title}",
        "    dateFormat YYYY-MM-DD",
    ]
    if today is not None:
        lines.append(f"    todayMarker {today:%Y-%m-%d}")
    lines.append("")

    sections: dict[str, list[ScheduledTask]] = {}
    for task in tasks:
        category = classify_task(task.title)
        name = category.value.capitalize() if category is not None else "General"
        sections.setdefault(name, []).append(task)

    for name, section_tasks in sections.items():
        lines.append(f"    section {name}")
        for task in section_tasks:
            tags = _mermaid_tags(task)
            tags_str = ", ".join(tags) + ", " if tags else ""
            lines.append(
                f"    {_mermaid_label(task.title)} :{tags_str}{task.id}, "
                f"{task.start_date:%Y-%m-%d}, {task.duration_days}d"
            )

    return "\n".join(lines)
