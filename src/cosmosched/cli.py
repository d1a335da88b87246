"""Command-line interface for cosmosched."""

from __future__ import annotations

from datetime import date, timedelta
from enum import Enum
from pathlib import Path
from typing import Annotated, NoReturn

import typer

from . import context
from .colors import ColorAssignmentService, MemoryColorStorage, YamlColorStorage
from .config import AppConfig, discover_config
from .dates import DateNormalizer
from .drag import DragMode, DragRescheduleController
from .exceptions import CosmoschedError
from .gantt import GanttPositionMapper
from .loader import Plan, load_plan
from .logger import setup_logger
from .models import FactoryType, ScheduledTask
from .render import ColumnId, RenderContext, TextTimelineRenderer, generate_mermaid
from .scheduler import ProjectScheduleService
from .templates import TaskTemplateCatalog, load_catalog, priority_label

app = typer.Typer(
    name="cosmosched",
    help="Task scheduling and timeline engine for cosmetics production orders",
    add_completion=False,
)


class TimelineFormat(str, Enum):
    """Output formats of the timeline command."""

    TEXT = "text"
    MERMAID = "mermaid"


class ShiftMode(str, Enum):
    """Drag gestures the shift command can replay."""

    MOVE = "move"
    RESIZE_START = "resize-start"
    RESIZE_END = "resize-end"


_DRAG_MODES = {
    ShiftMode.MOVE: DragMode.MOVE,
    ShiftMode.RESIZE_START: DragMode.RESIZE_START,
    ShiftMode.RESIZE_END: DragMode.RESIZE_END,
}


@app.callback()
def main_callback(
    verbose: Annotated[
        int,
        typer.Option(
            "--verbose",
            "-v",
            help="Verbosity level: 0=silent (default), 1=show changes, 2=show all checks, 3=debug",
            min=0,
            max=3,
        ),
    ] = 0,
    config: Annotated[
        Path | None,
        typer.Option(
            "--config",
            "-c",
            help="Path to config file (default: cosmosched.yaml)",
        ),
    ] = None,
) -> None:
    """Global options for cosmosched commands."""
    setup_logger(verbose)
    context.set_config_path(config)


def _fail(message: str) -> NoReturn:
    typer.echo(f"Error: {message}", err=True)
    raise typer.Exit(1)


def _parse_date_option(date_str: str | None, option: str) -> date | None:
    """Parse a YYYY-MM-DD CLI option, exiting on bad input."""
    if date_str is None:
        return None

    try:
        return date.fromisoformat(date_str)
    except ValueError:
        typer.echo(
            f"Error: Invalid {option} '{date_str}'. Use YYYY-MM-DD format.",
            err=True,
        )
        raise typer.Exit(1) from None


def _load_catalog(config: AppConfig) -> TaskTemplateCatalog:
    if config.templates_path is None:
        return TaskTemplateCatalog.default()
    return load_catalog(config.templates_path)


def _load(plan_file: Path) -> tuple[AppConfig, Plan]:
    config = discover_config(plan_file)
    plan = load_plan(plan_file, DateNormalizer(config.dates.frame))
    return config, plan


def _expand(
    config: AppConfig,
    plan: Plan,
    project_id: str | None,
    current_date: date | None,
) -> tuple[ProjectScheduleService, list[ScheduledTask]]:
    """Expand the selected project (or every project) into tasks."""
    service = ProjectScheduleService(
        plan.factories,
        catalog=_load_catalog(config),
        config=config.scheduling,
        current_date=current_date,
    )

    if project_id is not None:
        project = plan.get_project(project_id)
        if project is None:
            _fail(f"Unknown project '{project_id}'")
        projects = [project]
    else:
        projects = plan.projects

    tasks: list[ScheduledTask] = []
    for project in projects:
        tasks.extend(service.expand_project(project))
    return service, tasks


def _color_service(config: AppConfig) -> ColorAssignmentService:
    if config.colors.storage_path is not None:
        return ColorAssignmentService(YamlColorStorage(config.colors.storage_path))
    return ColorAssignmentService(MemoryColorStorage())


@app.command()
def templates(
    factory_type: Annotated[
        FactoryType | None,
        typer.Option("--factory-type", "-t", help="Only list templates for this factory type"),
    ] = None,
) -> None:
    """List the task templates in production order."""
    try:
        catalog = _load_catalog(discover_config())
    except CosmoschedError as e:
        _fail(str(e))

    types = [factory_type] if factory_type is not None else catalog.factory_types()
    for ftype in types:
        typer.echo(f"{ftype.value}:")
        for template in catalog.templates_for_factory_type(ftype):
            chained = "after previous" if template.depends_on_previous else "parallel"
            typer.echo(
                f"  {template.title} ({template.type.value}, {template.duration_days}d, "
                f"{priority_label(template.priority)}, {chained})"
            )


@app.command()
def tasks(
    plan_file: Annotated[Path, typer.Argument(help="Path to the plan YAML file")] = Path(
        "plan.yaml"
    ),
    *,
    project: Annotated[
        str | None, typer.Option("--project", "-p", help="Only expand this project")
    ] = None,
    current_date: Annotated[
        str | None,
        typer.Option("--current-date", help="As-of date for status (YYYY-MM-DD)"),
    ] = None,
) -> None:
    """Expand projects into tasks and list them."""
    as_of = _parse_date_option(current_date, "--current-date")
    try:
        config, plan = _load(plan_file)
        service, expanded = _expand(config, plan, project, as_of)
    except CosmoschedError as e:
        _fail(str(e))

    for task in expanded:
        factories = ", ".join(a.factory_name for a in task.factory_assignments) or "-"
        marker = " (invalid date)" if task.id in service.invalid_dates else ""
        typer.echo(
            f"{task.id}: {task.title} [{task.status.value} {task.progress}%] "
            f"{task.start_date} -> {task.end_date}{marker} @ {factories}"
        )


@app.command()
def timeline(  # noqa: PLR0913 - CLI command needs multiple options
    plan_file: Annotated[Path, typer.Argument(help="Path to the plan YAML file")] = Path(
        "plan.yaml"
    ),
    *,
    project: Annotated[
        str | None, typer.Option("--project", "-p", help="Only show this project")
    ] = None,
    start_date: Annotated[
        str | None,
        typer.Option("--start-date", help="First visible day (default: earliest task start)"),
    ] = None,
    days: Annotated[
        int | None,
        typer.Option("--days", help="Visible days (default: timeline.window_days)", min=1),
    ] = None,
    cell_width: Annotated[
        float | None,
        typer.Option("--cell-width", help="Pixel width of one day (default: timeline.cell_width)"),
    ] = None,
    current_date: Annotated[
        str | None,
        typer.Option("--current-date", help="As-of date for status (YYYY-MM-DD)"),
    ] = None,
    format: Annotated[  # noqa: A002 - 'format' is appropriate name for CLI option
        TimelineFormat,
        typer.Option("--format", "-f", help="Output format"),
    ] = TimelineFormat.TEXT,
    output: Annotated[Path | None, typer.Option("--output", "-o", help="Output file path")] = None,
) -> None:
    """Render the task timeline as text or a Mermaid gantt chart."""
    as_of = _parse_date_option(current_date, "--current-date")
    window_start = _parse_date_option(start_date, "--start-date")
    if cell_width is not None and cell_width <= 0:
        _fail("--cell-width must be positive")

    try:
        config, plan = _load(plan_file)
        service, expanded = _expand(config, plan, project, as_of)
    except CosmoschedError as e:
        _fail(str(e))

    if format == TimelineFormat.MERMAID:
        rendered = generate_mermaid(expanded, today=service.current_date)
    else:
        if window_start is None:
            window_start = min((t.start_date for t in expanded), default=service.current_date)
        mapper = GanttPositionMapper.window(
            window_start,
            days or config.timeline.window_days,
            cell_width or config.timeline.cell_width,
        )
        columns = list(config.timeline.columns)
        if service.invalid_dates and ColumnId.DATES not in columns:
            columns.append(ColumnId.DATES)
        renderer = TextTimelineRenderer(
            mapper,
            columns,
            RenderContext(invalid_dates=service.invalid_dates, colors=_color_service(config)),
        )
        rendered = renderer.render(expanded)

    if output:
        output.write_text(rendered + "\n", encoding="utf-8")
        typer.echo(f"Timeline written to {output}")
    else:
        typer.echo(rendered)


@app.command()
def shift(  # noqa: PLR0913 - CLI command needs multiple options
    plan_file: Annotated[Path, typer.Argument(help="Path to the plan YAML file")] = Path(
        "plan.yaml"
    ),
    *,
    project: Annotated[str, typer.Option("--project", "-p", help="Project of the task")],
    task: Annotated[str, typer.Option("--task", help="Task ID, e.g. task-P1-3")],
    days: Annotated[int, typer.Option("--days", help="Days to drag by (negative = earlier)")],
    mode: Annotated[
        ShiftMode, typer.Option("--mode", "-m", help="Which part of the bar to drag")
    ] = ShiftMode.MOVE,
    current_date: Annotated[
        str | None,
        typer.Option("--current-date", help="As-of date for status (YYYY-MM-DD)"),
    ] = None,
) -> None:
    """Replay a drag gesture on one task and show the committed result."""
    as_of = _parse_date_option(current_date, "--current-date")
    try:
        config, plan = _load(plan_file)
        service, _ = _expand(config, plan, project, as_of)
        target = service.store.get(task)
    except CosmoschedError as e:
        _fail(str(e))

    drag_mode = _DRAG_MODES[mode]
    edge = target.end_date if drag_mode == DragMode.RESIZE_END else target.start_date

    # Window wide enough to hold the bar before and after the drag
    first_day = min(target.start_date, edge + timedelta(days=days))
    span = target.duration_days + abs(days) + 1
    mapper = GanttPositionMapper.window(first_day, span, config.timeline.cell_width)

    cell = mapper.cell_width
    origin_x = mapper.date_to_pixel(edge) + cell / 2
    controller = DragRescheduleController(service, mapper)
    controller.pointer_down(task, origin_x, drag_mode)
    controller.pointer_move(origin_x + days * cell)
    update = controller.pointer_up()

    if update is None:
        typer.echo(f"{task}: unchanged ({target.start_date} -> {target.end_date})")
        return

    result = service.store.get(task)
    typer.echo(
        f"{task}: {target.start_date} -> {target.end_date} moved to "
        f"{result.start_date} -> {result.end_date} [{result.status.value} {result.progress}%]"
    )


def main() -> int:
    """Main entry point."""
    # Typer handles sys.exit() internally
    app()
    return 0


if __name__ == "__main__":
    main()
