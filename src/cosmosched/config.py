"""Application configuration (cosmosched.yaml).

A single YAML file holds the scheduling options, timeline geometry, color
storage and an optional template catalog path. Every section is optional.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field
from pydantic import ValidationError as PydanticValidationError

from . import context
from .exceptions import ConfigError
from .gantt import DEFAULT_CELL_WIDTH
from .render import DEFAULT_COLUMNS, ColumnId
from .scheduler import AssignmentConfig, DateConfig, SchedulingConfig, StatusConfig

CONFIG_FILENAME = "cosmosched.yaml"


def _default_columns() -> list[ColumnId]:
    return list(DEFAULT_COLUMNS)


class TimelineConfig(BaseModel):
    """Geometry and columns of the timeline view."""

    cell_width: float = Field(default=DEFAULT_CELL_WIDTH, gt=0)
    window_days: int = Field(default=42, ge=1)  # Visible days when no range is given
    columns: list[ColumnId] = Field(default_factory=_default_columns)


class ColorsConfig(BaseModel):
    """Where participant colors are remembered."""

    storage_path: Path | None = None  # None keeps colors in memory for one run


class AppConfig(BaseModel):
    """Top-level configuration."""

    dates: DateConfig = DateConfig()
    status: StatusConfig = StatusConfig()
    assignment: AssignmentConfig = AssignmentConfig()
    timeline: TimelineConfig = TimelineConfig()
    colors: ColorsConfig = ColorsConfig()
    templates_path: Path | None = None  # Custom template catalog YAML

    @property
    def scheduling(self) -> SchedulingConfig:
        """Scheduling options as consumed by the scheduler package."""
        return SchedulingConfig(dates=self.dates, status=self.status, assignment=self.assignment)


def load_config(config_path: Path | str) -> AppConfig:
    """Load configuration from a YAML file.

    Relative paths inside the file are resolved against the file's directory.

    Raises:
        ConfigError: If the file is missing, unreadable, or invalid
    """
    config_path = Path(config_path)

    if not config_path.exists():
        raise ConfigError(f"Config file not found: {config_path}")

    try:
        with config_path.open(encoding="utf-8") as f:
            data: Any = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigError(f"Failed to parse config {config_path}: {e}") from e

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigError(f"Config {config_path} must contain a dictionary at the root level")

    try:
        config = AppConfig.model_validate(data)
    except PydanticValidationError as e:
        raise ConfigError(f"Invalid config {config_path}: {e}") from e

    base = config_path.parent
    if config.templates_path is not None and not config.templates_path.is_absolute():
        config.templates_path = base / config.templates_path
    if config.colors.storage_path is not None and not config.colors.storage_path.is_absolute():
        config.colors.storage_path = base / config.colors.storage_path
    return config


def discover_config(
    plan_path: Path | str | None = None,
    config_path: Path | None = None,
) -> AppConfig:
    """Find and load configuration, falling back to defaults.

    Search order:
    1. Explicit config_path argument
    2. Global context (set via CLI --config)
    3. Plan file directory / cosmosched.yaml
    4. Current directory / cosmosched.yaml
    """
    # 1. Explicit argument
    if config_path is not None:
        return load_config(config_path)

    # 2. Global context
    ctx_config = context.get_config_path()
    if ctx_config is not None:
        return load_config(ctx_config)

    # 3. Plan directory
    if plan_path is not None:
        dir_config = Path(plan_path).parent / CONFIG_FILENAME
        if dir_config.exists():
            return load_config(dir_config)

    # 4. Current directory
    cwd_config = Path(CONFIG_FILENAME)
    if cwd_config.exists():
        return load_config(cwd_config)

    return AppConfig()
