"""Plan loading: factories and projects from YAML."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError as PydanticValidationError

from .dates import DateNormalizer
from .exceptions import MissingReferenceError, ParseError, ValidationError
from .logger import get_logger
from .models import Factory, FactoryType, Project
from .schemas import PlanSchema, ProjectSchema


@dataclass
class Plan:
    """Factories and projects loaded from one plan file."""

    factories: list[Factory] = field(default_factory=list[Factory])
    projects: list[Project] = field(default_factory=list[Project])

    def get_project(self, project_id: str) -> Project | None:
        """Get a project by ID."""
        return next((p for p in self.projects if p.id == project_id), None)


def _to_project(schema: ProjectSchema, normalizer: DateNormalizer) -> Project:
    start = normalizer.parse(schema.start_date)
    end = normalizer.parse(schema.end_date) if schema.end_date is not None else None
    invalid = start.is_fallback or (end is not None and end.is_fallback)
    return Project(
        id=schema.id,
        name=schema.name or schema.id,
        start_date=start.day,
        end_date=end.day if end is not None else start.day,
        status=schema.status,
        progress=schema.progress,
        manufacturer_ids=list(schema.manufacturer_ids),
        container_ids=list(schema.container_ids),
        packaging_ids=list(schema.packaging_ids),
        created_at=schema.created_at,
        has_invalid_dates=invalid,
    )


def plan_from_data(data: dict[str, Any], normalizer: DateNormalizer | None = None) -> Plan:
    """Build a plan from parsed YAML data.

    Raises:
        ValidationError: If the data is structurally invalid or has duplicate IDs
        MissingReferenceError: If a project selects an unknown or mistyped factory
    """
    normalizer = normalizer or DateNormalizer()
    try:
        schema = PlanSchema.model_validate(data)
    except PydanticValidationError as e:
        raise ValidationError(f"Invalid plan: {e}") from e

    factories: dict[str, Factory] = {}
    for entry in schema.factories:
        if entry.id in factories:
            raise ValidationError(f"Duplicate factory ID: {entry.id}")
        factories[entry.id] = Factory(id=entry.id, name=entry.name, type=entry.type)

    projects: list[Project] = []
    seen: set[str] = set()
    for entry in schema.projects:
        if entry.id in seen:
            raise ValidationError(f"Duplicate project ID: {entry.id}")
        seen.add(entry.id)
        project = _to_project(entry, normalizer)
        _check_factory_refs(project, factories)
        projects.append(project)

    get_logger().changes(
        "Loaded %d factories and %d projects", len(factories), len(projects)
    )
    return Plan(factories=list(factories.values()), projects=projects)


def _check_factory_refs(project: Project, factories: dict[str, Factory]) -> None:
    for factory_type in FactoryType:
        for factory_id in project.factory_ids(factory_type):
            factory = factories.get(factory_id)
            if factory is None:
                raise MissingReferenceError(
                    f"Project {project.id} selects unknown factory: {factory_id}"
                )
            if factory.type != factory_type:
                raise ValidationError(
                    f"Project {project.id} selects {factory_id} as a {factory_type.value} "
                    f"factory, but it is a {factory.type.value} factory"
                )


def load_plan(path: Path | str, normalizer: DateNormalizer | None = None) -> Plan:
    """Load a plan file.

    Raises:
        ParseError: If the file is missing or is not a YAML mapping
        ValidationError: If the plan content is invalid
    """
    path = Path(path)
    if not path.exists():
        raise ParseError(f"File not found: {path}")

    try:
        with path.open(encoding="utf-8") as f:
            data: Any = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ParseError(f"Failed to parse YAML: {e}") from e

    if not isinstance(data, dict):
        raise ParseError("YAML must contain a dictionary at the root level")

    return plan_from_data(data, normalizer)  # type: ignore[arg-type]
