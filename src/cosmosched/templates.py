"""Task template catalog grouped by factory role.

Order within a group is the real production sequence. Templates with
``depends_on_previous=False`` start alongside the template before them.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError as PydanticValidationError

from .exceptions import CatalogError
from .models import FactoryType, Priority, RoleTag, TaskTemplate, TaskType
from .schemas import CatalogSchema, TemplateSchema

# Group order used by all_templates()
FACTORY_TYPE_ORDER = (FactoryType.MANUFACTURING, FactoryType.CONTAINER, FactoryType.PACKAGING)

PRIORITY_LABELS = {
    Priority.HIGH: "High",
    Priority.MEDIUM: "Medium",
    Priority.LOW: "Low",
}


def _template(
    title: str,
    task_type: TaskType,
    duration: int,
    priority: Priority,
    roles: tuple[RoleTag, ...],
    depends_on_previous: bool,
) -> TaskTemplate:
    return TaskTemplate(
        title=title,
        type=task_type,
        duration_days=duration,
        priority=priority,
        participant_roles=frozenset(roles),
        depends_on_previous=depends_on_previous,
    )


PM = RoleTag.PM
FM = RoleTag.FACTORY_MANAGER
QA = RoleTag.QA

DEFAULT_TEMPLATES: dict[FactoryType, tuple[TaskTemplate, ...]] = {
    FactoryType.MANUFACTURING: (
        _template("Product design review", TaskType.DESIGN, 3, Priority.HIGH, (PM, FM), False),
        _template("Raw material sourcing", TaskType.SOURCING, 5, Priority.HIGH, (FM,), False),
        _template("Production line setup", TaskType.PREPARATION, 2, Priority.MEDIUM, (FM,), True),
        _template("Prototype production", TaskType.PROTOTYPING, 4, Priority.HIGH, (FM, QA), True),
        _template("Quality inspection", TaskType.QUALITY_CHECK, 2, Priority.HIGH, (QA,), True),
        _template("Mass production", TaskType.PRODUCTION, 10, Priority.MEDIUM, (FM,), True),
        _template("Final quality inspection", TaskType.QUALITY_CHECK, 2, Priority.HIGH, (QA,), True),
    ),
    FactoryType.CONTAINER: (
        _template("Container design sign-off", TaskType.DESIGN, 2, Priority.HIGH, (PM, FM), False),
        _template("Mold fabrication", TaskType.MOLD_MAKING, 7, Priority.HIGH, (FM,), True),
        _template("Injection sample run", TaskType.PROTOTYPING, 3, Priority.HIGH, (FM,), True),
        _template("Container quality test", TaskType.QUALITY_CHECK, 2, Priority.HIGH, (QA,), True),
        _template("Container mass production", TaskType.PRODUCTION, 8, Priority.MEDIUM, (FM,), True),
        _template("Container inspection", TaskType.INSPECTION, 1, Priority.MEDIUM, (QA,), True),
    ),
    FactoryType.PACKAGING: (
        _template("Packaging design approval", TaskType.DESIGN, 2, Priority.MEDIUM, (PM,), False),
        _template("Printing plate making", TaskType.PRINTING_PLATE, 3, Priority.HIGH, (FM,), True),
        _template("Test print", TaskType.PROTOTYPING, 1, Priority.MEDIUM, (FM,), True),
        _template("Color correction", TaskType.COLOR_CORRECTION, 1, Priority.HIGH, (FM, PM), True),
        _template("Main print run", TaskType.PRINTING, 5, Priority.MEDIUM, (FM,), True),
        _template("Post-processing", TaskType.POST_PROCESSING, 3, Priority.LOW, (FM,), True),
        _template("Packing complete", TaskType.PACKING, 2, Priority.LOW, (FM,), True),
    ),
}


class TaskTemplateCatalog:
    """Static catalog of task templates grouped by factory type."""

    def __init__(self, groups: dict[FactoryType, tuple[TaskTemplate, ...] | list[TaskTemplate]]):
        for factory_type, templates in groups.items():
            for template in templates:
                if not isinstance(template, TaskTemplate):
                    raise CatalogError(
                        f"Catalog group '{factory_type.value}' contains a non-template entry: "
                        f"{template!r}"
                    )
        self._groups: dict[FactoryType, tuple[TaskTemplate, ...]] = {
            factory_type: tuple(groups[factory_type])
            for factory_type in FACTORY_TYPE_ORDER
            if factory_type in groups
        }

    @classmethod
    def default(cls) -> TaskTemplateCatalog:
        """Catalog with the built-in cosmetics production sequences."""
        return cls(DEFAULT_TEMPLATES)

    def factory_types(self) -> list[FactoryType]:
        """Factory types that have templates, in catalog order."""
        return [t for t, templates in self._groups.items() if templates]

    def templates_for_factory_type(self, factory_type: FactoryType) -> list[TaskTemplate]:
        """Get the ordered templates for one factory type (empty if none)."""
        return list(self._groups.get(factory_type, ()))

    def all_templates(self) -> list[TaskTemplate]:
        """Get every template across all factory types (task-centric mode)."""
        result: list[TaskTemplate] = []
        for templates in self._groups.values():
            result.extend(templates)
        return result

    def __len__(self) -> int:
        return sum(len(templates) for templates in self._groups.values())


def priority_label(priority: Priority) -> str:
    """Human-readable label for a priority."""
    return PRIORITY_LABELS.get(priority, "None")


def _to_template(schema: TemplateSchema) -> TaskTemplate:
    return TaskTemplate(
        title=schema.title,
        type=schema.type,
        duration_days=schema.duration,
        priority=schema.priority,
        participant_roles=frozenset(schema.participants),
        depends_on_previous=schema.depends_on_previous,
    )


def catalog_from_data(data: dict[str, Any]) -> TaskTemplateCatalog:
    """Build a catalog from parsed YAML data.

    Raises:
        CatalogError: If the data does not describe a valid catalog
    """
    try:
        schema = CatalogSchema(**data)
    except PydanticValidationError as e:
        raise CatalogError(f"Invalid template catalog: {e}") from e

    return TaskTemplateCatalog(
        {
            FactoryType.MANUFACTURING: [_to_template(t) for t in schema.manufacturing],
            FactoryType.CONTAINER: [_to_template(t) for t in schema.container],
            FactoryType.PACKAGING: [_to_template(t) for t in schema.packaging],
        }
    )


def load_catalog(path: Path | str) -> TaskTemplateCatalog:
    """Load a template catalog from a YAML file.

    Raises:
        CatalogError: If the file is missing, unreadable, or invalid
    """
    path = Path(path)
    if not path.exists():
        raise CatalogError(f"Template catalog not found: {path}")

    try:
        with path.open(encoding="utf-8") as f:
            data: Any = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise CatalogError(f"Failed to parse template catalog: {e}") from e

    if not isinstance(data, dict):
        raise CatalogError("Template catalog must contain a dictionary at the root level")

    return catalog_from_data(data)  # type: ignore[arg-type]
