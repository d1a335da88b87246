"""Pydantic schemas for YAML data validation."""

from __future__ import annotations

from datetime import date, datetime
from typing import Any

from pydantic import BaseModel, Field, field_validator

from .models import FactoryType, Priority, ProjectStatus, RoleTag, TaskType


def _as_id_list(v: Any) -> list[str]:
    if v is None:
        return []
    if isinstance(v, list):
        return [str(item) for item in v]  # type: ignore[misc]
    return [str(v)]


class TemplateSchema(BaseModel):
    """Schema for one task template in a catalog file."""

    title: str
    type: TaskType
    duration: int = Field(ge=1)
    priority: Priority = Priority.MEDIUM
    participants: list[RoleTag] = Field(default_factory=list)
    depends_on_previous: bool = False


class CatalogSchema(BaseModel):
    """Schema for a template catalog file: factory type -> ordered templates."""

    manufacturing: list[TemplateSchema] = Field(default_factory=list)
    container: list[TemplateSchema] = Field(default_factory=list)
    packaging: list[TemplateSchema] = Field(default_factory=list)


class FactorySchema(BaseModel):
    """Schema for a factory entry in a plan file."""

    id: str
    name: str
    type: FactoryType

    @field_validator("id", mode="before")
    @classmethod
    def coerce_id_to_string(cls, v: Any) -> str:
        """Allow numeric IDs in YAML."""
        return str(v)


class ProjectSchema(BaseModel):
    """Schema for a project entry in a plan file.

    Dates are kept raw here; the loader normalizes them leniently.
    """

    id: str
    name: str = ""
    start_date: str | date | datetime | None = None
    end_date: str | date | datetime | None = None
    status: ProjectStatus = ProjectStatus.PLANNING
    progress: int = Field(default=0, ge=0, le=100)
    manufacturer_ids: list[str] = Field(default_factory=list)
    container_ids: list[str] = Field(default_factory=list)
    packaging_ids: list[str] = Field(default_factory=list)
    created_at: datetime | None = None

    @field_validator("id", mode="before")
    @classmethod
    def coerce_id_to_string(cls, v: Any) -> str:
        """Allow numeric IDs in YAML."""
        return str(v)

    @field_validator("manufacturer_ids", "container_ids", "packaging_ids", mode="before")
    @classmethod
    def ensure_list(cls, v: Any) -> list[str]:
        """Accept a single ID or a list of IDs."""
        return _as_id_list(v)


class PlanSchema(BaseModel):
    """Schema for the entire plan YAML file."""

    factories: list[FactorySchema] = Field(default_factory=list)
    projects: list[ProjectSchema] = Field(default_factory=list)
