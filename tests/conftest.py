"""Pytest configuration and fixtures for cosmosched tests."""

from __future__ import annotations

from collections.abc import Iterator
from datetime import date

import pytest

from cosmosched.context import reset_context
from cosmosched.logger import reset_logger
from cosmosched.models import Factory, FactoryType, Project, ProjectStatus
from cosmosched.scheduler import ProjectScheduleService

# As-of date used by most tests: inside the manufacturing prototype task
AS_OF = date(2025, 7, 10)
PROJECT_START = date(2025, 7, 1)


@pytest.fixture(autouse=True)
def clean_state() -> Iterator[None]:
    """Reset the logger and CLI context around each test so runs don't leak state."""
    reset_logger()
    reset_context()
    yield
    reset_logger()
    reset_context()


@pytest.fixture
def factories() -> list[Factory]:
    """A factory pool with four manufacturers and one of each other type."""
    return [
        Factory(id="M1", name="Seoul Lab", type=FactoryType.MANUFACTURING),
        Factory(id="M2", name="Incheon Formulations", type=FactoryType.MANUFACTURING),
        Factory(id="M3", name="Busan Skin Works", type=FactoryType.MANUFACTURING),
        Factory(id="M4", name="Daegu Creams", type=FactoryType.MANUFACTURING),
        Factory(id="C1", name="Hwaseong Bottles", type=FactoryType.CONTAINER),
        Factory(id="P1", name="Paju Print", type=FactoryType.PACKAGING),
    ]


@pytest.fixture
def project() -> Project:
    """An active project selecting every fixture factory."""
    return Project(
        id="P1",
        name="Hydrating serum",
        start_date=PROJECT_START,
        end_date=date(2025, 8, 31),
        status=ProjectStatus.IN_PROGRESS,
        progress=40,
        manufacturer_ids=["M1", "M2", "M3", "M4"],
        container_ids=["C1"],
        packaging_ids=["P1"],
    )


@pytest.fixture
def service(factories: list[Factory]) -> ProjectScheduleService:
    """Service with the default catalog and a fixed as-of date."""
    return ProjectScheduleService(factories, current_date=AS_OF)
