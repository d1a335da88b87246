"""Scheduler package - template-driven task expansion for production orders.

This package turns a project into dated, assigned tasks:
- TaskDateScheduler walks the template sequence from the project start
- TaskStatusResolver derives status and progress as of the current date
- FactoryAssignmentResolver routes tasks to the project's factories

Main entry point:
- ProjectScheduleService: expansion, factory changes and task commits

Configuration:
- SchedulingConfig: Main configuration (dates, status, assignment)
"""

# Factory routing
from .assignment import (
    FactoryAssignmentResolver,
    assignment_mismatch,
    can_transfer,
    classify_task,
    follow_reschedule,
    sync_assignments,
)

# Configuration
from .config import AssignmentConfig, DateConfig, SchedulingConfig, StatusConfig

# Date scheduling
from .dates import TaskDateScheduler, schedule_dates

# High-level service
from .service import ProjectScheduleService, task_id_for

# Status derivation
from .status import TaskStatusResolver, resolve_progress, resolve_status

__all__ = [
    # Configuration
    "SchedulingConfig",
    "DateConfig",
    "StatusConfig",
    "AssignmentConfig",
    # Date scheduling
    "TaskDateScheduler",
    "schedule_dates",
    # Status derivation
    "TaskStatusResolver",
    "resolve_status",
    "resolve_progress",
    # Factory routing
    "FactoryAssignmentResolver",
    "classify_task",
    "assignment_mismatch",
    "can_transfer",
    "follow_reschedule",
    "sync_assignments",
    # High-level service
    "ProjectScheduleService",
    "task_id_for",
]
