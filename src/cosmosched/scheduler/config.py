"""Configuration classes for the scheduling engine."""

from pydantic import BaseModel, Field, model_validator

from cosmosched.dates import DateFrame


class DateConfig(BaseModel):
    """How dates are truncated to calendar days."""

    frame: DateFrame = DateFrame.LOCAL


class StatusConfig(BaseModel):
    """Status and progress derivation options."""

    distinguish_overdue: bool = False  # Report OVERDUE instead of COMPLETED past the end date
    # In-progress band; 0 and 100 stay reserved for pending and completed
    progress_floor: int = Field(default=1, ge=1, le=99)
    progress_ceiling: int = Field(default=99, ge=1, le=99)

    @model_validator(mode="after")
    def validate_band(self) -> "StatusConfig":
        """Ensure floor does not exceed ceiling."""
        if self.progress_floor > self.progress_ceiling:
            raise ValueError("progress_floor must not exceed progress_ceiling")
        return self


class AssignmentConfig(BaseModel):
    """Factory assignment options."""

    max_sample_factories: int = Field(default=3, ge=1)  # Parallel sampling fan-out


class SchedulingConfig(BaseModel):
    """Configuration for task expansion, status and assignment."""

    dates: DateConfig = DateConfig()
    status: StatusConfig = StatusConfig()
    assignment: AssignmentConfig = AssignmentConfig()
