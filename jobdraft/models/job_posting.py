"""
Job posting data models

- JobPostingDraft: mutable, possibly-invalid scratch copy of a posting
- JobPosting: canonical posting owned by the JobStore
- Location: state / district with optional coordinates
- CostBreakdown: derived total-compensation figure
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Optional, Annotated
from uuid import uuid4

from pydantic import BaseModel, Field


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class SalaryUnit(str, Enum):
    """Pay period of a salary amount"""
    HOURLY = "hourly"
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"


class DurationUnit(str, Enum):
    """Unit of a work duration"""
    HOURS = "hours"
    DAYS = "days"
    WEEKS = "weeks"
    MONTHS = "months"


class JobStatus(str, Enum):
    """Job posting status"""
    OPEN = "OPEN"
    ACTIVE = "ACTIVE"
    PENDING = "PENDING"
    CLOSED = "CLOSED"
    DELETED = "DELETED"


class Location(BaseModel):
    """Work location"""
    state: str = Field("", description="State")
    district: str = Field("", description="District")
    latitude: Optional[float] = Field(None, description="Latitude")
    longitude: Optional[float] = Field(None, description="Longitude")

    def is_blank(self) -> bool:
        return not self.state.strip() and not self.district.strip() \
            and self.latitude is None and self.longitude is None


class JobPostingDraft(BaseModel):
    """
    Draft job posting.

    A draft is a scratchpad: every field may be blank or invalid. Unit fields
    are plain strings so that whatever the user picked round-trips through
    the DraftStore unchanged; field validation decides what is acceptable.
    """
    id: str = Field(default_factory=lambda: str(uuid4()), description="Draft id")
    title: str = Field("", description="Title")
    description: str = Field("", description="Description")
    salary_amount: Optional[Annotated[float, Field(ge=0)]] = Field(None, description="Salary amount")
    salary_unit: str = Field(SalaryUnit.MONTHLY.value, description="Salary unit")
    duration_amount: Optional[int] = Field(None, description="Work duration")
    duration_unit: str = Field(DurationUnit.DAYS.value, description="Work duration unit")
    location: Location = Field(default_factory=Location, description="Work location")
    last_modified: datetime = Field(default_factory=utc_now, description="Last modification time")

    def is_empty(self) -> bool:
        """True when the user has entered nothing worth keeping"""
        return (
            not self.title.strip()
            and not self.description.strip()
            and not self.salary_amount
            and not self.duration_amount
            and self.location.is_blank()
        )

    def touch(self) -> "JobPostingDraft":
        return self.model_copy(update={"last_modified": utc_now()})


class JobPosting(BaseModel):
    """
    Canonical job posting.

    Only ever created from input that passed whole-job validation.
    """
    id: str = Field("", description="Job id, assigned by the JobStore on create")
    employer_id: str = Field(..., description="Owning employer")
    title: str = Field(..., description="Title")
    description: str = Field(..., description="Description")
    salary_amount: Annotated[float, Field(ge=0)] = Field(..., description="Salary amount")
    salary_unit: str = Field(..., description="Salary unit")
    duration_amount: int = Field(..., description="Work duration")
    duration_unit: str = Field(..., description="Work duration unit")
    location: Location = Field(..., description="Work location")
    status: str = Field(JobStatus.OPEN.value, description="Status")
    created_at: datetime = Field(default_factory=utc_now, description="Creation time")
    updated_at: datetime = Field(default_factory=utc_now, description="Last update time")


class CostBreakdown(BaseModel):
    """Total cost of a posting derived from its salary and duration"""
    base_amount: float = Field(0.0, description="Salary amount per period")
    total_amount: float = Field(0.0, description="Total cost over the whole duration")
    per_period_label: str = Field("", description="e.g. 'per day'")
    total_periods: float = Field(0.0, description="Duration expressed in salary periods")

    model_config = {"frozen": True}
