"""
Data models of the draft & publication core
"""

from .job_posting import (
    # enums
    SalaryUnit,
    DurationUnit,
    JobStatus,

    # models
    Location,
    JobPostingDraft,
    JobPosting,
    CostBreakdown,
    utc_now,
)

__all__ = [
    "SalaryUnit",
    "DurationUnit",
    "JobStatus",

    "Location",
    "JobPostingDraft",
    "JobPosting",
    "CostBreakdown",
    "utc_now",
]
