"""
Job-field rule sets

Each job field has a fixed, ordered rule set (first failure wins inside a
field). Whole-job validation runs every field independently and keeps each
field's first error, so a form can highlight several fields at once while
each field still shows one unambiguous message.
"""

import math
from enum import Enum
from typing import Any, Dict, Mapping, Union

from pydantic import ValidationError as PydanticValidationError

from ..models.job_posting import JobPosting, JobPostingDraft, Location, SalaryUnit, DurationUnit, JobStatus
from .outcome import VALID, Invalid, ValidationError, ValidationErrorKind, ValidationOutcome
from .rules import Rule, Validator

MIN_TITLE_LENGTH = 3
MAX_TITLE_LENGTH = 100
MIN_DESCRIPTION_LENGTH = 10
MAX_DESCRIPTION_LENGTH = 5000
MAX_SALARY = 1_000_000.0
MIN_DURATION = 1
MAX_DURATION = 365

ALLOWED_SALARY_UNITS = tuple(unit.value for unit in SalaryUnit)
ALLOWED_DURATION_UNITS = tuple(unit.value for unit in DurationUnit)
ALLOWED_JOB_STATUSES = tuple(status.value for status in JobStatus)

TITLE = "title"
DESCRIPTION = "description"
SALARY_AMOUNT = "salary_amount"
SALARY_UNIT = "salary_unit"
DURATION_AMOUNT = "duration_amount"
DURATION_UNIT = "duration_unit"
LOCATION = "location"
STATUS = "status"
EMPLOYER_ID = "employer_id"

# Declaration order; whole-job errors are reported in this order.
FIELD_ORDER = (
    TITLE,
    DESCRIPTION,
    SALARY_AMOUNT,
    SALARY_UNIT,
    DURATION_AMOUNT,
    DURATION_UNIT,
    LOCATION,
    STATUS,
    EMPLOYER_ID,
)

# Only canonical postings carry these.
POSTING_ONLY_FIELDS = frozenset({STATUS, EMPLOYER_ID})

COST_FIELDS = frozenset({SALARY_AMOUNT, SALARY_UNIT, DURATION_AMOUNT, DURATION_UNIT})


def _enum_text(value: Any) -> str:
    if isinstance(value, Enum):
        return str(value.value)
    return str(value)


def _one_of(allowed, normalize):
    return lambda value: normalize(_enum_text(value)) in allowed


def _is_integral(value: Any) -> bool:
    if isinstance(value, bool):
        return False
    if isinstance(value, int):
        return True
    if isinstance(value, str):
        try:
            value = float(value.strip())
        except ValueError:
            return False
    return isinstance(value, float) and math.isfinite(value) and value.is_integer()


def _parses_as_location(value: Any) -> bool:
    if not isinstance(value, Mapping):
        return True
    try:
        Location(**value)
    except PydanticValidationError:
        return False
    return True


def _as_location(value: Any) -> Location:
    if isinstance(value, Mapping):
        return Location(**value)
    return value


def _has_state_and_district(location: Any) -> bool:
    location = _as_location(location)
    return bool(location.state and location.state.strip()) \
        and bool(location.district and location.district.strip())


def _latitude_in_range(location: Any) -> bool:
    location = _as_location(location)
    return location.latitude is None or -90 <= location.latitude <= 90


def _longitude_in_range(location: Any) -> bool:
    location = _as_location(location)
    return location.longitude is None or -180 <= location.longitude <= 180


FIELD_VALIDATORS: Dict[str, Validator] = {
    TITLE: Validator([
        Rule.not_empty("Title is required"),
        Rule.min_length(MIN_TITLE_LENGTH, f"Title must be at least {MIN_TITLE_LENGTH} characters"),
        Rule.max_length(MAX_TITLE_LENGTH, f"Title must not exceed {MAX_TITLE_LENGTH} characters"),
    ]),
    DESCRIPTION: Validator([
        Rule.not_empty("Description is required"),
        Rule.min_length(MIN_DESCRIPTION_LENGTH, f"Description must be at least {MIN_DESCRIPTION_LENGTH} characters"),
        Rule.max_length(MAX_DESCRIPTION_LENGTH, f"Description must not exceed {MAX_DESCRIPTION_LENGTH} characters"),
    ]),
    SALARY_AMOUNT: Validator([
        Rule.not_empty("Salary is required"),
        Rule.at_least(0, "Salary must be greater than 0", exclusive=True),
        Rule.at_most(MAX_SALARY, "Salary must not exceed 1,000,000"),
    ]),
    SALARY_UNIT: Validator([
        Rule.not_empty("Salary unit is required"),
        Rule.custom(
            _one_of(ALLOWED_SALARY_UNITS, str.lower),
            f"Invalid salary unit. Allowed values: {', '.join(ALLOWED_SALARY_UNITS)}",
        ),
    ]),
    DURATION_AMOUNT: Validator([
        Rule.not_empty("Duration is required"),
        Rule.custom(_is_integral, "Duration must be a whole number"),
        Rule.between(MIN_DURATION, MAX_DURATION, f"Duration must be between {MIN_DURATION} and {MAX_DURATION}"),
    ]),
    DURATION_UNIT: Validator([
        Rule.not_empty("Duration unit is required"),
        Rule.custom(
            _one_of(ALLOWED_DURATION_UNITS, str.lower),
            f"Invalid duration unit. Allowed values: {', '.join(ALLOWED_DURATION_UNITS)}",
        ),
    ]),
    LOCATION: Validator([
        Rule.custom(_parses_as_location, "Latitude and longitude must be numbers"),
        Rule.custom(
            _has_state_and_district,
            "Both state and district are required",
            ValidationErrorKind.REQUIRED,
        ),
        Rule.custom(_latitude_in_range, "Invalid latitude", ValidationErrorKind.OUT_OF_RANGE),
        Rule.custom(_longitude_in_range, "Invalid longitude", ValidationErrorKind.OUT_OF_RANGE),
    ]),
    STATUS: Validator([
        Rule.not_empty("Status is required"),
        Rule.custom(
            _one_of(ALLOWED_JOB_STATUSES, str.upper),
            f"Invalid status. Allowed values: {', '.join(ALLOWED_JOB_STATUSES)}",
        ),
    ]),
    EMPLOYER_ID: Validator([
        Rule.not_empty("Employer ID is required"),
    ]),
}


def validate_field(field: str, value: Any) -> ValidationOutcome:
    """
    Validate one job field.

    Raises:
        KeyError: ``field`` is not a known job field
    """
    outcome = FIELD_VALIDATORS[field].validate(value)
    if outcome.is_valid:
        return outcome
    return Invalid(errors=[error.for_field(field) for error in outcome.errors])


JobLike = Union[JobPostingDraft, JobPosting, Mapping[str, Any]]


def _fields_for(job: JobLike):
    if isinstance(job, JobPostingDraft):
        return [field for field in FIELD_ORDER if field not in POSTING_ONLY_FIELDS]
    return list(FIELD_ORDER)


def _read(job: JobLike, field: str) -> Any:
    if isinstance(job, Mapping):
        return job.get(field)
    return getattr(job, field, None)


def collect_field_errors(job: JobLike) -> Dict[str, ValidationError]:
    """
    Run every field validator independently.

    Returns:
        field -> first error of that field, in declaration order
    """
    errors: Dict[str, ValidationError] = {}
    for field in _fields_for(job):
        outcome = validate_field(field, _read(job, field))
        if not outcome.is_valid:
            errors[field] = outcome.first_error
    return errors


def validate_job(job: JobLike) -> ValidationOutcome:
    """
    Whole-job validation.

    Drafts are checked on their form fields only; postings (and mappings)
    additionally need a status and an employer id.
    """
    errors = collect_field_errors(job)
    if not errors:
        return VALID
    return Invalid(errors=list(errors.values()))
