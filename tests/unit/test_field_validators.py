"""
Job field validator tests

Checks the fixed rule set of every job field and whole-job validation of
drafts, postings and plain field maps.
"""

import logging

import pytest

from jobdraft.models import JobPosting, JobPostingDraft, Location, SalaryUnit, DurationUnit, JobStatus
from jobdraft.validation import (
    FIELD_ORDER,
    ValidationErrorKind,
    collect_field_errors,
    validate_field,
    validate_job,
)

logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


def _error(field, value):
    outcome = validate_field(field, value)
    assert not outcome.is_valid, f"{field}={value!r} should be invalid"
    return outcome.first_error


class TestFieldValidators:
    """Per-field rule sets"""

    def test_title(self):
        assert validate_field("title", "Warehouse Associate").is_valid

        error = _error("title", "")
        assert error.field == "title"
        assert error.kind == ValidationErrorKind.REQUIRED
        assert error.message == "Title is required"

        assert _error("title", "Hi").kind == ValidationErrorKind.TOO_SHORT
        assert _error("title", "x" * 101).kind == ValidationErrorKind.TOO_LONG
        assert validate_field("title", "x" * 100).is_valid

    def test_description(self):
        assert validate_field("description", "Pick and pack customer orders").is_valid
        assert _error("description", "   ").kind == ValidationErrorKind.REQUIRED
        assert _error("description", "Too short").kind == ValidationErrorKind.TOO_SHORT
        assert _error("description", "x" * 5001).kind == ValidationErrorKind.TOO_LONG

    def test_salary_amount(self):
        assert validate_field("salary_amount", 500).is_valid
        assert validate_field("salary_amount", 1_000_000).is_valid

        assert _error("salary_amount", None).kind == ValidationErrorKind.REQUIRED

        zero = _error("salary_amount", 0)
        assert zero.kind == ValidationErrorKind.OUT_OF_RANGE
        assert zero.message == "Salary must be greater than 0"

        assert _error("salary_amount", -5).kind == ValidationErrorKind.OUT_OF_RANGE
        assert _error("salary_amount", 1_000_000.01).kind == ValidationErrorKind.OUT_OF_RANGE
        assert _error("salary_amount", "abc").kind == ValidationErrorKind.INVALID_VALUE

    @pytest.mark.parametrize("unit", ["hourly", "Daily", "WEEKLY", SalaryUnit.MONTHLY])
    def test_salary_unit_accepts_known_units(self, unit):
        assert validate_field("salary_unit", unit).is_valid

    def test_salary_unit_rejects_unknown_units(self):
        assert _error("salary_unit", "").kind == ValidationErrorKind.REQUIRED
        assert _error("salary_unit", "yearly").kind == ValidationErrorKind.INVALID_VALUE

    def test_duration_amount(self):
        assert validate_field("duration_amount", 1).is_valid
        assert validate_field("duration_amount", 365).is_valid
        assert validate_field("duration_amount", 5.0).is_valid

        assert _error("duration_amount", None).kind == ValidationErrorKind.REQUIRED
        assert _error("duration_amount", 0).kind == ValidationErrorKind.OUT_OF_RANGE
        assert _error("duration_amount", 366).kind == ValidationErrorKind.OUT_OF_RANGE

        fractional = _error("duration_amount", 2.5)
        assert fractional.kind == ValidationErrorKind.INVALID_VALUE
        assert fractional.message == "Duration must be a whole number"

    def test_numeric_strings_behave_like_numbers(self):
        assert validate_field("duration_amount", "5").is_valid
        assert validate_field("duration_amount", " 30 ").is_valid
        assert validate_field("salary_amount", "500").is_valid

        assert _error("duration_amount", "2.5").message == "Duration must be a whole number"
        assert _error("duration_amount", "400").kind == ValidationErrorKind.OUT_OF_RANGE
        assert _error("duration_amount", "a week").kind == ValidationErrorKind.INVALID_VALUE

    @pytest.mark.parametrize("unit", ["hours", "Days", DurationUnit.WEEKS, "months"])
    def test_duration_unit_accepts_known_units(self, unit):
        assert validate_field("duration_unit", unit).is_valid

    def test_duration_unit_rejects_unknown_units(self):
        assert _error("duration_unit", "years").kind == ValidationErrorKind.INVALID_VALUE

    def test_location(self):
        assert validate_field("location", Location(state="CA", district="San Mateo")).is_valid
        assert validate_field("location", {"state": "CA", "district": "San Mateo", "latitude": 37.5}).is_valid

        missing = _error("location", Location(state="CA"))
        assert missing.kind == ValidationErrorKind.REQUIRED
        assert missing.message == "Both state and district are required"

        latitude = _error("location", Location(state="CA", district="San Mateo", latitude=91))
        assert latitude.message == "Invalid latitude"
        assert latitude.kind == ValidationErrorKind.OUT_OF_RANGE

        longitude = _error("location", {"state": "CA", "district": "San Mateo", "longitude": -180.5})
        assert longitude.message == "Invalid longitude"

    def test_location_with_text_coordinates(self):
        error = _error("location", {"state": "CA", "district": "San Mateo", "latitude": "north"})

        assert error.kind == ValidationErrorKind.INVALID_VALUE
        assert error.message == "Latitude and longitude must be numbers"
        assert error.field == "location"

    def test_status(self):
        for status in JobStatus:
            assert validate_field("status", status).is_valid
        assert validate_field("status", "open").is_valid
        assert _error("status", "ARCHIVED").kind == ValidationErrorKind.INVALID_VALUE

    def test_employer_id(self):
        assert validate_field("employer_id", "emp-1").is_valid
        assert _error("employer_id", "").kind == ValidationErrorKind.REQUIRED

    def test_unknown_field(self):
        with pytest.raises(KeyError):
            validate_field("salary", 100)


class TestWholeJobValidation:
    """validate_job / collect_field_errors"""

    @pytest.fixture
    def well_formed_job(self):
        return JobPosting(
            employer_id="emp-1",
            title="Warehouse Associate",
            description="Pick, pack and ship customer orders on the day shift.",
            salary_amount=500,
            salary_unit=SalaryUnit.DAILY.value,
            duration_amount=5,
            duration_unit=DurationUnit.DAYS.value,
            location=Location(state="Karnataka", district="Bengaluru Urban"),
            status=JobStatus.OPEN.value,
        )

    def test_well_formed_job_is_valid(self, well_formed_job):
        assert validate_job(well_formed_job).is_valid
        assert collect_field_errors(well_formed_job) == {}

    def test_empty_title_does_not_hide_other_errors(self, well_formed_job):
        job = well_formed_job.model_copy(update={"title": "", "salary_amount": 0})
        outcome = validate_job(job)

        assert not outcome.is_valid
        assert [error.field for error in outcome.errors] == ["title", "salary_amount"]
        assert outcome.errors[0].kind == ValidationErrorKind.REQUIRED
        assert outcome.errors[1].kind == ValidationErrorKind.OUT_OF_RANGE

    def test_errors_follow_field_declaration_order(self):
        draft = JobPostingDraft(title="", description="short")
        errors = collect_field_errors(draft)

        assert list(errors) == ["title", "description", "salary_amount", "duration_amount", "location"]
        assert list(errors) == [field for field in FIELD_ORDER if field in errors]
        assert errors["description"].kind == ValidationErrorKind.TOO_SHORT

    def test_one_error_per_field(self):
        outcome = validate_job(JobPostingDraft())
        fields = [error.field for error in outcome.errors]
        assert len(fields) == len(set(fields))

    def test_draft_skips_posting_only_fields(self, well_formed_job):
        draft = JobPostingDraft(**well_formed_job.model_dump(
            include={"title", "description", "salary_amount", "salary_unit",
                     "duration_amount", "duration_unit", "location"}
        ))
        assert validate_job(draft).is_valid

    def test_field_map_needs_status_and_employer(self, well_formed_job):
        fields = well_formed_job.model_dump(exclude={"status", "employer_id"})
        errors = collect_field_errors(fields)

        assert list(errors) == ["status", "employer_id"]
        assert all(error.kind == ValidationErrorKind.REQUIRED for error in errors.values())

    def test_validation_is_pure(self, well_formed_job):
        before = well_formed_job.model_dump()
        first = validate_job(well_formed_job.model_copy(update={"title": ""}))
        second = validate_job(well_formed_job.model_copy(update={"title": ""}))

        assert first == second
        assert well_formed_job.model_dump() == before
