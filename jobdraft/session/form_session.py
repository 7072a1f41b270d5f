"""
Form session controller

Holds the state of one job-posting editor: field values, the field -> error
map, the dirty flag, the live cost breakdown and the draft id. Every field
mutation is validated on the spot and, once the form is valid, autosaved
through the DraftLifecycleCoordinator on an asyncio task.

One owner per session. Mutations are expected to be serialized by the host
(one event-loop callback at a time); nothing here locks.
"""

import asyncio
from contextlib import suppress
from datetime import datetime
from typing import Any, Dict, Mapping, Optional, Tuple, Union
from uuid import uuid4

import structlog
from pydantic import ValidationError as PydanticValidationError

from config.settings import get_settings
from ..cost import compute_cost
from ..exceptions import BaseJobDraftError, JobValidationError, UnexpectedError, handle_pydantic_validation_error
from ..models.job_posting import CostBreakdown, JobPosting, JobPostingDraft, Location
from ..result import Failure, Result
from ..utils.logging import get_logger, log_validation_result
from ..validation import ValidationError, ValidationErrorKind, collect_field_errors, validate_field
from ..validation.field_validators import (
    COST_FIELDS,
    DESCRIPTION,
    DURATION_AMOUNT,
    DURATION_UNIT,
    FIELD_ORDER,
    LOCATION,
    POSTING_ONLY_FIELDS,
    SALARY_AMOUNT,
    SALARY_UNIT,
    TITLE,
)
from ..workflows.draft_lifecycle import DraftLifecycleCoordinator

logger = get_logger(__name__)

FORM_FIELDS = tuple(field for field in FIELD_ORDER if field not in POSTING_ONLY_FIELDS)

_NOT_A_NUMBER_MESSAGES = {
    SALARY_AMOUNT: "Salary must be a number",
    DURATION_AMOUNT: "Duration must be a number",
}
_BAD_COORDINATES_MESSAGE = "Latitude and longitude must be numbers"


def _parse_number(value: Any) -> Tuple[Optional[float], bool]:
    """
    Parse user input for a numeric field.

    Returns:
        (number or None, whether the input was acceptable as a number)
    """
    if value is None:
        return None, True
    if isinstance(value, bool):
        return None, False
    if isinstance(value, (int, float)):
        return value, True
    text = str(value).strip().replace(",", "")
    if not text:
        return None, True
    try:
        return float(text), True
    except ValueError:
        return None, False


class FormSessionController:
    """
    Editor state for a single job-posting draft.

    Args:
        coordinator: Draft lifecycle coordinator used for every store access
        employer_id: Default owner used on submit
        autosave: Autosave on valid mutations (defaults to DRAFT_AUTOSAVE_ENABLED)
    """

    def __init__(
        self,
        coordinator: DraftLifecycleCoordinator,
        employer_id: Optional[str] = None,
        autosave: Optional[bool] = None,
    ):
        draft_settings = get_settings().drafts
        self.coordinator = coordinator
        self.employer_id = employer_id
        self.autosave_enabled = draft_settings.autosave_enabled if autosave is None else autosave
        self._default_salary_unit = draft_settings.default_salary_unit
        self._default_duration_unit = draft_settings.default_duration_unit
        self._draft_id_suffix = draft_settings.draft_id_suffix

        self._autosave_task: Optional[asyncio.Task] = None
        self._closed = False
        self.start_new()

    # ------------------------------------------------------------------
    # session lifecycle
    # ------------------------------------------------------------------

    def start_new(self) -> str:
        """Reset to an empty draft with a fresh id and return the id"""
        self._cancel_autosave()
        self._reset(JobPostingDraft(
            id=str(uuid4()),
            salary_unit=self._default_salary_unit,
            duration_unit=self._default_duration_unit,
        ))
        self._source_job_id: Optional[str] = None
        return self._draft_id

    async def load_draft(self, draft_id: str) -> Result[JobPostingDraft, BaseJobDraftError]:
        """Resume editing a saved draft"""
        result = await self.coordinator.load_draft(draft_id)
        if not result.is_success:
            return result

        self._cancel_autosave()
        self._reset(result.value)
        self._source_job_id = self._job_id_from_draft_id(draft_id)
        self._last_saved_at = result.value.last_modified
        logger.info("draft loaded", draft_id=draft_id, source_job_id=self._source_job_id)
        return result

    async def start_from_job(self, job_id: str) -> Result[JobPostingDraft, BaseJobDraftError]:
        """Start editing an existing posting through its edit draft"""
        result = await self.coordinator.create_draft_from_job(job_id)
        if not result.is_success:
            return result

        self._cancel_autosave()
        self._reset(result.value)
        self._source_job_id = job_id
        self._last_saved_at = result.value.last_modified
        return result

    def _reset(self, draft: JobPostingDraft) -> None:
        self._draft_id = draft.id
        self._values: Dict[str, Any] = {field: getattr(draft, field) for field in FORM_FIELDS}
        self._errors: Dict[str, ValidationError] = {}
        self._dirty = False
        self._revision = 0
        self._published = False
        self._last_saved_at: Optional[datetime] = None
        self._recompute_cost()

    def _job_id_from_draft_id(self, draft_id: str) -> Optional[str]:
        if self._draft_id_suffix and draft_id.endswith(self._draft_id_suffix):
            return draft_id[: -len(self._draft_id_suffix)] or None
        return None

    async def close(self) -> None:
        """
        Tear the session down.

        Pending autosaves are cancelled and their results dropped. An
        unpublished draft with no content is deleted best-effort; anything
        else is left for later resumption.
        """
        if self._closed:
            return
        self._closed = True

        task = self._autosave_task
        self._cancel_autosave()
        if task is not None:
            with suppress(asyncio.CancelledError):
                await task

        if self._published or not self.draft.is_empty():
            return

        result = await self.coordinator.discard_draft(self._draft_id)
        if not result.is_success:
            logger.warning("empty draft cleanup failed", draft_id=self._draft_id, error=result.error.message)

    # ------------------------------------------------------------------
    # state
    # ------------------------------------------------------------------

    @property
    def draft_id(self) -> str:
        return self._draft_id

    @property
    def source_job_id(self) -> Optional[str]:
        return self._source_job_id

    @property
    def errors(self) -> Dict[str, ValidationError]:
        return dict(self._errors)

    @property
    def is_dirty(self) -> bool:
        return self._dirty

    @property
    def is_published(self) -> bool:
        return self._published

    @property
    def cost_breakdown(self) -> CostBreakdown:
        return self._cost

    @property
    def last_saved_at(self) -> Optional[datetime]:
        return self._last_saved_at

    @property
    def values(self) -> Dict[str, Any]:
        return dict(self._values)

    @property
    def draft(self) -> JobPostingDraft:
        """Unvalidated snapshot of the current form contents"""
        return JobPostingDraft.model_construct(id=self._draft_id, **self._values)

    def is_valid(self) -> bool:
        """No field errors and every required field filled in"""
        return not self._errors and not collect_field_errors(self.draft)

    # ------------------------------------------------------------------
    # mutation
    # ------------------------------------------------------------------

    def set_title(self, value: str) -> None:
        self.update_field(TITLE, value)

    def set_description(self, value: str) -> None:
        self.update_field(DESCRIPTION, value)

    def set_salary_amount(self, value: Union[float, str, None]) -> None:
        self.update_field(SALARY_AMOUNT, value)

    def set_salary_unit(self, value: str) -> None:
        self.update_field(SALARY_UNIT, value)

    def set_duration_amount(self, value: Union[int, str, None]) -> None:
        self.update_field(DURATION_AMOUNT, value)

    def set_duration_unit(self, value: str) -> None:
        self.update_field(DURATION_UNIT, value)

    def set_location(self, value: Union[Location, Mapping[str, Any]]) -> None:
        self.update_field(LOCATION, value)

    def update_field(self, field: str, value: Any) -> None:
        """
        Apply one field mutation.

        Sets the value, validates that field alone, refreshes its entry in
        the error map, recomputes the cost for salary / duration fields and
        schedules an autosave once the whole form is valid.

        Raises:
            KeyError: ``field`` is not an editable form field
            RuntimeError: the session has been closed, or its draft was
                already published (call ``start_new`` to edit another)
        """
        if field not in FORM_FIELDS:
            raise KeyError(field)
        if self._closed:
            raise RuntimeError("Form session is closed")
        if self._published:
            raise RuntimeError(self._already_published().message)

        value, error = self._coerce(field, value)
        self._values[field] = value
        self._dirty = True
        self._revision += 1

        if error is None:
            outcome = validate_field(field, value)
            error = None if outcome.is_valid else outcome.first_error
        if error is None:
            self._errors.pop(field, None)
        else:
            self._errors[field] = error

        if field in COST_FIELDS:
            self._recompute_cost()

        if self.autosave_enabled and self._dirty and self.is_valid():
            self._schedule_autosave()

    def _coerce(self, field: str, value: Any) -> Tuple[Any, Optional[ValidationError]]:
        """Normalize raw input; returns (stored value, parse error or None)"""
        if field in (SALARY_AMOUNT, DURATION_AMOUNT):
            number, ok = _parse_number(value)
            if not ok:
                return None, ValidationError(
                    field=field,
                    message=_NOT_A_NUMBER_MESSAGES[field],
                    kind=ValidationErrorKind.INVALID_VALUE,
                )
            if field == DURATION_AMOUNT and isinstance(number, float) and number.is_integer():
                number = int(number)
            return number, None

        if field == LOCATION:
            if not isinstance(value, Mapping):
                return value if value is not None else Location(), None
            try:
                return Location(**value), None
            except PydanticValidationError:
                # keep what the user typed for state / district, drop the coordinates
                partial = Location(state=str(value.get("state") or ""), district=str(value.get("district") or ""))
                return partial, ValidationError(
                    field=LOCATION,
                    message=_BAD_COORDINATES_MESSAGE,
                    kind=ValidationErrorKind.INVALID_VALUE,
                )

        if field in (SALARY_UNIT, DURATION_UNIT):
            return str(getattr(value, "value", value) or ""), None

        return ("" if value is None else str(value)), None

    def _recompute_cost(self) -> None:
        self._cost = compute_cost(
            self._values.get(SALARY_AMOUNT),
            self._values.get(SALARY_UNIT),
            self._values.get(DURATION_AMOUNT),
            self._values.get(DURATION_UNIT),
        )

    # ------------------------------------------------------------------
    # persistence
    # ------------------------------------------------------------------

    def _schedule_autosave(self) -> None:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.debug("no running event loop, autosave skipped", draft_id=self._draft_id)
            return

        # a newer autosave supersedes the pending one
        self._cancel_autosave()
        self._autosave_task = loop.create_task(self._autosave(self._revision))

    def _cancel_autosave(self) -> None:
        task = getattr(self, "_autosave_task", None)
        if task is not None and not task.done():
            task.cancel()

    async def _autosave(self, revision: int) -> None:
        try:
            result = await self._persist(revision)
        except Exception as e:
            logger.warning("autosave raised", draft_id=self._draft_id, error=str(e))
            return

        if not result.is_success:
            logger.warning("autosave failed", draft_id=self._draft_id, error=result.error.message)

    async def _persist(self, revision: int) -> Result[JobPostingDraft, BaseJobDraftError]:
        try:
            draft = JobPostingDraft(id=self._draft_id, **self._values)
        except PydanticValidationError as e:
            return Failure(handle_pydantic_validation_error(e))

        draft_id = self._draft_id
        result = await self.coordinator.save_draft(draft)
        if self._closed or draft_id != self._draft_id:
            # late result for a torn-down or replaced session
            return result

        if result.is_success:
            self._last_saved_at = result.value.last_modified
            if revision == self._revision:
                self._dirty = False
            logger.debug("draft autosaved", draft_id=draft_id, revision=revision)
        return result

    async def save_now(self) -> Result[JobPostingDraft, BaseJobDraftError]:
        """Save the current contents immediately, valid or not"""
        self._cancel_autosave()
        if self._published:
            return Failure(self._already_published())
        return await self._persist(self._revision)

    def _already_published(self) -> UnexpectedError:
        return UnexpectedError(f"Draft '{self._draft_id}' has already been published")

    async def flush(self) -> None:
        """Wait for the pending autosave, if any"""
        task = self._autosave_task
        if task is not None and not task.done():
            with suppress(asyncio.CancelledError):
                await task

    # ------------------------------------------------------------------
    # submit
    # ------------------------------------------------------------------

    async def submit(self, employer_id: Optional[str] = None) -> Result[JobPosting, BaseJobDraftError]:
        """
        Validate the whole form and publish it.

        A posting started from an existing job updates that job; otherwise a
        new posting is created. Validation failures never reach the stores.
        """
        if self._published:
            return Failure(self._already_published())

        employer_id = employer_id or self.employer_id
        with structlog.contextvars.bound_contextvars(draft_id=self._draft_id, employer_id=employer_id):
            return await self._submit(employer_id)

    def _submit_errors(self) -> Dict[str, ValidationError]:
        # errors raised while parsing input win over the checks on the stored value
        collected = collect_field_errors(self.draft)
        return {
            field: self._errors.get(field) or collected[field]
            for field in FORM_FIELDS
            if field in self._errors or field in collected
        }

    async def _submit(self, employer_id: Optional[str]) -> Result[JobPosting, BaseJobDraftError]:
        errors = self._submit_errors()
        if errors:
            self._errors = errors
            log_validation_result(
                self._draft_id,
                False,
                {field: error.message for field, error in errors.items()},
                operation="submit",
            )
            return Failure(JobValidationError(
                "Please fix the highlighted fields",
                errors=list(errors.values()),
            ))

        saved = await self.save_now()
        if not saved.is_success:
            return saved

        if self._source_job_id:
            result = await self.coordinator.update_job_from_draft(
                self._source_job_id, self._draft_id, employer_id
            )
        else:
            result = await self.coordinator.publish_draft(self._draft_id, employer_id)

        if result.is_success:
            self._published = True
            self._dirty = False
            logger.info("form submitted", job_id=result.value.id)
        return result
