"""
Draft lifecycle coordination

Owns the path from a draft to a canonical job posting:

- publish_draft: validate -> JobStore.create -> best-effort draft cleanup
- update_job_from_draft: validate -> JobStore.update -> best-effort draft cleanup
- create_draft_from_job: copy an existing posting into an edit draft
- save_draft / load_draft / discard_draft: draft persistence used by the form session

Each draft id moves through EDITING -> PUBLISHING -> PUBLISHED, or
EDITING -> DISCARDED. A failed publish goes back to EDITING. PUBLISHED and
DISCARDED are terminal until the id is saved again.
"""

from collections import OrderedDict
from datetime import datetime
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, List, Optional

import structlog

from pydantic import ValidationError as PydanticValidationError

from config.settings import get_settings
from ..exceptions import (
    BaseJobDraftError,
    JobValidationError,
    NotFoundError,
    StoreFailure,
    UnexpectedError,
    handle_pydantic_validation_error,
)
from ..models.job_posting import JobPosting, JobPostingDraft, JobStatus, utc_now
from ..result import Failure, Result, Success
from ..stores.base import DraftStore, JobStore
from ..utils.logging import get_logger, log_performance, log_validation_result
from ..validation import validate_job

logger = get_logger(__name__)


class DraftState(str, Enum):
    """Lifecycle state of a draft id"""
    EDITING = "editing"
    PUBLISHING = "publishing"
    PUBLISHED = "published"
    DISCARDED = "discarded"


TERMINAL_STATES = frozenset({DraftState.PUBLISHED, DraftState.DISCARDED})


def _unit_text(value: Any) -> str:
    return str(getattr(value, "value", value) or "").strip().lower()


def _candidate_from_draft(
    draft: JobPostingDraft,
    employer_id: Optional[str],
    job_id: str = "",
) -> Dict[str, Any]:
    """Field map of the posting a draft would become"""
    now = utc_now()
    return {
        "id": job_id,
        "employer_id": employer_id or "",
        "title": draft.title.strip(),
        "description": draft.description.strip(),
        "salary_amount": draft.salary_amount,
        "salary_unit": _unit_text(draft.salary_unit),
        "duration_amount": draft.duration_amount,
        "duration_unit": _unit_text(draft.duration_unit),
        "location": draft.location.model_dump(),
        "status": JobStatus.ACTIVE.value,
        "created_at": now,
        "updated_at": now,
    }


class DraftLifecycleCoordinator:
    """
    Coordinates drafts and canonical postings across the two stores.

    Every public operation returns a ``Result``; expected failures are
    ``Failure(BaseJobDraftError)`` and are never raised. Primary writes are
    not retried. Draft cleanup after a successful write is best-effort.
    """

    def __init__(
        self,
        draft_store: DraftStore,
        job_store: JobStore,
        employer_id: Optional[str] = None,
    ):
        self.draft_store = draft_store
        self.job_store = job_store
        self.employer_id = employer_id
        draft_settings = get_settings().drafts
        self.draft_id_suffix = draft_settings.draft_id_suffix
        self.max_tracked_states = draft_settings.max_tracked_states
        self._states: "OrderedDict[str, DraftState]" = OrderedDict()

    # ------------------------------------------------------------------
    # state
    # ------------------------------------------------------------------

    def state_of(self, draft_id: str) -> Optional[DraftState]:
        """Lifecycle state of ``draft_id``, or None if this coordinator never saw it"""
        return self._states.get(draft_id)

    def _set_state(self, draft_id: str, state: Optional[DraftState]) -> None:
        """
        Record a transition. Past ``max_tracked_states`` the oldest terminal
        entries are forgotten; editing and publishing ids are always kept.
        """
        if state is None:
            self._states.pop(draft_id, None)
            return

        self._states[draft_id] = state
        self._states.move_to_end(draft_id)

        excess = len(self._states) - self.max_tracked_states
        if excess <= 0:
            return
        stale = [key for key, value in self._states.items() if value in TERMINAL_STATES][:excess]
        for key in stale:
            del self._states[key]
        if stale:
            logger.debug("forgot terminal draft states", count=len(stale))

    @staticmethod
    def _refusal(draft_id: str, state: Optional[DraftState]) -> Optional[BaseJobDraftError]:
        if state == DraftState.PUBLISHING:
            return UnexpectedError(f"Draft '{draft_id}' is already being published")
        if state == DraftState.PUBLISHED:
            return UnexpectedError(f"Draft '{draft_id}' has already been published")
        if state == DraftState.DISCARDED:
            return NotFoundError("Draft", draft_id)
        return None

    def draft_id_for_job(self, job_id: str) -> str:
        return f"{job_id}{self.draft_id_suffix}"

    # ------------------------------------------------------------------
    # publication
    # ------------------------------------------------------------------

    async def publish_draft(
        self,
        draft_id: str,
        employer_id: Optional[str] = None,
    ) -> Result[JobPosting, BaseJobDraftError]:
        """
        Publish a draft as a new job posting.

        Args:
            draft_id: Draft to publish
            employer_id: Owner of the new posting (defaults to the coordinator's)

        Returns:
            Success(created posting), or Failure with NotFoundError,
            JobValidationError, StoreFailure or UnexpectedError
        """
        return await self._publish(
            "publish_draft",
            draft_id,
            employer_id,
            job_id="",
            write=self.job_store.create,
        )

    async def update_job_from_draft(
        self,
        job_id: str,
        draft_id: str,
        employer_id: Optional[str] = None,
    ) -> Result[JobPosting, BaseJobDraftError]:
        """
        Overwrite an existing posting with the contents of a draft.

        Same steps as publish_draft; the candidate keeps ``id=job_id``.
        """

        async def write(candidate: JobPosting):
            return await self.job_store.update(job_id, candidate)

        return await self._publish(
            "update_job_from_draft",
            draft_id,
            employer_id,
            job_id=job_id,
            write=write,
        )

    async def _publish(
        self,
        operation: str,
        draft_id: str,
        employer_id: Optional[str],
        job_id: str,
        write: Callable[[JobPosting], Awaitable[Result[JobPosting, Any]]],
    ) -> Result[JobPosting, BaseJobDraftError]:
        start_time = datetime.now()
        previous = self._states.get(draft_id)
        refusal = self._refusal(draft_id, previous)
        if refusal is not None:
            logger.info("publish refused", operation=operation, draft_id=draft_id, state=previous)
            return Failure(refusal)

        # claimed before the first await so a concurrent publish of the same id is refused
        self._set_state(draft_id, DraftState.PUBLISHING)
        with structlog.contextvars.bound_contextvars(operation=operation, draft_id=draft_id):
            draft = None
            try:
                draft = await self.draft_store.get(draft_id)
                if draft is None:
                    logger.info("draft not found")
                    result = Failure(NotFoundError("Draft", draft_id))
                else:
                    result = await self._validate_and_write(
                        operation, draft, employer_id or self.employer_id, job_id, write
                    )
            except StoreFailure as e:
                logger.error("draft store read failed", error=e.message)
                result = Failure(e)
            except Exception as e:
                logger.error("publish step raised", error=str(e))
                result = Failure(UnexpectedError(f"{operation} failed unexpectedly: {e}", cause=e))

            if not result.is_success:
                self._set_state(draft_id, previous if draft is None else DraftState.EDITING)
                return result

            self._set_state(draft_id, DraftState.PUBLISHED)
            await self._cleanup_draft(draft_id, result.value.id)
            log_performance(operation, start_time, job_id=result.value.id)
            return result

    async def _validate_and_write(
        self,
        operation: str,
        draft: JobPostingDraft,
        employer_id: Optional[str],
        job_id: str,
        write: Callable[[JobPosting], Awaitable[Result[JobPosting, Any]]],
    ) -> Result[JobPosting, BaseJobDraftError]:
        candidate_fields = _candidate_from_draft(draft, employer_id, job_id)

        outcome = validate_job(candidate_fields)
        if not outcome.is_valid:
            log_validation_result(
                draft.id,
                False,
                {field: error.message for field, error in outcome.as_field_map().items()},
                operation=operation,
            )
            return Failure(JobValidationError(
                "Draft is not ready to be published",
                errors=outcome.errors,
            ))

        try:
            candidate = JobPosting(**candidate_fields)
        except PydanticValidationError as e:
            return Failure(handle_pydantic_validation_error(e))

        written = await write(candidate)
        if not written.is_success:
            logger.error(
                "job store write failed",
                operation=operation,
                draft_id=draft.id,
                code=written.error.code,
                error=written.error.message,
            )
            return Failure(StoreFailure(
                f"Could not save the job posting: {written.error.message}",
                cause=written.error,
                operation=operation,
                store="job",
            ))

        logger.info("job posting written", operation=operation, draft_id=draft.id, job_id=written.value.id)
        return Success(written.value)

    async def _cleanup_draft(self, draft_id: str, job_id: str) -> None:
        """Delete a published draft; failures are logged and dropped"""
        try:
            deleted = await self.draft_store.delete(draft_id)
        except Exception as e:
            logger.warning("draft cleanup raised", draft_id=draft_id, job_id=job_id, error=str(e))
            return

        if not deleted.is_success:
            logger.warning(
                "draft cleanup failed",
                draft_id=draft_id,
                job_id=job_id,
                code=deleted.error.code,
                error=deleted.error.message,
            )

    # ------------------------------------------------------------------
    # drafts
    # ------------------------------------------------------------------

    async def create_draft_from_job(self, job_id: str) -> Result[JobPostingDraft, BaseJobDraftError]:
        """
        Copy posting ``job_id`` into the draft ``<job_id>_draft`` and save it.

        Calling this twice overwrites the same draft.
        """
        try:
            fetched = await self.job_store.get_by_id(job_id)
            if not fetched.is_success:
                if fetched.error.is_not_found:
                    return Failure(NotFoundError("Job", job_id))
                return Failure(StoreFailure(
                    f"Could not load job posting: {fetched.error.message}",
                    cause=fetched.error,
                    operation="create_draft_from_job",
                    store="job",
                ))

            job = fetched.value
            draft = JobPostingDraft(
                id=self.draft_id_for_job(job_id),
                title=job.title,
                description=job.description,
                salary_amount=job.salary_amount,
                salary_unit=job.salary_unit,
                duration_amount=job.duration_amount,
                duration_unit=job.duration_unit,
                location=job.location.model_copy(),
            )
        except Exception as e:
            return Failure(UnexpectedError(f"create_draft_from_job failed unexpectedly: {e}", cause=e))

        return await self._save("create_draft_from_job", draft)

    async def save_draft(self, draft: JobPostingDraft) -> Result[JobPostingDraft, BaseJobDraftError]:
        """Persist a draft (last write wins) and return it as saved"""
        return await self._save("save_draft", draft.touch())

    async def _save(self, operation: str, draft: JobPostingDraft) -> Result[JobPostingDraft, BaseJobDraftError]:
        try:
            saved = await self.draft_store.save(draft)
        except Exception as e:
            return Failure(UnexpectedError(f"{operation} failed unexpectedly: {e}", cause=e))

        if not saved.is_success:
            logger.warning("draft save failed", operation=operation, draft_id=draft.id, code=saved.error.code)
            return Failure(StoreFailure(
                f"Could not save the draft: {saved.error.message}",
                cause=saved.error,
                operation=operation,
                store="draft",
            ))

        self._set_state(draft.id, DraftState.EDITING)
        logger.debug("draft saved", operation=operation, draft_id=draft.id)
        return Success(draft)

    async def load_draft(self, draft_id: str) -> Result[JobPostingDraft, BaseJobDraftError]:
        try:
            draft = await self.draft_store.get(draft_id)
        except StoreFailure as e:
            return Failure(e)
        except Exception as e:
            return Failure(UnexpectedError(f"load_draft failed unexpectedly: {e}", cause=e))

        if draft is None:
            return Failure(NotFoundError("Draft", draft_id))
        if draft_id not in self._states:
            self._set_state(draft_id, DraftState.EDITING)
        return Success(draft)

    async def list_drafts(self) -> Result[List[JobPostingDraft], BaseJobDraftError]:
        """Drafts that can be resumed, most recently modified first"""
        try:
            listed = await self.draft_store.list_drafts()
        except Exception as e:
            return Failure(UnexpectedError(f"list_drafts failed unexpectedly: {e}", cause=e))

        if not listed.is_success:
            return Failure(StoreFailure(
                f"Could not list drafts: {listed.error.message}",
                cause=listed.error,
                operation="list_drafts",
                store="draft",
            ))

        resumable = [
            draft for draft in listed.value
            if self._states.get(draft.id) not in TERMINAL_STATES
        ]
        logger.debug("drafts listed", total=len(listed.value), resumable=len(resumable))
        return Success(resumable)

    async def discard_draft(self, draft_id: str) -> Result[None, BaseJobDraftError]:
        """Delete a draft the user abandoned"""
        try:
            deleted = await self.draft_store.delete(draft_id)
        except Exception as e:
            return Failure(UnexpectedError(f"discard_draft failed unexpectedly: {e}", cause=e))

        if not deleted.is_success:
            return Failure(StoreFailure(
                f"Could not delete the draft: {deleted.error.message}",
                cause=deleted.error,
                operation="discard_draft",
                store="draft",
            ))

        self._set_state(draft_id, DraftState.DISCARDED)
        logger.info("draft discarded", draft_id=draft_id)
        return Success(None)
