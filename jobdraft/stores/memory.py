"""
In-memory stores

Bounded, instance-owned collections implementing the store contracts.
Useful for tests and for hosts that keep drafts in process memory.
"""

from collections import OrderedDict
from typing import Dict, List, Optional
from uuid import uuid4

from config.settings import get_settings
from ..exceptions import StoreError
from ..models.job_posting import JobPosting, JobPostingDraft, utc_now
from ..result import Failure, Result, Success
from ..utils.logging import get_logger
from .base import DraftStore, JobStore

logger = get_logger(__name__)


class InMemoryDraftStore(DraftStore):
    """Draft store backed by an OrderedDict with a fixed capacity"""

    def __init__(self, max_drafts: Optional[int] = None):
        if max_drafts is None:
            max_drafts = get_settings().stores.max_drafts
        if max_drafts <= 0:
            raise ValueError("max_drafts must be positive")
        self.max_drafts = max_drafts
        self._drafts: "OrderedDict[str, JobPostingDraft]" = OrderedDict()

    async def get(self, draft_id: str) -> Optional[JobPostingDraft]:
        draft = self._drafts.get(draft_id)
        return draft.model_copy(deep=True) if draft is not None else None

    async def save(self, draft: JobPostingDraft) -> Result[None, StoreError]:
        if draft.id not in self._drafts and len(self._drafts) >= self.max_drafts:
            logger.warning("draft store full", draft_id=draft.id, capacity=self.max_drafts)
            return Failure(StoreError(
                f"Draft store is full ({self.max_drafts} drafts)",
                code=StoreError.CAPACITY,
            ))
        self._drafts[draft.id] = draft.model_copy(deep=True)
        self._drafts.move_to_end(draft.id)
        return Success(None)

    async def delete(self, draft_id: str) -> Result[None, StoreError]:
        self._drafts.pop(draft_id, None)
        return Success(None)

    async def list_drafts(self) -> Result[List[JobPostingDraft], StoreError]:
        drafts = sorted(self._drafts.values(), key=lambda d: d.last_modified, reverse=True)
        return Success([draft.model_copy(deep=True) for draft in drafts])

    async def count(self) -> Result[int, StoreError]:
        return Success(len(self._drafts))

    async def clear(self) -> Result[None, StoreError]:
        self._drafts.clear()
        return Success(None)


class InMemoryJobStore(JobStore):
    """Job store backed by a dict; ids are generated on create"""

    def __init__(self):
        self._jobs: Dict[str, JobPosting] = {}

    async def create(self, job: JobPosting) -> Result[JobPosting, StoreError]:
        job_id = job.id or str(uuid4())
        if job_id in self._jobs:
            return Failure(StoreError(f"Job '{job_id}' already exists"))
        stored = job.model_copy(update={"id": job_id}, deep=True)
        self._jobs[job_id] = stored
        return Success(stored.model_copy(deep=True))

    async def update(self, job_id: str, job: JobPosting) -> Result[JobPosting, StoreError]:
        existing = self._jobs.get(job_id)
        if existing is None:
            return Failure(StoreError(f"Job '{job_id}' not found", code=StoreError.NOT_FOUND))
        stored = job.model_copy(
            update={"id": job_id, "created_at": existing.created_at, "updated_at": utc_now()},
            deep=True,
        )
        self._jobs[job_id] = stored
        return Success(stored.model_copy(deep=True))

    async def get_by_id(self, job_id: str) -> Result[JobPosting, StoreError]:
        job = self._jobs.get(job_id)
        if job is None:
            return Failure(StoreError(f"Job '{job_id}' not found", code=StoreError.NOT_FOUND))
        return Success(job.model_copy(deep=True))
