"""
Store contracts consumed by the core

Both stores are asynchronous and fallible. Expected failures come back as
``Failure(StoreError)``; they are not raised. ``DraftStore.get`` is the one
exception: its contract returns an Optional, so a failed read raises
``StoreFailure`` instead of passing for a missing draft.
"""

from abc import ABC, abstractmethod
from typing import List, Optional

from ..exceptions import StoreError
from ..models.job_posting import JobPosting, JobPostingDraft
from ..result import Result


class DraftStore(ABC):
    """Draft persistence keyed by draft id"""

    @abstractmethod
    async def get(self, draft_id: str) -> Optional[JobPostingDraft]:
        """
        Return the draft, or None if there is none.

        Raises:
            StoreFailure: the store could not be read
        """

    @abstractmethod
    async def save(self, draft: JobPostingDraft) -> Result[None, StoreError]:
        """Insert or overwrite (last write wins)"""

    @abstractmethod
    async def delete(self, draft_id: str) -> Result[None, StoreError]:
        """Remove the draft; deleting a missing draft succeeds"""

    @abstractmethod
    async def list_drafts(self) -> Result[List[JobPostingDraft], StoreError]:
        """All drafts, most recently modified first"""

    @abstractmethod
    async def count(self) -> Result[int, StoreError]:
        """Number of stored drafts"""

    @abstractmethod
    async def clear(self) -> Result[None, StoreError]:
        """Remove every draft"""


class JobStore(ABC):
    """Canonical job posting persistence"""

    @abstractmethod
    async def create(self, job: JobPosting) -> Result[JobPosting, StoreError]:
        """Persist a new posting and return it with its assigned id"""

    @abstractmethod
    async def update(self, job_id: str, job: JobPosting) -> Result[JobPosting, StoreError]:
        """Overwrite posting ``job_id``; fails with code not_found if absent"""

    @abstractmethod
    async def get_by_id(self, job_id: str) -> Result[JobPosting, StoreError]:
        """Fetch a posting; fails with code not_found if absent"""
