"""
SQLAlchemy-backed stores

- StoreDatabase: engine / session factory / table management
- DraftRecord, JobRecord: ORM tables
- SqlDraftStore, SqlJobStore: store contracts over a StoreDatabase

Sessions are synchronous; each store call runs its unit of work in a worker
thread through ``asyncio.to_thread``.
"""

import asyncio
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Generator, List, Optional, TypeVar
from uuid import uuid4

from sqlalchemy import JSON, DateTime, Float, Integer, String, Text, create_engine, Engine, func, select
from sqlalchemy.ext.declarative import declarative_base
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Mapped, Session, mapped_column, sessionmaker
from sqlalchemy.pool import StaticPool

from config.settings import get_settings
from ..exceptions import StoreError, StoreFailure
from ..models.job_posting import JobPosting, JobPostingDraft, Location, utc_now
from ..result import Failure, Result, Success
from ..utils.logging import get_logger
from .base import DraftStore, JobStore

logger = get_logger(__name__)

Base = declarative_base()

T = TypeVar("T")


def _as_utc(value: Optional[datetime]) -> Optional[datetime]:
    # sqlite drops tzinfo on the way back
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class DraftRecord(Base):
    """Draft table"""
    __tablename__ = "job_drafts"

    id: Mapped[str] = mapped_column(String(100), primary_key=True)
    title: Mapped[str] = mapped_column(String(200), default="")
    description: Mapped[str] = mapped_column(Text, default="")
    salary_amount: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    salary_unit: Mapped[str] = mapped_column(String(20))
    duration_amount: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    duration_unit: Mapped[str] = mapped_column(String(20))
    location: Mapped[Dict[str, Any]] = mapped_column(JSON, default=dict)
    last_modified: Mapped[datetime] = mapped_column(DateTime(timezone=True), index=True)

    @classmethod
    def from_model(cls, draft: JobPostingDraft) -> "DraftRecord":
        return cls(
            id=draft.id,
            title=draft.title,
            description=draft.description,
            salary_amount=draft.salary_amount,
            salary_unit=draft.salary_unit,
            duration_amount=draft.duration_amount,
            duration_unit=draft.duration_unit,
            location=draft.location.model_dump(),
            last_modified=draft.last_modified,
        )

    def to_model(self) -> JobPostingDraft:
        return JobPostingDraft(
            id=self.id,
            title=self.title or "",
            description=self.description or "",
            salary_amount=self.salary_amount,
            salary_unit=self.salary_unit,
            duration_amount=self.duration_amount,
            duration_unit=self.duration_unit,
            location=Location(**(self.location or {})),
            last_modified=_as_utc(self.last_modified),
        )

    def __repr__(self):
        return f"<DraftRecord(id='{self.id}', title='{self.title}')>"


class JobRecord(Base):
    """Job posting table"""
    __tablename__ = "job_postings"

    id: Mapped[str] = mapped_column(String(100), primary_key=True)
    employer_id: Mapped[str] = mapped_column(String(100), index=True)
    title: Mapped[str] = mapped_column(String(200))
    description: Mapped[str] = mapped_column(Text)
    salary_amount: Mapped[float] = mapped_column(Float)
    salary_unit: Mapped[str] = mapped_column(String(20))
    duration_amount: Mapped[int] = mapped_column(Integer)
    duration_unit: Mapped[str] = mapped_column(String(20))
    location: Mapped[Dict[str, Any]] = mapped_column(JSON, default=dict)
    status: Mapped[str] = mapped_column(String(20), index=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True))
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True))

    def apply(self, job: JobPosting) -> None:
        self.employer_id = job.employer_id
        self.title = job.title
        self.description = job.description
        self.salary_amount = job.salary_amount
        self.salary_unit = job.salary_unit
        self.duration_amount = job.duration_amount
        self.duration_unit = job.duration_unit
        self.location = job.location.model_dump()
        self.status = job.status

    def to_model(self) -> JobPosting:
        return JobPosting(
            id=self.id,
            employer_id=self.employer_id,
            title=self.title,
            description=self.description,
            salary_amount=self.salary_amount,
            salary_unit=self.salary_unit,
            duration_amount=self.duration_amount,
            duration_unit=self.duration_unit,
            location=Location(**(self.location or {})),
            status=self.status,
            created_at=_as_utc(self.created_at),
            updated_at=_as_utc(self.updated_at),
        )

    def __repr__(self):
        return f"<JobRecord(id='{self.id}', title='{self.title}', status='{self.status}')>"


class StoreDatabase:
    """Engine and session management for the SQL stores"""

    def __init__(self, database_url: Optional[str] = None, echo: Optional[bool] = None):
        store_settings = get_settings().stores
        self.database_url = database_url or store_settings.database_url
        echo = store_settings.echo if echo is None else echo

        engine_options: Dict[str, Any] = {"echo": echo}
        if self.database_url.startswith("sqlite"):
            # one shared connection so an in-memory database survives across threads
            engine_options.update(
                connect_args={"check_same_thread": False},
                poolclass=StaticPool,
            )
        else:
            engine_options.update(pool_pre_ping=True, pool_recycle=3600)

        self._engine: Engine = create_engine(self.database_url, **engine_options)
        self._session_factory = sessionmaker(
            bind=self._engine,
            autocommit=False,
            autoflush=False,
            expire_on_commit=False,
        )
        logger.info("store database initialized", url=self._engine.url.render_as_string(hide_password=True))

    def create_tables(self) -> None:
        Base.metadata.create_all(bind=self._engine)

    def drop_tables(self) -> None:
        Base.metadata.drop_all(bind=self._engine)

    @contextmanager
    def session_scope(self) -> Generator[Session, None, None]:
        """Commit on success, roll back on any error"""
        session = self._session_factory()
        try:
            yield session
            session.commit()
        except Exception as e:
            session.rollback()
            logger.error("store transaction rolled back", error=str(e))
            raise
        finally:
            session.close()

    def close(self) -> None:
        self._engine.dispose()


class _SqlStore:
    def __init__(self, database: StoreDatabase):
        self.database = database

    async def _run(self, operation: str, work: Callable[[Session], T]) -> Result[T, StoreError]:
        """Run ``work`` in a transaction on a worker thread"""

        def unit_of_work():
            with self.database.session_scope() as session:
                return work(session)

        try:
            return Success(await asyncio.to_thread(unit_of_work))
        except SQLAlchemyError as e:
            return self._handle_database_error(operation, e)

    def _handle_database_error(self, operation: str, error: Exception) -> Failure:
        logger.error(f"{operation} failed", error=str(error))
        return Failure(StoreError(f"{operation} failed: {error}", code=StoreError.IO, cause=error))


class SqlDraftStore(_SqlStore, DraftStore):
    """DraftStore over the ``job_drafts`` table"""

    def __init__(self, database: StoreDatabase, max_drafts: Optional[int] = None):
        super().__init__(database)
        self.max_drafts = get_settings().stores.max_drafts if max_drafts is None else max_drafts

    async def get(self, draft_id: str) -> Optional[JobPostingDraft]:
        def work(session: Session) -> Optional[JobPostingDraft]:
            record = session.get(DraftRecord, draft_id)
            return record.to_model() if record is not None else None

        result = await self._run("draft lookup", work)
        if not result.is_success:
            raise StoreFailure(
                f"Could not read draft '{draft_id}': {result.error.message}",
                cause=result.error,
                operation="draft lookup",
                store="draft",
            )
        return result.value

    async def save(self, draft: JobPostingDraft) -> Result[None, StoreError]:
        def work(session: Session):
            record = session.get(DraftRecord, draft.id)
            if record is None:
                total = session.scalar(select(func.count()).select_from(DraftRecord))
                if total >= self.max_drafts:
                    return Failure(StoreError(
                        f"Draft store is full ({self.max_drafts} drafts)",
                        code=StoreError.CAPACITY,
                    ))
            session.merge(DraftRecord.from_model(draft))
            return Success(None)

        result = await self._run("draft save", work)
        return result.value if result.is_success else result

    async def delete(self, draft_id: str) -> Result[None, StoreError]:
        def work(session: Session) -> None:
            record = session.get(DraftRecord, draft_id)
            if record is not None:
                session.delete(record)

        return await self._run("draft delete", work)

    async def list_drafts(self) -> Result[List[JobPostingDraft], StoreError]:
        def work(session: Session) -> List[JobPostingDraft]:
            records = session.scalars(
                select(DraftRecord).order_by(DraftRecord.last_modified.desc())
            ).all()
            return [record.to_model() for record in records]

        return await self._run("draft listing", work)

    async def count(self) -> Result[int, StoreError]:
        def work(session: Session) -> int:
            return session.scalar(select(func.count()).select_from(DraftRecord))

        return await self._run("draft count", work)

    async def clear(self) -> Result[None, StoreError]:
        def work(session: Session) -> None:
            session.query(DraftRecord).delete()

        return await self._run("draft clear", work)


class SqlJobStore(_SqlStore, JobStore):
    """JobStore over the ``job_postings`` table"""

    async def create(self, job: JobPosting) -> Result[JobPosting, StoreError]:
        def work(session: Session):
            job_id = job.id or str(uuid4())
            if session.get(JobRecord, job_id) is not None:
                return Failure(StoreError(f"Job '{job_id}' already exists"))
            record = JobRecord(id=job_id, created_at=job.created_at, updated_at=job.updated_at)
            record.apply(job)
            session.add(record)
            session.flush()
            logger.info("job created", job_id=job_id)
            return Success(record.to_model())

        result = await self._run("job create", work)
        return result.value if result.is_success else result

    async def update(self, job_id: str, job: JobPosting) -> Result[JobPosting, StoreError]:
        def work(session: Session):
            record = session.get(JobRecord, job_id)
            if record is None:
                return Failure(StoreError(f"Job '{job_id}' not found", code=StoreError.NOT_FOUND))
            record.apply(job)
            record.updated_at = utc_now()
            session.flush()
            return Success(record.to_model())

        result = await self._run("job update", work)
        return result.value if result.is_success else result

    async def get_by_id(self, job_id: str) -> Result[JobPosting, StoreError]:
        def work(session: Session):
            record = session.get(JobRecord, job_id)
            if record is None:
                return Failure(StoreError(f"Job '{job_id}' not found", code=StoreError.NOT_FOUND))
            return Success(record.to_model())

        result = await self._run("job lookup", work)
        return result.value if result.is_success else result
