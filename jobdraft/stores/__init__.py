"""
Store contracts and reference adapters
"""

from .base import DraftStore, JobStore
from .memory import InMemoryDraftStore, InMemoryJobStore
from .sql import StoreDatabase, SqlDraftStore, SqlJobStore

__all__ = [
    # contracts
    "DraftStore",
    "JobStore",

    # in-memory
    "InMemoryDraftStore",
    "InMemoryJobStore",

    # SQLAlchemy
    "StoreDatabase",
    "SqlDraftStore",
    "SqlJobStore",
]
