"""
Job-posting draft & publication core

- validation: rule engine and job field validators
- cost: total-cost calculator
- workflows: draft lifecycle coordinator (publish / update / edit drafts)
- session: form session controller with autosave
- stores: store contracts plus in-memory and SQLAlchemy adapters
"""

from .cost import compute_cost, total_cost
from .result import Failure, Result, Success
from .session import FormSessionController
from .validation import validate_field, validate_job
from .workflows import DraftLifecycleCoordinator, DraftState

__version__ = "1.0.0"

__all__ = [
    "validate_field",
    "validate_job",
    "compute_cost",
    "total_cost",

    "DraftLifecycleCoordinator",
    "DraftState",
    "FormSessionController",

    "Result",
    "Success",
    "Failure",
]
