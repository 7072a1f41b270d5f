"""
Draft lifecycle workflows
"""

from .draft_lifecycle import DraftLifecycleCoordinator, DraftState

__all__ = [
    "DraftLifecycleCoordinator",
    "DraftState",
]
