"""
Cost calculation
"""

from .calculator import total_cost, compute_cost, PER_PERIOD_LABELS

__all__ = [
    "total_cost",
    "compute_cost",
    "PER_PERIOD_LABELS",
]
