"""
Total-cost calculator

Converts a salary (amount per period) and a work duration into the total
cost of a posting, using fixed calendar approximations:

    1 day   = 8 hours
    1 week  = 40 hours = 5 days
    1 month = 160 hours = 22 working days = 4.33 weeks

Each (salary unit, duration unit) pair either multiplies the duration by a
factor or divides it by one. Evaluation order is fixed per shape
(``a * d * f`` vs ``a * (d / f)``) so published figures stay bit-identical.
"""

from typing import Any, Dict, Optional, Tuple

from ..models.job_posting import CostBreakdown, DurationUnit, SalaryUnit

_MULTIPLY = "multiply"
_DIVIDE = "divide"

_CONVERSIONS: Dict[Tuple[str, str], Tuple[str, float]] = {
    (SalaryUnit.HOURLY.value, DurationUnit.HOURS.value): (_MULTIPLY, 1),
    (SalaryUnit.HOURLY.value, DurationUnit.DAYS.value): (_MULTIPLY, 8),
    (SalaryUnit.HOURLY.value, DurationUnit.WEEKS.value): (_MULTIPLY, 40),
    (SalaryUnit.HOURLY.value, DurationUnit.MONTHS.value): (_MULTIPLY, 160),

    (SalaryUnit.DAILY.value, DurationUnit.HOURS.value): (_DIVIDE, 8.0),
    (SalaryUnit.DAILY.value, DurationUnit.DAYS.value): (_MULTIPLY, 1),
    (SalaryUnit.DAILY.value, DurationUnit.WEEKS.value): (_MULTIPLY, 5),
    (SalaryUnit.DAILY.value, DurationUnit.MONTHS.value): (_MULTIPLY, 22),

    (SalaryUnit.WEEKLY.value, DurationUnit.HOURS.value): (_DIVIDE, 40.0),
    (SalaryUnit.WEEKLY.value, DurationUnit.DAYS.value): (_DIVIDE, 5.0),
    (SalaryUnit.WEEKLY.value, DurationUnit.WEEKS.value): (_MULTIPLY, 1),
    (SalaryUnit.WEEKLY.value, DurationUnit.MONTHS.value): (_MULTIPLY, 4.33),

    (SalaryUnit.MONTHLY.value, DurationUnit.HOURS.value): (_DIVIDE, 160.0),
    (SalaryUnit.MONTHLY.value, DurationUnit.DAYS.value): (_DIVIDE, 22.0),
    (SalaryUnit.MONTHLY.value, DurationUnit.WEEKS.value): (_DIVIDE, 4.33),
    (SalaryUnit.MONTHLY.value, DurationUnit.MONTHS.value): (_MULTIPLY, 1),
}

PER_PERIOD_LABELS = {
    SalaryUnit.HOURLY.value: "per hour",
    SalaryUnit.DAILY.value: "per day",
    SalaryUnit.WEEKLY.value: "per week",
    SalaryUnit.MONTHLY.value: "per month",
}


def _unit_key(unit: Any) -> str:
    if unit is None:
        return ""
    value = getattr(unit, "value", unit)
    return str(value).strip().lower()


def _conversion(amount_unit: Any, duration_unit: Any) -> Optional[Tuple[str, float]]:
    return _CONVERSIONS.get((_unit_key(amount_unit), _unit_key(duration_unit)))


def total_cost(amount: float, amount_unit: Any, duration: float, duration_unit: Any) -> float:
    """
    Total cost of ``duration`` ``duration_unit`` at ``amount`` per ``amount_unit``.

    Unsupported unit pairs yield 0.0.
    """
    conversion = _conversion(amount_unit, duration_unit)
    if conversion is None:
        return 0.0

    operation, factor = conversion
    if operation == _DIVIDE:
        return amount * (duration / factor)
    if factor == 1:
        return float(amount * duration)
    return amount * duration * factor


def _periods(duration: float, amount_unit: Any, duration_unit: Any) -> float:
    conversion = _conversion(amount_unit, duration_unit)
    if conversion is None:
        return 0.0
    operation, factor = conversion
    if operation == _DIVIDE:
        return duration / factor
    return float(duration * factor)


def compute_cost(
    amount: Optional[float],
    amount_unit: Any,
    duration: Optional[float],
    duration_unit: Any,
) -> CostBreakdown:
    """
    Full cost breakdown. A missing amount or duration counts as zero.
    """
    amount = amount or 0.0
    duration = duration or 0

    return CostBreakdown(
        base_amount=float(amount),
        total_amount=total_cost(amount, amount_unit, duration, duration_unit),
        per_period_label=PER_PERIOD_LABELS.get(_unit_key(amount_unit), ""),
        total_periods=_periods(duration, amount_unit, duration_unit),
    )
