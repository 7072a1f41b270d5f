"""
Cost calculator tests
"""

import logging

import pytest

from jobdraft.cost import PER_PERIOD_LABELS, compute_cost, total_cost
from jobdraft.models import CostBreakdown, DurationUnit, SalaryUnit

logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


class TestTotalCost:
    """Unit conversion table"""

    def test_hourly_rate_for_one_day(self):
        assert compute_cost(100, SalaryUnit.HOURLY, 1, DurationUnit.DAYS).total_amount == 800

    def test_monthly_salary_for_a_working_month_of_days(self):
        assert compute_cost(1000, SalaryUnit.MONTHLY, 22, DurationUnit.DAYS).total_amount == 1000

    @pytest.mark.parametrize("amount_unit, duration_unit, expected", [
        ("hourly", "hours", 100 * 3),
        ("hourly", "days", 100 * 3 * 8),
        ("hourly", "weeks", 100 * 3 * 40),
        ("hourly", "months", 100 * 3 * 160),
        ("daily", "hours", 100 * (3 / 8.0)),
        ("daily", "days", 100 * 3),
        ("daily", "weeks", 100 * 3 * 5),
        ("daily", "months", 100 * 3 * 22),
        ("weekly", "hours", 100 * (3 / 40.0)),
        ("weekly", "days", 100 * (3 / 5.0)),
        ("weekly", "weeks", 100 * 3),
        ("weekly", "months", 100 * 3 * 4.33),
        ("monthly", "hours", 100 * (3 / 160.0)),
        ("monthly", "days", 100 * (3 / 22.0)),
        ("monthly", "weeks", 100 * (3 / 4.33)),
        ("monthly", "months", 100 * 3),
    ])
    def test_conversion_table(self, amount_unit, duration_unit, expected):
        assert total_cost(100, amount_unit, 3, duration_unit) == expected

    def test_units_are_case_insensitive(self):
        assert total_cost(100, "Hourly", 2, "DAYS") == total_cost(100, "hourly", 2, "days")
        assert total_cost(100, SalaryUnit.WEEKLY, 2, DurationUnit.MONTHS) == 100 * 2 * 4.33

    def test_unsupported_units(self):
        assert total_cost(100, "yearly", 3, "days") == 0.0
        assert total_cost(100, "hourly", 3, "fortnights") == 0.0
        assert total_cost(100, None, 3, "days") == 0.0


class TestComputeCost:
    """CostBreakdown"""

    def test_breakdown(self):
        breakdown = compute_cost(500, "daily", 2, "weeks")

        assert isinstance(breakdown, CostBreakdown)
        assert breakdown.base_amount == 500
        assert breakdown.total_amount == 5000
        assert breakdown.per_period_label == "per day"
        assert breakdown.total_periods == 10

    def test_fractional_periods(self):
        breakdown = compute_cost(1000, "monthly", 11, "days")
        assert breakdown.total_periods == pytest.approx(0.5)
        assert breakdown.total_amount == pytest.approx(500)

    def test_missing_values_count_as_zero(self):
        breakdown = compute_cost(None, "hourly", None, "days")
        assert breakdown.base_amount == 0
        assert breakdown.total_amount == 0
        assert breakdown.per_period_label == "per hour"

    def test_labels(self):
        assert PER_PERIOD_LABELS == {
            "hourly": "per hour",
            "daily": "per day",
            "weekly": "per week",
            "monthly": "per month",
        }
        assert compute_cost(1, "yearly", 1, "days").per_period_label == ""

    def test_deterministic(self):
        assert compute_cost(123.45, "weekly", 7, "months") == compute_cost(123.45, "weekly", 7, "months")
