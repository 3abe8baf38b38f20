"""Unit tests for the XIRR solver."""

from datetime import date
from decimal import Decimal

import pytest

from src.services.xirr_solver import CashFlow, xirr


@pytest.mark.unit
class TestXirr:
    """Test suite for xirr."""

    def test_one_year_ten_percent(self):
        """-1000 then +1100 a year later solves to about 10%."""
        flows = [CashFlow(date(2023, 1, 1), -1000), CashFlow(date(2024, 1, 1), 1100)]

        rate = xirr(flows)

        # 365 days is slightly less than one 365.25-day year
        expected = 1.1 ** (365.25 / 365) - 1
        assert rate == pytest.approx(expected, abs=1e-6)
        assert rate == pytest.approx(0.10, abs=1e-3)

    def test_negative_return(self):
        """Losing money gives a negative rate above -100%."""
        flows = [(date(2023, 1, 1), -1000), (date(2024, 1, 1), 900)]

        rate = xirr(flows)

        assert rate == pytest.approx(0.9 ** (365.25 / 365) - 1, abs=1e-6)
        assert -1 < rate < 0

    def test_order_independent(self):
        """Flow order does not matter; the earliest date is the base."""
        flows = [
            (date(2024, 1, 1), Decimal("1100")),
            (date(2023, 1, 1), Decimal("-1000")),
        ]

        assert xirr(flows) == pytest.approx(xirr(list(reversed(flows))), abs=1e-12)

    def test_decimal_amounts(self):
        """Decimal amounts are accepted."""
        flows = [
            CashFlow(date(2023, 1, 1), Decimal("-500")),
            CashFlow(date(2023, 7, 2), Decimal("-500")),
            CashFlow(date(2024, 1, 1), Decimal("1100")),
        ]

        rate = xirr(flows)

        assert rate is not None
        assert rate > 0.10

    def test_guess_does_not_change_root(self):
        """A different starting guess converges to the same rate."""
        flows = [(date(2023, 1, 1), -1000), (date(2024, 1, 1), 1100)]

        assert xirr(flows, guess=0.5) == pytest.approx(xirr(flows), abs=1e-6)

    def test_fewer_than_two_flows(self):
        """A single flow has no rate."""
        assert xirr([]) is None
        assert xirr([(date(2024, 1, 1), -1000)]) is None

    def test_one_signed_flows(self):
        """All inflows or all outflows have no rate."""
        assert xirr([(date(2023, 1, 1), 1000), (date(2024, 1, 1), 1100)]) is None
        assert xirr([(date(2023, 1, 1), -1000), (date(2024, 1, 1), -1100)]) is None

    def test_unreachable_root_returns_none(self):
        """A root far outside floating-point range is reported as no solution."""
        flows = [(date(2024, 1, 1), -1000), (date(2024, 1, 2), 1e12)]

        assert xirr(flows) is None
