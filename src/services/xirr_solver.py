"""Extended internal rate of return (XIRR) for irregular cash flows.

Solves ``NPV(r) = sum(a_i / (1 + r) ** y_i) = 0`` where ``y_i`` is the
distance in 365.25-day years from the earliest flow. Newton's method only;
flows with several sign changes can have several roots or none reachable
from the guess, in which case the solver gives up and returns None.
"""

import logging
import math
from datetime import date
from decimal import Decimal
from typing import Iterable, NamedTuple, Optional, Union

from scipy.optimize import newton

from src.lib.config import (
    DAYS_PER_YEAR,
    XIRR_DEFAULT_GUESS,
    XIRR_MAX_ITERATIONS,
    XIRR_MIN_DERIVATIVE,
    XIRR_TOLERANCE,
)

logger = logging.getLogger(__name__)


class CashFlow(NamedTuple):
    """Dated cash flow. Positive = inflow, negative = outflow."""

    date: date
    amount: Union[Decimal, float, int]


class _SolverAbort(Exception):
    """Raised inside the objective to stop the iteration."""


def xirr(
    cash_flows: Iterable[Union[CashFlow, tuple[date, Union[Decimal, float, int]]]],
    guess: float = XIRR_DEFAULT_GUESS,
) -> Optional[float]:
    """
    Calculate the annualized internal rate of return.

    Args:
        cash_flows: (date, amount) pairs in any order
        guess: Starting rate (0.10 = 10%)

    Returns:
        Annual rate (0.05 = 5%), or None when there is no solution the
        solver can reach

    Example:
        >>> xirr([(date(2024, 1, 1), -1000), (date(2025, 1, 1), 1100)])
        0.1000...
    """
    flows = [(flow_date, float(amount)) for flow_date, amount in cash_flows]

    if len(flows) < 2:
        return None
    if not any(amount > 0 for _, amount in flows) or not any(amount < 0 for _, amount in flows):
        return None

    base = min(flow_date for flow_date, _ in flows)
    points = [((flow_date - base).days / DAYS_PER_YEAR, amount) for flow_date, amount in flows]

    def npv(rate: float) -> float:
        if rate <= -1:
            raise _SolverAbort(f"rate {rate} at or below -100%")
        total = sum(amount / (1 + rate) ** years for years, amount in points)
        # Inside tolerance counts as an exact root; newton stops on zero
        if abs(total) < XIRR_TOLERANCE:
            return 0.0
        return total

    def npv_derivative(rate: float) -> float:
        total = sum(
            -years * amount / (1 + rate) ** (years + 1) for years, amount in points if years != 0
        )
        if abs(total) < XIRR_MIN_DERIVATIVE:
            raise _SolverAbort("NPV derivative vanished")
        return total

    try:
        rate = newton(
            npv,
            x0=guess,
            fprime=npv_derivative,
            tol=XIRR_TOLERANCE,
            maxiter=XIRR_MAX_ITERATIONS,
        )
    except _SolverAbort as e:
        logger.debug(f"XIRR aborted: {e}")
        return None
    except (RuntimeError, OverflowError, ZeroDivisionError) as e:
        logger.warning(f"XIRR did not converge for {len(points)} flows: {e}")
        return None

    rate = float(rate)
    if not math.isfinite(rate) or rate <= -1:
        return None
    return rate
