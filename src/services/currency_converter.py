"""Currency converter for the KRW/USD pair."""

import logging
from decimal import Decimal
from typing import Optional, Union

from src.lib.config import AMOUNT_TOLERANCE, DEFAULT_CURRENCY
from src.lib.errors import InvalidFxRateError
from src.lib.validators import validate_currency, validate_fx_rate

logger = logging.getLogger(__name__)


def tolerance_for(currency: Optional[str]) -> Decimal:
    """
    Smallest difference treated as a real discrepancy.

    Args:
        currency: KRW or USD (None means KRW)

    Returns:
        One won for KRW, one cent for USD
    """
    return AMOUNT_TOLERANCE.get(currency or DEFAULT_CURRENCY, AMOUNT_TOLERANCE[DEFAULT_CURRENCY])


class CurrencyConverter:
    """Converts amounts between KRW and USD at a single snapshot rate.

    The engine never fetches rates; the caller supplies one KRW-per-USD figure
    (or none, in which case amounts pass through unconverted).
    """

    def __init__(self, krw_per_usd: Union[Decimal, float, str, None] = None) -> None:
        """
        Initialize currency converter.

        Args:
            krw_per_usd: Exchange rate, KRW per 1 USD

        Raises:
            InvalidFxRateError: If the rate is not a positive finite number
        """
        self.krw_per_usd: Optional[Decimal] = validate_fx_rate(krw_per_usd)

    @classmethod
    def from_optional_rate(
        cls, krw_per_usd: Union[Decimal, float, str, None]
    ) -> "CurrencyConverter":
        """Build a converter, treating an unusable rate as no rate at all."""
        try:
            return cls(krw_per_usd)
        except InvalidFxRateError as e:
            logger.warning(f"{e.message}; amounts left unconverted")
            return cls(None)

    @property
    def has_rate(self) -> bool:
        return self.krw_per_usd is not None

    def get_rate(self, from_currency: str, to_currency: str) -> Optional[Decimal]:
        """
        Get the multiplier from one currency to another.

        Args:
            from_currency: Source currency code
            to_currency: Target currency code

        Returns:
            Multiplier, or None when no rate is available
        """
        from_currency = validate_currency(from_currency)
        to_currency = validate_currency(to_currency)

        if from_currency == to_currency:
            return Decimal("1")
        if self.krw_per_usd is None:
            return None
        if from_currency == "USD":
            return self.krw_per_usd
        return Decimal("1") / self.krw_per_usd

    def convert(self, amount: Decimal, from_currency: str, to_currency: str) -> Decimal:
        """
        Convert an amount between currencies.

        Args:
            amount: Amount in from_currency
            from_currency: Source currency code
            to_currency: Target currency code

        Returns:
            Converted amount; the original amount when no rate is available
        """
        rate = self.get_rate(from_currency, to_currency)
        if rate is None:
            logger.debug(f"No FX rate for {from_currency}->{to_currency}, amount left unconverted")
            return amount
        return amount * rate

    def to_krw(self, amount: Decimal, from_currency: str) -> Decimal:
        """Convert to KRW (convenience for net-worth totals)."""
        return self.convert(amount, from_currency, "KRW")
