"""
Input validation utilities.

Provides validation functions for values entering the engine from its edges:
currency codes, dates, and FX rates.
"""

from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Optional, Union

from src.lib.config import SUPPORTED_CURRENCIES
from src.lib.errors import InvalidCurrencyError, InvalidDateError, InvalidFxRateError


def validate_currency(currency: str, valid_currencies: Optional[tuple[str, ...]] = None) -> str:
    """
    Validate and normalize a currency code.

    Args:
        currency: Currency code to validate
        valid_currencies: Optional allowed codes. Defaults to KRW and USD.

    Returns:
        Normalized currency code (uppercase, trimmed)

    Raises:
        InvalidCurrencyError: If currency code is not supported

    Examples:
        >>> validate_currency("usd")
        'USD'
        >>> validate_currency("  KRW  ")
        'KRW'
        >>> validate_currency("EUR")
        Traceback (most recent call last):
        ...
        InvalidCurrencyError: Invalid currency code: 'EUR'. Must be KRW or USD.
    """
    if valid_currencies is None:
        valid_currencies = SUPPORTED_CURRENCIES

    normalized = currency.upper().strip()

    if normalized not in valid_currencies:
        raise InvalidCurrencyError(normalized)

    return normalized


def validate_date(date_value: Union[date, datetime, str]) -> date:
    """
    Parse a day-granularity date.

    Args:
        date_value: Date object, datetime object, or ISO string (YYYY-MM-DD)

    Returns:
        Validated date

    Raises:
        InvalidDateError: If the string is not an ISO day

    Examples:
        >>> validate_date("2024-03-01")
        datetime.date(2024, 3, 1)
        >>> validate_date("03/01/2024")
        Traceback (most recent call last):
        ...
        InvalidDateError: Invalid date: '03/01/2024'. Expected format: YYYY-MM-DD
    """
    if isinstance(date_value, datetime):
        return date_value.date()
    if isinstance(date_value, date):
        return date_value

    text = date_value.strip()
    try:
        # Time components are not meaningful for ledger ordering
        return datetime.strptime(text[:10], "%Y-%m-%d").date()
    except ValueError:
        raise InvalidDateError(date_value) from None


def validate_fx_rate(rate: Union[Decimal, float, str, None]) -> Optional[Decimal]:
    """
    Validate an exchange rate (KRW per USD).

    Args:
        rate: Rate to validate; None means "no rate available"

    Returns:
        Rate as Decimal, or None

    Raises:
        InvalidFxRateError: If rate is not a positive finite number

    Examples:
        >>> validate_fx_rate("1350.5")
        Decimal('1350.5')
        >>> validate_fx_rate(None) is None
        True
    """
    if rate is None:
        return None

    try:
        value = rate if isinstance(rate, Decimal) else Decimal(str(rate).strip())
    except InvalidOperation:
        raise InvalidFxRateError(rate, "not a number") from None

    if not value.is_finite():
        raise InvalidFxRateError(rate, "must be finite")
    if value <= 0:
        raise InvalidFxRateError(rate, "must be positive")

    return value
