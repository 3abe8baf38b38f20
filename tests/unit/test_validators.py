"""Unit tests for input validators."""

from datetime import date, datetime
from decimal import Decimal

import pytest

from src.lib.errors import (
    InvalidCurrencyError,
    InvalidDateError,
    InvalidFxRateError,
    SnapshotLoadError,
    ValidationError,
    format_error_message,
    get_error_color,
)
from src.lib.validators import validate_currency, validate_date, validate_fx_rate


@pytest.mark.unit
class TestValidateCurrency:
    """Test suite for validate_currency."""

    def test_normalizes_case_and_whitespace(self):
        """Currency codes are uppercased and trimmed."""
        assert validate_currency("usd") == "USD"
        assert validate_currency("  KRW  ") == "KRW"

    def test_rejects_unsupported(self):
        """Only KRW and USD are supported."""
        with pytest.raises(InvalidCurrencyError, match="Must be KRW or USD"):
            validate_currency("EUR")

    def test_custom_allowed_list(self):
        assert validate_currency("eur", ("EUR",)) == "EUR"

    def test_is_value_error(self):
        """Validation errors double as ValueError for pydantic."""
        with pytest.raises(ValueError):
            validate_currency("JPY")


@pytest.mark.unit
class TestValidateDate:
    """Test suite for validate_date."""

    def test_iso_string(self):
        assert validate_date("2024-03-01") == date(2024, 3, 1)

    def test_time_component_ignored(self):
        """Only the day part of a timestamp is kept."""
        assert validate_date("2024-03-01T13:45:00") == date(2024, 3, 1)
        assert validate_date(datetime(2024, 3, 1, 13, 45)) == date(2024, 3, 1)

    def test_date_passthrough(self):
        assert validate_date(date(2024, 3, 1)) == date(2024, 3, 1)

    def test_invalid_format(self):
        with pytest.raises(InvalidDateError, match="Expected format: YYYY-MM-DD"):
            validate_date("03/01/2024")


@pytest.mark.unit
class TestValidateFxRate:
    """Test suite for validate_fx_rate."""

    def test_valid_rates(self):
        assert validate_fx_rate("1350.5") == Decimal("1350.5")
        assert validate_fx_rate(1300) == Decimal("1300")
        assert validate_fx_rate(Decimal("1320")) == Decimal("1320")

    def test_none_means_no_rate(self):
        assert validate_fx_rate(None) is None

    def test_rejects_non_positive(self):
        with pytest.raises(InvalidFxRateError, match="must be positive"):
            validate_fx_rate("0")
        with pytest.raises(InvalidFxRateError, match="must be positive"):
            validate_fx_rate(-5)

    def test_rejects_non_finite(self):
        with pytest.raises(InvalidFxRateError, match="must be finite"):
            validate_fx_rate("NaN")
        with pytest.raises(InvalidFxRateError, match="must be finite"):
            validate_fx_rate(float("inf"))

    def test_rejects_garbage(self):
        with pytest.raises(InvalidFxRateError, match="not a number"):
            validate_fx_rate("abc")


@pytest.mark.unit
class TestErrorFormatting:
    """Test suite for error message helpers."""

    def test_engine_error_message(self):
        assert format_error_message(ValidationError("bad input")) == "bad input"

    def test_generic_error_message(self):
        assert format_error_message(KeyError("x")) == "KeyError: 'x'"

    def test_colors(self):
        assert get_error_color(InvalidCurrencyError("EUR")) == "yellow"
        assert get_error_color(SnapshotLoadError("ledger.json")) == "magenta"
        assert get_error_color(RuntimeError("boom")) == "red"
