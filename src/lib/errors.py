"""Custom exception classes for the ledger engine.

Engine computations never raise for bad data; these exceptions belong to the
edges (input validation, snapshot loading, CLI arguments).
"""


class LedgerEngineError(Exception):
    """Base exception for all ledger engine errors."""

    def __init__(self, message: str):
        """Initialize with error message."""
        self.message = message
        super().__init__(message)


class DataError(LedgerEngineError):
    """Data validation or processing errors."""

    pass


class ValidationError(DataError, ValueError):
    """Input validation errors.

    Also a ValueError so pydantic field validators report it as a field error.
    """

    pass


class InvalidCurrencyError(ValidationError):
    """Unsupported currency code."""

    def __init__(self, currency: str, custom_message: str = ""):
        """
        Initialize with invalid currency.

        Args:
            currency: The invalid currency code
            custom_message: Optional custom error message
        """
        if custom_message:
            message = f"Invalid currency code: '{currency}'. {custom_message}"
        else:
            message = f"Invalid currency code: '{currency}'. Must be KRW or USD."
        super().__init__(message)


class InvalidDateError(ValidationError):
    """Invalid date format or value."""

    def __init__(self, date_str: str, expected_format: str = "YYYY-MM-DD"):
        """
        Initialize with date details.

        Args:
            date_str: The invalid date string
            expected_format: Expected date format
        """
        message = f"Invalid date: '{date_str}'. Expected format: {expected_format}"
        super().__init__(message)


class InvalidFxRateError(ValidationError):
    """Invalid exchange rate value."""

    def __init__(self, rate: object, reason: str = ""):
        """
        Initialize with rate details.

        Args:
            rate: The invalid rate
            reason: Reason why the rate is invalid
        """
        message = f"Invalid FX rate: {rate}"
        if reason:
            message += f" ({reason})"
        super().__init__(message)


class SnapshotLoadError(DataError):
    """Snapshot document could not be read or parsed."""

    def __init__(self, path: str, details: str = ""):
        """
        Initialize with snapshot path.

        Args:
            path: Path of the snapshot document
            details: Additional error details
        """
        message = f"Failed to load snapshot {path}"
        if details:
            message += f": {details}"
        super().__init__(message)


# Error message helpers


def format_error_message(error: Exception) -> str:
    """
    Format exception into user-friendly error message.

    Args:
        error: The exception to format

    Returns:
        Formatted error message
    """
    if isinstance(error, LedgerEngineError):
        return error.message

    # Generic errors
    error_type = type(error).__name__
    return f"{error_type}: {str(error)}"


def get_error_color(error: Exception) -> str:
    """
    Get Rich color for error type.

    Args:
        error: The exception

    Returns:
        Rich color name
    """
    if isinstance(error, ValidationError):
        return "yellow"
    elif isinstance(error, SnapshotLoadError):
        return "magenta"
    elif isinstance(error, DataError):
        return "red"
    else:
        return "red"
