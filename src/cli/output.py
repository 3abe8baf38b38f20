"""Shared console helpers for CLI commands."""

from decimal import Decimal
from pathlib import Path
from typing import NoReturn, Optional

from rich.console import Console
from rich.markup import escape

from src.lib.errors import SnapshotLoadError, format_error_message, get_error_color
from src.models.snapshot import LedgerSnapshot

console = Console()


def load_snapshot(path: str | Path) -> LedgerSnapshot:
    """Load a snapshot, printing the error and exiting on failure."""
    try:
        return LedgerSnapshot.from_json_file(path)
    except SnapshotLoadError as e:
        exit_with_error(e)


def exit_with_error(error: Exception, code: int = 1) -> NoReturn:
    """Print an error in its category color and exit."""
    color = get_error_color(error)
    console.print(f"[{color}]✗ Error: {escape(format_error_message(error))}[/{color}]")
    raise SystemExit(code)


def format_amount(value: Optional[Decimal], currency: str = "KRW") -> str:
    """Format money with thousands separators (cents for USD)."""
    if value is None:
        return "-"
    if not value.is_finite():
        return str(value)
    if currency == "USD":
        return f"{value:,.2f}"
    return f"{value:,.0f}"


def format_rate(value: Optional[Decimal | float]) -> str:
    """Format a ratio (0.1 = 10%) as a percentage."""
    if value is None:
        return "-"
    return f"{float(value) * 100:.2f}%"


def amount_style(value: Decimal) -> str:
    if not value.is_finite() or value == 0:
        return "white"
    return "green" if value > 0 else "red"
