"""CLI entry point for the household ledger engine."""

import logging
import sys
import traceback

import click
from rich.console import Console

from src.cli import check, ledger, report
from src.lib.errors import LedgerEngineError, format_error_message, get_error_color
from src.lib.logging_config import resolve_log_level, setup_logging

__version__ = "0.1.0"

console = Console()


@click.group()  # type: ignore[misc]
@click.option("--debug", is_flag=True, help="Enable debug logging")  # type: ignore[misc]
@click.option("--log-file", type=click.Path(), help="Also write logs to this file")  # type: ignore[misc]
@click.pass_context  # type: ignore[misc]
def main(ctx: click.Context, debug: bool, log_file: str | None) -> None:
    """Household Ledger Engine - inspect balances, positions and data integrity."""
    ctx.ensure_object(dict)
    ctx.obj["DEBUG"] = debug
    level = logging.DEBUG if debug else resolve_log_level(logging.WARNING)
    setup_logging(level, log_file=log_file)


def handle_exception(
    exc_type: type[BaseException], exc_value: BaseException, exc_traceback: object
) -> None:
    """
    Global exception handler for CLI.

    Formats exceptions with Rich colors and provides user-friendly messages.
    """
    if issubclass(exc_type, KeyboardInterrupt):
        sys.__excepthook__(exc_type, exc_value, exc_traceback)  # type: ignore[arg-type]
        return

    color = get_error_color(exc_value) if isinstance(exc_value, Exception) else "red"
    message = (
        format_error_message(exc_value) if isinstance(exc_value, Exception) else str(exc_value)
    )

    console.print(f"\n[{color}]✗ Error: {message}[/{color}]\n")

    if isinstance(exc_value, LedgerEngineError):
        # Known errors: traceback only on request
        if "--debug" in sys.argv:
            console.print("[dim]Traceback:[/dim]")
            traceback.print_exception(exc_value)
    else:
        console.print("[dim]Unexpected error occurred. Use --debug for full traceback.[/dim]")
        if "--debug" in sys.argv:
            traceback.print_exception(exc_value)

    sys.exit(1)


# Install global exception handler
sys.excepthook = handle_exception


@main.command()  # type: ignore[misc]
def version() -> None:
    """Show version information."""
    click.echo(f"ledger-engine version {__version__}")


# Register subcommands
main.add_command(ledger.balances)
main.add_command(ledger.positions)
main.add_command(ledger.realized)
main.add_command(ledger.xirr_command)
main.add_command(check.check)
main.add_command(report.report)


if __name__ == "__main__":
    main()
