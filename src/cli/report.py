"""Report generation CLI commands."""

from typing import Optional

import click
from rich.table import Table

from src.cli.output import amount_style, console, exit_with_error, format_amount, load_snapshot
from src.lib.errors import ValidationError
from src.lib.validators import validate_date
from src.services.analytics.ledger_reports import (
    PeriodReport,
    generate_category_report,
    generate_monthly_report,
    generate_yearly_report,
)


@click.group()
def report() -> None:
    """Generate ledger rollups."""
    pass


def _print_period_table(title: str, rows: list[PeriodReport]) -> None:
    if not rows:
        console.print("[yellow]No ledger entries in range[/yellow]")
        return

    table = Table(title=title)
    table.add_column("Period", style="cyan")
    table.add_column("Income", justify="right", style="green")
    table.add_column("Expense", justify="right", style="red")
    table.add_column("Transfer", justify="right")
    table.add_column("Net", justify="right", style="bold")

    for row in rows:
        style = amount_style(row.net)
        table.add_row(
            row.period,
            format_amount(row.income),
            format_amount(row.expense),
            format_amount(row.transfer),
            f"[{style}]{format_amount(row.net)}[/{style}]",
        )

    console.print(table)


@report.command()
@click.argument("snapshot", type=click.Path())
@click.option("--start", default=None, help="First month (YYYY-MM)")
@click.option("--end", default=None, help="Last month (YYYY-MM)")
def monthly(snapshot: str, start: Optional[str], end: Optional[str]) -> None:
    """Income, expense and transfers per month."""
    data = load_snapshot(snapshot)
    _print_period_table("Monthly Report", generate_monthly_report(data.ledger, start, end))


@report.command()
@click.argument("snapshot", type=click.Path())
def yearly(snapshot: str) -> None:
    """Income, expense and transfers per year."""
    data = load_snapshot(snapshot)
    _print_period_table("Yearly Report", generate_yearly_report(data.ledger))


@report.command()
@click.argument("snapshot", type=click.Path())
@click.option("--start", default=None, help="First day (YYYY-MM-DD)")
@click.option("--end", default=None, help="Last day (YYYY-MM-DD)")
def category(snapshot: str, start: Optional[str], end: Optional[str]) -> None:
    """Expense totals per category."""
    data = load_snapshot(snapshot)
    try:
        start_date = validate_date(start) if start else None
        end_date = validate_date(end) if end else None
    except ValidationError as e:
        exit_with_error(e)

    rows = generate_category_report(data.ledger, start_date, end_date)
    if not rows:
        console.print("[yellow]No expenses in range[/yellow]")
        return

    table = Table(title="Expenses by Category")
    table.add_column("Category", style="cyan")
    table.add_column("Detail")
    table.add_column("Total", justify="right", style="bold")
    table.add_column("Count", justify="right")
    table.add_column("Average", justify="right")

    for row in rows:
        table.add_row(
            row.category,
            row.sub_category or "-",
            format_amount(row.total),
            str(row.count),
            format_amount(row.average),
        )

    console.print(table)
