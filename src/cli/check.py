"""Integrity check command."""

from typing import Optional

import click
from rich.markup import escape

from src.cli.output import console, exit_with_error, load_snapshot
from src.lib.errors import ValidationError
from src.lib.validators import validate_date
from src.models.integrity import Severity
from src.services.integrity_checker import plan_duplicate_removal, run_integrity_check

SEVERITY_COLORS = {
    Severity.ERROR: "red",
    Severity.WARNING: "yellow",
    Severity.INFO: "cyan",
}


@click.command()
@click.argument("snapshot", type=click.Path())
@click.option("--today", default=None, help="Reference date for future-dated records (YYYY-MM-DD)")
@click.option("--strict", is_flag=True, help="Exit with status 2 when any error is found")
def check(snapshot: str, today: Optional[str], strict: bool) -> None:
    """Run every integrity rule over a snapshot."""
    data = load_snapshot(snapshot)
    try:
        reference_date = validate_date(today) if today else None
    except ValidationError as e:
        exit_with_error(e)

    issues = run_integrity_check(
        data.accounts,
        data.ledger,
        data.trades,
        data.category_presets,
        today=reference_date,
    )

    if not issues:
        console.print("[green]✓ No integrity issues found[/green]")
        return

    for issue in issues:
        color = SEVERITY_COLORS[issue.severity]
        console.print(
            f"[{color}]{issue.severity.value.upper():7}[/{color}] "
            f"{issue.type.value}: {escape(issue.message)}"
        )

    errors = sum(1 for issue in issues if issue.severity == Severity.ERROR)
    warnings = sum(1 for issue in issues if issue.severity == Severity.WARNING)
    console.print(f"\n{len(issues)} issue(s): {errors} error(s), {warnings} warning(s)")

    plan = plan_duplicate_removal(issues)
    if not plan.is_empty:
        console.print(
            f"[dim]Removing duplicates would delete {len(plan.ledger_ids)} ledger "
            f"entries and {len(plan.trade_ids)} trades[/dim]"
        )

    if strict and errors:
        raise SystemExit(2)
