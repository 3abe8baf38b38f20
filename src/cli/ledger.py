"""Balance, position and return inspection commands."""

from decimal import Decimal, InvalidOperation
from typing import Optional

import click
from rich.table import Table

from src.cli.output import (
    amount_style,
    console,
    exit_with_error,
    format_amount,
    format_rate,
    load_snapshot,
)
from src.lib.errors import LedgerEngineError, ValidationError
from src.lib.validators import validate_date, validate_fx_rate
from src.services.balance_aggregator import compute_account_balances
from src.services.lot_tracking_service import compute_positions, replay_lots
from src.services.ticker_normalizer import canonicalize, classify
from src.services.xirr_solver import CashFlow, xirr


@click.command()
@click.argument("snapshot", type=click.Path())
def balances(snapshot: str) -> None:
    """Show running balances for every account."""
    data = load_snapshot(snapshot)
    rows = compute_account_balances(data.accounts, data.ledger, data.trades)

    if not rows:
        console.print("[yellow]No accounts in snapshot[/yellow]")
        return

    table = Table(title="Account Balances")
    table.add_column("Account", style="cyan")
    table.add_column("Type")
    table.add_column("Income", justify="right")
    table.add_column("Expense", justify="right")
    table.add_column("Transfers", justify="right")
    table.add_column("Trades", justify="right")
    table.add_column("Balance", justify="right", style="bold")
    table.add_column("Card debt", justify="right")

    for row in rows:
        currency = row.account.currency
        table.add_row(
            row.account.id,
            row.account.type,
            format_amount(row.income_sum, currency),
            format_amount(row.expense_sum, currency),
            format_amount(row.transfer_net, currency),
            format_amount(row.trade_cash_impact, currency),
            format_amount(row.current_balance, currency),
            format_amount(row.card_debt, currency),
        )

    console.print(table)


@click.command()
@click.argument("snapshot", type=click.Path())
@click.option("--fx-rate", default=None, help="KRW per USD (default: snapshot fxRate)")
def positions(snapshot: str, fx_rate: Optional[str]) -> None:
    """Show open positions with FIFO cost basis."""
    data = load_snapshot(snapshot)
    try:
        rate = validate_fx_rate(fx_rate) if fx_rate is not None else data.fx_rate
    except ValidationError as e:
        exit_with_error(e)

    rows = compute_positions(data.trades, data.prices, data.accounts, fx_rate=rate)
    if not rows:
        console.print("[yellow]No open positions[/yellow]")
        return

    table = Table(title="Open Positions")
    table.add_column("Account", style="cyan")
    table.add_column("Ticker", style="bold")
    table.add_column("Qty", justify="right")
    table.add_column("Avg cost", justify="right")
    table.add_column("Value", justify="right")
    table.add_column("P&L", justify="right")
    table.add_column("P&L %", justify="right")

    for row in rows:
        style = amount_style(row.pnl)
        table.add_row(
            row.account_id,
            row.ticker,
            f"{row.quantity:,}",
            format_amount(row.average_cost, row.currency),
            format_amount(row.market_value, row.currency),
            f"[{style}]{format_amount(row.pnl, row.currency)}[/{style}]",
            f"[{style}]{format_rate(row.pnl_rate)}[/{style}]",
        )

    console.print(table)


@click.command()
@click.argument("snapshot", type=click.Path())
def realized(snapshot: str) -> None:
    """Show realized P&L for every sell trade."""
    data = load_snapshot(snapshot)
    replay = replay_lots(data.trades)

    sells = [trade for trade in data.trades if trade.id in replay.realized_by_trade_id]
    if not sells:
        console.print("[yellow]No sell trades[/yellow]")
        return

    table = Table(title="Realized P&L")
    table.add_column("Trade", style="cyan")
    table.add_column("Date")
    table.add_column("Ticker", style="bold")
    table.add_column("Realized", justify="right")

    for trade in sorted(sells, key=lambda t: t.date):
        pnl = replay.realized_by_trade_id[trade.id]
        style = amount_style(pnl)
        table.add_row(
            trade.id,
            trade.date.isoformat(),
            canonicalize(trade.ticker),
            f"[{style}]{format_amount(pnl, classify(trade.ticker).value)}[/{style}]",
        )

    console.print(table)

    if replay.shortfalls:
        console.print(
            f"[yellow]⚠ {len(replay.shortfalls)} sell(s) exceeded held quantity; "
            "run 'check' for details[/yellow]"
        )


def _parse_flow(value: str) -> CashFlow:
    date_text, sep, amount_text = value.partition(":")
    if not sep:
        raise ValidationError(f"Invalid cash flow '{value}'. Expected DATE:AMOUNT")
    try:
        amount = Decimal(amount_text.strip().replace(",", ""))
    except InvalidOperation:
        raise ValidationError(f"Invalid cash flow amount: '{amount_text}'") from None
    return CashFlow(validate_date(date_text), amount)


@click.command("xirr")
@click.option(
    "--flow",
    "flows",
    multiple=True,
    required=True,
    help="Cash flow as YYYY-MM-DD:AMOUNT (negative = outflow); repeat for each flow",
)
@click.option("--guess", default=0.10, type=float, help="Starting rate")
def xirr_command(flows: tuple[str, ...], guess: float) -> None:
    """Solve the annualized return of dated cash flows."""
    try:
        cash_flows = [_parse_flow(flow) for flow in flows]
    except LedgerEngineError as e:
        exit_with_error(e)

    rate = xirr(cash_flows, guess=guess)
    if rate is None:
        console.print("[yellow]XIRR: no solution[/yellow]")
        return
    console.print(f"XIRR: [bold]{format_rate(rate)}[/bold] ({rate:.6f})")
