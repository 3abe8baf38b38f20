"""Per-account running balances.

Folds the cash ledger and trade cash impacts into one row per account. Every
figure is a plain sum over the full history, so the result does not depend on
the order of ledger entries or trades.
"""

import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Iterable, Iterator, Optional, Sequence

from src.models.account import Account
from src.models.ledger_entry import LedgerEntry, LedgerKind
from src.models.stock_trade import StockTrade
from src.services.ticker_normalizer import is_usd_ticker

logger = logging.getLogger(__name__)

ZERO = Decimal("0")


@dataclass(frozen=True)
class AccountBalanceRow:
    """Balance summary for one account.

    Attributes:
        account: The account
        income_sum: Income booked into the account
        expense_sum: Expenses paid from the account
        transfer_net: Non-USD transfers in minus out (card payments excluded)
        usd_transfer_net: USD transfers in minus out (card payments excluded)
        trade_cash_impact: Trade cash moving the account's own-currency balance
        usd_trade_cash_impact: Cash impact of USD-ticker trades on a KRW
            securities account (moves the USD float, not current_balance)
        current_balance: Opening cash plus every fold above
        card_debt: Running card debt (card accounts only)
    """

    account: Account
    income_sum: Decimal
    expense_sum: Decimal
    transfer_net: Decimal
    usd_transfer_net: Decimal
    trade_cash_impact: Decimal
    usd_trade_cash_impact: Decimal
    current_balance: Decimal
    card_debt: Optional[Decimal] = None

    @property
    def account_id(self) -> str:
        return self.account.id

    @property
    def usd_cash(self) -> Decimal:
        """Tracked USD float of a securities account (0 elsewhere)."""
        if not self.account.is_securities:
            return ZERO
        return self.account.tracked_usd_balance + self.usd_transfer_net


def _trade_moves_usd_float(account: Account, trade: StockTrade) -> bool:
    return account.is_securities and account.currency != "USD" and is_usd_ticker(trade.ticker)


def _usable_entries(ledger: Iterable[LedgerEntry]) -> Iterator[LedgerEntry]:
    for entry in ledger:
        if entry.invalid_fields():
            logger.debug(f"Ledger entry {entry.id}: invalid amount skipped in balance")
            continue
        yield entry


def _card_debt_change(account: Account, ledger: Iterable[LedgerEntry]) -> Decimal:
    change = ZERO
    for entry in _usable_entries(ledger):
        if entry.kind == LedgerKind.EXPENSE and entry.from_account_id == account.id:
            change -= entry.amount
        elif entry.is_card_payment:
            if entry.to_account_id == account.id:
                change += entry.amount
            if entry.from_account_id == account.id:
                change -= entry.amount
    return change


def compute_card_debt(account: Account, ledger: Iterable[LedgerEntry]) -> Optional[Decimal]:
    """
    Running debt of a credit card account.

    Opening debt, minus card usage (expenses paid from the card), plus net
    card-payment transfers into the card. Entries with an invalid amount
    are skipped.

    Args:
        account: Any account
        ledger: Ledger entries

    Returns:
        Card debt, or None for non-card accounts
    """
    if not account.is_card:
        return None
    return account.opening_debt + _card_debt_change(account, ledger)


def _balance_row(
    account: Account,
    ledger: Sequence[LedgerEntry],
    trades: Sequence[StockTrade],
    base: Optional[AccountBalanceRow] = None,
) -> AccountBalanceRow:
    if base is None:
        income_sum = expense_sum = transfer_net = usd_transfer_net = ZERO
        trade_cash_impact = usd_trade_cash_impact = ZERO
        card_debt = account.opening_debt if account.is_card else None
    else:
        income_sum = base.income_sum
        expense_sum = base.expense_sum
        transfer_net = base.transfer_net
        usd_transfer_net = base.usd_transfer_net
        trade_cash_impact = base.trade_cash_impact
        usd_trade_cash_impact = base.usd_trade_cash_impact
        card_debt = base.card_debt

    for entry in _usable_entries(ledger):
        if entry.kind == LedgerKind.INCOME:
            if entry.to_account_id == account.id:
                income_sum += entry.amount
        elif entry.kind == LedgerKind.EXPENSE:
            if entry.from_account_id == account.id:
                expense_sum += entry.amount
        elif not entry.is_card_payment:
            delta = ZERO
            if entry.to_account_id == account.id:
                delta += entry.amount
            if entry.from_account_id == account.id:
                delta -= entry.amount
            if entry.is_usd:
                usd_transfer_net += delta
            else:
                transfer_net += delta

    for trade in trades:
        if trade.account_id != account.id:
            continue
        if not trade.cash_impact.is_finite():
            logger.debug(f"Trade {trade.id}: non-finite cash impact skipped in balance")
            continue
        if _trade_moves_usd_float(account, trade):
            usd_trade_cash_impact += trade.cash_impact
        else:
            trade_cash_impact += trade.cash_impact

    if card_debt is not None:
        card_debt += _card_debt_change(account, ledger)

    current_balance = (
        account.opening_cash
        + account.effective_cash_adjustment
        + income_sum
        - expense_sum
        + transfer_net
        + trade_cash_impact
    )

    return AccountBalanceRow(
        account=account,
        income_sum=income_sum,
        expense_sum=expense_sum,
        transfer_net=transfer_net,
        usd_transfer_net=usd_transfer_net,
        trade_cash_impact=trade_cash_impact,
        usd_trade_cash_impact=usd_trade_cash_impact,
        current_balance=current_balance,
        card_debt=card_debt,
    )


def compute_account_balances(
    accounts: Iterable[Account],
    ledger: Iterable[LedgerEntry],
    trades: Iterable[StockTrade],
) -> list[AccountBalanceRow]:
    """
    Compute one balance row per account.

    Account ids are expected to be unique. Ledger entries with a non-finite
    or negative amount and trades with a non-finite cash impact are skipped;
    the integrity checker reports them.

    Args:
        accounts: Accounts, in the order rows should be returned
        ledger: Cash ledger entries (any order)
        trades: Stock trades (any order)

    Returns:
        List of AccountBalanceRow, one per account, in input order

    Example:
        >>> rows = compute_account_balances(snapshot.accounts, snapshot.ledger, snapshot.trades)
        >>> rows[0].current_balance
        Decimal('1250000')
    """
    ledger = tuple(ledger)
    trades = tuple(trades)
    rows = [_balance_row(account, ledger, trades) for account in accounts]
    logger.debug(
        f"Computed {len(rows)} account balances from {len(ledger)} entries, {len(trades)} trades"
    )
    return rows


def advance_account_balances(
    rows: Iterable[AccountBalanceRow],
    ledger: Iterable[LedgerEntry],
    trades: Iterable[StockTrade],
) -> list[AccountBalanceRow]:
    """
    Fold further ledger entries and trades into existing balance rows.

    ``advance_account_balances(compute_account_balances(a, l1, t1), l2, t2)``
    equals ``compute_account_balances(a, l1 + l2, t1 + t2)``, so callers
    walking a timeline only pay for the records of each step.

    Args:
        rows: Rows from compute_account_balances (or a previous advance)
        ledger: Ledger entries not yet folded into ``rows``
        trades: Trades not yet folded into ``rows``

    Returns:
        New rows in the same order
    """
    ledger = tuple(ledger)
    trades = tuple(trades)
    if not ledger and not trades:
        return list(rows)
    return [_balance_row(row.account, ledger, trades, base=row) for row in rows]
