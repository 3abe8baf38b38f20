"""Ledger reporting service for household finance reports.

Generates period (monthly/yearly) summaries, expense breakdowns by category,
account and stock performance reports, dividend income listings, daily asset
snapshots, and net-worth rollups. Every report is a thin consumer of the
balance aggregator and the lot tracking service.
"""

import logging
from dataclasses import dataclass
from datetime import date, timedelta
from decimal import Decimal
from typing import Iterable, Iterator, Literal, Optional, Sequence, Union

from src.lib.config import (
    DEFAULT_CURRENCY,
    DIVIDEND_KEYWORDS,
    FIXED_EXPENSE_PAIRS,
    GENERAL_TRANSFER_CATEGORIES,
)
from src.models.account import Account
from src.models.category_presets import CategoryPresets
from src.models.ledger_entry import LedgerEntry, LedgerKind
from src.models.stock_price import StockPrice
from src.models.stock_trade import StockTrade
from src.services.balance_aggregator import (
    AccountBalanceRow,
    advance_account_balances,
    compute_account_balances,
)
from src.services.category_normalizer import savings_categories
from src.services.currency_converter import CurrencyConverter
from src.services.lot_tracking_service import (
    PositionRow,
    compute_positions,
    group_trades,
    replay_lots,
)
from src.services.ticker_normalizer import is_usd_ticker
from src.services.xirr_solver import CashFlow, xirr

logger = logging.getLogger(__name__)

ZERO = Decimal("0")

FxRate = Union[Decimal, float, str, None]


@dataclass(frozen=True)
class PeriodReport:
    """Ledger totals for one month or year.

    Attributes:
        period: "YYYY-MM" or "YYYY"
        income: Income total
        expense: Expense total
        transfer: Transfer volume (not a net; both legs are the same entry)
        net: income - expense
    """

    period: str
    income: Decimal
    expense: Decimal
    transfer: Decimal
    net: Decimal


@dataclass(frozen=True)
class CategoryReportRow:
    """Expense totals for one (category, sub-category) pair."""

    category: str
    sub_category: Optional[str]
    total: Decimal
    count: int
    average: Decimal


@dataclass(frozen=True)
class AccountReportRow:
    """Opening vs current balance of one account.

    Attributes:
        change_rate: Percentage change (0 when the opening balance is 0)
    """

    account_id: str
    account_name: str
    opening_balance: Decimal
    current_balance: Decimal
    change: Decimal
    change_rate: Decimal


@dataclass(frozen=True)
class StockPerformanceRow:
    """Open position with its annualized return.

    Attributes:
        irr: XIRR over the position's trades plus current value, None when
            it cannot be solved
    """

    account_id: str
    ticker: str
    name: str
    currency: str
    quantity: Decimal
    cost_basis: Decimal
    market_value: Decimal
    pnl: Decimal
    pnl_rate: Decimal
    irr: Optional[float]


@dataclass(frozen=True)
class DividendIncomeRow:
    month: str
    date: date
    category: str
    sub_category: Optional[str]
    description: str
    account_id: Optional[str]
    account_name: Optional[str]
    amount: Decimal


@dataclass(frozen=True)
class DailyReportRow:
    """Flows on one day and asset values at the end of that day."""

    date: date
    income: Decimal
    expense: Decimal
    savings_expense: Decimal
    transfer: Decimal
    stock_value: Decimal
    cash_value: Decimal
    savings_value: Decimal
    total_assets: Decimal
    net_worth: Decimal


@dataclass(frozen=True)
class MonthlyNetWorthRow:
    month: str
    net_worth: Decimal


@dataclass(frozen=True)
class NetWorthSummary:
    """
    Household net worth in KRW.

    Debt is the sum of the cards' opening ``debt``. The running
    ``AccountBalanceRow.card_debt`` is a signed figure (card usage lowers it,
    payments raise it) that is reported per account beside net worth and is
    never folded into it, so card activity does not move this total.

    USD amounts (USD account balances, the securities USD float, positions
    valued in USD) are converted when a rate is known and left out otherwise.

    Attributes:
        cash: Checking/other/securities cash including the USD float
        savings: Savings account balances
        stock_value: Market value of open positions
        debt: Opening card debt
        total_assets: cash + savings + stock_value
        net_worth: total_assets - debt
    """

    cash: Decimal
    savings: Decimal
    stock_value: Decimal
    debt: Decimal
    total_assets: Decimal
    net_worth: Decimal


def _month(value: date) -> str:
    return value.strftime("%Y-%m")


def _valid_entries(ledger: Iterable[LedgerEntry]) -> Iterator[LedgerEntry]:
    """Entries whose amount can be summed (invalid ones are left to the checker)."""
    return (entry for entry in ledger if not entry.invalid_fields())


def _krw_value(
    amount: Decimal, currency: str, converter: CurrencyConverter
) -> Optional[Decimal]:
    if currency == DEFAULT_CURRENCY:
        return amount
    if converter.has_rate:
        return converter.to_krw(amount, currency)
    return None


def is_savings_expense(
    entry: LedgerEntry,
    accounts: Sequence[Account],
    presets: Optional[CategoryPresets] = None,
) -> bool:
    """
    Whether an entry moves money into savings rather than spending it.

    General transfers (이체, 계좌이체, 카드결제이체) never count. Savings
    categories and transfers into securities or savings accounts do.

    Args:
        entry: Ledger entry
        accounts: Accounts, to resolve the destination type
        presets: Category presets (default savings category when None)

    Returns:
        True for savings-type entries
    """
    if entry.category in GENERAL_TRANSFER_CATEGORIES:
        return False

    savings = savings_categories(presets or CategoryPresets())
    if entry.kind != LedgerKind.INCOME and entry.category in savings:
        return True

    if entry.kind == LedgerKind.TRANSFER and entry.to_account_id:
        for account in accounts:
            if account.id == entry.to_account_id:
                return account.is_securities or account.type == "savings"

    return False


def is_fixed_expense(entry: LedgerEntry, presets: Optional[CategoryPresets] = None) -> bool:
    """Whether an expense is a fixed (recurring) cost."""
    if entry.kind != LedgerKind.EXPENSE:
        return False
    if entry.is_fixed_expense is not None:
        return entry.is_fixed_expense
    types = presets.category_types if presets is not None else None
    if types is not None and types.fixed and entry.category in types.fixed:
        return True
    return (entry.category, entry.sub_category) in FIXED_EXPENSE_PAIRS


def generate_period_report(
    ledger: Iterable[LedgerEntry],
    granularity: Literal["month", "year"] = "month",
    start: Optional[str] = None,
    end: Optional[str] = None,
) -> list[PeriodReport]:
    """
    Sum income, expense and transfers per month or year.

    Args:
        ledger: Ledger entries
        granularity: "month" (YYYY-MM keys) or "year" (YYYY keys)
        start: First period to include, same format as the keys
        end: Last period to include

    Returns:
        List of PeriodReport sorted by period

    Raises:
        ValueError: If granularity is unknown
    """
    if granularity == "month":
        key_format = "%Y-%m"
    elif granularity == "year":
        key_format = "%Y"
    else:
        raise ValueError(f"Unknown granularity: {granularity}")

    totals: dict[str, dict[LedgerKind, Decimal]] = {}
    for entry in _valid_entries(ledger):
        period = entry.date.strftime(key_format)
        if start and period < start:
            continue
        if end and period > end:
            continue
        bucket = totals.setdefault(period, {kind: ZERO for kind in LedgerKind})
        bucket[entry.kind] += entry.amount

    return [
        PeriodReport(
            period=period,
            income=bucket[LedgerKind.INCOME],
            expense=bucket[LedgerKind.EXPENSE],
            transfer=bucket[LedgerKind.TRANSFER],
            net=bucket[LedgerKind.INCOME] - bucket[LedgerKind.EXPENSE],
        )
        for period, bucket in sorted(totals.items())
    ]


def generate_monthly_report(
    ledger: Iterable[LedgerEntry],
    start_month: Optional[str] = None,
    end_month: Optional[str] = None,
) -> list[PeriodReport]:
    return generate_period_report(ledger, "month", start_month, end_month)


def generate_yearly_report(
    ledger: Iterable[LedgerEntry],
    start_year: Optional[str] = None,
    end_year: Optional[str] = None,
) -> list[PeriodReport]:
    return generate_period_report(ledger, "year", start_year, end_year)


def generate_category_report(
    ledger: Iterable[LedgerEntry],
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
) -> list[CategoryReportRow]:
    """
    Break expenses down by category and sub-category.

    Args:
        ledger: Ledger entries
        start_date: First day to include (optional)
        end_date: Last day to include (optional)

    Returns:
        List of CategoryReportRow sorted by total, largest first
    """
    totals: dict[tuple[str, Optional[str]], tuple[Decimal, int]] = {}
    for entry in _valid_entries(ledger):
        if entry.kind != LedgerKind.EXPENSE:
            continue
        if start_date and entry.date < start_date:
            continue
        if end_date and entry.date > end_date:
            continue
        key = (entry.category, entry.sub_category or None)
        total, count = totals.get(key, (ZERO, 0))
        totals[key] = (total + entry.amount, count + 1)

    rows = [
        CategoryReportRow(
            category=category,
            sub_category=sub_category,
            total=total,
            count=count,
            average=total / count,
        )
        for (category, sub_category), (total, count) in totals.items()
    ]
    rows.sort(key=lambda row: row.total, reverse=True)
    return rows


def generate_account_report(
    accounts: Iterable[Account],
    ledger: Iterable[LedgerEntry],
    trades: Iterable[StockTrade],
) -> list[AccountReportRow]:
    """
    Compare each account's opening balance with its current balance.

    Returns:
        List of AccountReportRow sorted by current balance, largest first
    """
    rows = []
    for balance in compute_account_balances(accounts, ledger, trades):
        account = balance.account
        opening = account.opening_cash + account.effective_cash_adjustment
        change = balance.current_balance - opening
        rows.append(
            AccountReportRow(
                account_id=account.id,
                account_name=account.display_name,
                opening_balance=opening,
                current_balance=balance.current_balance,
                change=change,
                change_rate=(change / opening * 100) if opening != 0 else ZERO,
            )
        )
    rows.sort(key=lambda row: row.current_balance, reverse=True)
    return rows


def generate_stock_performance_report(
    trades: Iterable[StockTrade],
    prices: Iterable[StockPrice],
    accounts: Iterable[Account],
    fx_rate: FxRate = None,
    as_of: Optional[date] = None,
) -> list[StockPerformanceRow]:
    """
    Report every open position with its XIRR.

    Cash flows are the position's trade cash impacts (opening holdings count
    as an outflow of their total amount) plus the current market value on
    ``as_of``. The rate is computed in the ticker's currency; a single FX
    rate scales every flow equally and does not change it.

    Args:
        trades: Stock trades
        prices: Latest prices
        accounts: Accounts
        fx_rate: KRW per USD for displayed amounts
        as_of: Valuation date (default: today)

    Returns:
        List of StockPerformanceRow sorted by P&L, largest first
    """
    trades = tuple(trades)
    prices = tuple(prices)
    accounts = tuple(accounts)
    if as_of is None:
        as_of = date.today()

    groups = group_trades(trades)
    raw_values = {
        (row.account_id, row.ticker): row.market_value
        for row in compute_positions(trades, prices, accounts)
    }

    rows = []
    for position in compute_positions(trades, prices, accounts, fx_rate=fx_rate):
        key = (position.account_id, position.ticker)
        flows = []
        for trade in groups.get(key, ()):
            if trade.invalid_fields():
                continue
            amount = -trade.total_amount if trade.is_opening_holding else trade.cash_impact
            flows.append(CashFlow(trade.date, amount))
        flows.append(CashFlow(as_of, raw_values.get(key, position.market_value)))

        rows.append(
            StockPerformanceRow(
                account_id=position.account_id,
                ticker=position.ticker,
                name=position.name,
                currency=position.currency,
                quantity=position.quantity,
                cost_basis=position.cost_basis,
                market_value=position.market_value,
                pnl=position.pnl,
                pnl_rate=position.pnl_rate,
                irr=xirr(flows),
            )
        )

    rows.sort(key=lambda row: row.pnl, reverse=True)
    return rows


def generate_dividend_income_report(
    ledger: Iterable[LedgerEntry],
    accounts: Iterable[Account],
    start_month: Optional[str] = None,
    end_month: Optional[str] = None,
) -> list[DividendIncomeRow]:
    """
    List income entries for dividends and interest.

    An entry qualifies when its category (or sub-category when the category
    is empty) or description mentions one of the dividend/interest keywords.
    """
    names = {account.id: account.display_name for account in accounts}
    rows = []
    for entry in _valid_entries(ledger):
        if entry.kind != LedgerKind.INCOME:
            continue
        month = _month(entry.date)
        if start_month and month < start_month:
            continue
        if end_month and month > end_month:
            continue

        label = entry.category or entry.sub_category or ""
        if not any(keyword in label or keyword in entry.description for keyword in DIVIDEND_KEYWORDS):
            continue

        rows.append(
            DividendIncomeRow(
                month=month,
                date=entry.date,
                category=entry.category,
                sub_category=entry.sub_category,
                description=entry.description,
                account_id=entry.to_account_id,
                account_name=names.get(entry.to_account_id) if entry.to_account_id else None,
                amount=entry.amount,
            )
        )

    rows.sort(key=lambda row: row.date)
    return rows


def summarize_net_worth(
    balances: Sequence[AccountBalanceRow],
    positions: Sequence[PositionRow],
    fx_rate: FxRate = None,
) -> NetWorthSummary:
    """
    Roll balances and positions up into household net worth.

    Args:
        balances: Output of compute_account_balances
        positions: Output of compute_positions
        fx_rate: KRW per USD for USD balances, the USD float and USD positions

    Returns:
        NetWorthSummary
    """
    converter = CurrencyConverter.from_optional_rate(fx_rate)
    left_out: list[str] = []

    cash = ZERO
    savings = ZERO
    debt = ZERO
    for row in balances:
        account = row.account
        if account.is_card:
            debt += account.opening_debt
            continue

        balance = _krw_value(row.current_balance, account.currency, converter)
        if balance is None:
            left_out.append(account.id)
        elif account.type == "savings":
            savings += balance
        else:
            cash += balance

        if row.usd_cash != 0:
            usd_cash = _krw_value(row.usd_cash, "USD", converter)
            if usd_cash is None:
                left_out.append(f"{account.id} USD float")
            else:
                cash += usd_cash

    stock_value = ZERO
    for position in positions:
        value = _krw_value(position.market_value, position.currency, converter)
        if value is None:
            left_out.append(f"{position.account_id}/{position.ticker}")
        else:
            stock_value += value

    if left_out:
        logger.debug(f"Net worth without FX rate leaves out: {', '.join(left_out)}")

    total_assets = cash + savings + stock_value
    return NetWorthSummary(
        cash=cash,
        savings=savings,
        stock_value=stock_value,
        debt=debt,
        total_assets=total_assets,
        net_worth=total_assets - debt,
    )


def _group_by(records: Iterable, key) -> dict:
    grouped: dict = {}
    for record in records:
        grouped.setdefault(key(record), []).append(record)
    return grouped


def generate_daily_report(
    accounts: Iterable[Account],
    ledger: Iterable[LedgerEntry],
    trades: Iterable[StockTrade],
    prices: Iterable[StockPrice],
    start: Optional[date] = None,
    end: Optional[date] = None,
    fx_rate: FxRate = None,
) -> list[DailyReportRow]:
    """
    Day-by-day flows and end-of-day asset values.

    Each day's values are computed from the records dated on or before it;
    prices are the latest known prices throughout. Balances are carried
    forward from one day to the next, and positions are replayed again only
    on days with trades.

    Args:
        accounts: Accounts
        ledger: Ledger entries
        trades: Stock trades
        prices: Latest prices
        start: First day (default: earliest record)
        end: Last day (default: latest record)
        fx_rate: KRW per USD

    Returns:
        One DailyReportRow per calendar day in the range
    """
    accounts = tuple(accounts)
    ledger = tuple(ledger)
    trades = tuple(trades)
    prices = tuple(prices)

    dates = [record.date for record in ledger] + [trade.date for trade in trades]
    if not dates:
        return []
    start = start or min(dates)
    end = end or max(dates)

    held = [trade for trade in trades if trade.date < start]
    balances = compute_account_balances(
        accounts, [entry for entry in ledger if entry.date < start], held
    )
    positions = compute_positions(held, prices, accounts, fx_rate=fx_rate)
    ledger_by_day = _group_by(ledger, key=lambda entry: entry.date)
    trades_by_day = _group_by(trades, key=lambda trade: trade.date)

    rows = []
    day = start
    while day <= end:
        day_ledger = ledger_by_day.get(day, ())
        day_trades = trades_by_day.get(day, ())
        balances = advance_account_balances(balances, day_ledger, day_trades)
        if day_trades:
            held.extend(day_trades)
            positions = compute_positions(held, prices, accounts, fx_rate=fx_rate)

        income = expense = savings_expense = transfer = ZERO
        for entry in _valid_entries(day_ledger):
            if is_savings_expense(entry, accounts):
                savings_expense += entry.amount
            elif entry.kind == LedgerKind.INCOME:
                income += entry.amount
            elif entry.kind == LedgerKind.EXPENSE:
                expense += entry.amount
            if entry.kind == LedgerKind.TRANSFER:
                transfer += entry.amount

        summary = summarize_net_worth(balances, positions, fx_rate)
        rows.append(
            DailyReportRow(
                date=day,
                income=income,
                expense=expense,
                savings_expense=savings_expense,
                transfer=transfer,
                stock_value=summary.stock_value,
                cash_value=summary.cash,
                savings_value=summary.savings,
                total_assets=summary.total_assets,
                net_worth=summary.net_worth,
            )
        )
        day += timedelta(days=1)

    logger.debug(f"Daily report: {len(rows)} days from {start} to {end}")
    return rows


def compute_monthly_net_worth(
    accounts: Iterable[Account],
    ledger: Iterable[LedgerEntry],
    trades: Iterable[StockTrade],
) -> list[MonthlyNetWorthRow]:
    """
    Cumulative cash net worth at the end of every month with activity.

    Only account balances are summed; stock market value is not included.
    """
    ledger_by_month = _group_by(ledger, key=lambda entry: _month(entry.date))
    trades_by_month = _group_by(trades, key=lambda trade: _month(trade.date))

    balances = compute_account_balances(accounts, (), ())
    rows = []
    for month in sorted(ledger_by_month.keys() | trades_by_month.keys()):
        balances = advance_account_balances(
            balances, ledger_by_month.get(month, ()), trades_by_month.get(month, ())
        )
        rows.append(
            MonthlyNetWorthRow(
                month=month,
                net_worth=sum((row.current_balance for row in balances), ZERO),
            )
        )
    return rows


def compute_realized_gain_in_period(
    trades: Iterable[StockTrade],
    start: date,
    end: date,
    account_ids: Optional[Iterable[str]] = None,
    accounts: Iterable[Account] = (),
    fx_rate: FxRate = None,
) -> Decimal:
    """
    Total realized P&L of sells dated within [start, end].

    Lots are replayed over the full history, so sells in the period consume
    buys made before it. USD gains (USD tickers or USD accounts) are
    converted to KRW when a rate is given.

    Args:
        trades: Stock trades
        start: First day of the period
        end: Last day of the period
        account_ids: Restrict to these accounts (default: all)
        accounts: Accounts, to find USD-denominated ones
        fx_rate: KRW per USD

    Returns:
        Realized gain
    """
    trades = tuple(trades)
    if account_ids is not None:
        wanted = set(account_ids)
        trades = tuple(trade for trade in trades if trade.account_id in wanted)

    usd_accounts = {account.id for account in accounts if account.currency == "USD"}
    converter = CurrencyConverter.from_optional_rate(fx_rate)
    realized = replay_lots(trades).realized_by_trade_id

    total = ZERO
    for trade in trades:
        if not trade.is_sell or not start <= trade.date <= end:
            continue
        gain = realized.get(trade.id, ZERO)
        if trade.account_id in usd_accounts or is_usd_ticker(trade.ticker):
            gain = converter.to_krw(gain, "USD")
        total += gain
    return total


def compute_expense_sum(
    ledger: Iterable[LedgerEntry], month: str, category: Optional[str] = None
) -> Decimal:
    """Total expenses in a month ("YYYY-MM"), optionally for one category or sub-category."""
    return sum(
        (
            entry.amount
            for entry in _valid_entries(ledger)
            if entry.kind == LedgerKind.EXPENSE
            and _month(entry.date) == month
            and (category is None or category in (entry.category, entry.sub_category))
        ),
        ZERO,
    )
