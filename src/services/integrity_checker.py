"""Data integrity checks over the whole household dataset.

Every rule is an independent function returning a list of issues;
:func:`run_integrity_check` runs all of them and concatenates the results in a
fixed order. Nothing here mutates its input, and the same dataset always
produces the same list.

Fixes are planned separately (see :func:`plan_duplicate_removal`).
"""

import datetime
import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Iterable, Literal, Optional, Sequence

from src.lib.config import SUPPORTED_CURRENCIES, USD_BALANCE_TOLERANCE
from src.models.account import Account
from src.models.category_presets import CategoryPresets
from src.models.integrity import (
    AmountMismatch,
    DuplicateCluster,
    FutureDatedRecord,
    IncompleteTransfer,
    IntegrityIssue,
    InvalidLedgerValue,
    InvalidTradeValue,
    IssueType,
    MissingReference,
    ReferenceUsage,
    Severity,
    TransferImbalance,
    UsdBalanceMismatch,
)
from src.models.ledger_entry import LedgerEntry
from src.models.stock_trade import StockTrade
from src.services.balance_aggregator import compute_account_balances
from src.services.category_normalizer import find_category_mismatch
from src.services.currency_converter import tolerance_for
from src.services.lot_tracking_service import replay_lots
from src.services.ticker_normalizer import canonicalize, classify

logger = logging.getLogger(__name__)

ZERO = Decimal("0")


def _ledger_key(entry: LedgerEntry) -> tuple:
    return (
        entry.date,
        entry.kind.value,
        entry.amount,
        entry.from_account_id or "",
        entry.to_account_id or "",
        entry.category,
        entry.sub_category or "",
        entry.description,
        entry.effective_currency,
    )


def _trade_key(trade: StockTrade) -> tuple:
    return (
        trade.date,
        trade.account_id,
        canonicalize(trade.ticker),
        trade.side.value,
        trade.quantity,
        trade.price,
    )


def _clusters(records: Iterable, key_func) -> list[tuple[tuple, list]]:
    groups: dict[tuple, list] = {}
    for record in records:
        groups.setdefault(key_func(record), []).append(record)
    return [(key, members) for key, members in groups.items() if len(members) > 1]


def check_duplicates(
    ledger: Sequence[LedgerEntry], trades: Sequence[StockTrade]
) -> list[IntegrityIssue]:
    """
    Find records that are identical in every identifying field.

    The ledger ``note`` and ``tags`` are not part of the key. Clusters of
    three or more are errors, pairs are warnings.

    Args:
        ledger: Ledger entries
        trades: Stock trades

    Returns:
        One issue per duplicate cluster, ledger clusters first
    """
    issues = []
    for record_type, records, key_func in (
        ("ledger", ledger, _ledger_key),
        ("trade", trades, _trade_key),
    ):
        for key, members in _clusters(records, key_func):
            record_ids = tuple(member.id for member in members)
            issues.append(
                IntegrityIssue(
                    type=IssueType.DUPLICATE,
                    severity=Severity.ERROR if len(members) > 2 else Severity.WARNING,
                    message=(
                        f"{len(members)} duplicate {record_type} records: {', '.join(record_ids)}"
                    ),
                    data=DuplicateCluster(record_type=record_type, record_ids=record_ids, key=key),
                )
            )
    return issues


def check_missing_references(
    accounts: Sequence[Account],
    ledger: Sequence[LedgerEntry],
    trades: Sequence[StockTrade],
) -> list[IntegrityIssue]:
    """Report each account id that is referenced but not defined."""
    known = {account.id for account in accounts}
    usages: dict[str, list[ReferenceUsage]] = {}

    for entry in ledger:
        for field_name, account_id in (
            ("from_account_id", entry.from_account_id),
            ("to_account_id", entry.to_account_id),
        ):
            if account_id and account_id not in known:
                usages.setdefault(account_id, []).append(
                    ReferenceUsage(record_type="ledger", record_id=entry.id, field=field_name)
                )

    for trade in trades:
        if trade.account_id and trade.account_id not in known:
            usages.setdefault(trade.account_id, []).append(
                ReferenceUsage(record_type="trade", record_id=trade.id, field="account_id")
            )

    return [
        IntegrityIssue(
            type=IssueType.MISSING_REFERENCE,
            severity=Severity.ERROR,
            message=f"Unknown account '{account_id}' referenced by {len(used_in)} record(s)",
            data=MissingReference(account_id=account_id, used_in=tuple(used_in)),
        )
        for account_id, used_in in usages.items()
    ]


def check_date_order(
    ledger: Sequence[LedgerEntry],
    trades: Sequence[StockTrade],
    today: Optional[datetime.date] = None,
) -> list[IntegrityIssue]:
    """Flag records dated after today."""
    if today is None:
        today = datetime.date.today()

    issues = []
    for record_type, records in (("ledger", ledger), ("trade", trades)):
        for record in records:
            if record.date > today:
                issues.append(
                    IntegrityIssue(
                        type=IssueType.DATE_ORDER,
                        severity=Severity.WARNING,
                        message=f"{record_type.capitalize()} {record.id} is dated in the future: {record.date.isoformat()}",
                        data=FutureDatedRecord(
                            record_type=record_type, record_id=record.id, date=record.date
                        ),
                    )
                )
    return issues


def check_amount_consistency(trades: Sequence[StockTrade]) -> list[IntegrityIssue]:
    """
    Compare each trade's stored total with quantity * price +/- fee.

    Trades with unusable numbers are left to :func:`check_invalid_trade_values`.
    """
    issues = []
    for trade in trades:
        if trade.invalid_fields():
            continue

        expected = trade.expected_total_amount()
        difference = trade.total_amount - expected
        currency = classify(trade.ticker).value
        if abs(difference) >= tolerance_for(currency):
            issues.append(
                IntegrityIssue(
                    type=IssueType.AMOUNT_CONSISTENCY,
                    severity=Severity.WARNING,
                    message=(
                        f"Trade {trade.id}: stored total {trade.total_amount} "
                        f"differs from computed {expected}"
                    ),
                    data=AmountMismatch(
                        trade_id=trade.id,
                        expected=expected,
                        actual=trade.total_amount,
                        difference=difference,
                        currency=currency,
                    ),
                )
            )
    return issues


def check_transfer_balance(
    accounts: Sequence[Account], ledger: Sequence[LedgerEntry]
) -> list[IntegrityIssue]:
    """
    Verify that transfers neither create nor destroy money.

    Per currency, every transfer leg landing on a known account is summed
    (inflow positive, outflow negative). A transfer whose counterpart is
    missing or unknown leaves a non-zero net. Card payments and entries with
    an invalid amount are excluded.
    """
    known = {account.id for account in accounts}
    nets: dict[str, Decimal] = {}
    leaking: dict[str, list[str]] = {}

    for entry in ledger:
        if not entry.is_transfer or entry.is_card_payment or entry.invalid_fields():
            continue

        currency = entry.effective_currency
        delta = ZERO
        if entry.to_account_id in known:
            delta += entry.amount
        if entry.from_account_id in known:
            delta -= entry.amount

        nets[currency] = nets.get(currency, ZERO) + delta
        if delta != 0:
            leaking.setdefault(currency, []).append(entry.id)

    issues = []
    for currency in SUPPORTED_CURRENCIES:
        net = nets.get(currency, ZERO)
        if abs(net) >= tolerance_for(currency):
            issues.append(
                IntegrityIssue(
                    type=IssueType.TRANSFER_PAIR_MISMATCH,
                    severity=Severity.ERROR,
                    message=f"{currency} transfers do not net to zero (net {net})",
                    data=TransferImbalance(
                        currency=currency,
                        net=net,
                        entry_ids=tuple(leaking.get(currency, ())),
                    ),
                )
            )
    return issues


def check_transfer_accounts(ledger: Sequence[LedgerEntry]) -> list[IntegrityIssue]:
    """Flag transfers missing a source or destination account."""
    issues = []
    for entry in ledger:
        if not entry.is_transfer:
            continue
        missing = tuple(
            field_name
            for field_name, value in (
                ("from_account_id", entry.from_account_id),
                ("to_account_id", entry.to_account_id),
            )
            if not value
        )
        if missing:
            issues.append(
                IntegrityIssue(
                    type=IssueType.TRANSFER_MISSING_ACCOUNT,
                    severity=Severity.WARNING,
                    message=f"Transfer {entry.id} is missing {' and '.join(missing)}",
                    data=IncompleteTransfer(entry_id=entry.id, missing_fields=missing),
                )
            )
    return issues


def check_usd_balances(
    accounts: Sequence[Account],
    ledger: Sequence[LedgerEntry],
    trades: Sequence[StockTrade],
) -> list[IntegrityIssue]:
    """
    Compare each securities account's tracked USD float with its USD flows.

    Implied USD cash is USD transfers plus the cash impact of USD-ticker
    trades; tracked USD cash is the manual usd_balance plus USD transfers.
    """
    issues = []
    for row in compute_account_balances(accounts, ledger, trades):
        account = row.account
        if not account.is_securities:
            continue

        implied = row.usd_transfer_net + row.usd_trade_cash_impact
        tracked = account.tracked_usd_balance + row.usd_transfer_net
        if not (implied.is_finite() and tracked.is_finite()):
            continue

        difference = tracked - implied
        if abs(difference) >= USD_BALANCE_TOLERANCE:
            issues.append(
                IntegrityIssue(
                    type=IssueType.USD_BALANCE_MISMATCH,
                    severity=Severity.WARNING,
                    message=(
                        f"Account {account.display_name}: tracked USD {tracked} "
                        f"vs {implied} implied by trades and transfers"
                    ),
                    data=UsdBalanceMismatch(
                        account_id=account.id,
                        implied_usd=implied,
                        tracked_usd=tracked,
                        difference=difference,
                    ),
                )
            )
    return issues


def check_categories(
    ledger: Sequence[LedgerEntry], presets: CategoryPresets
) -> list[IntegrityIssue]:
    """Flag entries whose category does not resolve against the presets."""
    issues = []
    for entry in ledger:
        mismatch = find_category_mismatch(entry, presets)
        if mismatch is None:
            continue
        label = mismatch.category
        if mismatch.expected_subs is not None:
            label = f"{mismatch.category} > {mismatch.sub_category}"
        issues.append(
            IntegrityIssue(
                type=IssueType.CATEGORY_MISMATCH,
                severity=Severity.WARNING,
                message=f"Entry {entry.id}: {entry.kind.value} category '{label}' is not in presets",
                data=mismatch,
            )
        )
    return issues


def check_lot_shortfalls(trades: Sequence[StockTrade]) -> list[IntegrityIssue]:
    """Flag sells that exceed the quantity held at the time."""
    return [
        IntegrityIssue(
            type=IssueType.LOT_SHORTFALL,
            severity=Severity.WARNING,
            message=(
                f"Sell {shortfall.trade_id} of {shortfall.ticker}: requested "
                f"{shortfall.requested}, only {shortfall.available} held"
            ),
            data=shortfall,
        )
        for shortfall in replay_lots(trades).shortfalls
    ]


def check_invalid_trade_values(trades: Sequence[StockTrade]) -> list[IntegrityIssue]:
    """Flag trades with non-finite or non-positive numbers."""
    issues = []
    for trade in trades:
        fields = trade.invalid_fields()
        if fields:
            issues.append(
                IntegrityIssue(
                    type=IssueType.INVALID_TRADE_VALUE,
                    severity=Severity.ERROR,
                    message=f"Trade {trade.id} has invalid {', '.join(fields)}",
                    data=InvalidTradeValue(trade_id=trade.id, fields=fields),
                )
            )
    return issues


def check_invalid_ledger_values(ledger: Sequence[LedgerEntry]) -> list[IntegrityIssue]:
    """Flag ledger entries whose amount is non-finite or negative."""
    issues = []
    for entry in ledger:
        fields = entry.invalid_fields()
        if fields:
            issues.append(
                IntegrityIssue(
                    type=IssueType.INVALID_LEDGER_VALUE,
                    severity=Severity.ERROR,
                    message=f"Ledger entry {entry.id} has invalid amount {entry.amount}",
                    data=InvalidLedgerValue(entry_id=entry.id, fields=fields),
                )
            )
    return issues


def run_integrity_check(
    accounts: Iterable[Account],
    ledger: Iterable[LedgerEntry],
    trades: Iterable[StockTrade],
    category_presets: Optional[CategoryPresets] = None,
    *,
    today: Optional[datetime.date] = None,
) -> list[IntegrityIssue]:
    """
    Run every integrity rule over the dataset.

    Args:
        accounts: Accounts
        ledger: Ledger entries
        trades: Stock trades
        category_presets: Enables the category rule when given
        today: Reference date for the future-date rule (default: today)

    Returns:
        Flat list of issues in rule order
    """
    accounts = tuple(accounts)
    ledger = tuple(ledger)
    trades = tuple(trades)

    issues: list[IntegrityIssue] = []
    issues.extend(check_duplicates(ledger, trades))
    issues.extend(check_missing_references(accounts, ledger, trades))
    issues.extend(check_date_order(ledger, trades, today))
    issues.extend(check_amount_consistency(trades))
    issues.extend(check_transfer_balance(accounts, ledger))
    issues.extend(check_transfer_accounts(ledger))
    issues.extend(check_usd_balances(accounts, ledger, trades))
    if category_presets is not None:
        issues.extend(check_categories(ledger, category_presets))
    issues.extend(check_lot_shortfalls(trades))
    issues.extend(check_invalid_trade_values(trades))
    issues.extend(check_invalid_ledger_values(ledger))

    logger.info(
        f"Integrity check: {len(issues)} issue(s) over {len(accounts)} accounts, "
        f"{len(ledger)} entries, {len(trades)} trades"
    )
    return issues


@dataclass(frozen=True)
class DuplicateRemovalPlan:
    """Record ids to delete so each duplicate cluster keeps one member."""

    ledger_ids: tuple[str, ...] = ()
    trade_ids: tuple[str, ...] = ()

    @property
    def is_empty(self) -> bool:
        return not self.ledger_ids and not self.trade_ids


def plan_duplicate_removal(
    issues: Iterable[IntegrityIssue], keep: Literal["first", "last"] = "first"
) -> DuplicateRemovalPlan:
    """
    Plan the removal of duplicate records.

    Args:
        issues: Issues from run_integrity_check (non-duplicate issues ignored)
        keep: Keep the first or the last record of each cluster

    Returns:
        DuplicateRemovalPlan listing ids to remove

    Raises:
        ValueError: If keep is not "first" or "last"
    """
    if keep not in ("first", "last"):
        raise ValueError(f"keep must be 'first' or 'last', got {keep!r}")

    ledger_ids: list[str] = []
    trade_ids: list[str] = []
    for issue in issues:
        if issue.type != IssueType.DUPLICATE or not isinstance(issue.data, DuplicateCluster):
            continue
        ids = issue.data.record_ids
        to_remove = ids[1:] if keep == "first" else ids[:-1]
        target = ledger_ids if issue.data.record_type == "ledger" else trade_ids
        target.extend(record_id for record_id in to_remove if record_id not in target)

    return DuplicateRemovalPlan(ledger_ids=tuple(ledger_ids), trade_ids=tuple(trade_ids))
