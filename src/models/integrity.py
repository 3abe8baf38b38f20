"""
Integrity issue models.

Each issue carries a typed payload describing the offending records so a
caller can build repair actions without re-deriving them.
"""

import datetime
import enum
from dataclasses import dataclass
from decimal import Decimal
from typing import Optional, Union


class IssueType(str, enum.Enum):
    """Enumeration of integrity rule identifiers."""

    DUPLICATE = "duplicate"
    MISSING_REFERENCE = "missing_reference"
    DATE_ORDER = "date_order"
    AMOUNT_CONSISTENCY = "amount_consistency"
    TRANSFER_PAIR_MISMATCH = "transfer_pair_mismatch"
    TRANSFER_MISSING_ACCOUNT = "transfer_missing_account"
    USD_BALANCE_MISMATCH = "usd_balance_mismatch"
    CATEGORY_MISMATCH = "category_mismatch"
    LOT_SHORTFALL = "lot_shortfall"
    INVALID_TRADE_VALUE = "invalid_trade_value"
    INVALID_LEDGER_VALUE = "invalid_ledger_value"


class Severity(str, enum.Enum):
    """Enumeration of issue severities."""

    ERROR = "error"
    WARNING = "warning"
    INFO = "info"


@dataclass(frozen=True)
class DuplicateCluster:
    """Records sharing the same duplicate-detection key.

    Attributes:
        record_type: "ledger" or "trade"
        record_ids: Ids in input order
        key: The shared key
    """

    record_type: str
    record_ids: tuple[str, ...]
    key: tuple


@dataclass(frozen=True)
class ReferenceUsage:
    """One field of one record pointing at an account."""

    record_type: str
    record_id: str
    field: str


@dataclass(frozen=True)
class MissingReference:
    """An account id that is referenced but not defined."""

    account_id: str
    used_in: tuple[ReferenceUsage, ...]


@dataclass(frozen=True)
class FutureDatedRecord:
    record_type: str
    record_id: str
    date: datetime.date


@dataclass(frozen=True)
class AmountMismatch:
    """Stored trade total that disagrees with quantity * price +/- fee."""

    trade_id: str
    expected: Decimal
    actual: Decimal
    difference: Decimal
    currency: str


@dataclass(frozen=True)
class TransferImbalance:
    """Net of transfer legs landing on known accounts for one currency.

    Attributes:
        currency: Currency of the offending transfers
        net: Sum of inflows minus outflows over known accounts
        entry_ids: Transfers with only one side on a known account
    """

    currency: str
    net: Decimal
    entry_ids: tuple[str, ...]


@dataclass(frozen=True)
class IncompleteTransfer:
    entry_id: str
    missing_fields: tuple[str, ...]


@dataclass(frozen=True)
class UsdBalanceMismatch:
    """Tracked USD float that disagrees with USD trade and transfer flows.

    Attributes:
        account_id: Securities account
        implied_usd: usd_transfer_net + net cash impact of USD-ticker trades
        tracked_usd: usd_balance + usd_transfer_net
        difference: tracked_usd - implied_usd
    """

    account_id: str
    implied_usd: Decimal
    tracked_usd: Decimal
    difference: Decimal


@dataclass(frozen=True)
class CategoryMismatch:
    entry_id: str
    kind: str
    category: str
    sub_category: Optional[str]
    expected_main: tuple[str, ...]
    expected_subs: Optional[tuple[str, ...]] = None


@dataclass(frozen=True)
class LotShortfall:
    """A sell that asked for more shares than the open lots held.

    Attributes:
        trade_id: Sell trade id
        account_id: Account of the trade
        ticker: Canonical ticker
        requested: Sell quantity
        available: Quantity held when the sell was replayed
    """

    trade_id: str
    account_id: str
    ticker: str
    requested: Decimal
    available: Decimal

    @property
    def missing(self) -> Decimal:
        return self.requested - self.available


@dataclass(frozen=True)
class InvalidTradeValue:
    trade_id: str
    fields: tuple[str, ...]


@dataclass(frozen=True)
class InvalidLedgerValue:
    entry_id: str
    fields: tuple[str, ...]


IssuePayload = Union[
    DuplicateCluster,
    MissingReference,
    FutureDatedRecord,
    AmountMismatch,
    TransferImbalance,
    IncompleteTransfer,
    UsdBalanceMismatch,
    CategoryMismatch,
    LotShortfall,
    InvalidTradeValue,
    InvalidLedgerValue,
]


@dataclass(frozen=True)
class IntegrityIssue:
    """
    One finding of the integrity checker.

    Attributes:
        type: Rule that produced the issue
        severity: error, warning, or info
        message: Human-readable description
        data: Structured payload for repair actions
    """

    type: IssueType
    severity: Severity
    message: str
    data: IssuePayload
