"""
Immutable input and result models for the household ledger engine.

Input records are frozen pydantic models that accept the application's
camelCase JSON keys; engine results are plain dataclasses.
"""

from src.models.account import (
    Account,
    AccountBase,
    CardAccount,
    CashAccount,
    SecuritiesAccount,
)
from src.models.category_presets import CategoryPresets, CategoryTypes, ExpenseDetailGroup
from src.models.integrity import (
    AmountMismatch,
    CategoryMismatch,
    DuplicateCluster,
    FutureDatedRecord,
    IncompleteTransfer,
    IntegrityIssue,
    InvalidLedgerValue,
    InvalidTradeValue,
    IssueType,
    LotShortfall,
    MissingReference,
    ReferenceUsage,
    Severity,
    TransferImbalance,
    UsdBalanceMismatch,
)
from src.models.ledger_entry import LedgerEntry, LedgerKind
from src.models.snapshot import LedgerSnapshot, rename_account_id
from src.models.stock_price import StockPrice
from src.models.stock_trade import StockTrade, TradeSide

__all__ = [
    # Accounts
    "Account",
    "AccountBase",
    "CashAccount",
    "CardAccount",
    "SecuritiesAccount",
    # Records
    "LedgerEntry",
    "StockTrade",
    "StockPrice",
    "CategoryPresets",
    "CategoryTypes",
    "ExpenseDetailGroup",
    "LedgerSnapshot",
    "rename_account_id",
    # Integrity
    "IntegrityIssue",
    "DuplicateCluster",
    "ReferenceUsage",
    "MissingReference",
    "FutureDatedRecord",
    "AmountMismatch",
    "TransferImbalance",
    "IncompleteTransfer",
    "UsdBalanceMismatch",
    "CategoryMismatch",
    "LotShortfall",
    "InvalidTradeValue",
    "InvalidLedgerValue",
    # Enums
    "LedgerKind",
    "TradeSide",
    "IssueType",
    "Severity",
]
