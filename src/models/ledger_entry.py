"""
Ledger entry model for the household cash ledger.

Amounts are always non-negative magnitudes; the direction of money is implied
by ``kind`` and the from/to account fields.
"""

import datetime
import enum
from typing import Optional

from src.lib.config import CARD_PAYMENT_CATEGORY, CARD_PAYMENT_SUB_CATEGORY, DEFAULT_CURRENCY
from src.models.base import Money, OptionalCurrency, SnapshotModel


class LedgerKind(str, enum.Enum):
    """Enumeration of ledger entry kinds."""

    INCOME = "income"  # Money into to_account_id
    EXPENSE = "expense"  # Money out of from_account_id
    TRANSFER = "transfer"  # Money between two accounts


class LedgerEntry(SnapshotModel):
    """
    A single cash-ledger record.

    Attributes:
        id: Unique identifier
        date: Day the entry applies to
        kind: income, expense, or transfer
        category: Main category label
        sub_category: Optional detail label
        description: Free-form description (part of duplicate detection)
        from_account_id: Source account (expense, transfer)
        to_account_id: Destination account (income, transfer)
        amount: Non-negative amount
        currency: KRW when absent; USD for dollar-denominated transfers
        note: Free-form note (ignored by duplicate detection)
        tags: User tags
    """

    id: str
    date: datetime.date
    kind: LedgerKind
    category: str = ""
    sub_category: Optional[str] = None
    description: str = ""
    from_account_id: Optional[str] = None
    to_account_id: Optional[str] = None
    amount: Money
    currency: OptionalCurrency = None
    note: Optional[str] = None
    tags: tuple[str, ...] = ()
    is_fixed_expense: Optional[bool] = None

    @property
    def effective_currency(self) -> str:
        """Currency the amount is denominated in."""
        return self.currency or DEFAULT_CURRENCY

    @property
    def is_usd(self) -> bool:
        return self.currency == "USD"

    @property
    def is_transfer(self) -> bool:
        return self.kind == LedgerKind.TRANSFER

    @property
    def is_card_payment(self) -> bool:
        """True for a transfer that pays off a credit card."""
        return (
            self.kind == LedgerKind.TRANSFER
            and self.category == CARD_PAYMENT_CATEGORY
            and self.sub_category == CARD_PAYMENT_SUB_CATEGORY
        )

    def invalid_fields(self) -> tuple[str, ...]:
        """Names of numeric fields that cannot be folded into balances.

        The amount must be a finite, non-negative magnitude.
        """
        if not self.amount.is_finite() or self.amount < 0:
            return ("amount",)
        return ()
