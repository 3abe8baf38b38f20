"""
Account models for the household ledger.

Accounts form a tagged union on ``type``. Fields that only make sense for one
kind of account (brokerage cash, USD float, card debt) exist only on that
variant, so a checking account can never carry a securities cash adjustment.
"""

from decimal import Decimal
from typing import Annotated, Literal, Optional, Union

from pydantic import Field

from src.models.base import Currency, Money, SnapshotModel

ZERO = Decimal("0")


class AccountBase(SnapshotModel):
    """
    Fields shared by every account type.

    Attributes:
        id: Unique identifier referenced by ledger entries and trades
        name: Display name (falls back to id)
        institution: Bank or broker name
        initial_balance: Opening balance entered by the user
        currency: Reporting currency (default: KRW)
        note: Free-form note
    """

    id: str
    name: str = ""
    institution: str = ""
    initial_balance: Money = ZERO
    currency: Currency = "KRW"
    note: Optional[str] = None

    @property
    def display_name(self) -> str:
        """Name shown in reports."""
        return self.name or self.id

    @property
    def opening_cash(self) -> Decimal:
        """Cash balance the running balance starts from."""
        return self.initial_balance

    @property
    def effective_cash_adjustment(self) -> Decimal:
        """Manual cash correction (securities accounts only)."""
        return ZERO

    @property
    def tracked_usd_balance(self) -> Decimal:
        """Manually tracked USD float (securities accounts only)."""
        return ZERO

    @property
    def is_securities(self) -> bool:
        return False

    @property
    def is_card(self) -> bool:
        return False


class CashAccount(AccountBase):
    """Checking, savings, or other cash account."""

    type: Literal["checking", "savings", "other"] = "checking"
    savings: Optional[Money] = None


class CardAccount(AccountBase):
    """Credit card account.

    ``debt`` is the opening debt figure; usage and payments recorded in the
    ledger are applied on top of it separately from the cash balance.
    """

    type: Literal["card"] = "card"
    debt: Optional[Money] = None

    @property
    def opening_debt(self) -> Decimal:
        return self.debt if self.debt is not None else ZERO

    @property
    def is_card(self) -> bool:
        return True


class SecuritiesAccount(AccountBase):
    """
    Brokerage account holding cash and stock positions.

    Attributes:
        initial_cash_balance: Opening cash; overrides initial_balance when set
        cash_adjustment: Manual cash correction
        usd_balance: Manually tracked USD cash float
    """

    type: Literal["securities"] = "securities"
    initial_cash_balance: Optional[Money] = None
    cash_adjustment: Optional[Money] = None
    usd_balance: Optional[Money] = None

    @property
    def opening_cash(self) -> Decimal:
        if self.initial_cash_balance is not None:
            return self.initial_cash_balance
        return self.initial_balance

    @property
    def effective_cash_adjustment(self) -> Decimal:
        return self.cash_adjustment if self.cash_adjustment is not None else ZERO

    @property
    def tracked_usd_balance(self) -> Decimal:
        return self.usd_balance if self.usd_balance is not None else ZERO

    @property
    def is_securities(self) -> bool:
        return True


Account = Annotated[
    Union[CashAccount, CardAccount, SecuritiesAccount],
    Field(discriminator="type"),
]
