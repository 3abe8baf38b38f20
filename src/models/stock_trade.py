"""
Stock trade model.

``total_amount`` and ``cash_impact`` are stored on every trade but derived from
quantity, price and fee; the integrity checker recomputes them rather than
trusting the stored values.
"""

import datetime
import enum
from decimal import Decimal
from typing import Optional

from src.models.base import Money, SnapshotModel

ZERO = Decimal("0")


class TradeSide(str, enum.Enum):
    """Enumeration of trade sides."""

    BUY = "buy"
    SELL = "sell"


def derive_total_amount(
    side: TradeSide, quantity: Decimal, price: Decimal, fee: Decimal
) -> Decimal:
    """Fee-inclusive cost for a buy, fee-net proceeds for a sell."""
    gross = quantity * price
    if side == TradeSide.BUY:
        return gross + fee
    return gross - fee


class StockTrade(SnapshotModel):
    """
    A buy or sell of a listed security.

    Attributes:
        id: Unique identifier
        date: Trade date
        account_id: Securities account the trade belongs to
        ticker: Ticker as entered (see ticker_normalizer for matching)
        name: Security name
        side: buy or sell
        quantity: Number of shares (> 0)
        price: Price per share in the ticker's currency
        fee: Commission and taxes
        total_amount: buy: quantity*price + fee; sell: quantity*price - fee
        cash_impact: buy: -total_amount (0 for opening holdings); sell: +total_amount
    """

    id: str
    date: datetime.date
    account_id: str
    ticker: str
    name: Optional[str] = None
    side: TradeSide
    quantity: Money
    price: Money
    fee: Money = ZERO
    total_amount: Money
    cash_impact: Money

    @classmethod
    def create(
        cls,
        *,
        id: str,
        date: datetime.date,
        account_id: str,
        ticker: str,
        side: TradeSide | str,
        quantity: Decimal,
        price: Decimal,
        fee: Decimal = ZERO,
        name: Optional[str] = None,
        opening_holding: bool = False,
    ) -> "StockTrade":
        """Build a trade with derived total_amount and cash_impact.

        Args:
            opening_holding: Record a buy that consumed no tracked cash
                (shares already held when tracking started)
        """
        side = TradeSide(side)
        total = derive_total_amount(side, quantity, price, fee)
        if side == TradeSide.SELL:
            cash_impact = total
        elif opening_holding:
            cash_impact = ZERO
        else:
            cash_impact = -total
        return cls(
            id=id,
            date=date,
            account_id=account_id,
            ticker=ticker,
            name=name,
            side=side,
            quantity=quantity,
            price=price,
            fee=fee,
            total_amount=total,
            cash_impact=cash_impact,
        )

    @property
    def is_buy(self) -> bool:
        return self.side == TradeSide.BUY

    @property
    def is_sell(self) -> bool:
        return self.side == TradeSide.SELL

    @property
    def is_opening_holding(self) -> bool:
        """Buy pinned to zero cash impact."""
        return self.is_buy and self.cash_impact.is_finite() and self.cash_impact == 0

    @property
    def display_name(self) -> str:
        return self.name or self.ticker

    def invalid_fields(self) -> tuple[str, ...]:
        """Names of numeric fields that cannot be used for lot accounting.

        Quantity and price must be finite and positive; fee, total_amount and
        cash_impact must be finite.
        """
        invalid = []
        for field_name in ("quantity", "price"):
            value: Decimal = getattr(self, field_name)
            if not value.is_finite() or value <= 0:
                invalid.append(field_name)
        for field_name in ("fee", "total_amount", "cash_impact"):
            value = getattr(self, field_name)
            if not value.is_finite():
                invalid.append(field_name)
        return tuple(invalid)

    def expected_total_amount(self) -> Decimal:
        """Recompute total_amount from quantity, price, fee and side."""
        return derive_total_amount(self.side, self.quantity, self.price, self.fee)
