"""Current market price for a ticker."""

from typing import Optional

from src.models.base import Money, OptionalCurrency, SnapshotModel


class StockPrice(SnapshotModel):
    """
    Latest known price for a ticker.

    Attributes:
        ticker: Ticker as stored by the price feed
        name: Security name
        price: Last price
        currency: Price currency; inferred from the ticker when absent
    """

    ticker: str
    name: Optional[str] = None
    price: Money
    currency: OptionalCurrency = None
