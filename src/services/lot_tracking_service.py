"""Lot tracking service for FIFO cost basis accounting.

Implements:
- Trade replay per (account, canonical ticker) in date order
- FIFO lot matching for sells with per-trade realized P&L
- Open positions with market value and unrealized P&L
"""

import logging
from collections import deque
from dataclasses import dataclass, field, replace
from datetime import date
from decimal import Decimal
from typing import Iterable, Optional, Union

from src.lib.config import LOT_DUST_THRESHOLD
from src.models.account import Account
from src.models.integrity import LotShortfall
from src.models.stock_price import StockPrice
from src.models.stock_trade import StockTrade
from src.services.currency_converter import CurrencyConverter
from src.services.ticker_normalizer import canonicalize, classify

logger = logging.getLogger(__name__)

ZERO = Decimal("0")

PositionKey = tuple[str, str]  # (account_id, canonical ticker)


@dataclass(frozen=True)
class OpenLot:
    """Open quantity bought by one trade.

    Attributes:
        trade_id: Buy trade that opened the lot
        date: Purchase date
        quantity: Remaining quantity
        unit_cost: Fee-inclusive cost per share
    """

    trade_id: str
    date: date
    quantity: Decimal
    unit_cost: Decimal

    @property
    def cost_basis(self) -> Decimal:
        return self.quantity * self.unit_cost


@dataclass(frozen=True)
class LotReplay:
    """Result of replaying trades through FIFO lots.

    Attributes:
        open_lots: Remaining lots per (account_id, canonical ticker), oldest first
        realized_by_trade_id: Realized P&L per sell trade id
        shortfalls: Sells that asked for more than was held
        skipped_trade_ids: Trades with unusable numbers or no ticker
    """

    open_lots: dict[PositionKey, tuple[OpenLot, ...]] = field(default_factory=dict)
    realized_by_trade_id: dict[str, Decimal] = field(default_factory=dict)
    shortfalls: tuple[LotShortfall, ...] = ()
    skipped_trade_ids: tuple[str, ...] = ()

    def remaining_quantity(self, key: PositionKey) -> Decimal:
        return sum((lot.quantity for lot in self.open_lots.get(key, ())), ZERO)

    def cost_basis(self, key: PositionKey) -> Decimal:
        return sum((lot.cost_basis for lot in self.open_lots.get(key, ())), ZERO)


@dataclass(frozen=True)
class PositionRow:
    """Open position in one security on one account.

    Monetary amounts are in ``currency``: the account's currency when an FX
    rate was applied, otherwise the ticker's currency. ``market_price`` is
    always the raw quote.
    """

    account_id: str
    account_name: str
    ticker: str
    name: str
    currency: str
    quantity: Decimal
    average_cost: Decimal
    cost_basis: Decimal
    market_price: Decimal
    market_value: Decimal
    pnl: Decimal
    pnl_rate: Decimal


def group_trades(trades: Iterable[StockTrade]) -> dict[PositionKey, list[StockTrade]]:
    """Group trades by (account_id, canonical ticker), each group sorted by date.

    Same-day trades keep their input order. Trades without a usable ticker
    are left out.
    """
    groups: dict[PositionKey, list[StockTrade]] = {}
    for trade in trades:
        ticker = canonicalize(trade.ticker)
        if not ticker:
            logger.debug(f"Trade {trade.id}: empty ticker, not grouped")
            continue
        groups.setdefault((trade.account_id, ticker), []).append(trade)

    for group in groups.values():
        group.sort(key=lambda t: t.date)
    return groups


def _consume_fifo(lots: deque[OpenLot], quantity: Decimal) -> tuple[Decimal, Decimal]:
    """Consume quantity from the front of the queue.

    Returns:
        (quantity consumed, cost basis consumed)
    """
    remaining = quantity
    consumed_cost = ZERO
    while remaining > 0 and lots:
        lot = lots[0]
        take = min(lot.quantity, remaining)
        consumed_cost += take * lot.unit_cost
        remaining -= take

        left = lot.quantity - take
        if left < LOT_DUST_THRESHOLD:
            lots.popleft()
        else:
            lots[0] = replace(lot, quantity=left)

    return quantity - remaining, consumed_cost


def replay_lots(trades: Iterable[StockTrade]) -> LotReplay:
    """
    Replay trades through FIFO lots.

    Buys append a lot at fee-inclusive unit cost. Sells consume lots from
    the front; realized P&L is net proceeds minus consumed cost. A sell
    larger than the held quantity consumes what is there and is reported as
    a shortfall.

    Args:
        trades: Stock trades in any order

    Returns:
        LotReplay with open lots, realized P&L per sell, shortfalls
    """
    open_lots: dict[PositionKey, tuple[OpenLot, ...]] = {}
    realized: dict[str, Decimal] = {}
    shortfalls: list[LotShortfall] = []
    skipped: list[str] = []

    for key, group in group_trades(trades).items():
        lots: deque[OpenLot] = deque()
        for trade in group:
            invalid = trade.invalid_fields()
            if invalid:
                logger.debug(f"Trade {trade.id}: invalid {', '.join(invalid)}, skipped")
                skipped.append(trade.id)
                continue

            if trade.is_buy:
                lots.append(
                    OpenLot(
                        trade_id=trade.id,
                        date=trade.date,
                        quantity=trade.quantity,
                        unit_cost=trade.total_amount / trade.quantity,
                    )
                )
                continue

            held = sum((lot.quantity for lot in lots), ZERO)
            _, consumed_cost = _consume_fifo(lots, trade.quantity)
            realized[trade.id] = trade.total_amount - consumed_cost

            if trade.quantity - held >= LOT_DUST_THRESHOLD:
                logger.warning(
                    f"Sell {trade.id} on {key[0]}/{key[1]}: "
                    f"requested {trade.quantity}, held {held}"
                )
                shortfalls.append(
                    LotShortfall(
                        trade_id=trade.id,
                        account_id=key[0],
                        ticker=key[1],
                        requested=trade.quantity,
                        available=held,
                    )
                )

        open_lots[key] = tuple(lots)

    return LotReplay(
        open_lots=open_lots,
        realized_by_trade_id=realized,
        shortfalls=tuple(shortfalls),
        skipped_trade_ids=tuple(skipped),
    )


def compute_realized_pnl_by_trade_id(trades: Iterable[StockTrade]) -> dict[str, Decimal]:
    """Realized P&L per sell trade id, in the traded currency."""
    return replay_lots(trades).realized_by_trade_id


def _price_index(prices: Iterable[StockPrice]) -> dict[str, StockPrice]:
    index: dict[str, StockPrice] = {}
    for price in prices:
        index.setdefault(canonicalize(price.ticker), price)
    return index


def compute_positions(
    trades: Iterable[StockTrade],
    prices: Iterable[StockPrice],
    accounts: Iterable[Account],
    *,
    fx_rate: Union[Decimal, float, str, None] = None,
) -> list[PositionRow]:
    """
    Compute open positions with FIFO cost basis.

    Args:
        trades: Stock trades in any order
        prices: Latest prices (matched by canonical ticker)
        accounts: Accounts (groups on unknown accounts are skipped)
        fx_rate: KRW per USD; converts value and cost to the account
            currency when the ticker trades in the other currency

    Returns:
        One PositionRow per (account, ticker) with remaining quantity,
        in order of first appearance
    """
    trades = tuple(trades)
    accounts_by_id = {account.id: account for account in accounts}
    price_index = _price_index(prices)
    converter = CurrencyConverter.from_optional_rate(fx_rate)
    replay = replay_lots(trades)
    first_trade: dict[PositionKey, StockTrade] = {}
    for trade in trades:
        first_trade.setdefault((trade.account_id, canonicalize(trade.ticker)), trade)

    rows: list[PositionRow] = []
    for key, lots in replay.open_lots.items():
        account_id, ticker = key
        account = accounts_by_id.get(account_id)
        if account is None:
            logger.debug(f"Position {ticker} on unknown account {account_id} skipped")
            continue

        quantity = sum((lot.quantity for lot in lots), ZERO)
        if quantity <= 0:
            continue
        cost_basis = sum((lot.cost_basis for lot in lots), ZERO)

        price: Optional[StockPrice] = price_index.get(ticker)
        if price is None or not price.price.is_finite():
            logger.warning(f"No usable price for {ticker}, market value set to 0")
            market_price = ZERO
        else:
            market_price = price.price

        currency = (price.currency if price else None) or classify(ticker).value
        market_value = quantity * market_price
        if currency != account.currency and converter.has_rate:
            market_value = converter.convert(market_value, currency, account.currency)
            cost_basis = converter.convert(cost_basis, currency, account.currency)
            currency = account.currency

        pnl = market_value - cost_basis
        sample = first_trade.get(key)
        name = (price.name if price else None) or (sample.name if sample else None) or ticker

        rows.append(
            PositionRow(
                account_id=account_id,
                account_name=account.display_name,
                ticker=ticker,
                name=name,
                currency=currency,
                quantity=quantity,
                average_cost=cost_basis / quantity,
                cost_basis=cost_basis,
                market_price=market_price,
                market_value=market_value,
                pnl=pnl,
                pnl_rate=pnl / cost_basis if cost_basis != 0 else ZERO,
            )
        )

    return rows
