"""
Whole-dataset snapshot handed to the engine.

The household ledger keeps everything in one JSON document; this model reads
the parts the engine needs and ignores the rest (workout log, budgets, UI
settings, ...).
"""

from pathlib import Path
from typing import Optional

from pydantic import ValidationError as PydanticValidationError

from src.lib.errors import SnapshotLoadError
from src.models.account import Account
from src.models.base import Money, SnapshotModel
from src.models.category_presets import CategoryPresets
from src.models.ledger_entry import LedgerEntry
from src.models.stock_price import StockPrice
from src.models.stock_trade import StockTrade


class LedgerSnapshot(SnapshotModel):
    """
    Immutable view of accounts, ledger, trades, prices and category presets.

    Attributes:
        accounts: All accounts (tagged by type)
        ledger: Cash ledger entries
        trades: Stock trades
        prices: Latest prices
        category_presets: Category vocabularies (optional)
        fx_rate: KRW per USD, when known
    """

    accounts: tuple[Account, ...] = ()
    ledger: tuple[LedgerEntry, ...] = ()
    trades: tuple[StockTrade, ...] = ()
    prices: tuple[StockPrice, ...] = ()
    category_presets: Optional[CategoryPresets] = None
    fx_rate: Optional[Money] = None

    @classmethod
    def from_json_file(cls, path: str | Path) -> "LedgerSnapshot":
        """
        Parse a snapshot document.

        Args:
            path: Path to a JSON document in the application's format

        Returns:
            Parsed snapshot

        Raises:
            SnapshotLoadError: If the file is missing or does not validate
        """
        path = Path(path)
        try:
            raw = path.read_text(encoding="utf-8")
        except OSError as e:
            raise SnapshotLoadError(str(path), e.strerror or str(e)) from e

        try:
            return cls.model_validate_json(raw)
        except PydanticValidationError as e:
            raise SnapshotLoadError(
                str(path), f"{e.error_count()} validation error(s): {e.errors()[0]['msg']}"
            ) from e

    def account_ids(self) -> set[str]:
        return {account.id for account in self.accounts}

    def rename_account(self, old_id: str, new_id: str) -> "LedgerSnapshot":
        """Return a copy with an account id renamed everywhere it is referenced."""
        accounts, ledger, trades = rename_account_id(
            old_id, new_id, self.accounts, self.ledger, self.trades
        )
        return self.model_copy(update={"accounts": accounts, "ledger": ledger, "trades": trades})


def rename_account_id(
    old_id: str,
    new_id: str,
    accounts: tuple[Account, ...] | list[Account],
    ledger: tuple[LedgerEntry, ...] | list[LedgerEntry],
    trades: tuple[StockTrade, ...] | list[StockTrade],
) -> tuple[tuple[Account, ...], tuple[LedgerEntry, ...], tuple[StockTrade, ...]]:
    """
    Rename an account id and cascade the rename to every reference.

    Inputs are not modified; untouched records are returned as-is.

    Args:
        old_id: Current account id
        new_id: Replacement id
        accounts: Accounts
        ledger: Ledger entries
        trades: Stock trades

    Returns:
        (accounts, ledger, trades) with references rewritten
    """
    new_accounts = tuple(
        account.model_copy(update={"id": new_id}) if account.id == old_id else account
        for account in accounts
    )

    new_ledger = []
    for entry in ledger:
        update = {}
        if entry.from_account_id == old_id:
            update["from_account_id"] = new_id
        if entry.to_account_id == old_id:
            update["to_account_id"] = new_id
        new_ledger.append(entry.model_copy(update=update) if update else entry)

    new_trades = tuple(
        trade.model_copy(update={"account_id": new_id}) if trade.account_id == old_id else trade
        for trade in trades
    )

    return new_accounts, tuple(new_ledger), new_trades
