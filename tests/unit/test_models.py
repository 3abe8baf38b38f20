"""Unit tests for snapshot models."""

import json
from datetime import date
from decimal import Decimal

import pytest
from pydantic import ValidationError as PydanticValidationError

from src.lib.errors import SnapshotLoadError
from src.models import (
    CardAccount,
    CashAccount,
    LedgerEntry,
    LedgerKind,
    LedgerSnapshot,
    SecuritiesAccount,
    StockTrade,
    TradeSide,
    rename_account_id,
)


@pytest.mark.unit
class TestLedgerEntry:
    """Test suite for LedgerEntry."""

    def test_camel_case_keys(self):
        """Entries parse from the application's JSON keys."""
        entry = LedgerEntry.model_validate(
            {
                "id": "e1",
                "date": "2024-01-05",
                "kind": "transfer",
                "fromAccountId": "chk",
                "toAccountId": "sec",
                "subCategory": "환전",
                "amount": 100,
                "currency": "usd",
            }
        )

        assert entry.kind == LedgerKind.TRANSFER
        assert entry.from_account_id == "chk"
        assert entry.sub_category == "환전"
        assert entry.currency == "USD"
        assert entry.is_usd

    def test_blank_currency_is_krw(self, make_entry):
        entry = make_entry("e1", "income", 100, currency="")

        assert entry.currency is None
        assert entry.effective_currency == "KRW"
        assert not entry.is_usd

    def test_unsupported_currency_rejected(self, make_entry):
        with pytest.raises(PydanticValidationError):
            make_entry("e1", "income", 100, currency="EUR")

    def test_frozen(self, make_entry):
        entry = make_entry("e1", "income", 100)

        with pytest.raises(PydanticValidationError):
            entry.amount = Decimal("5")

    def test_card_payment(self, make_entry):
        payment = make_entry("e1", "transfer", 100, category="신용카드", sub_category="카드대금")
        expense = make_entry("e2", "expense", 100, category="신용카드", sub_category="카드대금")

        assert payment.is_card_payment
        assert not expense.is_card_payment

    @pytest.mark.parametrize("amount", ["NaN", "Infinity", "-Infinity", "-100"])
    def test_invalid_amount(self, make_entry, amount):
        """Non-finite and negative amounts load but are marked invalid."""
        entry = make_entry("e1", "income", Decimal(amount))

        assert entry.invalid_fields() == ("amount",)

    def test_valid_amount(self, make_entry):
        assert make_entry("e1", "income", 0).invalid_fields() == ()
        assert make_entry("e2", "expense", "12.5").invalid_fields() == ()


@pytest.mark.unit
class TestStockTrade:
    """Test suite for StockTrade."""

    def test_buy_totals(self, make_trade):
        """Buys cost quantity * price plus fee."""
        trade = make_trade("t1", "buy", 10, 100, fee=5)

        assert trade.side == TradeSide.BUY
        assert trade.total_amount == Decimal("1005")
        assert trade.cash_impact == Decimal("-1005")
        assert not trade.is_opening_holding

    def test_sell_totals(self, make_trade):
        """Sells return quantity * price minus fee."""
        trade = make_trade("t1", "sell", 10, 100, fee=5)

        assert trade.total_amount == Decimal("995")
        assert trade.cash_impact == Decimal("995")

    def test_opening_holding(self, make_trade):
        """Opening holdings keep their cost but move no cash."""
        trade = make_trade("t1", "buy", 10, 100, opening_holding=True)

        assert trade.total_amount == Decimal("1000")
        assert trade.cash_impact == Decimal("0")
        assert trade.is_opening_holding

    def test_invalid_fields(self):
        trade = StockTrade.model_construct(
            id="t1",
            date=date(2024, 1, 1),
            account_id="sec",
            ticker="AAPL",
            side=TradeSide.SELL,
            quantity=Decimal("-1"),
            price=Decimal("10"),
            fee=Decimal("Infinity"),
            total_amount=Decimal("10"),
            cash_impact=Decimal("10"),
        )

        assert trade.invalid_fields() == ("quantity", "fee")

    def test_display_name(self, make_trade):
        assert make_trade("t1", "buy", 1, 1, ticker="AAPL").display_name == "AAPL"
        assert make_trade("t1", "buy", 1, 1, name="Apple").display_name == "Apple"


@pytest.mark.unit
class TestAccounts:
    """Test suite for the account union."""

    def test_discriminated_by_type(self):
        snapshot = LedgerSnapshot.model_validate(
            {
                "accounts": [
                    {"id": "a", "type": "checking"},
                    {"id": "b", "type": "card", "debt": 1000},
                    {"id": "c", "type": "securities", "usdBalance": 12.5},
                ]
            }
        )

        a, b, c = snapshot.accounts
        assert isinstance(a, CashAccount)
        assert isinstance(b, CardAccount)
        assert b.opening_debt == Decimal("1000")
        assert isinstance(c, SecuritiesAccount)
        assert c.tracked_usd_balance == Decimal("12.5")

    def test_unknown_type_rejected(self):
        with pytest.raises(PydanticValidationError):
            LedgerSnapshot.model_validate({"accounts": [{"id": "a", "type": "crypto"}]})

    def test_display_name_falls_back_to_id(self):
        assert CashAccount(id="chk").display_name == "chk"
        assert CashAccount(id="chk", name="Main").display_name == "Main"


@pytest.mark.unit
class TestLedgerSnapshot:
    """Test suite for LedgerSnapshot loading and renaming."""

    def test_from_json_file(self, snapshot_file):
        """The document loads with unrelated sections ignored."""
        snapshot = LedgerSnapshot.from_json_file(snapshot_file)

        assert snapshot.account_ids() == {"chk", "card", "sec"}
        assert len(snapshot.ledger) == 3
        assert len(snapshot.trades) == 3
        assert snapshot.prices[0].ticker == "005930.KS"
        assert snapshot.category_presets.income == ("급여",)
        assert snapshot.fx_rate == Decimal("1350")

    def test_missing_file(self, tmp_path):
        with pytest.raises(SnapshotLoadError, match="Failed to load snapshot"):
            LedgerSnapshot.from_json_file(tmp_path / "missing.json")

    def test_invalid_document(self, tmp_path):
        path = tmp_path / "broken.json"
        path.write_text(json.dumps({"ledger": [{"id": "e1"}]}), encoding="utf-8")

        with pytest.raises(SnapshotLoadError, match="validation error"):
            LedgerSnapshot.from_json_file(path)

    def test_not_json(self, tmp_path):
        path = tmp_path / "broken.json"
        path.write_text("{not json", encoding="utf-8")

        with pytest.raises(SnapshotLoadError):
            LedgerSnapshot.from_json_file(path)

    def test_rename_account(self, snapshot_file):
        """Renaming cascades to ledger entries and trades."""
        snapshot = LedgerSnapshot.from_json_file(snapshot_file)

        renamed = snapshot.rename_account("sec", "broker")

        assert renamed.account_ids() == {"chk", "card", "broker"}
        assert renamed.ledger[2].to_account_id == "broker"
        assert {trade.account_id for trade in renamed.trades} == {"broker"}
        # Original untouched
        assert snapshot.ledger[2].to_account_id == "sec"


@pytest.mark.unit
class TestRenameAccountId:
    """Test suite for rename_account_id."""

    def test_cascades_both_transfer_sides(
        self, checking_account, savings_account, make_entry, make_trade
    ):
        ledger = [
            make_entry("e1", "transfer", 100, from_account_id="chk", to_account_id="sav"),
            make_entry("e2", "transfer", 100, from_account_id="sav", to_account_id="chk"),
            make_entry("e3", "income", 100, to_account_id="sav"),
        ]
        trades = [make_trade("t1", "buy", 1, 100, account_id="chk")]

        accounts, new_ledger, new_trades = rename_account_id(
            "chk", "main", [checking_account, savings_account], ledger, trades
        )

        assert [account.id for account in accounts] == ["main", "sav"]
        assert new_ledger[0].from_account_id == "main"
        assert new_ledger[1].to_account_id == "main"
        assert new_ledger[2] is ledger[2]
        assert new_trades[0].account_id == "main"
        assert ledger[0].from_account_id == "chk"
