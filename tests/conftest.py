"""Pytest configuration and fixtures for all tests."""

import json
from datetime import date
from decimal import Decimal

import pytest

from src.models import (
    CardAccount,
    CashAccount,
    CategoryPresets,
    LedgerEntry,
    SecuritiesAccount,
    StockPrice,
    StockTrade,
)


def _decimal(value):
    return value if isinstance(value, Decimal) else Decimal(str(value))


@pytest.fixture
def make_entry():
    """Factory for ledger entries with sensible defaults."""

    def _make(entry_id, kind, amount, entry_date=date(2024, 1, 15), **kwargs):
        return LedgerEntry(
            id=entry_id,
            date=entry_date,
            kind=kind,
            amount=_decimal(amount),
            **kwargs,
        )

    return _make


@pytest.fixture
def make_trade():
    """Factory for trades with derived total_amount and cash_impact."""

    def _make(
        trade_id,
        side,
        quantity,
        price,
        trade_date=date(2024, 1, 10),
        ticker="005930",
        account_id="sec",
        fee=0,
        **kwargs,
    ):
        return StockTrade.create(
            id=trade_id,
            date=trade_date,
            account_id=account_id,
            ticker=ticker,
            side=side,
            quantity=_decimal(quantity),
            price=_decimal(price),
            fee=_decimal(fee),
            **kwargs,
        )

    return _make


@pytest.fixture
def checking_account():
    return CashAccount(
        id="chk", name="Main Checking", type="checking", initial_balance=Decimal("1000000")
    )


@pytest.fixture
def savings_account():
    return CashAccount(id="sav", name="Savings", type="savings", initial_balance=Decimal("0"))


@pytest.fixture
def card_account():
    return CardAccount(id="card", name="Credit Card", initial_balance=Decimal("0"), debt=Decimal("0"))


@pytest.fixture
def securities_account():
    """KRW brokerage account with opening cash and a manual correction."""
    return SecuritiesAccount(
        id="sec",
        name="Brokerage",
        initial_balance=Decimal("999"),
        initial_cash_balance=Decimal("500000"),
        cash_adjustment=Decimal("10000"),
    )


@pytest.fixture
def sample_accounts(checking_account, savings_account, card_account, securities_account):
    return [checking_account, savings_account, card_account, securities_account]


@pytest.fixture
def sample_ledger(make_entry):
    """Salary, spending, a brokerage transfer, card usage and payment, a USD transfer."""
    return [
        make_entry("e1", "income", 3000000, category="급여", to_account_id="chk"),
        make_entry("e2", "expense", 200000, category="식비", from_account_id="chk"),
        make_entry(
            "e3", "transfer", 1000000, category="이체", from_account_id="chk", to_account_id="sec"
        ),
        make_entry("e4", "expense", 50000, category="식비", from_account_id="card"),
        make_entry(
            "e5",
            "transfer",
            50000,
            category="신용카드",
            sub_category="카드대금",
            from_account_id="chk",
            to_account_id="card",
        ),
        make_entry(
            "e6",
            "transfer",
            500,
            category="이체",
            from_account_id="chk",
            to_account_id="sec",
            currency="USD",
        ),
    ]


@pytest.fixture
def sample_trades(make_trade):
    """KRW buy and partial sell of 005930 plus a USD buy of AAPL on the KRW account."""
    return [
        make_trade("t1", "buy", 10, 70000, trade_date=date(2024, 1, 10)),
        make_trade("t2", "buy", 2, 150, trade_date=date(2024, 1, 11), ticker="AAPL", fee=1),
        make_trade("t3", "sell", 5, 80000, trade_date=date(2024, 2, 1), fee=500),
    ]


@pytest.fixture
def sample_prices():
    return [
        StockPrice(ticker="005930.KS", name="Samsung Electronics", price=Decimal("75000")),
        StockPrice(ticker="AAPL", name="Apple", price=Decimal("200"), currency="USD"),
    ]


@pytest.fixture
def category_presets():
    return CategoryPresets(
        income=("급여", "배당"),
        expense=("식비", "주거비"),
        expense_details=({"main": "식비", "subs": ("외식", "장보기")},),
        transfer=("이체",),
    )


@pytest.fixture
def snapshot_document():
    """Snapshot in the application's camelCase JSON format."""
    return {
        "accounts": [
            {"id": "chk", "name": "Main Checking", "type": "checking", "initialBalance": 1000000},
            {"id": "card", "name": "Credit Card", "type": "card", "initialBalance": 0, "debt": 0},
            {
                "id": "sec",
                "name": "Brokerage",
                "type": "securities",
                "initialBalance": 0,
                "initialCashBalance": 500000,
            },
        ],
        "ledger": [
            {
                "id": "e1",
                "date": "2024-01-05",
                "kind": "income",
                "category": "급여",
                "toAccountId": "chk",
                "amount": 3000000,
            },
            {
                "id": "e2",
                "date": "2024-01-20",
                "kind": "expense",
                "category": "식비",
                "fromAccountId": "chk",
                "amount": 200000,
            },
            {
                "id": "e3",
                "date": "2024-02-01",
                "kind": "transfer",
                "category": "이체",
                "fromAccountId": "chk",
                "toAccountId": "sec",
                "amount": 1000000,
            },
        ],
        "trades": [
            {
                "id": "t1",
                "date": "2024-02-02",
                "accountId": "sec",
                "ticker": "005930",
                "side": "buy",
                "quantity": 10,
                "price": 100,
                "fee": 0,
                "totalAmount": 1000,
                "cashImpact": -1000,
            },
            {
                "id": "t2",
                "date": "2024-02-03",
                "accountId": "sec",
                "ticker": "005930",
                "side": "buy",
                "quantity": 10,
                "price": 200,
                "fee": 0,
                "totalAmount": 2000,
                "cashImpact": -2000,
            },
            {
                "id": "t3",
                "date": "2024-02-04",
                "accountId": "sec",
                "ticker": "5930",
                "side": "sell",
                "quantity": 15,
                "price": 300,
                "fee": 0,
                "totalAmount": 4500,
                "cashImpact": 4500,
            },
        ],
        "prices": [{"ticker": "005930.KS", "name": "Samsung", "price": 250}],
        "categoryPresets": {
            "income": ["급여"],
            "expense": ["식비"],
            "expenseDetails": [],
            "transfer": ["이체"],
        },
        "fxRate": 1350,
        "workoutLog": [{"ignored": True}],
    }


@pytest.fixture
def snapshot_file(tmp_path, snapshot_document):
    path = tmp_path / "ledger.json"
    path.write_text(json.dumps(snapshot_document, ensure_ascii=False), encoding="utf-8")
    return path
