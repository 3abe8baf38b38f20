"""Ticker canonicalization and currency classification.

Korean tickers show up in several spellings across imports and price feeds:
``005930``, ``5930``, ``005930.KS``. Every component that groups or matches
by ticker goes through :func:`canonicalize` so those spellings collapse to one
key.
"""

import enum

from src.lib.config import KOREAN_EXCHANGE_SUFFIXES, KRW_TICKER_LENGTH


class TickerCurrency(str, enum.Enum):
    """Currency a ticker trades in."""

    KRW = "KRW"
    USD = "USD"


def _strip_exchange_suffix(ticker: str) -> str:
    for suffix in KOREAN_EXCHANGE_SUFFIXES:
        marker = f".{suffix}"
        if ticker.endswith(marker) and len(ticker) > len(marker):
            return ticker[: -len(marker)]
    return ticker


def canonicalize(ticker: str | None) -> str:
    """
    Normalize a ticker to its matching key.

    Args:
        ticker: Ticker as entered or as reported by a price feed

    Returns:
        Canonical ticker, or "" for empty input

    Examples:
        >>> canonicalize(" 005930.ks ")
        '005930'
        >>> canonicalize("5930")
        '005930'
        >>> canonicalize("aapl")
        'AAPL'
        >>> canonicalize("GOOGL")
        'GOOGL'
    """
    if not ticker:
        return ""

    normalized = _strip_exchange_suffix(ticker.strip().upper())

    # Leading zeros get dropped by spreadsheets; only pad codes that look
    # like KRX codes (contain a digit) so 5-letter US tickers survive.
    if (
        4 <= len(normalized) < KRW_TICKER_LENGTH
        and normalized.isalnum()
        and any(ch.isdigit() for ch in normalized)
    ):
        normalized = normalized.rjust(KRW_TICKER_LENGTH, "0")

    return normalized


def classify(ticker: str | None) -> TickerCurrency:
    """
    Infer the trading currency of a ticker.

    Canonical tickers of six or more characters are KRX codes (KRW);
    everything shorter is treated as a US listing (USD).

    Args:
        ticker: Ticker in any spelling

    Returns:
        TickerCurrency.KRW or TickerCurrency.USD
    """
    if len(canonicalize(ticker)) >= KRW_TICKER_LENGTH:
        return TickerCurrency.KRW
    return TickerCurrency.USD


def is_usd_ticker(ticker: str | None) -> bool:
    return classify(ticker) == TickerCurrency.USD


def is_krw_ticker(ticker: str | None) -> bool:
    return classify(ticker) == TickerCurrency.KRW
