"""Yahoo Finance market-data boundary.

Fetches raw daily OHLCV histories per ticker with yfinance. Fetches run
concurrently in worker threads; the result is all-or-nothing: if any
ticker fails, the whole request fails and names every failing ticker.
"""

from __future__ import annotations

import asyncio
from typing import Iterable

import pandas as pd
import structlog
import yfinance as yf

from ..errors import MarketDataError, PartialFetchFailure
from ..risk.alignment import normalize_history

logger = structlog.get_logger()

DEFAULT_INTERVAL = "1d"

# Period tokens accepted by the history endpoint, with the largest lookback
# (in trading days) each one covers. ~21 trading days per month plus a buffer.
PERIOD_THRESHOLDS = [
    ("1mo", 22),
    ("3mo", 66),
    ("6mo", 130),
    ("1y", 260),
    ("2y", 510),
    ("5y", 1270),
    ("10y", 2530),
]
PERIOD_CATALOG = tuple(token for token, _ in PERIOD_THRESHOLDS) + ("max",)


def period_for_lookback(days: int) -> str:
    """Smallest history period that covers `days` trading days."""
    for token, max_days in PERIOD_THRESHOLDS:
        if days <= max_days:
            return token
    return "max"


def fetch_history(
    symbol: str,
    period: str,
    interval: str = DEFAULT_INTERVAL,
) -> pd.DataFrame:
    """Blocking single-ticker fetch (runs in a worker thread).

    Returns:
        DataFrame with columns [date, open, high, low, close, volume]

    Raises:
        MarketDataError: If the request fails or returns no rows
    """
    if period not in PERIOD_CATALOG:
        raise MarketDataError(symbol, f"unsupported period '{period}'")

    try:
        raw = yf.Ticker(symbol).history(
            period=period,
            interval=interval,
            auto_adjust=False,
        )
    except Exception as e:
        logger.error(
            "yahoo_fetch_error",
            symbol=symbol,
            error=str(e),
            exc_info=True,
        )
        raise MarketDataError(symbol, str(e)) from e

    if raw is None or raw.empty:
        logger.warning("yahoo_no_data", symbol=symbol, period=period)
        raise MarketDataError(
            symbol,
            f"No data found for symbol {symbol}. It may be an invalid ticker.",
        )

    try:
        df = normalize_history(raw)
    except ValueError as e:
        raise MarketDataError(symbol, str(e)) from e

    if df.empty:
        logger.warning("yahoo_no_valid_prices", symbol=symbol, period=period)
        raise MarketDataError(symbol, f"No valid prices found for symbol {symbol}.")

    logger.debug(
        "yahoo_fetch_success",
        symbol=symbol,
        rows=len(df),
        start=df["date"].min(),
        end=df["date"].max(),
    )
    return df


async def fetch_histories(
    symbols: Iterable[str],
    period: str,
    interval: str = DEFAULT_INTERVAL,
) -> dict[str, pd.DataFrame]:
    """Fetch raw histories for several tickers concurrently.

    Args:
        symbols: Ticker symbols (already normalized)
        period: One of PERIOD_CATALOG
        interval: Bar interval, '1d' for all risk calculations

    Returns:
        Dictionary mapping symbol to unaligned OHLCV DataFrame

    Raises:
        PartialFetchFailure: If any symbol failed, naming all of them
    """
    symbols = list(symbols)
    outcomes = await asyncio.gather(
        *(asyncio.to_thread(fetch_history, s, period, interval) for s in symbols),
        return_exceptions=True,
    )

    results: dict[str, pd.DataFrame] = {}
    failures: dict[str, str] = {}
    for symbol, outcome in zip(symbols, outcomes):
        if isinstance(outcome, MarketDataError):
            failures[symbol] = outcome.reason
        elif isinstance(outcome, BaseException):
            raise outcome
        else:
            results[symbol] = outcome

    logger.info(
        "yahoo_fetch_complete",
        requested=len(symbols),
        successful=len(results),
        failed=list(failures),
        period=period,
        interval=interval,
    )

    if failures:
        raise PartialFetchFailure(failures)
    return results
