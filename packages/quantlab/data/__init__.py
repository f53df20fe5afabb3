"""
Market-data boundary: raw per-ticker OHLCV histories from Yahoo Finance.
"""

from .yahoo import (
    DEFAULT_INTERVAL,
    PERIOD_CATALOG,
    fetch_histories,
    fetch_history,
    period_for_lookback,
)

__all__ = [
    "DEFAULT_INTERVAL",
    "PERIOD_CATALOG",
    "fetch_histories",
    "fetch_history",
    "period_for_lookback",
]
