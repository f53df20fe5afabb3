"""
Return Construction Module

Pure functions for turning aligned price series into return series.
Simple returns feed the portfolio risk engine; log returns feed the
volatility engine.
"""

from __future__ import annotations

from typing import Dict, Mapping, Sequence

import numpy as np
import pandas as pd
import structlog

logger = structlog.get_logger(__name__)

RETURN_KINDS = ("simple", "log")


def compute_returns(prices: Sequence[float] | np.ndarray | pd.Series, kind: str = "simple") -> np.ndarray:
    """Compute period-over-period returns.

    simple: P_t / P_{t-1} - 1
    log:    ln(P_t / P_{t-1})

    A previous price of exactly zero yields a return of 0 rather than an
    infinity.

    Args:
        prices: Ordered price observations
        kind: 'simple' or 'log'

    Returns:
        Array of length len(prices) - 1 (empty for fewer than 2 prices)

    Raises:
        ValueError: If kind is unknown
    """
    if kind not in RETURN_KINDS:
        raise ValueError(f"Unknown return kind: {kind}. Use 'simple' or 'log'")

    values = np.asarray(prices, dtype=float)
    if values.size < 2:
        return np.empty(0, dtype=float)

    prev = values[:-1]
    curr = values[1:]
    defined = prev != 0
    ratio = np.divide(curr, prev, out=np.ones_like(curr), where=defined)

    if kind == "log":
        with np.errstate(divide="ignore", invalid="ignore"):
            result = np.log(ratio)
    else:
        result = ratio - 1.0

    return np.where(defined, result, 0.0)


def compute_simple_returns(prices: Sequence[float] | np.ndarray | pd.Series) -> np.ndarray:
    return compute_returns(prices, kind="simple")


def compute_log_returns(prices: Sequence[float] | np.ndarray | pd.Series) -> np.ndarray:
    return compute_returns(prices, kind="log")


def returns_by_ticker(
    aligned: Mapping[str, pd.DataFrame],
    kind: str = "simple",
    price_col: str = "close",
) -> Dict[str, np.ndarray]:
    """Compute a return series for every ticker of an aligned set."""
    result = {
        symbol: compute_returns(df[price_col].to_numpy(), kind=kind)
        for symbol, df in aligned.items()
    }

    logger.debug(
        "returns_by_ticker: returns computed",
        kind=kind,
        num_tickers=len(result),
        num_periods=len(next(iter(result.values()))) if result else 0,
    )

    return result
