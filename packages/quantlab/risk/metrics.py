"""
Portfolio Risk Metrics Module

Historical-simulation Value-at-Risk and Expected Shortfall for a weighted
portfolio of aligned assets, scaled to an arbitrary horizon by the
square-root-of-time rule.
"""

from __future__ import annotations

import math
from typing import Mapping, Sequence, Tuple

import numpy as np
import pandas as pd
import structlog

from ..errors import InsufficientDataError
from .alignment import aligned_dates, trim_to_lookback
from .models import RiskResult
from .returns import returns_by_ticker
from .validation import validate_risk_params, validate_weights

logger = structlog.get_logger(__name__)


def portfolio_returns(
    returns_map: Mapping[str, Sequence[float] | np.ndarray],
    weights: Mapping[str, float],
) -> np.ndarray:
    """Weighted sum of per-ticker returns at each time index.

    Tickers without a weight contribute nothing.

    Raises:
        ValueError: If the return series differ in length
    """
    if not returns_map:
        return np.empty(0, dtype=float)

    lengths = {len(r) for r in returns_map.values()}
    if len(lengths) != 1:
        raise ValueError(f"Return series must have equal length, got lengths {sorted(lengths)}")

    total = np.zeros(lengths.pop(), dtype=float)
    for symbol, series in returns_map.items():
        total = total + weights.get(symbol, 0.0) * np.asarray(series, dtype=float)
    return total


def historical_var_es(
    returns: Sequence[float] | np.ndarray,
    confidence: float,
) -> Tuple[float, float]:
    """Historical-simulation VaR and ES at a confidence level in percent.

    index = floor((1 - confidence/100) * n) into the ascending-sorted
    returns; VaR is the negated return at that index, ES the negated mean
    of the strictly worse returns below it (VaR when that tail is empty).

    Returns:
        (var, es) as positive loss fractions; (0.0, 0.0) for no returns
    """
    if not 0 < confidence < 100:
        raise ValueError(f"Confidence must be between 0 and 100, got {confidence}")

    sorted_returns = np.sort(np.asarray(returns, dtype=float))
    n = sorted_returns.size
    if n == 0:
        return 0.0, 0.0

    alpha = 1 - confidence / 100
    index = min(int(math.floor(alpha * n)), n - 1)

    var = -float(sorted_returns[index])
    tail = sorted_returns[:index]
    es = -float(tail.mean()) if tail.size > 0 else var

    return var, es


def scale_to_horizon(value: float, horizon_days: int) -> float:
    """Square-root-of-time scaling of a one-day figure."""
    if horizon_days < 1:
        raise ValueError(f"Horizon must be >= 1, got {horizon_days}")
    return float(value * math.sqrt(horizon_days))


def compute_portfolio_risk(
    aligned: Mapping[str, pd.DataFrame],
    weights: Mapping[str, float],
    portfolio_value: float,
    lookback: int,
    horizon: int,
    confidence: int,
) -> RiskResult:
    """Historical-simulation VaR / ES for a weighted portfolio.

    Steps:
    1. Validate parameters and weights
    2. Trim aligned prices to the last `lookback` rows
    3. Simple returns per ticker, weighted into a portfolio series
    4. Daily VaR / ES from the sorted portfolio returns
    5. Scale to horizon and convert to currency

    Args:
        aligned: Aligned price series covering every weighted ticker
        weights: {ticker: weight}, summing to 1 within tolerance
        portfolio_value: Notional in currency units
        lookback: Number of price rows to use
        horizon: Forecast horizon in days
        confidence: 95 or 99

    Raises:
        ValidationError: On invalid parameters or weights
        InsufficientDataError: If fewer than `lookback` aligned rows exist
    """
    validate_risk_params(portfolio_value, lookback, horizon, confidence)
    validate_weights(dict(weights), tickers=list(aligned))

    try:
        window = trim_to_lookback(aligned, lookback)
    except InsufficientDataError as e:
        logger.error(
            "compute_portfolio_risk: insufficient data for lookback",
            found=e.found,
            required=e.required,
        )
        raise

    asset_returns = returns_by_ticker(window, kind="simple")
    port_returns = portfolio_returns(asset_returns, weights)

    daily_var, daily_es = historical_var_es(port_returns, confidence)
    var_pct = scale_to_horizon(daily_var, horizon)
    es_pct = scale_to_horizon(daily_es, horizon)

    dates = aligned_dates(window)
    result = RiskResult(
        var_pct=var_pct,
        es_pct=es_pct,
        var_usd=var_pct * portfolio_value,
        es_usd=es_pct * portfolio_value,
        confidence=confidence,
        horizon=horizon,
        daily_var_pct=daily_var,
        daily_es_pct=daily_es,
        portfolio_value=float(portfolio_value),
        lookback=lookback,
        observations=int(port_returns.size),
        tickers=list(window),
        start_date=dates[0] if dates else None,
        end_date=dates[-1] if dates else None,
    )

    logger.info(
        "compute_portfolio_risk: risk computed",
        tickers=result.tickers,
        confidence=confidence,
        horizon=horizon,
        observations=result.observations,
        var_pct=result.var_pct,
        es_pct=result.es_pct,
    )

    return result

