"""
Volatility Lab Module

Rolling realized and EWMA ("GARCH-lite") volatility per asset, short-term
correlation matrix, and a three-state volatility regime classification for
the primary asset.
"""

from __future__ import annotations

import math
from itertools import accumulate
from typing import Dict, Iterable, List, Mapping, Sequence

import numpy as np
import pandas as pd
import structlog

from ..errors import InsufficientDataError, ValidationError
from .models import Regime, RegimePoint, VolatilityModel, VolatilityPoint, VolatilityResult
from .returns import returns_by_ticker
from .stats import pearson_correlation, percentile, sample_std
from .validation import normalize_ticker, validate_volatility_params

logger = structlog.get_logger(__name__)

# ---------------------------------------------------------------------------
# Model constants
# ---------------------------------------------------------------------------

TRADING_DAYS_PER_YEAR = 252
EWMA_LAMBDA = 0.94                # RiskMetrics decay factor
REGIME_LOW_PERCENTILE = 25.0      # below -> Low regime
REGIME_HIGH_PERCENTILE = 75.0     # above -> High regime


def realized_volatility(
    returns: Sequence[float] | np.ndarray,
    window: int,
    trading_days: int = TRADING_DAYS_PER_YEAR,
) -> np.ndarray:
    """Rolling realized volatility, annualized.

    Point k (k = i - window) is the sample std of returns[i-window:i]
    scaled by sqrt(trading_days), for i in [window, len(returns)).

    Args:
        returns: Daily log returns
        window: Rolling window size
        trading_days: Annualization factor

    Returns:
        Array of length len(returns) - window (empty if not positive)
    """
    if window < 1:
        raise ValueError(f"Window must be positive, got {window}")

    values = np.asarray(returns, dtype=float)
    factor = math.sqrt(trading_days)
    return np.array(
        [sample_std(values[i - window:i]) * factor for i in range(window, values.size)],
        dtype=float,
    )


def ewma_volatility(
    returns: Sequence[float] | np.ndarray,
    window: int,
    lambd: float = EWMA_LAMBDA,
    trading_days: int = TRADING_DAYS_PER_YEAR,
) -> np.ndarray:
    """Exponentially weighted volatility, annualized.

    variance_0 = sample_std(returns[:window])**2
    variance_t = lambda * variance_{t-1} + (1 - lambda) * r_{t-1}**2

    One point per index in [window, len(returns)), the same positions as
    realized_volatility.
    """
    if window < 1:
        raise ValueError(f"Window must be positive, got {window}")
    if not 0 < lambd < 1:
        raise ValueError(f"Lambda must be between 0 and 1, got {lambd}")

    values = np.asarray(returns, dtype=float)
    if values.size <= window:
        return np.empty(0, dtype=float)

    seed = sample_std(values[:window]) ** 2
    variances = list(
        accumulate(
            values[window - 1:-1],
            lambda variance, r: lambd * variance + (1 - lambd) * r * r,
            initial=seed,
        )
    )[1:]

    return np.sqrt(np.asarray(variances, dtype=float) * trading_days)


def estimate_volatility(
    returns: Sequence[float] | np.ndarray,
    window: int,
    model: str | VolatilityModel = VolatilityModel.REALIZED,
    lambd: float = EWMA_LAMBDA,
    trading_days: int = TRADING_DAYS_PER_YEAR,
) -> np.ndarray:
    """Unified interface for volatility estimation."""
    model = VolatilityModel.parse(model)

    if model is VolatilityModel.EWMA:
        return ewma_volatility(returns, window, lambd=lambd, trading_days=trading_days)
    return realized_volatility(returns, window, trading_days=trading_days)


def recent_correlation_matrix(
    returns_map: Mapping[str, Sequence[float] | np.ndarray],
    window: int,
) -> Dict[str, Dict[str, float]]:
    """Pairwise correlation over each pair's most recent `window` returns.

    Diagonal is forced to 1.0. Empty for fewer than two tickers.
    """
    tickers = list(returns_map)
    if len(tickers) < 2:
        return {}

    recent = {t: np.asarray(returns_map[t], dtype=float)[-window:] for t in tickers}
    matrix: Dict[str, Dict[str, float]] = {t: {} for t in tickers}

    for i, a in enumerate(tickers):
        matrix[a][a] = 1.0
        for b in tickers[i + 1:]:
            corr = pearson_correlation(recent[a], recent[b])
            matrix[a][b] = corr
            matrix[b][a] = corr

    # Rows were filled out of order for later tickers
    matrix = {a: {b: matrix[a][b] for b in tickers} for a in tickers}

    upper = [matrix[a][b] for i, a in enumerate(tickers) for b in tickers[i + 1:]]
    logger.info(
        "recent_correlation_matrix: correlation computed",
        num_assets=len(tickers),
        window=window,
        avg_correlation=float(np.mean(upper)),
    )

    return matrix


def classify_regimes(
    dates: Iterable,
    volatilities: Sequence[float] | np.ndarray,
    low_pct: float = REGIME_LOW_PERCENTILE,
    high_pct: float = REGIME_HIGH_PERCENTILE,
) -> List[RegimePoint]:
    """Label each volatility point High / Normal / Low.

    Thresholds are percentiles of the series itself: above high_pct is
    High, below low_pct is Low, everything else Normal.
    """
    vols = np.asarray(volatilities, dtype=float)
    low = percentile(vols, low_pct)
    high = percentile(vols, high_pct)

    regimes = []
    for point_date, vol in zip(dates, vols):
        if vol > high:
            regime = Regime.HIGH
        elif vol < low:
            regime = Regime.LOW
        else:
            regime = Regime.NORMAL
        regimes.append(RegimePoint(date=point_date, regime=regime))

    return regimes


def run_volatility_lab(
    aligned: Mapping[str, pd.DataFrame],
    lookback: int,
    window: int,
    model: str | VolatilityModel = VolatilityModel.REALIZED,
    tickers: Sequence[str] | None = None,
    lambd: float = EWMA_LAMBDA,
    trading_days: int = TRADING_DAYS_PER_YEAR,
) -> VolatilityResult:
    """Compute volatility series, correlations and regimes.

    Tickers with fewer than `lookback` aligned rows are dropped and reported
    in `dropped_tickers`; only an empty remainder is an error.

    Args:
        aligned: Aligned price series (see alignment.align_histories)
        lookback: Number of price rows to use per ticker
        window: Rolling window / EWMA seed size, must be < lookback
        model: 'realized' or 'ewma' ('garch-lite' accepted)
        tickers: Tickers to analyse, in order (default: all of `aligned`)

    Raises:
        ValidationError: On invalid parameters
        InsufficientDataError: If no ticker has `lookback` rows
    """
    try:
        model = VolatilityModel.parse(model)
    except ValueError:
        raise ValidationError(f"Invalid model: {model}. Must be 'realized' or 'ewma'.") from None

    requested = [normalize_ticker(t) for t in (tickers if tickers is not None else aligned)]
    validate_volatility_params(requested, lookback, window)

    kept: Dict[str, pd.DataFrame] = {}
    dropped: List[str] = []
    for symbol in requested:
        df = aligned.get(symbol)
        if df is None or len(df) < lookback:
            dropped.append(symbol)
            continue
        kept[symbol] = df.iloc[-lookback:].reset_index(drop=True)

    if dropped:
        logger.info(
            "run_volatility_lab: dropped tickers with insufficient history",
            dropped=dropped,
            lookback=lookback,
        )

    if not kept:
        available = max((len(df) for df in aligned.values()), default=0)
        raise InsufficientDataError(
            f"Not enough historical data for the requested lookback period of {lookback} days.",
            found=available,
            required=lookback,
        )

    log_returns = returns_by_ticker(kept, kind="log")

    volatilities: Dict[str, List[VolatilityPoint]] = {}
    for symbol, df in kept.items():
        vols = estimate_volatility(
            log_returns[symbol], window, model, lambd=lambd, trading_days=trading_days
        )
        dates = df["date"].iloc[window:window + len(vols)]
        volatilities[symbol] = [
            VolatilityPoint(date=d, volatility=float(v)) for d, v in zip(dates, vols)
        ]

    correlation = recent_correlation_matrix(log_returns, window)

    primary = next(iter(kept))
    regimes = classify_regimes(
        [p.date for p in volatilities[primary]],
        [p.volatility for p in volatilities[primary]],
    )

    logger.info(
        "run_volatility_lab: lab computed",
        model=model.value,
        tickers=list(kept),
        lookback=lookback,
        window=window,
        num_points=len(volatilities[primary]),
    )

    return VolatilityResult(
        volatilities=volatilities,
        correlation_matrix=correlation,
        regimes=regimes,
        tickers=list(kept),
        primary_ticker=primary,
        dropped_tickers=dropped,
        model=model,
        lookback=lookback,
        window=window,
    )
