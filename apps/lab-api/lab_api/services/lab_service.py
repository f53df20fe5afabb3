"""Calculation orchestration service.

Each request is validated before anything is fetched, then runs
fetch -> align -> compute and returns a fully populated result. Typed
failures from quantlab propagate to the router untouched.
"""

from __future__ import annotations

from typing import Sequence

import structlog

from quantlab.data.yahoo import fetch_histories, period_for_lookback
from quantlab.errors import ValidationError
from quantlab.risk.alignment import align_histories
from quantlab.risk.metrics import compute_portfolio_risk
from quantlab.risk.models import RiskResult, VolatilityModel, VolatilityResult
from quantlab.risk.validation import (
    build_weight_map,
    parse_tickers,
    parse_weights,
    validate_risk_params,
    validate_volatility_params,
    validate_weights,
)
from quantlab.risk.volatility import run_volatility_lab

from lab_api.config import get_settings

logger = structlog.get_logger()


async def compute_var(
    tickers: str | Sequence[str],
    weights: str | Sequence[float],
    portfolio_value: float,
    lookback: int,
    horizon: int,
    confidence: int,
) -> RiskResult:
    """Portfolio VaR / ES for a set of tickers and weights.

    Steps:
    1. Parse and validate tickers, weights and scalar parameters
    2. Map lookback to a history period and fetch all tickers
    3. Align histories onto a common calendar
    4. Run the historical-simulation risk engine
    """
    settings = get_settings()

    symbols = parse_tickers(tickers)
    weight_map = build_weight_map(symbols, parse_weights(weights))
    validate_risk_params(portfolio_value, lookback, horizon, confidence)
    validate_weights(weight_map, symbols)

    period = period_for_lookback(lookback)
    logger.info(
        "var_request",
        tickers=symbols,
        lookback=lookback,
        horizon=horizon,
        confidence=confidence,
        period=period,
    )

    raw = await fetch_histories(symbols, period, settings.MARKET_DATA_INTERVAL)
    aligned = align_histories(raw)

    return compute_portfolio_risk(
        aligned,
        weight_map,
        portfolio_value=portfolio_value,
        lookback=lookback,
        horizon=horizon,
        confidence=confidence,
    )


async def compute_volatility(
    tickers: str | Sequence[str],
    lookback: int,
    window: int,
    model: str,
) -> VolatilityResult:
    """Volatility lab for a set of tickers."""
    settings = get_settings()

    symbols = parse_tickers(tickers)
    validate_volatility_params(symbols, lookback, window)
    try:
        vol_model = VolatilityModel.parse(model)
    except ValueError:
        raise ValidationError(f"Invalid model: {model}. Must be 'realized' or 'ewma'.") from None

    period = period_for_lookback(lookback)
    logger.info(
        "volatility_request",
        tickers=symbols,
        lookback=lookback,
        window=window,
        model=vol_model.value,
        period=period,
    )

    raw = await fetch_histories(symbols, period, settings.MARKET_DATA_INTERVAL)
    aligned = align_histories(raw)

    return run_volatility_lab(
        aligned,
        lookback=lookback,
        window=window,
        model=vol_model,
        tickers=symbols,
        lambd=settings.EWMA_LAMBDA,
    )
