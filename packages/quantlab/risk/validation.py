"""
Request Validation Module

Parses and validates user-supplied calculation parameters. Every check here
runs before any market data is fetched, so a bad request fails fast with a
ValidationError.
"""

from __future__ import annotations

from typing import Dict, Iterable, List, Sequence

import structlog

from ..errors import ValidationError

logger = structlog.get_logger(__name__)

WEIGHT_SUM_TOLERANCE = 0.01
SUPPORTED_CONFIDENCE_LEVELS = (95, 99)


def normalize_ticker(ticker: object) -> str:
    """Strip and upper-case a ticker symbol."""
    symbol = str(ticker).strip().upper()
    if not symbol:
        raise ValidationError("Ticker symbols must be non-empty")
    return symbol


def parse_tickers(raw: str | Iterable[str]) -> List[str]:
    """Parse a comma-separated string (or sequence) of tickers.

    Blank entries are dropped and duplicates removed, preserving order.
    """
    items = raw.split(",") if isinstance(raw, str) else list(raw)
    tickers: List[str] = []
    for item in items:
        symbol = str(item).strip().upper()
        if symbol and symbol not in tickers:
            tickers.append(symbol)

    if not tickers:
        raise ValidationError("Please enter at least one ticker.")
    return tickers


def parse_weights(raw: str | Iterable[float]) -> List[float]:
    """Parse a comma-separated string (or sequence) of weights."""
    items = raw.split(",") if isinstance(raw, str) else list(raw)
    weights: List[float] = []
    for item in items:
        if isinstance(item, str):
            item = item.strip()
            if not item:
                continue
        try:
            weights.append(float(item))
        except (TypeError, ValueError):
            raise ValidationError(f"Invalid weight value: {item!r}") from None
    return weights


def build_weight_map(tickers: Sequence[str], weights: Sequence[float]) -> Dict[str, float]:
    """Pair tickers with weights positionally."""
    if len(tickers) != len(weights):
        raise ValidationError(
            f"The number of tickers and weights must match "
            f"({len(tickers)} tickers, {len(weights)} weights)."
        )
    return {normalize_ticker(t): float(w) for t, w in zip(tickers, weights)}


def validate_weights(
    weights: Dict[str, float],
    tickers: Iterable[str] | None = None,
    tolerance: float = WEIGHT_SUM_TOLERANCE,
) -> None:
    """Check that weights sum to 1 and cover exactly the given tickers."""
    if not weights:
        raise ValidationError("At least one weight is required.")

    if tickers is not None:
        ticker_set = set(tickers)
        missing = sorted(set(weights) - ticker_set)
        if missing:
            raise ValidationError(f"No price series for weighted tickers: {', '.join(missing)}")
        unweighted = sorted(ticker_set - set(weights))
        if unweighted:
            raise ValidationError(f"Missing weights for tickers: {', '.join(unweighted)}")

    total = sum(weights.values())
    if abs(total - 1.0) > tolerance:
        raise ValidationError(f"Weights must sum to 1. Current sum: {total:.2f}")


def validate_risk_params(
    portfolio_value: float,
    lookback: int,
    horizon: int,
    confidence: int,
) -> None:
    """Validate the scalar parameters of a VaR/ES request."""
    if portfolio_value <= 0 or lookback <= 1 or horizon <= 0:
        raise ValidationError(
            "Portfolio Value, Lookback, and Horizon must be positive numbers "
            f"(portfolio_value={portfolio_value}, lookback={lookback}, horizon={horizon})."
        )
    if confidence not in SUPPORTED_CONFIDENCE_LEVELS:
        raise ValidationError(
            f"Invalid confidence: {confidence}. Must be one of {list(SUPPORTED_CONFIDENCE_LEVELS)}."
        )


def validate_volatility_params(tickers: Sequence[str], lookback: int, window: int) -> None:
    """Validate the parameters of a volatility lab request."""
    if not tickers:
        raise ValidationError("Please enter at least one ticker.")
    if window < 1:
        raise ValidationError(f"Rolling window must be positive, got {window}.")
    if lookback <= window:
        raise ValidationError(
            "Lookback period must be greater than the rolling window size "
            f"(lookback={lookback}, window={window})."
        )
