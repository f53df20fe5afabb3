"""CSV / JSON export of calculation results.

Results are flattened into DataFrames so they can be written with pandas;
JSON goes through the pydantic models with camelCase field names.
"""

from __future__ import annotations

import pandas as pd
from pydantic import BaseModel

from .risk.models import RiskResult, VolatilityResult


def risk_result_frame(result: RiskResult) -> pd.DataFrame:
    """Single-row frame of a RiskResult (tickers joined by ';')."""
    row = result.model_dump(by_alias=True, mode="json")
    row["tickers"] = ";".join(result.tickers)
    return pd.DataFrame([row])


def volatility_frame(result: VolatilityResult) -> pd.DataFrame:
    """Long-format volatility series: date, ticker, volatility."""
    rows = [
        {"date": point.date.isoformat(), "ticker": ticker, "volatility": point.volatility}
        for ticker, points in result.volatilities.items()
        for point in points
    ]
    return pd.DataFrame(rows, columns=["date", "ticker", "volatility"])


def regime_frame(result: VolatilityResult) -> pd.DataFrame:
    rows = [
        {"date": point.date.isoformat(), "ticker": result.primary_ticker, "regime": point.regime.value}
        for point in result.regimes
    ]
    return pd.DataFrame(rows, columns=["date", "ticker", "regime"])


def correlation_frame(result: VolatilityResult) -> pd.DataFrame:
    """Square correlation matrix with tickers on both axes (empty for one ticker)."""
    if not result.correlation_matrix:
        return pd.DataFrame()
    frame = pd.DataFrame(result.correlation_matrix).loc[result.tickers, result.tickers]
    frame.index.name = "ticker"
    return frame


def to_csv(frame: pd.DataFrame, index: bool = False) -> str:
    """Render a frame as CSV text (fields with commas/quotes/newlines quoted)."""
    if frame.empty and len(frame.columns) == 0:
        return ""
    return frame.to_csv(index=index, lineterminator="\n")


def to_json(model: BaseModel) -> str:
    return model.model_dump_json(by_alias=True, indent=2)
