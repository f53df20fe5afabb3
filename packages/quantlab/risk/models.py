"""Pydantic result models handed to the presentation layer.

Fields are snake_case in Python and camelCase on the wire.
"""

from __future__ import annotations

import datetime as dt
from enum import Enum
from typing import Dict, List

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class _ResultModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Regime(str, Enum):
    HIGH = "High"
    NORMAL = "Normal"
    LOW = "Low"


class VolatilityModel(str, Enum):
    REALIZED = "realized"
    EWMA = "ewma"

    @classmethod
    def parse(cls, value: "str | VolatilityModel") -> "VolatilityModel":
        """Accept enum members, values, and the 'garch-lite' alias for EWMA."""
        if isinstance(value, cls):
            return value
        key = str(value).strip().lower()
        if key in ("garch-lite", "garch_lite"):
            return cls.EWMA
        return cls(key)


class RiskResult(_ResultModel):
    """Historical-simulation VaR / ES for one portfolio.

    Percent figures are loss fractions (positive = loss), already scaled to
    the horizon.
    """

    var_pct: float
    es_pct: float
    var_usd: float
    es_usd: float
    confidence: int
    horizon: int
    daily_var_pct: float
    daily_es_pct: float
    portfolio_value: float
    lookback: int
    observations: int  # number of portfolio returns used
    tickers: List[str]
    start_date: dt.date | None = None
    end_date: dt.date | None = None


class VolatilityPoint(_ResultModel):
    date: dt.date
    volatility: float  # annualized, as a fraction


class RegimePoint(_ResultModel):
    date: dt.date
    regime: Regime


class VolatilityResult(_ResultModel):
    """Output of the volatility lab."""

    volatilities: Dict[str, List[VolatilityPoint]]
    correlation_matrix: Dict[str, Dict[str, float]]
    regimes: List[RegimePoint]
    tickers: List[str]
    primary_ticker: str
    dropped_tickers: List[str] = []
    model: VolatilityModel
    lookback: int
    window: int
