"""
Shared test fixtures for the risk engine test suite.

Provides consistent test data across all test modules:
- Raw OHLCV histories with different start dates and missing days
- Small hand-checkable price series for the return / VaR scenarios
"""

from datetime import date

import numpy as np
import pandas as pd
import pytest


def make_history(dates, closes, volume=1_000):
    """Build an OHLCV history DataFrame from dates and closes."""
    closes = np.asarray(closes, dtype=float)
    return pd.DataFrame({
        'date': list(dates),
        'open': closes * 0.99,
        'high': closes * 1.01,
        'low': closes * 0.98,
        'close': closes,
        'volume': [volume] * len(closes),
    })


def prices_from_returns(returns, start=100.0):
    """Price path whose simple returns are exactly `returns` (up to rounding)."""
    return start * np.cumprod(np.concatenate([[1.0], 1 + np.asarray(returns, dtype=float)]))


@pytest.fixture
def sample_histories():
    """Raw histories for 3 tickers over 300 business days.

    MSFT starts 20 days late and TSLA is missing every 10th day.
    """
    np.random.seed(42)
    dates = [d.date() for d in pd.bdate_range('2023-01-02', periods=300)]
    histories = {}

    for i, sym in enumerate(['AAPL', 'MSFT', 'TSLA']):
        base_price = 100 + i * 50
        returns = np.random.normal(0.0005, 0.02, len(dates))
        closes = base_price * np.exp(np.cumsum(returns))
        histories[sym] = make_history(dates, closes)

    histories['MSFT'] = histories['MSFT'].iloc[20:].reset_index(drop=True)
    histories['TSLA'] = histories['TSLA'][histories['TSLA'].index % 10 != 5].reset_index(drop=True)

    return histories


@pytest.fixture
def five_day_dates():
    return [date(2024, 3, 4), date(2024, 3, 5), date(2024, 3, 6), date(2024, 3, 7), date(2024, 3, 8)]


@pytest.fixture
def gapped_pair(five_day_dates):
    """A has 5 consecutive days; B is missing day 3."""
    a = make_history(five_day_dates, [10.0, 11.0, 12.0, 13.0, 14.0], volume=500)
    b_dates = [d for i, d in enumerate(five_day_dates) if i != 2]
    b = make_history(b_dates, [20.0, 21.0, 22.0, 23.0], volume=700)
    return {'A': a, 'B': b}


@pytest.fixture
def scenario_prices():
    """Single-asset scenario prices."""
    return [100.0, 102.0, 101.0, 105.0, 103.0]


@pytest.fixture
def history_factory():
    """The make_history helper, for tests that build their own histories."""
    return make_history


@pytest.fixture
def price_path():
    """The prices_from_returns helper."""
    return prices_from_returns
