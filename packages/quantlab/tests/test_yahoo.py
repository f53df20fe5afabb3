"""
Unit tests for the Yahoo Finance market-data boundary.

yfinance is never called for real: Ticker objects are replaced with mocks
returning canned frames.
"""

from datetime import date
from unittest.mock import MagicMock, patch

import pandas as pd
import pytest

from quantlab.data import yahoo
from quantlab.data.yahoo import (
    PERIOD_CATALOG,
    fetch_histories,
    fetch_history,
    period_for_lookback,
)
from quantlab.errors import MarketDataError, PartialFetchFailure


def _yf_frame(closes):
    """Frame shaped like yf.Ticker(...).history(auto_adjust=False)."""
    index = pd.DatetimeIndex(pd.bdate_range('2024-01-01', periods=len(closes)), name='Date')
    return pd.DataFrame(
        {
            'Open': closes,
            'High': closes,
            'Low': closes,
            'Close': closes,
            'Adj Close': closes,
            'Volume': [100] * len(closes),
        },
        index=index,
    )


def _ticker_returning(frame):
    ticker = MagicMock()
    ticker.history.return_value = frame
    return ticker


class TestPeriodForLookback:
    """Tests for period_for_lookback function."""

    @pytest.mark.parametrize('days,expected', [
        (1, '1mo'),
        (22, '1mo'),
        (23, '3mo'),
        (66, '3mo'),
        (130, '6mo'),
        (252, '1y'),
        (260, '1y'),
        (261, '2y'),
        (1270, '5y'),
        (2530, '10y'),
        (2531, 'max'),
    ])
    def test_thresholds(self, days, expected):
        assert period_for_lookback(days) == expected

    def test_catalog(self):
        assert PERIOD_CATALOG == ('1mo', '3mo', '6mo', '1y', '2y', '5y', '10y', 'max')


class TestFetchHistory:
    """Tests for fetch_history function."""

    def test_normalizes_frame(self):
        with patch.object(yahoo.yf, 'Ticker', return_value=_ticker_returning(_yf_frame([1.0, 2.0, 3.0]))) as mock_ticker:
            df = fetch_history('AAPL', '1mo')

        mock_ticker.assert_called_once_with('AAPL')
        mock_ticker.return_value.history.assert_called_once_with(
            period='1mo', interval='1d', auto_adjust=False
        )
        assert list(df.columns) == ['date', 'open', 'high', 'low', 'close', 'volume']
        assert df['date'].iloc[0] == date(2024, 1, 1)
        assert df['close'].tolist() == [1.0, 2.0, 3.0]

    def test_empty_history_raises(self):
        with patch.object(yahoo.yf, 'Ticker', return_value=_ticker_returning(pd.DataFrame())):
            with pytest.raises(MarketDataError, match="No data found for symbol ZZZZ"):
                fetch_history('ZZZZ', '1y')

    def test_non_positive_prices_only_raises(self):
        with patch.object(yahoo.yf, 'Ticker', return_value=_ticker_returning(_yf_frame([0.0, 0.0, -1.0]))):
            with pytest.raises(MarketDataError, match="No valid prices found for symbol DEAD"):
                fetch_history('DEAD', '1mo')

    def test_zero_close_row_dropped(self):
        with patch.object(yahoo.yf, 'Ticker', return_value=_ticker_returning(_yf_frame([1.0, 0.0, 3.0]))):
            df = fetch_history('AAPL', '1mo')

        assert df['close'].tolist() == [1.0, 3.0]

    def test_provider_exception_wrapped(self):
        ticker = MagicMock()
        ticker.history.side_effect = RuntimeError("connection reset")

        with patch.object(yahoo.yf, 'Ticker', return_value=ticker):
            with pytest.raises(MarketDataError) as exc_info:
                fetch_history('AAPL', '1y')

        assert exc_info.value.symbol == 'AAPL'
        assert exc_info.value.reason == 'connection reset'

    def test_unsupported_period(self):
        with pytest.raises(MarketDataError, match="unsupported period"):
            fetch_history('AAPL', '7y')


class TestFetchHistories:
    """Tests for the concurrent fetch_histories function."""

    @pytest.mark.asyncio
    async def test_all_succeed(self):
        frames = {'AAPL': _yf_frame([1.0, 2.0]), 'MSFT': _yf_frame([3.0, 4.0])}

        with patch.object(yahoo.yf, 'Ticker', side_effect=lambda s: _ticker_returning(frames[s])):
            result = await fetch_histories(['AAPL', 'MSFT'], '1mo')

        assert list(result) == ['AAPL', 'MSFT']
        assert result['MSFT']['close'].tolist() == [3.0, 4.0]

    @pytest.mark.asyncio
    async def test_partial_failure_names_every_failing_ticker(self):
        def fake_fetch(symbol, period, interval):
            if symbol == 'AAPL':
                return pd.DataFrame({'date': [date(2024, 1, 2)], 'close': [1.0]})
            raise MarketDataError(symbol, f"No data found for symbol {symbol}.")

        with patch.object(yahoo, 'fetch_history', side_effect=fake_fetch):
            with pytest.raises(PartialFetchFailure) as exc_info:
                await fetch_histories(['AAPL', 'BAD1', 'BAD2'], '1y')

        err = exc_info.value
        assert set(err.failures) == {'BAD1', 'BAD2'}
        assert "BAD1, BAD2" in str(err)
        assert err.to_dict()['failures']['BAD2'] == "No data found for symbol BAD2."

    @pytest.mark.asyncio
    async def test_unexpected_error_propagates(self):
        with patch.object(yahoo, 'fetch_history', side_effect=KeyError('boom')):
            with pytest.raises(KeyError):
                await fetch_histories(['AAPL'], '1y')
