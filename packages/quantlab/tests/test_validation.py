"""
Unit tests for validation.py - request parameter parsing and checks
"""

import pytest

from quantlab.errors import QuantLabError, ValidationError
from quantlab.risk.validation import (
    build_weight_map,
    normalize_ticker,
    parse_tickers,
    parse_weights,
    validate_risk_params,
    validate_volatility_params,
    validate_weights,
)


class TestParsing:
    """Tests for ticker and weight parsing."""

    def test_parse_tickers_from_string(self):
        assert parse_tickers(' aapl, msft ,, AAPL,tsla ') == ['AAPL', 'MSFT', 'TSLA']

    def test_parse_tickers_from_list(self):
        assert parse_tickers(['spy', 'qqq']) == ['SPY', 'QQQ']

    def test_parse_tickers_empty(self):
        with pytest.raises(ValidationError, match="at least one ticker"):
            parse_tickers(' , ')

    def test_normalize_ticker_blank(self):
        with pytest.raises(ValidationError):
            normalize_ticker('   ')

    def test_parse_weights(self):
        assert parse_weights('0.5, 0.3,0.2') == [0.5, 0.3, 0.2]
        assert parse_weights([1, 0.0]) == [1.0, 0.0]

    def test_parse_weights_invalid(self):
        with pytest.raises(ValidationError, match="Invalid weight value"):
            parse_weights('0.5, abc')

    def test_build_weight_map(self):
        assert build_weight_map(['aapl', 'msft'], [0.6, 0.4]) == {'AAPL': 0.6, 'MSFT': 0.4}

    def test_build_weight_map_count_mismatch(self):
        with pytest.raises(ValidationError, match="2 tickers, 3 weights"):
            build_weight_map(['A', 'B'], [0.3, 0.3, 0.4])


class TestValidateWeights:
    """Tests for validate_weights function."""

    def test_within_tolerance(self):
        validate_weights({'A': 0.5, 'B': 0.505})

    def test_sum_off(self):
        with pytest.raises(ValidationError, match="Weights must sum to 1. Current sum: 0.90"):
            validate_weights({'A': 0.4, 'B': 0.3, 'C': 0.2})

    def test_ticker_coverage(self):
        with pytest.raises(ValidationError, match="Missing weights for tickers: B"):
            validate_weights({'A': 1.0}, tickers=['A', 'B'])
        with pytest.raises(ValidationError, match="No price series for weighted tickers: C"):
            validate_weights({'A': 0.5, 'C': 0.5}, tickers=['A'])

    def test_empty(self):
        with pytest.raises(ValidationError):
            validate_weights({})


class TestValidateParams:
    """Tests for risk and volatility parameter checks."""

    @pytest.mark.parametrize('value,lookback,horizon', [
        (0, 252, 10),
        (100_000, 1, 10),
        (100_000, 252, 0),
    ])
    def test_non_positive_risk_params(self, value, lookback, horizon):
        with pytest.raises(ValidationError, match="must be positive numbers"):
            validate_risk_params(value, lookback, horizon, 99)

    def test_confidence_levels(self):
        validate_risk_params(100_000, 252, 10, 95)
        validate_risk_params(100_000, 252, 10, 99)
        with pytest.raises(ValidationError, match="Invalid confidence"):
            validate_risk_params(100_000, 252, 10, 97)

    def test_volatility_lookback_must_exceed_window(self):
        with pytest.raises(ValidationError, match="lookback=10, window=20"):
            validate_volatility_params(['SPY'], lookback=10, window=20)
        with pytest.raises(ValidationError):
            validate_volatility_params(['SPY'], lookback=20, window=20)

    def test_volatility_window_positive(self):
        with pytest.raises(ValidationError, match="Rolling window must be positive"):
            validate_volatility_params(['SPY'], lookback=100, window=0)

    def test_volatility_requires_tickers(self):
        with pytest.raises(ValidationError, match="at least one ticker"):
            validate_volatility_params([], lookback=100, window=20)


def test_validation_error_is_value_error():
    """Callers catching ValueError keep working."""
    err = ValidationError("bad")

    assert isinstance(err, ValueError)
    assert isinstance(err, QuantLabError)
    assert err.to_dict() == {'error_type': 'VALIDATION_ERROR', 'detail': 'bad'}
