"""
Risk & Volatility Engine

Pure computation modules over aligned per-ticker price series.

Modules:
- alignment: forward-fill alignment of raw histories onto a common calendar
- returns: simple and log return series
- stats: sample std, Pearson correlation, percentile
- volatility: realized / EWMA volatility, correlation matrix, regimes
- metrics: historical-simulation VaR and Expected Shortfall
- validation: request parameter parsing and checks
"""

# Alignment module
from .alignment import (
    PRICE_COLUMNS,
    align_histories,
    aligned_dates,
    aligned_length,
    closes_frame,
    common_start_date,
    is_aligned,
    normalize_history,
    trim_to_lookback,
)

# Returns / statistics kernel
from .returns import (
    compute_returns,
    compute_log_returns,
    compute_simple_returns,
    returns_by_ticker,
)
from .stats import (
    sample_std,
    pearson_correlation,
    percentile,
)

# Volatility module
from .volatility import (
    EWMA_LAMBDA,
    REGIME_HIGH_PERCENTILE,
    REGIME_LOW_PERCENTILE,
    TRADING_DAYS_PER_YEAR,
    realized_volatility,
    ewma_volatility,
    estimate_volatility,
    recent_correlation_matrix,
    classify_regimes,
    run_volatility_lab,
)

# Metrics module
from .metrics import (
    portfolio_returns,
    historical_var_es,
    scale_to_horizon,
    compute_portfolio_risk,
)

# Validation module
from .validation import (
    WEIGHT_SUM_TOLERANCE,
    build_weight_map,
    parse_tickers,
    parse_weights,
    validate_risk_params,
    validate_volatility_params,
    validate_weights,
)

from .models import (
    Regime,
    RegimePoint,
    RiskResult,
    VolatilityModel,
    VolatilityPoint,
    VolatilityResult,
)

__all__ = [
    # Alignment
    'PRICE_COLUMNS',
    'align_histories',
    'aligned_dates',
    'aligned_length',
    'closes_frame',
    'common_start_date',
    'is_aligned',
    'normalize_history',
    'trim_to_lookback',
    # Returns / statistics
    'compute_returns',
    'compute_log_returns',
    'compute_simple_returns',
    'returns_by_ticker',
    'sample_std',
    'pearson_correlation',
    'percentile',
    # Volatility
    'EWMA_LAMBDA',
    'REGIME_HIGH_PERCENTILE',
    'REGIME_LOW_PERCENTILE',
    'TRADING_DAYS_PER_YEAR',
    'realized_volatility',
    'ewma_volatility',
    'estimate_volatility',
    'recent_correlation_matrix',
    'classify_regimes',
    'run_volatility_lab',
    # Metrics
    'portfolio_returns',
    'historical_var_es',
    'scale_to_horizon',
    'compute_portfolio_risk',
    # Validation
    'WEIGHT_SUM_TOLERANCE',
    'build_weight_map',
    'parse_tickers',
    'parse_weights',
    'validate_risk_params',
    'validate_volatility_params',
    'validate_weights',
    # Models
    'Regime',
    'RegimePoint',
    'RiskResult',
    'VolatilityModel',
    'VolatilityPoint',
    'VolatilityResult',
]
