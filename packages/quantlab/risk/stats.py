"""
Descriptive statistics over return series.

Every function is total over its documented domain: degenerate inputs map to
0 by convention instead of raising, so downstream matrices stay well formed.
"""

from __future__ import annotations

import math
from typing import Sequence

import numpy as np


def sample_std(series: Sequence[float] | np.ndarray) -> float:
    """Bessel-corrected standard deviation; 0.0 for fewer than 2 values."""
    values = np.asarray(series, dtype=float)
    if values.size < 2:
        return 0.0
    return float(np.std(values, ddof=1))


def pearson_correlation(x: Sequence[float] | np.ndarray, y: Sequence[float] | np.ndarray) -> float:
    """Pearson correlation coefficient of two equal-length series.

    Returns 0.0 when either series has zero variance. The result is clipped
    to [-1, 1] to absorb floating point drift.

    Raises:
        ValueError: If the inputs are empty or of different lengths
    """
    x_arr = np.asarray(x, dtype=float)
    y_arr = np.asarray(y, dtype=float)

    if x_arr.size == 0 or x_arr.size != y_arr.size:
        raise ValueError(
            f"Correlation needs equal-length non-empty inputs, got {x_arr.size} and {y_arr.size}"
        )

    dx = x_arr - x_arr.mean()
    dy = y_arr - y_arr.mean()
    denominator = float(np.sum(dx * dx) * np.sum(dy * dy))
    if denominator == 0:
        return 0.0

    corr = float(np.sum(dx * dy)) / math.sqrt(denominator)
    return max(-1.0, min(1.0, corr))


def percentile(series: Sequence[float] | np.ndarray, p: float) -> float:
    """Percentile with linear interpolation between order statistics.

    p=0 gives the minimum, p=100 the maximum; an empty series gives 0.0.

    Raises:
        ValueError: If p is outside [0, 100]
    """
    if not 0 <= p <= 100:
        raise ValueError(f"Percentile must be between 0 and 100, got {p}")

    values = np.asarray(series, dtype=float)
    if values.size == 0:
        return 0.0
    return float(np.percentile(values, p, method="linear"))
