"""
regression.py
-------------
Closed-form ordinary least squares for one predictor:

    slope     = (n*Sxy - Sx*Sy) / (n*Sxx - Sx^2)
    intercept = mean(y) - slope * mean(x)
"""

from dataclasses import dataclass

import numpy as np
from sklearn.metrics import r2_score

from .errors import DegenerateRegressionError, InsufficientSampleError


@dataclass(frozen=True)
class RegressionResult:
    slope: float
    intercept: float
    n: int
    r_squared: float


def fit(xs, ys) -> RegressionResult:
    x = np.asarray(xs, dtype=float)
    y = np.asarray(ys, dtype=float)
    if x.shape != y.shape:
        raise ValueError(f"xs and ys differ in length: {x.size} vs {y.size}")
    if np.isnan(x).any() or np.isnan(y).any():
        raise ValueError("Drop missing delays before fitting.")

    n = x.size
    if n < 2:
        raise InsufficientSampleError(f"Need at least 2 points to fit a line, got {n}.")

    sum_x, sum_y = x.sum(), y.sum()
    sum_xy, sum_xx = (x * y).sum(), (x * x).sum()
    denominator = n * sum_xx - sum_x * sum_x
    if denominator == 0 or np.ptp(x) == 0:
        raise DegenerateRegressionError("All x values are equal; slope is undefined.")

    slope = (n * sum_xy - sum_x * sum_y) / denominator
    intercept = sum_y / n - slope * sum_x / n
    r_squared = r2_score(y, intercept + slope * x)

    return RegressionResult(slope=float(slope), intercept=float(intercept),
                            n=int(n), r_squared=float(r_squared))


def predict(result: RegressionResult, x):
    """y = intercept + slope * x for a scalar or an array of x."""
    if np.ndim(x):
        return result.intercept + result.slope * np.asarray(x, dtype=float)
    return result.intercept + result.slope * float(x)
