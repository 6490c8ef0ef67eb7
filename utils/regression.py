from typing import Sequence

import numpy as np


def fit_least_squares(
    x: Sequence[float], y: Sequence[float]
) -> tuple[float, float]:
    """
    Fits y = slope * x + intercept by ordinary least squares using the closed-form
    solution. Returns NaN for both parameters when x has no variance.
    """
    xs = np.asarray(x, dtype=float)
    ys = np.asarray(y, dtype=float)
    if xs.size < 2 or xs.size != ys.size:
        return float("nan"), float("nan")

    # Centering keeps the sums well conditioned for large x values such as epoch times.
    x_mean = xs.mean()
    y_mean = ys.mean()
    dx = xs - x_mean
    sxx = np.sum(dx * dx)
    sxy = np.sum(dx * (ys - y_mean))
    if sxx == 0:
        return float("nan"), float("nan")

    slope = sxy / sxx
    intercept = y_mean - slope * x_mean
    return float(slope), float(intercept)
