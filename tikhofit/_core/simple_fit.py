"""
Closed-form straight-line least-squares fits.

Unregularized fits of y = c0 + c1 x and y = c1 x, with covariance of the
estimates. Inputs may be strided views (e.g. ``x[::2]``).
"""

import numpy as np
from dataclasses import dataclass

from .._utils import check_vector
from ..errors import LengthMismatchError, DomainError


@dataclass
class SimpleFitResult:
    """Straight-line fit y = c0 + c1 x."""
    c0: float
    c1: float
    cov00: float
    cov01: float
    cov11: float
    sumsq: float    # Residual sum of squares (weighted for fit_wlinear)


def _check_xy(x, y):
    x = check_vector(x, 'x')
    y = check_vector(y, 'y')
    if x.size != y.size:
        raise LengthMismatchError("x and y must have the same length")
    return x, y


def fit_linear(x: np.ndarray, y: np.ndarray) -> SimpleFitResult:
    """
    Fit y = c0 + c1 x by ordinary least squares.

    The covariance is scaled by the residual variance sumsq / (n - 2).
    """
    x, y = _check_xy(x, y)
    n = x.size
    if n < 3:
        raise LengthMismatchError("at least 3 points are needed to estimate covariance")

    mean_x = x.mean()
    mean_y = y.mean()
    dx = x - mean_x
    dy = y - mean_y
    m_dx2 = np.mean(dx * dx)
    m_dxdy = np.mean(dx * dy)
    if m_dx2 == 0.0:
        raise DomainError("x values are all equal")

    b = m_dxdy / m_dx2
    a = mean_y - mean_x * b

    r = y - (a + b * x)
    d2 = float(np.dot(r, r))
    s2 = d2 / (n - 2.0)

    return SimpleFitResult(
        c0=float(a),
        c1=float(b),
        cov00=float(s2 * (1.0 / n) * (1.0 + mean_x * mean_x / m_dx2)),
        cov01=float(s2 * (-mean_x) / (n * m_dx2)),
        cov11=float(s2 * 1.0 / (n * m_dx2)),
        sumsq=d2,
    )


def fit_wlinear(x: np.ndarray, w: np.ndarray, y: np.ndarray) -> SimpleFitResult:
    """
    Fit y = c0 + c1 x by weighted least squares.

    Points with w <= 0 are ignored. The covariance is computed from the
    weights alone (w_i = 1 / sigma_i^2) and is not rescaled.
    """
    x, y = _check_xy(x, y)
    w = check_vector(w, 'w')
    if w.size != x.size:
        raise LengthMismatchError("w must have the same length as x")

    good = w > 0.0
    x = x[good]
    y = y[good]
    w = w[good]
    W = w.sum()
    if W == 0.0:
        raise DomainError("all weights are zero")

    wm_x = np.dot(w, x) / W
    wm_y = np.dot(w, y) / W
    dx = x - wm_x
    dy = y - wm_y
    wm_dx2 = np.dot(w, dx * dx) / W
    wm_dxdy = np.dot(w, dx * dy) / W
    if wm_dx2 == 0.0:
        raise DomainError("x values are all equal")

    b = wm_dxdy / wm_dx2
    a = wm_y - wm_x * b

    r = y - (a + b * x)

    return SimpleFitResult(
        c0=float(a),
        c1=float(b),
        cov00=float((1.0 / W) * (1.0 + wm_x * wm_x / wm_dx2)),
        cov01=float(-wm_x / (W * wm_dx2)),
        cov11=float(1.0 / (W * wm_dx2)),
        sumsq=float(np.dot(w, r * r)),
    )


def fit_mul(x: np.ndarray, y: np.ndarray) -> SimpleFitResult:
    """
    Fit y = c1 x (no intercept) by ordinary least squares.

    c0, cov00 and cov01 are zero in the result.
    """
    x, y = _check_xy(x, y)
    n = x.size
    if n < 2:
        raise LengthMismatchError("at least 2 points are needed to estimate covariance")

    mean_x = x.mean()
    mean_y = y.mean()
    dx = x - mean_x
    m_dx2 = np.mean(dx * dx)
    m_dxdy = np.mean(dx * (y - mean_y))
    m_x2 = mean_x * mean_x + m_dx2
    if m_x2 == 0.0:
        raise DomainError("x values are all zero")

    b = (mean_x * mean_y + m_dxdy) / m_x2

    r = y - b * x
    d2 = float(np.dot(r, r))
    s2 = d2 / (n - 1.0)

    return SimpleFitResult(
        c0=0.0,
        c1=float(b),
        cov00=0.0,
        cov01=0.0,
        cov11=float(s2 * 1.0 / (n * m_x2)),
        sumsq=d2,
    )
