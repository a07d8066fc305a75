"""
L-curve analysis for choosing the regularization parameter.

References
----------
[1] P. C. Hansen & D. P. O'Leary, "The use of the L-curve in the
    regularization of discrete ill-posed problems", SIAM J. Sci.
    Comput. 14 (1993), pp. 1487-1503.
[2] P. C. Hansen, "Discrete Inverse Problems: Insight and Algorithms",
    SIAM, 2010.
[3] M. Rezghi and S. M. Hosseini, "A new variant of L-curve for Tikhonov
    regularization", J. Comp. App. Math. 231 (2009).
"""

import numpy as np
import pandas as pd
from dataclasses import dataclass
from typing import Optional

from .workspace import Workspace
from .svd_solver import _require_svd
from .._utils import check_vector, check_output, check_not_workspace
from ..errors import (
    DegenerateGeometryError,
    DomainError,
    InvalidArgumentError,
    LengthMismatchError,
)

# smallest regularization parameter relative to smax
SMIN_RATIO = 16.0 * np.finfo(np.float64).eps

# L-curve points when neither npoints nor output arrays are given
DEFAULT_NPOINTS = 100


def _point_count(npoints) -> int:
    if isinstance(npoints, bool) or not isinstance(npoints, (int, np.integer)):
        raise LengthMismatchError(f"npoints must be an integer, got {npoints!r}")
    return int(npoints)


@dataclass
class LCurve:
    """Points of the L-curve, index-aligned with the parameter grid."""
    reg_param: np.ndarray   # Regularization parameters, decreasing
    rho: np.ndarray         # Residual norms ||y - X c||
    eta: np.ndarray         # Solution norms ||c||

    def __len__(self):
        return self.reg_param.size

    def to_frame(self) -> pd.DataFrame:
        """L-curve as a DataFrame with columns lambda, rho, eta."""
        return pd.DataFrame({
            'lambda': self.reg_param,
            'rho': self.rho,
            'eta': self.eta,
        })


def regularization_grid(
    smin: float,
    smax: float,
    npoints: Optional[int] = None,
    out: Optional[np.ndarray] = None,
) -> np.ndarray:
    """
    Logarithmically spaced regularization parameters for L-curve analysis.

    Parameters
    ----------
    smin : float
        Smallest singular value of the least-squares matrix
    smax : float
        Largest singular value, must be positive
    npoints : int, optional
        Number of parameters N (taken from ``out`` when omitted)
    out : ndarray, shape (N,), optional
        Output array

    Returns
    -------
    reg_param : ndarray, shape (N,)
        Strictly decreasing; reg_param[-1] = max(smin, 16 eps smax) and
        reg_param[0] = smax up to rounding.
    """
    if smax <= 0.0:
        raise DomainError("smax must be positive")
    if out is None and npoints is None:
        raise InvalidArgumentError("either npoints or out must be given")

    N = out.size if out is not None else _point_count(npoints)
    if npoints is not None and _point_count(npoints) != N:
        raise LengthMismatchError("npoints does not match size of out")
    if N < 3:
        raise LengthMismatchError("at least 3 points are needed for L-curve analysis")
    out = check_output(out, (N,), 'reg_param')

    new_smin = max(smin, smax * SMIN_RATIO)
    ratio = (smax / new_smin) ** (1.0 / (N - 1.0))

    out[N - 1] = new_smin
    for i in range(N - 2, -1, -1):
        out[i] = ratio * out[i + 1]

    return out


def lcurve(
    y: np.ndarray,
    work: Workspace,
    npoints: Optional[int] = None,
    reg_param: Optional[np.ndarray] = None,
    rho: Optional[np.ndarray] = None,
    eta: Optional[np.ndarray] = None,
) -> LCurve:
    """
    Compute the L-curve of the system whose SVD is stored in ``work``.

    Parameters
    ----------
    y : ndarray, shape (n,)
        Right-hand side; n must match the stored SVD
    work : Workspace
        Workspace after svd_decompose
    npoints : int, optional
        Number of points N. Defaults to the size of the output arrays,
        or DEFAULT_NPOINTS (100) when none are given.
    reg_param, rho, eta : ndarray, shape (N,), optional
        Output arrays; their sizes must agree with each other and with
        npoints.

    Returns
    -------
    LCurve

    Notes
    -----
    When n > p, part of y lies outside the range of U, so every residual
    norm is corrected with the energy ||y||^2 - ||U^T y||^2 (eqs. 6-7
    of [1]).
    """
    _require_svd(work)
    y = check_vector(y, 'y')
    n = y.size
    p = work.p

    if n != work.n:
        raise LengthMismatchError("y vector does not match workspace")

    sizes = [a.size for a in (reg_param, rho, eta) if a is not None]
    if npoints is not None:
        N = _point_count(npoints)
    elif sizes:
        N = sizes[0]
    else:
        N = DEFAULT_NPOINTS
    if N < 3:
        raise LengthMismatchError("at least 3 points are needed for L-curve analysis")
    if any(size != N for size in sizes):
        if npoints is not None:
            raise LengthMismatchError("npoints does not match size of output arrays")
        raise LengthMismatchError("size of reg_param, rho and eta vectors do not match")

    reg_param = check_output(reg_param, (N,), 'reg_param')
    rho = check_output(rho, (N,), 'rho')
    eta = check_output(eta, (N,), 'eta')
    check_not_workspace(work, y=y, reg_param=reg_param, rho=rho, eta=eta)

    U = work.A[:n, :p]
    s = work.S[:p]
    xt = work.xt[:p]
    f = work.QSI[:p, 0]
    g = work.D[:p]

    try:
        np.matmul(U.T, y, out=xt)

        normy = np.linalg.norm(y)
        normUTy = np.linalg.norm(xt)
        dr = normy * normy - normUTy * normUTy

        regularization_grid(s[p - 1], s[0], out=reg_param)

        for i in range(N):
            lam_sq = reg_param[i] * reg_param[i]

            # f = s / (s^2 + lambda^2)
            np.multiply(s, s, out=g)
            g += lam_sq
            np.divide(s, g, out=f)

            # g = (1 - s f) xt
            np.multiply(s, f, out=g)
            np.subtract(1.0, g, out=g)
            g *= xt

            f *= xt

            eta[i] = np.linalg.norm(f)
            rho[i] = np.linalg.norm(g)

        if n > p and dr > 0.0:
            np.square(rho, out=rho)
            rho += dr
            np.sqrt(rho, out=rho)
    finally:
        work.reset_identity()

    return LCurve(reg_param, rho, eta)


def _min_radius_index(x: np.ndarray, y: np.ndarray) -> int:
    """
    Index of the point of maximum curvature of the curve (x, y).

    For each interior point the circle through it and its two neighbours
    is fitted; the smallest radius marks the sharpest bend. Near-colinear
    triples give non-finite radii and are skipped.
    """
    with np.errstate(divide='ignore', invalid='ignore', over='ignore'):
        x21 = x[1:-1] - x[:-2]
        y21 = y[1:-1] - y[:-2]
        x31 = x[2:] - x[:-2]
        y31 = y[2:] - y[:-2]
        x32 = x[2:] - x[1:-1]
        y32 = y[2:] - y[1:-1]

        h21 = x21 * x21 + y21 * y21
        h31 = x31 * x31 + y31 * y31
        h32 = x32 * x32 + y32 * y32
        d = np.abs(2.0 * (x21 * y31 - x31 * y21))
        r = np.sqrt(h21 * h31 * h32) / d

    finite = np.isfinite(r)
    if not np.any(finite):
        # possibly co-linear points
        raise DegenerateGeometryError("failed to find minimum radius")

    # argmin returns the first occurrence on ties
    return int(np.argmin(np.where(finite, r, np.inf))) + 1


def _check_curve(a, b, names):
    # non-finite samples are allowed; they only disqualify their triples
    a = np.asarray(a, dtype=np.float64)
    b = np.asarray(b, dtype=np.float64)
    if a.ndim != 1 or b.ndim != 1:
        raise LengthMismatchError(f"{names[0]} and {names[1]} must be 1-dimensional")
    if a.size < 3:
        raise LengthMismatchError("at least 3 points are needed for L-curve analysis")
    if a.size != b.size:
        raise LengthMismatchError(f"size of {names[0]} and {names[1]} vectors do not match")
    return a, b


def lcorner(rho: np.ndarray, eta: np.ndarray) -> int:
    """
    Point of maximum curvature on the L-curve (log rho, log eta).

    Parameters
    ----------
    rho : ndarray, shape (N,)
        Residual norms ||y - X c||
    eta : ndarray, shape (N,)
        Solution norms ||L c||

    Returns
    -------
    idx : int
        Index into rho/eta (and the matching reg_param)

    Raises
    ------
    DegenerateGeometryError
        If no finite curvature radius exists
    """
    rho, eta = _check_curve(rho, eta, ('rho', 'eta'))
    with np.errstate(divide='ignore', invalid='ignore'):
        x = np.log(rho)
        y = np.log(eta)
    return _min_radius_index(x, y)


def lcorner_squared(reg_param: np.ndarray, eta: np.ndarray) -> int:
    """
    Point of maximum curvature on the curve (lambda^2, eta^2) of [3].

    Parameters
    ----------
    reg_param : ndarray, shape (N,)
        Regularization parameters
    eta : ndarray, shape (N,)
        Solution norms ||L c||

    Returns
    -------
    idx : int
        Index into reg_param/eta
    """
    reg_param, eta = _check_curve(reg_param, eta, ('reg_param', 'eta'))
    return _min_radius_index(reg_param * reg_param, eta * eta)
