"""
SVD-based solution of standard-form Tikhonov problems.

svd_decompose stores the SVD of the standard-form matrix in the
workspace; solve_regularized and lcurve read it from there.
"""

import numpy as np
from dataclasses import dataclass
from typing import Optional

from .workspace import Workspace
from .._utils import check_array, check_vector, check_output, check_not_workspace
from ..errors import DomainError, LengthMismatchError, InvalidArgumentError


@dataclass
class RegularizedSolution:
    """Solution of min ||y - X c||^2 + lambda^2 ||c||^2."""
    coef: np.ndarray   # Solution vector c
    rnorm: float       # Residual norm ||y - X c||
    snorm: float       # Solution norm ||c||
    rank: int          # Number of singular values used


def svd_decompose(X: np.ndarray, work: Workspace) -> Workspace:
    """
    Compute the thin SVD X = U diag(S) V^T into the workspace.

    On return ``work.A[:n, :p]`` holds U, ``work.S[:p]`` the singular
    values in decreasing order, ``work.Q[:p, :p]`` holds V, and
    ``work.n``, ``work.p`` record the shape.

    Parameters
    ----------
    X : ndarray, shape (n, p), n >= p
        Standard-form least-squares matrix
    work : Workspace

    Returns
    -------
    work : Workspace
    """
    X = check_array(X, 'X')
    n, p = X.shape

    work.check_bounds(n, p)
    if n < p:
        raise LengthMismatchError(
            f"X must have at least as many rows as columns, got {n}x{p}"
        )
    check_not_workspace(work, X=X)

    U, s, Vt = work.backend.svd(X)

    work.A[:n, :p] = U
    work.S[:p] = s
    work.Q[:p, :p] = Vt.T
    work.n = n
    work.p = p

    return work


def _require_svd(work: Workspace):
    if work.p == 0:
        raise InvalidArgumentError(
            "SVD not available; call svd_decompose on this workspace first"
        )


def solve_regularized(
    lam: float,
    X: np.ndarray,
    y: np.ndarray,
    work: Workspace,
    c: Optional[np.ndarray] = None,
) -> RegularizedSolution:
    """
    Solve the standard-form problem for one regularization parameter.

    Parameters
    ----------
    lam : float
        Regularization parameter lambda >= 0. With lam == 0 the
        truncated pseudo-inverse is used, dropping singular values
        below eps * s_max.
    X : ndarray, shape (n, p)
        The matrix passed to svd_decompose
    y : ndarray, shape (n,)
        Right-hand side
    work : Workspace
        Workspace holding the SVD of X
    c : ndarray, shape (p,), optional
        Output array

    Returns
    -------
    RegularizedSolution
    """
    _require_svd(work)
    X = check_array(X, 'X')
    y = check_vector(y, 'y')
    n, p = X.shape

    if lam < 0.0:
        raise DomainError("regularization parameter must be non-negative")
    if (n, p) != (work.n, work.p):
        raise LengthMismatchError("X matrix does not match stored SVD")
    if y.size != n:
        raise LengthMismatchError("y vector does not match X")
    c = check_output(c, (p,), 'c')
    check_not_workspace(work, X=X, y=y, c=c)

    U = work.A[:n, :p]
    V = work.Q[:p, :p]
    s = work.S[:p]
    xt = work.xt[:p]
    f = work.QSI[:p, 0]

    np.matmul(U.T, y, out=xt)

    if lam == 0.0:
        tol = np.finfo(np.float64).eps * s[0]
        keep = s > tol
        rank = int(np.count_nonzero(keep))
        f.fill(0.0)
        np.divide(1.0, s, out=f, where=keep)
    else:
        rank = p
        np.divide(s, s * s + lam * lam, out=f)

    f *= xt
    np.matmul(V, f, out=c)

    # r = y - X c
    r = work.t[:n]
    np.matmul(X, c, out=r)
    np.subtract(y, r, out=r)

    return RegularizedSolution(
        coef=c,
        rnorm=float(np.linalg.norm(r)),
        snorm=float(np.linalg.norm(c)),
        rank=rank,
    )
