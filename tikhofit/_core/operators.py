"""
Regularization matrices.

difference_operator builds discrete derivative operators on a regular
grid; sobolev_operator combines several of them into one square
smoothing-norm operator.
"""

import numpy as np
from typing import Optional

from .workspace import Workspace
from .._utils import check_vector, check_output, check_not_workspace
from ..errors import LengthMismatchError, NotSquareError

MAX_DERIVATIVE_ORDER = 100


def _difference_coefficients(k: int) -> np.ndarray:
    """Coefficients of the k-th forward difference, e.g. [1, -2, 1] for k=2."""
    c = np.zeros(k + 1)
    c[0] = -1.0
    c[1] = 1.0
    for _ in range(1, k):
        c = np.concatenate(([0.0], c[:-1])) - c
    return c


def difference_operator(p: int, k: int, out: Optional[np.ndarray] = None) -> np.ndarray:
    """
    Discrete k-th derivative operator on a regular grid of p points.

    Parameters
    ----------
    p : int
        Number of grid points (columns)
    k : int
        Derivative order, 0 <= k < p
    out : ndarray, shape (p - k, p), optional
        Output array

    Returns
    -------
    L : ndarray, shape (p - k, p)
        Identity for k = 0; otherwise row i holds the k-th difference
        coefficients starting at column i.

    Examples
    --------
    >>> difference_operator(4, 1)
    array([[-1.,  1.,  0.,  0.],
           [ 0., -1.,  1.,  0.],
           [ 0.,  0., -1.,  1.]])
    """
    p = int(p)
    k = int(k)
    if k < 0:
        raise LengthMismatchError("derivative order must be non-negative")
    if p <= k:
        raise LengthMismatchError("p must be larger than derivative order")
    if k >= MAX_DERIVATIVE_ORDER - 1:
        raise LengthMismatchError("derivative order k too large")
    out = check_output(out, (p - k, p), 'L')

    out.fill(0.0)
    rows = np.arange(p - k)

    if k == 0:
        out[rows, rows] = 1.0
        return out

    c = _difference_coefficients(k)
    for i in range(k + 1):
        out[rows, rows + i] = c[i]

    return out


def sobolev_operator(
    p: int,
    kmax: int,
    alpha: np.ndarray,
    work: Workspace,
    out: Optional[np.ndarray] = None,
) -> np.ndarray:
    """
    Sobolev smoothing-norm operator.

    Returns the upper triangular p-by-p matrix L with

        L^T L = sum_{k=0}^{kmax} alpha_k^2 L_k^T L_k,   L_0 = I,

    so that ||L c|| is the norm of the stacked operator
    [alpha_0 I; alpha_1 L_1; ...; alpha_kmax L_kmax] applied to c.

    Parameters
    ----------
    p : int
        Number of columns, kmax < p <= work.pmax
    kmax : int
        Maximum derivative order
    alpha : ndarray, shape (kmax + 1,)
        Weight of each derivative order
    work : Workspace
        Scratch for the intermediate L_k and the Gram matrix
    out : ndarray, shape (p, p), optional
        Output array; left untouched on failure

    Raises
    ------
    LengthMismatchError
        On size mismatches
    NotSquareError
        If out is not square
    DomainError
        If the Gram matrix is not positive definite
    """
    p = int(p)
    kmax = int(kmax)
    alpha = check_vector(alpha, 'alpha')

    if p > work.pmax:
        raise LengthMismatchError("p is larger than workspace")
    if p <= kmax:
        raise LengthMismatchError("p must be larger than derivative order")
    if alpha.size != kmax + 1:
        raise LengthMismatchError("alpha must be size kmax + 1")
    if out is not None:
        if out.ndim != 2 or out.shape[0] != p:
            raise LengthMismatchError("L matrix is wrong size")
        if out.shape[0] != out.shape[1]:
            raise NotSquareError("L matrix is not square")
    out = check_output(out, (p, p), 'L')
    check_not_workspace(work, alpha=alpha, L=out)

    G = work.QSI[:p, :p]
    G.fill(0.0)
    diag = np.arange(p)
    G[diag, diag] = alpha[0] * alpha[0]

    for k in range(1, kmax + 1):
        Lk = difference_operator(p, k, out=work.K[:p - k, :p])
        Lk *= alpha[k]
        G += Lk.T @ Lk

    R = work.backend.cholesky(G)

    out[...] = np.triu(R)
    return out
