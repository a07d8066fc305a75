"""
Transformation of a regularized least-squares problem to standard form.

The problem

    min ||sqrt(W) (y - X c)||^2 + lambda^2 ||L c||^2

is rewritten as

    min ||ys - Xs cs||^2 + lambda^2 ||cs||^2

so that it can be solved through the SVD of Xs. The solution cs is mapped
back to c with the routines in genform.py.

References
----------
P. C. Hansen, "Discrete Inverse Problems: Insight and Algorithms",
SIAM, 2010.
"""

import numpy as np
from dataclasses import dataclass
from typing import Optional

from .workspace import Workspace
from .._utils import check_array, check_vector, check_output, check_not_workspace
from ..errors import DomainError, LengthMismatchError, UnsupportedCombinationError


@dataclass
class StandardForm:
    """Result of a standard-form transformation."""
    Xs: np.ndarray   # Least-squares matrix in standard form
    ys: np.ndarray   # Right-hand side in standard form
    M: np.ndarray    # Reconstruction matrix for genform_general


def _check_nonsingular(R: np.ndarray, name: str):
    if np.any(np.diag(R) == 0.0):
        raise DomainError(f"{name} is singular")


def _scale_rows(X, y, w, Xs, ys, work):
    """Xs = sqrt(W) X, ys = sqrt(W) y; negative weights count as zero."""
    n = X.shape[0]
    if w is None:
        if Xs is not X:
            Xs[...] = X
        if ys is not y:
            ys[...] = y
        return

    sw = work.t[:n]
    np.clip(w, 0.0, None, out=sw)
    np.sqrt(sw, out=sw)
    np.multiply(X, sw[:, np.newaxis], out=Xs)
    np.multiply(y, sw, out=ys)


def stdform_diagonal(
    X: np.ndarray,
    y: np.ndarray,
    work: Workspace,
    L: Optional[np.ndarray] = None,
    w: Optional[np.ndarray] = None,
    Xs: Optional[np.ndarray] = None,
    ys: Optional[np.ndarray] = None,
):
    """
    Transform to standard form with a diagonal regularization matrix.

    Computes

        Xs = sqrt(W) X L^{-1}
        ys = sqrt(W) y

    Parameters
    ----------
    X : ndarray, shape (n, p)
        Least-squares matrix
    y : ndarray, shape (n,)
        Right-hand side
    work : Workspace
        Workspace with nmax >= n, pmax >= p
    L : ndarray, shape (p,), optional
        Diagonal of the regularization matrix (None for L = I)
    w : ndarray, shape (n,), optional
        Observation weights (None for W = I); negative entries are
        treated as zero
    Xs, ys : ndarray, optional
        Output arrays. ``Xs`` may be ``X`` and ``ys`` may be ``y``.

    Returns
    -------
    (Xs, ys) : tuple of ndarray

    Raises
    ------
    LengthMismatchError
        If shapes disagree or X does not fit in the workspace
    DomainError
        If L has a zero entry
    """
    X = check_array(X, 'X')
    y = check_vector(y, 'y')
    n, p = X.shape

    work.check_bounds(n, p)
    if L is not None:
        L = check_vector(L, 'L')
        if L.size != p:
            raise LengthMismatchError("L vector does not match X")
    if y.size != n:
        raise LengthMismatchError("y vector does not match X")
    if w is not None:
        w = check_vector(w, 'w')
        if w.size != n:
            raise LengthMismatchError("weight vector does not match X")
    Xs = check_output(Xs, (n, p), 'Xs')
    ys = check_output(ys, (n,), 'ys')
    check_not_workspace(work, X=X, y=y, L=L, w=w, Xs=Xs, ys=ys)

    if L is not None and np.any(L == 0.0):
        raise DomainError("L matrix is singular")

    _scale_rows(X, y, w, Xs, ys, work)

    if L is not None:
        Xs /= L

    return Xs, ys


def stdform_general(
    L: np.ndarray,
    X: np.ndarray,
    y: np.ndarray,
    work: Workspace,
    w: Optional[np.ndarray] = None,
    Xs: Optional[np.ndarray] = None,
    ys: Optional[np.ndarray] = None,
    M: Optional[np.ndarray] = None,
) -> StandardForm:
    """
    Transform to standard form with a general m-by-p regularization matrix.

    Case m >= p
        With L = QR, ||L c|| = ||R c||, so
        Xs = sqrt(W) X R^{-1} (n-by-p), ys = sqrt(W) y (n),
        M is m-by-p with M[:p, :p] = R.

    Case m < p
        Xs is (n-p+m)-by-m, ys has length n-p+m, M is p-by-n.
        L^T = K R and X K_o = H T split the problem into a part in the
        null space of L, solved exactly, and a reduced standard-form
        problem. The pseudo-inverse of L is left in ``work.Linv`` for
        genform_general. Weights are not supported in this case. The
        first such call allocates the workspace's wide-L buffers.

    Parameters
    ----------
    L : ndarray, shape (m, p)
        Regularization matrix
    X : ndarray, shape (n, p)
        Least-squares matrix
    y : ndarray, shape (n,)
        Right-hand side
    work : Workspace
        Workspace with nmax >= n, pmax >= p
    w : ndarray, shape (n,), optional
        Observation weights (m >= p only)
    Xs, ys, M : ndarray, optional
        Output arrays with the shapes listed above

    Returns
    -------
    StandardForm

    Raises
    ------
    LengthMismatchError
        If shapes disagree or X does not fit in the workspace
    UnsupportedCombinationError
        If weights are given and m < p
    DomainError
        If L (or X restricted to the null space of L) is singular
    """
    L = check_array(L, 'L')
    X = check_array(X, 'X')
    y = check_vector(y, 'y')
    m = L.shape[0]
    n, p = X.shape
    backend = work.backend

    work.check_bounds(n, p)
    if L.shape[1] != p:
        raise LengthMismatchError("L and X matrices have different numbers of columns")
    if y.size != n:
        raise LengthMismatchError("y vector does not match X")
    if w is not None:
        w = check_vector(w, 'w')
        if w.size != n:
            raise LengthMismatchError("weights vector must be length n")

    if m >= p:
        Xs = check_output(Xs, (n, p), 'Xs')
        ys = check_output(ys, (n,), 'ys')
        M = check_output(M, (m, p), 'M')
        check_not_workspace(work, L=L, X=X, y=y, w=w, Xs=Xs, ys=ys, M=M)

        R = work.K[:p, :p]
        R[...] = backend.qr_r(L)
        _check_nonsingular(R, "L matrix")

        _scale_rows(X, y, w, Xs, ys, work)

        # Xs = Xs R^{-1}: solve R^T v = x_i for each row x_i
        Xs[...] = backend.solve_triangular(R, Xs.T, trans=True).T

        M.fill(0.0)
        M[:p, :p] = R

        return StandardForm(Xs, ys, M)

    # wide L
    pm = p - m
    npm = n - pm

    if w is not None:
        raise UnsupportedCombinationError(
            "weights not yet supported for general L with fewer rows than columns"
        )
    if npm < 1:
        raise LengthMismatchError(
            f"X must have more than p - m = {pm} rows for this L"
        )
    Xs = check_output(Xs, (npm, m), 'Xs')
    ys = check_output(ys, (npm,), 'ys')
    M = check_output(M, (p, n), 'M')
    check_not_workspace(work, L=L, X=X, y=y, Xs=Xs, ys=ys, M=M)
    work.reserve_wide()

    # [K, R] = qr(L^T)
    K = work.K[:p, :p]
    K_full, R_full = backend.qr_full(L.T)
    K[...] = K_full
    Rp = R_full[:m, :m]
    _check_nonsingular(Rp, "L matrix")
    Kp = K[:, :m]
    Ko = K[:, m:]

    # [H, T] = qr(X K_o)
    B = work.B[:n, :pm]
    np.matmul(X, Ko, out=B)
    H = work.H[:n, :n]
    H_full, T_full = backend.qr_full(B)
    H[...] = H_full
    To = T_full[:pm, :pm]
    _check_nonsingular(To, "X restricted to the null space of L")
    Ho = H[:, :pm]
    Hq = H[:, pm:]

    # L_inv = K_p R_p^{-T}
    Linv = work.Linv[:p, :m]
    Linv[...] = backend.solve_triangular(Rp, Kp.T).T

    # M1 = inv(T_o) H_o^T
    M1 = work.M1[:pm, :n]
    M1[...] = backend.solve_triangular(To, Ho.T)

    # C = H_q^T X, reusing the storage of B
    C = work.B[:npm, :p]
    np.matmul(Hq.T, X, out=C)

    np.matmul(Hq.T, y, out=ys)
    np.matmul(Ko, M1, out=M)
    np.matmul(C, Linv, out=Xs)

    return StandardForm(Xs, ys, M)
