"""
Back transformation of standard-form solutions.

Inverse of the transformations in stdform.py: maps cs back to the
solution c of the original regularized problem.
"""

import numpy as np
from typing import Optional

from .workspace import Workspace
from .._utils import check_array, check_vector, check_output, check_not_workspace
from ..errors import DomainError, LengthMismatchError


def genform_diagonal(
    L: np.ndarray,
    cs: np.ndarray,
    work: Workspace,
    c: Optional[np.ndarray] = None,
) -> np.ndarray:
    """
    Back transform with a diagonal regularization matrix: c = L^{-1} cs.

    ``c`` may be ``cs``.
    """
    L = check_vector(L, 'L')
    cs = check_vector(cs, 'cs')

    if L.size > work.pmax:
        raise LengthMismatchError("L vector does not match workspace")
    if L.size != cs.size:
        raise LengthMismatchError("cs vector does not match L")
    c = check_output(c, (L.size,), 'c')
    check_not_workspace(work, L=L, cs=cs, c=c)

    if np.any(L == 0.0):
        raise DomainError("L matrix is singular")

    np.divide(cs, L, out=c)
    return c


def genform_general(
    L: np.ndarray,
    X: np.ndarray,
    y: np.ndarray,
    cs: np.ndarray,
    M: np.ndarray,
    work: Workspace,
    c: Optional[np.ndarray] = None,
) -> np.ndarray:
    """
    Back transform with a general m-by-p regularization matrix.

    Parameters
    ----------
    L : ndarray, shape (m, p)
        Regularization matrix passed to stdform_general
    X : ndarray, shape (n, p)
        Original least-squares matrix
    y : ndarray, shape (n,)
        Original right-hand side
    cs : ndarray
        Standard-form solution, length p (m >= p) or m (m < p)
    M : ndarray
        Reconstruction matrix from stdform_general
    work : Workspace
        The workspace used by stdform_general (m < p reads ``work.Linv``)
    c : ndarray, shape (p,), optional
        Output array

    Returns
    -------
    c : ndarray, shape (p,)

    Notes
    -----
    For m >= p, R c = cs is solved with R = M[:p, :p].

    For m < p,

        c = L_inv cs + M (y - X L_inv cs)

    adds the component of the solution in the null space of L, which
    the standard-form problem does not see.
    """
    L = check_array(L, 'L')
    X = check_array(X, 'X')
    y = check_vector(y, 'y')
    cs = check_vector(cs, 'cs')
    M = check_array(M, 'M')
    m = L.shape[0]
    n, p = X.shape

    work.check_bounds(n, p, "X matrix")
    if p != L.shape[1]:
        raise LengthMismatchError("L matrix does not match X")
    if n != y.size:
        raise LengthMismatchError("y vector does not match X")
    c = check_output(c, (p,), 'c')

    if m >= p:
        if cs.size != p:
            raise LengthMismatchError("cs vector must be length p")
        if M.shape != (m, p):
            raise LengthMismatchError("M matrix must be m-by-p")
        check_not_workspace(work, L=L, X=X, y=y, cs=cs, M=M, c=c)

        R = M[:p, :p]
        if np.any(np.diag(R) == 0.0):
            raise DomainError("R factor of L is singular")

        c[...] = work.backend.solve_triangular(R, cs)
        return c

    if cs.size != m:
        raise LengthMismatchError("cs vector must be length m")
    if M.shape != (p, n):
        raise LengthMismatchError("M matrix must be size p-by-n")
    check_not_workspace(work, L=L, X=X, y=y, cs=cs, M=M, c=c)

    Linv = work.Linv[:p, :m]
    Linv_cs = work.xt[:p]
    workn = work.t[:n]

    np.matmul(Linv, cs, out=Linv_cs)

    # workn = y - X L_inv cs
    np.matmul(X, Linv_cs, out=workn)
    np.subtract(y, workn, out=workn)

    np.matmul(M, workn, out=c)
    c += Linv_cs
    return c
