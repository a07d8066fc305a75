"""
Preallocated scratch arena for regularized least-squares fits.

One Workspace is sized for a maximum problem shape and reused across
many fits. The buffers every fit needs are views into a single float64
allocation made at construction time; its size is O(nmax * pmax).

The buffers used only when the regularization matrix has fewer rows than
columns include an nmax-by-nmax matrix. They live in a second arena that
is allocated on the first such transform and reused afterwards, so tall
fits with diagonal or square L never pay for it.

A Workspace is not reentrant: run one computation against it at a
time. Concurrent fits need separate Workspace instances.
"""

import numpy as np

from ..errors import LengthMismatchError


def _carve(arena, layout, dims, owner):
    offset = 0
    for name, *shape in layout:
        shape = tuple(dims[s] for s in shape)
        size = int(np.prod(shape))
        setattr(owner, name, arena[offset:offset + size].reshape(shape))
        offset += size


def _arena_size(layout, dims):
    return sum(int(np.prod([dims[s] for s in shape])) for _, *shape in layout)


class Workspace:
    """
    Scratch storage for problems of up to nmax observations and pmax
    parameters.

    Buffers
    -------
    A : (nmax, pmax)
        Left singular vectors U of the standard-form matrix
    Q : (pmax, pmax)
        Right singular vectors V
    QSI : (pmax, pmax)
        General scratch (L-curve filter factors, Sobolev Gram matrix)
    Linv : (pmax, pmax)
        Pseudo-inverse of a wide regularization matrix
    K : (pmax, pmax)
        Orthogonal factor of L^T, or the R factor of a tall L
    S, xt, D : (pmax,)
        Singular values, projection U^T y, and a vector kept at all ones
    t : (nmax,)
        Length-n scratch vector

    Wide-L buffers (None until reserve_wide runs)
    ---------------------------------------------
    H : (nmax, nmax)
        Orthogonal factor of X K_o
    B : (nmax, pmax)
        X K_o, later H_q^T X
    M1 : (pmax, nmax)
        inv(T_o) H_o^T

    Attributes
    ----------
    n, p : int
        Shape of the matrix whose SVD is currently stored (0 until
        svd_decompose runs).
    backend : BackendBase
        Linear-algebra backend used for factorizations.
    """

    _LAYOUT = (
        ('A', 'nmax', 'pmax'),
        ('Q', 'pmax', 'pmax'),
        ('QSI', 'pmax', 'pmax'),
        ('Linv', 'pmax', 'pmax'),
        ('K', 'pmax', 'pmax'),
        ('S', 'pmax'),
        ('xt', 'pmax'),
        ('D', 'pmax'),
        ('t', 'nmax'),
    )
    _WIDE_LAYOUT = (
        ('H', 'nmax', 'nmax'),
        ('B', 'nmax', 'pmax'),
        ('M1', 'pmax', 'nmax'),
    )

    def __init__(self, nmax: int, pmax: int, backend=None):
        if nmax < 1 or pmax < 1:
            raise LengthMismatchError("workspace dimensions must be positive")

        if backend is None:
            from .._backends import get_backend
            backend = get_backend('cpu')

        self.nmax = int(nmax)
        self.pmax = int(pmax)
        self.n = 0
        self.p = 0
        self.backend = backend

        self._dims = {'nmax': self.nmax, 'pmax': self.pmax}
        self._arena = np.zeros(_arena_size(self._LAYOUT, self._dims), dtype=np.float64)
        _carve(self._arena, self._LAYOUT, self._dims, self)

        self._wide_arena = None
        self.H = self.B = self.M1 = None

        self.D.fill(1.0)

    def reserve_wide(self):
        """Allocate H, B and M1 on first use; later calls are no-ops."""
        if self._wide_arena is None:
            self._wide_arena = np.zeros(
                _arena_size(self._WIDE_LAYOUT, self._dims), dtype=np.float64
            )
            _carve(self._wide_arena, self._WIDE_LAYOUT, self._dims, self)

    @property
    def has_wide(self) -> bool:
        """True once the wide-L buffers exist."""
        return self._wide_arena is not None

    @property
    def nbytes(self) -> int:
        """Size of the allocated arenas in bytes."""
        total = self._arena.nbytes
        if self._wide_arena is not None:
            total += self._wide_arena.nbytes
        return total

    def owns(self, arr: np.ndarray) -> bool:
        """True if arr may share memory with either arena."""
        if not isinstance(arr, np.ndarray):
            return False
        if np.may_share_memory(arr, self._arena):
            return True
        return self._wide_arena is not None and np.may_share_memory(arr, self._wide_arena)

    def check_bounds(self, n: int, p: int, what: str = "observation matrix"):
        """Raise LengthMismatchError if an n-by-p problem does not fit."""
        if n > self.nmax or p > self.pmax:
            raise LengthMismatchError(
                f"{what} ({n}x{p}) larger than workspace ({self.nmax}x{self.pmax})"
            )

    def reset_identity(self):
        """Restore D to all ones."""
        self.D.fill(1.0)

    def __repr__(self):
        return (f"Workspace(nmax={self.nmax}, pmax={self.pmax}, "
                f"backend={self.backend.name!r})")
