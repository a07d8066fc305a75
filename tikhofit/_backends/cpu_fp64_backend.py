"""
CPU backend using NumPy + SciPy.

This is the reference implementation; all factorizations go to LAPACK.
"""

import numpy as np
from scipy.linalg import LinAlgError, cholesky, qr, solve_triangular, svd

from .base import CPUBackend
from ..errors import DomainError


class CPUBackendFP64(CPUBackend):
    """
    CPU backend using NumPy + SciPy.

    Reference implementation.
    Always uses FP64 precision.
    """

    def __init__(self):
        self.name = "cpu_fp64"
        self.precision = "fp64"

    def qr_r(self, A: np.ndarray) -> np.ndarray:
        """Economic R factor via LAPACK geqrf."""
        R, = qr(A, mode='r', check_finite=False)
        return R[:min(A.shape), :]

    def qr_full(self, A: np.ndarray):
        """Complete QR via LAPACK geqrf + orgqr."""
        Q, R = qr(A, mode='full', check_finite=False)
        return Q, R

    def cholesky(self, A: np.ndarray) -> np.ndarray:
        """Upper Cholesky factor via LAPACK potrf."""
        try:
            return cholesky(A, lower=False, check_finite=False)
        except LinAlgError as exc:
            raise DomainError(f"matrix is not positive definite: {exc}") from exc

    def svd(self, A: np.ndarray):
        """Thin SVD via LAPACK gesdd."""
        try:
            return svd(A, full_matrices=False, check_finite=False)
        except LinAlgError as exc:
            raise DomainError(f"SVD did not converge: {exc}") from exc

    def solve_triangular(
        self,
        R: np.ndarray,
        B: np.ndarray,
        trans: bool = False,
        lower: bool = False,
    ) -> np.ndarray:
        """Triangular solve via LAPACK trtrs."""
        try:
            return solve_triangular(
                R, B,
                trans='T' if trans else 'N',
                lower=lower,
                check_finite=False,
            )
        except LinAlgError as exc:
            raise DomainError(f"triangular matrix is singular: {exc}") from exc

    def get_device_info(self) -> dict:
        """Get backend information."""
        import scipy
        return {
            'backend': 'cpu',
            'precision': 'fp64',
            'library': f'NumPy {np.__version__}, SciPy {scipy.__version__}',
        }
