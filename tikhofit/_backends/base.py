"""
Abstract base classes for backends.

Defines the dense linear-algebra interface the regularization core calls
into. Backends accept and return NumPy float64 arrays; whatever native
types they use internally stay inside the backend.
"""

from abc import ABC, abstractmethod
import numpy as np
from typing import Tuple


class BackendBase(ABC):
    """Abstract base class for all backends."""

    name: str = "base"
    precision: str = "fp64"

    @abstractmethod
    def qr_r(self, A: np.ndarray) -> np.ndarray:
        """
        Upper triangular factor of an economic QR decomposition.

        Parameters
        ----------
        A : ndarray, shape (m, n)

        Returns
        -------
        R : ndarray, shape (min(m, n), n)
        """
        pass

    @abstractmethod
    def qr_full(self, A: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
        """
        Complete QR decomposition A = QR.

        Parameters
        ----------
        A : ndarray, shape (m, n)

        Returns
        -------
        Q : ndarray, shape (m, m)
            Orthogonal factor, explicitly formed
        R : ndarray, shape (m, n)
            Upper trapezoidal factor
        """
        pass

    @abstractmethod
    def cholesky(self, A: np.ndarray) -> np.ndarray:
        """
        Upper Cholesky factor R with A = R^T R.

        Raises
        ------
        DomainError
            If A is not positive definite.
        """
        pass

    @abstractmethod
    def svd(self, A: np.ndarray) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
        """
        Thin singular value decomposition A = U diag(s) Vt.

        Singular values are returned in decreasing order.
        """
        pass

    @abstractmethod
    def solve_triangular(
        self,
        R: np.ndarray,
        B: np.ndarray,
        trans: bool = False,
        lower: bool = False,
    ) -> np.ndarray:
        """
        Solve R X = B (or R^T X = B when trans is True).

        B may be a vector or a matrix of right-hand sides stored as columns.
        """
        pass

    @abstractmethod
    def get_device_info(self) -> dict:
        """Get backend information."""
        pass


class CPUBackend(BackendBase):
    """CPU backend base class (always FP64)."""
    pass


class GPUBackendFP64(BackendBase):
    """GPU backend base class for FP64."""
    pass
