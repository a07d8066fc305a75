"""
GPU backend using PyTorch with FP64 precision.

For data center GPUs: A100, H100, V100.
"""

import numpy as np
import warnings
from typing import Optional

from .base import GPUBackendFP64
from .precision_detector import detect_gpu_capabilities
from ..errors import DomainError


class PyTorchBackendFP64(GPUBackendFP64):
    """
    PyTorch GPU backend with FP64 precision.

    Factorizations run on the device; inputs and outputs are NumPy arrays.
    Only recommended for data center GPUs with full FP64 support.
    """

    def __init__(self, device: Optional[str] = None):
        """Initialize PyTorch FP64 backend."""
        self.name = "pytorch_fp64"
        self.precision = "fp64"

        try:
            import torch
            self.torch = torch
        except ImportError:
            raise ImportError(
                "PyTorch required for GPU backend. "
                "Install: pip install torch"
            )

        # Device selection (no Metal for FP64)
        if device == 'mps':
            raise RuntimeError(
                "FP64 not supported on Apple Metal. "
                "Use CPU backend."
            )

        if device is None:
            if torch.cuda.is_available():
                device = 'cuda'
            else:
                warnings.warn("No CUDA GPU available, using CPU")
                device = 'cpu'

        self.device = torch.device(device)

        if self.device.type == 'cuda':
            caps = detect_gpu_capabilities()
            if not caps.recommended_fp64:
                warnings.warn(
                    f"{caps.gpu_name} runs FP64 at about "
                    f"1/{int(1 / caps.fp64_throughput_ratio)} of its FP32 rate; "
                    f"the CPU backend may be faster.",
                    UserWarning
                )

    def _to_device(self, a: np.ndarray):
        return self.torch.from_numpy(np.ascontiguousarray(a, dtype=np.float64)).to(self.device)

    @staticmethod
    def _to_numpy(t) -> np.ndarray:
        return t.cpu().numpy()

    def qr_r(self, A: np.ndarray) -> np.ndarray:
        """Economic R factor."""
        _, R = self.torch.linalg.qr(self._to_device(A), mode='r')
        return self._to_numpy(R)

    def qr_full(self, A: np.ndarray):
        """Complete QR decomposition."""
        Q, R = self.torch.linalg.qr(self._to_device(A), mode='complete')
        return self._to_numpy(Q), self._to_numpy(R)

    def cholesky(self, A: np.ndarray) -> np.ndarray:
        """Upper Cholesky factor."""
        L, info = self.torch.linalg.cholesky_ex(self._to_device(A))
        if int(info.item()) != 0:
            raise DomainError(
                f"matrix is not positive definite "
                f"(leading minor {int(info.item())} fails)"
            )
        return self._to_numpy(L.mT)

    def svd(self, A: np.ndarray):
        """Thin SVD."""
        U, s, Vh = self.torch.linalg.svd(self._to_device(A), full_matrices=False)
        return self._to_numpy(U), self._to_numpy(s), self._to_numpy(Vh)

    def solve_triangular(
        self,
        R: np.ndarray,
        B: np.ndarray,
        trans: bool = False,
        lower: bool = False,
    ) -> np.ndarray:
        """Triangular solve; vectors are treated as a single column."""
        torch = self.torch
        R_gpu = self._to_device(R)
        B_gpu = self._to_device(B)
        is_vector = B_gpu.ndim == 1
        if is_vector:
            B_gpu = B_gpu.unsqueeze(1)

        upper = not lower
        if trans:
            R_gpu = R_gpu.mT
            upper = not upper

        X = torch.linalg.solve_triangular(R_gpu, B_gpu, upper=upper)
        if is_vector:
            X = X.squeeze(1)
        return self._to_numpy(X)

    def get_device_info(self) -> dict:
        """Get backend information."""
        return {
            'backend': 'gpu',
            'precision': 'fp64',
            'device': str(self.device),
            'library': f'PyTorch {self.torch.__version__}',
        }
