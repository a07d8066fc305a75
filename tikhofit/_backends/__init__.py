"""
Linear-algebra backends.

The regularization core hands QR, Cholesky, SVD and triangular solves to a
backend: SciPy/LAPACK on the CPU, or torch.linalg in FP64 on a CUDA device.
"""

from typing import Optional

from .base import BackendBase
from .cpu_fp64_backend import CPUBackendFP64
from .precision_detector import detect_gpu_capabilities

# torch is optional; the backend module imports it again on construction
try:
    import torch  # noqa: F401
    PYTORCH_FP64_AVAILABLE = True
except ImportError:
    PYTORCH_FP64_AVAILABLE = False

BACKENDS = ('auto', 'cpu', 'pytorch')


def get_backend(backend: str = 'auto', device: Optional[str] = None) -> BackendBase:
    """
    Get computational backend.

    Parameters
    ----------
    backend : str
        - 'auto': PyTorch on a full-rate FP64 GPU, otherwise CPU
        - 'cpu': NumPy/SciPy
        - 'pytorch': torch.linalg in FP64
    device : str, optional
        Torch device for the 'pytorch' backend (default: CUDA if available)

    Returns
    -------
    BackendBase

    Examples
    --------
    >>> backend = get_backend('cpu')
    >>> work = Workspace(1000, 20, backend=backend)
    """
    if backend not in BACKENDS:
        raise ValueError(
            f"Unknown backend: '{backend}'\n"
            f"Valid options: {', '.join(repr(b) for b in BACKENDS)}"
        )

    if backend == 'auto':
        use_gpu = PYTORCH_FP64_AVAILABLE and detect_gpu_capabilities().recommended_fp64
        backend = 'pytorch' if use_gpu else 'cpu'

    if backend == 'cpu':
        return CPUBackendFP64()

    if not PYTORCH_FP64_AVAILABLE:
        raise RuntimeError(
            "PyTorch backend unavailable.\n"
            "Install: pip install tikhofit[gpu]"
        )
    from .gpu_fp64_backend import PyTorchBackendFP64
    return PyTorchBackendFP64(device=device)


def list_available_backends() -> list:
    """Names accepted by get_backend besides 'auto'."""
    return ['cpu', 'pytorch'] if PYTORCH_FP64_AVAILABLE else ['cpu']


def print_backend_info():
    """Print available backends and the detected GPU (diagnostic)."""
    caps = detect_gpu_capabilities()

    print("tikhofit Backend Status")
    print("=" * 50)
    print("  cpu      CPU, LAPACK via SciPy (FP64)")
    torch_state = "torch.linalg (FP64)" if PYTORCH_FP64_AVAILABLE else "not installed"
    print(f"  pytorch  {torch_state}")

    if caps.has_gpu:
        major, minor = caps.compute_capability
        print(f"\nGPU: {caps.gpu_name} (compute {major}.{minor}, {caps.fp64_support.value})")
    else:
        print("\nGPU: none detected")

    print(f"\nAuto selects: {get_backend('auto').name}")


__all__ = [
    'BACKENDS',
    'BackendBase',
    'get_backend',
    'list_available_backends',
    'print_backend_info',
    'detect_gpu_capabilities',
    'PYTORCH_FP64_AVAILABLE',
]
