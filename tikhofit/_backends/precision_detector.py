"""
FP64 capability check for CUDA devices.

Regularized fits need double precision: the L-curve grid reaches down to
16*eps*smax. get_backend('auto') picks the GPU only when it runs FP64 at
half the FP32 rate, which NVIDIA reserves for its data-center parts.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple

# Compute capabilities with a 1:2 FP64:FP32 rate (P100, V100/Titan V,
# A100, H100, B100/B200). Every other part runs FP64 at 1/32 or 1/64.
FULL_RATE_FP64 = frozenset({(6, 0), (7, 0), (8, 0), (9, 0), (10, 0)})


class PrecisionSupport(Enum):
    """FP64 support level of the detected device."""
    NO_GPU = "no_gpu"
    GIMPED_FP64 = "gimped_fp64"
    FULL_FP64 = "full_fp64"


@dataclass
class GPUCapabilities:
    """CUDA device 0 as seen by torch."""
    gpu_name: str
    compute_capability: Optional[Tuple[int, int]]
    fp64_support: PrecisionSupport

    @property
    def has_gpu(self) -> bool:
        return self.fp64_support is not PrecisionSupport.NO_GPU

    @property
    def recommended_fp64(self) -> bool:
        return self.fp64_support is PrecisionSupport.FULL_FP64

    @property
    def fp64_throughput_ratio(self) -> float:
        """Approximate FP64/FP32 throughput."""
        if self.fp64_support is PrecisionSupport.FULL_FP64:
            return 0.5
        if self.fp64_support is PrecisionSupport.GIMPED_FP64:
            return 1 / 64 if self.compute_capability[0] >= 8 else 1 / 32
        return 0.0


def classify_compute_capability(capability: Tuple[int, int]) -> PrecisionSupport:
    """FP64 support level for a CUDA compute capability (major, minor)."""
    if tuple(capability) in FULL_RATE_FP64:
        return PrecisionSupport.FULL_FP64
    return PrecisionSupport.GIMPED_FP64


def detect_gpu_capabilities() -> GPUCapabilities:
    """
    Inspect CUDA device 0.

    Returns a NO_GPU result when torch is missing or sees no CUDA device.
    """
    try:
        import torch
    except ImportError:
        return GPUCapabilities("CPU only", None, PrecisionSupport.NO_GPU)

    if not torch.cuda.is_available():
        return GPUCapabilities("CPU only", None, PrecisionSupport.NO_GPU)

    capability = tuple(torch.cuda.get_device_capability(0))
    return GPUCapabilities(
        gpu_name=torch.cuda.get_device_name(0),
        compute_capability=capability,
        fp64_support=classify_compute_capability(capability),
    )
