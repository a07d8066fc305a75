"""
tikhofit: Tikhonov-regularized least squares with L-curve parameter selection.

Copyright (C) 2024 SGCX
Licensed under GPL-3.0
"""

__version__ = "1.0.0"

# Import main user-facing API
from .tikhonov import tikhonov, TikhonovModel

# Core building blocks
from ._core import (
    Workspace,
    StandardForm,
    stdform_diagonal,
    stdform_general,
    genform_diagonal,
    genform_general,
    RegularizedSolution,
    svd_decompose,
    solve_regularized,
    LCurve,
    regularization_grid,
    lcurve,
    lcorner,
    lcorner_squared,
    difference_operator,
    sobolev_operator,
    SimpleFitResult,
    fit_linear,
    fit_wlinear,
    fit_mul,
)
from .errors import (
    TikhonovError,
    LengthMismatchError,
    NotSquareError,
    DomainError,
    InvalidArgumentError,
    UnsupportedCombinationError,
    DegenerateGeometryError,
)

# Import backend utilities (for advanced users)
from ._backends import get_backend, list_available_backends

__all__ = [
    'tikhonov',
    'TikhonovModel',
    'Workspace',
    'StandardForm',
    'stdform_diagonal',
    'stdform_general',
    'genform_diagonal',
    'genform_general',
    'RegularizedSolution',
    'svd_decompose',
    'solve_regularized',
    'LCurve',
    'regularization_grid',
    'lcurve',
    'lcorner',
    'lcorner_squared',
    'difference_operator',
    'sobolev_operator',
    'SimpleFitResult',
    'fit_linear',
    'fit_wlinear',
    'fit_mul',
    'TikhonovError',
    'LengthMismatchError',
    'NotSquareError',
    'DomainError',
    'InvalidArgumentError',
    'UnsupportedCombinationError',
    'DegenerateGeometryError',
    'get_backend',
    'list_available_backends',
]
