"""
Core algorithms (backend-agnostic).
"""

from .workspace import Workspace
from .stdform import StandardForm, stdform_diagonal, stdform_general
from .genform import genform_diagonal, genform_general
from .svd_solver import RegularizedSolution, svd_decompose, solve_regularized
from .lcurve import LCurve, regularization_grid, lcurve, lcorner, lcorner_squared
from .operators import difference_operator, sobolev_operator
from .simple_fit import SimpleFitResult, fit_linear, fit_wlinear, fit_mul

__all__ = [
    "Workspace",
    "StandardForm",
    "stdform_diagonal",
    "stdform_general",
    "genform_diagonal",
    "genform_general",
    "RegularizedSolution",
    "svd_decompose",
    "solve_regularized",
    "LCurve",
    "regularization_grid",
    "lcurve",
    "lcorner",
    "lcorner_squared",
    "difference_operator",
    "sobolev_operator",
    "SimpleFitResult",
    "fit_linear",
    "fit_wlinear",
    "fit_mul",
]
