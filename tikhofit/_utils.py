"""
Utility functions.
"""

import numpy as np

from .errors import InvalidArgumentError, LengthMismatchError


def check_array(X, name='X', dtype=np.float64):
    """Validate array input."""
    X = np.asarray(X, dtype=dtype)
    if X.ndim != 2:
        raise LengthMismatchError(f"{name} must be 2-dimensional")
    if not np.all(np.isfinite(X)):
        raise InvalidArgumentError(f"{name} contains NaN or Inf")
    return X


def check_vector(y, name='y', dtype=np.float64):
    """Validate vector input."""
    y = np.asarray(y, dtype=dtype)
    if y.ndim != 1:
        raise LengthMismatchError(f"{name} must be 1-dimensional")
    if not np.all(np.isfinite(y)):
        raise InvalidArgumentError(f"{name} contains NaN or Inf")
    return y


def check_output(out, shape, name):
    """
    Validate a caller-supplied output array, or allocate one.

    Output arrays are written in place, so they must already be float64
    arrays of the exact shape. Strided views are accepted.
    """
    if out is None:
        return np.empty(shape, dtype=np.float64)
    if not isinstance(out, np.ndarray) or out.dtype != np.float64:
        raise InvalidArgumentError(f"{name} must be a float64 ndarray")
    if out.shape != tuple(shape):
        expected = 'x'.join(str(s) for s in shape)
        raise LengthMismatchError(
            f"{name} must be {expected}, got {'x'.join(map(str, out.shape))}"
        )
    return out


def check_not_workspace(work, **arrays):
    """Reject arrays that overlap the workspace arena."""
    for name, arr in arrays.items():
        if arr is not None and work.owns(arr):
            raise InvalidArgumentError(
                f"{name} overlaps workspace storage; pass a separate array"
            )
