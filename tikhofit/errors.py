"""
Exception types raised by tikhofit.

Every error derives from TikhonovError and from the built-in exception
that matches its category, so callers can catch either.
"""


class TikhonovError(Exception):
    """Base class for all tikhofit errors."""


class LengthMismatchError(TikhonovError, ValueError):
    """Array shapes disagree with each other or with the workspace bounds."""


class NotSquareError(TikhonovError, ValueError):
    """A square matrix was expected."""


class DomainError(TikhonovError, ArithmeticError):
    """Numerical input outside the domain of the operation.

    Raised for singular regularization matrices, a non-positive largest
    singular value, or a matrix that is not positive definite.
    """


class InvalidArgumentError(TikhonovError, ValueError):
    """Argument is invalid for reasons other than its shape."""


class UnsupportedCombinationError(InvalidArgumentError):
    """Arguments are individually valid but cannot be used together."""


class DegenerateGeometryError(TikhonovError, ArithmeticError):
    """No finite curvature radius exists on the L-curve."""


__all__ = [
    'TikhonovError',
    'LengthMismatchError',
    'NotSquareError',
    'DomainError',
    'InvalidArgumentError',
    'UnsupportedCombinationError',
    'DegenerateGeometryError',
]
