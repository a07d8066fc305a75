"""
Test the SVD decomposition and regularized solve.
"""

import pytest
import numpy as np

from tikhofit import (
    Workspace,
    RegularizedSolution,
    svd_decompose,
    solve_regularized,
    LengthMismatchError,
    DomainError,
    InvalidArgumentError,
)


COEF_TOL = 1e-10


@pytest.fixture
def system():
    np.random.seed(42)
    n, p = 30, 6
    X = np.random.randn(n, p)
    y = np.random.randn(n)
    work = Workspace(n + 5, p + 2)
    svd_decompose(X, work)
    return X, y, work


class TestDecompose:
    """Storage of the SVD in the workspace."""

    def test_factors_stored(self, system):
        """U diag(S) V^T reconstructs X."""
        X, _, work = system
        n, p = X.shape

        assert (work.n, work.p) == (n, p)
        U = work.A[:n, :p]
        s = work.S[:p]
        V = work.Q[:p, :p]

        np.testing.assert_allclose((U * s) @ V.T, X, atol=1e-12)
        np.testing.assert_allclose(U.T @ U, np.eye(p), atol=1e-12)
        np.testing.assert_allclose(V.T @ V, np.eye(p), atol=1e-12)
        assert np.all(np.diff(s) <= 0)

    def test_returns_workspace(self, system):
        X, _, work = system
        assert svd_decompose(X, work) is work

    def test_underdetermined(self):
        """n < p is not supported."""
        work = Workspace(5, 5)
        with pytest.raises(LengthMismatchError):
            svd_decompose(np.ones((3, 5)), work)

    def test_too_large(self):
        """X must fit in the workspace."""
        work = Workspace(5, 2)
        with pytest.raises(LengthMismatchError):
            svd_decompose(np.ones((6, 2)), work)

    def test_nonfinite(self):
        """NaN entries are rejected."""
        X = np.ones((4, 2))
        X[1, 1] = np.nan
        with pytest.raises(InvalidArgumentError):
            svd_decompose(X, Workspace(4, 2))


class TestSolve:
    """Filtered SVD solution."""

    def test_ridge_solution(self, system):
        """Matches (X^T X + lambda^2 I)^{-1} X^T y."""
        X, y, work = system
        lam = 0.9
        p = X.shape[1]

        sol = solve_regularized(lam, X, y, work)

        expected = np.linalg.solve(X.T @ X + lam**2 * np.eye(p), X.T @ y)
        assert isinstance(sol, RegularizedSolution)
        np.testing.assert_allclose(sol.coef, expected, rtol=COEF_TOL, atol=COEF_TOL)
        assert sol.rank == p

    def test_norms(self, system):
        """rnorm = ||y - X c|| and snorm = ||c||."""
        X, y, work = system
        sol = solve_regularized(0.3, X, y, work)

        np.testing.assert_allclose(sol.rnorm, np.linalg.norm(y - X @ sol.coef), rtol=1e-12)
        np.testing.assert_allclose(sol.snorm, np.linalg.norm(sol.coef), rtol=1e-12)

    def test_zero_lambda_is_least_squares(self, system):
        """lambda = 0 gives the ordinary least-squares solution."""
        X, y, work = system
        sol = solve_regularized(0.0, X, y, work)

        expected, *_ = np.linalg.lstsq(X, y, rcond=None)
        np.testing.assert_allclose(sol.coef, expected, rtol=COEF_TOL, atol=COEF_TOL)

    def test_zero_lambda_rank_deficient(self):
        """Negligible singular values are truncated."""
        X = np.zeros((6, 3))
        X[0, 0] = 2.0
        X[1, 1] = 1.0
        y = np.arange(1.0, 7.0)
        work = Workspace(6, 3)
        svd_decompose(X, work)

        sol = solve_regularized(0.0, X, y, work)

        assert sol.rank == 2
        np.testing.assert_allclose(sol.coef, [0.5, 2.0, 0.0], atol=1e-14)

    def test_output_array(self, system):
        """Writes the solution into a caller-supplied array."""
        X, y, work = system
        buf = np.zeros(2 * X.shape[1])
        c = buf[::2]
        sol = solve_regularized(0.5, X, y, work, c=c)
        assert sol.coef is c
        assert np.all(buf[1::2] == 0.0)

    def test_negative_lambda(self, system):
        X, y, work = system
        with pytest.raises(DomainError):
            solve_regularized(-1.0, X, y, work)

    def test_shape_differs_from_svd(self, system):
        """X must be the matrix that was decomposed."""
        X, y, work = system
        with pytest.raises(LengthMismatchError):
            solve_regularized(0.1, X[:-1], y[:-1], work)

    def test_y_mismatch(self, system):
        X, y, work = system
        with pytest.raises(LengthMismatchError):
            solve_regularized(0.1, X, y[:-1], work)

    def test_requires_svd(self):
        """A fresh workspace has no decomposition."""
        with pytest.raises(InvalidArgumentError):
            solve_regularized(0.1, np.ones((3, 2)), np.ones(3), Workspace(3, 2))
