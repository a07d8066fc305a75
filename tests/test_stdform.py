"""
Test standard-form transformations against a dense reference solution.

The reference solves the augmented least-squares problem

    min || [sqrt(W) X; lambda L] c - [sqrt(W) y; 0] ||

directly with numpy.linalg.lstsq.
"""

import pytest
import numpy as np

from tikhofit import (
    Workspace,
    stdform_diagonal,
    stdform_general,
    genform_diagonal,
    genform_general,
    svd_decompose,
    solve_regularized,
    difference_operator,
    LengthMismatchError,
    DomainError,
    InvalidArgumentError,
    UnsupportedCombinationError,
)


COEF_TOL = 1e-9


def dense_reference(X, y, L, lam, w=None):
    """Solve the regularized problem directly."""
    L = np.diag(L) if L.ndim == 1 else L
    sw = np.sqrt(np.clip(w, 0.0, None)) if w is not None else np.ones(len(y))
    A = np.vstack([X * sw[:, np.newaxis], lam * L])
    b = np.concatenate([y * sw, np.zeros(L.shape[0])])
    c, *_ = np.linalg.lstsq(A, b, rcond=None)
    return c


def solve_via_stdform(Xs, ys, lam, work):
    svd_decompose(Xs, work)
    return solve_regularized(lam, Xs, ys, work).coef


@pytest.fixture
def problem():
    np.random.seed(42)
    n, p = 40, 8
    X = np.random.randn(n, p)
    y = X @ np.linspace(-1.0, 1.0, p) + 0.1 * np.random.randn(n)
    w = np.random.uniform(0.5, 2.0, n)
    return X, y, w


class TestDiagonalStandardForm:
    """Diagonal regularization matrix."""

    def test_matches_dense_reference(self, problem):
        """Transform, solve, back transform reproduces the direct solution."""
        X, y, w = problem
        p = X.shape[1]
        L = np.linspace(0.5, 3.0, p)
        lam = 0.7
        work = Workspace(*X.shape)

        Xs, ys = stdform_diagonal(X, y, work, L=L, w=w)
        cs = solve_via_stdform(Xs, ys, lam, work)
        c = genform_diagonal(L, cs, work)

        np.testing.assert_allclose(
            c, dense_reference(X, y, L, lam, w), rtol=COEF_TOL, atol=COEF_TOL
        )

    def test_output_values(self, problem):
        """Xs = sqrt(W) X L^{-1} and ys = sqrt(W) y."""
        X, y, w = problem
        L = np.arange(1.0, X.shape[1] + 1.0)
        work = Workspace(*X.shape)

        Xs, ys = stdform_diagonal(X, y, work, L=L, w=w)

        sw = np.sqrt(w)
        np.testing.assert_allclose(Xs, X * sw[:, np.newaxis] / L)
        np.testing.assert_allclose(ys, y * sw)

    def test_identity_and_no_weights(self, problem):
        """With L=None and w=None the problem is copied unchanged."""
        X, y, _ = problem
        work = Workspace(*X.shape)

        Xs, ys = stdform_diagonal(X, y, work)

        np.testing.assert_array_equal(Xs, X)
        np.testing.assert_array_equal(ys, y)
        assert Xs is not X

    def test_negative_weights_treated_as_zero(self, problem):
        """Negative weights behave exactly like zero weights."""
        X, y, w = problem
        w_neg = w.copy()
        w_zero = w.copy()
        w_neg[[3, 7]] = -2.5
        w_zero[[3, 7]] = 0.0
        work = Workspace(*X.shape)

        Xs1, ys1 = stdform_diagonal(X, y, work, w=w_neg)
        Xs2, ys2 = stdform_diagonal(X, y, work, w=w_zero)

        np.testing.assert_array_equal(Xs1, Xs2)
        np.testing.assert_array_equal(ys1, ys2)
        assert np.all(Xs1[3] == 0.0)

    def test_in_place_aliasing(self, problem):
        """Xs may be X and ys may be y."""
        X, y, w = problem
        L = np.linspace(1.0, 2.0, X.shape[1])
        work = Workspace(*X.shape)
        Xs_ref, ys_ref = stdform_diagonal(X, y, work, L=L, w=w)

        X_work = X.copy()
        y_work = y.copy()
        Xs, ys = stdform_diagonal(X_work, y_work, work, L=L, w=w, Xs=X_work, ys=y_work)

        assert Xs is X_work
        assert ys is y_work
        np.testing.assert_allclose(X_work, Xs_ref)
        np.testing.assert_allclose(y_work, ys_ref)

    def test_strided_views(self, problem):
        """Non-contiguous inputs and outputs are accepted."""
        X, y, w = problem
        n, p = X.shape
        big = np.zeros((2 * n, 2 * p))
        big[::2, ::2] = X
        ybig = np.zeros(3 * n)
        ybig[::3] = y
        Xs_out = np.zeros((n, 2 * p))[:, ::2]
        work = Workspace(n, p)

        Xs, ys = stdform_diagonal(big[::2, ::2], ybig[::3], work, w=w, Xs=Xs_out)

        assert Xs is Xs_out
        np.testing.assert_allclose(Xs, X * np.sqrt(w)[:, np.newaxis])

    def test_zero_entry_is_singular(self, problem):
        """A zero diagonal entry fails before X is modified."""
        X, y, _ = problem
        L = np.ones(X.shape[1])
        L[2] = 0.0
        X_work = X.copy()
        work = Workspace(*X.shape)

        with pytest.raises(DomainError, match="singular"):
            stdform_diagonal(X_work, y, work, L=L, Xs=X_work)

        np.testing.assert_array_equal(X_work, X)

    @pytest.mark.parametrize("kwargs", [
        {'L': np.ones(3)},
        {'w': np.ones(5)},
        {'Xs': np.zeros((40, 7))},
        {'ys': np.zeros(39)},
    ])
    def test_length_mismatch(self, problem, kwargs):
        """Mismatched shapes raise LengthMismatchError."""
        X, y, _ = problem
        work = Workspace(*X.shape)
        with pytest.raises(LengthMismatchError):
            stdform_diagonal(X, y, work, **kwargs)

    def test_y_mismatch(self, problem):
        """y must have one entry per row of X."""
        X, y, _ = problem
        work = Workspace(*X.shape)
        with pytest.raises(LengthMismatchError, match="y vector"):
            stdform_diagonal(X, y[:-1], work)

    def test_larger_than_workspace(self, problem):
        """Problems beyond the workspace bounds are rejected."""
        X, y, _ = problem
        work = Workspace(X.shape[0], X.shape[1] - 1)
        with pytest.raises(LengthMismatchError, match="workspace"):
            stdform_diagonal(X, y, work)

    def test_rejects_workspace_storage(self, problem):
        """Arrays living inside the workspace arena are rejected."""
        X, y, _ = problem
        n, p = X.shape
        work = Workspace(n, p)
        X_in_arena = work.A[:n, :p]
        X_in_arena[...] = X
        with pytest.raises(InvalidArgumentError, match="workspace"):
            stdform_diagonal(X_in_arena, y, work)


class TestGeneralStandardFormTall:
    """General regularization matrix with m >= p."""

    def test_square_matches_dense_reference(self, problem):
        """Square L (Sobolev-like upper triangular) with weights."""
        X, y, w = problem
        p = X.shape[1]
        L = 2.0 * np.eye(p) + np.vstack([difference_operator(p, 1), np.zeros((1, p))])
        lam = 0.4
        work = Workspace(*X.shape)

        sf = stdform_general(L, X, y, work, w=w)
        cs = solve_via_stdform(sf.Xs, sf.ys, lam, work)
        c = genform_general(L, X, y, cs, sf.M, work)

        np.testing.assert_allclose(
            c, dense_reference(X, y, L, lam, w), rtol=COEF_TOL, atol=COEF_TOL
        )

    def test_tall_matches_dense_reference(self, problem):
        """Tall random L, unweighted."""
        X, y, _ = problem
        p = X.shape[1]
        np.random.seed(7)
        L = np.random.randn(p + 3, p)
        lam = 1.3
        work = Workspace(*X.shape)

        sf = stdform_general(L, X, y, work)
        cs = solve_via_stdform(sf.Xs, sf.ys, lam, work)
        c = genform_general(L, X, y, cs, sf.M, work)

        np.testing.assert_allclose(
            c, dense_reference(X, y, L, lam), rtol=COEF_TOL, atol=COEF_TOL
        )

    def test_M_holds_R_factor(self, problem):
        """M is m-by-p with the R factor of L on top and zeros below."""
        X, y, _ = problem
        p = X.shape[1]
        np.random.seed(3)
        L = np.random.randn(p + 2, p)
        work = Workspace(*X.shape)

        sf = stdform_general(L, X, y, work)

        assert sf.M.shape == (p + 2, p)
        R = sf.M[:p, :p]
        np.testing.assert_allclose(R.T @ R, L.T @ L, rtol=1e-10, atol=1e-10)
        np.testing.assert_array_equal(np.tril(R, -1), 0.0)
        np.testing.assert_array_equal(sf.M[p:], 0.0)
        np.testing.assert_allclose(sf.Xs @ R, X, rtol=1e-10, atol=1e-10)
        np.testing.assert_array_equal(sf.ys, y)

    def test_singular_L(self, problem):
        """A rank-deficient square L is a domain error."""
        X, y, _ = problem
        p = X.shape[1]
        L = np.eye(p)
        L[-1, -1] = 0.0
        work = Workspace(*X.shape)
        Xs = np.full(X.shape, 7.0)

        with pytest.raises(DomainError):
            stdform_general(L, X, y, work, Xs=Xs)

        assert np.all(Xs == 7.0)

    def test_column_mismatch(self, problem):
        """L must have p columns."""
        X, y, _ = problem
        work = Workspace(*X.shape)
        with pytest.raises(LengthMismatchError, match="columns"):
            stdform_general(np.eye(X.shape[1] + 1), X, y, work)

    def test_wrong_M_shape(self, problem):
        """M must be m-by-p."""
        X, y, _ = problem
        p = X.shape[1]
        work = Workspace(*X.shape)
        with pytest.raises(LengthMismatchError):
            stdform_general(np.eye(p), X, y, work, M=np.zeros((p, X.shape[0])))


class TestGeneralStandardFormWide:
    """General regularization matrix with m < p (null space of L)."""

    @pytest.mark.parametrize("k", [1, 2, 3])
    def test_matches_dense_reference(self, problem, k):
        """Derivative operators of several orders."""
        X, y, _ = problem
        n, p = X.shape
        L = difference_operator(p, k)
        lam = 0.8
        work = Workspace(n, p)

        sf = stdform_general(L, X, y, work)
        cs = solve_via_stdform(sf.Xs, sf.ys, lam, work)
        c = genform_general(L, X, y, cs, sf.M, work)

        np.testing.assert_allclose(
            c, dense_reference(X, y, L, lam), rtol=COEF_TOL, atol=COEF_TOL
        )

    def test_output_shapes(self, problem):
        """Xs is (n-p+m)-by-m, ys has n-p+m entries, M is p-by-n."""
        X, y, _ = problem
        n, p = X.shape
        L = difference_operator(p, 2)
        m = L.shape[0]
        work = Workspace(n, p)

        sf = stdform_general(L, X, y, work)

        assert sf.Xs.shape == (n - p + m, m)
        assert sf.ys.shape == (n - p + m,)
        assert sf.M.shape == (p, n)

    def test_pseudo_inverse_stored(self, problem):
        """work.Linv is a right inverse of L."""
        X, y, _ = problem
        n, p = X.shape
        L = difference_operator(p, 2)
        m = L.shape[0]
        work = Workspace(n, p)

        stdform_general(L, X, y, work)

        np.testing.assert_allclose(L @ work.Linv[:p, :m], np.eye(m), atol=1e-12)

    def test_null_space_recovered_without_penalty(self, problem):
        """Huge lambda forces c into the null space of L (a straight line)."""
        X, y, _ = problem
        n, p = X.shape
        L = difference_operator(p, 2)
        work = Workspace(n, p)

        sf = stdform_general(L, X, y, work)
        cs = solve_via_stdform(sf.Xs, sf.ys, 1e8, work)
        c = genform_general(L, X, y, cs, sf.M, work)

        np.testing.assert_allclose(L @ c, 0.0, atol=1e-6)

    def test_weights_unsupported(self, problem):
        """Weights are rejected on the m < p path."""
        X, y, w = problem
        work = Workspace(*X.shape)
        L = difference_operator(X.shape[1], 1)

        with pytest.raises(UnsupportedCombinationError):
            stdform_general(L, X, y, work, w=w)

        with pytest.raises(InvalidArgumentError):
            stdform_general(L, X, y, work, w=w)

    def test_too_few_rows(self):
        """n must exceed p - m."""
        X = np.random.randn(3, 8)
        y = np.random.randn(3)
        L = difference_operator(8, 5)
        work = Workspace(3, 8)
        with pytest.raises(LengthMismatchError):
            stdform_general(L, X, y, work)

    def test_wrong_Xs_shape(self, problem):
        """Xs must be (n-p+m)-by-m."""
        X, y, _ = problem
        n, p = X.shape
        work = Workspace(n, p)
        L = difference_operator(p, 1)
        with pytest.raises(LengthMismatchError, match="Xs"):
            stdform_general(L, X, y, work, Xs=np.zeros((n, p)))
