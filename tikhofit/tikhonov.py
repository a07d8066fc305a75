"""
Tikhonov-regularized linear regression with an R-style interface.

This is the user-facing API: it chains the standard-form transform, SVD,
L-curve parameter selection and back transform into one fit.
"""

import warnings

import numpy as np
import pandas as pd
from typing import Optional, Union, List

from ._backends import get_backend
from ._core import (
    Workspace,
    stdform_diagonal,
    stdform_general,
    genform_diagonal,
    genform_general,
    svd_decompose,
    solve_regularized,
    lcurve,
    lcorner,
    lcorner_squared,
)

CRITERIA = ('lcurve', 'lcurve2')


class TikhonovModel:
    """
    Fit a Tikhonov-regularized linear model.

    Minimizes ||sqrt(W) (y - X c)||^2 + lambda^2 ||L c||^2. When no lambda
    is given it is chosen at the corner of the L-curve.

    Examples
    --------
    >>> import numpy as np
    >>> from tikhofit import tikhonov, difference_operator
    >>>
    >>> # Smooth a noisy signal with a second-derivative penalty
    >>> model = tikhonov(y=y_obs, X=np.eye(50), L=difference_operator(50, 2))
    >>> model.summary()
    >>>
    >>> model.lam            # Selected regularization parameter
    >>> model.coef           # Named coefficients
    >>> model.lcurve_frame() # L-curve samples as a DataFrame
    """

    def __init__(
        self,
        y: Union[str, np.ndarray],
        X: Union[List[str], np.ndarray],
        data: Optional[pd.DataFrame] = None,
        L: Optional[np.ndarray] = None,
        weights: Optional[Union[str, np.ndarray]] = None,
        lam: Optional[float] = None,
        npoints: int = 100,
        criterion: str = 'lcurve',
        backend: str = 'auto',
    ):
        """
        Fit the regularized model.

        Parameters
        ----------
        y : str or array
            Response variable
            - If string: column name in data
            - If array: numeric values
        X : list of str or array
            Predictor variables (no intercept is added)
            - If list of strings: column names in data
            - If array: numeric matrix (n x p)
        data : DataFrame, optional
            Dataset containing y and X variables
        L : array, optional
            Regularization matrix: None for the identity, a length-p
            vector for a diagonal matrix, or an m x p matrix
        weights : str or array, optional
            Observation weights; negative weights are treated as zero
        lam : float, optional
            Fixed regularization parameter; chosen by L-curve if None
        npoints : int
            Number of points on the L-curve
        criterion : str
            Corner criterion: 'lcurve' for (log rho, log eta) or
            'lcurve2' for (lambda^2, eta^2)
        backend : str
            Linear-algebra backend: 'auto', 'cpu', 'pytorch'
        """
        if criterion not in CRITERIA:
            raise ValueError(
                f"Unknown criterion: '{criterion}'\n"
                f"Valid options: {', '.join(repr(c) for c in CRITERIA)}"
            )

        # Parse inputs
        if isinstance(y, str):
            if data is None:
                raise ValueError("Must provide data when y is a string")
            self.y_values = np.asarray(data[y].values, dtype=np.float64)
            self.y_name = y
        else:
            self.y_values = np.asarray(y, dtype=np.float64)
            self.y_name = 'y'

        if isinstance(X, list) and all(isinstance(x, str) for x in X):
            if data is None:
                raise ValueError("Must provide data when X is list of strings")
            self.X_values = np.asarray(data[X].values, dtype=np.float64)
            self.X_names = X
        else:
            self.X_values = np.asarray(X, dtype=np.float64)
            self.X_names = [f'x{i}' for i in range(self.X_values.shape[1])]

        if weights is not None:
            if isinstance(weights, str):
                if data is None:
                    raise ValueError("Must provide data when weights is a string")
                self.weights_values = np.asarray(data[weights].values, dtype=np.float64)
            else:
                self.weights_values = np.asarray(weights, dtype=np.float64)
            if np.any(self.weights_values < 0):
                warnings.warn("Negative weights are treated as zero", UserWarning)
        else:
            self.weights_values = None

        self.L = None if L is None else np.asarray(L, dtype=np.float64)
        self.n_obs, self.n_coef = self.X_values.shape
        self.criterion = criterion
        self.npoints = npoints

        self.backend = get_backend(backend)
        self.workspace = Workspace(self.n_obs, self.n_coef, backend=self.backend)

        self._fit(lam)
        self._compute_statistics()

    def _fit(self, lam):
        """Standard form -> SVD -> lambda selection -> solve -> back transform."""
        X, y, w, L = self.X_values, self.y_values, self.weights_values, self.L
        work = self.workspace

        if L is None or L.ndim == 1:
            Xs, ys = stdform_diagonal(X, y, work, L=L, w=w)
            M = None
        else:
            sf = stdform_general(L, X, y, work, w=w)
            Xs, ys, M = sf.Xs, sf.ys, sf.M

        svd_decompose(Xs, work)

        if lam is None:
            self.lcurve = lcurve(ys, work, npoints=self.npoints)
            if self.criterion == 'lcurve':
                idx = lcorner(self.lcurve.rho, self.lcurve.eta)
            else:
                idx = lcorner_squared(self.lcurve.reg_param, self.lcurve.eta)
            self.corner_index = idx
            self.lam = float(self.lcurve.reg_param[idx])
        else:
            self.lcurve = None
            self.corner_index = None
            self.lam = float(lam)

        sol = solve_regularized(self.lam, Xs, ys, work)
        self.rnorm = sol.rnorm
        self.snorm = sol.snorm
        self.rank = sol.rank

        if L is None:
            self.coefficients = sol.coef
        elif L.ndim == 1:
            self.coefficients = genform_diagonal(L, sol.coef, work)
        else:
            self.coefficients = genform_general(L, X, y, sol.coef, M, work)

    def _compute_statistics(self):
        """Compute fitted values, residuals and goodness of fit."""
        self.fitted_values = self.X_values @ self.coefficients
        self.residuals = self.y_values - self.fitted_values

        self.rss = float(np.sum(self.residuals**2))
        tss = float(np.sum((self.y_values - np.mean(self.y_values))**2))
        self.r_squared = 1 - (self.rss / tss) if tss > 0 else 0.0

        if self.L is None:
            self.penalty_norm = float(np.linalg.norm(self.coefficients))
        elif self.L.ndim == 1:
            self.penalty_norm = float(np.linalg.norm(self.L * self.coefficients))
        else:
            self.penalty_norm = float(np.linalg.norm(self.L @ self.coefficients))

    @property
    def coef(self):
        """Named coefficients (pandas Series)."""
        return pd.Series(self.coefficients, index=self.X_names)

    def lcurve_frame(self) -> pd.DataFrame:
        """
        L-curve samples as a DataFrame.

        Returns
        -------
        DataFrame
            Columns 'lambda', 'rho', 'eta' and a boolean 'corner' column
            marking the selected point
        """
        if self.lcurve is None:
            raise ValueError("No L-curve: the model was fit with a fixed lambda")
        frame = self.lcurve.to_frame()
        frame['corner'] = frame.index == self.corner_index
        return frame

    def summary(self):
        """
        Print summary of the regularized fit.
        """
        print()
        print("="*80)
        print("TIKHONOV REGULARIZED REGRESSION RESULTS")
        print("="*80)
        print()

        print(f"Dependent variable: {self.y_name}")
        print(f"Number of observations: {self.n_obs}")
        print(f"Number of coefficients: {self.n_coef}")
        if self.L is None:
            reg = "identity"
        elif self.L.ndim == 1:
            reg = "diagonal"
        else:
            reg = f"{self.L.shape[0]} x {self.L.shape[1]} matrix"
        print(f"Regularization matrix:  {reg}")
        print()

        if self.lcurve is not None:
            how = "L-curve corner" if self.criterion == 'lcurve' else "lambda^2 / eta^2 corner"
            print(f"Lambda: {self.lam:.6e} ({how}, point {self.corner_index} of {len(self.lcurve)})")
        else:
            print(f"Lambda: {self.lam:.6e} (fixed)")
        print()

        print("Coefficients:")
        print("-"*80)
        print(f"{'Variable':<20} {'Estimate':>14}")
        print("-"*80)
        for name, value in zip(self.X_names, self.coefficients):
            print(f"{name:<20} {value:>14.6f}")
        print("-"*80)
        print()

        print(f"Residual norm ||y - Xc||:    {np.sqrt(self.rss):.6e}")
        print(f"Penalty norm ||Lc||:         {self.penalty_norm:.6e}")
        print(f"Multiple R-squared:          {self.r_squared:.4f}")
        print()
        print(f"Backend: {self.backend.name}")
        print("="*80)
        print()

    def predict(self, newdata: Union[pd.DataFrame, np.ndarray]) -> np.ndarray:
        """
        Predict response for new data.

        Parameters
        ----------
        newdata : DataFrame or array
            New predictor values
            - If DataFrame: must have columns matching self.X_names
            - If array: must have same number of columns as X

        Returns
        -------
        array
            Predicted values
        """
        if isinstance(newdata, pd.DataFrame):
            X_new = newdata[self.X_names].values
        else:
            X_new = np.asarray(newdata)

        return X_new @ self.coefficients

    def __repr__(self):
        return f"TikhonovModel(n={self.n_obs}, p={self.n_coef}, lambda={self.lam:.3g})"


def tikhonov(y, X, data=None, **kwargs):
    """
    Fit a Tikhonov-regularized linear model (convenience function).

    Parameters
    ----------
    y : str or array
        Response variable
    X : list of str or array
        Predictor variables
    data : DataFrame, optional
        Dataset
    **kwargs
        Additional arguments passed to TikhonovModel

    Returns
    -------
    TikhonovModel
        Fitted model object

    Examples
    --------
    >>> model = tikhonov(y='signal', X=['b0', 'b1', 'b2'], data=df)
    >>> model.summary()
    >>>
    >>> # Fixed lambda, first-difference penalty
    >>> model = tikhonov(y, X, L=difference_operator(X.shape[1], 1), lam=0.1)
    >>> model.predict(X_new)
    """
    return TikhonovModel(y=y, X=X, data=data, **kwargs)
