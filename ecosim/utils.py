"""
Shared utility functions used across the ecosim modules.
"""

import numpy as np


class SingularMatrixError(np.linalg.LinAlgError):
    """X'X is not invertible (X lacks full column rank)."""


class EmptySubsetError(ValueError):
    """A conditioning predicate selected no observations."""


def make_rng(seed=None):
    """
    Return a numpy Generator for `seed`.

    Parameters
    ----------
    seed : None, int or numpy.random.Generator
        An existing Generator is returned unchanged, so a single stream
        can be threaded through several draws.

    Returns
    -------
    numpy.random.Generator
    """
    if isinstance(seed, np.random.Generator):
        return seed
    return np.random.default_rng(seed)


def ols_fit(X, y):
    """
    OLS estimation via the normal equations.

    Parameters
    ----------
    X : ndarray, shape (n, k)
        Design matrix (should include a constant column if an intercept is desired).
    y : ndarray, shape (n,)
        Outcome vector.

    Returns
    -------
    b : ndarray, shape (k,)
        Coefficient estimates  beta_hat = (X'X)^{-1} X'y.
    se : ndarray, shape (k,)
        Homoskedastic standard errors.
    e : ndarray, shape (n,)
        Residuals  y - X @ b.
    s2 : float
        Estimated error variance  e'e / (n - k).

    Raises
    ------
    SingularMatrixError
        If X does not have full column rank or n <= k.
    """
    X = np.asarray(X, dtype=float)
    y = np.asarray(y, dtype=float)
    if X.ndim != 2:
        raise ValueError(f"X must be 2-d, got shape {X.shape}")
    n, k = X.shape
    if y.shape[0] != n:
        raise ValueError(f"X has {n} rows but y has {y.shape[0]}")
    if n <= k:
        raise SingularMatrixError(
            f"need more observations than regressors (n={n}, k={k})"
        )

    b, _, rank, _ = np.linalg.lstsq(X, y, rcond=None)
    if rank < k:
        raise SingularMatrixError(
            f"X'X is singular: design matrix has rank {rank} < {k} columns"
        )
    e = y - X @ b
    s2 = (e @ e) / (n - k)
    se = np.sqrt(np.diag(s2 * np.linalg.inv(X.T @ X)))
    return b, se, e, s2


def add_const(x):
    """
    Prepend a column of ones (intercept) to the design matrix.

    Parameters
    ----------
    x : ndarray
        1-d array or 2-d matrix of regressors.

    Returns
    -------
    X : ndarray, shape (n, k+1)
        Design matrix with leading ones column.
    """
    x = np.asarray(x)
    x = np.atleast_2d(x).T if x.ndim == 1 else x
    return np.column_stack([np.ones(x.shape[0]), x])
