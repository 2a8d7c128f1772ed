"""
Section 1: OLS -- Ordinary Least Squares and residual orthogonality

Implements OLS estimation from scratch and the checks behind the
"normal equations" X'e = 0: residuals are orthogonal to every column of
the design matrix, and sum to zero when an intercept is included.
A Monte Carlo driver repeats the experiment to show the property holds
draw after draw while the coefficients themselves vary.
"""

import numpy as np
from .utils import ols_fit, add_const, make_rng

DEFAULT_SEED = 1234
BETA_TRUE = (1.0, 1.0, 1.0)


def estimate(X, y):
    """
    OLS estimation: beta_hat = (X'X)^{-1} X'y.

    Parameters
    ----------
    X : ndarray, shape (n, k)
        Design matrix (include a constant column for intercept).
    y : ndarray, shape (n,)
        Outcome vector.

    Returns
    -------
    dict with keys:
        beta    : coefficient vector
        se      : standard errors (homoskedastic)
        residuals : OLS residuals
        s2      : estimated error variance
        fitted  : fitted values X @ beta
    """
    X = np.asarray(X, dtype=float)
    b, se, e, s2 = ols_fit(X, y)
    return dict(beta=b, se=se, residuals=e, s2=s2, fitted=X @ b)


def orthogonality_check(X, residuals, tol=None):
    """
    Check the normal equations X'e = 0.

    Parameters
    ----------
    X : ndarray, shape (n, k)
        Design matrix the residuals came from.
    residuals : ndarray, shape (n,)
        OLS residuals.
    tol : float or None
        Absolute tolerance on each inner product. Defaults to
        1e-8 * max(1, ||X||_F * ||e||), i.e. relative to problem scale.

    Returns
    -------
    dict with keys:
        inner_products : X'e, one entry per column
        max_abs        : max |X'e|
        residual_sum   : sum(e)
        tol            : tolerance used
        orthogonal     : bool, True if max_abs < tol
    """
    X = np.asarray(X, dtype=float)
    e = np.asarray(residuals, dtype=float)
    if tol is None:
        tol = 1e-8 * max(1.0, np.linalg.norm(X) * np.linalg.norm(e))
    inner = X.T @ e
    max_abs = float(np.max(np.abs(inner)))
    return dict(
        inner_products=inner,
        max_abs=max_abs,
        residual_sum=float(e.sum()),
        tol=tol,
        orthogonal=max_abs < tol,
    )


def simulate_linear_data(n=1000, beta=BETA_TRUE, seed=None, rng=None):
    """
    Draw from the DGP  y = b0 + b1*x1 + b2*x2 + eps,
    with x1, x2, eps i.i.d. N(0, 1).

    Parameters
    ----------
    n : int
        Sample size.
    beta : sequence of 3 floats
        True (intercept, slope on x1, slope on x2).
    seed : int or None
        Seed for a fresh generator (ignored if `rng` is given).
    rng : numpy.random.Generator or None
        Generator to draw from.

    Returns
    -------
    dict with arrays: y, x1, x2, eps, X (with constant) and beta_true
    """
    rng = make_rng(seed) if rng is None else rng
    b0, b1, b2 = beta
    x1 = rng.standard_normal(n)
    x2 = rng.standard_normal(n)
    eps = rng.standard_normal(n)
    y = b0 + b1 * x1 + b2 * x2 + eps
    return dict(
        y=y, x1=x1, x2=x2, eps=eps,
        X=add_const(np.column_stack([x1, x2])),
        beta_true=np.asarray(beta, dtype=float),
    )


def omitted_regressor_check(y, x1, x2):
    """
    Contrast case: fit the short regression y ~ 1 + x1 and measure
    how its residuals line up against the constant, x1 and the
    omitted x2.

    The short residuals are orthogonal to (1, x1) by construction but
    generally not to x2, since they still carry b2 * x2.

    Returns
    -------
    dict with keys:
        beta_short     : short-regression coefficients [const, x1]
        inner_products : e_short' [1, x1, x2]
        orthogonal_included : bool, e_short orthogonal to (1, x1)
        inner_omitted  : e_short' x2
    """
    X_short = add_const(x1)
    b, _, e, _ = ols_fit(X_short, y)
    inner = np.column_stack([X_short, x2]).T @ e
    included = orthogonality_check(X_short, e)
    return dict(
        beta_short=b,
        inner_products=inner,
        orthogonal_included=included["orthogonal"],
        inner_omitted=inner[2],
    )


def monte_carlo_orthogonality(n, n_sims, beta=BETA_TRUE, seed=None, rng=None):
    """
    Repeat the linear DGP and OLS fit `n_sims` times.

    All replications draw from one generator, so the whole experiment is
    reproducible from a single seed.

    Parameters
    ----------
    n : int
        Sample size per simulation.
    n_sims : int
        Number of Monte Carlo replications.
    beta : sequence of 3 floats
        True coefficients.
    seed : int or None
        Random seed for reproducibility.
    rng : numpy.random.Generator or None
        Generator to draw from (takes precedence over `seed`).

    Returns
    -------
    dict with keys:
        betas         : array (n_sims, 3) of coefficient estimates
        max_abs_inner : array of max |X'e| per replication
        residual_sums : array of sum(e) per replication
        mean_beta     : column means of `betas`
    """
    rng = make_rng(seed) if rng is None else rng

    betas = np.empty((n_sims, 3))
    max_abs_inner = np.empty(n_sims)
    residual_sums = np.empty(n_sims)

    for sim in range(n_sims):
        data = simulate_linear_data(n, beta=beta, rng=rng)
        b, _, e, _ = ols_fit(data["X"], data["y"])
        betas[sim] = b
        max_abs_inner[sim] = np.max(np.abs(data["X"].T @ e))
        residual_sums[sim] = e.sum()

    return dict(
        betas=betas,
        max_abs_inner=max_abs_inner,
        residual_sums=residual_sums,
        mean_beta=betas.mean(axis=0),
    )
