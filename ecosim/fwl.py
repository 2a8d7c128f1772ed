"""
Section 2: Frisch-Waugh-Lovell (FWL) Theorem

Implements the partialing-out procedure:
  beta_hat_1 from y ~ 1 + x1 + x2 equals the slope from regressing y
  (no intercept) on the residual of x1 after regressing x1 on (1, x2).
"""

import numpy as np
from .utils import ols_fit, add_const, SingularMatrixError

# ||r|| below this fraction of ||x|| means x lies in the span of the controls
RESID_TOL = 1e-10


def _check_residual(r, x, name="x1"):
    if np.linalg.norm(r) <= RESID_TOL * np.linalg.norm(x):
        raise SingularMatrixError(
            f"{name} is a linear combination of the controls; "
            f"nothing left after partialing out"
        )


def auxiliary_regression(y, x1, x2):
    """
    Two-step auxiliary regression for the coefficient on x1.

    Step 1: regress x1 on (1, x2) and keep the residual r.
    Step 2: regress y on r with no intercept.

    r is orthogonal to the constant and x2, so there is no need to
    residualise y as well.

    Parameters
    ----------
    y : ndarray, shape (n,)
        Outcome vector.
    x1 : ndarray, shape (n,)
        Regressor of interest.
    x2 : ndarray, shape (n,) or (n, k2)
        Control regressor(s); a constant is added.

    Returns
    -------
    dict with keys:
        resid_x1  : residual r of x1 on (1, x2)
        aux_beta  : coefficients of the first-step regression
        aux_coef  : scalar slope of y on r (no intercept)

    Raises
    ------
    SingularMatrixError
        If x1 is collinear with (1, x2), so that r is only rounding noise.
    """
    x1 = np.asarray(x1, dtype=float)
    aux_beta, _, r, _ = ols_fit(add_const(x2), x1)
    _check_residual(r, x1)
    aux_coef, _, _, _ = ols_fit(r[:, None], y)
    return dict(resid_x1=r, aux_beta=aux_beta, aux_coef=aux_coef[0])


def partial_out(y, X1, X2):
    """
    Residualise y and X1 on the controls X2, then regress residual on
    residual.

    The general form of `auxiliary_regression`: X2 is used as given (no
    constant is added) and X1 may hold several regressors of interest.

    Parameters
    ----------
    y : ndarray, shape (n,)
    X1 : ndarray, shape (n,) or (n, k1)
        Regressor(s) whose coefficients are wanted.
    X2 : ndarray, shape (n, k2)
        Controls, including the constant column if the full model has one.

    Returns
    -------
    dict with keys:
        resid_y  : residual of y on X2
        resid_X1 : residual(s) of X1 on X2
        fwl_coef : slope(s) of resid_y on resid_X1

    Raises
    ------
    SingularMatrixError
        If any column of X1 is collinear with X2.
    """
    X1 = np.asarray(X1, dtype=float)
    if X1.ndim == 2 and X1.shape[1] == 1:
        X1 = X1[:, 0]

    _, _, resid_y, _ = ols_fit(X2, y)
    if X1.ndim == 1:
        _, _, resid_X1, _ = ols_fit(X2, X1)
        _check_residual(resid_X1, X1)
        fwl_coef = (resid_X1 @ resid_y) / (resid_X1 @ resid_X1)
    else:
        cols = []
        for j in range(X1.shape[1]):
            r = ols_fit(X2, X1[:, j])[2]
            _check_residual(r, X1[:, j], name=f"X1[:, {j}]")
            cols.append(r)
        resid_X1 = np.column_stack(cols)
        fwl_coef = ols_fit(resid_X1, resid_y)[0]

    return dict(resid_y=resid_y, resid_X1=resid_X1, fwl_coef=fwl_coef)


def verify_fwl(y, X_full, idx_interest=1, tol=1e-10):
    """
    Fit the full model once, then recover column `idx_interest`'s
    coefficient by partialing out every other column, and compare.

    Returns
    -------
    dict with keys:
        full_coef : coefficient from the full fit
        fwl_coef  : coefficient from the partialled fit
        abs_diff  : |full_coef - fwl_coef|
        match     : bool, abs_diff < tol * max(1, |full_coef|)
    """
    X_full = np.asarray(X_full, dtype=float)
    b_full, _, _, _ = ols_fit(X_full, y)

    others = [j for j in range(X_full.shape[1]) if j != idx_interest]
    result = partial_out(y, X_full[:, idx_interest], X_full[:, others])
    full_coef = b_full[idx_interest]
    abs_diff = abs(full_coef - result["fwl_coef"])

    return dict(
        full_coef=full_coef,
        fwl_coef=result["fwl_coef"],
        abs_diff=abs_diff,
        match=abs_diff < tol * max(1.0, abs(full_coef)),
    )
