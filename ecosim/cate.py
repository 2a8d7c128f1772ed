"""
Section 3: Conditional Average Treatment Effects (CATE)

Simulates a discrete treatment X1 in {1, 2}, a conditioning variable
X2 in {0, 1} and an unobserved factor omega, with outcome

    Y = TAU * X1 + X2 + omega.

Holding omega fixed, moving X1 from 1 to 2 changes Y by TAU = 0.1 for
every X2, so the true CATE is 0.1. The difference in conditional means
E[Y | X1=2, X2] - E[Y | X1=1, X2] recovers it only when omega is
independent of X1 given X2:

  - scenario A (dependent):  omega = X1^2 + c, c = +/-1.  The naive
    estimate picks up E[omega | X1=2] - E[omega | X1=1] = 3.
  - scenario B (independent): omega drawn from {0, 2, 3, 5} regardless
    of X1 and X2.  The naive estimate is unbiased.
"""

import numpy as np
import pandas as pd
from scipy import stats
from .utils import EmptySubsetError, make_rng

TAU = 0.1
TRUE_EFFECT = TAU * (2 - 1)

X1_VALUES = (1, 2)
X1_PROBS = (0.4, 0.6)
X2_PROB = 0.5
C_VALUES = (-1, 1)
OMEGA_VALUES = (0, 2, 3, 5)
OMEGA_PROBS = (0.2, 0.2, 0.3, 0.3)

N_DEFAULT = 10 ** 6


def _check_probs(probs):
    p = np.asarray(probs, dtype=float)
    if np.any(p < 0) or not np.isclose(p.sum(), 1.0):
        raise ValueError(f"probabilities must be non-negative and sum to 1, got {probs}")
    return p


def _draw_covariates(n, rng, x1_probs=X1_PROBS, x2_prob=X2_PROB):
    X1 = rng.choice(X1_VALUES, size=n, p=_check_probs(x1_probs))
    X2 = rng.choice((0, 1), size=n, p=_check_probs((1 - x2_prob, x2_prob)))
    return X1, X2


def simulate_dependent(n=N_DEFAULT, seed=None, rng=None, x1_probs=X1_PROBS,
                       x2_prob=X2_PROB):
    """
    Scenario A: the unobserved factor depends on treatment.

    omega = X1^2 + c, with c = -1 or +1 each with probability 0.5.

    Parameters
    ----------
    n : int
        Sample size.
    seed : int or None
        Seed for a fresh generator (ignored if `rng` is given).
    rng : numpy.random.Generator or None
        Generator to draw from.
    x1_probs : pair of floats
        Pr(X1 = 1), Pr(X1 = 2).
    x2_prob : float
        Pr(X2 = 1).

    Returns
    -------
    dict with arrays: Y, X1, X2, omega; scalars true_effect and
    expected_estimate (the probability limit of the naive estimate)
    """
    rng = make_rng(seed) if rng is None else rng
    X1, X2 = _draw_covariates(n, rng, x1_probs, x2_prob)
    c = rng.choice(C_VALUES, size=n)
    omega = X1 ** 2 + c
    Y = TAU * X1 + X2 + omega
    return dict(
        Y=Y, X1=X1, X2=X2, omega=omega,
        true_effect=TRUE_EFFECT,
        expected_estimate=TRUE_EFFECT + (2 ** 2 - 1 ** 2),
    )


def simulate_independent(n=N_DEFAULT, seed=None, rng=None, x1_probs=X1_PROBS,
                         x2_prob=X2_PROB, omega_values=OMEGA_VALUES,
                         omega_probs=OMEGA_PROBS):
    """
    Scenario B: the unobserved factor is independent of (X1, X2).

    Returns
    -------
    dict with arrays: Y, X1, X2, omega; scalars true_effect and
    expected_estimate (equal here)
    """
    rng = make_rng(seed) if rng is None else rng
    X1, X2 = _draw_covariates(n, rng, x1_probs, x2_prob)
    omega = rng.choice(omega_values, size=n, p=_check_probs(omega_probs))
    Y = TAU * X1 + X2 + omega
    return dict(
        Y=Y, X1=X1, X2=X2, omega=omega,
        true_effect=TRUE_EFFECT,
        expected_estimate=TRUE_EFFECT,
    )


def _cell(Y, X1, X2, x1, x2):
    Y, X1, X2 = np.asarray(Y), np.asarray(X1), np.asarray(X2)
    if not (len(Y) == len(X1) == len(X2)):
        raise ValueError(
            f"Y, X1, X2 must have equal length, got {len(Y)}, {len(X1)}, {len(X2)}"
        )
    sub = Y[(X1 == x1) & (X2 == x2)]
    if sub.size == 0:
        raise EmptySubsetError(f"no observations with X1 == {x1} and X2 == {x2}")
    return sub


def conditional_mean(Y, X1, X2, x1, x2):
    """
    Sample mean of Y over the rows where X1 == x1 and X2 == x2.

    Raises
    ------
    EmptySubsetError
        If no row matches; the caller decides whether to re-sample.
    """
    return float(_cell(Y, X1, X2, x1, x2).mean())


def conditional_means_table(Y, X1, X2):
    """
    Mean, count and std of Y for every observed (X1, X2) cell.

    Returns
    -------
    pandas.DataFrame indexed by (X1, X2) with columns mean, count, std
    """
    df = pd.DataFrame({"Y": Y, "X1": X1, "X2": X2})
    return df.groupby(["X1", "X2"])["Y"].agg(["mean", "count", "std"])


def compare_cate(Y, X1, X2, x1, x1_prime, x2, true_effect=TRUE_EFFECT):
    """
    Empirical CATE of moving X1 from x1 to x1_prime at X2 = x2,
    compared to the analytically known effect.

    estimate = mean(Y | X1=x1_prime, X2=x2) - mean(Y | X1=x1, X2=x2)

    Parameters
    ----------
    Y, X1, X2 : ndarray, shape (n,)
        Outcome, treatment and conditioning variable.
    x1, x1_prime : scalar
        Baseline and comparison treatment levels.
    x2 : scalar
        Conditioning value.
    true_effect : float
        Analytic CATE.

    Returns
    -------
    dict with keys:
        estimate      : empirical CATE
        true_effect   : analytic CATE
        discrepancy   : estimate - true_effect
        se            : two-sample standard error of the estimate
        z_stat        : discrepancy / se
        p_value       : two-sided normal p-value for estimate == true_effect
        mean_base, mean_treat : the two conditional means
        n_base, n_treat       : the two cell sizes
    """
    base = _cell(Y, X1, X2, x1, x2)
    treat = _cell(Y, X1, X2, x1_prime, x2)

    estimate = treat.mean() - base.mean()
    discrepancy = estimate - true_effect
    var_b = base.var(ddof=1) if base.size > 1 else 0.0
    var_t = treat.var(ddof=1) if treat.size > 1 else 0.0
    se = np.sqrt(var_b / base.size + var_t / treat.size)

    if se > 0:
        z_stat = discrepancy / se
    else:
        z_stat = 0.0 if discrepancy == 0 else np.copysign(np.inf, discrepancy)
    p_value = 2 * stats.norm.sf(abs(z_stat))

    return dict(
        estimate=float(estimate),
        true_effect=true_effect,
        discrepancy=float(discrepancy),
        se=float(se),
        z_stat=float(z_stat),
        p_value=float(p_value),
        mean_base=float(base.mean()),
        mean_treat=float(treat.mean()),
        n_base=base.size,
        n_treat=treat.size,
    )


def average_treatment_effect(Y, X1, X2, x1, x1_prime):
    """
    ATE as the average of the per-X2 CATEs, weighted by the sample
    share of each X2 value.

    Returns
    -------
    dict with keys:
        ate     : weighted average of the CATEs
        cates   : dict x2 -> CATE estimate
        weights : dict x2 -> sample share of X2 == x2
    """
    X2 = np.asarray(X2)
    levels, counts = np.unique(X2, return_counts=True)
    weights = counts / counts.sum()

    cates = {}
    for level in levels:
        cates[level.item()] = (conditional_mean(Y, X1, X2, x1_prime, level)
                               - conditional_mean(Y, X1, X2, x1, level))

    ate = sum(w * cates[level.item()] for level, w in zip(levels, weights))
    return dict(
        ate=float(ate),
        cates=cates,
        weights={level.item(): float(w) for level, w in zip(levels, weights)},
    )
