"""
OLS Residual Orthogonality
==========================

Fits y = 1 + x1 + x2 + eps on simulated data and checks the normal
equations X'e = 0, the zero residual sum, the omitted-regressor
contrast and the Frisch-Waugh-Lovell equivalence, using methods from
the ecosim package.

Run with no arguments; pass --figdir to also save a histogram of the
Monte Carlo slope estimates.
"""

import argparse
import numpy as np
import sys
import os

# Add project root to path so ecosim package is importable
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", ".."))

from ecosim.utils import make_rng
from ecosim import ols as m_ols
from ecosim import fwl as m_fwl


def save_slope_histogram(mc, beta_true, figdir):
    """Histogram of Monte Carlo slope estimates on x1 and x2."""
    import matplotlib
    matplotlib.use("Agg")
    import matplotlib.pyplot as plt

    fig, axes = plt.subplots(1, 2, figsize=(10, 4))
    for j, ax in zip((1, 2), axes):
        ax.hist(mc["betas"][:, j], bins=40, color="#2171B5", alpha=.6,
                edgecolor="white")
        ax.axvline(beta_true[j], color="#DE2D26", lw=2, ls="--",
                   label=f"True = {beta_true[j]:.1f}")
        ax.set_xlabel(f"beta_hat (x{j})")
        ax.set_title(f"Monte Carlo slope on x{j}")
        ax.legend(fontsize=8)
    fig.tight_layout()

    os.makedirs(figdir, exist_ok=True)
    path = os.path.join(figdir, "ols_slopes_hist.png")
    fig.savefig(path, bbox_inches="tight", dpi=150)
    plt.close(fig)
    return path


def positive_int(value):
    n = int(value)
    if n < 1:
        raise argparse.ArgumentTypeError(f"must be >= 1, got {n}")
    return n


def main(argv=None):
    parser = argparse.ArgumentParser(description=__doc__.split("\n")[1])
    parser.add_argument("--seed", type=int, default=m_ols.DEFAULT_SEED)
    parser.add_argument("--n", type=positive_int, default=1000)
    parser.add_argument("--n-sims", type=positive_int, default=1000)
    parser.add_argument("--figdir", default=None,
                        help="directory for the slope histogram (skipped if unset)")
    args = parser.parse_args(argv)

    print("=" * 60)
    print("OLS Residual Orthogonality")
    print("=" * 60)

    rng = make_rng(args.seed)

    # --- 1) Generate and fit ---
    data = m_ols.simulate_linear_data(args.n, rng=rng)
    res = m_ols.estimate(data["X"], data["y"])
    print(f"\n[OLS] beta_hat = {np.array2string(res['beta'], precision=4)}")
    print(f"  SE: {np.array2string(res['se'], precision=4)}")
    print(f"  True beta: {np.array2string(data['beta_true'], precision=1)}")

    # --- 2) Normal equations ---
    orth = m_ols.orthogonality_check(data["X"], res["residuals"])
    print(f"\n[Orthogonality] X'e = "
          f"{np.array2string(orth['inner_products'], precision=3)}")
    print(f"  max |X'e| = {orth['max_abs']:.3e} (tol {orth['tol']:.1e}), "
          f"sum(e) = {orth['residual_sum']:.3e}, "
          f"Orthogonal = {orth['orthogonal']}")

    # --- 3) Omitted regressor contrast ---
    short = m_ols.omitted_regressor_check(data["y"], data["x1"], data["x2"])
    print(f"\n[Short regression] beta_hat = "
          f"{np.array2string(short['beta_short'], precision=4)}")
    print(f"  e_short'[1, x1, x2] = "
          f"{np.array2string(short['inner_products'], precision=3)}")
    print(f"  Orthogonal to included = {short['orthogonal_included']}, "
          f"e_short'x2 = {short['inner_omitted']:.2f}")

    # --- 4) FWL: auxiliary regression ---
    aux = m_fwl.auxiliary_regression(data["y"], data["x1"], data["x2"])
    fwl_check = m_fwl.verify_fwl(data["y"], data["X"], idx_interest=1)
    print(f"\n[FWL] Full = {fwl_check['full_coef']:.6f}, "
          f"Auxiliary = {aux['aux_coef']:.6f}, Match = {fwl_check['match']}")

    # --- 5) Monte Carlo ---
    mc = m_ols.monte_carlo_orthogonality(args.n, args.n_sims, rng=rng)
    print(f"\n[Monte Carlo] {args.n_sims} replications, n = {args.n}")
    print(f"  mean beta_hat = {np.array2string(mc['mean_beta'], precision=4)}")
    print(f"  max |X'e| over replications = {mc['max_abs_inner'].max():.3e}")
    print(f"  max |sum(e)| over replications = "
          f"{np.abs(mc['residual_sums']).max():.3e}")

    if args.figdir:
        path = save_slope_histogram(mc, data["beta_true"], args.figdir)
        print(f"\n[Figure] saved {path}")


if __name__ == "__main__":
    main()
