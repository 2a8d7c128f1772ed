"""Tests for conditional means and the CATE simulations."""

import numpy as np
import pytest

from ecosim import cate as m_cate
from ecosim.utils import EmptySubsetError


@pytest.fixture(scope="module")
def dependent():
    return m_cate.simulate_dependent(n=10 ** 6, seed=1234)


@pytest.fixture(scope="module")
def independent():
    return m_cate.simulate_independent(n=10 ** 6, seed=1234)


def test_conditional_mean_small_example():
    Y = np.array([1.0, 2.0, 3.0, 4.0, 5.0])
    X1 = np.array([1, 1, 2, 2, 1])
    X2 = np.array([0, 1, 1, 1, 1])
    assert m_cate.conditional_mean(Y, X1, X2, 2, 1) == pytest.approx(3.5)
    assert m_cate.conditional_mean(Y, X1, X2, 1, 1) == pytest.approx(3.5)
    assert m_cate.conditional_mean(Y, X1, X2, 1, 0) == pytest.approx(1.0)


def test_conditional_mean_empty_subset_raises():
    Y = np.array([1.0, 2.0])
    X1 = np.array([1, 1])
    X2 = np.array([0, 1])
    with pytest.raises(EmptySubsetError):
        m_cate.conditional_mean(Y, X1, X2, 2, 0)


def test_conditional_mean_length_mismatch():
    with pytest.raises(ValueError, match="equal length"):
        m_cate.conditional_mean(np.ones(3), np.ones(2), np.ones(3), 1, 1)


def test_compare_cate_empty_cell_propagates():
    Y = np.arange(4.0)
    X1 = np.array([1, 1, 1, 1])
    X2 = np.array([0, 1, 0, 1])
    with pytest.raises(EmptySubsetError):
        m_cate.compare_cate(Y, X1, X2, x1=1, x1_prime=2, x2=1)


def test_dependent_scenario_is_confounded(dependent):
    cmp = m_cate.compare_cate(dependent["Y"], dependent["X1"], dependent["X2"],
                              x1=1, x1_prime=2, x2=1)
    assert cmp["true_effect"] == pytest.approx(0.1)
    assert cmp["estimate"] == pytest.approx(dependent["expected_estimate"], abs=0.02)
    assert abs(cmp["discrepancy"]) > 2.5
    assert cmp["p_value"] < 1e-6


def test_independent_scenario_recovers_effect(independent):
    for x2 in (0, 1):
        cmp = m_cate.compare_cate(independent["Y"], independent["X1"],
                                  independent["X2"], x1=1, x1_prime=2, x2=x2)
        assert cmp["estimate"] == pytest.approx(0.1, abs=0.02)
        assert abs(cmp["discrepancy"]) < 0.02
        assert cmp["se"] < 0.01


def test_independent_sampling_probabilities(independent):
    assert np.mean(independent["X1"] == 1) == pytest.approx(0.4, abs=0.005)
    assert np.mean(independent["X2"] == 1) == pytest.approx(0.5, abs=0.005)
    assert set(np.unique(independent["omega"])) == {0, 2, 3, 5}


def test_dependent_omega_support(dependent):
    # X1 = 1 -> omega in {0, 2}; X1 = 2 -> omega in {3, 5}
    assert set(np.unique(dependent["omega"][dependent["X1"] == 1])) == {0, 2}
    assert set(np.unique(dependent["omega"][dependent["X1"] == 2])) == {3, 5}


def test_average_treatment_effect(independent, dependent):
    ate_b = m_cate.average_treatment_effect(independent["Y"], independent["X1"],
                                            independent["X2"], x1=1, x1_prime=2)
    assert ate_b["ate"] == pytest.approx(0.1, abs=0.02)
    assert sum(ate_b["weights"].values()) == pytest.approx(1.0)
    assert set(ate_b["cates"]) == {0, 1}

    ate_a = m_cate.average_treatment_effect(dependent["Y"], dependent["X1"],
                                            dependent["X2"], x1=1, x1_prime=2)
    assert ate_a["ate"] == pytest.approx(3.1, abs=0.02)


def test_conditional_means_table(independent):
    table = m_cate.conditional_means_table(independent["Y"], independent["X1"],
                                           independent["X2"])
    assert list(table.columns) == ["mean", "count", "std"]
    assert len(table) == 4
    assert table["count"].sum() == 10 ** 6
    assert table.loc[(2, 1), "mean"] == pytest.approx(
        m_cate.conditional_mean(independent["Y"], independent["X1"],
                                independent["X2"], 2, 1)
    )


def test_same_seed_same_estimates():
    a = m_cate.simulate_independent(n=5000, seed=11)
    b = m_cate.simulate_independent(n=5000, seed=11)
    ca = m_cate.compare_cate(a["Y"], a["X1"], a["X2"], 1, 2, 1)
    cb = m_cate.compare_cate(b["Y"], b["X1"], b["X2"], 1, 2, 1)
    assert ca == cb


def test_bad_probabilities_raise():
    with pytest.raises(ValueError, match="probabilities"):
        m_cate.simulate_independent(n=10, seed=0, omega_probs=(0.5, 0.5, 0.5, 0.5))


def test_compare_cate_single_observation_cells():
    Y = np.array([1.0, 1.5])
    X1 = np.array([1, 2])
    X2 = np.array([1, 1])

    cmp = m_cate.compare_cate(Y, X1, X2, x1=1, x1_prime=2, x2=1, true_effect=0.1)
    assert cmp["estimate"] == pytest.approx(0.5)
    assert cmp["se"] == 0.0
    assert cmp["z_stat"] == np.inf
    assert cmp["p_value"] == 0.0
    assert cmp["n_base"] == cmp["n_treat"] == 1

    below = m_cate.compare_cate(Y, X1, X2, 1, 2, 1, true_effect=0.9)
    assert below["z_stat"] == -np.inf

    exact = m_cate.compare_cate(Y, X1, X2, 1, 2, 1, true_effect=0.5)
    assert exact["z_stat"] == 0.0
    assert exact["p_value"] == pytest.approx(1.0)


def test_average_treatment_effect_missing_cell_raises():
    Y = np.array([1.0, 2.0, 3.0, 4.0])
    X1 = np.array([1, 1, 1, 2])
    X2 = np.array([0, 0, 1, 1])
    with pytest.raises(EmptySubsetError, match="X1 == 2 and X2 == 0"):
        m_cate.average_treatment_effect(Y, X1, X2, x1=1, x1_prime=2)
