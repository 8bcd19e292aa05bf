import numpy as np
import pytest
import scipy.stats

from marquardt import DegreesOfFreedomError
from marquardt.statistics import (
    chi_squared_pvalue,
    chi_squared_quantile,
    correlation,
    covariance,
    reduced_chi_squared,
    standard_errors,
)


def test_covariance_matches_linear_regression_formula():
    rng = np.random.default_rng(3)
    x = np.linspace(0.0, 5.0, 30)
    design = np.column_stack([x, np.ones_like(x)])
    y = 2.0 * x - 1.0 + rng.normal(0.0, 0.3, size=x.size)

    coef, *_ = np.linalg.lstsq(design, y, rcond=None)
    resid = y - design @ coef
    chi2 = float(resid @ resid)
    dof = x.size - 2

    cov = covariance(design, chi2, dof)
    expected = np.linalg.inv(design.T @ design) * chi2 / dof

    np.testing.assert_allclose(cov, expected, rtol=1e-10)
    np.testing.assert_allclose(standard_errors(cov), np.sqrt(np.diag(expected)))


def test_singular_jacobian_warns_and_uses_pseudo_inverse():
    jac = np.column_stack([np.arange(5.0), np.zeros(5)])
    with pytest.warns(UserWarning, match="pseudo-inverse"):
        cov = covariance(jac, 3.0, 3)
    assert cov[1, 1] == pytest.approx(0.0, abs=1e-12)
    assert cov[0, 0] > 0.0


def test_non_positive_dof_raises():
    with pytest.raises(DegreesOfFreedomError):
        covariance(np.ones((2, 2)), 1.0, 0)
    with pytest.raises(DegreesOfFreedomError):
        reduced_chi_squared(1.0, -1)
    with pytest.raises(DegreesOfFreedomError):
        chi_squared_quantile(0)


def test_standard_errors_clip_round_off():
    cov = np.array([[4.0, 0.0], [0.0, -1e-18]])
    np.testing.assert_array_equal(standard_errors(cov), [2.0, 0.0])


def test_correlation_has_unit_diagonal():
    cov = np.array([[4.0, 1.0], [1.0, 9.0]])
    corr = correlation(cov)
    np.testing.assert_allclose(np.diag(corr), 1.0)
    assert corr[0, 1] == pytest.approx(1.0 / 6.0)


def test_chi_squared_helpers_follow_scipy():
    assert chi_squared_quantile(10, 0.99) == pytest.approx(scipy.stats.chi2.ppf(0.99, 10))
    assert chi_squared_pvalue(10.0, 10) == pytest.approx(scipy.stats.chi2.sf(10.0, 10))
