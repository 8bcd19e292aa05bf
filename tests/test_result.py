import logging

import numpy as np
import pytest
import uncertainties

from marquardt import FitResult, models


def _result(**kw):
    values = dict(
        params=np.array([1.5, -2.0]),
        stderr=np.array([0.1, 0.2]),
        chi_squared=12.0,
        covariance=np.array([[0.01, 0.005], [0.005, 0.04]]),
        dof=10,
    )
    values.update(kw)
    return FitResult(**values)


def test_default_names_and_named_values():
    res = _result()
    assert res.names == ("p0", "p1")
    assert res.named() == {"p0": (1.5, 0.1), "p1": (-2.0, 0.2)}

    named = _result(param_names=("a", "b"))
    assert named.names == ("a", "b")


def test_derived_statistics():
    res = _result()
    assert res.reduced_chi_squared == pytest.approx(1.2)
    assert 0.0 < res.p_value < 1.0
    assert res.correlation[0, 1] == pytest.approx(0.25)
    assert res.passes_chi_squared(0.99)


def test_within_checks_each_parameter():
    res = _result()
    np.testing.assert_array_equal(res.within([1.7, -2.0]), [True, True])
    np.testing.assert_array_equal(res.within([1.9, -2.0]), [False, True])
    np.testing.assert_array_equal(res.within([1.9, -2.0], k=5.0), [True, True])
    with pytest.raises(ValueError):
        res.within([1.0])


def test_summary_and_log(caplog):
    res = _result(param_names=("slope", "b"))
    text = res.summary()
    assert "slope = 1.50(10)" in text
    assert "b     = -2.00(20)" in text
    assert "dof=10" in text

    log = logging.getLogger("tests.result")
    with caplog.at_level(logging.INFO, logger="tests.result"):
        res.log(log)
    assert [r.getMessage() for r in caplog.records] == text.splitlines()


def test_to_ufloats_carries_covariance():
    model = models.gaussian()
    x = np.arange(1.0, 61.0)
    rng = np.random.default_rng(11)
    y = model([300.0, 30.0, 5.0], x) + rng.normal(0.0, 0.5, size=x.size)
    res = model.fit((x, y), [250.0, 28.0, 6.0])

    u = res.to_ufloats()
    assert set(u) == {"w", "mean", "stddev"}
    assert u["mean"].nominal_value == pytest.approx(res.params[1])
    cov = np.array(uncertainties.covariance_matrix([u["w"], u["mean"], u["stddev"]]))
    np.testing.assert_allclose(cov, res.covariance, rtol=1e-6, atol=1e-12)
