import numpy as np
import pytest
import scipy.stats

from marquardt import DomainError, Model, models
from marquardt.models.kmer import KMER_MASS


def test_gaussian_matches_scaled_normal_pdf():
    model = models.gaussian()
    x = np.linspace(-10.0, 30.0, 81)

    y = model([100.0, 10.0, 10.0], x)

    np.testing.assert_allclose(y, 100.0 * scipy.stats.norm.pdf(x, 10.0, 10.0))
    assert model.param_names == ("w", "mean", "stddev")


@pytest.mark.parametrize("stddev", [0.0, -1.0])
def test_gaussian_rejects_non_positive_width(stddev):
    with pytest.raises(DomainError):
        models.gaussian_func(np.array([1.0, 0.0, stddev]), np.arange(3.0))


def test_kmer_mixture_mass_above_one_is_fixed():
    x = np.arange(2.0, 2001.0)
    y = models.kmer_mixture_func(np.array([0.86, 0.95, 100.0, 20.0]), x)

    assert np.all(y >= 0.0)
    assert float(np.sum(y)) == pytest.approx(KMER_MASS, rel=1e-5)


def test_kmer_mixture_is_poisson_then_gaussian():
    x = np.arange(1.0, 301.0)
    y = models.kmer_mixture().eval(x, mix=0.86, lam=0.95, mean=100.0, stddev=20.0)

    # Error k-mers dominate low multiplicities, genuine ones peak at the mean.
    assert y[0] > y[99] > y[20]
    assert int(np.argmax(y[20:])) + 21 == 100


@pytest.mark.parametrize("params", [(0.5, -0.1, 100.0, 10.0), (0.5, 1.0, 100.0, 0.0), (0.5, 0.0, 100.0, 10.0)])
def test_kmer_mixture_domain(params):
    with pytest.raises(DomainError):
        models.kmer_mixture_func(np.array(params), np.arange(1.0, 10.0))


def test_model_guess_vector_orders_by_name():
    model = models.gaussian()
    vec = model.guess_vector({"stddev": 3.0, "w": 1.0, "mean": 2.0})
    np.testing.assert_array_equal(vec, [1.0, 2.0, 3.0])

    with pytest.raises(TypeError, match="Missing"):
        model.guess_vector({"w": 1.0})
    with pytest.raises(KeyError):
        model.guess_vector({"w": 1.0, "mean": 2.0, "stddev": 3.0, "height": 4.0})
    with pytest.raises(ValueError):
        model.guess_vector([1.0, 2.0])


def test_from_function_validates_names():
    def f(params, x):
        return params[0] * x

    assert Model.from_function(f, ["a"]).name == "f"
    with pytest.raises(TypeError):
        Model.from_function(f, [])
    with pytest.raises(TypeError):
        Model.from_function(f, ["a", "a"])
