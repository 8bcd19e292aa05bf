import numpy as np
import pytest

from marquardt import BatchFit, DegreesOfFreedomError, fit_many, models


def _histograms(means, seed=0):
    model = models.gaussian()
    rng = np.random.default_rng(seed)
    x = np.arange(1.0, 81.0)
    return [
        (x, model([200.0, m, 6.0], x) + rng.normal(0.0, 0.2, size=x.size))
        for m in means
    ]


def test_fit_many_keeps_input_order():
    means = [20.0, 30.0, 40.0, 50.0]
    guesses = [{"w": 150.0, "mean": m + 3.0, "stddev": 5.0} for m in means]

    out = fit_many(models.gaussian(), _histograms(means), guesses, max_workers=4)

    assert [b.index for b in out] == [0, 1, 2, 3]
    assert all(isinstance(b, BatchFit) and b.success for b in out)
    fitted = [b.result.params[1] for b in out]
    np.testing.assert_allclose(fitted, means, atol=0.1)
    assert out[0].result.names == ("w", "mean", "stddev")


def test_fit_many_records_failures_per_dataset():
    datasets = _histograms([25.0, 35.0])
    datasets.insert(1, [(1.0, 2.0), (2.0, 3.0)])

    out = fit_many(models.gaussian(), datasets, [200.0, 30.0, 6.0])

    assert [b.success for b in out] == [True, False, True]
    assert isinstance(out[1].error, DegreesOfFreedomError)
    assert out[1].result is None


def test_fit_many_with_no_datasets():
    assert fit_many(models.gaussian(), [], [1.0, 2.0, 3.0]) == []


def test_fit_many_accepts_an_array_of_guesses():
    means = [25.0, 45.0]
    guesses = np.array([[150.0, m + 2.0, 5.0] for m in means])

    out = fit_many(models.gaussian(), _histograms(means, seed=2), guesses)

    assert all(b.success for b in out)
    np.testing.assert_allclose([b.result.params[1] for b in out], means, atol=0.1)


def test_fit_many_rejects_malformed_guesses_up_front():
    datasets = _histograms([25.0, 45.0])
    with pytest.raises(ValueError, match="3 guesses for 2 datasets"):
        fit_many(models.gaussian(), datasets, np.ones((3, 3)))
    with pytest.raises(ValueError, match="3 parameters"):
        fit_many(models.gaussian(), datasets, np.ones((2, 4)))
