from __future__ import annotations

import scipy.stats

from ..errors import DomainError
from ..model import Model


def gaussian_func(params, x):
    """Scaled normal density: y = w * N(x; mean, stddev)."""
    w, mean, stddev = params
    if stddev <= 0.0:
        raise DomainError(f"gaussian: stddev must be > 0; got {stddev}")
    return w * scipy.stats.norm.pdf(x, loc=mean, scale=stddev)


def gaussian(*, name: str = "gaussian") -> Model:
    """Return the Gaussian peak Model.

    Parameters in the model
    -----------------------
    w      : area under the curve
    mean   : centre
    stddev : width (> 0)
    """
    return Model.from_function(gaussian_func, ("w", "mean", "stddev"), name=name)
