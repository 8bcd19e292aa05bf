"""Finite-difference Jacobian of a model callback.

Perturbations that land outside the model's domain fall back to the
one-sided difference in the other direction, so a parameter sitting next to
a domain edge still gets a usable derivative.
"""

from __future__ import annotations

import logging
from typing import Optional

import numpy as np

from .errors import JacobianUndefinedError
from .evaluation import ModelFunc, evaluate_model

logger = logging.getLogger(__name__)


def perturbation(value: float, step: float) -> float:
    """Relative step |value|·step with an absolute floor of `step`."""
    return max(abs(float(value)) * step, step)


def jacobian(
    model: ModelFunc,
    params: np.ndarray,
    x: np.ndarray,
    *,
    base: Optional[np.ndarray] = None,
    method: str = "central",
    step: float = 1e-6,
) -> np.ndarray:
    """Estimate the (N, P) Jacobian of `model` at `params`.

    Parameters
    ----------
    model : callable(params, x) -> y
    params : parameter vector, shape (P,)
    x : independent variable samples, shape (N,)
    base : model values at `params` if already known; saves one evaluation.
    method : "central" or "forward".
    step : relative perturbation size.

    Raises
    ------
    JacobianUndefinedError
        If the base point is inadmissible, or a parameter cannot be perturbed
        in either direction.
    """
    params = np.asarray(params, dtype=float)
    x = np.asarray(x, dtype=float)
    if method not in ("central", "forward"):
        raise ValueError(f"Unknown jacobian method {method!r}.")

    if base is None:
        ev = evaluate_model(model, params, x)
        if not ev.ok:
            raise JacobianUndefinedError(
                -1, f"Jacobian undefined: model fails at the base point ({ev.message})."
            )
        base = ev.values
    base = np.asarray(base, dtype=float)

    jac = np.empty((x.shape[0], params.shape[0]), dtype=float)
    for j in range(params.shape[0]):
        h = perturbation(params[j], step)

        up = params.copy()
        up[j] += h
        plus = evaluate_model(model, up, x)

        if method == "central" or not plus.ok:
            down = params.copy()
            down[j] -= h
            minus = evaluate_model(model, down, x)
        else:
            minus = None

        if method == "central" and plus.ok and minus.ok:
            # Use the actual spacing; p + h and p - h are rounded.
            jac[:, j] = (plus.values - minus.values) / (up[j] - down[j])
        elif plus.ok:
            jac[:, j] = (plus.values - base) / (up[j] - params[j])
        elif minus is not None and minus.ok:
            logger.debug("Parameter %d: forward perturbation rejected (%s); using backward difference.", j, plus.message)
            jac[:, j] = (base - minus.values) / (params[j] - down[j])
        else:
            raise JacobianUndefinedError(j)
    return jac
