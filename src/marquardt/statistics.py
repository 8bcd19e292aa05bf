"""Parameter covariance and goodness-of-fit statistics."""

from __future__ import annotations

from warnings import warn

import numpy as np
import scipy.stats

from .errors import DegreesOfFreedomError, SingularMatrixError
from .linalg import invert_spd


def reduced_chi_squared(chi_squared: float, dof: int) -> float:
    if dof <= 0:
        raise DegreesOfFreedomError(
            f"Reduced chi-squared needs dof >= 1; got {dof}."
        )
    return float(chi_squared) / float(dof)


def covariance(jac: np.ndarray, chi_squared: float, dof: int) -> np.ndarray:
    """Covariance (JᵗJ)⁻¹ scaled by the reduced chi-squared.

    Falls back to a pseudo-inverse (with a warning) when JᵗJ is singular,
    e.g. when a parameter has no influence on the model at the optimum.
    """
    scale = reduced_chi_squared(chi_squared, dof)
    jac = np.asarray(jac, dtype=float)
    jtj = jac.T @ jac
    try:
        unscaled = invert_spd(jtj)
    except SingularMatrixError:
        warn(
            "JᵗJ is singular at the optimum; using a pseudo-inverse for the covariance.",
            UserWarning,
        )
        unscaled = np.linalg.pinv(jtj)
    return unscaled * scale


def standard_errors(cov: np.ndarray) -> np.ndarray:
    """Square roots of the covariance diagonal (round-off negatives clipped)."""
    return np.sqrt(np.clip(np.diag(np.asarray(cov, dtype=float)), 0.0, None))


def correlation(cov: np.ndarray) -> np.ndarray:
    cov = np.asarray(cov, dtype=float)
    err = standard_errors(cov)
    with np.errstate(divide="ignore", invalid="ignore"):
        corr = cov / np.outer(err, err)
    corr[~np.isfinite(corr)] = 0.0
    np.fill_diagonal(corr, np.where(err > 0, 1.0, 0.0))
    return corr


def chi_squared_quantile(dof: int, q: float = 0.99) -> float:
    """Quantile `q` of the chi-squared distribution with `dof` degrees of freedom."""
    if dof <= 0:
        raise DegreesOfFreedomError(f"dof must be >= 1; got {dof}.")
    return float(scipy.stats.chi2.ppf(q, dof))


def chi_squared_pvalue(chi_squared: float, dof: int) -> float:
    """Probability of a chi-squared value at least this large under the fit."""
    if dof <= 0:
        raise DegreesOfFreedomError(f"dof must be >= 1; got {dof}.")
    return float(scipy.stats.chi2.sf(chi_squared, dof))
