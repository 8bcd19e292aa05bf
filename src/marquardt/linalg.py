from __future__ import annotations

import warnings
from typing import Tuple

import numpy as np
import scipy.linalg

from .errors import SingularMatrixError


def normal_equations(jac: np.ndarray, residuals: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
    """Return (JᵗJ, Jᵗr) for a Jacobian of shape (N, P) and residuals (N,)."""
    jac = np.asarray(jac, dtype=float)
    residuals = np.asarray(residuals, dtype=float)
    return jac.T @ jac, jac.T @ residuals


def damped_matrix(jtj: np.ndarray, damping: float) -> np.ndarray:
    """Marquardt-damped normal matrix JᵗJ + λ·diag(JᵗJ).

    Zero diagonal entries (parameters the model ignores) are floored at a
    tiny fraction of the largest one so their step comes out as zero.
    """
    jtj = np.asarray(jtj, dtype=float)
    diag = np.diag(jtj).copy()
    top = float(np.max(diag)) if diag.size else 0.0
    floor = np.finfo(float).eps * top if top > 0.0 else np.finfo(float).eps
    diag = np.maximum(diag, floor)
    return jtj + float(damping) * np.diag(diag)


def solve_spd(a: np.ndarray, b: np.ndarray) -> np.ndarray:
    """Solve a symmetric positive-(semi)definite system A x = b.

    Tries Cholesky first and falls back to pivoted LU. Raises
    SingularMatrixError if neither produces a finite solution.
    """
    a = np.asarray(a, dtype=float)
    b = np.asarray(b, dtype=float)
    a = 0.5 * (a + a.T)

    try:
        factor = scipy.linalg.cho_factor(a, lower=True, check_finite=True)
        x = scipy.linalg.cho_solve(factor, b, check_finite=False)
        if np.all(np.isfinite(x)):
            return x
    except (np.linalg.LinAlgError, ValueError):
        pass

    try:
        with warnings.catch_warnings():
            # Exact singularity is detected from the U diagonal below.
            warnings.simplefilter("ignore", scipy.linalg.LinAlgWarning)
            lu, piv = scipy.linalg.lu_factor(a, check_finite=True)
    except (np.linalg.LinAlgError, ValueError) as e:
        raise SingularMatrixError(f"Normal matrix could not be factorised: {e}") from e
    if np.any(np.diag(lu) == 0.0):
        raise SingularMatrixError("Normal matrix is singular.")
    x = scipy.linalg.lu_solve((lu, piv), b, check_finite=False)
    if not np.all(np.isfinite(x)):
        raise SingularMatrixError("Normal matrix is too ill-conditioned to solve.")
    return x


def invert_spd(a: np.ndarray) -> np.ndarray:
    """Inverse of a symmetric positive-definite matrix, symmetrised."""
    a = np.asarray(a, dtype=float)
    inv = solve_spd(a, np.eye(a.shape[0]))
    return 0.5 * (inv + inv.T)
