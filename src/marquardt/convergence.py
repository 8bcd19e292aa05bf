from __future__ import annotations

from typing import Optional

import numpy as np

from .options import LMOptions


def relative_decrease(before: float, after: float) -> float:
    """Fractional drop of the objective; 0 if it did not drop."""
    if before <= 0.0:
        return 0.0
    return max(0.0, (before - after) / before)


def predicted_reduction(step: np.ndarray, gradient: np.ndarray, jtj: np.ndarray) -> float:
    """Objective reduction predicted by the linearised model for `step`.

    With r(p + Δ) ≈ r - JΔ the sum of squares drops by 2Δᵗg - ΔᵗJᵗJΔ.
    """
    step = np.asarray(step, dtype=float)
    return float(2.0 * step @ gradient - step @ (jtj @ step))


def is_negligible_step(step: np.ndarray, params: np.ndarray, tol: float) -> bool:
    return float(np.linalg.norm(step)) <= tol * (float(np.linalg.norm(params)) + tol)


def gradient_cosine(jac: np.ndarray, residuals: np.ndarray, gradient: np.ndarray) -> float:
    """Largest |cos| between the residual vector and any Jacobian column."""
    rnorm = float(np.linalg.norm(residuals))
    if rnorm == 0.0:
        return 0.0
    cnorm = np.linalg.norm(jac, axis=0)
    mask = cnorm > 0.0
    if not np.any(mask):
        return 0.0
    return float(np.max(np.abs(gradient[mask]) / (cnorm[mask] * rnorm)))


class ConvergenceJudge:
    """Decides whether the iteration has reached a minimum.

    Every method returns a human-readable reason when the fit has converged,
    and None otherwise.
    """

    def __init__(self, options: LMOptions):
        self.options = options

    def at_point(self, objective: float, jac: np.ndarray, residuals: np.ndarray, gradient: np.ndarray) -> Optional[str]:
        """Tests needing only the current point and its Jacobian."""
        if objective == 0.0:
            return "exact fit (zero residuals)"
        cos = gradient_cosine(jac, residuals, gradient)
        if cos <= self.options.gradient_tolerance:
            return f"gradient orthogonal to residuals (cos={cos:.3g})"
        return None

    def after_accept(
        self,
        before: float,
        after: float,
        step: np.ndarray,
        params: np.ndarray,
        damping: float,
    ) -> Optional[str]:
        opts = self.options
        if is_negligible_step(step, params, opts.step_tolerance):
            return "negligible parameter step"
        if damping <= opts.stationary_damping:
            drop = relative_decrease(before, after)
            if drop < opts.relative_tolerance:
                return f"relative decrease {drop:.3g} below tolerance"
        return None

    def after_reject(
        self,
        objective: float,
        step: np.ndarray,
        params: np.ndarray,
        gradient: np.ndarray,
        jtj: np.ndarray,
        damping: float,
    ) -> Optional[str]:
        """A well-conditioned step that cannot improve the fit means a minimum."""
        opts = self.options
        if damping > opts.stationary_damping:
            return None
        if is_negligible_step(step, params, opts.step_tolerance):
            return "negligible parameter step"
        if predicted_reduction(step, gradient, jtj) < opts.relative_tolerance * objective:
            return "predicted decrease below tolerance"
        return None
