"""Exception hierarchy for the fitting engine."""

from __future__ import annotations

from typing import Optional

import numpy as np


class FitError(Exception):
    """Base class for every error raised by marquardt."""


class DomainError(FitError, ValueError):
    """Model parameters are outside the model's admissible domain.

    Model callbacks raise this (e.g. for a negative width). Inside a fit it is
    a recoverable signal; it only reaches the caller when the initial guess
    itself is inadmissible (see InitialGuessError).
    """


class InitialGuessError(DomainError):
    """The initial parameter guess is outside the model's domain."""


class DegreesOfFreedomError(FitError, ValueError):
    """Not enough data points for the number of free parameters."""


class JacobianUndefinedError(FitError):
    """Finite differences failed in both directions for one parameter."""

    def __init__(self, index: int, message: str = ""):
        self.index = int(index)
        super().__init__(
            message or f"Jacobian undefined: parameter {index} cannot be perturbed in either direction."
        )


class SingularMatrixError(FitError, np.linalg.LinAlgError):
    """A linear system could not be solved to a finite solution."""


class NonConvergenceError(FitError, RuntimeError):
    """The iteration ended without converging.

    Carries the best parameters found so far so that callers can inspect or
    reuse them (e.g. as the seed of another fit).
    """

    def __init__(
        self,
        message: str,
        *,
        best_params: np.ndarray,
        objective: float,
        iterations: int,
        state: Optional[object] = None,
    ):
        super().__init__(message)
        self.best_params = np.asarray(best_params, dtype=float)
        self.objective = float(objective)
        self.iterations = int(iterations)
        self.state = state


class MaxIterationsExceededError(NonConvergenceError):
    """The iteration budget ran out before convergence."""


class DivergedError(NonConvergenceError):
    """Damping grew without bound or the Jacobian became undefined."""


__all__ = [
    "FitError",
    "DomainError",
    "InitialGuessError",
    "DegreesOfFreedomError",
    "JacobianUndefinedError",
    "SingularMatrixError",
    "NonConvergenceError",
    "MaxIterationsExceededError",
    "DivergedError",
]
