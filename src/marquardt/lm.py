"""Levenberg-Marquardt iteration as an explicit state machine.

`LevenbergMarquardt.start()` builds the initial IterationState and
`advance(state)` performs one damped Gauss-Newton iteration, returning the
next state. `evaluate()` simply drives `advance` until a terminal state and
either extracts the statistics (CONVERGED) or raises the matching
NonConvergenceError.
"""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass, replace
from typing import Any, Mapping, Optional, Tuple, Union

import numpy as np

from .convergence import ConvergenceJudge
from .data import Dataset, prepare_dataset
from .errors import (
    DegreesOfFreedomError,
    DivergedError,
    InitialGuessError,
    JacobianUndefinedError,
    MaxIterationsExceededError,
    SingularMatrixError,
)
from .evaluation import ModelEvaluation, ModelFunc, evaluate_model
from .jacobian import jacobian
from .linalg import damped_matrix, normal_equations, solve_spd
from .options import LMOptions
from .result import FitResult
from .statistics import covariance, standard_errors
from .util import as_param_vector

logger = logging.getLogger(__name__)


class FitState(enum.Enum):
    INITIALIZING = "initializing"
    ITERATING = "iterating"
    CONVERGED = "converged"
    MAX_ITERATIONS_EXCEEDED = "max_iterations_exceeded"
    DIVERGED = "diverged"

    @property
    def terminal(self) -> bool:
        return self in (
            FitState.CONVERGED,
            FitState.MAX_ITERATIONS_EXCEEDED,
            FitState.DIVERGED,
        )


@dataclass(frozen=True)
class IterationState:
    """Everything one iteration hands to the next."""

    state: FitState
    params: np.ndarray
    predicted: np.ndarray
    residuals: np.ndarray
    objective: float
    damping: float
    iteration: int = 0
    rejections: int = 0
    n_evaluations: int = 0
    # Cached at `params`; None means it must be recomputed.
    jacobian: Optional[np.ndarray] = None
    jtj: Optional[np.ndarray] = None
    gradient: Optional[np.ndarray] = None
    history: tuple = ()
    reason: str = ""

    @property
    def terminal(self) -> bool:
        return self.state.terminal


class LevenbergMarquardt:
    """Nonlinear least-squares fit of `model` to (x, y) data.

    Parameters
    ----------
    model : callable(params, x) -> y
        Raises marquardt.DomainError for inadmissible parameters.
    params : initial guess, length P >= 1.
    data : anything `prepare_dataset` accepts, e.g. a list of (x, y) pairs.
    options : LMOptions or a dict of option overrides.

    Raises
    ------
    DegreesOfFreedomError
        If there are not more data points than parameters.
    """

    def __init__(
        self,
        model: ModelFunc,
        params: Any,
        data: Any,
        *,
        options: Union[LMOptions, Mapping[str, Any], None] = None,
    ):
        self.model = model
        self.initial_params = as_param_vector(params)
        self.data: Dataset = prepare_dataset(data)
        self.options = LMOptions.from_mapping(options)
        self.judge = ConvergenceJudge(self.options)

        n_params = int(self.initial_params.shape[0])
        if n_params < 1:
            raise DegreesOfFreedomError("At least one parameter is required.")
        if self.data.n - n_params < 1:
            raise DegreesOfFreedomError(
                f"{self.data.n} data points cannot constrain {n_params} parameters "
                f"(degrees of freedom = {self.data.n - n_params})."
            )

    @property
    def dof(self) -> int:
        return self.data.n - int(self.initial_params.shape[0])

    def _evaluate(self, params: np.ndarray) -> ModelEvaluation:
        return evaluate_model(self.model, params, self.data.x)

    def _jacobian(
        self, st: IterationState
    ) -> Tuple[Optional[np.ndarray], int, Optional[JacobianUndefinedError]]:
        """J at st.params, the model calls it took, and the error if J is undefined."""
        calls = 0

        def counted(params: np.ndarray, x: np.ndarray) -> Any:
            nonlocal calls
            calls += 1
            return self.model(params, x)

        try:
            jac = jacobian(
                counted,
                st.params,
                self.data.x,
                base=st.predicted,
                method=self.options.jacobian,
                step=self.options.jacobian_step,
            )
        except JacobianUndefinedError as e:
            return None, calls, e
        return jac, calls, None

    # ---- state machine ----
    def start(self) -> IterationState:
        """Evaluate the initial guess and enter ITERATING."""
        params = self.initial_params.copy()
        ev = self._evaluate(params)
        if not ev.ok:
            raise InitialGuessError(
                f"Initial guess {params.tolist()} is outside the model domain: {ev.message}"
            )
        residuals = self.data.y - ev.values
        objective = float(residuals @ residuals)
        return IterationState(
            state=FitState.ITERATING,
            params=params,
            predicted=ev.values,
            residuals=residuals,
            objective=objective,
            damping=float(self.options.damping_init),
            n_evaluations=1,
            history=(objective,),
        )

    def advance(self, st: IterationState, log: Optional[logging.Logger] = None) -> IterationState:
        """Run one iteration from a non-terminal state."""
        log = log or logger
        opts = self.options
        if st.terminal:
            return st

        if st.iteration >= opts.max_iterations:
            return replace(
                st,
                state=FitState.MAX_ITERATIONS_EXCEEDED,
                reason=f"no convergence after {st.iteration} iterations",
            )

        if st.jacobian is None:
            jac, calls, err = self._jacobian(st)
            nfev = st.n_evaluations + calls
            if err is not None:
                return replace(st, state=FitState.DIVERGED, reason=str(err), n_evaluations=nfev)
            jtj, gradient = normal_equations(jac, st.residuals)
            st = replace(st, jacobian=jac, jtj=jtj, gradient=gradient, n_evaluations=nfev)
            reason = self.judge.at_point(st.objective, jac, st.residuals, gradient)
            if reason is not None:
                return replace(st, state=FitState.CONVERGED, reason=reason)

        iteration = st.iteration + 1
        damping = st.damping

        try:
            step = solve_spd(damped_matrix(st.jtj, damping), st.gradient)
        except SingularMatrixError as e:
            log.debug("iter %d: singular normal equations at lambda=%.3g (%s)", iteration, damping, e)
            return self._reject(st, iteration, damping, None, st.n_evaluations)

        trial = st.params + step
        ev = self._evaluate(trial)
        nfev = st.n_evaluations + 1
        if not ev.ok:
            log.debug("iter %d: trial rejected, %s (lambda=%.3g)", iteration, ev.message, damping)
            return self._reject(st, iteration, damping, step, nfev)

        residuals = self.data.y - ev.values
        objective = float(residuals @ residuals)
        if not objective < st.objective:
            log.debug(
                "iter %d: trial objective %.6g >= %.6g (lambda=%.3g)",
                iteration, objective, st.objective, damping,
            )
            return self._reject(st, iteration, damping, step, nfev)

        log.debug("iter %d: accepted, objective %.6g -> %.6g (lambda=%.3g)", iteration, st.objective, objective, damping)
        reason = self.judge.after_accept(st.objective, objective, step, trial, damping)
        return IterationState(
            state=FitState.ITERATING if reason is None else FitState.CONVERGED,
            params=trial,
            predicted=ev.values,
            residuals=residuals,
            objective=objective,
            damping=max(damping / opts.damping_factor, opts.damping_min),
            iteration=iteration,
            rejections=0,
            n_evaluations=nfev,
            history=st.history + (objective,),
            reason=reason or "",
        )

    def _reject(
        self,
        st: IterationState,
        iteration: int,
        damping: float,
        step: Optional[np.ndarray],
        n_evaluations: int,
    ) -> IterationState:
        opts = self.options
        base = replace(st, iteration=iteration, n_evaluations=n_evaluations)

        if step is not None:
            reason = self.judge.after_reject(
                st.objective, step, st.params, st.gradient, st.jtj, damping
            )
            if reason is not None:
                return replace(base, state=FitState.CONVERGED, reason=reason)

        damping = damping * opts.damping_factor
        rejections = st.rejections + 1
        base = replace(base, damping=damping, rejections=rejections)
        if damping > opts.damping_max:
            return replace(
                base,
                state=FitState.DIVERGED,
                reason=f"damping {damping:.3g} exceeded {opts.damping_max:.3g}",
            )
        if rejections >= opts.max_rejections:
            return replace(
                base,
                state=FitState.DIVERGED,
                reason=f"{rejections} consecutive rejected steps",
            )
        return base

    def run(self, log: Optional[logging.Logger] = None) -> IterationState:
        """Iterate from the initial guess to a terminal state."""
        st = self.start()
        while not st.terminal:
            st = self.advance(st, log)
        return st

    # ---- public entry point ----
    def evaluate(self, log: Optional[logging.Logger] = None) -> FitResult:
        """Fit and return (params, stderr, chi_squared) as a FitResult.

        Raises
        ------
        InitialGuessError
            If the model rejects the initial guess.
        MaxIterationsExceededError, DivergedError
            If the iteration stops without converging. The exception carries
            the best parameters found.
        """
        log = log or logger
        st = self.run(log)

        if st.state is FitState.MAX_ITERATIONS_EXCEEDED:
            log.warning("Fit stopped: %s (objective %.6g)", st.reason, st.objective)
            raise MaxIterationsExceededError(
                f"Fit did not converge: {st.reason}.",
                best_params=st.params,
                objective=st.objective,
                iterations=st.iteration,
                state=st,
            )
        if st.state is FitState.DIVERGED:
            log.warning("Fit diverged: %s (objective %.6g)", st.reason, st.objective)
            raise DivergedError(
                f"Fit diverged: {st.reason}.",
                best_params=st.params,
                objective=st.objective,
                iterations=st.iteration,
                state=st,
            )

        jac = st.jacobian
        if jac is None:
            # Converged on an accepted step: J at the final parameters.
            jac, calls, err = self._jacobian(st)
            if err is not None:
                raise DivergedError(
                    f"Fit converged but {err}",
                    best_params=st.params,
                    objective=st.objective,
                    iterations=st.iteration,
                    state=st,
                ) from err
            st = replace(st, jacobian=jac, n_evaluations=st.n_evaluations + calls)

        cov = covariance(jac, st.objective, self.dof)
        result = FitResult(
            params=st.params.copy(),
            stderr=standard_errors(cov),
            chi_squared=st.objective,
            covariance=cov,
            dof=self.dof,
            iterations=st.iteration,
            n_evaluations=st.n_evaluations,
            history=tuple(float(v) for v in st.history),
            message=st.reason,
            param_names=tuple(getattr(self.model, "param_names", ()) or ()),
        )
        log.info(
            "Fit converged after %d iterations (%d model evaluations): %s; chi2=%.6g, dof=%d",
            result.iterations, result.n_evaluations, st.reason, result.chi_squared, result.dof,
        )
        return result
