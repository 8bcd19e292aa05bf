from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, Iterator, Optional, Sequence, Tuple

import numpy as np
from uncertainties import correlated_values

from .statistics import (
    chi_squared_pvalue,
    chi_squared_quantile,
    correlation,
    reduced_chi_squared,
)
from .util import format_value

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FitResult:
    """Outcome of a converged fit.

    Unpacks as ``params, stderr, chi_squared = result``.
    """

    params: np.ndarray
    stderr: np.ndarray
    chi_squared: float
    covariance: np.ndarray
    dof: int
    iterations: int = 0
    n_evaluations: int = 0
    # Objective after the initial guess and after every accepted step.
    history: Tuple[float, ...] = ()
    message: str = ""
    param_names: Tuple[str, ...] = ()

    def __iter__(self) -> Iterator[Any]:
        return iter((self.params, self.stderr, self.chi_squared))

    @property
    def names(self) -> Tuple[str, ...]:
        if len(self.param_names) == len(self.params):
            return tuple(self.param_names)
        return tuple(f"p{i}" for i in range(len(self.params)))

    @property
    def reduced_chi_squared(self) -> float:
        return reduced_chi_squared(self.chi_squared, self.dof)

    @property
    def p_value(self) -> float:
        return chi_squared_pvalue(self.chi_squared, self.dof)

    @property
    def correlation(self) -> np.ndarray:
        return correlation(self.covariance)

    def passes_chi_squared(self, q: float = 0.99) -> bool:
        """True if chi-squared is below quantile `q` for this fit's dof."""
        return self.chi_squared < chi_squared_quantile(self.dof, q)

    def within(self, true_params: Sequence[float], k: float = 3.0) -> np.ndarray:
        """Per parameter: does `true_params` lie within params ± k·stderr?"""
        true = np.asarray(true_params, dtype=float)
        if true.shape != self.params.shape:
            raise ValueError(
                f"Expected {self.params.shape[0]} values; got shape {true.shape}."
            )
        return np.abs(true - self.params) <= k * self.stderr

    def named(self) -> Dict[str, Tuple[float, float]]:
        return {
            n: (float(v), float(e))
            for n, v, e in zip(self.names, self.params, self.stderr)
        }

    def to_ufloats(self) -> Dict[str, Any]:
        """Correlated `uncertainties` values keyed by parameter name."""
        values = correlated_values(
            [float(v) for v in self.params], np.asarray(self.covariance, dtype=float)
        )
        return dict(zip(self.names, values))

    def summary(self, digits: int | str | None = "auto") -> str:
        width = max(len(n) for n in self.names)
        lines = [
            f"{n:<{width}} = {format_value(v, e, digits)}"
            for n, (v, e) in self.named().items()
        ]
        lines.append(
            f"chi2 = {self.chi_squared:.6g} (dof={self.dof}, "
            f"reduced={self.reduced_chi_squared:.4g}, p={self.p_value:.3g})"
        )
        return "\n".join(lines)

    def log(self, log: Optional[logging.Logger] = None, level: int = logging.INFO) -> None:
        """Write the summary to a logger, one line per entry."""
        log = log or logger
        for line in self.summary().splitlines():
            log.log(level, line)
