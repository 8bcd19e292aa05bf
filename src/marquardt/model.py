from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Mapping, Optional, Sequence, Tuple, Union

import numpy as np

from .lm import LevenbergMarquardt
from .options import LMOptions
from .result import FitResult

ModelFunc = Callable[[np.ndarray, np.ndarray], Any]


@dataclass(frozen=True)
class Model:
    """A model callback plus the names of its parameters.

    Instances are themselves valid callbacks: ``model(params, x) -> y``.
    """

    name: str
    func: ModelFunc
    param_names: Tuple[str, ...]

    @staticmethod
    def from_function(
        func: ModelFunc, param_names: Sequence[str], *, name: Optional[str] = None
    ) -> "Model":
        names = tuple(str(n) for n in param_names)
        if not names:
            raise TypeError("A model needs at least one parameter name.")
        if len(set(names)) != len(names):
            raise TypeError("Duplicate parameter names.")
        return Model(
            name=name or getattr(func, "__name__", "model"),
            func=func,
            param_names=names,
        )

    def __call__(self, params: Any, x: Any) -> np.ndarray:
        return np.asarray(
            self.func(np.asarray(params, dtype=float), np.asarray(x, dtype=float)),
            dtype=float,
        )

    def eval(self, x: Any, **params: float) -> np.ndarray:
        """Evaluate with parameters given by name."""
        return self(self.guess_vector(params), x)

    def guess_vector(self, guess: Union[Mapping[str, float], Sequence[float]]) -> np.ndarray:
        """Order a name->value mapping (or check a sequence) as a parameter vector."""
        if isinstance(guess, Mapping):
            missing = [n for n in self.param_names if n not in guess]
            if missing:
                raise TypeError(f"Missing parameter values for: {missing}")
            extra = [k for k in guess if k not in self.param_names]
            if extra:
                raise KeyError(f"Unknown parameters for {self.name!r}: {extra}")
            return np.asarray([float(guess[n]) for n in self.param_names], dtype=float)

        vec = np.asarray(guess, dtype=float).reshape(-1)
        if vec.shape[0] != len(self.param_names):
            raise ValueError(
                f"{self.name!r} has {len(self.param_names)} parameters; got {vec.shape[0]} values."
            )
        return vec

    def fit(
        self,
        data: Any,
        guess: Union[Mapping[str, float], Sequence[float]],
        *,
        options: Union[LMOptions, Mapping[str, Any], None] = None,
        log: Optional[logging.Logger] = None,
    ) -> FitResult:
        """Fit this model to `data` starting from `guess`."""
        solver = LevenbergMarquardt(self, self.guess_vector(guess), data, options=options)
        return solver.evaluate(log)
