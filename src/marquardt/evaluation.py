from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Optional

import numpy as np

from .errors import DomainError

ModelFunc = Callable[[np.ndarray, np.ndarray], Any]


@dataclass(frozen=True)
class ModelEvaluation:
    """Outcome of one model call: predicted values, or why there are none."""

    values: Optional[np.ndarray] = None
    message: str = ""

    @property
    def ok(self) -> bool:
        return self.values is not None


def evaluate_model(model: ModelFunc, params: np.ndarray, x: np.ndarray) -> ModelEvaluation:
    """Call `model(params, x)` and fold domain failures into the result.

    A DomainError raised by the model, or any non-finite prediction, yields a
    failed evaluation. A prediction of the wrong shape is a bug in the model
    and raises ValueError.
    """
    try:
        values = np.asarray(model(np.array(params, dtype=float), x), dtype=float)
    except DomainError as e:
        return ModelEvaluation(message=str(e) or "domain error")

    if values.shape != x.shape:
        if values.shape == ():
            values = np.full(x.shape, float(values))
        else:
            raise ValueError(
                f"Model returned shape {values.shape}, expected {x.shape}."
            )
    if not np.all(np.isfinite(values)):
        return ModelEvaluation(message="non-finite model output")
    return ModelEvaluation(values=values)
