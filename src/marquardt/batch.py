"""Fit several datasets concurrently, one solver per dataset."""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Any, List, Mapping, Optional, Sequence, Union

import numpy as np

from .errors import FitError
from .lm import LevenbergMarquardt
from .options import LMOptions
from .result import FitResult

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BatchFit:
    """Outcome of one dataset in a batch: a result or the error it raised."""

    index: int
    result: Optional[FitResult] = None
    error: Optional[FitError] = None

    @property
    def success(self) -> bool:
        return self.result is not None


def _fit_one(
    index: int,
    model: Any,
    guess: Any,
    data: Any,
    options: LMOptions,
    log: logging.Logger,
) -> BatchFit:
    try:
        result = LevenbergMarquardt(model, guess, data, options=options).evaluate(log)
    except FitError as e:
        log.warning("Dataset %d: %s", index, e)
        return BatchFit(index=index, error=e)
    return BatchFit(index=index, result=result)


def _per_dataset_guesses(guess: Any, n: int) -> List[Any]:
    if isinstance(guess, np.ndarray):
        if guess.ndim != 2:
            return [guess] * n
        if guess.shape[0] != n:
            raise ValueError(f"Got {guess.shape[0]} guesses for {n} datasets.")
        return list(guess)
    if (
        isinstance(guess, (list, tuple))
        and len(guess) == n
        and all(isinstance(g, (Mapping, list, tuple, np.ndarray)) for g in guess)
    ):
        return list(guess)
    return [guess] * n


def fit_many(
    model: Any,
    datasets: Sequence[Any],
    guess: Union[Mapping[str, float], Sequence[float]],
    *,
    options: Union[LMOptions, Mapping[str, Any], None] = None,
    max_workers: Optional[int] = None,
    log: Optional[logging.Logger] = None,
) -> List[BatchFit]:
    """Fit `model` to each dataset in `datasets` on a thread pool.

    `guess` is either shared by every dataset, or one guess per dataset: a
    sequence of mappings or vectors, or a (B, P) array. Guesses are checked
    before any fit starts, so a malformed guess raises here. The model
    callback must be reentrant. Results come back in input order; fit
    failures are recorded per dataset instead of raised.
    """
    log = log or logger
    opts = LMOptions.from_mapping(options)
    datasets = list(datasets)
    if not datasets:
        return []

    guesses = _per_dataset_guesses(guess, len(datasets))
    if hasattr(model, "guess_vector"):
        guesses = [model.guess_vector(g) for g in guesses]

    if max_workers is None:
        max_workers = min(len(datasets), 8)
    with ThreadPoolExecutor(max_workers=max_workers) as pool:
        futures = [
            pool.submit(_fit_one, i, model, g, d, opts, log)
            for i, (g, d) in enumerate(zip(guesses, datasets))
        ]
        return [f.result() for f in futures]
