"""marquardt public API."""
import logging

from .batch import BatchFit, fit_many
from .data import Dataset, histogram_dataset, prepare_dataset
from .errors import (
    DegreesOfFreedomError,
    DivergedError,
    DomainError,
    FitError,
    InitialGuessError,
    MaxIterationsExceededError,
    NonConvergenceError,
)
from .lm import FitState, IterationState, LevenbergMarquardt
from .model import Model
from .options import LMOptions
from .result import FitResult
from . import models

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    "BatchFit",
    "Dataset",
    "DegreesOfFreedomError",
    "DivergedError",
    "DomainError",
    "FitError",
    "FitResult",
    "FitState",
    "InitialGuessError",
    "IterationState",
    "LMOptions",
    "LevenbergMarquardt",
    "MaxIterationsExceededError",
    "Model",
    "NonConvergenceError",
    "fit_many",
    "histogram_dataset",
    "models",
    "prepare_dataset",
]
