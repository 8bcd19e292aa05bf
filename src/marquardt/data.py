from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Optional, Tuple

import numpy as np


@dataclass(frozen=True)
class Dataset:
    """Observed (x, y) samples; both arrays are read-only and finite."""

    x: np.ndarray
    y: np.ndarray

    @property
    def n(self) -> int:
        return int(self.x.shape[0])

    def __len__(self) -> int:
        return self.n

    def pairs(self) -> list[Tuple[float, float]]:
        return [(float(a), float(b)) for a, b in zip(self.x, self.y)]


def _frozen_vector(values: Any, what: str) -> np.ndarray:
    arr = np.array(values, dtype=float)
    if arr.ndim != 1:
        raise ValueError(f"{what} must be 1D; got shape {arr.shape}.")
    if not np.all(np.isfinite(arr)):
        raise ValueError(f"{what} contains non-finite values.")
    arr.setflags(write=False)
    return arr


def _is_xy_tuple(data: Any) -> bool:
    """True for an (x, y) tuple of arrays; a tuple of two (x, y) pairs is not one."""
    if not (isinstance(data, tuple) and len(data) == 2):
        return False
    first, second = data
    if np.ndim(first) != 1 or np.ndim(second) != 1:
        return False
    # Two length-2 sequences read as pairs unless they are arrays.
    if len(first) == 2 and len(second) == 2:
        return isinstance(first, np.ndarray) and isinstance(second, np.ndarray)
    return True


def prepare_dataset(data: Any, y: Any = None) -> Dataset:
    """Normalize user input into a Dataset.

    Accepted forms:
    - prepare_dataset(x, y) with two 1D array-likes
    - a Dataset (returned as is)
    - a 2-tuple (x, y) of equal-length 1D arrays; a 2-tuple of two length-2
      sequences is read as two pairs unless both are ndarrays
    - a sequence of (x, y) pairs, or an (N, 2) array
    """
    if y is not None:
        x_arr = _frozen_vector(data, "x")
        y_arr = _frozen_vector(y, "y")
    elif isinstance(data, Dataset):
        return data
    else:
        if data is None:
            raise TypeError("No data given.")
        if _is_xy_tuple(data):
            x_arr = _frozen_vector(data[0], "x")
            y_arr = _frozen_vector(data[1], "y")
        else:
            try:
                arr = np.asarray(data, dtype=float)
            except (TypeError, ValueError) as e:
                raise TypeError(
                    "Data must be a sequence of (x, y) pairs, an (N, 2) array or (x, y) arrays."
                ) from e
            if arr.size == 0:
                raise ValueError("Data set is empty.")
            if arr.ndim != 2 or arr.shape[1] != 2:
                raise ValueError(
                    f"Expected (x, y) pairs with shape (N, 2); got shape {arr.shape}."
                )
            x_arr = _frozen_vector(arr[:, 0], "x")
            y_arr = _frozen_vector(arr[:, 1], "y")

    if x_arr.shape != y_arr.shape:
        raise ValueError(
            f"x and y must have the same length; got {x_arr.shape[0]} and {y_arr.shape[0]}."
        )
    if x_arr.shape[0] == 0:
        raise ValueError("Data set is empty.")
    return Dataset(x=x_arr, y=y_arr)


def histogram_dataset(
    counts: Any,
    *,
    min_x: Optional[float] = 2,
    total: float = 1000.0,
    retained: float = 0.999,
) -> Dataset:
    """Build a Dataset from a k-mer frequency histogram.

    `counts` maps multiplicity -> number of k-mers (a mapping or (x, count)
    pairs). Bins below `min_x` are dropped; the first bin is dominated by
    sequencing errors. Counts are divided by sum(counts) / total / retained,
    which puts the histogram on the same fixed mass as the k-mer model.
    """
    if isinstance(counts, Mapping):
        items = sorted((float(k), float(v)) for k, v in counts.items())
    else:
        items = [(float(k), float(v)) for k, v in counts]
    if min_x is not None:
        items = [(k, v) for k, v in items if k >= min_x]
    if not items:
        raise ValueError("Histogram has no bins to fit.")

    xs = np.array([k for k, _ in items], dtype=float)
    ys = np.array([v for _, v in items], dtype=float)
    if np.any(ys < 0):
        raise ValueError("Histogram counts must be non-negative.")

    mass = float(np.sum(ys))
    if mass <= 0.0:
        raise ValueError("Histogram has zero total count.")
    if not 0.0 < retained <= 1.0:
        raise ValueError("retained must be in (0, 1].")

    scale = mass / float(total) / float(retained)
    return prepare_dataset(xs, ys / scale)
