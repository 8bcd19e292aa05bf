from __future__ import annotations

import math
from typing import Any

import numpy as np
from uncertainties import ufloat


def as_param_vector(values: Any) -> np.ndarray:
    """Copy `values` into a finite 1D float vector."""
    arr = np.array(values, dtype=float)
    if arr.ndim == 0:
        arr = arr.reshape(1)
    if arr.ndim != 1:
        raise ValueError(f"Parameter vector must be 1D; got shape {arr.shape}.")
    if not np.all(np.isfinite(arr)):
        raise ValueError("Parameter vector contains non-finite values.")
    return arr


def format_value(value: float, stderr: float, digits: int | str | None = "auto") -> str:
    """Fitted value with its standard error in shorthand, e.g. "1.50(10)".

    digits="auto" (or None) rounds the error by the Particle Data Group rule;
    an integer fixes the number of significant digits of the error.
    """
    value = float(value)
    stderr = abs(float(stderr))
    if not (math.isfinite(value) and math.isfinite(stderr)):
        return f"{value:g}({stderr:g})"
    if stderr == 0.0:
        # Exactly determined parameter, e.g. an exact fit.
        return f"{value:.6g}(0)"
    if digits is None or digits == "auto":
        spec = "S"
    else:
        spec = f".{max(1, int(digits))}uS"
    return format(ufloat(value, stderr), spec)
