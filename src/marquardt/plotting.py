from __future__ import annotations

from typing import Any, Mapping, Optional, Tuple

import numpy as np

from .util import format_value


def plot_fit(
    *,
    ax: Optional[Any] = None,
    x: Any,
    y: Any,
    model: Any,
    result: Any,
    xg: Optional[np.ndarray] = None,
    residuals: bool = False,
    data_kwargs: Optional[Mapping[str, Any]] = None,
    line_kwargs: Optional[Mapping[str, Any]] = None,
    show_params: bool = False,
    param_digits: int | str | None = "auto",
    text_kwargs: Optional[Mapping[str, Any]] = None,
) -> Tuple[Any, Any]:
    """Plot data points and the fitted model on a Matplotlib Axes.

    Parameters
    ----------
    ax : matplotlib.axes.Axes, optional
        If None, a new figure/axes is created. Ignored when residuals=True,
        which always creates a two-panel figure.
    x, y : array-like
        1D data to plot.
    model : callable(params, x) -> y
    result : FitResult
        Supplies the fitted parameters (and stderr for the parameter box).
    xg : ndarray, optional
        Grid for the fit line. Defaults to 400 points over the x range.
    residuals : bool
        If True, add a residual panel under the main axes. The returned
        axes is then a (main, residual) tuple.
    data_kwargs, line_kwargs, text_kwargs : dict, optional
        Styling kwargs for the data markers, fit line, and parameter box.
    show_params : bool
        If True, annotate fitted parameters as value(uncertainty).
    """
    import matplotlib.pyplot as plt

    x_arr = np.asarray(x, dtype=float)
    y_arr = np.asarray(y, dtype=float)
    if x_arr.ndim != 1 or y_arr.ndim != 1:
        raise ValueError("plot_fit requires 1D x and y arrays.")
    if x_arr.shape != y_arr.shape:
        raise ValueError("plot_fit requires x and y to have the same shape.")

    if residuals:
        fig, (ax, rax) = plt.subplots(
            2, 1, sharex=True, gridspec_kw={"height_ratios": (3, 1)}
        )
    elif ax is None:
        fig, ax = plt.subplots()
        rax = None
    else:
        fig = ax.figure
        rax = None

    data_kwargs = dict(data_kwargs or {})
    line_kwargs = dict(line_kwargs or {})
    text_kwargs = dict(text_kwargs or {})

    data_kwargs.setdefault("marker", "o")
    data_kwargs.setdefault("linestyle", "none")
    data_kwargs.setdefault("ms", 3)
    data_kwargs.setdefault("label", "data")
    ax.plot(x_arr, y_arr, **data_kwargs)

    if xg is None:
        xg = np.linspace(float(np.min(x_arr)), float(np.max(x_arr)), 400)
    params = np.asarray(result.params, dtype=float)
    line_kwargs.setdefault("label", "fit")
    ax.plot(xg, np.asarray(model(params, np.asarray(xg, dtype=float))), **line_kwargs)

    if rax is not None:
        resid = y_arr - np.asarray(model(params, x_arr))
        rax.axhline(0.0, color="k", lw=0.8)
        rax.plot(x_arr, resid, marker=".", linestyle="none")
        rax.set_ylabel("residual")

    if show_params:
        lines = [
            f"{name}={format_value(val, err, param_digits)}"
            for name, (val, err) in result.named().items()
        ]
        lines.append(f"χ²={result.chi_squared:.4g} (dof={result.dof})")
        text_kwargs.setdefault("ha", "left")
        text_kwargs.setdefault("va", "top")
        text_kwargs.setdefault("fontsize", 9)
        text_kwargs.setdefault("transform", ax.transAxes)
        text_kwargs.setdefault(
            "bbox",
            {"boxstyle": "round", "facecolor": "white", "alpha": 0.7, "edgecolor": "none"},
        )
        ax.text(0.02, 0.98, "\n".join(lines), **text_kwargs)

    ax.legend()
    if rax is not None:
        return fig, (ax, rax)
    return fig, ax
