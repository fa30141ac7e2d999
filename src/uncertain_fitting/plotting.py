from __future__ import annotations

from typing import Any, Iterable, Mapping, Optional, Tuple

import numpy as np

from .data import as_arrays
from .model import Model
from .montecarlo import format_estimate


def plot_fit(
    dataset: Iterable[Any],
    model: Model,
    params: Any,
    *,
    ax: Optional[Any] = None,
    result: Optional[Any] = None,
    xg: Optional[np.ndarray] = None,
    band: bool = True,
    band_percentiles: Tuple[float, float] = (15.865, 84.135),
    data_kwargs: Optional[Mapping[str, Any]] = None,
    line_kwargs: Optional[Mapping[str, Any]] = None,
    band_kwargs: Optional[Mapping[str, Any]] = None,
    show_params: bool = False,
    param_digits: int | str | None = "auto",
) -> Tuple[Any, Any]:
    """Plot data with error bars and the fitted curve on a Matplotlib Axes.

    Parameters
    ----------
    dataset : iterable of DataEntry-like records
        Drawn with x and y error bars from the entries' uncertainties.
    model, params :
        Curve to draw. With a MonteCarloResult as ``params`` its mean is used.
    ax : matplotlib.axes.Axes, optional
        If None, a new figure/axes is created.
    result : MonteCarloResult, optional
        Enables the band: pointwise percentiles of the curves of every trial.
    xg : ndarray, optional
        Grid for the curve. Defaults to 400 points over the data x range.
    show_params : bool
        If True, annotate the Monte Carlo estimates (needs ``result``).
    """
    import matplotlib.pyplot as plt

    if ax is None:
        fig, ax = plt.subplots()
    else:
        fig = ax.figure

    data_kwargs = dict(data_kwargs or {})
    line_kwargs = dict(line_kwargs or {})
    band_kwargs = dict(band_kwargs or {})

    x, y, sy, sx = as_arrays(dataset)
    if result is None and hasattr(params, "samples"):
        result = params
    if hasattr(params, "mean") and hasattr(params, "samples"):
        params = params.mean

    data_kwargs.setdefault("fmt", "o")
    data_kwargs.setdefault("ms", 4)
    data_kwargs.setdefault("capsize", 2)
    data_kwargs.setdefault("label", "data")
    ax.errorbar(
        x,
        y,
        yerr=sy if np.any(sy > 0) else None,
        xerr=sx if np.any(sx > 0) else None,
        **data_kwargs,
    )

    if xg is None:
        xg = np.linspace(float(np.min(x)), float(np.max(x)), 400)
    line_kwargs.setdefault("label", "fit")
    ax.plot(xg, np.asarray(model.eval(xg, params), dtype=float), **line_kwargs)

    if band and result is not None and result.n_trials > 1:
        curves = np.stack([np.asarray(model.eval(xg, s), dtype=float) for s in result.samples])
        lo, hi = np.percentile(curves, band_percentiles, axis=0)
        band_kwargs.setdefault("alpha", 0.2)
        ax.fill_between(xg, lo, hi, **band_kwargs)

    if show_params and result is not None:
        lines = []
        for p in result:
            lines.append(f"{p.name}={format_estimate(p, param_digits)}")
        ax.text(
            0.02,
            0.98,
            "\n".join(lines),
            ha="left",
            va="top",
            fontsize=9,
            transform=ax.transAxes,
            bbox={"boxstyle": "round", "facecolor": "white", "alpha": 0.7, "edgecolor": "none"},
        )

    return fig, ax
