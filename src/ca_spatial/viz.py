from __future__ import annotations

from typing import Optional, Sequence

import matplotlib.pyplot as plt
import numpy as np

from .correlation import CorrelationPoint, fit_line
from .data import FractalDimensionSample, ResultSeries


def create_summary_figure(
    state_image: np.ndarray,
    correlation_function: Sequence[CorrelationPoint],
    dimension_series: Optional[ResultSeries[FractalDimensionSample]] = None,
    title: str = "Spatial statistics",
):
    """Create a figure of the lattice, C(r) with its fit, and D over time.

    Parameters
    ----------
    state_image : np.ndarray
        2-D integer image: the grid, or the stacked history of a 1-D lattice.
    correlation_function : sequence of CorrelationPoint
        Trimmed ``(log r, log C)`` points of the latest generation.
    dimension_series : ResultSeries, optional
        Published dimension samples to plot against generation.
    title : str, optional
        Figure title.

    Returns
    -------
    tuple[plt.Figure, np.ndarray]
        Figure and its array of three axes.
    """
    fig, axes = plt.subplots(1, 3, figsize=(15, 4.8))
    ax_img, ax_corr, ax_dim = axes

    ax_img.imshow(state_image != 0, cmap="Greys", interpolation="nearest")
    ax_img.set_title("Lattice")
    ax_img.set_xticks([])
    ax_img.set_yticks([])

    ax_corr.set_xlabel("log(r)")
    ax_corr.set_ylabel("log(C(r))")
    ax_corr.set_title("Correlation function")
    if correlation_function:
        x = np.array([p.log_radius for p in correlation_function])
        y = np.array([p.log_count for p in correlation_function])
        ax_corr.plot(x, y, "o", color="k")
        fit = fit_line(correlation_function)
        ax_corr.plot(x, fit.intercept + fit.slope * x, "-", color="r",
                     label=f"D = {fit.slope:.3f}")
        ax_corr.legend(loc="lower right")

    ax_dim.set_xlabel("generation")
    ax_dim.set_ylabel("est. dimension")
    ax_dim.set_ylim(0.0, 2.0)
    ax_dim.set_title("Fractal dimension")
    if dimension_series is not None and len(dimension_series):
        ax_dim.errorbar(
            dimension_series.generations(),
            dimension_series.values("dimension"),
            yerr=dimension_series.values("std_dev"),
            fmt=".-",
            color="b",
        )
    ax_dim.grid(True)

    fig.suptitle(title)
    fig.tight_layout()
    return fig, axes
