from __future__ import annotations

from typing import Any, Mapping, Optional, Sequence, Tuple
from warnings import warn

import numpy as np

from .util import grid_over, uncertainty_to_string


def plot_fit(
    run: Any,
    *,
    ax: Optional[Any] = None,
    xg: Optional[np.ndarray] = None,
    jitter: float = 0.05,
    rng: Optional[np.random.Generator] = None,
    band: bool = True,
    band_options: Optional[Mapping[str, Any]] = None,
    band_kwargs: Optional[Mapping[str, Any]] = None,
    data_kwargs: Optional[Mapping[str, Any]] = None,
    line_kwargs: Optional[Mapping[str, Any]] = None,
    show_params: bool = False,
    param_names: Sequence[str] = ("bias", "slope50", "acuity"),
    param_digits: int | str | None = "auto",
    text_kwargs: Optional[Mapping[str, Any]] = None,
) -> Tuple[Any, Any]:
    """Plot binary responses and the fitted psychometric curve on a Matplotlib Axes.

    Parameters
    ----------
    run : Run
        Analysis result providing dataset, predict() and band().
    ax : matplotlib.axes.Axes, optional
        If None, a new figure/axes is created.
    xg : ndarray, optional
        Grid for the fit line. Defaults to 400 points over the data range.
    jitter : float
        Uniform vertical jitter added to the 0/1 responses so repeated
        points stay visible. 0 disables.
    rng : numpy.random.Generator, optional
        Source of the jitter (seeded generator -> reproducible figure).
    band : bool
        If True and the run was bootstrapped, draw the bootstrap percentile band.
    band_options : dict, optional
        Keyword options forwarded to run.band().
    band_kwargs, data_kwargs, line_kwargs, text_kwargs : dict, optional
        Styling kwargs for fill_between, plot (data), plot (line), and text.
    show_params : bool
        If True, annotate fitted metrics (with bootstrap errors when present).
    param_names : sequence of str
        Metrics to include in the annotation box.
    param_digits : int | "auto"
        Significant digits for uncertainty formatting.
    """
    import matplotlib.pyplot as plt

    if ax is None:
        fig, ax = plt.subplots()
    else:
        fig = ax.figure

    data_kwargs = dict(data_kwargs or {})
    line_kwargs = dict(line_kwargs or {})
    band_options = dict(band_options or {})
    band_kwargs = dict(band_kwargs or {})
    text_kwargs = dict(text_kwargs or {})

    dataset = run.dataset
    x = np.asarray(dataset.x, dtype=float)
    r = np.asarray(dataset.r, dtype=float)
    if jitter:
        if rng is None:
            rng = np.random.default_rng()
        r = r + rng.uniform(0.0, float(jitter), size=r.shape)

    data_kwargs.setdefault("marker", "o")
    data_kwargs.setdefault("linestyle", "none")
    data_kwargs.setdefault("alpha", 0.5)
    data_kwargs.setdefault("label", dataset.label or "data")
    ax.plot(x, r, **data_kwargs)

    if xg is None:
        xg = grid_over(x, 400)
    line_kwargs.setdefault("label", "model")
    ax.plot(xg, run.predict(xg), **line_kwargs)

    if band and run.bootstrap is not None and len(run.bootstrap) > 0:
        try:
            band_obj = run.band(xg, **band_options)
        except ValueError as exc:
            warn(f"plot_fit: could not compute band: {exc}", UserWarning)
        else:
            band_kwargs.setdefault("alpha", 0.2)
            ax.fill_between(xg, band_obj.low, band_obj.high, **band_kwargs)

    ax.set_ylim(-0.05, 1.15)
    ax.set_xlabel(dataset.x_label or "position")
    ax.set_ylabel("p(response = 1)")

    if show_params:
        stderr = run.stderr or {}
        lines = []
        for name in param_names:
            val = float(getattr(run.fit, name))
            err = stderr.get(name)
            if err is None or not np.isfinite(err):
                digits = 4 if isinstance(param_digits, str) or param_digits is None else param_digits
                lines.append(f"{name}={val:.{digits}g}")
            else:
                lines.append(
                    f"{name}={uncertainty_to_string(val, err, precision=param_digits)}"
                )

        if lines:
            text_kwargs.setdefault("ha", "left")
            text_kwargs.setdefault("va", "top")
            text_kwargs.setdefault("fontsize", 9)
            text_kwargs.setdefault("transform", ax.transAxes)
            text_kwargs.setdefault(
                "bbox",
                {"boxstyle": "round", "facecolor": "white", "alpha": 0.7, "edgecolor": "none"},
            )
            ax.text(0.02, 0.98, "\n".join(lines), **text_kwargs)

    return fig, ax


def plot_distribution(
    run: Any,
    names: Sequence[str] = ("bias", "slope50", "acuity"),
    *,
    bins: int = 30,
    axes: Optional[Sequence[Any]] = None,
    hist_kwargs: Optional[Mapping[str, Any]] = None,
) -> Tuple[Any, Any]:
    """Histograms of bootstrap metric distributions, fitted value marked."""
    import matplotlib.pyplot as plt

    if run.bootstrap is None or len(run.bootstrap) == 0:
        raise ValueError("plot_distribution requires a bootstrapped run.")

    hist_kwargs = dict(hist_kwargs or {})
    hist_kwargs.setdefault("bins", bins)
    hist_kwargs.setdefault("alpha", 0.7)

    if axes is None:
        fig, axes = plt.subplots(1, len(names), figsize=(4 * len(names), 3), squeeze=False)
        axes = list(axes[0])
    else:
        axes = list(axes)
        fig = axes[0].figure
    if len(axes) != len(names):
        raise ValueError("Need one axes per metric name.")

    for ax, name in zip(axes, names):
        v = run.bootstrap.column(name)
        v = v[np.isfinite(v)]
        ax.hist(v, **hist_kwargs)
        ax.axvline(float(getattr(run.fit, name)), color="k", linestyle="--")
        ax.set_xlabel(name)

    return fig, axes
