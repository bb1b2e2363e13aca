import numpy as np
import pytest

pytest.importorskip("matplotlib")

import matplotlib

matplotlib.use("Agg")
import matplotlib.pyplot as plt

from psychometric_fit import Dataset, analyze
from psychometric_fit.plotting import plot_distribution, plot_fit


@pytest.fixture(scope="module")
def runs():
    rng = np.random.default_rng(0)
    x = np.linspace(-2.0, 2.0, 80)
    r = (rng.random(x.size) < 1.0 / (1.0 + np.exp(-1.5 * x))).astype(int)
    ds = Dataset.from_arrays(x=x, r=r, x_label="hand position", label="subject 1")
    return analyze(ds, rng=rng), analyze(ds, ndist=20, rng=rng)


def test_plot_fit_draws_data_and_curve(runs):
    plain, _ = runs
    fig, ax = plot_fit(plain, rng=np.random.default_rng(1))
    try:
        assert len(ax.lines) == 2
        assert ax.get_xlabel() == "hand position"
        assert ax.lines[0].get_label() == "subject 1"
        y = ax.lines[0].get_ydata()
        assert np.all((y >= 0.0) & (y <= 1.05))
        assert len(ax.collections) == 0
    finally:
        plt.close(fig)


def test_plot_fit_with_band_and_params(runs):
    _, boot = runs
    fig, ax = plot_fit(boot, jitter=0.0, show_params=True)
    try:
        assert len(ax.collections) == 1
        assert len(ax.texts) == 1
        assert "bias=" in ax.texts[0].get_text()
    finally:
        plt.close(fig)


def test_plot_fit_on_existing_axes(runs):
    plain, _ = runs
    fig, ax = plt.subplots()
    try:
        fig2, ax2 = plot_fit(plain, ax=ax, band=False)
        assert fig2 is fig and ax2 is ax
    finally:
        plt.close(fig)


def test_plot_distribution(runs):
    plain, boot = runs
    fig, axes = plot_distribution(boot)
    try:
        assert len(axes) == 3
        assert axes[0].get_xlabel() == "bias"
    finally:
        plt.close(fig)

    with pytest.raises(ValueError):
        plot_distribution(plain)
