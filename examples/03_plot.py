import numpy as np
import matplotlib.pyplot as plt

from psychometric_fit import Dataset, analyze
from psychometric_fit.plotting import plot_distribution, plot_fit

# --- Data + analysis ---------------------------------------------------------

rng = np.random.default_rng(2)
x = np.linspace(-3.0, 3.0, 120)
r = (rng.random(x.size) < 1.0 / (1.0 + np.exp(-(0.5 + 1.2 * x)))).astype(int)
data = Dataset.from_arrays(x=x, r=r, x_label="stimulus", label="data")

run = analyze(data, ndist=100, rng=rng)

# --- Plot --------------------------------------------------------------------

fig, ax = plot_fit(run, rng=rng, show_params=True)
ax.legend(loc="lower right")

plot_distribution(run)

plt.show()
