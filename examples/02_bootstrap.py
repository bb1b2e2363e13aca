import numpy as np

from psychometric_fit import BootstrapConfig, Dataset, analyze

# --- Synthetic data ----------------------------------------------------------

rng = np.random.default_rng(1)
x = rng.uniform(-1.5, 1.5, size=150)
r = (rng.random(x.size) < 1.0 / (1.0 + np.exp(-(-0.2 + 3.0 * x)))).astype(int)
data = Dataset.from_arrays(x=x, r=r)

# --- Fit + parametric bootstrap (4 threads, independent streams) ---------------

run = analyze(
    data,
    ndist=200,
    rng=rng,
    bootstrap_config=BootstrapConfig(workers=4, interval_level=2.0),
)

print(run.summary())
print(run.bootstrap.summary())

u = run.ufloats()
print(f"bias   = {u['bias']:.2u}")
print(f"acuity = {u['acuity']:.2u}")
