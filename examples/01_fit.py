import numpy as np

from psychometric_fit import Dataset, Fitter

# --- Synthetic binary-choice data --------------------------------------------

rng = np.random.default_rng(0)
x = np.repeat(np.linspace(-2.0, 2.0, 9), 20)  # 9 positions, 20 trials each
p_true = 1.0 / (1.0 + np.exp(-(0.4 + 2.2 * x)))
r = (rng.random(x.size) < p_true).astype(int)

data = Dataset.from_arrays(x=x, r=r, x_label="hand position (cm)", label="subject 1")

# --- Fit ---------------------------------------------------------------------

fit = Fitter().fit(data, rng=rng)

print(fit.equation())
print(f"bias          = {fit.bias:.4f}")
print(f"slope at 50%  = {fit.slope50:.4f}")
print(f"acuity        = {fit.acuity:.4f}  (x75={fit.x75:.4f}, x25={fit.x25:.4f})")
print(f"neg. log-lik  = {fit.nll:.4f}  converged={fit.converged}")
