from __future__ import annotations

from typing import Any, Callable

import numpy as np

from .inputs import Dataset
from .link import logistic

DEFAULT_EPS = 1e-10


def neg_loglike_bernoulli(p: np.ndarray, r: np.ndarray, eps: float = DEFAULT_EPS) -> float:
    """Negative log-likelihood for Bernoulli(p) responses with stability clamping."""
    p = np.asarray(p, dtype=float)
    r = np.asarray(r, dtype=float)

    p = np.clip(p, eps, 1.0 - eps)

    ll = np.where(r == 1.0, np.log(p), np.log(1.0 - p))
    return float(-np.sum(ll))


def negative_log_likelihood(b: Any, dataset: Dataset, eps: float = DEFAULT_EPS) -> float:
    """Negative log-likelihood of the dataset under the logistic model b=(b0, b1).

    Lower is better; always finite and non-negative.
    """
    b = np.asarray(b, dtype=float)
    y = b[0] + b[1] * dataset.x
    return neg_loglike_bernoulli(logistic(y), dataset.r, eps)


def build_objective(dataset: Dataset, eps: float = DEFAULT_EPS) -> Callable[[np.ndarray], float]:
    """Bind the negative log-likelihood to a dataset for the optimizer."""
    x = dataset.x
    r = dataset.r

    def objective(b: np.ndarray) -> float:
        b = np.asarray(b, dtype=float)
        if not np.all(np.isfinite(b)):
            return float("inf")
        return neg_loglike_bernoulli(logistic(b[0] + b[1] * x), r, eps)

    return objective
