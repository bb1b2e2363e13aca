"""Logistic link function and its inverse."""

from __future__ import annotations

from typing import Any

import numpy as np
from scipy.special import expit, logit

from .errors import DegenerateFitError, DomainError


def logistic(y: Any) -> Any:
    """Logistic link p = 1 / (1 + exp(-y)); scalar in, float out."""
    p = expit(np.asarray(y, dtype=float))
    if np.ndim(p) == 0:
        return float(p)
    return p


def inverse_logistic(p: Any, b: Any) -> Any:
    """Stimulus position at which the model b=(b0, b1) predicts probability p.

    x = (ln(p / (1 - p)) - b0) / b1
    """
    p_arr = np.asarray(p, dtype=float)
    if np.any(~((p_arr > 0.0) & (p_arr < 1.0))):
        raise DomainError(
            f"inverse_logistic requires 0 < p < 1 (got {p!r})."
        )
    b0, b1 = _unpack(b)
    if b1 == 0.0:
        raise DegenerateFitError("inverse_logistic undefined for slope b1 == 0.")
    x = (logit(p_arr) - b0) / b1
    if np.ndim(x) == 0:
        return float(x)
    return x


def _unpack(b: Any) -> tuple[float, float]:
    b_arr = np.asarray(b, dtype=float).reshape((-1,))
    if b_arr.shape != (2,):
        raise ValueError(f"Parameter vector must have 2 entries (got shape {b_arr.shape}).")
    return float(b_arr[0]), float(b_arr[1])
