from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Dict, Tuple

import numpy as np

from .errors import DegenerateFitError
from .link import inverse_logistic, logistic

# Column order of the params/dist output rows.
METRIC_NAMES: Tuple[str, ...] = ("b0", "b1", "bias", "slope50", "x75", "x25", "acuity")


@dataclass(frozen=True)
class FittedModel:
    """A fitted logistic psychometric function plus derived perceptual metrics.

    - bias: position where the predicted probability is 0.5 (-b0/b1)
    - slope50: derivative of the curve at the 50% point (b1/4)
    - x75, x25: positions at 75% and 25% predicted probability
    - acuity: x75 - x25

    Degenerate models (zero slope) carry NaN for bias, x75, x25 and acuity.
    `converged=False` marks a provisional result from an optimizer that
    stopped before meeting its tolerance.
    """

    b0: float
    b1: float
    bias: float
    slope50: float
    x75: float
    x25: float
    acuity: float
    nll: float = float("nan")
    converged: bool = True
    degenerate: bool = False
    message: str = ""

    @staticmethod
    def from_params(
        b: Any,
        *,
        nll: float = float("nan"),
        converged: bool = True,
        message: str = "",
        degenerate_tol: float = 1e-12,
        allow_degenerate: bool = False,
    ) -> "FittedModel":
        """Build a FittedModel from b=(b0, b1), computing the derived metrics.

        Raises DegenerateFitError when |b1| <= degenerate_tol, unless
        allow_degenerate is set, in which case the undefined metrics are NaN.
        """
        b_arr = np.asarray(b, dtype=float).reshape((-1,))
        if b_arr.shape != (2,):
            raise ValueError(f"Parameter vector must have 2 entries (got shape {b_arr.shape}).")
        b0, b1 = float(b_arr[0]), float(b_arr[1])

        if not math.isfinite(b1) or abs(b1) <= degenerate_tol:
            if not allow_degenerate:
                raise DegenerateFitError(
                    f"fitted slope b1={b1!r} is numerically zero; bias and acuity are undefined.",
                    stage="fit",
                )
            nan = float("nan")
            return FittedModel(
                b0=b0,
                b1=b1,
                bias=nan,
                slope50=b1 / 4.0,
                x75=nan,
                x25=nan,
                acuity=nan,
                nll=float(nll),
                converged=converged,
                degenerate=True,
                message=message,
            )

        x75 = inverse_logistic(0.75, (b0, b1))
        x25 = inverse_logistic(0.25, (b0, b1))
        return FittedModel(
            b0=b0,
            b1=b1,
            bias=-b0 / b1,
            slope50=b1 / 4.0,
            x75=x75,
            x25=x25,
            acuity=x75 - x25,
            nll=float(nll),
            converged=converged,
            degenerate=False,
            message=message,
        )

    @property
    def b(self) -> np.ndarray:
        """Parameter vector (b0, b1) as a fresh array."""
        return np.array([self.b0, self.b1], dtype=float)

    @property
    def provisional(self) -> bool:
        return not self.converged

    def predict(self, x: Any) -> Any:
        """Predicted probability of a positive response at position(s) x."""
        return logistic(self.b0 + self.b1 * np.asarray(x, dtype=float))

    def position_at(self, p: float) -> float:
        """Stimulus position at which the predicted probability equals p."""
        return inverse_logistic(p, (self.b0, self.b1))

    def as_row(self) -> Tuple[float, ...]:
        """The 7 output fields (b0, b1, bias, slope50, x75, x25, acuity)."""
        return tuple(float(getattr(self, n)) for n in METRIC_NAMES)

    def as_dict(self) -> Dict[str, float]:
        return {n: float(getattr(self, n)) for n in METRIC_NAMES}

    def equation(self, digits: int = 5) -> str:
        return f"y = {self.b0:.{digits}f} + ({self.b1:.{digits}f} * x)"
