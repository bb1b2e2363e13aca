from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Tuple

import numpy as np
import uncertainties

from .bootstrap import BootstrapEngine, BootstrapResult
from .config import BootstrapConfig, FitConfig
from .fitter import Fitter
from .inputs import Dataset
from .model import METRIC_NAMES, FittedModel
from .util import grid_over, level_to_conf_int, uncertainty_to_string

logger = logging.getLogger(__name__)

_RULE = "*" * 63
# Failed bootstrap iterations listed individually in the summary
_MAX_LISTED_FAILURES = 5


@dataclass(frozen=True)
class Band:
    low: np.ndarray
    high: np.ndarray
    median: Optional[np.ndarray] = None


@dataclass(frozen=True)
class Run:
    """Outcome of one analysis: the real fit plus an optional bootstrap."""

    dataset: Dataset
    fit: FittedModel
    bootstrap: Optional[BootstrapResult] = None
    stats: Dict[str, Any] = field(default_factory=dict)

    @property
    def success(self) -> bool:
        return self.fit.converged and not self.fit.degenerate

    def predict(self, x: Any) -> Any:
        """Predicted response probability of the real fit at x."""
        return self.fit.predict(x)

    def curve(self, npts: int = 50) -> Tuple[np.ndarray, np.ndarray]:
        """Fitted curve sampled at npts evenly spaced points over the data range."""
        xg = grid_over(self.dataset.x, npts)
        return xg, np.asarray(self.predict(xg), dtype=float)

    def band(self, x: Any, *, level: Optional[float] = None) -> Band:
        """Pointwise percentile band of bootstrap curves at x."""
        if self.bootstrap is None or len(self.bootstrap) == 0:
            raise ValueError("No bootstrap samples; run with ndist > 0 to get a band.")
        level = self.bootstrap.interval_level if level is None else float(level)
        q_lo, q_hi = level_to_conf_int(level)
        xg = np.asarray(x, dtype=float)
        curves = np.asarray(
            [s.model.predict(xg) for s in self.bootstrap if not s.model.degenerate],
            dtype=float,
        )
        if curves.shape[0] == 0:
            raise ValueError("All bootstrap refits were degenerate; no band available.")
        lo, med, hi = np.quantile(curves, [q_lo, 0.5, q_hi], axis=0)
        return Band(low=lo, high=hi, median=med)

    @property
    def stderr(self) -> Optional[Dict[str, float]]:
        """Bootstrap standard deviation of each metric, if bootstrapped."""
        if self.bootstrap is None or len(self.bootstrap) == 0:
            return None
        return self.bootstrap.std()

    def ufloats(self) -> Dict[str, Any]:
        """Fitted metrics as uncertainties.ufloat with bootstrap std as error.

        Without a bootstrap the error is NaN.
        """
        err = self.stderr or {}
        return {
            name: uncertainties.ufloat(getattr(self.fit, name), err.get(name, float("nan")))
            for name in METRIC_NAMES
        }

    def summary(self, digits: int = 5) -> str:
        """Return a human-readable summary string for the fit."""
        f = self.fit
        lines = [
            _RULE,
            f.equation(digits),
            "p(r|x) = 1 / (1 + exp(-y))",
            _RULE,
            f"bias = {f.bias:.{digits}f}",
            f"slope at 50% = {f.slope50:.{digits}f}",
            f"acuity (x75 - x25) = ({f.x75:.{digits}f} - {f.x25:.{digits}f}) = {f.acuity:.{digits}f}",
        ]
        if not f.converged:
            lines.append(f"WARNING: provisional fit, optimizer did not converge ({f.message})")
        lines.append(_RULE)

        if self.bootstrap is not None and len(self.bootstrap) > 0:
            std = self.bootstrap.std()
            ci = self.bootstrap.interval()
            lines.append(
                f"bootstrap: {len(self.bootstrap)} simulations, {self.bootstrap.n_failed} failed"
            )
            failures = self.bootstrap.failures()
            for s in failures[:_MAX_LISTED_FAILURES]:
                lines.append(f"  {s.error}")
            if len(failures) > _MAX_LISTED_FAILURES:
                lines.append(f"  ... and {len(failures) - _MAX_LISTED_FAILURES} more")
            for name in METRIC_NAMES:
                value = getattr(f, name)
                lo, hi = ci[name]
                lines.append(
                    f"  {name:>8s}: {uncertainty_to_string(value, std[name], precision='auto'):>16s}"
                    f"  [{lo:.{digits}g}, {hi:.{digits}g}]"
                )
            lines.append(_RULE)
        return "\n".join(lines)


def analyze(
    dataset: Dataset,
    *,
    ndist: int = 0,
    rng: Optional[np.random.Generator] = None,
    fit_config: Optional[FitConfig] = None,
    bootstrap_config: Optional[BootstrapConfig] = None,
    workers: Optional[int] = None,
) -> Run:
    """Fit the dataset and, when ndist > 0, bootstrap the fit ndist times.

    One generator drives both the random starting guess and the simulated
    responses, so a seeded rng makes the whole analysis reproducible.
    """
    if ndist < 0:
        raise ValueError("ndist must be >= 0.")
    if rng is None:
        rng = np.random.default_rng()

    fitter = Fitter(fit_config)
    fit = fitter.fit(dataset, rng=rng)
    logger.info("fit: b0=%.5f b1=%.5f nll=%.6g", fit.b0, fit.b1, fit.nll)

    boot = None
    if ndist > 0:
        engine = BootstrapEngine(fitter, bootstrap_config)
        boot = engine.run(dataset, fit, ndist, rng=rng, workers=workers)

    return Run(dataset=dataset, fit=fit, bootstrap=boot, stats={"ndist": int(ndist)})
