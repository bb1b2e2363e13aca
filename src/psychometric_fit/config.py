"""Configuration dataclasses for fitting, bootstrapping and output."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class FitConfig:
    """Options for a single maximum-likelihood fit."""

    # Convergence tolerance on the objective value (Nelder-Mead fatol)
    tol: float = 1e-8
    # Convergence tolerance on the parameters (Nelder-Mead xatol)
    xtol: float = 1e-8
    # Extra simplex restarts from the best point found so far
    restarts: int = 1
    maxiter: Optional[int] = None
    maxfev: Optional[int] = None
    # Wall-clock deadline per fit, seconds
    timeout: Optional[float] = None
    # Probability clamp used inside the log-likelihood
    eps: float = 1e-10
    # |b1| at or below this is treated as a zero slope
    degenerate_tol: float = 1e-12
    backend: str = "scipy.nelder_mead"
    # Raise OptimizerNonconvergence instead of warning
    strict: bool = False

    def __post_init__(self):
        if not self.tol > 0.0:
            raise ValueError("tol must be > 0.")
        if not self.xtol > 0.0:
            raise ValueError("xtol must be > 0.")
        if self.restarts < 0:
            raise ValueError("restarts must be >= 0.")
        if self.maxiter is not None and self.maxiter <= 0:
            raise ValueError("maxiter must be a positive integer.")
        if self.maxfev is not None and self.maxfev <= 0:
            raise ValueError("maxfev must be a positive integer.")
        if self.timeout is not None and not self.timeout > 0.0:
            raise ValueError("timeout must be > 0 seconds.")
        if not 0.0 < self.eps < 0.5:
            raise ValueError("eps must lie in (0, 0.5).")
        if self.degenerate_tol < 0.0:
            raise ValueError("degenerate_tol must be >= 0.")

    def backend_options(self) -> dict:
        """Options forwarded to the optimizer backend."""
        opts = {"xtol": float(self.xtol)}
        if self.maxiter is not None:
            opts["maxiter"] = int(self.maxiter)
        if self.maxfev is not None:
            opts["maxfev"] = int(self.maxfev)
        if self.timeout is not None:
            opts["timeout"] = float(self.timeout)
        return opts


@dataclass(frozen=True)
class BootstrapConfig:
    """Options for the parametric bootstrap."""

    workers: Optional[int] = None
    # Normal-equivalent sigma level of the percentile interval
    interval_level: float = 1.0
    # Log progress every N samples (0 disables)
    progress_every: int = 0

    def __post_init__(self):
        if self.workers is not None and self.workers < 1:
            raise ValueError("workers must be >= 1.")
        if not self.interval_level > 0.0:
            raise ValueError("interval_level must be > 0.")
        if self.progress_every < 0:
            raise ValueError("progress_every must be >= 0.")


@dataclass(frozen=True)
class OutputConfig:
    """Options for the flat-text result files."""

    npts: int = 50
    fmt: str = "%7.5f"
    suffix_sep: str = "_"

    def __post_init__(self):
        if self.npts < 2:
            raise ValueError("npts must be >= 2.")
