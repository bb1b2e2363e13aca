"""Parametric bootstrap of the psychometric fit.

Synthetic response sets are drawn from the fitted model itself at the
observed stimulus positions, each one is refit, and the spread of the refit
parameters estimates their sampling distribution.
"""
from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Optional, Tuple

import numpy as np

from .config import BootstrapConfig
from .fitter import Fitter
from .inputs import Dataset
from .link import logistic
from .model import METRIC_NAMES, FittedModel
from .util import level_to_conf_int

logger = logging.getLogger(__name__)


def simulate_responses(dataset: Dataset, b: Any, rng: np.random.Generator) -> Dataset:
    """Draw one synthetic response per observation from the model b=(b0, b1).

    Response is 1 when u <= p for u ~ U[0, 1); positions are shared with the
    input dataset.
    """
    b = np.asarray(b, dtype=float)
    p = logistic(b[0] + b[1] * dataset.x)
    u = rng.random(dataset.n)
    return dataset.with_responses((u <= p).astype(float))


@dataclass(frozen=True)
class BootstrapSample:
    """One refit of a simulated dataset.

    `error` holds a diagnostic when the refit was degenerate or provisional;
    the model is still recorded (with NaN metrics when degenerate).
    """

    index: int
    model: FittedModel
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass(frozen=True)
class BootstrapResult:
    samples: Tuple[BootstrapSample, ...]
    interval_level: float = 1.0
    stats: Dict[str, Any] = field(default_factory=dict)

    def __len__(self) -> int:
        return len(self.samples)

    def __iter__(self) -> Iterator[BootstrapSample]:
        return iter(self.samples)

    def __getitem__(self, idx: int) -> BootstrapSample:
        return self.samples[idx]

    @property
    def models(self) -> Tuple[FittedModel, ...]:
        return tuple(s.model for s in self.samples)

    @property
    def n_failed(self) -> int:
        return sum(1 for s in self.samples if not s.ok)

    def failures(self) -> List[BootstrapSample]:
        return [s for s in self.samples if not s.ok]

    def rows(self) -> np.ndarray:
        """Metric table of shape (count, 7) in METRIC_NAMES order."""
        if not self.samples:
            return np.empty((0, len(METRIC_NAMES)), dtype=float)
        return np.asarray([s.model.as_row() for s in self.samples], dtype=float)

    def column(self, name: str) -> np.ndarray:
        if name not in METRIC_NAMES:
            raise KeyError(name)
        return self.rows()[:, METRIC_NAMES.index(name)]

    def mean(self) -> Dict[str, float]:
        """Per-metric mean over finite values (NaN when none)."""
        out: Dict[str, float] = {}
        for name in METRIC_NAMES:
            v = _finite(self.column(name))
            out[name] = float(np.mean(v)) if v.size else float("nan")
        return out

    def std(self) -> Dict[str, float]:
        """Per-metric sample standard deviation (ddof=1) over finite values."""
        out: Dict[str, float] = {}
        for name in METRIC_NAMES:
            v = _finite(self.column(name))
            out[name] = float(np.std(v, ddof=1)) if v.size >= 2 else float("nan")
        return out

    def interval(self, level: Optional[float] = None) -> Dict[str, Tuple[float, float]]:
        """Percentile interval matching a Normal-equivalent ±level sigma."""
        level = self.interval_level if level is None else float(level)
        q_lo, q_hi = level_to_conf_int(level)
        out: Dict[str, Tuple[float, float]] = {}
        for name in METRIC_NAMES:
            v = _finite(self.column(name))
            if v.size == 0:
                out[name] = (float("nan"), float("nan"))
            else:
                lo, hi = np.quantile(v, [q_lo, q_hi])
                out[name] = (float(lo), float(hi))
        return out

    def summary(self, digits: int = 4) -> str:
        """Return a human-readable summary string of the bootstrap distribution."""
        lines = [f"BootstrapResult(n={len(self)}, failed={self.n_failed})"]
        if not self.samples:
            return "\n".join(lines)
        mean = self.mean()
        std = self.std()
        ci = self.interval()
        for name in METRIC_NAMES:
            lo, hi = ci[name]
            lines.append(
                f"  {name:>8s}: {mean[name]:.{digits}g} +/- {std[name]:.{digits}g}"
                f"  [{lo:.{digits}g}, {hi:.{digits}g}]"
            )
        return "\n".join(lines)


class BootstrapEngine:
    """Repeated simulate -> refit cycles around a fitted model."""

    def __init__(
        self,
        fitter: Optional[Fitter] = None,
        config: Optional[BootstrapConfig] = None,
    ):
        self.fitter = Fitter() if fitter is None else fitter
        self.config = BootstrapConfig() if config is None else config

    def simulate(
        self,
        dataset: Dataset,
        model: FittedModel,
        count: int,
        *,
        rng: Optional[np.random.Generator] = None,
    ) -> Iterator[BootstrapSample]:
        """Lazily yield `count` bootstrap samples drawn from one shared stream.

        Each refit starts from the real fit's parameters rather than a random
        guess. Consuming the iterator advances `rng`. A negative count raises
        ValueError immediately.
        """
        count = _check_count(count)
        if rng is None:
            rng = np.random.default_rng()
        return self._iter(dataset, model.b, count, rng)

    def _iter(
        self, dataset: Dataset, b: np.ndarray, count: int, rng: np.random.Generator
    ) -> Iterator[BootstrapSample]:
        for i in range(count):
            yield self._one(i, dataset, b, rng)

    def run(
        self,
        dataset: Dataset,
        model: FittedModel,
        count: int,
        *,
        rng: Optional[np.random.Generator] = None,
        workers: Optional[int] = None,
    ) -> BootstrapResult:
        """Collect `count` bootstrap samples.

        With workers > 1 each iteration draws from its own generator spawned
        from `rng`, and iterations run on a thread pool; sample order follows
        the iteration index either way.
        """
        count = _check_count(count)
        if rng is None:
            rng = np.random.default_rng()
        workers = self.config.workers if workers is None else int(workers)
        if workers is not None and workers < 1:
            raise ValueError("workers must be >= 1.")

        if count:
            logger.info("simulating %d times...", count)

        if workers is None or workers == 1 or count <= 1:
            samples = []
            for s in self.simulate(dataset, model, count, rng=rng):
                samples.append(s)
                self._progress(len(samples), count)
        else:
            b = model.b
            children = rng.spawn(count)
            with ThreadPoolExecutor(max_workers=workers) as pool:
                samples = list(
                    pool.map(lambda i: self._one(i, dataset, b, children[i]), range(count))
                )

        result = BootstrapResult(
            samples=tuple(samples),
            interval_level=self.config.interval_level,
            stats={"count": count, "workers": workers or 1},
        )
        if count:
            logger.info("done")
        if result.n_failed:
            logger.warning(
                "%d of %d bootstrap refits were degenerate or did not converge.",
                result.n_failed,
                count,
            )
        return result

    def _one(
        self, index: int, dataset: Dataset, b: np.ndarray, rng: np.random.Generator
    ) -> BootstrapSample:
        start = b.copy()
        simulated = simulate_responses(dataset, b, rng)
        model = self.fitter.refit(simulated, start, allow_degenerate=True, quiet=True)

        error = None
        if model.degenerate:
            error = f"bootstrap iteration {index}: fitted slope b1={model.b1!r} is numerically zero"
        elif not model.converged:
            error = f"bootstrap iteration {index}: optimizer did not converge ({model.message})"
        if error is not None:
            logger.debug(error)
        return BootstrapSample(index=index, model=model, error=error)

    def _progress(self, done: int, count: int) -> None:
        every = self.config.progress_every
        if every and done % every == 0:
            logger.info("bootstrap: %d/%d", done, count)


def _check_count(count: int) -> int:
    count = int(count)
    if count < 0:
        raise ValueError("bootstrap count must be >= 0.")
    return count


def _finite(v: np.ndarray) -> np.ndarray:
    v = np.asarray(v, dtype=float)
    return v[np.isfinite(v)]
