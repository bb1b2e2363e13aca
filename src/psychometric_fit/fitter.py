from __future__ import annotations

import logging
from typing import Any, Optional
from warnings import warn

import numpy as np

from .backends import Backend, get_backend
from .config import FitConfig
from .errors import OptimizerNonconvergence
from .inference import build_objective
from .inputs import Dataset
from .model import FittedModel

logger = logging.getLogger(__name__)


class Fitter:
    """Maximum-likelihood fit of a logistic psychometric function.

    The fitter is stateless between calls; randomness enters only through
    the generator passed to `fit` for the starting guess.
    """

    def __init__(
        self,
        config: Optional[FitConfig] = None,
        backend: Optional[Backend] = None,
    ):
        self.config = FitConfig() if config is None else config
        self.backend = get_backend(self.config.backend) if backend is None else backend

    def __repr__(self) -> str:
        return f"Fitter(backend={self.backend.name!r}, tol={self.config.tol!r})"

    def starting_guess(self, rng: np.random.Generator) -> np.ndarray:
        """Two independent Uniform(0, 1) draws."""
        return rng.uniform(0.0, 1.0, size=2)

    def fit(
        self,
        dataset: Dataset,
        *,
        rng: Optional[np.random.Generator] = None,
        p0: Optional[Any] = None,
        allow_degenerate: bool = False,
    ) -> FittedModel:
        """Fit b=(b0, b1) to the dataset by minimizing the negative log-likelihood.

        p0 overrides the random starting guess. Raises DegenerateFitError on a
        zero slope unless allow_degenerate is set. A result that did not meet
        the tolerance is returned with converged=False and an
        OptimizerNonconvergence warning (raised instead in strict mode).
        """
        if p0 is None:
            if rng is None:
                rng = np.random.default_rng()
            start = self.starting_guess(rng)
        else:
            start = np.array(p0, dtype=float).reshape((-1,))
            if start.shape != (2,):
                raise ValueError(f"p0 must have 2 entries (got shape {start.shape}).")

        return self._fit_from(dataset, start, allow_degenerate=allow_degenerate)

    def refit(
        self,
        dataset: Dataset,
        start: Any,
        *,
        allow_degenerate: bool = False,
        quiet: bool = False,
    ) -> FittedModel:
        """Fit from an explicit starting point (no random draw).

        With quiet=True nonconvergence is only recorded on the returned model
        (converged=False), never warned about or raised.
        """
        start = np.array(start, dtype=float).reshape((-1,))
        if start.shape != (2,):
            raise ValueError(f"start must have 2 entries (got shape {start.shape}).")
        return self._fit_from(
            dataset, start, allow_degenerate=allow_degenerate, quiet=quiet
        )

    def _fit_from(
        self,
        dataset: Dataset,
        start: np.ndarray,
        *,
        allow_degenerate: bool,
        quiet: bool = False,
    ) -> FittedModel:
        cfg = self.config
        objective = build_objective(dataset, cfg.eps)

        logger.debug("fitting %d observations from start=%s", dataset.n, start)
        res = self.backend.minimize(
            objective,
            start,
            tol=cfg.tol,
            restarts=cfg.restarts,
            options=cfg.backend_options(),
        )
        logger.debug(
            "fit result: b=%s nll=%.10g success=%s (%s)",
            res.x,
            res.fun,
            res.success,
            res.message,
        )

        if not res.success:
            msg = (
                f"optimizer did not converge ({res.message}); "
                f"keeping best point b={tuple(float(v) for v in res.x)}, nll={res.fun:.6g}"
            )
            logger.debug(msg)
            if not quiet:
                if cfg.strict:
                    raise OptimizerNonconvergence(msg, stage="fit")
                warn(OptimizerNonconvergence(msg, stage="fit"), stacklevel=3)

        return FittedModel.from_params(
            res.x,
            nll=res.fun,
            converged=bool(res.success),
            message=res.message,
            degenerate_tol=cfg.degenerate_tol,
            allow_degenerate=allow_degenerate,
        )


def fit_psychometric(
    x: Any,
    r: Any,
    *,
    rng: Optional[np.random.Generator] = None,
    p0: Optional[Any] = None,
    config: Optional[FitConfig] = None,
) -> FittedModel:
    """Fit a logistic psychometric function to positions x and responses r."""
    dataset = Dataset.from_arrays(x=x, r=r)
    return Fitter(config).fit(dataset, rng=rng, p0=p0)
