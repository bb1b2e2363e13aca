from __future__ import annotations

import logging
import time
from typing import Any, Callable, Dict, Optional

import numpy as np
from scipy.optimize import minimize

from .common import BackendResult

logger = logging.getLogger(__name__)


class ScipyNelderMeadBackend:
    name = "scipy.nelder_mead"

    def minimize(
        self,
        objective: Callable[[np.ndarray], float],
        x0: np.ndarray,
        *,
        tol: float,
        restarts: int,
        options: dict[str, Any],
    ) -> BackendResult:
        """Minimize with the Nelder-Mead simplex (scipy.optimize.minimize).

        The simplex is restarted from the best point up to `restarts` times,
        stopping early once a restart no longer improves the objective by
        more than `tol`. Each restart builds a fresh simplex around the
        current best point.

        Backend options:
        - xtol: absolute parameter tolerance (default: 1e-8)
        - maxiter, maxfev: per-run limits forwarded to scipy
        - timeout: wall-clock seconds for the whole fit, restarts included
        - adaptive: scipy's dimension-adaptive simplex parameters (default: False)
        """
        x_start = np.array(x0, dtype=float).reshape((-1,))
        if x_start.size == 0:
            raise ValueError("x0 must contain at least one parameter.")

        scipy_opts: Dict[str, Any] = {
            "fatol": float(tol),
            "xatol": float(options.get("xtol", 1e-8)),
            "adaptive": bool(options.get("adaptive", False)),
        }
        for k in ("maxiter", "maxfev"):
            if options.get(k) is not None:
                scipy_opts[k] = int(options[k])

        timeout: Optional[float] = options.get("timeout", None)
        deadline = None if timeout is None else time.monotonic() + float(timeout)
        timed_out = False

        def _callback(intermediate_result: Any) -> None:
            nonlocal timed_out
            if deadline is not None and time.monotonic() > deadline:
                timed_out = True
                raise StopIteration

        nfev = 0
        nit = 0
        runs = 0
        best_x = x_start
        best_fun = float(objective(x_start))
        success = False
        message = ""

        for attempt in range(int(restarts) + 1):
            res = minimize(
                objective,
                best_x,
                method="Nelder-Mead",
                options=scipy_opts,
                callback=_callback if deadline is not None else None,
            )
            runs += 1
            nfev += int(getattr(res, "nfev", 0) or 0)
            nit += int(getattr(res, "nit", 0) or 0)

            fun = float(res.fun)
            improvement = best_fun - fun
            if fun <= best_fun:
                best_x = np.asarray(res.x, dtype=float)
                best_fun = fun
            success = bool(res.success) and not timed_out
            message = "timeout exceeded" if timed_out else str(res.message)

            logger.debug(
                "nelder-mead run %d: fun=%.10g nfev=%d success=%s",
                attempt,
                fun,
                int(getattr(res, "nfev", 0) or 0),
                success,
            )

            if timed_out or not success:
                break
            if attempt > 0 and improvement <= tol:
                break

        return BackendResult(
            x=np.array(best_x, dtype=float),
            fun=best_fun,
            success=success,
            message=message,
            stats={
                "backend": self.name,
                "nfev": nfev,
                "nit": nit,
                "runs": runs,
            },
        )
