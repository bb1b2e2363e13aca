from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Protocol

import numpy as np


@dataclass(frozen=True)
class BackendResult:
    """Normalized result returned by any backend."""

    x: np.ndarray  # minimizing parameters, shape (P,)
    fun: float  # objective at x
    success: bool = True
    message: str = ""
    stats: Dict[str, Any] = field(default_factory=dict)


class Backend(Protocol):
    """Backend protocol: minimize one scalar objective from a starting point.

    Implementations must be deterministic for a fixed objective and x0, and
    must not modify x0.
    """

    name: str

    def minimize(
        self,
        objective: Callable[[np.ndarray], float],
        x0: np.ndarray,
        *,
        tol: float,
        restarts: int,
        options: dict[str, Any],
    ) -> BackendResult: ...
