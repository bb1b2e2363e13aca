from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any, Iterable, Iterator, Optional, Tuple

import numpy as np

from .errors import InputError


@dataclass(frozen=True)
class Observation:
    position: float
    response: int


@dataclass(frozen=True)
class Dataset:
    """Binary-choice data: stimulus positions and {0, 1} responses.

    Both columns are stored as read-only float arrays. Observation order is
    preserved so that simulated responses line up with positions.
    """

    x: np.ndarray
    r: np.ndarray

    # Plotting metadata (optional)
    x_label: Optional[str] = None
    label: Optional[str] = None  # e.g. the source filename

    def __post_init__(self):
        x = _frozen_column(self.x)
        r = _frozen_column(self.r)
        if x.size == 0:
            raise InputError("Dataset requires at least one observation.")
        if x.shape != r.shape:
            raise InputError(
                f"positions ({x.size}) and responses ({r.size}) differ in length."
            )
        if not np.all(np.isfinite(x)):
            raise InputError("Stimulus positions must be finite.")
        if not np.all((r == 0.0) | (r == 1.0)):
            bad = np.flatnonzero(~((r == 0.0) | (r == 1.0)))
            raise InputError(
                f"Responses must be 0 or 1 (first bad row: {int(bad[0])}, value {float(r[bad[0]])!r})."
            )
        x.setflags(write=False)
        r.setflags(write=False)
        object.__setattr__(self, "x", x)
        object.__setattr__(self, "r", r)

    @staticmethod
    def from_arrays(
        *,
        x: Any,
        r: Any,
        x_label: Optional[str] = None,
        label: Optional[str] = None,
    ) -> "Dataset":
        """Create a Dataset from position and response columns."""
        return Dataset(x=x, r=r, x_label=x_label, label=label)

    @staticmethod
    def from_observations(
        observations: Iterable[Tuple[float, int]],
        *,
        label: Optional[str] = None,
    ) -> "Dataset":
        """Create a Dataset from (position, response) pairs."""
        rows = [(float(pos), float(resp)) for pos, resp in observations]
        if not rows:
            raise InputError("Dataset requires at least one observation.")
        arr = np.asarray(rows, dtype=float)
        return Dataset(x=arr[:, 0], r=arr[:, 1], label=label)

    @property
    def n(self) -> int:
        return int(self.x.size)

    def __len__(self) -> int:
        return self.n

    def __iter__(self) -> Iterator[Observation]:
        for pos, resp in zip(self.x, self.r):
            yield Observation(position=float(pos), response=int(resp))

    def with_responses(self, r: Any) -> "Dataset":
        """Return a copy with a new response column; positions are shared."""
        r_new = np.asarray(r, dtype=float).reshape((-1,))
        if r_new.shape != self.r.shape:
            raise InputError(
                f"Replacement responses have length {r_new.size}, expected {self.n}."
            )
        return replace(self, r=r_new)


def _frozen_column(values: Any) -> np.ndarray:
    """Return a read-only 1D float array, copying unless already frozen."""
    if (
        isinstance(values, np.ndarray)
        and values.dtype == np.float64
        and values.ndim == 1
        and not values.flags.writeable
    ):
        return values
    col = np.array(values, dtype=float).reshape((-1,))
    return col
