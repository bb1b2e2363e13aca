"""Flat-text dataset loading and result writing.

Input: whitespace-delimited rows of `position response`. Outputs are keyed
off the input filename:

- `<data>_pred`:   fitted curve, `x p` on an even grid over the data range
- `<data>_params`: one row `b0 b1 bias slope50 x75 x25 acuity`
- `<data>_dist`:   one row per bootstrap sample, same seven fields
"""
from __future__ import annotations

import logging
import os
import warnings
from pathlib import Path
from typing import Dict, Iterable, Optional, Union

import numpy as np

from .bootstrap import BootstrapResult
from .config import OutputConfig
from .errors import InputError, OutputError
from .inputs import Dataset
from .model import FittedModel
from .util import grid_over

logger = logging.getLogger(__name__)

PathLike = Union[str, "os.PathLike[str]"]


def load_dataset(path: PathLike) -> Dataset:
    """Read a two-column `position response` text file into a Dataset."""
    p = Path(path)
    if not p.is_file():
        raise InputError(f"no such data file: {str(p)!r}", stage="load")
    try:
        with warnings.catch_warnings():
            # loadtxt warns on empty input; reported below as an InputError.
            warnings.simplefilter("ignore", UserWarning)
            arr = np.loadtxt(p, dtype=float, comments="#", ndmin=2)
    except (OSError, ValueError) as e:
        raise InputError(f"could not parse {str(p)!r}: {e}", stage="load") from e

    if arr.size == 0:
        raise InputError(f"{str(p)!r} contains no rows of data", stage="load")
    if arr.shape[1] != 2:
        raise InputError(
            f"{str(p)!r} must have exactly 2 columns (position response), found {arr.shape[1]}",
            stage="load",
        )

    try:
        dataset = Dataset.from_arrays(x=arr[:, 0], r=arr[:, 1], label=p.name)
    except InputError as e:
        e.stage = "load"
        raise
    logger.info("found %d rows of data in %s", dataset.n, p)
    return dataset


def output_paths(data_path: PathLike, suffix_sep: str = "_") -> Dict[str, Path]:
    """Paths of the pred/params/dist outputs for an input file."""
    base = str(data_path)
    return {
        kind: Path(f"{base}{suffix_sep}{kind}")
        for kind in ("pred", "params", "dist")
    }


def write_curve(
    path: PathLike,
    model: FittedModel,
    x: Iterable[float],
    config: Optional[OutputConfig] = None,
) -> Path:
    """Write the fitted curve sampled at config.npts points over the range of x."""
    config = OutputConfig() if config is None else config
    xg = grid_over(np.asarray(list(x), dtype=float), config.npts)
    pg = np.asarray(model.predict(xg), dtype=float)
    return _savetxt(path, np.column_stack([xg, pg]), config.fmt)


def write_params(
    path: PathLike, model: FittedModel, config: Optional[OutputConfig] = None
) -> Path:
    """Write the single-row parameter/metric summary."""
    config = OutputConfig() if config is None else config
    return _savetxt(path, np.asarray([model.as_row()], dtype=float), config.fmt)


def write_distribution(
    path: PathLike, result: BootstrapResult, config: Optional[OutputConfig] = None
) -> Path:
    """Write one row per bootstrap sample (b0 b1 bias slope50 x75 x25 acuity)."""
    config = OutputConfig() if config is None else config
    return _savetxt(path, result.rows(), config.fmt)


def write_results(
    data_path: PathLike,
    dataset: Dataset,
    model: FittedModel,
    bootstrap: Optional[BootstrapResult] = None,
    config: Optional[OutputConfig] = None,
) -> Dict[str, Path]:
    """Write pred and params files, plus dist when bootstrap samples exist.

    Files are written in that order; a failure leaves earlier files in place.
    """
    config = OutputConfig() if config is None else config
    paths = output_paths(data_path, config.suffix_sep)
    written = {
        "pred": write_curve(paths["pred"], model, dataset.x, config),
        "params": write_params(paths["params"], model, config),
    }
    if bootstrap is not None and len(bootstrap) > 0:
        written["dist"] = write_distribution(paths["dist"], bootstrap, config)
    return written


def _savetxt(path: PathLike, rows: np.ndarray, fmt: str) -> Path:
    p = Path(path)
    try:
        with p.open("w", encoding="utf-8") as fh:
            np.savetxt(fh, rows, fmt=fmt, delimiter=" ")
    except OSError as e:
        raise OutputError(f"error opening {str(p)!r} for writing: {e}", stage="write") from e
    logger.debug("wrote %d rows to %s", rows.shape[0], p)
    return p
