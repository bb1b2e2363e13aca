"""Command-line interface: fit a psychometric function to a data file."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Optional, Sequence

import numpy as np

from .bootstrap import BootstrapEngine
from .config import BootstrapConfig, FitConfig, OutputConfig
from .errors import OutputError, PsychometricError
from .fitter import Fitter
from .run import Run
from .textio import load_dataset, write_results

logger = logging.getLogger("psychometric_fit")


def build_arg_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="psychometric-fit",
        description=(
            "Fit a logistic psychometric function (binomial model, maximum likelihood) "
            "to a two-column data file of `position response` rows, and optionally "
            "estimate parameter distributions by parametric bootstrap."
        ),
    )
    p.add_argument("data", type=Path, help="input data file (columns: position response{0,1})")
    p.add_argument(
        "ndist",
        type=_non_negative_int,
        help="number of bootstrap simulations (0 disables bootstrapping)",
    )
    p.add_argument("--seed", type=int, default=None, help="random seed (default: OS entropy)")
    p.add_argument(
        "--workers",
        type=_positive_int,
        default=None,
        help="threads for bootstrap refits (default: sequential)",
    )
    p.add_argument("--tol", type=float, default=FitConfig.tol, help="tolerance on the objective")
    p.add_argument(
        "--restarts", type=int, default=FitConfig.restarts, help="simplex restarts per fit"
    )
    p.add_argument("--timeout", type=float, default=None, help="seconds allowed per fit")
    p.add_argument("--plot", type=Path, default=None, help="save a figure of the fit to this file")
    p.add_argument(
        "--npts", type=int, default=OutputConfig.npts, help="points in the fitted-curve output"
    )
    verbosity = p.add_mutually_exclusive_group()
    verbosity.add_argument("-v", "--verbose", action="count", default=0)
    verbosity.add_argument("-q", "--quiet", action="store_true")
    return p


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = build_arg_parser()
    args = parser.parse_args(argv)
    _configure_logging(args.verbose, args.quiet)

    try:
        fit_config = FitConfig(tol=args.tol, restarts=args.restarts, timeout=args.timeout)
        out_config = OutputConfig(npts=args.npts)
    except ValueError as e:
        parser.error(str(e))

    rng = np.random.default_rng(args.seed)

    try:
        dataset = load_dataset(args.data)

        fitter = Fitter(fit_config)
        try:
            fit = fitter.fit(dataset, rng=rng)
        except PsychometricError as e:
            e.stage = e.stage or "fit"
            raise

        boot = None
        if args.ndist > 0:
            engine = BootstrapEngine(fitter, BootstrapConfig(workers=args.workers))
            boot = engine.run(dataset, fit, args.ndist, rng=rng)

        run = Run(dataset=dataset, fit=fit, bootstrap=boot, stats={"ndist": args.ndist})
        if not args.quiet:
            print(run.summary())

        written = write_results(args.data, dataset, fit, boot, out_config)
        for kind, path in written.items():
            logger.info("wrote %s: %s", kind, path)

        if args.plot is not None:
            _save_plot(run, args.plot, rng)

    except PsychometricError as e:
        print(f"error: {e.describe()}", file=sys.stderr)
        return 1

    if not args.quiet:
        print("results written to " + ", ".join(str(p) for p in written.values()))
    return 0


def _save_plot(run: Run, path: Path, rng: np.random.Generator) -> None:
    try:
        import matplotlib
    except ImportError as e:
        raise OutputError("--plot requires matplotlib", stage="write") from e

    matplotlib.use("Agg")
    import matplotlib.pyplot as plt

    from .plotting import plot_fit

    fig, _ = plot_fit(run, rng=rng, show_params=True)
    try:
        fig.savefig(path)
    except OSError as e:
        raise OutputError(f"could not save plot to {str(path)!r}: {e}", stage="write") from e
    finally:
        plt.close(fig)
    logger.info("saved figure to %s", path)


def _configure_logging(verbose: int, quiet: bool) -> None:
    if quiet:
        level = logging.WARNING
    elif verbose >= 2:
        level = logging.DEBUG
    elif verbose == 1:
        level = logging.INFO
    else:
        level = logging.WARNING
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")


def _non_negative_int(s: str) -> int:
    v = int(s)
    if v < 0:
        raise argparse.ArgumentTypeError(f"must be >= 0 (got {v})")
    return v


def _positive_int(s: str) -> int:
    v = int(s)
    if v < 1:
        raise argparse.ArgumentTypeError(f"must be >= 1 (got {v})")
    return v


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
