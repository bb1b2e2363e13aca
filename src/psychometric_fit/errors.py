"""Exception taxonomy for psychometric fitting."""

from __future__ import annotations

from typing import Optional


class PsychometricError(Exception):
    """Base class for all psychometric_fit errors.

    ``stage`` names the pipeline step that failed ("load", "fit",
    "bootstrap iteration k", "write") and is used for CLI diagnostics.
    """

    def __init__(self, message: str = "", *, stage: Optional[str] = None):
        super().__init__(message)
        self.stage = stage

    def describe(self) -> str:
        msg = str(self)
        if self.stage:
            return f"{self.stage}: {msg}"
        return msg


class InputError(PsychometricError, ValueError):
    """Dataset missing, unreadable, malformed or empty."""


class DomainError(PsychometricError, ValueError):
    """Inverse link evaluated outside the open interval (0, 1)."""


class DegenerateFitError(PsychometricError, ArithmeticError):
    """Fitted slope is (numerically) zero so bias/acuity are undefined."""


class OptimizerNonconvergence(PsychometricError, RuntimeWarning):
    """Optimizer stopped before meeting its tolerance.

    Emitted as a warning by default (the best point found is kept and
    flagged provisional); raised when fitting in strict mode.
    """


class OutputError(PsychometricError, OSError):
    """A result file could not be written."""


__all__ = [
    "PsychometricError",
    "InputError",
    "DomainError",
    "DegenerateFitError",
    "OptimizerNonconvergence",
    "OutputError",
]
