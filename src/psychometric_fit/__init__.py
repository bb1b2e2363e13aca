"""psychometric_fit public API."""
from .bootstrap import BootstrapEngine, BootstrapResult, BootstrapSample, simulate_responses
from .config import BootstrapConfig, FitConfig, OutputConfig
from .errors import (
    DegenerateFitError,
    DomainError,
    InputError,
    OptimizerNonconvergence,
    OutputError,
    PsychometricError,
)
from .fitter import Fitter, fit_psychometric
from .inference import negative_log_likelihood
from .inputs import Dataset, Observation
from .link import inverse_logistic, logistic
from .model import METRIC_NAMES, FittedModel
from .run import Band, Run, analyze
from .textio import load_dataset, write_results

__all__ = [
    "BootstrapConfig",
    "BootstrapEngine",
    "BootstrapResult",
    "BootstrapSample",
    "Band",
    "Dataset",
    "DegenerateFitError",
    "DomainError",
    "FitConfig",
    "FittedModel",
    "Fitter",
    "InputError",
    "METRIC_NAMES",
    "Observation",
    "OptimizerNonconvergence",
    "OutputConfig",
    "OutputError",
    "PsychometricError",
    "Run",
    "analyze",
    "fit_psychometric",
    "inverse_logistic",
    "load_dataset",
    "logistic",
    "negative_log_likelihood",
    "simulate_responses",
    "write_results",
]
