import numpy as np
import pytest

from psychometric_fit import (
    Dataset,
    DegenerateFitError,
    FitConfig,
    Fitter,
    OptimizerNonconvergence,
    fit_psychometric,
    negative_log_likelihood,
)
from psychometric_fit.backends import BackendResult

IGNORE_NONCONVERGENCE = "ignore::psychometric_fit.errors.OptimizerNonconvergence"


def _simulated(b, n=400, seed=1):
    rng = np.random.default_rng(seed)
    x = rng.uniform(-2.0, 2.0, size=n)
    p = 1.0 / (1.0 + np.exp(-(b[0] + b[1] * x)))
    r = (rng.random(n) < p).astype(int)
    return Dataset.from_arrays(x=x, r=r)


class _FixedBackend:
    name = "fixed"

    def __init__(self, x, success=True, message="ok"):
        self.x = np.asarray(x, dtype=float)
        self.success = success
        self.message = message
        self.starts = []

    def minimize(self, objective, x0, *, tol, restarts, options):
        self.starts.append(np.array(x0, dtype=float))
        return BackendResult(
            x=self.x.copy(),
            fun=float(objective(self.x)),
            success=self.success,
            message=self.message,
        )


@pytest.mark.filterwarnings(IGNORE_NONCONVERGENCE)
def test_four_point_dataset_gives_positive_slope_and_central_bias():
    ds = Dataset.from_observations([(-1.0, 0), (-0.5, 0), (0.5, 1), (1.0, 1)])
    m = Fitter().fit(ds, rng=np.random.default_rng(0))
    assert m.b1 > 0.0
    assert -0.5 <= m.bias <= 0.5


def test_recovers_generating_parameters():
    b_true = (-0.5, 3.0)
    ds = _simulated(b_true)
    m = Fitter().fit(ds, rng=np.random.default_rng(2))

    assert m.converged
    assert abs(m.b0 - b_true[0]) < 0.5
    assert abs(m.b1 - b_true[1]) < 1.0
    assert abs(m.bias - (-b_true[0] / b_true[1])) < 0.15
    assert m.nll == pytest.approx(negative_log_likelihood(m.b, ds))
    # The optimum beats the generating parameters on its own data.
    assert m.nll <= negative_log_likelihood(b_true, ds) + 1e-6


def test_fit_is_independent_of_random_start():
    ds = _simulated((0.4, 1.5), seed=3)
    m1 = Fitter().fit(ds, p0=(0.1, 0.9))
    m2 = Fitter().fit(ds, p0=(0.9, 0.1))
    assert m1.b0 == pytest.approx(m2.b0, abs=1e-3)
    assert m1.b1 == pytest.approx(m2.b1, abs=1e-3)


@pytest.mark.filterwarnings(IGNORE_NONCONVERGENCE)
def test_separable_data_drives_slope_up_and_improves_objective():
    x = np.concatenate([np.linspace(-1.0, -0.05, 10), np.linspace(0.05, 1.0, 10)])
    r = (x > 0).astype(int)
    ds = Dataset.from_arrays(x=x, r=r)
    p0 = (0.5, 0.5)

    m = Fitter().fit(ds, p0=p0)

    assert m.b1 > 5.0
    assert m.nll < negative_log_likelihood(p0, ds)


def test_identical_start_gives_bit_identical_result():
    ds = _simulated((0.2, 1.0), seed=4)
    m1 = Fitter().fit(ds, p0=(0.3, 0.6))
    m2 = Fitter().fit(ds, p0=(0.3, 0.6))
    assert m1.as_row() == m2.as_row()
    assert m1.nll == m2.nll


def test_seeded_generator_makes_fit_reproducible():
    ds = _simulated((0.2, 1.0), seed=5)
    m1 = Fitter().fit(ds, rng=np.random.default_rng(11))
    m2 = Fitter().fit(ds, rng=np.random.default_rng(11))
    assert m1 == m2


def test_starting_guess_is_unit_uniform():
    g = Fitter().starting_guess(np.random.default_rng(0))
    assert g.shape == (2,)
    assert np.all((g >= 0.0) & (g < 1.0))


def test_p0_is_not_mutated():
    ds = _simulated((0.2, 1.0), seed=6)
    p0 = np.array([0.3, 0.6])
    Fitter().fit(ds, p0=p0)
    assert np.array_equal(p0, [0.3, 0.6])


def test_nonconvergence_warns_and_flags_provisional():
    ds = _simulated((0.2, 1.0), seed=7)
    with pytest.warns(OptimizerNonconvergence):
        m = Fitter(FitConfig(maxiter=1)).fit(ds, p0=(0.0, 0.0))
    assert not m.converged
    assert m.provisional


def test_nonconvergence_is_reported_once(caplog):
    ds = _simulated((0.2, 1.0), seed=7)
    backend = _FixedBackend([0.1, 1.0], success=False, message="Maximum number of iterations")
    with caplog.at_level("INFO", logger="psychometric_fit"):
        with pytest.warns(OptimizerNonconvergence) as record:
            Fitter(backend=backend).fit(ds, p0=(0.0, 0.0))
    assert len([w for w in record if issubclass(w.category, OptimizerNonconvergence)]) == 1
    assert not [r for r in caplog.records if r.levelname == "WARNING"]


def test_nonconvergence_raises_in_strict_mode():
    ds = _simulated((0.2, 1.0), seed=7)
    with pytest.raises(OptimizerNonconvergence) as info:
        Fitter(FitConfig(maxiter=1, strict=True)).fit(ds, p0=(0.0, 0.0))
    assert info.value.stage == "fit"


def test_timeout_marks_fit_provisional():
    ds = _simulated((0.2, 1.0), seed=8)
    with pytest.warns(OptimizerNonconvergence):
        m = Fitter(FitConfig(timeout=1e-9)).fit(ds, p0=(0.0, 0.0))
    assert not m.converged
    assert "timeout" in m.message


def test_degenerate_solution_raises():
    ds = _simulated((0.2, 1.0), seed=9)
    fitter = Fitter(backend=_FixedBackend([0.3, 0.0]))
    with pytest.raises(DegenerateFitError):
        fitter.fit(ds, p0=(0.1, 0.1))

    m = fitter.fit(ds, p0=(0.1, 0.1), allow_degenerate=True)
    assert m.degenerate


def test_fitter_hands_start_to_backend():
    ds = _simulated((0.2, 1.0), seed=10)
    backend = _FixedBackend([0.1, 1.0])
    Fitter(backend=backend).fit(ds, p0=(0.25, 0.75))
    assert np.array_equal(backend.starts[0], [0.25, 0.75])


def test_rejects_bad_p0():
    ds = _simulated((0.2, 1.0), seed=10)
    with pytest.raises(ValueError):
        Fitter().fit(ds, p0=(1.0,))


def test_fit_psychometric_convenience():
    rng = np.random.default_rng(12)
    x = np.linspace(-3.0, 3.0, 200)
    r = (rng.random(x.size) < 1.0 / (1.0 + np.exp(-2.0 * x))).astype(int)
    m = fit_psychometric(x, r, rng=rng)
    assert m.b1 > 0.0
    assert abs(m.bias) < 0.5
