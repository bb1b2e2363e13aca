import pytest

from psychometric_fit import BootstrapConfig, FitConfig, OutputConfig


def test_fit_config_defaults():
    cfg = FitConfig()
    assert cfg.tol == 1e-8
    assert cfg.eps == 1e-10
    assert cfg.restarts == 1
    assert cfg.backend_options() == {"xtol": 1e-8}


def test_fit_config_forwards_limits():
    opts = FitConfig(maxiter=50, maxfev=80, timeout=2.5).backend_options()
    assert opts == {"xtol": 1e-8, "maxiter": 50, "maxfev": 80, "timeout": 2.5}


@pytest.mark.parametrize(
    "kwargs",
    [
        {"tol": 0.0},
        {"xtol": -1.0},
        {"restarts": -1},
        {"maxiter": 0},
        {"maxfev": 0},
        {"timeout": 0.0},
        {"eps": 0.0},
        {"eps": 0.5},
        {"degenerate_tol": -1.0},
    ],
)
def test_fit_config_validation(kwargs):
    with pytest.raises(ValueError):
        FitConfig(**kwargs)


@pytest.mark.parametrize("kwargs", [{"workers": 0}, {"interval_level": 0.0}, {"progress_every": -1}])
def test_bootstrap_config_validation(kwargs):
    with pytest.raises(ValueError):
        BootstrapConfig(**kwargs)


def test_output_config_validation():
    assert OutputConfig().npts == 50
    with pytest.raises(ValueError):
        OutputConfig(npts=1)


def test_unknown_backend_rejected():
    from psychometric_fit import Fitter

    with pytest.raises(ValueError):
        Fitter(FitConfig(backend="nope"))
