import numpy as np
import pytest

from psychometric_fit import Dataset, InputError, Observation


def test_iteration_yields_observations_in_order():
    ds = Dataset.from_arrays(x=[-1.5, 0.0, 2.25], r=[0, 1, 1])
    obs = list(ds)
    assert obs == [
        Observation(position=-1.5, response=0),
        Observation(position=0.0, response=1),
        Observation(position=2.25, response=1),
    ]
    assert all(isinstance(o.response, int) for o in obs)
    assert len(ds) == 3


def test_from_observations_round_trips_pairs():
    pairs = [(0.5, 1), (-0.5, 0)]
    ds = Dataset.from_observations(pairs, label="pairs")
    assert [(o.position, o.response) for o in ds] == pairs
    assert ds.label == "pairs"


def test_columns_are_read_only():
    ds = Dataset.from_arrays(x=[0.0, 1.0], r=[0, 1])
    with pytest.raises(ValueError):
        ds.x[0] = 5.0
    with pytest.raises(ValueError):
        ds.r[0] = 1.0


def test_input_arrays_are_copied():
    x = np.array([0.0, 1.0])
    ds = Dataset.from_arrays(x=x, r=[0, 1])
    x[0] = 9.0
    assert ds.x[0] == 0.0


def test_with_responses_shares_positions():
    ds = Dataset.from_arrays(x=[0.0, 1.0, 2.0], r=[0, 0, 1])
    sim = ds.with_responses([1, 1, 0])
    assert sim.x is ds.x
    assert np.array_equal(sim.r, [1.0, 1.0, 0.0])
    assert np.array_equal(ds.r, [0.0, 0.0, 1.0])

    with pytest.raises(InputError):
        ds.with_responses([1, 0])


@pytest.mark.parametrize(
    "x, r",
    [
        ([], []),
        ([0.0, 1.0], [0]),
        ([0.0, np.nan], [0, 1]),
        ([0.0, 1.0], [0, 2]),
    ],
    ids=["empty", "length-mismatch", "non-finite-position", "bad-response"],
)
def test_invalid_data_is_rejected(x, r):
    with pytest.raises(InputError):
        Dataset.from_arrays(x=x, r=r)


def test_bad_response_message_names_row():
    with pytest.raises(InputError, match=r"first bad row: 1, value 0\.5"):
        Dataset.from_arrays(x=[0.0, 1.0], r=[1, 0.5])
