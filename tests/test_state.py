import numpy as np
from cruising_tools.config.params import init_params
from cruising_tools.state import ParkState, FIELDS, init_parking, as_matrix, as_frame


def test_field_order():
    assert FIELDS == [
        "curb_current",
        "offstreet_current",
        "cruising_current",
        "curb_total",
        "offstreet_total",
        "cruising_total_time",
        "curb_revenue",
        "offstreet_revenue",
    ]


def test_copy_is_independent():
    state = ParkState(curb_current=3)
    snapshot = state.copy()
    state.curb_current += 1
    assert snapshot.curb_current == 3
    assert snapshot == ParkState(curb_current=3)


def test_init_parking():
    assert init_parking(init_params(init_occup=0.5), 8) == ParkState(curb_current=4)
    assert init_parking(init_params(init_occup=0.0), 8) == ParkState()
    # Rounds half to even
    assert init_parking(init_params(init_occup=0.5), 5).curb_current == 2


def test_as_matrix():
    states = [ParkState(curb_current=1), ParkState(curb_current=2, curb_revenue=1.5)]
    mat = as_matrix(states)
    assert mat.shape == (2, 8)
    assert mat[1, FIELDS.index("curb_revenue")] == 1.5
    assert as_matrix([]).shape == (0, 8)


def test_as_frame():
    df = as_frame([ParkState(), ParkState(cruising_current=2)])
    assert list(df.columns) == FIELDS
    assert df.index.tolist() == [1, 2]
    assert df.loc[2, "cruising_current"] == 2
    assert np.all(df.dtypes == float)
