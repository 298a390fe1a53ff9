import numpy as np
import pandas as pd
import pytest
from cruising_tools.config.params import init_params
from cruising_tools.engine import SlotTracker, stay_revenue, calc_revenue, run_simulation
from cruising_tools.exceptions import EngineInvariantError
from cruising_tools.population import init_dataframe
from cruising_tools.state import ParkState, FIELDS, as_matrix
from cruising_tools.utils.distributions import get_scipy_bernoulli, get_scipy_uniform


def simulate(params, seed=0):
    rng = np.random.default_rng(seed)
    agents = init_dataframe(params, rng)
    return agents, run_simulation(agents, params, rng)


def test_slot_tracker():
    slots = SlotTracker(5)
    slots.add(1, 2)
    slots.add(3, 1)
    slots.add(3, 4)
    assert slots.slots[3] == 5
    assert slots.occupied().tolist() == [1, 3]

    slots.decay()
    slots.decay()
    assert slots.expired() == 1
    slots.normalize()
    assert slots.occupied().tolist() == [3]

    slots.clear(3)
    assert len(slots.occupied()) == 0


def test_stay_revenue():
    assert stay_revenue(90, 2.0) == 4.0
    assert stay_revenue(60, 2.0) == 2.0
    assert stay_revenue(90, 2.0, price_interval=15) == 12.0


def test_calc_revenue():
    agents = pd.DataFrame({"tmin": [90.0, 30.0], "p": [2.0, 3.0]})
    assert calc_revenue(agents, 0, "p") == 4.0
    assert calc_revenue(agents, [0, 1], "p") == 7.0


def test_single_minute_no_arrivals():
    params = init_params(model_time=1, ar=0, cpk=8, init_occup=0.5)
    _, states = simulate(params)
    assert states == [ParkState(curb_current=4)]


def test_curb_fills_then_cruising():
    params = init_params(p=0, m=10, cpk=5, ar=1, t=1, c=0.5, f=1, n=1, v=10, model_time=20)
    agents, states = simulate(params)

    # Break-even cruising time of round(60 * 10 / 5.5) minutes
    assert np.all(agents["mct"] == 109)
    for i in range(5):
        assert states[i].curb_current == i + 1
        assert states[i].cruising_current == 0
    assert states[5].curb_current == 5
    assert states[5].cruising_current == 1
    assert states[5].cruising_total_time == pytest.approx(1 / 60)

    final = states[-1]
    assert final.curb_total == 5
    assert final.offstreet_total == 0
    assert final.cruising_current == 15
    assert final.curb_revenue == 0


def test_offstreet_when_cheaper():
    params = init_params(p=10, m=1, cpk=8, init_occup=0.5, ar=get_scipy_bernoulli(0.5), model_time=120)
    agents, states = simulate(params, seed=4)

    assert all(s.curb_current == 4 for s in states)
    assert all(s.cruising_current == 0 for s in states)
    assert states[-1].curb_total == 0
    assert states[-1].offstreet_total == len(agents)
    assert states[-1].offstreet_revenue == pytest.approx(
        calc_revenue(agents, list(range(len(agents))), "m")
    )


def test_equal_prices():
    params = init_params(p=5, m=5, cpk=1, ar=1, t=1, model_time=3)
    _, states = simulate(params)

    assert states[0].curb_total == 1
    # Curb is full and there is nothing to save by cruising
    assert states[1].offstreet_total == 1
    assert states[1].cruising_current == 0
    assert states[2].offstreet_total == 2


@pytest.mark.parametrize("margin, first_tired", [(5, 6), (0, 11)])
def test_tired_cruisers_park_offstreet(margin, first_tired):
    # Nobody can park at the curb and everyone cruises for 10 minutes
    params = init_params(p=0, m=10, cpk=0, ar=1, t=1, c=1, f=0, n=1, v=60,
                         model_time=20, tired_margin=margin)
    agents, states = simulate(params)

    assert np.all(agents["mct"] == 10)
    assert states[first_tired - 2].offstreet_total == 0
    assert states[first_tired - 1].offstreet_total == 1
    assert states[first_tired - 1].offstreet_revenue == 10.0
    assert states[-1].offstreet_total == 20 - first_tired + 1


def test_cruisers_take_freed_spaces():
    params = init_params(p=0, m=10, cpk=1, ar=1, t=0.5, c=0.1, f=0, n=1, v=1, model_time=100)
    _, states = simulate(params, seed=2)

    assert all(s.curb_current <= 1 for s in states)
    # The space frees up in minutes 31, 61 and 91
    assert states[29].curb_total == 1
    assert states[30].curb_total == 2
    assert states[-1].curb_total == 4
    assert states[-1].cruising_current == 96


@pytest.mark.parametrize("seed", [0, 1, 2])
def test_invariants(seed):
    params = init_params(cpk=6, init_occup=0.5, ar=get_scipy_bernoulli(0.3), model_time=600)
    agents, states = simulate(params, seed=seed)
    mat = as_matrix(states)

    assert len(states) == 600
    assert np.all(mat >= 0)
    assert np.all(mat[:, FIELDS.index("curb_current")] <= 6)
    for name in ("curb_total", "offstreet_total", "cruising_total_time", "curb_revenue", "offstreet_revenue"):
        assert np.all(np.diff(mat[:, FIELDS.index(name)]) >= 0)

    # Every arrival is parked or still cruising
    arrived = np.searchsorted(agents["arrt"].to_numpy(), np.arange(1, 601), side="right")
    accounted = (
        mat[:, FIELDS.index("curb_total")]
        + mat[:, FIELDS.index("offstreet_total")]
        + mat[:, FIELDS.index("cruising_current")]
    )
    assert np.array_equal(accounted, arrived)


def test_deterministic():
    params = init_params(model_time=300)
    _, a = simulate(params, seed=9)
    _, b = simulate(params, seed=9)
    assert np.array_equal(as_matrix(a), as_matrix(b))


def test_sampled_capacity():
    params = init_params(cpk=get_scipy_uniform(3, 3.5), init_occup=1.0, model_time=30)
    _, states = simulate(params)
    assert states[0].curb_current == 3


def test_skipped_agent_raises():
    params = init_params(ar=1, model_time=3)
    agents = init_dataframe(params, np.random.default_rng(0))
    agents["arrt"] = [2, 1, 3]
    with pytest.raises(EngineInvariantError):
        run_simulation(agents, params, np.random.default_rng(0))


def test_unordered_last_agent_raises():
    params = init_params(ar=1, model_time=3)
    agents = init_dataframe(params, np.random.default_rng(0))
    agents["arrt"] = [1, 3, 2]
    with pytest.raises(EngineInvariantError):
        run_simulation(agents, params, np.random.default_rng(0))
