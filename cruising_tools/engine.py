"""
# Simulation Engine

Minute-by-minute simulation of curb-side and off-street parking.

Agents from the agent table arrive at their `arrt` minute. If the curb is
cheaper (or equally priced) and a space is free they park at the curb; if
off-street parking is cheaper they park off-street; otherwise they cruise for
up to `mct` minutes. Whenever a curb space opens up, every cruiser (and the
agent arriving that minute) is equally likely to take it. Cruisers who run out
of patience park off-street.

Occupancy is tracked with three slot trackers (curb, off-street, cruising).
Slot `i` holds the remaining minutes of whoever entered that state at minute
`i`; only counts are kept, not the identity of physical spaces.

Each minute runs, in order: decay, departures, cruiser backfill, new arrival,
tired cruisers, slot normalization, cruising time, snapshot.

## Example Usage

```python
import numpy as np
from cruising_tools.config.params import init_params
from cruising_tools.population import init_dataframe
from cruising_tools.engine import run_simulation
from cruising_tools.state import as_frame

params = init_params(p=1.0, m=13.25, model_time=900)
rng = np.random.default_rng(42)

agents = init_dataframe(params, rng)
states = run_simulation(agents, params, rng)
as_frame(states).tail()
```
"""

import logging
from typing import Callable

import numpy as np
import pandas as pd

from cruising_tools.config.params import ParameterGroups
from cruising_tools.exceptions import EngineInvariantError
from cruising_tools.state import ParkState, init_parking
from cruising_tools.utils.distributions import is_distribution


class SlotTracker:
    """
    Remaining durations indexed by the minute a vehicle entered the slot.

    Empty slots are NaN, so decrementing the whole array only changes
    occupied slots.

    Attributes:
        slots (np.ndarray): Remaining minutes per slot, index 0 unused.
    """

    def __init__(self, model_time: int):
        self.slots = np.full(model_time + 1, np.nan)

    def decay(self):
        """Remove one minute from every occupied slot."""
        self.slots -= 1

    def occupied(self, condition: Callable[[np.ndarray], np.ndarray] = None) -> np.ndarray:
        """Minute indices of occupied slots, optionally filtered by `condition`."""
        mask = ~np.isnan(self.slots)
        if condition is not None:
            with np.errstate(invalid="ignore"):
                mask &= condition(self.slots)
        return np.flatnonzero(mask)

    def expired(self) -> int:
        """Number of occupied slots with no time left."""
        return len(self.occupied(lambda x: x <= 0))

    def add(self, minute: int, duration: float):
        """Occupy slot `minute`, adding to the duration already stored there."""
        if np.isnan(self.slots[minute]):
            self.slots[minute] = duration
        else:
            self.slots[minute] += duration

    def clear(self, minutes):
        self.slots[minutes] = np.nan

    def normalize(self):
        """Empty every slot that is not strictly positive."""
        self.slots[~(self.slots > 0)] = np.nan


def stay_revenue(duration, price, price_interval: float = 60):
    """
    Revenue for one stay; partial intervals are billed as full intervals.

    Example:
        ```python
        stay_revenue(90, 2.0)  # ceil(90 / 60) * 2.0 = 4.0
        ```
    """
    return np.ceil(np.asarray(duration) / price_interval) * price


def calc_revenue(
    agents: pd.DataFrame,
    rows,
    price_col: str,
    duration_col: str = "tmin",
    price_interval: float = 60
) -> float:
    """
    Revenue paid by one or more agents.

    Args:
        agents (pd.DataFrame): Agent table.
        rows (int | list[int]): Positional row index or indices of the paying agents.
        price_col (str): Column holding the hourly price ('p' for the curb,
            'm' for off-street).
        duration_col (str, optional): Column holding the parking duration in
            minutes. Defaults to 'tmin'.
        price_interval (float, optional): Billing interval in minutes.
            Defaults to 60.

    Returns:
        float: Sum of `ceil(duration / price_interval) * price` over the agents.
    """
    x = agents.iloc[np.atleast_1d(rows)]
    revenue = stay_revenue(x[duration_col].to_numpy(), x[price_col].to_numpy(), price_interval)
    return float(np.sum(revenue))


def _check_invariants(state: ParkState, minute: int):
    for name in ("curb_current", "offstreet_current", "cruising_current"):
        if getattr(state, name) < 0:
            raise EngineInvariantError(f"{name} is negative at minute {minute}: {state}")


def run_simulation(
    agents: pd.DataFrame,
    params: ParameterGroups,
    rng: np.random.Generator
) -> list[ParkState]:
    """
    Run the parking simulation over `model_time` minutes.

    Args:
        agents (pd.DataFrame): Agent table from `init_dataframe`, ordered by
            arrival minute. It is only read.
        params (ParameterGroups): The parameters the table was generated from.
        rng (np.random.Generator): Random source for the allocation of freed
            curb spaces.

    Returns:
        list[ParkState]: One independent snapshot per minute.

    Raises:
        EngineInvariantError: If arrival minutes are not strictly
            increasing, a count turns negative or an agent is skipped. Neither can happen with a valid agent table.

    Note:
        - A freed curb space takes at most one vehicle per minute. With `k`
          cruisers waiting, a cruiser gets it with probability `k / (k + 1)`
          if an agent arrives that minute, otherwise with certainty.
        - When `p == m` the arrival parks at the curb if a space is free.
          Otherwise its break-even cruising time is 0 and it parks off-street
          in the same minute through the tired-cruiser rule.
        - Agents with a negative `mct` neither park nor cruise.
        - Tired cruisers of one minute share a single off-street slot, so
          they count as one departure when that slot expires.
        - Vehicles occupying the curb at the start never leave.
    """
    mparams = params.model
    model_time = mparams.model_time
    price_interval = mparams.price_interval
    tired_margin = mparams.tired_margin

    # Read-only columns of the agent table
    n_agents = len(agents)
    arrt = agents["arrt"].to_numpy()
    tmin = agents["tmin"].to_numpy()
    p = agents["p"].to_numpy()
    m = agents["m"].to_numpy()
    mct = agents["mct"].to_numpy()
    cpk = agents["cpk"].to_numpy()
    agent_at = {int(minute): row for row, minute in enumerate(arrt)}
    if np.any(np.diff(arrt) <= 0):
        raise EngineInvariantError("Agent arrival minutes must be strictly increasing")

    fixed_cpk = params.characteristic.cpk

    def capacity(cid: int) -> int:
        if not is_distribution(fixed_cpk):
            return fixed_cpk
        return int(cpk[cid]) if n_agents else 0

    # Creating an ID for each car to keep track of the agent table
    cid = 0

    # Initialise temporary containers
    state = init_parking(params, capacity(cid))
    states = []
    parking_curb = SlotTracker(model_time)
    parking_offs = SlotTracker(model_time)
    cruising = SlotTracker(model_time)

    # Iterate through every minute
    for i in range(1, model_time + 1):
        if n_agents and cid < n_agents - 1 and arrt[cid] < i:
            raise EngineInvariantError(f"Agent {cid} arriving at minute {arrt[cid]} was skipped")

        # Identify if a car will arrive this iteration
        arrival = bool(n_agents) and arrt[cid] == i

        # Move existing drivers
        parking_curb.decay()
        parking_offs.decay()
        cruising.decay()

        # Leave parking
        if state.curb_current > 0:
            state.curb_current -= parking_curb.expired()
        if state.offstreet_current > 0:
            state.offstreet_current -= parking_offs.expired()

        # Allow cruisers to park if available
        available_parking = state.curb_current < capacity(cid)
        cruisers = cruising.occupied(lambda x: x >= 0)
        cruiser_parked = False
        if available_parking and len(cruisers):
            park_probability = len(cruisers) / (len(cruisers) + int(arrival))
            cruiser_parked = bool(rng.random() < park_probability)
            if cruiser_parked:
                time_id = int(rng.choice(cruisers))
                cruiser_id = agent_at[time_id]

                # Move from cruising to the curb
                cruising.clear(time_id)
                state.cruising_current -= 1
                parking_curb.add(i, tmin[cruiser_id])
                state.curb_revenue += calc_revenue(agents, cruiser_id, "p", price_interval=price_interval)
                state.curb_current += 1
                state.curb_total += 1

        # Allocate newly arrived drivers
        if arrival:
            # At most one vehicle takes a freed curb space per minute
            park_curb = p[cid] <= m[cid] and not cruiser_parked and available_parking
            park_offs = m[cid] < p[cid]

            if park_curb:
                parking_curb.add(i, tmin[cid])
                state.curb_revenue += calc_revenue(agents, cid, "p", price_interval=price_interval)
                state.curb_current += 1
                state.curb_total += 1
            elif park_offs:
                parking_offs.add(i, tmin[cid])
                state.offstreet_revenue += calc_revenue(agents, cid, "m", price_interval=price_interval)
                state.offstreet_current += 1
                state.offstreet_total += 1
            elif mct[cid] >= 0:
                cruising.add(i, mct[cid])
                state.cruising_current += 1

            cid = min(cid + 1, n_agents - 1)

        # Move people who are tired of cruising to off-street parking
        tired = cruising.occupied(lambda x: x <= tired_margin)
        if len(tired):
            cruiser_ids = [agent_at[int(time_id)] for time_id in tired]

            # Tired cruisers share one off-street slot
            parking_offs.add(i, float(np.sum(tmin[cruiser_ids])))
            cruising.clear(tired)
            state.offstreet_revenue += calc_revenue(agents, cruiser_ids, "m", price_interval=price_interval)
            state.offstreet_current += len(tired)
            state.offstreet_total += len(tired)
            state.cruising_current -= len(tired)

        # Update values
        parking_curb.normalize()
        parking_offs.normalize()
        cruising.normalize()
        _check_invariants(state, i)

        # Update total cruising time & store state
        state.cruising_total_time += state.cruising_current / 60
        states.append(state.copy())

    logging.debug(
        f"Simulated {model_time} minutes for {n_agents} agents: "
        f"{state.curb_total} curb, {state.offstreet_total} off-street."
    )

    return states
