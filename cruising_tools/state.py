"""
# Parking State

The aggregate record the simulation engine evolves minute by minute, and the
views used to hand a run's snapshots to downstream consumers.

The eight fields always appear in this order (see `FIELDS`):

    curb_current        -- Cars currently parked at the curb
    offstreet_current   -- Cars currently parked off-street
    cruising_current    -- Cars currently cruising for parking
    curb_total          -- Cars that have parked at the curb since the start
    offstreet_total     -- Cars that have parked off-street since the start
    cruising_total_time -- Time spent cruising by all vehicles (hours)
    curb_revenue        -- Revenue of the curb parking owner ($)
    offstreet_revenue   -- Revenue of the off-street parking owner ($)

## Example Usage

```python
from cruising_tools.state import FIELDS, ParkState, as_matrix, as_frame

state = ParkState(curb_current=4)
states = [state.copy()]
as_matrix(states).shape  # (1, 8)
as_frame(states).columns.tolist() == FIELDS  # True
```
"""

from dataclasses import dataclass, fields

import numpy as np
import pandas as pd

from cruising_tools.config.params import ParameterGroups


@dataclass
class ParkState:
    """Mutable struct for storing results from a parking simulation."""
    curb_current: int = 0
    offstreet_current: int = 0
    cruising_current: int = 0
    curb_total: int = 0
    offstreet_total: int = 0
    cruising_total_time: float = 0.0
    curb_revenue: float = 0.0
    offstreet_revenue: float = 0.0

    def copy(self) -> "ParkState":
        """Independent copy, used for the stored snapshots."""
        return ParkState(*self.values())

    def values(self) -> list:
        """Field values in `FIELDS` order."""
        return [getattr(self, name) for name in FIELDS]


FIELDS = [f.name for f in fields(ParkState)]
"""Field order shared by the matrix, DataFrame and Monte Carlo tensor views."""


def init_parking(params: ParameterGroups, capacity: int) -> ParkState:
    """
    Initial state of a run: a share `init_occup` of the `capacity` curb
    spaces is occupied, everything else is zero.
    """
    occupied_spaces = int(round(params.model.init_occup * capacity))
    return ParkState(curb_current=occupied_spaces)


def as_matrix(states: list[ParkState]) -> np.ndarray:
    """
    Stack simulation output into a `(len(states), 8)` float matrix.

    Args:
        states (list[ParkState]): Simulation output, one state per minute.

    Returns:
        np.ndarray: One row per minute, columns in `FIELDS` order.
    """
    if not states:
        return np.zeros((0, len(FIELDS)))
    return np.array([state.values() for state in states], dtype=float)


def as_frame(states: list[ParkState]) -> pd.DataFrame:
    """
    DataFrame view of simulation output with `FIELDS` columns and the
    1-based minute as index.
    """
    df = pd.DataFrame(as_matrix(states), columns=FIELDS)
    df.index = pd.RangeIndex(1, len(df) + 1, name="minute")
    return df
