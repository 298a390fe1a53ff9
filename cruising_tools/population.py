"""
# Agent Population

Cost functions of the cruising-for-parking model and the generator of the
per-agent attribute table for one simulation run.

A driver compares the money saved by parking at the curb, `t(m - p)`, with the
cost of cruising for it, `c(f + nv)`. The break-even cruising time

    c* = t(m - p) / (f + nv)

is the longest a driver is willing to circle before parking off-street.

## Functions

- `curb_saving`: Savings from parking on the curb instead of off-street
- `cruising_cost`: Cost of cruising under a time-preference policy
- `max_cruise_time`: Break-even cruising time in minutes
- `init_dataframe`: Agent table for one run

## Example Usage

```python
import numpy as np
from cruising_tools.config.params import init_params
from cruising_tools.population import init_dataframe

params = init_params(p=1.0, m=13.25, model_time=900)
agents = init_dataframe(params, np.random.default_rng(42))
agents[['arrt', 'tmin', 'mct']].head()
```
"""

import logging

import numpy as np
import pandas as pd
from numpy.typing import ArrayLike

from cruising_tools.config.params import ParameterGroups
from cruising_tools.exceptions import ConfigurationError
from cruising_tools.utils.distributions import sample_vals


SAMPLED_COLUMNS = ["t", "c", "n", "v", "p", "m", "f", "ar", "cpk", "mint", "minc", "minv"]
"""Columns drawn directly from the preference and characteristic parameters."""

DERIVED_COLUMNS = ["psav", "ccost", "mct", "arrt", "tmin"]
"""Columns computed from the sampled attributes."""


def curb_saving(t, m, p):
    """
    Money saved by parking on the curb rather than off-street.

    Args:
        t: Parking duration (hours).
        m: Price of off-street parking ($/h).
        p: Price of curb parking ($/h).

    Returns:
        Savings in dollars, `t * (m - p)`.
    """
    return t * (m - p)


def cruising_cost(n, v, f, c, n_pref: str = "egalitarian"):
    """
    Cost of cruising for curb parking.

    Args:
        n: Number of people in the car.
        v: Value of time ($/h/person).
        f: Fuel cost of cruising ($/h).
        c: Time spent searching for parking (hours).
        n_pref (str, optional): Whose time is accounted for.
            - 'egalitarian' (default): everyone's, `c(f + nv)`
            - 'dictator': one person's, `c(f + v)`
            - 'diarchy': up to two people's, `c(f + min(n, 2)v)`

    Returns:
        Monetary and monetized time cost of cruising in dollars.

    Raises:
        ConfigurationError: If `n_pref` is not a known policy.
    """
    match n_pref.lower():
        case "egalitarian":
            return c * (f + n * v)
        case "dictator":
            return c * (f + v)
        case "diarchy":
            return c * (f + np.minimum(n, 2) * v)
    raise ConfigurationError(f"Unknown cruising cost policy: {n_pref}")


def max_cruise_time(savings: ArrayLike, cost: ArrayLike) -> np.ndarray:
    """
    Longest time, in whole minutes, a driver will cruise before parking off-street.

    A zero cruising cost yields `inf` (or NaN when there is nothing to save)
    and never raises.
    """
    with np.errstate(divide="ignore", invalid="ignore"):
        return np.round(60 * (np.asarray(savings, dtype=float) / np.asarray(cost, dtype=float)))


def init_dataframe(params: ParameterGroups, rng: np.random.Generator) -> pd.DataFrame:
    """
    Build the agent table for one simulation run.

    One row is created per minute with a positive arrival draw. Each
    preference and characteristic parameter is sampled independently per
    agent, the floors `mint`, `minc` and `minv` are applied to `t`, `c` and
    `v`, and the derived quantities are appended:

        psav  -- Potential savings from parking on the curb (dollars)
        ccost -- Cost of cruising for the search time `c` (dollars)
        mct   -- Maximum time the driver cruises before parking off-street (minutes)
        arrt  -- Arrival minute (1-based)
        tmin  -- Parking duration (minutes)

    Args:
        params (ParameterGroups): Validated model parameters.
        rng (np.random.Generator): Random source for all draws of this run.

    Returns:
        pd.DataFrame: Agent table ordered by arrival minute, with columns
            `SAMPLED_COLUMNS + DERIVED_COLUMNS`.

    Note:
        At most one arrival per minute is supported. Draws above 1 are
        counted as a single arrival and logged as a warning.
    """
    _, cparams, mparams = params

    # Get an array of when people arrive to park
    arrivals = sample_vals(cparams.ar, mparams.model_time, rng)
    if np.any(arrivals > 1):
        logging.warning(
            f"{int(np.sum(arrivals > 1))} minutes drew more than one arrival; "
            "only one arrival per minute is simulated."
        )
    arrt = np.flatnonzero(arrivals > 0) + 1
    num_arrivals = len(arrt)

    # Sample every parameter once per agent
    values = params.to_dict()
    df = pd.DataFrame({
        name: sample_vals(values[name], num_arrivals, rng)
        for name in SAMPLED_COLUMNS
    })

    # Truncate values at the minimum values
    df["t"] = np.maximum(df["t"], df["mint"])
    df["c"] = np.maximum(df["c"], df["minc"])
    df["v"] = np.maximum(df["v"], df["minv"])

    # Calculate costs, cruising time, and arrival
    df["psav"] = curb_saving(df["t"], df["m"], df["p"])
    df["ccost"] = cruising_cost(df["n"], df["v"], df["f"], df["c"], mparams.n_pref)
    df["mct"] = max_cruise_time(df["psav"], df["ccost"])
    df["arrt"] = arrt.astype(np.int64)
    df["tmin"] = df["t"] * 60

    logging.debug(f"Generated {num_arrivals} agents over {mparams.model_time} minutes.")

    return df
