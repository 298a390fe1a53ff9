"""
# Model Parameters

This module defines the immutable parameter groups consumed by the population
generator and the simulation engine, and the `init_params` builder that fills
in defaults and validates every value before anything is simulated.

## Parameter Groups

- **Preference** (`PreferenceParams`): `t` parking duration (h), `c` time
  spent searching at the curb (h), `n` persons per vehicle, `v` value of time
  ($/h/person).
- **Characteristic** (`CharacteristicParams`): `p` curb price ($/h), `m`
  off-street price ($/h), `f` fuel cost of cruising ($/h), `ar` arrival
  indicator per minute, `cpk` curb spaces, `mint`/`minc`/`minv` floors applied
  to `t`, `c` and `v`.
- **Model** (`ModelParams`): `model_time` horizon (minutes), `init_occup`
  initial curb occupancy rate, `n_pref` cruising-cost policy,
  `price_interval` billing interval (minutes), `tired_margin` minutes of
  remaining patience at which a cruiser gives up.

Each of `t, c, n, v, p, m, f, ar, cpk, mint, minc, minv` is a `ParamType`:
either a fixed number or a frozen SciPy distribution.

## Example Usage

```python
from cruising_tools.config.params import init_params
from cruising_tools.utils.distributions import get_scipy_normal, get_scipy_bernoulli

params = init_params(
    p=1.0,
    m=13.25,
    t=get_scipy_normal(1.5, 0.5),
    ar=get_scipy_bernoulli(0.2),
    model_time=900
)

pparams, cparams, mparams = params
```
"""

from dataclasses import dataclass, fields
from numbers import Real, Integral
from typing import Any, Union, TYPE_CHECKING

from cruising_tools.exceptions import ConfigurationError
from cruising_tools.utils.distributions import (
    is_distribution,
    get_scipy_normal,
    get_scipy_binomial,
    get_scipy_bernoulli
)

if TYPE_CHECKING:
    from scipy.stats._distn_infrastructure import rv_frozen

ParamType = Union[Real, "rv_frozen"]
"""A fixed real number or a frozen SciPy distribution exposing `rvs`."""

N_PREF_POLICIES = ("egalitarian", "dictator", "diarchy")
"""Whose time is counted in the cruising cost: everyone, one person, up to two."""

TIRED_CRUISER_MARGIN = 5
"""Remaining cruising minutes at which a cruiser gives up and parks off-street."""


@dataclass(frozen=True)
class PreferenceParams:
    """Driver preferences: duration `t`, search time `c`, occupants `n`, value of time `v`."""
    t: ParamType
    c: ParamType
    n: ParamType
    v: ParamType


@dataclass(frozen=True)
class CharacteristicParams:
    """Prices, costs, arrivals, capacity and floors."""
    p: ParamType
    m: ParamType
    f: ParamType
    ar: ParamType
    cpk: ParamType
    mint: ParamType
    minc: ParamType
    minv: ParamType


@dataclass(frozen=True)
class ModelParams:
    """Horizon, initial occupancy and simulation settings."""
    model_time: int
    init_occup: float
    n_pref: str = "egalitarian"
    price_interval: float = 60
    tired_margin: float = TIRED_CRUISER_MARGIN


@dataclass(frozen=True)
class ParameterGroups:
    """
    The three parameter groups of one model configuration.

    Unpacks as `(preference, characteristic, model)`.

    Attributes:
        preference (PreferenceParams): Driver preference parameters.
        characteristic (CharacteristicParams): Market and street characteristics.
        model (ModelParams): Simulation settings.
    """
    preference: PreferenceParams
    characteristic: CharacteristicParams
    model: ModelParams

    def __iter__(self):
        return iter((self.preference, self.characteristic, self.model))

    def to_dict(self) -> dict[str, Any]:
        """Flatten the groups into one `name -> value` dictionary."""
        return {f.name: getattr(group, f.name) for group in self for f in fields(group)}

    def with_overrides(self, X: dict[str, Any] = None) -> "ParameterGroups":
        """
        Return a validated copy with some parameters replaced.

        Args:
            X (dict[str, Any], optional): Parameter names mapped to new values.

        Raises:
            ConfigurationError: If a name is unknown or a new value is invalid.
        """
        if not X:
            return self
        unknown = set(X) - set(parameter_names())
        if unknown:
            raise ConfigurationError(f"Unknown parameters: {sorted(unknown)}")
        return init_params(**dict(self.to_dict(), **X))


def _check(name: str, value, condition=None, message: str = "", integer: bool = False):
    # Distributions are accepted as-is, fixed values must satisfy `condition`.
    if is_distribution(value):
        return
    number_type = Integral if integer else Real
    if isinstance(value, bool) or not isinstance(value, number_type):
        kind = "an integer" if integer else "a number"
        raise ConfigurationError(f"{name} must be {kind} or a distribution, got {value!r}")
    if condition is not None and not condition(value):
        raise ConfigurationError(message)


def init_params(
    p: ParamType = 1.0,
    m: ParamType = 8.0,
    t: ParamType = None,
    c: ParamType = None,
    f: ParamType = 1.0,
    n: ParamType = None,
    v: ParamType = None,
    ar: ParamType = None,
    cpk: ParamType = 8,
    mint: ParamType = 0.1,
    minc: ParamType = 0.0,
    minv: ParamType = 0.0,
    model_time: int = 720,
    init_occup: float = 0.0,
    n_pref: str = "egalitarian",
    price_interval: float = 60,
    tired_margin: float = TIRED_CRUISER_MARGIN
) -> ParameterGroups:
    """
    Build and validate the parameter groups for a parking simulation.

    Every parameter is optional. Unset distributions default to
    `t ~ Normal(1, 0.5)`, `c ~ Normal(0.5, 0.08)`, `n ~ Binomial(3, 0.8)`,
    `v ~ Normal(40, 5)` and `ar ~ Bernoulli(0.2)`.

    Args:
        p: Price of parking on the curb ($/h), >= 0.
        m: Price of parking off-street ($/h), >= 0.
        t: Parking duration (h), >= 0.
        c: Time spent searching for parking at the curb (h), >= 0.
        f: Fuel cost when cruising ($/h).
        n: Number of people in a vehicle, >= 1.
        v: Value of time ($/h/person).
        ar: Arrival indicator per minute. A fixed value must be 0 or 1; use a
            Bernoulli distribution for a rate.
        cpk: Number of curb-side spaces, integer >= 0.
        mint: Minimum parking duration (h), > 0.
        minc: Minimum time spent cruising (h), >= 0.
        minv: Minimum value of time ($/h/person), >= 0.
        model_time (int): Simulation horizon in minutes, > 0.
        init_occup (float): Initial curb occupancy rate in [0, 1].
        n_pref (str): Cruising cost policy, one of 'egalitarian',
            'dictator' or 'diarchy'.
        price_interval (float): Billing interval in minutes, > 0.
        tired_margin (float): Remaining cruising minutes at which a cruiser
            parks off-street, >= 0.

    Returns:
        ParameterGroups: Immutable preference, characteristic and model groups.

    Raises:
        ConfigurationError: On the first parameter that violates its domain.

    Example:
        ```python
        pparams, cparams, mparams = init_params(p=2.0, cpk=12, init_occup=0.5)
        ```
    """
    t = get_scipy_normal(1, 0.5) if t is None else t
    c = get_scipy_normal(0.5, 0.08) if c is None else c
    n = get_scipy_binomial(3, 0.8) if n is None else n
    v = get_scipy_normal(40, 5) if v is None else v
    ar = get_scipy_bernoulli(0.2) if ar is None else ar

    # Checks
    _check("p", p, lambda x: x >= 0, "Price of parking on the curb (p) must be nonnegative")
    _check("m", m, lambda x: x >= 0, "Price of parking off-street (m) must be nonnegative")
    _check("t", t, lambda x: x >= 0, "Parking duration (t) must be nonnegative")
    _check("c", c, lambda x: x >= 0,
           "Time spent searching for curb-side parking (c) must be nonnegative")
    _check("f", f)
    _check("n", n, lambda x: x >= 1,
           "Number of people in a vehicle (n) must be greater than or equal to 1")
    _check("v", v)
    _check("ar", ar, lambda x: x in (0, 1),
           "A fixed arrival indicator (ar) must be 0 or 1, use a distribution for rates")
    _check("cpk", cpk, lambda x: x >= 0,
           "Number of curb-side spaces (cpk) must be nonnegative", integer=True)
    _check("mint", mint, lambda x: x > 0, "Minimum parking duration (mint) must be greater than 0")
    _check("minc", minc, lambda x: x >= 0, "Minimum time spent cruising (minc) must be nonnegative")
    _check("minv", minv, lambda x: x >= 0, "Minimum value of time (minv) must be nonnegative")

    if isinstance(model_time, bool) or not isinstance(model_time, Integral) or model_time <= 0:
        raise ConfigurationError("model_time must be an integer greater than 0")
    if not isinstance(init_occup, Real) or not 0 <= init_occup <= 1:
        raise ConfigurationError("init_occup must be between 0 and 1")
    if not isinstance(n_pref, str) or n_pref.lower() not in N_PREF_POLICIES:
        raise ConfigurationError(f"n_pref must be one of {N_PREF_POLICIES}, got {n_pref!r}")
    if not isinstance(price_interval, Real) or price_interval <= 0:
        raise ConfigurationError("price_interval must be greater than 0")
    if not isinstance(tired_margin, Real) or tired_margin < 0:
        raise ConfigurationError("tired_margin must be nonnegative")

    # Create parameter structs
    pparams = PreferenceParams(t=t, c=c, n=n, v=v)
    cparams = CharacteristicParams(p=p, m=m, f=f, ar=ar, cpk=cpk, mint=mint, minc=minc, minv=minv)
    mparams = ModelParams(
        model_time=int(model_time),
        init_occup=float(init_occup),
        n_pref=n_pref.lower(),
        price_interval=price_interval,
        tired_margin=tired_margin
    )

    return ParameterGroups(preference=pparams, characteristic=cparams, model=mparams)


def parameter_names() -> list[str]:
    """Names accepted by `init_params`, in group order."""
    return [
        f.name
        for group in (PreferenceParams, CharacteristicParams, ModelParams)
        for f in fields(group)
    ]
