"""
# Probability Distributions and Sampling

This module provides the sampling interface shared by the population generator
and the arrival process, along with factory functions for the SciPy
distributions that can be named in configuration files.

Every model parameter is either a fixed real number or a frozen SciPy
distribution. `sample_vals` hides the difference: constants are broadcast,
distributions are drawn from.

## Functions

- `is_distribution`: Check whether a parameter value can be sampled from
- `sample_vals`: Draw `n` values from a constant or a distribution
- `get_scipy_normal`, `get_scipy_truncated_normal`, `get_scipy_uniform`,
  `get_scipy_lognormal`: Continuous distributions
- `get_scipy_bernoulli`, `get_scipy_binomial`, `get_scipy_poisson`:
  Discrete distributions

## Constants

- `DISTRIBUTIONS`: Mapping of configuration names to factory functions

## Example Usage

```python
import numpy as np
from cruising_tools.utils.distributions import (
    sample_vals, get_scipy_normal, get_scipy_bernoulli
)

rng = np.random.default_rng(42)

# Parking durations in hours
durations = sample_vals(get_scipy_normal(loc=1.0, scale=0.5), 10, rng)

# Arrival indicators for a 12 hour horizon
arrivals = sample_vals(get_scipy_bernoulli(p=0.2), 720, rng)

# Constants are broadcast
prices = sample_vals(1.0, 10, rng)
```
"""

from scipy.stats import (
    truncnorm,
    norm,
    uniform,
    lognorm,
    bernoulli,
    binom,
    poisson
)
import numpy as np


def is_distribution(x) -> bool:
    """Check whether `x` is a distribution, i.e. exposes an `rvs` method."""
    return callable(getattr(x, "rvs", None))


def sample_vals(x, n: int, rng: np.random.Generator) -> np.ndarray:
    """
    Draw `n` samples from a fixed value or a distribution.

    Args:
        x (float | rv_frozen): A real number or a frozen SciPy distribution
            (anything with an `rvs(size=..., random_state=...)` method).
        n (int): Number of samples.
        rng (np.random.Generator): Random source. Only consumed when `x`
            is a distribution.

    Returns:
        np.ndarray: Float array of length `n`. A fixed value yields `n`
            identical copies; a distribution yields `n` independent draws.

    Example:
        ```python
        rng = np.random.default_rng(0)
        sample_vals(8.0, 3, rng)                       # array([8., 8., 8.])
        sample_vals(get_scipy_binomial(3, 0.8), 3, rng)  # e.g. array([3., 2., 3.])
        ```
    """
    if is_distribution(x):
        draws = x.rvs(size=n, random_state=rng)
        return np.asarray(draws, dtype=float).reshape(n)
    return np.full(n, float(x))


def get_scipy_truncated_normal(loc=0.0, scale=1.0, a=1e-12, b=1e12):
    """
    Create a SciPy truncated normal distribution.

    Args:
        loc (float, optional): Mean of the underlying normal. Defaults to 0.0.
        scale (float, optional): Standard deviation. Defaults to 1.0.
        a (float, optional): Lower truncation bound. Defaults to 1e-12.
        b (float, optional): Upper truncation bound. Defaults to 1e12.

    Returns:
        scipy.stats.truncnorm: Configured truncated normal distribution.

    Example:
        ```python
        # Parking duration in hours, never negative
        dist = get_scipy_truncated_normal(loc=1.0, scale=0.5, a=0.0, b=8.0)
        samples = dist.rvs(size=1000)
        ```
    """
    a_scaled = (a - loc) / scale
    b_scaled = (b - loc) / scale
    return truncnorm(a=a_scaled, b=b_scaled, loc=loc, scale=scale)


def get_scipy_normal(loc=0.0, scale=1.0):
    """
    Create a SciPy normal distribution.

    Args:
        loc (float, optional): Mean of the distribution. Defaults to 0.0.
        scale (float, optional): Standard deviation. Defaults to 1.0.

    Returns:
        scipy.stats.norm: Configured normal distribution.
    """
    return norm(loc=loc, scale=scale)


def get_scipy_uniform(a=0.0, b=1.0):
    """
    Create a SciPy uniform distribution over [a, b].

    Args:
        a (float, optional): Lower bound of the interval. Defaults to 0.0.
        b (float, optional): Upper bound of the interval. Defaults to 1.0.

    Returns:
        scipy.stats.uniform: Configured uniform distribution.

    Note:
        SciPy's uniform distribution is parameterized as uniform(loc, scale)
        where scale = b - a, so we transform the [a, b] interface accordingly.
    """
    return uniform(loc=a, scale=b - a)


def get_scipy_lognormal(mu=0.0, sigma=1.0):
    """
    Create a SciPy lognormal distribution from the mean and standard
    deviation of the underlying normal.
    """
    return lognorm(s=sigma, scale=np.exp(mu))


def get_scipy_bernoulli(p=0.5):
    """
    Create a SciPy Bernoulli distribution.

    This is the usual arrival process: one draw per minute, where 1 means a
    vehicle arrives looking for parking.

    Args:
        p (float, optional): Probability of a 1. Defaults to 0.5.

    Returns:
        scipy.stats.bernoulli: Configured Bernoulli distribution.
    """
    return bernoulli(p)


def get_scipy_binomial(n=1, p=0.5):
    """Create a SciPy binomial distribution, e.g. for vehicle occupancy."""
    return binom(n, p)


def get_scipy_poisson(mu=1.0):
    """Create a SciPy Poisson distribution."""
    return poisson(mu)


DISTRIBUTIONS = {
    "normal": get_scipy_normal,
    "truncnorm": get_scipy_truncated_normal,
    "uniform": get_scipy_uniform,
    "lognormal": get_scipy_lognormal,
    "bernoulli": get_scipy_bernoulli,
    "binomial": get_scipy_binomial,
    "poisson": get_scipy_poisson,
}
"""Mapping of distribution names used in configuration files to factories."""
