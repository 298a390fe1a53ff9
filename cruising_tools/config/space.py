"""
# Parameter Space Configuration

This module turns configuration data into model parameter values. Each
parameter is either a plain number (a fixed value shared by every agent) or a
`[distribution_name, [args...]]` pair that is instantiated as a frozen SciPy
distribution through a name mapping.

## Classes

- `SampleSpace`: Container for a distribution factory and its parameters
- `SpaceConfig`: Configuration for all model parameters

## Example Usage

```python
from cruising_tools.config.space import SpaceConfig
from cruising_tools.utils.distributions import DISTRIBUTIONS

space_config = SpaceConfig.from_dict(DISTRIBUTIONS, {
    'p': 1.0,
    'm': 13.25,
    't': ['normal', [1.5, 0.5]],
    'n': ['binomial', [2, 0.5]],
    'ar': ['bernoulli', [0.2]],
    'cpk': 8
})

# Fixed values stay numbers, distributions are frozen SciPy objects
values = space_config.get_search_space()
```
"""

from typing import Callable

from dataclasses import dataclass


@dataclass
class SampleSpace:
    """
    Container for a probability distribution and its parameters.

    This class encapsulates a distribution factory along with its
    initialization parameters, and remembers the configuration name so the
    space can be written back out.

    Attributes:
        distribution (Callable): Factory returning a frozen distribution.
        parameters (tuple[float]): Positional arguments for the factory.
        name (str): Configuration name of the distribution (e.g. 'normal').

    Example:
        ```python
        from cruising_tools.utils.distributions import get_scipy_normal

        space = SampleSpace(
            distribution=get_scipy_normal,
            parameters=(1.0, 0.5),
            name='normal'
        )

        dist_factory, params = space.unpack()
        distribution = dist_factory(*params)  # norm(loc=1.0, scale=0.5)
        ```
    """
    distribution: Callable
    parameters: tuple[float]
    name: str = ""

    def unpack(self):
        """
        Unpack the distribution and parameters.

        Returns:
            tuple: (distribution_factory, parameters_tuple) ready for instantiation.
        """
        return (self.distribution, self.parameters)

    def to_list(self) -> list:
        """Return the `[name, [args...]]` form used in configuration files."""
        return [self.name, list(self.parameters)]


class SpaceConfig(dict[str, SampleSpace | float]):
    """
    Configuration for model parameter values.

    Inherits from dict[str, SampleSpace | float] where:
    - Keys are parameter names (`p`, `m`, `t`, ...)
    - Values are SampleSpace instances or fixed numbers

    Example:
        ```python
        from cruising_tools.config.space import SpaceConfig
        from cruising_tools.utils.distributions import DISTRIBUTIONS

        config_data = {
            'v': ['normal', [40, 5]],
            'ar': ['bernoulli', [0.2]],
            'model_time': 900
        }

        space_config = SpaceConfig.from_dict(DISTRIBUTIONS, config_data)
        values = space_config.get_search_space()
        ```
    """

    @classmethod
    def from_dict(cls, mapping: dict[str, Callable], data: dict):
        """
        Create a SpaceConfig from a distribution mapping and configuration data.

        Args:
            mapping (dict[str, Callable]): Dictionary mapping distribution names
                to distribution factories. Keys are string names (e.g., 'uniform').
            data (dict): Configuration data where keys are parameter names and
                values are either numbers or lists of [distribution_name, parameters].

        Returns:
            SpaceConfig: Configured instance.

        Raises:
            ValueError: If a distribution type in data is not found in mapping.

        Note:
            - Distribution names are matched case-insensitively
            - Strings are passed through unchanged (e.g. the `n_pref` policy)
        """
        space_config = {}
        for k, v in data.items():
            if not isinstance(v, (list, tuple)):
                space_config[k] = v
                continue
            dist_type = v[0].lower()
            params = v[1]
            if dist_type not in mapping:
                raise ValueError(f"Unknown distribution type: {dist_type}")
            space_config[k] = SampleSpace(
                distribution=mapping[dist_type],
                parameters=tuple(params),
                name=dist_type
            )
        return cls(space_config)

    def get_search_space(self) -> dict:
        """
        Instantiate every configured distribution.

        Returns:
            dict: Parameter names mapped to fixed values or frozen
                distributions, suitable as keyword arguments for
                `init_params`.

        Note:
            Each call creates new distribution instances.
        """
        space = {}
        for param_name, samplespace in self.items():
            if isinstance(samplespace, SampleSpace):
                sampler, parameters = samplespace.unpack()
                space[param_name] = sampler(*parameters)
            else:
                space[param_name] = samplespace

        return space

    def to_dict(self) -> dict:
        """Return the configuration-file representation of the space."""
        return {
            k: v.to_list() if isinstance(v, SampleSpace) else v
            for k, v in self.items()
        }
