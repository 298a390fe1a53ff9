"""Configuration classes for Monte Carlo simulation settings.

This module provides the configuration class for Monte Carlo parking
simulations: the model parameters (fixed values or named distributions),
the number of runs and workers, and the base seed. It supports serialization
to and from JSON format for easy persistence and loading of simulation
configurations.

A configuration file looks like:

    {
        "parameters": {
            "p": 1.0,
            "m": 13.25,
            "t": ["normal", [1.5, 0.5]],
            "n": ["binomial", [2, 0.5]],
            "ar": ["bernoulli", [0.2]],
            "cpk": 8,
            "model_time": 900
        },
        "num_worker": 4,
        "num_samples": 100,
        "seed": 42
    }

Parameters left out take the defaults of `init_params`.

Typical usage example:

    from cruising_tools.montecarlo import MonteCarloConfig

    config = MonteCarloConfig.from_json("mc_config.json")
    config.num_samples = 500
    config.to_json("updated_config.json")
"""

from ..config.space import SpaceConfig
from ..config.params import ParameterGroups, init_params, parameter_names
from cruising_tools.exceptions import ConfigurationError
from cruising_tools.utils.distributions import DISTRIBUTIONS

import json
from dataclasses import dataclass, field
from typing import Optional


@dataclass
class MonteCarloConfig:
    """Configuration class for Monte Carlo simulation settings.

    Attributes:
        parameters (SpaceConfig): Model parameters by name. Values are fixed
            numbers or SampleSpace distributions. Defaults to an empty space,
            i.e. the defaults of `init_params`.
        num_worker (int): Number of parallel workers to use during simulation
            execution. Defaults to 4.
        num_samples (int): Number of Monte Carlo runs. Defaults to 100.
        seed (int, optional): Base seed; run `k` uses the `k`-th child of
            `np.random.SeedSequence(seed)`. None draws fresh entropy.
            Defaults to 42.

    Example:
        ```python
        config = MonteCarloConfig(
            parameters=SpaceConfig({'p': 2.0, 'cpk': 12}),
            num_worker=8,
            num_samples=1024
        )
        config.to_json("mc_config.json")

        # Load from file
        loaded_config = MonteCarloConfig.from_json("mc_config.json")
        params = loaded_config.get_params()
        ```
    """

    parameters: SpaceConfig = field(default_factory=SpaceConfig)
    num_worker: int = 4
    num_samples: int = 100
    seed: Optional[int] = 42

    @classmethod
    def from_json(cls, infile: str):
        """Create a MonteCarloConfig instance from a JSON file.

        Distribution names in the parameter section are mapped to SciPy
        distribution factories through `DISTRIBUTIONS`.

        Args:
            infile (str): Path to the JSON file containing the configuration
                data.

        Returns:
            MonteCarloConfig: A new MonteCarloConfig instance initialized
                with data from the file.

        Raises:
            FileNotFoundError: If the specified file does not exist.
            json.JSONDecodeError: If the file contains invalid JSON.
            ValueError: If a distribution name is unknown.
            TypeError: If the loaded data doesn't match the expected structure.
        """
        with open(infile, "r") as f:
            data = json.load(f)

        return cls.from_dict(data)

    @classmethod
    def from_dict(cls, data: dict):
        """Create a MonteCarloConfig from an already parsed configuration."""
        data = dict(data)
        data['parameters'] = SpaceConfig.from_dict(DISTRIBUTIONS, data.get('parameters', {}))
        return cls(**data)

    def to_dict(self) -> dict:
        return {
            "parameters": self.parameters.to_dict(),
            "num_worker": self.num_worker,
            "num_samples": self.num_samples,
            "seed": self.seed,
        }

    def to_json(self, outfile: str):
        """Serialize the configuration to a JSON file.

        Args:
            outfile (str): Path to the output file where the JSON will be saved.

        Raises:
            FileExistsError: If the specified file already exists.

        Note:
            The file is opened in exclusive creation mode ("+x") to prevent
            accidental overwrites.
        """
        with open(outfile, "+x") as f:
            json.dump(self.to_dict(), f, indent=4)

    def get_params(self) -> ParameterGroups:
        """Build and validate the model parameters.

        Returns:
            ParameterGroups: Parameters for `init_params`, with defaults for
                anything not configured.

        Raises:
            ConfigurationError: If a parameter name is unknown or a value is
                outside its domain.
        """
        unknown = set(self.parameters) - set(parameter_names())
        if unknown:
            raise ConfigurationError(f"Unknown parameters: {sorted(unknown)}")
        return init_params(**self.parameters.get_search_space())
