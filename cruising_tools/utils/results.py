"""
# Results Management

This module provides data structures for storing and saving the outputs of
Monte Carlo parking simulations.

## Classes

- `SimulationResults`: The `[model_time, 8, n]` result tensor with named access
- `StatsResults`: Collection of statistical summaries from Monte Carlo simulations

## Example Usage

```python
from cruising_tools.montecarlo import Sim, MonteCarloConfig
from cruising_tools import ShoupModel

sim = Sim(ShoupModel(), MonteCarloConfig.from_json('mc_config.json'))
results = sim.run(n=50)

# Cruising hours at the end of every run
results.final('cruising_total_time')

# Per-minute statistics
stats = sim.analyze(results)
stats.save('/results/directory')
```
"""

import pandas as pd
import numpy as np
import os

from cruising_tools.state import FIELDS


class SimulationResults:
    """
    Result tensor of a Monte Carlo simulation.

    Axis 0 is the minute, axis 1 the `ParkState` field in `FIELDS` order,
    axis 2 the run.

    Attributes:
        data (np.ndarray): Tensor of shape `(model_time, 8, n)`.

    Example:
        ```python
        results = SimulationResults(mc_simulation(params, n=20))
        results.field('cruising_current').shape  # (model_time, 20)
        results.run(0).tail()                    # DataFrame of the first run
        ```
    """

    def __init__(self, data: np.ndarray):
        self.data = data

    @property
    def shape(self) -> tuple[int, int, int]:
        return self.data.shape

    def __len__(self) -> int:
        """Number of runs."""
        return self.data.shape[2]

    def field(self, name: str) -> np.ndarray:
        """All runs of one field, shape `(model_time, n)`."""
        return self.data[:, FIELDS.index(name), :]

    def final(self, name: str) -> np.ndarray:
        """Value of one field at the last minute of every run."""
        return self.field(name)[-1, :]

    def run(self, idx: int) -> pd.DataFrame:
        """One run as a DataFrame with `FIELDS` columns and a 1-based minute index."""
        df = pd.DataFrame(self.data[:, :, idx], columns=FIELDS)
        df.index = pd.RangeIndex(1, len(df) + 1, name="minute")
        return df

    def save(self, outfile: str):
        """
        Save the tensor in NumPy `.npy` format.

        Args:
            outfile (str): Path of the output file.
        """
        np.save(outfile, self.data)

    @classmethod
    def load(cls, infile: str):
        """Load a tensor written by `save`."""
        return cls(np.load(infile))


class StatsResults(dict[str, pd.DataFrame]):
    """
    Collection of statistical summary DataFrames from Monte Carlo simulations.

    Each key is a statistic ('mean', 'ci_low', ...) and each value a DataFrame
    with one row per minute and one column per `ParkState` field.

    Example:
        ```python
        stats = sim.analyze(results)

        # Save all statistics to CSV files
        stats.save('/results/monte_carlo/')

        # Access specific statistic
        mean_cruisers = stats['mean']['cruising_current']
        confidence_interval = (stats['ci_low'], stats['ci_high'])
        ```
    """

    def save(self, directory: str):
        """
        Save all statistical DataFrames to CSV files in the specified directory.

        Each statistic is saved as a separate CSV file named after its key,
        e.g. 'mean.csv' and 'ci_low.csv'.

        Args:
            directory (str): Path to the directory where CSV files will be saved.
                The directory must already exist.

        Note:
            - Files are saved with the minute index
            - Existing files with the same names will be overwritten
        """
        for stat, data in self.items():
            data.to_csv(os.path.join(directory, f"{stat}.csv"))
