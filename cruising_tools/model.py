"""
# Model Interface and Shoup Parking Implementation

This module provides the abstract model interface and its implementation for
the cruising-for-parking model of Shoup (2006), "Cruising for parking",
Transport Policy 13(6).

## Classes

- `Model`: Abstract base class defining the interface for all models
- `ShoupModel`: Agent-based curb-side vs. off-street parking simulation

## Key Features

- **Single Runs**: One population draw plus one minute-by-minute simulation
- **Parallel Execution**: Independent seeded runs dispatched to a thread pool
- **Parameter Overrides**: Any parameter can be replaced per run, e.g. to
  compare curb pricing policies

## Example Usage

```python
from cruising_tools import ShoupModel
from cruising_tools.config.params import init_params
import numpy as np

params = init_params(p=1.0, m=13.25, model_time=900)

model = ShoupModel(run_kwargs={'params': params})

# Run single simulation
result = model.run(params, seed=42)

# Same run with curb parking priced like off-street parking
result = model.run(params, X={'p': 13.25}, seed=42)

# Run parallel simulations
seeds = np.random.SeedSequence(42).spawn(8)
results = model.run_parallel(params, seeds=seeds, workers=4)
```
"""

# Basic data utils
import pandas as pd
import numpy as np
from typing import Callable, Any
from numpy.typing import ArrayLike
from abc import abstractmethod, ABC
from functools import partial

# Logging
import logging

# Simulation
from cruising_tools.config.params import ParameterGroups
from cruising_tools.population import init_dataframe
from cruising_tools.engine import run_simulation
from cruising_tools.state import as_frame

# Parallel runs
from tqdm import tqdm
from concurrent.futures import ThreadPoolExecutor, as_completed


Seed = int | np.random.SeedSequence | None
"""Anything `np.random.default_rng` accepts as a seed."""


class Model(ABC):
    """
    Abstract base class for simulation models.

    This class defines the interface that all models must implement,
    providing a standardized way to run single and parallel simulations.

    Attributes:
        run_kwargs (dict): Keyword arguments passed to model execution methods.

    Example:
        ```python
        class FreeCurbModel(ShoupModel):
            @staticmethod
            def run(params, X=None, seed=None, verbose=False):
                X = dict(X or {}, p=0.0)
                return ShoupModel.run(params, X=X, seed=seed, verbose=verbose)
        ```
    """
    def __init__(
            self,
            run_kwargs: dict = None,
    ):
        """
        Args:
            run_kwargs (dict, optional): Default arguments of `run`, used by
                `get_objective`.
        """
        self.run_kwargs = run_kwargs if run_kwargs is not None else {}

    @staticmethod
    @abstractmethod
    def run_parallel(*args, X: dict[str, Any] = None, **kwargs) -> list[ArrayLike]:
        """
        Execute the model several times in parallel.

        Returns:
            list[ArrayLike]: Model outputs in submission order.
        """
        pass

    @staticmethod
    @abstractmethod
    def run(*args, X: dict[str, Any] = None, **kwargs) -> ArrayLike:
        """
        Execute the model once.

        Args:
            X (dict[str, Any], optional): Parameter overrides for this run.

        Returns:
            ArrayLike: Model output (e.g. a pandas DataFrame).
        """
        pass

    @staticmethod
    @abstractmethod
    def launch_model(*args, **kwargs) -> ArrayLike:
        """
        Low-level model execution method called by `run`.
        """
        pass

    def get_objective(
        self
    ) -> Callable:
        """
        Bind `run_kwargs` to `run`.

        Returns:
            Callable: Partial function with run_kwargs applied to the run method.

        Example:
            ```python
            model = ShoupModel(run_kwargs={'params': init_params()})
            objective = model.get_objective()
            result = objective(seed=1)  # params is automatically passed
            ```
        """
        return partial(
            self.run,
            **self.run_kwargs
        )


class ShoupModel(Model):
    """
    Agent-based simulation of cruising for curb-side parking.

    Each run draws a fresh agent population from the parameter distributions
    and simulates it minute by minute. The output is a DataFrame with one row
    per minute and the eight `ParkState` fields as columns.

    Attributes:
        run_kwargs (dict): Arguments for model execution, typically
            `{'params': ParameterGroups}`.

    Example:
        ```python
        from cruising_tools import ShoupModel
        from cruising_tools.config.params import init_params

        model = ShoupModel(run_kwargs={'params': init_params(cpk=12)})
        out = model.get_objective()(seed=7)
        out['cruising_total_time'].iloc[-1]  # hours spent cruising
        ```
    """
    def __init__(
            self,
            run_kwargs: dict = None,
    ):
        """
        Initialize the ShoupModel instance.

        Args:
            run_kwargs (dict, optional): Keyword arguments for model execution.
                Expected keys include:
                - 'params': ParameterGroups from `init_params`
                - 'verbose': bool whether to log each run
        """
        super().__init__(run_kwargs=run_kwargs)

    @staticmethod
    def run_parallel(
        params: ParameterGroups,
        seeds: list[Seed],
        workers: int = 4,
        X: list[dict[str, Any]] | dict[str, Any] = None,
        **kwargs
    ) -> list[pd.DataFrame]:
        """
        Execute independent simulation runs in parallel.

        This method uses ThreadPoolExecutor to run one simulation per seed.
        Progress is tracked with a progress bar.

        Args:
            params (ParameterGroups): Base model parameters.
            seeds (list[Seed]): One seed per run. Use
                `np.random.SeedSequence(seed).spawn(n)` for independent streams.
            workers (int, optional): Number of concurrent worker threads. Defaults to 4.
            X (list[dict] | dict, optional): Parameter overrides, either one
                dictionary shared by every run or one dictionary per run.
            **kwargs: Additional keyword arguments passed to individual run() calls.

        Returns:
            list[pd.DataFrame]: Model outputs, in the same order as `seeds`.

        Raises:
            Exception: The first exception raised by a run is logged with its
                index and re-raised.

        Note:
            - Each run owns its agent table, state and random generator, so
              results do not depend on scheduling
            - An interrupt cancels the runs that have not started yet
        """

        N = len(seeds)
        overrides = X if isinstance(X, list) else [X for _ in range(N)]
        res = [None for _ in range(N)]  # Ensure that we have an accessible index

        pbar = tqdm(total=N)

        with ThreadPoolExecutor(max_workers=workers) as executor:
            futures = {
                executor.submit(
                    ShoupModel.run,
                    params,
                    X=overrides[i],
                    seed=seeds[i],
                    **kwargs
                ):
                i for i in range(N)  # Store corresponding sample number
            }

            try:
                for future in as_completed(futures):
                    pbar.update(1)
                    idx = futures[future]
                    try:
                        res[idx] = future.result()
                    except Exception as e:
                        logging.error(f"Simulation run {idx} failed: {e}")
                        raise
            except BaseException:
                # Stop dispatching runs that have not started
                executor.shutdown(cancel_futures=True)
                raise
            finally:
                pbar.close()

        return res

    @staticmethod
    def run(
        params: ParameterGroups,
        X: dict[str, Any] = None,
        seed: Seed = None,
        verbose: bool = False
    ) -> pd.DataFrame:
        """
        Execute a single simulation run.

        Args:
            params (ParameterGroups): Base model parameters.
            X (dict[str, Any], optional): Parameter overrides for this run.
                Overridden values are validated like `init_params` arguments.
            seed (Seed, optional): Seed of the run's random generator.
            verbose (bool, optional): Log a summary of the run. Defaults to False.

        Returns:
            pd.DataFrame: One row per minute, `FIELDS` columns.

        Raises:
            ConfigurationError: If an override is invalid.

        Example:
            ```python
            out = ShoupModel.run(init_params(), X={'p': 4.0}, seed=1)
            out.loc[out.index[-1], 'curb_revenue']
            ```
        """
        params = params.with_overrides(X)
        rng = np.random.default_rng(seed)
        agents = init_dataframe(params, rng)

        return ShoupModel.launch_model(agents, params, rng, verbose=verbose)

    @staticmethod
    def launch_model(
        agents: pd.DataFrame,
        params: ParameterGroups,
        rng: np.random.Generator,
        verbose: bool = False
    ) -> pd.DataFrame:
        """
        Simulate a given agent table.

        Args:
            agents (pd.DataFrame): Agent table from `init_dataframe`.
            params (ParameterGroups): Parameters the table was generated from.
            rng (np.random.Generator): Random source for curb space allocation.
            verbose (bool, optional): Log a summary of the run. Defaults to False.

        Returns:
            pd.DataFrame: One row per minute, `FIELDS` columns.
        """
        out = as_frame(run_simulation(agents, params, rng))

        if verbose:
            final = out.iloc[-1]
            logging.info(
                f"{len(agents)} arrivals: {int(final['curb_total'])} parked at the curb, "
                f"{int(final['offstreet_total'])} off-street, "
                f"{final['cruising_total_time']:.2f} hours cruising."
            )

        return out
