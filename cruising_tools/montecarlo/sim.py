"""Monte Carlo simulation of cruising for parking.

This module repeats population generation and simulation many times with
independently seeded random streams and stacks the per-minute parking states
into a `[model_time, 8, n]` tensor. It also provides per-minute summary
statistics across runs and a confidence-interval plot.

Run `k` always uses the `k`-th child of `np.random.SeedSequence(seed)`, so a
result tensor is identical whether runs execute serially or in parallel.

Typical usage example:

```python
    from cruising_tools import ShoupModel
    from cruising_tools.montecarlo import MonteCarloConfig, Sim

    config = MonteCarloConfig.from_json("mc_config.json")
    sim = Sim(ShoupModel(), config)
    results = sim.run(n=100, parallel=True)
    stats = sim.analyze(results)
    Sim.plot_ci(stats)
```
"""

# Model running
from cruising_tools.model import Model, ShoupModel
from .config import MonteCarloConfig
from cruising_tools.config.params import ParameterGroups
from cruising_tools.state import FIELDS
from cruising_tools.utils.results import SimulationResults, StatsResults

# Data
import pandas as pd
import numpy as np

# Logging
import logging

# Progress
from tqdm import tqdm

# Plotting
import matplotlib.pyplot as plt


def mc_simulation(
    params: ParameterGroups,
    n: int = 100,
    seed: int | None = None,
    parallel: bool = False,
    workers: int = 4,
    X: dict = None,
    model: Model = None,
    run_kwargs: dict = None
) -> np.ndarray:
    """Monte Carlo version of the parking simulation.

    Args:
        params (ParameterGroups): Model parameters shared by every run.
        n (int, optional): Number of runs. Defaults to 100.
        seed (int, optional): Base seed. None draws fresh entropy.
        parallel (bool, optional): Dispatch runs to a thread pool.
            Defaults to False.
        workers (int, optional): Number of worker threads. Defaults to 4.
        X (dict, optional): Parameter overrides applied to every run.
        model (Model, optional): Model to run. Defaults to ShoupModel.
        run_kwargs (dict, optional): Extra arguments of every `run` call,
            e.g. `{"verbose": True}`.

    Returns:
        np.ndarray: Tensor of shape `(model_time, 8, n)`:

            D1 : Minute of the simulation
            D2 : ParkState field, in `FIELDS` order
            D3 : Run

    Raises:
        ConfigurationError: If an override is invalid.
    """
    model = model if model is not None else ShoupModel()
    run_kwargs = run_kwargs if run_kwargs is not None else {}
    seeds = np.random.SeedSequence(seed).spawn(n)

    # Overrides can change model_time
    params = params.with_overrides(X)

    # Initialise container to store results
    container = np.zeros((params.model.model_time, len(FIELDS), n))

    if parallel:
        outputs = model.run_parallel(params, seeds=seeds, workers=workers, **run_kwargs)
        for idx, out in enumerate(outputs):
            container[:, :, idx] = out.to_numpy()
    else:
        for idx, child in enumerate(tqdm(seeds)):
            container[:, :, idx] = model.run(params, seed=child, **run_kwargs).to_numpy()

    return container


class Sim:
    """Monte Carlo simulation runner.

    Attributes:
        model (Model): The model instance to be executed for each run.
        run_kwargs (dict): Arguments passed to the model during execution.
        config (MonteCarloConfig): Parameters and execution settings.
        params (ParameterGroups): Validated parameters built from the config.
        seed (int): Base seed of the runs.

    Example:
        ```python
        sim = Sim(ShoupModel(), MonteCarloConfig(num_samples=64))
        results = sim.run()
        ```
    """

    def __init__(
        self,
        model: Model,
        config: MonteCarloConfig,
        run_kwargs: dict = None,
        **kwargs
    ):
        """Initializes the Sim with model and configuration.

        Args:
            model (Model): The model instance to run simulations on. Must
                implement run() and run_parallel().
            config (MonteCarloConfig): Configuration object containing the
                parameters and execution settings.
            run_kwargs (dict, optional): Keyword arguments to pass to the
                model's run method, e.g. `{"verbose": True}`.
            **kwargs: Additional keyword arguments including:
                seed (int): Overrides the configured base seed.

        Raises:
            ConfigurationError: If the configured parameters are invalid. No
                run is started in that case.
        """
        self.model: Model = model
        self.config: MonteCarloConfig = config
        self.run_kwargs: dict = run_kwargs if run_kwargs is not None else {}
        self.params: ParameterGroups = config.get_params()
        self.seed: int = kwargs.get("seed", config.seed)

    def run(
        self,
        n: int = None,
        parallel: bool = True,
        workers: int = None,
        X: dict = None
    ) -> SimulationResults:
        """Executes the Monte Carlo simulation.

        Args:
            n (int, optional): Number of runs. Defaults to the configured
                `num_samples`.
            parallel (bool, optional): Whether to execute runs in parallel.
                Defaults to True.
            workers (int, optional): Number of parallel workers. Defaults to
                the configured `num_worker`.
            X (dict, optional): Parameter overrides applied to every run.

        Returns:
            SimulationResults: Tensor of shape `(model_time, 8, n)`.

        Example:
            >>> sim = Sim(ShoupModel(), config)
            >>> results = sim.run(n=50, parallel=True, workers=8)
            >>> print(f"Completed {len(results)} simulations")
        """
        n = n if n is not None else self.config.num_samples
        workers = workers if workers is not None else self.config.num_worker

        logging.info(f"Running {n} simulations of {self.params.model.model_time} minutes.")

        data = mc_simulation(
            self.params,
            n=n,
            seed=self.seed,
            parallel=parallel,
            workers=workers,
            X=X,
            model=self.model,
            run_kwargs=self.run_kwargs
        )

        return SimulationResults(data)

    @staticmethod
    def analyze(results: SimulationResults) -> StatsResults:
        """Computes per-minute summary statistics across runs.

        Args:
            results (SimulationResults): Output of `run`.

        Returns:
            StatsResults: DataFrames with one row per minute and one column
                per field:
                - ci_low, ci_high: 2.5% and 97.5% quantiles across runs
                - mean: Sample means
                - stddev: Sample standard deviations (NaN for a single run)
                - stderr: Standard errors of the means
                - min_val, max_val: Minimum and maximum values
        """
        data = results.data  # T x D x N
        N = data.shape[2]

        stats = {
            "ci_low": np.quantile(data, 0.025, axis=2),
            "ci_high": np.quantile(data, 0.975, axis=2),
            "mean": np.mean(data, axis=2),
            "stddev": np.std(data, axis=2, ddof=1) if N > 1 else np.full(data.shape[:2], np.nan),
            "min_val": np.min(data, axis=2),
            "max_val": np.max(data, axis=2),
        }
        stats["stderr"] = stats["stddev"] / np.sqrt(N)

        index = pd.RangeIndex(1, data.shape[0] + 1, name="minute")
        stats_res = {
            key: pd.DataFrame(val, columns=FIELDS, index=index)
            for key, val in stats.items()
        }

        return StatsResults(stats_res)

    @staticmethod
    def plot_ci(
        stats: StatsResults,
        fields: list[str] = ("curb_current", "offstreet_current", "cruising_current"),
        show: bool = True
    ):
        """Plots the mean and 95% band of the selected fields over time.

        Time is shown in hours. Each field gets a line for the mean and a
        shaded band between the 2.5% and 97.5% quantiles.

        Args:
            stats (StatsResults): Output of `analyze`.
            fields (list[str], optional): Fields to plot. Defaults to the
                current curb, off-street and cruising counts.
            show (bool, optional): Call `plt.show()`. Defaults to True.

        Returns:
            tuple: The matplotlib figure and axes.
        """
        mean = stats["mean"]
        t = mean.index.to_numpy() / 60

        fig, ax = plt.subplots()
        for output in fields:
            line, = ax.plot(t, mean[output], label=output)
            ax.fill_between(
                t,
                stats["ci_low"][output],
                stats["ci_high"][output],
                color=line.get_color(),
                alpha=0.2
            )
        ax.set_title("Model Output: Mean and 95% Band")
        ax.set_xlabel("Hours")
        ax.set_ylabel("Vehicles")
        ax.legend(loc="upper left")

        if show:
            plt.show()

        return fig, ax
