"""
# Monte Carlo Simulations

This module provides functionality for running Monte Carlo parking
simulations: repeated population draws and simulations with independent
random streams, stacked into a `[model_time, 8, n]` tensor.

## Components

- `mc_simulation`: Functional entry point returning the result tensor
- `Sim`: Simulation runner with summary statistics and plotting
- `MonteCarloConfig`: Configuration for Monte Carlo simulations

## Example Usage

```python
from cruising_tools.montecarlo import Sim, MonteCarloConfig, mc_simulation
from cruising_tools.config.params import init_params
from cruising_tools import ShoupModel

# Functional interface
tensor = mc_simulation(init_params(model_time=900), n=50, seed=1)

# Configuration driven
config = MonteCarloConfig.from_json('mc_config.json')
sim = Sim(ShoupModel(), config)
results = sim.run(n=100, parallel=True, workers=8)

# Analyze results
stats = sim.analyze(results)
stats.save('/path/to/results/')
```
"""

from .sim import *
from .config import *
