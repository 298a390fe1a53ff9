"""
# Cruising Tools

A toolkit for simulating cruising for curb-side parking, following the model
of Shoup (2006). Drivers compare the money saved by parking at the curb with
the cost of cruising for a free space, and park off-street once cruising is
no longer worth it. The toolkit provides:

- **Model Interface**: Single and parallel runs of the agent-based simulation
- **Monte Carlo Simulations**: Repeated independently seeded runs stacked
  into a `[model_time, 8, n]` tensor, with summary statistics
- **Configuration Management**: Parameter groups with validation, and JSON
  configuration with named SciPy distributions
- **Results Analysis**: Data structures for simulation outputs

## Main Components

- `Model`: Base class for model execution
- `ShoupModel`: The curb-side vs. off-street parking simulation
- `montecarlo`: Monte Carlo simulation framework
- `config`: Parameter groups and parameter spaces
- `population`: Agent table generation and the cost functions of the model
- `engine`: Minute-by-minute simulation
- `state`: The `ParkState` record and its matrix views
- `utils`: Distributions and results handling

## Example Usage

```python
from cruising_tools import ShoupModel
from cruising_tools.config import init_params
from cruising_tools.montecarlo import Sim, MonteCarloConfig

# Single run
params = init_params(p=1.0, m=13.25, model_time=900)
out = ShoupModel.run(params, seed=42)

# Monte Carlo simulation
mc_config = MonteCarloConfig.from_json("mc_config.json")
sim = Sim(ShoupModel(), mc_config)
results = sim.run(n=100, parallel=True)
stats = sim.analyze(results)
```
"""

from .model import *
