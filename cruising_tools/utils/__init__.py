"""
# Utilities

This module provides utility functions and classes for working with
probability distributions and results management in the cruising_tools
package.

## Components

- **distributions**: Sampling from fixed values or SciPy distributions
- **results**: Data structures for storing and saving simulation results

## Example Usage

```python
import numpy as np
from cruising_tools.utils.distributions import sample_vals, get_scipy_normal
from cruising_tools.utils.results import SimulationResults

rng = np.random.default_rng(42)
durations = sample_vals(get_scipy_normal(1.0, 0.5), 100, rng)

results = SimulationResults(tensor)
results.final('curb_revenue')
```
"""
