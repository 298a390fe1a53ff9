"""
# Configuration Management

This module provides the model parameter groups and the parameter space
configuration used throughout the cruising_tools package.

## Components

- **params**: Parameter groups, defaults and validation (`init_params`)
- **space**: Parameter values from configuration data (`SpaceConfig`)

## Example Usage

```python
from cruising_tools.config import init_params, SpaceConfig
from cruising_tools.utils.distributions import DISTRIBUTIONS

# Parameters in code
params = init_params(p=2.0, m=8.0, cpk=12)

# Parameters from configuration data
space_config = SpaceConfig.from_dict(DISTRIBUTIONS, {
    'p': 2.0,
    't': ['normal', [1.5, 0.5]],
    'ar': ['bernoulli', [0.3]]
})
params = init_params(**space_config.get_search_space())
```
"""

from .params import *
from .space import *
