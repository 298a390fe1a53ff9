"""
# Exceptions

Error types raised by cruising_tools.

- `ConfigurationError`: a parameter violates its documented domain. Raised
  once, while building the parameter groups, before any agents are generated.
- `EngineInvariantError`: the simulation engine reached a state that valid
  input can never produce (negative occupancy, a skipped agent). These are
  logic errors and abort the run.
"""


class ConfigurationError(ValueError):
    """Raised when a model parameter is outside its valid domain."""


class EngineInvariantError(RuntimeError):
    """Raised when the simulation engine breaks one of its own invariants."""
