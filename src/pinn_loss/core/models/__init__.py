"""
Trial solutions for PINN-Loss.

Includes:
- TrialSolution: plain callable with its own parameter vector
- build_chain: feed-forward Keras network builder
- Adapters to the flat-parameter call ``phi(x, theta)``
"""

from .trial_solution import (
    TrialSolution,
    build_chain,
    initial_params,
    get_phi,
    get_u,
    parameter_lengths,
    split_init_params,
    resolve_chains
)

__all__ = [
    'TrialSolution',
    'build_chain',
    'initial_params',
    'get_phi',
    'get_u',
    'parameter_lengths',
    'split_init_params',
    'resolve_chains'
]
