"""
Utility functions for PINN-Loss.

Includes:
- config_loader: YAML configuration management and strategy building
- helper_functions: Numeric utilities (finite-difference step, grids, seeding)
- training_logger: Loss history recording and plotting
"""

from .training_logger import LossLogger

from .config_loader import (
    STRATEGY_TYPES,
    load_config,
    validate_config,
    get_config_value,
    merge_configs,
    save_config,
    get_default_strategy_config,
    validate_strategy_config,
    strategy_from_config,
    resolve_strategy_config,
    load_strategy_config,
    ConfigurationError
)

from .helper_functions import (
    FD_EPSILON,
    unit_perturbation,
    resolve_dtype,
    discretized_span,
    cartesian_product,
    set_random_seed
)

__all__ = [
    'LossLogger',
    'STRATEGY_TYPES',
    'load_config',
    'validate_config',
    'get_config_value',
    'merge_configs',
    'save_config',
    'get_default_strategy_config',
    'validate_strategy_config',
    'strategy_from_config',
    'resolve_strategy_config',
    'load_strategy_config',
    'ConfigurationError',
    'FD_EPSILON',
    'unit_perturbation',
    'resolve_dtype',
    'discretized_span',
    'cartesian_product',
    'set_random_seed'
]
