"""
Configuration Loader for PINN-Loss.

Handles loading and validation of YAML configuration files for
discretization runs, and builds training strategies from them.

Example configuration:

    problem: poisson_2d
    seed: 42
    strategy:
      type: quasi_random
      sampling_method: sobol
      number_of_points: 256
      number_of_minibatch: 4
    network:
      n_hidden_layers: 2
      n_neurons: 16
    lbfgs:
      max_iter: 500
      backend: scipy
"""

import os
from dataclasses import fields
from typing import Dict, Any, Optional, List

import yaml

from pinn_loss.core.errors import ConfigurationError


# Strategy type aliases accepted under ``strategy.type``
STRATEGY_TYPES = {
    'grid': 'GridTraining',
    'iter': 'IterTraining',
    'stochastic': 'StochasticTraining',
    'quasi_random': 'QuasiRandomTraining',
    'quadrature': 'QuadratureTraining',
}


def load_config(
    config_path: str,
    validate: bool = True,
    required_fields: Optional[List[str]] = None
) -> Dict[str, Any]:
    """Load and validate a YAML configuration file.

    Args:
        config_path: Path to the YAML configuration file
        validate: Whether to validate required fields (default: True)
        required_fields: List of required field names. If None, uses ['strategy.type'].

    Returns:
        Dictionary containing configuration parameters

    Raises:
        FileNotFoundError: If config file doesn't exist
        ConfigurationError: If validation fails or YAML is invalid

    Example:
        >>> config = load_config('configs/poisson_2d.yaml')
        >>> config['strategy']['type']
        'quasi_random'
    """
    if not os.path.exists(config_path):
        raise FileNotFoundError(f"Configuration file not found: {config_path}")

    try:
        with open(config_path, 'r') as f:
            config = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Failed to parse YAML file: {e}")

    if config is None:
        raise ConfigurationError(f"Empty configuration file: {config_path}")
    if not isinstance(config, dict):
        raise ConfigurationError(
            f"Configuration must be a mapping, got {type(config).__name__}: {config_path}"
        )

    if validate:
        if required_fields is None:
            required_fields = ['strategy.type']
        validate_config(config, required_fields)

    return config


def validate_config(
    config: Dict[str, Any],
    required_fields: List[str]
) -> None:
    """Validate that required fields are present in configuration.

    Args:
        config: Configuration dictionary to validate
        required_fields: Required field names (nested fields with dots)

    Raises:
        ConfigurationError: If any required field is missing

    Example:
        >>> config = {'strategy': {'type': 'grid', 'dx': 0.1}}
        >>> validate_config(config, ['strategy.type'])
        >>> validate_config(config, ['strategy.type', 'seed'])
        # Raises ConfigurationError
    """
    missing_fields = []

    for field_name in required_fields:
        current = config
        try:
            for part in field_name.split('.'):
                current = current[part]
        except (KeyError, TypeError):
            missing_fields.append(field_name)

    if missing_fields:
        raise ConfigurationError(
            f"Missing required fields in configuration: {', '.join(missing_fields)}"
        )


def get_config_value(
    config: Dict[str, Any],
    key: str,
    default: Any = None
) -> Any:
    """Get a configuration value with optional default.

    Supports nested keys with dot notation (e.g., 'strategy.dx').

    Example:
        >>> config = {'strategy': {'type': 'grid', 'dx': 0.05}}
        >>> get_config_value(config, 'strategy.dx')
        0.05
        >>> get_config_value(config, 'lbfgs.max_iter', default=500)
        500
    """
    current = config
    try:
        for part in key.split('.'):
            current = current[part]
        return current
    except (KeyError, TypeError):
        return default


def merge_configs(
    base_config: Dict[str, Any],
    override_config: Dict[str, Any]
) -> Dict[str, Any]:
    """Merge two configurations, with override taking precedence.

    Performs deep merge for nested dictionaries.

    Example:
        >>> base = get_default_strategy_config()
        >>> merged = merge_configs(base, {'strategy': {'dx': 0.05}})
        >>> merged['strategy']
        {'type': 'grid', 'dx': 0.05}
    """
    merged = base_config.copy()

    for key, value in override_config.items():
        if key in merged and isinstance(merged[key], dict) and isinstance(value, dict):
            merged[key] = merge_configs(merged[key], value)
        else:
            merged[key] = value

    return merged


def save_config(
    config: Dict[str, Any],
    config_path: str,
    overwrite: bool = False
) -> None:
    """Save configuration dictionary to a YAML file.

    Raises:
        FileExistsError: If file exists and overwrite=False
    """
    if os.path.exists(config_path) and not overwrite:
        raise FileExistsError(
            f"Configuration file already exists: {config_path}. "
            "Set overwrite=True to replace it."
        )

    os.makedirs(os.path.dirname(config_path) or '.', exist_ok=True)

    with open(config_path, 'w') as f:
        yaml.dump(config, f, default_flow_style=False, sort_keys=False)


def get_default_strategy_config() -> Dict[str, Any]:
    """Get the default configuration template.

    Returns:
        Dictionary with the default problem, strategy, network, optimizer and
        seed settings
    """
    return {
        'problem': 'poisson_2d',

        'strategy': {
            'type': 'grid',
            'dx': 0.1
        },

        'network': {
            'n_hidden_layers': 2,
            'n_neurons': 16,
            'activation': 'tanh',
            'use_residual': False,
            'residual_freq': 2
        },

        'lbfgs': {
            'max_iter': 500,
            'backend': 'scipy'
        },

        'seed': None
    }


def _strategy_class(type_name: str):
    # Deferred: discretization imports core.utils
    from pinn_loss.discretization import strategies

    class_name = STRATEGY_TYPES.get(type_name, type_name)
    strategy_cls = getattr(strategies, class_name, None)
    if strategy_cls is None or class_name not in STRATEGY_TYPES.values():
        raise ConfigurationError(
            f"Unknown strategy type '{type_name}'. "
            f"Must be one of: {list(STRATEGY_TYPES)}"
        )
    return strategy_cls


def validate_strategy_config(config: Dict[str, Any]) -> None:
    """Validate the ``strategy`` section of a configuration.

    Checks the strategy type and that every other key is a parameter of
    that strategy.

    Raises:
        ConfigurationError: If the section is missing or invalid
    """
    validate_config(config, ['strategy.type'])
    section = config['strategy']
    if not isinstance(section, dict):
        raise ConfigurationError(
            f"'strategy' must be a mapping, got {type(section).__name__}"
        )

    strategy_cls = _strategy_class(section['type'])
    allowed = {f.name for f in fields(strategy_cls) if f.init}
    unknown = sorted(set(section) - allowed - {'type'})
    if unknown:
        raise ConfigurationError(
            f"Unknown parameters for {strategy_cls.__name__}: {', '.join(unknown)}. "
            f"Allowed: {sorted(allowed)}"
        )


def strategy_from_config(config: Dict[str, Any]):
    """Build a training strategy from a configuration.

    Args:
        config: Configuration with a ``strategy`` section

    Returns:
        TrainingStrategy instance

    Raises:
        ConfigurationError: If the section is invalid or values are rejected

    Example:
        >>> strategy_from_config({'strategy': {'type': 'stochastic', 'number_of_points': 200}})
        StochasticTraining(number_of_points=200)
    """
    validate_strategy_config(config)
    section = dict(config['strategy'])
    strategy_cls = _strategy_class(section.pop('type'))
    try:
        return strategy_cls(**section)
    except (TypeError, ValueError) as e:
        raise ConfigurationError(f"Invalid {strategy_cls.__name__} configuration: {e}") from e


def resolve_strategy_config(config: Dict[str, Any]):
    """Complete a configuration with defaults and build its training strategy.

    Missing sections are filled from get_default_strategy_config(). The
    ``strategy`` section is taken as written, never merged, since the
    parameters of one strategy type are invalid for another.

    Returns:
        Tuple ``(strategy, config)``

    Raises:
        ConfigurationError: If the strategy section is missing or invalid
    """
    completed = merge_configs(
        get_default_strategy_config(),
        {k: v for k, v in config.items() if k != 'strategy'}
    )
    completed['strategy'] = config.get('strategy')
    return strategy_from_config(completed), completed


def load_strategy_config(config_path: str):
    """Load a YAML file and build its training strategy.

    Returns:
        Tuple ``(strategy, config)``, see resolve_strategy_config
    """
    return resolve_strategy_config(load_config(config_path))


__all__ = [
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
    'ConfigurationError'
]
