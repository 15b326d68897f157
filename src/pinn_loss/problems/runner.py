"""High-level runner for benchmark problems.

Reads every section of a run configuration: ``problem`` picks the
benchmark, ``network`` builds one Keras chain per dependent variable,
``strategy`` selects the training strategy, ``lbfgs`` drives the optimizer
and ``seed`` fixes weight initialization and point sampling. The trained
trial solution is then compared with the benchmark's analytical solution.

Example:
    >>> result = run_from_config('configs/poisson_2d.yaml', verbose=False)
    >>> theta, error = result['theta'], result['max_abs_error']
"""
from __future__ import annotations

import os
from typing import Any, Dict, Sequence, Union

import numpy as np
import tensorflow as tf

from pinn_loss.core.errors import ConfigurationError
from pinn_loss.core.models.trial_solution import build_chain, parameter_lengths, resolve_chains
from pinn_loss.core.training.optimizers import lbfgs_optimizer_scipy, lbfgs_optimizer_tfp
from pinn_loss.core.utils import LossLogger, set_random_seed
from pinn_loss.core.utils.config_loader import load_strategy_config, resolve_strategy_config
from pinn_loss.core.utils.helper_functions import cartesian_product
from pinn_loss.discretization.discretizer import PhysicsInformedNN, discretize
from pinn_loss.discretization.loss_builder import split_parameters
from pinn_loss.discretization.training_sets import order_domains
from pinn_loss.problems.benchmarks import BenchmarkCase, get_benchmark
from pinn_loss.symbolic.registry import get_vars


LBFGS_BACKENDS = ('scipy', 'tfp')


def build_chains(case: BenchmarkCase, network: Dict[str, Any]) -> list:
    """One Keras chain per dependent variable of the benchmark.

    Raises:
        ConfigurationError: If the network section has unknown parameters
    """
    try:
        return [build_chain(case.pde_system.dim, **network) for _ in case.pde_system.depvars]
    except TypeError as e:
        raise ConfigurationError(f"Invalid network configuration: {e}") from e


def evaluation_points(case: BenchmarkCase, n_per_dim: int = 21) -> np.ndarray:
    """Uniform evaluation grid over the benchmark domain, in variable order."""
    registry = get_vars(case.pde_system.indvars, case.pde_system.depvars)
    domains = order_domains(case.pde_system.domains, registry)
    return cartesian_product([np.linspace(d.lower, d.upper, n_per_dim) for d in domains])


def evaluate_solution(chains: Sequence, theta: np.ndarray, points: np.ndarray) -> np.ndarray:
    """Evaluate trained chains at ``points``.

    Returns:
        ``(N,)`` for one dependent variable, ``(N, K)`` for K of them
    """
    phis, params = resolve_chains(list(chains))
    pieces = split_parameters(tf.constant(theta, dtype=tf.float64), parameter_lengths(params))
    x = tf.constant(points, dtype=tf.float64)
    values = [phi(x, p)[:, 0].numpy() for phi, p in zip(phis, pieces)]
    return values[0] if len(values) == 1 else np.stack(values, axis=-1)


def run_from_config(
    config: Union[str, os.PathLike, Dict[str, Any]],
    verbose: bool = True
) -> Dict[str, object]:
    """Train a benchmark problem described by a configuration.

    Args:
        config: Path to a YAML file, or a configuration dictionary
        verbose: Print the compile summary and optimizer progress (default: True)

    Returns:
        Dictionary with keys ``config``, ``strategy``, ``problem``, ``chains``,
        ``theta``, ``logger`` and ``max_abs_error``

    Raises:
        ConfigurationError: If a section is invalid
        ValueError: If the problem name is unknown
        RuntimeError: If the TFP backend is requested but not installed
    """
    if isinstance(config, (str, os.PathLike)):
        strategy, config = load_strategy_config(os.fspath(config))
    else:
        strategy, config = resolve_strategy_config(config)

    backend = config['lbfgs'].get('backend', 'scipy')
    if backend not in LBFGS_BACKENDS:
        raise ConfigurationError(
            f"Unknown L-BFGS backend '{backend}'. Must be one of: {list(LBFGS_BACKENDS)}"
        )

    seed = config.get('seed')
    if seed is not None:
        set_random_seed(seed)

    case = get_benchmark(config['problem'])
    chains = build_chains(case, config['network'])
    discretization = PhysicsInformedNN(
        chains[0] if len(chains) == 1 else chains,
        strategy=strategy,
        seed=seed
    )
    problem = discretize(case.pde_system, discretization, verbose=verbose)

    max_iter = int(config['lbfgs']['max_iter'])
    logger = LossLogger()
    if backend == 'tfp':
        results = lbfgs_optimizer_tfp(problem, max_iter=max_iter, verbose=verbose)
        theta = np.asarray(results.position.numpy(), dtype=np.float64)
    else:
        result = lbfgs_optimizer_scipy(problem, max_iter=max_iter, verbose=verbose, logger=logger)
        theta = np.asarray(result.x, dtype=np.float64)

    points = evaluation_points(case)
    error = np.max(np.abs(evaluate_solution(chains, theta, points) - case.analytic_solution(points)))

    if verbose:
        print(f"{case.name}: max |u - u_exact| = {error:.4e}")

    return {
        "config": config,
        "strategy": strategy,
        "problem": problem,
        "chains": chains,
        "theta": theta,
        "logger": logger,
        "max_abs_error": float(error),
    }


__all__ = [
    'LBFGS_BACKENDS',
    'build_chains',
    'evaluation_points',
    'evaluate_solution',
    'run_from_config'
]
