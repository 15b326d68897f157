"""Tests for configuration-driven benchmark runs."""

from __future__ import annotations

import numpy as np
import pytest

from pinn_loss.core.errors import ConfigurationError
from pinn_loss.core.utils import save_config
from pinn_loss.discretization import GridTraining, StochasticTraining
from pinn_loss.problems import (
    build_chains,
    evaluate_solution,
    evaluation_points,
    first_order_system_2d,
    poisson_2d,
    run_from_config,
)


def small_config(**overrides):
    config = {
        'problem': 'ode_1d',
        'seed': 0,
        'strategy': {'type': 'grid', 'dx': 0.1},
        'network': {'n_hidden_layers': 1, 'n_neurons': 8},
        'lbfgs': {'max_iter': 20},
    }
    config.update(overrides)
    return config


def test_run_from_config_trains_benchmark():
    result = run_from_config(small_config(), verbose=False)

    assert result['strategy'] == GridTraining(dx=0.1)
    assert result['theta'].shape == result['problem'].initial_params.shape
    assert np.isfinite(result['max_abs_error'])

    losses = result['logger'].losses['total']
    assert len(losses) >= 1
    assert losses[-1] <= losses[0]


def test_run_from_yaml_file(tmp_path):
    path = str(tmp_path / "ode.yaml")
    save_config(small_config(strategy={'type': 'stochastic', 'number_of_points': 32},
                             lbfgs={'max_iter': 3}), path)
    result = run_from_config(path, verbose=False)

    assert result['strategy'] == StochasticTraining(number_of_points=32)
    assert result['config']['network']['activation'] == 'tanh'


def test_seed_fixes_initial_parameters():
    first = run_from_config(small_config(lbfgs={'max_iter': 1}), verbose=False)
    second = run_from_config(small_config(lbfgs={'max_iter': 1}), verbose=False)
    np.testing.assert_array_equal(first['problem'].initial_params, second['problem'].initial_params)


def test_invalid_sections_are_rejected():
    with pytest.raises(ConfigurationError, match="network"):
        run_from_config(small_config(network={'n_layers': 2}), verbose=False)
    with pytest.raises(ConfigurationError, match="backend"):
        run_from_config(small_config(lbfgs={'max_iter': 1, 'backend': 'adam'}), verbose=False)
    with pytest.raises(ValueError, match="Unsupported benchmark"):
        run_from_config(small_config(problem='heat_3d'), verbose=False)


def test_evaluate_solution_shapes():
    points = evaluation_points(poisson_2d(), n_per_dim=5)
    assert points.shape == (25, 2)

    case = first_order_system_2d()
    chains = build_chains(case, {'n_hidden_layers': 1, 'n_neurons': 4})
    theta = np.concatenate([np.concatenate([w.ravel() for w in c.get_weights()]) for c in chains])
    values = evaluate_solution(chains, theta, points)
    assert values.shape == (25, 2)
