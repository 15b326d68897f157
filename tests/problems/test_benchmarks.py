"""Tests for the benchmark problems."""

from __future__ import annotations

import numpy as np
import pytest
import tensorflow as tf

from pinn_loss.problems import (
    analytic_first_order_system_2d,
    analytic_ode_1d,
    analytic_poisson_2d,
    exact_trial_solutions,
    get_benchmark,
)


@pytest.mark.parametrize("name, dim, n_bcs, n_solutions", [
    ('ode_1d', 1, 1, 1),
    ('poisson_2d', 2, 4, 1),
    ('first_order_system_2d', 2, 2, 2),
])
def test_benchmark_structure(name, dim, n_bcs, n_solutions):
    case = get_benchmark(name)
    assert case.name == name
    assert case.pde_system.dim == dim
    assert len(case.pde_system.bcs) == n_bcs
    assert len(case.pde_system.depvars) == n_solutions
    assert len(exact_trial_solutions(name)) == n_solutions


def test_unknown_benchmark():
    with pytest.raises(ValueError, match="Unsupported benchmark"):
        get_benchmark('heat_3d')
    with pytest.raises(ValueError):
        exact_trial_solutions('heat_3d')


def test_analytic_solutions_satisfy_boundary_conditions():
    assert analytic_ode_1d(np.array([0.0]))[0] == 0.0
    edge = np.linspace(0.0, 1.0, 5)
    np.testing.assert_allclose(analytic_poisson_2d(edge, np.zeros(5)), 0.0, atol=1e-15)
    np.testing.assert_allclose(analytic_poisson_2d(np.ones(5), edge), 0.0, atol=1e-15)
    np.testing.assert_allclose(analytic_first_order_system_2d(edge, np.zeros(5)),
                               np.stack([2 * edge, 3 * edge], axis=-1))


def test_exact_trial_solutions_match_analytic_solutions():
    points = np.random.default_rng(0).random((10, 2))
    case = get_benchmark('first_order_system_2d')
    values = np.stack([s(tf.constant(points), np.zeros(1)).numpy() for s in exact_trial_solutions(case.name)], axis=-1)
    np.testing.assert_allclose(values, case.analytic_solution(points))
