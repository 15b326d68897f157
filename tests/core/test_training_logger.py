"""Tests for the loss logger."""

from __future__ import annotations

import matplotlib

matplotlib.use("Agg")

import matplotlib.pyplot as plt  # noqa: E402
import numpy as np  # noqa: E402
import pytest  # noqa: E402

from pinn_loss.core.utils import LossLogger  # noqa: E402
from pinn_loss.discretization import IterTraining, PhysicsInformedNN, discretize  # noqa: E402
from pinn_loss.problems import exact_trial_solutions, poisson_2d  # noqa: E402


def test_log_iteration_and_to_dict():
    logger = LossLogger()
    logger.log_iteration(1, 3.0, 2.0, 1.0)
    logger.log_iteration(2, 1.5, 1.0, 0.5)

    data = logger.to_dict()
    assert data['iterations'] == [1, 2]
    assert data['total'] == [3.0, 1.5]
    assert data['boundary'] == [1.0, 0.5]
    assert logger.last == {'total': 1.5, 'pde': 1.0, 'boundary': 0.5}


def test_log_problem_records_both_terms():
    problem = discretize(poisson_2d().pde_system, PhysicsInformedNN(exact_trial_solutions('poisson_2d')[0]))
    logger = LossLogger()
    with pytest.raises(ValueError, match="No objective evaluation"):
        logger.log_problem(1, problem)

    value = float(problem.objective(problem.initial_params))
    logger.log_problem(1, problem)
    assert logger.losses['total'][0] == pytest.approx(value)
    assert logger.losses['total'][0] == logger.losses['pde'][0] + logger.losses['boundary'][0]
    assert np.isfinite(logger.losses['total'][0])


def test_plot_losses_returns_figure():
    logger = LossLogger()
    for i in range(1, 4):
        logger.log_iteration(i, 1.0 / i, 0.6 / i, 0.4 / i)
    fig = logger.plot_losses()
    assert isinstance(fig, plt.Figure)
    assert len(fig.axes) == 2
    plt.close(fig)


def test_log_problem_does_not_advance_iter_training():
    strategy = IterTraining(dx=0.1, iterations=50)
    problem = discretize(
        poisson_2d().pde_system,
        PhysicsInformedNN(exact_trial_solutions('poisson_2d')[0], strategy=strategy)
    )
    problem.objective(problem.initial_params)
    logger = LossLogger()
    for i in range(3):
        logger.log_problem(i + 1, problem)
    assert strategy.cursor == 1.5
    assert len(logger.iterations) == 3
