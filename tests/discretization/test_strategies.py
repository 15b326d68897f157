"""Tests for training strategy descriptions."""

from __future__ import annotations

import pytest

from pinn_loss.discretization import (
    GridTraining,
    IterTraining,
    QuadratureTraining,
    QuasiRandomTraining,
    StochasticTraining,
)


def test_iter_training_window_grows_with_cursor():
    strategy = IterTraining(dx=0.1, iterations=10)
    assert strategy.window(100) == 10
    strategy.advance()
    assert strategy.window(100) == 15
    strategy.advance()
    assert strategy.window(100) == 20
    strategy.reset()
    assert strategy.cursor == 1.0


def test_iter_training_window_is_clamped():
    assert IterTraining(iterations=1000).window(10) == 1
    strategy = IterTraining(iterations=1)
    strategy.cursor = 5.0
    assert strategy.window(10) == 10


def test_iter_training_cursor_is_not_a_constructor_argument():
    with pytest.raises(TypeError):
        IterTraining(iterations=1, cursor=5.0)


def test_cursor_is_per_instance():
    first, second = IterTraining(iterations=4), IterTraining(iterations=4)
    first.advance()
    assert second.cursor == 1.0


def test_grid_strategies_use_grids():
    assert GridTraining().uses_grid
    assert IterTraining().uses_grid
    assert not StochasticTraining().uses_grid
    assert StochasticTraining().name == 'StochasticTraining'


@pytest.mark.parametrize("build", [
    lambda: GridTraining(dx=0.0),
    lambda: GridTraining(dx=[0.1, -0.1]),
    lambda: IterTraining(iterations=0),
    lambda: StochasticTraining(number_of_points=0),
    lambda: QuasiRandomTraining(sampling_method='grid'),
    lambda: QuasiRandomTraining(number_of_minibatch=0),
    lambda: QuadratureTraining(algorithm='cuhre'),
    lambda: QuadratureTraining(batch=-1),
])
def test_invalid_settings_are_rejected(build):
    with pytest.raises(ValueError):
        build()


def test_quadrature_minimum_dimensions():
    assert QuadratureTraining().min_dim == 2
    assert QuadratureTraining(algorithm='genz-malik').min_dim == 3
