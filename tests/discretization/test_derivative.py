"""Accuracy tests for the finite-difference derivative operator."""

from __future__ import annotations

import numpy as np
import pytest
import tensorflow as tf

from pinn_loss.core.models.trial_solution import get_phi, get_u
from pinn_loss.core.utils.helper_functions import FD_EPSILON, unit_perturbation
from pinn_loss.discretization import get_numeric_derivative, numeric_derivative

E = FD_EPSILON


@pytest.fixture
def square():
    return get_phi(lambda x, theta: x[:, 0] ** 2)


def test_first_derivative_of_square(square):
    x = tf.constant([[2.0], [-1.0]], dtype=tf.float64)
    d = numeric_derivative(square, get_u(), x, [(E,)], 1, None)
    np.testing.assert_allclose(d.numpy(), [4.0, -2.0], atol=1e-6)


def test_second_derivative_of_square(square):
    x = tf.constant([[2.0]], dtype=tf.float64)
    d = numeric_derivative(square, get_u(), x, [(E,), (E,)], 2, None)
    np.testing.assert_allclose(d.numpy(), [2.0], atol=1e-5)


def test_mixed_partial():
    phi = get_phi(lambda x, theta: x[:, 0] * x[:, 1] + x[:, 0] ** 2)
    x = tf.constant([[0.3, 0.7]], dtype=tf.float64)
    perturbations = [unit_perturbation(2, 1), unit_perturbation(2, 2)]
    d = numeric_derivative(phi, get_u(), x, perturbations, 2, None)
    np.testing.assert_allclose(d.numpy(), [1.0], atol=1e-5)


def test_derivative_depends_on_parameters():
    phi = get_phi(lambda x, theta: theta[0] * tf.sin(x[:, 0]))
    x = tf.constant([[0.0]], dtype=tf.float64)
    theta = tf.constant([3.0], dtype=tf.float64)
    d = numeric_derivative(phi, get_u(), x, [(E,)], 1, theta)
    np.testing.assert_allclose(d.numpy(), [3.0], atol=1e-4)


def test_invalid_order_raises(square):
    with pytest.raises(ValueError):
        numeric_derivative(square, get_u(), tf.zeros((1, 1), tf.float64), [(E,)], 0, None)


def test_default_operator():
    assert get_numeric_derivative() is numeric_derivative
