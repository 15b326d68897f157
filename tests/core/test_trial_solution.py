"""Tests for the trial-solution adapter."""

from __future__ import annotations

import numpy as np
import pytest
import tensorflow as tf

from pinn_loss.core.models import (
    TrialSolution,
    build_chain,
    get_phi,
    get_u,
    initial_params,
    parameter_lengths,
    resolve_chains,
)


def test_build_chain_shapes():
    chain = build_chain(3, output_dim=2, n_hidden_layers=3, n_neurons=8, use_residual=True)
    out = chain(tf.zeros((5, 3)))
    assert out.shape == (5, 2)


def test_keras_phi_is_stateless_in_theta():
    tf.keras.utils.set_random_seed(1)
    chain = build_chain(2, n_hidden_layers=1, n_neurons=4)
    phi = get_phi(chain)
    theta = initial_params(chain)
    x = tf.constant([[0.1, 0.2], [0.3, 0.4]], dtype=tf.float64)

    np.testing.assert_allclose(phi(x, theta).numpy(), chain(tf.cast(x, tf.float32)).numpy(), rtol=1e-5)
    # zero parameters give zero output, without touching the model's weights
    np.testing.assert_allclose(phi(x, np.zeros_like(theta)).numpy(), 0.0)
    np.testing.assert_allclose(phi(x, theta).numpy(), chain(tf.cast(x, tf.float32)).numpy(), rtol=1e-5)
    assert phi(x, theta).dtype == tf.float64


def test_gradient_flows_into_theta():
    chain = build_chain(1, n_hidden_layers=1, n_neurons=3)
    phi = get_phi(chain)
    theta = tf.constant(initial_params(chain))
    with tf.GradientTape() as tape:
        tape.watch(theta)
        value = tf.reduce_sum(get_u()(tf.constant([[0.5]], tf.float64), theta, phi))
    assert tape.gradient(value, theta).shape == theta.shape


def test_phi_output_shapes_for_plain_callables():
    phi = get_phi(lambda x, theta: x[:, 0] * theta[0])
    assert phi(np.array([[1.0], [2.0]]), np.array([3.0])).shape == (2, 1)
    single = phi(np.array([2.0]), np.array([3.0]))
    assert single.shape == (1,)
    assert float(get_u()(np.array([[2.0]]), np.array([3.0]), phi)[0]) == pytest.approx(6.0)


def test_initial_params():
    solution = TrialSolution(lambda x, theta: x, [[1.0, 2.0], [3.0, 4.0]])
    assert solution.n_params == 4
    np.testing.assert_array_equal(initial_params(solution), [1.0, 2.0, 3.0, 4.0])
    with pytest.raises(TypeError):
        initial_params(lambda x, theta: x)


def test_resolve_chains():
    first = TrialSolution(lambda x, theta: x[:, 0], [0.0, 1.0])
    second = TrialSolution(lambda x, theta: x[:, 0], [2.0])

    phis, params = resolve_chains([first, second])
    assert len(phis) == 2
    assert parameter_lengths(params) == [2, 1]

    _, params = resolve_chains(first, init_params=[5.0, 6.0, 7.0])
    np.testing.assert_array_equal(params[0], [5.0, 6.0, 7.0])

    with pytest.raises(ValueError):
        resolve_chains([first, second], init_params=[np.zeros(2)])
