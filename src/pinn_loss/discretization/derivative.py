"""
Numeric Derivative Operator for PINN-Loss.

Differentiates a trial solution with respect to its coordinates by
recursive central finite differences. Higher order and mixed partials are
central differences of central differences, each level perturbing along
its own recorded direction.
"""

from typing import Callable, Sequence

import tensorflow as tf

from pinn_loss.core.utils.helper_functions import FD_EPSILON


def numeric_derivative(
    phi: Callable,
    u: Callable,
    x: tf.Tensor,
    perturbations: Sequence[Sequence[float]],
    order: int,
    theta: tf.Tensor
) -> tf.Tensor:
    """Central finite-difference derivative of ``u`` at ``x``.

    Level ``order`` perturbs along ``perturbations[order - 1]``:

        D(1)     = (u(x + e) - u(x - e)) / (2 * FD_EPSILON)
        D(order) = (D(order - 1)(x + e) - D(order - 1)(x - e)) / (2 * FD_EPSILON)

    Args:
        phi: Trial solution ``phi(x, theta) -> outputs``
        u: Scalar accessor ``u(x, theta, phi) -> values``
        x: Coordinates, shape ``(N, D)``
        perturbations: One D-length perturbation vector per order
        order: Derivative order (>= 1)
        theta: Parameters of this trial solution

    Returns:
        Derivative values, shape ``(N,)``

    Example:
        >>> phi = lambda x, th: x ** 2
        >>> u = lambda x, th, phi: phi(x, th)[..., 0]
        >>> x = tf.constant([[2.0]], tf.float64)
        >>> numeric_derivative(phi, u, x, [(FD_EPSILON,)], 1, None)  # ~ 4.0
    """
    if order < 1:
        raise ValueError(f"Derivative order must be >= 1, got {order}")

    eps = tf.constant(perturbations[order - 1], dtype=x.dtype)
    denominator = tf.constant(2.0 * FD_EPSILON, dtype=x.dtype)

    if order > 1:
        return (
            numeric_derivative(phi, u, x + eps, perturbations, order - 1, theta)
            - numeric_derivative(phi, u, x - eps, perturbations, order - 1, theta)
        ) / denominator

    return (u(x + eps, theta, phi) - u(x - eps, theta, phi)) / denominator


def get_numeric_derivative() -> Callable:
    """Return the default derivative operator.

    Custom operators passed to PhysicsInformedNN must share the signature
    ``derivative(phi, u, x, perturbations, order, theta)``.
    """
    return numeric_derivative


__all__ = ['numeric_derivative', 'get_numeric_derivative']
