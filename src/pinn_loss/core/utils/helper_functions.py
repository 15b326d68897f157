"""
Helper Functions for PINN-Loss.

General-purpose numeric utilities shared by the symbolic and the
discretization layers: finite-difference step, dtype handling, grid spans
and Cartesian products, and reproducible seeding.
"""

from itertools import product
from typing import Sequence, Union

import numpy as np
import tensorflow as tf


# Finite-difference step: cube root of float32 machine epsilon
FD_EPSILON = float(np.cbrt(np.finfo(np.float32).eps))


def unit_perturbation(dim: int, index: int) -> tuple:
    """Perturbation vector with FD_EPSILON in slot ``index`` (1-based).

    Args:
        dim: Length of the coordinate vector
        index: 1-based slot of the differentiation variable

    Returns:
        Tuple of floats, zero everywhere except ``index``

    Example:
        >>> unit_perturbation(3, 2)
        (0.0, 0.0049215667, 0.0)
    """
    if not 1 <= index <= dim:
        raise IndexError(f"Perturbation slot {index} outside 1..{dim}")
    eps = [0.0] * dim
    eps[index - 1] = FD_EPSILON
    return tuple(eps)


def resolve_dtype(dtype: Union[str, tf.DType, None]) -> tf.DType:
    """Map 'float32' / 'float64' / tf dtypes to a floating tf.DType."""
    if dtype is None:
        return tf.float64
    resolved = tf.as_dtype(dtype)
    if not resolved.is_floating:
        raise ValueError(f"Expected a floating dtype, got {resolved.name}")
    return resolved


def discretized_span(lower: float, upper: float, dx: float) -> np.ndarray:
    """Grid ``lower, lower+dx, ..., upper`` (upper included when reached).

    Point count is computed with a small tolerance so that spans such as
    ``0:0.1:1`` contain exactly 11 points despite float rounding.

    Example:
        >>> discretized_span(0.0, 1.0, 0.25)
        array([0.  , 0.25, 0.5 , 0.75, 1.  ])
    """
    if dx <= 0:
        raise ValueError(f"Grid step must be positive, got {dx}")
    n_steps = int(np.floor((upper - lower) / dx + 1e-9))
    return lower + dx * np.arange(n_steps + 1, dtype=np.float64)


def cartesian_product(spans: Sequence[np.ndarray]) -> np.ndarray:
    """Cartesian product of 1-D spans as an ``(N, len(spans))`` array.

    An empty list of spans yields a single zero-dimensional point,
    shape ``(1, 0)``.
    """
    if len(spans) == 0:
        return np.zeros((1, 0), dtype=np.float64)
    points = list(product(*[np.asarray(s, dtype=np.float64) for s in spans]))
    if not points:
        return np.zeros((0, len(spans)), dtype=np.float64)
    return np.asarray(points, dtype=np.float64)


def set_random_seed(seed: int = 42) -> None:
    """Set random seed for reproducibility across all libraries.

    Sets seeds for:
    - Python's random module
    - NumPy
    - TensorFlow and Keras (weight initializers)

    Args:
        seed: Random seed value (default: 42)
    """
    import os
    import random

    os.environ['PYTHONHASHSEED'] = str(seed)
    random.seed(seed)
    np.random.seed(seed)
    tf.random.set_seed(seed)
    tf.keras.utils.set_random_seed(seed)


__all__ = [
    'FD_EPSILON',
    'unit_perturbation',
    'resolve_dtype',
    'discretized_span',
    'cartesian_product',
    'set_random_seed'
]
