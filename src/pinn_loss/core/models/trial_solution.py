"""
Trial-Solution Adapter for PINN-Loss.

Wraps an external function approximator into the uniform call
``phi(x, theta) -> outputs`` where ``theta`` is a flat parameter vector,
and exposes the scalar accessor ``u(x, theta, phi) -> phi(x, theta)[..., 0]``.

Supported approximators:
- Keras models (evaluated statelessly, so gradients flow into ``theta``)
- TrialSolution wrappers around plain callables with their own parameters
- Plain callables ``fn(x, theta)`` (initial parameters supplied separately)
"""

from dataclasses import dataclass
from typing import Any, Callable, List, Optional, Sequence

import numpy as np
import tensorflow as tf


@dataclass
class TrialSolution:
    """Plain callable trial solution with its initial parameter vector.

    Attributes:
        fn: Callable ``fn(x, theta)`` returning ``(N,)`` or ``(N, n_out)``
        initial_params: Flat initial parameter vector
        name: Optional label used in summaries
    """

    fn: Callable
    initial_params: np.ndarray
    name: str = 'trial_solution'

    def __post_init__(self):
        self.initial_params = np.asarray(self.initial_params, dtype=np.float64).ravel()

    def __call__(self, x, theta):
        return self.fn(x, theta)

    @property
    def n_params(self) -> int:
        return int(self.initial_params.size)


def build_chain(
    input_dim: int,
    output_dim: int = 1,
    n_hidden_layers: int = 2,
    n_neurons: int = 16,
    activation: str = 'tanh',
    use_residual: bool = False,
    residual_freq: int = 2,
    dtype: str = 'float32'
) -> tf.keras.Model:
    """Build a feed-forward network usable as a trial solution.

    Creates a dense network with glorot-normal initialization and optional
    residual connections every ``residual_freq`` hidden layers.

    Args:
        input_dim: Number of independent variables
        output_dim: Number of outputs (default: 1)
        n_hidden_layers: Number of hidden layers (default: 2)
        n_neurons: Neurons per hidden layer (default: 16)
        activation: Hidden activation (default: 'tanh')
        use_residual: Whether to add residual connections (default: False)
        residual_freq: Frequency of residual connections (default: 2)
        dtype: Layer dtype (default: 'float32')

    Returns:
        Keras model mapping ``(N, input_dim) -> (N, output_dim)``

    Example:
        >>> chain = build_chain(input_dim=2, n_hidden_layers=2, n_neurons=16)
        >>> theta0 = initial_params(chain)
    """
    inputs = tf.keras.Input(shape=(input_dim,), dtype=dtype)

    x = tf.keras.layers.Dense(
        n_neurons,
        activation=activation,
        kernel_initializer='glorot_normal',
        dtype=dtype
    )(inputs)

    for i in range(n_hidden_layers - 1):
        if use_residual and (i % residual_freq) == 0:
            residual = x

        x_inner = tf.keras.layers.Dense(
            n_neurons,
            activation=activation,
            kernel_initializer='glorot_normal',
            dtype=dtype
        )(x)

        if use_residual and (i % residual_freq) != 0:
            x = tf.keras.layers.Add(dtype=dtype)([x_inner, residual])
        else:
            x = x_inner

    outputs = tf.keras.layers.Dense(output_dim, activation=None, dtype=dtype)(x)

    return tf.keras.Model(inputs, outputs)


def initial_params(chain: Any) -> np.ndarray:
    """Flatten the initial parameters of a chain into a float64 vector.

    Args:
        chain: Keras model or TrialSolution

    Returns:
        1-D NumPy array

    Raises:
        TypeError: For plain callables, which carry no parameters
    """
    if isinstance(chain, TrialSolution):
        return chain.initial_params.copy()
    if isinstance(chain, tf.keras.Model):
        return np.concatenate(
            [np.asarray(v.numpy()).ravel() for v in chain.trainable_variables]
        ).astype(np.float64)
    raise TypeError(
        f"Cannot infer initial parameters from {type(chain).__name__}; "
        "pass init_params explicitly"
    )


def _keras_phi(chain: tf.keras.Model) -> Callable:
    variables = chain.trainable_variables
    shapes = [tuple(v.shape) for v in variables]
    sizes = [int(np.prod(s)) for s in shapes]
    idxs = np.cumsum([0] + sizes)
    model_dtype = variables[0].dtype if variables else 'float32'

    def unpack(theta: tf.Tensor) -> List[tf.Tensor]:
        return [
            tf.reshape(theta[idxs[i]:idxs[i + 1]], shapes[i])
            for i in range(len(variables))
        ]

    def phi(x: tf.Tensor, theta: tf.Tensor) -> tf.Tensor:
        non_trainable = [v.value for v in chain.non_trainable_variables]
        outputs, _ = chain.stateless_call(
            unpack(tf.cast(theta, model_dtype)),
            non_trainable,
            tf.cast(x, model_dtype)
        )
        return tf.cast(outputs, x.dtype)

    return phi


def get_phi(chain: Any) -> Callable:
    """Build the trial solution ``phi(x, theta) -> outputs``.

    The returned callable accepts a coordinate batch ``(N, D)`` or a single
    coordinate vector ``(D,)`` and always returns outputs with a trailing
    output axis.
    """
    if isinstance(chain, tf.keras.Model):
        base = _keras_phi(chain)
    elif callable(chain):
        base = chain
    else:
        raise TypeError(f"Trial solution must be a Keras model or callable, got {type(chain).__name__}")

    def phi(x, theta):
        x = tf.convert_to_tensor(x)
        single = x.shape.rank == 1
        if single:
            x = x[tf.newaxis, :]
        out = tf.convert_to_tensor(base(x, theta))
        if out.shape.rank == 1:
            out = out[:, tf.newaxis]
        return out[0] if single else out

    return phi


def get_u() -> Callable:
    """Scalar trial value accessor: first output of ``phi``."""
    def u(x, theta, phi):
        return phi(x, theta)[..., 0]
    return u


def parameter_lengths(init_params: Sequence) -> List[int]:
    """Length of each per-dependent-variable parameter vector."""
    return [int(np.asarray(p).size) for p in init_params]


def split_init_params(init_params: Any, n_chains: int) -> List[np.ndarray]:
    """Normalize initial parameters into one float64 vector per chain.

    A single chain accepts a flat vector (array, or list of numbers).
    """
    if n_chains == 1 and (
        not isinstance(init_params, (list, tuple))
        or all(np.ndim(p) == 0 for p in init_params)
    ):
        return [np.asarray(init_params, dtype=np.float64).ravel()]
    return [np.asarray(p, dtype=np.float64).ravel() for p in init_params]


def resolve_chains(chain: Any, init_params: Optional[Any] = None):
    """Normalize chain(s) and initial parameters.

    Args:
        chain: One approximator, or a list with one per dependent variable
        init_params: Optional initial parameters (one vector, or one per chain)

    Returns:
        Tuple ``(phis, init_params_list)`` with one entry per chain
    """
    chains = list(chain) if isinstance(chain, (list, tuple)) else [chain]

    if init_params is None:
        params = [initial_params(c) for c in chains]
    else:
        params = split_init_params(init_params, len(chains))

    if len(params) != len(chains):
        raise ValueError(
            f"Got {len(params)} initial parameter vectors for {len(chains)} trial solutions"
        )

    return [get_phi(c) for c in chains], params


__all__ = [
    'TrialSolution',
    'build_chain',
    'initial_params',
    'get_phi',
    'get_u',
    'parameter_lengths',
    'split_init_params',
    'resolve_chains'
]
