"""
Strategy Loss Aggregators for PINN-Loss.

Reduce residual functions and a point source (grid or bounds) into a
scalar loss ``loss(theta)``. Let R(x, theta) be the residual (a vector R_k
for systems) and tau the normalization of the strategy:

    Strategy      tau               single equation              list / system
    Grid          1/N               tau*sum_x (sum_k R)^2        see below
    IterTraining  1/N               same, over a growing prefix  same
    Stochastic    1/P               tau*sum (sum_k R)^2          per-equation draws, summed
    QuasiRandom   1/P               one random minibatch         one minibatch set per equation
    Quadrature    1/10^D            integral of (sum_k R)^2      per-equation integrals, summed

For a PDE system on a grid the loss is
``tau/2 * (sum_x (sum_k R_k)^2 + sum_x sum_k R_k^2)``. For lists of boundary
conditions on a grid, tau is 1 over the size of the first condition's set.
"""

from typing import Callable, List, Optional, Sequence

import numpy as np
import tensorflow as tf
from scipy.integrate import cubature, nquad
from scipy.stats import qmc

from pinn_loss.discretization.strategies import (
    GridTraining,
    IterTraining,
    QuadratureTraining,
    QuasiRandomTraining,
    StochasticTraining,
    TrainingStrategy,
)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _sum_equations(residual: tf.Tensor) -> tf.Tensor:
    """Sum a ``(N, K)`` system residual over equations; pass ``(N,)`` through."""
    if residual.shape.rank == 2:
        return tf.reduce_sum(residual, axis=-1)
    return residual


def _sum_squares(residual: tf.Tensor) -> tf.Tensor:
    return tf.reduce_sum(tf.square(residual))


def _dtype_of(residual_fn) -> tf.DType:
    return getattr(residual_fn, 'dtype', tf.float64)


def _zero_loss(dtype: tf.DType) -> Callable:
    def loss(theta):
        return tf.constant(0.0, dtype=dtype)
    return loss


def _draw_count(strategy: StochasticTraining) -> int:
    return max(1, int(round(strategy.number_of_points)))


def _check_nonempty(train_set: np.ndarray, label: str) -> None:
    if len(train_set) == 0:
        raise ValueError(f"{label} training set is empty; refine the grid step")


def generate_design_matrices(
    n: int,
    lb: np.ndarray,
    ub: np.ndarray,
    sampling_method: str,
    num_mats: int,
    rng: Optional[np.random.Generator] = None
) -> List[np.ndarray]:
    """Generate ``num_mats`` independent ``(n, d)`` samples in ``[lb, ub]``.

    Args:
        n: Points per matrix
        lb: Lower bounds, length d
        ub: Upper bounds, length d
        sampling_method: 'uniform', 'sobol', 'halton' or 'latin_hypercube'
        num_mats: Number of matrices
        rng: NumPy random generator (default: fresh unseeded generator)

    Returns:
        List of design matrices

    Example:
        >>> mats = generate_design_matrices(64, [0, 0], [1, 2], 'sobol', 3,
        ...                                 np.random.default_rng(0))
        >>> len(mats), mats[0].shape
        (3, (64, 2))
    """
    rng = rng if rng is not None else np.random.default_rng()
    lb = np.asarray(lb, dtype=np.float64)
    ub = np.asarray(ub, dtype=np.float64)
    d = lb.size

    matrices = []
    for _ in range(num_mats):
        if d == 0:
            matrices.append(np.zeros((n, 0), dtype=np.float64))
            continue
        if sampling_method == 'uniform':
            unit = rng.random((n, d))
        elif sampling_method == 'sobol':
            unit = qmc.Sobol(d=d, scramble=True, rng=rng).random(n)
        elif sampling_method == 'halton':
            unit = qmc.Halton(d=d, scramble=True, rng=rng).random(n)
        elif sampling_method == 'latin_hypercube':
            unit = qmc.LatinHypercube(d=d, rng=rng).random(n)
        else:
            raise ValueError(f"Unknown sampling method '{sampling_method}'")
        matrices.append(lb + (ub - lb) * unit)
    return matrices


def _integrate(integrand: Callable, lb: np.ndarray, ub: np.ndarray, strategy: QuadratureTraining) -> np.ndarray:
    """Integrate a batched integrand over a box.

    ``integrand(x)`` maps points ``(n, d)`` to values ``(n,)`` or
    ``(n, m)``; the estimate has shape ``()`` or ``(m,)``.
    """
    d = len(lb)
    if d == 0:
        # Point condition: the "integral" is the value at the single point
        return np.asarray(integrand(np.zeros((1, 0)))[0], dtype=np.float64)

    if strategy.algorithm == 'nquad':
        return _integrate_nquad(integrand, lb, ub, strategy)

    rule = strategy.algorithm
    if rule == 'genz-malik' and d < 2:
        # Genz-Malik is undefined in one dimension
        rule = 'gk21'

    result = cubature(
        integrand,
        lb,
        ub,
        rule=rule,
        rtol=strategy.reltol,
        atol=strategy.abstol,
        max_subdivisions=strategy.maxiters
    )
    return np.asarray(result.estimate, dtype=np.float64)


def _integrate_nquad(integrand: Callable, lb: np.ndarray, ub: np.ndarray, strategy: QuadratureTraining) -> np.ndarray:
    # nquad integrates scalar functions, so vector integrands go one component at a time
    midpoint = (np.asarray(lb) + np.asarray(ub)) / 2.0
    shape = np.shape(integrand(midpoint[np.newaxis, :])[0])
    estimate = np.zeros(int(np.prod(shape)))

    for i in range(estimate.size):
        value, _ = nquad(
            lambda *x: float(np.ravel(integrand(np.asarray(x, dtype=np.float64)[np.newaxis, :])[0])[i]),
            list(zip(lb, ub)),
            opts={
                'epsabs': strategy.abstol,
                'epsrel': strategy.reltol,
                'limit': strategy.maxiters,
            }
        )
        estimate[i] = value
    return estimate.reshape(shape)


def _batched(fn: Callable, batch: int) -> Callable:
    if batch <= 0:
        return fn

    def evaluate(x: np.ndarray) -> np.ndarray:
        chunks = [fn(x[i:i + batch]) for i in range(0, len(x), batch)]
        return np.concatenate(chunks, axis=0)

    return evaluate


# ---------------------------------------------------------------------------
# Grid strategies
# ---------------------------------------------------------------------------


def _grid_residual_loss(residual_fn, points: tf.Tensor, theta, tau, system: bool) -> tf.Tensor:
    residual = residual_fn(points, theta)
    if system:
        return tau / 2.0 * (
            _sum_squares(_sum_equations(residual)) + _sum_squares(residual)
        )
    return tau * _sum_squares(_sum_equations(residual))


def grid_loss(residual_fn, train_set: np.ndarray, strategy: GridTraining, rng=None) -> Callable:
    """Grid loss of one equation or a PDE system."""
    _check_nonempty(train_set, 'PDE')
    dtype = _dtype_of(residual_fn)
    points = tf.constant(train_set, dtype=dtype)
    system = getattr(residual_fn, 'is_system', False)
    tau = 1.0 / len(train_set)

    def loss(theta):
        return _grid_residual_loss(residual_fn, points, theta, tau, system)

    return loss


def iter_loss(residual_fn, train_set: np.ndarray, strategy: IterTraining, rng=None) -> Callable:
    """Grid loss over the prefix selected by the strategy's cursor.

    Every call advances ``strategy.cursor`` by 0.5.
    """
    _check_nonempty(train_set, 'PDE')
    dtype = _dtype_of(residual_fn)
    points = tf.constant(train_set, dtype=dtype)
    system = getattr(residual_fn, 'is_system', False)
    n_points = len(train_set)
    tau = 1.0 / n_points

    def loss(theta):
        window = strategy.window(n_points)
        strategy.advance()
        return _grid_residual_loss(residual_fn, points[:window], theta, tau, system)

    return loss


def grid_boundary_loss(residual_fns, train_sets: Sequence[np.ndarray], strategy, rng=None) -> Callable:
    """Grid loss summed over boundary conditions (also used by IterTraining)."""
    if not residual_fns:
        return _zero_loss(tf.float64)
    _check_nonempty(train_sets[0], 'Boundary')
    dtype = _dtype_of(residual_fns[0])
    tau = 1.0 / len(train_sets[0])
    point_sets = [tf.constant(s, dtype=dtype) for s in train_sets]

    def loss(theta):
        return tau * tf.add_n([
            _sum_squares(fn(points, theta)) for fn, points in zip(residual_fns, point_sets)
        ])

    return loss


# ---------------------------------------------------------------------------
# Sampling strategies
# ---------------------------------------------------------------------------


def stochastic_loss(residual_fn, bounds, strategy: StochasticTraining, rng=None) -> Callable:
    """Monte Carlo loss: ``number_of_points`` uniform draws per call."""
    rng = rng if rng is not None else np.random.default_rng()
    lb, ub = (np.asarray(b, dtype=np.float64) for b in bounds)
    n_points = _draw_count(strategy)
    dtype = _dtype_of(residual_fn)
    tau = 1.0 / strategy.number_of_points

    def loss(theta):
        r_points = rng.uniform(lb, ub, size=(n_points, lb.size))
        residual = residual_fn(tf.constant(r_points, dtype=dtype), theta)
        return tau * _sum_squares(_sum_equations(residual))

    return loss


def stochastic_boundary_loss(residual_fns, bounds, strategy: StochasticTraining, rng=None) -> Callable:
    """Monte Carlo loss summed over boundary conditions, drawn independently."""
    if not residual_fns:
        return _zero_loss(tf.float64)
    rng = rng if rng is not None else np.random.default_rng()
    lbs, ubs = bounds
    n_points = _draw_count(strategy)
    dtype = _dtype_of(residual_fns[0])
    tau = 1.0 / strategy.number_of_points

    def loss(theta):
        total = []
        for lb, ub, fn in zip(lbs, ubs, residual_fns):
            r_points = rng.uniform(lb, ub, size=(n_points, len(lb)))
            total.append(_sum_squares(fn(tf.constant(r_points, dtype=dtype), theta)))
        return tau * tf.add_n(total)

    return loss


def quasi_random_loss(residual_fn, bounds, strategy: QuasiRandomTraining, rng=None) -> Callable:
    """Quasi-Monte Carlo loss over one randomly chosen pre-generated minibatch."""
    rng = rng if rng is not None else np.random.default_rng()
    lb, ub = bounds
    dtype = _dtype_of(residual_fn)
    tau = 1.0 / strategy.number_of_points
    minibatches = [
        tf.constant(s, dtype=dtype)
        for s in generate_design_matrices(
            strategy.number_of_points, lb, ub,
            strategy.sampling_method, strategy.number_of_minibatch, rng
        )
    ]

    def loss(theta):
        points = minibatches[rng.integers(len(minibatches))]
        return tau * _sum_squares(_sum_equations(residual_fn(points, theta)))

    return loss


def quasi_random_boundary_loss(residual_fns, bounds, strategy: QuasiRandomTraining, rng=None) -> Callable:
    """Quasi-Monte Carlo loss summed over boundary conditions.

    Each condition gets its own design matrices, generated within its own
    bounds.
    """
    if not residual_fns:
        return _zero_loss(tf.float64)
    rng = rng if rng is not None else np.random.default_rng()
    lbs, ubs = bounds
    dtype = _dtype_of(residual_fns[0])
    tau = 1.0 / strategy.number_of_points
    minibatch_sets = [
        [
            tf.constant(s, dtype=dtype)
            for s in generate_design_matrices(
                strategy.number_of_points, lb, ub,
                strategy.sampling_method, strategy.number_of_minibatch, rng
            )
        ]
        for lb, ub in zip(lbs, ubs)
    ]

    def loss(theta):
        total = []
        for minibatches, fn in zip(minibatch_sets, residual_fns):
            points = minibatches[rng.integers(len(minibatches))]
            total.append(_sum_squares(fn(points, theta)))
        return tau * tf.add_n(total)

    return loss


# ---------------------------------------------------------------------------
# Quadrature
# ---------------------------------------------------------------------------


def _squared_norm(residual: tf.Tensor) -> tf.Tensor:
    """Pointwise ``sum_k R_k^2`` of a ``(N, K)`` residual; ``R^2`` for ``(N,)``."""
    if residual.shape.rank == 2:
        return tf.reduce_sum(tf.square(residual), axis=-1)
    return tf.square(residual)


def _quadrature_integral(
    squared_residual: Callable,
    lb: np.ndarray,
    ub: np.ndarray,
    strategy: QuadratureTraining,
    tau: float,
    dtype: tf.DType
) -> Callable:
    """Differentiable ``tau * integral of squared_residual(x, theta) dx``.

    The forward pass integrates the pointwise squared residual. The
    backward pass integrates its per-point Jacobian with respect to
    ``theta``, a vector-valued integrand, with the same rule and tolerances.
    """
    def value_integrand(theta):
        def evaluate(x: np.ndarray) -> np.ndarray:
            return squared_residual(tf.constant(x, dtype=dtype), theta).numpy()
        return _batched(evaluate, strategy.batch)

    def jacobian_integrand(theta):
        def evaluate(x: np.ndarray) -> np.ndarray:
            with tf.GradientTape() as tape:
                tape.watch(theta)
                values = squared_residual(tf.constant(x, dtype=dtype), theta)
            return tape.jacobian(
                values, theta, unconnected_gradients=tf.UnconnectedGradients.ZERO
            ).numpy()
        return _batched(evaluate, strategy.batch)

    @tf.custom_gradient
    def integral(theta):
        value = _integrate(value_integrand(theta), lb, ub, strategy)

        def grad(upstream, variables=None):
            gradient = _integrate(jacobian_integrand(theta), lb, ub, strategy)
            theta_grad = tf.cast(upstream, theta.dtype) * tf.constant(tau * gradient, dtype=theta.dtype)
            return theta_grad, [tf.zeros_like(v) for v in variables or []]

        return tf.constant(tau * float(value), dtype=dtype), grad

    return integral


def quadrature_loss(residual_fn, bounds, strategy: QuadratureTraining, rng=None) -> Callable:
    """Adaptive quadrature of ``(sum_k R)^2`` over the domain box.

    The loss is differentiable in ``theta``: its gradient is a second
    quadrature, over the parameter Jacobian of the squared residual.
    """
    lb, ub = (np.asarray(b, dtype=np.float64) for b in bounds)
    dtype = _dtype_of(residual_fn)
    tau = 1.0 / 10 ** len(ub)

    def squared_residual(x, theta):
        return tf.square(_sum_equations(residual_fn(x, theta)))

    integral = _quadrature_integral(squared_residual, lb, ub, strategy, tau, dtype)

    def loss(theta):
        return integral(tf.convert_to_tensor(theta))

    return loss


def quadrature_boundary_loss(residual_fns, bounds, strategy: QuadratureTraining, rng=None) -> Callable:
    """Sum of per-condition quadrature losses, normalized by ``10^D * K``."""
    if not residual_fns:
        return _zero_loss(tf.float64)
    lbs, ubs = bounds
    dtype = _dtype_of(residual_fns[0])
    tau = 1.0 / (10 ** len(ubs[0]) * len(ubs))

    integrals = [
        _quadrature_integral(
            lambda x, theta, fn=fn: _squared_norm(fn(x, theta)),
            np.asarray(lb, dtype=np.float64),
            np.asarray(ub, dtype=np.float64),
            strategy,
            tau,
            dtype
        )
        for lb, ub, fn in zip(lbs, ubs, residual_fns)
    ]

    def loss(theta):
        theta = tf.convert_to_tensor(theta)
        return tf.add_n([integral(theta) for integral in integrals])

    return loss


# ---------------------------------------------------------------------------
# Dispatch
# ---------------------------------------------------------------------------


_PDE_AGGREGATORS = {
    GridTraining: grid_loss,
    IterTraining: iter_loss,
    StochasticTraining: stochastic_loss,
    QuasiRandomTraining: quasi_random_loss,
    QuadratureTraining: quadrature_loss,
}

_BOUNDARY_AGGREGATORS = {
    GridTraining: grid_boundary_loss,
    IterTraining: grid_boundary_loss,
    StochasticTraining: stochastic_boundary_loss,
    QuasiRandomTraining: quasi_random_boundary_loss,
    QuadratureTraining: quadrature_boundary_loss,
}


def _lookup(table: dict, strategy: TrainingStrategy) -> Callable:
    for strategy_type, builder in table.items():
        if isinstance(strategy, strategy_type):
            return builder
    raise ValueError(
        f"Unsupported training strategy: {type(strategy).__name__}. "
        f"Must be one of: {[t.__name__ for t in table]}"
    )


def get_loss_function(
    residual_fn,
    point_source,
    strategy: TrainingStrategy,
    rng: Optional[np.random.Generator] = None
) -> Callable:
    """PDE loss ``loss(theta)`` for the given strategy.

    Args:
        residual_fn: Residual function of the PDE (or PDE system)
        point_source: Training set array (grid strategies) or
            ``(lower, upper)`` bounds (other strategies)
        strategy: Training strategy instance
        rng: Random generator for the sampling strategies

    Returns:
        Callable returning a scalar tensor
    """
    return _lookup(_PDE_AGGREGATORS, strategy)(residual_fn, point_source, strategy, rng)


def get_boundary_loss_function(
    residual_fns: Sequence,
    point_sources,
    strategy: TrainingStrategy,
    rng: Optional[np.random.Generator] = None
) -> Callable:
    """Boundary loss ``loss(theta)`` summed over all boundary conditions.

    Args:
        residual_fns: One residual function per boundary condition
        point_sources: List of training sets (grid strategies) or
            ``(lowers, uppers)`` bound lists (other strategies)
        strategy: Training strategy instance
        rng: Random generator for the sampling strategies
    """
    return _lookup(_BOUNDARY_AGGREGATORS, strategy)(list(residual_fns), point_sources, strategy, rng)


__all__ = [
    'generate_design_matrices',
    'grid_loss',
    'iter_loss',
    'grid_boundary_loss',
    'stochastic_loss',
    'stochastic_boundary_loss',
    'quasi_random_loss',
    'quasi_random_boundary_loss',
    'quadrature_loss',
    'quadrature_boundary_loss',
    'get_loss_function',
    'get_boundary_loss_function'
]
