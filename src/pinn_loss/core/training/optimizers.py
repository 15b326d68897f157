"""
Optimizer Adapters for PINN-Loss.

Hand a compiled OptimizationProblem to an L-BFGS implementation, either
scipy's L-BFGS-B or TensorFlow Probability's ``lbfgs_minimize``. The
adapters only map the flat-parameter objective onto each optimizer's
calling convention; iteration caps are the only stopping control.
"""

from typing import Any, Callable, Optional, Tuple
import numpy as np
import tensorflow as tf
from scipy.optimize import minimize
from tqdm import tqdm

try:
    import tensorflow_probability as tfp
    TFP_AVAILABLE = True
except ImportError:
    tfp = None
    TFP_AVAILABLE = False


def lbfgs_optimizer_scipy(
    problem,
    max_iter: int = 1000,
    verbose: bool = True,
    callback: Optional[Callable] = None,
    logger=None
) -> Any:
    """L-BFGS optimizer using scipy.optimize.minimize.

    Args:
        problem: OptimizationProblem returned by discretize
        max_iter: Maximum number of L-BFGS iterations (default: 1000)
        verbose: Whether to show progress bar (default: True)
        callback: Optional callback called after each iteration
                 Signature: callback(current_params) -> None
        logger: Optional LossLogger recording the terms of the last objective
                evaluation after each iteration

    Returns:
        scipy.optimize.OptimizeResult; ``result.x`` holds the final parameters

    Note:
        - The objective is called many times per iteration for line search
        - Parameters and gradients are float64 for scipy compatibility

    Example:
        >>> problem = discretize(pde_system, PhysicsInformedNN(chain))
        >>> result = lbfgs_optimizer_scipy(problem, max_iter=500)
        >>> theta = result.x
    """
    w0 = np.asarray(problem.initial_params, dtype=np.float64)

    def loss_and_grad(w_flat: np.ndarray) -> Tuple[float, np.ndarray]:
        return problem.value_and_gradient(w_flat)

    pbar = tqdm(total=max_iter, desc="L-BFGS (scipy)", disable=not verbose)
    iteration = [0]

    def lbfgs_callback(xk: np.ndarray) -> None:
        iteration[0] += 1
        pbar.update(1)
        if logger is not None:
            logger.log_problem(iteration[0], problem)
            pbar.set_postfix(loss=f"{logger.last['total']:.3e}")
        if callback is not None:
            callback(xk)

    result = minimize(
        fun=loss_and_grad,
        x0=w0,
        jac=True,
        method='L-BFGS-B',
        callback=lbfgs_callback,
        options={
            'maxiter': max_iter,
            'disp': False,
            'gtol': 0.0,
            'ftol': 0.0,
            'maxfun': int(1e9)
        }
    )

    pbar.close()

    if verbose:
        print(
            f"L-BFGS Complete: "
            f"Loss={float(result.fun):.4e}, "
            f"Iterations={int(result.nit)}, "
            f"Message={result.message}"
        )

    return result


def lbfgs_optimizer_tfp(
    problem,
    max_iter: int = 3000,
    tolerance: float = 1e-12,
    verbose: bool = True,
    line_search_iterations: int = 50,
) -> Any:
    """L-BFGS optimizer using TensorFlow Probability.

    Runs eagerly, so objectives with sampling or quadrature side effects
    behave as they do under scipy.

    Args:
        problem: OptimizationProblem returned by discretize
        max_iter: Maximum number of L-BFGS iterations (default: 3000)
        tolerance: Gradient norm tolerance (default: 1e-12)
        verbose: Whether to print progress (default: True)
        line_search_iterations: Maximum line search iterations (default: 50)

    Returns:
        TFP LBfgsOptimizerResults; ``results.position`` holds the final parameters

    Raises:
        RuntimeError: If TensorFlow Probability is not installed
    """
    if not TFP_AVAILABLE:
        raise RuntimeError(
            "lbfgs_optimizer_tfp requires TensorFlow Probability. "
            "Install with: pip install tensorflow-probability"
        )

    def value_and_gradients(w: tf.Tensor) -> Tuple[tf.Tensor, tf.Tensor]:
        with tf.GradientTape() as tape:
            tape.watch(w)
            loss = tf.cast(problem.objective(w), w.dtype)

            # Clamp non-finite values
            loss = tf.where(
                tf.math.is_finite(loss),
                loss,
                tf.constant(1e10, dtype=w.dtype)
            )

        grad = tape.gradient(loss, w)
        if grad is None:
            grad = tf.zeros_like(w)
        grad = tf.where(tf.math.is_finite(grad), grad, tf.zeros_like(grad))
        return loss, grad

    w0 = tf.constant(np.asarray(problem.initial_params, dtype=np.float64))

    if verbose:
        print(f"\nStarting TFP L-BFGS with {len(problem.initial_params)} parameters...")

    results = tfp.optimizer.lbfgs_minimize(
        value_and_gradients_function=value_and_gradients,
        initial_position=w0,
        max_iterations=max_iter,
        tolerance=tolerance,
        f_relative_tolerance=1e-12,
        x_tolerance=1e-15,
        max_line_search_iterations=line_search_iterations,
        parallel_iterations=1,
    )

    if verbose:
        print(
            f"L-BFGS Complete: "
            f"Converged={bool(results.converged.numpy())}, "
            f"Iterations={int(results.num_iterations.numpy())}"
        )

    return results


def check_tfp_availability() -> bool:
    """Check if TensorFlow Probability is available.

    Example:
        >>> optimizer_fn = lbfgs_optimizer_tfp if check_tfp_availability() else lbfgs_optimizer_scipy
    """
    return TFP_AVAILABLE


__all__ = [
    'lbfgs_optimizer_scipy',
    'lbfgs_optimizer_tfp',
    'check_tfp_availability',
    'TFP_AVAILABLE'
]
