"""
Discretization Driver for PINN-Loss.

Compiles a symbolic PDE system plus a trial solution and a training
strategy into a scalar objective over a flat parameter vector:

    objective(theta) = pde_loss(theta) + bc_loss(theta)

Example:
    >>> (x, y), u = variables('x y'), DependentVariable('u')
    >>> Dxx, Dyy = Differential(x) ** 2, Differential(y) ** 2
    >>> eq = (Dxx(u(x, y)) + Dyy(u(x, y))).equals(-sin(pi * x) * sin(pi * y))
    >>> bcs = [u(0, y).equals(0), u(1, y).equals(0), u(x, 0).equals(0), u(x, 1).equals(0)]
    >>> domains = [Domain(x, Interval(0, 1)), Domain(y, Interval(0, 1))]
    >>> system = PDESystem(eq, bcs, domains, [x, y], [u])
    >>> disc = PhysicsInformedNN(build_chain(2), strategy=GridTraining(dx=0.1))
    >>> objective, theta0 = discretize(system, disc)
"""

from dataclasses import dataclass, field, replace
from typing import Any, Callable, Dict, List, Optional, Union

import numpy as np
import tensorflow as tf

from pinn_loss.core.errors import DimensionalityError, ParameterLengthMismatchError
from pinn_loss.core.models.trial_solution import resolve_chains
from pinn_loss.core.utils.helper_functions import resolve_dtype
from pinn_loss.discretization.aggregators import get_boundary_loss_function, get_loss_function
from pinn_loss.discretization.loss_builder import ResidualFunction
from pinn_loss.discretization.strategies import (
    GridTraining,
    QuadratureTraining,
    QuasiRandomTraining,
    StochasticTraining,
    TrainingStrategy,
)
from pinn_loss.discretization.training_sets import generate_training_sets, get_bounds
from pinn_loss.symbolic.boundary import check_boundary_conditions, get_bc_variables
from pinn_loss.symbolic.expressions import Expr
from pinn_loss.symbolic.registry import get_vars
from pinn_loss.symbolic.system import PDESystem
from pinn_loss.symbolic.transformer import parse_equation, parse_equations


@dataclass
class PhysicsInformedNN:
    """Discretization settings: trial solution(s) and training strategy.

    Attributes:
        chain: Keras model or TrialSolution, or a list with one per
            dependent variable
        init_params: Initial parameters (default: taken from the chain(s))
        phi: Trial solution(s) ``phi(x, theta)`` (default: derived from chain)
        derivative: Derivative operator (default: numeric_derivative)
        strategy: Training strategy (default: GridTraining())
        seed: Seed or numpy Generator for the sampling strategies
        dtype: Evaluation dtype (default: float64)
    """

    chain: Any
    init_params: Optional[Any] = None
    phi: Optional[Union[Callable, List[Callable]]] = None
    derivative: Optional[Callable] = None
    strategy: TrainingStrategy = field(default_factory=GridTraining)
    seed: Optional[Union[int, np.random.Generator]] = None
    dtype: Any = None


@dataclass
class OptimizationProblem:
    """Compiled objective with its initial parameter vector.

    Unpacks as ``objective, initial_params = problem``.

    Attributes:
        objective: ``objective(theta, p=None)`` returning a scalar tensor
        initial_params: Flat float64 initial parameter vector
        pde_loss_function: PDE term of the objective
        bc_loss_function: Boundary term of the objective
        last_terms: Terms of the most recent objective evaluation, keyed
            'pde' and 'boundary'
    """

    objective: Callable
    initial_params: np.ndarray
    pde_loss_function: Callable
    bc_loss_function: Callable
    last_terms: Dict[str, float] = field(default_factory=dict)

    def __iter__(self):
        return iter((self.objective, self.initial_params))

    def __call__(self, theta, p=None):
        return self.objective(theta, p)

    def value_and_gradient(self, theta: np.ndarray):
        """Objective value and parameter gradient as float64 NumPy values.

        Raises:
            ValueError: If the objective does not depend on the parameters
        """
        theta_tf = tf.constant(np.asarray(theta, dtype=np.float64))
        with tf.GradientTape() as tape:
            tape.watch(theta_tf)
            loss = self.objective(theta_tf)
        grad = tape.gradient(loss, theta_tf)
        if grad is None:
            raise ValueError("Objective is not differentiable with respect to the parameters")
        return float(loss.numpy()), np.asarray(grad.numpy(), dtype=np.float64)


def rescale_point_count(
    number_of_points: int,
    boundary_dim: int,
    pde_dim: int,
    rounded: bool = True
) -> Union[int, float]:
    """Boundary point count matching the PDE sampling density.

    ``number_of_points ** (boundary_dim / pde_dim)``, or 1 for a boundary
    without free variables. StochasticTraining keeps the fractional count
    (``rounded=False``): it normalizes by it and draws its rounded value.

    Example:
        >>> rescale_point_count(100, 1, 2)
        10
        >>> rescale_point_count(1000, 1, 2, rounded=False)
        31.622776601683793
    """
    if boundary_dim == 0:
        return 1
    count = number_of_points ** (boundary_dim / pde_dim)
    if not rounded:
        return count
    return max(1, int(round(count)))


def _check_dimensionality(strategy: TrainingStrategy, dim: int) -> None:
    if isinstance(strategy, QuadratureTraining) and dim < strategy.min_dim:
        raise DimensionalityError(
            f"Quadrature algorithm '{strategy.algorithm}' needs a domain of at least "
            f"{strategy.min_dim} dimensions, got {dim}"
        )


def _check_parameter_counts(chain, params: List[np.ndarray]) -> None:
    chains = list(chain) if isinstance(chain, (list, tuple)) else [chain]
    for i, (c, p) in enumerate(zip(chains, params)):
        if isinstance(c, tf.keras.Model):
            n_weights = int(sum(np.prod(v.shape) for v in c.trainable_variables))
            if n_weights != p.size:
                raise ParameterLengthMismatchError(
                    f"Chain #{i + 1} has {n_weights} trainable parameters, "
                    f"but its initial parameter vector has length {p.size}"
                )


def symbolic_discretize(pde_system: PDESystem, discretization: Optional[PhysicsInformedNN] = None):
    """Rewrite a PDE system into canonical residual trees.

    Args:
        pde_system: Symbolic PDE system
        discretization: Unused; accepted for symmetry with discretize

    Returns:
        Tuple ``(pde_trees, bc_trees)``: one tree (or a list for systems) and
        one tree per boundary condition
    """
    registry = get_vars(pde_system.indvars, pde_system.depvars)
    bcs = check_boundary_conditions(pde_system.bcs)
    pde_trees = parse_equations(pde_system.eqs, registry)
    bc_trees: List[Expr] = [parse_equation(bc, registry) for bc in bcs]
    return pde_trees, bc_trees


def discretize(
    pde_system: PDESystem,
    discretization: PhysicsInformedNN,
    verbose: bool = False
) -> OptimizationProblem:
    """Compile a PDE system into an optimization problem.

    Args:
        pde_system: Symbolic PDE system
        discretization: Trial solution(s) and training strategy
        verbose: Print a compile summary (default: False)

    Returns:
        OptimizationProblem, unpacking as ``(objective, initial_params)``

    Raises:
        MalformedBoundaryConditionError: If a boundary condition is nested
        DimensionalityError: If the quadrature algorithm needs more dimensions
        ParameterLengthMismatchError: If initial parameters do not match the chains
        UnrecognizedExpressionPatternError: If an equation cannot be rewritten
    """
    strategy = discretization.strategy
    dtype = resolve_dtype(discretization.dtype)

    bcs = check_boundary_conditions(pde_system.bcs)
    registry = get_vars(pde_system.indvars, pde_system.depvars)
    _check_dimensionality(strategy, registry.dim)

    # ==========================================================================
    # Trial solutions and parameters
    # ==========================================================================

    phis, params = resolve_chains(discretization.chain, discretization.init_params)
    if discretization.phi is not None:
        phis = list(discretization.phi) if isinstance(discretization.phi, (list, tuple)) \
            else [discretization.phi]
    _check_parameter_counts(discretization.chain, params)
    if len(phis) != registry.n_depvars:
        raise ParameterLengthMismatchError(
            f"Got {len(phis)} trial solution(s) for {registry.n_depvars} dependent variable(s)"
        )
    param_lengths = [p.size for p in params]
    flat_init_params = np.concatenate(params).astype(np.float64)

    # ==========================================================================
    # Residual functions
    # ==========================================================================

    pde_residual = ResidualFunction(
        parse_equations(pde_system.eqs, registry),
        registry,
        phis,
        derivative=discretization.derivative,
        param_lengths=param_lengths,
        dtype=dtype
    )
    bc_variables = get_bc_variables(bcs, registry)
    bc_residuals = [
        ResidualFunction(
            parse_equation(bc, registry),
            registry,
            phis,
            derivative=discretization.derivative,
            param_lengths=param_lengths,
            bc_indvars=bt,
            dtype=dtype
        )
        for bc, bt in zip(bcs, bc_variables)
    ]

    # ==========================================================================
    # Point sources
    # ==========================================================================

    bc_strategy = strategy
    if strategy.uses_grid:
        sets = generate_training_sets(pde_system.domains, strategy.dx, bcs, registry)
        pde_source, bc_source = sets.pde_train_set, sets.bcs_train_sets
        pde_summary = f"{len(pde_source)} PDE points"
        bc_summary = f"{[len(s) for s in bc_source]} boundary points"
    else:
        bounds = get_bounds(pde_system.domains, bcs, registry)
        pde_source, bc_source = bounds.pde_bounds, bounds.bcs_bounds
        if isinstance(strategy, (StochasticTraining, QuasiRandomTraining)) and bc_variables:
            bc_strategy = replace(
                strategy,
                number_of_points=rescale_point_count(
                    strategy.number_of_points, len(bc_variables[0]), registry.dim,
                    rounded=isinstance(strategy, QuasiRandomTraining)
                )
            )
        pde_summary = f"bounds {pde_source[0].tolist()} to {pde_source[1].tolist()}"
        bc_summary = f"{len(bc_residuals)} boundary domains"

    # ==========================================================================
    # Losses and objective
    # ==========================================================================

    rng = np.random.default_rng(discretization.seed)
    pde_loss_function = get_loss_function(pde_residual, pde_source, strategy, rng)
    bc_loss_function = get_boundary_loss_function(bc_residuals, bc_source, bc_strategy, rng)

    last_terms: Dict[str, float] = {}

    def objective(theta, p=None):
        theta = tf.convert_to_tensor(theta)
        pde_loss = tf.cast(pde_loss_function(theta), dtype)
        bc_loss = tf.cast(bc_loss_function(theta), dtype)
        last_terms['pde'] = float(pde_loss.numpy())
        last_terms['boundary'] = float(bc_loss.numpy())
        return pde_loss + bc_loss

    if verbose:
        n_eqs = len(pde_system.eqs) if pde_system.is_system else 1
        print(
            f"Discretized '{pde_system.name}' with {strategy.name}: "
            f"dim={registry.dim}, {n_eqs} equation(s), {len(bcs)} boundary condition(s), "
            f"{flat_init_params.size} parameters; {pde_summary}, {bc_summary}"
        )

    return OptimizationProblem(
        objective=objective,
        initial_params=flat_init_params,
        pde_loss_function=pde_loss_function,
        bc_loss_function=bc_loss_function,
        last_terms=last_terms
    )


__all__ = [
    'PhysicsInformedNN',
    'OptimizationProblem',
    'rescale_point_count',
    'symbolic_discretize',
    'discretize'
]
