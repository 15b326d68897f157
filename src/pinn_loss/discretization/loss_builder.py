"""
Loss Function Builder for PINN-Loss.

Turns canonical residual trees into callables ``residual(coords, theta)``.
The trees are interpreted directly (no code generation): each call binds
the free independent variables to the columns of ``coords``, splits
``theta`` into per-dependent-variable sub-vectors for systems, and walks
the tree with TensorFlow ops so that parameter gradients can be taken by
the optimizer.

Example, system of PDEs:

    [Dx(u1(x,y)) + 4*Dy(u2(x,y)) ~ 0,
     Dx(u2(x,y)) + 9*Dy(u1(x,y)) ~ 0]

compiles to a callable equivalent to

    theta1, theta2 = theta[0:n1], theta[n1:n1+n2]
    x, y = coords[:, 0], coords[:, 1]
    stack([D(phi1, [x,y], [[e,0]], 1, theta1) + 4*D(phi2, [x,y], [[0,e]], 1, theta2) - 0,
           D(phi2, [x,y], [[e,0]], 1, theta2) + 9*D(phi1, [x,y], [[0,e]], 1, theta1) - 0])
"""

from functools import reduce
from typing import Callable, Dict, List, Optional, Sequence, Union

import numpy as np
import tensorflow as tf

from pinn_loss.core.errors import (
    ParameterLengthMismatchError,
    UnrecognizedExpressionPatternError,
)
from pinn_loss.core.models.trial_solution import get_u, parameter_lengths, split_init_params
from pinn_loss.core.utils.helper_functions import resolve_dtype
from pinn_loss.discretization.derivative import get_numeric_derivative
from pinn_loss.symbolic.expressions import (
    Derivative,
    Equation,
    Eval,
    Expr,
    Literal,
    OpApply,
    VarRef,
)
from pinn_loss.symbolic.registry import VariableRegistry, as_registry
from pinn_loss.symbolic.transformer import parse_equations


_BINARY_OPS: Dict[str, Callable] = {
    '+': tf.add,
    '-': tf.subtract,
    '*': tf.multiply,
    '/': tf.divide,
    '^': tf.pow,
}

_UNARY_OPS: Dict[str, Callable] = {
    'neg': tf.negative,
    'sin': tf.sin,
    'cos': tf.cos,
    'tan': tf.tan,
    'exp': tf.exp,
    'log': tf.math.log,
    'sqrt': tf.sqrt,
    'tanh': tf.tanh,
    'abs': tf.abs,
}


def split_parameters(theta: tf.Tensor, lengths: Sequence[int]) -> List[tf.Tensor]:
    """Split a flat parameter vector into contiguous sub-vectors.

    Offsets are the prefix sums of ``lengths``, so concatenating the result
    in order reproduces ``theta`` exactly.

    Args:
        theta: Flat parameter vector
        lengths: Length of each sub-vector

    Returns:
        List of sub-vectors

    Raises:
        ParameterLengthMismatchError: If the lengths do not sum to len(theta)

    Example:
        >>> split_parameters(tf.range(5.0), [2, 3])
        [<tf.Tensor [0., 1.]>, <tf.Tensor [2., 3., 4.]>]
    """
    total = int(np.sum(lengths))
    n = theta.shape[0]
    if n is None:
        n = int(tf.size(theta))
    if total != n:
        raise ParameterLengthMismatchError(
            f"Parameter sub-vector lengths {list(lengths)} sum to {total}, "
            f"but the flat parameter vector has length {n}"
        )
    offsets = np.cumsum([0] + list(lengths))
    return [theta[offsets[i]:offsets[i + 1]] for i in range(len(lengths))]


def build_symbolic_loss_function(
    eqs: Union[Equation, List[Equation]],
    indvars,
    depvars=None
) -> Union[Expr, List[Expr]]:
    """Rewrite equation(s) into canonical residual tree(s) ``lhs - rhs``."""
    registry = as_registry(indvars, depvars)
    return parse_equations(eqs, registry)


class ResidualFunction:
    """Callable residual of one equation or a system of equations.

    Calling it with coordinates ``(N, len(free_variables))`` and a flat
    parameter vector returns residuals of shape ``(N,)`` (single equation)
    or ``(N, K)`` (system of K equations). A single coordinate vector is
    accepted too and yields a scalar or ``(K,)`` vector.

    Attributes:
        trees: Canonical residual tree(s)
        registry: Variable registry of the system
        free_variables: Names bound, in order, to the coordinate columns
        param_lengths: Per-dependent-variable parameter counts
    """

    def __init__(
        self,
        trees: Union[Expr, List[Expr]],
        registry: VariableRegistry,
        phi: Union[Callable, Sequence[Callable]],
        derivative: Optional[Callable] = None,
        param_lengths: Optional[Sequence[int]] = None,
        bc_indvars: Optional[Sequence[str]] = None,
        dtype=None
    ):
        self.is_system = isinstance(trees, (list, tuple))
        self.trees = list(trees) if self.is_system else trees
        self.registry = registry
        self.phis = list(phi) if isinstance(phi, (list, tuple)) else [phi]
        self.derivative = derivative if derivative is not None else get_numeric_derivative()
        self.u = get_u()
        self.free_variables = tuple(bc_indvars) if bc_indvars is not None else registry.indvars
        self.dtype = resolve_dtype(dtype)

        n_dep = registry.n_depvars
        if n_dep > 1 and len(self.phis) != n_dep:
            raise ValueError(
                f"System with {n_dep} dependent variables needs {n_dep} trial solutions, "
                f"got {len(self.phis)}"
            )
        self.param_lengths = list(param_lengths) if param_lengths is not None else None
        if n_dep > 1 and self.param_lengths is None:
            raise ValueError("param_lengths are required for systems of dependent variables")

    def _split(self, theta: tf.Tensor) -> List[tf.Tensor]:
        if self.registry.n_depvars == 1:
            return [theta]
        return split_parameters(theta, self.param_lengths)

    def __call__(self, coords, theta) -> tf.Tensor:
        coords = tf.cast(tf.convert_to_tensor(coords), self.dtype)
        theta = tf.cast(tf.convert_to_tensor(theta), self.dtype)

        single = coords.shape.rank == 1
        if single:
            coords = coords[tf.newaxis, :]

        n_cols = coords.shape[1]
        if n_cols is not None and n_cols != len(self.free_variables):
            raise ValueError(
                f"Expected coordinates with {len(self.free_variables)} column(s) "
                f"{list(self.free_variables)}, got {n_cols}"
            )

        context = {
            'bindings': {
                name: coords[:, i] for i, name in enumerate(self.free_variables)
            },
            'n_points': tf.shape(coords)[0],
            'thetas': self._split(theta),
        }

        if self.is_system:
            residual = tf.stack(
                [self._broadcast(self._evaluate(t, context), context) for t in self.trees],
                axis=-1
            )
        else:
            residual = self._broadcast(self._evaluate(self.trees, context), context)

        return residual[0] if single else residual

    def _broadcast(self, value: tf.Tensor, context: dict) -> tf.Tensor:
        return tf.broadcast_to(tf.cast(value, self.dtype), [context['n_points']])

    def _coordinates(self, args, context: dict) -> tf.Tensor:
        columns = [self._broadcast(self._evaluate(a, context), context) for a in args]
        return tf.stack(columns, axis=1)

    def _evaluate(self, node: Expr, context: dict) -> tf.Tensor:
        if isinstance(node, Literal):
            return tf.constant(node.value, dtype=self.dtype)

        if isinstance(node, VarRef):
            try:
                return context['bindings'][node.name]
            except KeyError:
                raise UnrecognizedExpressionPatternError(
                    f"Variable '{node.name}' is not bound; free variables are "
                    f"{list(self.free_variables)}"
                ) from None

        if isinstance(node, Eval):
            x = self._coordinates(node.args, context)
            return self.u(x, context['thetas'][node.index - 1], self.phis[node.index - 1])

        if isinstance(node, Derivative):
            x = self._coordinates(node.args, context)
            return self.derivative(
                self.phis[node.index - 1],
                self.u,
                x,
                node.perturbations,
                node.order,
                context['thetas'][node.index - 1]
            )

        if isinstance(node, OpApply):
            operands = [self._evaluate(a, context) for a in node.args]
            if node.op in _UNARY_OPS and len(operands) == 1:
                return _UNARY_OPS[node.op](operands[0])
            if node.op in ('+', '*'):
                return reduce(_BINARY_OPS[node.op], operands)
            if node.op in _BINARY_OPS and len(operands) == 2:
                return _BINARY_OPS[node.op](*operands)
            raise UnrecognizedExpressionPatternError(
                f"Operator '{node.op}' with {len(operands)} operand(s) is not supported"
            )

        raise UnrecognizedExpressionPatternError(
            f"Cannot evaluate non-canonical node {type(node).__name__}; "
            "rewrite the tree with the expression transformer first"
        )


def build_loss_function(
    eqs: Union[Equation, List[Equation]],
    indvars,
    depvars=None,
    phi: Union[Callable, Sequence[Callable], None] = None,
    derivative: Optional[Callable] = None,
    init_params: Optional[Sequence] = None,
    bc_indvars: Optional[Sequence[str]] = None,
    dtype=None
) -> ResidualFunction:
    """Build the residual function of a PDE (or boundary condition).

    Args:
        eqs: One equation, or a list for a system
        indvars: VariableRegistry, or the list of independent variables
        depvars: Dependent variables (when indvars is a list)
        phi: Trial solution(s), one per dependent variable
        derivative: Derivative operator (default: numeric_derivative)
        init_params: Per-dependent-variable initial parameters, used for the
            sub-vector lengths of systems
        bc_indvars: Free variables bound to coordinate columns
            (default: all independent variables)
        dtype: Evaluation dtype (default: float64)

    Returns:
        ResidualFunction ``residual(coords, theta)``
    """
    registry = as_registry(indvars, depvars)
    trees = parse_equations(eqs, registry)
    lengths = None
    if init_params is not None:
        lengths = parameter_lengths(split_init_params(init_params, registry.n_depvars))
    return ResidualFunction(
        trees,
        registry,
        phi,
        derivative=derivative,
        param_lengths=lengths,
        bc_indvars=bc_indvars,
        dtype=dtype
    )


__all__ = [
    'split_parameters',
    'build_symbolic_loss_function',
    'ResidualFunction',
    'build_loss_function'
]
