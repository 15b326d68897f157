"""
Boundary-Condition Analyzer for PINN-Loss.

For every boundary condition, determines which independent variables are
fixed (literal arguments) and which are free (variable references). The
free variables define the condition's own sub-domain; the fixed literal
values are removed from the PDE interior grid.
"""

from typing import Dict, List, Sequence, Tuple

import numpy as np

from pinn_loss.core.errors import MalformedBoundaryConditionError
from pinn_loss.symbolic.expressions import (
    Derivative,
    Equation,
    Eval,
    Expr,
    Literal,
    VarRef,
    iter_nodes,
)
from pinn_loss.symbolic.registry import VariableRegistry, as_registry
from pinn_loss.symbolic.transformer import transform_derivative


def check_boundary_conditions(bcs: Sequence) -> List[Equation]:
    """Validate that every boundary condition is a single equation.

    Raises:
        MalformedBoundaryConditionError: If a condition is given as a nested
            list / tuple / array, or is not an Equation at all
    """
    if isinstance(bcs, Equation):
        bcs = [bcs]
    checked = []
    for i, bc in enumerate(bcs):
        if isinstance(bc, (list, tuple, np.ndarray)):
            raise MalformedBoundaryConditionError(
                f"Boundary condition #{i} is a nested collection; boundary conditions "
                "must be represented as a one-dimensional list of equations"
            )
        if not isinstance(bc, Equation):
            raise MalformedBoundaryConditionError(
                f"Boundary condition #{i} is a {type(bc).__name__}, expected an Equation"
            )
        checked.append(bc)
    return checked


def _leading_application(expr: Expr):
    for node in iter_nodes(expr):
        if isinstance(node, (Eval, Derivative)):
            return node
    return None


def get_bc_arguments(bcs: Sequence, indvars, depvars=None) -> List[Tuple[Expr, ...]]:
    """Get call arguments of each boundary condition.

    The arguments are those of the first dependent-variable (or derivative)
    application found in the condition's left-hand side.

    Args:
        bcs: Boundary conditions
        indvars: VariableRegistry, or the list of independent variables
        depvars: List of dependent variables (when indvars is a list)

    Returns:
        One argument tuple per condition, e.g. ``(Literal(0.0), VarRef('y'))``
    """
    registry = as_registry(indvars, depvars)
    bc_args = []
    for i, bc in enumerate(check_boundary_conditions(bcs)):
        left_expr = transform_derivative(bc.lhs, registry)
        application = _leading_application(left_expr)
        if application is None:
            raise MalformedBoundaryConditionError(
                f"Boundary condition #{i} ({bc}) has no dependent-variable "
                "application on its left-hand side"
            )
        bc_args.append(application.args)
    return bc_args


def get_bc_variables(bcs: Sequence, indvars, depvars=None) -> List[List[str]]:
    """Get the ordered free-variable names of each boundary condition.

    Example:
        >>> # u(0, y) ~ 0, u(x, 1) ~ 0
        >>> get_bc_variables(bcs, registry)
        [['y'], ['x']]
    """
    bc_args = get_bc_arguments(bcs, indvars, depvars)
    return [[a.name for a in args if isinstance(a, VarRef)] for args in bc_args]


def get_fixed_coordinates(bcs: Sequence, registry: VariableRegistry) -> Dict[str, List[float]]:
    """Collect literal boundary values per independent variable.

    Literal arguments are matched to independent variables by position,
    so ``u(0, y)`` fixes the first variable at 0.
    """
    fixed: Dict[str, List[float]] = {name: [] for name in registry.indvars}
    for args in get_bc_arguments(bcs, registry):
        for position, arg in enumerate(args):
            if isinstance(arg, Literal) and position < registry.dim:
                fixed[registry.indvars[position]].append(arg.value)
    return fixed


__all__ = [
    'check_boundary_conditions',
    'get_bc_arguments',
    'get_bc_variables',
    'get_fixed_coordinates'
]
