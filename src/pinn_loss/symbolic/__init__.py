"""
Symbolic layer for PINN-Loss.

Includes:
- expressions: expression tree nodes and the operator front end
- system: domains and the PDESystem bundle
- registry: variable name => index mappings
- transformer: rewrite to canonical evaluable trees
- boundary: free / fixed variable analysis of boundary conditions
"""

from .expressions import (
    Expr,
    Literal,
    VarRef,
    DepVarApply,
    DerivativeApply,
    OpApply,
    Eval,
    Derivative,
    Equation,
    DependentVariable,
    Differential,
    as_expr,
    Variable,
    variables,
    iter_nodes,
    sin,
    cos,
    tan,
    exp,
    log,
    sqrt,
    tanh,
    abs_,
    pi
)
from .system import Interval, Domain, PDESystem
from .registry import get_dict_vars, get_vars, as_registry, VariableRegistry
from .transformer import (
    ExpressionTransformer,
    transform_derivative,
    parse_equation,
    parse_equations
)
from .boundary import (
    check_boundary_conditions,
    get_bc_arguments,
    get_bc_variables,
    get_fixed_coordinates
)

__all__ = [
    'Expr',
    'Literal',
    'VarRef',
    'DepVarApply',
    'DerivativeApply',
    'OpApply',
    'Eval',
    'Derivative',
    'Equation',
    'DependentVariable',
    'Differential',
    'as_expr',
    'Variable',
    'variables',
    'iter_nodes',
    'sin',
    'cos',
    'tan',
    'exp',
    'log',
    'sqrt',
    'tanh',
    'abs_',
    'pi',
    'Interval',
    'Domain',
    'PDESystem',
    'get_dict_vars',
    'get_vars',
    'as_registry',
    'VariableRegistry',
    'ExpressionTransformer',
    'transform_derivative',
    'parse_equation',
    'parse_equations',
    'check_boundary_conditions',
    'get_bc_arguments',
    'get_bc_variables',
    'get_fixed_coordinates'
]
