"""
Expression Transformer for PINN-Loss.

Rewrites symbolic equation trees into canonical, directly evaluable trees.
Two patterns are recognized, depth-first:

1. Dependent-variable application ``u(x, y)`` becomes
   ``Eval(index_of_u, (x, y))``.

2. A chain of derivative applications ``Dx(Dy(u(x, y)))`` becomes a single
   ``Derivative(order=2, perturbations, index_of_u, (x, y))`` node. The
   chain is walked outer to inner, collecting the differentiation
   variables; one perturbation vector is built per collected variable.

Examples:

1)  1-D ODE: ``Dt(u(t)) ~ t + 1`` rewrites to
    ``Derivative(1, [[e]], 1, [t]) - (t + 1)``

2)  2-D Poisson: ``Dxx(u(x, y)) + Dyy(u(x, y)) ~ -sin(pi x) sin(pi y)``
    rewrites to
    ``Derivative(2, [[e,0],[e,0]], 1, [x,y]) + Derivative(2, [[0,e],[0,e]], 1, [x,y]) - ...``

3)  System: ``Dx(u1(x, y)) + 4 Dy(u2(x, y)) ~ 0`` rewrites to
    ``Derivative(1, [[e,0]], 1, [x,y]) + 4 Derivative(1, [[0,e]], 2, [x,y]) - 0``
    where the index selects phi_i / theta_i at evaluation time.
"""

from typing import List, Union

from pinn_loss.core.errors import UnrecognizedExpressionPatternError
from pinn_loss.core.utils.helper_functions import unit_perturbation
from pinn_loss.symbolic.expressions import (
    DepVarApply,
    Derivative,
    DerivativeApply,
    Equation,
    Eval,
    Expr,
    Literal,
    OpApply,
    VarRef,
)
from pinn_loss.symbolic.registry import VariableRegistry


class ExpressionTransformer:
    """Recursive visitor implementing the two-pattern rewrite.

    Attributes:
        registry: Variable registry of the PDE system being compiled
    """

    def __init__(self, registry: VariableRegistry):
        self.registry = registry

    def transform(self, expr: Expr) -> Expr:
        """Rewrite ``expr`` into its canonical form.

        Raises:
            UnrecognizedExpressionPatternError: If a dependent variable
                appears outside the two recognized patterns
        """
        if isinstance(expr, Literal):
            return expr
        if isinstance(expr, VarRef):
            if expr.name in self.registry.dict_depvars:
                raise UnrecognizedExpressionPatternError(
                    f"Dependent variable '{expr.name}' used without arguments"
                )
            return expr
        if isinstance(expr, DepVarApply):
            return Eval(self._depvar_index(expr.name), self._transform_args(expr.args))
        if isinstance(expr, DerivativeApply):
            return self._transform_derivative(expr)
        if isinstance(expr, OpApply):
            return OpApply(expr.op, tuple(self.transform(a) for a in expr.args))
        if isinstance(expr, (Eval, Derivative)):
            return expr
        raise UnrecognizedExpressionPatternError(
            f"Unsupported expression node {type(expr).__name__}"
        )

    def _transform_args(self, args) -> tuple:
        return tuple(self.transform(a) for a in args)

    def _depvar_index(self, name: str) -> int:
        try:
            return self.registry.dict_depvars[name]
        except KeyError:
            raise UnrecognizedExpressionPatternError(
                f"Function '{name}' is not a declared dependent variable "
                f"(known: {list(self.registry.depvars)})"
            ) from None

    def _transform_derivative(self, expr: DerivativeApply) -> Derivative:
        derivative_variables: List[str] = []
        order = 0
        node: Expr = expr
        while isinstance(node, DerivativeApply):
            order += 1
            derivative_variables.append(node.variable.name)
            node = node.expr

        if not isinstance(node, DepVarApply):
            raise UnrecognizedExpressionPatternError(
                f"Derivative must wrap a dependent-variable application, got {node}"
            )

        index = self._depvar_index(node.name)
        dim = len(node.args)
        perturbations = []
        for var in derivative_variables:
            if var not in self.registry.dict_indvars:
                raise UnrecognizedExpressionPatternError(
                    f"Derivative with respect to unknown variable '{var}'"
                )
            slot = self.registry.dict_indvars[var]
            if slot > dim:
                raise UnrecognizedExpressionPatternError(
                    f"Cannot differentiate {node} with respect to '{var}': "
                    f"it has only {dim} argument(s)"
                )
            perturbations.append(unit_perturbation(dim, slot))

        return Derivative(
            order=order,
            perturbations=tuple(perturbations),
            index=index,
            args=self._transform_args(node.args),
            variables=tuple(derivative_variables)
        )


def transform_derivative(expr: Expr, registry: VariableRegistry) -> Expr:
    """Functional wrapper around ExpressionTransformer.transform."""
    return ExpressionTransformer(registry).transform(expr)


def parse_equation(eq: Equation, registry: VariableRegistry) -> Expr:
    """Rewrite both sides of ``eq`` and return the residual tree ``lhs - rhs``."""
    transformer = ExpressionTransformer(registry)
    left_expr = transformer.transform(eq.lhs)
    right_expr = transformer.transform(eq.rhs)
    return OpApply('-', (left_expr, right_expr))


def parse_equations(eqs: Union[Equation, List[Equation]], registry: VariableRegistry):
    """Parse one equation or a list of equations (system)."""
    if isinstance(eqs, (list, tuple)):
        return [parse_equation(eq, registry) for eq in eqs]
    return parse_equation(eqs, registry)


__all__ = [
    'ExpressionTransformer',
    'transform_derivative',
    'parse_equation',
    'parse_equations'
]
