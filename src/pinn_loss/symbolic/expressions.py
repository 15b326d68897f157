"""
Symbolic Expression Trees for PINN-Loss.

Provides the node types used to describe PDE systems symbolically and the
small front end used to build them with ordinary Python operators:

    >>> x, y = variables('x y')
    >>> u = DependentVariable('u')
    >>> Dxx = Differential(x) ** 2
    >>> Dyy = Differential(y) ** 2
    >>> eq = Equation(Dxx(u(x, y)) + Dyy(u(x, y)), -sin(pi * x) * sin(pi * y))

Node kinds:
- Literal: numeric constant
- VarRef: reference to an independent variable (or, illegally, a bare
  dependent variable)
- DepVarApply: dependent variable applied to its arguments, u(x, y)
- DerivativeApply: derivative of a sub-expression with respect to a variable
- OpApply: n-ary operator or elementary function application

Canonical nodes produced by the expression transformer:
- Eval: evaluate trial solution `index` at the coordinates in `args`
- Derivative: finite-difference derivative of trial solution `index`
"""

from dataclasses import dataclass, field
from numbers import Number
from typing import Iterator, Tuple, Union

import numpy as np


class Expr:
    """Base class for all expression nodes.

    Implements operator overloading so that trees can be written as
    ordinary Python arithmetic. Subclasses are frozen dataclasses, which
    makes trees hashable and structurally comparable.
    """

    def children(self) -> Tuple['Expr', ...]:
        return ()

    def equals(self, other) -> 'Equation':
        """Build the equation ``self ~ other``."""
        return Equation(self, other)

    def __add__(self, other):
        return OpApply('+', (self, as_expr(other)))

    def __radd__(self, other):
        return OpApply('+', (as_expr(other), self))

    def __sub__(self, other):
        return OpApply('-', (self, as_expr(other)))

    def __rsub__(self, other):
        return OpApply('-', (as_expr(other), self))

    def __mul__(self, other):
        return OpApply('*', (self, as_expr(other)))

    def __rmul__(self, other):
        return OpApply('*', (as_expr(other), self))

    def __truediv__(self, other):
        return OpApply('/', (self, as_expr(other)))

    def __rtruediv__(self, other):
        return OpApply('/', (as_expr(other), self))

    def __pow__(self, other):
        return OpApply('^', (self, as_expr(other)))

    def __rpow__(self, other):
        return OpApply('^', (as_expr(other), self))

    def __neg__(self):
        return OpApply('neg', (self,))

    def __pos__(self):
        return self


@dataclass(frozen=True)
class Literal(Expr):
    """Numeric constant."""

    value: float

    def __str__(self) -> str:
        return f"{self.value:g}"


@dataclass(frozen=True)
class VarRef(Expr):
    """Reference to a variable by name."""

    name: str

    def __str__(self) -> str:
        return self.name


@dataclass(frozen=True)
class DepVarApply(Expr):
    """Dependent variable applied to a tuple of arguments, e.g. ``u(x, 0)``."""

    name: str
    args: Tuple[Expr, ...]

    def children(self) -> Tuple[Expr, ...]:
        return self.args

    def __str__(self) -> str:
        return f"{self.name}({', '.join(str(a) for a in self.args)})"


@dataclass(frozen=True)
class DerivativeApply(Expr):
    """Derivative of ``expr`` with respect to ``variable``."""

    expr: Expr
    variable: VarRef

    def children(self) -> Tuple[Expr, ...]:
        return (self.expr,)

    def __str__(self) -> str:
        return f"derivative({self.expr}, {self.variable})"


@dataclass(frozen=True)
class OpApply(Expr):
    """Operator or elementary function applied to its operands."""

    op: str
    args: Tuple[Expr, ...]

    def children(self) -> Tuple[Expr, ...]:
        return self.args

    def __str__(self) -> str:
        if self.op in BINARY_OPERATORS and len(self.args) == 2:
            left, right = self.args
            return f"({left} {self.op} {right})"
        if self.op == 'neg':
            return f"-({self.args[0]})"
        return f"{self.op}({', '.join(str(a) for a in self.args)})"


@dataclass(frozen=True)
class Eval(Expr):
    """Canonical node: value of trial solution ``index`` at ``args``."""

    index: int
    args: Tuple[Expr, ...]

    def children(self) -> Tuple[Expr, ...]:
        return self.args

    def __str__(self) -> str:
        return f"u(phi{self.index}, [{', '.join(str(a) for a in self.args)}], theta{self.index})"


@dataclass(frozen=True)
class Derivative(Expr):
    """Canonical node: finite-difference derivative of trial solution ``index``.

    ``perturbations`` holds one unit perturbation vector per order, in the
    outer-to-inner order of the derivative applications as written, and
    ``variables`` the matching differentiation variable names.
    """

    order: int
    perturbations: Tuple[Tuple[float, ...], ...]
    index: int
    args: Tuple[Expr, ...]
    variables: Tuple[str, ...] = field(default=())

    def children(self) -> Tuple[Expr, ...]:
        return self.args

    def __str__(self) -> str:
        wrt = ', '.join(self.variables)
        return (
            f"derivative(phi{self.index}, [{', '.join(str(a) for a in self.args)}], "
            f"order={self.order}, wrt=[{wrt}], theta{self.index})"
        )


BINARY_OPERATORS = ('+', '-', '*', '/', '^')
UNARY_FUNCTIONS = ('neg', 'sin', 'cos', 'tan', 'exp', 'log', 'sqrt', 'tanh', 'abs')


@dataclass(frozen=True)
class Equation:
    """Equation ``lhs ~ rhs``; compiles to the residual ``lhs - rhs``."""

    lhs: Expr
    rhs: Expr

    def __post_init__(self):
        object.__setattr__(self, 'lhs', as_expr(self.lhs))
        object.__setattr__(self, 'rhs', as_expr(self.rhs))

    def residual(self) -> Expr:
        return OpApply('-', (self.lhs, self.rhs))

    def __str__(self) -> str:
        return f"{self.lhs} ~ {self.rhs}"


class DependentVariable:
    """Named unknown function; calling it builds a DepVarApply node.

    Example:
        >>> u = DependentVariable('u')
        >>> u(x, 0.0)
        DepVarApply(name='u', args=(VarRef(name='x'), Literal(value=0.0)))
    """

    def __init__(self, name: str):
        self.name = str(name)

    def __call__(self, *args) -> DepVarApply:
        return DepVarApply(self.name, tuple(as_expr(a) for a in args))

    def __repr__(self) -> str:
        return f"DependentVariable('{self.name}')"


class Differential:
    """Partial derivative operator.

    ``Differential(x)`` applied to an expression builds
    ``DerivativeApply(expr, x)``. Operators compose: ``Differential(x) ** 2``
    is the second derivative in x and ``Dx * Dy`` applies ``Dy`` first.
    """

    def __init__(self, *variables: VarRef):
        if not variables:
            raise ValueError("Differential needs at least one variable")
        self.variables: Tuple[VarRef, ...] = tuple(
            v if isinstance(v, VarRef) else VarRef(str(v)) for v in variables
        )

    def __call__(self, expr) -> Expr:
        result = as_expr(expr)
        for var in reversed(self.variables):
            result = DerivativeApply(result, var)
        return result

    def __mul__(self, other: 'Differential') -> 'Differential':
        if not isinstance(other, Differential):
            return NotImplemented
        return Differential(*(self.variables + other.variables))

    def __pow__(self, power: int) -> 'Differential':
        if not isinstance(power, int) or power < 1:
            raise ValueError(f"Differential power must be a positive integer, got {power!r}")
        return Differential(*(self.variables * power))

    def __repr__(self) -> str:
        return f"Differential({', '.join(v.name for v in self.variables)})"


def as_expr(value) -> Expr:
    """Convert a Python value into an expression node.

    Args:
        value: Expr, number, or DependentVariable

    Returns:
        Expression node

    Raises:
        TypeError: If the value has no symbolic representation
    """
    if isinstance(value, Expr):
        return value
    if isinstance(value, (bool, np.bool_)):
        raise TypeError("Boolean values cannot be used in expressions")
    if isinstance(value, (Number, np.number)):
        return Literal(float(value))
    if isinstance(value, DependentVariable):
        # Bare dependent variable; rejected later by the transformer
        return VarRef(value.name)
    raise TypeError(f"Cannot convert {type(value).__name__} to an expression")


def Variable(name: str) -> VarRef:
    """Create one independent variable."""
    return VarRef(str(name))


def variables(names: Union[str, Tuple[str, ...]]) -> Tuple[VarRef, ...]:
    """Create independent variables from a whitespace or comma separated string.

    Example:
        >>> x, y, t = variables('x y t')
    """
    if isinstance(names, str):
        names = names.replace(',', ' ').split()
    return tuple(VarRef(str(n)) for n in names)


def iter_nodes(expr: Expr) -> Iterator[Expr]:
    """Depth-first, pre-order traversal of an expression tree."""
    yield expr
    for child in expr.children():
        yield from iter_nodes(child)


def _unary(op: str):
    def apply(value) -> OpApply:
        return OpApply(op, (as_expr(value),))
    apply.__name__ = op
    apply.__doc__ = f"Symbolic ``{op}`` of an expression."
    return apply


sin = _unary('sin')
cos = _unary('cos')
tan = _unary('tan')
exp = _unary('exp')
log = _unary('log')
sqrt = _unary('sqrt')
tanh = _unary('tanh')
abs_ = _unary('abs')

pi = float(np.pi)


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
    'BINARY_OPERATORS',
    'UNARY_FUNCTIONS',
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
    'pi'
]
