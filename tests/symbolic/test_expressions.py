"""Tests for the symbolic front end."""

from __future__ import annotations

import pytest

from pinn_loss.symbolic import (
    DependentVariable,
    DepVarApply,
    DerivativeApply,
    Differential,
    Domain,
    Equation,
    Interval,
    Literal,
    OpApply,
    PDESystem,
    Variable,
    VarRef,
    iter_nodes,
    sin,
    variables,
)


def test_variables_and_dependent_variable_application():
    x, y = variables('x, y')
    u = DependentVariable('u')
    assert x == VarRef('x')
    assert Variable('t') == VarRef('t')
    assert u(x, 0) == DepVarApply('u', (VarRef('x'), Literal(0.0)))


def test_operator_overloading_builds_op_nodes():
    x, = variables('x')
    expr = 2 * x + 1
    assert expr == OpApply('+', (OpApply('*', (Literal(2.0), x)), Literal(1.0)))
    assert -x == OpApply('neg', (x,))
    assert x ** 2 == OpApply('^', (x, Literal(2.0)))
    assert sin(x) == OpApply('sin', (x,))


def test_booleans_are_not_expressions():
    x, = variables('x')
    with pytest.raises(TypeError):
        x + True


def test_differential_power_and_product_compose():
    x, y = variables('x y')
    u = DependentVariable('u')
    Dx, Dy = Differential(x), Differential(y)

    assert (Dx ** 2)(u(x, y)) == DerivativeApply(DerivativeApply(u(x, y), x), x)
    # Dy is applied first
    assert (Dx * Dy)(u(x, y)) == DerivativeApply(DerivativeApply(u(x, y), y), x)

    with pytest.raises(ValueError):
        Dx ** 0


def test_equation_from_equals_and_residual():
    x, = variables('x')
    u = DependentVariable('u')
    eq = u(x).equals(0)
    assert eq == Equation(u(x), Literal(0.0))
    assert eq.residual() == OpApply('-', (u(x), Literal(0.0)))
    assert str(eq) == "u(x) ~ 0"


def test_iter_nodes_is_pre_order():
    x, = variables('x')
    u = DependentVariable('u')
    nodes = list(iter_nodes(u(x) + 1))
    assert isinstance(nodes[0], OpApply)
    assert nodes[1] == u(x)
    assert nodes[2] == x
    assert nodes[3] == Literal(1.0)


def test_interval_and_pde_system():
    x, y = variables('x y')
    u = DependentVariable('u')
    with pytest.raises(ValueError):
        Interval(1.0, 0.0)

    domains = [Domain(x, Interval(0.0, 1.0)), Domain(y, Interval(-1.0, 2.0))]
    system = PDESystem(u(x, y).equals(0), [u(0, y).equals(0)], domains, [x, y], [u])
    assert system.dim == 2
    assert not system.is_system
    assert domains[1].lower == -1.0 and domains[1].upper == 2.0
    assert domains[1].name == 'y'
