"""Tests for the expression transformer."""

from __future__ import annotations

import pytest

from pinn_loss.core.errors import UnrecognizedExpressionPatternError
from pinn_loss.core.utils.helper_functions import FD_EPSILON
from pinn_loss.symbolic import (
    DependentVariable,
    Derivative,
    Differential,
    Equation,
    Eval,
    Literal,
    OpApply,
    VarRef,
    cos,
    get_vars,
    parse_equation,
    parse_equations,
    transform_derivative,
    variables,
)

E = FD_EPSILON


@pytest.fixture
def xy_registry():
    return get_vars(['x', 'y'], ['u1', 'u2'])


def test_dependent_variable_application_becomes_eval(xy_registry):
    x, y = variables('x y')
    u2 = DependentVariable('u2')
    assert transform_derivative(u2(x, 0.5), xy_registry) == Eval(2, (x, Literal(0.5)))


def test_first_order_ode_rewrite():
    t, = variables('t')
    u = DependentVariable('u')
    registry = get_vars([t], [u])
    tree = parse_equation(Differential(t)(u(t)).equals(cos(t)), registry)

    assert tree == OpApply('-', (
        Derivative(1, ((E,),), 1, (VarRef('t'),), ('t',)),
        OpApply('cos', (VarRef('t'),)),
    ))


def test_second_order_chain_collapses_into_one_node(xy_registry):
    x, y = variables('x y')
    u1 = DependentVariable('u1')
    node = transform_derivative((Differential(y) ** 2)(u1(x, y)), xy_registry)

    assert isinstance(node, Derivative)
    assert node.order == 2
    assert node.index == 1
    assert node.perturbations == ((0.0, E), (0.0, E))
    assert node.variables == ('y', 'y')


def test_mixed_partial_perturbations_are_outer_to_inner(xy_registry):
    x, y = variables('x y')
    u1 = DependentVariable('u1')
    Dx, Dy = Differential(x), Differential(y)
    node = transform_derivative(Dx(Dy(u1(x, y))), xy_registry)
    assert node.perturbations == ((E, 0.0), (0.0, E))
    assert node.variables == ('x', 'y')


def test_system_keeps_dependent_variable_indices(xy_registry):
    x, y = variables('x y')
    u1, u2 = DependentVariable('u1'), DependentVariable('u2')
    Dx, Dy = Differential(x), Differential(y)
    trees = parse_equations([
        (Dx(u1(x, y)) + 4 * Dy(u2(x, y))).equals(0),
        (Dx(u2(x, y)) + 9 * Dy(u1(x, y))).equals(0),
    ], xy_registry)

    assert len(trees) == 2
    first_sum = trees[0].args[0]
    assert first_sum.args[0].index == 1
    assert first_sum.args[1].args[1].index == 2


def test_bare_dependent_variable_is_rejected():
    registry = get_vars(['x'], ['u'])
    with pytest.raises(UnrecognizedExpressionPatternError, match="without arguments"):
        parse_equation(Equation(DependentVariable('u'), 0.0), registry)


def test_undeclared_function_is_rejected():
    x, = variables('x')
    registry = get_vars(['x'], ['u'])
    with pytest.raises(UnrecognizedExpressionPatternError, match="'v'"):
        transform_derivative(DependentVariable('v')(x), registry)


def test_derivative_of_non_application_is_rejected():
    x, = variables('x')
    registry = get_vars(['x'], ['u'])
    with pytest.raises(UnrecognizedExpressionPatternError):
        transform_derivative(Differential(x)(2 * x), registry)


def test_derivative_with_respect_to_unknown_variable_is_rejected():
    x, z = variables('x z')
    registry = get_vars(['x'], ['u'])
    with pytest.raises(UnrecognizedExpressionPatternError, match="'z'"):
        transform_derivative(Differential(z)(DependentVariable('u')(x)), registry)


def test_derivative_slot_beyond_application_arity_is_rejected(xy_registry):
    x, y = variables('x y')
    with pytest.raises(UnrecognizedExpressionPatternError):
        transform_derivative(Differential(y)(DependentVariable('u1')(x)), xy_registry)
