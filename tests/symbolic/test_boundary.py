"""Tests for the boundary-condition analyzer."""

from __future__ import annotations

import pytest

from pinn_loss.core.errors import MalformedBoundaryConditionError
from pinn_loss.symbolic import (
    DependentVariable,
    Differential,
    Equation,
    Literal,
    VarRef,
    check_boundary_conditions,
    get_bc_arguments,
    get_bc_variables,
    get_fixed_coordinates,
    get_vars,
    variables,
)


@pytest.fixture
def dirichlet_square():
    x, y = variables('x y')
    u = DependentVariable('u')
    bcs = [
        u(0, y).equals(0),
        u(1, y).equals(0),
        u(x, 0).equals(0),
        u(x, 1).equals(0),
    ]
    return bcs, get_vars([x, y], [u])


def test_bc_arguments_of_first_application(dirichlet_square):
    bcs, registry = dirichlet_square
    args = get_bc_arguments(bcs, registry)
    assert args[0] == (Literal(0.0), VarRef('y'))
    assert args[3] == (VarRef('x'), Literal(1.0))


def test_bc_free_variables(dirichlet_square):
    bcs, registry = dirichlet_square
    assert get_bc_variables(bcs, registry) == [['y'], ['y'], ['x'], ['x']]
    # Raw variable lists are accepted too
    assert get_bc_variables(bcs, ['x', 'y'], ['u']) == [['y'], ['y'], ['x'], ['x']]


def test_fixed_coordinates(dirichlet_square):
    bcs, registry = dirichlet_square
    assert get_fixed_coordinates(bcs, registry) == {'x': [0.0, 1.0], 'y': [0.0, 1.0]}


def test_derivative_condition_uses_its_application_arguments():
    x, y = variables('x y')
    u = DependentVariable('u')
    bcs = [Differential(x)(u(0, y)).equals(0)]
    assert get_bc_variables(bcs, ['x', 'y'], ['u']) == [['y']]


def test_point_condition_has_no_free_variables():
    t, = variables('t')
    u = DependentVariable('u')
    assert get_bc_variables([u(0).equals(1)], [t], [u]) == [[]]


def test_nested_condition_list_is_rejected():
    x, = variables('x')
    u = DependentVariable('u')
    with pytest.raises(MalformedBoundaryConditionError, match="one-dimensional"):
        check_boundary_conditions([[u(0).equals(0)]])
    with pytest.raises(MalformedBoundaryConditionError):
        check_boundary_conditions([u(0).equals(0), "u(1) ~ 0"])


def test_single_equation_is_wrapped():
    u = DependentVariable('u')
    eq = u(0).equals(0)
    assert check_boundary_conditions(eq) == [eq]


def test_condition_without_application_is_rejected():
    x, = variables('x')
    with pytest.raises(MalformedBoundaryConditionError):
        get_bc_arguments([Equation(x, 0)], ['x'], ['u'])
