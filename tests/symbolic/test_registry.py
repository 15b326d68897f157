"""Tests for the variable registry."""

from __future__ import annotations

import pytest

from pinn_loss.core.errors import DuplicateVariableError
from pinn_loss.symbolic import DependentVariable, VariableRegistry, as_registry, get_dict_vars, get_vars, variables
from pinn_loss.symbolic.registry import normalize_name


def test_get_dict_vars_assigns_one_based_indices_in_order():
    assert get_dict_vars(['x', 'y', 't']) == {'x': 1, 'y': 2, 't': 3}


def test_get_dict_vars_accepts_symbolic_variables():
    x, y = variables('x y')
    u = DependentVariable('u')
    assert get_dict_vars([x, y]) == {'x': 1, 'y': 2}
    assert get_dict_vars([u]) == {'u': 1}


def test_duplicate_names_are_rejected():
    with pytest.raises(DuplicateVariableError, match="'x'"):
        get_dict_vars(['x', 'y', ' x '])


def test_name_shared_between_independent_and_dependent_variables_is_rejected():
    with pytest.raises(DuplicateVariableError):
        get_vars(['x', 'u'], ['u'])


def test_registry_dimensions():
    registry = get_vars(variables('x y'), [DependentVariable('u1'), DependentVariable('u2')])
    assert isinstance(registry, VariableRegistry)
    assert registry.indvars == ('x', 'y')
    assert registry.depvars == ('u1', 'u2')
    assert registry.dim == 2
    assert registry.n_depvars == 2
    assert registry.dict_depvars['u2'] == 2


def test_as_registry_passes_registries_through_and_requires_depvars_for_lists():
    registry = get_vars(['x'], ['u'])
    assert as_registry(registry) is registry
    assert as_registry(['x'], ['u']).dict_indvars == {'x': 1}
    with pytest.raises(TypeError):
        as_registry(['x'])


def test_normalize_name():
    assert normalize_name('  t ') == 't'
    assert normalize_name(DependentVariable('u')) == 'u'
