"""
Variable Registry for PINN-Loss.

Assigns stable 1-based indices to independent and dependent variable names.
"""

from dataclasses import dataclass
from typing import Dict, Iterable, Optional, Tuple

from pinn_loss.core.errors import DuplicateVariableError


def normalize_name(var) -> str:
    """Return the canonical string name of a variable.

    Accepts plain strings, symbolic variables (anything with a ``name``
    attribute) and falls back to ``str(var)``. Surrounding whitespace is
    stripped.
    """
    name = getattr(var, 'name', var)
    return str(name).strip()


def get_dict_vars(vars_: Iterable) -> Dict[str, int]:
    """Create dictionary: variable name => unique 1-based index.

    Args:
        vars_: Ordered variable names or symbolic variables

    Returns:
        Mapping preserving input order

    Raises:
        DuplicateVariableError: If two names collide after normalization

    Example:
        >>> get_dict_vars(['x', 'y', 't'])
        {'x': 1, 'y': 2, 't': 3}
    """
    mapping: Dict[str, int] = {}
    for i, var in enumerate(vars_, start=1):
        name = normalize_name(var)
        if name in mapping:
            raise DuplicateVariableError(
                f"Variable '{name}' is declared more than once"
            )
        mapping[name] = i
    return mapping


@dataclass(frozen=True)
class VariableRegistry:
    """Index mappings for the independent and dependent variables of a system."""

    indvars: Tuple[str, ...]
    depvars: Tuple[str, ...]
    dict_indvars: Dict[str, int]
    dict_depvars: Dict[str, int]

    @property
    def dim(self) -> int:
        return len(self.indvars)

    @property
    def n_depvars(self) -> int:
        return len(self.depvars)


def get_vars(indvars: Iterable, depvars: Iterable) -> VariableRegistry:
    """Build the variable registry for a PDE system.

    Raises:
        DuplicateVariableError: If a name repeats within either list, or is
            used both as an independent and a dependent variable
    """
    dict_indvars = get_dict_vars(indvars)
    dict_depvars = get_dict_vars(depvars)

    shared = set(dict_indvars) & set(dict_depvars)
    if shared:
        raise DuplicateVariableError(
            f"Names used as both independent and dependent variables: {sorted(shared)}"
        )

    return VariableRegistry(
        indvars=tuple(dict_indvars),
        depvars=tuple(dict_depvars),
        dict_indvars=dict_indvars,
        dict_depvars=dict_depvars
    )


def as_registry(indvars_or_registry, depvars: Optional[Iterable] = None) -> VariableRegistry:
    """Accept either a ready registry or raw (indvars, depvars) lists."""
    if isinstance(indvars_or_registry, VariableRegistry):
        return indvars_or_registry
    if depvars is None:
        raise TypeError("depvars are required when indvars are given as a list")
    return get_vars(indvars_or_registry, depvars)


__all__ = ['normalize_name', 'get_dict_vars', 'VariableRegistry', 'get_vars', 'as_registry']
