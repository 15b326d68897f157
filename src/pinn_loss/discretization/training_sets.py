"""
Training-Set / Bound Generator for PINN-Loss.

Grid mode materializes collocation points: the full grid, the PDE interior
grid (spans with boundary-coincident literal values removed) and one grid
per boundary condition over its free variables.

Bound mode returns interval bounds instead, for the sampling and
quadrature strategies.
"""

from dataclasses import dataclass
from typing import Dict, List, Sequence, Tuple, Union

import numpy as np

from pinn_loss.core.utils.helper_functions import cartesian_product, discretized_span
from pinn_loss.symbolic.boundary import get_bc_variables, get_fixed_coordinates
from pinn_loss.symbolic.registry import VariableRegistry, as_registry
from pinn_loss.symbolic.system import Domain


@dataclass
class TrainingSets:
    """Grid point sources, each an ``(N, d)`` float64 array."""

    pde_train_set: np.ndarray
    bcs_train_sets: List[np.ndarray]
    train_set: np.ndarray


@dataclass
class Bounds:
    """Interval point sources.

    Attributes:
        pde_bounds: ``(lower, upper)`` arrays over all independent variables
        bcs_bounds: ``(lowers, uppers)``, one array per boundary condition
            restricted to its free variables
    """

    pde_bounds: Tuple[np.ndarray, np.ndarray]
    bcs_bounds: Tuple[List[np.ndarray], List[np.ndarray]]


def order_domains(domains: Sequence[Domain], registry: VariableRegistry) -> List[Domain]:
    """Return the domains in independent-variable index order.

    Raises:
        ValueError: If a variable has no domain, or a domain names an
            unknown variable
    """
    by_name = {d.name: d for d in domains}
    unknown = set(by_name) - set(registry.indvars)
    if unknown:
        raise ValueError(f"Domains given for unknown variables: {sorted(unknown)}")
    missing = [name for name in registry.indvars if name not in by_name]
    if missing:
        raise ValueError(f"No domain given for independent variables: {missing}")
    return [by_name[name] for name in registry.indvars]


def _steps(dx: Union[float, Sequence[float]], n: int) -> List[float]:
    if np.ndim(dx) == 0:
        return [float(dx)] * n
    dxs = [float(d) for d in dx]
    if len(dxs) != n:
        raise ValueError(f"Got {len(dxs)} grid steps for {n} independent variables")
    return dxs


def generate_training_sets(
    domains: Sequence[Domain],
    dx: Union[float, Sequence[float]],
    bcs: Sequence,
    indvars,
    depvars=None
) -> TrainingSets:
    """Generate training sets in the domain and on the boundary.

    Args:
        domains: One Domain per independent variable
        dx: Grid step, scalar or one per variable
        bcs: Boundary conditions
        indvars: VariableRegistry, or the list of independent variables
        depvars: Dependent variables (when indvars is a list)

    Returns:
        TrainingSets with PDE interior, per-condition and full grids

    Example:
        >>> # x, y in [0, 1], dx = 0.1, Dirichlet conditions on all four sides
        >>> sets = generate_training_sets(domains, 0.1, bcs, registry)
        >>> sets.train_set.shape, sets.pde_train_set.shape
        ((121, 2), (81, 2))
    """
    registry = as_registry(indvars, depvars)
    domains = order_domains(domains, registry)
    dxs = _steps(dx, len(domains))

    spans = [discretized_span(d.lower, d.upper, step) for d, step in zip(domains, dxs)]
    dict_var_span: Dict[str, np.ndarray] = dict(zip(registry.indvars, spans))

    fixed = get_fixed_coordinates(bcs, registry)
    interior_spans = []
    for name, span in zip(registry.indvars, spans):
        literals = np.asarray(fixed[name], dtype=np.float64)
        if literals.size:
            on_boundary = np.isclose(span[:, None], literals[None, :]).any(axis=1)
            span = span[~on_boundary]
        interior_spans.append(span)

    train_set = cartesian_product(spans)
    pde_train_set = cartesian_product(interior_spans)

    bcs_train_sets = [
        cartesian_product([dict_var_span[b] for b in bt])
        for bt in get_bc_variables(bcs, registry)
    ]

    return TrainingSets(pde_train_set, bcs_train_sets, train_set)


def get_bounds(
    domains: Sequence[Domain],
    bcs: Sequence,
    indvars,
    depvars=None
) -> Bounds:
    """Interval bounds of the full domain and of each boundary sub-domain.

    Example:
        >>> bounds = get_bounds(domains, bcs, registry)
        >>> bounds.pde_bounds
        (array([0., 0.]), array([1., 1.]))
    """
    registry = as_registry(indvars, depvars)
    domains = order_domains(domains, registry)

    pde_bounds = (
        np.array([d.lower for d in domains], dtype=np.float64),
        np.array([d.upper for d in domains], dtype=np.float64)
    )

    dict_lower_bound = {d.name: d.lower for d in domains}
    dict_upper_bound = {d.name: d.upper for d in domains}

    bound_vars = get_bc_variables(bcs, registry)
    bcs_lower_bounds = [
        np.array([dict_lower_bound[b] for b in bt], dtype=np.float64) for bt in bound_vars
    ]
    bcs_upper_bounds = [
        np.array([dict_upper_bound[b] for b in bt], dtype=np.float64) for bt in bound_vars
    ]

    return Bounds(pde_bounds, (bcs_lower_bounds, bcs_upper_bounds))


__all__ = [
    'TrainingSets',
    'Bounds',
    'order_domains',
    'generate_training_sets',
    'get_bounds'
]
