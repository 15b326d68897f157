"""
Benchmark Problems with Analytical Solutions.

Provides small PDE systems with exact solutions for validating compiled
objectives and trained trial solutions.

Cases:
1. ode_1d: u'(t) = cos(2*pi*t) on [0, 1], u(0) = 0
2. poisson_2d: u_xx + u_yy = -sin(pi*x)*sin(pi*y) on the unit square,
   homogeneous Dirichlet conditions
3. first_order_system_2d: u1_x + 4*u2_y = 0, u2_x + 9*u1_y = 0 on the unit
   square, u1(x, 0) = 2x, u2(x, 0) = 3x
"""

from dataclasses import dataclass
from typing import Callable, List

import numpy as np
import tensorflow as tf

from pinn_loss.core.models.trial_solution import TrialSolution
from pinn_loss.symbolic.expressions import (
    DependentVariable,
    Differential,
    pi,
    sin,
    cos,
    variables,
)
from pinn_loss.symbolic.system import Domain, Interval, PDESystem


@dataclass
class BenchmarkCase:
    """PDE system bundled with its exact solution.

    Attributes:
        name: Case identifier
        pde_system: Symbolic PDE system
        analytic_solution: ``f(points) -> values``; points ``(N, D)``,
            values ``(N,)`` or ``(N, K)`` for K dependent variables
    """

    name: str
    pde_system: PDESystem
    analytic_solution: Callable[[np.ndarray], np.ndarray]


def analytic_ode_1d(t: np.ndarray) -> np.ndarray:
    """Exact solution of ode_1d: u(t) = sin(2*pi*t) / (2*pi).

    Example:
        >>> analytic_ode_1d(np.array([0.25]))
        array([0.15915494])
    """
    return np.sin(2.0 * np.pi * t) / (2.0 * np.pi)


def analytic_poisson_2d(x: np.ndarray, y: np.ndarray) -> np.ndarray:
    """Exact solution of poisson_2d: u(x, y) = sin(pi*x)*sin(pi*y) / (2*pi^2)."""
    return np.sin(np.pi * x) * np.sin(np.pi * y) / (2.0 * np.pi ** 2)


def analytic_first_order_system_2d(x: np.ndarray, y: np.ndarray) -> np.ndarray:
    """Exact solution of first_order_system_2d.

    Solution:
        u1(x, y) = 2x - y/3
        u2(x, y) = 3x - y/2

    Returns:
        Array of shape ``x.shape + (2,)``
    """
    return np.stack([2.0 * x - y / 3.0, 3.0 * x - y / 2.0], axis=-1)


def ode_1d() -> BenchmarkCase:
    t, = variables('t')
    u = DependentVariable('u')
    Dt = Differential(t)

    eq = Dt(u(t)).equals(cos(2 * pi * t))
    bcs = [u(0.0).equals(0.0)]
    domains = [Domain(t, Interval(0.0, 1.0))]

    return BenchmarkCase(
        name='ode_1d',
        pde_system=PDESystem(eq, bcs, domains, [t], [u], name='ode_1d'),
        analytic_solution=lambda points: analytic_ode_1d(points[:, 0])
    )


def poisson_2d() -> BenchmarkCase:
    x, y = variables('x y')
    u = DependentVariable('u')
    Dxx = Differential(x) ** 2
    Dyy = Differential(y) ** 2

    eq = (Dxx(u(x, y)) + Dyy(u(x, y))).equals(-sin(pi * x) * sin(pi * y))
    bcs = [
        u(0.0, y).equals(0.0),
        u(1.0, y).equals(0.0),
        u(x, 0.0).equals(0.0),
        u(x, 1.0).equals(0.0),
    ]
    domains = [Domain(x, Interval(0.0, 1.0)), Domain(y, Interval(0.0, 1.0))]

    return BenchmarkCase(
        name='poisson_2d',
        pde_system=PDESystem(eq, bcs, domains, [x, y], [u], name='poisson_2d'),
        analytic_solution=lambda points: analytic_poisson_2d(points[:, 0], points[:, 1])
    )


def first_order_system_2d() -> BenchmarkCase:
    x, y = variables('x y')
    u1, u2 = DependentVariable('u1'), DependentVariable('u2')
    Dx, Dy = Differential(x), Differential(y)

    eqs = [
        (Dx(u1(x, y)) + 4 * Dy(u2(x, y))).equals(0.0),
        (Dx(u2(x, y)) + 9 * Dy(u1(x, y))).equals(0.0),
    ]
    bcs = [
        u1(x, 0.0).equals(2 * x),
        u2(x, 0.0).equals(3 * x),
    ]
    domains = [Domain(x, Interval(0.0, 1.0)), Domain(y, Interval(0.0, 1.0))]

    return BenchmarkCase(
        name='first_order_system_2d',
        pde_system=PDESystem(eqs, bcs, domains, [x, y], [u1, u2], name='first_order_system_2d'),
        analytic_solution=lambda points: analytic_first_order_system_2d(points[:, 0], points[:, 1])
    )


def get_benchmark(name: str) -> BenchmarkCase:
    """Get a benchmark case by name.

    Raises:
        ValueError: If name is not recognized

    Example:
        >>> case = get_benchmark('poisson_2d')
        >>> case.pde_system.dim
        2
    """
    case_builders = {
        'ode_1d': ode_1d,
        'poisson_2d': poisson_2d,
        'first_order_system_2d': first_order_system_2d
    }

    if name not in case_builders:
        raise ValueError(
            f"Unsupported benchmark: {name}. "
            f"Must be one of: {list(case_builders.keys())}"
        )

    return case_builders[name]()


def exact_trial_solutions(name: str) -> List[TrialSolution]:
    """Trial solutions that reproduce a benchmark's exact solution.

    Each carries a single parameter entering with zero weight, so the
    output is exact for any ``theta`` while gradients stay defined.
    Useful to check that a compiled objective vanishes at the solution.
    """
    def scaled(fn):
        return lambda x, theta: fn(x) + 0.0 * tf.cast(theta[0], x.dtype)

    solutions = {
        'ode_1d': [
            lambda x: tf.sin(2.0 * np.pi * x[:, 0]) / (2.0 * np.pi)
        ],
        'poisson_2d': [
            lambda x: tf.sin(np.pi * x[:, 0]) * tf.sin(np.pi * x[:, 1]) / (2.0 * np.pi ** 2)
        ],
        'first_order_system_2d': [
            lambda x: 2.0 * x[:, 0] - x[:, 1] / 3.0,
            lambda x: 3.0 * x[:, 0] - x[:, 1] / 2.0
        ]
    }

    if name not in solutions:
        raise ValueError(
            f"Unsupported benchmark: {name}. "
            f"Must be one of: {list(solutions.keys())}"
        )

    return [
        TrialSolution(scaled(fn), np.zeros(1), name=f"{name}_exact_{i + 1}")
        for i, fn in enumerate(solutions[name])
    ]


__all__ = [
    'BenchmarkCase',
    'analytic_ode_1d',
    'analytic_poisson_2d',
    'analytic_first_order_system_2d',
    'ode_1d',
    'poisson_2d',
    'first_order_system_2d',
    'get_benchmark',
    'exact_trial_solutions'
]
