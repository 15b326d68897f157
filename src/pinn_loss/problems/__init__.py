"""
Benchmark problems for PINN-Loss.

Includes:
- benchmarks: PDE systems with analytical solutions
- runner: Configuration-driven training of a benchmark
"""

from .benchmarks import (
    BenchmarkCase,
    analytic_ode_1d,
    analytic_poisson_2d,
    analytic_first_order_system_2d,
    ode_1d,
    poisson_2d,
    first_order_system_2d,
    get_benchmark,
    exact_trial_solutions
)

from .runner import (
    LBFGS_BACKENDS,
    build_chains,
    evaluation_points,
    evaluate_solution,
    run_from_config
)

__all__ = [
    'BenchmarkCase',
    'analytic_ode_1d',
    'analytic_poisson_2d',
    'analytic_first_order_system_2d',
    'ode_1d',
    'poisson_2d',
    'first_order_system_2d',
    'get_benchmark',
    'exact_trial_solutions',
    'LBFGS_BACKENDS',
    'build_chains',
    'evaluation_points',
    'evaluate_solution',
    'run_from_config'
]
