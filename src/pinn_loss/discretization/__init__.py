"""
Discretization layer for PINN-Loss.

Includes:
- derivative: central finite-difference operator
- loss_builder: residual functions from canonical trees
- training_sets: grids and bounds for collocation
- strategies: training strategy descriptions
- aggregators: per-strategy loss reduction
- discretizer: PhysicsInformedNN and discretize
"""

from .derivative import numeric_derivative, get_numeric_derivative
from .loss_builder import (
    split_parameters,
    build_symbolic_loss_function,
    ResidualFunction,
    build_loss_function
)
from .training_sets import TrainingSets, Bounds, order_domains, generate_training_sets, get_bounds
from .strategies import (
    SAMPLING_METHODS,
    QUADRATURE_ALGORITHMS,
    TrainingStrategy,
    GridTraining,
    IterTraining,
    StochasticTraining,
    QuasiRandomTraining,
    QuadratureTraining
)
from .aggregators import (
    generate_design_matrices,
    get_loss_function,
    get_boundary_loss_function
)
from .discretizer import (
    PhysicsInformedNN,
    OptimizationProblem,
    rescale_point_count,
    symbolic_discretize,
    discretize
)

__all__ = [
    'numeric_derivative',
    'get_numeric_derivative',
    'split_parameters',
    'build_symbolic_loss_function',
    'ResidualFunction',
    'build_loss_function',
    'TrainingSets',
    'Bounds',
    'order_domains',
    'generate_training_sets',
    'get_bounds',
    'SAMPLING_METHODS',
    'QUADRATURE_ALGORITHMS',
    'TrainingStrategy',
    'GridTraining',
    'IterTraining',
    'StochasticTraining',
    'QuasiRandomTraining',
    'QuadratureTraining',
    'generate_design_matrices',
    'get_loss_function',
    'get_boundary_loss_function',
    'PhysicsInformedNN',
    'OptimizationProblem',
    'rescale_point_count',
    'symbolic_discretize',
    'discretize'
]
