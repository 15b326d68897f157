"""
PINN-Loss: Physics-Informed Neural Network loss compiler

Compiles symbolic PDE systems into scalar objectives over flat parameter
vectors, ready for any optimizer.

Example:
    >>> from pinn_loss import discretize, PhysicsInformedNN, GridTraining, build_chain
    >>> from pinn_loss.problems import poisson_2d
    >>> case = poisson_2d()
    >>> problem = discretize(case.pde_system, PhysicsInformedNN(build_chain(2)))
    >>> objective, theta0 = problem
"""

__version__ = "0.1.0"
__author__ = "PINN-Loss Contributors"

from .core.errors import (
    PINNLossError,
    DuplicateVariableError,
    MalformedBoundaryConditionError,
    ParameterLengthMismatchError,
    DimensionalityError,
    UnrecognizedExpressionPatternError,
    ConfigurationError
)
from .core.models import TrialSolution, build_chain
from .symbolic import (
    Variable,
    variables,
    DependentVariable,
    Differential,
    Equation,
    Interval,
    Domain,
    PDESystem
)
from .discretization import (
    GridTraining,
    IterTraining,
    StochasticTraining,
    QuasiRandomTraining,
    QuadratureTraining,
    PhysicsInformedNN,
    OptimizationProblem,
    discretize,
    symbolic_discretize
)

__all__ = [
    'PINNLossError',
    'DuplicateVariableError',
    'MalformedBoundaryConditionError',
    'ParameterLengthMismatchError',
    'DimensionalityError',
    'UnrecognizedExpressionPatternError',
    'ConfigurationError',
    'TrialSolution',
    'build_chain',
    'Variable',
    'variables',
    'DependentVariable',
    'Differential',
    'Equation',
    'Interval',
    'Domain',
    'PDESystem',
    'GridTraining',
    'IterTraining',
    'StochasticTraining',
    'QuasiRandomTraining',
    'QuadratureTraining',
    'PhysicsInformedNN',
    'OptimizationProblem',
    'discretize',
    'symbolic_discretize'
]
