"""
Core infrastructure module for PINN-Loss.

Shared components:
- errors: Exception hierarchy
- models: Trial solutions and network builders
- training: Optimizer adapters
- utils: Configuration, logging, helpers
"""

from .errors import (
    PINNLossError,
    DuplicateVariableError,
    MalformedBoundaryConditionError,
    ParameterLengthMismatchError,
    DimensionalityError,
    UnrecognizedExpressionPatternError,
    ConfigurationError
)

__all__ = [
    'PINNLossError',
    'DuplicateVariableError',
    'MalformedBoundaryConditionError',
    'ParameterLengthMismatchError',
    'DimensionalityError',
    'UnrecognizedExpressionPatternError',
    'ConfigurationError'
]
