"""
Exception hierarchy for PINN-Loss.

Every error raised while compiling or discretizing a PDE system derives
from PINNLossError, so callers can catch the whole family at once.
"""


class PINNLossError(Exception):
    """Base class for all PINN-Loss errors."""
    pass


class DuplicateVariableError(PINNLossError):
    """Raised when two variable names collide in a registry."""
    pass


class MalformedBoundaryConditionError(PINNLossError):
    """Raised when a boundary condition is not a single equation."""
    pass


class ParameterLengthMismatchError(PINNLossError):
    """Raised when parameter sub-vector lengths do not cover the flat vector."""
    pass


class DimensionalityError(PINNLossError):
    """Raised when a quadrature algorithm is used on too few dimensions."""
    pass


class UnrecognizedExpressionPatternError(PINNLossError):
    """Raised when an expression cannot be rewritten into evaluable form.

    Dependent variables may only appear applied to their arguments, e.g.
    ``u(x, y)``, or underneath a chain of derivative applications, e.g.
    ``Dx(Dy(u(x, y)))``. Anything else is rejected during rewriting.
    """
    pass


class ConfigurationError(PINNLossError):
    """Exception raised for configuration errors."""
    pass


__all__ = [
    'PINNLossError',
    'DuplicateVariableError',
    'MalformedBoundaryConditionError',
    'ParameterLengthMismatchError',
    'DimensionalityError',
    'UnrecognizedExpressionPatternError',
    'ConfigurationError'
]
