"""
PDE system description: domains and the bundle of equations, boundary
conditions and variables that the discretizer consumes.
"""

from dataclasses import dataclass, field
from typing import List, Sequence, Union

from pinn_loss.symbolic.expressions import DependentVariable, Equation, VarRef


@dataclass(frozen=True)
class Interval:
    """Closed interval ``[lower, upper]``."""

    lower: float
    upper: float

    def __post_init__(self):
        if self.upper < self.lower:
            raise ValueError(
                f"Interval upper bound ({self.upper}) must not be below lower bound ({self.lower})"
            )


@dataclass(frozen=True)
class Domain:
    """Independent variable together with its interval."""

    variable: VarRef
    domain: Interval

    @property
    def lower(self) -> float:
        return self.domain.lower

    @property
    def upper(self) -> float:
        return self.domain.upper

    @property
    def name(self) -> str:
        return self.variable.name if isinstance(self.variable, VarRef) else str(self.variable)


@dataclass
class PDESystem:
    """Symbolic PDE system.

    Attributes:
        eqs: One equation, or a list of equations for a system
        bcs: Boundary (and initial) conditions, one equation each
        domains: One Domain per independent variable
        indvars: Independent variables, in coordinate order
        depvars: Dependent variables, in trial-solution order
    """

    eqs: Union[Equation, List[Equation]]
    bcs: List[Equation]
    domains: List[Domain]
    indvars: Sequence[Union[VarRef, str]]
    depvars: Sequence[Union[DependentVariable, str]]
    name: str = field(default='pde_system')

    @property
    def is_system(self) -> bool:
        return isinstance(self.eqs, (list, tuple))

    @property
    def dim(self) -> int:
        return len(self.domains)


__all__ = ['Interval', 'Domain', 'PDESystem']
