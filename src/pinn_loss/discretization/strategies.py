"""
Training Strategies for PINN-Loss.

Each strategy is a small dataclass describing how residuals are sampled
and aggregated into a scalar loss:

- GridTraining: fixed grid with step ``dx``
- IterTraining: grid whose evaluated prefix grows over ``iterations`` calls
- StochasticTraining: fresh uniform random points on every call
- QuasiRandomTraining: pre-generated low-discrepancy minibatches
- QuadratureTraining: adaptive numerical integration
"""

from dataclasses import dataclass, field
from typing import Sequence, Union


SAMPLING_METHODS = ('uniform', 'sobol', 'halton', 'latin_hypercube')

# Minimum domain dimensionality per quadrature algorithm
QUADRATURE_ALGORITHMS = {
    'gk21': 2,
    'gk15': 2,
    'genz-malik': 3,
    'nquad': 2,
}


class TrainingStrategy:
    """Base class for all training strategies."""

    uses_grid = False

    @property
    def name(self) -> str:
        return type(self).__name__


@dataclass(frozen=True)
class GridTraining(TrainingStrategy):
    """Evaluate residuals on a fixed grid.

    Attributes:
        dx: Grid step, scalar or one per independent variable
    """

    dx: Union[float, Sequence[float]] = 0.1
    uses_grid = True

    def __post_init__(self):
        _check_steps(self.dx)


@dataclass
class IterTraining(TrainingStrategy):
    """Grid training over a growing prefix of the PDE grid.

    The evaluated prefix length is ``round(cursor * N / iterations)``,
    clamped to ``[1, N]``; every PDE loss evaluation advances ``cursor``
    by 0.5. The cursor belongs to this instance, so independent
    discretizations never share progress.

    Attributes:
        dx: Grid step, scalar or one per independent variable
        iterations: Number of cursor units over which the prefix reaches N
        cursor: Current position (starts at 1)
    """

    dx: Union[float, Sequence[float]] = 0.1
    iterations: int = 1
    cursor: float = field(default=1.0, init=False)
    uses_grid = True

    def __post_init__(self):
        _check_steps(self.dx)
        if self.iterations < 1:
            raise ValueError(f"iterations must be at least 1, got {self.iterations}")

    def window(self, n_points: int) -> int:
        """Number of leading grid points evaluated at the current cursor."""
        length = int(round(self.cursor * n_points / self.iterations))
        return min(max(length, 1), n_points)

    def advance(self) -> None:
        self.cursor += 0.5

    def reset(self) -> None:
        self.cursor = 1.0


@dataclass(frozen=True)
class StochasticTraining(TrainingStrategy):
    """Uniform random collocation points drawn on every evaluation.

    Attributes:
        number_of_points: Points per equation per evaluation. A fractional
            count (a rescaled boundary density) normalizes the loss as given
            and draws its rounded value.
    """

    number_of_points: Union[int, float] = 100

    def __post_init__(self):
        if self.number_of_points < 1:
            raise ValueError(f"number_of_points must be at least 1, got {self.number_of_points}")


@dataclass(frozen=True)
class QuasiRandomTraining(TrainingStrategy):
    """Low-discrepancy minibatches generated once, one chosen per evaluation.

    Attributes:
        sampling_method: One of SAMPLING_METHODS
        number_of_points: Points per minibatch
        number_of_minibatch: Number of pre-generated minibatches
    """

    sampling_method: str = 'uniform'
    number_of_points: int = 100
    number_of_minibatch: int = 10

    def __post_init__(self):
        if self.sampling_method not in SAMPLING_METHODS:
            raise ValueError(
                f"Unknown sampling_method '{self.sampling_method}'. "
                f"Must be one of: {list(SAMPLING_METHODS)}"
            )
        if self.number_of_points < 1:
            raise ValueError(f"number_of_points must be at least 1, got {self.number_of_points}")
        if self.number_of_minibatch < 1:
            raise ValueError(
                f"number_of_minibatch must be at least 1, got {self.number_of_minibatch}"
            )


@dataclass(frozen=True)
class QuadratureTraining(TrainingStrategy):
    """Adaptive quadrature of the squared residual over the domain.

    Attributes:
        algorithm: One of QUADRATURE_ALGORITHMS
        reltol: Relative tolerance
        abstol: Absolute tolerance
        maxiters: Maximum subdivisions of the quadrature algorithm
        batch: Preferred number of integrand points per batch (0 = all)
    """

    algorithm: str = 'gk21'
    reltol: float = 1e-8
    abstol: float = 1e-8
    maxiters: int = 1000
    batch: int = 0

    def __post_init__(self):
        if self.algorithm not in QUADRATURE_ALGORITHMS:
            raise ValueError(
                f"Unknown quadrature algorithm '{self.algorithm}'. "
                f"Must be one of: {list(QUADRATURE_ALGORITHMS)}"
            )
        if self.maxiters < 1:
            raise ValueError(f"maxiters must be at least 1, got {self.maxiters}")
        if self.batch < 0:
            raise ValueError(f"batch must be non-negative, got {self.batch}")

    @property
    def min_dim(self) -> int:
        return QUADRATURE_ALGORITHMS[self.algorithm]


def _check_steps(dx) -> None:
    steps = [dx] if not isinstance(dx, (list, tuple)) else list(dx)
    for step in steps:
        if step <= 0:
            raise ValueError(f"Grid step must be positive, got {step}")


__all__ = [
    'SAMPLING_METHODS',
    'QUADRATURE_ALGORITHMS',
    'TrainingStrategy',
    'GridTraining',
    'IterTraining',
    'StochasticTraining',
    'QuasiRandomTraining',
    'QuadratureTraining'
]
