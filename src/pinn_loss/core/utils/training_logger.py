"""Loss logger utilities for PINN-Loss."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List

import matplotlib.pyplot as plt


@dataclass
class LossLogger:
    """Collects objective terms during optimization and renders diagnostic plots."""

    iterations: List[int] = field(default_factory=list)
    losses: Dict[str, List[float]] = field(
        default_factory=lambda: {"total": [], "pde": [], "boundary": []}
    )

    def log_iteration(self, iteration: int, total_loss: float, pde_loss: float, boundary_loss: float) -> None:
        self.iterations.append(iteration)
        self.losses["total"].append(float(total_loss))
        self.losses["pde"].append(float(pde_loss))
        self.losses["boundary"].append(float(boundary_loss))

    def log_problem(self, iteration: int, problem) -> None:
        """Record the terms of the most recent objective evaluation of ``problem``.

        Reads the cached terms rather than evaluating again, so logging
        neither draws sample points nor advances an IterTraining cursor.

        Raises:
            ValueError: If the objective has not been evaluated yet
        """
        if not problem.last_terms:
            raise ValueError("No objective evaluation to log; call the objective first")
        pde_loss = problem.last_terms["pde"]
        boundary_loss = problem.last_terms["boundary"]
        self.log_iteration(iteration, pde_loss + boundary_loss, pde_loss, boundary_loss)

    @property
    def last(self) -> Dict[str, float]:
        return {name: values[-1] for name, values in self.losses.items() if values}

    def plot_losses(self) -> plt.Figure:
        fig, (ax1, ax2) = plt.subplots(1, 2, figsize=(14, 5))

        ax1.semilogy(self.iterations, self.losses["total"], label="Total Loss")
        ax1.semilogy(self.iterations, self.losses["pde"], label="PDE Loss")
        ax1.semilogy(self.iterations, self.losses["boundary"], label="Boundary Loss")
        ax1.set_xlabel("Iteration")
        ax1.set_ylabel("Loss (log scale)")
        ax1.legend()
        ax1.grid(True, which="both", ls="--", alpha=0.4)

        ax2.plot(self.iterations, self.losses["total"], label="Total Loss")
        ax2.plot(self.iterations, self.losses["pde"], label="PDE Loss")
        ax2.plot(self.iterations, self.losses["boundary"], label="Boundary Loss")
        ax2.set_xlabel("Iteration")
        ax2.set_ylabel("Loss")
        ax2.legend()
        ax2.grid(True, ls="--", alpha=0.4)

        fig.tight_layout()
        return fig

    def to_dict(self) -> Dict[str, List[float]]:
        return {"iterations": self.iterations, **self.losses}


__all__ = ['LossLogger']
