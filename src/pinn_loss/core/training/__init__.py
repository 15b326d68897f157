"""
Training utilities for PINN-Loss.

Includes:
- optimizers: L-BFGS adapters (scipy and TensorFlow Probability)
"""

from .optimizers import (
    lbfgs_optimizer_scipy,
    lbfgs_optimizer_tfp,
    check_tfp_availability,
    TFP_AVAILABLE
)

__all__ = [
    'lbfgs_optimizer_scipy',
    'lbfgs_optimizer_tfp',
    'check_tfp_availability',
    'TFP_AVAILABLE'
]
