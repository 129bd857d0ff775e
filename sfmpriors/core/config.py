"""Configuration shared by all SfmPriors cost functions.

This module provides:
- DifferentiationConfig: How cost functions fill jacobians for pyceres
- enable_x64(): Switch jax to double precision

Residuals are evaluated in float64 so that the singularity thresholds
(down to 1e-8) keep their meaning during jacobian evaluation.
"""

import logging
from dataclasses import dataclass
from typing import Literal

import jax

logger = logging.getLogger(__name__)


JacobianMethod = Literal["autodiff", "numeric"]


@dataclass(frozen=True)
class DifferentiationConfig:
    """Configuration for jacobian evaluation.

    Used by ALL cost functions. The residual code is written once and
    evaluated either over plain float64 arrays or, for jacobians, over
    jax forward-mode tangents.

    Attributes:
        method: "autodiff" (jax.jacfwd, exact) or "numeric" (finite differences)
        numeric_step: Step size for finite differences
    """

    method: JacobianMethod = "autodiff"
    numeric_step: float = 1e-8

    def __post_init__(self) -> None:
        if self.method not in ("autodiff", "numeric"):
            raise ValueError(f"Unknown jacobian method: {self.method}")
        if self.numeric_step <= 0.0:
            raise ValueError(f"numeric_step must be positive, got {self.numeric_step}")


DEFAULT_DIFFERENTIATION_CONFIG = DifferentiationConfig()


def enable_x64() -> None:
    """Enable float64 in jax.

    jax defaults to float32, which is too coarse for the singularity
    thresholds used by the orientation costs.
    """
    jax.config.update("jax_enable_x64", True)
    logger.debug("Enabled jax float64 support")
