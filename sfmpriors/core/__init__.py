"""Core residual infrastructure for SfmPriors.

- config: Jacobian evaluation settings, jax precision
- interpolation: Bicubic grid interpolation
- cost_primatives: Library of prior cost functions

Usage:
    from sfmpriors.core import AbsolutePositionCost, DifferentiationConfig

    cost = AbsolutePositionCost(
        position_prior=gps_position,
        std_deviation_horizontal=3.0,
        std_deviation_vertical=10.0,
        config=DifferentiationConfig(method="autodiff"),
    )
    problem.add_residual_block(cost, None, [pose_block])
"""

from .config import (
    DifferentiationConfig,
    DEFAULT_DIFFERENTIATION_CONFIG,
    enable_x64,
)
from .interpolation import BiCubicInterpolator, cubic_hermite_spline
from .cost_primatives import (
    BaseCostFunction,
    apply_rig_rotation,
    apply_rotation,
    normalize_angle_difference,
    ShotPoseReader,
    AbsolutePositionCost,
    RigPositionPriorCost,
    UnitTranslationPriorCost,
    PointPositionPriorCost,
    UpVectorCost,
    PanAngleCost,
    TiltAngleCost,
    RollAngleCost,
    HeatmapCost,
)

__all__ = [
    # Configuration
    "DifferentiationConfig",
    "DEFAULT_DIFFERENTIATION_CONFIG",
    "enable_x64",
    # Interpolation
    "BiCubicInterpolator",
    "cubic_hermite_spline",
    # Cost functions
    "BaseCostFunction",
    "apply_rig_rotation",
    "apply_rotation",
    "normalize_angle_difference",
    "ShotPoseReader",
    "AbsolutePositionCost",
    "RigPositionPriorCost",
    "UnitTranslationPriorCost",
    "PointPositionPriorCost",
    "UpVectorCost",
    "PanAngleCost",
    "TiltAngleCost",
    "RollAngleCost",
    "HeatmapCost",
]
