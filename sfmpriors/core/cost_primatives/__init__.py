"""Cost functions for SfmPriors.

Modules:
- base_cost: pyceres base class with autodiff/numeric jacobians
- math_utils: Angle wrapping and axis-angle rotation
- shot_functions: Shot rotation and optical center from pose blocks
- position_costs: Position, rig, unit translation and point priors
- orientation_costs: Up vector, pan, tilt and roll priors
- heatmap_costs: Raster field prior

Usage:
    from sfmpriors.core.cost_primatives import PanAngleCost
"""

from .base_cost import BaseCostFunction, inverse_std_deviation
from .math_utils import (
    apply_rig_rotation,
    apply_rotation,
    normalize_angle_difference,
)
from .shot_functions import ShotPoseReader
from .position_costs import (
    AbsolutePositionCost,
    RigPositionPriorCost,
    UnitTranslationPriorCost,
    PointPositionPriorCost,
)
from .orientation_costs import (
    UpVectorCost,
    PanAngleCost,
    TiltAngleCost,
    RollAngleCost,
)
from .heatmap_costs import HeatmapCost

__all__ = [
    # Base
    "BaseCostFunction",
    "inverse_std_deviation",
    # Math
    "apply_rig_rotation",
    "apply_rotation",
    "normalize_angle_difference",
    "ShotPoseReader",
    # Position priors
    "AbsolutePositionCost",
    "RigPositionPriorCost",
    "UnitTranslationPriorCost",
    "PointPositionPriorCost",
    # Orientation priors
    "UpVectorCost",
    "PanAngleCost",
    "TiltAngleCost",
    "RollAngleCost",
    # Raster prior
    "HeatmapCost",
]
