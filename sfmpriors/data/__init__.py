"""Data structures for SfmPriors.

- parameter_blocks: Layout of pose, bias, uncertainty and point blocks
- priors: Axis masks and raster fields
"""

from .parameter_blocks import (
    POSE_BLOCK_SIZE,
    BIAS_BLOCK_SIZE,
    UNCERTAINTY_BLOCK_SIZE,
    POINT_BLOCK_SIZE,
    ROTATION_SLICE,
    TRANSLATION_SLICE,
    BIAS_SCALE_INDEX,
    make_pose_block,
    make_bias_block,
)
from .priors import PositionConstraintType, RasterField

__all__ = [
    "POSE_BLOCK_SIZE",
    "BIAS_BLOCK_SIZE",
    "UNCERTAINTY_BLOCK_SIZE",
    "POINT_BLOCK_SIZE",
    "ROTATION_SLICE",
    "TRANSLATION_SLICE",
    "BIAS_SCALE_INDEX",
    "make_pose_block",
    "make_bias_block",
    "PositionConstraintType",
    "RasterField",
]
