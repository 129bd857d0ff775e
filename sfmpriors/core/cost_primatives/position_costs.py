"""Position prior cost functions.

These anchor shot positions and 3D points to prior knowledge (GPS,
surveyed points, rig calibration) and regularize scale.

Cost Functions:
- AbsolutePositionCost: Shot position vs. prior, per-axis, fixed or estimated std
- RigPositionPriorCost: Shot position vs. prior seen through a shared rig bias
- UnitTranslationPriorCost: Keep a translation near unit norm
- PointPositionPriorCost: 3D point vs. prior
"""

import logging

import jax.numpy as jnp
import numpy as np

from sfmpriors.core.config import DifferentiationConfig
from sfmpriors.core.cost_primatives.base_cost import BaseCostFunction, inverse_std_deviation
from sfmpriors.core.cost_primatives.math_utils import apply_rotation
from sfmpriors.core.cost_primatives.shot_functions import ShotPoseReader
from sfmpriors.data.parameter_blocks import (
    BIAS_BLOCK_SIZE,
    BIAS_SCALE_INDEX,
    POINT_BLOCK_SIZE,
    POSE_BLOCK_SIZE,
    ROTATION_SLICE,
    TRANSLATION_SLICE,
    UNCERTAINTY_BLOCK_SIZE,
)
from sfmpriors.data.priors import PositionConstraintType

logger = logging.getLogger(__name__)


def borrow_position(*, position: np.ndarray, name: str = "position_prior") -> np.ndarray:
    """View a prior position as a (3,) float64 array without copying.

    The caller keeps ownership: the buffer must outlive the cost and must
    not change while a solve using it is running.

    Args:
        position: (3,) prior position
        name: Argument name for the error message

    Returns:
        (3,) float64 view of the position
    """
    prior = np.asarray(position, dtype=np.float64)
    if prior.shape != (3,):
        raise ValueError(f"{name} must have shape (3,), got {prior.shape}")
    return prior


class AbsolutePositionCost(BaseCostFunction):
    """Fit shot position to an absolute position prior.

    Model:
        residual = (prior - position) * scale
        scale = 1/std_horizontal for X, Y and 1/std_vertical for Z,
                or 1/sigma with sigma read from an extra parameter block
        residual[axis] = 0 for every axis outside constraint_type

    Parameters:
        - pose (6), plus rig camera pose (6) for rig shots
        - std_deviation (1), only if has_std_deviation_param

    An estimated sigma reaching zero makes the residual diverge; bounding
    that parameter is left to whoever builds the problem.
    """

    def __init__(
        self,
        *,
        position_prior: np.ndarray,
        std_deviation_horizontal: float = 1.0,
        std_deviation_vertical: float = 1.0,
        has_std_deviation_param: bool = False,
        constraint_type: PositionConstraintType = PositionConstraintType.XYZ,
        is_rig_shot: bool = False,
        config: DifferentiationConfig | None = None
    ) -> None:
        """Initialize absolute position cost.

        Args:
            position_prior: (3,) prior position (borrowed, not copied)
            std_deviation_horizontal: Std of the X and Y components
            std_deviation_vertical: Std of the Z component
            has_std_deviation_param: Read a single std from an extra parameter block
            constraint_type: Axes to constrain
            is_rig_shot: Shot is described by rig instance + rig camera poses
            config: Jacobian evaluation settings
        """
        super().__init__(config=config)
        self.position_prior = borrow_position(position=position_prior)
        self.has_std_deviation_param = has_std_deviation_param
        self.constraint_type = constraint_type
        self.axis_mask = constraint_type.axis_mask()
        self.pose_reader = ShotPoseReader(is_rig_shot=is_rig_shot)

        if has_std_deviation_param:
            self.axis_scales = None
        else:
            scale_xy = inverse_std_deviation(
                std_deviation=std_deviation_horizontal, name="std_deviation_horizontal"
            )
            scale_z = inverse_std_deviation(
                std_deviation=std_deviation_vertical, name="std_deviation_vertical"
            )
            self.axis_scales = np.array([scale_xy, scale_xy, scale_z])

        block_sizes = self.pose_reader.block_sizes
        if has_std_deviation_param:
            block_sizes = block_sizes + [UNCERTAINTY_BLOCK_SIZE]

        self.set_num_residuals(3)
        self.set_parameter_block_sizes(block_sizes)
        logger.debug(
            f"AbsolutePositionCost: axes={constraint_type}, "
            f"estimated_std={has_std_deviation_param}, rig={is_rig_shot}"
        )

    def _compute_residual(
        self,
        parameters: list
    ):
        """Compute masked, scaled position error.

        Args:
            parameters: [pose, (rig_camera_pose), (std_deviation)]

        Returns:
            3D residual, exactly zero on unconstrained axes
        """
        residual = self.position_prior - self.pose_reader.position(parameters=parameters)

        if self.has_std_deviation_param:
            residual = residual / parameters[self.pose_reader.num_blocks][0]
        else:
            residual = residual * self.axis_scales

        return jnp.where(self.axis_mask, residual, 0.0)


class RigPositionPriorCost(BaseCostFunction):
    """Fit shot position to a prior expressed in a rig's biased frame.

    Model:
        expected = bias_scale * R_bias @ prior + t_bias
        residual = (optical_center - expected) / std

    One bias block shared by all shots of a rig lets its calibration be
    refined against many position priors.

    Parameters:
        - pose (6)
        - bias (7): [rx, ry, rz, tx, ty, tz, scale]
    """

    def __init__(
        self,
        *,
        position_prior: np.ndarray,
        std_deviation: float,
        config: DifferentiationConfig | None = None
    ) -> None:
        """Initialize rig position prior cost.

        Args:
            position_prior: (3,) prior position (borrowed, not copied)
            std_deviation: Std of the prior
            config: Jacobian evaluation settings
        """
        super().__init__(config=config)
        self.position_prior = borrow_position(position=position_prior)
        self.scale = inverse_std_deviation(std_deviation=std_deviation)
        self.set_num_residuals(3)
        self.set_parameter_block_sizes([POSE_BLOCK_SIZE, BIAS_BLOCK_SIZE])

    def _compute_residual(
        self,
        parameters: list
    ):
        """Compute error between optical center and biased prior.

        Args:
            parameters: [pose, bias]

        Returns:
            3D residual
        """
        pose = parameters[0]
        bias = parameters[1]

        expected = (
            bias[BIAS_SCALE_INDEX] * apply_rotation(bias[ROTATION_SLICE], self.position_prior)
            + bias[TRANSLATION_SLICE]
        )
        return self.scale * (pose[TRANSLATION_SLICE] - expected)


class UnitTranslationPriorCost(BaseCostFunction):
    """Soft prior keeping a translation at unit norm.

    Model:
        residual = log(||t||^2)

    Zero at unit norm, negative and unbounded as t shrinks to zero.
    Fixes the scale of otherwise scale-ambiguous reconstructions.
    """

    def __init__(self, *, config: DifferentiationConfig | None = None) -> None:
        super().__init__(config=config)
        self.set_num_residuals(1)
        self.set_parameter_block_sizes([POSE_BLOCK_SIZE])

    def _compute_residual(
        self,
        parameters: list
    ):
        translation = parameters[0][TRANSLATION_SLICE]
        return jnp.reshape(jnp.log(jnp.dot(translation, translation)), (1,))


class PointPositionPriorCost(BaseCostFunction):
    """Anchor a 3D point to a prior position.

    Model:
        residual = (point - prior) / std
    """

    def __init__(
        self,
        *,
        position_prior: np.ndarray,
        std_deviation: float,
        config: DifferentiationConfig | None = None
    ) -> None:
        """Initialize point prior cost.

        Args:
            position_prior: (3,) prior position (borrowed, not copied)
            std_deviation: Std of the prior
            config: Jacobian evaluation settings
        """
        super().__init__(config=config)
        self.position_prior = borrow_position(position=position_prior)
        self.scale = inverse_std_deviation(std_deviation=std_deviation)
        self.set_num_residuals(3)
        self.set_parameter_block_sizes([POINT_BLOCK_SIZE])

    def _compute_residual(
        self,
        parameters: list
    ):
        return self.scale * (parameters[0] - self.position_prior)
