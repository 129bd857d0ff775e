"""Orientation prior cost functions.

Constrain the camera-to-world rotation of a shot with measured gravity
or with pan/tilt/roll angles (compass, inclinometer, EXIF).

Cost Functions:
- UpVectorCost: Measured gravity direction should map to world up
- PanAngleCost: Heading of the viewing direction
- TiltAngleCost: Elevation of the viewing direction
- RollAngleCost: Rotation about the viewing direction

Where an angle is undefined (looking straight up or down, or at the edge
of the arcsine domain) the residual is forced to an exact constant zero,
so that no NaN or Inf reaches the solver. The prior then stops
constraining the shot until it leaves the singular configuration.
"""

import logging

import jax.numpy as jnp
import numpy as np

from sfmpriors.core.config import DifferentiationConfig
from sfmpriors.core.cost_primatives.base_cost import BaseCostFunction, inverse_std_deviation
from sfmpriors.core.cost_primatives.math_utils import apply_rotation, normalize_angle_difference
from sfmpriors.core.cost_primatives.shot_functions import ShotPoseReader
from sfmpriors.data.parameter_blocks import POSE_BLOCK_SIZE, ROTATION_SLICE

logger = logging.getLogger(__name__)

# Horizontal components of the viewing direction below which pan is undefined
PAN_EPSILON = 1e-8
# Horizontal norm below which roll is undefined, also margin to asin(-1)
ROLL_EPSILON = 1e-5

CAMERA_RIGHT = np.array([1.0, 0.0, 0.0])
CAMERA_FORWARD = np.array([0.0, 0.0, 1.0])
WORLD_UP = np.array([0.0, 0.0, 1.0])


class UpVectorCost(BaseCostFunction):
    """Fit measured gravity direction to world up.

    Model:
        up_world = R @ normalize(acceleration)
        residual = (up_world - [0, 0, 1]) / std

    A direction fit, not an angle fit: 3 residuals.

    Parameters:
        - pose (6), plus rig camera pose (6) for rig shots
    """

    def __init__(
        self,
        *,
        acceleration: np.ndarray,
        std_deviation: float,
        is_rig_shot: bool = False,
        config: DifferentiationConfig | None = None
    ) -> None:
        """Initialize up vector cost.

        Args:
            acceleration: (3,) measured acceleration in camera coordinates
            std_deviation: Std of the prior
            is_rig_shot: Shot is described by rig instance + rig camera poses
            config: Jacobian evaluation settings
        """
        super().__init__(config=config)
        acceleration = np.asarray(acceleration, dtype=np.float64)
        if acceleration.shape != (3,):
            raise ValueError(f"acceleration must have shape (3,), got {acceleration.shape}")
        norm = np.linalg.norm(acceleration)
        if norm == 0.0:
            raise ValueError("acceleration must be non-zero")

        self.acceleration = acceleration / norm
        self.scale = inverse_std_deviation(std_deviation=std_deviation)
        self.pose_reader = ShotPoseReader(is_rig_shot=is_rig_shot)
        self.set_num_residuals(3)
        self.set_parameter_block_sizes(self.pose_reader.block_sizes)

    def _compute_residual(
        self,
        parameters: list
    ):
        """Compute up vector error.

        Args:
            parameters: [pose] or [instance_pose, rig_camera_pose]

        Returns:
            3D residual
        """
        up_world = self.pose_reader.rotate(parameters=parameters, point=self.acceleration)
        return self.scale * (up_world - WORLD_UP)


class _AnglePriorCost(BaseCostFunction):
    """Shared setup of the single-angle priors over one pose block."""

    def __init__(
        self,
        *,
        angle: float,
        std_deviation: float,
        config: DifferentiationConfig | None = None
    ) -> None:
        """Initialize angle prior.

        Args:
            angle: Prior angle in radians
            std_deviation: Std of the prior in radians
            config: Jacobian evaluation settings
        """
        super().__init__(config=config)
        self.angle = float(angle)
        self.scale = inverse_std_deviation(std_deviation=std_deviation)
        self.set_num_residuals(1)
        self.set_parameter_block_sizes([POSE_BLOCK_SIZE])
        logger.debug(f"{type(self).__name__}: angle={self.angle:.4f} rad, scale={self.scale:.3f}")

    def _angle_residual(self, predicted_angle):
        return jnp.reshape(
            self.scale * normalize_angle_difference(predicted_angle, self.angle), (1,)
        )


class PanAngleCost(_AnglePriorCost):
    """Fit heading of the viewing direction to a pan prior.

    Model:
        d = R @ [0, 0, 1]
        pan = atan2(d_x, d_y)
        residual = wrap(pan - prior) / std

    Residual is 0 when d is vertical (|d_x|, |d_y| < 1e-8).
    """

    def _compute_residual(
        self,
        parameters: list
    ):
        forward = apply_rotation(parameters[0][ROTATION_SLICE], CAMERA_FORWARD)

        if jnp.abs(forward[0]) < PAN_EPSILON and jnp.abs(forward[1]) < PAN_EPSILON:
            logger.debug("PanAngleCost: vertical viewing direction, pan prior suppressed")
            return jnp.zeros(1)

        return self._angle_residual(jnp.arctan2(forward[0], forward[1]))


class TiltAngleCost(_AnglePriorCost):
    """Fit elevation of the viewing direction to a tilt prior.

    Model:
        d = R @ [0, 0, 1]
        tilt = -atan2(d_z, ||(d_x, d_y)||)
        residual = wrap(tilt - prior) / std
    """

    def _compute_residual(
        self,
        parameters: list
    ):
        forward = apply_rotation(parameters[0][ROTATION_SLICE], CAMERA_FORWARD)
        horizontal = jnp.sqrt(forward[0] * forward[0] + forward[1] * forward[1])
        return self._angle_residual(-jnp.arctan2(forward[2], horizontal))


class RollAngleCost(_AnglePriorCost):
    """Fit rotation about the viewing direction to a roll prior.

    Model:
        x = R @ [1, 0, 0], z = R @ [0, 0, 1]
        a = normalize(z_y, -z_x, 0)      horizontal, perpendicular to z
        sin(roll) = z . (x cross a)
        residual = wrap(asin(sin(roll)) - prior) / std

    Residual is 0 when ||(z_x, z_y)|| < 1e-5 or sin(roll) <= -(1 - 1e-5).
    """

    def _compute_residual(
        self,
        parameters: list
    ):
        rotation = parameters[0][ROTATION_SLICE]
        right = apply_rotation(rotation, CAMERA_RIGHT)
        forward = apply_rotation(rotation, CAMERA_FORWARD)

        horizontal = jnp.sqrt(forward[1] * forward[1] + forward[0] * forward[0])
        if horizontal < ROLL_EPSILON:
            logger.debug("RollAngleCost: vertical viewing direction, roll prior suppressed")
            return jnp.zeros(1)

        a = jnp.stack([forward[1], -forward[0], jnp.zeros_like(forward[0])]) / horizontal
        b = jnp.cross(right, a)
        sin_roll = jnp.dot(forward, b)
        if sin_roll <= -(1.0 - ROLL_EPSILON):
            logger.debug("RollAngleCost: sin(roll) at arcsine domain edge, roll prior suppressed")
            return jnp.zeros(1)

        return self._angle_residual(jnp.arcsin(sin_roll))
