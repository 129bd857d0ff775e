"""Read shot geometry out of pose parameter blocks.

A plain shot owns one pose block. A rig shot is described by two: the
rig instance pose followed by the pose of the camera within the rig.
Both poses map camera coordinates to world coordinates, so for a rig shot

    rotation = R_instance * R_camera
    position = R_instance * t_camera + t_instance
"""

from sfmpriors.core.cost_primatives.math_utils import apply_rig_rotation, apply_rotation
from sfmpriors.data.parameter_blocks import POSE_BLOCK_SIZE, ROTATION_SLICE, TRANSLATION_SLICE


class ShotPoseReader:
    """Extracts rotation and optical center of a shot from its pose blocks."""

    def __init__(self, *, is_rig_shot: bool = False) -> None:
        """Initialize reader.

        Args:
            is_rig_shot: Whether the shot is a rig instance + rig camera pair
        """
        self.is_rig_shot = is_rig_shot

    @property
    def num_blocks(self) -> int:
        """Number of leading parameter blocks describing the shot."""
        return 2 if self.is_rig_shot else 1

    @property
    def block_sizes(self) -> list[int]:
        """Sizes of the leading parameter blocks describing the shot."""
        return [POSE_BLOCK_SIZE] * self.num_blocks

    def rotate(self, *, parameters: list, point):
        """Rotate a camera-frame vector into the world frame.

        Args:
            parameters: Parameter blocks, shot pose block(s) first
            point: (3,) vector in camera coordinates

        Returns:
            (3,) vector in world coordinates
        """
        if self.is_rig_shot:
            instance, camera = parameters[0], parameters[1]
            return apply_rig_rotation(instance[ROTATION_SLICE], camera[ROTATION_SLICE], point)
        return apply_rotation(parameters[0][ROTATION_SLICE], point)

    def position(self, *, parameters: list):
        """Optical center of the shot in world coordinates.

        Args:
            parameters: Parameter blocks, shot pose block(s) first

        Returns:
            (3,) optical center
        """
        if self.is_rig_shot:
            instance, camera = parameters[0], parameters[1]
            return (
                apply_rotation(instance[ROTATION_SLICE], camera[TRANSLATION_SLICE])
                + instance[TRANSLATION_SLICE]
            )
        return parameters[0][TRANSLATION_SLICE]
