"""Parameter block layouts read by the prior cost functions.

pyceres hands every cost a list of flat float64 arrays. These constants
and helpers fix what lives where:

- Pose block (6): [rx, ry, rz, tx, ty, tz]
    axis-angle camera-to-world rotation, then the optical center
- Bias block (7): [rx, ry, rz, tx, ty, tz, scale]
    per-rig similarity correction
- Uncertainty block (1): [std_deviation]
- Point block (3): [x, y, z]
"""

import numpy as np
from scipy.spatial.transform import Rotation

POSE_BLOCK_SIZE = 6
BIAS_BLOCK_SIZE = 7
UNCERTAINTY_BLOCK_SIZE = 1
POINT_BLOCK_SIZE = 3

ROTATION_SLICE = slice(0, 3)
TRANSLATION_SLICE = slice(3, 6)
BIAS_SCALE_INDEX = 6


def make_pose_block(
    *,
    rotation: np.ndarray | Rotation | None = None,
    translation: np.ndarray | None = None
) -> np.ndarray:
    """Build a pose parameter block.

    Args:
        rotation: (3,) axis-angle vector or scipy Rotation (None = identity)
        translation: (3,) optical center (None = origin)

    Returns:
        (6,) float64 pose block
    """
    block = np.zeros(POSE_BLOCK_SIZE)
    if rotation is not None:
        if isinstance(rotation, Rotation):
            rotation = rotation.as_rotvec()
        block[ROTATION_SLICE] = _as_vec3(value=rotation, name="rotation")
    if translation is not None:
        block[TRANSLATION_SLICE] = _as_vec3(value=translation, name="translation")
    return block


def make_bias_block(
    *,
    rotation: np.ndarray | Rotation | None = None,
    translation: np.ndarray | None = None,
    scale: float = 1.0
) -> np.ndarray:
    """Build a rig bias parameter block.

    Args:
        rotation: (3,) axis-angle vector or scipy Rotation (None = identity)
        translation: (3,) bias translation (None = zero)
        scale: Uniform scale of the bias

    Returns:
        (7,) float64 bias block
    """
    block = np.zeros(BIAS_BLOCK_SIZE)
    block[:POSE_BLOCK_SIZE] = make_pose_block(rotation=rotation, translation=translation)
    block[BIAS_SCALE_INDEX] = scale
    return block


def _as_vec3(*, value: np.ndarray, name: str) -> np.ndarray:
    vec = np.asarray(value, dtype=np.float64)
    if vec.shape != (3,):
        raise ValueError(f"{name} must have shape (3,), got {vec.shape}")
    return vec
