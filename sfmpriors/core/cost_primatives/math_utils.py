"""Differentiable math shared by the prior cost functions.

Every function here is written against jax.numpy so that the same code
runs on plain float64 arrays (residual evaluation) and on jax tracers
(jacobian evaluation with jax.jacfwd). Branches use Python control flow
on concrete values, so these functions must not be wrapped in jax.jit.
"""

import jax.numpy as jnp
import numpy as np

# Below this squared angle the Rodrigues formula is replaced by its first
# order expansion, which keeps the derivative finite at the identity.
ROTATION_EPSILON = float(np.finfo(np.float64).eps)

TWO_PI = 2.0 * np.pi


def normalize_angle_difference(a, b):
    """Signed shortest angular difference between two angles.

    Args:
        a: Angle in radians
        b: Angle in radians

    Returns:
        Difference in (-pi, pi], congruent to a - b modulo 2*pi
    """
    d = a - b
    if -np.pi < d <= np.pi:
        return d
    return d - TWO_PI * jnp.ceil((d - np.pi) / TWO_PI)


def apply_rotation(rotation, point):
    """Rotate a 3D point by an axis-angle rotation.

    Args:
        rotation: (3,) axis-angle vector (angle = norm)
        point: (3,) point to rotate

    Returns:
        (3,) rotated point
    """
    rotation = jnp.asarray(rotation)
    point = jnp.asarray(point)

    theta2 = jnp.dot(rotation, rotation)
    if theta2 > ROTATION_EPSILON:
        theta = jnp.sqrt(theta2)
        axis = rotation / theta
        cos_theta = jnp.cos(theta)
        sin_theta = jnp.sin(theta)
        return (
            point * cos_theta
            + jnp.cross(axis, point) * sin_theta
            + axis * (jnp.dot(axis, point) * (1.0 - cos_theta))
        )

    # Near the identity: R(w) p ~ p + w x p
    return point + jnp.cross(rotation, point)


def apply_rig_rotation(instance_rotation, camera_rotation, point):
    """Rotate a point by a rig shot's composed rotation.

    The rig camera rotation is applied first, then the rig instance one.

    Args:
        instance_rotation: (3,) axis-angle rotation of the rig instance
        camera_rotation: (3,) axis-angle rotation of the camera in the rig
        point: (3,) point to rotate

    Returns:
        (3,) rotated point
    """
    return apply_rotation(instance_rotation, apply_rotation(camera_rotation, point))
