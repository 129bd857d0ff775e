"""Pytest configuration and fixtures for SfmPriors tests.

Provides reusable fixtures for:
- Pose parameter blocks
- Raster grids
- Residual/jacobian evaluation helpers
"""

from typing import Callable

import numpy as np
import pytest
from scipy.spatial.transform import Rotation

import sfmpriors  # noqa: F401  (enables float64 in jax)
from sfmpriors.data.parameter_blocks import make_pose_block


def _evaluate_cost(
    cost,
    parameters: list[np.ndarray],
    n_residuals: int
) -> tuple[np.ndarray, list[np.ndarray]]:
    residuals = np.zeros(n_residuals)
    jacobians = [np.zeros(n_residuals * len(block)) for block in parameters]

    assert cost.Evaluate(parameters, residuals, jacobians)

    return residuals, [
        jacobian.reshape(n_residuals, len(block))
        for jacobian, block in zip(jacobians, parameters)
    ]


def _central_difference_jacobians(
    cost,
    parameters: list[np.ndarray],
    eps: float = 1e-6
) -> list[np.ndarray]:
    jacobians = []
    for block_idx, block in enumerate(parameters):
        columns = []
        for i in range(len(block)):
            plus = [p.copy() for p in parameters]
            minus = [p.copy() for p in parameters]
            plus[block_idx][i] += eps
            minus[block_idx][i] -= eps
            columns.append(
                (cost.compute_residual(parameters=plus) - cost.compute_residual(parameters=minus))
                / (2.0 * eps)
            )
        jacobians.append(np.stack(columns, axis=1))
    return jacobians


@pytest.fixture
def evaluate() -> Callable:
    """Run cost.Evaluate requesting jacobians for every block.

    Returns:
        Function (cost, parameters, n_residuals) -> (residuals, jacobians),
        jacobians reshaped to (n_residuals, block_size)
    """
    return _evaluate_cost


@pytest.fixture
def numeric_jacobians() -> Callable:
    """Central-difference jacobians of cost.compute_residual.

    Returns:
        Function (cost, parameters) -> list of (n_residuals, block_size)
    """
    return _central_difference_jacobians


@pytest.fixture
def north_rotation() -> Rotation:
    """Camera-to-world rotation of a level camera looking along world +y.

    Camera x (right) stays world +x, camera z (forward) becomes world +y.
    """
    return Rotation.from_euler("x", -np.pi / 2.0)


@pytest.fixture
def identity_pose() -> np.ndarray:
    """Pose at the origin looking straight up (camera z = world z)."""
    return make_pose_block()


@pytest.fixture
def north_pose(north_rotation: Rotation) -> np.ndarray:
    """Level camera at (1, 2, 3) looking north."""
    return make_pose_block(
        rotation=north_rotation,
        translation=np.array([1.0, 2.0, 3.0])
    )


@pytest.fixture
def generic_pose(north_rotation: Rotation) -> np.ndarray:
    """Pose with a rotation far from every singular configuration."""
    rotation = (
        Rotation.from_euler("z", 0.4)
        * north_rotation
        * Rotation.from_euler("xyz", [0.2, -0.3, 0.25])
    )
    return make_pose_block(
        rotation=rotation,
        translation=np.array([0.5, -1.5, 2.0])
    )


@pytest.fixture
def ramp_grid() -> np.ndarray:
    """4x6 grid with value = 10 * row + col."""
    rows, cols = np.mgrid[0:4, 0:6]
    return (10.0 * rows + cols).astype(np.float64)
