"""Refine noisy camera poses against GPS, compass and gravity priors."""

import logging

import numpy as np
import pyceres
from scipy.spatial.transform import Rotation

from sfmpriors.core import (
    AbsolutePositionCost,
    PanAngleCost,
    UpVectorCost,
)
from sfmpriors.data import PositionConstraintType, make_pose_block

logger = logging.getLogger(__name__)


def generate_shots(*, n_shots: int, random_seed: int) -> list[dict]:
    """Level cameras on a circle, each with a different heading.

    Returns:
        One dict per shot with ground truth pose and noisy measurements
    """
    rng = np.random.default_rng(random_seed)
    look_north = Rotation.from_euler("x", -np.pi / 2.0)
    shots = []

    for i in range(n_shots):
        angle = 2.0 * np.pi * i / n_shots
        heading = angle + np.pi / 2.0
        rotation = Rotation.from_euler("z", -heading) * look_north
        position = np.array([10.0 * np.cos(angle), 10.0 * np.sin(angle), 2.0])

        shots.append({
            "truth": make_pose_block(rotation=rotation, translation=position),
            "gps": position + rng.normal(scale=[1.0, 1.0, 3.0]),
            "compass": np.arctan2(np.sin(heading), np.cos(heading)) + rng.normal(scale=0.05),
            "gravity": rotation.inv().apply([0.0, 0.0, 9.81]) + rng.normal(scale=0.05, size=3),
        })

    return shots


def run_demo(*, n_shots: int = 12, random_seed: int = 0) -> None:
    shots = generate_shots(n_shots=n_shots, random_seed=random_seed)
    rng = np.random.default_rng(random_seed + 1)

    problem = pyceres.Problem()
    poses = []
    for shot in shots:
        pose = shot["truth"] + rng.normal(scale=[0.2, 0.2, 0.2, 3.0, 3.0, 3.0])
        poses.append(pose)

        problem.add_residual_block(
            AbsolutePositionCost(
                position_prior=shot["gps"],
                std_deviation_horizontal=1.0,
                std_deviation_vertical=3.0,
                constraint_type=PositionConstraintType.XYZ
            ),
            None,
            [pose]
        )
        problem.add_residual_block(
            PanAngleCost(angle=shot["compass"], std_deviation=0.05),
            None,
            [pose]
        )
        problem.add_residual_block(
            UpVectorCost(acceleration=shot["gravity"], std_deviation=0.05),
            None,
            [pose]
        )

    options = pyceres.SolverOptions()
    options.linear_solver_type = pyceres.LinearSolverType.DENSE_QR
    options.max_num_iterations = 50
    options.num_threads = 1
    summary = pyceres.SolverSummary()
    pyceres.solve(options, problem, summary)

    logger.info(summary.BriefReport())
    for i, (shot, pose) in enumerate(zip(shots, poses)):
        error = np.linalg.norm(pose[3:6] - shot["truth"][3:6])
        logger.info(f"Shot {i:2d}: position error {error:.3f} m")


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    run_demo()
