"""Tests for position prior cost functions."""

import numpy as np
import pytest
from scipy.spatial.transform import Rotation

from sfmpriors.core.config import DifferentiationConfig
from sfmpriors.core.cost_primatives import (
    AbsolutePositionCost,
    PointPositionPriorCost,
    RigPositionPriorCost,
    UnitTranslationPriorCost,
)
from sfmpriors.data.parameter_blocks import make_bias_block, make_pose_block
from sfmpriors.data.priors import PositionConstraintType


class TestAbsolutePositionCost:
    """Test absolute position prior."""

    def test_fixed_std_scaling(self, north_pose: np.ndarray) -> None:
        """X, Y scale by 1/std_horizontal and Z by 1/std_vertical."""
        prior = np.array([3.0, 6.0, 11.0])
        cost = AbsolutePositionCost(
            position_prior=prior,
            std_deviation_horizontal=2.0,
            std_deviation_vertical=4.0
        )

        residuals = np.zeros(3)
        cost.Evaluate([north_pose], residuals, None)

        # prior - position = [2, 4, 8]
        assert np.allclose(residuals, [1.0, 2.0, 2.0])

    def test_estimated_std(self, north_pose: np.ndarray) -> None:
        """With an uncertainty block, every component is divided by it."""
        prior = np.array([3.0, 6.0, 11.0])
        cost = AbsolutePositionCost(
            position_prior=prior,
            has_std_deviation_param=True
        )

        residuals = np.zeros(3)
        cost.Evaluate([north_pose, np.array([2.0])], residuals, None)

        assert np.allclose(residuals, (prior - north_pose[3:6]) / 2.0)

    def test_masked_axes_are_exactly_zero(self, north_pose: np.ndarray) -> None:
        """Only X responds when the mask is X."""
        cost = AbsolutePositionCost(
            position_prior=np.array([5.0, 1e6, -1e9]),
            std_deviation_horizontal=1.0,
            std_deviation_vertical=1.0,
            constraint_type=PositionConstraintType.X
        )

        for y, z in [(0.0, 0.0), (123.0, -45.0), (-1e8, 1e8)]:
            pose = north_pose.copy()
            pose[4] = y
            pose[5] = z
            residuals = np.zeros(3)
            cost.Evaluate([pose], residuals, None)

            assert residuals[0] == pytest.approx(5.0 - pose[3])
            assert residuals[1] == 0.0
            assert residuals[2] == 0.0

    def test_combined_mask(self, north_pose: np.ndarray) -> None:
        """X | Z constrains X and Z only."""
        cost = AbsolutePositionCost(
            position_prior=np.array([2.0, 3.0, 4.0]),
            constraint_type=PositionConstraintType.X | PositionConstraintType.Z
        )

        residuals = np.zeros(3)
        cost.Evaluate([north_pose], residuals, None)

        assert np.allclose(residuals, [1.0, 0.0, 1.0])

    def test_rig_shot_position(self) -> None:
        """Rig shot position is R_instance * t_camera + t_instance."""
        instance = make_pose_block(
            rotation=Rotation.from_euler("z", np.pi / 2.0),
            translation=np.array([10.0, 0.0, 0.0])
        )
        camera = make_pose_block(translation=np.array([1.0, 0.0, 0.0]))
        cost = AbsolutePositionCost(
            position_prior=np.array([10.0, 1.0, 0.0]),
            is_rig_shot=True
        )

        residuals = np.zeros(3)
        cost.Evaluate([instance, camera], residuals, None)

        assert np.allclose(residuals, 0.0, atol=1e-12)

    def test_rig_shot_with_estimated_std(self) -> None:
        """Uncertainty block follows the two rig pose blocks."""
        instance = make_pose_block(translation=np.array([1.0, 1.0, 1.0]))
        camera = make_pose_block()
        cost = AbsolutePositionCost(
            position_prior=np.array([3.0, 3.0, 3.0]),
            has_std_deviation_param=True,
            is_rig_shot=True
        )

        residuals = np.zeros(3)
        cost.Evaluate([instance, camera, np.array([4.0])], residuals, None)

        assert np.allclose(residuals, 0.5)

    def test_jacobians(self, evaluate, numeric_jacobians) -> None:
        """Autodiff jacobians match finite differences, zero on masked axes."""
        cost = AbsolutePositionCost(
            position_prior=np.array([1.0, 2.0, 3.0]),
            has_std_deviation_param=True,
            constraint_type=PositionConstraintType.XY
        )
        parameters = [make_pose_block(translation=np.array([0.5, 0.2, -1.0])), np.array([1.5])]

        _, jacobians = evaluate(cost, parameters, 3)
        expected = numeric_jacobians(cost, parameters)

        for jacobian, reference in zip(jacobians, expected):
            assert np.allclose(jacobian, reference, atol=1e-6)
        assert np.allclose(jacobians[0][2], 0.0)
        assert np.allclose(jacobians[0][0], [0.0, 0.0, 0.0, -1.0 / 1.5, 0.0, 0.0])

    def test_non_positive_std_rejected(self) -> None:
        """Fixed standard deviations must be positive."""
        with pytest.raises(ValueError):
            AbsolutePositionCost(position_prior=np.zeros(3), std_deviation_horizontal=0.0)
        with pytest.raises(ValueError):
            AbsolutePositionCost(position_prior=np.zeros(3), std_deviation_vertical=-1.0)

    def test_bad_prior_shape_rejected(self) -> None:
        """Prior must be a 3-vector."""
        with pytest.raises(ValueError):
            AbsolutePositionCost(position_prior=np.zeros(2))

    def test_prior_is_borrowed(self) -> None:
        """Prior buffer is referenced, not copied."""
        prior = np.array([1.0, 2.0, 3.0])
        cost = AbsolutePositionCost(position_prior=prior)
        assert np.shares_memory(cost.position_prior, prior)


class TestRigPositionPriorCost:
    """Test rig-aware position prior."""

    def test_identity_bias(self) -> None:
        """Identity bias compares optical center with the raw prior."""
        prior = np.array([1.0, 2.0, 3.0])
        pose = make_pose_block(translation=np.array([2.0, 2.0, 5.0]))
        cost = RigPositionPriorCost(position_prior=prior, std_deviation=0.5)

        residuals = np.zeros(3)
        cost.Evaluate([pose, make_bias_block()], residuals, None)

        assert np.allclose(residuals, [2.0, 0.0, 4.0])

    def test_similarity_bias(self) -> None:
        """Prior is rotated, scaled, then translated by the bias."""
        prior = np.array([1.0, 0.0, 0.0])
        bias = make_bias_block(
            rotation=Rotation.from_euler("z", np.pi / 2.0),
            translation=np.array([0.0, 0.0, 1.0]),
            scale=2.0
        )
        # expected = 2 * [0, 1, 0] + [0, 0, 1]
        pose = make_pose_block(translation=np.array([0.0, 2.0, 1.0]))
        cost = RigPositionPriorCost(position_prior=prior, std_deviation=1.0)

        residuals = np.zeros(3)
        cost.Evaluate([pose, bias], residuals, None)

        assert np.allclose(residuals, 0.0, atol=1e-12)

    def test_jacobians(self, evaluate, numeric_jacobians) -> None:
        """Autodiff jacobians over pose and bias match finite differences."""
        cost = RigPositionPriorCost(position_prior=np.array([1.0, -2.0, 0.5]), std_deviation=2.0)
        parameters = [
            make_pose_block(rotation=np.array([0.1, 0.2, 0.3]), translation=np.array([1.0, 1.0, 1.0])),
            make_bias_block(rotation=np.array([-0.2, 0.4, 0.1]), translation=np.array([0.3, 0.0, 0.2]), scale=1.3),
        ]

        _, jacobians = evaluate(cost, parameters, 3)
        expected = numeric_jacobians(cost, parameters)

        for jacobian, reference in zip(jacobians, expected):
            assert np.allclose(jacobian, reference, atol=1e-6)


class TestUnitTranslationPriorCost:
    """Test unit translation prior."""

    def test_unit_norm_zero_residual(self) -> None:
        """Unit translation gives log(1) = 0."""
        cost = UnitTranslationPriorCost()
        residuals = np.zeros(1)
        cost.Evaluate([make_pose_block(translation=np.array([1.0, 0.0, 0.0]))], residuals, None)
        assert residuals[0] == pytest.approx(0.0)

    def test_double_norm(self) -> None:
        """Translation of norm 2 gives log(4)."""
        cost = UnitTranslationPriorCost()
        residuals = np.zeros(1)
        cost.Evaluate([make_pose_block(translation=np.array([2.0, 0.0, 0.0]))], residuals, None)
        assert residuals[0] == pytest.approx(np.log(4.0))

    def test_jacobian(self, evaluate) -> None:
        """d/dt log(|t|^2) = 2 t / |t|^2, rotation has no effect."""
        translation = np.array([1.0, 2.0, 2.0])
        _, jacobians = evaluate(
            UnitTranslationPriorCost(),
            [make_pose_block(rotation=np.array([0.3, 0.0, 0.0]), translation=translation)],
            1
        )
        assert np.allclose(jacobians[0][0, :3], 0.0)
        assert np.allclose(jacobians[0][0, 3:], 2.0 * translation / 9.0)


class TestPointPositionPriorCost:
    """Test point position prior."""

    def test_point_at_prior(self) -> None:
        """Point at its prior gives zero residual."""
        cost = PointPositionPriorCost(position_prior=np.array([1.0, 2.0, 3.0]), std_deviation=0.2)
        residuals = np.zeros(3)
        cost.Evaluate([np.array([1.0, 2.0, 3.0])], residuals, None)
        assert np.allclose(residuals, 0.0)

    def test_scaled_offset(self) -> None:
        """Residual is (point - prior) / std."""
        cost = PointPositionPriorCost(position_prior=np.zeros(3), std_deviation=0.2)
        residuals = np.zeros(3)
        cost.Evaluate([np.array([1.0, 2.0, 3.0])], residuals, None)
        assert np.allclose(residuals, [5.0, 10.0, 15.0])

    def test_jacobian_is_scaled_identity(self, evaluate) -> None:
        """Jacobian is I / std."""
        cost = PointPositionPriorCost(position_prior=np.zeros(3), std_deviation=0.2)
        _, jacobians = evaluate(cost, [np.array([1.0, 2.0, 3.0])], 3)
        assert np.allclose(jacobians[0], 5.0 * np.eye(3))

    def test_numeric_jacobian_config(self, evaluate) -> None:
        """Finite-difference fallback gives the same jacobian."""
        cost = PointPositionPriorCost(
            position_prior=np.zeros(3),
            std_deviation=0.2,
            config=DifferentiationConfig(method="numeric", numeric_step=1e-6)
        )
        _, jacobians = evaluate(cost, [np.array([1.0, 2.0, 3.0])], 3)
        assert np.allclose(jacobians[0], 5.0 * np.eye(3), atol=1e-4)
