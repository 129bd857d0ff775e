"""Raster (heatmap) prior cost function.

Penalizes shot positions by sampling a georeferenced 2D scalar field,
e.g. a cost map derived from a floor plan or a localization heatmap.
Only the horizontal position is used.
"""

import logging

from sfmpriors.core.config import DifferentiationConfig
from sfmpriors.core.cost_primatives.base_cost import BaseCostFunction, inverse_std_deviation
from sfmpriors.core.interpolation import BiCubicInterpolator
from sfmpriors.data.parameter_blocks import POSE_BLOCK_SIZE, TRANSLATION_SLICE
from sfmpriors.data.priors import RasterField

logger = logging.getLogger(__name__)


class HeatmapCost(BaseCostFunction):
    """Sample a raster field at the shot's horizontal position.

    Model:
        row = height / 2 - (y - y_offset) / resolution
        col = width / 2 + (x - x_offset) / resolution
        residual = interpolate(row, col) / std

    Rows grow southward, columns eastward, and (x_offset, y_offset) maps
    to the center of the grid. Outside the grid the interpolator clamps.

    The interpolator is borrowed: it must outlive the cost and its grid
    must not change during a solve.

    Parameters:
        - pose (6)
    """

    def __init__(
        self,
        *,
        interpolator: BiCubicInterpolator,
        x_offset: float,
        y_offset: float,
        height: float,
        width: float,
        resolution: float,
        std_deviation: float,
        config: DifferentiationConfig | None = None
    ) -> None:
        """Initialize heatmap cost.

        Args:
            interpolator: Interpolator over the raster grid (shared)
            x_offset: World x of the grid center
            y_offset: World y of the grid center
            height: Grid height in cells
            width: Grid width in cells
            resolution: World units per cell
            std_deviation: Std of the prior
            config: Jacobian evaluation settings
        """
        super().__init__(config=config)
        if not resolution > 0.0:
            raise ValueError(f"resolution must be positive, got {resolution}")

        self.interpolator = interpolator
        self.x_offset = float(x_offset)
        self.y_offset = float(y_offset)
        self.height = float(height)
        self.width = float(width)
        self.resolution = float(resolution)
        self.scale = inverse_std_deviation(std_deviation=std_deviation)
        self.set_num_residuals(1)
        self.set_parameter_block_sizes([POSE_BLOCK_SIZE])

    def grid_coordinates(self, *, position):
        """Project a world position to fractional (row, col).

        Args:
            position: (3,) world position (z ignored)

        Returns:
            (row, col) tuple
        """
        x_coord = position[0] - self.x_offset
        y_coord = position[1] - self.y_offset
        row = self.height / 2.0 - y_coord / self.resolution
        col = self.width / 2.0 + x_coord / self.resolution
        return row, col

    def _compute_residual(
        self,
        parameters: list
    ):
        """Compute scaled raster value at the shot position.

        Args:
            parameters: [pose]

        Returns:
            1D residual
        """
        row, col = self.grid_coordinates(position=parameters[0][TRANSLATION_SLICE])
        value = self.interpolator.evaluate(row, col)
        return (self.scale * value).reshape(1)

    @classmethod
    def create(
        cls,
        *,
        interpolator: BiCubicInterpolator,
        x_offset: float,
        y_offset: float,
        height: float,
        width: float,
        resolution: float,
        std_deviation: float,
        config: DifferentiationConfig | None = None
    ) -> "HeatmapCost":
        """Build a one-residual cost over a single pose block.

        Args:
            interpolator: Interpolator over the raster grid (shared)
            x_offset: World x of the grid center
            y_offset: World y of the grid center
            height: Grid height in cells
            width: Grid width in cells
            resolution: World units per cell
            std_deviation: Std of the prior
            config: Jacobian evaluation settings

        Returns:
            HeatmapCost with 1 residual and parameter blocks [6]
        """
        cost = cls(
            interpolator=interpolator,
            x_offset=x_offset,
            y_offset=y_offset,
            height=height,
            width=width,
            resolution=resolution,
            std_deviation=std_deviation,
            config=config
        )
        logger.debug(
            f"Created HeatmapCost over {int(height)}x{int(width)} grid "
            f"at ({x_offset:.3f}, {y_offset:.3f}), res={resolution:.3f}"
        )
        return cost

    @classmethod
    def from_raster(
        cls,
        *,
        raster: RasterField,
        std_deviation: float,
        interpolator: BiCubicInterpolator | None = None,
        config: DifferentiationConfig | None = None
    ) -> "HeatmapCost":
        """Build a heatmap cost from a RasterField.

        Pass the same interpolator to every cost sampling this raster;
        when omitted a new one is built over raster.values.

        Args:
            raster: Georeferenced field
            std_deviation: Std of the prior
            interpolator: Shared interpolator over raster.values
            config: Jacobian evaluation settings

        Returns:
            HeatmapCost over the raster
        """
        if interpolator is None:
            interpolator = BiCubicInterpolator(grid=raster.values)
        return cls.create(
            interpolator=interpolator,
            x_offset=raster.x_offset,
            y_offset=raster.y_offset,
            height=raster.height,
            width=raster.width,
            resolution=raster.resolution,
            std_deviation=std_deviation,
            config=config
        )
