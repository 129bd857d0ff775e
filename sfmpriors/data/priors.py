"""Prior descriptions consumed by the cost functions.

- PositionConstraintType: which world axes a position prior constrains
- RasterField: a georeferenced 2D scalar field (heatmap prior)
"""

import enum

import numpy as np
from pydantic import Field, field_validator

from sfmpriors.data.arbitrary_types_model import FrozenArrayModel


class PositionConstraintType(enum.Flag):
    """Axes constrained by a position prior.

    Members combine with ``|``:

        PositionConstraintType.X | PositionConstraintType.Z
    """

    X = 1
    Y = 2
    Z = 4
    XY = X | Y
    XYZ = X | Y | Z

    def has_axis(self, *, axis: int) -> bool:
        """Check whether a world axis (0=X, 1=Y, 2=Z) is constrained.

        Args:
            axis: Axis index

        Returns:
            True if the axis is part of this constraint
        """
        flag = _AXIS_FLAGS[axis]
        return (self & flag) == flag

    def axis_mask(self) -> np.ndarray:
        """Boolean (3,) mask, True for constrained axes."""
        return np.array([self.has_axis(axis=axis) for axis in range(3)])


_AXIS_FLAGS = (PositionConstraintType.X, PositionConstraintType.Y, PositionConstraintType.Z)


class RasterField(FrozenArrayModel):
    """Georeferenced 2D scalar field.

    The grid is centered on (x_offset, y_offset): row 0 is the northern
    (largest y) edge and column 0 the western (smallest x) edge.

    Attributes:
        values: (height, width) samples
        x_offset: World x of the grid center
        y_offset: World y of the grid center
        resolution: World units per cell
    """

    values: np.ndarray
    x_offset: float = 0.0
    y_offset: float = 0.0
    resolution: float = Field(gt=0.0)

    @field_validator("values", mode="before")
    @classmethod
    def check_values(cls, values: np.ndarray) -> np.ndarray:
        """Ensure values form a non-empty 2D float64 grid."""
        grid = np.asarray(values, dtype=np.float64)
        if grid.ndim != 2:
            raise ValueError(f"Raster values must be 2D, got shape {grid.shape}")
        if grid.size == 0:
            raise ValueError("Raster values must not be empty")
        return grid

    @property
    def height(self) -> int:
        """Number of rows."""
        return self.values.shape[0]

    @property
    def width(self) -> int:
        """Number of columns."""
        return self.values.shape[1]

    def __str__(self) -> str:
        return (
            f"RasterField[{self.height}x{self.width}] "
            f"center=({self.x_offset:.3f}, {self.y_offset:.3f}) res={self.resolution:.3f}"
        )
