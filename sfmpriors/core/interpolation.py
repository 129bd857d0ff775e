"""Smooth interpolation over 2D scalar grids.

BiCubicInterpolator evaluates a grid at fractional (row, col) coordinates
with Catmull-Rom cubic Hermite splines, first along columns for the four
surrounding rows, then along rows. The result:
- reproduces grid values exactly at integer coordinates
- is continuous with a continuous first derivative
- clamps indices at the grid border (constant extrapolation of samples)

Written against jax.numpy so that it can be differentiated with respect
to the query coordinates.
"""

import logging

import jax.numpy as jnp
import numpy as np

logger = logging.getLogger(__name__)

_STENCIL = np.arange(-1, 3)


def cubic_hermite_spline(p0, p1, p2, p3, x):
    """Catmull-Rom spline through p1 (x=0) and p2 (x=1).

    Tangents at p1 and p2 are central differences of the neighbors.

    Args:
        p0, p1, p2, p3: Four consecutive samples
        x: Position in [0, 1] between p1 and p2

    Returns:
        Interpolated value
    """
    a = 0.5 * (-p0 + 3.0 * p1 - 3.0 * p2 + p3)
    b = 0.5 * (2.0 * p0 - 5.0 * p1 + 4.0 * p2 - p3)
    c = 0.5 * (-p0 + p2)
    d = p1
    return d + x * (c + x * (b + x * a))


class BiCubicInterpolator:
    """Bicubic interpolation of a 2D grid, row index first.

    The interpolator keeps a single device copy of the grid. Share one
    instance between every cost that samples the same raster rather than
    building one per cost.
    """

    def __init__(self, *, grid: np.ndarray) -> None:
        """Initialize interpolator.

        Args:
            grid: (n_rows, n_cols) scalar samples
        """
        grid = np.asarray(grid, dtype=np.float64)
        if grid.ndim != 2:
            raise ValueError(f"Grid must be 2D, got shape {grid.shape}")
        if grid.shape[0] < 1 or grid.shape[1] < 1:
            raise ValueError(f"Grid must not be empty, got shape {grid.shape}")

        self.num_rows, self.num_cols = grid.shape
        self.grid = jnp.asarray(grid)
        logger.debug(f"Created bicubic interpolator over {self.num_rows}x{self.num_cols} grid")

    def evaluate(self, row, col):
        """Sample the grid at a fractional coordinate.

        Args:
            row: Fractional row index (grows downward)
            col: Fractional column index (grows rightward)

        Returns:
            Interpolated scalar
        """
        row_floor = jnp.floor(row)
        col_floor = jnp.floor(col)

        rows = jnp.clip(row_floor.astype(int) + _STENCIL, 0, self.num_rows - 1)
        cols = jnp.clip(col_floor.astype(int) + _STENCIL, 0, self.num_cols - 1)
        patch = self.grid[rows[:, None], cols[None, :]]

        along_cols = cubic_hermite_spline(
            patch[:, 0], patch[:, 1], patch[:, 2], patch[:, 3], col - col_floor
        )
        return cubic_hermite_spline(
            along_cols[0], along_cols[1], along_cols[2], along_cols[3], row - row_floor
        )
