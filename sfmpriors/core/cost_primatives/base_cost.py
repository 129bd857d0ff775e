"""Base class for all cost functions in SfmPriors.

Each cost implements _compute_residual() once, against jax.numpy. The
base class evaluates it on plain float64 arrays to fill the residuals and,
when pyceres asks for jacobians, runs the same code under jax.jacfwd
(default) or finite differences.
"""

import logging

import jax
import jax.numpy as jnp
import numpy as np
import pyceres

from sfmpriors.core.config import DEFAULT_DIFFERENTIATION_CONFIG, DifferentiationConfig

logger = logging.getLogger(__name__)


class BaseCostFunction(pyceres.CostFunction):
    """Base class for all SfmPriors cost functions.

    Provides:
    - Residual evaluation from a single generic implementation
    - Forward-mode automatic differentiation for jacobians
    - Numeric jacobian fallback

    Subclasses must implement:
    - _compute_residual(): Compute the residual vector
    - Set num_residuals and parameter_block_sizes in __init__
    """

    def __init__(self, *, config: DifferentiationConfig | None = None) -> None:
        """Initialize base cost function.

        Args:
            config: Jacobian evaluation settings (None = autodiff)
        """
        super().__init__()
        self.config = config if config is not None else DEFAULT_DIFFERENTIATION_CONFIG

    def _compute_residual(
        self,
        parameters: list
    ):
        """Compute residual vector.

        Must be implemented by subclasses using jax.numpy operations only,
        so that parameters may be float64 arrays or jax tracers.

        Args:
            parameters: List of parameter blocks

        Returns:
            Residual vector
        """
        raise NotImplementedError

    def compute_residual(self, *, parameters: list[np.ndarray]) -> np.ndarray:
        """Evaluate the residual vector as a float64 numpy array.

        Args:
            parameters: List of parameter blocks

        Returns:
            Residual vector
        """
        blocks = [np.asarray(block, dtype=np.float64) for block in parameters]
        return np.asarray(self._compute_residual(parameters=blocks), dtype=np.float64)

    def Evaluate(
        self,
        parameters: list[np.ndarray],
        residuals: np.ndarray,
        jacobians: list[np.ndarray] | None
    ) -> bool:
        """Evaluate cost function (pyceres interface).

        Singular configurations are handled inside the residuals, so
        evaluation never fails.

        Args:
            parameters: List of parameter blocks
            residuals: Output residual vector
            jacobians: Optional list of row-major jacobian buffers

        Returns:
            True
        """
        residuals[:] = self.compute_residual(parameters=parameters)

        if jacobians is not None:
            self._compute_jacobians(
                parameters=parameters,
                residuals=residuals,
                jacobians=jacobians
            )

        return True

    def _compute_jacobians(
        self,
        *,
        parameters: list[np.ndarray],
        residuals: np.ndarray,
        jacobians: list[np.ndarray]
    ) -> None:
        """Compute jacobians with the configured method.

        Args:
            parameters: List of parameter blocks
            residuals: Current residual vector
            jacobians: List of jacobian buffers to fill (None entries skipped)
        """
        if self.config.method == "numeric":
            self._compute_jacobians_numeric(
                parameters=parameters,
                residuals=residuals,
                jacobians=jacobians,
                eps=self.config.numeric_step
            )
        else:
            self._compute_jacobians_autodiff(
                parameters=parameters,
                jacobians=jacobians
            )

    def _compute_jacobians_autodiff(
        self,
        *,
        parameters: list[np.ndarray],
        jacobians: list[np.ndarray]
    ) -> None:
        """Compute exact jacobians with forward-mode autodiff.

        Args:
            parameters: List of parameter blocks
            jacobians: List of jacobian buffers to fill
        """
        requested = tuple(
            idx for idx, jacobian in enumerate(jacobians) if jacobian is not None
        )
        if not requested:
            return

        def residual_of_blocks(*blocks):
            return jnp.asarray(self._compute_residual(parameters=list(blocks)))

        blocks = [jnp.asarray(np.asarray(block, dtype=np.float64)) for block in parameters]
        block_jacobians = jax.jacfwd(residual_of_blocks, argnums=requested)(*blocks)

        # (n_residuals, block_size) per block, flattened row-major for pyceres
        for idx, block_jacobian in zip(requested, block_jacobians):
            jacobians[idx][:] = np.asarray(block_jacobian, dtype=np.float64).ravel()

    def _compute_jacobians_numeric(
        self,
        *,
        parameters: list[np.ndarray],
        residuals: np.ndarray,
        jacobians: list[np.ndarray],
        eps: float = 1e-8
    ) -> None:
        """Compute jacobians using forward finite differences.

        Args:
            parameters: List of parameter blocks
            residuals: Current residual vector
            jacobians: List of jacobian buffers to fill
            eps: Step size for finite differences
        """
        n_residuals = len(residuals)
        blocks = [np.asarray(block, dtype=np.float64) for block in parameters]

        for param_idx, param in enumerate(blocks):
            if jacobians[param_idx] is None:
                continue

            n_params = len(param)

            for i in range(n_params):
                param_plus = param.copy()
                param_plus[i] += eps

                params_plus = list(blocks)
                params_plus[param_idx] = param_plus
                residual_plus = self.compute_residual(parameters=params_plus)

                for j in range(n_residuals):
                    jacobians[param_idx][j * n_params + i] = (residual_plus[j] - residuals[j]) / eps


def inverse_std_deviation(*, std_deviation: float, name: str = "std_deviation") -> float:
    """Validate a fixed standard deviation and return its inverse.

    Args:
        std_deviation: Standard deviation used as a fixed divisor
        name: Argument name for the error message

    Returns:
        1 / std_deviation
    """
    if not std_deviation > 0.0:
        raise ValueError(f"{name} must be positive, got {std_deviation}")
    return 1.0 / std_deviation
