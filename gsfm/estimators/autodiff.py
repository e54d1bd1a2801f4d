"""
gsfm/estimators/autodiff.py

Generic wrapper that turns a residual functor into an evaluable cost with a
declared (num_residuals, *parameter_block_sizes) signature.

A functor is any callable `functor(*parameter_blocks) -> sequence of residuals`
written with + - * / and element indexing only. The same functor code runs on
numpy blocks (plain values, finite-difference derivatives) and on JAX arrays
(forward-mode automatic differentiation).
"""

from __future__ import annotations

import logging
from typing import Callable, List, Optional, Sequence, Tuple

import numpy as np
from scipy.optimize import approx_fprime

from gsfm.config import AutoDiffConfig
from gsfm.utils.jax_init import jax, jnp

logger = logging.getLogger(__name__)


class AutoDiffCostFunction:
    """
    Residual functor + derivative backend with a fixed block layout.

    Usage:
        cost = AutoDiffCostFunction(BATAPairwiseDirectionError(t_obs), 3, 3, 3, 1)
        residuals, jacobians = cost.evaluate(c_i, c_j, [scale])
        # residuals: (3,), jacobians: [(3,3), (3,3), (3,1)]
    """

    def __init__(
        self,
        functor: Callable,
        num_residuals: int,
        *parameter_block_sizes: int,
        config: Optional[AutoDiffConfig] = None,
    ):
        if num_residuals <= 0:
            raise ValueError(f"num_residuals must be positive, got {num_residuals}")
        if not parameter_block_sizes or any(int(n) <= 0 for n in parameter_block_sizes):
            raise ValueError(f"invalid parameter block sizes {parameter_block_sizes}")

        self.functor = functor
        self.num_residuals = int(num_residuals)
        self.parameter_block_sizes: Tuple[int, ...] = tuple(int(n) for n in parameter_block_sizes)
        self.config = config or AutoDiffConfig()

        logger.debug(
            f"Cost {type(functor).__name__}: residuals={self.num_residuals} "
            f"blocks={self.parameter_block_sizes} backend={self.config.backend}"
        )

    @property
    def backend(self) -> str:
        return self.config.backend

    def _check_blocks(self, parameter_blocks: Sequence) -> List[np.ndarray]:
        if len(parameter_blocks) != len(self.parameter_block_sizes):
            raise ValueError(
                f"expected {len(self.parameter_block_sizes)} parameter blocks, "
                f"got {len(parameter_blocks)}"
            )
        blocks = []
        for k, (block, size) in enumerate(zip(parameter_blocks, self.parameter_block_sizes)):
            b = np.asarray(block, dtype=np.float64).reshape(-1)
            if b.shape != (size,):
                raise ValueError(
                    f"parameter block {k} must have size {size}, got shape {np.shape(block)}"
                )
            blocks.append(b)
        return blocks

    def _check_residuals(self, residuals: np.ndarray) -> np.ndarray:
        if residuals.shape != (self.num_residuals,):
            raise ValueError(
                f"functor returned {residuals.shape} residuals, declared ({self.num_residuals},)"
            )
        return residuals

    def evaluate(
        self,
        *parameter_blocks,
        jacobians: bool = True,
    ) -> Tuple[np.ndarray, Optional[List[np.ndarray]]]:
        """
        Evaluate residuals and, optionally, one Jacobian per parameter block.

        Returns:
            residuals: (num_residuals,) float64
            jacobians: list of (num_residuals, block_size) float64, or None
        """
        blocks = self._check_blocks(parameter_blocks)

        if self.config.backend == "jax":
            return self._evaluate_jax(blocks, jacobians)
        return self._evaluate_numeric(blocks, jacobians)

    # -------------------------
    # Backends
    # -------------------------

    def _evaluate_jax(self, blocks: List[np.ndarray], jacobians: bool):
        def f(*xs):
            return jnp.stack([jnp.asarray(r) for r in self.functor(*xs)])

        xs = [jnp.asarray(b, dtype=jnp.float64) for b in blocks]
        residuals = self._check_residuals(np.asarray(f(*xs), dtype=np.float64))
        if not jacobians:
            return residuals, None

        J = jax.jacfwd(f, argnums=tuple(range(len(xs))))(*xs)
        return residuals, [np.asarray(j, dtype=np.float64) for j in J]

    def _evaluate_numeric(self, blocks: List[np.ndarray], jacobians: bool):
        def f(*xs):
            return np.asarray(self.functor(*xs), dtype=np.float64).reshape(-1)

        residuals = self._check_residuals(f(*blocks))
        if not jacobians:
            return residuals, None

        step = self.config.numeric_step
        if step is None:
            step = np.sqrt(np.finfo(np.float64).eps)

        J = []
        for k, block in enumerate(blocks):
            def f_k(x, k=k):
                xs = list(blocks)
                xs[k] = x
                return f(*xs)

            # Step scales with the parameter: focal lengths are hundreds of pixels
            h = step * np.maximum(1.0, np.abs(block))
            J.append(np.asarray(approx_fprime(block, f_k, h), dtype=np.float64)
                     .reshape(self.num_residuals, block.size))
        return residuals, J
