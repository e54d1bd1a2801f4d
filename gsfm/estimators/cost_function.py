"""
gsfm/estimators/cost_function.py

Residual functors for global SfM.

Every functor is a plain callable over parameter blocks. It only indexes the
blocks and uses + - * /, so the same code evaluates plain numpy values and
JAX arrays under differentiation (see AutoDiffCostFunction). Captured data is
computed once at construction and never mutated, so functors are safe to
evaluate concurrently.
"""

from __future__ import annotations

import logging
from typing import Optional, Tuple

import numpy as np

from gsfm.config import ResidualConfig
from gsfm.estimators.autodiff import AutoDiffCostFunction
from gsfm.estimators.fetzer import fetzer_ds
from gsfm.geometry import geometry_matrix

logger = logging.getLogger(__name__)


def _cast(values: np.ndarray) -> Tuple[np.float64, ...]:
    """
    Captured constants as float64 scalars. They combine with numpy values, JAX
    tracers and plain floats alike, and keep IEEE division (inf/nan) even when
    every parameter is a plain float.
    """
    return tuple(np.float64(v) for v in values)


# ----------------------------------------
# BATAPairwiseDirectionError
# ----------------------------------------

class BATAPairwiseDirectionError:
    """
    Translation-averaging residual t_ij - scale * (c_j - c_i).

    The observation is usually a unit direction; the per-pair scale absorbs the
    unknown baseline length, which keeps the problem linear in positions.
    All pairs carry equal weight; covariance weighting is left to the caller.
    """

    NUM_RESIDUALS = 3
    PARAMETER_BLOCK_SIZES = (3, 3, 1)

    def __init__(self, translation_obs: np.ndarray):
        t = np.asarray(translation_obs, dtype=np.float64).reshape(-1)
        if t.shape != (3,):
            raise ValueError(f"translation_obs must be (3,), got {np.shape(translation_obs)}")
        self.translation_obs = t

    def __call__(self, position1, position2, scale):
        t_obs = _cast(self.translation_obs)
        return [
            t_obs[0] - scale[0] * (position2[0] - position1[0]),
            t_obs[1] - scale[0] * (position2[1] - position1[1]),
            t_obs[2] - scale[0] * (position2[2] - position1[2]),
        ]

    @classmethod
    def create(
        cls,
        translation_obs: np.ndarray,
        config: Optional[ResidualConfig] = None,
    ) -> AutoDiffCostFunction:
        config = config or ResidualConfig()
        return AutoDiffCostFunction(
            cls(translation_obs), cls.NUM_RESIDUALS, *cls.PARAMETER_BLOCK_SIZES,
            config=config.autodiff,
        )


# ----------------------------------------
# FetzerFocalLengthCost
# ----------------------------------------

def _fetzer_residuals(d_01, d_12, fi, fj):
    """
    Relative disagreement between each squared focal length and the value the
    other one implies through the d_01 / d_12 constraints.
    """
    K0_01 = -(fj * fj * d_01[2] + d_01[3]) / (fj * fj * d_01[0] + d_01[1])
    K1_12 = -(fi * fi * d_12[1] + d_12[3]) / (fi * fi * d_12[0] + d_12[2])

    return [
        (fi * fi - K0_01) / (fi * fi),
        (fj * fj - K1_12) / (fj * fj),
    ]


class FetzerFocalLengthCost:
    """
    Focal-length consistency of an image pair with two cameras.

    Parameters are the focal lengths fi (image 0) and fj (image 1). The residual
    is (0, 0) at the focal lengths consistent with the fundamental matrix.
    Focal lengths near zero, or pairs whose coefficient denominators vanish,
    give huge or NaN residuals: the solver must bound fi, fj away from zero.
    """

    NUM_RESIDUALS = 2
    PARAMETER_BLOCK_SIZES = (1, 1)

    def __init__(
        self,
        i1_F_i0: np.ndarray,
        principal_point0: np.ndarray,
        principal_point1: np.ndarray,
        config: Optional[ResidualConfig] = None,
    ):
        config = config or ResidualConfig()
        i1_G_i0 = geometry_matrix(i1_F_i0, principal_point0, principal_point1)
        self.d_01, self.d_02, self.d_12 = fetzer_ds(i1_G_i0, config.fetzer)
        logger.debug(f"Fetzer coefficients d_01={self.d_01} d_12={self.d_12}")

    def __call__(self, fi_, fj_):
        return _fetzer_residuals(_cast(self.d_01), _cast(self.d_12), fi_[0], fj_[0])

    @classmethod
    def create(
        cls,
        i1_F_i0: np.ndarray,
        principal_point0: np.ndarray,
        principal_point1: np.ndarray,
        config: Optional[ResidualConfig] = None,
    ) -> AutoDiffCostFunction:
        config = config or ResidualConfig()
        return AutoDiffCostFunction(
            cls(i1_F_i0, principal_point0, principal_point1, config=config),
            cls.NUM_RESIDUALS, *cls.PARAMETER_BLOCK_SIZES,
            config=config.autodiff,
        )


class FetzerFocalLengthSameCameraCost:
    """
    Calibration error for an image pair sharing one camera.

    Same algebra as FetzerFocalLengthCost with the single focal length bound to
    both roles.
    """

    NUM_RESIDUALS = 2
    PARAMETER_BLOCK_SIZES = (1,)

    def __init__(
        self,
        i1_F_i0: np.ndarray,
        principal_point: np.ndarray,
        config: Optional[ResidualConfig] = None,
    ):
        config = config or ResidualConfig()
        i1_G_i0 = geometry_matrix(i1_F_i0, principal_point, principal_point)
        self.d_01, self.d_02, self.d_12 = fetzer_ds(i1_G_i0, config.fetzer)
        logger.debug(f"Fetzer coefficients d_01={self.d_01} d_12={self.d_12}")

    def __call__(self, fi_):
        return _fetzer_residuals(_cast(self.d_01), _cast(self.d_12), fi_[0], fi_[0])

    @classmethod
    def create(
        cls,
        i1_F_i0: np.ndarray,
        principal_point: np.ndarray,
        config: Optional[ResidualConfig] = None,
    ) -> AutoDiffCostFunction:
        config = config or ResidualConfig()
        return AutoDiffCostFunction(
            cls(i1_F_i0, principal_point, config=config),
            cls.NUM_RESIDUALS, *cls.PARAMETER_BLOCK_SIZES,
            config=config.autodiff,
        )
