"""
gsfm/__init__.py

Residual blocks for global structure-from-motion.

Usage:
    from gsfm import BATAPairwiseDirectionError, FetzerFocalLengthCost

    # Translation averaging: blocks (position_i, position_j, scale)
    cost = BATAPairwiseDirectionError.create(t_ij)
    residuals, jacobians = cost.evaluate(c_i, c_j, [scale])

    # Focal-length self-calibration: blocks (f_i,), (f_j,)
    cost = FetzerFocalLengthCost.create(F, principal_point_i, principal_point_j)
    residuals, jacobians = cost.evaluate([f_i], [f_j])

    # Finite differences instead of JAX
    config = ResidualConfig()
    config.autodiff.backend = "numeric"
    cost = BATAPairwiseDirectionError.create(t_ij, config=config)
"""

from .config import (
    ResidualConfig,
    FetzerConfig,
    AutoDiffConfig,
    get_default_config,
)

from .geometry import RigidTransform
from .tracks import Observation, Track

from .estimators import (
    AutoDiffCostFunction,
    BATAPairwiseDirectionError,
    FetzerFocalLengthCost,
    FetzerFocalLengthSameCameraCost,
    fetzer_ds,
)

__all__ = [
    # Config
    "ResidualConfig",
    "FetzerConfig",
    "AutoDiffConfig",
    "get_default_config",
    # Scene
    "RigidTransform",
    "Observation",
    "Track",
    # Costs
    "AutoDiffCostFunction",
    "BATAPairwiseDirectionError",
    "FetzerFocalLengthCost",
    "FetzerFocalLengthSameCameraCost",
    "fetzer_ds",
]
