from .autodiff import AutoDiffCostFunction
from .cost_function import (
    BATAPairwiseDirectionError,
    FetzerFocalLengthCost,
    FetzerFocalLengthSameCameraCost,
)
from .fetzer import fetzer_d, fetzer_ds, is_degenerate_geometry

__all__ = [
    "AutoDiffCostFunction",
    "BATAPairwiseDirectionError",
    "FetzerFocalLengthCost",
    "FetzerFocalLengthSameCameraCost",
    "fetzer_d",
    "fetzer_ds",
    "is_degenerate_geometry",
]
