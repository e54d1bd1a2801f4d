"""
gsfm/config.py

Configuration dataclasses for the residual layer.
ALL default values live here - no hardcoded tolerances elsewhere.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Optional


AUTODIFF_BACKENDS = ("jax", "numeric")


@dataclass
class FetzerConfig:
    """Thresholds used to flag a degenerate two-view geometry matrix."""
    abs_singular_tol: float = 1e-12        # s0 at or below this -> matrix is (numerically) zero
    rel_singular_tol: float = 1e-10        # s1 / s0 at or below this -> rank < 2


@dataclass
class AutoDiffConfig:
    """
    Parameters for the derivative backend of AutoDiffCostFunction.

    Backends:
        "jax"     - forward-mode automatic differentiation (jax.jacfwd), float64
        "numeric" - forward finite differences (scipy.optimize.approx_fprime)
    """
    backend: str = "jax"
    numeric_step: Optional[float] = None   # Relative step, scaled by max(1, |x|) (None = sqrt(machine eps))

    def __post_init__(self) -> None:
        if self.backend not in AUTODIFF_BACKENDS:
            raise ValueError(
                f"Unknown autodiff backend {self.backend!r}, expected one of {AUTODIFF_BACKENDS}"
            )


@dataclass
class ResidualConfig:
    """
    Master configuration for the residual layer.

    Usage:
        config = ResidualConfig()
        config.autodiff.backend = "numeric"
        config.fetzer.rel_singular_tol = 1e-8
    """
    fetzer: FetzerConfig = field(default_factory=FetzerConfig)
    autodiff: AutoDiffConfig = field(default_factory=AutoDiffConfig)


def get_default_config() -> ResidualConfig:
    return ResidualConfig()
