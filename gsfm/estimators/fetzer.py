"""
gsfm/estimators/fetzer.py

Focal-length self-calibration coefficients (Fetzer et al.) from a two-view
geometry matrix.

With G = U diag(s0, s1, 0) V^T and the image-of-absolute-conic of each view
reduced to diag(f^2, f^2, 1) (principal points already removed), the Kruppa
equations become bilinear in the two squared focal lengths:

    f0^2 f1^2 d(0) + f0^2 d(1) + f1^2 d(2) + d(3) = 0

for each pair of Kruppa ratios. fetzer_ds() computes the three coefficient
vectors d_01, d_02, d_12 once per image pair, so a residual never needs the
SVD again.
"""

from __future__ import annotations

import logging
from typing import Optional, Tuple

import numpy as np

from gsfm.config import FetzerConfig

logger = logging.getLogger(__name__)


def fetzer_d(
    ai: np.ndarray,
    bi: np.ndarray,
    aj: np.ndarray,
    bj: np.ndarray,
    u: int,
    v: int,
) -> np.ndarray:
    """Antisymmetric combination of Kruppa ratios u and v."""
    d = np.zeros(4, dtype=np.float64)
    d[0] = ai[u] * aj[v] - ai[v] * aj[u]
    d[1] = ai[u] * bj[v] - ai[v] * bj[u]
    d[2] = bi[u] * aj[v] - bi[v] * aj[u]
    d[3] = bi[u] * bj[v] - bi[v] * bj[u]
    return d


def is_degenerate_geometry(
    singular_values: np.ndarray,
    config: Optional[FetzerConfig] = None,
) -> bool:
    """
    True when the two leading singular values cannot support the decomposition
    (zero matrix, or rank below 2).
    """
    config = config or FetzerConfig()
    s0, s1 = float(singular_values[0]), float(singular_values[1])
    if not (np.isfinite(s0) and np.isfinite(s1)):
        return True
    if s0 <= config.abs_singular_tol:
        return True
    return s1 <= config.rel_singular_tol * s0


def fetzer_ds(
    i1_G_i0: np.ndarray,
    config: Optional[FetzerConfig] = None,
) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
    """
    Compute the coefficient vectors (d_01, d_02, d_12) of a geometry matrix.

    Args:
        i1_G_i0: (3,3) geometry matrix K1^T F K0 (principal points removed)
        config: degeneracy thresholds

    Returns:
        d_01, d_02, d_12: (4,) float64 each

    Degenerate input is reported through the log, never corrected: the
    returned vectors may be all zero, which makes every Fetzer residual NaN.
    """
    G = np.asarray(i1_G_i0, dtype=np.float64)
    if G.shape != (3, 3):
        raise ValueError(f"geometry matrix must be (3,3), got {G.shape}")

    U, s, Vt = np.linalg.svd(G)
    V = Vt.T

    if is_degenerate_geometry(s, config):
        logger.warning(
            f"Degenerate two-view geometry (singular values {s[0]:.3e}, {s[1]:.3e}, {s[2]:.3e}); "
            f"focal-length residuals will be unstable"
        )

    v_0, v_1 = V[:, 0], V[:, 1]
    u_0, u_1 = U[:, 0], U[:, 1]

    # Image 0 (right singular vectors): xy-part and z-part of the weighted v^T w v terms
    ai = np.array([
        s[0] * s[0] * (v_0[0] * v_0[0] + v_0[1] * v_0[1]),
        s[0] * s[1] * (v_0[0] * v_1[0] + v_0[1] * v_1[1]),
        s[1] * s[1] * (v_1[0] * v_1[0] + v_1[1] * v_1[1]),
    ])
    bi = np.array([
        s[0] * s[0] * v_0[2] * v_0[2],
        s[0] * s[1] * v_0[2] * v_1[2],
        s[1] * s[1] * v_1[2] * v_1[2],
    ])

    # Image 1 (left singular vectors), in Kruppa order (u1, -u0 u1, u0)
    aj = np.array([
        u_1[0] * u_1[0] + u_1[1] * u_1[1],
        -(u_0[0] * u_1[0] + u_0[1] * u_1[1]),
        u_0[0] * u_0[0] + u_0[1] * u_0[1],
    ])
    bj = np.array([
        u_1[2] * u_1[2],
        -(u_0[2] * u_1[2]),
        u_0[2] * u_0[2],
    ])

    d_01 = fetzer_d(ai, bi, aj, bj, 1, 0)
    d_02 = fetzer_d(ai, bi, aj, bj, 0, 2)
    d_12 = fetzer_d(ai, bi, aj, bj, 2, 1)

    return d_01, d_02, d_12
