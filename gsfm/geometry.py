# gsfm/geometry.py
"""
Public geometry API.

Internals live in gsfm/geometry_utils/.
Import from here in the rest of the codebase to avoid deep-path imports.
"""

from gsfm.geometry_utils.rigid3d import RigidTransform
from gsfm.geometry_utils.epipolar import (
    compute_fundamental_matrix,
    geometry_matrix,
    principal_point_matrix,
)
from gsfm.geometry_utils.projective import projection_matrix, camera_center

__all__ = [
    "RigidTransform",
    "compute_fundamental_matrix",
    "geometry_matrix",
    "principal_point_matrix",
    "projection_matrix",
    "camera_center",
]
