from __future__ import annotations

from dataclasses import dataclass, field

import cv2
import numpy as np
from scipy.spatial.transform import Rotation


def _as_vec3(x, name: str) -> np.ndarray:
    v = np.asarray(x, dtype=np.float64).reshape(-1)
    if v.shape != (3,):
        raise ValueError(f"{name} must be a 3-vector, got shape {np.shape(x)}")
    return v


@dataclass(frozen=True, eq=False)
class RigidTransform:
    """
    Rigid 3D transform x -> R x + t.

    The rotation is a scipy Rotation (held as a normalized quaternion), the
    translation a float64 3-vector. Instances are values: every operation
    returns a new transform.
    """
    rotation: Rotation = field(default_factory=Rotation.identity)
    translation: np.ndarray = field(default_factory=lambda: np.zeros(3, dtype=np.float64))

    def __post_init__(self) -> None:
        if not isinstance(self.rotation, Rotation) or not self.rotation.single:
            raise ValueError("rotation must be a single scipy Rotation")
        object.__setattr__(self, "translation", _as_vec3(self.translation, "translation"))

    # -------------------------
    # Constructors
    # -------------------------

    @classmethod
    def identity(cls) -> "RigidTransform":
        return cls()

    @classmethod
    def from_quaternion(cls, q_xyzw, t=(0.0, 0.0, 0.0)) -> "RigidTransform":
        """Quaternion in (x, y, z, w) order; it is normalized here."""
        q = np.asarray(q_xyzw, dtype=np.float64).reshape(-1)
        if q.shape != (4,):
            raise ValueError(f"quaternion must have 4 components, got shape {np.shape(q_xyzw)}")
        return cls(Rotation.from_quat(q), t)

    @classmethod
    def from_matrix(cls, R, t=(0.0, 0.0, 0.0)) -> "RigidTransform":
        R = np.asarray(R, dtype=np.float64)
        if R.shape != (3, 3):
            raise ValueError(f"R must be (3,3), got {R.shape}")
        return cls(Rotation.from_matrix(R), t)

    @classmethod
    def from_rvec(cls, rvec, t=(0.0, 0.0, 0.0)) -> "RigidTransform":
        """Axis-angle rotation vector, as packed into least-squares parameter vectors."""
        R, _ = cv2.Rodrigues(_as_vec3(rvec, "rvec").reshape(3, 1))
        return cls.from_matrix(R, t)

    # -------------------------
    # Accessors
    # -------------------------

    @property
    def quaternion(self) -> np.ndarray:
        """(x, y, z, w)"""
        return self.rotation.as_quat()

    @property
    def rotation_matrix(self) -> np.ndarray:
        return self.rotation.as_matrix()

    def as_matrix(self) -> np.ndarray:
        """3x4 matrix [R | t]."""
        return np.hstack([self.rotation_matrix, self.translation.reshape(3, 1)])

    def as_rvec(self) -> np.ndarray:
        rvec, _ = cv2.Rodrigues(self.rotation_matrix)
        return rvec.reshape(3)

    # -------------------------
    # Point operations
    # -------------------------

    def rotate(self, point) -> np.ndarray:
        return self.rotation.apply(_as_vec3(point, "point"))

    def derotate(self, point) -> np.ndarray:
        return self.rotation.apply(_as_vec3(point, "point"), inverse=True)

    def apply(self, point) -> np.ndarray:
        return self.rotate(point) + self.translation

    # -------------------------
    # Group operations
    # -------------------------

    def inverse(self) -> "RigidTransform":
        R_inv = self.rotation.inv()
        return RigidTransform(R_inv, -R_inv.apply(self.translation))

    def compose(self, other: "RigidTransform") -> "RigidTransform":
        """self * other: apply `other` first, then `self`."""
        return RigidTransform(
            self.rotation * other.rotation,
            self.rotation.apply(other.translation) + self.translation,
        )

    def __mul__(self, other):
        if isinstance(other, RigidTransform):
            return self.compose(other)
        return self.apply(other)

    def __str__(self) -> str:
        q = " ".join(f"{v:g}" for v in self.quaternion)
        t = " ".join(f"{v:g}" for v in self.translation)
        return f"q: {q}, t: {t}"
