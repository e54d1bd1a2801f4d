import os
import sys

import numpy as np
import pytest

# Ensure local package import works for pytest collection.
_TEST_DIR = os.path.dirname(__file__)
_PKG_ROOT = os.path.abspath(os.path.join(_TEST_DIR, ".."))
if _PKG_ROOT not in sys.path:
    sys.path.insert(0, _PKG_ROOT)

from gsfm.geometry import RigidTransform, compute_fundamental_matrix, projection_matrix


def make_K(f: float, pp) -> np.ndarray:
    return np.array([
        [f, 0.0, pp[0]],
        [0.0, f, pp[1]],
        [0.0, 0.0, 1.0],
    ])


class TwoView:
    """Synthetic calibrated image pair with known focal lengths."""

    def __init__(self, f_i, pp_i, f_j, pp_j, pose_j, n_points=60, seed=0):
        self.f_i, self.f_j = float(f_i), float(f_j)
        self.pp_i, self.pp_j = np.asarray(pp_i, float), np.asarray(pp_j, float)
        self.K_i, self.K_j = make_K(f_i, pp_i), make_K(f_j, pp_j)
        self.pose_i = RigidTransform.identity()
        self.pose_j = pose_j

        rng = np.random.default_rng(seed)
        self.X = np.column_stack([
            rng.uniform(-2.0, 2.0, n_points),
            rng.uniform(-2.0, 2.0, n_points),
            rng.uniform(6.0, 10.0, n_points),
        ])
        self.F = compute_fundamental_matrix(self.K_i, self.pose_i, self.K_j, self.pose_j)

    def project(self, K, pose) -> np.ndarray:
        P = projection_matrix(K, pose)
        Xh = np.hstack([self.X, np.ones((len(self.X), 1))])
        x = (P @ Xh.T).T
        return x[:, :2] / x[:, 2:3]

    def line_distances(self, pts_i, pts_j) -> np.ndarray:
        """Mean of the two point-to-epipolar-line distances, per correspondence."""
        xi = np.hstack([pts_i, np.ones((len(pts_i), 1))])
        xj = np.hstack([pts_j, np.ones((len(pts_j), 1))])
        lj = xi @ self.F.T   # lines in image j
        li = xj @ self.F     # lines in image i
        num = np.abs(np.sum(xj * lj, axis=1))
        return 0.5 * (num / np.linalg.norm(lj[:, :2], axis=1) + num / np.linalg.norm(li[:, :2], axis=1))

    @property
    def pts_i(self) -> np.ndarray:
        return self.project(self.K_i, self.pose_i)

    @property
    def pts_j(self) -> np.ndarray:
        return self.project(self.K_j, self.pose_j)


@pytest.fixture
def two_view():
    """Two cameras with different focal lengths and principal points."""
    pose_j = RigidTransform.from_rvec([0.10, -0.20, 0.05], [-1.0, 0.2, 0.1])
    return TwoView(800.0, (320.0, 240.0), 650.0, (300.0, 260.0), pose_j)


@pytest.fixture
def same_camera_view():
    """Two images taken by one camera."""
    pose_j = RigidTransform.from_rvec([-0.15, 0.12, 0.08], [0.8, -0.3, 0.2])
    return TwoView(700.0, (320.0, 240.0), 700.0, (320.0, 240.0), pose_j, seed=1)


@pytest.fixture
def rng():
    return np.random.default_rng(42)
