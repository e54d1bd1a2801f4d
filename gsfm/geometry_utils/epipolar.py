import numpy as np

from gsfm.geometry_utils.rigid3d import RigidTransform


def _skew(t: np.ndarray) -> np.ndarray:
    return np.array([
        [0, -t[2], t[1]],
        [t[2], 0, -t[0]],
        [-t[1], t[0], 0]
    ], dtype=np.float64)


def principal_point_matrix(principal_point: np.ndarray) -> np.ndarray:
    """Intrinsic matrix holding only the principal point (unit focal length, no skew)."""
    pp = np.asarray(principal_point, np.float64).reshape(-1)
    if pp.shape != (2,):
        raise ValueError(f"principal point must be (2,), got {np.shape(principal_point)}")

    K = np.eye(3, dtype=np.float64)
    K[0, 2] = pp[0]
    K[1, 2] = pp[1]
    return K


def geometry_matrix(
    i1_F_i0: np.ndarray,
    principal_point0: np.ndarray,
    principal_point1: np.ndarray,
) -> np.ndarray:
    """
    Conjugate a fundamental matrix by the principal-point intrinsics: G = K1^T F K0.

    G is the fundamental matrix of the principal-point-centred image coordinates,
    so only the two focal lengths remain unknown in it.
    """
    F = np.asarray(i1_F_i0, np.float64)
    if F.shape != (3, 3):
        raise ValueError(f"F must be (3,3), got {F.shape}")

    K0 = principal_point_matrix(principal_point0)
    K1 = principal_point_matrix(principal_point1)
    return K1.T @ F @ K0


def compute_fundamental_matrix(
    K_i: np.ndarray,
    pose_i: RigidTransform,
    K_j: np.ndarray,
    pose_j: RigidTransform,
) -> np.ndarray:
    """Compute the fundamental matrix F such that p2^T F p1 = 0
    for corresponding points p1 in image i and p2 in image j.
    Poses are world-to-camera.
    """

    Ki = np.asarray(K_i, np.float64)
    Kj = np.asarray(K_j, np.float64)

    rel = pose_j * pose_i.inverse()

    E = _skew(rel.translation) @ rel.rotation_matrix
    F = np.linalg.inv(Kj).T @ E @ np.linalg.inv(Ki)
    F /= (np.linalg.norm(F) + 1e-12)

    return F

