import numpy as np

from gsfm.geometry_utils.rigid3d import RigidTransform


def projection_matrix(K: np.ndarray, pose: RigidTransform) -> np.ndarray:
    """
    Compute the 3x4 projection matrix P = K [R | t].
    Args:
        K: (3,3) intrinsic matrix
        pose: world-to-camera transform
    Returns:
        P: (3,4) projection matrix
    """

    K = np.asarray(K, np.float64)
    if K.shape != (3, 3):
        raise ValueError(f"K must be (3,3), got {K.shape}")

    return K @ pose.as_matrix()  # 3x4


def camera_center(pose: RigidTransform) -> np.ndarray:
    """Compute camera center in world coordinates from a world-to-camera pose.
    Args:
        pose: world-to-camera transform (R, t)
    Returns:
        C: (3,) camera center in world coordinates"""
    # world->cam: Xc = R X + t  => C = -R^T t
    return -pose.derotate(pose.translation)
