"""Two-view epipolar and homography helpers."""

from __future__ import annotations

import numpy as np

from gsfm.camera import Camera
from gsfm.types import EPS, Rigid3d


def check_cheirality(
    pose: Rigid3d, x1, x2, min_depth: float = 0.0, max_depth: float = 100.0
) -> bool:
    """Check that a correspondence of unit rays triangulates in front of both cameras."""
    x1 = np.asarray(x1, dtype=float)
    x2 = np.asarray(x2, dtype=float)
    rx1 = pose.rotation @ x1
    t = pose.translation

    a = -float(rx1 @ x2)
    b1 = -float(rx1 @ t)
    b2 = float(x2 @ t)

    # The positive factor 1 / (1 - a^2) is dropped from the depths.
    lambda1 = b1 - a * b2
    lambda2 = -a * b1 + b2

    scale = 1 - a * a
    min_depth *= scale
    max_depth *= scale
    return min_depth < lambda1 < max_depth and min_depth < lambda2 < max_depth


def get_orientation_signum(f, epipole, pt1, pt2) -> float:
    """Orientation signum used for the cheirality test of a fundamental matrix."""
    f = np.asarray(f, dtype=float)
    signum1 = f[0, 0] * pt2[0] + f[1, 0] * pt2[1] + f[2, 0]
    signum2 = epipole[1] - epipole[2] * pt1[1]
    return float(signum1 * signum2)


def _skew(t: np.ndarray) -> np.ndarray:
    return np.array(
        [
            [0.0, -t[2], t[1]],
            [t[2], 0.0, -t[0]],
            [-t[1], t[0], 0.0],
        ]
    )


def essential_from_motion(pose: Rigid3d) -> np.ndarray:
    return _skew(pose.translation) @ pose.rotation


def fundamental_from_motion_and_cameras(
    camera1: Camera, camera2: Camera, pose: Rigid3d
) -> np.ndarray:
    e = essential_from_motion(pose)
    k1 = camera1.calibration_matrix()
    k2 = camera2.calibration_matrix()
    return np.linalg.inv(k1.T) @ e @ np.linalg.inv(k2)


def sampson_error(e, x1, x2) -> float:
    """Squared Sampson error; points may be 2D image coordinates or 3D rays."""
    e = np.asarray(e, dtype=float)
    x1 = np.asarray(x1, dtype=float).reshape(-1)
    x2 = np.asarray(x2, dtype=float).reshape(-1)
    if x1.shape != x2.shape or x1.shape[0] not in (2, 3):
        raise ValueError("points must both be 2D or both be 3D")
    if x1.shape[0] == 2:
        h1 = np.append(x1, 1.0)
        h2 = np.append(x2, 1.0)
        ex1 = e @ h1
        etx2 = e.T @ h2
    else:
        h2 = x2
        ex1 = e @ x1 / (EPS + x1[2])
        etx2 = e.T @ x2 / (EPS + x2[2])
    c = float(ex1 @ h2)
    cx = float(ex1[:2] @ ex1[:2])
    cy = float(etx2[:2] @ etx2[:2])
    return c * c / (cx + cy)


def homography_error(h, x1, x2) -> float:
    """Squared transfer error of ``x1`` mapped by ``h`` against ``x2``."""
    h = np.asarray(h, dtype=float)
    hx1 = h @ np.append(np.asarray(x1, dtype=float).reshape(2), 1.0)
    projected = hx1[:2] / (EPS + hx1[2])
    diff = projected - np.asarray(x2, dtype=float).reshape(2)
    return float(diff @ diff)