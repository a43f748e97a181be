"""Angle and distance measures between poses and rotations."""

from __future__ import annotations

import math

import numpy as np
from scipy.spatial.transform import Rotation

from gsfm.types import EPS, Rigid3d


def _angle_from_cos(cos_r: float) -> float:
    return math.degrees(math.acos(min(max(cos_r, -1.0), 1.0)))


def calc_rotation_angle(rotation1, rotation2) -> float:
    """Angle in degrees between two rotation matrices."""
    r1 = np.asarray(rotation1, dtype=float)
    r2 = np.asarray(rotation2, dtype=float)
    diag_sum = float((r1.T @ r2).diagonal().sum())
    return _angle_from_cos((diag_sum - 1.0) / 2.0)


def calc_angle(pose1: Rigid3d, pose2: Rigid3d) -> float:
    """Angle in degrees between the rotations of two poses."""
    return calc_rotation_angle(pose1.rotation, pose2.rotation)


def calc_trans(pose1: Rigid3d, pose2: Rigid3d) -> float:
    """Distance between the translations of the inverted poses."""
    return float(
        np.linalg.norm(pose1.inverse().translation - pose2.inverse().translation)
    )


def calc_trans_angle(pose1: Rigid3d, pose2: Rigid3d) -> float:
    """Angle in degrees between the translation directions of two poses."""
    t1 = pose1.translation
    t2 = pose2.translation
    cos_r = float(t1 @ t2) / (np.linalg.norm(t1) * np.linalg.norm(t2))
    return _angle_from_cos(cos_r)


def deg_to_rad(degree: float) -> float:
    return degree * math.pi / 180


def rad_to_deg(radian: float) -> float:
    return radian * 180 / math.pi


def rotation_to_angle_axis(rot) -> np.ndarray:
    """Convert a rotation matrix to an angle-axis vector."""
    return Rotation.from_matrix(np.asarray(rot, dtype=float)).as_rotvec()


def rigid3d_to_angle_axis(pose: Rigid3d) -> np.ndarray:
    return rotation_to_angle_axis(pose.rotation)


def angle_axis_to_rotation(aa_vec) -> np.ndarray:
    """Convert an angle-axis vector to a rotation matrix.

    Very small vectors use the first-order approximation ``I + [aa]x``.
    """
    aa = np.asarray(aa_vec, dtype=float).reshape(3)
    if np.linalg.norm(aa) > EPS:
        return Rotation.from_rotvec(aa).as_matrix()
    return np.array(
        [
            [1.0, -aa[2], aa[1]],
            [aa[2], 1.0, -aa[0]],
            [-aa[1], aa[0], 1.0],
        ]
    )