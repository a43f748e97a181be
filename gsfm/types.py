"""Core constants, option sets and the rigid transform type."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from enum import IntEnum

import numpy as np

EPS = 1e-12
HALF_PI = math.pi / 2
TWO_PI = 2 * math.pi

# Largest representable image id; image ids are 32-bit unsigned.
MAX_NUM_IMAGES = 2**32 - 1
INVALID_IMAGE_PAIR_ID = 2**64 - 1


@dataclass
class InlierThresholdOptions:
    """Thresholds used when classifying matches and edges as inliers."""

    # Thresholds for 3D-2D matches
    max_angle_error: float = 1.0  # degrees, global positioning
    max_reprojection_error: float = 1e-2  # bundle adjustment
    min_triangulation_angle: float = 1.0  # degrees, triangulation

    # Thresholds for image pairs
    max_epipolar_error_E: float = 1.0
    max_epipolar_error_F: float = 4.0
    max_epipolar_error_H: float = 4.0

    # Thresholds for edges
    min_inlier_num: float = 30
    min_inlier_ratio: float = 0.25
    max_rotation_error: float = 10.0  # degrees, rotation averaging


class TwoViewConfig(IntEnum):
    """Configuration of the geometry estimated between two views."""

    UNDEFINED = 0
    DEGENERATE = 1
    CALIBRATED = 2
    UNCALIBRATED = 3
    PLANAR = 4
    PANORAMIC = 5
    PLANAR_OR_PANORAMIC = 6
    WATERMARK = 7
    MULTIPLE = 8


def _as_matrix(value) -> np.ndarray:
    matrix = np.array(value, dtype=float)
    if matrix.shape != (3, 3):
        raise ValueError(f"rotation must be a 3x3 matrix, got shape {matrix.shape}")
    return matrix


def _as_vector(value) -> np.ndarray:
    vector = np.array(value, dtype=float).reshape(-1)
    if vector.shape != (3,):
        raise ValueError(f"translation must have 3 entries, got {vector.shape}")
    return vector


@dataclass(eq=False)
class Rigid3d:
    """A rigid transform ``x -> rotation @ x + translation``."""

    rotation: np.ndarray = field(default_factory=lambda: np.eye(3))
    translation: np.ndarray = field(default_factory=lambda: np.zeros(3))

    def __post_init__(self) -> None:
        self.rotation = _as_matrix(self.rotation)
        self.translation = _as_vector(self.translation)

    @classmethod
    def identity(cls) -> "Rigid3d":
        return cls()

    def inverse(self) -> "Rigid3d":
        rot_t = self.rotation.T
        return Rigid3d(rot_t, -rot_t @ self.translation)

    def compose(self, other: "Rigid3d") -> "Rigid3d":
        """Return the transform that applies ``other`` first, then ``self``."""
        return Rigid3d(
            self.rotation @ other.rotation,
            self.rotation @ other.translation + self.translation,
        )

    def transform(self, point) -> np.ndarray:
        return self.rotation @ _as_vector(point) + self.translation

    def copy(self) -> "Rigid3d":
        return Rigid3d(self.rotation.copy(), self.translation.copy())

    def __repr__(self) -> str:
        return (
            f"Rigid3d(rotation={self.rotation.tolist()}, "
            f"translation={self.translation.tolist()})"
        )