"""Images with their pose, features and optional gravity prior."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List

import numpy as np

from gsfm.gravity import get_align_rot
from gsfm.types import Rigid3d


@dataclass(eq=False)
class GravityInfo:
    """Gravity direction of an image and the rotation aligned with it."""

    has_gravity: bool = False
    gravity: np.ndarray = field(default_factory=lambda: np.zeros(3))
    # Alignment rotation; its second column is the gravity direction.
    r_align: np.ndarray = field(default_factory=lambda: np.eye(3))

    def set_gravity(self, g) -> None:
        self.gravity = np.array(g, dtype=float).reshape(3)
        self.r_align = get_align_rot(self.gravity)
        self.has_gravity = True


@dataclass(eq=False)
class Image:
    """One image: identity, pose, cluster membership and feature points."""

    image_id: int = -1
    camera_id: int = -1
    file_name: str = ""
    # Whether the image belongs to the largest connected component.
    is_registered: bool = False
    cluster_id: int = -1
    # Transformation from world to camera coordinates.
    cam_from_world: Rigid3d = field(default_factory=Rigid3d)
    gravity_info: GravityInfo = field(default_factory=GravityInfo)
    # Distorted feature points in pixels.
    features: List[np.ndarray] = field(default_factory=list)
    # Normalized feature rays, filled in by undistortion.
    features_undist: List[np.ndarray] = field(default_factory=list)

    def center(self) -> np.ndarray:
        """Position of the camera center in world coordinates."""
        pose = self.cam_from_world
        return pose.rotation.T @ -pose.translation