"""Pairs of images with their two-view geometry and matches."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Tuple

import numpy as np

from gsfm.types import MAX_NUM_IMAGES, Rigid3d, TwoViewConfig


def image_pair_to_pair_id(image_id1: int, image_id2: int) -> int:
    """Order-independent identifier of a pair of images."""
    low, high = sorted((image_id1, image_id2))
    return MAX_NUM_IMAGES * low + high


def pair_id_to_image_pair(pair_id: int) -> Tuple[int, int]:
    """Split a pair id; the first id is the larger of the two."""
    image_id1 = pair_id % MAX_NUM_IMAGES
    image_id2 = (pair_id - image_id1) // MAX_NUM_IMAGES
    return image_id1, image_id2


def _zeros3() -> np.ndarray:
    return np.zeros((3, 3))


@dataclass(eq=False)
class ImagePair:
    """Relative geometry and feature matches between two images."""

    image_id1: int = -1
    image_id2: int = -1
    cam2_from_cam1: Rigid3d = field(default_factory=Rigid3d)
    is_valid: bool = True
    # Initial inlier rate.
    weight: float = 0.0
    config: TwoViewConfig = TwoViewConfig.UNDEFINED
    E: np.ndarray = field(default_factory=_zeros3)
    F: np.ndarray = field(default_factory=_zeros3)
    H: np.ndarray = field(default_factory=_zeros3)
    # Rows of (feature index in image 1, feature index in image 2).
    matches: np.ndarray = field(
        default_factory=lambda: np.zeros((0, 2), dtype=np.int64)
    )
    # Row indices of inliers in ``matches``.
    inliers: List[int] = field(default_factory=list)

    @property
    def pair_id(self) -> int:
        if self.image_id1 == -1 and self.image_id2 == -1:
            return -1
        return image_pair_to_pair_id(self.image_id1, self.image_id2)