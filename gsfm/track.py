"""Tracks: 3D points with the image features that observe them."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Set, Tuple

import numpy as np

# (image_id, feature_id)
Observation = Tuple[int, int]


@dataclass(eq=False)
class Track:
    """A 3D point and the list of its observations."""

    track_id: int = 0
    xyz: np.ndarray = field(default_factory=lambda: np.zeros(3))
    color: np.ndarray = field(default_factory=lambda: np.zeros(3, dtype=np.uint8))
    is_initialized: bool = False
    observations: List[Observation] = field(default_factory=list)

    def image_ids(self) -> Set[int]:
        """Distinct ids of the images observing this track."""
        return {image_id for image_id, _ in self.observations}