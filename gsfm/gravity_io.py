"""Reading per-image gravity directions from a text file."""

from __future__ import annotations

import logging
import os
from typing import Dict, Union

import numpy as np

from gsfm.image import Image

logger = logging.getLogger(__name__)


def read_gravity(gravity_path: Union[str, os.PathLike], images: Dict[int, Image]) -> int:
    """Load gravity directions and align the initial image rotations with them.

    Each line holds ``image_name gx gy gz`` separated by single spaces, where
    the gravity is the image-frame direction of [0, 1, 0]. Lines naming
    unknown images are ignored. Returns the number of images updated.
    """
    name_idx = {image.file_name: image_id for image_id, image in images.items()}

    counter = 0
    with open(gravity_path, encoding="utf-8") as handle:
        for line_number, line in enumerate(handle, start=1):
            line = line.rstrip("\r\n")
            if not line.strip():
                continue
            parts = line.split(" ")
            if len(parts) < 4:
                raise ValueError(
                    f"{gravity_path}:{line_number}: expected a name and 3 numbers"
                )
            name = parts[0]
            try:
                gravity = np.array([float(item) for item in parts[1:4]])
            except ValueError as exc:
                raise ValueError(
                    f"{gravity_path}:{line_number}: invalid gravity value"
                ) from exc

            image_id = name_idx.get(name)
            if image_id is None:
                continue
            counter += 1
            image = images[image_id]
            image.gravity_info.set_gravity(gravity)
            image.cam_from_world.rotation = image.gravity_info.r_align.T.copy()

    logger.info("%d images are loaded with gravity", counter)
    return counter