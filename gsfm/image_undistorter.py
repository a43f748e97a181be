"""Compute normalized feature rays for images."""

from __future__ import annotations

import logging
from typing import Dict

import numpy as np

from gsfm.camera import Camera
from gsfm.image import Image

logger = logging.getLogger(__name__)


def undistort_images(
    cameras: Dict[int, Camera],
    images: Dict[int, Image],
    clean_points: bool = True,
) -> int:
    """Fill ``features_undist`` with unit rays for the features of each image.

    Without ``clean_points``, images whose rays already match their features
    in number are skipped. Returns the number of images processed.
    """
    todo = [
        image
        for image in images.values()
        if clean_points or len(image.features_undist) != len(image.features)
    ]

    logger.info("Undistorting images..")
    for image in todo:
        camera = cameras[image.camera_id]
        rays = []
        for feature in image.features:
            ray = np.append(camera.cam_from_img(feature), 1.0)
            rays.append(ray / np.linalg.norm(ray))
        image.features_undist = rays
    logger.info("Image undistortion done")
    return len(todo)