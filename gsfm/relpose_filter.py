"""Invalidate image pairs whose relative pose is not trustworthy."""

from __future__ import annotations

import logging
from typing import Dict

from gsfm.image import Image
from gsfm.rigid3d import calc_angle
from gsfm.view_graph import ViewGraph

logger = logging.getLogger(__name__)


def filter_rotations(
    view_graph: ViewGraph, images: Dict[int, Image], max_angle: float = 5.0
) -> int:
    """Invalidate pairs whose relative rotation disagrees with the image poses.

    ``max_angle`` is in degrees. Pairs touching unregistered images are left
    as they are. Returns the number of pairs invalidated.
    """
    num_invalid = 0
    for pair in view_graph.image_pairs.values():
        if not pair.is_valid:
            continue
        image1 = images[pair.image_id1]
        image2 = images[pair.image_id2]
        if not (image1.is_registered and image2.is_registered):
            continue
        pose_calc = image2.cam_from_world.compose(image1.cam_from_world.inverse())
        if calc_angle(pose_calc, pair.cam2_from_cam1) > max_angle:
            pair.is_valid = False
            num_invalid += 1
    logger.info(
        "Filtered %d relative rotation with angle > %s degrees", num_invalid, max_angle
    )
    return num_invalid


def filter_inlier_num(view_graph: ViewGraph, min_inlier_num: int = 30) -> int:
    """Invalidate pairs with fewer than ``min_inlier_num`` inliers."""
    num_invalid = 0
    for pair in view_graph.image_pairs.values():
        if pair.is_valid and len(pair.inliers) < min_inlier_num:
            pair.is_valid = False
            num_invalid += 1
    logger.info(
        "Filtered %d relative poses with inlier number < %s", num_invalid, min_inlier_num
    )
    return num_invalid


def filter_inlier_ratio(view_graph: ViewGraph, min_inlier_ratio: float = 0.25) -> int:
    """Invalidate pairs whose fraction of inlier matches is below the minimum.

    Pairs without matches have no defined ratio and are kept.
    """
    num_invalid = 0
    for pair in view_graph.image_pairs.values():
        if not pair.is_valid:
            continue
        num_matches = len(pair.matches)
        if num_matches == 0:
            continue
        if len(pair.inliers) / num_matches < min_inlier_ratio:
            pair.is_valid = False
            num_invalid += 1
    logger.info(
        "Filtered %d relative poses with inlier ratio < %s", num_invalid, min_inlier_ratio
    )
    return num_invalid