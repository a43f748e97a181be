"""Remove track observations that disagree with the current reconstruction."""

from __future__ import annotations

import logging
import math
from typing import Dict, List

import numpy as np

from gsfm.camera import Camera
from gsfm.image import Image
from gsfm.rigid3d import deg_to_rad
from gsfm.track import Observation, Track
from gsfm.types import EPS
from gsfm.view_graph import ViewGraph

logger = logging.getLogger(__name__)


def filter_tracks_by_reprojection(
    view_graph: ViewGraph,
    cameras: Dict[int, Camera],
    images: Dict[int, Image],
    tracks: Dict[int, Track],
    max_reprojection_error: float = 1e-2,
    in_normalized_image: bool = True,
) -> int:
    """Drop observations whose reprojection error reaches the maximum.

    Observations behind the camera are dropped too. The error is measured on
    normalized rays or, without ``in_normalized_image``, in pixels. Returns
    the number of tracks that changed.
    """
    counter = 0
    for track in tracks.values():
        kept: List[Observation] = []
        for image_id, feature_id in track.observations:
            image = images[image_id]
            pt_calc = image.cam_from_world.transform(track.xyz)
            if pt_calc[2] < EPS:
                continue
            pt_reproj = pt_calc[:2] / pt_calc[2]
            if in_normalized_image:
                feature = np.asarray(image.features_undist[feature_id], dtype=float)
                error = np.linalg.norm(pt_reproj - feature[:2] / (feature[2] + EPS))
            else:
                pt_dist = cameras[image.camera_id].img_from_cam(pt_reproj)
                error = np.linalg.norm(pt_dist - image.features[feature_id])
            if error < max_reprojection_error:
                kept.append((image_id, feature_id))
        if len(kept) != len(track.observations):
            counter += 1
            track.observations = kept
    logger.info("Filtered %d / %d tracks by reprojection error", counter, len(tracks))
    return counter


def filter_tracks_by_angle(
    view_graph: ViewGraph,
    cameras: Dict[int, Camera],
    images: Dict[int, Image],
    tracks: Dict[int, Track],
    max_angle_error: float = 1.0,
) -> int:
    """Drop observations whose ray deviates from the point by the angle limit.

    The limit (degrees) is doubled for cameras without a prior focal length.
    Returns the number of tracks that changed.
    """
    counter = 0
    thres = math.cos(deg_to_rad(max_angle_error))
    thres_uncalib = math.cos(deg_to_rad(max_angle_error * 2))
    for track in tracks.values():
        kept: List[Observation] = []
        for image_id, feature_id in track.observations:
            image = images[image_id]
            feature = np.asarray(image.features_undist[feature_id], dtype=float)
            pt_calc = image.cam_from_world.transform(track.xyz)
            if pt_calc[2] < EPS:
                continue
            pt_calc = pt_calc / np.linalg.norm(pt_calc)
            calibrated = cameras[image.camera_id].has_prior_focal_length
            thres_cam = thres if calibrated else thres_uncalib
            if float(pt_calc @ feature) > thres_cam:
                kept.append((image_id, feature_id))
        if len(kept) != len(track.observations):
            counter += 1
            track.observations = kept
    logger.info("Filtered %d / %d tracks by angle error", counter, len(tracks))
    return counter


def filter_track_triangulation_angle(
    view_graph: ViewGraph,
    images: Dict[int, Image],
    tracks: Dict[int, Track],
    min_angle: float = 1.0,
) -> int:
    """Clear tracks whose viewing rays never span ``min_angle`` degrees.

    Returns the number of tracks cleared.
    """
    counter = 0
    thres = math.cos(deg_to_rad(min_angle))
    for track in tracks.values():
        directions = []
        for image_id, _ in track.observations:
            direction = track.xyz - images[image_id].center()
            directions.append(direction / np.linalg.norm(direction))
        wide_enough = any(
            float(directions[i] @ directions[j]) < thres
            for i in range(len(directions))
            for j in range(i + 1, len(directions))
        )
        if not wide_enough:
            counter += 1
            track.observations.clear()
    logger.info(
        "Filtered %d / %d tracks by too small triangulation angle", counter, len(tracks)
    )
    return counter