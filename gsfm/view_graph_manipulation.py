"""Operations that reshape the view graph: sparsification, clustering, configs."""

from __future__ import annotations

import logging
import random
from enum import Enum
from typing import Dict, Optional, Set

from gsfm.camera import Camera
from gsfm.image import Image
from gsfm.image_pair import ImagePair
from gsfm.two_view_geometry import fundamental_from_motion_and_cameras
from gsfm.types import TwoViewConfig
from gsfm.union_find import UnionFind
from gsfm.view_graph import ViewGraph

logger = logging.getLogger(__name__)


class StrongClusterCriteria(Enum):
    """Which quantity of an image pair measures the strength of an edge."""

    INLIER_NUM = 0
    WEIGHT = 1


def sparsify_graph(
    view_graph: ViewGraph,
    images: Dict[int, Image],
    expected_degree: int = 50,
    rng: Optional[random.Random] = None,
) -> int:
    """Randomly drop edges between highly connected images.

    An edge between images of degrees ``d1`` and ``d2`` is always kept if
    either degree is at most ``expected_degree``; otherwise it is kept with
    probability ``expected_degree * average_degree / (d1 * d2)``. Edges not
    kept become invalid and only the largest connected component stays
    registered. Returns the number of edges kept.
    """
    draw = (rng if rng is not None else random).random
    num_img = view_graph.keep_largest_connected_components(images)
    adjacency = view_graph.adjacency_list

    total_degree = sum(
        len(neighbors)
        for image_id, neighbors in adjacency.items()
        if images[image_id].is_registered
    )
    average_degree = total_degree / num_img if num_img else 0.0

    chosen: Set[int] = set()
    for pair_id, pair in view_graph.image_pairs.items():
        if not pair.is_valid:
            continue
        if not (images[pair.image_id1].is_registered and images[pair.image_id2].is_registered):
            continue
        degree1 = len(adjacency[pair.image_id1])
        degree2 = len(adjacency[pair.image_id2])
        if degree1 <= expected_degree or degree2 <= expected_degree:
            chosen.add(pair_id)
            continue
        if draw() < (expected_degree * average_degree) / (degree1 * degree2):
            chosen.add(pair_id)

    for pair_id, pair in view_graph.image_pairs.items():
        if pair_id not in chosen:
            pair.is_valid = False

    view_graph.keep_largest_connected_components(images)
    return len(chosen)


def _edge_value(pair: ImagePair, criteria: StrongClusterCriteria) -> float:
    if criteria is StrongClusterCriteria.INLIER_NUM:
        return float(len(pair.inliers))
    return float(pair.weight)


def establish_strong_clusters(
    view_graph: ViewGraph,
    images: Dict[int, Image],
    criteria: StrongClusterCriteria = StrongClusterCriteria.INLIER_NUM,
    min_thres: float = 100,
    min_num_images: int = 2,
) -> int:
    """Split the largest component into clusters joined by strong edges.

    Edges stronger than ``min_thres`` seed the clusters. Two clusters are
    then merged when at least two edges of strength ``0.75 * min_thres`` or
    more join them, for at most ten rounds. Edges between different clusters
    become invalid, and every remaining connected component gets a cluster
    id on its images. Returns the number of clusters.
    """
    view_graph.keep_largest_connected_components(images)

    uf: UnionFind[int] = UnionFind()
    for pair in view_graph.image_pairs.values():
        if pair.is_valid and _edge_value(pair, criteria) > min_thres:
            uf.union(pair.image_id1, pair.image_id2)

    weak_limit = 0.75 * min_thres
    iteration = 0
    merged = True
    while merged:
        merged = False
        iteration += 1
        if iteration > 10:
            break

        num_pairs: Dict[int, Dict[int, int]] = {}
        for pair in view_graph.image_pairs.values():
            if not pair.is_valid or _edge_value(pair, criteria) < weak_limit:
                continue
            root1 = uf.find(pair.image_id1)
            root2 = uf.find(pair.image_id2)
            if root1 == root2:
                continue
            counts1 = num_pairs.setdefault(root1, {})
            counts2 = num_pairs.setdefault(root2, {})
            counts1[root2] = counts1.get(root2, 0) + 1
            counts2[root1] = counts2.get(root1, 0) + 1

        for root1, counter in num_pairs.items():
            for root2, count in counter.items():
                if root1 <= root2:
                    continue
                if count >= 2:
                    merged = True
                    uf.union(root1, root2)

    for pair in view_graph.image_pairs.values():
        if pair.is_valid and uf.find(pair.image_id1) != uf.find(pair.image_id2):
            pair.is_valid = False

    num_comp = view_graph.mark_connected_components(images)
    logger.info(
        "Clustering take %d iterations. Images are grouped into %d clusters "
        "after strong-clustering",
        iteration,
        num_comp,
    )
    return num_comp


def update_image_pairs_config(
    view_graph: ViewGraph,
    cameras: Dict[int, Camera],
    images: Dict[int, Image],
) -> int:
    """Promote uncalibrated pairs between trustworthy cameras to calibrated.

    A camera with a prior focal length is trusted when more than half of the
    valid calibrated or uncalibrated pairs it takes part in are calibrated.
    Promoted pairs get their fundamental matrix recomputed from the relative
    pose. Returns the number of pairs promoted.
    """
    # camera id -> [pairs involved, calibrated pairs involved]
    camera_counter: Dict[int, list] = {}
    for pair in view_graph.image_pairs.values():
        if not pair.is_valid:
            continue
        camera_id1 = images[pair.image_id1].camera_id
        camera_id2 = images[pair.image_id2].camera_id
        if not (
            cameras[camera_id1].has_prior_focal_length
            and cameras[camera_id2].has_prior_focal_length
        ):
            continue
        if pair.config == TwoViewConfig.CALIBRATED:
            for camera_id in (camera_id1, camera_id2):
                counts = camera_counter.setdefault(camera_id, [0, 0])
                counts[0] += 1
                counts[1] += 1
        elif pair.config == TwoViewConfig.UNCALIBRATED:
            for camera_id in (camera_id1, camera_id2):
                camera_counter.setdefault(camera_id, [0, 0])[0] += 1

    camera_validity = {
        camera_id: total > 0 and calibrated / total > 0.5
        for camera_id, (total, calibrated) in camera_counter.items()
    }

    promoted = 0
    for pair in view_graph.image_pairs.values():
        if not pair.is_valid or pair.config != TwoViewConfig.UNCALIBRATED:
            continue
        camera_id1 = images[pair.image_id1].camera_id
        camera_id2 = images[pair.image_id2].camera_id
        if camera_validity.get(camera_id1, False) and camera_validity.get(camera_id2, False):
            pair.config = TwoViewConfig.CALIBRATED
            pair.F = fundamental_from_motion_and_cameras(
                cameras[camera_id1], cameras[camera_id2], pair.cam2_from_cam1
            )
            promoted += 1
    return promoted