"""Split a reconstruction into clusters of strongly co-visible images."""

from __future__ import annotations

import logging
from typing import Dict

from gsfm.image import Image
from gsfm.image_pair import ImagePair, image_pair_to_pair_id, pair_id_to_image_pair
from gsfm.track import Track
from gsfm.view_graph import ViewGraph
from gsfm.view_graph_manipulation import StrongClusterCriteria, establish_strong_clusters

logger = logging.getLogger(__name__)


def prune_weakly_connected_images(
    images: Dict[int, Image],
    tracks: Dict[int, Track],
    min_num_images: int = 2,
    min_num_observations: int = 0,
) -> int:
    """Cluster images by the number of tracks they share.

    Only tracks with more than two observations count. Pairs sharing at least
    five such tracks, between images with at least ``min_num_observations``
    observations each, form a visibility graph weighted by the shared count.
    Clusters are then built with a threshold of the median weight minus its
    median absolute deviation, but at least 20. Returns the number of
    clusters; raises ``ValueError`` if no pair qualifies.
    """
    pair_covisibility_count: Dict[int, int] = {}
    image_observation_count: Dict[int, int] = {}
    for track in tracks.values():
        observations = track.observations
        if len(observations) <= 2:
            continue
        for i, (image_id1, _) in enumerate(observations):
            image_observation_count[image_id1] = image_observation_count.get(image_id1, 0) + 1
            for image_id2, _ in observations[i + 1:]:
                if image_id1 == image_id2:
                    continue
                pair_id = image_pair_to_pair_id(image_id1, image_id2)
                pair_covisibility_count[pair_id] = pair_covisibility_count.get(pair_id, 0) + 1

    visibility_graph = ViewGraph()
    pair_count = []
    counter = 0
    for pair_id, count in pair_covisibility_count.items():
        # A relative pose is only fixed by at least five points.
        if count < 5:
            continue
        counter += 1
        image_id1, image_id2 = pair_id_to_image_pair(pair_id)
        if (
            image_observation_count.get(image_id1, 0) < min_num_observations
            or image_observation_count.get(image_id2, 0) < min_num_observations
        ):
            continue
        visibility_graph.image_pairs[pair_id] = ImagePair(
            image_id1=image_id1, image_id2=image_id2, is_valid=True, weight=count
        )
        pair_count.append(count)
    logger.info("Established visibility graph with %d pairs", counter)

    if not pair_count:
        raise ValueError("no image pairs share enough tracks to build a visibility graph")

    pair_count.sort()
    median_count = float(pair_count[len(pair_count) // 2])
    deviations = sorted(abs(count - median_count) for count in pair_count)
    median_deviation = deviations[len(deviations) // 2]

    logger.info("Threshold for Strong Clustering: %s", median_count - median_deviation)

    return establish_strong_clusters(
        visibility_graph,
        images,
        StrongClusterCriteria.WEIGHT,
        max(median_count - median_deviation, 20.0),
        min_num_images,
    )