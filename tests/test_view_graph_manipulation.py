import random

import numpy as np
import pytest

from gsfm.camera import Camera
from gsfm.image import Image
from gsfm.image_pair import ImagePair, image_pair_to_pair_id
from gsfm.two_view_geometry import fundamental_from_motion_and_cameras
from gsfm.types import Rigid3d, TwoViewConfig
from gsfm.view_graph import ViewGraph
from gsfm.view_graph_manipulation import (
    StrongClusterCriteria,
    establish_strong_clusters,
    sparsify_graph,
    update_image_pairs_config,
)


class _FixedRng:
    def __init__(self, value):
        self.value = value

    def random(self):
        return self.value


def _images(ids, camera_id=1):
    return {i: Image(image_id=i, camera_id=camera_id, is_registered=True) for i in ids}


def _graph(edges):
    graph = ViewGraph()
    for (a, b), weight in edges.items():
        graph.image_pairs[image_pair_to_pair_id(a, b)] = ImagePair(
            image_id1=a, image_id2=b, weight=weight
        )
    return graph


def _pair(graph, a, b):
    return graph.image_pairs[image_pair_to_pair_id(a, b)]


def _complete_edges(ids):
    return {(a, b): 1.0 for a in ids for b in ids if a < b}


def test_sparsify_keeps_low_degree_edges():
    graph = _graph({(1, 2): 1.0, (2, 3): 1.0, (1, 3): 1.0})
    images = _images([1, 2, 3])
    assert sparsify_graph(graph, images, 50) == 3
    assert all(pair.is_valid for pair in graph.image_pairs.values())
    assert all(image.is_registered for image in images.values())


def test_sparsify_ignores_smaller_component():
    graph = _graph({(1, 2): 1.0, (2, 3): 1.0, (1, 3): 1.0, (4, 5): 1.0})
    images = _images([1, 2, 3, 4, 5])
    assert sparsify_graph(graph, images, 50) == 3
    assert not _pair(graph, 4, 5).is_valid
    assert not images[4].is_registered and not images[5].is_registered


def test_sparsify_keeps_all_when_draw_is_zero():
    ids = range(1, 7)
    graph = _graph(_complete_edges(ids))
    images = _images(ids)
    assert sparsify_graph(graph, images, 1, _FixedRng(0.0)) == len(graph.image_pairs)
    assert all(pair.is_valid for pair in graph.image_pairs.values())


def test_sparsify_drops_all_when_draw_is_high():
    ids = range(1, 7)
    graph = _graph(_complete_edges(ids))
    images = _images(ids)
    assert sparsify_graph(graph, images, 1, _FixedRng(0.5)) == 0
    assert not any(pair.is_valid for pair in graph.image_pairs.values())
    assert not any(image.is_registered for image in images.values())


def test_sparsify_is_reproducible_with_seeded_rng():
    ids = range(1, 9)
    results = []
    for _ in range(2):
        graph = _graph(_complete_edges(ids))
        images = _images(ids)
        kept = sparsify_graph(graph, images, 2, random.Random(7))
        valid = {pid for pid, pair in graph.image_pairs.items() if pair.is_valid}
        assert len(valid) <= kept <= len(graph.image_pairs)
        results.append((kept, valid))
    assert results[0] == results[1]


def _two_triangles(bridges):
    edges = {(1, 2): 200, (2, 3): 200, (1, 3): 200, (4, 5): 200, (5, 6): 200, (4, 6): 200}
    edges.update(bridges)
    return _graph(edges), _images(range(1, 7))


def test_strong_clusters_separate_weak_bridge():
    graph, images = _two_triangles({(3, 4): 10})
    num = establish_strong_clusters(graph, images, StrongClusterCriteria.WEIGHT, 100)
    assert num == 2
    assert not _pair(graph, 3, 4).is_valid
    ids_a = {images[i].cluster_id for i in (1, 2, 3)}
    ids_b = {images[i].cluster_id for i in (4, 5, 6)}
    assert len(ids_a) == 1 and len(ids_b) == 1
    assert ids_a | ids_b == {0, 1}


def test_strong_clusters_single_medium_bridge_not_enough():
    graph, images = _two_triangles({(3, 4): 80})
    assert establish_strong_clusters(graph, images, StrongClusterCriteria.WEIGHT, 100) == 2
    assert not _pair(graph, 3, 4).is_valid


def test_strong_clusters_merge_with_two_medium_bridges():
    graph, images = _two_triangles({(1, 4): 80, (2, 5): 80})
    assert establish_strong_clusters(graph, images, StrongClusterCriteria.WEIGHT, 100) == 1
    assert _pair(graph, 1, 4).is_valid and _pair(graph, 2, 5).is_valid
    assert {image.cluster_id for image in images.values()} == {0}


def test_strong_clusters_inlier_criteria_and_disconnected_component():
    graph = _graph({(1, 2): 0, (2, 3): 0, (1, 3): 0, (3, 4): 0, (7, 8): 0})
    for a, b in ((1, 2), (2, 3), (1, 3)):
        _pair(graph, a, b).inliers = list(range(150))
    _pair(graph, 7, 8).inliers = list(range(500))
    images = _images([1, 2, 3, 4, 7, 8])
    assert establish_strong_clusters(graph, images) == 2
    assert images[1].cluster_id == images[2].cluster_id == images[3].cluster_id
    assert images[4].cluster_id != images[1].cluster_id
    assert images[7].cluster_id == -1 and images[8].cluster_id == -1
    assert not _pair(graph, 7, 8).is_valid


def _camera(prior=True):
    return Camera(model="PINHOLE", params=[100.0, 100.0, 50.0, 50.0], has_prior_focal_length=prior)


def _config_graph(configs):
    graph = ViewGraph()
    for (a, b), config in configs.items():
        graph.image_pairs[image_pair_to_pair_id(a, b)] = ImagePair(
            image_id1=a,
            image_id2=b,
            config=config,
            cam2_from_cam1=Rigid3d(np.eye(3), [1.0, 0.0, 0.0]),
        )
    return graph


def test_update_config_promotes_when_majority_calibrated():
    graph = _config_graph(
        {
            (1, 2): TwoViewConfig.CALIBRATED,
            (2, 3): TwoViewConfig.CALIBRATED,
            (1, 3): TwoViewConfig.UNCALIBRATED,
        }
    )
    camera = _camera()
    cameras = {1: camera}
    images = _images([1, 2, 3])
    assert update_image_pairs_config(graph, cameras, images) == 1
    pair = _pair(graph, 1, 3)
    assert pair.config == TwoViewConfig.CALIBRATED
    expected = fundamental_from_motion_and_cameras(camera, camera, pair.cam2_from_cam1)
    np.testing.assert_allclose(pair.F, expected)


def test_update_config_keeps_uncalibrated_majority():
    graph = _config_graph(
        {
            (1, 2): TwoViewConfig.CALIBRATED,
            (2, 3): TwoViewConfig.UNCALIBRATED,
            (1, 3): TwoViewConfig.UNCALIBRATED,
        }
    )
    images = _images([1, 2, 3])
    assert update_image_pairs_config(graph, {1: _camera()}, images) == 0
    assert _pair(graph, 1, 3).config == TwoViewConfig.UNCALIBRATED
    np.testing.assert_array_equal(_pair(graph, 1, 3).F, np.zeros((3, 3)))


def test_update_config_ignores_cameras_without_prior():
    graph = _config_graph(
        {
            (1, 2): TwoViewConfig.CALIBRATED,
            (2, 3): TwoViewConfig.CALIBRATED,
            (1, 3): TwoViewConfig.UNCALIBRATED,
        }
    )
    images = _images([1, 2, 3])
    assert update_image_pairs_config(graph, {1: _camera(prior=False)}, images) == 0
    assert _pair(graph, 1, 3).config == TwoViewConfig.UNCALIBRATED


def test_update_config_requires_camera_entries():
    graph = _config_graph({(1, 2): TwoViewConfig.UNCALIBRATED})
    with pytest.raises(KeyError):
        update_image_pairs_config(graph, {}, _images([1, 2]))