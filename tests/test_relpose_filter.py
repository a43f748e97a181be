import numpy as np

from gsfm.image import Image
from gsfm.image_pair import ImagePair, image_pair_to_pair_id
from gsfm.relpose_filter import filter_inlier_num, filter_inlier_ratio, filter_rotations
from gsfm.rigid3d import angle_axis_to_rotation, deg_to_rad
from gsfm.types import Rigid3d
from gsfm.view_graph import ViewGraph


def _graph(*pairs):
    graph = ViewGraph()
    for pair in pairs:
        graph.image_pairs[image_pair_to_pair_id(pair.image_id1, pair.image_id2)] = pair
    return graph


def _rot(degrees):
    return angle_axis_to_rotation([0.0, deg_to_rad(degrees), 0.0])


def test_filter_rotations():
    images = {
        1: Image(1, 1, "a", is_registered=True),
        2: Image(2, 1, "b", is_registered=True, cam_from_world=Rigid3d(_rot(10.0))),
        3: Image(3, 1, "c", is_registered=False, cam_from_world=Rigid3d(_rot(40.0))),
    }
    consistent = ImagePair(1, 2, cam2_from_cam1=Rigid3d(_rot(10.0)))
    wrong = ImagePair(2, 1, cam2_from_cam1=Rigid3d())
    unregistered = ImagePair(1, 3, cam2_from_cam1=Rigid3d())
    graph = _graph(consistent, wrong, unregistered)
    assert filter_rotations(graph, images) == 1
    assert consistent.is_valid
    assert not wrong.is_valid
    assert unregistered.is_valid


def test_filter_rotations_respects_threshold():
    images = {
        1: Image(1, 1, "a", is_registered=True),
        2: Image(2, 1, "b", is_registered=True, cam_from_world=Rigid3d(_rot(10.0))),
    }
    pair = ImagePair(1, 2, cam2_from_cam1=Rigid3d())
    graph = _graph(pair)
    assert filter_rotations(graph, images, max_angle=15.0) == 0
    assert pair.is_valid


def test_filter_inlier_num():
    few = ImagePair(1, 2, inliers=list(range(10)))
    enough = ImagePair(1, 3, inliers=list(range(30)))
    already_invalid = ImagePair(2, 3, is_valid=False)
    graph = _graph(few, enough, already_invalid)
    assert filter_inlier_num(graph) == 1
    assert not few.is_valid
    assert enough.is_valid
    assert filter_inlier_num(graph, min_inlier_num=31) == 1
    assert not enough.is_valid


def test_filter_inlier_ratio():
    matches = np.zeros((10, 2), dtype=np.int64)
    low = ImagePair(1, 2, matches=matches, inliers=[0, 1])
    high = ImagePair(1, 3, matches=matches, inliers=[0, 1, 2, 3, 4])
    no_matches = ImagePair(2, 3)
    graph = _graph(low, high, no_matches)
    assert filter_inlier_ratio(graph) == 1
    assert not low.is_valid
    assert high.is_valid
    assert no_matches.is_valid