import numpy as np
import pytest
from scipy.spatial.transform import Rotation

from gsfm.camera import Camera, CameraModel
from gsfm.two_view_geometry import (
    check_cheirality,
    essential_from_motion,
    fundamental_from_motion_and_cameras,
    get_orientation_signum,
    homography_error,
    sampson_error,
)
from gsfm.types import Rigid3d


def _relative_pose():
    rot = Rotation.from_rotvec([0.05, -0.1, 0.02]).as_matrix()
    return Rigid3d(rot, [-1.0, 0.1, 0.2])


def _unit(v):
    v = np.asarray(v, dtype=float)
    return v / np.linalg.norm(v)


def test_essential_epipolar_constraint_holds():
    pose = _relative_pose()
    e = essential_from_motion(pose)
    for point in ([0.3, -0.2, 5.0], [-1.0, 0.5, 8.0], [0.0, 0.0, 3.0]):
        p1 = np.array(point)
        p2 = pose.transform(p1)
        assert p2 @ e @ p1 == pytest.approx(0.0, abs=1e-12)


def test_sampson_error_zero_for_true_correspondence_2d_and_3d():
    pose = _relative_pose()
    e = essential_from_motion(pose)
    p1 = np.array([0.4, 0.3, 6.0])
    p2 = pose.transform(p1)
    assert sampson_error(e, p1[:2] / p1[2], p2[:2] / p2[2]) < 1e-20
    assert sampson_error(e, _unit(p1), _unit(p2)) < 1e-20


def test_sampson_error_grows_with_offset():
    pose = _relative_pose()
    e = essential_from_motion(pose)
    p1 = np.array([0.4, 0.3, 6.0])
    p2 = pose.transform(p1)
    x1 = p1[:2] / p1[2]
    x2 = p2[:2] / p2[2]
    small = sampson_error(e, x1, x2 + [0.0, 0.001])
    large = sampson_error(e, x1, x2 + [0.0, 0.01])
    assert 0 < small < large


def test_sampson_error_mismatched_dims_raises():
    with pytest.raises(ValueError):
        sampson_error(np.eye(3), [1.0, 2.0], [1.0, 2.0, 3.0])


def test_homography_error_identity():
    assert homography_error(np.eye(3), [2.0, 3.0], [2.0, 3.0]) == pytest.approx(0.0)
    shifted = homography_error(np.eye(3), [2.0, 3.0], [2.0, 4.0])
    assert shifted == pytest.approx(1.0)


def test_cheirality_front_and_behind():
    pose = Rigid3d(np.eye(3), [-1.0, 0.0, 0.0])
    point = np.array([0.0, 0.0, 5.0])
    x1 = _unit(point)
    x2 = _unit(pose.transform(point))
    assert check_cheirality(pose, x1, x2) is True
    assert check_cheirality(pose, x1, -x2) is False


def test_fundamental_with_unit_cameras_equals_essential():
    cam = Camera(CameraModel.SIMPLE_PINHOLE, [1.0, 0.0, 0.0])
    pose = _relative_pose()
    np.testing.assert_allclose(
        fundamental_from_motion_and_cameras(cam, cam, pose),
        essential_from_motion(pose),
        atol=1e-12,
    )


def test_orientation_signum_flips_with_fundamental_sign():
    f = essential_from_motion(_relative_pose())
    epipole = np.cross(f[0], f[2])
    pt1 = np.array([0.2, 0.1])
    pt2 = np.array([0.3, -0.4])
    s = get_orientation_signum(f, epipole, pt1, pt2)
    assert get_orientation_signum(-f, epipole, pt1, pt2) == pytest.approx(-s)