"""Camera intrinsics with a small set of projection models."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Tuple

import numpy as np


class CameraModel(Enum):
    SIMPLE_PINHOLE = "SIMPLE_PINHOLE"
    PINHOLE = "PINHOLE"
    SIMPLE_RADIAL = "SIMPLE_RADIAL"
    RADIAL = "RADIAL"
    OPENCV = "OPENCV"


# model -> (focal indices, principal point indices, extra parameter indices)
_LAYOUT = {
    CameraModel.SIMPLE_PINHOLE: ((0, 0), (1, 2), ()),
    CameraModel.PINHOLE: ((0, 1), (2, 3), ()),
    CameraModel.SIMPLE_RADIAL: ((0, 0), (1, 2), (3,)),
    CameraModel.RADIAL: ((0, 0), (1, 2), (3, 4)),
    CameraModel.OPENCV: ((0, 1), (2, 3), (4, 5, 6, 7)),
}


def _num_params(model: CameraModel) -> int:
    focal, pp, extra = _LAYOUT[model]
    return max((*focal, *pp, *extra)) + 1


def _distortion(model: CameraModel, extra: np.ndarray, u: float, v: float) -> Tuple[float, float]:
    if model in (CameraModel.SIMPLE_PINHOLE, CameraModel.PINHOLE):
        return 0.0, 0.0
    r2 = u * u + v * v
    if model is CameraModel.SIMPLE_RADIAL:
        radial = extra[0] * r2
        return u * radial, v * radial
    if model is CameraModel.RADIAL:
        radial = extra[0] * r2 + extra[1] * r2 * r2
        return u * radial, v * radial
    k1, k2, p1, p2 = extra
    radial = k1 * r2 + k2 * r2 * r2
    uv = u * v
    du = u * radial + 2 * p1 * uv + p2 * (r2 + 2 * u * u)
    dv = v * radial + 2 * p2 * uv + p1 * (r2 + 2 * v * v)
    return du, dv


@dataclass(eq=False)
class Camera:
    """Intrinsic calibration of one camera."""

    model: CameraModel
    params: np.ndarray
    width: int = 0
    height: int = 0
    camera_id: int = 0
    has_prior_focal_length: bool = False
    has_refined_focal_length: bool = False

    def __post_init__(self) -> None:
        if isinstance(self.model, str):
            try:
                self.model = CameraModel[self.model]
            except KeyError as exc:
                raise ValueError(f"unknown camera model {self.model!r}") from exc
        self.params = np.array(self.params, dtype=float).reshape(-1)
        expected = _num_params(self.model)
        if self.params.shape[0] != expected:
            raise ValueError(
                f"{self.model.name} takes {expected} parameters, "
                f"got {self.params.shape[0]}"
            )

    @property
    def model_name(self) -> str:
        return self.model.name

    @property
    def focal_length_x(self) -> float:
        return float(self.params[_LAYOUT[self.model][0][0]])

    @property
    def focal_length_y(self) -> float:
        return float(self.params[_LAYOUT[self.model][0][1]])

    @property
    def principal_point_x(self) -> float:
        return float(self.params[_LAYOUT[self.model][1][0]])

    @property
    def principal_point_y(self) -> float:
        return float(self.params[_LAYOUT[self.model][1][1]])

    @property
    def _extra(self) -> np.ndarray:
        return self.params[list(_LAYOUT[self.model][2])]

    def focal(self) -> float:
        return (self.focal_length_x + self.focal_length_y) / 2.0

    def principal_point(self) -> np.ndarray:
        return np.array([self.principal_point_x, self.principal_point_y])

    def calibration_matrix(self) -> np.ndarray:
        return np.array(
            [
                [self.focal_length_x, 0.0, self.principal_point_x],
                [0.0, self.focal_length_y, self.principal_point_y],
                [0.0, 0.0, 1.0],
            ]
        )

    def img_from_cam(self, point) -> np.ndarray:
        """Project normalized camera coordinates to pixel coordinates."""
        u, v = np.asarray(point, dtype=float).reshape(2)
        du, dv = _distortion(self.model, self._extra, u, v)
        return np.array(
            [
                self.focal_length_x * (u + du) + self.principal_point_x,
                self.focal_length_y * (v + dv) + self.principal_point_y,
            ]
        )

    def cam_from_img(self, point) -> np.ndarray:
        """Map pixel coordinates to undistorted normalized camera coordinates."""
        x, y = np.asarray(point, dtype=float).reshape(2)
        distorted = np.array(
            [
                (x - self.principal_point_x) / self.focal_length_x,
                (y - self.principal_point_y) / self.focal_length_y,
            ]
        )
        if not _LAYOUT[self.model][2]:
            return distorted
        return self._undistort(distorted)

    def _undistort(self, target: np.ndarray) -> np.ndarray:
        extra = self._extra
        model = self.model

        def forward(p: np.ndarray) -> np.ndarray:
            du, dv = _distortion(model, extra, p[0], p[1])
            return np.array([p[0] + du, p[1] + dv])

        x = target.copy()
        step_size = 1e-6
        for _ in range(100):
            residual = forward(x) - target
            jac = np.empty((2, 2))
            for axis in range(2):
                h = step_size * max(abs(x[axis]), 1.0)
                offset = np.zeros(2)
                offset[axis] = h
                jac[:, axis] = (forward(x + offset) - forward(x - offset)) / (2 * h)
            step = np.linalg.solve(jac, residual)
            x = x - step
            if step @ step < 1e-20:
                break
        return x