"""
# Author : Saif Aati
# Contact: SAIF AATI  <saif@caltech.edu> <saifaati@gmail.com>
# Copyright (C) 2022
"""
import logging
from typing import Callable, Dict, Optional, Sequence, Tuple

import numpy as np

import geoLineScan.geoErrorsWarning.geoErrors as geoErrors
import geoLineScan.geoRSM.misc as misc
from geoLineScan.geoCore.base.base_camera_model import BaseCameraModel, Ray
from geoLineScan.geoCore.constants import UNDISTORTION

# provider(time) -> (position, velocity, quaternion [x, y, z, w])
StateProvider = Callable[[float], Tuple[Sequence[float], Sequence[float], Sequence[float]]]


class RadialTangentialDistortion:
    """
    Metric camera lens distortion (radial + decentering), coefficients in millimeters:
        x = (u - cu) / pixels_per_mm, y = (v - cv) / pixels_per_mm, r2 = x^2 + y^2
        a = 1 + k1 r2 + k2 r4 + k3 r6
        x' = a x - (p1 r2 + p2 r4) sin(phi)
        y' = a y + (p1 r2 + p2 r4) cos(phi)
    with radial = (k1, k2, k3) and tangential = (p1, p2, phi).
    """

    def __init__(self, radial: Sequence[float], tangential: Sequence[float], pixels_per_mm: float,
                 max_iter: int = UNDISTORTION.MAX_ITER, tol: float = UNDISTORTION.TOL):
        if len(radial) != 3 or len(tangential) != 3:
            geoErrors.erInvalidModel("distortion requires 3 radial and 3 tangential coefficients")
        if not pixels_per_mm > 0:
            geoErrors.erInvalidModel(f"pixels_per_mm must be > 0, got {pixels_per_mm}")
        self.radial = tuple(float(coef) for coef in radial)
        self.tangential = tuple(float(coef) for coef in tangential)
        self.pixels_per_mm = float(pixels_per_mm)
        self.max_iter = max_iter
        self.tol = tol

    def distort(self, pixel: Sequence[float], principal_point: Sequence[float]) -> np.ndarray:
        """Location (u, v) where an ideal (undistorted) pixel appears on the image."""
        cu, cv = principal_point
        x = (pixel[0] - cu) / self.pixels_per_mm
        y = (pixel[1] - cv) / self.pixels_per_mm
        r2 = x * x + y * y
        r4 = r2 * r2
        r6 = r2 * r4
        k1, k2, k3 = self.radial
        p1, p2, phi = self.tangential
        a = 1 + k1 * r2 + k2 * r4 + k3 * r6
        xp = a * x - (p1 * r2 + p2 * r4) * np.sin(phi)
        yp = a * y + (p1 * r2 + p2 * r4) * np.cos(phi)
        return np.array([xp * self.pixels_per_mm + cu, yp * self.pixels_per_mm + cv])

    def undistort(self, pixel: Sequence[float], principal_point: Sequence[float]) -> np.ndarray:
        """Inverse of distort, by fixed point iteration."""
        distorted = np.asarray(pixel, dtype=float)
        undistorted = np.copy(distorted)
        for _ in range(self.max_iter):
            residual = self.distort(undistorted, principal_point) - distorted
            undistorted = undistorted - residual
            if np.max(np.abs(residual)) < self.tol:
                return undistorted
        geoErrors.erDegenerateGeometry(f"lens undistortion of {pixel} did not converge in {self.max_iter} iterations")


class FrameCameraModel(BaseCameraModel):
    """
    Pinhole frame camera: the whole image is exposed at a single instant, hence center,
    velocity and pose do not depend on the line.
    `pose` is the camera to world rotation as a quaternion [x, y, z, w].
    """

    def __init__(self,
                 center: Sequence[float],
                 pose: Sequence[float],
                 focal: float,
                 principal_point: Sequence[float],
                 image_size: Tuple[int, int],
                 distortion: Optional[RadialTangentialDistortion] = None,
                 velocity: Optional[Sequence[float]] = None,
                 time: float = 0.0):
        center = np.array(center, dtype=float)
        velocity = np.zeros(3) if velocity is None else np.array(velocity, dtype=float)
        pose = np.array(pose, dtype=float)
        if center.shape != (3,) or velocity.shape != (3,) or pose.shape != (4,):
            geoErrors.erInvalidModel("center/velocity must be 3-vectors and pose a quaternion [x, y, z, w]")
        if not (np.all(np.isfinite(center)) and np.all(np.isfinite(velocity)) and np.all(np.isfinite(pose))):
            geoErrors.erInvalidModel("camera state contains NaN or infinite values")
        if np.linalg.norm(pose) == 0:
            geoErrors.erInvalidModel("pose quaternion has a zero norm")
        if not focal > 0:
            geoErrors.erInvalidModel(f"focal must be > 0, got {focal}")
        nb_rows, nb_cols = [int(sz) for sz in image_size]
        if nb_rows < 1 or nb_cols < 1:
            geoErrors.erInvalidModel(f"invalid image size {image_size}")

        pose = pose / np.linalg.norm(pose)
        self.center = center
        self.velocity = velocity
        self.pose = pose
        self.rotation = misc.quat_to_rot(pose)
        self.focal = float(focal)
        self.principal_point = (float(principal_point[0]), float(principal_point[1]))
        self.nbRows = nb_rows
        self.nbCols = nb_cols
        self.distortion = distortion
        self.time = float(time)
        self._freeze()

    @classmethod
    def from_state(cls, provider: StateProvider, time: float, focal: float, principal_point: Sequence[float],
                   image_size: Tuple[int, int], distortion: Optional[RadialTangentialDistortion] = None,
                   scale: float = 1.0) -> "FrameCameraModel":
        """
        Build the camera from an injected navigation service (e.g. a kernel based state provider).
        `scale` adapts the intrinsics to a sub-sampled image.
        """
        position, velocity, quat = provider(time)
        logging.info(f"{cls.__name__}: state at t={time}, scale={scale}")
        return cls(center=position,
                   pose=quat,
                   focal=focal * scale,
                   principal_point=(principal_point[0] * scale, principal_point[1] * scale),
                   image_size=image_size,
                   distortion=distortion,
                   velocity=velocity,
                   time=time)

    @classmethod
    def from_dict(cls, tables: Dict) -> "FrameCameraModel":
        for key in ['center', 'pose', 'focal', 'principal_point', 'image_size']:
            if key not in tables:
                geoErrors.erInvalidModel(f"missing <{key}> entry")
        distortion = None
        if tables.get('distortion') is not None:
            dist = tables['distortion']
            distortion = RadialTangentialDistortion(radial=dist['radial'],
                                                    tangential=dist['tangential'],
                                                    pixels_per_mm=dist['pixels_per_mm'])
        return cls(center=tables['center'],
                   pose=tables['pose'],
                   focal=tables['focal'],
                   principal_point=tables['principal_point'],
                   image_size=tuple(tables['image_size']),
                   distortion=distortion,
                   velocity=tables.get('velocity'),
                   time=tables.get('time', 0.0))

    @property
    def image_size(self) -> Tuple[int, int]:
        return self.nbRows, self.nbCols

    def time_at_line(self, line: float) -> float:
        return self.time

    def camera_center(self, time: float = None) -> np.ndarray:
        return np.array(self.center)

    def camera_velocity(self, time: float = None) -> np.ndarray:
        return np.array(self.velocity)

    def camera_pose(self, time: float = None) -> np.ndarray:
        return np.array(self.pose)

    def pixel_to_ray(self, pixel: Sequence[float]) -> Ray:
        row, col = float(pixel[0]), float(pixel[1])
        uv = np.array([col, row])
        if self.distortion is not None:
            uv = self.distortion.undistort(uv, self.principal_point)
        cu, cv = self.principal_point
        look_cam = np.array([(uv[0] - cu) / self.focal, (uv[1] - cv) / self.focal, 1.0])
        direction = misc.normalize_vector(self.rotation @ look_cam)
        return Ray(origin=np.array(self.center), direction=direction)

    def __repr__(self):
        return f"{self.__class__.__name__}(center={self.center.tolist()}, focal={self.focal})"
