"""
# Author : Saif Aati
# Contact: SAIF AATI  <saif@caltech.edu> <saifaati@gmail.com>
# Copyright (C) 2022
"""

import logging
import pickle
from typing import Dict, Optional, Sequence, Tuple, Union

import numpy as np

import geoLineScan.geoErrorsWarning.geoErrors as geoErrors
import geoLineScan.geoErrorsWarning.geoWarnings as geoWarns
import geoLineScan.geoRSM.misc as misc
from geoLineScan.geoCore.base.base_camera_model import BaseCameraModel, Ray
from geoLineScan.geoCore.geoLineScanBaseCfg.BaseReadConfig import CameraModelConfig
from geoLineScan.geoRSM.Interpol import (AttitudeSample, EphemerisSample,
                                         LagrangeInterpolator, LinearTimeModel,
                                         LookAngleEntry, LookAngleTable,
                                         SlerpPoseInterpolator, TimeSample,
                                         attitude_from_angles)

IDENTITY_QUAT = np.array([0.0, 0.0, 0.0, 1.0])


class LineScanCameraModel(BaseCameraModel):
    """
    Pushbroom line-scan camera model (SPOT like):
        -1- time of each image line from a linear time model
        -2- satellite position/velocity by Lagrange interpolation of the ephemeris
        -3- satellite attitude by SLERP of the attitude quaternions
        -4- per detector look angles from the look angle table
        -5- pixel to ray through the orbital reference system

    Notes:
        Image orientation is:
            +X across the columns, perpendicular to the flight direction
            +Y along the rows, the flight direction
            +Z up, away from the body center
        The look angles (phi_x, phi_y) are expressed in (O1, Xa, Ya, Za) = (O1, -X1, -Y1, Z1).
        The look vector in the planet fixed frame is:
            u3 = [X2 | Y2 | Z2] . R(attitude) . Mp . Mr . My . u1
        where Mp . Mr . My is the fixed boresight rotation of the instrument.
    """

    def __init__(self,
                 time_model: Union[LinearTimeModel, Sequence[TimeSample]],
                 ephemeris: Sequence[EphemerisSample],
                 look_angles: Union[LookAngleTable, Sequence[LookAngleEntry]],
                 image_size: Tuple[int, int],
                 attitude: Optional[Sequence[AttitudeSample]] = None,
                 boresight: Tuple[float, float, float] = (0.0, 0.0, 0.0),
                 config: Optional[CameraModelConfig] = None,
                 platform: str = 'linescan',
                 debug: bool = False):
        self.config = config if config is not None else CameraModelConfig()
        self.platform = platform
        self.debug = debug

        nb_rows, nb_cols = [int(sz) for sz in image_size]
        if nb_rows < 1 or nb_cols < 1:
            geoErrors.erInvalidModel(f"invalid image size {image_size}")
        self.nbRows = nb_rows
        self.nbCols = nb_cols

        if isinstance(time_model, LinearTimeModel):
            self.time_func = time_model
        else:
            self.time_func = LinearTimeModel(time_model)

        ephemeris = list(ephemeris)
        if len(ephemeris) < 2:
            geoErrors.erInvalidModel(f"at least 2 ephemeris samples are required, got {len(ephemeris)}")
        eph_time = [sample.time for sample in ephemeris]
        self.position_func = LagrangeInterpolator(eph_time, [sample.position for sample in ephemeris],
                                                  neighborhood=self.config.lagrange_neighborhood,
                                                  policy=self.config.extrapolation_policy,
                                                  margin=self.config.extrapolation_margin,
                                                  name='position time')
        self.velocity_func = LagrangeInterpolator(eph_time, [sample.velocity for sample in ephemeris],
                                                  neighborhood=self.config.lagrange_neighborhood,
                                                  policy=self.config.extrapolation_policy,
                                                  margin=self.config.extrapolation_margin,
                                                  name='velocity time')
        if self.position_func.values.shape[1] != 3 or self.velocity_func.values.shape[1] != 3:
            geoErrors.erInvalidModel("ephemeris positions and velocities must be 3-vectors")

        if attitude is None:
            geoWarns.wrNoAttitude()
            self.pose_func = None
        else:
            attitude = list(attitude)
            self.pose_func = SlerpPoseInterpolator([sample.time for sample in attitude],
                                                   [sample.quaternion for sample in attitude],
                                                   policy=self.config.extrapolation_policy,
                                                   margin=self.config.extrapolation_margin,
                                                   name='attitude time')

        if isinstance(look_angles, LookAngleTable):
            if look_angles.nb_cols != self.nbCols:
                geoErrors.erInvalidModel(f"look angle table built for {look_angles.nb_cols} columns, "
                                         f"image has {self.nbCols}")
            self.look_angles = look_angles
        else:
            self.look_angles = LookAngleTable(look_angles, nb_cols=self.nbCols, policy=self.config.look_angle_policy)

        if len(boresight) != 3 or not np.all(np.isfinite(boresight)):
            geoErrors.erInvalidModel(f"boresight must be 3 finite angles (yaw, pitch, roll), got {boresight}")
        self.boresight = tuple(float(angle) for angle in boresight)
        self.boresight_rot = misc.look_rotation(*self.boresight)

        if self.debug:
            logging.info(f"{self.__class__.__name__}: {self.platform} {self.nbRows}x{self.nbCols}, "
                         f"{len(ephemeris)} eph samples, "
                         f"{0 if self.pose_func is None else self.pose_func.times.size} att samples, "
                         f"{len(self.look_angles)} look angles, {self.time_func}")
        self._freeze()

    @property
    def image_size(self) -> Tuple[int, int]:
        return self.nbRows, self.nbCols

    def time_at_line(self, line: float) -> float:
        return self.time_func.time_at_line(line)

    def camera_center(self, time: float) -> np.ndarray:
        return self.position_func(time)

    def camera_velocity(self, time: float) -> np.ndarray:
        return self.velocity_func(time)

    def camera_pose(self, time: float) -> np.ndarray:
        if self.pose_func is None:
            return np.copy(IDENTITY_QUAT)
        return self.pose_func(time)

    def local_angles(self, col: float) -> np.ndarray:
        return self.look_angles.local_angles(col)

    def local_pixel_vector(self, col: float) -> np.ndarray:
        """
        Unit look vector of the detector `col` in the look angle frame (Xa, Ya, Za):
            (tan(phi_y), -tan(phi_x), -1)
        """
        phi_x, phi_y = self.local_angles(col)
        return misc.normalize_vector([np.tan(phi_y), -np.tan(phi_x), -1.0])

    def orbital_to_world(self, time: float) -> np.ndarray:
        """[X2 | Y2 | Z2] refined by the satellite attitude at `time`."""
        position = self.camera_center(time)
        velocity = self.camera_velocity(time)
        return self._orbital_to_world(time, position, velocity)

    def _orbital_to_world(self, time, position, velocity):
        orbital_rot = misc.orbital_frame(position, velocity, tol=self.config.degenerate_tol)
        return orbital_rot @ misc.quat_to_rot(self.camera_pose(time))

    def pixel_to_ray(self, pixel: Sequence[float]) -> Ray:
        row, col = float(pixel[0]), float(pixel[1])
        time = self.time_at_line(row)
        position = self.camera_center(time)
        velocity = self.camera_velocity(time)

        u1 = misc.flip_local_axes(self.local_pixel_vector(col))
        u2 = self.boresight_rot @ u1
        u3 = self._orbital_to_world(time, position, velocity) @ u2

        return Ray(origin=position, direction=misc.normalize_vector(u3))

    def camera_trajectory(self, nb_samples: int = 10) -> Dict[str, np.ndarray]:
        """
        Sample the camera center and velocity along the image rows,
        e.g. for trajectory visualization.
        """
        if nb_samples < 1:
            raise ValueError(f"nb_samples must be >= 1, got {nb_samples}")
        lines = np.linspace(0, self.nbRows - 1, nb_samples)
        times = np.array([self.time_at_line(line) for line in lines])
        centers = np.array([self.camera_center(time) for time in times])
        velocities = np.array([self.camera_velocity(time) for time in times])
        return {'line': lines, 'time': times, 'center': centers, 'velocity': velocities}

    @classmethod
    def from_dict(cls, tables: Dict, config: Optional[CameraModelConfig] = None,
                  debug: bool = False) -> "LineScanCameraModel":
        """
        Build the model from pre-parsed tables:
            image_size: [nb_rows, nb_cols]
            time: {samples: [[line, time], ...]} or {t0, line_period, reference_line}
            ephemeris: [[t, px, py, pz, vx, vy, vz], ...]
            attitude: [[t, qx, qy, qz, qw], ...]               (optional)
            attitude_angles: [[t, yaw, pitch, roll], ...]      (optional, exclusive with attitude)
            look_angles: [[col, phi_x, phi_y], ...] or {polynomial: [a0, a1, b0, b1]}
            boresight: {yaw, pitch, roll}                       (optional)
        """
        for key in ['image_size', 'time', 'ephemeris', 'look_angles']:
            if key not in tables:
                geoErrors.erInvalidModel(f"missing <{key}> table")
        if 'attitude' in tables and 'attitude_angles' in tables:
            geoErrors.erInvalidModel("<attitude> and <attitude_angles> are exclusive")

        image_size = tuple(tables['image_size'])
        if len(image_size) != 2:
            geoErrors.erInvalidModel(f"image_size must be [nb_rows, nb_cols], got {image_size}")

        time_table = tables['time']
        if 'samples' in time_table:
            time_model = [TimeSample(float(line), float(time)) for line, time in time_table['samples']]
        elif 't0' in time_table and 'line_period' in time_table:
            time_model = LinearTimeModel.from_line_period(t0=float(time_table['t0']),
                                                          line_period=float(time_table['line_period']),
                                                          reference_line=float(time_table.get('reference_line', 0)))
        else:
            geoErrors.erInvalidModel("time table requires <samples> or <t0> and <line_period>")

        eph_tpv = cls._as_table('ephemeris', tables['ephemeris'], 7)
        ephemeris = [EphemerisSample(row_[0], tuple(row_[1:4]), tuple(row_[4:7])) for row_ in eph_tpv]

        attitude = None
        if tables.get('attitude') is not None:
            quat_txyzs = cls._as_table('attitude', tables['attitude'], 5)
            attitude = [AttitudeSample(row_[0], tuple(row_[1:5])) for row_ in quat_txyzs]
        elif tables.get('attitude_angles') is not None:
            angles_typr = cls._as_table('attitude_angles', tables['attitude_angles'], 4)
            attitude = attitude_from_angles(angles_typr[:, 0], angles_typr[:, 1], angles_typr[:, 2],
                                            angles_typr[:, 3])

        look_table = tables['look_angles']
        if isinstance(look_table, dict):
            if 'polynomial' not in look_table:
                geoErrors.erInvalidModel("look_angles dictionary requires <polynomial>")
            look_angles = LookAngleTable.from_polynomial(look_table['polynomial'], nb_cols=int(image_size[1]))
        else:
            look_cxy = cls._as_table('look_angles', look_table, 3)
            look_angles = [LookAngleEntry(int(round(row_[0])), (row_[1], row_[2])) for row_ in look_cxy]
            if np.any(look_cxy[:, 0] != np.round(look_cxy[:, 0])):
                geoErrors.erInvalidModel("look angle columns must be integers")

        boresight = tables.get('boresight') or {}
        if isinstance(boresight, dict):
            unknown = set(boresight) - {'yaw', 'pitch', 'roll'}
            if unknown:
                geoErrors.erInvalidModel(f"unknown boresight angles {sorted(unknown)}")
            boresight = [boresight.get('yaw', 0.0), boresight.get('pitch', 0.0), boresight.get('roll', 0.0)]
        # [yaw, pitch, roll]
        boresight = tuple(cls._as_table('boresight', [boresight], 3)[0])

        return cls(time_model=time_model,
                   ephemeris=ephemeris,
                   look_angles=look_angles,
                   image_size=image_size,
                   attitude=attitude,
                   boresight=boresight,
                   config=config,
                   platform=tables.get('platform', 'linescan'),
                   debug=debug)

    @staticmethod
    def _as_table(name: str, table, nb_columns: int) -> np.ndarray:
        try:
            array = np.asarray(table, dtype=float)
        except (TypeError, ValueError) as err:
            raise geoErrors.InvalidModel(f"Invalid camera model: <{name}> is not numeric: {err}") from err
        if array.ndim != 2 or array.shape[1] != nb_columns:
            geoErrors.erInvalidModel(f"<{name}> must be a (n, {nb_columns}) table, got shape {array.shape}")
        return array

    def __repr__(self):
        return (f"{self.__class__.__name__}(platform={self.platform}, image_size={self.image_size}, "
                f"boresight={self.boresight})")


def write_model(output_model_file: str, camera_model: BaseCameraModel) -> str:
    with open(output_model_file, "wb") as output:
        pickle.dump(camera_model, output, pickle.HIGHEST_PROTOCOL)
    return output_model_file


def read_model(pkl_file: str) -> BaseCameraModel:
    with open(pkl_file, "rb") as output:
        camera_model = pickle.load(output)
    return camera_model
