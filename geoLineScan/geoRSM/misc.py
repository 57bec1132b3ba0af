"""
# Author : Saif Aati
# Contact: SAIF AATI  <saif@caltech.edu> <saifaati@gmail.com>
# Copyright (C) 2022
"""
from typing import Optional

import numpy as np
from scipy.spatial.transform import Rotation

import geoLineScan.geoErrorsWarning.geoErrors as geoErrors
from geoLineScan.geoCore.constants import SENSOR_AXES, TOLERANCE


def normalize_array(input_array: np.ndarray, order: Optional[int] = 2) -> np.ndarray:
    """
    Normalize the rows of a 2D array.

    Args:
        input_array (np.ndarray): 2D array to be normalized by row.
        order (int, optional): Order of the norm. Default is 2 (Euclidean norm).

    Returns:
        np.ndarray: Normalized array.

    Raises:
        ValueError: If input_array is not 2D.
        DegenerateGeometry: If any row has a zero norm.
    """
    input_array = np.asarray(input_array, dtype=float)
    if input_array.ndim != 2:
        raise ValueError("Input array must be 2D.")

    norms = np.linalg.norm(input_array, axis=1, ord=order).reshape(-1, 1)
    if np.any(norms == 0):
        geoErrors.erDegenerateGeometry("zero norm encountered, cannot normalize")

    return input_array / norms


def normalize_vector(vect, tol=0.0) -> np.ndarray:
    vect = np.asarray(vect, dtype=float)
    norm = np.linalg.norm(vect)
    if not np.isfinite(norm) or norm <= tol:
        geoErrors.erDegenerateGeometry(f"vector {vect} has a (near) zero norm")
    return vect / norm


def quat_to_rot(quat_xyzw) -> np.ndarray:
    """
    Convert a rotation quaternion into a rotation matrix
    Args:
        quat_xyzw: A 4 elements array [q1,q2,q3,q4] with q4 the scalar part

    Returns: rotation matrix shape=(3,3)

    """
    quat = np.asarray(quat_xyzw, dtype=float)
    norm = np.linalg.norm(quat)
    if norm <= TOLERANCE.UNIT_QUATERNION:
        geoErrors.erDegenerateGeometry(f"quaternion {quat} has a zero norm")
    return Rotation.from_quat(quat / norm).as_matrix()


def rot_to_quat(rot) -> np.ndarray:
    """Rotation matrix to a unit quaternion [x, y, z, w]."""
    return Rotation.from_matrix(np.asarray(rot, dtype=float)).as_quat()


class cSpatialRotations:
    """Elementary rotations, angles in radian."""

    @staticmethod
    def R_opk_xyz(omg, phi, kpp):
        return np.dot(cSpatialRotations._R_omega_X(omg),
                      np.dot(cSpatialRotations._R_phi_Y(phi), cSpatialRotations._R_kappa_Z(kpp)))

    @staticmethod
    def _R_kappa_Z(kpp):
        return np.array([[np.cos(kpp), -np.sin(kpp), 0],
                         [np.sin(kpp), np.cos(kpp), 0],
                         [0, 0, 1]])

    @staticmethod
    def _R_phi_Y(phi):
        return np.array([[np.cos(phi), 0, np.sin(phi)],
                         [0, 1, 0],
                         [-np.sin(phi), 0, np.cos(phi)]])

    @staticmethod
    def _R_omega_X(omg):
        return np.array([[1, 0, 0],
                         [0, np.cos(omg), -np.sin(omg)],
                         [0, np.sin(omg), np.cos(omg)]])


def look_rotation(yaw, pitch, roll) -> np.ndarray:
    """
    Build the matrix that changes a look vector from the sensor navigation reference system (O1)
    to the orbital reference system (O2): u2 = Mp . Mr . My . u1

    Args:
        yaw: rotation about Z [rad]
        pitch: rotation about X [rad]
        roll: rotation about Y [rad]

    Returns: rotation matrix shape=(3,3)

    Notes:
            Mp = [1, 0,           0          ]
                 [0, cos(pitch),  sin(pitch) ]
                 [0, -sin(pitch), cos(pitch) ]
            Mr = [cos(roll), 0, -sin(roll)]
                 [0,         1,  0        ]
                 [sin(roll), 0,  cos(roll)]
            My = [cos(yaw), -sin(yaw), 0]
                 [sin(yaw),  cos(yaw), 0]
                 [0,         0,        1]
        Attitude values are expressed in the inverse system (O1,-X1,-Y1,Z1), hence pitch and roll
        enter with a minus sign in the elementary rotations, not the yaw.
    References:
         SPOT123-4-5 Geometry Handbook
    """
    return cSpatialRotations.R_opk_xyz(omg=-pitch, phi=-roll, kpp=yaw)


def flip_local_axes(look_vect) -> np.ndarray:
    """
    Express a look vector given in the look-angle frame (Xa, Ya, Za) in the navigation frame O1.
    Xa = -X1, Ya = -Y1, Za = Z1. Do not simplify: the component order and signs are part of the geometry.
    """
    return SENSOR_AXES.LOCAL_AXES_FLIP @ np.asarray(look_vect, dtype=float)


def _check_orbital_inputs(position, velocity, tol):
    pos_norm = np.linalg.norm(position, axis=-1)
    vel_norm = np.linalg.norm(velocity, axis=-1)
    if np.any(~np.isfinite(pos_norm)) or np.any(pos_norm <= tol):
        geoErrors.erDegenerateGeometry("satellite position is (near) zero")
    if np.any(~np.isfinite(vel_norm)) or np.any(vel_norm <= tol):
        geoErrors.erDegenerateGeometry("satellite velocity is (near) zero")
    cross_norm = np.linalg.norm(np.cross(velocity, position), axis=-1)
    if np.any(cross_norm / (pos_norm * vel_norm) <= tol):
        geoErrors.erDegenerateGeometry("satellite velocity is (near) parallel to the position")


def orbital_frame(position, velocity, tol=TOLERANCE.DEGENERATE) -> np.ndarray:
    """
    Orbital coordinate system (O2, X2, Y2, Z2) of the satellite:
            Z2 = satPos/norm(satPos)
            X2 = velSat ^ Z2 /norm( velSat ^ Z2)
            Y2 = Z2 ^ X2
    Args:
        position: satellite position in the planet fixed frame (3,)
        velocity: satellite velocity in the planet fixed frame (3,)
        tol: relative tolerance below which the frame is considered degenerate

    Returns:
        [X2 | Y2 | Z2] as the columns of a (3,3) matrix, i.e. the orbital to planet fixed rotation.

    """
    position = np.asarray(position, dtype=float)
    velocity = np.asarray(velocity, dtype=float)
    _check_orbital_inputs(position, velocity, tol)

    z2 = position / np.linalg.norm(position)
    x2 = np.cross(velocity, z2)
    x2 = x2 / np.linalg.norm(x2)
    y2 = np.cross(z2, x2)
    return np.column_stack((x2, y2, z2))


def orbital_frames(positions, velocities, tol=TOLERANCE.DEGENERATE) -> np.ndarray:
    """Vectorized version of orbital_frame over N samples, returns (N,3,3)."""
    positions = np.asarray(positions, dtype=float)
    velocities = np.asarray(velocities, dtype=float)
    _check_orbital_inputs(positions, velocities, tol)

    orbital_z = normalize_array(positions)
    orbital_x = normalize_array(np.cross(velocities, orbital_z))
    orbital_y = np.cross(orbital_z, orbital_x)
    return np.stack((orbital_x, orbital_y, orbital_z), axis=-1)


def is_orthonormal(rot, tol=TOLERANCE.ORTHONORMALITY) -> bool:
    rot = np.asarray(rot, dtype=float)
    return bool(np.allclose(rot.T @ rot, np.eye(3), atol=tol, rtol=0)
                and abs(np.linalg.det(rot) - 1) <= tol)
