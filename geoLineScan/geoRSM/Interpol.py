"""
# Author : Saif Aati
# Contact: SAIF AATI  <saif@caltech.edu> <saifaati@gmail.com>
# Copyright (C) 2022
"""
import logging
from dataclasses import dataclass
from typing import List, Sequence, Tuple

import numpy as np
from scipy.spatial.transform import Rotation, Slerp

import geoLineScan.geoErrorsWarning.geoErrors as geoErrors
import geoLineScan.geoErrorsWarning.geoWarnings as geoWarns
import geoLineScan.geoRSM.misc as misc
from geoLineScan.geoCore.base.base_camera_model import Immutable
from geoLineScan.geoCore.constants import (EXTRAPOLATION_POLICY,
                                           GEOLINESCAN_EXTRAPOLATION_POLICIES,
                                           INTERPOLATION, TOLERANCE)


@dataclass(frozen=True)
class TimeSample:
    line: float
    time: float


@dataclass(frozen=True)
class EphemerisSample:
    time: float
    position: Tuple[float, float, float]
    velocity: Tuple[float, float, float]


@dataclass(frozen=True)
class AttitudeSample:
    time: float
    # [x, y, z, w], scalar last
    quaternion: Tuple[float, float, float, float]


@dataclass(frozen=True)
class LookAngleEntry:
    column: int
    # (phi_x, phi_y) [rad]
    angles: Tuple[float, float]


def _read_only(array: np.ndarray) -> np.ndarray:
    array = np.array(array, dtype=float)
    array.setflags(write=False)
    return array


def check_strictly_increasing(name: str, values, min_size: int = 2) -> np.ndarray:
    values = np.asarray(values, dtype=float)
    if values.ndim != 1 or values.size < min_size:
        geoErrors.erInvalidModel(f"{name} requires at least {min_size} samples, got {values.size}")
    if not np.all(np.isfinite(values)):
        geoErrors.erInvalidModel(f"{name} contains NaN or infinite values")
    if np.any(np.diff(values) <= 0):
        geoErrors.erInvalidModel(f"{name} must be strictly increasing (no duplicates)")
    return values


def locate_value(vector: np.ndarray, value: float) -> int:
    """
    Index i of the strictly increasing `vector` such that vector[i] <= value < vector[i + 1],
    bounded to [0, len(vector) - 2] so that (i, i + 1) always brackets or extends toward `value`.
    """
    index = int(np.searchsorted(vector, value, side='right')) - 1
    return max(0, min(index, len(vector) - 2))


def apply_domain_policy(name: str, value: float, lower: float, upper: float,
                        policy: str = EXTRAPOLATION_POLICY.REJECT, margin: float = 0.0) -> float:
    """
    Decide how a query outside the sampled interval [lower, upper] is handled.

    Returns:
        the value at which the interpolation has to be evaluated.
    Raises:
        OutOfRange: reject policy outside [lower, upper], extrapolate policy beyond the margin.
    """
    if not np.isfinite(value):
        geoErrors.erOutOfRange(name, value, lower, upper)
    if lower <= value <= upper:
        return value
    if policy == EXTRAPOLATION_POLICY.CLAMP:
        clamped = lower if value < lower else upper
        geoWarns.wrClampedQuery(name, value, clamped)
        return clamped
    if policy == EXTRAPOLATION_POLICY.EXTRAPOLATE:
        if lower - margin <= value <= upper + margin:
            geoWarns.wrExtrapolatedQuery(name, value, lower, upper)
            return value
        geoErrors.erOutOfRange(name, value, lower - margin, upper + margin)
    geoErrors.erOutOfRange(name, value, lower, upper)


def _check_policy(policy, margin):
    if policy not in GEOLINESCAN_EXTRAPOLATION_POLICIES:
        geoErrors.erInvalidModel(f"unknown extrapolation policy <{policy}>")
    if margin < 0:
        geoErrors.erInvalidModel(f"extrapolation margin must be >= 0, got {margin}")


class LinearTimeModel(Immutable):
    """
    Acquisition time of each image line: time = time_ref + rate * (line - line_ref),
    (line_ref, time_ref) being the first sample, so that the samples dating is reproduced exactly.
    The rate is fitted in the least squares sense on the sampled (line, time) pairs;
    for this sensor family the line period is constant, so the fit is exact.
    """

    def __init__(self, samples: Sequence[TimeSample]):
        samples = list(samples)
        lines = np.array([sample.line for sample in samples], dtype=float)
        times = np.array([sample.time for sample in samples], dtype=float)
        if np.unique(lines).size < 2:
            geoErrors.erInvalidModel("time model requires at least two distinct line samples")
        check_strictly_increasing("time model lines", lines)
        check_strictly_increasing("time model times", times)

        if lines.size == 2:
            rate = (times[1] - times[0]) / (lines[1] - lines[0])
        else:
            rate = np.polyfit(lines - lines[0], times - times[0], deg=1)[0]
        self._set_relation(lines[0], times[0], rate)

    def _set_relation(self, line_ref, time_ref, rate):
        if not (np.isfinite(line_ref) and np.isfinite(time_ref)):
            geoErrors.erInvalidModel(f"time model reference ({line_ref}, {time_ref}) must be finite")
        if not rate > 0:
            geoErrors.erInvalidModel(f"fitted line rate must be positive, got {rate}")
        self.line_ref = float(line_ref)
        self.time_ref = float(time_ref)
        self.rate = float(rate)
        self._freeze()

    @classmethod
    def from_line_period(cls, t0: float, line_period: float, reference_line: float = 0.0) -> "LinearTimeModel":
        """Ti = T_ref + linePeriod * (Li - L_ref)"""
        time_model = cls.__new__(cls)
        time_model._set_relation(reference_line, t0, line_period)
        return time_model

    @property
    def t0(self) -> float:
        """Time of line 0."""
        return self.time_ref - self.rate * self.line_ref

    def time_at_line(self, line):
        if np.ndim(line):
            line = np.asarray(line, dtype=float)
        return self.time_ref + self.rate * (line - self.line_ref)

    def line_at_time(self, time):
        if np.ndim(time):
            time = np.asarray(time, dtype=float)
        return self.line_ref + (time - self.time_ref) / self.rate

    def __call__(self, line):
        return self.time_at_line(line)

    def __repr__(self):
        return f"{self.__class__.__name__}(line_ref={self.line_ref}, time_ref={self.time_ref}, rate={self.rate})"


class LagrangeInterpolator(Immutable):
    """
    Lagrange polynomial interpolation of 3-vectors (satellite position or velocity) over the
    `neighborhood` samples nearest to the query time. Reproduces the samples exactly.
    """

    def __init__(self, times, values,
                 neighborhood: int = INTERPOLATION.LAGRANGE_NEIGHBORHOOD,
                 policy: str = INTERPOLATION.EXTRAPOLATION_POLICY,
                 margin: float = INTERPOLATION.EXTRAPOLATION_MARGIN,
                 name: str = 'time'):
        times = check_strictly_increasing("ephemeris times", times)
        values = np.asarray(values, dtype=float)
        if values.ndim != 2 or values.shape[0] != times.size:
            geoErrors.erInvalidModel(f"ephemeris values must be (n, k) with n={times.size}, got {values.shape}")
        if not np.all(np.isfinite(values)):
            geoErrors.erInvalidModel("ephemeris values contain NaN or infinite values")
        if int(neighborhood) < 2:
            geoErrors.erInvalidModel(f"Lagrange neighborhood must be >= 2, got {neighborhood}")
        _check_policy(policy, margin)

        self.times = _read_only(times)
        self.values = _read_only(values)
        self.neighborhood = min(int(neighborhood), times.size)
        self.policy = policy
        self.margin = float(margin)
        self.name = name
        self._freeze()

    @property
    def time_range(self) -> Tuple[float, float]:
        return float(self.times[0]), float(self.times[-1])

    def _window(self, time: float) -> slice:
        n = self.times.size
        k = self.neighborhood
        start = int(np.searchsorted(self.times, time)) - k // 2
        start = max(0, min(start, n - k))
        return slice(start, start + k)

    def __call__(self, time: float) -> np.ndarray:
        time = apply_domain_policy(self.name, float(time), self.times[0], self.times[-1], self.policy, self.margin)
        window = self._window(time)
        eph_time = self.times[window]
        eph_values = self.values[window]

        interp_value = np.zeros(eph_values.shape[1])
        for j in range(len(eph_time)):
            basis = 1.0
            for i in range(len(eph_time)):
                if i != j:
                    basis = basis * (time - eph_time[i]) / (eph_time[j] - eph_time[i])
            interp_value += basis * eph_values[j]
        return interp_value

    def interpolate(self, times) -> np.ndarray:
        return np.array([self(time_) for time_ in np.atleast_1d(times)])


def discard_ephemeris(samples: Sequence[EphemerisSample], start: float, end: float,
                      keep: int = 4) -> List[EphemerisSample]:
    """
    Discard ephemeris samples that are inside the image acquisition [start, end], so that they
    don't weight too much in the Lagrange interpolation: keep the last `keep` samples before the
    acquisition and the first `keep` after.
    """
    samples = sorted(samples, key=lambda sample: sample.time)
    before = [sample for sample in samples if sample.time < start]
    after = [sample for sample in samples if sample.time > end]
    if len(before) < keep or len(after) < keep:
        geoErrors.erInvalidModel(f"ephemeris is missing: {len(before)} samples before and {len(after)} after "
                                 f"the acquisition, {keep} required on each side")
    return before[len(before) - keep:] + after[:keep]


class SlerpPoseInterpolator(Immutable):
    """
    Spherical linear interpolation (scipy `Slerp`) of unit quaternions [x, y, z, w] between the two
    attitude samples bracketing the query time, along the shortest arc.
    """

    def __init__(self, times, quaternions,
                 policy: str = INTERPOLATION.EXTRAPOLATION_POLICY,
                 margin: float = INTERPOLATION.EXTRAPOLATION_MARGIN,
                 name: str = 'time'):
        times = check_strictly_increasing("attitude times", times)
        quaternions = np.asarray(quaternions, dtype=float)
        if quaternions.ndim != 2 or quaternions.shape != (times.size, 4):
            geoErrors.erInvalidModel(f"attitude quaternions must be ({times.size}, 4), got {quaternions.shape}")
        if not np.all(np.isfinite(quaternions)):
            geoErrors.erInvalidModel("attitude quaternions contain NaN or infinite values")
        norms = np.linalg.norm(quaternions, axis=1, keepdims=True)
        if np.any(norms <= TOLERANCE.UNIT_QUATERNION):
            geoErrors.erInvalidModel("attitude quaternions must have a non zero norm")
        _check_policy(policy, margin)

        self.times = _read_only(times)
        self.quaternions = _read_only(quaternions / norms)
        self.policy = policy
        self.margin = float(margin)
        self.name = name
        self.rotations = Rotation.from_quat(self.quaternions)
        self.slerp = Slerp(self.times, self.rotations)
        self._freeze()

    @property
    def time_range(self) -> Tuple[float, float]:
        return float(self.times[0]), float(self.times[-1])

    def _extrapolate(self, i: int, time: float) -> Rotation:
        # prolong the shortest arc between samples i and i + 1
        fraction = (time - self.times[i]) / (self.times[i + 1] - self.times[i])
        delta = (self.rotations[i].inv() * self.rotations[i + 1]).as_rotvec()
        return self.rotations[i] * Rotation.from_rotvec(fraction * delta)

    def __call__(self, time: float) -> np.ndarray:
        time = apply_domain_policy(self.name, float(time), self.times[0], self.times[-1], self.policy, self.margin)
        i = locate_value(self.times, time)
        if time == self.times[i]:
            return np.array(self.quaternions[i])
        if time == self.times[i + 1]:
            return np.array(self.quaternions[i + 1])
        if self.times[0] < time < self.times[-1]:
            quat = self.slerp(time).as_quat()
        else:
            quat = self._extrapolate(i, time).as_quat()
        # q and -q are the same rotation: keep the sign of the preceding sample
        if np.dot(quat, self.quaternions[i]) < 0:
            quat = -quat
        return quat


def attitude_from_angles(times, yaw, pitch, roll) -> List[AttitudeSample]:
    """
    Convert yaw/pitch/roll attitude histories (SPOT 1-5 style) into attitude quaternions,
    each quaternion being the navigation (O1) to orbital (O2) rotation.
    """
    times = np.asarray(times, dtype=float)
    if not (len(times) == len(yaw) == len(pitch) == len(roll)):
        geoErrors.erInvalidModel("attitude angles and times must have the same length")
    samples = []
    for time_, yaw_, pitch_, roll_ in zip(times, yaw, pitch, roll):
        quat = misc.rot_to_quat(misc.look_rotation(yaw=yaw_, pitch=pitch_, roll=roll_))
        samples.append(AttitudeSample(float(time_), tuple(quat)))
    return samples


class LookAngleTable(Immutable):
    """
    Per detector (image column) look angles (phi_x, phi_y), possibly sub-sampled,
    linearly interpolated between the two entries bracketing a fractional column.
    """

    def __init__(self, entries: Sequence[LookAngleEntry], nb_cols: int,
                 policy: str = EXTRAPOLATION_POLICY.REJECT):
        entries = list(entries)
        if nb_cols < 1:
            geoErrors.erInvalidModel(f"image must have at least one column, got {nb_cols}")
        min_entries = 1 if nb_cols == 1 else 2
        columns = np.array([entry.column for entry in entries], dtype=float)
        if columns.size and np.any(columns != np.round(columns)):
            geoErrors.erInvalidModel("look angle columns must be integers")
        check_strictly_increasing("look angle columns", columns, min_size=min_entries)
        for entry in entries:
            if np.shape(entry.angles) != (2,):
                geoErrors.erInvalidModel(f"look angles of column {entry.column} must be (phi_x, phi_y), "
                                         f"got shape {np.shape(entry.angles)}")
        angles = np.array([entry.angles for entry in entries], dtype=float)
        if not np.all(np.isfinite(angles)):
            geoErrors.erInvalidModel("look angles contain NaN or infinite values")
        if columns[0] > 0 or columns[-1] < nb_cols - 1:
            geoErrors.erInvalidModel(f"look angle table [{columns[0]}, {columns[-1]}] does not span "
                                     f"the image columns [0, {nb_cols - 1}]")
        if policy not in [EXTRAPOLATION_POLICY.REJECT, EXTRAPOLATION_POLICY.CLAMP]:
            geoErrors.erInvalidModel(f"unknown look angle policy <{policy}>")

        self.columns = _read_only(columns)
        self.angles = _read_only(angles)
        self.nb_cols = int(nb_cols)
        self.policy = policy
        logging.debug(f"{self.__class__.__name__}: {self.columns.size} entries for {self.nb_cols} columns")
        self._freeze()

    @classmethod
    def from_polynomial(cls, line_of_sight, nb_cols: int) -> "LookAngleTable":
        """
        Spot-6/7 look angles: tan(psi_x) = a0 + a1 * col, tan(psi_y) = b0 + b1 * col.
        line_of_sight = [a0, a1, b0, b1]
        """
        a0, a1, b0, b1 = [float(coef) for coef in line_of_sight]
        cols = np.arange(nb_cols)
        psi_x = np.arctan(a0 + a1 * cols)
        psi_y = np.arctan(b0 + b1 * cols)
        return cls([LookAngleEntry(int(col), (px, py)) for col, px, py in zip(cols, psi_x, psi_y)], nb_cols)

    @classmethod
    def from_bounds(cls, first_angles, last_angles, nb_cols: int) -> "LookAngleTable":
        """Spot 1-4 look angles: only the first and last detectors are measured."""
        return cls([LookAngleEntry(0, tuple(first_angles)), LookAngleEntry(nb_cols - 1, tuple(last_angles))],
                   nb_cols)

    def local_angles(self, column: float) -> np.ndarray:
        column = apply_domain_policy('column', float(column), self.columns[0], self.columns[-1], self.policy)
        if self.columns.size == 1:
            return np.array(self.angles[0])
        i = locate_value(self.columns, column)
        if column == self.columns[i]:
            return np.array(self.angles[i])
        if column == self.columns[i + 1]:
            return np.array(self.angles[i + 1])
        fraction = (column - self.columns[i]) / (self.columns[i + 1] - self.columns[i])
        return self.angles[i] + fraction * (self.angles[i + 1] - self.angles[i])

    def __call__(self, column: float) -> np.ndarray:
        return self.local_angles(column)

    def __len__(self):
        return self.columns.size
