"""
# Author : Saif Aati
# Contact: SAIF AATI  <saif@caltech.edu> <saifaati@gmail.com>
# Copyright (C) 2024
"""
import numpy as np
import pytest
from scipy.spatial.transform import Rotation, Slerp

from geoLineScan.geoCore.constants import EXTRAPOLATION_POLICY
from geoLineScan.geoErrorsWarning.geoErrors import InvalidModel, OutOfRange
from geoLineScan.geoErrorsWarning.geoWarnings import ExtrapolationWarning
from geoLineScan.geoRSM.Interpol import (EphemerisSample, LagrangeInterpolator,
                                         LinearTimeModel, LookAngleEntry,
                                         LookAngleTable, SlerpPoseInterpolator,
                                         TimeSample, attitude_from_angles,
                                         discard_ephemeris, locate_value)

from conftest import EPH_TIMES, circular_orbit

EPH_POS = np.array([circular_orbit(t)[0] for t in EPH_TIMES])
EPH_VEL = np.array([circular_orbit(t)[1] for t in EPH_TIMES])


def quat_z(angle):
    return np.array([0.0, 0.0, np.sin(angle / 2), np.cos(angle / 2)])


# ---------------------------------------------------------------- time model
def test_time_model_two_samples():
    time_model = LinearTimeModel([TimeSample(0, 100.0), TimeSample(10, 100.01)])
    assert time_model.time_at_line(0) == pytest.approx(100.0)
    assert time_model.time_at_line(5) == pytest.approx(100.005)
    assert time_model.rate == pytest.approx(1e-3)


def test_time_model_fit_and_inverse():
    lines = np.arange(0, 1000, 100)
    time_model = LinearTimeModel([TimeSample(line, 12.5 + 7.5e-4 * line) for line in lines])
    assert time_model.t0 == pytest.approx(12.5)
    assert time_model.rate == pytest.approx(7.5e-4)
    np.testing.assert_allclose(time_model.line_at_time(time_model.time_at_line(lines)), lines)


@pytest.mark.parametrize('t0', [43210.123, 5e8 + 0.25, 0.0, -1.5e-3])
def test_time_model_reproduces_first_line_time(t0):
    time_model = LinearTimeModel.from_line_period(t0, 7.52e-4)
    assert time_model.time_at_line(0) == t0
    assert time_model.line_at_time(t0) == 0


def test_time_model_reproduces_samples_absolute_dating():
    lines = np.array([0, 2999, 6000, 11999])
    t0 = 389836800.25
    times = t0 + 7.5199705115e-04 * lines
    time_model = LinearTimeModel([TimeSample(line, time) for line, time in zip(lines, times)])
    assert time_model.time_at_line(0) == t0
    np.testing.assert_allclose(time_model.time_at_line(lines), times, rtol=0, atol=1e-6)


def test_time_model_strictly_increasing():
    time_model = LinearTimeModel.from_line_period(t0=-3.0, line_period=7.5199705115e-04, reference_line=500)
    times = time_model.time_at_line(np.arange(-10, 2000, 0.5))
    assert np.all(np.diff(times) > 0)
    assert time_model.time_at_line(500) == pytest.approx(-3.0)


@pytest.mark.parametrize('samples', [
    [],
    [TimeSample(0, 0.0)],
    [TimeSample(3, 0.0), TimeSample(3, 1.0)],
    [TimeSample(0, 1.0), TimeSample(10, 0.5)],
    [TimeSample(0, 1.0), TimeSample(10, 1.0)],
    [TimeSample(10, 0.0), TimeSample(0, 1.0)],
])
def test_time_model_invalid(samples):
    with pytest.raises(InvalidModel):
        LinearTimeModel(samples)


def test_time_model_immutable():
    time_model = LinearTimeModel.from_line_period(0.0, 1e-3)
    with pytest.raises(AttributeError):
        time_model.rate = 2.0
    with pytest.raises(AttributeError):
        time_model.time_ref = 1.0


# ---------------------------------------------------------------- lagrange
@pytest.mark.parametrize('index', range(len(EPH_TIMES)))
def test_lagrange_exact_at_samples(index):
    position_func = LagrangeInterpolator(EPH_TIMES, EPH_POS)
    velocity_func = LagrangeInterpolator(EPH_TIMES, EPH_VEL)
    np.testing.assert_allclose(position_func(EPH_TIMES[index]), EPH_POS[index], rtol=1e-12)
    np.testing.assert_allclose(velocity_func(EPH_TIMES[index]), EPH_VEL[index], rtol=1e-12)


@pytest.mark.parametrize('time', [-27.3, -5.0, 0.0, 0.4567, 0.999, 12.25, 29.9])
def test_lagrange_between_samples(time):
    position_func = LagrangeInterpolator(EPH_TIMES, EPH_POS)
    expected, _ = circular_orbit(time)
    np.testing.assert_allclose(position_func(time), expected, rtol=0, atol=1e-3)


def test_lagrange_linear_midpoint():
    times = [0.0, 1.0, 2.0, 3.0]
    positions = [[7.0e6 + 100.0 * t, 0.0, 0.0] for t in times]
    position_func = LagrangeInterpolator(times, positions)
    np.testing.assert_allclose(position_func(1.5), [7.0e6 + 150.0, 0.0, 0.0], rtol=1e-12, atol=1e-6)


def test_lagrange_neighborhood_smaller_than_table():
    position_func = LagrangeInterpolator(EPH_TIMES, EPH_POS, neighborhood=4)
    assert position_func.neighborhood == 4
    np.testing.assert_allclose(position_func(EPH_TIMES[-1]), EPH_POS[-1], rtol=1e-12)
    np.testing.assert_allclose(position_func(3.3), circular_orbit(3.3)[0], atol=1.0)


@pytest.mark.parametrize('time', [EPH_TIMES[0] - 1e-6, EPH_TIMES[-1] + 1e-6, np.nan])
def test_lagrange_reject_out_of_range(time):
    position_func = LagrangeInterpolator(EPH_TIMES, EPH_POS)
    with pytest.raises(OutOfRange):
        position_func(time)


def test_lagrange_clamp():
    position_func = LagrangeInterpolator(EPH_TIMES, EPH_POS, policy=EXTRAPOLATION_POLICY.CLAMP)
    with pytest.warns(ExtrapolationWarning):
        res = position_func(EPH_TIMES[-1] + 5)
    np.testing.assert_allclose(res, EPH_POS[-1], rtol=1e-12)


def test_lagrange_bounded_extrapolation():
    position_func = LagrangeInterpolator(EPH_TIMES, EPH_POS, policy=EXTRAPOLATION_POLICY.EXTRAPOLATE, margin=2.0)
    with pytest.warns(ExtrapolationWarning):
        res = position_func(EPH_TIMES[-1] + 1.0)
    np.testing.assert_allclose(res, circular_orbit(EPH_TIMES[-1] + 1.0)[0], atol=1.0)
    with pytest.raises(OutOfRange):
        position_func(EPH_TIMES[-1] + 2.5)


@pytest.mark.parametrize('times, values', [
    ([0.0], [[1.0, 2.0, 3.0]]),
    ([0.0, 0.0, 1.0], np.ones((3, 3))),
    ([0.0, 2.0, 1.0], np.ones((3, 3))),
    ([0.0, 1.0], np.ones((3, 3))),
    ([0.0, 1.0], [[np.nan, 0, 0], [0, 0, 0]]),
])
def test_lagrange_invalid(times, values):
    with pytest.raises(InvalidModel):
        LagrangeInterpolator(times, values)


def test_lagrange_vectorized_queries():
    position_func = LagrangeInterpolator(EPH_TIMES, EPH_POS)
    assert position_func.time_range == (-30.0, 30.0)
    res = position_func.interpolate([-10.0, 0.0, 10.0])
    np.testing.assert_allclose(res, EPH_POS[2:5], rtol=1e-12)


def test_lagrange_tables_read_only():
    position_func = LagrangeInterpolator(EPH_TIMES, EPH_POS)
    with pytest.raises(ValueError):
        position_func.values[0, 0] = 0.0


def test_discard_ephemeris():
    samples = [EphemerisSample(float(t), (t, 0.0, 0.0), (1.0, 0.0, 0.0)) for t in range(-10, 11)]
    kept = discard_ephemeris(samples, start=-0.5, end=0.5)
    assert [sample.time for sample in kept] == [-4.0, -3.0, -2.0, -1.0, 1.0, 2.0, 3.0, 4.0]
    with pytest.raises(InvalidModel):
        discard_ephemeris(samples, start=-8.5, end=0.5)


# ---------------------------------------------------------------- slerp
def test_slerp_exact_at_samples():
    quats = [quat_z(0.0), quat_z(0.3), quat_z(0.7)]
    pose_func = SlerpPoseInterpolator([0.0, 1.0, 2.0], quats)
    for time, quat in zip([0.0, 1.0, 2.0], quats):
        res = pose_func(time)
        assert np.allclose(res, quat, atol=1e-15) or np.allclose(res, -quat, atol=1e-15)


def test_slerp_midpoint():
    pose_func = SlerpPoseInterpolator([0.0, 1.0], [quat_z(0.0), quat_z(np.pi / 2)])
    res = pose_func(0.5)
    np.testing.assert_allclose(Rotation.from_quat(res).as_rotvec(), [0, 0, np.pi / 4], atol=1e-12)
    assert np.linalg.norm(res) == pytest.approx(1.0)


def test_slerp_shortest_arc():
    pose_func = SlerpPoseInterpolator([0.0, 1.0], [quat_z(0.0), -quat_z(np.pi / 2)])
    res = pose_func(0.5)
    angle = Rotation.from_quat(res).magnitude()
    assert angle == pytest.approx(np.pi / 4, abs=1e-12)


def test_slerp_identical_quaternions():
    pose_func = SlerpPoseInterpolator([0.0, 1.0], [quat_z(0.2), quat_z(0.2)])
    np.testing.assert_allclose(pose_func(0.3), quat_z(0.2), atol=1e-12)


def test_slerp_normalizes_input():
    pose_func = SlerpPoseInterpolator([0.0, 1.0], [2 * quat_z(0.0), 3 * quat_z(0.2)])
    np.testing.assert_allclose(pose_func(1.0), quat_z(0.2), atol=1e-15)


def test_slerp_out_of_range():
    pose_func = SlerpPoseInterpolator([0.0, 1.0], [quat_z(0.0), quat_z(0.2)])
    with pytest.raises(OutOfRange):
        pose_func(1.0 + 1e-9)
    with pytest.raises(OutOfRange):
        pose_func(-1e-9)


def test_slerp_matches_scipy_slerp():
    times = [0.0, 1.0, 2.5]
    rotations = Rotation.from_rotvec([[0.0, 0.0, 0.0], [0.1, -0.2, 0.3], [0.2, 0.1, 0.5]])
    pose_func = SlerpPoseInterpolator(times, rotations.as_quat())
    reference = Slerp(times, rotations)
    for time in [0.25, 1.0 + 1e-7, 1.7, 2.49]:
        expected = reference(time)
        assert (Rotation.from_quat(pose_func(time)) * expected.inv()).magnitude() < 1e-12


def test_slerp_sign_continuity():
    quats = [quat_z(0.0), -quat_z(0.4), quat_z(0.8)]
    pose_func = SlerpPoseInterpolator([0.0, 1.0, 2.0], quats)
    for time in np.linspace(0.05, 0.95, 10):
        assert np.dot(pose_func(time), pose_func.quaternions[0]) > 0


def test_slerp_extrapolate():
    pose_func = SlerpPoseInterpolator([0.0, 1.0], [quat_z(0.0), quat_z(0.2)],
                                      policy=EXTRAPOLATION_POLICY.EXTRAPOLATE, margin=0.5)
    with pytest.warns(ExtrapolationWarning):
        res = pose_func(1.5)
    np.testing.assert_allclose(Rotation.from_quat(res).as_rotvec(), [0, 0, 0.3], atol=1e-12)
    with pytest.warns(ExtrapolationWarning):
        res = pose_func(-0.5)
    np.testing.assert_allclose(Rotation.from_quat(res).as_rotvec(), [0, 0, -0.1], atol=1e-12)
    with pytest.raises(OutOfRange):
        pose_func(1.6)


@pytest.mark.parametrize('attribute, value', [('policy', EXTRAPOLATION_POLICY.EXTRAPOLATE),
                                              ('margin', 10.0), ('name', 'line')])
def test_interpolators_immutable(attribute, value):
    interpolators = [LagrangeInterpolator(EPH_TIMES, EPH_POS),
                     SlerpPoseInterpolator([0.0, 1.0], [quat_z(0.0), quat_z(0.2)])]
    for interpolator in interpolators:
        with pytest.raises(AttributeError):
            setattr(interpolator, attribute, value)
        assert getattr(interpolator, attribute) != value
    with pytest.raises(ValueError):
        interpolators[0].values[0, 0] = 0.0
    with pytest.raises(ValueError):
        interpolators[1].quaternions[0, 0] = 0.5


def test_lagrange_neighborhood_immutable():
    position_func = LagrangeInterpolator(EPH_TIMES, EPH_POS, neighborhood=4)
    with pytest.raises(AttributeError):
        position_func.neighborhood = 2
    assert position_func.neighborhood == 4


@pytest.mark.parametrize('times, quats', [
    ([0.0], [[0, 0, 0, 1]]),
    ([0.0, 1.0], [[0, 0, 0, 1], [0, 0, 0, 0]]),
    ([1.0, 0.0], [[0, 0, 0, 1], [0, 0, 0, 1]]),
    ([0.0, 1.0], [[0, 0, 1], [0, 0, 1]]),
])
def test_slerp_invalid(times, quats):
    with pytest.raises(InvalidModel):
        SlerpPoseInterpolator(times, quats)


def test_attitude_from_angles():
    samples = attitude_from_angles([0.0, 1.0], yaw=[0.1, 0.0], pitch=[0.0, 0.0], roll=[0.0, 0.0])
    assert samples[0].time == 0.0
    np.testing.assert_allclose(Rotation.from_quat(samples[0].quaternion).as_rotvec(), [0, 0, 0.1], atol=1e-12)
    np.testing.assert_allclose(samples[1].quaternion, [0, 0, 0, 1], atol=1e-15)


# ---------------------------------------------------------------- look angles
def test_look_angles_two_entries():
    first, last = np.array([0.01, -0.05]), np.array([0.03, 0.05])
    table = LookAngleTable([LookAngleEntry(0, tuple(first)), LookAngleEntry(999, tuple(last))], nb_cols=1000)
    res = table.local_angles(500)
    np.testing.assert_allclose(res, first + 500 / 999 * (last - first), rtol=1e-14)
    np.testing.assert_allclose(res, (first + last) / 2, atol=1e-3 * np.max(np.abs(last - first)))


def test_look_angles_exact_at_entries():
    entries = [LookAngleEntry(0, (0.0, -0.1)), LookAngleEntry(10, (0.001, 0.0)), LookAngleEntry(19, (0.0, 0.1))]
    table = LookAngleTable(entries, nb_cols=20)
    for entry in entries:
        np.testing.assert_array_equal(table(entry.column), entry.angles)
    np.testing.assert_allclose(table(12.5), [0.001 * (1 - 2.5 / 9), 0.1 * 2.5 / 9])


@pytest.mark.parametrize('column', [-0.5, 19.01, np.inf])
def test_look_angles_out_of_range(column):
    table = LookAngleTable.from_bounds((0.0, -0.1), (0.0, 0.1), nb_cols=20)
    with pytest.raises(OutOfRange):
        table.local_angles(column)


def test_look_angles_clamp():
    table = LookAngleTable.from_bounds((0.0, -0.1), (0.0, 0.1), nb_cols=20)
    clamp_table = LookAngleTable([LookAngleEntry(0, (0.0, -0.1)), LookAngleEntry(19, (0.0, 0.1))], nb_cols=20,
                                 policy=EXTRAPOLATION_POLICY.CLAMP)
    with pytest.warns(ExtrapolationWarning):
        np.testing.assert_array_equal(clamp_table(25), table(19))


@pytest.mark.parametrize('entries, nb_cols', [
    ([LookAngleEntry(0, (0.0, 0.0))], 10),
    ([LookAngleEntry(0, (0.0, 0.0)), LookAngleEntry(8, (0.0, 0.0))], 10),
    ([LookAngleEntry(1, (0.0, 0.0)), LookAngleEntry(9, (0.0, 0.0))], 10),
    ([LookAngleEntry(0, (0.0, 0.0)), LookAngleEntry(0, (0.0, 0.0)), LookAngleEntry(9, (0.0, 0.0))], 10),
    ([LookAngleEntry(0, (0.0, 0.0)), LookAngleEntry(4.5, (0.0, 0.0)), LookAngleEntry(9, (0.0, 0.0))], 10),
    ([LookAngleEntry(0, (0.0, 0.0)), LookAngleEntry(9, (0.0, 0.0))], 0),
    ([LookAngleEntry(0, (0.0, 0.0, 0.0)), LookAngleEntry(9, (0.0, 0.0, 0.0))], 10),
    ([LookAngleEntry(0, (0.0,)), LookAngleEntry(9, (0.0,))], 10),
    ([LookAngleEntry(0, (0.0, 0.0)), LookAngleEntry(9, (0.0, 0.0, 0.0))], 10),
    ([LookAngleEntry(0, (0.0, 0.0)), LookAngleEntry(5, (0.0,)), LookAngleEntry(9, (0.0, 0.0, 0.0))], 10),
])
def test_look_angles_invalid(entries, nb_cols):
    with pytest.raises(InvalidModel):
        LookAngleTable(entries, nb_cols=nb_cols)


def test_look_angles_single_column_image():
    table = LookAngleTable([LookAngleEntry(0, (0.01, 0.02))], nb_cols=1)
    np.testing.assert_array_equal(table(0), [0.01, 0.02])


def test_look_angles_from_polynomial():
    table = LookAngleTable.from_polynomial([0.01, 1e-5, -0.02, 2e-5], nb_cols=100)
    assert len(table) == 100
    np.testing.assert_allclose(np.tan(table(50)), [0.01 + 50e-5, -0.02 + 100e-5], rtol=1e-12)


@pytest.mark.parametrize('value, expected', [(0.0, 0), (0.5, 0), (1.0, 1), (2.9, 2), (3.0, 2), (-1.0, 0), (7.0, 2)])
def test_locate_value(value, expected):
    assert locate_value(np.array([0.0, 1.0, 2.0, 3.0]), value) == expected
