"""
# Author : Saif Aati
# Contact: SAIF AATI  <saif@caltech.edu> <saifaati@gmail.com>
# Copyright (C) 2024
"""
import numpy as np
import pytest

from geoLineScan.geoRSM.LineScan_RSM import LineScanCameraModel

ORBIT_RADIUS = 7.2e6
GM_EARTH = 3.986004418e14
ORBIT_RATE = np.sqrt(GM_EARTH / ORBIT_RADIUS ** 3)
NB_ROWS = 1000
NB_COLS = 1000
LINE_PERIOD = 1e-3
EPH_TIMES = np.arange(-30, 31, 10, dtype=float)
ATT_TIMES = [-1.0, 0.0, 0.5, 1.0, 2.0]


def circular_orbit(time):
    """Circular polar orbit in the X-Z plane of the planet fixed frame."""
    angle = ORBIT_RATE * time
    position = ORBIT_RADIUS * np.array([np.cos(angle), 0.0, np.sin(angle)])
    velocity = ORBIT_RADIUS * ORBIT_RATE * np.array([-np.sin(angle), 0.0, np.cos(angle)])
    return position, velocity


def build_tables(attitude=None, boresight=None):
    eph_tpv = []
    for time in EPH_TIMES:
        position, velocity = circular_orbit(time)
        eph_tpv.append([time] + position.tolist() + velocity.tolist())
    if attitude is None:
        attitude = [[time, 0.0, 0.0, 0.0, 1.0] for time in ATT_TIMES]
    tables = {'model_type': 'linescan',
              'platform': 'synthetic pushbroom',
              'image_size': [NB_ROWS, NB_COLS],
              'time': {'t0': 0.0, 'line_period': LINE_PERIOD},
              'ephemeris': eph_tpv,
              'attitude': attitude,
              'look_angles': [[0, 0.0, -0.04], [500, 0.0, 0.0], [NB_COLS - 1, 0.0, 0.04]]}
    if boresight is not None:
        tables['boresight'] = boresight
    return tables


@pytest.fixture
def spot_tables():
    return build_tables()


@pytest.fixture
def linescan_model(spot_tables):
    return LineScanCameraModel.from_dict(spot_tables)
