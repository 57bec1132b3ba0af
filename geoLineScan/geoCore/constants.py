"""
# Author : Saif Aati
# Contact: SAIF AATI  <saif@caltech.edu> <saifaati@gmail.com>
# Copyright (C) 2022
"""

import os
from dataclasses import dataclass
from enum import Enum

import numpy as np

GEOLINESCAN_PACKAGE_DIR = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))


@dataclass(frozen=True)
class SOFTWARE:
    AUTHOR = 'saif@caltech.edu||saifaati@gmail.com'
    SOFTWARE_NAME = 'geoLineScan'
    VERSION = '1.0.0'
    PARENT_FOLDER = os.path.dirname(GEOLINESCAN_PACKAGE_DIR)
    WKDIR = os.path.join(os.path.dirname(PARENT_FOLDER), 'GEO_LINESCAN_WD/')
    CAMERA_MODEL_CONFIG = os.path.join(os.path.abspath(os.path.dirname(__file__)),
                                       'geoLineScanBaseCfg/camera_model.yaml')


class CameraModels(Enum):
    LINESCAN = 'linescan'
    FRAME = 'frame'


@dataclass(frozen=True)
class CAMERA_MODELS:
    LINESCAN = CameraModels.LINESCAN.value
    FRAME = CameraModels.FRAME.value


class ExtrapolationPolicies(Enum):
    REJECT = 'reject'
    CLAMP = 'clamp'
    EXTRAPOLATE = 'extrapolate'


@dataclass(frozen=True)
class EXTRAPOLATION_POLICY:
    REJECT = ExtrapolationPolicies.REJECT.value
    CLAMP = ExtrapolationPolicies.CLAMP.value
    EXTRAPOLATE = ExtrapolationPolicies.EXTRAPOLATE.value


GEOLINESCAN_EXTRAPOLATION_POLICIES = [EXTRAPOLATION_POLICY.REJECT,
                                      EXTRAPOLATION_POLICY.CLAMP,
                                      EXTRAPOLATION_POLICY.EXTRAPOLATE]


@dataclass(frozen=True)
class INTERPOLATION:
    LAGRANGE_NEIGHBORHOOD = 8
    EXTRAPOLATION_POLICY = EXTRAPOLATION_POLICY.REJECT
    EXTRAPOLATION_MARGIN = 0.0


@dataclass(frozen=True)
class TOLERANCE:
    DEGENERATE = 1e-12
    ORTHONORMALITY = 1e-10
    UNIT_QUATERNION = 1e-12


@dataclass(frozen=True)
class SENSOR_AXES:
    """
    Line-scan image orientation:
        +X across the columns of the image
        +Y along the rows, i.e. along the flight direction
        +Z up, away from the body center
    Local look angles are expressed in (Xa, Ya, Za) = (-X1, -Y1, Z1).
    """
    LOCAL_AXES_FLIP = np.diag([-1.0, -1.0, 1.0])


@dataclass(frozen=True)
class BATCH:
    FAIL_FAST = False
    NB_WORKERS = 1


@dataclass(frozen=True)
class UNDISTORTION:
    MAX_ITER = 20
    TOL = 1e-8
