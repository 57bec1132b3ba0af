"""
# Author : Saif Aati
# Contact: SAIF AATI  <saif@caltech.edu> <saifaati@gmail.com>
# Copyright (C) 2024
"""
import os

import pytest
import yaml

import geoLineScan.geoCore.constants as C
from geoLineScan.geoCore.geoLineScanBaseCfg.BaseReadConfig import CameraModelConfig
from geoLineScan.geoErrorsWarning.geoErrors import InvalidModel


def test_default_config_file():
    assert os.path.exists(C.SOFTWARE.CAMERA_MODEL_CONFIG)
    assert CameraModelConfig.from_file() == CameraModelConfig()


def test_default_values():
    config = CameraModelConfig()
    assert config.lagrange_neighborhood == C.INTERPOLATION.LAGRANGE_NEIGHBORHOOD
    assert config.extrapolation_policy == C.EXTRAPOLATION_POLICY.REJECT
    assert config.extrapolation_margin == 0.0
    assert config.fail_fast is False
    assert config.nb_workers == 1


def test_partial_config_file(tmp_path):
    config_file = os.path.join(tmp_path, 'camera_model.yaml')
    with open(config_file, 'w') as f:
        yaml.dump({'interpolation': {'extrapolation_policy': 'extrapolate', 'extrapolation_margin': 1.5},
                   'batch': {'nb_workers': 4}}, f)
    config = CameraModelConfig.from_file(config_file)
    assert config.extrapolation_policy == C.EXTRAPOLATION_POLICY.EXTRAPOLATE
    assert config.extrapolation_margin == 1.5
    assert config.nb_workers == 4
    assert config.lagrange_neighborhood == C.INTERPOLATION.LAGRANGE_NEIGHBORHOOD


def test_to_dict_roundtrip():
    config = CameraModelConfig(lagrange_neighborhood=6, look_angle_policy='clamp', fail_fast=True)
    assert CameraModelConfig.from_dict(config.to_dict()) == config


def test_empty_config_file(tmp_path):
    config_file = os.path.join(tmp_path, 'empty.yaml')
    open(config_file, 'w').close()
    assert CameraModelConfig.from_file(config_file) == CameraModelConfig()


@pytest.mark.parametrize('config', [
    {'interpolation': {'extrapolation_policy': 'guess'}},
    {'interpolation': {'lagrange_neighborhood': 1}},
    {'interpolation': {'extrapolation_margin': -1.0}},
    {'interpolation': {'order': 3}},
    {'look_angles': {'extrapolation_policy': 'extrapolate'}},
    {'geometry': {'degenerate_tol': 0.0}},
    {'batch': {'nb_workers': 0}},
    {'output': {'format': 'json'}},
])
def test_invalid_config(config):
    with pytest.raises(InvalidModel):
        CameraModelConfig.from_dict(config)


def test_config_is_frozen():
    config = CameraModelConfig()
    with pytest.raises(AttributeError):
        config.nb_workers = 3
