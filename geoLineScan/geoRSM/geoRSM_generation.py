"""
# Author : Saif Aati
# Contact: SAIF AATI  <saif@caltech.edu> <saifaati@gmail.com>
# Copyright (C) 2022
"""
from typing import Dict, Optional

import geoLineScan.geoErrorsWarning.geoErrors as geoErrors
from geoLineScan.geoCore.base.base_camera_model import BaseCameraModel
from geoLineScan.geoCore.constants import CAMERA_MODELS
from geoLineScan.geoCore.geoLineScanBaseCfg.BaseReadConfig import CameraModelConfig


def build_camera_model(model_type: str, tables: Dict, config: Optional[CameraModelConfig] = None,
                       debug: bool = False) -> BaseCameraModel:
    if model_type == CAMERA_MODELS.LINESCAN:
        from geoLineScan.geoRSM.LineScan_RSM import LineScanCameraModel
        return LineScanCameraModel.from_dict(tables, config=config, debug=debug)
    elif model_type == CAMERA_MODELS.FRAME:
        from geoLineScan.geoRSM.Frame_RSM import FrameCameraModel
        return FrameCameraModel.from_dict(tables)
    geoErrors.erModelNotSupported(model_type)


def build_camera_model_from_file(model_file: str, config: Optional[CameraModelConfig] = None,
                                 debug: bool = False) -> BaseCameraModel:
    """JSON file with a <model_type> entry and the tables of the model."""
    from geoLineScan.utils.misc import read_json_as_dict
    tables = read_json_as_dict(model_file)
    if 'model_type' not in tables:
        geoErrors.erInvalidModel(f"missing <model_type> in {model_file}")
    return build_camera_model(tables['model_type'], tables, config=config, debug=debug)
