"""
# Author : Saif Aati
# Contact: SAIF AATI  <saif@caltech.edu> <saifaati@gmail.com>
# Copyright (C) 2024
"""
import json
from typing import Dict

import numpy as np


class GeoLineScanEncoder(json.JSONEncoder):
    def default(self, obj):
        if isinstance(obj, np.integer):
            return int(obj)
        if isinstance(obj, np.floating):
            return float(obj)
        if isinstance(obj, np.bool_):
            return bool(obj)
        if isinstance(obj, np.ndarray):
            return obj.tolist()

        return json.JSONEncoder.default(self, obj)


def read_json_as_dict(json_file: str) -> Dict:
    with open(json_file) as f:
        return json.loads(f.read())


def write_dict_as_json(out_dict: Dict, json_file: str) -> str:
    with open(json_file, 'w') as f:
        json.dump(out_dict, f, cls=GeoLineScanEncoder, indent=2, allow_nan=True)
    return json_file
