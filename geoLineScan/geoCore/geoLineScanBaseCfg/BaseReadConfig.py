# Author : Saif Aati
# Contact: SAIF AATI  <saif@caltech.edu> <saifaati@gmail.com>
# Copyright (C) 2022
from dataclasses import dataclass, fields
from typing import Dict, Optional

import yaml

import geoLineScan.geoCore.constants as C
import geoLineScan.geoErrorsWarning.geoErrors as geoErrors


class ConfigReader:

    def __init__(self, config_file: str):
        self.config_file = config_file
        self.config = self._read_config(config_file=self.config_file)

    @staticmethod
    def _read_config(config_file: str) -> Dict:
        with open(config_file) as fp:
            config = yaml.full_load(fp)
        return config or {}

    @property
    def get_config(self):
        return self.config


# pairs of config attribute / path in the yaml file
CFG_KEYS = {
    "lagrange_neighborhood": "interpolation.lagrange_neighborhood",
    "extrapolation_policy": "interpolation.extrapolation_policy",
    "extrapolation_margin": "interpolation.extrapolation_margin",
    "look_angle_policy": "look_angles.extrapolation_policy",
    "degenerate_tol": "geometry.degenerate_tol",
    "fail_fast": "batch.fail_fast",
    "nb_workers": "batch.nb_workers",
}


@dataclass(frozen=True)
class CameraModelConfig:
    lagrange_neighborhood: int = C.INTERPOLATION.LAGRANGE_NEIGHBORHOOD
    extrapolation_policy: str = C.INTERPOLATION.EXTRAPOLATION_POLICY
    extrapolation_margin: float = C.INTERPOLATION.EXTRAPOLATION_MARGIN
    look_angle_policy: str = C.EXTRAPOLATION_POLICY.REJECT
    degenerate_tol: float = C.TOLERANCE.DEGENERATE
    fail_fast: bool = C.BATCH.FAIL_FAST
    nb_workers: int = C.BATCH.NB_WORKERS

    def __post_init__(self):
        if int(self.lagrange_neighborhood) < 2:
            geoErrors.erInvalidModel(f"lagrange_neighborhood must be >= 2, got {self.lagrange_neighborhood}")
        if self.extrapolation_policy not in C.GEOLINESCAN_EXTRAPOLATION_POLICIES:
            geoErrors.erInvalidModel(f"unknown extrapolation policy <{self.extrapolation_policy}>")
        if self.look_angle_policy not in [C.EXTRAPOLATION_POLICY.REJECT, C.EXTRAPOLATION_POLICY.CLAMP]:
            geoErrors.erInvalidModel(f"unknown look angle policy <{self.look_angle_policy}>")
        if self.extrapolation_margin < 0:
            geoErrors.erInvalidModel(f"extrapolation_margin must be >= 0, got {self.extrapolation_margin}")
        if self.degenerate_tol <= 0:
            geoErrors.erInvalidModel(f"degenerate_tol must be > 0, got {self.degenerate_tol}")
        if int(self.nb_workers) < 1:
            geoErrors.erInvalidModel(f"nb_workers must be >= 1, got {self.nb_workers}")

    @classmethod
    def from_dict(cls, config: Dict) -> "CameraModelConfig":
        """
        Build the configuration from a nested dictionary laid out as camera_model.yaml.
        Missing keys keep their default values.
        """
        known_sections = {path.split('.')[0] for path in CFG_KEYS.values()}
        for section in config:
            if section not in known_sections:
                geoErrors.erInvalidModel(f"unknown configuration section <{section}>")

        options = {}
        for name, path in CFG_KEYS.items():
            section, key = path.split('.')
            if section in config and config[section] is not None and key in config[section]:
                options[name] = config[section][key]

        for section in known_sections:
            section_keys = {path.split('.')[1] for path in CFG_KEYS.values() if path.startswith(section + '.')}
            for key in (config.get(section) or {}):
                if key not in section_keys:
                    geoErrors.erInvalidModel(f"unknown configuration key <{section}.{key}>")
        return cls(**options)

    @classmethod
    def from_file(cls, config_file: Optional[str] = None) -> "CameraModelConfig":
        if config_file is None:
            config_file = C.SOFTWARE.CAMERA_MODEL_CONFIG
        return cls.from_dict(ConfigReader(config_file).get_config)

    def to_dict(self) -> Dict:
        config: Dict = {}
        for field_ in fields(self):
            section, key = CFG_KEYS[field_.name].split('.')
            config.setdefault(section, {})[key] = getattr(self, field_.name)
        return config
