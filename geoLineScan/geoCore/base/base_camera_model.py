"""
# Author : Saif Aati
# Contact: SAIF AATI  <saif@caltech.edu> <saifaati@gmail.com>
# Copyright (C) 2022
"""
from abc import ABC, abstractmethod
from typing import NamedTuple, Optional, Sequence, Tuple

import numpy as np


class Ray(NamedTuple):
    origin: np.ndarray
    direction: np.ndarray


class Immutable:
    """
    Attributes can only be set until `_freeze` is called; numpy arrays are made read-only,
    including after unpickling.
    """

    def __setattr__(self, key, value):
        if self.__dict__.get('_frozen', False):
            raise AttributeError(f"{self.__class__.__name__} is immutable after construction")
        super().__setattr__(key, value)

    def _freeze(self):
        for value in self.__dict__.values():
            if isinstance(value, np.ndarray):
                value.setflags(write=False)
        self.__dict__['_frozen'] = True

    def __setstate__(self, state):
        self.__dict__.update(state)
        self._freeze()


class BaseCameraModel(Immutable, ABC):
    """
    Camera model contract consumed by triangulation and bundle adjustment:
    every sensor family (pushbroom line-scan, pinhole frame camera) implements it.
    Implementations are immutable once constructed and can be queried from several threads.
    """

    @property
    @abstractmethod
    def image_size(self) -> Tuple[int, int]:
        """(nb_rows, nb_cols)"""
        pass

    @abstractmethod
    def camera_center(self, time: float) -> np.ndarray:
        pass

    @abstractmethod
    def camera_velocity(self, time: float) -> np.ndarray:
        pass

    @abstractmethod
    def camera_pose(self, time: float) -> np.ndarray:
        """Unit quaternion [x, y, z, w]."""
        pass

    @abstractmethod
    def time_at_line(self, line: float) -> float:
        pass

    @abstractmethod
    def pixel_to_ray(self, pixel: Sequence[float]) -> Ray:
        """
        Args:
            pixel: (row, col)
        Returns:
            Ray anchored at the camera center, with a unit direction in the planet fixed frame.
        """
        pass

    def pixels_to_rays(self, pixels, fail_fast: Optional[bool] = None, nb_workers: Optional[int] = None):
        from geoLineScan.geoRSM.Pixel2Ray import Pixel2Ray
        return Pixel2Ray(self, fail_fast=fail_fast, nb_workers=nb_workers).compute(pixels)
