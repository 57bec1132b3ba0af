"""
# Author : Saif Aati
# Contact: SAIF AATI  <saif@caltech.edu> <saifaati@gmail.com>
# Copyright (C) 2022
"""
import logging
from dataclasses import asdict, dataclass, field
from multiprocessing.pool import ThreadPool
from typing import Dict, List, Optional

import numpy as np

from geoLineScan.geoCore.constants import BATCH
from geoLineScan.geoErrorsWarning.geoErrors import GeoLineScanError


@dataclass
class PixelFailure:
    index: int
    row: float
    col: float
    kind: str
    message: str


@dataclass
class RayBatch:
    origins: np.ndarray
    directions: np.ndarray
    valid: np.ndarray
    failures: List[PixelFailure] = field(default_factory=list)

    @property
    def nb_valid(self) -> int:
        return int(np.sum(self.valid))

    def to_dict(self) -> Dict:
        return {'origins': self.origins.tolist(),
                'directions': self.directions.tolist(),
                'valid': self.valid.tolist(),
                'failures': [asdict(failure) for failure in self.failures]}


class Pixel2Ray:
    """
    Convert a batch of pixels (row, col) into rays.
    Failed pixels are reported with the reason of the failure and their rays set to NaN,
    unless `fail_fast` is requested, in which case the first error is raised.
    """

    def __init__(self, camera_model, fail_fast: Optional[bool] = None, nb_workers: Optional[int] = None):
        self.camera_model = camera_model
        config = getattr(camera_model, 'config', None)
        if fail_fast is None:
            fail_fast = config.fail_fast if config is not None else BATCH.FAIL_FAST
        if nb_workers is None:
            nb_workers = config.nb_workers if config is not None else BATCH.NB_WORKERS
        if nb_workers < 1:
            raise ValueError(f"nb_workers must be >= 1, got {nb_workers}")
        self.fail_fast = fail_fast
        self.nb_workers = nb_workers

    def _pixel_to_ray(self, item):
        index, pixel = item
        try:
            return index, self.camera_model.pixel_to_ray(pixel), None
        except GeoLineScanError as err:
            if self.fail_fast:
                raise
            return index, None, PixelFailure(index=index, row=float(pixel[0]), col=float(pixel[1]),
                                             kind=err.kind, message=str(err))

    def compute(self, pixels) -> RayBatch:
        pixels = np.asarray(pixels, dtype=float).reshape(-1, 2)
        nb_pixels = pixels.shape[0]
        origins = np.full((nb_pixels, 3), np.nan)
        directions = np.full((nb_pixels, 3), np.nan)
        valid = np.zeros(nb_pixels, dtype=bool)
        failures = []

        items = list(enumerate(pixels))
        if self.nb_workers == 1:
            results = map(self._pixel_to_ray, items)
            self._collect(results, origins, directions, valid, failures)
        else:
            with ThreadPool(self.nb_workers) as pool:
                self._collect(pool.imap(self._pixel_to_ray, items), origins, directions, valid, failures)

        logging.info(f"{self.__class__.__name__}: {int(np.sum(valid))}/{nb_pixels} rays, {len(failures)} failures")
        for failure in failures:
            logging.warning(f"pixel #{failure.index} (row={failure.row}, col={failure.col}): "
                            f"{failure.kind}: {failure.message}")
        return RayBatch(origins=origins, directions=directions, valid=valid, failures=failures)

    @staticmethod
    def _collect(results, origins, directions, valid, failures):
        for index, ray, failure in results:
            if failure is not None:
                failures.append(failure)
                continue
            origins[index] = ray.origin
            directions[index] = ray.direction
            valid[index] = True
