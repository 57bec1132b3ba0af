"""
# Author : Saif Aati
# Contact: SAIF AATI  <saif@caltech.edu> <saifaati@gmail.com>
# Copyright (C) 2022
"""
import logging
import os
import sys
from datetime import datetime
from typing import Optional

from geoLineScan.geoCore.constants import SOFTWARE

LOG_FORMAT = "%(asctime)s [%(levelname)s] - %(message)s"


class GeoLineScanLog:
    """
    Run log of a geoLineScan command: INFO messages go to stdout and to
    `<log_dir>/<log_prefix>_<generation time>.log` until `close` (or the end of the `with` block).
    """

    def __init__(self, log_prefix: str, log_dir: Optional[str] = None):
        self.log_dir = log_dir or SOFTWARE.WKDIR
        os.makedirs(self.log_dir, exist_ok=True)

        generation_time = datetime.now().strftime("%m-%d-%Y-%H-%M-%S")
        self.log_file = os.path.join(self.log_dir, f"{log_prefix}_{generation_time}.log")

        # no-op when the root logger is already configured
        logging.basicConfig(level=logging.INFO, format=LOG_FORMAT, handlers=[logging.StreamHandler(sys.stdout)])
        root_logger = logging.getLogger()
        if root_logger.getEffectiveLevel() > logging.INFO:
            root_logger.setLevel(logging.INFO)

        self.file_handler = logging.FileHandler(self.log_file)
        self.file_handler.setLevel(logging.INFO)
        self.file_handler.setFormatter(logging.Formatter(LOG_FORMAT))
        root_logger.addHandler(self.file_handler)
        logging.info(f"{log_prefix} log: {self.log_file}")

    def close(self):
        logging.getLogger().removeHandler(self.file_handler)
        self.file_handler.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
