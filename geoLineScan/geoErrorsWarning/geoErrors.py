"""
# Author : Saif Aati
# Contact: SAIF AATI  <saif@caltech.edu> <saifaati@gmail.com>
# Copyright (C) 2022
"""


class GeoLineScanError(ValueError):
    kind = 'GeoLineScanError'


class InvalidModel(GeoLineScanError):
    """Malformed or insufficient construction data."""
    kind = 'InvalidModel'


class OutOfRange(GeoLineScanError):
    """Query time or column outside the supported interpolation domain."""
    kind = 'OutOfRange'


class DegenerateGeometry(GeoLineScanError):
    """Position/velocity configuration without a well-defined orbital frame."""
    kind = 'DegenerateGeometry'


def erInvalidModel(msg):
    raise InvalidModel("Invalid camera model: " + msg)


def erOutOfRange(name, value, lower, upper):
    msg = "{}={} is outside the supported domain [{}, {}]".format(name, value, lower, upper)
    raise OutOfRange(msg)


def erDegenerateGeometry(msg):
    raise DegenerateGeometry("Degenerate geometry: " + msg)


def erModelNotSupported(model_type):
    msg = "Camera model <{}> not supported !!".format(model_type)
    raise InvalidModel(msg)
