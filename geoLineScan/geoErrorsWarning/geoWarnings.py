"""
# Author : Saif Aati
# Contact: SAIF AATI  <saif@caltech.edu> <saifaati@gmail.com>
# Copyright (C) 2022
"""
import warnings


class ExtrapolationWarning(UserWarning):
    pass


def wrClampedQuery(name, value, clamped):
    msg = "{}={} outside the sampled range, clamped to {}".format(name, value, clamped)
    warnings.warn(msg, ExtrapolationWarning)


def wrExtrapolatedQuery(name, value, lower, upper):
    msg = "Performing extrapolation for {}={} outside the sampled range [{}, {}]".format(name, value, lower, upper)
    warnings.warn(msg, ExtrapolationWarning)


def wrNoAttitude():
    msg = "No attitude samples, nominal orbital frame (identity attitude) will be used"
    warnings.warn(msg)
