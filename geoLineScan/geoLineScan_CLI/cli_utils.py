import click
import numpy as np


# region validators

def rangeValidator(min=None, max=None):
    def validator(ctx, param, value):
        if value is None:
            return value
        if (min == None or value >= min) and (max == None or value <= max):
            return value
        mn = "" if min == None else f"{min}<="
        mx = "" if max == None else f"<={max}"
        raise click.BadParameter(f"value must be {mn}x{mx}")

    return validator


def validatePath(ctx, param, file):
    return file and file.name


# endregion validators

def read_pixels(pixels_file):
    """Text file with one `row col` pair per line, `#` for comments."""
    try:
        pixels = np.loadtxt(pixels_file, dtype=float, comments='#', ndmin=2)
    except ValueError as err:
        raise click.BadParameter(f"cannot read pixels from {pixels_file}: {err}")
    if pixels.size == 0:
        return np.empty((0, 2))
    if pixels.shape[1] != 2:
        raise click.BadParameter(f"pixels file must have 2 columns (row col), got {pixels.shape[1]}")
    return pixels
