import logging
import os

import click

from geoLineScan.geoCore.geoLineScanBaseCfg.BaseReadConfig import CameraModelConfig
from geoLineScan.geoErrorsWarning.geoErrors import GeoLineScanError
from geoLineScan.geoLineScan_CLI.cli_utils import (rangeValidator, read_pixels,
                                                   validatePath)
from geoLineScan.geoLineScanLogger import GeoLineScanLog
from geoLineScan.geoRSM.geoRSM_generation import build_camera_model_from_file
from geoLineScan.utils.misc import write_dict_as_json


def _load_model(model_file, config_file):
    try:
        config = CameraModelConfig.from_file(config_file)
        return build_camera_model_from_file(model_file, config=config), config
    except GeoLineScanError as err:
        raise click.ClickException(f"{err.kind}: {err}")


# the cli entrypoint
@click.group(context_settings=dict(help_option_names=["-help", "-h"]))
def cli():
    pass


@cli.command()
@click.argument('model_file', type=click.File('r'), callback=validatePath)
@click.argument('pixels_file', type=click.File('r'), callback=validatePath)
@click.option('-output', '-o', type=str, required=True, help="output JSON file")
@click.option('-config', '-c', type=click.File('r'), callback=validatePath, default=None,
              help="camera model YAML configuration")
@click.option('-fail_fast', '-ff', is_flag=True, default=False, help="stop at the first failing pixel")
@click.option('-workers', '-w', type=int, default=None, callback=rangeValidator(min=1),
              help="number of threads")
@click.option('-log_dir', type=str, default=None)
def pixel2ray(model_file, pixels_file, output, config, fail_fast, workers, log_dir):
    """Converts the pixels (row col per line) of PIXELS_FILE into rays using the camera model of MODEL_FILE."""
    with GeoLineScanLog('pixel2ray', log_dir or os.path.dirname(os.path.abspath(output))) as run_log:
        camera_model, model_config = _load_model(model_file, config)
        logging.info(f"model: {camera_model}")
        pixels = read_pixels(pixels_file)
        try:
            rays = camera_model.pixels_to_rays(pixels,
                                               fail_fast=fail_fast or model_config.fail_fast,
                                               nb_workers=workers)
        except GeoLineScanError as err:
            logging.error(f"{err.kind}: {err}")
            raise click.ClickException(f"{err.kind}: {err} (log: {run_log.log_file})")
        write_dict_as_json(rays.to_dict(), output)
        logging.info(f"rays: {output}")
    click.echo(f"{rays.nb_valid}/{len(pixels)} rays written to {output}, {len(rays.failures)} failures")
    click.echo(f"log: {run_log.log_file}")


@cli.command()
@click.argument('model_file', type=click.File('r'), callback=validatePath)
@click.option('-output', '-o', type=str, required=True, help="output JSON file")
@click.option('-nb_samples', '-n', type=int, default=10, callback=rangeValidator(min=1))
@click.option('-config', '-c', type=click.File('r'), callback=validatePath, default=None)
def trajectory(model_file, output, nb_samples, config):
    """Samples the camera center and velocity along the image rows of a line-scan model."""
    camera_model, _ = _load_model(model_file, config)
    if not hasattr(camera_model, 'camera_trajectory'):
        raise click.ClickException(f"{camera_model.__class__.__name__} has no trajectory")
    try:
        traj = camera_model.camera_trajectory(nb_samples)
    except GeoLineScanError as err:
        raise click.ClickException(f"{err.kind}: {err}")
    write_dict_as_json(traj, output)
    click.echo(f"{nb_samples} trajectory samples written to {output}")


if __name__ == '__main__':
    cli()
