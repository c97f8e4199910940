#!/usr/bin/env python

import contextlib
import sys
from pathlib import Path
from typing import Optional

import click

from espa_convert import constant as const
from espa_convert.convert import convert_espa_to_gtif, convert_espa_to_hdf
from espa_convert.errors import ConversionError
from espa_convert.logs import STATUS_LOGGER as LOG
from espa_convert.logs import logging_directory


def fatal_error(msg: str, exit_code: int = 1):
    click.echo(msg, err=True)
    sys.exit(exit_code)


def _log_context(log_dir: Optional[str]):
    if log_dir is None:
        return contextlib.nullcontext()

    return logging_directory(log_dir)


@click.command(
    "convert_espa_to_hdf",
    help="Convert an ESPA product into the legacy HDF4 container with an ENVI header.",
)
@click.option(
    "--xml",
    "xml_file",
    type=click.Path(exists=True, readable=True, file_okay=True, dir_okay=False),
    required=True,
    help="The input ESPA metadata XML file.",
)
@click.option(
    "--hdf",
    "hdf_file",
    type=click.Path(dir_okay=False),
    required=True,
    help="The output HDF file, the ENVI header is written beside it.",
)
@click.option(
    "--layout-config",
    type=click.Path(exists=True, readable=True, file_okay=True, dir_okay=False),
    default=None,
    help="A YAML file with layout tables, replacing the packaged layouts.",
)
@click.option(
    "--layout",
    type=click.STRING,
    default=const.DEFAULT_LAYOUT,
    show_default=True,
    help="The name of the layout table defining the HDF datasets.",
)
@click.option(
    "--log-dir",
    type=click.Path(file_okay=False, dir_okay=True),
    default=None,
    help="An optional directory to additionally write the conversion log into.",
)
def convert_to_hdf(
    xml_file: str,
    hdf_file: str,
    layout_config: Optional[str],
    layout: str,
    log_dir: Optional[str],
):
    with _log_context(log_dir):
        LOG.info("Converting ESPA product to HDF", xml_file=xml_file, hdf_file=hdf_file, layout=layout)

        try:
            convert_espa_to_hdf(Path(xml_file), Path(hdf_file), layout, layout_config)
        except ConversionError as e:
            fatal_error(f"Error converting {xml_file} to HDF: {e}")


@click.command(
    "convert_espa_to_gtif",
    help="Convert every band of an ESPA product into its own GeoTIFF.",
)
@click.option(
    "--xml",
    "xml_file",
    type=click.Path(exists=True, readable=True, file_okay=True, dir_okay=False),
    required=True,
    help="The input ESPA metadata XML file.",
)
@click.option(
    "--gtif",
    "gtif_base",
    type=click.STRING,
    required=True,
    help="The base name of the output GeoTIFF files, the band names are appended to it.",
)
@click.option(
    "--log-dir",
    type=click.Path(file_okay=False, dir_okay=True),
    default=None,
    help="An optional directory to additionally write the conversion log into.",
)
def convert_to_gtif(xml_file: str, gtif_base: str, log_dir: Optional[str]):
    with _log_context(log_dir):
        LOG.info("Converting ESPA product to GeoTIFF", xml_file=xml_file, gtif_base=gtif_base)

        try:
            convert_espa_to_gtif(Path(xml_file), gtif_base)
        except ConversionError as e:
            fatal_error(f"Error converting {xml_file} to GeoTIFF: {e}")
