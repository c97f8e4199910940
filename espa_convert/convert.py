"""
Conversion of ESPA products into the legacy HDF4 container and per-band GeoTIFFs.
"""

import contextlib
from pathlib import Path
from typing import List, Optional, Union

from espa_convert import constant as const
from espa_convert.attributes import band_attributes, global_attributes
from espa_convert.config import LayoutTable, get_layout_table
from espa_convert.envi import create_envi_header, write_envi_header
from espa_convert.errors import ConversionError, MissingBandError
from espa_convert.instrument import GainBias, extract_gain_bias
from espa_convert.layout import Matched, matched_slots, resolve_layout
from espa_convert.logs import STATUS_LOGGER as LOG
from espa_convert.metadata import EspaMetadata
from espa_convert.reader import read_metadata
from espa_convert.subprocess_utils import CommandError, run_command


def _hdf_writer(hdf_file: Path):
    # pyhdf needs the HDF4 C library, only import it when a container is written
    from espa_convert.hdf4 import Hdf4Writer

    return Hdf4Writer(hdf_file)


def _load(metadata: Union[EspaMetadata, Path, str]) -> EspaMetadata:
    if isinstance(metadata, EspaMetadata):
        return metadata

    return read_metadata(metadata)


def create_hdf_metadata(
    hdf_file: Union[Path, str],
    metadata: EspaMetadata,
    table: LayoutTable,
    writer=None,
) -> List[Matched]:
    """
    Create the datasets and attributes of the legacy container.

    Pixel data is never copied, each dataset references the ESPA band file
    as an external file.

    :param hdf_file:
        The container to create, overwritten if it exists.
    :param metadata:
        The ESPA product.
    :param table:
        The layout table defining the datasets of the container, and their order.
    :param writer:
        An optional container writer, by default an `Hdf4Writer` for `hdf_file`
        is opened (and closed) by this function.
    :returns:
        The matched layout slots, in the order their datasets were written.
    """
    hdf_file = Path(hdf_file)
    slots = matched_slots(resolve_layout(metadata.bands, table))

    gmeta = metadata.global_metadata
    gain_bias: GainBias = extract_gain_bias(gmeta.instrument, metadata.bands)

    if writer is None:
        context = _hdf_writer(hdf_file)
    else:
        context = contextlib.nullcontext(writer)

    with context as hdf:
        for slot in slots:
            band = slot.band
            LOG.info(f"Processing SDS: {band.name} --> {slot.target_name}")

            sds = hdf.create_dataset(slot.target_name, band.data_type, (band.nlines, band.nsamps))
            hdf.set_dimension_names(sds, const.HDF_DIM_NAMES)
            hdf.set_external_file(sds, band.file_name, const.HDF_EXTERNAL_OFFSET)

            for attribute in band_attributes(band):
                hdf.write_attribute(sds, attribute)

            hdf.end_dataset(sds)

        for attribute in global_attributes(metadata, gain_bias):
            hdf.write_attribute(None, attribute)

    return slots


def convert_espa_to_hdf(
    xml_file: Union[EspaMetadata, Path, str],
    hdf_file: Union[Path, str],
    layout_name: str = const.DEFAULT_LAYOUT,
    layout_config: Optional[Union[Path, str]] = None,
    writer=None,
) -> Path:
    """
    Convert an ESPA product into the legacy HDF4 container, with an ENVI header.

    :param xml_file:
        The ESPA metadata XML file of the product, or its already read metadata.
    :param hdf_file:
        The HDF file to create, the ENVI header is written beside it with the
        `.hdr` suffix appended.
    :param layout_name:
        The name of the layout table to use.
    :param layout_config:
        An optional YAML layout file, replacing the packaged layouts.
    :param writer:
        An optional container writer, see `create_hdf_metadata`.
    :returns:
        The path of the ENVI header written.
    :raises ConversionError:
        If any part of the conversion failed, no partial result is valid.
    """
    hdf_file = Path(hdf_file)
    hdr_file = Path(f"{hdf_file}{const.ENVI_HDR_SUFFIX}")

    try:
        metadata = _load(xml_file)
        table = get_layout_table(layout_name, layout_config)

        create_hdf_metadata(hdf_file, metadata, table, writer)

        # The header describes the band in the first row of the layout
        primary = metadata.find_band(table[0].source_name)
        if primary is None:
            raise MissingBandError(f"Band {table[0].source_name} is needed for the ENVI header")

        header = create_envi_header(primary, metadata.global_metadata)
        write_envi_header(hdr_file, header.replace(file_type=const.ENVI_HDF_FILE_TYPE))

    except ConversionError as e:
        LOG.error("Converting ESPA product to HDF failed", hdf_file=str(hdf_file), error=str(e))
        raise
    except OSError as e:
        raise ConversionError(f"Converting the ESPA product to HDF: {hdf_file}") from e

    return hdr_file


def gtif_band_name(base: Union[Path, str], band_name: str) -> str:
    """
    Returns the GeoTIFF file name for a band, blanks are replaced with underscores.

    >>> gtif_band_name("LE07_2020", "surf temp")
    'LE07_2020_surf_temp.tif'
    """
    return const.GTIF_BAND_FMT.format(base=base, band=band_name).replace(" ", "_")


def convert_espa_to_gtif(
    xml_file: Union[EspaMetadata, Path, str],
    gtif_base: Union[Path, str],
    work_dir: Optional[Union[Path, str]] = None,
) -> List[str]:
    """
    Convert every band of an ESPA product into its own GeoTIFF (with a .tfw world file).

    The translation itself is delegated to `gdal_translate`, the band's fill
    value is set as the no-data value of the output.

    :param xml_file:
        The ESPA metadata XML file of the product, or its already read metadata.
    :param gtif_base:
        The base name of the GeoTIFF files, the band name is appended to it.
    :param work_dir:
        The directory `gdal_translate` is run from, relative band file names
        are resolved against it. Defaults to the current directory.
    :returns:
        The GeoTIFF file names, in the order of the bands in the product.
    :raises ConversionError:
        If reading the metadata or translating any band failed.
    """
    work_dir = Path.cwd() if work_dir is None else Path(work_dir)
    metadata = _load(xml_file)

    outputs = []

    for band in metadata.bands:
        gtif_file = gtif_band_name(gtif_base, band.name)
        LOG.info(f"Converting {band.file_name} to {gtif_file}")

        command = [
            const.GDAL_TRANSLATE,
            "-of",
            "GTiff",
            "-a_nodata",
            band.fill_value,
            "-co",
            "TFW=YES",
            "-q",
            band.file_name,
            gtif_file,
        ]

        try:
            run_command(command, work_dir, command_name=f"{const.GDAL_TRANSLATE} {band.name}")
        except (CommandError, OSError) as e:
            raise ConversionError(f"Running {const.GDAL_TRANSLATE} for band {band.name}: {gtif_file}") from e

        outputs.append(gtif_file)

    return outputs
