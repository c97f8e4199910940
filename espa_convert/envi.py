"""
ENVI header files accompanying the legacy container.

An ENVI header is a plain `key = value` text file, with the keys written in a
fixed order after the leading `ENVI` line.
"""

import dataclasses
import io
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Tuple, Union

from espa_convert import constant as const
from espa_convert.errors import ConversionError
from espa_convert.logs import STATUS_LOGGER as LOG
from espa_convert.metadata import BandMetadata, GlobalMetadata, ProjectionInfo

# ENVI names for the ESPA datums
_DATUMS = {
    "WGS84": "WGS-84",
    "NAD27": "North America 1927",
    "NAD83": "North America 1983",
}

# Ellipsoid axes used in the projection info of non-UTM projections
_WGS84_AXES = (6378137.0, 6356752.314245179)


@dataclass(frozen=True)
class EnviHeader:
    samples: int
    lines: int
    data_type: int
    data_ignore_value: int
    band_names: Tuple[str, ...]
    file_type: str = const.ENVI_DEFAULT_FILE_TYPE
    description: str = const.ENVI_DESCRIPTION
    header_offset: int = 0
    interleave: str = const.ENVI_INTERLEAVE
    byte_order: int = const.ENVI_BYTE_ORDER
    map_info: Optional[str] = None
    projection_info: Optional[str] = None

    @property
    def bands(self) -> int:
        return len(self.band_names)

    def replace(self, **changes) -> "EnviHeader":
        return dataclasses.replace(self, **changes)


def _datum(proj: ProjectionInfo) -> str:
    return _DATUMS.get(proj.datum.upper().replace("-", ""), proj.datum)


def _tie_point(proj: ProjectionInfo, pixel_size: Tuple[float, float]) -> Tuple[float, float]:
    ul_x, ul_y = proj.ul_corner

    # ENVI ties the upper left corner of the upper left pixel, ESPA may give its center
    if proj.grid_origin.upper() == "CENTER":
        ul_x -= 0.5 * pixel_size[0]
        ul_y += 0.5 * pixel_size[1]

    return ul_x, ul_y


def _map_info(proj: ProjectionInfo, pixel_size: Tuple[float, float]) -> Tuple[str, Optional[str]]:
    x, y = _tie_point(proj, pixel_size)
    px, py = pixel_size
    datum = _datum(proj)
    name = proj.projection.upper()

    if name == "UTM":
        if proj.utm_zone is None:
            raise ConversionError("UTM projection is missing its zone")

        hemisphere = "North" if proj.utm_zone > 0 else "South"
        map_info = (
            f"{{UTM, 1.000, 1.000, {x:f}, {y:f}, {px:f}, {py:f}, "
            f"{abs(proj.utm_zone)}, {hemisphere}, {datum}, units=Meters}}"
        )
        return map_info, None

    if name == "GEO":
        map_info = f"{{Geographic Lat/Lon, 1.000, 1.000, {x:f}, {y:f}, {px:f}, {py:f}, {datum}, units=Degrees}}"
        return map_info, None

    if name == "PS":
        map_info = f"{{Polar Stereographic, 1.000, 1.000, {x:f}, {y:f}, {px:f}, {py:f}, {datum}, units=Meters}}"
        proj_info = (
            f"{{31, {_WGS84_AXES[0]:f}, {_WGS84_AXES[1]:f}, {proj.latitude_true_scale:f}, "
            f"{proj.longitude_pole:f}, {proj.false_easting:f}, {proj.false_northing:f}, "
            f"{datum}, Polar Stereographic, units=Meters}}"
        )
        return map_info, proj_info

    if name == "ALBERS":
        map_info = (
            f"{{Albers Conical Equal Area, 1.000, 1.000, {x:f}, {y:f}, {px:f}, {py:f}, {datum}, units=Meters}}"
        )
        proj_info = (
            f"{{9, {_WGS84_AXES[0]:f}, {_WGS84_AXES[1]:f}, {proj.origin_latitude:f}, "
            f"{proj.central_meridian:f}, {proj.false_easting:f}, {proj.false_northing:f}, "
            f"{proj.standard_parallel1:f}, {proj.standard_parallel2:f}, "
            f"{datum}, Albers Conical Equal Area, units=Meters}}"
        )
        return map_info, proj_info

    raise ConversionError(f"Unsupported projection for the ENVI header: {proj.projection}")


def create_envi_header(band: BandMetadata, gmeta: GlobalMetadata) -> EnviHeader:
    """
    Derive the ENVI header describing a single band.

    :param band:
        The band whose size, data type and fill value the header describes.
    :param gmeta:
        The global metadata of the product, its projection (if any) provides
        the map info.
    :returns:
        The header information.
    """
    map_info = None
    projection_info = None

    if gmeta.projection is not None:
        if band.pixel_size is None:
            raise ConversionError(f"Band {band.name} has no pixel size for the ENVI map info")

        try:
            map_info, projection_info = _map_info(gmeta.projection, band.pixel_size)
        except TypeError as e:
            # formatting a projection parameter which was not populated
            raise ConversionError(f"Incomplete {gmeta.projection.projection} projection parameters") from e

    return EnviHeader(
        samples=band.nsamps,
        lines=band.nlines,
        data_type=band.data_type.envi_code,
        data_ignore_value=band.fill_value,
        band_names=(band.name,),
        map_info=map_info,
        projection_info=projection_info,
    )


def format_envi_header(header: EnviHeader) -> str:
    """Returns the text of an ENVI header file."""
    lines: List[str] = [
        "ENVI",
        f"description = {{{header.description}}}",
        f"samples = {header.samples}",
        f"lines = {header.lines}",
        f"bands = {header.bands}",
        f"header offset = {header.header_offset}",
        f"file type = {header.file_type}",
        f"data type = {header.data_type}",
        f"interleave = {header.interleave}",
        f"byte order = {header.byte_order}",
    ]

    if header.map_info:
        lines.append(f"map info = {header.map_info}")

    if header.projection_info:
        lines.append(f"projection info = {header.projection_info}")

    lines.append(f"data ignore value = {header.data_ignore_value}")
    lines.append("band names = {")
    lines.append(",\n".join(header.band_names) + "}")

    return "\n".join(lines) + "\n"


def write_envi_header(hdr_file: Union[Path, str], header: EnviHeader) -> None:
    """
    Write an ENVI header file.

    :param hdr_file:
        The path of the header file, overwritten if it exists.
    :param header:
        The header to write.
    """
    LOG.info("Writing ENVI header", hdr_file=str(hdr_file))

    try:
        with io.open(hdr_file, "w", encoding="utf8") as fobj:
            fobj.write(format_envi_header(header))
    except OSError as e:
        raise ConversionError(f"Writing the ENVI header: {hdr_file}") from e
