"""
Reads ESPA internal metadata XML documents into an `EspaMetadata` model.
"""

import re
import xml.etree.ElementTree as etree
from pathlib import Path
from typing import Callable, Optional, Tuple, TypeVar, Union

from espa_convert.errors import MetadataError
from espa_convert.logs import ESPA_LOGGER as _LOG
from espa_convert.metadata import (
    BandMetadata,
    ClassValue,
    DataType,
    EspaMetadata,
    GlobalMetadata,
    ProjectionInfo,
    is_float_fill,
    is_int_fill,
    is_string_fill,
)

T = TypeVar("T")


def _namespace(root: etree.Element) -> str:
    match = re.match(r"^(\{[^}]*\})", root.tag)
    return match.group(1) if match else ""


def _convert(value: Optional[str], convert: Callable[[str], T], what: str) -> Optional[T]:
    if value is None:
        return None

    try:
        return convert(value.strip())
    except ValueError:
        raise MetadataError(f"Could not parse {what}: '{value}'")


def _int(value: Optional[str], what: str) -> Optional[int]:
    # Some integer fields are written with a trailing ".0" by older tools
    result = _convert(value, lambda v: int(float(v)), what)
    return None if is_int_fill(result) else result


def _float(value: Optional[str], what: str) -> Optional[float]:
    result = _convert(value, float, what)
    return None if is_float_fill(result) else result


def _text(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None

    value = value.strip()
    return None if is_string_fill(value) else value


class _Element:
    """Small helper over an XML element which knows the document namespace."""

    def __init__(self, element: etree.Element, ns: str, where: str):
        self.element = element
        self.ns = ns
        self.where = where

    def child(self, name: str, required: bool = True) -> Optional["_Element"]:
        found = self.element.find(f"{self.ns}{name}")
        if found is None:
            if required:
                raise MetadataError(f"Missing <{name}> in <{self.where}>")
            return None

        return _Element(found, self.ns, name)

    def children(self, name: str):
        return [_Element(e, self.ns, name) for e in self.element.findall(f"{self.ns}{name}")]

    def text(self, name: str, required: bool = True) -> Optional[str]:
        found = self.child(name, required)
        if found is None:
            return None

        return found.element.text.strip() if found.element.text else ""

    def attr(self, name: str, required: bool = True) -> Optional[str]:
        value = self.element.get(name)
        if value is None and required:
            raise MetadataError(f"Missing attribute '{name}' on <{self.where}>")

        return value


def _corner(parent: _Element, tag: str, location: str, keys: Tuple[str, str]) -> Optional[Tuple[float, float]]:
    for corner in parent.children(tag):
        if corner.attr("location") == location:
            return (
                _float(corner.attr(keys[0]), f"{tag} {location} {keys[0]}"),
                _float(corner.attr(keys[1]), f"{tag} {location} {keys[1]}"),
            )

    return None


def _read_projection(gmeta: _Element) -> Optional[ProjectionInfo]:
    proj = gmeta.child("projection_information", required=False)
    if proj is None:
        return None

    ul_corner = _corner(proj, "corner_point", "UL", ("x", "y"))
    lr_corner = _corner(proj, "corner_point", "LR", ("x", "y"))
    if ul_corner is None or lr_corner is None:
        raise MetadataError("Missing UL/LR <corner_point> in <projection_information>")

    params = {}

    utm = proj.child("utm_proj_params", required=False)
    if utm is not None:
        params["utm_zone"] = _int(utm.text("zone_code"), "zone_code")

    ps = proj.child("ps_proj_params", required=False)
    if ps is not None:
        params["longitude_pole"] = _float(ps.text("longitude_pole"), "longitude_pole")
        params["latitude_true_scale"] = _float(ps.text("latitude_true_scale"), "latitude_true_scale")
        params["false_easting"] = _float(ps.text("false_easting"), "false_easting")
        params["false_northing"] = _float(ps.text("false_northing"), "false_northing")

    albers = proj.child("albers_proj_params", required=False)
    if albers is not None:
        for key in (
            "standard_parallel1",
            "standard_parallel2",
            "central_meridian",
            "origin_latitude",
            "false_easting",
            "false_northing",
        ):
            params[key] = _float(albers.text(key), key)

    return ProjectionInfo(
        projection=proj.attr("projection"),
        datum=proj.attr("datum", required=False) or "WGS84",
        units=proj.attr("units", required=False) or "meters",
        ul_corner=ul_corner,
        lr_corner=lr_corner,
        grid_origin=proj.text("grid_origin", required=False) or "CENTER",
        **params,
    )


def _read_global(gmeta: _Element) -> GlobalMetadata:
    solar = gmeta.child("solar_angles")
    wrs = gmeta.child("wrs")
    bounds = gmeta.child("bounding_coordinates")

    ul_corner = _corner(gmeta, "corner", "UL", ("latitude", "longitude"))
    lr_corner = _corner(gmeta, "corner", "LR", ("latitude", "longitude"))
    if ul_corner is None or lr_corner is None:
        raise MetadataError("Missing UL/LR <corner> in <global_metadata>")

    return GlobalMetadata(
        data_provider=gmeta.text("data_provider"),
        satellite=gmeta.text("satellite"),
        instrument=gmeta.text("instrument"),
        acquisition_date=gmeta.text("acquisition_date"),
        scene_center_time=_text(gmeta.text("scene_center_time", required=False)),
        level1_production_date=gmeta.text("level1_production_date"),
        lpgs_metadata_file=gmeta.text("lpgs_metadata_file"),
        solar_zenith=_float(solar.attr("zenith"), "solar zenith"),
        solar_azimuth=_float(solar.attr("azimuth"), "solar azimuth"),
        solar_units=solar.attr("units", required=False),
        wrs_system=_int(wrs.attr("system"), "WRS system"),
        wrs_path=_int(wrs.attr("path"), "WRS path"),
        wrs_row=_int(wrs.attr("row"), "WRS row"),
        ul_corner=ul_corner,
        lr_corner=lr_corner,
        west_bound=_float(bounds.text("west"), "west bounding coordinate"),
        east_bound=_float(bounds.text("east"), "east bounding coordinate"),
        north_bound=_float(bounds.text("north"), "north bounding coordinate"),
        south_bound=_float(bounds.text("south"), "south bounding coordinate"),
        orientation_angle=_float(gmeta.text("orientation_angle", required=False), "orientation angle"),
        projection=_read_projection(gmeta),
    )


def _read_band(band: _Element, base_dir: Optional[Path]) -> BandMetadata:
    name = band.attr("name")
    band.where = f"band {name}"

    valid_range = None
    vrange = band.child("valid_range", required=False)
    if vrange is not None:
        low = _int(vrange.attr("min"), f"{name} valid_range min")
        high = _int(vrange.attr("max"), f"{name} valid_range max")
        if low is not None and high is not None:
            valid_range = (low, high)

    pixel_size = None
    pixel_units = None
    psize = band.child("pixel_size", required=False)
    if psize is not None:
        pixel_size = (
            _float(psize.attr("x"), f"{name} pixel size x"),
            _float(psize.attr("y"), f"{name} pixel size y"),
        )
        pixel_units = psize.attr("units", required=False)

    toa_gain = None
    toa_bias = None
    toa = band.child("toa_reflectance", required=False)
    if toa is not None:
        toa_gain = _float(toa.attr("gain", required=False), f"{name} toa gain")
        toa_bias = _float(toa.attr("bias", required=False), f"{name} toa bias")

    bitmap_description = []
    bitmap = band.child("bitmap_description", required=False)
    if bitmap is not None:
        bits = sorted(
            ((_int(bit.attr("num"), f"{name} bit number"), (bit.element.text or "").strip())
             for bit in bitmap.children("bit")),
            key=lambda item: item[0],
        )
        bitmap_description = [description for _, description in bits]

    class_values = []
    classes = band.child("class_values", required=False)
    if classes is not None:
        class_values = [
            ClassValue(_int(cls.attr("num"), f"{name} class number"), (cls.element.text or "").strip())
            for cls in classes.children("class")
        ]

    file_name = band.text("file_name")
    if base_dir is not None and not Path(file_name).is_absolute():
        file_name = str(base_dir / file_name)

    return BandMetadata(
        name=name,
        product=band.attr("product", required=False),
        source=band.attr("source", required=False),
        category=band.attr("category", required=False),
        data_type=DataType.from_espa(band.attr("data_type")),
        nlines=_int(band.attr("nlines"), f"{name} nlines"),
        nsamps=_int(band.attr("nsamps"), f"{name} nsamps"),
        fill_value=_convert(band.attr("fill_value"), lambda v: int(float(v)), f"{name} fill_value"),
        saturate_value=_int(band.attr("saturate_value", required=False), f"{name} saturate_value"),
        scale_factor=_float(band.attr("scale_factor", required=False), f"{name} scale_factor"),
        add_offset=_float(band.attr("add_offset", required=False), f"{name} add_offset"),
        short_name=_text(band.text("short_name", required=False)),
        long_name=band.text("long_name", required=False) or "",
        file_name=file_name,
        pixel_size=pixel_size,
        pixel_units=pixel_units,
        resample_method=_text(band.text("resample_method", required=False)),
        data_units=band.text("data_units", required=False) or "",
        valid_range=valid_range,
        calibrated_nt=_float(band.text("calibrated_nt", required=False), f"{name} calibrated_nt"),
        toa_gain=toa_gain,
        toa_bias=toa_bias,
        app_version=_text(band.text("app_version", required=False)),
        production_date=band.text("production_date", required=False) or "",
        bitmap_description=bitmap_description,
        class_values=class_values,
    )


def parse_metadata(content: Union[str, bytes], base_dir: Optional[Path] = None) -> EspaMetadata:
    """
    Parse the contents of an ESPA internal metadata document.

    :param content:
        The XML document text.
    :param base_dir:
        If provided, relative band file names are resolved against this directory.
    :returns:
        The populated metadata model, bands in document order.
    """
    try:
        root = etree.fromstring(content)
    except etree.ParseError as e:
        raise MetadataError(f"Invalid ESPA metadata XML: {e}") from e

    ns = _namespace(root)
    doc = _Element(root, ns, "espa_metadata")

    global_metadata = _read_global(doc.child("global_metadata"))
    bands = tuple(_read_band(band, base_dir) for band in doc.child("bands").children("band"))

    if not bands:
        raise MetadataError("ESPA metadata does not contain any bands")

    return EspaMetadata(global_metadata, bands)


def read_metadata(xml_file: Union[Path, str]) -> EspaMetadata:
    """
    Read an ESPA internal metadata XML file.

    Band file names are kept exactly as written in the document, the legacy
    container references them as external files by that name.
    """
    xml_file = Path(xml_file)
    _LOG.info("Reading ESPA metadata", xml_file=str(xml_file))

    try:
        content = xml_file.read_bytes()
    except OSError as e:
        raise MetadataError(f"Could not read ESPA metadata file: {xml_file}") from e

    return parse_metadata(content)
