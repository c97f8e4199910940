"""
In-memory representation of an ESPA internal metadata document.

The model is populated once (see `espa_convert.reader`) and only ever read by
the conversion code. Optional fields which were never populated are stored as
`None`, the fill sentinels of the XML format are mapped to `None` by the reader.
"""

import enum
from dataclasses import dataclass, field
from typing import List, Optional, Tuple, Union

import numpy as np

from espa_convert.constant import INT_META_FILL, FLOAT_META_FILL, STRING_META_FILL, EPSILON
from espa_convert.errors import UnsupportedDataTypeError


def is_int_fill(value: Optional[int]) -> bool:
    """True if an integer field is unpopulated (`None` or the integer fill)."""
    return value is None or value == INT_META_FILL


def is_float_fill(value: Optional[float], epsilon: float = EPSILON) -> bool:
    """
    True if a floating point field is unpopulated.

    The float fill is never compared exactly, a value within `epsilon` of the
    fill sentinel counts as fill.
    """
    return value is None or abs(value - FLOAT_META_FILL) <= epsilon


def is_string_fill(value: Optional[str]) -> bool:
    """True if a string field is unpopulated (`None` or the "not set" literal)."""
    return value is None or value == STRING_META_FILL


def is_pair_fill(value: Optional[Tuple[Union[int, float], Union[int, float]]]) -> bool:
    """True if either side of a (min, max) style pair is unpopulated."""
    return value is None or is_int_fill(value[0]) or is_int_fill(value[1])


class DataType(enum.Enum):
    """Pixel data types supported by the ESPA raw binary format"""

    INT8 = "INT8", np.int8, 1
    UINT8 = "UINT8", np.uint8, 1
    INT16 = "INT16", np.int16, 2
    UINT16 = "UINT16", np.uint16, 12
    INT32 = "INT32", np.int32, 3
    UINT32 = "UINT32", np.uint32, 13
    FLOAT32 = "FLOAT32", np.float32, 4
    FLOAT64 = "FLOAT64", np.float64, 5

    def __init__(self, espa_name, numpy_type, envi_code):
        self.espa_name = espa_name
        self.numpy_type = numpy_type
        self.envi_code = envi_code

    @property
    def dtype(self) -> np.dtype:
        return np.dtype(self.numpy_type)

    @classmethod
    def from_espa(cls, name: str) -> "DataType":
        """
        Look up a data type by its spelling in the ESPA metadata.

        :param name:
            The data type string, eg: "INT16".
        :returns:
            The matching `DataType`.
        """
        for member in cls:
            if member.espa_name == name.strip().upper():
                return member

        raise UnsupportedDataTypeError(f"Unsupported ESPA data type: {name}")


@dataclass(frozen=True)
class ClassValue:
    code: int
    description: str


@dataclass(frozen=True)
class ProjectionInfo:
    """Map projection of the product grid, needed for the auxiliary raster header."""

    projection: str
    datum: str
    units: str
    ul_corner: Tuple[float, float]
    """Map (x, y) of the upper left pixel"""
    lr_corner: Tuple[float, float]
    grid_origin: str = "CENTER"
    utm_zone: Optional[int] = None
    longitude_pole: Optional[float] = None
    latitude_true_scale: Optional[float] = None
    standard_parallel1: Optional[float] = None
    standard_parallel2: Optional[float] = None
    central_meridian: Optional[float] = None
    origin_latitude: Optional[float] = None
    false_easting: Optional[float] = None
    false_northing: Optional[float] = None


@dataclass(frozen=True)
class GlobalMetadata:
    data_provider: str
    satellite: str
    instrument: str
    acquisition_date: str
    level1_production_date: str
    lpgs_metadata_file: str
    solar_zenith: float
    solar_azimuth: float
    wrs_system: int
    wrs_path: int
    wrs_row: int
    ul_corner: Tuple[float, float]
    """(latitude, longitude) of the upper left corner"""
    lr_corner: Tuple[float, float]
    west_bound: float
    east_bound: float
    north_bound: float
    south_bound: float
    scene_center_time: Optional[str] = None
    solar_units: Optional[str] = None
    orientation_angle: Optional[float] = None
    projection: Optional[ProjectionInfo] = None


@dataclass(frozen=True)
class BandMetadata:
    name: str
    file_name: str
    data_type: DataType
    nlines: int
    nsamps: int
    fill_value: int
    long_name: str = ""
    data_units: str = ""
    product: Optional[str] = None
    source: Optional[str] = None
    category: Optional[str] = None
    short_name: Optional[str] = None
    pixel_size: Optional[Tuple[float, float]] = None
    pixel_units: Optional[str] = None
    resample_method: Optional[str] = None
    valid_range: Optional[Tuple[int, int]] = None
    saturate_value: Optional[int] = None
    scale_factor: Optional[float] = None
    add_offset: Optional[float] = None
    calibrated_nt: Optional[float] = None
    toa_gain: Optional[float] = None
    toa_bias: Optional[float] = None
    production_date: str = ""
    app_version: Optional[str] = None
    bitmap_description: List[str] = field(default_factory=list)
    class_values: List[ClassValue] = field(default_factory=list)

    @property
    def nbits(self) -> int:
        return len(self.bitmap_description)

    @property
    def nclass(self) -> int:
        return len(self.class_values)

    @property
    def has_gain_bias(self) -> bool:
        """True if both the TOA gain and bias are populated."""
        return not is_float_fill(self.toa_gain) and not is_float_fill(self.toa_bias)


@dataclass(frozen=True)
class EspaMetadata:
    """A whole ESPA product: the global record and the bands in document order."""

    global_metadata: GlobalMetadata
    bands: Tuple[BandMetadata, ...]

    def find_band(self, name: str) -> Optional[BandMetadata]:
        """Returns the first band called `name`, or None if there is no such band."""
        for band in self.bands:
            if band.name == name:
                return band

        return None
