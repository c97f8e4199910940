"""
Constants
---------
"""

from typing import Tuple
from enum import Enum

# ESPA internal metadata fill values, a field holding one of these was never populated
INT_META_FILL : int = -3333
FLOAT_META_FILL : float = -3333.0
STRING_META_FILL : str = "undefined"
EPSILON : float = 0.00001

# Fixed capacities for the descriptive (bitmap/class) text attributes
DESCRIPTION_MAX_SIZE : int = 5000
DESCRIPTION_ROW_MAX_SIZE : int = 1024

BITMAP_DESCRIPTION_HEADER : str = (
    "\n\tBits are numbered from right to left "
    "(bit 0 = LSB, bit N = MSB):\n"
    "\tBit    Description\n"
)
CLASS_DESCRIPTION_HEADER : str = "\n\tClass  Description\n"
DESCRIPTION_ROW_FMT : str = "\t{index}      {description}\n"

# Legacy HDF container
HDF_DIM_NAMES : Tuple[str, str] = ("YDim", "XDim")
HDF_EXTERNAL_OFFSET : int = 0
HDF_VERSION : str = "4.2.16"
HDFEOS_VERSION : str = "2.20"

ENVI_HDR_SUFFIX : str = ".hdr"
ENVI_HDF_FILE_TYPE : str = "HDF scientific data"
ENVI_DEFAULT_FILE_TYPE : str = "ENVI Standard"
ENVI_DESCRIPTION : str = "ESPA-generated file"
ENVI_INTERLEAVE : str = "bsq"
ENVI_BYTE_ORDER : int = 0

DEFAULT_LAYOUT : str = "surface_reflectance"

# Per-band GeoTIFF output
GTIF_BAND_FMT : str = "{base}_{band}.tif"
GDAL_TRANSLATE : str = "gdal_translate"


class DatasetAttr(Enum):
    """Names of the attributes written onto each SDS of the legacy container"""

    LONG_NAME = "long_name"
    UNITS = "units"
    VALID_RANGE = "valid_range"
    FILL_VALUE = "_FillValue"
    SATURATE_VALUE = "_SaturateValue"
    SCALE_FACTOR = "scale_factor"
    ADD_OFFSET = "add_offset"
    CALIBRATED_NT = "calibrated_nt"
    BITMAP_DESCRIPTION = "Bitmap description"
    CLASS_DESCRIPTION = "Class description"
    APP_VERSION = "app_version"


class GlobalAttr(Enum):
    """Names of the global attributes written onto the legacy container"""

    PROVIDER = "DataProvider"
    SATELLITE = "Satellite"
    INSTRUMENT = "Instrument"
    ACQUISITION_DATE = "AcquisitionDate"
    L1_PRODUCTION_DATE = "Level1ProductionDate"
    LPGS_METADATA = "LPGSMetadataFile"
    SOLAR_ZENITH = "SolarZenith"
    SOLAR_AZIMUTH = "SolarAzimuth"
    WRS_SYSTEM = "WRS_System"
    WRS_PATH = "WRS_Path"
    WRS_ROW = "WRS_Row"
    REFL_GAINS = "ReflGains"
    REFL_BIAS = "ReflBias"
    THERMAL_GAINS = "ThermalGains"
    THERMAL_BIAS = "ThermalBias"
    PAN_GAIN = "PanGain"
    PAN_BIAS = "PanBias"
    UL_LAT_LONG = "UpperLeftCornerLatLong"
    LR_LAT_LONG = "LowerRightCornerLatLong"
    WEST_BOUND = "WestBoundingCoordinate"
    EAST_BOUND = "EastBoundingCoordinate"
    NORTH_BOUND = "NorthBoundingCoordinate"
    SOUTH_BOUND = "SouthBoundingCoordinate"
    HDF_VERSION = "HDFVersion"
    HDFEOS_VERSION = "HDFEOSVersion"
    PRODUCTION_DATE = "ProductionDate"
