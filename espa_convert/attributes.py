"""
Attribute emission policy for the legacy container.

Each attribute is described by its name, the metadata field it comes from, its
data type in the container and the rule deciding whether it is written at all.
The functions here only produce the ordered list of attributes, writing them is
left to the container writer.
"""

import enum
from dataclasses import dataclass
from typing import Any, Callable, List, Optional, Sequence, Tuple, Union

from espa_convert import constant as const
from espa_convert.constant import DatasetAttr, GlobalAttr
from espa_convert.errors import DescriptionOverflowError, MetadataError
from espa_convert.instrument import GainBias
from espa_convert.metadata import (
    BandMetadata,
    ClassValue,
    EspaMetadata,
    GlobalMetadata,
    is_float_fill,
    is_int_fill,
    is_pair_fill,
    is_string_fill,
)


class AttrType(enum.Enum):
    """Data types of the attributes in the legacy container"""

    CHAR8 = "char8"
    INT16 = "int16"
    INT32 = "int32"
    FLOAT32 = "float32"
    FLOAT64 = "float64"


class EmissionRule(enum.Enum):
    ALWAYS = "always"
    IF_INT_NOT_FILL = "if_int_not_fill"
    IF_FLOAT_NOT_FILL = "if_float_not_fill"
    IF_STRING_NOT_FILL = "if_string_not_fill"
    IF_PAIR_COMPLETE = "if_pair_complete"
    DESCRIPTIVE_BLOCK = "descriptive_block"


def should_emit(rule: EmissionRule, value: Any) -> bool:
    """
    Decide if an attribute holding `value` is written under `rule`.

    Descriptive blocks are written when they have at least one row.
    """
    if rule == EmissionRule.ALWAYS:
        return True
    if rule == EmissionRule.IF_INT_NOT_FILL:
        return not is_int_fill(value)
    if rule == EmissionRule.IF_FLOAT_NOT_FILL:
        return not is_float_fill(value)
    if rule == EmissionRule.IF_STRING_NOT_FILL:
        return not is_string_fill(value)
    if rule == EmissionRule.IF_PAIR_COMPLETE:
        return not is_pair_fill(value)
    if rule == EmissionRule.DESCRIPTIVE_BLOCK:
        return value is not None and len(value) > 0

    raise ValueError(f"Unknown emission rule: {rule}")


@dataclass(frozen=True)
class Attribute:
    """A typed attribute ready to be written; numeric values are always tuples."""

    name: str
    data_type: AttrType
    value: Union[str, Tuple[Union[int, float], ...]]


@dataclass(frozen=True)
class AttributeDescriptor:
    name: str
    source: Callable[[Any], Any]
    rule: EmissionRule
    data_type: AttrType


def _field(name: str) -> Callable[[Any], Any]:
    return lambda obj: getattr(obj, name)


def _to_value(data_type: AttrType, value: Any) -> Union[str, Tuple[Union[int, float], ...]]:
    if data_type == AttrType.CHAR8:
        return "" if value is None else str(value)

    values = value if isinstance(value, (tuple, list)) else (value,)

    if data_type in (AttrType.INT16, AttrType.INT32):
        return tuple(int(v) for v in values)

    return tuple(float(v) for v in values)


def _has_missing(value: Any) -> bool:
    if isinstance(value, (tuple, list)):
        return any(v is None for v in value)

    return value is None


def _render_block(
    attr_name: str,
    header: str,
    rows: Sequence[Tuple[int, str]],
    max_size: int,
    row_max_size: int,
) -> str:
    if len(header) >= max_size:
        raise DescriptionOverflowError(f"Overflow of the {attr_name} attribute header")

    message = header

    for index, description in rows:
        row = const.DESCRIPTION_ROW_FMT.format(index=index, description=description)
        if len(row) >= row_max_size:
            raise DescriptionOverflowError(f"Overflow of the {attr_name} attribute row for {index}")

        if len(message) + len(row) >= max_size:
            raise DescriptionOverflowError(
                f"Overflow of the {attr_name} attribute, it may not exceed {max_size - 1} characters"
            )

        message += row

    return message


def render_bitmap_description(
    bits: Sequence[str],
    max_size: int = const.DESCRIPTION_MAX_SIZE,
    row_max_size: int = const.DESCRIPTION_ROW_MAX_SIZE,
) -> str:
    """
    Render the description of a QA bitmap band as one multi-line text block.

    >>> print(render_bitmap_description(["fill", "cloud"]).strip("\\n"))
    \tBits are numbered from right to left (bit 0 = LSB, bit N = MSB):
    \tBit    Description
    \t0      fill
    \t1      cloud

    :raises DescriptionOverflowError:
        If the text would not fit in `max_size` characters (or a single row
        in `row_max_size`), the text is never truncated.
    """
    return _render_block(
        DatasetAttr.BITMAP_DESCRIPTION.value,
        const.BITMAP_DESCRIPTION_HEADER,
        list(enumerate(bits)),
        max_size,
        row_max_size,
    )


def render_class_description(
    classes: Sequence[ClassValue],
    max_size: int = const.DESCRIPTION_MAX_SIZE,
    row_max_size: int = const.DESCRIPTION_ROW_MAX_SIZE,
) -> str:
    """Render the class values of a classification band as one multi-line text block."""
    return _render_block(
        DatasetAttr.CLASS_DESCRIPTION.value,
        const.CLASS_DESCRIPTION_HEADER,
        [(c.code, c.description) for c in classes],
        max_size,
        row_max_size,
    )


BAND_ATTRIBUTES: Tuple[AttributeDescriptor, ...] = (
    AttributeDescriptor(DatasetAttr.LONG_NAME.value, _field("long_name"), EmissionRule.ALWAYS, AttrType.CHAR8),
    AttributeDescriptor(DatasetAttr.UNITS.value, _field("data_units"), EmissionRule.ALWAYS, AttrType.CHAR8),
    AttributeDescriptor(DatasetAttr.VALID_RANGE.value, _field("valid_range"), EmissionRule.IF_PAIR_COMPLETE, AttrType.INT32),
    AttributeDescriptor(DatasetAttr.FILL_VALUE.value, _field("fill_value"), EmissionRule.ALWAYS, AttrType.INT32),
    AttributeDescriptor(DatasetAttr.SATURATE_VALUE.value, _field("saturate_value"), EmissionRule.IF_INT_NOT_FILL, AttrType.INT32),
    AttributeDescriptor(DatasetAttr.SCALE_FACTOR.value, _field("scale_factor"), EmissionRule.IF_FLOAT_NOT_FILL, AttrType.FLOAT32),
    AttributeDescriptor(DatasetAttr.ADD_OFFSET.value, _field("add_offset"), EmissionRule.IF_FLOAT_NOT_FILL, AttrType.FLOAT64),
    AttributeDescriptor(DatasetAttr.CALIBRATED_NT.value, _field("calibrated_nt"), EmissionRule.IF_FLOAT_NOT_FILL, AttrType.FLOAT32),
    AttributeDescriptor(DatasetAttr.BITMAP_DESCRIPTION.value, _field("bitmap_description"), EmissionRule.DESCRIPTIVE_BLOCK, AttrType.CHAR8),
    AttributeDescriptor(DatasetAttr.CLASS_DESCRIPTION.value, _field("class_values"), EmissionRule.DESCRIPTIVE_BLOCK, AttrType.CHAR8),
    AttributeDescriptor(DatasetAttr.APP_VERSION.value, _field("app_version"), EmissionRule.IF_STRING_NOT_FILL, AttrType.CHAR8),
)

_BLOCK_RENDERERS = {
    DatasetAttr.BITMAP_DESCRIPTION.value: render_bitmap_description,
    DatasetAttr.CLASS_DESCRIPTION.value: render_class_description,
}

GLOBAL_ATTRIBUTES: Tuple[AttributeDescriptor, ...] = (
    AttributeDescriptor(GlobalAttr.PROVIDER.value, _field("data_provider"), EmissionRule.ALWAYS, AttrType.CHAR8),
    AttributeDescriptor(GlobalAttr.SATELLITE.value, _field("satellite"), EmissionRule.ALWAYS, AttrType.CHAR8),
    AttributeDescriptor(GlobalAttr.INSTRUMENT.value, _field("instrument"), EmissionRule.ALWAYS, AttrType.CHAR8),
    AttributeDescriptor(GlobalAttr.ACQUISITION_DATE.value, _field("acquisition_date"), EmissionRule.ALWAYS, AttrType.CHAR8),
    AttributeDescriptor(GlobalAttr.L1_PRODUCTION_DATE.value, _field("level1_production_date"), EmissionRule.ALWAYS, AttrType.CHAR8),
    AttributeDescriptor(GlobalAttr.LPGS_METADATA.value, _field("lpgs_metadata_file"), EmissionRule.ALWAYS, AttrType.CHAR8),
    AttributeDescriptor(GlobalAttr.SOLAR_ZENITH.value, _field("solar_zenith"), EmissionRule.ALWAYS, AttrType.FLOAT32),
    AttributeDescriptor(GlobalAttr.SOLAR_AZIMUTH.value, _field("solar_azimuth"), EmissionRule.ALWAYS, AttrType.FLOAT32),
    AttributeDescriptor(GlobalAttr.WRS_SYSTEM.value, _field("wrs_system"), EmissionRule.ALWAYS, AttrType.INT16),
    AttributeDescriptor(GlobalAttr.WRS_PATH.value, _field("wrs_path"), EmissionRule.ALWAYS, AttrType.INT16),
    AttributeDescriptor(GlobalAttr.WRS_ROW.value, _field("wrs_row"), EmissionRule.ALWAYS, AttrType.INT16),
)

GEOGRAPHIC_ATTRIBUTES: Tuple[AttributeDescriptor, ...] = (
    AttributeDescriptor(GlobalAttr.UL_LAT_LONG.value, _field("ul_corner"), EmissionRule.ALWAYS, AttrType.FLOAT64),
    AttributeDescriptor(GlobalAttr.LR_LAT_LONG.value, _field("lr_corner"), EmissionRule.ALWAYS, AttrType.FLOAT64),
    AttributeDescriptor(GlobalAttr.WEST_BOUND.value, _field("west_bound"), EmissionRule.ALWAYS, AttrType.FLOAT64),
    AttributeDescriptor(GlobalAttr.EAST_BOUND.value, _field("east_bound"), EmissionRule.ALWAYS, AttrType.FLOAT64),
    AttributeDescriptor(GlobalAttr.NORTH_BOUND.value, _field("north_bound"), EmissionRule.ALWAYS, AttrType.FLOAT64),
    AttributeDescriptor(GlobalAttr.SOUTH_BOUND.value, _field("south_bound"), EmissionRule.ALWAYS, AttrType.FLOAT64),
)


def emit_attributes(scope: Any, descriptors: Sequence[AttributeDescriptor]) -> List[Attribute]:
    """
    Apply the emission rules of `descriptors` to a metadata record.

    :param scope:
        The metadata record (band or global) the descriptors read from.
    :param descriptors:
        The attribute descriptors, in the order the attributes are written.
    :returns:
        The attributes to write, in descriptor order, without the ones whose
        rule says they are not populated.
    """
    result = []

    for desc in descriptors:
        value = desc.source(scope)
        if not should_emit(desc.rule, value):
            continue

        if desc.data_type != AttrType.CHAR8 and _has_missing(value):
            raise MetadataError(f"Attribute {desc.name} must be written but has no value")

        if desc.rule == EmissionRule.DESCRIPTIVE_BLOCK:
            value = _BLOCK_RENDERERS[desc.name](value)

        result.append(Attribute(desc.name, desc.data_type, _to_value(desc.data_type, value)))

    return result


def band_attributes(band: BandMetadata) -> List[Attribute]:
    """Returns the attributes of the dataset holding `band`."""
    return emit_attributes(band, BAND_ATTRIBUTES)


def gain_bias_attributes(gain_bias: GainBias) -> List[Attribute]:
    """
    Returns the gain/bias global attributes.

    Each pair of attributes is only written if the instrument produced values
    for it, an empty set of vectors writes nothing.
    """
    result = []

    if len(gain_bias.refl_gains) > 0:
        result.append(Attribute(GlobalAttr.REFL_GAINS.value, AttrType.FLOAT64, _to_value(AttrType.FLOAT64, list(gain_bias.refl_gains))))
        result.append(Attribute(GlobalAttr.REFL_BIAS.value, AttrType.FLOAT64, _to_value(AttrType.FLOAT64, list(gain_bias.refl_biases))))

    if len(gain_bias.thermal_gains) > 0:
        result.append(Attribute(GlobalAttr.THERMAL_GAINS.value, AttrType.FLOAT64, _to_value(AttrType.FLOAT64, list(gain_bias.thermal_gains))))
        result.append(Attribute(GlobalAttr.THERMAL_BIAS.value, AttrType.FLOAT64, _to_value(AttrType.FLOAT64, list(gain_bias.thermal_biases))))

    if gain_bias.has_pan:
        result.append(Attribute(GlobalAttr.PAN_GAIN.value, AttrType.FLOAT64, (float(gain_bias.pan_gain),)))
        result.append(Attribute(GlobalAttr.PAN_BIAS.value, AttrType.FLOAT64, (float(gain_bias.pan_bias),)))

    return result


def global_attributes(
    metadata: EspaMetadata,
    gain_bias: GainBias,
    hdf_version: str = const.HDF_VERSION,
    hdfeos_version: str = const.HDFEOS_VERSION,
) -> List[Attribute]:
    """
    Returns the global attributes of the legacy container.

    :param metadata:
        The product metadata.
    :param gain_bias:
        The gain/bias vectors extracted for the product's instrument.
    :param hdf_version:
        The HDF library version string to record.
    :param hdfeos_version:
        The HDF-EOS library version string to record.
    """
    gmeta: GlobalMetadata = metadata.global_metadata

    result = emit_attributes(gmeta, GLOBAL_ATTRIBUTES)
    result.extend(gain_bias_attributes(gain_bias))
    result.extend(emit_attributes(gmeta, GEOGRAPHIC_ATTRIBUTES))

    result.append(Attribute(GlobalAttr.HDF_VERSION.value, AttrType.CHAR8, hdf_version))
    result.append(Attribute(GlobalAttr.HDFEOS_VERSION.value, AttrType.CHAR8, hdfeos_version))

    # The product's production date is the one of its first band
    production_date: Optional[str] = metadata.bands[0].production_date if metadata.bands else ""
    result.append(Attribute(GlobalAttr.PRODUCTION_DATE.value, AttrType.CHAR8, production_date or ""))

    return result
