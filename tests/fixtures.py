import pytest
import tempfile
import os
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, List, Optional, Tuple

from espa_convert.attributes import Attribute
from espa_convert.metadata import (
    BandMetadata,
    ClassValue,
    DataType,
    EspaMetadata,
    GlobalMetadata,
    ProjectionInfo,
)

# The surface reflectance bands in the order of the legacy layout
SR_LAYOUT_BANDS = [
    ("sr_band1", "band1"),
    ("sr_band2", "band2"),
    ("sr_band3", "band3"),
    ("sr_band4", "band4"),
    ("sr_band5", "band5"),
    ("sr_band7", "band7"),
    ("sr_atmos_opacity", "atmos_opacity"),
    ("sr_fill_qa", "fill_QA"),
    ("sr_ddv_qa", "DDV_QA"),
    ("sr_cloud_qa", "cloud_QA"),
    ("sr_cloud_shadow_qa", "cloud_shadow_QA"),
    ("sr_snow_qa", "snow_QA"),
    ("sr_land_water_qa", "land_water_QA"),
    ("sr_adjacent_cloud_qa", "adjacent_cloud_QA"),
    ("toa_band6", "band6"),
    ("toa_band6_qa", "band6_fill_QA"),
    ("fmask", "fmask_band"),
]

SCENE_ID = "LT50460282011274PAC01"

UTM_PROJECTION = ProjectionInfo(
    projection="UTM",
    datum="WGS84",
    units="meters",
    ul_corner=(399885.0, 5206215.0),
    lr_corner=(641715.0, 4990785.0),
    grid_origin="CENTER",
    utm_zone=10,
)


def make_band(name: str, **overrides) -> BandMetadata:
    """Builds a band with every optional field unpopulated, unless overridden."""
    values = dict(
        name=name,
        file_name=f"{SCENE_ID}_{name}.img",
        data_type=DataType.INT16,
        nlines=7181,
        nsamps=8061,
        fill_value=-9999,
        long_name=f"{name} surface reflectance",
        data_units="reflectance",
        pixel_size=(30.0, 30.0),
        pixel_units="meters",
        production_date="2014-08-13T20:24:57Z",
    )
    values.update(overrides)

    return BandMetadata(**values)


def make_global(instrument: str = "TM", **overrides) -> GlobalMetadata:
    values = dict(
        data_provider="USGS/EROS",
        satellite="LANDSAT_5",
        instrument=instrument,
        acquisition_date="2011-10-01",
        level1_production_date="2014-07-29T21:06:37Z",
        lpgs_metadata_file=f"{SCENE_ID}_MTL.txt",
        solar_zenith=45.5,
        solar_azimuth=150.25,
        wrs_system=2,
        wrs_path=46,
        wrs_row=28,
        ul_corner=(47.0, -123.0),
        lr_corner=(45.0, -120.0),
        west_bound=-123.1,
        east_bound=-119.9,
        north_bound=47.1,
        south_bound=44.9,
    )
    values.update(overrides)

    return GlobalMetadata(**values)


def make_gain_bias_bands(count: int, first_gain: Optional[float] = 0.1, first_bias: Optional[float] = -1.0) -> List[BandMetadata]:
    """
    Builds `count` bands where band i has gain (i + 1) / 10 and bias -(i + 1),
    except the first band whose values are given explicitly.
    """
    bands = []

    for idx in range(count):
        gain = first_gain if idx == 0 else (idx + 1) / 10
        bias = first_bias if idx == 0 else -float(idx + 1)
        bands.append(make_band(f"b{idx + 1}", toa_gain=gain, toa_bias=bias))

    return bands


def make_sr_product(
    instrument: str = "TM",
    include_fmask: bool = True,
    reverse: bool = False,
    projection: Optional[ProjectionInfo] = None,
) -> EspaMetadata:
    names = [src for src, _ in SR_LAYOUT_BANDS]
    if not include_fmask:
        names.remove("fmask")

    bands = [make_band(name) for name in names]
    if reverse:
        bands.reverse()

    return EspaMetadata(make_global(instrument, projection=projection), tuple(bands))


@dataclass
class RecordedDataset:
    name: str
    data_type: DataType
    shape: Tuple[int, int]
    dim_names: Tuple[str, ...] = ()
    external_file: Optional[Tuple[str, int]] = None
    attributes: List[Attribute] = field(default_factory=list)
    ended: bool = False


class RecordingWriter:
    """A container writer which records every call, in place of a real HDF4 file."""

    def __init__(self, fail_on_attribute: Optional[str] = None):
        self.datasets: List[RecordedDataset] = []
        self.global_attributes: List[Attribute] = []
        self.fail_on_attribute = fail_on_attribute

    def create_dataset(self, name, data_type, shape):
        dataset = RecordedDataset(name, data_type, tuple(shape))
        self.datasets.append(dataset)
        return dataset

    def set_dimension_names(self, dataset, names):
        dataset.dim_names = tuple(names)

    def set_external_file(self, dataset, file_name, offset):
        dataset.external_file = (file_name, offset)

    def write_attribute(self, dataset, attribute):
        from espa_convert.errors import ContainerError

        if attribute.name == self.fail_on_attribute:
            raise ContainerError(f"Writing attribute ({attribute.name})")

        if dataset is None:
            self.global_attributes.append(attribute)
        else:
            dataset.attributes.append(attribute)

    def end_dataset(self, dataset):
        dataset.ended = True

    @property
    def dataset_names(self) -> List[str]:
        return [d.name for d in self.datasets]

    def global_attribute(self, name: str) -> Any:
        for attribute in self.global_attributes:
            if attribute.name == name:
                return attribute.value

        raise KeyError(name)


def attribute_names(attributes: List[Attribute]) -> List[str]:
    return [a.name for a in attributes]


ESPA_XML = """<?xml version="1.0" encoding="UTF-8"?>
<espa_metadata version="2.0" xmlns="http://espa.cr.usgs.gov/v2" xmlns:xsi="http://www.w3.org/2001/XMLSchema-instance">
    <global_metadata>
        <data_provider>USGS/EROS</data_provider>
        <satellite>LANDSAT_5</satellite>
        <instrument>TM</instrument>
        <acquisition_date>2011-10-01</acquisition_date>
        <scene_center_time>18:37:12.0560000Z</scene_center_time>
        <level1_production_date>2014-07-29T21:06:37Z</level1_production_date>
        <solar_angles zenith="50.123" azimuth="155.456" units="degrees"/>
        <wrs system="2" path="46" row="28"/>
        <lpgs_metadata_file>LT50460282011274PAC01_MTL.txt</lpgs_metadata_file>
        <corner location="UL" latitude="47.0" longitude="-123.0"/>
        <corner location="LR" latitude="45.0" longitude="-120.0"/>
        <bounding_coordinates>
            <west>-123.1</west>
            <east>-119.9</east>
            <north>47.1</north>
            <south>44.9</south>
        </bounding_coordinates>
        <projection_information projection="UTM" datum="WGS84" units="meters">
            <corner_point location="UL" x="399885.0" y="5206215.0"/>
            <corner_point location="LR" x="641715.0" y="4990785.0"/>
            <grid_origin>CENTER</grid_origin>
            <utm_proj_params>
                <zone_code>10</zone_code>
            </utm_proj_params>
        </projection_information>
        <orientation_angle>0.0</orientation_angle>
    </global_metadata>
    <bands>
        <band product="sr_refl" source="toa_refl" name="sr_band1" category="image" data_type="INT16" nlines="7181" nsamps="8061" fill_value="-9999" saturate_value="20000" scale_factor="0.0001">
            <short_name>LT5SR</short_name>
            <long_name>band 1 surface reflectance</long_name>
            <file_name>LT50460282011274PAC01_sr_band1.img</file_name>
            <pixel_size x="30" y="30" units="meters"/>
            <resample_method>none</resample_method>
            <data_units>reflectance</data_units>
            <valid_range min="-2000" max="16000"/>
            <toa_reflectance gain="0.0012" bias="-0.0045"/>
            <app_version>LEDAPS_2.2.1</app_version>
            <production_date>2014-08-13T20:24:57Z</production_date>
        </band>
        <band product="sr_refl" source="toa_refl" name="sr_cloud_qa" category="qa" data_type="UINT8" nlines="7181" nsamps="8061" fill_value="255" scale_factor="-3333.0">
            <short_name>LT5CLD</short_name>
            <long_name>cloud QA mask</long_name>
            <file_name>LT50460282011274PAC01_sr_cloud_qa.img</file_name>
            <pixel_size x="30" y="30" units="meters"/>
            <resample_method>none</resample_method>
            <data_units>quality/feature classification</data_units>
            <valid_range min="0" max="255"/>
            <bitmap_description>
                <bit num="1">cloud</bit>
                <bit num="0">fill</bit>
            </bitmap_description>
            <app_version>undefined</app_version>
            <production_date>2014-08-13T20:24:57Z</production_date>
        </band>
        <band product="cfmask" source="toa_refl" name="fmask" category="qa" data_type="UINT8" nlines="7181" nsamps="8061" fill_value="255" saturate_value="-3333">
            <short_name>LT5CFM</short_name>
            <long_name>cfmask_band</long_name>
            <file_name>LT50460282011274PAC01_cfmask.img</file_name>
            <pixel_size x="30" y="30" units="meters"/>
            <resample_method>none</resample_method>
            <data_units>quality/feature classification</data_units>
            <valid_range min="0" max="-3333"/>
            <class_values>
                <class num="0">clear</class>
                <class num="1">water</class>
                <class num="4">cloud</class>
            </class_values>
            <calibrated_nt>0.25</calibrated_nt>
            <production_date>2014-08-13T20:24:57Z</production_date>
        </band>
    </bands>
</espa_metadata>
"""


@pytest.fixture
def temp_out_dir():
    """Simply returns a temporary directory that lives as long as the test"""
    dir = tempfile.TemporaryDirectory()

    with dir as dir_path:
        yield Path(dir_path)


@pytest.fixture
def espa_xml_file(temp_out_dir):
    """Writes the example ESPA metadata document into a temporary directory."""
    xml_file = temp_out_dir / f"{SCENE_ID}.xml"
    xml_file.write_text(ESPA_XML)

    return xml_file


@pytest.fixture
def sr_product():
    return make_sr_product()


@pytest.fixture
def recording_writer():
    return RecordingWriter()


@pytest.fixture
def in_temp_dir(temp_out_dir):
    """Changes into a temporary directory for the duration of the test."""
    orig_dir = os.getcwd()
    os.chdir(temp_out_dir)

    try:
        yield temp_out_dir
    finally:
        os.chdir(orig_dir)
