import pytest

from tests.fixtures import *

from espa_convert import constant as const
from espa_convert.envi import EnviHeader, create_envi_header, format_envi_header, write_envi_header
from espa_convert.errors import ConversionError
from espa_convert.metadata import DataType, ProjectionInfo


def test_header_without_projection():
    header = create_envi_header(make_band("sr_band1"), make_global())

    assert header == EnviHeader(
        samples=8061,
        lines=7181,
        data_type=2,
        data_ignore_value=-9999,
        band_names=("sr_band1",),
    )
    assert header.bands == 1
    assert header.file_type == "ENVI Standard"


def test_header_data_type_code():
    header = create_envi_header(make_band("sr_fill_qa", data_type=DataType.UINT8, fill_value=255), make_global())

    assert header.data_type == 1
    assert header.data_ignore_value == 255


def test_utm_map_info_centre_grid_origin():
    header = create_envi_header(make_band("sr_band1"), make_global(projection=UTM_PROJECTION))

    # the tie point moves from the pixel centre to its upper left corner
    assert header.map_info == (
        "{UTM, 1.000, 1.000, 399870.000000, 5206230.000000, 30.000000, 30.000000, "
        "10, North, WGS-84, units=Meters}"
    )
    assert header.projection_info is None


def test_utm_map_info_southern_zone_ul_grid_origin():
    proj = ProjectionInfo(
        projection="UTM",
        datum="WGS84",
        units="meters",
        ul_corner=(300000.0, 7000000.0),
        lr_corner=(400000.0, 6900000.0),
        grid_origin="UL",
        utm_zone=-55,
    )

    header = create_envi_header(make_band("sr_band1"), make_global(projection=proj))

    assert header.map_info == (
        "{UTM, 1.000, 1.000, 300000.000000, 7000000.000000, 30.000000, 30.000000, "
        "55, South, WGS-84, units=Meters}"
    )


def test_albers_projection_info():
    proj = ProjectionInfo(
        projection="ALBERS",
        datum="WGS84",
        units="meters",
        ul_corner=(-2265585.0, 3164805.0),
        lr_corner=(-2115585.0, 3014805.0),
        grid_origin="UL",
        standard_parallel1=29.5,
        standard_parallel2=45.5,
        central_meridian=-96.0,
        origin_latitude=23.0,
        false_easting=0.0,
        false_northing=0.0,
    )

    header = create_envi_header(make_band("sr_band1"), make_global(projection=proj))

    assert header.map_info.startswith("{Albers Conical Equal Area, 1.000, 1.000, -2265585.000000, 3164805.000000")
    assert header.projection_info.startswith("{9, 6378137.000000, 6356752.314245, 23.000000, -96.000000")
    assert header.projection_info.endswith("29.500000, 45.500000, WGS-84, Albers Conical Equal Area, units=Meters}")


def test_polar_stereographic_projection_info():
    proj = ProjectionInfo(
        projection="PS",
        datum="WGS84",
        units="meters",
        ul_corner=(-100000.0, 100000.0),
        lr_corner=(100000.0, -100000.0),
        grid_origin="UL",
        longitude_pole=-45.0,
        latitude_true_scale=-71.0,
        false_easting=0.0,
        false_northing=0.0,
    )

    header = create_envi_header(make_band("sr_band1"), make_global(projection=proj))

    assert header.map_info.startswith("{Polar Stereographic, 1.000, 1.000, -100000.000000, 100000.000000")
    assert header.projection_info.startswith("{31, ")
    assert "-71.000000, -45.000000" in header.projection_info


def test_incomplete_projection_parameters():
    proj = ProjectionInfo("ALBERS", "WGS84", "meters", (0.0, 0.0), (1.0, 1.0))

    with pytest.raises(ConversionError, match="ALBERS"):
        create_envi_header(make_band("sr_band1"), make_global(projection=proj))


def test_unsupported_projection():
    proj = ProjectionInfo("SIN", "WGS84", "meters", (0.0, 0.0), (1.0, 1.0))

    with pytest.raises(ConversionError, match="SIN"):
        create_envi_header(make_band("sr_band1"), make_global(projection=proj))


def test_projection_without_pixel_size():
    with pytest.raises(ConversionError, match="pixel size"):
        create_envi_header(make_band("sr_band1", pixel_size=None), make_global(projection=UTM_PROJECTION))


def test_format_header():
    header = create_envi_header(make_band("sr_band1"), make_global(projection=UTM_PROJECTION))
    text = format_envi_header(header.replace(file_type=const.ENVI_HDF_FILE_TYPE))

    lines = text.splitlines()
    assert lines[0] == "ENVI"
    assert lines[1:10] == [
        "description = {ESPA-generated file}",
        "samples = 8061",
        "lines = 7181",
        "bands = 1",
        "header offset = 0",
        "file type = HDF scientific data",
        "data type = 2",
        "interleave = bsq",
        "byte order = 0",
    ]
    assert lines[10].startswith("map info = {UTM, ")
    assert lines[-3:] == ["data ignore value = -9999", "band names = {", "sr_band1}"]
    assert text.endswith("\n")


def test_write_header(temp_out_dir):
    header = create_envi_header(make_band("sr_band1"), make_global())
    hdr_file = temp_out_dir / "lndsr.hdf.hdr"

    write_envi_header(hdr_file, header)

    assert hdr_file.read_text() == format_envi_header(header)


def test_write_header_failure(temp_out_dir):
    header = create_envi_header(make_band("sr_band1"), make_global())

    with pytest.raises(ConversionError):
        write_envi_header(temp_out_dir / "missing" / "lndsr.hdf.hdr", header)
