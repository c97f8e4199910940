import pytest

from tests.fixtures import *

from espa_convert.config import get_layout_table, load_layout_tables
from espa_convert.errors import ConfigurationError
from espa_convert.layout import LayoutEntry


def test_packaged_surface_reflectance_table():
    table = get_layout_table("surface_reflectance")

    assert len(table) == 17
    assert [(e.source_name, e.target_name) for e in table] == SR_LAYOUT_BANDS
    assert all(e.required for e in table[:-1])
    assert table[-1] == LayoutEntry("fmask", "fmask_band", required=False)


def test_tables_are_loaded_once():
    assert load_layout_tables() is load_layout_tables()


def test_tables_are_read_only():
    tables = load_layout_tables()

    with pytest.raises(TypeError):
        tables["surface_reflectance"] = ()

    assert isinstance(tables["surface_reflectance"], tuple)


def test_unknown_table():
    with pytest.raises(ConfigurationError, match="not_a_layout"):
        get_layout_table("not_a_layout")


def test_user_layout_file(temp_out_dir):
    config = temp_out_dir / "layouts.yaml"
    config.write_text(
        "toa:\n"
        "  - {source: toa_band1, target: band1}\n"
        "  - {source: toa_qa, target: qa, required: false}\n"
    )

    table = get_layout_table("toa", config)

    assert table == (
        LayoutEntry("toa_band1", "band1", True),
        LayoutEntry("toa_qa", "qa", False),
    )


@pytest.mark.parametrize(
    "content",
    [
        "",
        "toa: []\n",
        "toa:\n  - {source: toa_band1}\n",
        "toa:\n  - {source: a, target: band1}\n  - {source: b, target: band1}\n",
        "toa: [\n",
    ],
)
def test_invalid_layout_file(temp_out_dir, content):
    config = temp_out_dir / "layouts.yaml"
    config.write_text(content)

    with pytest.raises(ConfigurationError):
        load_layout_tables(config)


def test_missing_layout_file(temp_out_dir):
    with pytest.raises(ConfigurationError):
        load_layout_tables(temp_out_dir / "missing.yaml")
