"""
Loading of the legacy container layout tables.

The tables are read-only configuration: they are loaded once per source file
and handed to the layout resolver explicitly.
"""

import functools
import types
from importlib import resources
from pathlib import Path
from typing import Dict, Mapping, Optional, Tuple, Union

import yaml

from espa_convert.errors import ConfigurationError
from espa_convert.layout import LayoutEntry

LayoutTable = Tuple[LayoutEntry, ...]

PACKAGED_LAYOUTS = "layouts.yaml"


def _parse_tables(raw, source: str) -> Dict[str, LayoutTable]:
    if not isinstance(raw, dict) or not raw:
        raise ConfigurationError(f"Layout configuration has no tables: {source}")

    tables = {}

    for name, rows in raw.items():
        if not isinstance(rows, list) or not rows:
            raise ConfigurationError(f"Layout table '{name}' has no rows: {source}")

        entries = []
        for idx, row in enumerate(rows):
            try:
                entries.append(LayoutEntry(str(row["source"]), str(row["target"]), bool(row.get("required", True))))
            except (KeyError, TypeError, AttributeError):
                raise ConfigurationError(f"Invalid row {idx} in layout table '{name}': {row}")

        targets = [e.target_name for e in entries]
        if len(set(targets)) != len(targets):
            raise ConfigurationError(f"Layout table '{name}' has duplicate target names")

        tables[name] = tuple(entries)

    return tables


@functools.lru_cache(maxsize=None)
def load_layout_tables(config_path: Optional[Union[Path, str]] = None) -> Mapping[str, LayoutTable]:
    """
    Load the layout tables from a YAML file.

    :param config_path:
        An optional path to a YAML layout file, if not provided the layouts
        packaged with `espa_convert` are used.
    :returns:
        A mapping of table name to its ordered layout entries.
    """
    if config_path is None:
        source = f"espa_convert/{PACKAGED_LAYOUTS}"
        text = resources.files("espa_convert").joinpath(PACKAGED_LAYOUTS).read_text()
    else:
        source = str(config_path)
        try:
            text = Path(config_path).read_text()
        except OSError as e:
            raise ConfigurationError(f"Could not read layout configuration: {source}") from e

    try:
        raw = yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Invalid layout configuration: {source}") from e

    return types.MappingProxyType(_parse_tables(raw, source))


def get_layout_table(name: str, config_path: Optional[Union[Path, str]] = None) -> LayoutTable:
    """Returns the layout table called `name`."""
    tables = load_layout_tables(config_path)

    if name not in tables:
        raise ConfigurationError(f"Unknown layout '{name}', expected one of: {', '.join(tables)}")

    return tables[name]
