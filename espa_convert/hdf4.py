"""
HDF4 scientific data (SD) container primitives, backed by pyhdf.

The legacy container never holds pixel data itself: every dataset is an
external SDS pointing into the ESPA raw binary band file. The datasets use
the standard (big-endian) HDF4 number types of the legacy container.
"""

from pathlib import Path
from typing import Optional, Sequence, Tuple, Union

from pyhdf.SD import SD, SDC, SDS
from pyhdf.error import HDF4Error

from espa_convert.attributes import Attribute, AttrType
from espa_convert.errors import ContainerError
from espa_convert.logs import STATUS_LOGGER as LOG
from espa_convert.metadata import DataType

_SDS_TYPES = {
    DataType.INT8: SDC.INT8,
    DataType.UINT8: SDC.UINT8,
    DataType.INT16: SDC.INT16,
    DataType.UINT16: SDC.UINT16,
    DataType.INT32: SDC.INT32,
    DataType.UINT32: SDC.UINT32,
    DataType.FLOAT32: SDC.FLOAT32,
    DataType.FLOAT64: SDC.FLOAT64,
}

_ATTR_TYPES = {
    AttrType.CHAR8: SDC.CHAR8,
    AttrType.INT16: SDC.INT16,
    AttrType.INT32: SDC.INT32,
    AttrType.FLOAT32: SDC.FLOAT32,
    AttrType.FLOAT64: SDC.FLOAT64,
}


class Hdf4Writer:
    """
    Writes an HDF4 SD file, overwriting any existing file of the same name.

    Use as a context manager, the file is closed when the context exits
    (whether or not the conversion succeeded).
    """

    def __init__(self, hdf_file: Union[Path, str]):
        self.hdf_file = Path(hdf_file)
        self._sd: Optional[SD] = None

    def __enter__(self) -> "Hdf4Writer":
        try:
            self._sd = SD(str(self.hdf_file), SDC.WRITE | SDC.CREATE | SDC.TRUNC)
        except HDF4Error as e:
            raise ContainerError(f"Creating the HDF file: {self.hdf_file}") from e

        return self

    def __exit__(self, exc_type, exc, tb):
        if self._sd is not None:
            try:
                self._sd.end()
            except HDF4Error as e:
                if exc_type is None:
                    raise ContainerError(f"Closing the HDF file: {self.hdf_file}") from e
                LOG.error("Failed to close HDF file after error", hdf_file=str(self.hdf_file))
            finally:
                self._sd = None

    @property
    def sd(self) -> SD:
        if self._sd is None:
            raise ContainerError(f"HDF file is not open: {self.hdf_file}")
        return self._sd

    def create_dataset(self, name: str, data_type: DataType, shape: Tuple[int, int]) -> SDS:
        try:
            return self.sd.create(name, _SDS_TYPES[data_type], list(shape))
        except KeyError:
            raise ContainerError(f"Unsupported SDS data type {data_type} for {name}")
        except HDF4Error as e:
            raise ContainerError(f"Creating SDS {name} in the HDF file: {self.hdf_file}") from e

    def set_dimension_names(self, dataset: SDS, names: Sequence[str]) -> None:
        for idx, name in enumerate(names):
            try:
                dataset.dim(idx).setname(name)
            except HDF4Error as e:
                raise ContainerError(f"Setting dimension name ({name}) for dimension {idx}") from e

    def set_external_file(self, dataset: SDS, file_name: str, offset: int) -> None:
        try:
            dataset.setexternalfile(file_name, offset)
        except HDF4Error as e:
            raise ContainerError(f"Setting the external dataset for this SDS: {file_name}") from e

    def write_attribute(self, dataset: Optional[SDS], attribute: Attribute) -> None:
        """
        Write an attribute onto a dataset, or onto the file itself if `dataset` is None.
        """
        target = self.sd if dataset is None else dataset
        value = attribute.value if attribute.data_type == AttrType.CHAR8 else list(attribute.value)

        try:
            target.attr(attribute.name).set(_ATTR_TYPES[attribute.data_type], value)
        except HDF4Error as e:
            scope = "global" if dataset is None else "SDS"
            raise ContainerError(f"Writing {scope} attribute ({attribute.name})") from e

    def end_dataset(self, dataset: SDS) -> None:
        try:
            dataset.endaccess()
        except HDF4Error as e:
            raise ContainerError("Ending access to SDS") from e
