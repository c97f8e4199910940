"""
Exceptions raised while converting ESPA products.

Every one of these aborts the conversion it was raised from, there is no
partial success.
"""


class ConversionError(Exception):
    """Generic failure converting an ESPA product into another format."""

    pass


class MissingBandError(ConversionError):
    """A band required by the output layout is not in the input product."""

    pass


class DescriptionOverflowError(ConversionError):
    """A descriptive text attribute would exceed its fixed capacity."""

    pass


class UnsupportedDataTypeError(ConversionError):
    pass


class GainBiasError(ConversionError):
    """Gain/bias values are only partially populated for an instrument."""

    pass


class MetadataError(ConversionError):
    """The ESPA metadata document could not be read."""

    pass


class ConfigurationError(ConversionError):
    pass


class ContainerError(ConversionError):
    """A container primitive (dataset, attribute, external file) failed."""

    pass
