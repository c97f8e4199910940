"""
Instrument specific band semantics.

Landsat instruments store their TOA reflectance gain/bias values on the
ESPA bands in a fixed band order, which band plays which radiometric role
depends on the instrument family:

============  ===========================  ==============  ============
Family        Reflective band indices      Thermal         Panchromatic
============  ===========================  ==============  ============
TM            0-4, 6                       5               -
ETM+          0-4, 7                       5, 6            8
OLI_TIRS      0-6, 8                       9, 10           7
============  ===========================  ==============  ============
"""

import enum
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Tuple

import numpy as np

from espa_convert.errors import GainBiasError
from espa_convert.logs import ESPA_LOGGER as _LOG
from espa_convert.metadata import BandMetadata, is_float_fill


class InstrumentFamily(enum.Enum):
    TM = "TM"
    ETM = "ETM+"
    OLI_TIRS = "OLI_TIRS"
    UNKNOWN = "UNKNOWN"


def identify_instrument(instrument: str) -> InstrumentFamily:
    """
    Identify the instrument family from the free-form instrument name of the metadata.

    >>> identify_instrument("ETM").name
    'ETM'

    >>> identify_instrument("MSS").name
    'UNKNOWN'
    """
    instrument = (instrument or "").strip()

    if instrument == "TM":
        return InstrumentFamily.TM

    if instrument.startswith("ETM"):
        return InstrumentFamily.ETM

    if instrument == "OLI_TIRS":
        return InstrumentFamily.OLI_TIRS

    return InstrumentFamily.UNKNOWN


class BandRole(enum.Enum):
    REFLECTIVE = "reflective"
    THERMAL = "thermal"
    PANCHROMATIC = "panchromatic"
    UNCLASSIFIED = "unclassified"


@dataclass(frozen=True)
class BandClass:
    role: BandRole
    thermal_index: Optional[int] = None
    """Which thermal band (0 or 1) this is, only set for thermal bands"""


REFLECTIVE = BandClass(BandRole.REFLECTIVE)
PANCHROMATIC = BandClass(BandRole.PANCHROMATIC)
UNCLASSIFIED = BandClass(BandRole.UNCLASSIFIED)


def _thermal(k: int) -> BandClass:
    return BandClass(BandRole.THERMAL, k)


# Band index -> role for each family, indices not listed are unclassified
_FAMILY_LAYOUTS: Dict[InstrumentFamily, Tuple[BandClass, ...]] = {
    InstrumentFamily.TM: (
        REFLECTIVE, REFLECTIVE, REFLECTIVE, REFLECTIVE, REFLECTIVE,
        _thermal(0),
        REFLECTIVE,
    ),
    InstrumentFamily.ETM: (
        REFLECTIVE, REFLECTIVE, REFLECTIVE, REFLECTIVE, REFLECTIVE,
        _thermal(0), _thermal(1),
        REFLECTIVE,
        PANCHROMATIC,
    ),
    InstrumentFamily.OLI_TIRS: (
        REFLECTIVE, REFLECTIVE, REFLECTIVE, REFLECTIVE, REFLECTIVE, REFLECTIVE, REFLECTIVE,
        PANCHROMATIC,
        REFLECTIVE,
        _thermal(0), _thermal(1),
    ),
    InstrumentFamily.UNKNOWN: (),
}


@dataclass(frozen=True)
class GainBias:
    """The TOA gain/bias vectors of a product, grouped by radiometric role."""

    family: InstrumentFamily
    classes: Tuple[BandClass, ...] = ()
    """The class of each band index of the product"""
    refl_gains: np.ndarray = field(default_factory=lambda: np.zeros(0, dtype=np.float64))
    refl_biases: np.ndarray = field(default_factory=lambda: np.zeros(0, dtype=np.float64))
    thermal_gains: np.ndarray = field(default_factory=lambda: np.zeros(0, dtype=np.float64))
    thermal_biases: np.ndarray = field(default_factory=lambda: np.zeros(0, dtype=np.float64))
    pan_gain: Optional[float] = None
    pan_bias: Optional[float] = None

    @property
    def has_pan(self) -> bool:
        return self.pan_gain is not None


def classify_bands(family: InstrumentFamily, nbands: int) -> Tuple[BandClass, ...]:
    """
    Classify each band index of a product by its radiometric role.

    :param family:
        The instrument family of the product.
    :param nbands:
        The number of bands in the product.
    :returns:
        One `BandClass` per band index, bands outside of the family's band
        table (and every band of an unknown instrument) are unclassified.
    """
    layout = _FAMILY_LAYOUTS[family]
    return tuple(layout[i] if i < len(layout) else UNCLASSIFIED for i in range(nbands))


def _gain_bias(band: BandMetadata, idx: int) -> Tuple[float, float]:
    if is_float_fill(band.toa_gain) or is_float_fill(band.toa_bias):
        raise GainBiasError(
            f"Gain/bias of band {idx} ({band.name}) is not populated, but the "
            "first band of the product has them"
        )

    return float(band.toa_gain), float(band.toa_bias)


def extract_gain_bias(instrument: str, bands: Sequence[BandMetadata]) -> GainBias:
    """
    Collect the TOA gain/bias values of a product by band role.

    Extraction is all-or-nothing and keyed on the first band: if the first band
    does not have both a gain and a bias populated, no band is considered to
    have one and all the vectors are empty. The same happens for unknown
    instruments.

    :param instrument:
        The instrument name from the global metadata.
    :param bands:
        The ESPA bands in document order.
    :returns:
        The gain/bias vectors; reflective values in band order, thermal values
        ordered by thermal band number, and the panchromatic pair if the
        instrument has one.
    :raises GainBiasError:
        If the first band has gain/bias values, but a band the instrument
        needs is missing or does not.
    """
    family = identify_instrument(instrument)
    classes = classify_bands(family, len(bands))

    if family == InstrumentFamily.UNKNOWN:
        _LOG.info("Unrecognised instrument, no gain/bias values", instrument=instrument)
        return GainBias(family, classes)

    if not bands or not bands[0].has_gain_bias:
        _LOG.info("Gain/bias values are not available", instrument=instrument)
        return GainBias(family, classes)

    layout = _FAMILY_LAYOUTS[family]
    if len(bands) < len(layout):
        raise GainBiasError(
            f"{family.value} products need {len(layout)} bands for gain/bias values, "
            f"only {len(bands)} available"
        )

    refl: List[Tuple[float, float]] = []
    thermal: Dict[int, Tuple[float, float]] = {}
    pan = (None, None)

    for idx, band_class in enumerate(layout):
        values = _gain_bias(bands[idx], idx)

        if band_class.role == BandRole.REFLECTIVE:
            refl.append(values)
        elif band_class.role == BandRole.THERMAL:
            thermal[band_class.thermal_index] = values
        elif band_class.role == BandRole.PANCHROMATIC:
            pan = values

    thermal_values = [thermal[k] for k in sorted(thermal)]

    return GainBias(
        family,
        classes,
        refl_gains=np.array([g for g, _ in refl], dtype=np.float64),
        refl_biases=np.array([b for _, b in refl], dtype=np.float64),
        thermal_gains=np.array([g for g, _ in thermal_values], dtype=np.float64),
        thermal_biases=np.array([b for _, b in thermal_values], dtype=np.float64),
        pan_gain=pan[0],
        pan_bias=pan[1],
    )
