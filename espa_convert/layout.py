"""
Resolution of ESPA bands onto the fixed dataset layout of a legacy container.
"""

from dataclasses import dataclass
from typing import Iterable, List, Sequence, Union

from espa_convert.errors import MissingBandError
from espa_convert.metadata import BandMetadata


@dataclass(frozen=True)
class LayoutEntry:
    """One row of a layout table."""

    source_name: str
    """The ESPA band name"""
    target_name: str
    """The dataset name in the legacy container"""
    required: bool = True


@dataclass(frozen=True)
class Matched:
    band: BandMetadata
    target_name: str


@dataclass(frozen=True)
class Missing:
    source_name: str
    required: bool


ResolvedSlot = Union[Matched, Missing]


def resolve_layout(bands: Sequence[BandMetadata], table: Iterable[LayoutEntry]) -> List[ResolvedSlot]:
    """
    Match the bands of a product against a layout table.

    The result follows the order of the table, not the order of `bands`. The
    first band with a matching name wins.

    :param bands:
        The ESPA bands in document order.
    :param table:
        The ordered layout entries of the target container.
    :returns:
        One `Matched` or `Missing` slot per table entry.
    """
    slots = []

    for entry in table:
        band = next((b for b in bands if b.name == entry.source_name), None)

        if band is None:
            slots.append(Missing(entry.source_name, entry.required))
        else:
            slots.append(Matched(band, entry.target_name))

    return slots


def matched_slots(slots: Iterable[ResolvedSlot]) -> List[Matched]:
    """
    Returns the matched slots in layout order.

    :raises MissingBandError:
        If any required layout entry was not found, optional ones are dropped.
    """
    result = []

    for slot in slots:
        if isinstance(slot, Matched):
            result.append(slot)
        elif slot.required:
            raise MissingBandError(
                f"Band {slot.source_name} was not found in the XML file, but it "
                "is expected to be available for output."
            )

    return result
