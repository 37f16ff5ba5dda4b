"""
nakshatra.py
============
The 27 lunar mansions.

Each nakshatra spans 360/27 = 13°20' of sidereal longitude and is divided
into 4 padas of 3°20'. Lords run through the Vimshottari order
(Ketu, Venus, Sun, ... Mercury) three times.

Lookup is a binary search over the segment starts.
"""

from bisect import bisect_right
from dataclasses import dataclass
from typing import Tuple

from .dasha import DASHA_LORDS
from .timescales import normalize_degrees

NAKSHATRA_SPAN = 360.0 / 27.0        # 13.333... degrees
PADA_SPAN      = NAKSHATRA_SPAN / 4.0
PADAS          = 4

NAKSHATRAS = (
    "Ashwini", "Bharani", "Krittika", "Rohini", "Mrigashira", "Ardra",
    "Punarvasu", "Pushya", "Ashlesha", "Magha", "Purva Phalguni", "Uttara Phalguni",
    "Hasta", "Chitra", "Swati", "Vishakha", "Anuradha", "Jyeshtha",
    "Mula", "Purva Ashadha", "Uttara Ashadha", "Shravana", "Dhanishta",
    "Shatabhisha", "Purva Bhadrapada", "Uttara Bhadrapada", "Revati",
)


@dataclass(frozen=True)
class Nakshatra:
    index: int
    name:  str
    lord:  str
    start: float
    width: float = NAKSHATRA_SPAN

    @property
    def end(self) -> float:
        return self.start + self.width


@dataclass(frozen=True)
class NakshatraPosition:
    index: int
    name:  str
    lord:  str
    pada:  int
    start: float
    width: float


NAKSHATRA_TABLE: Tuple[Nakshatra, ...] = tuple(
    Nakshatra(index=i, name=name, lord=DASHA_LORDS[i % 9], start=i * NAKSHATRA_SPAN)
    for i, name in enumerate(NAKSHATRAS)
)

_STARTS = tuple(n.start for n in NAKSHATRA_TABLE)
_BY_NAME = {n.name.lower(): n for n in NAKSHATRA_TABLE}


def find_nakshatra(longitude: float) -> NakshatraPosition:
    """Nakshatra and pada containing a sidereal longitude."""
    lon = normalize_degrees(longitude)
    idx = bisect_right(_STARTS, lon) - 1
    idx = min(max(idx, 0), len(NAKSHATRA_TABLE) - 1)
    nak = NAKSHATRA_TABLE[idx]

    pada = int((lon - nak.start) // (nak.width / PADAS)) + 1
    pada = min(PADAS, max(1, pada))

    return NakshatraPosition(
        index=nak.index,
        name=nak.name,
        lord=nak.lord,
        pada=pada,
        start=nak.start,
        width=nak.width,
    )


def nakshatra_by_name(name: str) -> Nakshatra:
    try:
        return _BY_NAME[name.strip().lower()]
    except KeyError:
        raise KeyError(f"unknown nakshatra {name!r}") from None
