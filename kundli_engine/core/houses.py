"""
houses.py
=========
Ascendant (Lagna) and equal-house cusps.

The house system is Equal House: house 1 begins exactly at the Lagna and
every house is 30° wide. Some client documentation calls these "Placidus"
houses; the output is equal-house either way.

Source: Meeus Ch. 14 (obliquity, rising degree)
"""

import math
from dataclasses import dataclass
from typing import List, Tuple

from .ephemeris import SIGN_LORDS, sign_of
from .timescales import normalize_degrees

DEG_TO_RAD = math.pi / 180.0
RAD_TO_DEG = 180.0 / math.pi

HOUSE_SPAN = 30.0


# ---------------------------------------------------------------------------
# Obliquity and Ascendant
# ---------------------------------------------------------------------------

def mean_obliquity(T: float) -> float:
    """Mean obliquity of the ecliptic in degrees, T in Julian centuries."""
    return 23.43929111 - 0.0130041667 * T - 0.00000016389 * T * T


def compute_ascendant(lst_hours: float, latitude_deg: float, obliquity: float) -> float:
    """
    Rising degree of the ecliptic, [0, 360).
    lst_hours: Local Sidereal Time in hours (used as an hour angle)
    """
    lst = lst_hours * 15.0 * DEG_TO_RAD
    eps = obliquity * DEG_TO_RAD
    phi = latitude_deg * DEG_TO_RAD

    y = -math.cos(lst)
    x = math.tan(eps) * math.tan(phi) + math.sin(lst)
    return normalize_degrees(math.atan2(y, x) * RAD_TO_DEG)


# ---------------------------------------------------------------------------
# Equal houses
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class HouseCusp:
    number:         int
    cusp_longitude: float
    sign:           str
    sign_lord:      str
    start_degree:   float     # degrees within `sign`
    end_degree:     float


def equal_house_cusps(ascendant: float) -> List[float]:
    """House 1 begins exactly at the Ascendant; each house = 30°."""
    return [normalize_degrees(ascendant + HOUSE_SPAN * i) for i in range(12)]


def build_house_cusps(ascendant: float) -> Tuple[HouseCusp, ...]:
    houses = []
    for i, cusp in enumerate(equal_house_cusps(ascendant)):
        sign = sign_of(cusp)
        start = cusp % 30.0
        houses.append(HouseCusp(
            number=i + 1,
            cusp_longitude=cusp,
            sign=sign,
            sign_lord=SIGN_LORDS[sign],
            start_degree=start,
            # every cusp sits at the same degree of its sign
            end_degree=(start + HOUSE_SPAN) % 30.0,
        ))
    return tuple(houses)


def planet_house_number(planet_lon: float, ascendant: float) -> int:
    """
    1-based house whose [cusp, cusp + 30°) window holds the planet,
    wrapping from the 12th house back into the 1st.
    """
    offset = normalize_degrees(planet_lon - ascendant)
    return min(int(offset // HOUSE_SPAN), 11) + 1
