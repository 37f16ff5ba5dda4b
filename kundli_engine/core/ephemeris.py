"""
ephemeris.py  —  Mean-element planetary longitudes
===================================================
Tropical longitudes of the nine grahas from truncated mean-motion
polynomials in T (Julian centuries since J2000.0):

    L = base + rate*T + quad*T^2      (mod 360)

Rahu is the mean lunar node (regressing); Ketu is always exactly
opposite Rahu. Sidereal longitude = tropical - ayanamsa (mod 360).

Accuracy ceiling:
  This is a mean-element model, not a perturbation ephemeris. Equation
  of centre, aberration, nutation and the Earth->planet geocentric
  conversion are absent, so Mercury..Saturn can be off by
  many degrees. Latitude, distance and speed are reported as 0.0 and
  retrograde as False.
"""

import logging
from dataclasses import dataclass
from types import MappingProxyType
from typing import Dict, Mapping, Tuple

from .nakshatra import find_nakshatra
from .timescales import julian_centuries, normalize_degrees

logger = logging.getLogger(__name__)

# ── Zodiac ──────────────────────────────────────────────────────

SIGNS = ("Aries", "Taurus", "Gemini", "Cancer", "Leo", "Virgo",
         "Libra", "Scorpio", "Sagittarius", "Capricorn", "Aquarius", "Pisces")

SIGN_LORDS: Mapping[str, str] = MappingProxyType({
    "Aries":       "Mars",
    "Taurus":      "Venus",
    "Gemini":      "Mercury",
    "Cancer":      "Moon",
    "Leo":         "Sun",
    "Virgo":       "Mercury",
    "Libra":       "Venus",
    "Scorpio":     "Mars",
    "Sagittarius": "Jupiter",
    "Capricorn":   "Saturn",
    "Aquarius":    "Saturn",
    "Pisces":      "Jupiter",
})

PLANETS = ("Sun", "Moon", "Mars", "Mercury", "Jupiter",
           "Venus", "Saturn", "Rahu", "Ketu")


def sign_index(longitude: float) -> int:
    return int(longitude // 30.0) % 12


def sign_of(longitude: float) -> str:
    return SIGNS[sign_index(longitude)]


# ── Ayanamsa ────────────────────────────────────────────────────

LAHIRI, RAMAN, KP = 1, 2, 3

AYANAMSA_NAMES: Mapping[int, str] = MappingProxyType({
    LAHIRI: "lahiri",
    RAMAN:  "raman",
    KP:     "kp",
})

_PRECESSION  = 50.2388 / 3600.0
_ACCEL       = 0.000111 / 3600.0

# scheme -> (value at J2000, linear coefficient, quadratic coefficient)
AYANAMSA: Mapping[int, Tuple[float, float, float]] = MappingProxyType({
    LAHIRI: (23.85305556, _PRECESSION,  _ACCEL),
    RAMAN:  (22.50694444, _PRECESSION,  0.0),
    KP:     (23.85305556, _PRECESSION, -_ACCEL),
})

# any other scheme id: Lahiri base and precession, no quadratic term
DEFAULT_AYANAMSA = (23.85305556, _PRECESSION, 0.0)


def get_ayanamsa(jd: float, scheme: int = LAHIRI) -> float:
    """Ayanamsa in degrees; unknown schemes use the linear Lahiri polynomial."""
    coeffs = AYANAMSA.get(scheme)
    if coeffs is None:
        logger.debug("ayanamsa scheme %r not tabulated, using linear Lahiri", scheme)
        coeffs = DEFAULT_AYANAMSA
    base, rate, quad = coeffs
    T = julian_centuries(jd)
    return base + rate * T + quad * T * T


def tropical_to_sidereal(lon: float, ayanamsa: float) -> float:
    return normalize_degrees(lon - ayanamsa + 360.0)


# ── Mean longitudes ─────────────────────────────────────────────

# planet -> (base, rate per century, quadratic)
MEAN_ELEMENTS: Mapping[str, Tuple[float, float, float]] = MappingProxyType({
    "Sun":     (280.46646,   36000.76983,      0.0003032),
    "Moon":    (218.3164477, 481267.88123421, -0.0015786),
    "Mars":    (355.433,     19140.299,        0.0),
    "Mercury": (252.250906,  149472.6746358,  -0.00000536),
    "Jupiter": (34.351519,   3034.9057,        0.0),
    "Venus":   (181.979801,  58517.815676,     0.00000165),
    "Saturn":  (50.077444,   1222.113848,      0.0),
    # mean ascending node of the Moon
    "Rahu":    (125.0445222, -1934.1362608,    0.0020708),
})


def mean_longitude(planet: str, T: float) -> float:
    base, rate, quad = MEAN_ELEMENTS[planet]
    return normalize_degrees(base + rate * T + quad * T * T)


def compute_planet_longitudes(jd: float, ayanamsa: float) -> Dict[str, Tuple[float, float]]:
    """
    Returns {planet: (tropical_longitude, sidereal_longitude)} in PLANETS order.
    """
    T = julian_centuries(jd)
    longitudes = {}
    for planet in PLANETS[:-1]:
        trop = mean_longitude(planet, T)
        longitudes[planet] = (trop, tropical_to_sidereal(trop, ayanamsa))

    rahu_trop, rahu_sid = longitudes["Rahu"]
    longitudes["Ketu"] = (normalize_degrees(rahu_trop + 180.0),
                          normalize_degrees(rahu_sid + 180.0))
    return longitudes


# ── Planet positions ────────────────────────────────────────────

@dataclass(frozen=True)
class PlanetPosition:
    name:               str
    tropical_longitude: float
    sidereal_longitude: float
    sign_index:         int
    sign:               str
    sign_lord:          str
    degree_in_sign:     float
    nakshatra:          str
    nakshatra_lord:     str
    nakshatra_pada:     int
    house:              int
    is_retrograde:      bool = False
    latitude:           float = 0.0
    distance:           float = 0.0
    speed:              float = 0.0

    def degree_formatted(self) -> str:
        return format_dms(self.degree_in_sign)


def build_planet_position(name: str, tropical: float, sidereal: float,
                          house: int) -> PlanetPosition:
    idx = sign_index(sidereal)
    nak = find_nakshatra(sidereal)
    return PlanetPosition(
        name=name,
        tropical_longitude=tropical,
        sidereal_longitude=sidereal,
        sign_index=idx,
        sign=SIGNS[idx],
        sign_lord=SIGN_LORDS[SIGNS[idx]],
        degree_in_sign=sidereal % 30.0,
        nakshatra=nak.name,
        nakshatra_lord=nak.lord,
        nakshatra_pada=nak.pada,
        house=house,
    )


def format_dms(degrees: float) -> str:
    """Format decimal degrees as D°M'S\" string."""
    # round once, in tenths of an arc-second; seconds stay below 60
    tenths = int(round(degrees * 36000))
    d, rem = divmod(tenths, 36000)
    m, rem = divmod(rem, 600)
    return f"{d}°{m}'{rem / 10:.1f}\""
