# Kundli Engine - Core modules
from .timescales import to_julian_day, local_sidereal_time, greenwich_mean_sidereal_time
from .ephemeris import get_ayanamsa, compute_planet_longitudes, tropical_to_sidereal
from .houses import compute_ascendant, equal_house_cusps, build_house_cusps
from .nakshatra import find_nakshatra
from .panchang import compute_panchang
from .dasha import build_dasha_tree, subdivide, DashaTree, DashaPeriod, DashaLevel

__all__ = [
    "to_julian_day", "local_sidereal_time", "greenwich_mean_sidereal_time",
    "get_ayanamsa", "compute_planet_longitudes", "tropical_to_sidereal",
    "compute_ascendant", "equal_house_cusps", "build_house_cusps",
    "find_nakshatra",
    "compute_panchang",
    "build_dasha_tree", "subdivide", "DashaTree", "DashaPeriod", "DashaLevel",
]
