"""
kundli.py
=========
Main Kundli (birth chart) assembler.

Orchestrates the time, ayanamsa, ephemeris, house, nakshatra, panchang and
dasha modules to produce a complete, structured Kundli.

Usage:
    from kundli_engine.tools.kundli import generate_kundli

    chart = generate_kundli(
        moment="1990-01-15T10:30:00",   # local time in `timezone`
        latitude=19.0760,               # Mumbai
        longitude=72.8777,
        timezone="Asia/Kolkata",
        ayanamsa=1,                     # 1=Lahiri, 2=Raman, 3=KP
    )
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional, Tuple, Union

from ..config import get_settings
from ..core.dasha import DashaTree, build_dasha_tree, current_dasha_summary
from ..core.ephemeris import (
    SIGN_LORDS, PlanetPosition, build_planet_position, compute_planet_longitudes,
    format_dms, get_ayanamsa, sign_of, tropical_to_sidereal,
)
from ..core.houses import (
    HouseCusp, build_house_cusps, compute_ascendant, mean_obliquity,
    planet_house_number,
)
from ..core.nakshatra import NakshatraPosition, find_nakshatra
from ..core.panchang import compute_panchang
from ..core.timescales import julian_centuries, local_sidereal_time, to_julian_day
from ..errors import DashaRangeError
from ..schemas import BirthMoment

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Chart value objects
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Lagna:
    longitude:      float
    sign:           str
    sign_lord:      str
    degrees:        float
    nakshatra:      str
    nakshatra_pada: int


@dataclass(frozen=True)
class Chart:
    moment_utc:      datetime
    julian_day:      float
    lst_hours:       float
    obliquity:       float
    ayanamsa_scheme: int
    ayanamsa:        float
    lagna:           Lagna
    nakshatra:       NakshatraPosition          # Moon's
    planets:         Tuple[PlanetPosition, ...]
    houses:          Tuple[HouseCusp, ...]
    tithi:           str
    paksha:          str
    yoga:            str
    karana:          str

    def planet(self, name: str) -> PlanetPosition:
        for p in self.planets:
            if p.name == name:
                return p
        raise KeyError(name)

    @property
    def moon_sign(self) -> str:
        return self.planet("Moon").sign

    @property
    def sun_sign(self) -> str:
        return self.planet("Sun").sign

    def to_dict(self) -> dict:
        return {
            "meta": {
                "moment_utc": self.moment_utc.isoformat(),
                "julian_day": self.julian_day,
                "lst_hours": self.lst_hours,
                "obliquity": self.obliquity,
                "ayanamsa_scheme": self.ayanamsa_scheme,
                "ayanamsa": self.ayanamsa,
            },
            "lagna": {
                "sign": self.lagna.sign,
                "sign_lord": self.lagna.sign_lord,
                "longitude": self.lagna.longitude,
                "degrees": self.lagna.degrees,
                "degree_formatted": format_dms(self.lagna.degrees),
                "nakshatra": self.lagna.nakshatra,
                "nakshatra_pada": self.lagna.nakshatra_pada,
            },
            "nakshatra": {
                "name": self.nakshatra.name,
                "lord": self.nakshatra.lord,
                "pada": self.nakshatra.pada,
            },
            "moon_sign": self.moon_sign,
            "sun_sign": self.sun_sign,
            "planets": {
                p.name: {
                    "longitude": p.sidereal_longitude,
                    "tropical_longitude": p.tropical_longitude,
                    "sign": p.sign,
                    "sign_lord": p.sign_lord,
                    "degree_in_sign": p.degree_in_sign,
                    "degree_formatted": p.degree_formatted(),
                    "nakshatra": p.nakshatra,
                    "nakshatra_lord": p.nakshatra_lord,
                    "nakshatra_pada": p.nakshatra_pada,
                    "house": p.house,
                    "is_retrograde": p.is_retrograde,
                }
                for p in self.planets
            },
            "houses": [
                {
                    "house": h.number,
                    "cusp_longitude": h.cusp_longitude,
                    "sign": h.sign,
                    "sign_lord": h.sign_lord,
                    "start_degree": h.start_degree,
                    "end_degree": h.end_degree,
                }
                for h in self.houses
            ],
            "panchang": {
                "tithi": self.tithi,
                "paksha": self.paksha,
                "yoga": self.yoga,
                "karana": self.karana,
            },
        }


# ---------------------------------------------------------------------------
# Main assembler
# ---------------------------------------------------------------------------

def compute_chart(birth: BirthMoment) -> Chart:
    """Sidereal equal-house chart for a validated birth moment."""
    instant = birth.utc
    jd = to_julian_day(instant)
    T = julian_centuries(jd)

    # ---- Ayanamsa ----
    ayanamsa = get_ayanamsa(jd, birth.ayanamsa)

    # ---- Lagna and houses ----
    lst = local_sidereal_time(jd, birth.longitude)
    obliquity = mean_obliquity(T)
    asc = tropical_to_sidereal(compute_ascendant(lst, birth.latitude, obliquity), ayanamsa)
    houses = build_house_cusps(asc)

    # ---- Planets ----
    planets = tuple(
        build_planet_position(name, trop, sid, planet_house_number(sid, asc))
        for name, (trop, sid) in compute_planet_longitudes(jd, ayanamsa).items()
    )
    sun = planets[0]
    moon = planets[1]

    panchang = compute_panchang(sun.sidereal_longitude, moon.sidereal_longitude)

    lagna_sign = sign_of(asc)
    lagna_nak = find_nakshatra(asc)
    lagna = Lagna(
        longitude=asc,
        sign=lagna_sign,
        sign_lord=SIGN_LORDS[lagna_sign],
        degrees=asc % 30.0,
        nakshatra=lagna_nak.name,
        nakshatra_pada=lagna_nak.pada,
    )

    logger.debug("chart jd=%.6f ayanamsa=%.6f lagna=%.6f (%s)",
                 jd, ayanamsa, asc, lagna_sign)

    return Chart(
        moment_utc=instant,
        julian_day=jd,
        lst_hours=lst,
        obliquity=obliquity,
        ayanamsa_scheme=birth.ayanamsa,
        ayanamsa=ayanamsa,
        lagna=lagna,
        nakshatra=find_nakshatra(moon.sidereal_longitude),
        planets=planets,
        houses=houses,
        tithi=panchang.tithi,
        paksha=panchang.paksha,
        yoga=panchang.yoga,
        karana=panchang.karana,
    )


def compute_dasha(chart: Chart, cycles: Optional[int] = None,
                  apply_balance: Optional[bool] = None) -> DashaTree:
    """
    Vimshottari timeline from the chart's birth instant and Moon nakshatra.

    With apply_balance the first Mahadasha is treated as partly spent at
    birth, in proportion to the Moon's progress through its nakshatra.
    """
    settings = get_settings()
    if cycles is None:
        cycles = settings.dasha_cycles
    if apply_balance is None:
        apply_balance = settings.apply_dasha_balance

    elapsed = 0.0
    if apply_balance:
        nak = chart.nakshatra
        elapsed = (chart.planet("Moon").sidereal_longitude - nak.start) / nak.width
        elapsed = min(max(elapsed, 0.0), 0.999999)

    return build_dasha_tree(chart.moment_utc, chart.nakshatra.lord,
                            cycles=cycles, elapsed_fraction=elapsed)


def generate_kundli(
    moment: Union[str, datetime],
    latitude: float,
    longitude: float,
    timezone_label: Optional[str] = None,
    ayanamsa: Optional[int] = None,
    on_date: Optional[datetime] = None,
    dasha_depth: int = 2,
) -> dict:
    """
    Generate a complete Kundli (birth chart) as a plain dict.

    Args:
        moment: birth date-time, LOCAL time in `timezone_label`
            (ISO string or datetime)
        latitude: degrees, positive = North
        longitude: degrees, positive = East
        timezone_label: IANA zone, default from settings
        ayanamsa: 1=Lahiri, 2=Raman, 3=KP, default from settings
        on_date: instant for the "current" dasha (default: now)
        dasha_depth: 1–4 levels of the timeline to include

    Raises:
        InvalidBirthMoment: rejected input, nothing is computed
    """
    data = {"moment": moment, "latitude": latitude, "longitude": longitude}
    if timezone_label is not None:
        data["timezone"] = timezone_label
    if ayanamsa is not None:
        data["ayanamsa"] = ayanamsa
    birth = BirthMoment.create(**data)

    chart = compute_chart(birth)
    tree = compute_dasha(chart)

    if on_date is None:
        on_date = datetime.now(timezone.utc)
    try:
        current = current_dasha_summary(tree, on_date)
    except DashaRangeError:
        logger.info("no running dasha at %s for birth %s", on_date, birth.utc)
        current = None

    result = chart.to_dict()
    result["meta"]["input"] = {
        "moment": birth.moment.isoformat(),
        "latitude": birth.latitude,
        "longitude": birth.longitude,
        "timezone": birth.timezone,
        "ayanamsa": birth.ayanamsa,
        "house_system": "equal",
    }
    result["dasha"] = {
        "system": "Vimshottari",
        "current": current,
        "timeline": tree.to_dict(depth=dasha_depth),
    }
    return result
