"""
dasha.py
========
Vimshottari Dasha timeline.

Vimshottari ("120 years") is the most widely used dasha system in Vedic astrology.
The first Mahadasha lord is the lord of the Moon's nakshatra at birth.

Dasha sequence: Ketu (7) → Venus (20) → Sun (6) → Moon (10) → Mars (7)
                → Rahu (18) → Jupiter (16) → Saturn (19) → Mercury (17)
Total = 120 years

Four nested levels:
    Mahadasha → Antardasha → Pratyantardasha → Sukshmadasha
Each period of lord L and length D splits into 9 sub-periods that cycle the
sequence starting at L, sub-lord S lasting D * years[S] / 120.

Years are Julian years of 365.25 days, so every boundary is a fixed number
of days from birth and reproducible to the microsecond. Periods are
half-open [start, end): an instant on a boundary belongs to the period
that starts there.

Only the Mahadashas are stored. Lower levels are generated on demand by
subdivide(); a query descends one level at a time.

Source: Parashara, B.V. "Brihat Parashara Hora Shastra" (classical text)
"""

import logging
from bisect import bisect_right
from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import IntEnum
from types import MappingProxyType
from typing import List, Mapping, Optional, Sequence, Tuple

from ..errors import DashaRangeError
from .timescales import as_utc

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

DASHA_LORDS = ("Ketu", "Venus", "Sun", "Moon", "Mars",
               "Rahu", "Jupiter", "Saturn", "Mercury")

DASHA_YEARS: Mapping[str, int] = MappingProxyType({
    "Ketu":    7,
    "Venus":   20,
    "Sun":     6,
    "Moon":    10,
    "Mars":    7,
    "Rahu":    18,
    "Jupiter": 16,
    "Saturn":  19,
    "Mercury": 17,
})

TOTAL_YEARS   = 120.0  # sum of all dasha periods
DAYS_PER_YEAR = 365.25
FALLBACK_LORD = "Moon"


class DashaLevel(IntEnum):
    MAHA       = 1
    ANTAR      = 2
    PRATYANTAR = 3
    SUKSHMA    = 4

    @property
    def label(self) -> str:
        return _LEVEL_LABELS[self]


_LEVEL_LABELS = {
    DashaLevel.MAHA:       "mahadasha",
    DashaLevel.ANTAR:      "antardasha",
    DashaLevel.PRATYANTAR: "pratyantardasha",
    DashaLevel.SUKSHMA:    "sukshmadasha",
}


# ---------------------------------------------------------------------------
# Periods
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class DashaPeriod:
    lord:           str
    level:          DashaLevel
    start:          datetime
    end:            datetime
    duration_years: float

    def contains(self, instant: datetime) -> bool:
        return self.start <= instant < self.end

    def to_dict(self) -> dict:
        return {
            "lord": self.lord,
            "level": self.level.label,
            "start": self.start.isoformat(),
            "end": self.end.isoformat(),
            "duration_years": self.duration_years,
        }


@dataclass(frozen=True)
class ActiveDasha:
    """The chain of periods running at one instant, Mahadasha first."""
    mahadasha:       DashaPeriod
    antardasha:      DashaPeriod
    pratyantardasha: DashaPeriod
    sukshmadasha:    DashaPeriod

    @property
    def periods(self) -> Tuple[DashaPeriod, ...]:
        return (self.mahadasha, self.antardasha,
                self.pratyantardasha, self.sukshmadasha)

    @property
    def lords(self) -> Tuple[str, ...]:
        return tuple(p.lord for p in self.periods)

    def to_dict(self) -> dict:
        return {p.level.label: p.to_dict() for p in self.periods}


# ---------------------------------------------------------------------------
# Helper functions
# ---------------------------------------------------------------------------

def years_to_days(years: float) -> float:
    return years * DAYS_PER_YEAR


def dasha_sequence_from(lord: str) -> Tuple[str, ...]:
    """Return dasha sequence starting from given lord."""
    idx = DASHA_LORDS.index(lord)
    return DASHA_LORDS[idx:] + DASHA_LORDS[:idx]


def resolve_start_lord(lord: Optional[str]) -> str:
    """
    The Moon's nakshatra lord, or FALLBACK_LORD when it is missing or not
    one of the nine dasha lords.
    """
    if lord in DASHA_YEARS:
        return lord
    logger.warning("nakshatra lord %r is not a dasha lord, starting from %s",
                   lord, FALLBACK_LORD)
    return FALLBACK_LORD


def _periods_from(origin: datetime, lords: Sequence[str], durations: Sequence[float],
                  level: DashaLevel, end: Optional[datetime] = None) -> Tuple[DashaPeriod, ...]:
    """
    Lay periods end to end from `origin`. Boundaries are offsets from
    `origin` (not from the previous boundary) so rounding never accumulates.
    If `end` is given the last period is pinned to it.
    """
    periods = []
    start = origin
    elapsed = 0.0
    last = len(lords) - 1
    for i, (lord, years) in enumerate(zip(lords, durations)):
        elapsed += years
        if i == last and end is not None:
            stop = end
        else:
            stop = origin + timedelta(days=years_to_days(elapsed))
        periods.append(DashaPeriod(lord, level, start, stop, years))
        start = stop
    return tuple(periods)


# ---------------------------------------------------------------------------
# Core Vimshottari calculation
# ---------------------------------------------------------------------------

def build_mahadashas(birth: datetime, start_lord: Optional[str], cycles: int = 1,
                     elapsed_fraction: float = 0.0) -> Tuple[DashaPeriod, ...]:
    """
    Mahadasha periods from birth, 9 per 120-year cycle.

    Args:
        birth: birth instant (naive = UTC)
        start_lord: lord of the Moon's nakshatra at birth
        cycles: number of complete 120-year cycles to lay out
        elapsed_fraction: share of the first Mahadasha already spent at
            birth. 0.0 (default) gives the first Mahadasha its full length;
            a positive value moves its start before birth by that share.
    """
    if cycles < 1:
        raise ValueError(f"cycles must be >= 1, got {cycles}")
    if not 0.0 <= elapsed_fraction < 1.0:
        raise ValueError(f"elapsed_fraction must be in [0, 1), got {elapsed_fraction}")

    lord = resolve_start_lord(start_lord)
    birth = as_utc(birth)
    spent = DASHA_YEARS[lord] * elapsed_fraction
    origin = birth - timedelta(days=years_to_days(spent))

    lords = dasha_sequence_from(lord) * cycles
    durations = [float(DASHA_YEARS[l]) for l in lords]
    return _periods_from(origin, lords, durations, DashaLevel.MAHA)


def subdivide(period: DashaPeriod) -> Tuple[DashaPeriod, ...]:
    """
    The 9 sub-periods of a period, starting with its own lord.
    They tile [period.start, period.end) with no gap or overlap.
    """
    if period.level is DashaLevel.SUKSHMA:
        return ()
    lords = dasha_sequence_from(period.lord)
    durations = [period.duration_years * DASHA_YEARS[l] / TOTAL_YEARS for l in lords]
    return _periods_from(period.start, lords, durations,
                         DashaLevel(period.level + 1), end=period.end)


def _locate(periods: Sequence[DashaPeriod], instant: datetime) -> DashaPeriod:
    idx = bisect_right([p.start for p in periods], instant) - 1
    if idx < 0 or not periods[idx].contains(instant):
        raise DashaRangeError(
            f"{instant.isoformat()} is outside "
            f"[{periods[0].start.isoformat()}, {periods[-1].end.isoformat()})"
        )
    return periods[idx]


# ---------------------------------------------------------------------------
# Timeline
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class DashaTree:
    birth:      datetime
    moon_lord:  str
    mahadashas: Tuple[DashaPeriod, ...]

    @property
    def start(self) -> datetime:
        return self.birth

    @property
    def end(self) -> datetime:
        return self.mahadashas[-1].end

    @property
    def total_years(self) -> float:
        return sum(p.duration_years for p in self.mahadashas)

    def children(self, period: DashaPeriod) -> Tuple[DashaPeriod, ...]:
        return subdivide(period)

    def active_at(self, instant: datetime) -> ActiveDasha:
        """Mahadasha, Antardasha, Pratyantardasha and Sukshmadasha at `instant`."""
        instant = as_utc(instant)
        if not self.start <= instant < self.end:
            raise DashaRangeError(
                f"{instant.isoformat()} is outside the timeline "
                f"[{self.start.isoformat()}, {self.end.isoformat()})"
            )
        path: List[DashaPeriod] = []
        candidates = self.mahadashas
        for _level in DashaLevel:
            period = _locate(candidates, instant)
            path.append(period)
            candidates = subdivide(period)
        return ActiveDasha(*path)

    def to_dict(self, depth: int = 2) -> dict:
        """
        Serialise the timeline; depth 1 = Mahadashas only, 4 = down to
        Sukshmadashas (6561 leaves per cycle).
        """
        if not 1 <= depth <= len(DashaLevel):
            raise ValueError(f"depth must be 1-4, got {depth}")

        def _expand(period: DashaPeriod) -> dict:
            data = period.to_dict()
            if period.level < depth:
                data["children"] = [_expand(c) for c in subdivide(period)]
            return data

        return {
            "system": "Vimshottari",
            "birth": self.birth.isoformat(),
            "moon_lord": self.moon_lord,
            "total_years": self.total_years,
            "mahadashas": [_expand(p) for p in self.mahadashas],
        }


def build_dasha_tree(birth: datetime, moon_lord: Optional[str], cycles: int = 1,
                     elapsed_fraction: float = 0.0) -> DashaTree:
    mahadashas = build_mahadashas(birth, moon_lord, cycles, elapsed_fraction)
    lord = mahadashas[0].lord
    logger.debug("dasha tree from %s: %d mahadashas starting with %s",
                 as_utc(birth).isoformat(), len(mahadashas), lord)
    return DashaTree(birth=as_utc(birth), moon_lord=lord, mahadashas=mahadashas)


def current_dasha_summary(tree: DashaTree, on_date: datetime) -> dict:
    """
    Return the active lords at every level for a given instant.
    """
    active = tree.active_at(on_date)
    return {
        "current_mahadasha": active.mahadasha.lord,
        "current_antardasha": active.antardasha.lord,
        "current_pratyantar": active.pratyantardasha.lord,
        "current_sukshma": active.sukshmadasha.lord,
        "periods": active.to_dict(),
    }
