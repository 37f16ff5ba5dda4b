"""
timescales.py
=============
Civil time -> Julian Day -> sidereal time.

Julian Day is derived from whole milliseconds since the Unix epoch so that
identical instants always give bit-identical day numbers:

    JD = ms / 86_400_000 + 2440587.5

Sidereal time follows Meeus Ch. 12, Eq. 12.4.
"""

from datetime import datetime, timedelta, timezone

J2000           = 2451545.0          # Julian Date of J2000.0 epoch
UNIX_EPOCH_JD   = 2440587.5          # Julian Date of 1970-01-01T00:00Z
DAYS_PER_CENTURY = 36525.0
MS_PER_DAY      = 86_400_000

UNIX_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)
_ONE_MS = timedelta(milliseconds=1)


def normalize_degrees(x: float) -> float:
    """Normalize angle to [0, 360)."""
    x = x % 360.0
    # -1e-20 % 360.0 rounds up to 360.0
    return 0.0 if x >= 360.0 else x


def normalize_hours(x: float) -> float:
    """Normalize an hour angle to [0, 24)."""
    x = x % 24.0
    return 0.0 if x >= 24.0 else x


def as_utc(instant: datetime) -> datetime:
    """Naive datetimes are taken to be UTC already."""
    if instant.tzinfo is None:
        return instant.replace(tzinfo=timezone.utc)
    return instant.astimezone(timezone.utc)


# ---------------------------------------------------------------------------
# Julian Day
# ---------------------------------------------------------------------------

def to_julian_day(instant: datetime) -> float:
    millis = (as_utc(instant) - UNIX_EPOCH) // _ONE_MS
    return millis / MS_PER_DAY + UNIX_EPOCH_JD


def jd_to_datetime(jd: float) -> datetime:
    """Inverse of to_julian_day, to the nearest microsecond."""
    return UNIX_EPOCH + timedelta(days=jd - UNIX_EPOCH_JD)


def julian_centuries(jd: float) -> float:
    """Centuries since J2000.0 (the T of every polynomial in this engine)."""
    return (jd - J2000) / DAYS_PER_CENTURY


# ---------------------------------------------------------------------------
# Sidereal time
# ---------------------------------------------------------------------------

def greenwich_mean_sidereal_time(jd: float) -> float:
    """Greenwich Mean Sidereal Time in degrees."""
    T = julian_centuries(jd)
    theta = (280.46061837
             + 360.98564736629 * (jd - J2000)
             + 0.000387933 * T * T
             - T * T * T / 38710000.0)
    return normalize_degrees(theta)


def local_sidereal_time(jd: float, longitude_deg: float) -> float:
    """
    Local Sidereal Time in hours, [0, 24).
    longitude_deg: geographic longitude, positive East
    """
    gmst_hours = greenwich_mean_sidereal_time(jd) / 15.0
    return normalize_hours(gmst_hours + longitude_deg / 15.0)
