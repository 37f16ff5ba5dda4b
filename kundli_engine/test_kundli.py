"""
test_kundli.py
==============
Chart-side test suite for the Kundli Engine.

Covers:
  - Julian Day and sidereal time
  - Ayanamsa schemes
  - Mean-element longitudes, Rahu/Ketu opposition
  - Nakshatra / pada lookup
  - Ascendant and equal houses
  - Panchang labels
  - Full chart assembly (Mumbai 1990 reference birth), determinism
  - Input validation and configuration

Run with: python -m pytest kundli_engine -v
"""

import logging
import math
from datetime import datetime, timedelta, timezone

import pytest

from kundli_engine import (
    BirthMoment, InvalidBirthMoment, compute_chart, compute_dasha, generate_kundli,
)
from kundli_engine.config import get_settings
from kundli_engine.core.dasha import DASHA_LORDS
from kundli_engine.core.ephemeris import (
    PLANETS, SIGN_LORDS, SIGNS, compute_planet_longitudes, format_dms,
    get_ayanamsa, sign_of, tropical_to_sidereal,
)
from kundli_engine.core.houses import (
    build_house_cusps, compute_ascendant, equal_house_cusps, mean_obliquity,
    planet_house_number,
)
from kundli_engine.core.nakshatra import (
    NAKSHATRA_SPAN, NAKSHATRA_TABLE, find_nakshatra, nakshatra_by_name,
)
from kundli_engine.core.panchang import compute_karana, compute_tithi, compute_yoga
from kundli_engine.core.timescales import (
    J2000, greenwich_mean_sidereal_time, jd_to_datetime, local_sidereal_time,
    normalize_degrees, to_julian_day,
)

UTC = timezone.utc

# ---------------------------------------------------------------------------
# Tolerance for numeric assertions
# ---------------------------------------------------------------------------
JD_TOLERANCE       = 1e-9
AYANAMSA_TOLERANCE = 1e-9

# ---------------------------------------------------------------------------
# Test Vectors
# ---------------------------------------------------------------------------

MUMBAI_1990 = {
    "moment": "1990-01-15T10:30:00",
    "latitude": 19.0760, "longitude": 72.8777,
    "timezone": "Asia/Kolkata", "ayanamsa": 1,
}

TEST_VECTORS = [
    {
        "id": "TV-01",
        "description": "Mumbai, IST, winter",
        "input": MUMBAI_1990,
    },
    {
        "id": "TV-02",
        "description": "New York birth — EST (UTC-5), Raman ayanamsa",
        "input": {"moment": "1985-01-22T08:45:00", "latitude": 40.7128,
                  "longitude": -74.0060, "timezone": "America/New_York", "ayanamsa": 2},
    },
    {
        "id": "TV-03",
        "description": "Leap year birth — Feb 29, KP ayanamsa",
        "input": {"moment": "2000-02-29T12:00:00", "latitude": 28.6139,
                  "longitude": 77.2090, "timezone": "Asia/Kolkata", "ayanamsa": 3},
    },
    {
        "id": "TV-04",
        "description": "High latitude birth — Oslo",
        "input": {"moment": "2000-06-21T23:59:00", "latitude": 59.9139,
                  "longitude": 10.7522, "timezone": "Europe/Oslo", "ayanamsa": 1},
    },
    {
        "id": "TV-05",
        "description": "Southern hemisphere — Sydney",
        "input": {"moment": "1995-12-25T06:00:00", "latitude": -33.8688,
                  "longitude": 151.2093, "timezone": "Australia/Sydney", "ayanamsa": 1},
    },
    {
        "id": "TV-06",
        "description": "Date-line edges — lon ±180, lat ±90",
        "input": {"moment": "2010-12-31T23:59:59", "latitude": -90.0,
                  "longitude": 180.0, "timezone": "UTC", "ayanamsa": 4},
    },
]


@pytest.fixture
def mumbai_chart():
    return compute_chart(BirthMoment.create(**MUMBAI_1990))


@pytest.fixture
def clean_settings():
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


# ---------------------------------------------------------------------------
# Julian Day / sidereal time
# ---------------------------------------------------------------------------

@pytest.mark.parametrize("instant, expected_jd", [
    (datetime(2000, 1, 1, 12, tzinfo=UTC), 2451545.0),   # J2000.0 definition
    (datetime(1970, 1, 1, tzinfo=UTC),     2440587.5),   # Unix epoch
    (datetime(2023, 6, 21, tzinfo=UTC),    2460116.5),   # Recent solstice
    (datetime(2000, 1, 1, 12),             2451545.0),   # naive = UTC
])
def test_julian_day(instant, expected_jd):
    assert abs(to_julian_day(instant) - expected_jd) < JD_TOLERANCE


def test_julian_day_respects_offset():
    ist = timezone(timedelta(hours=5, minutes=30))
    assert to_julian_day(datetime(2000, 1, 1, 17, 30, tzinfo=ist)) == J2000


def test_jd_to_datetime_inverse():
    instant = datetime(1990, 1, 15, 5, 0, 0, tzinfo=UTC)
    # a float JD near 2.4e6 resolves to tens of microseconds
    assert abs(jd_to_datetime(to_julian_day(instant)) - instant) < timedelta(milliseconds=1)


def test_gmst_at_j2000():
    assert math.isclose(greenwich_mean_sidereal_time(J2000), 280.46061837)


@pytest.mark.parametrize("longitude", [-180.0, -74.006, 0.0, 72.8777, 180.0])
def test_local_sidereal_time_in_range(longitude):
    for day in range(0, 400, 37):
        lst = local_sidereal_time(J2000 + day + 0.123, longitude)
        assert 0.0 <= lst < 24.0


def test_local_sidereal_time_adds_longitude_hours():
    gmst_h = greenwich_mean_sidereal_time(J2000) / 15.0
    assert math.isclose(local_sidereal_time(J2000, 15.0), (gmst_h + 1.0) % 24.0)


def test_normalize_degrees_never_returns_360():
    assert normalize_degrees(-1e-20) == 0.0
    assert normalize_degrees(360.0) == 0.0
    assert normalize_degrees(-30.0) == 330.0
    assert normalize_degrees(725.0) == 5.0


# ---------------------------------------------------------------------------
# Ayanamsa
# ---------------------------------------------------------------------------

@pytest.mark.parametrize("scheme, expected", [
    (1, 23.85305556),   # Lahiri
    (2, 22.50694444),   # Raman
    (3, 23.85305556),   # KP
])
def test_ayanamsa_at_j2000(scheme, expected):
    assert abs(get_ayanamsa(J2000, scheme) - expected) < AYANAMSA_TOLERANCE


def test_lahiri_and_kp_differ_only_in_quadratic_term():
    jd = J2000 + 36525.0                 # T = 1
    quad = 0.000111 / 3600.0
    # the difference is ~6e-8 of a ~23.9 value, compare absolutely
    assert get_ayanamsa(jd, 1) - get_ayanamsa(jd, 3) == pytest.approx(2 * quad, abs=1e-12)


@pytest.mark.parametrize("scheme", [4, 0, 99])
def test_unknown_ayanamsa_uses_linear_lahiri(scheme):
    jd = J2000 + 36525.0                 # T = 1
    assert get_ayanamsa(jd, scheme) == pytest.approx(23.85305556 + 50.2388 / 3600.0, abs=1e-12)
    assert get_ayanamsa(J2000, scheme) == get_ayanamsa(J2000, 1)


def test_sidereal_is_never_negative():
    assert tropical_to_sidereal(0.0, 23.85) == pytest.approx(336.15)
    assert tropical_to_sidereal(10.0, 10.0) == 0.0
    assert 0.0 <= tropical_to_sidereal(359.9999999, 0.0) < 360.0


# ---------------------------------------------------------------------------
# Planet longitudes
# ---------------------------------------------------------------------------

@pytest.mark.parametrize("days", [-40000.0, -3638.29, 0.0, 1234.5, 36525.0])
def test_all_longitudes_in_range(days):
    longitudes = compute_planet_longitudes(J2000 + days, 23.85)
    assert tuple(longitudes) == PLANETS
    for trop, sid in longitudes.values():
        assert 0.0 <= trop < 360.0
        assert 0.0 <= sid < 360.0


@pytest.mark.parametrize("days", [-40000.0, -3638.29, 0.0, 1234.5, 36525.0])
def test_ketu_exactly_opposite_rahu(days):
    longitudes = compute_planet_longitudes(J2000 + days, get_ayanamsa(J2000 + days))
    rahu_trop, rahu_sid = longitudes["Rahu"]
    ketu_trop, ketu_sid = longitudes["Ketu"]
    assert ketu_sid == (rahu_sid + 180.0) % 360.0
    assert ketu_trop == (rahu_trop + 180.0) % 360.0


def test_rahu_regresses():
    earlier = compute_planet_longitudes(J2000, 0.0)["Rahu"][0]
    later = compute_planet_longitudes(J2000 + 10.0, 0.0)["Rahu"][0]
    assert (later - earlier) % 360.0 > 180.0


@pytest.mark.parametrize("degrees, expected", [
    (12.5,        "12°30'0.0\""),
    (0.0,         "0°0'0.0\""),
    (29.99999999, "30°0'0.0\""),
    (10.999999,   "11°0'0.0\""),
    (5.5125,      "5°30'45.0\""),
])
def test_format_dms(degrees, expected):
    assert format_dms(degrees) == expected


# ---------------------------------------------------------------------------
# Nakshatra
# ---------------------------------------------------------------------------

@pytest.mark.parametrize("lon, name, lord, pada", [
    (0.0,               "Ashwini",  "Ketu",    1),
    (3.34,              "Ashwini",  "Ketu",    2),
    (13.34,             "Bharani",  "Venus",   1),
    (45.0,              "Rohini",   "Moon",    2),
    (134.8912,          "Purva Phalguni", "Venus", 1),
    (359.9999999,       "Revati",   "Mercury", 4),
    (360.0,             "Ashwini",  "Ketu",    1),
])
def test_find_nakshatra(lon, name, lord, pada):
    nak = find_nakshatra(lon)
    assert (nak.name, nak.lord, nak.pada) == (name, lord, pada)


def test_pada_always_in_range():
    lon = 0.0
    while lon < 360.0:
        assert find_nakshatra(lon).pada in (1, 2, 3, 4)
        lon += 0.05
    assert find_nakshatra(math.nextafter(360.0, 0.0)).pada == 4


def test_nakshatra_table_shape():
    assert len(NAKSHATRA_TABLE) == 27
    for i, nak in enumerate(NAKSHATRA_TABLE):
        assert nak.lord == DASHA_LORDS[i % 9]
        assert math.isclose(nak.width, NAKSHATRA_SPAN)
    assert math.isclose(NAKSHATRA_TABLE[-1].end, 360.0)


def test_nakshatra_by_name():
    assert nakshatra_by_name("rohini").lord == "Moon"
    with pytest.raises(KeyError):
        nakshatra_by_name("Pluto")


# ---------------------------------------------------------------------------
# Ascendant and houses
# ---------------------------------------------------------------------------

def test_ascendant_in_range():
    obl = mean_obliquity(0.0)
    for lat in (-66.0, -33.9, 0.0, 19.076, 59.9):
        for step in range(48):
            asc = compute_ascendant(step * 0.5, lat, obl)
            assert 0.0 <= asc < 360.0


def test_ascendant_at_equator_and_lst_zero():
    # atan2(-1, 0) = -90° -> 270°
    assert math.isclose(compute_ascendant(0.0, 0.0, mean_obliquity(0.0)), 270.0)


def test_mean_obliquity_at_j2000():
    assert mean_obliquity(0.0) == 23.43929111


def test_equal_house_cusps_wrap():
    cusps = equal_house_cusps(350.0)
    assert cusps[0] == 350.0
    assert cusps[1] == 20.0
    assert cusps[11] == 320.0
    for a, b in zip(cusps, cusps[1:] + cusps[:1]):
        assert math.isclose((b - a) % 360.0, 30.0)


def test_house_cusp_details():
    houses = build_house_cusps(350.0)
    assert [h.number for h in houses] == list(range(1, 13))
    assert houses[0].sign == "Pisces" and houses[0].sign_lord == "Jupiter"
    assert houses[1].sign == "Aries" and houses[1].sign_lord == "Mars"
    for h in houses:
        assert h.start_degree == pytest.approx(20.0)
        assert h.end_degree == pytest.approx(20.0)


@pytest.mark.parametrize("planet, asc, house", [
    (350.0,  350.0, 1),
    (19.99,  350.0, 1),
    (20.0,   350.0, 2),
    (349.99, 350.0, 12),
    (170.0,  350.0, 7),
    (0.0,    0.0,   1),
    (359.9,  0.0,   12),
])
def test_planet_house_number(planet, asc, house):
    assert planet_house_number(planet, asc) == house


# ---------------------------------------------------------------------------
# Panchang
# ---------------------------------------------------------------------------

@pytest.mark.parametrize("sun, moon, exp_tithi, exp_paksha", [
    (0.0,  6.0,   "Pratipada", "Shukla"),
    (0.0,  168.0, "Purnima",   "Shukla"),
    (0.0,  181.0, "Pratipada", "Krishna"),
    (0.0,  12.0,  "Dvitiya",   "Shukla"),
    (10.0, 5.0,   "Amavasya",  "Krishna"),
])
def test_tithi(sun, moon, exp_tithi, exp_paksha):
    tithi = compute_tithi(sun, moon)
    assert tithi["name"] == exp_tithi
    assert tithi["paksha"] == exp_paksha


def test_yoga_and_karana():
    assert compute_yoga(0.0, 0.0)["name"] == "Vishkumbha"
    assert compute_yoga(200.0, 159.9)["name"] == "Vaidhriti"
    assert compute_karana(0.0, 3.0)["name"] == "Kimstughna"
    assert compute_karana(0.0, 7.0)["name"] == "Bava"
    assert compute_karana(0.0, 355.0)["name"] == "Nagava"


# ---------------------------------------------------------------------------
# Full chart
# ---------------------------------------------------------------------------

def test_mumbai_1990_structure(mumbai_chart):
    chart = mumbai_chart
    assert len(chart.planets) == 9
    assert tuple(p.name for p in chart.planets) == PLANETS
    assert len(chart.houses) == 12
    assert chart.lagna.sign in SIGNS
    assert chart.lagna.sign_lord == SIGN_LORDS[chart.lagna.sign]
    assert 23.8 <= chart.ayanamsa <= 24.2
    assert chart.moment_utc == datetime(1990, 1, 15, 5, 0, tzinfo=UTC)


def test_mumbai_1990_positions(mumbai_chart):
    chart = mumbai_chart
    assert chart.sun_sign == "Capricorn"
    assert chart.moon_sign == "Leo"
    assert chart.nakshatra.name == "Purva Phalguni"
    assert chart.nakshatra.lord == "Venus"
    assert chart.nakshatra.pada == 1
    assert (chart.tithi, chart.paksha) == ("Chaturthi", "Krishna")
    assert chart.yoga == "Saubhagya"
    assert chart.karana == "Balava"


@pytest.mark.parametrize("tv", TEST_VECTORS, ids=[tv["id"] for tv in TEST_VECTORS])
def test_chart_invariants(tv):
    chart = compute_chart(BirthMoment.create(**tv["input"]))

    assert 0.0 <= chart.lagna.longitude < 360.0
    assert chart.houses[0].cusp_longitude == chart.lagna.longitude
    for h in chart.houses:
        assert 0.0 <= h.cusp_longitude < 360.0
        assert h.sign == sign_of(h.cusp_longitude)

    for p in chart.planets:
        assert 0.0 <= p.sidereal_longitude < 360.0
        assert p.sign == SIGNS[int(p.sidereal_longitude // 30) % 12]
        assert p.sign_lord == SIGN_LORDS[p.sign]
        assert p.nakshatra_pada in (1, 2, 3, 4)
        assert 1 <= p.house <= 12
        assert p.house == planet_house_number(p.sidereal_longitude, chart.lagna.longitude)
        assert p.is_retrograde is False
        assert (p.latitude, p.distance, p.speed) == (0.0, 0.0, 0.0)

    rahu, ketu = chart.planet("Rahu"), chart.planet("Ketu")
    assert ketu.sidereal_longitude == (rahu.sidereal_longitude + 180.0) % 360.0
    assert chart.nakshatra == find_nakshatra(chart.planet("Moon").sidereal_longitude)


def test_lagna_is_sidereal(mumbai_chart):
    chart = mumbai_chart
    tropical = compute_ascendant(chart.lst_hours, MUMBAI_1990["latitude"], chart.obliquity)
    assert chart.lagna.longitude == tropical_to_sidereal(tropical, chart.ayanamsa)
    assert chart.lagna.longitude != tropical


def test_chart_is_deterministic():
    first = compute_chart(BirthMoment.create(**MUMBAI_1990))
    second = compute_chart(BirthMoment.create(**MUMBAI_1990))
    assert first == second
    assert first.to_dict() == second.to_dict()


def test_ayanamsa_4_computed_as_linear_lahiri():
    lahiri = compute_chart(BirthMoment.create(**MUMBAI_1990))
    other = compute_chart(BirthMoment.create(**{**MUMBAI_1990, "ayanamsa": 4}))
    assert other.ayanamsa == pytest.approx(lahiri.ayanamsa, abs=1e-8)
    assert other.ayanamsa_scheme == 4


def test_aware_moment_ignores_timezone_label():
    aware = BirthMoment.create(
        moment=datetime(1990, 1, 15, 5, 0, tzinfo=UTC),
        latitude=19.0760, longitude=72.8777, timezone="America/New_York",
    )
    assert compute_chart(aware).julian_day == compute_chart(BirthMoment.create(**MUMBAI_1990)).julian_day


def test_chart_to_dict_shape(mumbai_chart):
    data = mumbai_chart.to_dict()
    assert set(data) >= {"meta", "lagna", "nakshatra", "planets", "houses", "panchang"}
    assert len(data["planets"]) == 9
    assert len(data["houses"]) == 12
    assert data["nakshatra"]["lord"] == "Venus"


def test_chart_dasha_starts_with_moon_nakshatra_lord(mumbai_chart):
    tree = compute_dasha(mumbai_chart, cycles=1, apply_balance=False)
    assert tree.mahadashas[0].lord == mumbai_chart.nakshatra.lord
    assert tree.mahadashas[0].start == mumbai_chart.moment_utc
    assert tree.total_years == 120.0


def test_chart_dasha_with_balance(mumbai_chart):
    tree = compute_dasha(mumbai_chart, apply_balance=True)
    first = tree.mahadashas[0]
    assert first.start < mumbai_chart.moment_utc < first.end
    assert tree.active_at(mumbai_chart.moment_utc).mahadasha is first


def test_generate_kundli_dict():
    result = generate_kundli(
        moment="1990-01-15T10:30:00", latitude=19.0760, longitude=72.8777,
        timezone_label="Asia/Kolkata", ayanamsa=1,
        on_date=datetime(2000, 1, 1, tzinfo=UTC),
    )
    assert result["meta"]["input"]["house_system"] == "equal"
    assert result["dasha"]["current"]["current_mahadasha"] == "Venus"
    timeline = result["dasha"]["timeline"]
    assert len(timeline["mahadashas"]) == 9
    assert len(timeline["mahadashas"][0]["children"]) == 9


def test_generate_kundli_outside_timeline_has_no_current():
    result = generate_kundli(
        moment="1990-01-15T10:30:00", latitude=19.0760, longitude=72.8777,
        on_date=datetime(1980, 1, 1, tzinfo=UTC),
    )
    assert result["dasha"]["current"] is None


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------

@pytest.mark.parametrize("override", [
    {"latitude": 90.0001},
    {"latitude": -91},
    {"longitude": 180.5},
    {"longitude": -181},
    {"latitude": float("nan")},
    {"longitude": float("inf")},
    {"moment": "1990-13-45T10:30:00"},
    {"moment": "not a date"},
    {"timezone": "Mars/Olympus_Mons"},
    # skipped by the spring-forward DST change
    {"moment": "2021-03-14T02:30:00", "timezone": "America/New_York"},
    {"moment": "2021-03-28T02:15:00", "timezone": "Europe/Oslo"},
    {"ayanamsa": 0},
    {"ayanamsa": 5},
])
def test_rejected_input(override):
    with pytest.raises(InvalidBirthMoment):
        BirthMoment.create(**{**MUMBAI_1990, **override})


def test_rejected_input_is_value_error():
    with pytest.raises(ValueError):
        generate_kundli(moment="1990-01-15T10:30:00", latitude=100.0, longitude=0.0)


def test_from_strings():
    birth = BirthMoment.from_strings("1990-01-15", "10:30:00", 19.0760, 72.8777)
    assert birth.utc == datetime(1990, 1, 15, 5, 0, tzinfo=UTC)
    with pytest.raises(InvalidBirthMoment):
        BirthMoment.from_strings("1990-01-15", "25:61:00", 19.0760, 72.8777)


def test_repeated_wall_clock_is_accepted():
    # 01:30 occurs twice on the autumn change; the first occurrence (EDT) is used
    birth = BirthMoment.create(moment="2021-11-07T01:30:00", latitude=40.7128,
                               longitude=-74.0060, timezone="America/New_York")
    assert birth.utc == datetime(2021, 11, 7, 5, 30, tzinfo=UTC)


def test_birth_moment_is_frozen():
    birth = BirthMoment.create(**MUMBAI_1990)
    with pytest.raises(Exception):
        birth.latitude = 0.0


# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------

def test_settings_defaults(clean_settings, monkeypatch):
    for var in ("KUNDLI_DEFAULT_AYANAMSA", "KUNDLI_DEFAULT_TIMEZONE",
                "KUNDLI_DASHA_CYCLES", "KUNDLI_APPLY_DASHA_BALANCE"):
        monkeypatch.delenv(var, raising=False)
    settings = get_settings()
    assert settings.default_ayanamsa == 1
    assert settings.dasha_cycles == 1
    assert settings.apply_dasha_balance is False


def test_settings_from_environment(clean_settings, monkeypatch):
    monkeypatch.setenv("KUNDLI_DEFAULT_AYANAMSA", "3")
    monkeypatch.setenv("KUNDLI_DEFAULT_TIMEZONE", "UTC")
    monkeypatch.setenv("KUNDLI_DASHA_CYCLES", "2")
    birth = BirthMoment.create(moment="1990-01-15T05:00:00",
                               latitude=19.0760, longitude=72.8777)
    assert birth.ayanamsa == 3
    assert birth.timezone == "UTC"
    chart = compute_chart(birth)
    assert len(compute_dasha(chart).mahadashas) == 18


def test_bad_default_timezone_is_rejected(clean_settings, monkeypatch):
    monkeypatch.setenv("KUNDLI_DEFAULT_TIMEZONE", "Nowhere/Atlantis")
    with pytest.raises(InvalidBirthMoment):
        BirthMoment.create(moment="1990-01-15T10:30:00",
                           latitude=19.0760, longitude=72.8777)


def test_chart_logs_at_debug(caplog):
    with caplog.at_level(logging.DEBUG, logger="kundli_engine"):
        compute_chart(BirthMoment.create(**MUMBAI_1990))
    assert any("lagna" in r.getMessage() for r in caplog.records)
