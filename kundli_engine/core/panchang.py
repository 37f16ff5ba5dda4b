"""
panchang.py
===========
Tithi, Yoga and Karana at the birth moment.

  Tithi  — lunar day, each 12° of Moon-Sun elongation (30 per month)
  Yoga   — (Sun + Moon) longitude in 27 steps of 13°20'
  Karana — half-tithi, 6° of elongation (60 per month)

Inputs are sidereal longitudes; the elongation is the same in either
zodiac, the yoga sum is not.

Source: Drik Panchang algorithm
"""

from dataclasses import dataclass

from .timescales import normalize_degrees

# ---------------------------------------------------------------------------
# Lookup tables
# ---------------------------------------------------------------------------

TITHIS = (
    "Pratipada", "Dvitiya", "Tritiya", "Chaturthi", "Panchami",
    "Shashthi", "Saptami", "Ashtami", "Navami", "Dashami",
    "Ekadashi", "Dvadashi", "Trayodashi", "Chaturdashi", "Purnima",   # Shukla Paksha (1–15)
    "Pratipada", "Dvitiya", "Tritiya", "Chaturthi", "Panchami",
    "Shashthi", "Saptami", "Ashtami", "Navami", "Dashami",
    "Ekadashi", "Dvadashi", "Trayodashi", "Chaturdashi", "Amavasya",  # Krishna Paksha (16–30)
)

PAKSHA = ("Shukla",) * 15 + ("Krishna",) * 15

YOGAS = (
    "Vishkumbha", "Preeti", "Ayushman", "Saubhagya", "Shobhana",
    "Atiganda", "Sukarma", "Dhriti", "Shula", "Ganda",
    "Vriddhi", "Dhruva", "Vyaghata", "Harshana", "Vajra",
    "Siddhi", "Vyatipata", "Variyana", "Parigha", "Shiva",
    "Siddha", "Sadhya", "Shubha", "Shukla", "Brahma",
    "Indra", "Vaidhriti",
)

MOVABLE_KARANAS = ("Bava", "Balava", "Kaulava", "Taitila", "Garija", "Vanija", "Vishti")
FIXED_KARANAS   = ("Shakuni", "Chatushpada", "Nagava")

TITHI_SPAN  = 12.0
KARANA_SPAN = 6.0
YOGA_SPAN   = 360.0 / 27.0


@dataclass(frozen=True)
class Panchang:
    tithi_index:  int      # 1–30
    tithi:        str
    paksha:       str
    yoga_index:   int      # 1–27
    yoga:         str
    karana_index: int      # 1–60
    karana:       str


def compute_tithi(sun_sid: float, moon_sid: float) -> dict:
    diff = normalize_degrees(moon_sid - sun_sid)
    idx = min(int(diff // TITHI_SPAN), 29)
    return {
        "index": idx + 1,
        "name": TITHIS[idx],
        "paksha": PAKSHA[idx],
        "elapsed_pct": round((diff % TITHI_SPAN) / TITHI_SPAN * 100, 1),
    }


def compute_yoga(sun_sid: float, moon_sid: float) -> dict:
    combined = normalize_degrees(sun_sid + moon_sid)
    idx = min(int(combined // YOGA_SPAN), 26)
    return {"index": idx + 1, "name": YOGAS[idx]}


def compute_karana(sun_sid: float, moon_sid: float) -> dict:
    """
    The first half of Shukla Pratipada is Kimstughna, the next 56 halves
    cycle the 7 movable karanas, the last 3 are fixed.
    """
    diff = normalize_degrees(moon_sid - sun_sid)
    num = min(int(diff // KARANA_SPAN), 59)

    if num == 0:
        name = "Kimstughna"
    elif num >= 57:
        name = FIXED_KARANAS[num - 57]
    else:
        name = MOVABLE_KARANAS[(num - 1) % 7]
    return {"number": num + 1, "name": name}


def compute_panchang(sun_sid: float, moon_sid: float) -> Panchang:
    tithi  = compute_tithi(sun_sid, moon_sid)
    yoga   = compute_yoga(sun_sid, moon_sid)
    karana = compute_karana(sun_sid, moon_sid)
    return Panchang(
        tithi_index=tithi["index"],
        tithi=tithi["name"],
        paksha=tithi["paksha"],
        yoga_index=yoga["index"],
        yoga=yoga["name"],
        karana_index=karana["number"],
        karana=karana["name"],
    )
