"""
demo.py
=======
Demonstration of the Kundli Engine.
Run: python -m kundli_engine.demo

Generates a full birth chart for a sample birth and prints a formatted report.
"""

from datetime import datetime, timezone

from kundli_engine import generate_kundli


def print_section(title: str):
    print(f"\n{'─'*60}")
    print(f"  {title}")
    print(f"{'─'*60}")


def format_planet_table(planets: dict) -> str:
    lines = [f"{'Planet':<12} {'Sign':<14} {'Degree':<12} {'Nakshatra':<22} {'Pada':<5} {'House':<6}"]
    lines.append("─" * 75)
    for name, p in planets.items():
        lines.append(
            f"{name:<12} {p['sign']:<14} {p['degree_formatted']:<12} "
            f"{p['nakshatra']:<22} {p['nakshatra_pada']:<5} H{p['house']}"
        )
    return "\n".join(lines)


def run_demo():
    print("=" * 60)
    print("   KUNDLI ENGINE — SAMPLE BIRTH CHART")
    print("=" * 60)

    # ── Sample birth data ──
    params = {
        "moment": "1990-01-15T10:30:00",
        "latitude": 19.0760,           # Mumbai
        "longitude": 72.8777,
        "timezone_label": "Asia/Kolkata",
        "ayanamsa": 1,
    }

    print(f"\n  Birth       : {params['moment']} ({params['timezone_label']})")
    print(f"  Location    : Mumbai, India ({params['latitude']}°N, {params['longitude']}°E)")
    print("  House System: Equal")
    print("  Ayanamsa    : Lahiri")

    chart = generate_kundli(**params, on_date=datetime.now(timezone.utc))
    meta  = chart["meta"]

    print_section("LAGNA (ASCENDANT)")
    lagna = chart["lagna"]
    print(f"  Sign        : {lagna['sign']} (lord {lagna['sign_lord']})")
    print(f"  Degree      : {lagna['degree_formatted']}")
    print(f"  Nakshatra   : {lagna['nakshatra']} (Pada {lagna['nakshatra_pada']})")

    print_section("RASI CHART — PLANET POSITIONS")
    print(format_planet_table(chart["planets"]))

    print_section("MOON SIGN & NAKSHATRA")
    nak = chart["nakshatra"]
    print(f"  Rasi (Sign)   : {chart['moon_sign']}")
    print(f"  Nakshatra     : {nak['name']} (Pada {nak['pada']}, lord {nak['lord']})")

    print_section("PANCHANG")
    p = chart["panchang"]
    print(f"  Tithi         : {p['tithi']} ({p['paksha']} Paksha)")
    print(f"  Yoga          : {p['yoga']}")
    print(f"  Karana        : {p['karana']}")

    print_section("VIMSHOTTARI DASHA")
    dasha = chart["dasha"]
    cur = dasha["current"]
    if cur:
        print(f"  Mahadasha       : {cur['current_mahadasha']}")
        print(f"  Antardasha      : {cur['current_antardasha']}")
        print(f"  Pratyantardasha : {cur['current_pratyantar']}")
        print(f"  Sukshmadasha    : {cur['current_sukshma']}")
    else:
        print("  (today is outside the computed timeline)")

    print("\n  Full Vimshottari Sequence:")
    print(f"  {'Lord':<10} {'Start':<14} {'End':<14} {'Years':<8}")
    print(f"  {'─'*10} {'─'*14} {'─'*14} {'─'*8}")
    for period in dasha["timeline"]["mahadashas"]:
        print(f"  {period['lord']:<10} {period['start'][:10]:<14} "
              f"{period['end'][:10]:<14} {period['duration_years']:<8.2f}")

    print_section("HOUSE CUSPS")
    print(f"  {'House':<8} {'Sign':<16} {'Cusp':<14}")
    print(f"  {'─'*8} {'─'*16} {'─'*14}")
    for h in chart["houses"]:
        print(f"  H{h['house']:<7} {h['sign']:<16} {h['cusp_longitude']:.4f}°")

    print_section("TECHNICAL METADATA")
    print(f"  Julian Day    : {meta['julian_day']:.6f}")
    print(f"  Ayanamsa      : {meta['ayanamsa']:.6f}°")
    print(f"  Obliquity     : {meta['obliquity']:.6f}°")
    print(f"  LST (hours)   : {meta['lst_hours']:.6f}")
    print("\n")


if __name__ == "__main__":
    run_demo()
