"""
Kundli Engine
=============
A deterministic Vedic birth-chart and Vimshottari Dasha engine.

Quick start:
    from kundli_engine import BirthMoment, compute_chart, compute_dasha

    birth = BirthMoment.create(
        moment="1990-01-15T10:30:00",
        latitude=19.0760,
        longitude=72.8777,
        timezone="Asia/Kolkata",
    )
    chart = compute_chart(birth)
    tree = compute_dasha(chart)
    active = tree.active_at(datetime.now(timezone.utc))
"""

from .errors import DashaRangeError, InvalidBirthMoment, KundliError
from .schemas import BirthMoment
from .tools.kundli import Chart, compute_chart, compute_dasha, generate_kundli

__version__ = "1.0.0"
__all__ = [
    "BirthMoment", "Chart",
    "compute_chart", "compute_dasha", "generate_kundli",
    "KundliError", "InvalidBirthMoment", "DashaRangeError",
]
