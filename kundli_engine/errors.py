"""
errors.py
=========
Exceptions raised by the Kundli Engine.

Every failure is either a rejected input or a query outside the computed
timeline. Both are also ValueErrors.
"""


class KundliError(Exception):
    """Base class for all engine errors."""


class InvalidBirthMoment(KundliError, ValueError):
    """Birth date-time, coordinates, timezone or ayanamsa were rejected."""


class DashaRangeError(KundliError, ValueError):
    """An instant falls outside the span covered by a dasha timeline."""
