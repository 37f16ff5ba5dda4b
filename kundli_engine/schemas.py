"""
schemas.py
==========
Validated input for every chart computation.

A BirthMoment is checked once, up front: coordinates out of range, a
non-finite value, an unknown timezone or an unparseable date-time is a
rejected input and no computation is attempted.
"""

from datetime import datetime, timezone as dt_timezone
from typing import Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

from .config import get_settings
from .errors import InvalidBirthMoment

UTC = dt_timezone.utc


class BirthMoment(BaseModel):
    """
    Birth (or reference) moment plus place.

    moment:    naive values are wall-clock time in `timezone`;
               aware values are used as given
    latitude:  degrees, positive North
    longitude: degrees, positive East
    timezone:  IANA label, e.g. 'Asia/Kolkata'
    ayanamsa:  1=Lahiri, 2=Raman, 3=KP, 4=other (linear Lahiri)
    """

    model_config = ConfigDict(frozen=True)

    moment:    datetime
    latitude:  float = Field(..., ge=-90,  le=90,  allow_inf_nan=False)
    longitude: float = Field(..., ge=-180, le=180, allow_inf_nan=False)
    timezone:  str   = Field(default_factory=lambda: get_settings().default_timezone,
                             validate_default=True)
    ayanamsa:  int   = Field(default_factory=lambda: get_settings().default_ayanamsa,
                             ge=1, le=4, validate_default=True)

    @field_validator("timezone")
    @classmethod
    def _known_timezone(cls, value: str) -> str:
        try:
            ZoneInfo(value)
        except (ZoneInfoNotFoundError, ValueError) as exc:
            raise ValueError(f"unknown timezone {value!r}") from exc
        return value

    @model_validator(mode="after")
    def _wall_clock_exists(self) -> "BirthMoment":
        # a local time skipped by a DST change does not survive the round trip
        if self.moment.tzinfo is None:
            zone = ZoneInfo(self.timezone)
            local = self.moment.replace(tzinfo=zone)
            if local.astimezone(UTC).astimezone(zone).replace(tzinfo=None) != self.moment:
                raise ValueError(
                    f"{self.moment.isoformat()} does not exist in {self.timezone}"
                )
        return self

    @property
    def utc(self) -> datetime:
        """The moment as a timezone-aware UTC datetime."""
        moment = self.moment
        if moment.tzinfo is None:
            moment = moment.replace(tzinfo=ZoneInfo(self.timezone))
        return moment.astimezone(UTC)

    @classmethod
    def create(cls, **data) -> "BirthMoment":
        """Build a BirthMoment, raising InvalidBirthMoment on rejected input."""
        try:
            return cls(**data)
        except ValidationError as exc:
            raise InvalidBirthMoment(str(exc)) from exc

    @classmethod
    def from_strings(cls, birth_date: str, birth_time: str,
                     latitude: float, longitude: float,
                     timezone: Optional[str] = None,
                     ayanamsa: Optional[int] = None) -> "BirthMoment":
        """
        Build from 'YYYY-MM-DD' and 'HH:MM[:SS]' strings, the shape used by
        request handlers.
        """
        data = {
            "moment": f"{birth_date}T{birth_time}",
            "latitude": latitude,
            "longitude": longitude,
        }
        if timezone is not None:
            data["timezone"] = timezone
        if ayanamsa is not None:
            data["ayanamsa"] = ayanamsa
        return cls.create(**data)
