"""UTC instant -> Julian Date -> Greenwich/Local Sidereal Time."""
from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import datetime, timezone
from functools import cached_property

from skymap.angle import Angle

# -- Time Constants --
J2000_JD = 2451545.0            # 2000-01-01 12:00 UTC
GMST_AT_J2000_DEG = 280.46061837
GMST_DEG_PER_DAY = 360.98564736629


def as_utc(dt: datetime) -> datetime:
    """Return an aware UTC datetime. Naive values are taken as UTC."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def julian_date(dt: datetime) -> float:
    """Civil (Gregorian) date -> Julian Date.

    January and February count as months 13 and 14 of the previous year.
    Only whole seconds enter the fractional day.

    Args:
        dt: datetime; naive values are taken as UTC.

    Returns:
        Julian Date, fractional part = time of day (0.0 at noon).
    """
    dt = as_utc(dt)
    year, month = dt.year, dt.month
    if month <= 2:
        year -= 1
        month += 12

    a = math.floor(year / 100)
    b = 2 - a + math.floor(a / 4)
    jd0 = (
        math.floor(365.25 * (year + 4716))
        + math.floor(30.6001 * (month + 1))
        + dt.day + b - 1524.5
    )
    fractional_day = (dt.hour + dt.minute / 60 + dt.second / 3600) / 24
    return jd0 + fractional_day


@dataclass(frozen=True)
class AstronomicalTime:
    """Immutable UTC instant with cached Julian Date and sidereal time.

    A new instance is created for every time update; instances are never
    mutated.
    """

    utc_date: datetime

    @classmethod
    def from_utc_date(cls, dt: datetime) -> AstronomicalTime:
        return cls(as_utc(dt))

    @cached_property
    def julian_date(self) -> float:
        return julian_date(self.utc_date)

    @cached_property
    def gst(self) -> Angle:
        """Greenwich mean sidereal time, normalized to [0, 360) deg.

        First-order linear formula in days since J2000.0.
        """
        d = self.julian_date - J2000_JD
        gmst_deg = (GMST_AT_J2000_DEG + GMST_DEG_PER_DAY * d) % 360.0
        return Angle.from_degrees(gmst_deg).normalize()

    def lst(self, longitude: Angle) -> Angle:
        """Local sidereal time for an east-positive longitude."""
        return self.gst.add(longitude).normalize()
