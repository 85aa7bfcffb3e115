"""Apparent equatorial positions of the Sun, Moon and planets."""
from __future__ import annotations

from datetime import datetime
from typing import NamedTuple, Protocol

import astropy.units as u
from astropy.coordinates import TETE, EarthLocation, get_body
from astropy.time import Time

from skymap.angle import Angle
from skymap.astro_time import as_utc


class Planet(NamedTuple):
    id: str          # key into the planet label file
    body: str        # astropy body name
    radius: float    # drawing radius before scaling
    color: str


PLANETS: list[Planet] = [
    Planet("mer", "mercury", 1.0, "#b0b0b0"),
    Planet("ven", "venus", 1.0, "#ffffe0"),
    Planet("mar", "mars", 1.0, "#ff4500"),
    Planet("jup", "jupiter", 4.0, "#e3a869"),
    Planet("sat", "saturn", 3.5, "#66ccff"),
    Planet("nep", "neptune", 2.2, "#3366cc"),
]

SUN = "sun"
MOON = "moon"


class EphemerisProvider(Protocol):
    def equatorial(
        self,
        body: str,
        when: datetime,
        latitude: float,
        longitude: float,
    ) -> tuple[Angle, Angle]:
        """Return (ra, dec) of `body` seen from the observer at `when`."""


class AstropyEphemeris:
    """Topocentric apparent RA/Dec on the true equator and equinox of date.

    Uses astropy's built-in ephemeris, so no kernel download is needed.
    """

    def equatorial(
        self,
        body: str,
        when: datetime,
        latitude: float,
        longitude: float,
    ) -> tuple[Angle, Angle]:
        obs_time = Time(as_utc(when))
        location = EarthLocation(lat=latitude * u.deg, lon=longitude * u.deg)
        coords = get_body(body, obs_time, location=location)
        of_date = coords.transform_to(TETE(obstime=obs_time, location=location))
        return Angle.from_degrees(float(of_date.ra.deg)), Angle.from_degrees(float(of_date.dec.deg))
