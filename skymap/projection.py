"""Coordinate transforms and FOV-scaled disk projection.

Pipeline: equatorial (RA/Dec) -> horizontal (alt/az) -> disk (x, y)

The disk projection is an azimuthal layout with radius linear in zenith
distance, scaled by a field-of-view factor. It approximates the look of
a planisphere; it is not a true stereographic or gnomonic projection.
"""
from __future__ import annotations

import math
from typing import NamedTuple

import numpy as np
from numpy.typing import NDArray

from skymap.angle import Angle

POLE_TOLERANCE_DEG = 1e-9
ZENITH_TOLERANCE_DEG = 1e-9


class HorizontalCoordinate(NamedTuple):
    alt: Angle
    az: Angle   # from north through east, [0, 360) deg; NaN if undefined


class ScreenPoint(NamedTuple):
    x: float
    y: float


def hour_angle(lst: Angle, ra: Angle) -> Angle:
    """Hour angle, positive west of the meridian: LST - RA."""
    return lst.subtract(ra)


def equatorial_to_horizontal(
    ra: Angle,
    dec: Angle,
    latitude: Angle,
    lst: Angle,
) -> HorizontalCoordinate:
    """Convert RA/Dec to altitude/azimuth for an observer.

    At the geographic poles the general azimuth formula divides by
    cos(latitude) = 0, so the hour angle stands in for azimuth:
    az = ha + 180 deg at the north pole, az = -ha at the south pole.

    Objects at the zenith or nadir (cos(alt) = 0) get a NaN azimuth;
    nothing is raised.

    Args:
        ra: right ascension
        dec: declination
        latitude: observer latitude, north positive
        lst: local sidereal time

    Returns:
        HorizontalCoordinate(alt, az)
    """
    ha = hour_angle(lst, ra)

    sin_alt = dec.sin * latitude.sin + dec.cos * latitude.cos * ha.cos
    sin_alt = max(-1.0, min(1.0, sin_alt))
    alt = Angle(math.asin(sin_alt))

    lat_deg = latitude.degrees
    if math.isclose(lat_deg, 90.0, abs_tol=POLE_TOLERANCE_DEG):
        return HorizontalCoordinate(alt, ha.add_degrees(180.0).normalize())
    if math.isclose(lat_deg, -90.0, abs_tol=POLE_TOLERANCE_DEG):
        return HorizontalCoordinate(alt, (-ha).normalize())

    cos_alt = alt.cos
    if cos_alt == 0.0:
        return HorizontalCoordinate(alt, Angle(math.nan))

    cos_az = (dec.sin - latitude.sin * sin_alt) / (latitude.cos * cos_alt)
    sin_az = -ha.sin * dec.cos / cos_alt
    az = Angle(math.atan2(sin_az, cos_az)).normalize()
    return HorizontalCoordinate(alt, az)


def transform_radec_to_altaz(
    ra: NDArray[np.float64],
    dec: NDArray[np.float64],
    latitude: Angle,
    lst: Angle,
) -> tuple[NDArray[np.float64], NDArray[np.float64]]:
    """Bulk-transform RA/Dec arrays (degrees) to alt/az arrays (degrees).

    Same conventions as equatorial_to_horizontal. Call once per render
    pass with the whole star catalog rather than per star.
    """
    ha = lst.radians - np.radians(ra)
    dec_rad = np.radians(dec)
    sin_dec, cos_dec = np.sin(dec_rad), np.cos(dec_rad)

    sin_alt = np.clip(sin_dec * latitude.sin + cos_dec * latitude.cos * np.cos(ha), -1.0, 1.0)
    alt = np.arcsin(sin_alt)

    lat_deg = latitude.degrees
    if math.isclose(lat_deg, 90.0, abs_tol=POLE_TOLERANCE_DEG):
        az = ha + math.pi
    elif math.isclose(lat_deg, -90.0, abs_tol=POLE_TOLERANCE_DEG):
        az = -ha
    else:
        cos_alt = np.cos(alt)
        with np.errstate(divide="ignore", invalid="ignore"):
            cos_az = (sin_dec - latitude.sin * sin_alt) / (latitude.cos * cos_alt)
            sin_az = -np.sin(ha) * cos_dec / cos_alt
        az = np.where(cos_alt == 0.0, np.nan, np.arctan2(sin_az, cos_az))

    return np.degrees(alt), np.mod(np.degrees(az), 360.0)


def filter_visible(alt: NDArray[np.float64], threshold: float = 0.0) -> NDArray[np.bool_]:
    """Return boolean mask: True where altitude >= threshold (degrees)."""
    return alt >= threshold


def fov_factor(fov: float) -> float:
    """Zoom divisor for a field of view in degrees: tan(fov / 4).

    Smaller FOV -> smaller factor -> larger effective radius (zoom in).
    """
    return math.tan(math.radians(fov / 4.0))


def effective_radius(canvas_radius: float, factor: float) -> float:
    """Radius of the horizon circle on screen; infinite for a zero factor."""
    if factor == 0.0:
        return math.inf
    return canvas_radius / factor


def project_to_disk(
    center: ScreenPoint,
    alt: Angle,
    az: Angle,
    radius: float,
) -> ScreenPoint:
    """Map alt/az onto a disk: zenith at center, horizon at `radius`.

    Points below the horizon land outside the disk (callers cull them).
    East appears on the RIGHT for az = 90 deg (x grows with sin(az)).

    Math:
        r = radius * (90 - alt_deg) / 90
        x = cx + r * sin(az)
        y = cy - r * cos(az)
    """
    zenith_dist = 90.0 - alt.degrees
    if abs(zenith_dist) < ZENITH_TOLERANCE_DEG:
        # zenith is the center whatever the azimuth (even NaN) or radius
        return ScreenPoint(center.x, center.y)
    r = radius * zenith_dist / 90.0
    return ScreenPoint(center.x + r * az.sin, center.y - r * az.cos)


def disk_project(
    alt: NDArray[np.float64],
    az: NDArray[np.float64],
    cx: float,
    cy: float,
    radius: float,
) -> tuple[NDArray[np.float64], NDArray[np.float64]]:
    """Bulk form of project_to_disk on degree arrays."""
    az_rad = np.radians(az)
    with np.errstate(invalid="ignore"):
        r = radius * (90.0 - alt) / 90.0
        x = cx + r * np.sin(az_rad)
        y = cy - r * np.cos(az_rad)
    return x, y
