"""Shared fixtures: tiny catalogs, a fixed ephemeris and a manual frame clock."""
import json
from datetime import datetime, timezone

import pytest
from astropy.utils import iers

from skymap.angle import Angle
from skymap.animation import ManualFrameScheduler
from skymap.catalog import SkyCatalogs
from skymap.constellations import load_constellation_labels
from skymap.datafiles import clear_cache
from skymap.ephemeris import PLANETS
from skymap.observer import ObserverParams
from skymap.renderer import SvgSurface
from skymap.sky_map import SkyMap

# tests never reach out for fresh Earth-orientation tables
iers.conf.auto_download = False

STARS = {
    "mag": {"min": -1.44, "max": 6.5},
    "bv": {"min": -0.3, "max": 2.0},
    "total": 3,
    "stars": [
        {"ra": 37.95, "dec": 89.26, "mag": 1.97, "bv": 0.64},    # Polaris
        {"ra": 101.29, "dec": -16.72, "mag": -1.44, "bv": 0.0},  # Sirius
        {"ra": 95.99, "dec": -52.70, "mag": -0.62, "bv": 0.16},  # Canopus
    ],
}

LINES = [
    {"id": "UMa", "coo": [[[165.46, 56.38], [178.46, 53.69], [183.86, 57.03], [193.51, 55.96]]]},
]

BOUNDARIES = [
    {"coo": [[[160.0, 50.0], [190.0, 50.0], [190.0, 60.0], [160.0, 60.0], [160.0, 50.0]]]},
]

CONSTELLATION_LABELS = [
    {"id": "UMa", "coo": [175.0, 56.0], "labels": {"en": "Great Bear", "la": "Ursa Major"}},
]

PLANET_LABELS = {
    p.id: {"en": p.body.capitalize(), "la": p.body.capitalize()} for p in PLANETS
}
MOON_LABELS = {"en": "Moon", "la": "Luna"}
SUN_LABELS = {"en": "Sun", "la": "Sol"}

DATA_FILES = {
    "stars.json": STARS,
    "constellations.lines.json": LINES,
    "constellations.boundaries.json": BOUNDARIES,
    "constellations.labels.json": CONSTELLATION_LABELS,
    "planets.labels.json": PLANET_LABELS,
    "moon.labels.json": MOON_LABELS,
    "sun.labels.json": SUN_LABELS,
}


class FixedEphemeris:
    """Every body sits at the same RA/Dec; records the calls it gets."""

    def __init__(self, ra_deg: float = 0.0, dec_deg: float = 0.0) -> None:
        self.position = (Angle.from_degrees(ra_deg), Angle.from_degrees(dec_deg))
        self.calls: list[tuple[str, datetime, float, float]] = []

    def equatorial(self, body, when, latitude, longitude):
        self.calls.append((body, when, latitude, longitude))
        return self.position


@pytest.fixture(autouse=True)
def _fresh_json_cache():
    clear_cache()
    yield
    clear_cache()


@pytest.fixture
def data_dir(tmp_path):
    for name, content in DATA_FILES.items():
        (tmp_path / name).write_text(json.dumps(content), encoding="utf-8")
    return tmp_path


@pytest.fixture
def catalogs(data_dir):
    return SkyCatalogs(
        stars=STARS,
        constellation_lines=LINES,
        constellation_boundaries=BOUNDARIES,
        constellation_labels=load_constellation_labels(data_dir / "constellations.labels.json"),
        planet_labels=PLANET_LABELS,
        moon_labels=MOON_LABELS,
        sun_labels=SUN_LABELS,
    )


@pytest.fixture
def ephemeris():
    return FixedEphemeris()


@pytest.fixture
def scheduler():
    return ManualFrameScheduler()


@pytest.fixture
def params():
    return ObserverParams(
        latitude=40.0,
        longitude=-80.0,
        date=datetime(2024, 1, 15, tzinfo=timezone.utc),
        fov=180.0,
    )


@pytest.fixture
def surface():
    return SvgSurface(400, 400)


@pytest.fixture
def sky(surface, catalogs, params, ephemeris, scheduler):
    sky_map = SkyMap(surface, catalogs, params, ephemeris=ephemeris, scheduler=scheduler)
    sky_map.resize(400)
    return sky_map
