"""Load and cache star catalog and label files from a data directory."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, TypedDict

from skymap.datafiles import read_json
from skymap.constellations import (
    ConstellationBoundary,
    ConstellationLabel,
    ConstellationLine,
    load_constellation_boundaries,
    load_constellation_labels,
    load_constellation_lines,
)

logger = logging.getLogger("SkyMap.catalog")

DATA_DIR = Path(__file__).resolve().parent.parent / "data"


class Star(TypedDict):
    ra: float       # Right ascension in degrees (0-360)
    dec: float      # Declination in degrees (-90 to +90)
    mag: float      # Apparent visual magnitude
    bv: float       # B-V colour index


class Range(TypedDict):
    min: float
    max: float


class StarsData(TypedDict):
    mag: Range
    bv: Range
    total: int
    stars: list[Star]


Labels = dict[str, str]                 # language code -> text
PlanetLabels = dict[str, Labels]        # planet id -> labels


def load_stars(path: Path | str) -> StarsData:
    """Load a StarsData file (see scripts/prepare_stars.py)."""
    return read_json(path)


def load_labels(path: Path | str) -> dict[str, Any]:
    """Load a label file: {lang: text} or {planet_id: {lang: text}}."""
    return read_json(path)


@dataclass
class SkyCatalogs:
    """Pre-loaded, read-only datasets consumed by a render pass.

    A None field means the dataset was not loaded; drawing the feature
    that needs it raises MissingDataError.
    """

    stars: StarsData | None = None
    constellation_lines: list[ConstellationLine] | None = None
    constellation_boundaries: list[ConstellationBoundary] | None = None
    constellation_labels: dict[str, ConstellationLabel] | None = None
    planet_labels: PlanetLabels | None = None
    moon_labels: Labels | None = None
    sun_labels: Labels | None = None
    source: Path | None = field(default=None, compare=False)


def load_catalogs(data_dir: Path | str, config: Any) -> SkyCatalogs:
    """Load every dataset named in the config from `data_dir`.

    Args:
        data_dir: directory holding the JSON files.
        config: mapping or ConfigNode shaped like DEFAULT_CONFIG.
    """
    data_dir = Path(data_dir)
    lines_cfg = config["constellations"]["lines"]
    catalogs = SkyCatalogs(
        stars=load_stars(data_dir / config["stars"]["data"]),
        constellation_lines=load_constellation_lines(data_dir / lines_cfg["data"]),
        constellation_boundaries=load_constellation_boundaries(
            data_dir / config["constellations"]["boundaries"]["data"]
        ),
        constellation_labels=load_constellation_labels(data_dir / lines_cfg["labels"]["data"]),
        planet_labels=load_labels(data_dir / config["planets"]["labels"]["data"]),
        moon_labels=load_labels(data_dir / config["moon"]["label"]["data"]),
        sun_labels=load_labels(data_dir / config["sun"]["label"]["data"]),
        source=data_dir,
    )
    logger.info("catalogs loaded from %s (%d stars)", data_dir, len(catalogs.stars["stars"]))
    return catalogs
