#!/usr/bin/env python3
"""One-off script: download d3-celestial constellation GeoJSON, write the three data files.

Writes into data/:
    constellations.lines.json       [{"id", "coo": [[[ra, dec], ...], ...]}]
    constellations.boundaries.json  [{"coo": [[[ra, dec], ...], ...]}]
    constellations.labels.json      [{"id", "coo": [ra, dec], "labels": {lang: name}}]

d3-celestial stores RA as a longitude in [-180, 180]; it is folded back
into [0, 360) degrees here.

Usage: python scripts/prepare_constellations.py
"""
import json
import logging
import urllib.request
from pathlib import Path

logger = logging.getLogger("SkyMap.prepare_constellations")

BASE_URL = "https://raw.githubusercontent.com/ofrohn/d3-celestial/master/data/"
SOURCES = {
    "lines": "constellations.lines.json",
    "bounds": "constellations.bounds.json",
    "names": "constellations.json",
}
CACHE_DIR = Path(__file__).parent
OUTPUT_DIR = Path(__file__).resolve().parent.parent / "data"


def download(name: str) -> Path:
    """Download one GeoJSON file unless it is cached next to this script."""
    path = CACHE_DIR / name
    if not path.exists():
        logger.info("Downloading %s...", BASE_URL + name)
        urllib.request.urlretrieve(BASE_URL + name, path)
    else:
        logger.info("Using cached %s", path)
    return path


def to_radec(point: list[float]) -> list[float]:
    lon, lat = point[0], point[1]
    return [round(lon % 360.0, 4), round(lat, 4)]


def polylines(geometry: dict) -> list[list[list[float]]]:
    """Flatten LineString/MultiLineString/Polygon/MultiPolygon into polylines."""
    kind, coords = geometry["type"], geometry["coordinates"]
    if kind == "LineString":
        rings = [coords]
    elif kind in ("MultiLineString", "Polygon"):
        rings = coords
    elif kind == "MultiPolygon":
        rings = [ring for polygon in coords for ring in polygon]
    else:
        raise ValueError(f"Unsupported geometry: {kind}")
    return [[to_radec(p) for p in ring] for ring in rings]


def convert_lines(collection: dict) -> list[dict]:
    return [
        {"id": f["id"], "coo": polylines(f["geometry"])}
        for f in collection["features"]
    ]


def convert_boundaries(collection: dict) -> list[dict]:
    return [{"coo": polylines(f["geometry"])} for f in collection["features"]]


def convert_labels(collection: dict) -> list[dict]:
    """Latin name as "la", plus every two-letter language key present."""
    labels = []
    for f in collection["features"]:
        props = f["properties"]
        names = {
            key: value for key, value in props.items()
            if len(key) == 2 and key.islower() and isinstance(value, str) and value
        }
        names["la"] = props["name"]
        names.setdefault("en", props["name"])
        labels.append({"id": f["id"], "coo": to_radec(f["geometry"]["coordinates"]), "labels": names})
    return labels


def write_json(data: list, output_path: Path) -> None:
    output_path.parent.mkdir(parents=True, exist_ok=True)
    with open(output_path, "w", encoding="utf-8") as f:
        json.dump(data, f, ensure_ascii=False, separators=(",", ":"))
    logger.info("Wrote %d entries to %s", len(data), output_path)


def load(name: str) -> dict:
    with open(download(name), encoding="utf-8") as f:
        return json.load(f)


def main() -> None:
    logging.basicConfig(level=logging.INFO, format="%(message)s")
    write_json(convert_lines(load(SOURCES["lines"])), OUTPUT_DIR / "constellations.lines.json")
    write_json(convert_boundaries(load(SOURCES["bounds"])), OUTPUT_DIR / "constellations.boundaries.json")
    write_json(convert_labels(load(SOURCES["names"])), OUTPUT_DIR / "constellations.labels.json")


if __name__ == "__main__":
    main()
