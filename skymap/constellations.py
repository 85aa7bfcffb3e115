"""Load constellation line, boundary and label files."""
from __future__ import annotations

from pathlib import Path
from typing import Iterator, TypedDict

from skymap.datafiles import read_json

Vertex = list[float]                   # [ra, dec] in degrees


class ConstellationLine(TypedDict):
    id: str
    coo: list[list[Vertex]]            # polylines


class ConstellationBoundary(TypedDict):
    coo: list[list[Vertex]]


class ConstellationLabel(TypedDict):
    coo: Vertex                        # label anchor
    labels: dict[str, str]             # language code -> name


def load_constellation_lines(path: Path | str) -> list[ConstellationLine]:
    return read_json(path)


def load_constellation_boundaries(path: Path | str) -> list[ConstellationBoundary]:
    return read_json(path)


def load_constellation_labels(path: Path | str) -> dict[str, ConstellationLabel]:
    """Load labels as a list of {id, coo, labels} and index them by id."""
    raw = read_json(path)
    return {item["id"]: {"coo": item["coo"], "labels": item["labels"]} for item in raw}


def iter_line_segments(
    lines: list[ConstellationLine],
) -> Iterator[tuple[float, float, float, float]]:
    """Yield all constellation line segments as (ra1, dec1, ra2, dec2).

    Each segment is a pair of consecutive points within a polyline.
    A constellation holds several polylines, each with N points
    producing N-1 segments.
    """
    for constellation in lines:
        for polyline in constellation["coo"]:
            for i in range(len(polyline) - 1):
                ra1, dec1 = polyline[i]
                ra2, dec2 = polyline[i + 1]
                yield (ra1, dec1, ra2, dec2)
