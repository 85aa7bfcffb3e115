#!/usr/bin/env python3
"""One-off script: download HYG v4.1 CSV, filter to naked-eye stars, write data/stars.json.

Output shape (StarsData):
    {"mag": {"min", "max"}, "bv": {"min", "max"}, "total": N,
     "stars": [{"ra", "dec", "mag", "bv"}, ...]}

Usage: python scripts/prepare_stars.py
"""
import csv
import json
import logging
import urllib.request
from pathlib import Path

logger = logging.getLogger("SkyMap.prepare_stars")

HYG_URL = "https://raw.githubusercontent.com/astronexus/HYG-Database/refs/heads/main/hyg/CURRENT/hygdata_v41.csv"
RAW_CSV = Path(__file__).parent / "hygdata_v41.csv"
OUTPUT_JSON = Path(__file__).resolve().parent.parent / "data" / "stars.json"
MAG_LIMIT = 6.5
DEFAULT_BV = 0.65   # roughly solar, for rows without a colour index


def download_csv() -> Path:
    """Download HYG CSV if not already cached locally. Returns path."""
    if not RAW_CSV.exists():
        logger.info("Downloading %s...", HYG_URL)
        urllib.request.urlretrieve(HYG_URL, RAW_CSV)
        logger.info("Saved to %s", RAW_CSV)
    else:
        logger.info("Using cached %s", RAW_CSV)
    return RAW_CSV


def parse_and_filter(csv_path: Path) -> list[dict]:
    """Read CSV, filter mag <= 6.5, extract fields.

    CRITICAL: HYG 'ra' column is in HOURS (0-24).
    Convert to DEGREES by multiplying by 15.

    Returns list of dicts with keys: ra, dec, mag, bv (brightest first).
    """
    stars = []
    with open(csv_path, newline="") as f:
        reader = csv.DictReader(f)
        for row in reader:
            mag_str = row.get("mag", "")
            if not mag_str:
                continue
            mag = float(mag_str)
            if mag > MAG_LIMIT or row.get("proper") == "Sol":
                continue

            ci_str = row.get("ci", "")
            stars.append({
                "ra": round(float(row["ra"]) * 15.0, 4),
                "dec": round(float(row["dec"]), 4),
                "mag": round(mag, 2),
                "bv": round(float(ci_str), 3) if ci_str else DEFAULT_BV,
            })

    stars.sort(key=lambda s: s["mag"])
    return stars


def summarize(stars: list[dict]) -> dict:
    """Wrap the star list with the magnitude and colour ranges."""
    mags = [s["mag"] for s in stars]
    bvs = [s["bv"] for s in stars]
    return {
        "mag": {"min": min(mags), "max": max(mags)},
        "bv": {"min": min(bvs), "max": max(bvs)},
        "total": len(stars),
        "stars": stars,
    }


def write_json(data: dict, output_path: Path) -> None:
    """Write StarsData to compact JSON."""
    output_path.parent.mkdir(parents=True, exist_ok=True)
    with open(output_path, "w") as f:
        json.dump(data, f, separators=(",", ":"))
    size_kb = output_path.stat().st_size / 1024
    logger.info("Wrote %d stars to %s (%.0f KB)", data["total"], output_path, size_kb)


def main() -> None:
    logging.basicConfig(level=logging.INFO, format="%(message)s")
    csv_path = download_csv()
    stars = parse_and_filter(csv_path)
    write_json(summarize(stars), OUTPUT_JSON)


if __name__ == "__main__":
    main()
