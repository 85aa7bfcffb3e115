"""Cached JSON reads for the catalog files."""
from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

logger = logging.getLogger("SkyMap.catalog")

_cache: dict[Path, Any] = {}


def read_json(path: Path | str) -> Any:
    """Parse a JSON file. Cached per resolved path after the first call.

    Raises FileNotFoundError if the file does not exist.
    """
    path = Path(path).resolve()
    if path not in _cache:
        with open(path, encoding="utf-8") as f:
            _cache[path] = json.load(f)
        logger.debug("loaded %s", path)
    return _cache[path]


def clear_cache() -> None:
    _cache.clear()
