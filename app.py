"""Flask host that renders sky map frames as SVG.

Routes:
    GET  /skymap.svg    -- One frame for the query parameters

Query parameters:
    lat, lon    decimal degrees (default 0)
    date        ISO 8601; naive values are UTC (default now)
    fov         degrees (default 180)
    size        square canvas side in px (default 800)
    lang        label language (default en)
"""
import logging
from datetime import datetime, timezone

from flask import Flask, Response, request

from skymap.catalog import DATA_DIR
from skymap.errors import InvalidObserverParams, MissingDataError
from skymap.observer import ObserverParams
from skymap.renderer import SvgSurface
from skymap.sky_map import SkyMap

logger = logging.getLogger("SkyMap.app")

app = Flask(__name__)
app.config.setdefault("DATA_DIR", DATA_DIR)
app.config.setdefault("EPHEMERIS", None)     # None -> AstropyEphemeris

DEFAULT_SIZE = 800
MAX_SIZE = 4000


def _parse_args() -> tuple[ObserverParams, int, str] | str:
    """Parse query parameters. Returns a tuple on success, error string on failure.

    Range checks on lat/lon/fov are left to ObserverParams validation.
    """
    try:
        lat = float(request.args.get("lat", 0))
        lon = float(request.args.get("lon", 0))
        fov = float(request.args.get("fov", 180))
    except ValueError:
        return "Invalid number for lat, lon or fov."

    date_str = request.args.get("date")
    if date_str:
        try:
            date = datetime.fromisoformat(date_str)
        except ValueError:
            return f"Invalid date: {date_str}"
    else:
        date = datetime.now(timezone.utc)

    try:
        size = int(request.args.get("size", DEFAULT_SIZE))
    except ValueError:
        return "Invalid size."
    if not 16 <= size <= MAX_SIZE:
        return f"Size must be between 16 and {MAX_SIZE}."

    lang = request.args.get("lang", "en")
    return ObserverParams(latitude=lat, longitude=lon, date=date, fov=fov), size, lang


@app.route("/skymap.svg")
def skymap_svg() -> Response:
    """Render the sky for the query parameters as an SVG document."""
    result = _parse_args()
    if isinstance(result, str):
        return Response(result, status=400, mimetype="text/plain")
    params, size, lang = result

    surface = SvgSurface(size, size)
    try:
        SkyMap.create(
            surface, app.config["DATA_DIR"], params, {"language": lang},
            ephemeris=app.config["EPHEMERIS"],
        )
    except InvalidObserverParams as e:
        return Response(str(e), status=400, mimetype="text/plain")
    except MissingDataError as e:
        logger.warning("missing catalog data: %s", e)
        return Response(str(e), status=400, mimetype="text/plain")
    except FileNotFoundError as e:
        logger.error("catalog file not found: %s", e.filename)
        return Response(
            f"Catalog file not found: {e.filename}. Build it with scripts/prepare_stars.py "
            "and scripts/prepare_constellations.py.",
            status=500, mimetype="text/plain",
        )
    return Response(surface.to_svg(), mimetype="image/svg+xml")


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(name)s %(levelname)s %(message)s")
    app.run(debug=True, port=5000)
