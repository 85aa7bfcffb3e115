"""Interactive sky map: observer state + catalogs -> one drawn disk.

Positions of stars, planets, the Moon, the Sun and constellation
features are computed per render pass and handed to a drawing surface.

Example:
    surface = SvgSurface()
    sky = SkyMap.create(surface, "data", ObserverParams(latitude=51.5, longitude=-0.12))
    sky.resize(800)
    sky.config.constellations.lines.labels.enabled = False   # re-renders
    svg = surface.to_svg()
"""
from __future__ import annotations

import copy
import logging
import math
import time
from collections.abc import Callable, Mapping
from datetime import datetime
from pathlib import Path
from typing import Any

import numpy as np

from skymap.angle import Angle
from skymap.animation import (
    Animator,
    FrameScheduler,
    ManualFrameScheduler,
    lerp,
    lerp_angle,
    lerp_datetime,
    signed_degrees,
)
from skymap.catalog import SkyCatalogs, load_catalogs
from skymap.config import DEFAULT_CONFIG, ReactiveConfig, merge_configs
from skymap.ephemeris import MOON, PLANETS, SUN, AstropyEphemeris, EphemerisProvider
from skymap.errors import MissingDataError
from skymap.observer import ObserverParams, ObserverState, validate_latitude, validate_longitude, validate_date
from skymap.projection import (
    HorizontalCoordinate,
    ScreenPoint,
    disk_project,
    effective_radius,
    equatorial_to_horizontal,
    filter_visible,
    project_to_disk,
    transform_radec_to_altaz,
)
from skymap.renderer import DrawingSurface

logger = logging.getLogger("SkyMap.render")

# -- Layout Constants --
REFERENCE_RADIUS = 400          # canvas radius at which scale_mod == 1
BORDER_WIDTH = 2
GLOW_BODY = 10
GLOW_LINE = 5
SUN_RADIUS = 8
MOON_RADIUS = 4
STAR_BASE_SIZE = 8              # star with mag = -1.44 has size ~8
STAR_SIZE_BASE = 1.18

# -- Culling Thresholds (degrees of altitude) --
LINE_BREAK_ALT = -20
BOUNDARY_BREAK_ALT = -45
GRID_RA_STEP = 15
GRID_DEC_STEP = 20
GRID_SAMPLE_STEP = 5


class SkyMap:
    """Owns one sky view: observer state, display config, animation and catalogs.

    Setters validate, update state and redraw synchronously. The config
    tree re-renders on every leaf write. Nothing is shared between
    instances except the read-only catalogs.
    """

    def __init__(
        self,
        surface: DrawingSurface,
        catalogs: SkyCatalogs,
        observer_params: ObserverParams | Mapping[str, Any] | None = None,
        config: Mapping[str, Any] | None = None,
        ephemeris: EphemerisProvider | None = None,
        scheduler: FrameScheduler | None = None,
    ) -> None:
        if isinstance(observer_params, Mapping):
            observer_params = ObserverParams.with_defaults(observer_params)
        self.surface = surface
        self.catalogs = catalogs
        self.ephemeris = ephemeris if ephemeris is not None else AstropyEphemeris()
        self.state = ObserverState(observer_params, on_change=self.render)
        self.config = ReactiveConfig(merge_configs(DEFAULT_CONFIG, config), self.render)

        if scheduler is None:
            scheduler = ManualFrameScheduler()
        self.scheduler = scheduler
        self.animator = Animator(scheduler)

        self.radius = 0.0
        self.center = ScreenPoint(0.0, 0.0)
        self.scale_mod = 0.0

    @classmethod
    def create(
        cls,
        surface: DrawingSurface,
        data_dir: Path | str,
        observer_params: ObserverParams | Mapping[str, Any] | None = None,
        config: Mapping[str, Any] | None = None,
        **kwargs: Any,
    ) -> SkyMap:
        """Load the catalogs named in `config` from `data_dir` and build a map.

        Raises:
            FileNotFoundError: a catalog file is missing.
            InvalidObserverParams: initial params are out of range.
        """
        catalogs = load_catalogs(data_dir, merge_configs(DEFAULT_CONFIG, config))
        sky = cls(surface, catalogs, observer_params, config, **kwargs)
        sky.resize(surface_size(surface))
        return sky

    def clone(self, surface: DrawingSurface) -> SkyMap:
        """New map on another surface with copies of params and config."""
        other = SkyMap(
            surface,
            self.catalogs,
            copy.deepcopy(self.state.params),
            self.config.to_dict(),
            ephemeris=self.ephemeris,
            scheduler=self.scheduler,
        )
        other.resize(surface_size(surface))
        return other

    def resize(self, width: float, height: float | None = None) -> None:
        """Resize the drawing area; one argument means a square."""
        if height is None:
            height = width
        self.surface.resize(width, height)
        self.radius = min(width, height) / 2
        self.center = ScreenPoint(self.radius, self.radius)
        self.scale_mod = self.radius / REFERENCE_RADIUS
        self.render()

    def disconnect(self) -> None:
        """Stop any running animation."""
        self.animator.cancel()

    # -- Setters --

    @property
    def observer_params(self) -> ObserverParams:
        return self.state.params

    def set_location(self, latitude: float, longitude: float) -> SkyMap:
        self.state.set_location(latitude, longitude)
        return self

    def set_latitude(self, latitude: float) -> SkyMap:
        self.state.set_latitude(latitude)
        return self

    def set_longitude(self, longitude: float) -> SkyMap:
        self.state.set_longitude(longitude)
        return self

    def set_date(self, date: datetime) -> SkyMap:
        self.state.set_date(date)
        return self

    def set_fov(self, fov: float) -> SkyMap:
        self.state.set_fov(fov)
        return self

    def set_observer_params(self, params: ObserverParams | Mapping[str, Any]) -> SkyMap:
        self.state.set_observer_params(params)
        return self

    # -- Animated setters --

    def set_location_with_animation(
        self,
        latitude: float,
        longitude: float,
        duration_ms: float,
        on_step: Callable[[float, float], None] | None = None,
    ) -> SkyMap:
        """Tween to a new location; longitude takes the shorter way round."""
        validate_latitude(latitude)
        validate_longitude(longitude)
        start = self.state.params

        def update(value: tuple[float, float]) -> None:
            lat, lon = value
            self.set_location(lat, lon)
            if on_step is not None:
                on_step(lat, lon)

        self.animator.start(
            (start.latitude, start.longitude),
            (latitude, longitude),
            duration_ms,
            update,
            _lerp_location,
        )
        return self

    def set_date_with_animation(
        self,
        date: datetime,
        duration_ms: float,
        on_step: Callable[[datetime], None] | None = None,
    ) -> SkyMap:
        """Tween the date linearly in time.

        Intermediate frames carry aware UTC datetimes; the last frame sets
        `date` exactly as passed, like set_date.
        """
        validate_date(date)

        def update(new_date: datetime) -> None:
            self.set_date(new_date)
            if on_step is not None:
                on_step(new_date)

        self.animator.start(self.state.date.utc_date, date, duration_ms, update, lerp_datetime)
        return self

    # -- Rendering --

    def render(self) -> None:
        """Redraw the whole map on the surface."""
        if self.radius <= 0:
            return
        started = time.perf_counter()
        self.surface.begin_frame()
        self.surface.clip_circle(self.center, self.radius)
        self.surface.fill_background(self.config.bgColor)

        self._draw_grid()
        self._draw_constellation_lines()
        self._draw_constellation_boundaries()
        self._draw_stars()
        self._draw_planets()
        self._draw_sun()
        self._draw_moon()

        self._draw_border()
        logger.debug("render %.1f ms", (time.perf_counter() - started) * 1000)

    @property
    def horizon_radius(self) -> float:
        return effective_radius(self.radius, self.state.fov_factor)

    def horizontal(self, ra: Angle, dec: Angle) -> HorizontalCoordinate:
        return equatorial_to_horizontal(ra, dec, self.state.latitude, self.state.lst)

    def project(self, coord: HorizontalCoordinate) -> ScreenPoint:
        return project_to_disk(self.center, coord.alt, coord.az, self.horizon_radius)

    def _scaled(self, size: float) -> float:
        """Scale a drawing size by canvas radius and zoom."""
        factor = self.state.fov_factor
        return size * self.scale_mod / factor if factor else math.inf

    def _glow(self, amount: float) -> float:
        return amount if self.config.glow else 0

    def _draw_border(self) -> None:
        self.surface.stroke_circle(
            self.center, self.radius, self.config.bgColor, BORDER_WIDTH * self.scale_mod
        )

    def _draw_grid(self) -> None:
        cfg = self.config.grid
        if not cfg.enabled:
            return
        width = cfg.width * self.scale_mod
        lat_deg = self.state.latitude.degrees
        near_equator = abs(lat_deg) < 1

        # meridians: every 15 deg of RA, the 90 deg ones reach the poles
        for ra_deg in range(0, 360, GRID_RA_STEP):
            self.surface.begin_path()
            ra = Angle.from_degrees(ra_deg)
            limit = 90 if ra_deg % 90 == 0 else 80
            for dec_deg in range(-limit, limit + 1, GRID_SAMPLE_STEP):
                coord = self.horizontal(ra, Angle.from_degrees(dec_deg))
                if coord.alt.degrees < (0 if near_equator else -1):
                    continue
                self.surface.line_to(self.project(coord))
            self.surface.stroke(cfg.color, width)

        # parallels: every 20 deg of Dec
        self.surface.begin_path()
        at_pole = math.isclose(abs(lat_deg), 90.0)
        for dec_deg in range(-80, 81, GRID_DEC_STEP):
            # the equator collapses onto the horizon at the poles
            if dec_deg == 0 and at_pole:
                continue
            dec = Angle.from_degrees(dec_deg)
            pen_down = False
            for ra_deg in range(0, 361, GRID_SAMPLE_STEP):
                coord = self.horizontal(Angle.from_degrees(ra_deg), dec)
                if coord.alt.degrees < -3:
                    pen_down = False
                    continue
                point = self.project(coord)
                if pen_down:
                    self.surface.line_to(point)
                else:
                    self.surface.move_to(point)
                    pen_down = True
        self.surface.stroke(cfg.color, width)

    def _draw_constellation_lines(self) -> None:
        cfg = self.config.constellations.lines
        if not cfg.enabled:
            return
        lines = self.catalogs.constellation_lines
        if lines is None:
            raise MissingDataError("constellation lines not loaded")

        labels_cfg = cfg.labels
        font_size = self.scale_mod * labels_cfg.fontSize
        width = cfg.width * self.scale_mod
        for constellation in lines:
            self.surface.begin_path()
            for polyline in constellation["coo"]:
                for j, (ra_deg, dec_deg) in enumerate(polyline):
                    coord = self.horizontal(Angle.from_degrees(ra_deg), Angle.from_degrees(dec_deg))
                    point = self.project(coord)
                    if j == 0 or coord.alt.degrees < LINE_BREAK_ALT:
                        self.surface.move_to(point)
                    else:
                        self.surface.line_to(point)
            self.surface.stroke(cfg.color, width, self._glow(GLOW_LINE))

            if labels_cfg.enabled:
                self._draw_constellation_label(constellation["id"], font_size, labels_cfg.color)

    def _draw_constellation_label(self, constellation_id: str, font_size: float, color: str) -> None:
        labels = self.catalogs.constellation_labels
        if labels is None:
            raise MissingDataError("constellation labels not loaded")
        label = labels.get(constellation_id)
        if label is None:
            raise MissingDataError(f"constellation label not found: {constellation_id}")
        text = self._translate(label["labels"], f"constellation {constellation_id}")

        ra_deg, dec_deg = label["coo"]
        point = self.project(self.horizontal(Angle.from_degrees(ra_deg), Angle.from_degrees(dec_deg)))
        text_width = self.surface.measure_text(text, font_size)
        self.surface.fill_text(
            text, point.x - text_width / 2, point.y - font_size / 2,
            color, font_size, self.config.fontFamily,
        )

    def _draw_constellation_boundaries(self) -> None:
        cfg = self.config.constellations.boundaries
        if not cfg.enabled:
            return
        boundaries = self.catalogs.constellation_boundaries
        if boundaries is None:
            raise MissingDataError("constellation boundaries not loaded")

        width = cfg.width * self.scale_mod
        for boundary in boundaries:
            self.surface.begin_path()
            for polyline in boundary["coo"]:
                for ra_deg, dec_deg in polyline:
                    coord = self.horizontal(Angle.from_degrees(ra_deg), Angle.from_degrees(dec_deg))
                    point = self.project(coord)
                    if coord.alt.degrees < BOUNDARY_BREAK_ALT:
                        self.surface.move_to(point)
                    else:
                        self.surface.line_to(point)
            self.surface.stroke(cfg.color, width, self._glow(GLOW_LINE))

    def _draw_stars(self) -> None:
        cfg = self.config.stars
        if not cfg.enabled:
            return
        data = self.catalogs.stars
        if data is None:
            raise MissingDataError("stars not loaded")
        stars = data["stars"]
        if not stars:
            return

        # -- bulk transform + cull below the horizon --
        ra = np.array([s["ra"] for s in stars], dtype=float)
        dec = np.array([s["dec"] for s in stars], dtype=float)
        mags = np.array([s["mag"] for s in stars], dtype=float)
        alt, az = transform_radec_to_altaz(ra, dec, self.state.latitude, self.state.lst)
        mask = filter_visible(alt)
        xs, ys = disk_project(alt[mask], az[mask], self.center.x, self.center.y, self.horizon_radius)

        sizes = self._scaled(STAR_BASE_SIZE * cfg.scale) / STAR_SIZE_BASE ** (mags[mask] + data["mag"]["max"])
        glow = self._glow(GLOW_BODY)
        for x, y, size in zip(xs, ys, sizes):
            self.surface.draw_disk(ScreenPoint(float(x), float(y)), float(size), cfg.color, glow)

    def _body_point(self, body: str) -> ScreenPoint:
        params = self.state.params
        ra, dec = self.ephemeris.equatorial(body, params.date, params.latitude, params.longitude)
        return self.project(self.horizontal(ra, dec))

    def _draw_planets(self) -> None:
        cfg = self.config.planets
        if not cfg.enabled:
            return
        font_size = self.scale_mod * cfg.labels.fontSize

        for planet in PLANETS:
            point = self._body_point(planet.body)
            color = cfg.color if cfg.color is not None else planet.color
            radius = self._scaled(planet.radius * cfg.scale)
            self.surface.draw_disk(point, radius, color, self._glow(GLOW_BODY))

            if cfg.labels.enabled:
                all_labels = self.catalogs.planet_labels
                if all_labels is None:
                    raise MissingDataError("planet labels not loaded")
                if planet.id not in all_labels:
                    raise MissingDataError(f"planet label not found: {planet.id}")
                text = self._translate(all_labels[planet.id], f"planet {planet.id}")
                text_width = self.surface.measure_text(text, font_size)
                self.surface.fill_text(
                    text, point.x - text_width / 2, point.y - radius - font_size / 2,
                    cfg.labels.color, font_size, self.config.fontFamily,
                )

    def _draw_sun(self) -> None:
        self._draw_luminary(SUN, self.config.sun, SUN_RADIUS, self.catalogs.sun_labels)

    def _draw_moon(self) -> None:
        self._draw_luminary(MOON, self.config.moon, MOON_RADIUS, self.catalogs.moon_labels)

    def _draw_luminary(self, body: str, cfg: Any, base_radius: float, labels: Mapping[str, str] | None) -> None:
        if not cfg.enabled:
            return
        point = self._body_point(body)
        radius = self._scaled(base_radius * cfg.scale)
        self.surface.draw_disk(point, radius, cfg.color, self._glow(GLOW_BODY))

        if cfg.label.enabled:
            if labels is None:
                raise MissingDataError(f"{body} labels not loaded")
            text = self._translate(labels, body)
            font_size = self.scale_mod * cfg.label.fontSize
            text_width = self.surface.measure_text(text, font_size)
            self.surface.fill_text(
                text, point.x - text_width / 2, point.y - radius * 1.5,
                cfg.label.color, font_size, self.config.fontFamily,
            )

    def _translate(self, labels: Mapping[str, str], what: str) -> str:
        language = self.config.language
        text = labels.get(language)
        if not text:
            raise MissingDataError(f"{what} label for language {language!r} not found")
        return text


def _lerp_location(
    start: tuple[float, float], end: tuple[float, float], t: float,
) -> tuple[float, float]:
    # latitude never wraps, so a straight lerp is already the shorter arc
    lat = lerp(start[0], end[0], t)
    lon = signed_degrees(lerp_angle(start[1], end[1], t))
    return lat, lon


def surface_size(surface: DrawingSurface) -> float:
    """Side of the square that fits the surface."""
    return min(surface.width, surface.height)
