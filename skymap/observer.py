"""Observer parameters, validation and the mutable view state."""
from __future__ import annotations

import logging
import math
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field, fields, replace
from datetime import datetime, timezone
from numbers import Real
from typing import Any

from skymap.angle import Angle
from skymap.astro_time import AstronomicalTime
from skymap.errors import InvalidObserverParams
from skymap.projection import fov_factor

logger = logging.getLogger("SkyMap.observer")

# -- Accepted Ranges (degrees) --
LATITUDE_RANGE = (-90.0, 90.0)
LONGITUDE_RANGE = (-180.0, 180.0)
FOV_RANGE = (0.0, 360.0)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class ObserverParams:
    """Location, time and field of view that define one view of the sky."""

    latitude: float = 0.0
    longitude: float = 0.0
    date: datetime = field(default_factory=_utcnow)
    fov: float = 180.0

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> ObserverParams:
        """Build params from a mapping holding exactly the four fields."""
        names = {f.name for f in fields(cls)}
        missing = names - data.keys()
        unknown = data.keys() - names
        if missing or unknown:
            raise InvalidObserverParams(
                f"Malformed observer params: missing={sorted(missing)} unknown={sorted(unknown)}"
            )
        return cls(**{name: data[name] for name in names})

    @classmethod
    def with_defaults(cls, data: Mapping[str, Any]) -> ObserverParams:
        """Build params from a partial mapping; absent fields keep defaults."""
        unknown = data.keys() - {f.name for f in fields(cls)}
        if unknown:
            raise InvalidObserverParams(f"Unknown observer params: {sorted(unknown)}")
        return cls(**data)


def _check_range(name: str, value: Any, bounds: tuple[float, float]) -> None:
    # bool is a Real subclass but never a meaningful coordinate
    if isinstance(value, bool) or not isinstance(value, Real):
        raise InvalidObserverParams(f"{name} must be a number, got {value!r}")
    lo, hi = bounds
    if not math.isfinite(value) or not lo <= value <= hi:
        raise InvalidObserverParams(f"{name} must be between {lo:g} and {hi:g}, got {value!r}")


def validate_latitude(latitude: Any) -> None:
    _check_range("Latitude", latitude, LATITUDE_RANGE)


def validate_longitude(longitude: Any) -> None:
    _check_range("Longitude", longitude, LONGITUDE_RANGE)


def validate_fov(fov: Any) -> None:
    _check_range("Fov", fov, FOV_RANGE)


def validate_date(date: Any) -> None:
    if not isinstance(date, datetime):
        raise InvalidObserverParams(f"Date must be a datetime, got {date!r}")


def validate_observer_params(params: ObserverParams) -> None:
    """Raise InvalidObserverParams if any field is out of range."""
    validate_latitude(params.latitude)
    validate_longitude(params.longitude)
    validate_date(params.date)
    validate_fov(params.fov)


class ObserverState:
    """Single mutable snapshot of what a redraw depends on.

    Every setter validates first and mutates only on success, then
    refreshes the derived fields (``lst`` from longitude and date,
    ``fov_factor`` from fov) and calls ``on_change`` once.
    """

    def __init__(
        self,
        params: ObserverParams | None = None,
        on_change: Callable[[], None] | None = None,
    ) -> None:
        params = replace(params) if params is not None else ObserverParams()
        validate_observer_params(params)
        self._params = params
        self._on_change = on_change

        self.latitude = Angle.from_degrees(params.latitude)
        self.longitude = Angle.from_degrees(params.longitude)
        self.date = AstronomicalTime.from_utc_date(params.date)
        self.fov_factor = fov_factor(params.fov)
        self.lst = self.date.lst(self.longitude)

    @property
    def params(self) -> ObserverParams:
        return replace(self._params)

    @property
    def fov(self) -> float:
        return self._params.fov

    # -- Setters --

    def set_latitude(self, latitude: float) -> None:
        validate_latitude(latitude)
        self._update_latitude(latitude)
        self._changed()

    def set_longitude(self, longitude: float) -> None:
        validate_longitude(longitude)
        self._update_longitude(longitude)
        self._changed()

    def set_location(self, latitude: float, longitude: float) -> None:
        validate_latitude(latitude)
        validate_longitude(longitude)
        self._update_latitude(latitude)
        self._update_longitude(longitude)
        self._changed()

    def set_date(self, date: datetime) -> None:
        validate_date(date)
        self._update_date(date)
        self._changed()

    def set_fov(self, fov: float) -> None:
        validate_fov(fov)
        self._update_fov(fov)
        self._changed()

    def set_observer_params(self, params: ObserverParams | Mapping[str, Any]) -> None:
        """Replace all four fields atomically."""
        if not isinstance(params, ObserverParams):
            if not isinstance(params, Mapping):
                raise InvalidObserverParams(f"Malformed observer params: {params!r}")
            params = ObserverParams.from_mapping(params)
        validate_observer_params(params)

        self._update_latitude(params.latitude)
        self._update_longitude(params.longitude)
        self._update_date(params.date)
        self._update_fov(params.fov)
        self._changed()

    # -- Internal --

    def _update_latitude(self, latitude: float) -> None:
        self._params.latitude = latitude
        self.latitude = Angle.from_degrees(latitude)

    def _update_longitude(self, longitude: float) -> None:
        self._params.longitude = longitude
        self.longitude = Angle.from_degrees(longitude)
        self.lst = self.date.lst(self.longitude)

    def _update_date(self, date: datetime) -> None:
        self._params.date = date
        self.date = AstronomicalTime.from_utc_date(date)
        self.lst = self.date.lst(self.longitude)

    def _update_fov(self, fov: float) -> None:
        self._params.fov = fov
        self.fov_factor = fov_factor(fov)

    def _changed(self) -> None:
        logger.debug(
            "observer lat=%.4f lon=%.4f date=%s fov=%.2f lst=%.4fh",
            self._params.latitude, self._params.longitude,
            self.date.utc_date.isoformat(), self._params.fov, self.lst.hours,
        )
        if self._on_change is not None:
            self._on_change()
