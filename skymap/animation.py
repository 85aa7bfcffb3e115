"""Easing, interpolators and the single-flight tween driver.

The driver never sleeps or spawns threads. Frames come from a
FrameScheduler (the host's "next frame" primitive); each frame callback
runs to completion before the next one is requested.
"""
from __future__ import annotations

import itertools
import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Generic, Protocol, TypeVar

from skymap.astro_time import as_utc

logger = logging.getLogger("SkyMap.animation")

T = TypeVar("T")

FrameCallback = Callable[[float], None]
Interpolator = Callable[[T, T, float], T]


def ease_progress(progress: float) -> float:
    """Ease-in-out quadratic: 2p^2 below 0.5, 1 - 2(1-p)^2 above."""
    if progress < 0.5:
        return 2.0 * progress ** 2
    return 1.0 - 2.0 * (1.0 - progress) ** 2


def lerp(start: float, end: float, t: float) -> float:
    return start + (end - start) * t


def lerp_datetime(start: datetime, end: datetime, t: float) -> datetime:
    """Interpolate instants in UTC; naive values are taken as UTC."""
    start = as_utc(start)
    return start + (as_utc(end) - start) * t


def lerp_angle(start: float, end: float, t: float) -> float:
    """Interpolate degrees along the shorter arc.

    The raw delta is folded into (-180, 180] before scaling, so
    350 -> 10 passes through 0 rather than 180.

    Returns:
        Degrees in [0, 360).
    """
    delta = (end - start) % 360.0
    if delta > 180.0:
        delta -= 360.0
    return (start + delta * t) % 360.0


def signed_degrees(degrees: float) -> float:
    """Fold degrees into [-180, 180)."""
    return (degrees + 180.0) % 360.0 - 180.0


class FrameScheduler(Protocol):
    """Host "next frame" primitive.

    Callbacks receive the frame time in milliseconds on the same clock
    that ``now()`` reads.
    """

    def now(self) -> float: ...

    def request_frame(self, callback: FrameCallback) -> int: ...

    def cancel_frame(self, handle: int) -> None: ...


class ManualFrameScheduler:
    """Deterministic frame source with its own millisecond clock.

    Each advance() delivers one frame to every callback requested before
    it; callbacks requested during a frame wait for the next one. A
    callback that raises stops the frame, and the callbacks not yet run
    stay pending for the next advance().
    """

    def __init__(self, start_ms: float = 0.0) -> None:
        self.time_ms = start_ms
        self._handles = itertools.count(1)
        self._pending: dict[int, FrameCallback] = {}

    def now(self) -> float:
        return self.time_ms

    @property
    def pending(self) -> int:
        return len(self._pending)

    def request_frame(self, callback: FrameCallback) -> int:
        handle = next(self._handles)
        self._pending[handle] = callback
        return handle

    def cancel_frame(self, handle: int) -> None:
        self._pending.pop(handle, None)

    def advance(self, dt_ms: float) -> None:
        self.time_ms += dt_ms
        for handle in list(self._pending):
            # None when an earlier callback of this frame cancelled it
            callback = self._pending.pop(handle, None)
            if callback is not None:
                callback(self.time_ms)

    def run_until_idle(self, frame_ms: float = 1000.0 / 60.0, max_frames: int = 100_000) -> int:
        """Advance frame by frame until nothing is pending. Returns frame count."""
        frames = 0
        while self._pending:
            if frames >= max_frames:
                raise RuntimeError(f"Scheduler still busy after {max_frames} frames")
            self.advance(frame_ms)
            frames += 1
        return frames


@dataclass
class Tween(Generic[T]):
    start: T
    target: T
    duration_ms: float
    start_time: float
    interpolate: Interpolator
    update: Callable[[T], None]

    def progress(self, now: float) -> float:
        if self.duration_ms <= 0:
            return 1.0
        elapsed = max(now - self.start_time, 0.0)
        return min(elapsed / self.duration_ms, 1.0)

    def value_at(self, progress: float) -> T:
        if progress >= 1.0:
            return self.target
        return self.interpolate(self.start, self.target, ease_progress(progress))


class Animator:
    """Runs at most one tween at a time (Idle -> Running -> Idle).

    Starting a tween while another is running cancels the old one: its
    update callback never fires again and it gets no completion call.
    """

    def __init__(self, scheduler: FrameScheduler) -> None:
        self._scheduler = scheduler
        self._tween: Tween[Any] | None = None
        self._frame_handle: int | None = None

    @property
    def running(self) -> bool:
        return self._tween is not None

    def start(
        self,
        start: T,
        target: T,
        duration_ms: float,
        update: Callable[[T], None],
        interpolate: Interpolator,
    ) -> Tween[T]:
        self.cancel()
        tween = Tween(start, target, duration_ms, self._scheduler.now(), interpolate, update)
        self._tween = tween
        logger.debug("tween start %r -> %r over %.0f ms", start, target, duration_ms)
        self._frame_handle = self._scheduler.request_frame(lambda now: self._step(tween, now))
        return tween

    def cancel(self) -> None:
        if self._frame_handle is not None:
            self._scheduler.cancel_frame(self._frame_handle)
            self._frame_handle = None
        if self._tween is not None:
            logger.debug("tween cancelled")
            self._tween = None

    def _step(self, tween: Tween[Any], now: float) -> None:
        # a superseded tween's frame is dropped
        if tween is not self._tween:
            return
        self._frame_handle = None
        progress = tween.progress(now)
        try:
            tween.update(tween.value_at(progress))
        except Exception:
            if tween is self._tween:
                self._tween = None
            raise

        # update() may itself have started or cancelled a tween
        if tween is not self._tween:
            return
        if progress < 1.0:
            self._frame_handle = self._scheduler.request_frame(lambda t: self._step(tween, t))
        else:
            self._frame_handle = None
            self._tween = None
            logger.debug("tween done")
