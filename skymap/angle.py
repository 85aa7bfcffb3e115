"""Immutable angle value with degree/radian/hour views."""
from __future__ import annotations

import math
from dataclasses import dataclass
from functools import cached_property

TWO_PI = 2.0 * math.pi


@dataclass(frozen=True)
class Angle:
    """An angle stored as radians.

    All other units and the trig values are derived from ``radians`` and
    cached on first access.
    """

    radians: float

    @classmethod
    def from_degrees(cls, degrees: float) -> Angle:
        return cls(math.radians(degrees))

    @classmethod
    def from_radians(cls, radians: float) -> Angle:
        return cls(radians)

    @classmethod
    def from_hours(cls, hours: float) -> Angle:
        return cls(hours * math.pi / 12.0)

    @cached_property
    def degrees(self) -> float:
        return math.degrees(self.radians)

    @cached_property
    def hours(self) -> float:
        return self.radians * 12.0 / math.pi

    @cached_property
    def sin(self) -> float:
        return math.sin(self.radians)

    @cached_property
    def cos(self) -> float:
        return math.cos(self.radians)

    @cached_property
    def tan(self) -> float:
        return math.tan(self.radians)

    @property
    def cot(self) -> float:
        return 1.0 / self.tan

    def normalize(self) -> Angle:
        """Return a new Angle in [0, 2pi)."""
        rad = self.radians % TWO_PI
        # x % 2pi can round up to exactly 2pi for tiny negative x
        if rad >= TWO_PI:
            rad = 0.0
        return Angle(rad)

    def add(self, other: Angle) -> Angle:
        return Angle(self.radians + other.radians)

    def subtract(self, other: Angle) -> Angle:
        return Angle(self.radians - other.radians)

    def multiply(self, factor: float) -> Angle:
        return Angle(self.radians * factor)

    def add_degrees(self, degrees: float) -> Angle:
        return self.add(Angle.from_degrees(degrees))

    def __add__(self, other: Angle) -> Angle:
        return self.add(other)

    def __sub__(self, other: Angle) -> Angle:
        return self.subtract(other)

    def __mul__(self, factor: float) -> Angle:
        return self.multiply(factor)

    __rmul__ = __mul__

    def __neg__(self) -> Angle:
        return Angle(-self.radians)
