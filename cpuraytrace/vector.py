"""Immutable two- and three-component vectors and Morton-order helpers."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Iterator, Union

FLT_MAX = 3.4028234663852886e38


def _ieee_div(a: float, b: float) -> float:
    """Divide like IEEE-754 floats: dividing by zero gives an infinity or NaN."""
    try:
        return a / b
    except ZeroDivisionError:
        if a == 0.0 or math.isnan(a):
            return math.nan
        return math.copysign(math.inf, a) * math.copysign(1.0, b)


@dataclass(frozen=True, slots=True)
class Vec2:
    """A two-component float vector, used for texture coordinates and sizes."""

    x: float = 0.0
    y: float = 0.0

    def __add__(self, other: Vec2) -> Vec2:
        return Vec2(self.x + other.x, self.y + other.y)

    def __sub__(self, other: Vec2) -> Vec2:
        return Vec2(self.x - other.x, self.y - other.y)

    def __neg__(self) -> Vec2:
        return Vec2(-self.x, -self.y)

    def __mul__(self, scalar: float) -> Vec2:
        return Vec2(self.x * scalar, self.y * scalar)

    __rmul__ = __mul__

    def __truediv__(self, scalar: float) -> Vec2:
        return Vec2(_ieee_div(self.x, scalar), _ieee_div(self.y, scalar))

    def __iter__(self) -> Iterator[float]:
        yield self.x
        yield self.y


Operand = Union["Vec3", float, int]


@dataclass(frozen=True, slots=True)
class Vec3:
    """A three-component float vector with component-wise arithmetic."""

    x: float = 0.0
    y: float = 0.0
    z: float = 0.0

    @classmethod
    def zero(cls) -> Vec3:
        return cls(0.0, 0.0, 0.0)

    @classmethod
    def one(cls) -> Vec3:
        return cls(1.0, 1.0, 1.0)

    @classmethod
    def infinity(cls) -> Vec3:
        return cls(math.inf, math.inf, math.inf)

    @classmethod
    def negative_infinity(cls) -> Vec3:
        return cls(-math.inf, -math.inf, -math.inf)

    @classmethod
    def up(cls) -> Vec3:
        return cls(0.0, 1.0, 0.0)

    @classmethod
    def right(cls) -> Vec3:
        return cls(1.0, 0.0, 0.0)

    @classmethod
    def forward(cls) -> Vec3:
        return cls(0.0, 0.0, -1.0)

    def __add__(self, other: Vec3) -> Vec3:
        return Vec3(self.x + other.x, self.y + other.y, self.z + other.z)

    def __sub__(self, other: Vec3) -> Vec3:
        return Vec3(self.x - other.x, self.y - other.y, self.z - other.z)

    def __neg__(self) -> Vec3:
        return Vec3(-self.x, -self.y, -self.z)

    def __mul__(self, other: Operand) -> Vec3:
        if isinstance(other, Vec3):
            return Vec3(self.x * other.x, self.y * other.y, self.z * other.z)
        return Vec3(self.x * other, self.y * other, self.z * other)

    __rmul__ = __mul__

    def __truediv__(self, other: Operand) -> Vec3:
        if isinstance(other, Vec3):
            return Vec3(
                _ieee_div(self.x, other.x),
                _ieee_div(self.y, other.y),
                _ieee_div(self.z, other.z),
            )
        return Vec3(
            _ieee_div(self.x, other), _ieee_div(self.y, other), _ieee_div(self.z, other)
        )

    def __rtruediv__(self, scalar: float) -> Vec3:
        return Vec3(
            _ieee_div(scalar, self.x), _ieee_div(scalar, self.y), _ieee_div(scalar, self.z)
        )

    def __getitem__(self, index: int) -> float:
        return (self.x, self.y, self.z)[index]

    def __iter__(self) -> Iterator[float]:
        yield self.x
        yield self.y
        yield self.z

    def dot(self, other: Vec3) -> float:
        return self.x * other.x + self.y * other.y + self.z * other.z

    def cross(self, other: Vec3) -> Vec3:
        return Vec3(
            self.y * other.z - self.z * other.y,
            self.z * other.x - self.x * other.z,
            self.x * other.y - self.y * other.x,
        )

    def magnitude_squared(self) -> float:
        return self.dot(self)

    def magnitude(self) -> float:
        return math.sqrt(self.magnitude_squared())

    def normalize(self) -> Vec3:
        return self / self.magnitude()

    def component_min(self, other: Vec3) -> Vec3:
        return Vec3(min(self.x, other.x), min(self.y, other.y), min(self.z, other.z))

    def component_max(self, other: Vec3) -> Vec3:
        return Vec3(max(self.x, other.x), max(self.y, other.y), max(self.z, other.z))

    def abs(self) -> Vec3:
        return Vec3(abs(self.x), abs(self.y), abs(self.z))

    def distance_squared(self, other: Vec3) -> float:
        return (self - other).magnitude_squared()


def _spread_bits(value: int) -> int:
    value &= 0xFFFF
    value = (value | (value << 8)) & 0x00FF00FF
    value = (value | (value << 4)) & 0x0F0F0F0F
    value = (value | (value << 2)) & 0x33333333
    value = (value | (value << 1)) & 0x55555555
    return value


def _compact_bits(value: int) -> int:
    value &= 0x5555555555555555
    value = (value | (value >> 1)) & 0x3333333333333333
    value = (value | (value >> 2)) & 0x0F0F0F0F0F0F0F0F
    value = (value | (value >> 4)) & 0x00FF00FF00FF00FF
    value = (value | (value >> 8)) & 0x0000FFFF0000FFFF
    value = (value | (value >> 16)) & 0x00000000FFFFFFFF
    return value


def xy_to_morton(x: int, y: int) -> int:
    """Interleave the low 16 bits of x (even bits) and y (odd bits)."""
    return _spread_bits(x) | (_spread_bits(y) << 1)


def morton_to_xy(m: int) -> tuple[int, int]:
    """Split a Morton code back into its (x, y) coordinates."""
    return _compact_bits(m), _compact_bits(m >> 1)