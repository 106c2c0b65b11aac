"""Rays, square ray packets with their frustum planes, and packet hit results."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable

import numpy as np

from .vector import FLT_MAX, Vec3

RAYPACKET_WIDTH = 16
RAYPACKET_HEIGHT = 16
RAYPACKET_SIZE = RAYPACKET_WIDTH * RAYPACKET_HEIGHT

RAYPACKET_TOP_LEFT = 0
RAYPACKET_TOP_RIGHT = 85
RAYPACKET_BOTTOM_LEFT = 171
RAYPACKET_BOTTOM_RIGHT = 255

JOB_INC = 1


@dataclass
class Ray:
    """A half-line with an origin and a direction."""

    origin: Vec3
    direction: Vec3

    def sample(self, t: float) -> Vec3:
        """Point at distance t along the ray."""
        return self.origin + self.direction * t

    def reflect(self, normal: Vec3) -> Ray:
        """Ray from the same origin with its direction mirrored about normal."""
        d = self.direction
        return Ray(self.origin, d - 2.0 * d.dot(normal) * normal)

    def transform(self, matrix) -> Ray:
        """Transform by a 4x4 matrix applied to row vectors; the direction is renormalised."""
        m = np.asarray(matrix, dtype=float)
        if m.shape != (4, 4):
            raise ValueError(f"expected a 4x4 matrix, got shape {m.shape}")
        origin = np.array([*self.origin, 1.0]) @ m
        direction = np.array([*self.direction, 0.0]) @ m
        new_direction = Vec3(*(float(c) for c in direction[:3])).normalize()
        return Ray(Vec3(*(float(c) for c in origin[:3])), new_direction)


class TraversalResultPacket:
    """Nearest hit distance and primitive id for every ray of a packet."""

    def __init__(self, count: int):
        self.t: list[float] = [FLT_MAX] * count
        self.ids: list[int] = [-1] * count


class RayPacket:
    """A block of rays sharing one origin, bounded by four frustum planes."""

    def __init__(
        self,
        origin: Vec3,
        directions: Iterable[Vec3],
        width: int = RAYPACKET_WIDTH,
        height: int = RAYPACKET_HEIGHT,
    ):
        self.origin = origin
        self.directions = list(directions)
        self.width = width
        self.height = height
        if len(self.directions) != width * height:
            raise ValueError(
                f"expected {width * height} directions, got {len(self.directions)}"
            )
        if len(self.directions) <= RAYPACKET_BOTTOM_RIGHT:
            raise ValueError(f"a packet needs at least {RAYPACKET_SIZE} rays")
        corners = [
            origin + self.directions[i]
            for i in (
                RAYPACKET_TOP_RIGHT,
                RAYPACKET_TOP_LEFT,
                RAYPACKET_BOTTOM_LEFT,
                RAYPACKET_BOTTOM_RIGHT,
            )
        ]
        self.planes: list[Vec3] = []
        self.plane_distances: list[float] = []
        for corner, following in zip(corners, corners[1:] + corners[:1]):
            plane = (corner - origin).cross(following - corner).normalize()
            self.planes.append(plane)
            self.plane_distances.append(plane.dot(origin))