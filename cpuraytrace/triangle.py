"""Triangles with smooth normals, displacement and packet intersection."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Optional

from .aabb import AABB
from .manifest import Manifest
from .material import Texture
from .ray import Ray, RayPacket, TraversalResultPacket
from .vector import FLT_MAX, Vec2, Vec3

FLT_EPSILON = 1.1920928955078125e-07


@dataclass
class Triangle:
    """Three vertices with per-vertex texture coordinates and normals."""

    v0: Vec3 = field(default_factory=Vec3.zero)
    v1: Vec3 = field(default_factory=Vec3.zero)
    v2: Vec3 = field(default_factory=Vec3.zero)
    uv0: Vec2 = field(default_factory=Vec2)
    uv1: Vec2 = field(default_factory=Vec2)
    uv2: Vec2 = field(default_factory=Vec2)
    n0: Vec3 = field(default_factory=Vec3.zero)
    n1: Vec3 = field(default_factory=Vec3.zero)
    n2: Vec3 = field(default_factory=Vec3.zero)

    def intersect(self, ray: Ray, max_t: float = FLT_MAX) -> Optional[Manifest]:
        """Hit closer than max_t, found with the Moller-Trumbore test."""
        edge1 = self.v1 - self.v0
        edge2 = self.v2 - self.v0
        pvec = ray.direction.cross(edge2)
        det = edge1.dot(pvec)
        if det == 0.0:
            return None
        inv_det = 1.0 / det

        tvec = ray.origin - self.v0
        u = tvec.dot(pvec) * inv_det
        if u < 0 or u > 1:
            return None
        qvec = tvec.cross(edge1)
        v = ray.direction.dot(qvec) * inv_det
        if v < 0 or u + v > 1:
            return None

        t = qvec.dot(edge2) * inv_det
        if not 0.0 < t < max_t:
            return None
        w = 1.0 - u - v
        return Manifest(
            t=t,
            intersection_point=ray.sample(t),
            surface_normal=(self.v1 - self.v2).cross(self.v1 - self.v0).normalize(),
            uv=w * self.uv0 + u * self.uv1 + v * self.uv2,
            shading_normal=(self.n0 * w + self.n1 * u + self.n2 * v).normalize(),
        )

    def barycentric(self, bary: Vec3) -> tuple[Vec3, Vec3, Vec2]:
        """Vertex, normalised normal and uv at barycentric weights bary."""
        vertex = self.v0 * bary.x + self.v1 * bary.y + self.v2 * bary.z
        normal = (self.n0 * bary.x + self.n1 * bary.y + self.n2 * bary.z).normalize()
        uv = self.uv0 * bary.x + self.uv1 * bary.y + self.uv2 * bary.z
        return vertex, normal, uv

    def intersect_displaced(
        self, ray: Ray, heightmap: Optional[Texture]
    ) -> Optional[Manifest]:
        """Nearest hit on the four sub-triangles displaced along their normals.

        The displacement is the red channel of the heightmap; without one it is zero.
        """
        corners = {
            "a": Vec3(0.0, 0.0, 1.0),
            "ab": Vec3(0.0, 0.5, 0.5),
            "ac": Vec3(0.5, 0.0, 0.5),
            "bc": Vec3(0.5, 0.5, 0.0),
            "c": Vec3(1.0, 0.0, 0.0),
            "b": Vec3(0.0, 1.0, 0.0),
        }
        points = {}
        for name, weights in corners.items():
            vertex, normal, uv = self.barycentric(weights)
            height = heightmap.get_value(uv).x if heightmap is not None else 0.0
            points[name] = (vertex + normal * height, uv, normal)

        def build(first: str, second: str, third: str) -> Triangle:
            (p0, t0, m0), (p1, t1, m1), (p2, t2, m2) = (
                points[first],
                points[second],
                points[third],
            )
            return Triangle(p0, p1, p2, t0, t1, t2, m0, m1, m2)

        pieces = (
            build("ac", "ab", "a"),
            build("bc", "ab", "ac"),
            build("c", "bc", "ac"),
            build("bc", "b", "ab"),
        )
        nearest: Optional[Manifest] = None
        for piece in pieces:
            hit = piece.intersect(ray, nearest.t if nearest else FLT_MAX)
            if hit is not None:
                nearest = hit
        return nearest

    def intersect_packet(
        self,
        packet: RayPacket,
        result: TraversalResultPacket,
        first: int,
        primitive_id: int,
    ) -> None:
        """Record this triangle in result for every ray from first on that it hits nearest."""
        edge1 = self.v1 - self.v0
        edge2 = self.v2 - self.v0
        tvec = packet.origin - self.v0
        qvec = tvec.cross(edge1)
        for index in range(first, len(packet.directions)):
            direction = packet.directions[index]
            pvec = direction.cross(edge2)
            det = edge1.dot(pvec)
            if math.fabs(det) < FLT_EPSILON:
                continue
            inv_det = 1.0 / det
            u = tvec.dot(pvec) * inv_det
            if u < 0 or u > 1:
                continue
            v = direction.dot(qvec) * inv_det
            if v < 0 or u + v > 1:
                continue
            t = qvec.dot(edge2) * inv_det
            if 0.0 < t < result.t[index]:
                result.t[index] = t
                result.ids[index] = primitive_id

    def centroid(self) -> Vec3:
        return (self.v0 + self.v1 + self.v2) / 3.0

    def bounds(self) -> AABB:
        return AABB(
            self.v0.component_min(self.v1).component_min(self.v2),
            self.v0.component_max(self.v1).component_max(self.v2),
        )

    def displaced_bounds(self, max_height: float) -> AABB:
        """Box around the vertices pushed max_height down and up their normals."""
        pairs = ((self.v0, self.n0), (self.v1, self.n1), (self.v2, self.n2))
        lows = [v - n * max_height for v, n in pairs]
        highs = [v + n * max_height for v, n in pairs]
        return AABB(
            lows[0].component_min(lows[1]).component_min(lows[2]),
            highs[0].component_max(highs[1]).component_max(highs[2]),
        )