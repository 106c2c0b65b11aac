"""Analytic shapes that a ray can hit: planes, spheres and tori."""

from __future__ import annotations

import enum
import math
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import ClassVar, Optional

import numpy as np

from .manifest import Manifest
from .ray import Ray
from .vector import FLT_MAX, Vec2, Vec3

_TWO_PI = 2.0 * math.pi


class ShapeType(enum.IntEnum):
    NONE = 0x00
    SPHERE = 0x01
    PLANE = 0x02
    TRIANGLE = 0x03
    TORUS = 0x04


class Shape(ABC):
    """A surface that reports where a ray first meets it."""

    shape_type: ClassVar[ShapeType] = ShapeType.NONE

    @abstractmethod
    def intersect(self, ray: Ray) -> Optional[Manifest]:
        """The hit of ray with this shape, or None when it misses."""

    @abstractmethod
    def uv(self, point: Vec3, normal: Vec3) -> Vec2:
        """Texture coordinates of a point on the surface."""


@dataclass
class Plane(Shape):
    """An infinite one-sided plane through point, facing along normal."""

    point: Vec3
    normal: Vec3

    shape_type: ClassVar[ShapeType] = ShapeType.PLANE

    def intersect(self, ray: Ray) -> Optional[Manifest]:
        cos_theta = self.normal.dot(ray.direction)
        # Only front faces: the normal must point against the ray.
        if -cos_theta <= 1e-6:
            return None
        t = (self.point - ray.origin).dot(self.normal) / cos_theta
        if t < 0.0:
            return None
        hit = ray.sample(t)
        return Manifest(
            t=t,
            surface_normal=self.normal,
            shading_normal=self.normal,
            intersection_point=hit,
            uv=self.uv(hit, self.normal),
        )

    def uv(self, point: Vec3, normal: Vec3) -> Vec2:
        a = normal.cross(Vec3(1.0, 0.0, 0.0))
        b = normal.cross(Vec3(0.0, 1.0, 0.0))
        c = normal.cross(Vec3(0.0, 0.0, 1.0))
        max_ab = b if a.dot(a) < b.dot(b) else a
        u_axis = (c if max_ab.dot(max_ab) < c.dot(c) else max_ab).normalize()
        v_axis = normal.cross(u_axis)
        return Vec2(
            math.modf(abs(u_axis.dot(point)))[0],
            math.modf(abs(v_axis.dot(point)))[0],
        )


@dataclass
class Sphere(Shape):
    """A sphere that can be hit from outside or from within."""

    position: Vec3
    radius: float
    radius2: float = field(init=False)

    shape_type: ClassVar[ShapeType] = ShapeType.SPHERE

    def __post_init__(self) -> None:
        self.radius2 = self.radius * self.radius

    def intersect(self, ray: Ray) -> Optional[Manifest]:
        if self.position.distance_squared(ray.origin) <= self.radius2:
            return self._intersect_inner(ray)
        return self._intersect_outer(ray)

    def _manifest(self, t: float, hit: Vec3) -> Manifest:
        normal = (hit - self.position).normalize()
        return Manifest(
            t=t,
            surface_normal=normal,
            shading_normal=normal,
            intersection_point=hit,
            uv=self.uv(hit - self.position, normal),
        )

    def _intersect_outer(self, ray: Ray) -> Optional[Manifest]:
        to_center = self.position - ray.origin
        t = to_center.dot(ray.direction)
        q = to_center - t * ray.direction
        p2 = q.dot(q)
        if p2 > self.radius2:
            return None
        t -= math.sqrt(self.radius2 - p2)
        if t <= 0.0:
            return None
        return self._manifest(t, ray.origin + ray.direction * t)

    def _intersect_inner(self, ray: Ray) -> Optional[Manifest]:
        to_center = self.position - ray.origin
        tca = to_center.dot(ray.direction)
        if tca < 0:
            return None
        d2 = to_center.dot(to_center) - tca * tca
        if d2 > self.radius2:
            return None
        thc = math.sqrt(self.radius2 - d2)
        t0, t1 = tca - thc, tca + thc
        if t0 < 0 and t1 < 0:
            return None
        if t0 > t1 or t0 < 0:
            t0, t1 = t1, t0
        return self._manifest(t0, ray.sample(t0))

    def uv(self, point: Vec3, normal: Vec3) -> Vec2:
        theta = math.atan2(point.x, point.z)
        phi = math.acos(point.y / point.magnitude())
        raw_u = theta / _TWO_PI
        return Vec2(1.0 - (raw_u + 0.5), 1.0 - phi / math.pi)


@dataclass
class Torus(Shape):
    """A torus around the y axis with major radius r1 and tube radius r2.

    The reported intersection point is expressed relative to the torus centre.
    """

    position: Vec3
    r1: float
    r2: float
    model: np.ndarray = field(init=False, repr=False)
    inverse_model: np.ndarray = field(init=False, repr=False)

    shape_type: ClassVar[ShapeType] = ShapeType.TORUS

    def __post_init__(self) -> None:
        model = np.eye(4)
        model[:3, 3] = [self.position.x, self.position.y, self.position.z]
        self.model = model
        self.inverse_model = np.linalg.inv(model).T

    def intersect(self, ray: Ray) -> Optional[Manifest]:
        local = ray.transform(self.inverse_model)
        d, o = local.direction, local.origin
        major2 = self.r1 * self.r1
        minor2 = self.r2 * self.r2

        dir_dot = d.dot(d)
        origin_dot = o.dot(o)
        origin_dir_dot = d.dot(o)
        common = origin_dot - major2 - minor2

        c4 = dir_dot * dir_dot
        c3 = 4.0 * dir_dot * origin_dir_dot
        c2 = (
            2.0 * dir_dot * common
            + 4.0 * origin_dir_dot * origin_dir_dot
            + 4.0 * major2 * d.y * d.y
        )
        c1 = 4.0 * common * origin_dir_dot + 8.0 * major2 * o.y * d.y
        c0 = common * common - 4.0 * major2 * (minor2 - o.y * o.y)

        roots = np.roots([1.0, c3 / c4, c2 / c4, c1 / c4, c0 / c4])
        nearest = FLT_MAX
        for root in roots:
            value = complex(root)
            if value.imag == 0.0 and 0.0 < value.real < nearest:
                nearest = value.real
        if nearest == FLT_MAX:
            return None

        local_point = local.sample(nearest)
        sum_squared = local_point.dot(local_point)
        radii = major2 + minor2
        normal = Vec3(
            4.0 * local_point.x * (sum_squared - radii),
            4.0 * local_point.y * (sum_squared - radii + 2.0 * major2),
            4.0 * local_point.z * (sum_squared - radii),
        ).normalize()
        world = self.model @ np.array([normal.x, normal.y, normal.z, 0.0])
        shading = Vec3(float(world[0]), float(world[1]), float(world[2])).normalize()
        return Manifest(
            t=nearest,
            intersection_point=local_point,
            uv=self.uv(local_point, Vec3(1.0, 1.0, 1.0).normalize()),
            shading_normal=shading,
            surface_normal=shading,
        )

    def uv(self, point: Vec3, normal: Vec3) -> Vec2:
        u = 0.5 + math.atan2(point.z, point.x) / _TWO_PI
        ring = math.sqrt(point.x * point.x + point.z * point.z) - self.r1
        v = 0.5 + math.atan2(point.y, ring) / _TWO_PI
        return Vec2(u, v)