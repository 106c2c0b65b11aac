"""Pinhole camera that turns tile pixels into primary rays."""

from __future__ import annotations

import math

from .ray import RAYPACKET_HEIGHT, RAYPACKET_SIZE, RAYPACKET_WIDTH, Ray, RayPacket
from .vector import Vec2, Vec3, morton_to_xy


class Camera:
    """A camera with a position, a viewing direction and a focal length."""

    def __init__(self, viewport_size: Vec2):
        self.viewport_size = viewport_size
        self.position = Vec3.zero()
        self.focal_length = 1.0
        self.anti_aliasing = 1
        self._front = Vec3.forward()
        self._up = Vec3.up()
        self._right = Vec3.right()
        self._view = self._construct_view()

    @property
    def front(self) -> Vec3:
        return self._front

    @property
    def up(self) -> Vec3:
        return self._up

    @property
    def right(self) -> Vec3:
        return self._right

    @property
    def field_of_view(self) -> float:
        """Horizontal opening angle in radians for a camera plane of half-width 1."""
        return math.atan(1.0 / self.focal_length) * 2.0

    @field_of_view.setter
    def field_of_view(self, angle: float) -> None:
        self.focal_length = 1.0 / math.tan(angle / 2.0)

    def set_direction(self, direction: Vec3) -> None:
        self._front = direction
        self._right = direction.cross(Vec3.up()).normalize()
        self._up = self._right.cross(direction).normalize()
        self._view = self._construct_view()

    def _construct_view(self) -> tuple[Vec3, Vec3, Vec3]:
        forward = self._front.normalize()
        side = forward.cross(Vec3.up()).normalize()
        upward = side.cross(forward)
        return side, upward, forward

    def _transform(self, v: Vec3) -> Vec3:
        side, upward, forward = self._view
        return side * v.x + upward * v.y - forward * v.z

    def _direction(self, job_id: int, x: int, y: int) -> Vec3:
        camera_plane = self.focal_length * Vec3(0.0, 0.0, -1.0)
        p0 = camera_plane + Vec3(-1.0, 1.0, 0.0)
        p1 = camera_plane + Vec3(1.0, 1.0, 0.0)
        p2 = camera_plane + Vec3(-1.0, -1.0, 0.0)

        xa, ya = morton_to_xy(job_id)
        u = (xa + x) / (self.viewport_size.x - 1.0)
        v = (ya + y) / (self.viewport_size.y - 1.0)

        uv = p0 + u * (p1 - p0) + v * (p2 - p0)
        aspect_ratio = self.viewport_size.x / self.viewport_size.y
        uv = Vec3(uv.x * aspect_ratio, uv.y, uv.z)
        return self._transform(uv).normalize()

    def construct_ray(self, job_id: int, x: int, y: int) -> Ray:
        """Primary ray for Morton index job_id inside the tile at (x, y)."""
        return Ray(self.position, self._direction(job_id, x, y))

    def construct_ray_packet(self, job_id: int, x: int, y: int) -> RayPacket:
        """Packet of the 16x16 primary rays starting at Morton index job_id."""
        directions = [self._direction(job_id + i, x, y) for i in range(RAYPACKET_SIZE)]
        return RayPacket(self.position, directions, RAYPACKET_WIDTH, RAYPACKET_HEIGHT)