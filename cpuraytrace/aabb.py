"""Axis-aligned bounding boxes with ray, packet and frustum tests."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, Union

from .ray import Ray, RayPacket
from .vector import Vec3


def _slab_hit(minimum: Vec3, maximum: Vec3, origin: Vec3, direction: Vec3) -> bool:
    inverse = 1.0 / direction
    t_min = (minimum - origin) * inverse
    t_max = (maximum - origin) * inverse
    nearest = max(min(t_min.x, t_max.x), min(t_min.y, t_max.y), min(t_min.z, t_max.z))
    farthest = min(max(t_min.x, t_max.x), max(t_min.y, t_max.y), max(t_min.z, t_max.z))
    return farthest >= 0.0 and farthest >= nearest


@dataclass
class AABB:
    """A box spanning minimum to maximum along each axis."""

    minimum: Vec3 = field(default_factory=Vec3.zero)
    maximum: Vec3 = field(default_factory=Vec3.zero)

    @classmethod
    def negative_box(cls) -> AABB:
        """An inverted box that any extension replaces entirely."""
        return cls(Vec3.infinity(), Vec3.negative_infinity())

    def extend(self, other: Union[AABB, Vec3]) -> AABB:
        """Smallest box containing this box and another box or point."""
        if isinstance(other, AABB):
            return AABB(
                self.minimum.component_min(other.minimum),
                self.maximum.component_max(other.maximum),
            )
        return AABB(self.minimum.component_min(other), self.maximum.component_max(other))

    def intersects(self, ray: Ray) -> bool:
        return _slab_hit(self.minimum, self.maximum, ray.origin, ray.direction)

    def intersects_packet_ray(self, packet: RayPacket, index: int) -> bool:
        return _slab_hit(self.minimum, self.maximum, packet.origin, packet.directions[index])

    def intersect_frustum(self, packet: RayPacket) -> bool:
        """True when the box straddles one of the packet's offset frustum planes."""
        center = (self.maximum + self.minimum) * 0.5
        extent = self.maximum - center
        for normal, distance in zip(packet.planes, packet.plane_distances):
            radius = (
                extent.x * abs(normal.x)
                + extent.y * abs(normal.y)
                + extent.z * abs(normal.z)
            )
            signed = normal.dot(center) - (distance - 150.0)
            if abs(signed) <= radius:
                return True
        return False

    def find_first_active(self, packet: RayPacket, first: int) -> Optional[int]:
        """Index of the first ray after `first` that hits the box, or None."""
        for index in range(first + 1, len(packet.directions)):
            if self.intersects_packet_ray(packet, index):
                return index
        return None

    def intersect_packet(self, packet: RayPacket, first: int) -> Optional[int]:
        """First active ray index for this box, or None when the packet misses it."""
        if self.intersects_packet_ray(packet, first):
            return first
        if self.intersect_frustum(packet):
            return None
        return self.find_first_active(packet, first)

    def dimensions(self) -> Vec3:
        return (self.maximum - self.minimum).abs()

    def surface_area(self) -> float:
        d = self.dimensions()
        return 2.0 * (d.x * d.y + d.y * d.z + d.z * d.x)