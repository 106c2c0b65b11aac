"""Directional, point and spot lights with their shadow rays."""

from __future__ import annotations

import math
from abc import ABC, abstractmethod
from dataclasses import dataclass, field

from .manifest import Manifest
from .ray import Ray
from .vector import Vec3, _ieee_div

SHADOW_BIAS = 1e-4


@dataclass
class ShadowRay:
    """A ray toward a light; anything hit before max_t casts a shadow."""

    ray: Ray
    max_t: float = 0.0


class Light(ABC):
    """A light source that lights surface points."""

    @abstractmethod
    def construct_shadow_ray(self, manifest: Manifest) -> ShadowRay:
        """Ray from the hit point toward the light."""

    @abstractmethod
    def light_contribution(self, manifest: Manifest) -> Vec3:
        """Colour this light adds at the hit point, ignoring occlusion."""

    @staticmethod
    def _offset_origin(manifest: Manifest) -> Vec3:
        # Shift along the surface normal so the shadow ray cannot hit its own surface.
        return manifest.intersection_point + manifest.surface_normal * SHADOW_BIAS


def _shadow_ray_to(position: Vec3, manifest: Manifest) -> ShadowRay:
    origin = Light._offset_origin(manifest)
    to_light = position - origin
    distance = to_light.magnitude()
    return ShadowRay(Ray(origin, to_light / distance), distance)


@dataclass
class DirectionalLight(Light):
    """Light arriving from infinitely far away along direction."""

    direction: Vec3 = field(default_factory=Vec3.zero)
    intensity: float = 1.0
    attenuation: Vec3 = field(default_factory=Vec3.one)

    def construct_shadow_ray(self, manifest: Manifest) -> ShadowRay:
        return ShadowRay(Ray(self._offset_origin(manifest), -self.direction), math.inf)

    def light_contribution(self, manifest: Manifest) -> Vec3:
        facing = max(0.0, manifest.shading_normal.dot(-self.direction))
        return facing * self.intensity * self.attenuation


@dataclass
class PointLight(Light):
    """Light radiating in all directions from position."""

    position: Vec3
    intensity: float = 1.0
    attenuation: Vec3 = field(default_factory=Vec3.one)

    def construct_shadow_ray(self, manifest: Manifest) -> ShadowRay:
        return _shadow_ray_to(self.position, manifest)

    def light_contribution(self, manifest: Manifest) -> Vec3:
        to_light = self.position - manifest.intersection_point
        distance = to_light.magnitude_squared()
        contribution = _ieee_div(self.intensity, 4.0 * math.pi * distance * distance)
        facing = max(0.0, manifest.shading_normal.dot(to_light.normalize()))
        return facing * contribution * self.attenuation


@dataclass
class SpotLight(Light):
    """A cone of light; cutoff and outer_cutoff are cosines of the cone angles."""

    position: Vec3
    direction: Vec3
    cutoff: float
    outer_cutoff: float
    intensity: float = 1.0
    attenuation: Vec3 = field(default_factory=Vec3.one)

    def construct_shadow_ray(self, manifest: Manifest) -> ShadowRay:
        return _shadow_ray_to(self.position, manifest)

    def light_contribution(self, manifest: Manifest) -> Vec3:
        to_light = (self.position - manifest.intersection_point).normalize()
        theta = to_light.dot(-self.direction)
        falloff = _ieee_div(theta - self.outer_cutoff, self.cutoff - self.outer_cutoff)
        if falloff < 0.0:
            falloff = 0.0
        elif falloff > 1.0:
            falloff = 1.0
        facing = max(0.0, manifest.shading_normal.dot(to_light))
        return facing * self.attenuation * falloff