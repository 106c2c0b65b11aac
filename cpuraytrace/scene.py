"""A scene of meshes, analytic shapes and lights that shades primary rays."""

from __future__ import annotations

import enum
import math
from typing import Optional

from .bvh import TraversalResult
from .lights import DirectionalLight, Light, PointLight, SpotLight
from .manifest import Manifest
from .material import Material, MaterialType
from .mesh import Mesh
from .ray import Ray
from .shapes import Shape
from .vector import Vec3, _ieee_div

BACKGROUND_COLOR = Vec3(0.4, 0.4, 0.4)
AMBIENT_LIGHT = Vec3(0.1, 0.1, 0.1)
MAX_BOUNCES = 5
MIN_LIGHTING_COMPONENT = 0.001
SELF_INTERSECTION_DELTA = 0.001


class TraversalDebugSetting(enum.Enum):
    """How the BVH traversal depth is drawn on top of the image."""

    NONE = "none"
    # Blend the depth with the scene colouring.
    BLEND = "blend"
    # Draw the depth only where no object was hit.
    EXCLUDE_HITS = "exclude_hits"
    # Draw only the depth, never the objects.
    TRAVERSAL_ONLY = "traversal_only"


class Scene:
    """Everything a ray can hit and every light that shades the hits."""

    def __init__(self) -> None:
        self._meshes: list[Mesh] = []
        self._shapes: list[tuple[Shape, Material]] = []
        self._point_lights: list[PointLight] = []
        self._spot_lights: list[SpotLight] = []
        self._directional_lights: list[DirectionalLight] = []
        self.debug_setting = TraversalDebugSetting.NONE
        self._use_bvh = True

    def add_shape(self, shape: Shape, material: Material) -> None:
        self._shapes.append((shape, material))

    def add_mesh(self, mesh: Mesh) -> None:
        self._meshes.append(mesh)

    def add_directional_light(self, light: DirectionalLight) -> None:
        self._directional_lights.append(light)

    def add_spot_light(self, light: SpotLight) -> None:
        self._spot_lights.append(light)

    def add_point_light(self, light: PointLight) -> None:
        self._point_lights.append(light)

    def enable_bvh(self) -> None:
        self._use_bvh = True

    def disable_bvh(self) -> None:
        self._use_bvh = False

    @property
    def bvh_enabled(self) -> bool:
        return self._use_bvh

    def triangle_count(self) -> int:
        return sum(mesh.triangle_count() for mesh in self._meshes)

    def bvh_node_count(self) -> int:
        return sum(mesh.bvh_node_count() for mesh in self._meshes)

    def intersect(self, ray: Ray) -> Vec3:
        """Colour seen along ray, following up to MAX_BOUNCES reflections and refractions."""
        return self._intersect_bounced(ray, MAX_BOUNCES)

    def _intersect_bounced(self, ray: Ray, remaining_bounces: int) -> Vec3:
        if remaining_bounces == 0:
            return BACKGROUND_COLOR
        result = self._nearest_intersection(ray)
        nearest = result.manifest

        debug_color = Vec3(0.0, result.depth, 0.0) if self._use_bvh else Vec3.zero()
        color = BACKGROUND_COLOR
        setting = self.debug_setting

        if nearest is not None and setting is not TraversalDebugSetting.TRAVERSAL_ONLY:
            color = self._render_object(ray, nearest, remaining_bounces)
            if setting is TraversalDebugSetting.BLEND:
                color = color + debug_color
        elif setting is not TraversalDebugSetting.NONE:
            color = color + debug_color
        # The debug colour may push components past one.
        if setting is not TraversalDebugSetting.NONE:
            color = color.component_min(Vec3.one())
        return color

    def _render_object(self, ray: Ray, manifest: Manifest, remaining_bounces: int) -> Vec3:
        material = manifest.material
        if material is None:
            raise ValueError("hit surface has no material")
        if material.texture is not None:
            object_color = material.texture.get_value(manifest.uv)
        else:
            object_color = material.color
        specularity = material.specularity

        effect = Vec3.zero()
        if material.type is MaterialType.BASIC:
            if specularity > MIN_LIGHTING_COMPONENT:
                effect += self._reflectance(ray, manifest, remaining_bounces) * specularity
            diffuseness = 1.0 - specularity
            if diffuseness > MIN_LIGHTING_COMPONENT:
                effect += self._total_light_contribution(manifest) * diffuseness
        elif material.type is MaterialType.DIELECTRIC:
            effect = self._dielectric(ray, manifest, material, remaining_bounces)
        return effect * object_color

    def _dielectric(
        self, ray: Ray, manifest: Manifest, material: Material, remaining_bounces: int
    ) -> Vec3:
        cos_incoming = (-ray.direction).dot(manifest.shading_normal)
        normal = manifest.shading_normal
        front_face = cos_incoming > 0.0
        if not front_face:
            # Leaving the object: the normal and cosine point the other way.
            normal = -normal
            cos_incoming = -cos_incoming

        n1, n2 = 1.0, material.refraction_index
        if not front_face:
            n1, n2 = n2, n1

        ratio = _ieee_div(n1, n2)
        k = 1.0 - ratio * ratio * (1.0 - cos_incoming * cos_incoming)
        if k >= 0.0:
            sin_incoming = math.sqrt(max(0.0, 1.0 - cos_incoming * cos_incoming))
            cos_outgoing = math.sqrt(max(0.0, 1.0 - (ratio * sin_incoming) ** 2))
            s_polarized = _ieee_div(
                n1 * cos_incoming - n2 * cos_outgoing, n1 * cos_incoming + n2 * cos_outgoing
            ) ** 2
            p_polarized = _ieee_div(
                n1 * cos_outgoing - n2 * cos_incoming, n1 * cos_outgoing + n2 * cos_incoming
            ) ** 2
            reflectance = 0.5 * (s_polarized + p_polarized)
        else:
            reflectance = 1.0

        effect = Vec3.zero()
        if reflectance > MIN_LIGHTING_COMPONENT:
            effect += self._reflectance(ray, manifest, remaining_bounces) * reflectance
        transmittance = 1.0 - reflectance
        if transmittance > MIN_LIGHTING_COMPONENT:
            refraction_direction = ratio * ray.direction + normal * (
                ratio * cos_incoming - math.sqrt(k)
            )
            # Start just inside the new medium so the ray cannot hit its own surface.
            origin = manifest.intersection_point - SELF_INTERSECTION_DELTA * normal
            transmitted = self._intersect_bounced(
                Ray(origin, refraction_direction), remaining_bounces - 1
            )
            if not front_face:
                # Beer's law, weakened by a factor of five.
                scale = manifest.t / 5.0
                transmitted = Vec3(
                    transmitted.x * math.exp(-transmitted.x * scale),
                    transmitted.y * math.exp(-transmitted.y * scale),
                    transmitted.z * math.exp(-transmitted.z * scale),
                )
            effect += transmitted * transmittance
        return effect

    def _nearest_intersection(self, ray: Ray) -> TraversalResult:
        result = TraversalResult()
        if self._use_bvh:
            for mesh in self._meshes:
                candidate = mesh.find_bvh_intersection(ray)
                if candidate.manifest is not None and (
                    result.manifest is None or candidate.manifest.t < result.manifest.t
                ):
                    result.manifest = candidate.manifest
                # Keep the deepest traversal whether or not it hit anything.
                result.depth = max(candidate.depth, result.depth)
        else:
            nearest: Optional[Manifest] = None
            for mesh in self._meshes:
                hit = mesh.find_intersection(ray)
                if hit is not None and (nearest is None or hit.t < nearest.t):
                    nearest = hit
            result.manifest = nearest

        nearest = result.manifest
        for shape, material in self._shapes:
            hit = shape.intersect(ray)
            if hit is not None and (nearest is None or hit.t < nearest.t):
                hit.material = material
                nearest = hit
        result.manifest = nearest
        return result

    def _lights(self) -> list[Light]:
        return [*self._directional_lights, *self._spot_lights, *self._point_lights]

    def _total_light_contribution(self, manifest: Manifest) -> Vec3:
        total = AMBIENT_LIGHT
        for light in self._lights():
            total = total + self._light_contribution(manifest, light)
        return total.component_min(Vec3.one())

    def _light_contribution(self, manifest: Manifest, light: Light) -> Vec3:
        contribution = light.light_contribution(manifest)
        if max(contribution) > MIN_LIGHTING_COMPONENT:
            shadow_ray = light.construct_shadow_ray(manifest)
            blocker = self._nearest_intersection(shadow_ray.ray).manifest
            if blocker is None or blocker.t >= shadow_ray.max_t:
                return contribution
        return Vec3.zero()

    def _reflectance(self, ray: Ray, manifest: Manifest, remaining_bounces: int) -> Vec3:
        displacement = SELF_INTERSECTION_DELTA * manifest.surface_normal
        reflected = ray.reflect(manifest.shading_normal)
        reflected = Ray(manifest.intersection_point + displacement, reflected.direction)
        return self._intersect_bounced(reflected, remaining_bounces - 1)