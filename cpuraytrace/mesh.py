"""Triangle meshes sharing one material, searchable by BVH or brute force."""

from __future__ import annotations

from typing import Iterable, Optional

from .bvh import BVH, TraversalResult
from .manifest import Manifest
from .material import Material
from .ray import Ray
from .triangle import Triangle


class Mesh:
    """A set of triangles with one material and an acceleration structure."""

    def __init__(self, triangles: Iterable[Triangle], material: Material):
        self.triangles: list[Triangle] = list(triangles)
        self.material = material
        self.bvh = BVH(self.triangles, material.height_map)

    def find_bvh_intersection(self, ray: Ray) -> TraversalResult:
        """Nearest hit found through the BVH, tagged with this mesh's material."""
        result = self.bvh.nearest_intersection(ray)
        if result.manifest is not None:
            result.manifest.material = self.material
        return result

    def find_intersection(self, ray: Ray) -> Optional[Manifest]:
        """Nearest hit found by testing every triangle."""
        nearest: Optional[Manifest] = None
        for triangle in self.triangles:
            hit = triangle.intersect_displaced(ray, self.material.height_map)
            if hit is not None and (nearest is None or hit.t < nearest.t):
                hit.material = self.material
                nearest = hit
        return nearest

    def triangle_count(self) -> int:
        return len(self.triangles)

    def bvh_node_count(self) -> int:
        return self.bvh.node_count()