"""Bounding volume hierarchy over triangles, built with binned SAH splits."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Iterable, Optional

from .aabb import AABB
from .manifest import Manifest
from .material import Texture
from .ray import Ray, RayPacket, TraversalResultPacket
from .triangle import Triangle
from .vector import Vec3

MAX_BINS = 16
TRAVERSAL_COST_FACTOR = 0.45
# Scaled down slightly so that a centroid on the upper bound still lands in the last bin.
_BIN_SCALE = MAX_BINS * (1.0 - 0.000001)


@dataclass
class TraversalResult:
    """The nearest hit found while walking the tree, and how deep the walk went."""

    manifest: Optional[Manifest] = None
    depth: float = 0.0


@dataclass
class BVHNode:
    """A tree node: a leaf when count > 0, otherwise an interior node.

    For a leaf, ``first`` is the offset of its primitives in the index list;
    for an interior node, ``left`` is the position of its left child in the
    node list, the right child following directly after it.
    """

    bounds: AABB = field(default_factory=AABB)
    count: int = 0
    left: int = 0

    @property
    def first(self) -> int:
        return self.left

    @first.setter
    def first(self, value: int) -> None:
        self.left = value

    @property
    def is_leaf(self) -> bool:
        return self.count > 0


@dataclass
class PrimitiveNode:
    """Bounds and centroid of one primitive, cached during construction."""

    bounds: AABB
    centroid: Vec3


class BVH:
    """A hierarchy of boxes used to find the nearest triangle a ray hits."""

    def __init__(self, primitives: Iterable[Triangle], heightmap: Optional[Texture] = None):
        self.primitives: list[Triangle] = list(primitives)
        if not self.primitives:
            raise ValueError("no primitives provided")
        self.heightmap = heightmap
        self.primitive_indices: list[int] = []
        self.nodes: list[BVHNode] = []
        self.max_depth = 0
        self.root = self._construct()

    @property
    def _depth_step(self) -> float:
        return 1.0 / self.max_depth if self.max_depth else math.inf

    def _construct(self) -> BVHNode:
        primitive_nodes = [
            PrimitiveNode(prim.displaced_bounds(1.0), prim.centroid())
            for prim in self.primitives
        ]
        triangle_bounds = AABB.negative_box()
        centroid_bounds = AABB.negative_box()
        for node in primitive_nodes:
            triangle_bounds = triangle_bounds.extend(node.bounds)
            centroid_bounds = centroid_bounds.extend(node.centroid)
        root = BVHNode(bounds=triangle_bounds)
        indices = list(range(len(self.primitives)))
        return self._split(root, indices, primitive_nodes, centroid_bounds, 1)

    def _make_leaf(self, node: BVHNode, indices: list[int]) -> BVHNode:
        node.first = len(self.primitive_indices)
        self.primitive_indices.extend(indices)
        node.count = len(indices)
        return node

    def _split(
        self,
        node: BVHNode,
        indices: list[int],
        primitive_nodes: list[PrimitiveNode],
        centroid_bounds: AABB,
        depth: int,
    ) -> BVHNode:
        if len(indices) > 1:
            dims = centroid_bounds.dimensions()
            if dims.x > dims.y and dims.x > dims.z:
                axis = 0
            elif dims.y > dims.z:
                axis = 1
            else:
                axis = 2
            width = dims[axis]
            if width == 0.0:
                return self._make_leaf(node, indices)

            low = centroid_bounds.minimum[axis]

            def bin_of(index: int) -> int:
                relative = (primitive_nodes[index].centroid[axis] - low) / width
                return int(_BIN_SCALE * relative)

            bin_bounds = [AABB.negative_box() for _ in range(MAX_BINS)]
            bin_counts = [0] * MAX_BINS
            for index in indices:
                b = bin_of(index)
                bin_bounds[b] = bin_bounds[b].extend(primitive_nodes[index].bounds)
                bin_counts[b] += 1

            left_costs: list[float] = []
            total_bounds = AABB.negative_box()
            total_count = 0
            for b in range(MAX_BINS - 1):
                total_bounds = total_bounds.extend(bin_bounds[b])
                total_count += bin_counts[b]
                left_costs.append(total_bounds.surface_area() * total_count)

            min_cost = math.inf
            best_bin = 0
            total_bounds = AABB.negative_box()
            total_count = 0
            for b in range(MAX_BINS - 1, 0, -1):
                total_bounds = total_bounds.extend(bin_bounds[b])
                total_count += bin_counts[b]
                cost = total_bounds.surface_area() * total_count + left_costs[b - 1]
                if cost < min_cost:
                    min_cost = cost
                    best_bin = b

            parent_cost = node.bounds.surface_area() * len(indices)
            if min_cost * (1.0 + TRAVERSAL_COST_FACTOR) < parent_cost:
                left_bounds = AABB.negative_box()
                right_bounds = AABB.negative_box()
                left_centroids = AABB.negative_box()
                right_centroids = AABB.negative_box()
                left_indices: list[int] = []
                right_indices: list[int] = []
                for index in indices:
                    prim = primitive_nodes[index]
                    if bin_of(index) < best_bin:
                        left_bounds = left_bounds.extend(prim.bounds)
                        left_centroids = left_centroids.extend(prim.centroid)
                        left_indices.append(index)
                    else:
                        right_bounds = right_bounds.extend(prim.bounds)
                        right_centroids = right_centroids.extend(prim.centroid)
                        right_indices.append(index)

                left = self._split(
                    BVHNode(bounds=left_bounds),
                    left_indices,
                    primitive_nodes,
                    left_centroids,
                    depth + 1,
                )
                right = self._split(
                    BVHNode(bounds=right_bounds),
                    right_indices,
                    primitive_nodes,
                    right_centroids,
                    depth + 1,
                )
                node.left = len(self.nodes)
                self.nodes.append(left)
                self.nodes.append(right)
                return node

        self.max_depth = max(depth, self.max_depth)
        return self._make_leaf(node, indices)

    def node_count(self) -> int:
        """Number of nodes including the root."""
        return len(self.nodes) + 1

    def nearest_intersection(self, ray: Ray) -> TraversalResult:
        """Nearest hit of ray, with the normalised depth of the traversal."""
        if not self.root.bounds.intersects(ray):
            return TraversalResult()
        result = self._traverse(ray, self.root)
        result.depth += self._depth_step
        return result

    def _traverse(self, ray: Ray, parent: BVHNode) -> TraversalResult:
        if parent.is_leaf:
            return self._nearest_in_range(ray, parent.first, parent.count)
        result = TraversalResult()
        left = self.nodes[parent.left]
        if left.bounds.intersects(ray):
            result = self._traverse(ray, left)
        right = self.nodes[parent.left + 1]
        if right.bounds.intersects(ray):
            right_result = self._traverse(ray, right)
            if right_result.manifest is not None and (
                result.manifest is None or right_result.manifest.t < result.manifest.t
            ):
                result = right_result
            result.depth = max(result.depth, right_result.depth)
        result.depth += self._depth_step
        return result

    def _nearest_in_range(self, ray: Ray, first: int, count: int) -> TraversalResult:
        result = TraversalResult()
        for index in self.primitive_indices[first : first + count]:
            hit = self.primitives[index].intersect_displaced(ray, self.heightmap)
            if hit is not None and (result.manifest is None or hit.t < result.manifest.t):
                result.manifest = hit
        return result

    def nearest_intersection_packet(
        self, packet: RayPacket, result: TraversalResultPacket
    ) -> None:
        """Record in result the nearest primitive hit by each ray of the packet."""
        first = self.root.bounds.intersect_packet(packet, 0)
        if first is None:
            return
        self._traverse_packet(packet, result, self.root, first)

    def _traverse_packet(
        self,
        packet: RayPacket,
        result: TraversalResultPacket,
        parent: BVHNode,
        first_active: int,
    ) -> None:
        if parent.is_leaf:
            for index in self.primitive_indices[parent.first : parent.first + parent.count]:
                self.primitives[index].intersect_packet(packet, result, first_active, index)
            return
        for child in (self.nodes[parent.left], self.nodes[parent.left + 1]):
            active = child.bounds.intersect_packet(packet, first_active)
            if active is not None:
                self._traverse_packet(packet, result, child, active)