"""CPU ray tracing: vectors, rays, boxes, shapes, displaced triangles, a BVH, lights, a scene and a tiled renderer."""

__version__ = "0.1.0"