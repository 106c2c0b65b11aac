# cpuraytrace

A small ray tracer that runs entirely on the CPU, written in plain Python with numpy and Pillow.

## What it contains

- `cpuraytrace.vector`: immutable `Vec2` and `Vec3` with component-wise arithmetic, `dot`,
  `cross`, `normalize`, `component_min`/`component_max` and friends; `xy_to_morton` and
  `morton_to_xy` convert between pixel coordinates and Morton order.
- `cpuraytrace.ray`: `Ray` (`sample`, `reflect`, `transform` by a 4x4 matrix), `RayPacket`
  (a 16x16 block of rays sharing one origin, with four frustum planes) and
  `TraversalResultPacket` (nearest distance and primitive id per packet ray).
- `cpuraytrace.aabb`: `AABB` boxes with `extend`, `surface_area`, `dimensions`, a slab test
  `intersects` and packet tests `intersect_packet`, `intersect_frustum`, `find_first_active`.
- `cpuraytrace.material`: `Material` (colour, specularity, optional texture and height map,
  refraction index, `MaterialType.BASIC` or `MaterialType.DIELECTRIC`) and `Texture`, an RGBA
  float image. `Texture.from_file(path)` loads an image with Pillow, flips it vertically and
  converts 8-bit colour to linear values with a 2.2 gamma; `get_value(uv)` returns the RGB
  texel as a `Vec3`.
- `cpuraytrace.manifest`: `Manifest`, the record of one hit (distance `t`, normals, uv,
  material, intersection point).
- `cpuraytrace.shapes`: `Plane` (one-sided), `Sphere` (hit from outside or inside) and `Torus`
  around the y axis. `intersect(ray)` returns a `Manifest` or `None`. The torus reports its
  intersection point relative to its centre.
- `cpuraytrace.triangle`: `Triangle` with per-vertex uvs and normals: Möller–Trumbore
  `intersect`, `intersect_displaced` (splits into four sub-triangles pushed along their normals
  by the red channel of a height map; without a height map the displacement is zero),
  `intersect_packet`, `centroid`, `bounds` and `displaced_bounds`.
- `cpuraytrace.bvh`: `BVH`, built with 16-bin surface-area-heuristic splits. It raises
  `ValueError` when given no triangles. `nearest_intersection(ray)` returns a
  `TraversalResult` with the nearest hit and a normalised traversal depth;
  `nearest_intersection_packet(packet, result)` fills a `TraversalResultPacket`.
- `cpuraytrace.mesh`: `Mesh`, triangles sharing one material, searchable through the BVH
  (`find_bvh_intersection`) or by testing every triangle (`find_intersection`).
- `cpuraytrace.lights`: `DirectionalLight`, `PointLight` and `SpotLight`, each with
  `light_contribution(manifest)` and `construct_shadow_ray(manifest)`.
- `cpuraytrace.camera`: `Camera`, a pinhole camera with `position`, `field_of_view` (radians),
  `set_direction`, and `construct_ray`/`construct_ray_packet` for Morton-ordered pixels of a
  16x16 tile.
- `cpuraytrace.scene`: `Scene` holds meshes, shapes with their materials and lights.
  `intersect(ray)` returns the colour along a ray, following up to five reflections and
  refractions (Fresnel reflectance for dielectrics, with a weakened Beer's-law absorption
  inside them). `enable_bvh`/`disable_bvh` choose between the BVH and brute-force mesh search;
  `debug_setting` (a `TraversalDebugSetting`) overlays the traversal depth in green.
- `cpuraytrace.raytracer`: `Raytracer` renders every pixel of a surface in 16x16 tiles on a
  thread pool; `pack_color` packs a colour into an opaque `0xAARRGGBB` integer.

## Installation

```
pip install .
```

For running the tests:

```
pip install .[test]
pytest
```

## Example

```python
from cpuraytrace.camera import Camera
from cpuraytrace.lights import DirectionalLight
from cpuraytrace.material import Material
from cpuraytrace.raytracer import Raytracer
from cpuraytrace.scene import Scene
from cpuraytrace.shapes import Plane, Sphere
from cpuraytrace.vector import Vec2, Vec3

scene = Scene()
scene.add_shape(Sphere(Vec3(0.0, 0.0, -5.0), 1.0), Material(Vec3(1.0, 0.2, 0.2), 0.0))
scene.add_shape(Plane(Vec3(0.0, -1.0, 0.0), Vec3(0.0, 1.0, 0.0)), Material(Vec3(0.8, 0.8, 0.8), 0.3))
scene.add_directional_light(DirectionalLight(Vec3(0.0, -1.0, -1.0).normalize(), 1.0, Vec3(1.0, 1.0, 1.0)))

camera = Camera(Vec2(64.0, 64.0))
print(scene.intersect(camera.construct_ray(0, 32, 32)))


class Surface:
    """Any object with width, height and set(x, y, value) will do."""

    def __init__(self, width, height):
        self.width, self.height = width, height
        self.pixels = [0] * (width * height)

    def set(self, x, y, value):
        self.pixels[x + y * self.width] = value


surface = Surface(64, 64)
Raytracer(surface, scene, camera).render_frame()
```

Triangle meshes are built from a list of `Triangle` objects and a `Material`:
`Mesh(triangles, material)`. When the material has a `height_map`, the triangles are displaced
by it at intersection time.

## What it does not do

- It opens no window and shows nothing on screen; the `Raytracer` writes packed integers into
  whatever surface object it is given, and saving those to an image file is left to the caller.
- It has no interactive camera controls; move the camera by setting `position` and calling
  `set_direction`.
- It loads no model files; meshes must be assembled from `Triangle` objects in code.
- There is no command-line program.