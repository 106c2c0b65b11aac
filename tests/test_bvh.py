import pytest

from cpuraytrace.bvh import BVH, TraversalResult
from cpuraytrace.camera import Camera
from cpuraytrace.ray import Ray, TraversalResultPacket
from cpuraytrace.triangle import Triangle
from cpuraytrace.vector import FLT_MAX, Vec2, Vec3

UP_Z = Vec3(0.0, 0.0, 1.0)


def _triangle(cx, cy, z, size=0.5):
    return Triangle(
        Vec3(cx - size, cy - size, z),
        Vec3(cx + size, cy - size, z),
        Vec3(cx, cy + size, z),
        Vec2(0.0, 0.0),
        Vec2(1.0, 0.0),
        Vec2(0.5, 1.0),
        UP_Z,
        UP_Z,
        UP_Z,
    )


def _grid():
    return [
        _triangle(1.3 + 3 * i, 1.7 + 3 * j, -5.0 - i - 0.5 * j)
        for i in range(5)
        for j in range(4)
    ]


def _brute_force(triangles, ray):
    hits = [t.intersect_displaced(ray, None) for t in triangles]
    hits = [h for h in hits if h is not None]
    return min(hits, key=lambda h: h.t) if hits else None


def _rays(triangles):
    rays = []
    for origin in (Vec3(0.0, 0.0, 0.0), Vec3(0.1, 0.2, 3.0)):
        for tri in triangles:
            rays.append(Ray(origin, (tri.centroid() - origin).normalize()))
        rays.append(Ray(origin, Vec3(50.0, 50.0, -1.0).normalize()))
        rays.append(Ray(origin, Vec3(-3.0, 2.0, -1.0).normalize()))
    return rays


def test_empty_primitives_rejected():
    with pytest.raises(ValueError):
        BVH([], None)


def test_single_triangle_root_is_leaf():
    tri = _triangle(0.0, 0.0, -5.0, size=1.0)
    bvh = BVH([tri], None)
    assert bvh.node_count() == 1
    assert bvh.root.count == 1
    ray = Ray(Vec3(0.1, 0.05, 0.0), Vec3(0.01, 0.02, -1.0).normalize())
    result = bvh.nearest_intersection(ray)
    expected = tri.intersect_displaced(ray, None)
    assert result.manifest is not None
    assert result.manifest.t == pytest.approx(expected.t)
    assert result.depth == pytest.approx(1.0)


def test_miss_gives_empty_result():
    bvh = BVH([_triangle(0.0, 0.0, -5.0)], None)
    ray = Ray(Vec3(0.0, 0.0, 0.0), Vec3(0.3, 0.2, 1.0).normalize())
    result = bvh.nearest_intersection(ray)
    assert result == TraversalResult()


def test_matches_brute_force():
    triangles = _grid()
    bvh = BVH(triangles, None)
    for ray in _rays(triangles):
        expected = _brute_force(triangles, ray)
        result = bvh.nearest_intersection(ray)
        if expected is None:
            assert result.manifest is None
        else:
            assert result.manifest is not None
            assert result.manifest.t == pytest.approx(expected.t)
            assert result.depth > 0.0


def test_tree_splits_and_covers_every_primitive_once():
    triangles = _grid()
    bvh = BVH(triangles, None)
    assert bvh.node_count() > 1
    assert bvh.node_count() % 2 == 1
    assert sorted(bvh.primitive_indices) == list(range(len(triangles)))


def test_leaf_bounds_contain_their_primitives():
    triangles = _grid()
    bvh = BVH(triangles, None)
    leaves = [n for n in [bvh.root, *bvh.nodes] if n.count > 0]
    assert sum(leaf.count for leaf in leaves) == len(triangles)
    for leaf in leaves:
        for index in bvh.primitive_indices[leaf.first : leaf.first + leaf.count]:
            box = triangles[index].displaced_bounds(1.0)
            for axis in range(3):
                assert leaf.bounds.minimum[axis] <= box.minimum[axis]
                assert leaf.bounds.maximum[axis] >= box.maximum[axis]


def test_packet_matches_direct_triangle_test():
    tri = Triangle(
        Vec3(-100.0, -100.0, -5.0),
        Vec3(100.0, -100.0, -5.0),
        Vec3(0.0, 100.0, -5.0),
        n0=UP_Z,
        n1=UP_Z,
        n2=UP_Z,
    )
    bvh = BVH([tri], None)
    camera = Camera(Vec2(16.0, 16.0))
    packet = camera.construct_ray_packet(0, 0, 0)

    result = TraversalResultPacket(len(packet.directions))
    bvh.nearest_intersection_packet(packet, result)
    expected = TraversalResultPacket(len(packet.directions))
    tri.intersect_packet(packet, expected, 0, 0)

    assert result.t == pytest.approx(expected.t)
    assert all(t < FLT_MAX for t in result.t)
    assert set(result.ids) == {0}