import math

import numpy as np
import pytest

from cpuraytrace.ray import (
    RAYPACKET_BOTTOM_LEFT,
    RAYPACKET_BOTTOM_RIGHT,
    RAYPACKET_TOP_LEFT,
    RAYPACKET_TOP_RIGHT,
    Ray,
    RayPacket,
    TraversalResultPacket,
)
from cpuraytrace.vector import FLT_MAX, Vec3, morton_to_xy


def make_directions():
    dirs = []
    for i in range(256):
        x, y = morton_to_xy(i)
        dirs.append(Vec3((x - 7.5) / 8.0, (7.5 - y) / 8.0, -1.0).normalize())
    return dirs


def test_sample_at_zero_is_origin():
    ray = Ray(Vec3(1.0, 2.0, 3.0), Vec3(0.0, 0.0, 1.0))
    assert ray.sample(0.0) == ray.origin


def test_sample_moves_along_direction():
    ray = Ray(Vec3(1.0, 2.0, 3.0), Vec3(0.6, 0.0, 0.8))
    p = ray.sample(2.5)
    assert tuple(p) == pytest.approx((2.5, 2.0, 5.0), abs=1e-9)


def test_reflect_flips_normal_component_and_keeps_length():
    ray = Ray(Vec3.zero(), Vec3(1.0, -1.0, 0.0).normalize())
    n = Vec3.up()
    r = ray.reflect(n)
    assert r.origin == ray.origin
    assert math.isclose(r.direction.magnitude(), ray.direction.magnitude())
    assert math.isclose(r.direction.dot(n), -ray.direction.dot(n))
    assert math.isclose(r.direction.x, ray.direction.x)


def test_transform_identity_keeps_ray():
    ray = Ray(Vec3(1.0, -2.0, 3.0), Vec3(0.0, 0.0, 2.0))
    t = ray.transform(np.eye(4))
    assert tuple(t.origin) == pytest.approx((1.0, -2.0, 3.0), abs=1e-9)
    assert tuple(t.direction) == pytest.approx((0.0, 0.0, 1.0), abs=1e-9)


def test_transform_translation_in_last_row_moves_origin_only():
    m = np.eye(4)
    m[3, :3] = [4.0, 5.0, 6.0]
    ray = Ray(Vec3.zero(), Vec3(0.0, 1.0, 0.0))
    t = ray.transform(m)
    assert tuple(t.origin) == pytest.approx((4.0, 5.0, 6.0), abs=1e-9)
    assert tuple(t.direction) == pytest.approx((0.0, 1.0, 0.0), abs=1e-9)


def test_transform_rejects_wrong_shape():
    ray = Ray(Vec3.zero(), Vec3.up())
    with pytest.raises(ValueError):
        ray.transform(np.eye(3))


def test_packet_frustum_planes_are_unit_and_contain_corner_rays():
    dirs = make_directions()
    packet = RayPacket(Vec3.zero(), dirs)
    order = [RAYPACKET_TOP_RIGHT, RAYPACKET_TOP_LEFT, RAYPACKET_BOTTOM_LEFT, RAYPACKET_BOTTOM_RIGHT]
    for k, plane in enumerate(packet.planes):
        assert math.isclose(plane.magnitude(), 1.0)
        assert math.isclose(plane.dot(dirs[order[k]]), 0.0, abs_tol=1e-9)
        assert math.isclose(plane.dot(dirs[order[(k + 1) % 4]]), 0.0, abs_tol=1e-9)


def test_packet_plane_distances_match_origin():
    origin = Vec3(1.0, 2.0, 3.0)
    packet = RayPacket(origin, make_directions())
    for plane, dist in zip(packet.planes, packet.plane_distances):
        assert math.isclose(dist, plane.dot(origin))


def test_packet_copies_directions():
    dirs = make_directions()
    packet = RayPacket(Vec3.zero(), dirs)
    dirs.clear()
    assert len(packet.directions) == packet.width * packet.height


def test_packet_rejects_wrong_count():
    with pytest.raises(ValueError):
        RayPacket(Vec3.zero(), make_directions()[:100])


def test_traversal_result_packet_starts_empty():
    result = TraversalResultPacket(256)
    assert result.t == [FLT_MAX] * 256
    assert len(result.ids) == 256