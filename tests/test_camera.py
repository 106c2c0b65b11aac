import math

import pytest

from cpuraytrace.camera import Camera
from cpuraytrace.vector import Vec2, Vec3


def test_default_camera_looks_forward():
    cam = Camera(Vec2(3.0, 3.0))
    assert cam.front == Vec3.forward()
    assert cam.up == Vec3.up()
    assert cam.right == Vec3.right()


def test_center_ray_points_along_front():
    cam = Camera(Vec2(3.0, 3.0))
    ray = cam.construct_ray(0, 1, 1)
    assert tuple(ray.direction) == pytest.approx(tuple(Vec3.forward()), abs=1e-9)


def test_center_ray_follows_new_direction():
    cam = Camera(Vec2(3.0, 3.0))
    direction = Vec3(1.0, 0.0, -1.0).normalize()
    cam.set_direction(direction)
    ray = cam.construct_ray(0, 1, 1)
    half = math.sqrt(0.5)
    assert tuple(ray.direction) == pytest.approx((half, 0.0, -half), abs=1e-9)


def test_rays_start_at_position_and_are_unit():
    cam = Camera(Vec2(32.0, 16.0))
    cam.position = Vec3(1.0, 2.0, 3.0)
    for job_id in (0, 7, 100, 255):
        ray = cam.construct_ray(job_id, 8, 0)
        assert ray.origin == cam.position
        assert math.isclose(ray.direction.magnitude(), 1.0)


def test_top_left_ray_points_up_and_left():
    cam = Camera(Vec2(16.0, 16.0))
    d = cam.construct_ray(0, 0, 0).direction
    assert d.x < 0.0
    assert d.y > 0.0
    assert d.z < 0.0


def test_set_direction_builds_orthonormal_basis():
    cam = Camera(Vec2(10.0, 10.0))
    cam.set_direction(Vec3(0.3, 0.2, -0.9).normalize())
    assert math.isclose(cam.right.dot(cam.front), 0.0, abs_tol=1e-9)
    assert math.isclose(cam.up.dot(cam.front), 0.0, abs_tol=1e-9)
    assert math.isclose(cam.up.dot(cam.right), 0.0, abs_tol=1e-9)
    assert math.isclose(cam.right.magnitude(), 1.0)


@pytest.mark.parametrize("angle", [0.5, 1.0, 2.0])
def test_field_of_view_round_trip(angle):
    cam = Camera(Vec2(4.0, 4.0))
    cam.field_of_view = angle
    assert math.isclose(cam.field_of_view, angle)


def test_wider_field_of_view_spreads_rays():
    narrow = Camera(Vec2(16.0, 16.0))
    wide = Camera(Vec2(16.0, 16.0))
    narrow.field_of_view = 0.5
    wide.field_of_view = 2.0
    forward = Vec3.forward()
    assert wide.construct_ray(0, 0, 0).direction.dot(forward) < narrow.construct_ray(
        0, 0, 0
    ).direction.dot(forward)


def test_packet_matches_single_rays():
    cam = Camera(Vec2(32.0, 32.0))
    packet = cam.construct_ray_packet(0, 16, 0)
    assert len(packet.directions) == 256
    assert packet.origin == cam.position
    for i in (0, 1, 85, 171, 255):
        single = cam.construct_ray(i, 16, 0).direction
        assert tuple(packet.directions[i]) == pytest.approx(tuple(single), abs=1e-9)