import pytest

from cpuraytrace.material import Material
from cpuraytrace.mesh import Mesh
from cpuraytrace.ray import Ray
from cpuraytrace.triangle import Triangle
from cpuraytrace.vector import Vec2, Vec3

UP_Z = Vec3(0.0, 0.0, 1.0)


def _triangles():
    result = []
    for i in range(4):
        for j in range(3):
            cx, cy, z = 1.3 + 2.5 * i, 1.7 + 2.5 * j, -4.0 - 0.7 * i
            result.append(
                Triangle(
                    Vec3(cx - 0.5, cy - 0.5, z),
                    Vec3(cx + 0.5, cy - 0.5, z),
                    Vec3(cx, cy + 0.5, z),
                    Vec2(0.0, 0.0),
                    Vec2(1.0, 0.0),
                    Vec2(0.5, 1.0),
                    UP_Z,
                    UP_Z,
                    UP_Z,
                )
            )
    return result


@pytest.fixture
def material():
    return Material(Vec3.one(), 0.0)


def test_counts(material):
    triangles = _triangles()
    mesh = Mesh(triangles, material)
    assert mesh.triangle_count() == len(triangles)
    assert mesh.bvh_node_count() == mesh.bvh.node_count()


def test_empty_mesh_rejected(material):
    with pytest.raises(ValueError):
        Mesh([], material)


def test_hits_carry_material_and_agree(material):
    triangles = _triangles()
    mesh = Mesh(triangles, material)
    origin = Vec3(0.2, 0.1, 1.0)
    for tri in triangles:
        ray = Ray(origin, (tri.centroid() - origin).normalize())
        via_bvh = mesh.find_bvh_intersection(ray)
        direct = mesh.find_intersection(ray)
        assert direct is not None
        assert via_bvh.manifest is not None
        assert via_bvh.manifest.material is material
        assert direct.material is material
        assert via_bvh.manifest.t == pytest.approx(direct.t)


def test_miss(material):
    mesh = Mesh(_triangles(), material)
    ray = Ray(Vec3(0.2, 0.1, 1.0), Vec3(0.3, 0.4, 1.0).normalize())
    assert mesh.find_intersection(ray) is None
    assert mesh.find_bvh_intersection(ray).manifest is None