"""Tests for shapes module."""

import pytest
import math

from glimmer.vec3 import Vec3, Point3, Color
from glimmer.ray import Ray
from glimmer.shapes import (
    AABB, HitRecord, HittableList, Sphere, MovingSphere,
    XYRect, XZRect, YZRect, Box, RECT_PAD
)
from glimmer.materials import Lambertian


class TestAABB:
    """Test AABB class."""

    def test_hit_along_axis(self):
        box = AABB(Point3(0, 0, 0), Point3(1, 1, 1))
        ray = Ray(Point3(-1, 0.5, 0.5), Vec3(1, 0, 0))
        assert box.hit(ray, 0, float('inf'))

    def test_window_ends_before_entry(self):
        box = AABB(Point3(0, 0, 0), Point3(1, 1, 1))
        ray = Ray(Point3(-1, 0.5, 0.5), Vec3(1, 0, 0))
        assert not box.hit(ray, 0, 0.5)

    def test_window_starts_after_exit(self):
        box = AABB(Point3(0, 0, 0), Point3(1, 1, 1))
        ray = Ray(Point3(-1, 0.5, 0.5), Vec3(1, 0, 0))
        assert not box.hit(ray, 2.5, float('inf'))

    def test_parallel_ray_outside_slab(self):
        box = AABB(Point3(0, 0, 0), Point3(1, 1, 1))
        ray = Ray(Point3(-1, 2, 0.5), Vec3(1, 0, 0))
        assert not box.hit(ray, 0, float('inf'))

    def test_miss(self):
        box = AABB(Point3(0, 0, 0), Point3(1, 1, 1))
        ray = Ray(Point3(-1, -1, 0.5), Vec3(0, -1, 0))
        assert not box.hit(ray, 0, float('inf'))

    def test_negative_direction(self):
        box = AABB(Point3(0, 0, 0), Point3(1, 1, 1))
        ray = Ray(Point3(0.5, 0.5, 5), Vec3(0, 0, -1))
        assert box.hit(ray, 0, float('inf'))

    def test_surrounding_box(self):
        a = AABB(Point3(0, 0, 0), Point3(1, 1, 1))
        b = AABB(Point3(-1, 0.5, 2), Point3(0.5, 3, 4))
        union = AABB.surrounding_box(a, b)
        assert union.minimum == Point3(-1, 0, 0)
        assert union.maximum == Point3(1, 3, 4)

    def test_surrounding_box_commutes_and_contains(self):
        a = AABB(Point3(0, 0, 0), Point3(1, 1, 1))
        b = AABB(Point3(5, -2, 0), Point3(6, -1, 3))
        assert AABB.surrounding_box(a, b) == AABB.surrounding_box(b, a)
        union = AABB.surrounding_box(a, b)
        assert union.contains(a)
        assert union.contains(b)
        assert not a.contains(union)


class TestSphere:
    """Test Sphere class."""

    def test_hit_through_center(self):
        sphere = Sphere(Point3(0, 0, 0), 1.0)
        ray = Ray(Point3(0, 0, -5), Vec3(0, 0, 1))

        hit = sphere.hit(ray, 0.001, float('inf'))
        assert hit is not None
        assert abs(hit.t - 4.0) < 1e-6
        assert hit.point == Point3(0, 0, -1)
        assert hit.normal == Vec3(0, 0, -1)
        assert hit.front_face

    def test_miss(self):
        sphere = Sphere(Point3(0, 0, 0), 1.0)
        ray = Ray(Point3(0, 5, -5), Vec3(0, 0, 1))
        assert sphere.hit(ray, 0.001, float('inf')) is None

    def test_hit_from_inside(self):
        sphere = Sphere(Point3(0, 0, 0), 1.0)
        ray = Ray(Point3(0, 0, 0), Vec3(0, 0, 1))

        hit = sphere.hit(ray, 0.001, float('inf'))
        assert hit is not None
        assert abs(hit.t - 1.0) < 1e-6
        assert not hit.front_face
        assert hit.normal == Vec3(0, 0, -1)

    def test_far_root_when_near_root_outside_window(self):
        sphere = Sphere(Point3(0, 0, 0), 1.0)
        ray = Ray(Point3(0, 0, -5), Vec3(0, 0, 1))
        hit = sphere.hit(ray, 4.5, float('inf'))
        assert hit is not None
        assert abs(hit.t - 6.0) < 1e-6

    def test_window_is_open(self):
        sphere = Sphere(Point3(0, 0, 0), 1.0)
        ray = Ray(Point3(0, 0, -5), Vec3(0, 0, 1))
        assert sphere.hit(ray, 0.001, 4.0) is None

    def test_normal_is_unit_and_opposes_ray(self):
        sphere = Sphere(Point3(1, 2, 3), 2.5)
        ray = Ray(Point3(-3, 0, -4), Vec3(4, 2.2, 7))
        hit = sphere.hit(ray, 0.001, float('inf'))
        assert hit is not None
        assert abs(hit.normal.length() - 1.0) < 1e-9
        assert hit.normal.dot(ray.direction) <= 0

    def test_carries_material(self):
        mat = Lambertian(Color(0.5, 0.5, 0.5))
        sphere = Sphere(Point3(0, 0, 0), 1.0, mat)
        hit = sphere.hit(Ray(Point3(0, 0, -5), Vec3(0, 0, 1)), 0.001, float('inf'))
        assert hit.material is mat

    def test_uv_in_unit_square(self):
        sphere = Sphere(Point3(0, 0, 0), 1.0)
        hit = sphere.hit(Ray(Point3(0, 0, -5), Vec3(0, 0, 1)), 0.001, float('inf'))
        assert 0 <= hit.u <= 1
        assert 0 <= hit.v <= 1
        assert abs(hit.v - 0.5) < 1e-9

    def test_bounding_box(self):
        sphere = Sphere(Point3(1, 2, 3), 2.0)
        box = sphere.bounding_box(0, 1)
        assert box.minimum == Point3(-1, 0, 1)
        assert box.maximum == Point3(3, 4, 5)


class TestMovingSphere:
    """Test MovingSphere class."""

    def test_center_interpolates(self):
        sphere = MovingSphere(Point3(0, 0, 0), Point3(2, 0, 0), 0.0, 1.0, 1.0)
        assert sphere.center(0.0) == Point3(0, 0, 0)
        assert sphere.center(0.5) == Point3(1, 0, 0)
        assert sphere.center(1.0) == Point3(2, 0, 0)

    def test_hit_depends_on_ray_time(self):
        sphere = MovingSphere(Point3(0, 0, 0), Point3(10, 0, 0), 0.0, 1.0, 1.0)
        early = Ray(Point3(0, 0, -5), Vec3(0, 0, 1), 0.0)
        late = Ray(Point3(0, 0, -5), Vec3(0, 0, 1), 1.0)
        assert sphere.hit(early, 0.001, float('inf')) is not None
        assert sphere.hit(late, 0.001, float('inf')) is None

    def test_bounding_box_covers_motion(self):
        sphere = MovingSphere(Point3(0, 0, 0), Point3(4, 0, 0), 0.0, 1.0, 1.0)
        box = sphere.bounding_box(0.0, 1.0)
        assert box.minimum == Point3(-1, -1, -1)
        assert box.maximum == Point3(5, 1, 1)


class TestHittableList:
    """Test HittableList class."""

    def test_empty_list_misses(self):
        world = HittableList()
        assert world.hit(Ray(Point3(0, 0, 0), Vec3(0, 0, 1)), 0.001, float('inf')) is None
        assert world.bounding_box(0, 1) is None

    def test_returns_closest(self):
        near = Sphere(Point3(0, 0, 5), 1.0)
        far = Sphere(Point3(0, 0, 10), 1.0)
        world = HittableList([far, near])

        hit = world.hit(Ray(Point3(0, 0, 0), Vec3(0, 0, 1)), 0.001, float('inf'))
        assert abs(hit.t - 4.0) < 1e-6

    def test_add_and_len(self):
        world = HittableList()
        world.add(Sphere(Point3(0, 0, 0), 1.0))
        world.add(Sphere(Point3(3, 0, 0), 1.0))
        assert len(world) == 2
        assert [s.center.x for s in world] == [0.0, 3.0]

    def test_bounding_box_union(self):
        world = HittableList([
            Sphere(Point3(0, 0, 0), 1.0),
            Sphere(Point3(5, 0, 0), 1.0),
        ])
        box = world.bounding_box(0, 1)
        assert box.minimum == Point3(-1, -1, -1)
        assert box.maximum == Point3(6, 1, 1)


class TestRects:
    """Test axis-aligned rectangles."""

    def test_xy_rect_hit(self):
        rect = XYRect(0, 2, 0, 1, 5)
        hit = rect.hit(Ray(Point3(1, 0.5, 0), Vec3(0, 0, 1)), 0.001, float('inf'))
        assert hit is not None
        assert abs(hit.t - 5.0) < 1e-9
        assert abs(hit.u - 0.5) < 1e-9
        assert abs(hit.v - 0.5) < 1e-9
        assert hit.normal == Vec3(0, 0, -1)
        assert not hit.front_face

    def test_xy_rect_outside_extent(self):
        rect = XYRect(0, 2, 0, 1, 5)
        assert rect.hit(Ray(Point3(3, 0.5, 0), Vec3(0, 0, 1)), 0.001, float('inf')) is None

    def test_parallel_ray_misses(self):
        rect = XZRect(0, 1, 0, 1, 0)
        assert rect.hit(Ray(Point3(0.5, 0, -1), Vec3(0, 0, 1)), 0.001, float('inf')) is None

    def test_xz_rect_from_above(self):
        rect = XZRect(0, 1, 0, 1, 0)
        hit = rect.hit(Ray(Point3(0.5, 3, 0.5), Vec3(0, -1, 0)), 0.001, float('inf'))
        assert hit is not None
        assert hit.front_face
        assert hit.normal == Vec3(0, 1, 0)

    def test_yz_rect(self):
        rect = YZRect(0, 1, 0, 1, 2)
        hit = rect.hit(Ray(Point3(0, 0.25, 0.75), Vec3(1, 0, 0)), 0.001, float('inf'))
        assert hit is not None
        assert abs(hit.t - 2.0) < 1e-9
        assert abs(hit.u - 0.25) < 1e-9
        assert abs(hit.v - 0.75) < 1e-9

    def test_padded_bounding_box(self):
        box = XZRect(0, 1, 2, 3, 4).bounding_box(0, 1)
        assert box.minimum == Point3(0, 4 - RECT_PAD, 2)
        assert box.maximum == Point3(1, 4 + RECT_PAD, 3)
        assert box.maximum.y > box.minimum.y


class TestBox:
    """Test Box class."""

    def test_hit_front_face(self):
        box = Box(Point3(0, 0, 0), Point3(1, 1, 1))
        hit = box.hit(Ray(Point3(0.5, 0.5, -2), Vec3(0, 0, 1)), 0.001, float('inf'))
        assert hit is not None
        assert abs(hit.t - 2.0) < 1e-9
        assert hit.normal == Vec3(0, 0, -1)

    def test_bounding_box(self):
        box = Box(Point3(-1, 0, 2), Point3(1, 3, 4))
        bbox = box.bounding_box(0, 1)
        assert bbox.minimum == Point3(-1, 0, 2)
        assert bbox.maximum == Point3(1, 3, 4)

    def test_has_six_sides(self):
        assert len(Box(Point3(0, 0, 0), Point3(1, 1, 1)).sides) == 6


class TestHitRecord:
    """Test HitRecord construction."""

    def test_from_outward_normal_flips_for_inside_hits(self):
        ray = Ray(Point3(0, 0, 0), Vec3(0, 0, 1))
        rec = HitRecord.from_outward_normal(ray, 1.0, Vec3(0, 0, 1), None)
        assert not rec.front_face
        assert rec.normal == Vec3(0, 0, -1)
        assert rec.point == Point3(0, 0, 1)

    def test_frozen(self):
        rec = HitRecord(Point3(0, 0, 0), Vec3(0, 1, 0), 1.0, True)
        with pytest.raises(AttributeError):
            rec.t = 2.0
