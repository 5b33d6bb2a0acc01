"""
Instance transforms that wrap another hittable.

Rather than moving geometry, the incoming ray is moved into the object's
local frame, intersected there, and the hit is moved back to world space.
"""

from __future__ import annotations
from dataclasses import replace
from itertools import product
from typing import Optional
import math

from .vec3 import Vec3, Point3
from .ray import Ray
from .shapes import Hittable, AABB


class Translate(Hittable):
    """Offsets a hittable by a fixed vector."""

    def __init__(self, instance: Hittable, offset: Vec3):
        self.instance = instance
        self.offset = offset

    def hit(self, ray, t_min, t_max, rng=None):
        moved = Ray(ray.origin - self.offset, ray.direction, ray.time)

        rec = self.instance.hit(moved, t_min, t_max, rng)
        if rec is None:
            return None

        # Translation leaves the normal and the facing side unchanged
        return replace(rec, point=rec.point + self.offset)

    def bounding_box(self, time0, time1):
        box = self.instance.bounding_box(time0, time1)
        if box is None:
            return None
        return AABB(box.minimum + self.offset, box.maximum + self.offset)


class RotateY(Hittable):
    """Rotates a hittable about the world Y axis.

    The enclosing box is computed once at construction by rotating the eight
    corners of the child's box over the [0, 1] time interval.
    """

    def __init__(self, instance: Hittable, angle: float):
        """Wrap an instance.

        Args:
            instance: The hittable to rotate
            angle: Rotation in degrees, counter-clockwise seen from +Y
        """
        self.instance = instance
        radians = math.radians(angle)
        self.sin_theta = math.sin(radians)
        self.cos_theta = math.cos(radians)
        self.bbox = self._rotated_box(instance.bounding_box(0.0, 1.0))

    def _rotated_box(self, box: Optional[AABB]) -> Optional[AABB]:
        if box is None:
            return None

        lo = [math.inf, math.inf, math.inf]
        hi = [-math.inf, -math.inf, -math.inf]

        for x, y, z in product(
            (box.minimum.x, box.maximum.x),
            (box.minimum.y, box.maximum.y),
            (box.minimum.z, box.maximum.z),
        ):
            corner = self._to_world(Vec3(x, y, z))
            for c in range(3):
                lo[c] = min(lo[c], corner[c])
                hi[c] = max(hi[c], corner[c])

        return AABB(Point3(*lo), Point3(*hi))

    def _to_local(self, v: Vec3) -> Vec3:
        return Vec3(
            self.cos_theta * v.x - self.sin_theta * v.z,
            v.y,
            self.sin_theta * v.x + self.cos_theta * v.z
        )

    def _to_world(self, v: Vec3) -> Vec3:
        return Vec3(
            self.cos_theta * v.x + self.sin_theta * v.z,
            v.y,
            -self.sin_theta * v.x + self.cos_theta * v.z
        )

    def hit(self, ray, t_min, t_max, rng=None):
        rotated = Ray(self._to_local(ray.origin), self._to_local(ray.direction), ray.time)

        rec = self.instance.hit(rotated, t_min, t_max, rng)
        if rec is None:
            return None

        return replace(
            rec,
            point=self._to_world(rec.point),
            normal=self._to_world(rec.normal)
        )

    def bounding_box(self, time0, time1):
        return self.bbox
