"""
Geometric shapes for the ray tracer.

Each shape implements the Hittable interface: a `hit` query returning the
nearest intersection inside an open parameter window, and a `bounding_box`
query used by the BVH.
"""

from __future__ import annotations
from abc import ABC, abstractmethod
from dataclasses import dataclass
from functools import reduce
from typing import Optional, Tuple, TYPE_CHECKING
import math

import numpy as np

from .vec3 import Vec3, Point3
from .ray import Ray

if TYPE_CHECKING:
    from .materials import Material


def face_normal(ray: Ray, outward_normal: Vec3) -> Tuple[Vec3, bool]:
    """Orient a geometric normal against the incoming ray.

    Returns:
        (normal, front_face) where front_face is True if the ray arrives
        from the side the outward normal points to.
    """
    front_face = ray.direction.dot(outward_normal) < 0
    return (outward_normal if front_face else -outward_normal), front_face


@dataclass(frozen=True)
class HitRecord:
    """Stores information about a ray-object intersection.

    Attributes:
        point: The intersection point in world space
        normal: The surface normal at the intersection (always points against ray)
        t: The ray parameter at intersection
        front_face: True if ray hit from outside the object
        material: The material at the hit point
        u, v: Texture coordinates at the hit point
    """
    point: Point3
    normal: Vec3
    t: float
    front_face: bool
    material: Optional[Material] = None
    u: float = 0.0
    v: float = 0.0

    @classmethod
    def from_outward_normal(
        cls,
        ray: Ray,
        t: float,
        outward_normal: Vec3,
        material: Optional[Material],
        u: float = 0.0,
        v: float = 0.0,
    ) -> HitRecord:
        """Build a record at ray.at(t), orienting the normal against the ray."""
        normal, front_face = face_normal(ray, outward_normal)
        return cls(
            point=ray.at(t),
            normal=normal,
            t=t,
            front_face=front_face,
            material=material,
            u=u,
            v=v
        )


class AABB:
    """Axis-Aligned Bounding Box for acceleration structures."""

    __slots__ = ('minimum', 'maximum')

    def __init__(self, minimum: Point3, maximum: Point3):
        """Create an AABB from corner points.

        Args:
            minimum: Corner with smallest x, y, z values
            maximum: Corner with largest x, y, z values
        """
        self.minimum = minimum
        self.maximum = maximum

    def hit(self, ray: Ray, t_min: float, t_max: float) -> bool:
        """Test if ray intersects this AABB using the slab method.

        Zero direction components divide to signed infinities, so an axis
        the ray runs parallel to either imposes no constraint or excludes
        everything. A NaN slab bound (origin exactly on a slab plane) is
        ignored by fmax/fmin.
        """
        with np.errstate(divide='ignore', invalid='ignore'):
            inv_d = 1.0 / ray.direction._data
            t0 = (self.minimum._data - ray.origin._data) * inv_d
            t1 = (self.maximum._data - ray.origin._data) * inv_d

        negative = inv_d < 0
        t_near = np.where(negative, t1, t0)
        t_far = np.where(negative, t0, t1)

        t_min = float(np.fmax.reduce(t_near, initial=t_min))
        t_max = float(np.fmin.reduce(t_far, initial=t_max))
        return t_max > t_min

    def contains(self, other: 'AABB') -> bool:
        """Check whether another box lies entirely inside this one."""
        return bool(
            np.all(self.minimum._data <= other.minimum._data)
            and np.all(other.maximum._data <= self.maximum._data)
        )

    @staticmethod
    def surrounding_box(box0: 'AABB', box1: 'AABB') -> 'AABB':
        """Return the AABB that contains both input boxes."""
        return AABB(
            Point3.from_array(np.minimum(box0.minimum._data, box1.minimum._data)),
            Point3.from_array(np.maximum(box0.maximum._data, box1.maximum._data))
        )

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, AABB):
            return NotImplemented
        return self.minimum == other.minimum and self.maximum == other.maximum

    def __repr__(self) -> str:
        return f"AABB(min={self.minimum}, max={self.maximum})"


class Hittable(ABC):
    """Abstract base class for all objects that can be hit by rays.

    Scenes are built once and then only read, so implementations must not
    mutate themselves inside `hit`. The optional generator is forwarded by
    wrappers and consumed only by stochastic surfaces (participating media).
    """

    @abstractmethod
    def hit(
        self,
        ray: Ray,
        t_min: float,
        t_max: float,
        rng: Optional[np.random.Generator] = None
    ) -> Optional[HitRecord]:
        """Find the nearest intersection with t strictly inside (t_min, t_max).

        Args:
            ray: The ray to test
            t_min: Lower bound of the parameter window (exclusive)
            t_max: Upper bound of the parameter window (exclusive)
            rng: Random generator for stochastic surfaces

        Returns:
            HitRecord if intersection found, None otherwise
        """
        pass

    @abstractmethod
    def bounding_box(self, time0: float, time1: float) -> Optional[AABB]:
        """Get a world-space box valid over the time interval [time0, time1].

        Returns:
            AABB if the object is bounded, None otherwise
        """
        pass


def get_sphere_uv(point: Vec3) -> tuple[float, float]:
    """Get spherical UV coordinates for a point on the unit sphere.

    u: returned value [0,1] of angle around the Y axis from X=-1
    v: returned value [0,1] of angle from Y=-1 to Y=+1
    """
    theta = math.acos(max(-1.0, min(1.0, -point.y)))
    phi = math.atan2(-point.z, point.x) + math.pi

    u = phi / (2 * math.pi)
    v = theta / math.pi
    return u, v


def _sphere_root(
    ray: Ray, center: Point3, radius: float, t_min: float, t_max: float
) -> Optional[float]:
    """Nearest root of the ray-sphere quadratic inside (t_min, t_max).

    The equation (P-C)·(P-C) = r² where P = ray.at(t)
    expands to: t²(d·d) + 2t(d·(O-C)) + (O-C)·(O-C) - r² = 0.
    """
    oc = ray.origin - center
    a = ray.direction.length_squared()
    half_b = oc.dot(ray.direction)
    c = oc.length_squared() - radius * radius

    discriminant = half_b * half_b - a * c
    if discriminant < 0:
        return None

    sqrtd = math.sqrt(discriminant)

    root = (-half_b - sqrtd) / a
    if root <= t_min or t_max <= root:
        root = (-half_b + sqrtd) / a
        if root <= t_min or t_max <= root:
            return None
    return root


class Sphere(Hittable):
    """A sphere defined by center and radius."""

    def __init__(self, center: Point3, radius: float, material: Optional[Material] = None):
        """Create a sphere.

        Args:
            center: Center point of the sphere
            radius: Radius of the sphere (can be negative for inward normals)
            material: Material for shading
        """
        self.center = center
        self.radius = radius
        self.material = material

    def hit(self, ray, t_min, t_max, rng=None):
        root = _sphere_root(ray, self.center, self.radius, t_min, t_max)
        if root is None:
            return None

        outward_normal = (ray.at(root) - self.center) / self.radius
        u, v = get_sphere_uv(outward_normal)
        return HitRecord.from_outward_normal(ray, root, outward_normal, self.material, u, v)

    def bounding_box(self, time0, time1):
        r_vec = Vec3(abs(self.radius), abs(self.radius), abs(self.radius))
        return AABB(self.center - r_vec, self.center + r_vec)

    def __repr__(self) -> str:
        return f"Sphere(center={self.center}, radius={self.radius})"


class MovingSphere(Hittable):
    """A sphere that moves linearly between two positions over time.

    Used for motion blur effects.
    """

    def __init__(
        self,
        center0: Point3,
        center1: Point3,
        time0: float,
        time1: float,
        radius: float,
        material: Optional[Material] = None
    ):
        """Create a moving sphere.

        Args:
            center0: Center position at time0
            center1: Center position at time1
            time0: Start time
            time1: End time
            radius: Radius of the sphere
            material: Material for shading
        """
        self.center0 = center0
        self.center1 = center1
        self.time0 = time0
        self.time1 = time1
        self.radius = radius
        self.material = material

    def center(self, time: float) -> Point3:
        """Get the center position at a given time."""
        if self.time1 == self.time0:
            return self.center0
        t = (time - self.time0) / (self.time1 - self.time0)
        return self.center0 + (self.center1 - self.center0) * t

    def hit(self, ray, t_min, t_max, rng=None):
        current_center = self.center(ray.time)
        root = _sphere_root(ray, current_center, self.radius, t_min, t_max)
        if root is None:
            return None

        outward_normal = (ray.at(root) - current_center) / self.radius
        u, v = get_sphere_uv(outward_normal)
        return HitRecord.from_outward_normal(ray, root, outward_normal, self.material, u, v)

    def bounding_box(self, time0, time1):
        """Return an AABB that contains the sphere over the whole interval."""
        r_vec = Vec3(abs(self.radius), abs(self.radius), abs(self.radius))
        c0 = self.center(time0)
        c1 = self.center(time1)
        box0 = AABB(c0 - r_vec, c0 + r_vec)
        box1 = AABB(c1 - r_vec, c1 + r_vec)
        return AABB.surrounding_box(box0, box1)


class HittableList(Hittable):
    """A collection of hittable objects, searched linearly."""

    def __init__(self, objects: Optional[list[Hittable]] = None):
        self.objects: list[Hittable] = objects if objects is not None else []

    def add(self, obj: Hittable) -> None:
        """Add an object to the list."""
        self.objects.append(obj)

    def hit(self, ray, t_min, t_max, rng=None):
        """Find the closest intersection among all objects."""
        closest_hit: Optional[HitRecord] = None
        closest_t = t_max

        for obj in self.objects:
            hit_record = obj.hit(ray, t_min, closest_t, rng)
            if hit_record is not None:
                closest_hit = hit_record
                closest_t = hit_record.t

        return closest_hit

    def bounding_box(self, time0, time1):
        """Return the AABB containing all objects, or None if any is unbounded."""
        if not self.objects:
            return None

        boxes = []
        for obj in self.objects:
            box = obj.bounding_box(time0, time1)
            if box is None:
                return None
            boxes.append(box)

        return reduce(AABB.surrounding_box, boxes)

    def __len__(self) -> int:
        return len(self.objects)

    def __iter__(self):
        return iter(self.objects)


# Half thickness given to the flat axis of a rectangle's bounding box
RECT_PAD = 0.0001


class _AxisAlignedRect(Hittable):
    """A rectangle lying in the plane `axis = k`.

    `a_axis` and `b_axis` are the two in-plane axes; texture coordinates run
    from 0 to 1 across them.
    """

    axis = 2
    a_axis = 0
    b_axis = 1

    def __init__(
        self,
        a0: float,
        a1: float,
        b0: float,
        b1: float,
        k: float,
        material: Optional[Material] = None
    ):
        self.a0 = a0
        self.a1 = a1
        self.b0 = b0
        self.b1 = b1
        self.k = k
        self.material = material

        normal = [0.0, 0.0, 0.0]
        normal[self.axis] = 1.0
        self.outward_normal = Vec3(*normal)

    def hit(self, ray, t_min, t_max, rng=None):
        d = ray.direction[self.axis]
        if d == 0:
            return None

        t = (self.k - ray.origin[self.axis]) / d
        if t <= t_min or t_max <= t:
            return None

        a = ray.origin[self.a_axis] + t * ray.direction[self.a_axis]
        b = ray.origin[self.b_axis] + t * ray.direction[self.b_axis]
        if a < self.a0 or a > self.a1 or b < self.b0 or b > self.b1:
            return None

        u = (a - self.a0) / (self.a1 - self.a0)
        v = (b - self.b0) / (self.b1 - self.b0)
        return HitRecord.from_outward_normal(ray, t, self.outward_normal, self.material, u, v)

    def bounding_box(self, time0, time1):
        # Pad the flat dimension so the box has nonzero width on every axis
        low = [0.0, 0.0, 0.0]
        high = [0.0, 0.0, 0.0]
        low[self.a_axis], high[self.a_axis] = self.a0, self.a1
        low[self.b_axis], high[self.b_axis] = self.b0, self.b1
        low[self.axis], high[self.axis] = self.k - RECT_PAD, self.k + RECT_PAD
        return AABB(Point3(*low), Point3(*high))


class XYRect(_AxisAlignedRect):
    """Rectangle [x0, x1] x [y0, y1] in the plane z = k."""

    axis, a_axis, b_axis = 2, 0, 1

    def __init__(self, x0, x1, y0, y1, k, material=None):
        super().__init__(x0, x1, y0, y1, k, material)


class XZRect(_AxisAlignedRect):
    """Rectangle [x0, x1] x [z0, z1] in the plane y = k."""

    axis, a_axis, b_axis = 1, 0, 2

    def __init__(self, x0, x1, z0, z1, k, material=None):
        super().__init__(x0, x1, z0, z1, k, material)


class YZRect(_AxisAlignedRect):
    """Rectangle [y0, y1] x [z0, z1] in the plane x = k."""

    axis, a_axis, b_axis = 0, 1, 2

    def __init__(self, y0, y1, z0, z1, k, material=None):
        super().__init__(y0, y1, z0, z1, k, material)


class Box(Hittable):
    """An axis-aligned box built from six rectangles."""

    def __init__(self, p0: Point3, p1: Point3, material: Optional[Material] = None):
        """Create a box from its minimum and maximum corners.

        Args:
            p0: Corner with the smallest coordinates
            p1: Corner with the largest coordinates
            material: Material shared by all six sides
        """
        self.p0 = p0
        self.p1 = p1
        self.sides = HittableList([
            XYRect(p0.x, p1.x, p0.y, p1.y, p1.z, material),
            XYRect(p0.x, p1.x, p0.y, p1.y, p0.z, material),
            XZRect(p0.x, p1.x, p0.z, p1.z, p1.y, material),
            XZRect(p0.x, p1.x, p0.z, p1.z, p0.y, material),
            YZRect(p0.y, p1.y, p0.z, p1.z, p1.x, material),
            YZRect(p0.y, p1.y, p0.z, p1.z, p0.x, material),
        ])

    def hit(self, ray, t_min, t_max, rng=None):
        return self.sides.hit(ray, t_min, t_max, rng)

    def bounding_box(self, time0, time1):
        return AABB(self.p0, self.p1)
