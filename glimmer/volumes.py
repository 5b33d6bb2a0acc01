"""
Volumetric effects for the ray tracer.

A ConstantMedium fills the inside of a closed boundary surface with a
homogeneous participating medium (fog, smoke). Rays passing through it are
scattered at an exponentially distributed free-flight distance.
"""

from __future__ import annotations
from typing import Union
import math

import numpy as np

from .vec3 import Vec3, Color
from .shapes import Hittable, HitRecord
from .materials import Isotropic
from .textures import Texture

# Offset past the entry crossing when searching for the exit crossing
EXIT_EPSILON = 0.0001


class ConstantMedium(Hittable):
    """A constant density participating medium.

    The boundary must be a closed convex surface: the ray is assumed to cross
    it at most once going in and once going out.
    """

    def __init__(
        self,
        boundary: Hittable,
        density: float,
        albedo: Union[Color, Texture]
    ):
        """Create a constant density medium.

        Args:
            boundary: The shape that defines the medium's boundary
            density: The density of the medium (higher = more opaque)
            albedo: The color of the medium, or a texture giving it per point
        """
        if density <= 0:
            raise ValueError(f"Medium density must be positive, got {density}")
        self.boundary = boundary
        self.neg_inv_density = -1.0 / density
        self.phase_function = Isotropic(albedo)

    def hit(self, ray, t_min, t_max, rng=None):
        """Sample a scattering event inside the medium.

        A first crossing behind t_min is clamped to t_min, so a ray starting
        inside the boundary is treated as travelling through the medium from
        its origin.
        """
        if rng is None:
            rng = np.random.default_rng()

        rec1 = self.boundary.hit(ray, -math.inf, math.inf, rng)
        if rec1 is None:
            return None

        rec2 = self.boundary.hit(ray, rec1.t + EXIT_EPSILON, math.inf, rng)
        if rec2 is None:
            return None

        t_enter = max(rec1.t, t_min)
        t_exit = min(rec2.t, t_max)

        if t_enter >= t_exit:
            return None

        t_enter = max(t_enter, 0.0)

        ray_length = ray.direction.length()
        distance_inside_boundary = (t_exit - t_enter) * ray_length
        # 1 - U lies in (0, 1], keeping the log finite
        hit_distance = self.neg_inv_density * math.log(1.0 - rng.random())

        if hit_distance > distance_inside_boundary:
            return None

        t = t_enter + hit_distance / ray_length

        return HitRecord(
            point=ray.at(t),
            normal=Vec3(1, 0, 0),  # Arbitrary, not used for volumes
            t=t,
            front_face=True,
            material=self.phase_function,
            u=0.0,
            v=0.0
        )

    def bounding_box(self, time0, time1):
        return self.boundary.bounding_box(time0, time1)
