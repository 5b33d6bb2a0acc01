"""
Materials describing how light interacts with surfaces.

Implements:
- Lambertian diffuse
- Metal (specular reflection with fuzz)
- Dielectric (glass, water - with refraction)
- DiffuseLight (emitter)
- Isotropic (phase function for participating media)

Every material reads its albedo from a Texture; plain colors are wrapped in
a SolidColor. Materials are immutable and may be shared by many surfaces.
"""

from __future__ import annotations
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional, Union, TYPE_CHECKING
import math

import numpy as np

from .vec3 import Vec3, Color, Point3
from .ray import Ray
from .textures import Texture, as_texture

if TYPE_CHECKING:
    from .shapes import HitRecord

BLACK = Color(0, 0, 0)


@dataclass(frozen=True)
class ScatterResult:
    """Result of a material scatter operation."""
    scattered_ray: Ray
    attenuation: Color


class Material(ABC):
    """Abstract base class for materials."""

    @abstractmethod
    def scatter(self, ray_in: Ray, rec: HitRecord, rng: np.random.Generator) -> Optional[ScatterResult]:
        """Compute the scattered ray and attenuation.

        Args:
            ray_in: The incoming ray
            rec: The intersection being shaded
            rng: Random generator for this unit of work

        Returns:
            ScatterResult if ray scatters, None if absorbed
        """
        pass

    def emitted(self, u: float, v: float, point: Point3) -> Color:
        """Return emitted light color. Default is no emission."""
        return BLACK


class Lambertian(Material):
    """Diffuse material with Lambertian (ideal matte) scattering."""

    def __init__(self, albedo: Union[Color, Texture]):
        """Create a Lambertian material.

        Args:
            albedo: The base color, or a texture giving it per point
        """
        self.albedo = as_texture(albedo)

    def scatter(self, ray_in, rec, rng):
        scatter_direction = rec.normal + Vec3.random_unit_vector(rng)

        # Catch degenerate scatter direction
        if scatter_direction.near_zero():
            scatter_direction = rec.normal

        return ScatterResult(
            scattered_ray=Ray(rec.point, scatter_direction, ray_in.time),
            attenuation=self.albedo.value(rec.u, rec.v, rec.point)
        )


class Metal(Material):
    """Metallic material with specular reflection."""

    def __init__(self, albedo: Union[Color, Texture], fuzz: float = 0.0):
        """Create a metal material.

        Args:
            albedo: The reflection color, or a texture giving it per point
            fuzz: Radius of the reflection perturbation (0 = mirror, clamped to [0, 1])
        """
        self.albedo = as_texture(albedo)
        self.fuzz = max(0.0, min(fuzz, 1.0))

    def scatter(self, ray_in, rec, rng):
        reflected = ray_in.direction.normalize().reflect(rec.normal)

        if self.fuzz > 0:
            reflected = reflected + Vec3.random_in_unit_sphere(rng) * self.fuzz

        # Only scatter if reflection is in the correct hemisphere
        if reflected.dot(rec.normal) <= 0:
            return None

        return ScatterResult(
            scattered_ray=Ray(rec.point, reflected, ray_in.time),
            attenuation=self.albedo.value(rec.u, rec.v, rec.point)
        )


class Dielectric(Material):
    """Dielectric (glass-like) material with refraction."""

    WHITE = Color(1, 1, 1)

    def __init__(self, ior: float = 1.5):
        """Create a dielectric material.

        Args:
            ior: Index of refraction (1.0 = air, 1.5 = glass, 2.4 = diamond)
        """
        self.ior = ior

    def scatter(self, ray_in, rec, rng):
        # Determine refraction ratio based on whether we're entering or exiting
        refraction_ratio = 1.0 / self.ior if rec.front_face else self.ior

        unit_direction = ray_in.direction.normalize()
        cos_theta = min(-unit_direction.dot(rec.normal), 1.0)
        sin_theta = math.sqrt(max(0.0, 1.0 - cos_theta * cos_theta))

        cannot_refract = refraction_ratio * sin_theta > 1.0

        if cannot_refract or self.reflectance(cos_theta, refraction_ratio) > rng.random():
            direction = unit_direction.reflect(rec.normal)
        else:
            direction = unit_direction.refract(rec.normal, refraction_ratio)

        return ScatterResult(
            scattered_ray=Ray(rec.point, direction, ray_in.time),
            attenuation=self.WHITE
        )

    @staticmethod
    def reflectance(cosine: float, ref_idx: float) -> float:
        """Schlick's approximation for reflectance."""
        r0 = (1 - ref_idx) / (1 + ref_idx)
        r0 = r0 * r0
        return r0 + (1 - r0) * pow(1 - cosine, 5)


class DiffuseLight(Material):
    """Light-emitting material; never scatters."""

    def __init__(self, emit: Union[Color, Texture]):
        """Create an emissive material.

        Args:
            emit: The emitted radiance, or a texture giving it per point
        """
        self.emit = as_texture(emit)

    def scatter(self, ray_in, rec, rng):
        return None

    def emitted(self, u: float, v: float, point: Point3) -> Color:
        return self.emit.value(u, v, point)


class Isotropic(Material):
    """Phase function of a participating medium: scatters uniformly in all directions."""

    def __init__(self, albedo: Union[Color, Texture]):
        self.albedo = as_texture(albedo)

    def scatter(self, ray_in, rec, rng):
        return ScatterResult(
            scattered_ray=Ray(rec.point, Vec3.random_unit_vector(rng), ray_in.time),
            attenuation=self.albedo.value(rec.u, rec.v, rec.point)
        )
