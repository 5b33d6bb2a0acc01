"""
Glimmer - A Python Ray Tracing Renderer

An offline Monte-Carlo path tracer with support for:
- Spheres, moving spheres, axis-aligned rectangles and boxes
- Translation and rotation instancing
- Constant density participating media (fog, smoke)
- Diffuse, metal, dielectric, emissive and isotropic materials
- Solid, checker, Perlin noise and image textures
- BVH acceleration
- Depth of field and motion blur
- Multi-threaded tile rendering with reproducible seeding
"""

__version__ = "0.1.0"
__author__ = "Glimmer Team"

from .vec3 import Vec3, Point3, Color
from .ray import Ray
from .shapes import (
    AABB, HitRecord, Hittable, HittableList,
    Sphere, MovingSphere, XYRect, XZRect, YZRect, Box
)
from .transforms import Translate, RotateY
from .volumes import ConstantMedium
from .bvh import BVHNode, BoundingBoxError, build_bvh
from .perlin import Perlin
from .textures import Texture, SolidColor, CheckerTexture, NoiseTexture, ImageTexture
from .materials import Material, ScatterResult, Lambertian, Metal, Dielectric, DiffuseLight, Isotropic
from .camera import Camera
from .renderer import Renderer, RenderSettings, ray_color, write_ppm
from .scenes import Scene, SceneError, SCENES, load_scene
