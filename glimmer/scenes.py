"""
Built-in demo scenes.

Each builder returns a Scene: the world to render plus the background
and camera placement it was composed for. Builders draw all randomness from
the generator they are given, so a fixed seed yields the same scene.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Callable, Dict, Optional
import logging

import numpy as np

from .vec3 import Vec3, Point3, Color
from .camera import Camera
from .shapes import Hittable, HittableList, Sphere, MovingSphere, XYRect, XZRect, YZRect, Box
from .transforms import Translate, RotateY
from .volumes import ConstantMedium
from .materials import Lambertian, Metal, Dielectric, DiffuseLight
from .textures import CheckerTexture, NoiseTexture, ImageTexture
from .bvh import build_bvh

logger = logging.getLogger(__name__)

SKY = Color(0.7, 0.8, 1.0)


class SceneError(Exception):
    """Unknown or unbuildable scene."""
    pass


@dataclass
class Scene:
    """A world with the viewing setup it was composed for."""
    world: Hittable
    background: Color
    look_from: Point3
    look_at: Point3
    vfov: float = 20.0
    aperture: float = 0.0
    focus_dist: float = 10.0
    samples_per_pixel: int = 100
    shutter_open: float = 0.0
    shutter_close: float = 1.0

    def camera(self, aspect_ratio: float) -> Camera:
        """Build the camera for this scene at the given aspect ratio."""
        return Camera(
            look_from=self.look_from,
            look_at=self.look_at,
            vup=Vec3(0, 1, 0),
            vfov=self.vfov,
            aspect_ratio=aspect_ratio,
            aperture=self.aperture,
            focus_dist=self.focus_dist,
            shutter_open=self.shutter_open,
            shutter_close=self.shutter_close
        )


def random_spheres(rng: np.random.Generator) -> Scene:
    """Checkered ground covered in small random spheres, some in motion."""
    world = HittableList()

    checker = CheckerTexture.from_colors(Color(0.2, 0.3, 0.1), Color(0.9, 0.9, 0.9))
    world.add(Sphere(Point3(0, -1000, 0), 1000, Lambertian(checker)))

    shift = Point3(4, 0.2, 0)

    for a in range(-11, 11):
        for b in range(-11, 11):
            choose_mat = rng.random()
            center = Point3(a + 0.9 * rng.random(), 0.2, b + 0.9 * rng.random())

            if (center - shift).length() <= 0.9:
                continue

            if choose_mat < 0.8:
                # diffuse
                albedo = Color.random(rng) * Color.random(rng)
                center2 = center + Vec3(0, rng.uniform(0, 0.5), 0)
                world.add(MovingSphere(center, center2, 0.0, 1.0, 0.2, Lambertian(albedo)))
            elif choose_mat < 0.95:
                # metal
                albedo = Color.random(rng, 0.5, 1)
                fuzz = rng.uniform(0, 0.5)
                world.add(Sphere(center, 0.2, Metal(albedo, fuzz)))
            else:
                # glass
                world.add(Sphere(center, 0.2, Dielectric(1.5)))

    world.add(Sphere(Point3(0, 1, 0), 1.0, Dielectric(1.5)))
    world.add(Sphere(Point3(-4, 1, 0), 1.0, Lambertian(Color(0.4, 0.2, 0.1))))
    world.add(Sphere(Point3(4, 1, 0), 1.0, Metal(Color(0.7, 0.6, 0.5), 0.0)))

    return Scene(
        world=build_bvh(world, 0.0, 1.0, rng),
        background=SKY,
        look_from=Point3(13, 2, 3),
        look_at=Point3(0, 0, 0),
        aperture=0.1,
        samples_per_pixel=500
    )


def two_spheres(rng: np.random.Generator) -> Scene:
    """Two large checkered spheres."""
    checker = CheckerTexture.from_colors(Color(0.2, 0.3, 0.1), Color(0.9, 0.9, 0.9))
    material = Lambertian(checker)

    world = HittableList([
        Sphere(Point3(0, -10, 0), 10, material),
        Sphere(Point3(0, 10, 0), 10, material),
    ])

    return Scene(
        world=world,
        background=SKY,
        look_from=Point3(13, 2, 3),
        look_at=Point3(0, 0, 0)
    )


def two_perlin_spheres(rng: np.random.Generator) -> Scene:
    """Marble ground and sphere."""
    material = Lambertian(NoiseTexture(4.0, rng))

    world = HittableList([
        Sphere(Point3(0, -1000, 0), 1000, material),
        Sphere(Point3(0, 2, 0), 2, material),
    ])

    return Scene(
        world=world,
        background=SKY,
        look_from=Point3(13, 2, 3),
        look_at=Point3(0, 0, 0)
    )


def earth(rng: np.random.Generator, texture_file: str = 'earthmap.jpg') -> Scene:
    """A globe wrapped in an image texture."""
    surface = Lambertian(ImageTexture.from_file(texture_file))

    return Scene(
        world=HittableList([Sphere(Point3(0, 0, 0), 2, surface)]),
        background=SKY,
        look_from=Point3(13, 2, 3),
        look_at=Point3(0, 0, 0)
    )


def simple_light(rng: np.random.Generator) -> Scene:
    """Marble spheres lit by a rectangular area light, no sky."""
    pertext = NoiseTexture(4.0, rng)

    world = HittableList([
        Sphere(Point3(0, -1000, 0), 1000, Lambertian(pertext)),
        Sphere(Point3(0, 2, 0), 2, Lambertian(pertext)),
        XYRect(3, 5, 1, 3, -2, DiffuseLight(Color(4, 4, 4))),
    ])

    return Scene(
        world=world,
        background=Color(0, 0, 0),
        look_from=Point3(26, 3, 6),
        look_at=Point3(0, 2, 0),
        samples_per_pixel=400
    )


def _cornell_walls(light_rect: Hittable) -> HittableList:
    red = Lambertian(Color(0.65, 0.05, 0.05))
    white = Lambertian(Color(0.73, 0.73, 0.73))
    green = Lambertian(Color(0.12, 0.45, 0.15))

    return HittableList([
        YZRect(0, 555, 0, 555, 555, green),
        YZRect(0, 555, 0, 555, 0, red),
        light_rect,
        XZRect(0, 555, 0, 555, 0, white),
        XZRect(0, 555, 0, 555, 555, white),
        XYRect(0, 555, 0, 555, 555, white),
    ])


def _cornell_blocks() -> tuple[Hittable, Hittable]:
    white = Lambertian(Color(0.73, 0.73, 0.73))

    tall = Box(Point3(0, 0, 0), Point3(165, 330, 165), white)
    tall = Translate(RotateY(tall, 15), Vec3(265, 0, 295))

    short = Box(Point3(0, 0, 0), Point3(165, 165, 165), white)
    short = Translate(RotateY(short, -18), Vec3(130, 0, 65))

    return tall, short


def _cornell_scene(world: HittableList) -> Scene:
    return Scene(
        world=world,
        background=Color(0, 0, 0),
        look_from=Point3(278, 278, -800),
        look_at=Point3(278, 278, 0),
        vfov=40.0,
        samples_per_pixel=200
    )


def cornell_box(rng: np.random.Generator) -> Scene:
    """The Cornell box with two rotated blocks."""
    light = XZRect(213, 343, 227, 332, 554, DiffuseLight(Color(15, 15, 15)))
    world = _cornell_walls(light)
    for block in _cornell_blocks():
        world.add(block)
    return _cornell_scene(world)


def cornell_smoke(rng: np.random.Generator) -> Scene:
    """The Cornell box with the blocks replaced by dark and light smoke."""
    light = XZRect(113, 443, 127, 432, 554, DiffuseLight(Color(7, 7, 7)))
    world = _cornell_walls(light)

    tall, short = _cornell_blocks()
    world.add(ConstantMedium(tall, 0.01, Color(0, 0, 0)))
    world.add(ConstantMedium(short, 0.01, Color(1, 1, 1)))
    return _cornell_scene(world)


def final_scene(rng: np.random.Generator, texture_file: Optional[str] = None) -> Scene:
    """Every feature at once: boxes, motion blur, glass, fog, noise, instancing.

    The earth sphere is only added when `texture_file` is given.
    """
    ground = Lambertian(Color(0.48, 0.83, 0.53))
    boxes = HittableList()
    boxes_per_side = 20
    for i in range(boxes_per_side):
        for j in range(boxes_per_side):
            w = 100.0
            x0 = -1000.0 + i * w
            z0 = -1000.0 + j * w
            y1 = rng.uniform(1, 101)
            boxes.add(Box(Point3(x0, 0, z0), Point3(x0 + w, y1, z0 + w), ground))

    world = HittableList()
    world.add(build_bvh(boxes, 0.0, 1.0, rng))

    world.add(XZRect(123, 423, 147, 412, 554, DiffuseLight(Color(7, 7, 7))))

    center1 = Point3(400, 400, 200)
    center2 = center1 + Vec3(30, 0, 0)
    world.add(MovingSphere(center1, center2, 0, 1, 50, Lambertian(Color(0.7, 0.3, 0.1))))

    world.add(Sphere(Point3(260, 150, 45), 50, Dielectric(1.5)))
    world.add(Sphere(Point3(0, 150, 145), 50, Metal(Color(0.8, 0.8, 0.9), 1.0)))

    boundary = Sphere(Point3(360, 150, 145), 70, Dielectric(1.5))
    world.add(boundary)
    world.add(ConstantMedium(boundary, 0.2, Color(0.2, 0.4, 0.9)))
    fog = Sphere(Point3(0, 0, 0), 5000, Dielectric(1.5))
    world.add(ConstantMedium(fog, 0.0001, Color(1, 1, 1)))

    if texture_file is not None:
        world.add(Sphere(Point3(400, 200, 400), 100, Lambertian(ImageTexture.from_file(texture_file))))

    world.add(Sphere(Point3(220, 280, 300), 80, Lambertian(NoiseTexture(0.1, rng))))

    white = Lambertian(Color(0.73, 0.73, 0.73))
    cluster = HittableList([
        Sphere(Point3.random(rng, 0, 165), 10, white)
        for _ in range(1000)
    ])
    world.add(Translate(RotateY(build_bvh(cluster, 0.0, 1.0, rng), 15), Vec3(-100, 270, 395)))

    return Scene(
        world=world,
        background=Color(0, 0, 0),
        look_from=Point3(478, 278, -600),
        look_at=Point3(278, 278, 0),
        vfov=40.0,
        samples_per_pixel=10000
    )


SCENES: Dict[str, Callable[..., Scene]] = {
    'random': random_spheres,
    'two_spheres': two_spheres,
    'two_perlin_spheres': two_perlin_spheres,
    'earth': earth,
    'simple_light': simple_light,
    'cornell': cornell_box,
    'cornell_smoke': cornell_smoke,
    'final': final_scene,
}


def load_scene(name: str, rng: Optional[np.random.Generator] = None, **kwargs) -> Scene:
    """Build a named scene.

    Args:
        name: One of the keys of SCENES
        rng: Generator for scene randomness
        **kwargs: Extra builder options (e.g. texture_file)

    Raises:
        SceneError: If the name is unknown
    """
    try:
        builder = SCENES[name]
    except KeyError:
        raise SceneError(f"Unknown scene: {name} (choose from {', '.join(SCENES)})") from None

    if rng is None:
        rng = np.random.default_rng()

    logger.info("Building scene %s", name)
    return builder(rng, **kwargs)
