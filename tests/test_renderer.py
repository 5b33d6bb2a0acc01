"""Tests for the renderer."""

import pytest
import io
import numpy as np
from PIL import Image

from glimmer.vec3 import Vec3, Point3, Color
from glimmer.ray import Ray
from glimmer.camera import Camera
from glimmer.shapes import Sphere, HittableList, XZRect
from glimmer.materials import Lambertian, Metal, DiffuseLight
from glimmer.renderer import Renderer, RenderSettings, ray_color, write_ppm

SKY = Color(0.7, 0.8, 1.0)


def simple_world():
    return HittableList([Sphere(Point3(0, 0, -1), 0.5, Lambertian(Color(0.5, 0.5, 0.5)))])


class TestRayColor:
    """Test the recursive radiance estimate."""

    def test_zero_depth_is_black(self):
        world = HittableList([Sphere(Point3(0, 0, -1), 0.5, DiffuseLight(Color(10, 10, 10)))])
        ray = Ray(Point3(0, 0, 0), Vec3(0, 0, -1))
        color = ray_color(ray, SKY, world, 0, np.random.default_rng(0))
        assert color == Color(0, 0, 0)

    def test_miss_returns_background(self):
        ray = Ray(Point3(0, 0, 0), Vec3(0, 1, 0))
        color = ray_color(ray, SKY, simple_world(), 50, np.random.default_rng(0))
        assert color == SKY

    def test_empty_world(self):
        ray = Ray(Point3(0, 0, 0), Vec3(1, 0, 0))
        color = ray_color(ray, Color(0.1, 0.2, 0.3), HittableList(), 5, np.random.default_rng(0))
        assert color == Color(0.1, 0.2, 0.3)

    def test_light_returns_emission(self):
        world = HittableList([XZRect(-1, 1, -1, 1, 2, DiffuseLight(Color(4, 3, 2)))])
        ray = Ray(Point3(0, 0, 0), Vec3(0, 1, 0))
        color = ray_color(ray, Color(0, 0, 0), world, 50, np.random.default_rng(0))
        assert color == Color(4, 3, 2)

    def test_mirror_reflects_background(self):
        world = HittableList([XZRect(-10, 10, -10, 10, 0, Metal(Color(0.5, 0.5, 0.5)))])
        ray = Ray(Point3(0, 1, 0), Vec3(1, -1, 0))
        color = ray_color(ray, SKY, world, 50, np.random.default_rng(0))
        assert color == SKY * 0.5

    def test_bounce_budget_limits_path(self):
        world = HittableList([XZRect(-10, 10, -10, 10, 0, Metal(Color(0.5, 0.5, 0.5)))])
        ray = Ray(Point3(0, 1, 0), Vec3(1, -1, 0))
        # One level of budget reaches the mirror and no further
        color = ray_color(ray, SKY, world, 1, np.random.default_rng(0))
        assert color == Color(0, 0, 0)


class TestRenderSettings:
    """Test RenderSettings defaults and validation."""

    def test_defaults(self):
        settings = RenderSettings()
        assert settings.background == Color(0, 0, 0)
        assert settings.num_threads >= 1
        assert abs(settings.aspect_ratio - 400 / 225) < 1e-12

    def test_invalid_size(self):
        with pytest.raises(ValueError):
            RenderSettings(width=0)

    def test_invalid_samples(self):
        with pytest.raises(ValueError):
            RenderSettings(samples_per_pixel=0)


class TestRenderer:
    """Test full renders."""

    def make_camera(self, aspect_ratio):
        return Camera(
            look_from=Point3(0, 0, 0),
            look_at=Point3(0, 0, -1),
            vfov=90,
            aspect_ratio=aspect_ratio
        )

    def test_generate_tiles_cover_image(self):
        renderer = Renderer(RenderSettings(width=70, height=40, tile_size=32))
        tiles = renderer._generate_tiles(70, 40)
        covered = np.zeros((40, 70), dtype=int)
        for x0, y0, x1, y1 in tiles:
            covered[y0:y1, x0:x1] += 1
        assert np.all(covered == 1)

    def test_render_shape(self):
        settings = RenderSettings(width=8, height=6, samples_per_pixel=2, max_depth=3,
                                  tile_size=4, num_threads=1, background=SKY, seed=1)
        image = Renderer(settings).render(simple_world(), self.make_camera(settings.aspect_ratio))
        assert image.shape == (6, 8, 3)
        assert image.dtype == np.float64
        assert np.all(image >= 0)

    def test_empty_world_renders_background(self):
        settings = RenderSettings(width=4, height=3, samples_per_pixel=3, num_threads=1,
                                  background=Color(0.2, 0.4, 0.6), seed=0)
        image = Renderer(settings).render(HittableList(), self.make_camera(settings.aspect_ratio))
        assert np.allclose(image, [0.2, 0.4, 0.6])

    def test_seeded_render_is_reproducible(self):
        settings = RenderSettings(width=8, height=8, samples_per_pixel=4, max_depth=4,
                                  tile_size=4, num_threads=2, background=SKY, seed=123)
        camera = self.make_camera(settings.aspect_ratio)
        world = simple_world()

        a = Renderer(settings).render(world, camera)
        b = Renderer(settings).render(world, camera)
        assert np.array_equal(a, b)

    def test_thread_count_does_not_change_result(self):
        camera = self.make_camera(1.0)
        world = simple_world()
        images = []
        for threads in (1, 3):
            settings = RenderSettings(width=8, height=8, samples_per_pixel=2, max_depth=4,
                                      tile_size=4, num_threads=threads, background=SKY, seed=7)
            images.append(Renderer(settings).render(world, camera))
        assert np.array_equal(images[0], images[1])

    def test_progress_callback(self):
        settings = RenderSettings(width=8, height=8, samples_per_pixel=1, tile_size=4,
                                  num_threads=1, seed=0)
        renderer = Renderer(settings)
        reported = []
        renderer.set_progress_callback(reported.append)
        renderer.render(HittableList(), self.make_camera(1.0))

        assert len(reported) == 4
        assert reported[-1] == 1.0


class TestOutput:
    """Test gamma correction and image writing."""

    def test_to_ldr(self):
        renderer = Renderer(RenderSettings())
        hdr = np.array([[[0.0, 0.25, 1.0], [4.0, -1.0, np.nan]]])
        ldr = renderer.to_ldr(hdr)

        assert ldr.dtype == np.uint8
        assert ldr[0, 0].tolist() == [0, 128, 255]
        assert ldr[0, 1].tolist() == [255, 0, 0]

    def test_write_ppm(self):
        image = np.array([
            [[255, 0, 0], [0, 255, 0]],
            [[0, 0, 255], [10, 20, 30]],
        ], dtype=np.uint8)
        stream = io.StringIO()
        write_ppm(image, stream)

        lines = stream.getvalue().splitlines()
        assert lines[:3] == ["P3", "2 2", "255"]
        assert lines[3:] == ["255 0 0", "0 255 0", "0 0 255", "10 20 30"]

    def test_save_ppm(self, tmp_path):
        renderer = Renderer(RenderSettings())
        path = tmp_path / "out.ppm"
        renderer.save_image(np.full((2, 3, 3), 0.25), str(path))

        text = path.read_text()
        assert text.startswith("P3\n3 2\n255\n")
        assert text.count("128 128 128") == 6

    def test_save_png(self, tmp_path):
        renderer = Renderer(RenderSettings())
        path = tmp_path / "out.png"
        renderer.save_image(np.full((2, 3, 3), 1.0), str(path))

        with Image.open(path) as img:
            assert img.size == (3, 2)
            assert img.getpixel((0, 0)) == (255, 255, 255)
