"""
Renderer module - the heart of the ray tracer.

Implements:
- Recursive Monte-Carlo path tracing with a bounce limit
- Multi-threaded tile-based rendering with one random generator per tile
- Gamma-corrected 8-bit output as plain-text PPM or any Pillow format
"""

from __future__ import annotations
import logging
import math
import os
import threading
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Optional, Callable, TextIO, Tuple

import numpy as np

from .vec3 import Color
from .ray import Ray
from .camera import Camera
from .shapes import Hittable

logger = logging.getLogger(__name__)

# Lower bound of the hit window; rejects self-intersections at a ray's origin
SHADOW_ACNE_EPSILON = 0.001

BLACK = Color(0, 0, 0)


def ray_color(
    ray: Ray,
    background: Color,
    world: Hittable,
    depth: int,
    rng: np.random.Generator
) -> Color:
    """Estimate the radiance arriving along a ray.

    Args:
        ray: The ray to trace
        background: Radiance returned for rays that escape the scene
        world: The scene to trace against
        depth: Remaining bounce budget; at zero the path contributes black
        rng: Generator for material and medium sampling

    Returns:
        The computed color for this ray
    """
    if depth <= 0:
        return BLACK

    rec = world.hit(ray, SHADOW_ACNE_EPSILON, math.inf, rng)
    if rec is None:
        return background

    emitted = rec.material.emitted(rec.u, rec.v, rec.point)

    scatter = rec.material.scatter(ray, rec, rng)
    if scatter is None:
        return emitted

    return emitted + scatter.attenuation * ray_color(
        scatter.scattered_ray, background, world, depth - 1, rng
    )


@dataclass
class RenderSettings:
    """Configuration for the renderer."""
    width: int = 400
    height: int = 225
    samples_per_pixel: int = 100
    max_depth: int = 50
    tile_size: int = 32
    num_threads: int = 0  # 0 = auto-detect
    background: Color = None
    gamma: float = 2.0
    seed: Optional[int] = None

    def __post_init__(self):
        if self.width <= 0 or self.height <= 0:
            raise ValueError(f"Image size must be positive, got {self.width}x{self.height}")
        if self.samples_per_pixel <= 0:
            raise ValueError(f"samples_per_pixel must be positive, got {self.samples_per_pixel}")
        if self.background is None:
            self.background = Color(0.0, 0.0, 0.0)
        if self.num_threads == 0:
            self.num_threads = os.cpu_count() or 4

    @property
    def aspect_ratio(self) -> float:
        return self.width / self.height


class Renderer:
    """Path tracing renderer with multi-threading support."""

    def __init__(self, settings: RenderSettings = None):
        """Create a renderer with the given settings.

        Args:
            settings: Render configuration (uses defaults if None)
        """
        self.settings = settings if settings else RenderSettings()
        self._progress_callback: Optional[Callable[[float], None]] = None

    def set_progress_callback(self, callback: Callable[[float], None]) -> None:
        """Set a callback function for progress updates.

        Args:
            callback: Function that takes progress as float (0.0 to 1.0)
        """
        self._progress_callback = callback

    def render(self, world: Hittable, camera: Camera) -> np.ndarray:
        """Render the scene and return the image as a numpy array.

        The world and camera must be fully built; they are only read while
        tiles render concurrently.

        Args:
            world: The scene to render (any Hittable, usually a BVH root)
            camera: The camera to render from

        Returns:
            HDR image (per-pixel sample mean) of shape (height, width, 3),
            row 0 at the top
        """
        width = self.settings.width
        height = self.settings.height
        samples = self.settings.samples_per_pixel
        max_depth = self.settings.max_depth
        background = self.settings.background

        # Denominators for the pixel-to-viewport mapping; a single row or column maps to 0
        u_scale = max(width - 1, 1)
        v_scale = max(height - 1, 1)

        image = np.zeros((height, width, 3), dtype=np.float64)

        tiles = self._generate_tiles(width, height)
        total_tiles = len(tiles)
        # Independent, reproducible stream per tile
        seeds = np.random.SeedSequence(self.settings.seed).spawn(total_tiles)

        progress_lock = threading.Lock()
        completed_tiles = [0]

        logger.info(
            "Rendering %dx%d, %d spp, depth %d, %d tiles on %d threads",
            width, height, samples, max_depth, total_tiles, self.settings.num_threads
        )
        start = time.perf_counter()

        def render_tile(job: Tuple[Tuple[int, int, int, int], np.random.SeedSequence]):
            """Render a single tile."""
            tile, seed = job
            rng = np.random.default_rng(seed)
            x0, y0, x1, y1 = tile
            tile_image = np.zeros((y1 - y0, x1 - x0, 3), dtype=np.float64)

            for j in range(y0, y1):
                for i in range(x0, x1):
                    pixel_color = BLACK

                    for _ in range(samples):
                        s = (i + rng.random()) / u_scale
                        t = (height - 1 - j + rng.random()) / v_scale

                        ray = camera.get_ray(s, t, rng)
                        pixel_color = pixel_color + ray_color(ray, background, world, max_depth, rng)

                    tile_image[j - y0, i - x0] = pixel_color._data / samples

            with progress_lock:
                completed_tiles[0] += 1
                progress = completed_tiles[0] / total_tiles
            if self._progress_callback:
                self._progress_callback(progress)

            return tile, tile_image

        jobs = list(zip(tiles, seeds))
        if self.settings.num_threads > 1:
            with ThreadPoolExecutor(max_workers=self.settings.num_threads) as executor:
                results = list(executor.map(render_tile, jobs))
        else:
            results = [render_tile(job) for job in jobs]

        for tile, tile_image in results:
            x0, y0, x1, y1 = tile
            image[y0:y1, x0:x1] = tile_image

        logger.info("Render finished in %.2fs", time.perf_counter() - start)
        return image

    def _generate_tiles(self, width: int, height: int) -> list[Tuple[int, int, int, int]]:
        """Generate tiles for parallel rendering.

        Args:
            width: Image width
            height: Image height

        Returns:
            List of tiles as (x0, y0, x1, y1) tuples
        """
        tile_size = self.settings.tile_size
        tiles = []

        for y in range(0, height, tile_size):
            for x in range(0, width, tile_size):
                x1 = min(x + tile_size, width)
                y1 = min(y + tile_size, height)
                tiles.append((x, y, x1, y1))

        return tiles

    def to_ldr(self, hdr_image: np.ndarray) -> np.ndarray:
        """Convert an averaged HDR image to 8-bit with gamma correction.

        Each channel is raised to 1/gamma, clamped to [0, 0.999] and scaled
        by 256 before truncation.

        Args:
            hdr_image: HDR image array (float64)

        Returns:
            LDR image as uint8 array
        """
        corrected = np.power(np.clip(hdr_image, 0, None), 1.0 / self.settings.gamma)
        # NaN from a degenerate sample maps to black
        corrected = np.nan_to_num(corrected, nan=0.0)
        return (256 * np.clip(corrected, 0.0, 0.999)).astype(np.uint8)

    def save_image(self, image: np.ndarray, filename: str) -> None:
        """Save image to file.

        Args:
            image: Image array (HDR or LDR)
            filename: Output filename; `.ppm` writes plain-text PPM,
                anything else is handed to Pillow
        """
        if image.dtype == np.float64 or image.dtype == np.float32:
            image = self.to_ldr(image)

        if filename.lower().endswith('.ppm'):
            with open(filename, 'w') as f:
                write_ppm(image, f)
        else:
            from PIL import Image as PILImage

            PILImage.fromarray(image).save(filename)

        logger.info("Saved %s", filename)


def write_ppm(image: np.ndarray, stream: TextIO) -> None:
    """Write an 8-bit image as plain-text (P3) PPM.

    Args:
        image: uint8 array of shape (height, width, 3), row 0 at the top
        stream: Text stream to write to
    """
    height, width = image.shape[:2]
    stream.write(f"P3\n{width} {height}\n255\n")
    for row in image:
        for r, g, b in row:
            stream.write(f"{r} {g} {b}\n")
