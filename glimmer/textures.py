"""
Texture system for the ray tracer.

Implements:
- Solid color textures
- 3D checker pattern
- Perlin noise (marble) textures
- Image textures sampled from a decoded raster
"""

from __future__ import annotations
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional, Union
import logging
import math

import numpy as np
from PIL import Image

from .vec3 import Color, Point3
from .perlin import Perlin

logger = logging.getLogger(__name__)


class Texture(ABC):
    """Abstract base class for textures."""

    @abstractmethod
    def value(self, u: float, v: float, point: Point3) -> Color:
        """Get the texture color at the given UV coordinates.

        Args:
            u: Horizontal texture coordinate [0, 1]
            v: Vertical texture coordinate [0, 1]
            point: 3D point in world space (for procedural textures)

        Returns:
            Color at this location
        """
        pass


class SolidColor(Texture):
    """A solid color texture."""

    def __init__(self, color: Color):
        self.color = color

    @classmethod
    def from_rgb(cls, r: float, g: float, b: float) -> 'SolidColor':
        return cls(Color(r, g, b))

    def value(self, u: float, v: float, point: Point3) -> Color:
        return self.color


def as_texture(albedo: Union[Color, Texture]) -> Texture:
    """Wrap a plain color in a SolidColor; pass textures through."""
    if isinstance(albedo, Texture):
        return albedo
    return SolidColor(albedo)


class CheckerTexture(Texture):
    """A 3D checker pattern independent of surface parameterization.

    The sign of sin(10x)·sin(10y)·sin(10z) picks the sub-texture.
    """

    def __init__(self, even: Texture, odd: Texture):
        """Create a checker texture.

        Args:
            even: Texture where the sine product is non-negative
            odd: Texture where the sine product is negative
        """
        self.even = even
        self.odd = odd

    @classmethod
    def from_colors(cls, c1: Color, c2: Color) -> 'CheckerTexture':
        """Checker with `c1` on the odd cells and `c2` on the even cells."""
        return cls(SolidColor(c2), SolidColor(c1))

    def value(self, u: float, v: float, point: Point3) -> Color:
        sines = math.sin(10 * point.x) * math.sin(10 * point.y) * math.sin(10 * point.z)
        if sines < 0:
            return self.odd.value(u, v, point)
        return self.even.value(u, v, point)


class NoiseTexture(Texture):
    """Marble-like texture: a sine along z phase-shifted by turbulence."""

    def __init__(self, scale: float = 1.0, rng: Optional[np.random.Generator] = None):
        """Create a noise texture.

        Args:
            scale: Frequency of the stripes along z
            rng: Generator for the Perlin tables
        """
        self.scale = scale
        self.noise = Perlin(rng)

    def value(self, u: float, v: float, point: Point3) -> Color:
        t = 0.5 * (1 + math.sin(self.scale * point.z + 10 * self.noise.turbulence(point)))
        return Color(t, t, t)


class ImageTexture(Texture):
    """A texture sampled from a decoded 8-bit raster.

    The raster is supplied as raw bytes plus its layout, so any decoder can
    feed it. `from_file` decodes common formats with Pillow.
    """

    COLOR_SCALE = 1.0 / 255.0

    def __init__(
        self,
        data: bytes,
        width: int,
        height: int,
        bytes_per_pixel: int = 3,
        bytes_per_scanline: Optional[int] = None
    ):
        """Wrap a decoded raster.

        Args:
            data: Pixel bytes, first scanline at the top of the image
            width: Image width in pixels
            height: Image height in pixels
            bytes_per_pixel: Bytes per pixel (the first three are R, G, B)
            bytes_per_scanline: Row stride (defaults to width * bytes_per_pixel)
        """
        if bytes_per_scanline is None:
            bytes_per_scanline = width * bytes_per_pixel
        if width <= 0 or height <= 0:
            raise ValueError(f"Invalid image size {width}x{height}")
        if bytes_per_pixel < 3:
            raise ValueError(f"Need at least 3 bytes per pixel, got {bytes_per_pixel}")
        expected = (height - 1) * bytes_per_scanline + width * bytes_per_pixel
        if len(data) < expected:
            raise ValueError(f"Image data too short: {len(data)} bytes, need {expected}")

        self._data = np.frombuffer(bytes(data), dtype=np.uint8)
        self.width = width
        self.height = height
        self.bytes_per_pixel = bytes_per_pixel
        self.bytes_per_scanline = bytes_per_scanline

    @classmethod
    def from_file(cls, filename: str) -> 'ImageTexture':
        """Decode an image file into an ImageTexture.

        Raises:
            FileNotFoundError: If the file does not exist
            PIL.UnidentifiedImageError: If the file cannot be decoded
        """
        path = Path(filename)
        if not path.exists():
            raise FileNotFoundError(f"Texture file not found: {filename}")

        with Image.open(path) as img:
            rgb = img.convert('RGB')
            width, height = rgb.size
            data = rgb.tobytes()

        logger.info("Loaded texture %s (%dx%d)", filename, width, height)
        return cls(data, width, height, 3, 3 * width)

    def value(self, u: float, v: float, point: Point3) -> Color:
        # Clamp input texture coordinates to [0,1] x [1,0]
        u = max(0.0, min(1.0, u))
        v = 1.0 - max(0.0, min(1.0, v))  # Flip v to image row order

        i = min(int(u * self.width), self.width - 1)
        j = min(int(v * self.height), self.height - 1)

        offset = j * self.bytes_per_scanline + i * self.bytes_per_pixel
        pixel = self._data[offset:offset + 3]
        return Color.from_array(pixel * self.COLOR_SCALE)
