"""
Gradient (Perlin) noise.

The noise state is a table of 256 random unit gradient vectors and three
independent permutations of 0..255, generated once. Evaluation is a pure
function of that state and the query point, so a Perlin instance can be
shared by any number of threads.
"""

from __future__ import annotations
import math
from typing import Optional

import numpy as np

from .vec3 import Point3

POINT_COUNT = 256

_CORNERS = np.arange(2)


class Perlin:
    """Perlin gradient noise with fractal turbulence."""

    def __init__(self, rng: Optional[np.random.Generator] = None):
        """Generate the gradient and permutation tables.

        Args:
            rng: Generator for the tables (a fresh one is created if None)
        """
        if rng is None:
            rng = np.random.default_rng()

        vectors = rng.uniform(-1.0, 1.0, (POINT_COUNT, 3))
        lengths = np.linalg.norm(vectors, axis=1, keepdims=True)
        self._ranvec = vectors / np.maximum(lengths, 1e-12)
        self._ranvec.setflags(write=False)

        self._perm_x = self._generate_perm(rng)
        self._perm_y = self._generate_perm(rng)
        self._perm_z = self._generate_perm(rng)

    @staticmethod
    def _generate_perm(rng: np.random.Generator) -> np.ndarray:
        """Fisher-Yates shuffle of 0..POINT_COUNT-1."""
        p = np.arange(POINT_COUNT, dtype=np.int64)
        for i in range(POINT_COUNT - 1, 0, -1):
            target = int(rng.integers(0, i + 1))
            p[i], p[target] = p[target], p[i]
        p.setflags(write=False)
        return p

    def noise(self, point: Point3) -> float:
        """Compute gradient noise at a point, roughly in [-1, 1]."""
        fx, fy, fz = math.floor(point.x), math.floor(point.y), math.floor(point.z)
        u, v, w = point.x - fx, point.y - fy, point.z - fz
        i, j, k = int(fx), int(fy), int(fz)

        # Gradients at the 8 lattice corners, indexed [di, dj, dk]
        idx = (
            self._perm_x[(i + _CORNERS) & 255][:, None, None]
            ^ self._perm_y[(j + _CORNERS) & 255][None, :, None]
            ^ self._perm_z[(k + _CORNERS) & 255][None, None, :]
        )
        gradients = self._ranvec[idx]

        return self._interp(gradients, u, v, w)

    @staticmethod
    def _interp(gradients: np.ndarray, u: float, v: float, w: float) -> float:
        """Trilinear interpolation with Hermite smoothing."""
        uu = u * u * (3 - 2 * u)
        vv = v * v * (3 - 2 * v)
        ww = w * w * (3 - 2 * w)

        wx = _CORNERS * uu + (1 - _CORNERS) * (1 - uu)
        wy = _CORNERS * vv + (1 - _CORNERS) * (1 - vv)
        wz = _CORNERS * ww + (1 - _CORNERS) * (1 - ww)
        weights = wx[:, None, None] * wy[None, :, None] * wz[None, None, :]

        # Offset from each corner to the point, using unsmoothed fractions
        offsets = np.stack(np.meshgrid(u - _CORNERS, v - _CORNERS, w - _CORNERS, indexing='ij'), axis=-1)
        dots = np.einsum('ijkc,ijkc->ijk', gradients, offsets)

        return float(np.sum(weights * dots))

    def turbulence(self, point: Point3, depth: int = 7) -> float:
        """Multi-octave noise: doubled frequency and halved weight per octave."""
        accum = 0.0
        weight = 1.0
        p = point

        for _ in range(depth):
            accum += weight * self.noise(p)
            weight *= 0.5
            p = p * 2

        return abs(accum)
