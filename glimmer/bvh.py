"""
Bounding Volume Hierarchy (BVH) for accelerating ray-object intersection.

BVH is a binary tree where each node caches the AABB enclosing its two
children. Children are either further nodes or the primitives themselves;
a single-primitive node aliases the primitive on both sides.

The tree is built once, single-threaded, and is read-only afterwards so it
can be traversed from many render threads at the same time.
"""

from __future__ import annotations
import functools
import logging
from typing import Optional, Sequence

import numpy as np

from .shapes import Hittable, AABB, HittableList

logger = logging.getLogger(__name__)


class BoundingBoxError(Exception):
    """A primitive without a bounding box was placed in a BVH."""
    pass


def _box_of(obj: Hittable, time0: float, time1: float) -> AABB:
    box = obj.bounding_box(time0, time1)
    if box is None:
        raise BoundingBoxError(f"No bounding box for {obj!r} in BVHNode constructor")
    return box


def _box_compare(axis: int, time0: float, time1: float, a: Hittable, b: Hittable) -> int:
    """Order two hittables by their box minimum along an axis.

    Ties compare as greater, so the ordering never reports equality.
    """
    if _box_of(a, time0, time1).minimum[axis] < _box_of(b, time0, time1).minimum[axis]:
        return -1
    return 1


class BVHNode(Hittable):
    """An interior node of the Bounding Volume Hierarchy tree."""

    def __init__(
        self,
        objects: Sequence[Hittable],
        time0: float = 0.0,
        time1: float = 0.0,
        rng: Optional[np.random.Generator] = None
    ):
        """Build a BVH over a slice of objects.

        Args:
            objects: Hittables to partition (the sequence is not modified)
            time0: Start of the interval the boxes must cover
            time1: End of the interval the boxes must cover
            rng: Generator used to pick the split axis at each node

        Raises:
            BoundingBoxError: If any object is unbounded
            ValueError: If objects is empty
        """
        if not objects:
            raise ValueError("Cannot build a BVHNode from an empty object list")
        if rng is None:
            rng = np.random.default_rng()

        axis = int(rng.integers(0, 3))
        compare = functools.partial(_box_compare, axis, time0, time1)

        span = len(objects)
        if span == 1:
            self.left = self.right = objects[0]
        elif span == 2:
            if compare(objects[0], objects[1]) < 0:
                self.left, self.right = objects[0], objects[1]
            else:
                self.left, self.right = objects[1], objects[0]
        else:
            ordered = sorted(objects, key=functools.cmp_to_key(compare))
            mid = span // 2
            self.left = BVHNode(ordered[:mid], time0, time1, rng)
            self.right = BVHNode(ordered[mid:], time0, time1, rng)

        self.bbox = AABB.surrounding_box(
            _box_of(self.left, time0, time1),
            _box_of(self.right, time0, time1)
        )

    def hit(self, ray, t_min, t_max, rng=None):
        """Test ray intersection with BVH node."""
        if not self.bbox.hit(ray, t_min, t_max):
            return None

        hit_left = self.left.hit(ray, t_min, t_max, rng)

        # Right child only has to beat the left hit
        closest_t = hit_left.t if hit_left is not None else t_max
        hit_right = self.right.hit(ray, t_min, closest_t, rng)

        return hit_right if hit_right is not None else hit_left

    def bounding_box(self, time0, time1):
        return self.bbox

    def depth(self) -> int:
        """Return the number of node levels below and including this one."""
        left = self.left.depth() if isinstance(self.left, BVHNode) else 0
        right = self.right.depth() if isinstance(self.right, BVHNode) else 0
        return 1 + max(left, right)


def build_bvh(
    scene: HittableList,
    time0: float = 0.0,
    time1: float = 1.0,
    rng: Optional[np.random.Generator] = None
) -> BVHNode:
    """Convenience function to build a BVH from a HittableList.

    Args:
        scene: The scene as a HittableList
        time0: Shutter open time the boxes must cover
        time1: Shutter close time the boxes must cover
        rng: Generator used for split-axis selection

    Returns:
        The root BVHNode
    """
    root = BVHNode(list(scene.objects), time0, time1, rng)
    logger.debug("Built BVH over %d objects, depth %d", len(scene), root.depth())
    return root
