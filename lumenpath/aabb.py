"""
Axis-aligned bounding boxes.

Boxes are used to prune intersection tests in the BVH and to give the
sphere tracer a starting distance.
"""

from __future__ import annotations
from typing import List, Optional

import numpy as np

from .vec3 import Vec3, Point3
from .ray import Ray


class AABB:
    """Axis-Aligned Bounding Box for acceleration structures."""

    __slots__ = ('minimum', 'maximum')

    def __init__(self, minimum: Optional[Point3] = None, maximum: Optional[Point3] = None):
        """Create an AABB from corner points.

        Args:
            minimum: Corner with smallest x, y, z values (defaults to the origin)
            maximum: Corner with largest x, y, z values (defaults to the origin)
        """
        self.minimum = minimum if minimum is not None else Point3(0, 0, 0)
        self.maximum = maximum if maximum is not None else Point3(0, 0, 0)

    def hit(self, ray: Ray, t_min: float, t_max: float) -> Optional[float]:
        """Slab test against the box.

        Directional components of zero produce infinite (or NaN) slab
        distances; those never tighten the interval, so no special case
        is needed.

        Returns:
            The entry parameter if the ray overlaps the box inside
            [t_min, t_max], None otherwise
        """
        origin = ray.origin.to_array()
        with np.errstate(divide='ignore', invalid='ignore'):
            inv_d = 1.0 / ray.direction.to_array()
            t0 = (self.minimum.to_array() - origin) * inv_d
            t1 = (self.maximum.to_array() - origin) * inv_d

        # NaN (ray inside a face plane) fails both comparisons below
        near = np.minimum(t0, t1).tolist()
        far = np.maximum(t0, t1).tolist()

        for axis in range(3):
            if near[axis] > t_min:
                t_min = near[axis]
            if far[axis] < t_max:
                t_max = far[axis]

            if t_max <= t_min:
                return None

        return t_min

    @staticmethod
    def surrounding_box(box0: AABB, box1: AABB) -> AABB:
        """Return the AABB that contains both input boxes."""
        return AABB(box0.minimum.minimum(box1.minimum), box0.maximum.maximum(box1.maximum))

    def union(self, other: AABB) -> AABB:
        return AABB.surrounding_box(self, other)

    def contains(self, other: AABB, epsilon: float = 1e-9) -> bool:
        """True if other lies inside this box (componentwise)."""
        return bool(
            np.all(self.minimum.to_array() <= other.minimum.to_array() + epsilon)
            and np.all(self.maximum.to_array() >= other.maximum.to_array() - epsilon)
        )

    def centroid(self) -> Point3:
        return (self.minimum + self.maximum) * 0.5

    def extent(self) -> Vec3:
        return self.maximum - self.minimum

    def longest_axis(self) -> int:
        """Index of the axis along which the box is widest."""
        return int(np.argmax(self.extent().to_array()))

    def corners(self) -> List[Point3]:
        """The eight corner points of the box."""
        lo = self.minimum
        hi = self.maximum
        return [
            Point3(x, y, z)
            for x in (lo.x, hi.x)
            for y in (lo.y, hi.y)
            for z in (lo.z, hi.z)
        ]

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, AABB):
            return NotImplemented
        return self.minimum == other.minimum and self.maximum == other.maximum

    def __repr__(self) -> str:
        return f"AABB(min={self.minimum}, max={self.maximum})"
