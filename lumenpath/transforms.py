"""
Scene-graph decorators.

Each decorator wraps exactly one child and re-expresses the Hittable
contract in the parent's frame: the incoming ray is moved into the child's
frame, and the resulting hit is moved back.
"""

from __future__ import annotations
from dataclasses import replace
from typing import Optional
import math

from .vec3 import Vec3, Point3
from .ray import Ray
from .aabb import AABB
from .shapes import Hittable, HitRecord


class Translate(Hittable):
    """Moves a child hittable by a fixed offset."""

    def __init__(self, hittable: Hittable, offset: Vec3):
        self.hittable = hittable
        self.offset = offset

    def hit(self, ray: Ray, t_min: float, t_max: float) -> Optional[HitRecord]:
        moved = Ray(ray.origin - self.offset, ray.direction, ray.time)

        hit_record = self.hittable.hit(moved, t_min, t_max)
        if hit_record is None:
            return None

        # Direction is unchanged, so the normal and front_face carry over
        hit_record.point = hit_record.point + self.offset
        return hit_record

    def bounding_box(self, time0: float = 0.0, time1: float = 1.0) -> Optional[AABB]:
        box = self.hittable.bounding_box(time0, time1)
        if box is None:
            return None
        return AABB(box.minimum + self.offset, box.maximum + self.offset)

    def pdf_value(self, origin: Point3, direction: Vec3) -> float:
        return self.hittable.pdf_value(origin - self.offset, direction)

    def random(self, origin: Point3) -> Vec3:
        return self.hittable.random(origin - self.offset)


# The (i, j) plane rotated about each axis, ordered so that a positive
# angle is a right-handed rotation.
_ROTATION_PLANES = {0: (1, 2), 1: (2, 0), 2: (0, 1)}


class Rotate(Hittable):
    """Rotates a child hittable about a coordinate axis through the origin."""

    def __init__(self, hittable: Hittable, angle: float, axis: int = 1):
        """Create a rotation.

        Args:
            hittable: The child to rotate
            angle: Rotation angle in degrees
            axis: 0, 1 or 2 for the x, y or z axis
        """
        if axis not in _ROTATION_PLANES:
            raise ValueError(f"Rotation axis must be 0, 1 or 2, got {axis}")

        self.hittable = hittable
        self.angle = angle
        self.axis = axis
        self._i, self._j = _ROTATION_PLANES[axis]

        radians = math.radians(angle)
        self.sin_theta = math.sin(radians)
        self.cos_theta = math.cos(radians)

        self.bbox = self._rotated_box(hittable.bounding_box(0.0, 1.0))

    def _rotate(self, p: Vec3, sin_theta: float) -> Vec3:
        coords = list(p)
        a = coords[self._i]
        b = coords[self._j]
        coords[self._i] = self.cos_theta * a - sin_theta * b
        coords[self._j] = sin_theta * a + self.cos_theta * b
        return Vec3(*coords)

    def to_world(self, p: Vec3) -> Vec3:
        return self._rotate(p, self.sin_theta)

    def to_object(self, p: Vec3) -> Vec3:
        return self._rotate(p, -self.sin_theta)

    def _rotated_box(self, box: Optional[AABB]) -> Optional[AABB]:
        """Axis-aligned extent of the child's box corners after rotation."""
        if box is None:
            return None

        corners = [self.to_world(corner) for corner in box.corners()]
        low = corners[0]
        high = corners[0]
        for corner in corners[1:]:
            low = low.minimum(corner)
            high = high.maximum(corner)
        return AABB(low, high)

    def hit(self, ray: Ray, t_min: float, t_max: float) -> Optional[HitRecord]:
        rotated = Ray(self.to_object(ray.origin), self.to_object(ray.direction), ray.time)

        hit_record = self.hittable.hit(rotated, t_min, t_max)
        if hit_record is None:
            return None

        return replace(
            hit_record,
            point=self.to_world(hit_record.point),
            normal=self.to_world(hit_record.normal)
        )

    def bounding_box(self, time0: float = 0.0, time1: float = 1.0) -> Optional[AABB]:
        return self.bbox

    def pdf_value(self, origin: Point3, direction: Vec3) -> float:
        return self.hittable.pdf_value(self.to_object(origin), self.to_object(direction))

    def random(self, origin: Point3) -> Vec3:
        return self.to_world(self.hittable.random(self.to_object(origin)))


class RotateX(Rotate):
    def __init__(self, hittable: Hittable, angle: float):
        super().__init__(hittable, angle, axis=0)


class RotateY(Rotate):
    def __init__(self, hittable: Hittable, angle: float):
        super().__init__(hittable, angle, axis=1)


class RotateZ(Rotate):
    def __init__(self, hittable: Hittable, angle: float):
        super().__init__(hittable, angle, axis=2)


class FlipFace(Hittable):
    """Inverts the front-face flag of a child, e.g. to light a room from a ceiling panel."""

    def __init__(self, hittable: Hittable):
        self.hittable = hittable

    def hit(self, ray: Ray, t_min: float, t_max: float) -> Optional[HitRecord]:
        hit_record = self.hittable.hit(ray, t_min, t_max)
        if hit_record is None:
            return None

        hit_record.front_face = not hit_record.front_face
        return hit_record

    def bounding_box(self, time0: float = 0.0, time1: float = 1.0) -> Optional[AABB]:
        return self.hittable.bounding_box(time0, time1)

    def pdf_value(self, origin: Point3, direction: Vec3) -> float:
        return self.hittable.pdf_value(origin, direction)

    def random(self, origin: Point3) -> Vec3:
        return self.hittable.random(origin)
