"""
Bounding Volume Hierarchy (BVH) for accelerating ray-object intersection.

BVH is a binary tree where each node caches the AABB of everything below
it. Leaves hold a single primitive; a node whose span is one primitive
stores it as both children.
"""

from __future__ import annotations
from typing import List, Optional

from .ray import Ray
from .aabb import AABB
from .shapes import Hittable, HitRecord, HittableList


class UnboundedPrimitiveError(ValueError):
    """Raised when a primitive without a bounding box is placed in a BVH."""


def _require_box(obj: Hittable, time0: float, time1: float) -> AABB:
    box = obj.bounding_box(time0, time1)
    if box is None:
        raise UnboundedPrimitiveError(
            f"{type(obj).__name__} has no bounding box and cannot be placed in a BVH"
        )
    return box


class BVHNode(Hittable):
    """A node in the Bounding Volume Hierarchy tree."""

    def __init__(
        self,
        objects: List[Hittable],
        start: int = 0,
        end: Optional[int] = None,
        time0: float = 0.0,
        time1: float = 1.0
    ):
        """Build a subtree over objects[start:end].

        The slice is reordered in place.

        Args:
            objects: List of hittable objects
            start: Start index in the objects list
            end: End index (exclusive) in the objects list
            time0: Shutter open time used for the boxes
            time1: Shutter close time used for the boxes

        Raises:
            UnboundedPrimitiveError: If any object has no bounding box
            ValueError: If the span is empty
        """
        if end is None:
            end = len(objects)

        object_span = end - start
        if object_span <= 0:
            raise ValueError("BVHNode needs at least one object")

        boxes = {id(obj): _require_box(obj, time0, time1) for obj in objects[start:end]}

        if object_span == 1:
            self.left: Hittable = objects[start]
            self.right: Hittable = self.left
            self.bbox = boxes[id(self.left)]
            return

        # Split along the widest extent of the span
        span_box = None
        for box in boxes.values():
            span_box = box if span_box is None else AABB.surrounding_box(span_box, box)
        axis = span_box.longest_axis()

        objects[start:end] = sorted(
            objects[start:end],
            key=lambda obj: boxes[id(obj)].minimum[axis]
        )

        if object_span == 2:
            self.left = objects[start]
            self.right = objects[start + 1]
        else:
            mid = start + object_span // 2
            self.left = BVHNode(objects, start, mid, time0, time1)
            self.right = BVHNode(objects, mid, end, time0, time1)

        self.bbox = AABB.surrounding_box(
            self.left.bounding_box(time0, time1),
            self.right.bounding_box(time0, time1)
        )

    def hit(self, ray: Ray, t_min: float, t_max: float) -> Optional[HitRecord]:
        """Test ray intersection with BVH node."""
        if self.bbox.hit(ray, t_min, t_max) is None:
            return None

        hit_left = self.left.hit(ray, t_min, t_max)
        if self.right is self.left:
            return hit_left

        # A left hit tightens the search in the right subtree
        hit_right = self.right.hit(ray, t_min, hit_left.t if hit_left else t_max)

        if hit_right:
            return hit_right
        return hit_left

    def bounding_box(self, time0: float = 0.0, time1: float = 1.0) -> Optional[AABB]:
        return self.bbox


class BVH(Hittable):
    """Bounding Volume Hierarchy acceleration structure.

    Provides O(log n) ray intersection instead of O(n) for n objects.
    An empty BVH never reports a hit and has no bounding box.
    """

    def __init__(self, objects: List[Hittable], time0: float = 0.0, time1: float = 1.0):
        """Build a BVH from a list of objects.

        Args:
            objects: List of hittable objects to accelerate
            time0: Shutter open time
            time1: Shutter close time
        """
        self.objects = list(objects)  # Make a copy

        if len(self.objects) == 0:
            self.root = None
        else:
            self.root = BVHNode(self.objects, 0, len(self.objects), time0, time1)

    def hit(self, ray: Ray, t_min: float, t_max: float) -> Optional[HitRecord]:
        if self.root is None:
            return None
        return self.root.hit(ray, t_min, t_max)

    def bounding_box(self, time0: float = 0.0, time1: float = 1.0) -> Optional[AABB]:
        if self.root is None:
            return None
        return self.root.bounding_box(time0, time1)

    def __len__(self) -> int:
        """Return the number of objects in the BVH."""
        return len(self.objects)


def build_bvh(scene: HittableList, time0: float = 0.0, time1: float = 1.0) -> BVH:
    """Convenience function to build a BVH from a HittableList.

    Args:
        scene: The scene as a HittableList
        time0: Shutter open time
        time1: Shutter close time

    Returns:
        A BVH acceleration structure
    """
    return BVH(list(scene.objects), time0, time1)
