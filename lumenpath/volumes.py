"""
Participating media.

A constant-density medium fills the interior of a boundary shape. Rays
passing through it scatter at an exponentially distributed free-flight
distance, or pass through untouched.
"""

from __future__ import annotations
from typing import Optional, Union
import math

from .vec3 import Vec3, Color
from .ray import Ray
from .aabb import AABB
from .shapes import Hittable, HitRecord
from .textures import Texture
from .materials import Isotropic
from .sampling import random_double


class ConstantMedium(Hittable):
    """A constant density participating medium.

    Can be used for fog, smoke, clouds, etc.
    The medium is defined by a convex boundary shape and a density.
    """

    def __init__(self, boundary: Hittable, density: float, albedo: Union[Color, Texture]):
        """Create a constant density medium.

        Args:
            boundary: The convex shape that defines the medium's boundary
            density: The density of the medium (higher = more opaque)
            albedo: The color of the medium, a Color or a Texture

        Raises:
            ValueError: If density is not positive
        """
        if density <= 0:
            raise ValueError(f"Medium density must be positive, got {density}")

        self.boundary = boundary
        self.density = density
        self.neg_inv_density = -1.0 / density
        self.phase_material = Isotropic(albedo)

    def hit(self, ray: Ray, t_min: float, t_max: float) -> Optional[HitRecord]:
        """Sample a scattering event inside the boundary."""
        # Entry and exit along the whole line, then clip to the query interval
        hit1 = self.boundary.hit(ray, -math.inf, math.inf)
        if hit1 is None:
            return None

        hit2 = self.boundary.hit(ray, hit1.t + 0.0001, math.inf)
        if hit2 is None:
            return None

        t_enter = max(hit1.t, t_min, 0.0)
        t_exit = min(hit2.t, t_max)

        if t_enter >= t_exit:
            return None

        ray_length = ray.direction.length()
        distance_inside_boundary = (t_exit - t_enter) * ray_length
        # 1 - u lies in (0, 1], so the log is finite
        hit_distance = self.neg_inv_density * math.log(1.0 - random_double())

        if hit_distance > distance_inside_boundary:
            return None

        t = t_enter + hit_distance / ray_length
        if t <= t_min:
            return None

        return HitRecord(
            point=ray.at(t),
            normal=Vec3(1, 0, 0),  # Arbitrary, not used by the phase function
            t=t,
            front_face=True,
            material=self.phase_material
        )

    def bounding_box(self, time0: float = 0.0, time1: float = 1.0) -> Optional[AABB]:
        return self.boundary.bounding_box(time0, time1)
