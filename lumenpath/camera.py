"""
Thin-lens camera that turns image-plane coordinates into primary rays.

The image plane is placed at the focus distance, so every lens sample
for a given (s, t) converges on the same point of that plane. A non-zero
aperture blurs everything off the plane; a non-empty shutter interval
stamps each ray with a random time for motion blur.
"""

from __future__ import annotations
from typing import Optional
import math

from .vec3 import Vec3, Point3
from .ray import Ray
from .sampling import random_double


class Camera:
    """Look-at camera with a vertical field of view and a thin lens."""

    def __init__(
        self,
        look_from: Point3,
        look_at: Point3,
        vup: Optional[Vec3] = None,
        vfov: float = 90.0,
        aspect_ratio: float = 16.0 / 9.0,
        aperture: float = 0.0,
        focus_dist: Optional[float] = None,
        time0: float = 0.0,
        time1: float = 0.0
    ):
        """Place the camera.

        Args:
            look_from: Eye position
            look_at: Target the view is centered on
            vup: Up hint used to level the view, (0, 1, 0) when omitted
            vfov: Vertical field of view in degrees
            aspect_ratio: Image width divided by image height
            aperture: Lens diameter; 0 gives a pinhole
            focus_dist: Distance to the plane in focus, the eye-to-target
                distance when omitted
            time0: Shutter open time
            time1: Shutter close time
        """
        if vup is None:
            vup = Vec3(0, 1, 0)
        if focus_dist is None:
            focus_dist = (look_from - look_at).length()

        half_height = math.tan(math.radians(vfov) / 2)
        half_width = aspect_ratio * half_height

        # Right-handed frame with w toward the viewer
        self.w = (look_from - look_at).normalize()
        self.u = vup.cross(self.w).normalize()
        self.v = self.w.cross(self.u)

        self.origin = look_from
        self.horizontal = self.u * (2.0 * half_width * focus_dist)
        self.vertical = self.v * (2.0 * half_height * focus_dist)
        plane_center = look_from - self.w * focus_dist
        self.lower_left_corner = plane_center - self.horizontal * 0.5 - self.vertical * 0.5

        self.aspect_ratio = aspect_ratio
        self.lens_radius = aperture / 2
        self.time0 = time0
        self.time1 = time1

    def _lens_offset(self) -> Vec3:
        if self.lens_radius <= 0:
            return Vec3(0, 0, 0)
        disk = Vec3.random_in_unit_disk() * self.lens_radius
        return self.u * disk.x + self.v * disk.y

    def _shutter_time(self) -> float:
        if self.time1 > self.time0:
            return random_double(self.time0, self.time1)
        return self.time0

    def get_ray(self, s: float, t: float) -> Ray:
        """Primary ray through image-plane coordinates (s, t).

        (0, 0) is the lower-left corner and (1, 1) the upper-right. The
        direction is left unnormalized; it ends on the focus plane.
        """
        target = self.lower_left_corner + self.horizontal * s + self.vertical * t
        eye = self.origin + self._lens_offset()
        return Ray(eye, target - eye, self._shutter_time())

    def __repr__(self) -> str:
        return f"Camera(origin={self.origin}, forward={-self.w}, lens_radius={self.lens_radius})"
