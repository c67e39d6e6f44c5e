"""
Signed distance fields and the sphere tracer that renders them.

A distance field maps a point to its signed distance from a surface
(negative inside). Fields compose with `|` (union), `-` (subtraction) and
`&` (intersection). `TracedSDF` adapts any field to the Hittable contract
by marching the ray forward by the field's own distance estimate.
"""

from __future__ import annotations
from abc import ABC, abstractmethod
from typing import Optional, TYPE_CHECKING
import math

import numpy as np

from .vec3 import Vec3, Point3
from .ray import Ray
from .aabb import AABB
from .shapes import Hittable, HitRecord

if TYPE_CHECKING:
    from .materials import Material


class SDF(ABC):
    """Abstract base class for distance fields."""

    @abstractmethod
    def distance(self, point: Point3) -> float:
        """Signed distance from point to the surface (negative inside)."""

    @abstractmethod
    def bounding_box(self) -> Optional[AABB]:
        """Box enclosing the surface, or None if the field is unbounded."""

    def __or__(self, other: SDF) -> SDF:
        return SDFUnion(self, other)

    def __sub__(self, other: SDF) -> SDF:
        return SDFSubtraction(self, other)

    def __and__(self, other: SDF) -> SDF:
        return SDFIntersection(self, other)


class SDFSphere(SDF):
    def __init__(self, center: Point3, radius: float):
        self.center = center
        self.radius = radius

    def distance(self, point: Point3) -> float:
        return (point - self.center).length() - self.radius

    def bounding_box(self) -> Optional[AABB]:
        r = Vec3.splat(self.radius)
        return AABB(self.center - r, self.center + r)


class SDFBox(SDF):
    """Axis-aligned box given by its center and half extents."""

    def __init__(self, center: Point3, half_extents: Vec3):
        self.center = center
        self.half_extents = half_extents

    @classmethod
    def cube(cls, center: Point3, half_size: float) -> SDFBox:
        return cls(center, Vec3.splat(half_size))

    def distance(self, point: Point3) -> float:
        q = np.abs((point - self.center).to_array()) - self.half_extents.to_array()
        outside = float(np.linalg.norm(np.maximum(q, 0.0)))
        inside = min(float(np.max(q)), 0.0)
        return outside + inside

    def bounding_box(self) -> Optional[AABB]:
        return AABB(self.center - self.half_extents, self.center + self.half_extents)


class SDFPlane(SDF):
    """Half-space below the plane dot(p, normal) = offset."""

    def __init__(self, normal: Vec3, offset: float = 0.0):
        self.normal = normal.normalize()
        self.offset = offset

    def distance(self, point: Point3) -> float:
        return point.dot(self.normal) - self.offset

    def bounding_box(self) -> Optional[AABB]:
        return None


class SDFTorus(SDF):
    """Torus lying in the xz plane around the y axis.

    Args:
        center: Center of the ring
        major_radius: Distance from the center to the tube's center line
        minor_radius: Radius of the tube
    """

    def __init__(self, center: Point3, major_radius: float, minor_radius: float):
        self.center = center
        self.major_radius = major_radius
        self.minor_radius = minor_radius

    def distance(self, point: Point3) -> float:
        p = point - self.center
        ring = math.hypot(p.x, p.z) - self.major_radius
        return math.hypot(ring, p.y) - self.minor_radius

    def bounding_box(self) -> Optional[AABB]:
        reach = self.major_radius + self.minor_radius
        half = Vec3(reach, self.minor_radius, reach)
        return AABB(self.center - half, self.center + half)


class SDFCylinder(SDF):
    """Infinite cylinder parallel to the y axis."""

    def __init__(self, center: Point3, radius: float):
        self.center = center
        self.radius = radius

    def distance(self, point: Point3) -> float:
        return math.hypot(point.x - self.center.x, point.z - self.center.z) - self.radius

    def bounding_box(self) -> Optional[AABB]:
        return None


class SDFMandelbulb(SDF):
    """Distance estimate for the power-n Mandelbulb."""

    def __init__(
        self,
        center: Optional[Point3] = None,
        power: float = 8.0,
        iterations: int = 12,
        bailout: float = 2.0
    ):
        self.center = center if center is not None else Point3(0, 0, 0)
        self.power = power
        self.iterations = iterations
        self.bailout = bailout

    def distance(self, point: Point3) -> float:
        c = point - self.center
        cx, cy, cz = c.x, c.y, c.z
        x, y, z = cx, cy, cz
        dr = 1.0
        r = 0.0
        n = self.power

        for _ in range(self.iterations):
            r = math.sqrt(x * x + y * y + z * z)
            if r > self.bailout:
                break
            if r == 0.0:
                return -1.0

            theta = math.acos(max(-1.0, min(1.0, z / r)))
            phi = math.atan2(y, x)
            dr = math.pow(r, n - 1) * n * dr + 1.0

            zr = math.pow(r, n)
            theta *= n
            phi *= n

            x = zr * math.sin(theta) * math.cos(phi) + cx
            y = zr * math.sin(theta) * math.sin(phi) + cy
            z = zr * math.cos(theta) + cz

        if r == 0.0:
            return -1.0
        return 0.5 * math.log(r) * r / dr

    def bounding_box(self) -> Optional[AABB]:
        # Points farther than the bailout radius escape on the first iteration
        reach = Vec3.splat(self.bailout)
        return AABB(self.center - reach, self.center + reach)


class SDFMandelbox(SDF):
    """Distance estimate for the Mandelbox fractal."""

    MIN_RADIUS2 = 0.25
    FIXED_RADIUS2 = 1.0

    def __init__(self, center: Optional[Point3] = None, scale: float = 2.0, iterations: int = 15):
        self.center = center if center is not None else Point3(0, 0, 0)
        self.scale = scale
        self.iterations = iterations

    def distance(self, point: Point3) -> float:
        offset = (point - self.center).to_array()
        z = offset.copy()
        dr = 1.0

        for _ in range(self.iterations):
            # Box fold
            z = np.clip(z, -1.0, 1.0) * 2.0 - z

            # Sphere fold
            r2 = float(np.dot(z, z))
            if r2 < self.MIN_RADIUS2:
                factor = self.FIXED_RADIUS2 / self.MIN_RADIUS2
                z = z * factor
                dr *= factor
            elif r2 < self.FIXED_RADIUS2:
                factor = self.FIXED_RADIUS2 / r2
                z = z * factor
                dr *= factor

            z = z * self.scale + offset
            dr = dr * abs(self.scale) + 1.0

        return float(np.linalg.norm(z)) / abs(dr)

    def bounding_box(self) -> Optional[AABB]:
        if abs(self.scale) <= 1.0:
            return None
        half = 2.0 * (abs(self.scale) + 1.0) / (abs(self.scale) - 1.0)
        reach = Vec3.splat(half)
        return AABB(self.center - reach, self.center + reach)


class SDFUnion(SDF):
    def __init__(self, a: SDF, b: SDF):
        self.a = a
        self.b = b

    def distance(self, point: Point3) -> float:
        return min(self.a.distance(point), self.b.distance(point))

    def bounding_box(self) -> Optional[AABB]:
        box_a = self.a.bounding_box()
        box_b = self.b.bounding_box()
        if box_a is None or box_b is None:
            return None
        return AABB.surrounding_box(box_a, box_b)


class SDFSubtraction(SDF):
    """The part of `a` outside `b`."""

    def __init__(self, a: SDF, b: SDF):
        self.a = a
        self.b = b

    def distance(self, point: Point3) -> float:
        return max(self.a.distance(point), -self.b.distance(point))

    def bounding_box(self) -> Optional[AABB]:
        return self.a.bounding_box()


class SDFIntersection(SDF):
    def __init__(self, a: SDF, b: SDF):
        self.a = a
        self.b = b

    def distance(self, point: Point3) -> float:
        return max(self.a.distance(point), self.b.distance(point))

    def bounding_box(self) -> Optional[AABB]:
        box = self.a.bounding_box()
        return box if box is not None else self.b.bounding_box()


class SDFRepetition(SDF):
    """Infinite lattice of copies of a field, one per period cell.

    Each cell is centered on a multiple of the period, so a child centered
    at the origin is repeated without being cut at a cell boundary.
    """

    def __init__(self, sdf: SDF, period: Vec3):
        self.sdf = sdf
        self.period = period

    def distance(self, point: Point3) -> float:
        c = self.period.to_array()
        q = np.mod(point.to_array() + 0.5 * c, c) - 0.5 * c
        return self.sdf.distance(Vec3.from_array(q))

    def bounding_box(self) -> Optional[AABB]:
        return None


class SDFScale(SDF):
    """Uniformly scales a field about the origin."""

    def __init__(self, sdf: SDF, scale: float):
        if scale <= 0:
            raise ValueError(f"Scale must be positive, got {scale}")
        self.sdf = sdf
        self.scale = scale

    def distance(self, point: Point3) -> float:
        return self.sdf.distance(point / self.scale) * self.scale

    def bounding_box(self) -> Optional[AABB]:
        box = self.sdf.bounding_box()
        if box is None:
            return None
        return AABB(box.minimum * self.scale, box.maximum * self.scale)


# Tetrahedron vertices for the finite-difference gradient
_TETRAHEDRON = (
    Vec3(1, -1, -1),
    Vec3(-1, -1, 1),
    Vec3(-1, 1, -1),
    Vec3(1, 1, 1),
)


class TracedSDF(Hittable):
    """Renders a distance field by sphere tracing."""

    def __init__(
        self,
        sdf: SDF,
        material: Optional[Material] = None,
        max_steps: int = 512,
        epsilon: float = 1e-5,
        divergence: float = 1000.0
    ):
        """Create a sphere-traced surface.

        Args:
            sdf: The distance field to render
            material: Material at every surface point
            max_steps: Iteration cap on the march
            epsilon: Distance below which the march counts as a hit
            divergence: Distance above which the march counts as a miss
        """
        self.sdf = sdf
        self.material = material
        self.max_steps = max_steps
        self.epsilon = epsilon
        self.divergence = divergence
        self.bbox = sdf.bounding_box()

    def normal(self, point: Point3, h: float = 1e-4) -> Vec3:
        """Gradient of the field estimated on a tetrahedron around point."""
        gradient = Vec3(0, 0, 0)
        for k in _TETRAHEDRON:
            gradient = gradient + k * self.sdf.distance(point + k * h)
        return gradient.normalize()

    def hit(self, ray: Ray, t_min: float, t_max: float) -> Optional[HitRecord]:
        t = t_min
        if self.bbox is not None:
            entry = self.bbox.hit(ray, t_min, t_max)
            if entry is None:
                return None
            t = entry

        for _ in range(self.max_steps):
            if t > t_max:
                return None

            point = ray.at(t)
            distance = self.sdf.distance(point)

            if abs(distance) < self.epsilon and t > t_min:
                outward_normal = self.normal(point)
                hit_record = HitRecord(point=point, normal=outward_normal, t=t, material=self.material)
                hit_record.set_face_normal(ray, outward_normal)
                return hit_record

            if distance > self.divergence:
                return None

            # Inside the solid the march continues toward the exit surface
            t += max(abs(distance), self.epsilon)

        return None

    def bounding_box(self, time0: float = 0.0, time1: float = 1.0) -> Optional[AABB]:
        return self.bbox
