"""
Probability density functions over directions.

A PDF both evaluates the density of a direction and draws directions from
its own distribution. Mixing a light-directed PDF with a material's PDF is
how lights are importance-sampled without biasing the estimator: the
density used in the Monte Carlo denominator is always the mixture density.
"""

from __future__ import annotations
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING
import math

from .vec3 import Vec3, Point3
from .sampling import random_double

if TYPE_CHECKING:
    from .shapes import Hittable


class ONB:
    """Orthonormal basis (u, v, w) built around a given w axis."""

    __slots__ = ('u', 'v', 'w')

    def __init__(self, u: Vec3, v: Vec3, w: Vec3):
        self.u = u
        self.v = v
        self.w = w

    @classmethod
    def build_from_w(cls, n: Vec3) -> ONB:
        w = n.normalize()
        a = Vec3(0, 1, 0) if abs(w.x) > 0.9 else Vec3(1, 0, 0)
        v = w.cross(a).normalize()
        u = w.cross(v)
        return cls(u, v, w)

    def local(self, a: Vec3) -> Vec3:
        """Express local coordinates a in world space."""
        return self.u * a.x + self.v * a.y + self.w * a.z


class PDF(ABC):
    """Abstract base class for direction distributions."""

    @abstractmethod
    def value(self, direction: Vec3) -> float:
        """Density of the given direction (per unit solid angle)."""

    @abstractmethod
    def generate(self) -> Vec3:
        """Draw a direction from this distribution."""


class CosinePDF(PDF):
    """Cosine-weighted hemisphere around a surface normal."""

    def __init__(self, normal: Vec3):
        self.uvw = ONB.build_from_w(normal)

    def value(self, direction: Vec3) -> float:
        cosine = direction.normalize().dot(self.uvw.w)
        return max(0.0, cosine) / math.pi

    def generate(self) -> Vec3:
        return self.uvw.local(Vec3.random_cosine_direction())


class HittablePDF(PDF):
    """Directions from origin toward a piece of geometry (usually a light)."""

    def __init__(self, hittable: Hittable, origin: Point3):
        self.hittable = hittable
        self.origin = origin

    def value(self, direction: Vec3) -> float:
        return self.hittable.pdf_value(self.origin, direction)

    def generate(self) -> Vec3:
        return self.hittable.random(self.origin)


class MixturePDF(PDF):
    """Equal-weight mixture of two PDFs."""

    def __init__(self, p0: PDF, p1: PDF):
        self.p = (p0, p1)

    def value(self, direction: Vec3) -> float:
        return 0.5 * self.p[0].value(direction) + 0.5 * self.p[1].value(direction)

    def generate(self) -> Vec3:
        if random_double() < 0.5:
            return self.p[0].generate()
        return self.p[1].generate()
